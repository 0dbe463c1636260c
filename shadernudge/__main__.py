"""Run the editor with ``python -m shadernudge [FILE]``."""

import sys

from .editor.run_editor import run_editor


def main():
    sys.exit(run_editor())


if __name__ == "__main__":
    main()
