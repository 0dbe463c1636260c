import argparse
import logging
import shlex
import sys

from PyQt6.QtGui import QColor, QPalette
from PyQt6.QtWidgets import QApplication

from shadernudge import log
from shadernudge.core.errors import ChannelStartFailure
from shadernudge.core.persistence import DiskPersistence
from shadernudge.editor.editor_window import EditorWindow
from shadernudge.editor.settings import EditorSettings
from shadernudge.live.channel import LiveValueChannel
from shadernudge.live.channel_thread import ChannelThread
from shadernudge.live.renderer_link import RendererLink


# Code-editor colours: the document area stays darker than the chrome
# around it, popups reuse the window colours.
DARK_COLORS = {
    QPalette.ColorRole.Window: QColor(37, 37, 38),
    QPalette.ColorRole.WindowText: QColor(204, 204, 204),
    QPalette.ColorRole.Base: QColor(30, 30, 30),
    QPalette.ColorRole.Text: QColor(212, 212, 212),
    QPalette.ColorRole.Button: QColor(51, 51, 55),
    QPalette.ColorRole.ButtonText: QColor(204, 204, 204),
    QPalette.ColorRole.Highlight: QColor(38, 79, 120),
    QPalette.ColorRole.HighlightedText: QColor(255, 255, 255),
    QPalette.ColorRole.ToolTipBase: QColor(37, 37, 38),
    QPalette.ColorRole.ToolTipText: QColor(204, 204, 204),
}


def apply_dark_palette(app: QApplication, colors=None):
    app.setStyle("Fusion")
    palette = QPalette()
    for role, color in (colors or DARK_COLORS).items():
        palette.setColor(role, color)
    palette.setColor(QPalette.ColorGroup.Disabled, QPalette.ColorRole.Text, QColor(110, 110, 110))
    app.setPalette(palette)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shadernudge",
        description="GLSL editor that streams nudged literals to a live renderer.",
    )
    parser.add_argument("file", nargs="?", help="shader file to open")
    parser.add_argument("--host", help="channel host (default from settings, localhost)")
    parser.add_argument("--port", type=int, help="channel port (default from settings, 8765)")
    parser.add_argument(
        "--formatter",
        help="formatter command run on save, e.g. 'clang-format'",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def run_editor(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)
    log.configure(getattr(logging, args.log_level))

    app = QApplication(sys.argv[:1])
    apply_dark_palette(app)

    settings = EditorSettings.instance()
    config = settings.nudge_config()
    if args.host:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.formatter:
        config.formatter = shlex.split(args.formatter)

    channel = LiveValueChannel(config.host, config.port, config.start_timeout, config.stop_timeout)
    link = RendererLink(ChannelThread(channel))
    persistence = DiskPersistence(config.formatter)

    win = EditorWindow(link, persistence, config, settings)

    try:
        link.start()
    except ChannelStartFailure as e:
        # Editing still works without a renderer
        win.statusBar().showMessage(f"Live channel unavailable: {e}")

    path = args.file or settings.get_last_file_path()
    if path:
        win.open_file(path)

    win.show()
    try:
        return app.exec()
    finally:
        link.stop()


if __name__ == "__main__":
    sys.exit(run_editor())
