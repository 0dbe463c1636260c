"""
File persistence collaborator.

The nudge session saves the document after every stage/commit/cancel so
the renderer's file watcher reloads the shader. An optional external
formatter may rewrite the content on save; the session then re-applies
the formatted text to the buffer.
"""

from __future__ import annotations

import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from shadernudge import log

FORMATTER_TIMEOUT_S = 10.0


@dataclass
class SaveResult:
    success: bool
    formatted_content: Optional[str] = None
    error: Optional[str] = None


class FilePersistence(ABC):
    @abstractmethod
    def save(self, path: str, content: str) -> SaveResult:
        """Write ``content`` to ``path``. Must not raise on I/O errors."""
        ...


class DiskPersistence(FilePersistence):
    """
    Saves UTF-8 text to disk.

    Args:
        formatter: command line of a formatter that reads source on stdin
            and writes formatted source to stdout, e.g. ``["clang-format"]``.
    """

    def __init__(self, formatter: Optional[Sequence[str]] = None):
        self._formatter = list(formatter) if formatter else None

    def save(self, path: str, content: str) -> SaveResult:
        formatted = self._format(path, content) if self._formatter else None
        to_write = formatted if formatted is not None else content
        try:
            Path(path).write_text(to_write, encoding="utf-8")
        except OSError as e:
            log.error(f"[DiskPersistence] Failed to save {path}: {e}")
            return SaveResult(success=False, error=str(e))
        return SaveResult(success=True, formatted_content=formatted)

    def _format(self, path: str, content: str) -> str | None:
        """Run the formatter; None means keep the content as is."""
        cmd = self._formatter + [f"--assume-filename={path}"] if self._is_clang_format() else self._formatter
        try:
            proc = subprocess.run(
                cmd,
                input=content,
                capture_output=True,
                text=True,
                timeout=FORMATTER_TIMEOUT_S,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            log.warn(f"[DiskPersistence] Formatter {self._formatter[0]} failed: {e}")
            return None
        if proc.returncode != 0:
            log.warn(f"[DiskPersistence] Formatter exited with {proc.returncode}: {proc.stderr.strip()}")
            return None
        return proc.stdout

    def _is_clang_format(self) -> bool:
        return Path(self._formatter[0]).name.startswith("clang-format")
