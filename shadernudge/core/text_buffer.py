"""
Text buffer host interface.

The nudge core edits documents only through TextBuffer. The editor wires a
Qt-backed implementation (shadernudge.editor.qt_text_buffer); StringBuffer
keeps the document in memory and backs headless use and tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from shadernudge.core.errors import BufferRangeError
from shadernudge.core.text_range import Position, TextRange, column_for_offset, offset_for_column


class TextBuffer(ABC):
    """
    Document the nudge session operates on.

    Every replace() must be one atomic edit (a single undo step in
    hosts that keep undo history).
    """

    @abstractmethod
    def line_count(self) -> int:
        ...

    @abstractmethod
    def get_line(self, line_number: int) -> str:
        """Text of a 1-based line without its line terminator."""
        ...

    @abstractmethod
    def get_text(self) -> str:
        ...

    @abstractmethod
    def set_text(self, text: str) -> None:
        ...

    @abstractmethod
    def replace(self, text_range: TextRange, text: str) -> None:
        """
        Replace ``text_range`` with ``text``.

        Raises:
            BufferRangeError: the range does not exist in the document.
        """
        ...

    @abstractmethod
    def get_cursor(self) -> Position:
        ...

    @abstractmethod
    def set_cursor(self, position: Position) -> None:
        ...

    @abstractmethod
    def get_selection(self) -> Optional[TextRange]:
        """Current selection, or None when nothing is selected."""
        ...

    def get_text_in_range(self, text_range: TextRange) -> str:
        """
        Text covered by ``text_range``.

        Raises:
            BufferRangeError: the range does not exist in the document.
        """
        lines = split_lines(self.get_text())
        start, end = _range_offsets(lines, text_range)
        return "\n".join(lines)[start:end]


def split_lines(text: str) -> List[str]:
    return text.split("\n")


def _range_offsets(lines: List[str], text_range: TextRange) -> tuple[int, int]:
    """Absolute str offsets of a range inside the joined lines."""
    start = _absolute_offset(lines, text_range.start_line, text_range.start_column)
    end = _absolute_offset(lines, text_range.end_line, text_range.end_column)
    if end < start:
        raise BufferRangeError(f"Range end precedes start: {text_range}")
    return start, end


def _absolute_offset(lines: List[str], line_number: int, column: int) -> int:
    if line_number < 1 or line_number > len(lines):
        raise BufferRangeError(f"Line {line_number} does not exist ({len(lines)} lines)")
    line = lines[line_number - 1]
    try:
        in_line = offset_for_column(line, column)
    except ValueError as e:
        raise BufferRangeError(f"Line {line_number}: {e}") from e
    # +1 per preceding line for the '\n' joiner
    return sum(len(l) + 1 for l in lines[: line_number - 1]) + in_line


def position_at_offset(text: str, offset: int) -> Position:
    """Position of a zero-based str offset inside ``text``."""
    head = text[:offset]
    line_start = head.rfind("\n") + 1
    return Position(head.count("\n") + 1, column_for_offset(text[line_start:], offset - line_start))


def position_after_reformat(old_text: str, new_text: str, position: Position) -> Position:
    """
    Carry a position across a whitespace-only rewrite of the document.

    Formatters such as clang-format only move whitespace around, so the
    position is anchored to the count of non-whitespace characters before
    it and found again in ``new_text``.

    Raises:
        BufferRangeError: ``position`` does not exist in ``old_text``.
    """
    offset = _absolute_offset(split_lines(old_text), position.line, position.column)
    remaining = sum(1 for ch in old_text[:offset] if not ch.isspace())
    new_offset = 0
    while remaining > 0 and new_offset < len(new_text):
        if not new_text[new_offset].isspace():
            remaining -= 1
        new_offset += 1
    return position_at_offset(new_text, new_offset)


class StringBuffer(TextBuffer):
    """In-memory TextBuffer."""

    def __init__(self, text: str = "") -> None:
        self._text = text
        self._cursor = Position(1, 1)
        self._selection: Optional[TextRange] = None
        self.edit_count = 0

    def line_count(self) -> int:
        return len(split_lines(self._text))

    def get_line(self, line_number: int) -> str:
        lines = split_lines(self._text)
        if line_number < 1 or line_number > len(lines):
            raise BufferRangeError(f"Line {line_number} does not exist ({len(lines)} lines)")
        return lines[line_number - 1]

    def get_text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        self._text = text
        self._selection = None
        self.edit_count += 1

    def replace(self, text_range: TextRange, text: str) -> None:
        start, end = _range_offsets(split_lines(self._text), text_range)
        self._text = self._text[:start] + text + self._text[end:]
        self._selection = None
        self.edit_count += 1

    def get_cursor(self) -> Position:
        return self._cursor

    def set_cursor(self, position: Position) -> None:
        self._cursor = position

    def get_selection(self) -> Optional[TextRange]:
        return self._selection

    def select(self, text_range: Optional[TextRange]) -> None:
        """Set selection; the cursor moves to the selection end."""
        self._selection = text_range
        if text_range is not None:
            self._cursor = text_range.end
