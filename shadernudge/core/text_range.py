"""
Text coordinates shared by the scanner, the buffers and the session.

Lines and columns are 1-based. Columns count UTF-16 code units, which is
how Qt and most embeddable code editors report cursor positions, so a
character outside the Basic Multilingual Plane occupies two columns.
A range is half-open: ``end_column`` points just past the last character.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


def utf16_length(text: str) -> int:
    """Length of text in UTF-16 code units."""
    return len(text.encode("utf-16-le")) // 2


def column_for_offset(line: str, offset: int) -> int:
    """Convert a zero-based str offset inside ``line`` to a 1-based column."""
    return 1 + utf16_length(line[:offset])


def offset_for_column(line: str, column: int) -> int:
    """
    Convert a 1-based UTF-16 column to a zero-based str offset.

    Raises:
        ValueError: column lies outside the line or splits a surrogate pair.
    """
    if column < 1:
        raise ValueError(f"column {column} is before the start of the line")
    units = column - 1
    offset = 0
    while units > 0:
        if offset >= len(line):
            raise ValueError(f"column {column} is past the end of the line")
        width = 2 if ord(line[offset]) > 0xFFFF else 1
        if width > units:
            raise ValueError(f"column {column} splits a surrogate pair")
        units -= width
        offset += 1
    return offset


@dataclass(frozen=True)
class Position:
    line: int
    column: int


@dataclass(frozen=True)
class TextRange:
    start_line: int
    start_column: int
    end_line: int
    end_column: int

    @classmethod
    def single_line(cls, line: int, start_column: int, end_column: int) -> "TextRange":
        return cls(line, start_column, line, end_column)

    @classmethod
    def spanning(cls, start: Position, end: Position) -> "TextRange":
        """Range between two positions given in any order."""
        if (end.line, end.column) < (start.line, start.column):
            start, end = end, start
        return cls(start.line, start.column, end.line, end.column)

    @property
    def start(self) -> Position:
        return Position(self.start_line, self.start_column)

    @property
    def end(self) -> Position:
        return Position(self.end_line, self.end_column)

    def is_empty(self) -> bool:
        return self.start_line == self.end_line and self.start_column == self.end_column

    def range_after_replace(self, text: str) -> "TextRange":
        """
        Range that ``text`` occupies once it replaced this range.

        The result is anchored at this range's start.
        """
        lines = text.split("\n")
        if len(lines) == 1:
            return TextRange(
                self.start_line,
                self.start_column,
                self.start_line,
                self.start_column + utf16_length(text),
            )
        return TextRange(
            self.start_line,
            self.start_column,
            self.start_line + len(lines) - 1,
            1 + utf16_length(lines[-1]),
        )


@dataclass(frozen=True)
class LiteralMatch:
    """
    A numeric literal found in source text.

    ``value`` is ``original_text`` parsed as a float after its float
    suffix was stripped. ``preceding_operator`` is the nearest operator
    token before the literal, ignoring whitespace.
    """

    value: float
    range: TextRange
    original_text: str
    preceding_operator: Optional[str] = None
