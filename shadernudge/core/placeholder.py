"""
Placeholder edit protocol.

While a literal is being nudged, the shader source refers to a uniform
instead of the literal, so the renderer can drive the value live:

    color = 1.0f + offset;     # before stage
    color = u_inline1f + offset;     # staged, REPLACE mode
    color = 1.0+u_inline1f + offset; # staged, OFFSET mode

commit() writes the final number over the staged text, cancel() puts the
original literal back. Each operation is a single buffer replace. For a
given stage() exactly one of commit()/cancel() may follow; the nudge
session enforces that.
"""

from __future__ import annotations

import math
from decimal import Decimal
from enum import Enum
from typing import Optional

from shadernudge.core.errors import BufferRangeError, CancelFailure, CommitFailure, StageFailure
from shadernudge.core.text_buffer import TextBuffer
from shadernudge.core.text_range import LiteralMatch, TextRange
from shadernudge.glsl.tokenizer import strip_float_suffix

PLACEHOLDER_NAME = "u_inline1f"


class StagingMode(Enum):
    REPLACE = "replace"
    OFFSET = "offset"


def format_number(value: float) -> str:
    """
    Default decimal text of a number.

    Integral values lose their fraction (``1.0 -> "1"``), other values use
    the shortest round-tripping digits, positional between 1e-7 and 1e21
    and exponential outside that band.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == int(value) and abs(value) < 1e21:
        return str(int(value))
    if 1e-7 <= abs(value) < 1e21:
        return format(Decimal(repr(value)), "f")
    mantissa, exponent = repr(value).split("e")
    exp = int(exponent)
    return f"{mantissa}e{'+' if exp > 0 else '-'}{abs(exp)}"


def format_committed_value(value: float, preceding_operator: Optional[str]) -> str:
    """
    Text written into the source on commit.

    A negative value right after a binary minus is parenthesized:
    ``x - -1`` would read as a decrement, ``x - (-1)`` does not.
    """
    text = format_number(value)
    if value < 0 and preceding_operator == "-":
        return f"({text})"
    return text


class PlaceholderProtocol:
    """Stage/commit/cancel edits for one placeholder name and staging mode."""

    def __init__(self, placeholder: str = PLACEHOLDER_NAME, mode: StagingMode = StagingMode.REPLACE):
        self.placeholder = placeholder
        self.mode = mode

    def staged_text(self, match: LiteralMatch) -> str:
        if self.mode is StagingMode.OFFSET:
            return f"{strip_float_suffix(match.original_text)}+{self.placeholder}"
        return self.placeholder

    def stage(self, buffer: TextBuffer, match: LiteralMatch) -> TextRange:
        """
        Substitute the placeholder for the literal.

        Returns the range covering the staged text.

        Raises:
            StageFailure: the literal is no longer where the scan found it,
                or the edit was rejected.
        """
        try:
            current = buffer.get_text_in_range(match.range)
        except BufferRangeError as e:
            raise StageFailure(f"Literal range vanished: {e}") from e
        if current != match.original_text:
            raise StageFailure(
                f"Buffer changed since scan: expected {match.original_text!r}, found {current!r}"
            )

        text = self.staged_text(match)
        try:
            buffer.replace(match.range, text)
        except BufferRangeError as e:
            raise StageFailure(str(e)) from e
        return match.range.range_after_replace(text)

    def commit(
        self,
        buffer: TextBuffer,
        staged_range: TextRange,
        value: float,
        preceding_operator: Optional[str],
        staged_text: Optional[str] = None,
    ) -> str:
        """
        Replace the staged text with the final value.

        When ``staged_text`` is given, the range must still hold exactly
        that text; otherwise the buffer is left untouched.

        Returns the text that was written.

        Raises:
            CommitFailure: the staged range no longer exists or was edited.
        """
        text = format_committed_value(value, preceding_operator)
        try:
            _check_staged(buffer, staged_range, staged_text)
            buffer.replace(staged_range, text)
        except BufferRangeError as e:
            raise CommitFailure(str(e)) from e
        return text

    def cancel(
        self,
        buffer: TextBuffer,
        staged_range: TextRange,
        original_text: str,
        staged_text: Optional[str] = None,
    ) -> None:
        """
        Restore the original literal text.

        Raises:
            CancelFailure: the staged range no longer exists or was edited.
        """
        try:
            _check_staged(buffer, staged_range, staged_text)
            buffer.replace(staged_range, original_text)
        except BufferRangeError as e:
            raise CancelFailure(str(e)) from e

    def broadcast_value(self, current_value: float, original_value: float) -> float:
        """
        Uniform value matching ``current_value`` in the staged source.

        In OFFSET mode the source still contains the original literal, so
        the uniform carries only the difference.
        """
        if self.mode is StagingMode.OFFSET:
            return current_value - original_value
        return current_value


def _check_staged(buffer: TextBuffer, staged_range: TextRange, staged_text: Optional[str]) -> None:
    if staged_text is None:
        return
    current = buffer.get_text_in_range(staged_range)
    if current != staged_text:
        raise BufferRangeError(
            f"Staged text was edited: expected {staged_text!r}, found {current!r}"
        )
