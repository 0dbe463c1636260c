"""
Locating float literals in GLSL source.

scan() looks at one line and a cursor column, scan_at_position_or_selection()
works against a TextBuffer and prefers a non-empty selection, scan_all()
walks a whole document.

Scanning never raises: a line that cannot be tokenized simply has no
literals.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from shadernudge import log
from shadernudge.core.errors import BufferRangeError, ScanFailure
from shadernudge.core.text_buffer import TextBuffer
from shadernudge.core.text_range import (
    LiteralMatch,
    Position,
    TextRange,
    column_for_offset,
    offset_for_column,
    utf16_length,
)
from shadernudge.glsl.tokenizer import (
    FLOAT,
    OPERATOR,
    WHITESPACE,
    GLSLTokenizeError,
    Token,
    strip_float_suffix,
    tokenize,
)

# Longest float prefix, the way JavaScript parseFloat reads it
_LEADING_FLOAT_RE = re.compile(r"\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")


def parse_leading_float(text: str) -> Optional[float]:
    """
    Parse the leading float of ``text``, ignoring trailing garbage.

    Returns None when the text does not start with a number.
    """
    m = _LEADING_FLOAT_RE.match(text)
    if m is None:
        return None
    return float(m.group(1).replace("Infinity", "inf"))


def literal_value(token_text: str) -> float:
    return float(strip_float_suffix(token_text))


def find_preceding_operator(tokens: Sequence[Token], index: int) -> Optional[str]:
    """
    Nearest operator before ``tokens[index]``, skipping whitespace.

    Any other token kind in between means there is no operator.
    """
    for i in range(index - 1, -1, -1):
        token = tokens[i]
        if token.type == WHITESPACE:
            continue
        if token.type == OPERATOR:
            return token.data
        break
    return None


def _literal_matches(line: str, line_number: int) -> List[LiteralMatch]:
    try:
        tokens = tokenize(line)
    except GLSLTokenizeError as e:
        raise ScanFailure(f"line {line_number}: {e}") from e

    result = []
    for i, token in enumerate(tokens):
        if token.type != FLOAT:
            continue
        start_column = column_for_offset(line, token.position)
        end_column = start_column + utf16_length(token.data)
        match = LiteralMatch(
            value=literal_value(token.data),
            range=TextRange.single_line(line_number, start_column, end_column),
            original_text=token.data,
            preceding_operator=find_preceding_operator(tokens, i),
        )
        result.append(match)
    return result


def _operator_before(buffer: TextBuffer, position: Position) -> Optional[str]:
    """Operator ending the text of ``position.line`` before ``position``."""
    try:
        line = buffer.get_line(position.line)
        tokens = tokenize(line[: offset_for_column(line, position.column)])
    except (BufferRangeError, GLSLTokenizeError, ValueError) as e:
        log.debug(f"[LiteralScanner] No operator lookup before selection: {e}")
        return None
    return find_preceding_operator(tokens, len(tokens))


def scan(line: str, cursor_column: int, line_number: int = 1) -> Optional[LiteralMatch]:
    """
    Float literal under ``cursor_column`` of ``line``.

    Both boundary columns of a literal count as "under the cursor", so a
    caret placed right after ``1.0`` still selects it.
    """
    try:
        matches = _literal_matches(line, line_number)
    except ScanFailure as e:
        log.debug(f"[LiteralScanner] {e}")
        return None

    for match in matches:
        if match.range.start_column <= cursor_column <= match.range.end_column:
            return match
    return None


def scan_at_position_or_selection(
    buffer: TextBuffer,
    position: Position,
    selection: Optional[TextRange] = None,
) -> Optional[LiteralMatch]:
    """
    Literal to edit for the given caret and selection.

    A non-empty selection whose text starts with a number wins: the whole
    selected text becomes the editable region. Otherwise the literal under
    ``position`` is used.
    """
    if selection is not None and not selection.is_empty():
        try:
            selected_text = buffer.get_text_in_range(selection)
        except BufferRangeError as e:
            log.debug(f"[LiteralScanner] Selection not readable: {e}")
            selected_text = None

        if selected_text is not None:
            value = parse_leading_float(selected_text)
            if value is not None:
                return LiteralMatch(
                    value=value,
                    range=selection,
                    original_text=selected_text,
                    preceding_operator=_operator_before(buffer, selection.start),
                )

    try:
        line = buffer.get_line(position.line)
    except BufferRangeError as e:
        log.debug(f"[LiteralScanner] Cursor line not readable: {e}")
        return None
    return scan(line, position.column, position.line)


def scan_all(buffer: TextBuffer) -> List[LiteralMatch]:
    """Every float literal of the document, in reading order."""
    results: List[LiteralMatch] = []
    for line_number in range(1, buffer.line_count() + 1):
        line = buffer.get_line(line_number)
        try:
            matches = _literal_matches(line, line_number)
        except ScanFailure as e:
            log.debug(f"[LiteralScanner] Skipping {e}")
            continue
        results.extend(matches)
    return results
