"""
TextBuffer over a QPlainTextEdit.

QTextDocument positions count UTF-16 code units, the same unit the nudge
core uses for columns, so columns map onto document positions directly:
``position = block.position() + column - 1``.
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QRect
from PyQt6.QtGui import QTextCursor
from PyQt6.QtWidgets import QPlainTextEdit

from shadernudge.core.errors import BufferRangeError
from shadernudge.core.text_buffer import TextBuffer
from shadernudge.core.text_range import Position, TextRange


class QtTextBuffer(TextBuffer):
    def __init__(self, editor: QPlainTextEdit):
        self._editor = editor

    @property
    def editor(self) -> QPlainTextEdit:
        return self._editor

    def line_count(self) -> int:
        return self._editor.document().blockCount()

    def get_line(self, line_number: int) -> str:
        return self._block(line_number).text()

    def get_text(self) -> str:
        return self._editor.toPlainText()

    def set_text(self, text: str) -> None:
        """Replace the whole document as one undo step."""
        cursor = QTextCursor(self._editor.document())
        cursor.beginEditBlock()
        cursor.select(QTextCursor.SelectionType.Document)
        cursor.insertText(text)
        cursor.endEditBlock()

    def replace(self, text_range: TextRange, text: str) -> None:
        start = self._document_position(text_range.start_line, text_range.start_column)
        end = self._document_position(text_range.end_line, text_range.end_column)
        if end < start:
            raise BufferRangeError(f"Range end precedes start: {text_range}")

        cursor = QTextCursor(self._editor.document())
        cursor.beginEditBlock()
        cursor.setPosition(start)
        cursor.setPosition(end, QTextCursor.MoveMode.KeepAnchor)
        cursor.insertText(text)
        cursor.endEditBlock()

    def get_cursor(self) -> Position:
        return self._position_at(self._editor.textCursor().position())

    def set_cursor(self, position: Position) -> None:
        """Move the caret; out-of-range positions are clamped to the document."""
        document = self._editor.document()
        line = min(max(position.line, 1), document.blockCount())
        block = document.findBlockByNumber(line - 1)
        column = min(max(position.column, 1), len(block.text().encode("utf-16-le")) // 2 + 1)

        cursor = self._editor.textCursor()
        cursor.setPosition(block.position() + column - 1)
        self._editor.setTextCursor(cursor)

    def get_selection(self) -> Optional[TextRange]:
        cursor = self._editor.textCursor()
        if not cursor.hasSelection():
            return None
        return TextRange.spanning(
            self._position_at(cursor.selectionStart()),
            self._position_at(cursor.selectionEnd()),
        )

    def viewport_rect(self, text_range: TextRange) -> QRect:
        """Viewport rectangle of the range's start, for placing popups."""
        cursor = QTextCursor(self._editor.document())
        cursor.setPosition(self._document_position(text_range.start_line, text_range.start_column))
        return self._editor.cursorRect(cursor)

    # --- Helpers ---

    def _block(self, line_number: int):
        document = self._editor.document()
        if line_number < 1 or line_number > document.blockCount():
            raise BufferRangeError(f"Line {line_number} does not exist ({document.blockCount()} lines)")
        return document.findBlockByNumber(line_number - 1)

    def _document_position(self, line_number: int, column: int) -> int:
        block = self._block(line_number)
        # block.length() counts the trailing separator
        if column < 1 or column > block.length():
            raise BufferRangeError(f"Column {column} is outside line {line_number}")
        return block.position() + column - 1

    def _position_at(self, document_position: int) -> Position:
        block = self._editor.document().findBlock(document_position)
        return Position(block.blockNumber() + 1, document_position - block.position() + 1)
