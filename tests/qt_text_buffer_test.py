import pytest

pytest.importorskip("PyQt6.QtWidgets")

from PyQt6.QtGui import QTextCursor
from PyQt6.QtWidgets import QPlainTextEdit

from shadernudge.core.errors import BufferRangeError
from shadernudge.core.text_range import Position, TextRange
from shadernudge.editor.qt_text_buffer import QtTextBuffer


@pytest.fixture
def editor(qapp):
    widget = QPlainTextEdit()
    widget.setPlainText("float a = 1.0;\nfloat b = 2.0f;")
    return widget


def test_lines(editor):
    buffer = QtTextBuffer(editor)
    assert buffer.line_count() == 2
    assert buffer.get_line(2) == "float b = 2.0f;"
    with pytest.raises(BufferRangeError):
        buffer.get_line(3)


def test_replace_is_one_undo_step(editor):
    buffer = QtTextBuffer(editor)
    buffer.replace(TextRange.single_line(2, 11, 15), "u_inline1f")
    assert buffer.get_text() == "float a = 1.0;\nfloat b = u_inline1f;"
    editor.undo()
    assert buffer.get_text() == "float a = 1.0;\nfloat b = 2.0f;"


def test_replace_rejects_missing_range(editor):
    buffer = QtTextBuffer(editor)
    with pytest.raises(BufferRangeError):
        buffer.replace(TextRange.single_line(1, 11, 40), "x")
    with pytest.raises(BufferRangeError):
        buffer.replace(TextRange.single_line(5, 1, 2), "x")
    assert buffer.get_text() == "float a = 1.0;\nfloat b = 2.0f;"


def test_columns_are_utf16(qapp):
    widget = QPlainTextEdit()
    widget.setPlainText("/*\U0001F600*/ x = 1.0;")
    buffer = QtTextBuffer(widget)
    assert buffer.get_text_in_range(TextRange.single_line(1, 12, 15)) == "1.0"
    buffer.replace(TextRange.single_line(1, 12, 15), "2.5")
    assert buffer.get_text() == "/*\U0001F600*/ x = 2.5;"


def test_cursor_round_trip_and_clamping(editor):
    buffer = QtTextBuffer(editor)
    buffer.set_cursor(Position(2, 12))
    assert buffer.get_cursor() == Position(2, 12)
    assert editor.textCursor().position() == 15 + 11

    buffer.set_cursor(Position(9, 99))
    assert buffer.get_cursor() == Position(2, 16)


def test_selection(editor):
    buffer = QtTextBuffer(editor)
    assert buffer.get_selection() is None

    cursor = editor.textCursor()
    cursor.setPosition(15 + 10)
    cursor.setPosition(15 + 14, QTextCursor.MoveMode.KeepAnchor)
    editor.setTextCursor(cursor)
    assert buffer.get_selection() == TextRange.single_line(2, 11, 15)


def test_set_text_keeps_undo(editor):
    buffer = QtTextBuffer(editor)
    buffer.set_text("void main() {}")
    assert buffer.get_text() == "void main() {}"
    editor.undo()
    assert buffer.get_text() == "float a = 1.0;\nfloat b = 2.0f;"
