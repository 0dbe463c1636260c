import pytest

from shadernudge.core.errors import BufferRangeError
from shadernudge.core.text_buffer import StringBuffer
from shadernudge.core.text_range import (
    Position,
    TextRange,
    column_for_offset,
    offset_for_column,
    utf16_length,
)


def test_utf16_columns():
    line = "a\U0001F600b"
    assert utf16_length(line) == 4
    assert column_for_offset(line, 2) == 4
    assert offset_for_column(line, 4) == 2
    assert offset_for_column(line, 5) == 3


def test_offset_for_column_rejects_bad_columns():
    line = "a\U0001F600b"
    with pytest.raises(ValueError):
        offset_for_column(line, 0)
    with pytest.raises(ValueError):
        offset_for_column(line, 3)
    with pytest.raises(ValueError):
        offset_for_column(line, 6)


def test_range_after_replace():
    r = TextRange.single_line(2, 5, 9)
    assert r.range_after_replace("u_inline1f") == TextRange.single_line(2, 5, 15)
    assert r.range_after_replace("") == TextRange.single_line(2, 5, 5)
    assert r.range_after_replace("ab\ncde") == TextRange(2, 5, 3, 4)


def test_spanning_orders_positions():
    r = TextRange.spanning(Position(3, 2), Position(1, 7))
    assert r == TextRange(1, 7, 3, 2)
    assert not r.is_empty()
    assert TextRange.single_line(1, 4, 4).is_empty()


def test_string_buffer_lines():
    buffer = StringBuffer("first\nsecond\n")
    assert buffer.line_count() == 3
    assert buffer.get_line(2) == "second"
    assert buffer.get_line(3) == ""
    with pytest.raises(BufferRangeError):
        buffer.get_line(4)


def test_string_buffer_replace_single_line():
    buffer = StringBuffer("x = 1.0;\ny = 2.0;")
    buffer.replace(TextRange.single_line(2, 5, 8), "u_inline1f")
    assert buffer.get_text() == "x = 1.0;\ny = u_inline1f;"
    assert buffer.edit_count == 1


def test_string_buffer_replace_multi_line():
    buffer = StringBuffer("ab\ncd\nef")
    buffer.replace(TextRange(1, 2, 3, 2), "X")
    assert buffer.get_text() == "aXf"


def test_string_buffer_replace_out_of_range():
    buffer = StringBuffer("abc")
    with pytest.raises(BufferRangeError):
        buffer.replace(TextRange.single_line(1, 2, 9), "x")
    with pytest.raises(BufferRangeError):
        buffer.replace(TextRange.single_line(2, 1, 1), "x")
    with pytest.raises(BufferRangeError):
        buffer.replace(TextRange(1, 3, 1, 2), "x")
    assert buffer.get_text() == "abc"
    assert buffer.edit_count == 0


def test_get_text_in_range():
    buffer = StringBuffer("float a = 1.0;\nfloat b = 2.0;")
    assert buffer.get_text_in_range(TextRange.single_line(1, 11, 14)) == "1.0"
    assert buffer.get_text_in_range(TextRange(1, 11, 2, 6)) == "1.0;\nfloat"


def test_select_moves_cursor_and_replace_clears_selection():
    buffer = StringBuffer("a = 1.0;")
    buffer.select(TextRange.single_line(1, 5, 8))
    assert buffer.get_cursor() == Position(1, 8)
    assert buffer.get_selection() == TextRange.single_line(1, 5, 8)
    buffer.replace(TextRange.single_line(1, 5, 8), "2.0")
    assert buffer.get_selection() is None
