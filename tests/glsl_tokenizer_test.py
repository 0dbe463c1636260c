import pytest

from shadernudge.glsl.tokenizer import (
    BLOCK_COMMENT,
    BUILTIN,
    FLOAT,
    IDENT,
    INTEGER,
    KEYWORD,
    LINE_COMMENT,
    OPERATOR,
    PREPROCESSOR,
    WHITESPACE,
    GLSLTokenizeError,
    strip_float_suffix,
    tokenize,
)


def _types(source):
    return [(t.type, t.data) for t in tokenize(source) if t.type != WHITESPACE]


def test_tokenize_assignment_with_float():
    assert _types("color = 1.0f + offset;") == [
        (IDENT, "color"),
        (OPERATOR, "="),
        (FLOAT, "1.0f"),
        (OPERATOR, "+"),
        (IDENT, "offset"),
        (OPERATOR, ";"),
    ]


def test_token_positions_are_offsets_in_source():
    tokens = tokenize("a = 2.5;")
    literal = [t for t in tokens if t.type == FLOAT][0]
    assert literal.position == 4
    assert literal.end == 7


def test_float_forms():
    for text in ("1.0", "1.", ".5", "1e3", "1.5e-2", "2.0E+4", "3f", "1.0lf", "4.0LF", "0.25F"):
        tokens = tokenize(text)
        assert len(tokens) == 1, text
        assert tokens[0].type == FLOAT, text
        assert tokens[0].data == text


def test_integers_are_not_floats():
    for text in ("2", "10u", "0x1F", "0XffU"):
        tokens = tokenize(text)
        assert [t.type for t in tokens] == [INTEGER], text


def test_keywords_and_builtins():
    assert _types("uniform vec3 tint;") == [
        (KEYWORD, "uniform"),
        (KEYWORD, "vec3"),
        (IDENT, "tint"),
        (OPERATOR, ";"),
    ]
    assert _types("mix(a, b, 0.5)")[0] == (BUILTIN, "mix")


def test_longest_operator_wins():
    assert _types("x -= 1.0;")[1] == (OPERATOR, "-=")
    assert _types("a <<= b")[1] == (OPERATOR, "<<=")


def test_comments():
    tokens = _types("x = 1.0; // 2.0 here\n")
    assert (LINE_COMMENT, "// 2.0 here") in tokens
    assert (FLOAT, "2.0") not in tokens

    tokens = _types("x = /* 3.0 */ 1.0;")
    assert (BLOCK_COMMENT, "/* 3.0 */") in tokens
    assert [d for t, d in tokens if t == FLOAT] == ["1.0"]


def test_unterminated_block_comment_runs_to_end():
    tokens = tokenize("a /* open")
    assert tokens[-1].type == BLOCK_COMMENT
    assert tokens[-1].data == "/* open"


def test_preprocessor_only_at_line_start():
    assert _types("#version 330 core") == [(PREPROCESSOR, "#version 330 core")]
    assert _types("  #define K 1.0")[0] == (PREPROCESSOR, "#define K 1.0")
    assert _types("x;\n#define K 1.0")[-1] == (PREPROCESSOR, "#define K 1.0")
    with pytest.raises(GLSLTokenizeError):
        tokenize("x # y")


def test_unknown_character_raises():
    with pytest.raises(GLSLTokenizeError) as exc_info:
        tokenize("float x = @1.0;")
    assert exc_info.value.position == 10


def test_strip_float_suffix():
    assert strip_float_suffix("1.0f") == "1.0"
    assert strip_float_suffix("1.0F") == "1.0"
    assert strip_float_suffix("2.5lf") == "2.5"
    assert strip_float_suffix("2.5LF") == "2.5"
    assert strip_float_suffix("3.0") == "3.0"
