"""
GLSL tokenizer.

Splits a piece of GLSL source into classified tokens. The token kinds and
boundaries follow the usual GLSL lexical grammar:

- float literals: ``1.0``, ``.5``, ``1.``, ``2e3``, ``1.0f``, ``3.0lf``
- integer literals: ``12``, ``0x1F``, ``7u``
- operators, including punctuation such as ``(`` ``;`` ``,`` ``.``
- identifiers, split into keywords, builtins and plain identifiers
- comments, preprocessor lines and whitespace

Each token remembers its zero-based character offset in the source, so
callers can map tokens back to editor columns.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

FLOAT = "float"
INTEGER = "integer"
OPERATOR = "operator"
WHITESPACE = "whitespace"
IDENT = "ident"
KEYWORD = "keyword"
BUILTIN = "builtin"
LINE_COMMENT = "line-comment"
BLOCK_COMMENT = "block-comment"
PREPROCESSOR = "preprocessor"

# Suffixes that turn a decimal literal into a float literal
FLOAT_SUFFIX_RE = re.compile(r"(?:lf|LF|f|F)$")


class GLSLTokenizeError(ValueError):
    """Raised on a character that cannot start any GLSL token."""

    def __init__(self, char: str, position: int) -> None:
        super().__init__(f"Unexpected character {char!r} at offset {position}")
        self.char = char
        self.position = position


@dataclass(frozen=True)
class Token:
    type: str
    data: str
    position: int  # zero-based offset in the tokenized text

    @property
    def end(self) -> int:
        return self.position + len(self.data)


KEYWORDS = frozenset(
    {
        "attribute", "const", "uniform", "varying", "buffer", "shared",
        "coherent", "volatile", "restrict", "readonly", "writeonly",
        "layout", "centroid", "flat", "smooth", "noperspective", "patch",
        "sample", "break", "continue", "do", "for", "while", "switch",
        "case", "default", "if", "else", "subroutine", "in", "out", "inout",
        "true", "false", "invariant", "precise", "discard", "return",
        "lowp", "mediump", "highp", "precision", "struct",
        "void", "bool", "int", "uint", "float", "double",
        "vec2", "vec3", "vec4", "dvec2", "dvec3", "dvec4",
        "bvec2", "bvec3", "bvec4", "ivec2", "ivec3", "ivec4",
        "uvec2", "uvec3", "uvec4",
        "mat2", "mat3", "mat4", "mat2x2", "mat2x3", "mat2x4",
        "mat3x2", "mat3x3", "mat3x4", "mat4x2", "mat4x3", "mat4x4",
        "sampler1D", "sampler2D", "sampler3D", "samplerCube",
        "sampler2DShadow", "sampler2DArray", "samplerBuffer",
    }
)

BUILTINS = frozenset(
    {
        "abs", "acos", "acosh", "all", "any", "asin", "asinh", "atan", "atanh",
        "ceil", "clamp", "cos", "cosh", "cross", "degrees", "determinant",
        "dFdx", "dFdy", "distance", "dot", "equal", "exp", "exp2",
        "faceforward", "floor", "fma", "fract", "fwidth", "greaterThan",
        "greaterThanEqual", "inverse", "inversesqrt", "isinf", "isnan",
        "length", "lessThan", "lessThanEqual", "log", "log2",
        "matrixCompMult", "max", "min", "mix", "mod", "modf", "normalize",
        "not", "notEqual", "outerProduct", "pow", "radians", "reflect",
        "refract", "round", "roundEven", "sign", "sin", "sinh", "smoothstep",
        "sqrt", "step", "tan", "tanh", "texelFetch", "texture", "textureLod",
        "textureSize", "transpose", "trunc",
        "gl_Position", "gl_FragCoord", "gl_FragColor", "gl_FragDepth",
        "gl_PointSize", "gl_VertexID", "gl_InstanceID", "gl_FrontFacing",
        "gl_PointCoord",
    }
)

# Longest operators first: the alternation is tried left to right.
_OPERATORS = [
    "<<=", ">>=",
    "++", "--", "<<", ">>", "<=", ">=", "==", "!=", "&&", "||", "^^",
    "+=", "-=", "*=", "/=", "%=", "&=", "^=", "|=",
    "+", "-", "*", "/", "%", "<", ">", "=", "!", "&", "|", "^", "~",
    "?", ":", ";", ",", ".", "(", ")", "[", "]", "{", "}",
]

TOKEN_RE = re.compile(
    r"""
    (?P<BLOCK_COMMENT>/\*.*?(?:\*/|$))
  | (?P<LINE_COMMENT>//[^\n]*)
  | (?P<PREPROCESSOR>\#[^\n]*)
  | (?P<WHITESPACE>\s+)
  | (?P<FLOAT>
        (?:\d+\.\d*|\.\d+)(?:[eE][+-]?\d+)?(?:lf|LF|f|F)?
      | \d+[eE][+-]?\d+(?:lf|LF|f|F)?
      | \d+(?:lf|LF|f|F)
    )
  | (?P<INTEGER>0[xX][0-9a-fA-F]+[uU]?|\d+[uU]?)
  | (?P<IDENT>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<OPERATOR>"""
    + "|".join(re.escape(op) for op in _OPERATORS)
    + r""")
  | (?P<MISMATCH>.)
    """,
    re.VERBOSE | re.DOTALL,
)

_KIND_TO_TYPE = {
    "BLOCK_COMMENT": BLOCK_COMMENT,
    "LINE_COMMENT": LINE_COMMENT,
    "PREPROCESSOR": PREPROCESSOR,
    "WHITESPACE": WHITESPACE,
    "FLOAT": FLOAT,
    "INTEGER": INTEGER,
    "OPERATOR": OPERATOR,
}


def tokenize(source: str) -> List[Token]:
    """
    Tokenize GLSL source text.

    Raises:
        GLSLTokenizeError: on a character no token can start with.
    """
    tokens: List[Token] = []
    pos = 0
    # '#' only starts a directive when nothing but whitespace precedes it
    at_line_start = True
    while pos < len(source):
        m = TOKEN_RE.match(source, pos)
        kind = m.lastgroup
        value = m.group(0)

        if kind == "PREPROCESSOR" and not at_line_start:
            raise GLSLTokenizeError(value[0], pos)
        if kind == "MISMATCH":
            raise GLSLTokenizeError(value, pos)

        if kind == "IDENT":
            if value in KEYWORDS:
                token_type = KEYWORD
            elif value in BUILTINS:
                token_type = BUILTIN
            else:
                token_type = IDENT
        else:
            token_type = _KIND_TO_TYPE[kind]

        tokens.append(Token(token_type, value, pos))

        if kind == "WHITESPACE":
            if "\n" in value:
                at_line_start = True
        else:
            at_line_start = False
        pos = m.end()
    return tokens


def strip_float_suffix(text: str) -> str:
    """Remove trailing float suffix (``f``, ``lf``) from literal text."""
    return FLOAT_SUFFIX_RE.sub("", text)
