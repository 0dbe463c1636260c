"""GLSL source helpers."""

from shadernudge.glsl.tokenizer import (
    GLSLTokenizeError,
    Token,
    strip_float_suffix,
    tokenize,
)

__all__ = [
    "GLSLTokenizeError",
    "Token",
    "strip_float_suffix",
    "tokenize",
]
