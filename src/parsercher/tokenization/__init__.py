"""Tokenization layer.

Turns raw markup into a flat sequence of structural tokens for the tree
builder.
"""

from .tokenizer import (
    RAW_TEXT_ELEMENTS,
    TagTokenizer,
    Token,
    TokenizationResult,
    TokenizerState,
    TokenPosition,
    TokenType,
)

__all__ = [
    "RAW_TEXT_ELEMENTS",
    "TagTokenizer",
    "Token",
    "TokenizationResult",
    "TokenizerState",
    "TokenPosition",
    "TokenType",
]
