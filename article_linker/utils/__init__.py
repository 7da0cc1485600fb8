"""Utility modules for the application.

This package contains shared utility functions and classes.
"""

from article_linker.utils.html_tokenizer import (
    EXCLUDED_ELEMENTS,
    INLINE_ELEMENTS,
    RAW_TEXT_ELEMENTS,
    Token,
    TokenKind,
    linkable_spans,
    tokenize,
)

__all__ = [
    "EXCLUDED_ELEMENTS",
    "INLINE_ELEMENTS",
    "RAW_TEXT_ELEMENTS",
    "Token",
    "TokenKind",
    "linkable_spans",
    "tokenize",
]
