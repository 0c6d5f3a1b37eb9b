"""Character input layer.

Provides the read cursor the tokenizer scans the document with.
"""

from .cursor import Cursor

__all__ = [
    "Cursor",
]
