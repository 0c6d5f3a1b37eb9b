"""Tree layer.

Provides the DOM model and the builder that assembles it from tokens.
"""

from .dom import (
    ROOT_TAG_NAME,
    Comment,
    Dom,
    DomType,
    Tag,
    Text,
)
from .builder import (
    VOID_ELEMENTS,
    ParseResult,
    TreeBuilder,
)

__all__ = [
    "ROOT_TAG_NAME",
    "Comment",
    "Dom",
    "DomType",
    "Tag",
    "Text",
    "VOID_ELEMENTS",
    "ParseResult",
    "TreeBuilder",
]
