"""Public parsing API."""

from .parser import (
    InputType,
    MarkupParser,
    ParseError,
    parse,
    parse_with_diagnostics,
)

__all__ = [
    "InputType",
    "MarkupParser",
    "ParseError",
    "parse",
    "parse_with_diagnostics",
]
