"""parsercher: parse tag documents and search them by structure.

Parse HTML/XML-like markup into a lightweight DOM tree, then find the parts
of it that contain a given pattern tree.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), search_dom(), search_attr(), ...
- Level 2: Configured parser - MarkupParser with ParserConfig
"""

__version__ = "0.1.0"

from .api import MarkupParser, ParseError, parse, parse_with_diagnostics
from .search import (
    p_implies_q,
    p_implies_q_tree,
    search_attr,
    search_attrs,
    search_dom,
    search_tag,
    search_tag_from_name,
    search_text_from_tag_children,
    tag_satisfies,
)
from .shared.config import ConfigError, ConfigValidationError, ParserConfig
from .tree import Comment, Dom, DomType, ParseResult, Tag, Text

__all__ = [
    "__version__",

    # Parsing
    "parse",
    "parse_with_diagnostics",
    "MarkupParser",
    "ParseError",
    "ParseResult",

    # Tree model
    "Comment",
    "Dom",
    "DomType",
    "Tag",
    "Text",

    # Matching and search
    "p_implies_q",
    "p_implies_q_tree",
    "tag_satisfies",
    "search_attr",
    "search_attrs",
    "search_dom",
    "search_tag",
    "search_tag_from_name",
    "search_text_from_tag_children",

    # Configuration
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
]
