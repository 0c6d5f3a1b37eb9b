"""Search layer.

Structural matching between trees and the search operations built on it.
"""

from .matcher import (
    children_match,
    find_first_match,
    node_matches,
    p_implies_q,
    p_implies_q_tree,
    subtree_matches,
    tag_satisfies,
)
from .searcher import (
    search_attr,
    search_attrs,
    search_dom,
    search_tag,
    search_tag_from_name,
    search_text_from_tag_children,
)

__all__ = [
    "children_match",
    "find_first_match",
    "node_matches",
    "p_implies_q",
    "p_implies_q_tree",
    "subtree_matches",
    "tag_satisfies",
    "search_attr",
    "search_attrs",
    "search_dom",
    "search_tag",
    "search_tag_from_name",
    "search_text_from_tag_children",
]
