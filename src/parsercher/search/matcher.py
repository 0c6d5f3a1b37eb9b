"""Structural implication between DOM trees.

Tree P implies tree Q when Q's shape occurs within P: some node of P has the
same variant as Q's root, satisfies its payload (tag name and an attribute
subset, or equal/wildcard text and comment), and every child of Q is matched
by a distinct direct child of that node, in any order.
"""

from typing import Dict, List, Optional

from parsercher.tree.dom import Dom, DomType, Tag


def tag_satisfies(candidate: Tag, needle: Tag) -> bool:
    """Check whether ``candidate`` satisfies the ``needle`` tag pattern.

    Names must be equal (case-sensitive) and every attribute of the needle
    must be present on the candidate with an equal value. Extra attributes on
    the candidate are allowed.

    Examples:
        >>> tag_satisfies(Tag("h1", {"id": "q", "class": "t"}), Tag("h1", {"class": "t"}))
        True
        >>> tag_satisfies(Tag("h1", {"class": "t"}), Tag("h1", {"id": "q"}))
        False
    """
    if candidate.name != needle.name:
        return False
    attrs = candidate.attrs
    return all(
        name in attrs and attrs[name] == value for name, value in needle.attrs.items()
    )


def node_matches(candidate: Dom, needle: Dom) -> bool:
    """Compare node payloads only, ignoring children.

    A needle Text or Comment whose content is None matches any text or
    comment node.
    """
    if candidate.dom_type is not needle.dom_type:
        return False

    if needle.dom_type is DomType.TAG:
        if candidate.tag is None or needle.tag is None:
            return False
        return tag_satisfies(candidate.tag, needle.tag)
    if needle.dom_type is DomType.TEXT:
        wanted = needle.text.text if needle.text is not None else None
        if wanted is None:
            return True
        return candidate.text is not None and candidate.text.text == wanted
    if needle.dom_type is DomType.COMMENT:
        wanted = needle.comment.comment if needle.comment is not None else None
        if wanted is None:
            return True
        return candidate.comment is not None and candidate.comment.comment == wanted
    raise AssertionError(f"Unhandled DomType: {needle.dom_type}")


def children_match(candidate: Dom, needle: Dom) -> bool:
    """Check that each needle child matches a distinct candidate child.

    Order is free. Assignment is a maximum bipartite matching built with
    augmenting paths, so one candidate child never satisfies two needle
    children.
    """
    wanted = needle.children
    if not wanted:
        return True
    available = candidate.children
    if len(wanted) > len(available):
        return False

    edges: List[List[int]] = []
    for child in wanted:
        options = [
            index for index, node in enumerate(available)
            if subtree_matches(node, child)
        ]
        if not options:
            return False
        edges.append(options)

    # candidate child index -> needle child index
    owner: Dict[int, int] = {}

    def _assign(needle_index: int, seen: List[bool]) -> bool:
        for index in edges[needle_index]:
            if seen[index]:
                continue
            seen[index] = True
            if index not in owner or _assign(owner[index], seen):
                owner[index] = needle_index
                return True
        return False

    for needle_index in range(len(wanted)):
        if not _assign(needle_index, [False] * len(available)):
            return False
    return True


def subtree_matches(candidate: Dom, needle: Dom) -> bool:
    """Match payloads and, recursively, children of ``candidate`` against ``needle``."""
    return node_matches(candidate, needle) and children_match(candidate, needle)


def p_implies_q(p: Dom, q: Dom) -> bool:
    """Check whether the haystack ``p`` contains the needle ``q`` anywhere.

    Every node of ``p`` is tried in pre-order, the root included.

    Examples:
        >>> haystack = Dom.from_tag("ol", [Dom.from_tag(Tag("li", {"class": "t", "id": "x"}))])
        >>> p_implies_q(haystack, Dom.from_tag(Tag("li", {"class": "t"})))
        True
    """
    return find_first_match(p, q) is not None


def p_implies_q_tree(p: Dom, q: Dom) -> bool:
    """Check whether the root of ``p`` itself matches ``q``."""
    return subtree_matches(p, q)


def find_first_match(p: Dom, q: Dom) -> Optional[Dom]:
    """Return the first node of ``p`` in pre-order matching ``q``, or None."""
    for node in p.iter():
        if subtree_matches(node, q):
            return node
    return None
