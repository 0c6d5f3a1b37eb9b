"""Search operations over a parsed tree.

Every function walks the haystack in pre-order and returns None when nothing
matches. A non-empty result is always a list in document order.
"""

from typing import List, Optional, Sequence, Union

from parsercher.search.matcher import subtree_matches, tag_satisfies
from parsercher.tree.dom import Dom, Tag

AttributeNames = Union[str, Sequence[str]]


def _or_none(results: list) -> Optional[list]:
    return results if results else None


def _matching_tags(haystack: Dom, needle_tag: Optional[Tag]):
    for tag in haystack.iter_tags():
        if needle_tag is None or tag_satisfies(tag, needle_tag):
            yield tag


def search_dom(haystack: Dom, needle: Dom) -> Optional[List[Dom]]:
    """Find every node of ``haystack`` whose subtree contains ``needle``'s shape.

    The returned nodes are the haystack's own objects, not copies. Nested
    matches are all reported, outer node first.

    Examples:
        >>> haystack = Dom.from_tag("ul", [Dom.from_tag(Tag("li", {"class": "a"}))])
        >>> [node.tag.name for node in search_dom(haystack, Dom.from_tag("li"))]
        ['li']
    """
    results = [node for node in haystack.iter() if subtree_matches(node, needle)]
    return _or_none(results)


def search_tag(haystack: Dom, needle_tag: Tag) -> Optional[List[Tag]]:
    """Return the Tag payloads satisfying ``needle_tag``."""
    return _or_none(list(_matching_tags(haystack, needle_tag)))


def search_tag_from_name(haystack: Dom, name: str) -> Optional[List[Tag]]:
    """Return the Tag payloads named ``name`` (case-sensitive)."""
    return _or_none([tag for tag in haystack.iter_tags() if tag.name == name])


def search_attrs(
    haystack: Dom,
    needle_tag: Optional[Tag],
    attr_name: AttributeNames
) -> Optional[List[str]]:
    """Collect attribute values from tags satisfying ``needle_tag``.

    Args:
        haystack: Tree to search
        needle_tag: Tag pattern, or None to consider every tag
        attr_name: One attribute name, or several collected per tag in the
            given order

    Returns:
        Values in document order, or None if no tag carries the attribute
    """
    names = [attr_name] if isinstance(attr_name, str) else list(attr_name)
    results: List[str] = []
    for tag in _matching_tags(haystack, needle_tag):
        for name in names:
            value = tag.get_attr(name)
            if value is not None:
                results.append(value)
    return _or_none(results)


def search_attr(
    haystack: Dom,
    needle_tag: Optional[Tag],
    attr_name: str
) -> Optional[str]:
    """Return ``attr_name`` of the first tag satisfying ``needle_tag`` that has it."""
    for tag in _matching_tags(haystack, needle_tag):
        value = tag.get_attr(attr_name)
        if value is not None:
            return value
    return None


def search_text_from_tag_children(haystack: Dom, needle_tag: Tag) -> Optional[List[str]]:
    """Collect text of the direct Text children of tags satisfying ``needle_tag``.

    Examples:
        >>> ol = Dom.from_tag("ol", [
        ...     Dom.from_tag(Tag("li", {"class": "t"}), [Dom.from_text("first")]),
        ...     Dom.from_tag("li", [Dom.from_text("second")]),
        ... ])
        >>> search_text_from_tag_children(ol, Tag("li", {"class": "t"}))
        ['first']
    """
    results: List[str] = []
    for node in haystack.iter():
        if node.tag is None or not tag_satisfies(node.tag, needle_tag):
            continue
        for child in node.children:
            if child.is_text and child.text is not None and child.text.text is not None:
                results.append(child.text.text)
    return _or_none(results)
