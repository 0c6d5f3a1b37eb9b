"""DOM model produced by the tree builder and consumed by the matcher.

A ``Dom`` node is a closed sum over three variants selected by ``DomType``.
Each node carries exactly the payload of its variant plus an ordered list of
children. Nodes hold no parent pointers, so a tree is strict containment with
a single owner per node. Equality is structural.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

ROOT_TAG_NAME = "root"

AttributePairs = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


class DomType(Enum):
    """Variants of a DOM node."""

    TAG = auto()
    TEXT = auto()
    COMMENT = auto()


@dataclass
class Tag:
    """A tag element: ``<[/]name [attr[="value"]] [/]>``.

    Attributes keep their insertion order. ``terminated`` marks a self-closed
    tag such as ``<br/>``; ``terminator`` marks a closing tag ``</name>`` and
    only appears between tokenizing and tree building.

    Examples:
        >>> tag = Tag("li")
        >>> tag.set_attrs([("class", "target"), ("id", "x")])
        >>> tag.get_attrs()
        {'class': 'target', 'id': 'x'}
    """

    name: str
    attrs: Dict[str, str] = field(default_factory=dict)
    terminated: bool = False
    terminator: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Tag name cannot be empty")
        attrs = self.attrs
        self.attrs = {}
        self.set_attrs(attrs)

    def get_name(self) -> str:
        return self.name

    def set_attr(self, name: str, value: str) -> None:
        """Set one attribute, replacing any existing value in place."""
        if not isinstance(name, str) or not isinstance(value, str):
            raise TypeError("Attribute name and value must be strings")
        if not name:
            raise ValueError("Attribute name cannot be empty")
        self.attrs[name] = value

    def set_attrs(self, attrs: AttributePairs) -> None:
        """Set several attributes from a mapping or ``(name, value)`` pairs."""
        pairs = attrs.items() if isinstance(attrs, Mapping) else attrs
        for name, value in pairs:
            self.set_attr(name, value)

    def get_attrs(self) -> Dict[str, str]:
        return self.attrs

    def get_attr(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attrs.get(name, default)

    def has_attr(self, name: str) -> bool:
        return name in self.attrs

    def remove_attr(self, name: str) -> Optional[str]:
        """Remove an attribute, returning its value or None if absent."""
        return self.attrs.pop(name, None)

    def is_terminated(self) -> bool:
        return self.terminated

    def is_terminator(self) -> bool:
        return self.terminator


@dataclass
class Text:
    """Literal content between tags. ``None`` matches any text in a needle."""

    text: Optional[str] = None

    def get_text(self) -> Optional[str]:
        return self.text


@dataclass
class Comment:
    """Content of ``<!-- ... -->``. ``None`` matches any comment in a needle."""

    comment: Optional[str] = None

    def get_comment(self) -> Optional[str]:
        return self.comment


@dataclass
class Dom:
    """A node of the DOM tree.

    Use the ``from_tag``/``from_text``/``from_comment`` constructors rather
    than filling payload fields by hand; ``__post_init__`` rejects payloads
    that do not belong to ``dom_type``.
    """

    dom_type: DomType
    tag: Optional[Tag] = None
    text: Optional[Text] = None
    comment: Optional[Comment] = None
    children: List["Dom"] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.dom_type, DomType):
            raise TypeError("dom_type must be a DomType")

        if self.dom_type is DomType.TAG:
            if self.tag is None:
                raise ValueError("Tag node requires a Tag payload")
            if self.text is not None or self.comment is not None:
                raise ValueError("Tag node cannot carry text or comment payload")
            if self.tag.terminated and self.children:
                raise ValueError("Self-terminated tag cannot have children")
        elif self.dom_type is DomType.TEXT:
            if self.tag is not None or self.comment is not None:
                raise ValueError("Text node can only carry a Text payload")
            if self.text is None:
                self.text = Text()
            if self.children:
                raise ValueError("Text node cannot have children")
        elif self.dom_type is DomType.COMMENT:
            if self.tag is not None or self.text is not None:
                raise ValueError("Comment node can only carry a Comment payload")
            if self.comment is None:
                self.comment = Comment()
            if self.children:
                raise ValueError("Comment node cannot have children")
        else:
            raise AssertionError(f"Unhandled DomType: {self.dom_type}")

        for child in self.children:
            if not isinstance(child, Dom):
                raise TypeError("Child must be a Dom instance")

    @classmethod
    def from_tag(cls, tag: Union[Tag, str], children: Optional[Iterable["Dom"]] = None) -> "Dom":
        """Create a tag node from a Tag or a bare tag name."""
        if isinstance(tag, str):
            tag = Tag(tag)
        return cls(DomType.TAG, tag=tag, children=list(children or []))

    @classmethod
    def from_text(cls, text: Optional[str] = None) -> "Dom":
        return cls(DomType.TEXT, text=Text(text))

    @classmethod
    def from_comment(cls, comment: Optional[str] = None) -> "Dom":
        return cls(DomType.COMMENT, comment=Comment(comment))

    @classmethod
    def new_root(cls) -> "Dom":
        """Create the synthetic root that wraps top-level nodes of a document."""
        return cls.from_tag(ROOT_TAG_NAME)

    @property
    def is_tag(self) -> bool:
        return self.dom_type is DomType.TAG

    @property
    def is_text(self) -> bool:
        return self.dom_type is DomType.TEXT

    @property
    def is_comment(self) -> bool:
        return self.dom_type is DomType.COMMENT

    def get_tag(self) -> Optional[Tag]:
        return self.tag

    def get_text(self) -> Optional[Text]:
        return self.text

    def get_comment(self) -> Optional[Comment]:
        return self.comment

    def get_children(self) -> List["Dom"]:
        return self.children

    def add_child(self, child: "Dom") -> None:
        """Append a child node.

        Raises:
            TypeError: ``child`` is not a Dom
            ValueError: this node is text, a comment, or a self-terminated tag
        """
        if not isinstance(child, Dom):
            raise TypeError("Child must be a Dom instance")
        if self.dom_type is not DomType.TAG:
            raise ValueError(f"{self.dom_type.name.title()} node cannot have children")
        if self.tag is not None and self.tag.terminated:
            raise ValueError("Self-terminated tag cannot have children")
        self.children.append(child)

    def iter(self) -> Iterator["Dom"]:
        """Yield this node and all descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def iter_tags(self) -> Iterator[Tag]:
        """Yield the Tag payload of every tag node in pre-order."""
        for node in self.iter():
            if node.tag is not None:
                yield node.tag

    def count_nodes(self) -> int:
        return sum(1 for _ in self.iter())
