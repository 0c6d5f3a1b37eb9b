"""Configuration classes for markup parsing.

Configuration objects are frozen dataclasses validated on construction, so a
single instance can be shared between parsers.
"""

import json
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, FrozenSet, List, Optional

# Elements whose content is captured verbatim as one text node. Markup inside
# them is not tokenized; capture ends at the literal matching closing tag.
RAW_TEXT_ELEMENTS: FrozenSet[str] = frozenset({
    "script",
    "style",
    "textarea",
    "title",
    "xmp",
    "iframe",
    "noembed",
    "noframes",
})

# Elements that never have content. They are appended to the current parent
# but never become a parent themselves, with or without a trailing "/>".
VOID_ELEMENTS: FrozenSet[str] = frozenset({
    "area",
    "base",
    "basefont",
    "bgsound",
    "br",
    "col",
    "embed",
    "hr",
    "img",
    "input",
    "keygen",
    "link",
    "meta",
    "param",
    "source",
    "track",
    "wbr",
})

_COMPONENT_FIELDS = ("tokenizer", "tree")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


def _normalize_names(names: Any, field_name: str) -> FrozenSet[str]:
    if isinstance(names, str):
        raise ValueError(f"{field_name} must be a collection of names, not a string")
    normalized = frozenset(str(name).lower() for name in names)
    if "" in normalized:
        raise ValueError(f"{field_name} cannot contain an empty element name")
    return normalized


@dataclass(frozen=True)
class TokenizerConfig:
    """Configuration for the tag tokenizer."""

    raw_text_elements: FrozenSet[str] = RAW_TEXT_ELEMENTS
    keep_whitespace_text: bool = False
    recognize_cdata: bool = True
    recognize_processing_instructions: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "raw_text_elements",
            _normalize_names(self.raw_text_elements, "raw_text_elements"),
        )


@dataclass(frozen=True)
class TreeConfig:
    """Configuration for the tree builder."""

    void_elements: FrozenSet[str] = VOID_ELEMENTS

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "void_elements",
            _normalize_names(self.void_elements, "void_elements"),
        )


@dataclass(frozen=True)
class ParserConfig:
    """Configuration for the complete parse pipeline.

    Examples:
        >>> config = ParserConfig().override(tokenizer__keep_whitespace_text=True)
        >>> config.tokenizer.keep_whitespace_text
        True
    """

    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    reject_empty_input: bool = True
    enable_metrics: bool = True
    correlation_id: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.tokenizer, TokenizerConfig):
            raise ConfigValidationError(
                "tokenizer must be a TokenizerConfig", field_name="tokenizer"
            )
        if not isinstance(self.tree, TreeConfig):
            raise ConfigValidationError("tree must be a TreeConfig", field_name="tree")

        overlap = self.tokenizer.raw_text_elements & self.tree.void_elements
        if overlap:
            raise ConfigValidationError(
                f"Elements cannot be both raw-text and void: {sorted(overlap)}",
                field_name="tree.void_elements",
                suggestions=[
                    "Remove the names from tokenizer.raw_text_elements",
                    "Remove the names from tree.void_elements",
                ],
            )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Nested fields use ``component__field`` notation, e.g.
        ``tree__void_elements=frozenset()``.
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENT_FIELDS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(_COMPONENT_FIELDS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        try:
            for component, values in nested_overrides.items():
                top_level[component] = replace(getattr(self, component), **values)
            return replace(self, **top_level)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a JSON-compatible dictionary."""
        def _convert(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {f.name: _convert(getattr(obj, f.name)) for f in fields(obj)}
            if isinstance(obj, (set, frozenset)):
                return sorted(obj)
            return obj

        return _convert(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from a dictionary produced by ``to_dict``."""
        try:
            values = dict(data)
            if "tokenizer" in values:
                values["tokenizer"] = TokenizerConfig(**values["tokenizer"])
            if "tree" in values:
                values["tree"] = TreeConfig(**values["tree"])
            return cls(**values)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(f"Invalid configuration data: {e}") from e

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def html(cls) -> "ParserConfig":
        """Preset for HTML documents (the default behaviour)."""
        return cls(name="html")

    @classmethod
    def xml(cls) -> "ParserConfig":
        """Preset for XML-like documents.

        No element is void, only ``script`` and ``style`` capture raw text, and
        whitespace-only text is kept.
        """
        return cls(
            tokenizer=TokenizerConfig(
                raw_text_elements=frozenset({"script", "style"}),
                keep_whitespace_text=True,
            ),
            tree=TreeConfig(void_elements=frozenset()),
            name="xml",
        )
