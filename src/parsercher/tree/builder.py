"""Tree building from token streams.

The builder keeps a stack of open elements whose bottom frame is the synthetic
root. Start tags are appended to the stack top and pushed unless they are
self-closing or void; end tags pop frames until the matching element is
closed. Malformed structure is repaired and recorded as diagnostics, never
raised.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from parsercher.shared import (
    VOID_ELEMENTS,
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
    TreeConfig,
    get_logger,
)
from parsercher.tokenization import Token, TokenizationResult, TokenType
from parsercher.tree.dom import Dom, Tag

_COMPONENT = "tree_builder"


@dataclass
class ParseResult:
    """Result of building a tree, with diagnostics and performance data.

    The tree is always present; a failed build leaves whatever was built
    before the failure and sets ``success`` to False.
    """

    tree: Dom = field(default_factory=Dom.new_root)
    success: bool = True
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None

    @property
    def node_count(self) -> int:
        """Number of nodes in the tree, root included."""
        return self.tree.count_nodes()

    @property
    def has_repairs(self) -> bool:
        """Check if the tokenizer or builder repaired anything."""
        return any(
            diag.severity is not DiagnosticSeverity.DEBUG for diag in self.diagnostics
        )

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            position=position,
            details=details,
            correlation_id=self.correlation_id,
        ))

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    def summary(self) -> Dict[str, Any]:
        """Get summary statistics for the parse result."""
        by_severity: Dict[str, int] = {}
        for diag in self.diagnostics:
            by_severity[diag.severity.name] = by_severity.get(diag.severity.name, 0) + 1

        return {
            "success": self.success,
            "node_count": self.node_count,
            "has_repairs": self.has_repairs,
            "diagnostic_count": len(self.diagnostics),
            "diagnostics_by_severity": by_severity,
            "processing_time_ms": self.performance.processing_time_ms,
            "memory_used_bytes": self.performance.memory_used_bytes,
            "characters_processed": self.performance.characters_processed,
            "tokens_generated": self.performance.tokens_generated,
            "correlation_id": self.correlation_id,
        }


def _tag_from_token(token: Token) -> Tag:
    return Tag(
        token.value,
        attrs=dict(token.attributes),
        terminated=token.self_closing,
    )


class TreeBuilder:
    """Builds a ``Dom`` tree from the tokenizer's output.

    Examples:
        >>> from parsercher.tokenization import TagTokenizer
        >>> result = TreeBuilder().build(TagTokenizer().tokenize("<p>hi</p>"))
        >>> result.tree.children[0].tag.name
        'p'
    """

    def __init__(
        self,
        config: Optional[TreeConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or TreeConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, _COMPONENT)
        self._stack: List[Dom] = []
        self._nodes_created = 0

    def build(self, tokens: Union[TokenizationResult, List[Token]]) -> ParseResult:
        """Build a tree from a token stream.

        Args:
            tokens: Either TokenizationResult or list of tokens to process

        Returns:
            ParseResult whose tree is a synthetic ``root`` tag node
        """
        start_time = time.time()

        if isinstance(tokens, TokenizationResult):
            token_list = tokens.tokens
            tokenization_result: Optional[TokenizationResult] = tokens
        else:
            token_list = list(tokens)
            tokenization_result = None

        self.logger.debug(
            "Starting tree building",
            extra={"token_count": len(token_list)}
        )

        result = ParseResult(correlation_id=self.correlation_id)
        if tokenization_result is not None:
            result.diagnostics.extend(tokenization_result.diagnostics)
            result.performance.characters_processed = tokenization_result.character_count

        self._stack = [result.tree]
        self._nodes_created = 0

        try:
            for token in token_list:
                self._process_token(token, result)
            self._close_unclosed_elements(result)
        except Exception as e:
            self.logger.error("Tree building failed")
            result.success = False
            result.add_diagnostic(
                DiagnosticSeverity.CRITICAL,
                f"Tree building failed: {e}",
                _COMPONENT,
                details={"exception_type": type(e).__name__},
            )

        result.performance.processing_time_ms = (time.time() - start_time) * 1000
        result.performance.tokens_generated = len(token_list)
        result.performance.nodes_created = self._nodes_created

        self.logger.debug(
            "Tree building completed",
            extra={
                "nodes_created": self._nodes_created,
                "diagnostic_count": len(result.diagnostics),
            }
        )
        return result

    @property
    def _current(self) -> Dom:
        return self._stack[-1]

    def _append(self, node: Dom) -> None:
        self._current.add_child(node)
        self._nodes_created += 1

    def _process_token(self, token: Token, result: ParseResult) -> None:
        if token.type is TokenType.START_TAG:
            self._handle_start_tag(token)
        elif token.type is TokenType.END_TAG:
            self._handle_end_tag(token, result)
        elif token.type in (TokenType.DOCTYPE, TokenType.PROCESSING_INSTRUCTION):
            self._append(Dom.from_tag(_tag_from_token(token)))
        elif token.type is TokenType.TEXT:
            self._append(Dom.from_text(token.value))
        elif token.type is TokenType.COMMENT:
            self._append(Dom.from_comment(token.value))
        else:
            raise AssertionError(f"Unhandled token type: {token.type}")

    def _handle_start_tag(self, token: Token) -> None:
        node = Dom.from_tag(_tag_from_token(token))
        self._append(node)
        if token.self_closing or token.value.lower() in self.config.void_elements:
            return
        self._stack.append(node)

    def _handle_end_tag(self, token: Token, result: ParseResult) -> None:
        """Pop open elements up to and including the one named by the closer."""
        name = token.value
        matching_index = -1
        # Index 0 is the root, which a closer never pops.
        for i in range(len(self._stack) - 1, 0, -1):
            tag = self._stack[i].tag
            if tag is not None and tag.name == name:
                matching_index = i
                break

        if matching_index < 0:
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                f"Orphaned closing tag </{name}> ignored",
                _COMPONENT,
                position=token.position.to_dict(),
            )
            self.logger.debug("Orphaned closing tag ignored", extra={"tag": name})
            return

        implicitly_closed = len(self._stack) - matching_index - 1
        if implicitly_closed:
            result.add_diagnostic(
                DiagnosticSeverity.INFO,
                f"Closing tag </{name}> implicitly closed {implicitly_closed} "
                "inner elements",
                _COMPONENT,
                position=token.position.to_dict(),
                details={
                    "closed": [
                        frame.tag.name for frame in self._stack[matching_index + 1:]
                        if frame.tag is not None
                    ],
                },
            )
        del self._stack[matching_index:]

    def _close_unclosed_elements(self, result: ParseResult) -> None:
        unclosed = self._stack[1:]
        if unclosed:
            result.add_diagnostic(
                DiagnosticSeverity.INFO,
                f"Auto-closed {len(unclosed)} unclosed elements at end of input",
                _COMPONENT,
                details={
                    "closed": [frame.tag.name for frame in unclosed if frame.tag is not None],
                },
            )
        del self._stack[1:]


__all__ = [
    "VOID_ELEMENTS",
    "ParseResult",
    "TreeBuilder",
]
