"""Parser API for tag documents.

Module-level functions cover one-off parsing; ``MarkupParser`` keeps a
configured tokenizer and tree builder for reuse across many documents and
tracks usage statistics.
"""

import os
import time
from typing import Any, Dict, Optional, Tuple, Union

import psutil

from parsercher.shared import ParserConfig, get_logger
from parsercher.tokenization import TagTokenizer
from parsercher.tree import Dom, ParseResult, TreeBuilder

InputType = Union[str, bytes]

MS_PER_SECOND = 1000


class ParseError(Exception):
    """Raised for input the parser cannot make any progress on.

    Malformed markup never raises; only unrecoverable input such as an empty
    document does.
    """

    def __init__(self, message: str, position: Optional[Dict[str, int]] = None):
        super().__init__(message)
        self.message = message
        self.position = position


def _decode_input(document: InputType) -> str:
    """Return ``document`` as text, decoding bytes as UTF-8 with replacement."""
    if isinstance(document, str):
        return document
    if isinstance(document, (bytes, bytearray)):
        return bytes(document).decode("utf-8", errors="replace")
    raise TypeError(
        f"Document must be str or bytes, not {type(document).__name__}"
    )


def _rss_bytes() -> int:
    return psutil.Process(os.getpid()).memory_info().rss


def _run_pipeline(
    text: str,
    tokenizer: TagTokenizer,
    tree_builder: TreeBuilder,
    config: ParserConfig
) -> Tuple[ParseResult, float]:
    """Tokenize and build ``text``, filling in whole-pipeline metrics."""
    if not text and config.reject_empty_input:
        raise ParseError("Cannot parse an empty document", position={"offset": 0})

    start_time = time.time()
    memory_before = _rss_bytes() if config.enable_metrics else 0

    tokenization_result = tokenizer.tokenize(text)
    result = tree_builder.build(tokenization_result)

    processing_time = (time.time() - start_time) * MS_PER_SECOND
    result.performance.processing_time_ms = processing_time
    result.performance.characters_processed = len(text)
    if config.enable_metrics:
        result.performance.memory_used_bytes = max(0, _rss_bytes() - memory_before)
    return result, processing_time


def parse_with_diagnostics(
    document: InputType,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse a document and return the tree with diagnostics and metrics.

    Args:
        document: Markup as str, or bytes decoded as UTF-8
        config: Parser configuration (defaults to the HTML preset)
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ParseResult whose ``tree`` is the synthetic root node

    Raises:
        ParseError: the document is empty and empty input is rejected
        TypeError: the document is neither str nor bytes

    Examples:
        >>> result = parse_with_diagnostics("<ul><li>a</ul></div>")
        >>> [d.severity.name for d in result.diagnostics]
        ['INFO', 'WARNING']
    """
    config = config or ParserConfig()
    correlation_id = correlation_id or config.correlation_id
    logger = get_logger(__name__, correlation_id, "parse")

    text = _decode_input(document)
    logger.info(
        "Starting parse operation",
        extra={
            "input_type": type(document).__name__,
            "char_count": len(text),
        }
    )

    tokenizer = TagTokenizer(config.tokenizer, correlation_id)
    tree_builder = TreeBuilder(config.tree, correlation_id)
    result, processing_time = _run_pipeline(text, tokenizer, tree_builder, config)

    logger.info(
        "Parse completed",
        extra={
            "success": result.success,
            "node_count": result.performance.nodes_created,
            "diagnostic_count": len(result.diagnostics),
            "processing_time_ms": processing_time,
        }
    )
    return result


def parse(document: InputType, config: Optional[ParserConfig] = None) -> Dom:
    """Parse a document into a tree rooted at a synthetic ``root`` tag.

    Raises:
        ParseError: the document is empty and empty input is rejected, or
            tree building failed
        TypeError: the document is neither str nor bytes

    Examples:
        >>> root = parse('<!DOCTYPE html><p class="x">hi</p>')
        >>> [child.tag.name for child in root.children]
        ['!DOCTYPE', 'p']
    """
    result = parse_with_diagnostics(document, config)
    if not result.success:
        failures = [diag.message for diag in result.diagnostics if diag.is_problem]
        raise ParseError(failures[-1] if failures else "Tree building failed")
    return result.tree


class MarkupParser:
    """Reusable parser with a fixed configuration.

    Attributes:
        config: Current parser configuration
        correlation_id: Correlation ID for request tracking

    Examples:
        >>> parser = MarkupParser(ParserConfig.xml())
        >>> results = [parser.parse(doc) for doc in ("<a/>", "<b></b>")]
        >>> parser.statistics["total_parses"]
        2
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id or self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "markup_parser")

        self._build_components()

        self._parse_count = 0
        self._successful_parses = 0
        self._rejected_inputs = 0
        self._total_processing_time = 0.0

        self.logger.info(
            "MarkupParser initialized",
            extra={"config_name": self.config.name}
        )

    def _build_components(self) -> None:
        self._tokenizer = TagTokenizer(self.config.tokenizer, self.correlation_id)
        self._tree_builder = TreeBuilder(self.config.tree, self.correlation_id)

    def parse(self, document: InputType) -> ParseResult:
        """Parse a document with this parser's configuration.

        Raises:
            ParseError: the document is empty and empty input is rejected
            TypeError: the document is neither str nor bytes
        """
        text = _decode_input(document)
        self._parse_count += 1

        try:
            result, processing_time = _run_pipeline(
                text, self._tokenizer, self._tree_builder, self.config
            )
        except ParseError:
            self._rejected_inputs += 1
            self.logger.warning("Rejected empty document")
            raise

        self._total_processing_time += processing_time
        if result.success:
            self._successful_parses += 1

        self.logger.info(
            "Parse completed",
            extra={
                "success": result.success,
                "problem_count": sum(
                    1 for diag in result.diagnostics if diag.is_problem
                ),
                "processing_time_ms": processing_time,
                "total_parses": self._parse_count,
            }
        )
        return result

    def parse_tree(self, document: InputType) -> Dom:
        """Parse a document and return only its tree."""
        return self.parse(document).tree

    def reconfigure(self, config: Optional[ParserConfig] = None, **overrides: Any) -> None:
        """Replace the configuration, or apply ``ParserConfig.override`` keywords.

        Examples:
            >>> parser = MarkupParser()
            >>> parser.reconfigure(tokenizer__keep_whitespace_text=True)
            >>> parser.config.tokenizer.keep_whitespace_text
            True
        """
        new_config = config or self.config
        if overrides:
            new_config = new_config.override(**overrides)
        self.config = new_config
        self._build_components()

        self.logger.info(
            "Parser reconfigured",
            extra={
                "config_replaced": config is not None,
                "override_count": len(overrides),
            }
        )

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        return {
            "total_parses": self._parse_count,
            "successful_parses": self._successful_parses,
            "rejected_inputs": self._rejected_inputs,
            "success_rate": (
                self._successful_parses / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._successful_parses
                if self._successful_parses > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._successful_parses = 0
        self._rejected_inputs = 0
        self._total_processing_time = 0.0

        self.logger.info("Parser statistics reset")


__all__ = [
    "InputType",
    "MarkupParser",
    "ParseError",
    "parse",
    "parse_with_diagnostics",
]
