"""Tag tokenizer for HTML/XML-like markup.

Scans the input through a ``Cursor`` and emits structural tokens: start tags
(with their attributes), end tags, text runs, comments, doctype declarations
and processing instructions. The tokenizer is lenient by contract: an
unterminated tag, quote, comment or raw-text element is captured to
end-of-input and reported as a diagnostic, never raised.
"""

import logging
import re
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional, Tuple

from parsercher.character import Cursor
from parsercher.shared import (
    RAW_TEXT_ELEMENTS,
    DiagnosticEntry,
    DiagnosticSeverity,
    TokenizerConfig,
)

COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"
CDATA_OPEN = "<![CDATA["
CDATA_CLOSE = "]]>"
DOCTYPE_KEYWORD = "<!doctype"
PI_CLOSE = "?>"

_COMPONENT = "tag_tokenizer"

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Structural token types emitted by the tokenizer."""

    START_TAG = auto()                 # <name attr="v"> or <name/>
    END_TAG = auto()                   # </name>
    TEXT = auto()                      # Character run between markup
    COMMENT = auto()                   # <!-- ... -->
    DOCTYPE = auto()                   # <!DOCTYPE ...>
    PROCESSING_INSTRUCTION = auto()    # <?target ...?>


class TokenizerState(Enum):
    """Scanning modes of the tokenizer."""

    DATA = auto()       # Markup is recognized
    RAW_TEXT = auto()   # Inside a raw-text element, markup is not recognized


@dataclass
class TokenPosition:
    """Position of a token's first character."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")

    def to_dict(self) -> Dict[str, int]:
        return {"line": self.line, "column": self.column, "offset": self.offset}


@dataclass
class Token:
    """A single structural token.

    ``value`` holds the tag name for tag-like tokens, and the literal content
    for text and comment tokens.
    """

    type: TokenType
    value: str
    position: TokenPosition
    attributes: Dict[str, str] = field(default_factory=dict)
    self_closing: bool = False

    @property
    def is_tag(self) -> bool:
        return self.type in (
            TokenType.START_TAG,
            TokenType.END_TAG,
            TokenType.DOCTYPE,
            TokenType.PROCESSING_INSTRUCTION,
        )


@dataclass
class TokenizationResult:
    """Tokens produced from one document plus recovery diagnostics."""

    tokens: List[Token]
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    character_count: int = 0
    processing_time: float = 0.0

    @property
    def token_count(self) -> int:
        return len(self.tokens)

    @property
    def has_recoveries(self) -> bool:
        return any(diag.is_problem for diag in self.diagnostics)

    def count_by_type(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for token in self.tokens:
            counts[token.type.name] = counts.get(token.type.name, 0) + 1
        return counts


def _is_name_start_char(char: Optional[str]) -> bool:
    return char is not None and (char.isalpha() or char in "_:")


def _ends_tag_name(char: str) -> bool:
    return char.isspace() or char in "/>"


class TagTokenizer:
    """Tokenizer that converts markup text into structural tokens.

    Examples:
        >>> result = TagTokenizer().tokenize('<a href=x>hi</a>')
        >>> [(t.type.name, t.value) for t in result.tokens]
        [('START_TAG', 'a'), ('TEXT', 'hi'), ('END_TAG', 'a')]
    """

    def __init__(
        self,
        config: Optional[TokenizerConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or TokenizerConfig()
        self.correlation_id = correlation_id
        self._raw_close_patterns: Dict[str, "re.Pattern[str]"] = {}
        self._reset_state("")

    def _reset_state(self, text: str) -> None:
        self._cursor = Cursor(text)
        self.state = TokenizerState.DATA
        self._raw_text_tag: Optional[str] = None
        self.tokens: List[Token] = []
        self.diagnostics: List[DiagnosticEntry] = []

    def tokenize(self, text: str) -> TokenizationResult:
        """Tokenize a whole document.

        Args:
            text: Markup to tokenize

        Returns:
            TokenizationResult with tokens in document order
        """
        start_time = time.time()
        self._reset_state(text)

        logger.debug(
            "Starting tokenization",
            extra={
                "component": _COMPONENT,
                "correlation_id": self.correlation_id,
                "char_count": len(text),
            }
        )

        cursor = self._cursor
        while not cursor.is_eof:
            if self.state is TokenizerState.RAW_TEXT:
                self._scan_raw_text()
            elif cursor.peek() == "<" and self._at_markup_start():
                self._scan_markup()
            else:
                self._scan_text()

        result = TokenizationResult(
            tokens=self.tokens,
            diagnostics=self.diagnostics,
            character_count=len(text),
            processing_time=time.time() - start_time,
        )

        logger.debug(
            "Tokenization completed",
            extra={
                "component": _COMPONENT,
                "correlation_id": self.correlation_id,
                "token_count": result.token_count,
                "diagnostic_count": len(result.diagnostics),
            }
        )
        return result

    def _position(self) -> TokenPosition:
        cursor = self._cursor
        return TokenPosition(cursor.line, cursor.column, cursor.offset)

    def _emit(
        self,
        token_type: TokenType,
        value: str,
        position: TokenPosition,
        attributes: Optional[Dict[str, str]] = None,
        self_closing: bool = False
    ) -> Token:
        token = Token(
            type=token_type,
            value=value,
            position=position,
            attributes=attributes or {},
            self_closing=self_closing,
        )
        self.tokens.append(token)
        return token

    def _emit_text(self, text: str, position: TokenPosition) -> None:
        if not text:
            return
        if not self.config.keep_whitespace_text and text.isspace():
            return
        self._emit(TokenType.TEXT, text, position)

    def _recover(self, message: str, position: TokenPosition, **details: str) -> None:
        """Record a lenient recovery as a diagnostic."""
        self.diagnostics.append(DiagnosticEntry(
            severity=DiagnosticSeverity.WARNING,
            message=message,
            component=_COMPONENT,
            position=position.to_dict(),
            details=details or None,
            correlation_id=self.correlation_id,
        ))
        logger.debug(
            message,
            extra={
                "component": _COMPONENT,
                "correlation_id": self.correlation_id,
                "offset": position.offset,
            }
        )

    def _at_markup_start(self) -> bool:
        """Decide whether the '<' at the cursor opens markup or is literal text."""
        nxt = self._cursor.peek_ahead(1)
        if nxt == "!":
            return True
        if nxt == "?":
            return self.config.recognize_processing_instructions
        if nxt == "/":
            return _is_name_start_char(self._cursor.peek_ahead(2))
        return _is_name_start_char(nxt)

    def _scan_text(self) -> None:
        cursor = self._cursor
        position = self._position()
        start = cursor.offset

        # The character at the cursor is either text or a literal '<'.
        cursor.advance()
        while not cursor.is_eof:
            next_lt = cursor.find("<")
            if next_lt is None:
                cursor.advance_to(len(cursor))
                break
            cursor.advance_to(next_lt)
            if self._at_markup_start():
                break
            cursor.advance()

        self._emit_text(cursor.slice(start, cursor.offset), position)

    def _scan_markup(self) -> None:
        cursor = self._cursor
        if cursor.startswith(COMMENT_OPEN):
            self._scan_comment()
        elif cursor.startswith(CDATA_OPEN):
            if self.config.recognize_cdata:
                self._scan_cdata()
            else:
                self._scan_bogus_comment()
        elif cursor.startswith(DOCTYPE_KEYWORD, ignore_case=True):
            self._scan_doctype()
        elif cursor.peek_ahead(1) == "!":
            self._scan_bogus_comment()
        elif cursor.peek_ahead(1) == "?":
            self._scan_processing_instruction()
        elif cursor.peek_ahead(1) == "/":
            self._scan_end_tag()
        else:
            self._scan_start_tag()

    def _capture_until(self, terminator: str, position: TokenPosition, what: str) -> str:
        """Return content up to ``terminator`` and move past it.

        Without a terminator the rest of the input is captured.
        """
        cursor = self._cursor
        start = cursor.offset
        end = cursor.find(terminator)
        if end is None:
            self._recover(
                f"Unterminated {what} captured to end of input",
                position,
                expected=terminator,
            )
            cursor.advance_to(len(cursor))
            return cursor.slice(start)
        cursor.advance_to(end + len(terminator))
        return cursor.slice(start, end)

    def _scan_comment(self) -> None:
        position = self._position()
        self._cursor.advance_by(len(COMMENT_OPEN))
        content = self._capture_until(COMMENT_CLOSE, position, "comment")
        self._emit(TokenType.COMMENT, content, position)

    def _scan_cdata(self) -> None:
        position = self._position()
        self._cursor.advance_by(len(CDATA_OPEN))
        content = self._capture_until(CDATA_CLOSE, position, "CDATA section")
        if content:
            self._emit(TokenType.TEXT, content, position)

    def _scan_bogus_comment(self) -> None:
        """Treat ``<!...>`` that is neither comment nor doctype as a comment."""
        position = self._position()
        self._cursor.advance_by(2)
        content = self._capture_until(">", position, "declaration")
        self._emit(TokenType.COMMENT, content, position)

    def _scan_doctype(self) -> None:
        """Scan ``<!DOCTYPE ...>``.

        The keyword keeps its original spelling as the tag name, and the rest
        of the declaration becomes a single attribute name with an empty value.
        """
        cursor = self._cursor
        position = self._position()
        cursor.advance()
        name = cursor.slice(cursor.offset, cursor.offset + len(DOCTYPE_KEYWORD) - 1)
        cursor.advance_by(len(name))
        content = self._capture_until(">", position, "doctype").strip()
        attributes = {content: ""} if content else {}
        self._emit(TokenType.DOCTYPE, name, position, attributes, self_closing=True)

    def _scan_processing_instruction(self) -> None:
        """Scan ``<?target attr="v"?>`` into a self-closing tag-like token."""
        cursor = self._cursor
        position = self._position()
        cursor.advance_by(2)
        end = cursor.find(PI_CLOSE)
        terminator = PI_CLOSE if end is not None else ">"
        body = self._capture_until(terminator, position, "processing instruction")

        inner = Cursor(body)
        target = inner.consume_while(lambda c: not c.isspace())
        attributes, _, _ = self._read_attributes(inner, position)
        self._emit(
            TokenType.PROCESSING_INSTRUCTION,
            "?" + target,
            position,
            attributes,
            self_closing=True,
        )

    def _scan_end_tag(self) -> None:
        cursor = self._cursor
        position = self._position()
        cursor.advance_by(2)
        name = cursor.consume_while(lambda c: not _ends_tag_name(c))
        self._capture_until(">", position, "end tag")
        self._emit(TokenType.END_TAG, name, position)

    def _scan_start_tag(self) -> None:
        cursor = self._cursor
        position = self._position()
        cursor.advance()
        name = cursor.consume_while(lambda c: not _ends_tag_name(c))
        attributes, self_closing, closed = self._read_attributes(cursor, position)
        if not closed:
            self._recover(
                f"Unterminated start tag <{name}> captured to end of input",
                position,
                tag=name,
            )
        self._emit(TokenType.START_TAG, name, position, attributes, self_closing)

        if not self_closing and name.lower() in self.config.raw_text_elements:
            self.state = TokenizerState.RAW_TEXT
            self._raw_text_tag = name

    def _read_attributes(
        self, cursor: Cursor, position: TokenPosition
    ) -> Tuple[Dict[str, str], bool, bool]:
        """Read attributes up to and including the closing '>'.

        Returns:
            Tuple of (attributes, self_closing, closed). ``closed`` is False
            when input ended before '>'.
        """
        attributes: Dict[str, str] = {}
        while True:
            cursor.skip_whitespace()
            char = cursor.peek()
            if char is None:
                return attributes, False, False
            if char == ">":
                cursor.advance()
                return attributes, False, True
            if char == "/":
                cursor.advance()
                if cursor.peek() == ">":
                    cursor.advance()
                    return attributes, True, True
                continue
            if char == "=":
                # Stray '=' without an attribute name
                cursor.advance()
                continue

            name = cursor.consume_while(lambda c: not (c.isspace() or c in "=/>"))
            cursor.skip_whitespace()
            value = ""
            if cursor.peek() == "=":
                cursor.advance()
                cursor.skip_whitespace()
                value = self._read_attribute_value(cursor, position)

            if name in attributes:
                logger.debug(
                    "Duplicate attribute ignored",
                    extra={
                        "component": _COMPONENT,
                        "correlation_id": self.correlation_id,
                        "attribute": name,
                    }
                )
            else:
                attributes[name] = value

    def _read_attribute_value(self, cursor: Cursor, position: TokenPosition) -> str:
        quote = cursor.peek()
        if quote in ('"', "'"):
            cursor.advance()
            start = cursor.offset
            end = cursor.find(quote)
            if end is None:
                self._recover(
                    "Unterminated attribute quote captured to end of input",
                    position,
                    quote=quote,
                )
                cursor.advance_to(len(cursor))
                return cursor.slice(start)
            cursor.advance_to(end + 1)
            return cursor.slice(start, end)
        return cursor.consume_while(lambda c: not (c.isspace() or c == ">"))

    def _raw_close_pattern(self, name: str) -> "re.Pattern[str]":
        key = name.lower()
        pattern = self._raw_close_patterns.get(key)
        if pattern is None:
            pattern = re.compile(
                r"</" + re.escape(key) + r"(?=[\s/>]|$)", re.IGNORECASE
            )
            self._raw_close_patterns[key] = pattern
        return pattern

    def _scan_raw_text(self) -> None:
        """Capture raw-text element content and its closing tag.

        Content is emitted verbatim, whitespace-only content included. The
        closer is emitted with the opener's spelling so the tree builder
        closes the same element whatever case the closer was written in.
        """
        cursor = self._cursor
        position = self._position()
        tag_name = self._raw_text_tag or ""
        match = cursor.search(self._raw_close_pattern(tag_name))
        if match is None:
            self._recover(
                f"Unterminated <{tag_name}> content captured to end of input",
                position,
                tag=tag_name,
            )
            end = len(cursor)
        else:
            end = match.start()

        content = cursor.slice(cursor.offset, end)
        cursor.advance_to(end)
        if content:
            self._emit(TokenType.TEXT, content, position)

        if match is not None:
            close_position = self._position()
            cursor.advance_to(match.end())
            self._capture_until(">", close_position, "end tag")
            self._emit(TokenType.END_TAG, tag_name, close_position)

        self.state = TokenizerState.DATA
        self._raw_text_tag = None


__all__ = [
    "RAW_TEXT_ELEMENTS",
    "TagTokenizer",
    "Token",
    "TokenizationResult",
    "TokenizerState",
    "TokenPosition",
    "TokenType",
]
