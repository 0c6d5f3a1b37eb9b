"""Tests for the tag tokenizer.

Covers tag and attribute scanning, comments and declarations, raw-text
capture, and lenient recovery from truncated input.
"""

from typing import List, Tuple

import pytest

from parsercher.shared import DiagnosticSeverity, TokenizerConfig
from parsercher.tokenization import (
    RAW_TEXT_ELEMENTS,
    TagTokenizer,
    TokenizationResult,
    TokenizerState,
    TokenPosition,
    TokenType,
)


def tokenize(text: str, **config_kwargs) -> TokenizationResult:
    config = TokenizerConfig(**config_kwargs) if config_kwargs else None
    return TagTokenizer(config).tokenize(text)


def kinds(result: TokenizationResult) -> List[Tuple[str, str]]:
    return [(token.type.name, token.value) for token in result.tokens]


class TestTokenPosition:
    """Test token position validation."""

    def test_valid_position(self) -> None:
        """Test a valid position converts to a dict."""
        position = TokenPosition(line=2, column=3, offset=10)
        assert position.to_dict() == {"line": 2, "column": 3, "offset": 10}

    def test_invalid_line_raises_error(self) -> None:
        """Test lines are 1-based."""
        with pytest.raises(ValueError, match="Line number must be >= 1"):
            TokenPosition(line=0, column=1, offset=0)

    def test_invalid_offset_raises_error(self) -> None:
        """Test offsets cannot be negative."""
        with pytest.raises(ValueError, match="Offset must be >= 0"):
            TokenPosition(line=1, column=1, offset=-1)


class TestTagScanning:
    """Test start tags, end tags and attributes."""

    def test_simple_element(self) -> None:
        """Test a start tag, text and end tag."""
        result = tokenize("<p>hello</p>")
        assert kinds(result) == [
            ("START_TAG", "p"),
            ("TEXT", "hello"),
            ("END_TAG", "p"),
        ]
        assert not result.has_recoveries

    @pytest.mark.parametrize("markup", [
        "<a href='x'>",
        '<a href="x">',
        "<a href=x>",
    ])
    def test_quote_styles(self, markup: str) -> None:
        """Test single, double and unquoted attribute values."""
        token = tokenize(markup).tokens[0]
        assert token.attributes == {"href": "x"}

    def test_attribute_order_and_bare_names(self) -> None:
        """Test attribute order is kept and bare names get empty values."""
        token = tokenize('<input type="checkbox" checked id = "c1">').tokens[0]
        assert list(token.attributes.items()) == [
            ("type", "checkbox"),
            ("checked", ""),
            ("id", "c1"),
        ]

    def test_quoted_value_may_contain_markup_characters(self) -> None:
        """Test '>' and whitespace inside quotes belong to the value."""
        token = tokenize('<a title="a > b" data-x=\'1 2\'>').tokens[0]
        assert token.attributes == {"title": "a > b", "data-x": "1 2"}

    def test_duplicate_attribute_keeps_first_value(self) -> None:
        """Test a repeated attribute name does not overwrite the first."""
        token = tokenize('<div class="a" class="b">').tokens[0]
        assert token.attributes == {"class": "a"}

    def test_self_closing_tag(self) -> None:
        """Test '/>' marks the token as self-closing."""
        result = tokenize('<br/><img src="a.png" />')
        assert [t.self_closing for t in result.tokens] == [True, True]
        assert result.tokens[1].attributes == {"src": "a.png"}

    def test_tag_name_case_preserved(self) -> None:
        """Test tag names are reported as written."""
        assert kinds(tokenize("<DiV></DiV>")) == [
            ("START_TAG", "DiV"),
            ("END_TAG", "DiV"),
        ]

    def test_literal_less_than_is_text(self) -> None:
        """Test '<' not followed by a name, '/', '!' or '?' stays in the text."""
        result = tokenize("a < b <3 </ c")
        assert kinds(result) == [("TEXT", "a < b <3 </ c")]

    def test_positions_are_recorded(self) -> None:
        """Test tokens carry the position of their first character."""
        result = tokenize("<a>\n  <b>x</b></a>")
        b_token = result.tokens[1]
        assert b_token.value == "b"
        assert b_token.position.line == 2
        assert b_token.position.column == 3
        assert b_token.position.offset == 6


class TestDeclarations:
    """Test comments, doctype, CDATA and processing instructions."""

    def test_comment(self) -> None:
        """Test comment delimiters are stripped."""
        assert kinds(tokenize("<!-- note --><p>")) == [
            ("COMMENT", " note "),
            ("START_TAG", "p"),
        ]

    def test_comment_ends_at_first_terminator(self) -> None:
        """Test comment scanning is non-greedy."""
        result = tokenize("<!--a-->b<!--c-->")
        assert kinds(result) == [("COMMENT", "a"), ("TEXT", "b"), ("COMMENT", "c")]

    def test_doctype_pseudo_attribute(self) -> None:
        """Test doctype content becomes one attribute with an empty value."""
        token = tokenize("<!DOCTYPE html>").tokens[0]
        assert token.type is TokenType.DOCTYPE
        assert token.value == "!DOCTYPE"
        assert token.attributes == {"html": ""}
        assert token.self_closing

    def test_doctype_keyword_case_insensitive(self) -> None:
        """Test lowercase doctype keeps its spelling."""
        token = tokenize("<!doctype html>").tokens[0]
        assert token.type is TokenType.DOCTYPE
        assert token.value == "!doctype"

    def test_bare_doctype_has_no_attributes(self) -> None:
        """Test an empty doctype carries no pseudo-attribute."""
        assert tokenize("<!DOCTYPE>").tokens[0].attributes == {}

    def test_cdata_becomes_text(self) -> None:
        """Test CDATA content is emitted verbatim as text."""
        assert kinds(tokenize("<x><![CDATA[a <b> c]]></x>")) == [
            ("START_TAG", "x"),
            ("TEXT", "a <b> c"),
            ("END_TAG", "x"),
        ]

    def test_cdata_disabled_becomes_bogus_comment(self) -> None:
        """Test CDATA is treated as a declaration when not recognized."""
        result = tokenize("<![CDATA[x]]>", recognize_cdata=False)
        assert kinds(result) == [("COMMENT", "[CDATA[x]]")]

    def test_bogus_comment(self) -> None:
        """Test an unknown declaration becomes a comment."""
        assert kinds(tokenize("<!ELEMENT br EMPTY>")) == [
            ("COMMENT", "ELEMENT br EMPTY"),
        ]

    def test_processing_instruction(self) -> None:
        """Test processing instructions become self-closing tag tokens."""
        token = tokenize('<?xml version="1.0" encoding="UTF-8"?>').tokens[0]
        assert token.type is TokenType.PROCESSING_INSTRUCTION
        assert token.value == "?xml"
        assert token.attributes == {"version": "1.0", "encoding": "UTF-8"}
        assert token.self_closing

    def test_processing_instruction_disabled_is_text(self) -> None:
        """Test '<?' is literal text when processing instructions are off."""
        result = tokenize("<?php echo 1 ?>", recognize_processing_instructions=False)
        assert kinds(result) == [("TEXT", "<?php echo 1 ?>")]


class TestRawText:
    """Test raw-text capture for script-like elements."""

    def test_default_raw_text_table(self) -> None:
        """Test the documented raw-text elements."""
        assert {"script", "style", "textarea", "title"} <= RAW_TEXT_ELEMENTS

    def test_script_content_not_tokenized(self) -> None:
        """Test '<' inside script is part of one text token."""
        result = tokenize("<script>if (a<b) {}</script>")
        assert kinds(result) == [
            ("START_TAG", "script"),
            ("TEXT", "if (a<b) {}"),
            ("END_TAG", "script"),
        ]

    def test_raw_text_ignores_other_closing_tags(self) -> None:
        """Test only the matching closer ends raw capture."""
        result = tokenize("<script>document.write('</div>')</script>")
        assert result.tokens[1].value == "document.write('</div>')"

    def test_raw_text_closer_case_insensitive(self) -> None:
        """Test the closer matches in any case and takes the opener's spelling."""
        result = tokenize("<SCRIPT>x<y</Script>")
        assert kinds(result) == [
            ("START_TAG", "SCRIPT"),
            ("TEXT", "x<y"),
            ("END_TAG", "SCRIPT"),
        ]

    def test_whitespace_only_raw_text_kept(self) -> None:
        """Test raw-text content is kept verbatim even when only whitespace."""
        result = tokenize("<textarea>  </textarea>")
        assert kinds(result) == [
            ("START_TAG", "textarea"),
            ("TEXT", "  "),
            ("END_TAG", "textarea"),
        ]

    def test_raw_text_closer_needs_name_boundary(self) -> None:
        """Test '</scripts' does not end a script element."""
        result = tokenize("<script>a</scripts>b</script>")
        assert result.tokens[1].value == "a</scripts>b"

    def test_self_closing_raw_text_element(self) -> None:
        """Test a self-closed script does not start raw capture."""
        result = tokenize("<script/><p>x</p>")
        assert [t.value for t in result.tokens] == ["script", "p", "x", "p"]

    def test_configured_raw_text_elements(self) -> None:
        """Test raw-text elements come from configuration."""
        result = tokenize("<code><b></code>", raw_text_elements=["code"])
        assert kinds(result) == [
            ("START_TAG", "code"),
            ("TEXT", "<b>"),
            ("END_TAG", "code"),
        ]

    def test_tokenizer_returns_to_data_state(self) -> None:
        """Test tokenizing ends outside raw capture after a closed element."""
        tokenizer = TagTokenizer()
        tokenizer.tokenize("<style>a{}</style>")
        assert tokenizer.state is TokenizerState.DATA


class TestWhitespaceText:
    """Test handling of whitespace-only text runs."""

    def test_whitespace_between_tags_dropped_by_default(self) -> None:
        """Test indentation does not produce text tokens."""
        result = tokenize("<ul>\n  <li>a b</li>\n</ul>")
        assert kinds(result) == [
            ("START_TAG", "ul"),
            ("START_TAG", "li"),
            ("TEXT", "a b"),
            ("END_TAG", "li"),
            ("END_TAG", "ul"),
        ]

    def test_whitespace_kept_when_configured(self) -> None:
        """Test whitespace-only text survives with keep_whitespace_text."""
        result = tokenize("<a> </a>", keep_whitespace_text=True)
        assert kinds(result)[1] == ("TEXT", " ")

    def test_text_keeps_surrounding_whitespace(self) -> None:
        """Test text with content is preserved as-is."""
        assert kinds(tokenize("<p> hi </p>"))[1] == ("TEXT", " hi ")


class TestRecovery:
    """Test lenient handling of truncated input."""

    def test_unterminated_comment(self) -> None:
        """Test an open comment runs to end of input."""
        result = tokenize("<p><!-- never closed")
        assert kinds(result)[-1] == ("COMMENT", " never closed")
        assert result.has_recoveries
        assert result.diagnostics[0].severity is DiagnosticSeverity.WARNING

    def test_unterminated_start_tag(self) -> None:
        """Test a start tag cut off by end of input is still emitted."""
        result = tokenize('<a href="x" id=y')
        assert kinds(result) == [("START_TAG", "a")]
        assert result.tokens[0].attributes == {"href": "x", "id": "y"}
        assert "Unterminated start tag" in result.diagnostics[0].message

    def test_unterminated_quote(self) -> None:
        """Test an open quote captures the rest of the input."""
        result = tokenize('<a title="oops>text')
        assert result.tokens[0].attributes == {"title": "oops>text"}
        assert len(result.diagnostics) == 2

    def test_unterminated_raw_text(self) -> None:
        """Test raw capture without a closer runs to end of input."""
        result = tokenize("<script>var a = 1;")
        assert kinds(result) == [("START_TAG", "script"), ("TEXT", "var a = 1;")]
        assert result.diagnostics[0].details == {"tag": "script"}

    def test_unterminated_end_tag(self) -> None:
        """Test an end tag without '>' is still emitted."""
        result = tokenize("<a>x</a")
        assert kinds(result)[-1] == ("END_TAG", "a")
        assert result.has_recoveries

    def test_diagnostics_carry_correlation_id(self) -> None:
        """Test recoveries are stamped with the tokenizer's correlation ID."""
        result = TagTokenizer(correlation_id="req-1").tokenize("<!--")
        assert result.diagnostics[0].correlation_id == "req-1"
        assert result.diagnostics[0].component == "tag_tokenizer"


class TestTokenizationResult:
    """Test result helpers."""

    def test_counts(self) -> None:
        """Test token counting helpers."""
        result = tokenize("<a><!--c-->t</a>")
        assert result.token_count == 4
        assert result.character_count == len("<a><!--c-->t</a>")
        assert result.count_by_type() == {
            "START_TAG": 1,
            "COMMENT": 1,
            "TEXT": 1,
            "END_TAG": 1,
        }

    def test_empty_input(self) -> None:
        """Test empty input yields no tokens."""
        result = tokenize("")
        assert result.tokens == []
        assert not result.has_recoveries

    def test_tokenizer_reuse_resets_state(self) -> None:
        """Test a tokenizer instance can be reused."""
        tokenizer = TagTokenizer()
        tokenizer.tokenize("<script>unterminated")
        result = tokenizer.tokenize("<p>x</p>")
        assert [t.value for t in result.tokens] == ["p", "x", "p"]
        assert result.diagnostics == []
