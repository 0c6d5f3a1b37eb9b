"""Tests for the character cursor."""

import re

import pytest

from parsercher.character import Cursor


class TestCursorBasics:
    """Test peeking and advancing."""

    def test_peek_returns_current_character(self) -> None:
        """Test peek does not move the cursor."""
        cursor = Cursor("abc")
        assert cursor.peek() == "a"
        assert cursor.peek() == "a"
        assert cursor.offset == 0

    def test_peek_on_empty_input_returns_none(self) -> None:
        """Test empty input starts at end-of-input."""
        cursor = Cursor("")
        assert cursor.peek() is None
        assert cursor.is_eof
        assert len(cursor) == 0

    def test_advance_at_eof_never_moves(self) -> None:
        """Test advancing past the end leaves the offset unchanged."""
        cursor = Cursor("ab")
        cursor.advance()
        cursor.advance()
        assert cursor.offset == 2
        for _ in range(5):
            cursor.advance()
        assert cursor.offset == 2
        assert cursor.peek() is None
        assert cursor.remaining == 0

    def test_peek_ahead(self) -> None:
        """Test lookahead by a fixed distance."""
        cursor = Cursor("abc")
        assert cursor.peek_ahead(0) == cursor.peek()
        assert cursor.peek_ahead(2) == "c"
        assert cursor.peek_ahead(3) is None
        assert cursor.peek_ahead(-1) is None

    def test_non_string_input_rejected(self) -> None:
        """Test cursor only accepts text."""
        with pytest.raises(TypeError, match="Cursor input must be a string"):
            Cursor(b"abc")  # type: ignore[arg-type]


class TestCursorPositioning:
    """Test absolute positioning and line tracking."""

    @pytest.mark.parametrize("pos,expected", [(-3, 0), (2, 2), (99, 4)])
    def test_set_cursor_clamps(self, pos: int, expected: int) -> None:
        """Test set_cursor clamps to the input bounds."""
        cursor = Cursor("abcd")
        cursor.set_cursor(pos)
        assert cursor.offset == expected

    def test_line_and_column_tracking(self) -> None:
        """Test line and column follow newlines."""
        cursor = Cursor("ab\ncd")
        assert (cursor.line, cursor.column) == (1, 1)
        cursor.advance_by(3)
        assert (cursor.line, cursor.column) == (2, 1)
        cursor.advance()
        assert (cursor.line, cursor.column) == (2, 2)

    def test_advance_to_backwards_recomputes_position(self) -> None:
        """Test moving backwards keeps line and column consistent."""
        cursor = Cursor("ab\ncd\nef")
        cursor.advance_to(7)
        assert (cursor.line, cursor.column) == (3, 2)
        cursor.advance_to(1)
        assert (cursor.offset, cursor.line, cursor.column) == (1, 1, 2)

    def test_advance_by_negative_is_noop(self) -> None:
        """Test negative distances do not move the cursor."""
        cursor = Cursor("abc")
        cursor.advance()
        cursor.advance_by(-2)
        assert cursor.offset == 1


class TestCursorScanning:
    """Test the scanning helpers."""

    def test_startswith_case_handling(self) -> None:
        """Test prefix checks with and without case folding."""
        cursor = Cursor("<!DocType html>")
        assert cursor.startswith("<!DocType")
        assert not cursor.startswith("<!doctype")
        assert cursor.startswith("<!doctype", ignore_case=True)

    def test_find_returns_absolute_index(self) -> None:
        """Test find searches from the offset and reports absolute positions."""
        cursor = Cursor("a>b>c")
        cursor.advance_by(2)
        assert cursor.find(">") == 3
        assert cursor.find("z") is None

    def test_search_uses_offset(self) -> None:
        """Test regex search starts at the offset."""
        cursor = Cursor("</a> </A>")
        cursor.advance()
        match = cursor.search(re.compile(r"</a", re.IGNORECASE))
        assert match is not None
        assert match.start() == 5

    def test_consume_while_and_skip_whitespace(self) -> None:
        """Test consuming runs of characters."""
        cursor = Cursor("abc  \n d")
        assert cursor.consume_while(str.isalpha) == "abc"
        cursor.skip_whitespace()
        assert cursor.peek() == "d"
        assert cursor.line == 2

    def test_slice(self) -> None:
        """Test slicing the underlying text."""
        cursor = Cursor("hello")
        assert cursor.slice(1, 3) == "el"
        assert cursor.slice(2) == "llo"
