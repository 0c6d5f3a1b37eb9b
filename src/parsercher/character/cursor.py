"""Read cursor over the raw character input.

The cursor holds a reference to the input string and a read offset that never
leaves ``[0, len(text)]``. Advancing at end-of-input is a no-op, so scanning
loops can call ``advance()`` unconditionally without running past the buffer.
"""

import re
from typing import Callable, Optional


class Cursor:
    """Movable read position over a character sequence.

    Tracks 1-based line and column numbers alongside the offset for
    diagnostics.

    Examples:
        >>> cursor = Cursor("ab")
        >>> cursor.peek(), cursor.peek_ahead(1)
        ('a', 'b')
        >>> cursor.advance(); cursor.advance(); cursor.advance()
        >>> cursor.offset, cursor.peek()
        (2, None)
    """

    def __init__(self, text: str) -> None:
        if not isinstance(text, str):
            raise TypeError("Cursor input must be a string")
        self._text = text
        self._length = len(text)
        self._offset = 0
        self._line = 1
        self._column = 1

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        return f"Cursor(offset={self._offset}, length={self._length})"

    @property
    def text(self) -> str:
        return self._text

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def line(self) -> int:
        return self._line

    @property
    def column(self) -> int:
        return self._column

    @property
    def is_eof(self) -> bool:
        return self._offset >= self._length

    @property
    def remaining(self) -> int:
        return self._length - self._offset

    def peek(self) -> Optional[str]:
        """Return the character at the offset, or None at end-of-input."""
        if self._offset >= self._length:
            return None
        return self._text[self._offset]

    def peek_ahead(self, n: int) -> Optional[str]:
        """Return the character ``n`` positions after the offset.

        ``peek_ahead(0)`` is the same as ``peek()``. Returns None when the
        position is outside the input.
        """
        index = self._offset + n
        if n < 0 or index >= self._length:
            return None
        return self._text[index]

    def advance(self) -> None:
        """Move forward one character; does nothing at end-of-input."""
        if self._offset >= self._length:
            return
        if self._text[self._offset] == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        self._offset += 1

    def advance_by(self, n: int) -> None:
        self.advance_to(self._offset + max(n, 0))

    def advance_to(self, pos: int) -> None:
        """Move to ``pos`` (clamped), keeping line and column in step."""
        pos = min(max(pos, 0), self._length)
        if pos < self._offset:
            self.set_cursor(pos)
            return

        newlines = self._text.count("\n", self._offset, pos)
        if newlines:
            self._line += newlines
            self._column = pos - self._text.rfind("\n", self._offset, pos)
        else:
            self._column += pos - self._offset
        self._offset = pos

    def set_cursor(self, pos: int) -> None:
        """Set the offset, clamping ``pos`` to ``[0, len(text)]``."""
        pos = min(max(pos, 0), self._length)
        self._offset = pos
        self._line = self._text.count("\n", 0, pos) + 1
        self._column = pos - self._text.rfind("\n", 0, pos)

    def startswith(self, prefix: str, ignore_case: bool = False) -> bool:
        """Check whether the input at the offset begins with ``prefix``."""
        candidate = self._text[self._offset:self._offset + len(prefix)]
        if ignore_case:
            return candidate.lower() == prefix.lower()
        return candidate == prefix

    def find(self, needle: str) -> Optional[int]:
        """Return the absolute index of ``needle`` at or after the offset."""
        index = self._text.find(needle, self._offset)
        return None if index == -1 else index

    def search(self, pattern: "re.Pattern[str]") -> Optional["re.Match[str]"]:
        """Search a compiled pattern from the offset onwards."""
        return pattern.search(self._text, self._offset)

    def consume_while(self, predicate: Callable[[str], bool]) -> str:
        """Advance past characters satisfying ``predicate`` and return them."""
        start = self._offset
        end = start
        while end < self._length and predicate(self._text[end]):
            end += 1
        self.advance_to(end)
        return self._text[start:end]

    def skip_whitespace(self) -> None:
        self.consume_while(str.isspace)

    def slice(self, start: int, end: Optional[int] = None) -> str:
        return self._text[start:self._length if end is None else end]
