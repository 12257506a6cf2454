"""A character cursor over source text that tracks line and column."""

from __future__ import annotations

from typing import Callable

from loxwalk.span import CodePosition


class Cursor:
    """Walks through a string one character at a time."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._index = 0
        self._line = 1
        self._column = 1

    @property
    def source(self) -> str:
        return self._source

    @property
    def position(self) -> CodePosition:
        """The position of the next character to be read."""
        return CodePosition(self._index, self._line, self._column)

    def peek(self) -> tuple[int, str] | None:
        """Return the offset and value of the next character without consuming it."""
        if self._index < len(self._source):
            return self._index, self._source[self._index]
        return None

    def peek_next(self) -> tuple[int, str] | None:
        """Return the character after the next one, without consuming anything."""
        index = self._index + 1
        if index < len(self._source):
            return index, self._source[index]
        return None

    def take(self) -> tuple[int, str] | None:
        """Consume the next character, returning its offset and value."""
        current = self.peek()
        if current is None:
            return None
        _, ch = current
        self._index += 1
        if ch == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return current

    def take_if(self, expected: str) -> bool:
        """Consume the next character only if it equals ``expected``."""
        current = self.peek()
        if current is None or current[1] != expected:
            return False
        self.take()
        return True

    def take_while(self, condition: Callable[[str], bool]) -> None:
        """Consume characters while ``condition`` holds for them."""
        while (current := self.peek()) is not None and condition(current[1]):
            self.take()

    def take_until(self, condition: Callable[[str], bool]) -> None:
        """Consume characters until one satisfies ``condition``."""
        self.take_while(lambda ch: not condition(ch))