"""Turns source text into a stream of spanned tokens."""

from __future__ import annotations

from typing import Iterator

from loxwalk.cursor import Cursor
from loxwalk.span import Span
from loxwalk.tokens import SpannedToken, Token, TokenKind, keyword_kind

_SINGLE_CHAR = {
    "(": TokenKind.LEFT_PAREN,
    ")": TokenKind.RIGHT_PAREN,
    "{": TokenKind.LEFT_BRACE,
    "}": TokenKind.RIGHT_BRACE,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.ASTERISK,
    ".": TokenKind.DOT,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
}

_MAYBE_WITH_EQ = {
    "=": (TokenKind.EQUALS, TokenKind.DOUBLE_EQ),
    ">": (TokenKind.RIGHT_ANGLE, TokenKind.RIGHT_ANGLE_EQ),
    "<": (TokenKind.LEFT_ANGLE, TokenKind.LEFT_ANGLE_EQ),
    "!": (TokenKind.BANG, TokenKind.BANG_EQ),
}

_ASCII_WHITESPACE = frozenset(" \t\n\r\x0c")


def _is_whitespace(ch: str) -> bool:
    return ch in _ASCII_WHITESPACE


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_identifier_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == "_")


class Lexer:
    """Reads tokens from source text, one at a time."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._cursor = Cursor(source)

    def next_token(self) -> SpannedToken:
        """Return the next token, repeating end-of-file once the text is used up."""
        while True:
            self._cursor.take_while(_is_whitespace)
            start = self._cursor.position
            token = self._lex_token()
            end = self._cursor.position
            if token is not None:
                return SpannedToken(token, Span(start, end))

    def __iter__(self) -> Iterator[SpannedToken]:
        """Yield every token before end-of-file."""
        while (spanned := self.next_token()).token.kind is not TokenKind.END_OF_FILE:
            yield spanned

    def _lex_token(self) -> Token | None:
        """Return the next token, or None if only a comment was read."""
        taken = self._cursor.take()
        if taken is None:
            return Token(TokenKind.END_OF_FILE)
        index, ch = taken

        if ch in _SINGLE_CHAR:
            return Token(_SINGLE_CHAR[ch])
        if ch == "/":
            if self._cursor.take_if("/"):
                self._consume_line()
                return None
            return Token(TokenKind.SLASH)
        if ch in _MAYBE_WITH_EQ:
            plain, with_eq = _MAYBE_WITH_EQ[ch]
            return Token(with_eq if self._cursor.take_if("=") else plain)
        if ch == '"':
            return self._lex_string(index)
        if _is_digit(ch):
            return self._lex_number(index)
        if _is_identifier_char(ch):
            return self._lex_identifier_or_keyword(index)
        return Token(TokenKind.ERROR, f"Unexpected character '{ch}'")

    def _consume_line(self) -> None:
        self._cursor.take_while(lambda ch: ch != "\n")
        self._cursor.take()

    def _current_end(self) -> int:
        current = self._cursor.peek()
        return current[0] if current is not None else len(self._source)

    def _lex_string(self, quote_index: int) -> Token:
        start = quote_index + 1
        self._cursor.take_until(lambda ch: ch == '"')
        closing = self._cursor.peek()
        if closing is None:
            return Token(TokenKind.ERROR, "Unterminated string")
        self._cursor.take()
        return Token(TokenKind.STRING, self._source[start:closing[0]])

    def _lex_number(self, start: int) -> Token:
        self._cursor.take_while(_is_digit)

        current = self._cursor.peek()
        if current is not None and current[1] == ".":
            following = self._cursor.peek_next()
            if following is not None and _is_digit(following[1]):
                self._cursor.take()
                self._cursor.take_while(_is_digit)

        text = self._source[start:self._current_end()]
        try:
            return Token(TokenKind.NUMBER, float(text))
        except ValueError:
            return Token(TokenKind.ERROR, f"Unparsable integer `{text}`")

    def _lex_identifier_or_keyword(self, start: int) -> Token:
        self._cursor.take_while(_is_identifier_char)
        word = self._source[start:self._current_end()]
        kind = keyword_kind(word)
        if kind is not None:
            return Token(kind)
        return Token(TokenKind.IDENTIFIER, word)


def lex(source: str) -> list[SpannedToken]:
    """Return every token in ``source`` before end-of-file."""
    return list(Lexer(source))