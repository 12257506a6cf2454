"""Token types produced by the lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from loxwalk.span import Span


class TokenKind(Enum):
    """Every kind of token the lexer can produce."""

    # Single-character tokens
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    LEFT_BRACE = auto()
    RIGHT_BRACE = auto()
    PLUS = auto()
    MINUS = auto()
    ASTERISK = auto()
    SLASH = auto()
    DOT = auto()
    COMMA = auto()
    SEMICOLON = auto()

    # One or two character tokens
    BANG = auto()
    BANG_EQ = auto()
    EQUALS = auto()
    DOUBLE_EQ = auto()
    LEFT_ANGLE = auto()
    LEFT_ANGLE_EQ = auto()
    RIGHT_ANGLE = auto()
    RIGHT_ANGLE_EQ = auto()

    # Literals
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()

    # Keywords
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FUN = auto()
    FOR = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()

    # Miscellaneous
    ERROR = auto()
    END_OF_FILE = auto()


_KEYWORDS = {
    "and": TokenKind.AND,
    "class": TokenKind.CLASS,
    "else": TokenKind.ELSE,
    "false": TokenKind.FALSE,
    "fun": TokenKind.FUN,
    "for": TokenKind.FOR,
    "if": TokenKind.IF,
    "nil": TokenKind.NIL,
    "or": TokenKind.OR,
    "print": TokenKind.PRINT,
    "return": TokenKind.RETURN,
    "super": TokenKind.SUPER,
    "this": TokenKind.THIS,
    "true": TokenKind.TRUE,
    "var": TokenKind.VAR,
    "while": TokenKind.WHILE,
}


def keyword_kind(word: str) -> TokenKind | None:
    """Return the keyword kind for ``word``, or None if it is not a keyword."""
    return _KEYWORDS.get(word)


@dataclass(frozen=True)
class Token:
    """A token kind with its payload.

    ``value`` holds the name of an identifier, the contents of a string,
    the value of a number or the message of an error; otherwise None.
    """

    kind: TokenKind
    value: str | float | None = None


@dataclass(frozen=True)
class SpannedToken:
    """A token together with the source range it was read from."""

    token: Token
    span: Span