"""Errors reported while parsing, and how they are rendered."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from loxwalk.span import Span
from loxwalk.tokens import Token

MAX_NUMBER_ARGS = 255


class Item(Enum):
    """The construct an expected token belongs to, as worded in messages."""

    VARIABLE_DECL = "variable declaration"
    FUNCTION_BODY = "function body"
    EXPRESSION = "expression"
    CLASS_BODY = "class body"
    PRINT_VALUE = "value"
    RETURN_VALUE = "return value"
    FUNCTION_NAME = "function name"
    IF = "'if'"
    WHILE = "'while'"
    FOR = "'for'"
    CONDITION = "condition"
    FOR_CLAUSE = "for clauses"

    def as_str(self) -> str:
        return self.value


class ErrorKind(Enum):
    INVALID_TOKEN = auto()
    EXPECTED_EXPR_AT = auto()
    EXPECTED_IDENTIFIER = auto()
    INVALID_ASSIGNMENT = auto()
    TOO_MANY_ARGS = auto()
    TOO_MANY_PARAMS = auto()
    UNCLOSED_BRACE = auto()
    EXPECT_COMMA_BETWEEN = auto()
    EXPECT_SUPER_DOT = auto()
    EXPECT_SUPER_METHOD = auto()
    EXPECT_SUPERCLASS_NAME = auto()
    EXPECT_PROPERTY_NAME = auto()
    EXPECT_BEFORE = auto()
    EXPECT_AFTER = auto()


_FIXED_MESSAGES = {
    ErrorKind.EXPECTED_EXPR_AT: "Expect expression.",
    ErrorKind.EXPECTED_IDENTIFIER: "Expect variable name.",
    ErrorKind.INVALID_ASSIGNMENT: "Invalid assignment target.",
    ErrorKind.TOO_MANY_ARGS: f"Can't have more than {MAX_NUMBER_ARGS} arguments.",
    ErrorKind.TOO_MANY_PARAMS: f"Can't have more than {MAX_NUMBER_ARGS} parameters.",
    ErrorKind.UNCLOSED_BRACE: "Expected }",
    ErrorKind.EXPECT_SUPER_DOT: "Expect '.' after 'super'.",
    ErrorKind.EXPECT_SUPER_METHOD: "Expect superclass method name.",
    ErrorKind.EXPECT_SUPERCLASS_NAME: "Expect superclass name.",
    ErrorKind.EXPECT_PROPERTY_NAME: "Expect property name after '.'.",
    ErrorKind.EXPECT_COMMA_BETWEEN: "Expect ',' between elements.",
}


@dataclass
class ParseError(Exception):
    """A syntax error at a span of the source.

    ``message`` is used by INVALID_TOKEN, ``token`` by EXPECTED_EXPR_AT,
    and ``expected`` with ``item`` by EXPECT_BEFORE and EXPECT_AFTER.
    """

    span: Span
    kind: ErrorKind
    message: str | None = None
    token: Token | None = None
    expected: str | None = None
    item: Item | None = None

    def __post_init__(self) -> None:
        if self.kind is ErrorKind.INVALID_TOKEN and self.message is None:
            raise ValueError("an invalid-token error needs a message")
        if self.kind in (ErrorKind.EXPECT_BEFORE, ErrorKind.EXPECT_AFTER) and (
            self.expected is None or self.item is None
        ):
            raise ValueError("an expect-before/after error needs what and where")
        super().__init__(self.kind, self.span)

    def render(self, source: str) -> str:
        """Format the error as a user-facing message for ``source``."""
        if self.kind is ErrorKind.INVALID_TOKEN:
            return f"Error: {self.message}."
        prefix = _error_prefix(self.span, source)
        if self.kind is ErrorKind.EXPECT_BEFORE:
            return f"{prefix}: Expect '{self.expected}' before {self.item.as_str()}."
        if self.kind is ErrorKind.EXPECT_AFTER:
            return f"{prefix}: Expect '{self.expected}' after {self.item.as_str()}."
        return f"{prefix}: {_FIXED_MESSAGES[self.kind]}"


def _error_prefix(span: Span, source: str) -> str:
    if span.lo.byte_pos < len(source):
        return f"Error at '{span.extract_string(source)}'"
    return "Error at end"