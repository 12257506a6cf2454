"""Operator precedence and associativity for the expression parser."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum, auto

from loxwalk.ast import BinaryOperator, LogicalOperator
from loxwalk.tokens import Token, TokenKind


class Associativity(Enum):
    LEFT = auto()
    RIGHT = auto()


class Precedence(IntEnum):
    """Binding strength, from weakest to tightest."""

    LOWEST = 0
    ASSIGNMENT = 1
    LOGICAL_OR = 2
    LOGICAL_AND = 3
    EQUALITY = 4
    COMPARISON = 5
    ADDITION = 6
    MULTIPLICATION = 7
    UNARY = 8
    PROPERTY = 9
    CALL = 10

    def associativity(self) -> Associativity:
        """How operators at this level group; undefined for LOWEST and UNARY."""
        if self in (Precedence.LOWEST, Precedence.UNARY):
            raise ValueError(f"{self.name} has no associativity")
        if self is Precedence.ASSIGNMENT:
            return Associativity.RIGHT
        return Associativity.LEFT


class InfixKind(Enum):
    ARITHEQUAL = auto()
    LOGICAL = auto()
    ASSIGNMENT = auto()
    CALL = auto()
    PROPERTY = auto()


_ARITHEQUAL = {
    TokenKind.PLUS: BinaryOperator.ADD,
    TokenKind.MINUS: BinaryOperator.SUBTRACT,
    TokenKind.ASTERISK: BinaryOperator.MULTIPLY,
    TokenKind.SLASH: BinaryOperator.DIVIDE,
    TokenKind.DOUBLE_EQ: BinaryOperator.EQUAL_TO,
    TokenKind.BANG_EQ: BinaryOperator.NOT_EQUAL_TO,
    TokenKind.RIGHT_ANGLE: BinaryOperator.GREATER_THAN,
    TokenKind.RIGHT_ANGLE_EQ: BinaryOperator.GREATER_EQ,
    TokenKind.LEFT_ANGLE: BinaryOperator.LESS_THAN,
    TokenKind.LEFT_ANGLE_EQ: BinaryOperator.LESS_EQ,
}

_LOGICAL = {
    TokenKind.AND: LogicalOperator.AND,
    TokenKind.OR: LogicalOperator.OR,
}

_OTHER = {
    TokenKind.EQUALS: InfixKind.ASSIGNMENT,
    TokenKind.LEFT_PAREN: InfixKind.CALL,
    TokenKind.DOT: InfixKind.PROPERTY,
}

_BINARY_PRECEDENCE = {
    BinaryOperator.ADD: Precedence.ADDITION,
    BinaryOperator.SUBTRACT: Precedence.ADDITION,
    BinaryOperator.MULTIPLY: Precedence.MULTIPLICATION,
    BinaryOperator.DIVIDE: Precedence.MULTIPLICATION,
    BinaryOperator.EQUAL_TO: Precedence.EQUALITY,
    BinaryOperator.NOT_EQUAL_TO: Precedence.EQUALITY,
    BinaryOperator.GREATER_THAN: Precedence.COMPARISON,
    BinaryOperator.GREATER_EQ: Precedence.COMPARISON,
    BinaryOperator.LESS_THAN: Precedence.COMPARISON,
    BinaryOperator.LESS_EQ: Precedence.COMPARISON,
}

_LOGICAL_PRECEDENCE = {
    LogicalOperator.AND: Precedence.LOGICAL_AND,
    LogicalOperator.OR: Precedence.LOGICAL_OR,
}

_KIND_PRECEDENCE = {
    InfixKind.ASSIGNMENT: Precedence.ASSIGNMENT,
    InfixKind.CALL: Precedence.CALL,
    InfixKind.PROPERTY: Precedence.PROPERTY,
}


@dataclass(frozen=True)
class InfixOperator:
    """An operator that may follow a left operand.

    ``op`` carries the binary or logical operator for those kinds and is
    None for assignment, calls and property access.
    """

    kind: InfixKind
    op: BinaryOperator | LogicalOperator | None = None

    @classmethod
    def from_token(cls, token: Token) -> InfixOperator | None:
        """The infix operator a token starts, or None if it starts none."""
        kind = token.kind
        if kind in _ARITHEQUAL:
            return cls(InfixKind.ARITHEQUAL, _ARITHEQUAL[kind])
        if kind in _LOGICAL:
            return cls(InfixKind.LOGICAL, _LOGICAL[kind])
        if kind in _OTHER:
            return cls(_OTHER[kind])
        return None

    def precedence(self) -> Precedence:
        if self.kind is InfixKind.ARITHEQUAL:
            return _BINARY_PRECEDENCE[self.op]
        if self.kind is InfixKind.LOGICAL:
            return _LOGICAL_PRECEDENCE[self.op]
        return _KIND_PRECEDENCE[self.kind]

    def associativity(self) -> Associativity:
        return self.precedence().associativity()

    def exceeds(self, min_precedence: Precedence) -> bool:
        """Whether this operator binds more tightly than ``min_precedence``."""
        own = self.precedence()
        if own != min_precedence:
            return own > min_precedence
        return self.associativity() is Associativity.RIGHT