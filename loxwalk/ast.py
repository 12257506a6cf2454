"""Syntax tree produced by the parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
import math
from typing import Union

from loxwalk.span import Span


class UnaryOperator(Enum):
    """Prefix operators."""

    NEGATE = "-"
    LOGICAL_NOT = "!"

    @property
    def symbol(self) -> str:
        return self.value


class BinaryOperator(Enum):
    """Infix operators that evaluate both operands."""

    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    EQUAL_TO = "=="
    NOT_EQUAL_TO = "!="
    GREATER_THAN = ">"
    GREATER_EQ = ">="
    LESS_THAN = "<"
    LESS_EQ = "<="

    @property
    def symbol(self) -> str:
        return self.value


class LogicalOperator(Enum):
    """Infix operators that short-circuit."""

    AND = "and"
    OR = "or"

    @property
    def symbol(self) -> str:
        return self.value


def _dummy_span() -> Span:
    return Span.dummy()


@dataclass(frozen=True)
class Identifier:
    """A name as written in the source."""

    name: str
    span: Span = field(default_factory=_dummy_span)


# ---- expressions ----


@dataclass(frozen=True, eq=False)
class Literal:
    """A literal value: a float, a bool, a string, or None for nil."""

    value: float | bool | str | None
    span: Span = field(default_factory=_dummy_span)

    def _key(self) -> tuple:
        return (type(self.value), self.value, self.span)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Literal):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())


@dataclass(frozen=True)
class BinOp:
    op: BinaryOperator
    lhs: Expr
    rhs: Expr
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class UnaryOp:
    op: UnaryOperator
    operand: Expr
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class Logical:
    op: LogicalOperator
    lhs: Expr
    rhs: Expr
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class Variable:
    ident: Identifier
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class Assignment:
    ident: Identifier
    value: Expr
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class Call:
    callee: Expr
    args: list[Expr]
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class Get:
    obj: Expr
    prop: Identifier
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class Set:
    obj: Expr
    prop: Identifier
    value: Expr
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class This:
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class Super:
    method: Identifier
    span: Span = field(default_factory=_dummy_span)


Expr = Union[
    Literal, BinOp, UnaryOp, Logical, Variable, Assignment, Call, Get, Set, This, Super
]


# ---- statements ----


@dataclass(frozen=True)
class ExpressionStmt:
    expr: Expr
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class PrintStmt:
    expr: Expr
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class VarDecl:
    ident: Identifier
    initializer: Expr
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class Block:
    statements: list[Stmt]
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class IfElse:
    condition: Expr
    body: Stmt
    else_body: Stmt | None = None
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class While:
    condition: Expr
    body: Stmt
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class For:
    initializer: Stmt | None
    condition: Expr | None
    increment: Expr | None
    body: Stmt
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class FunctionDecl:
    ident: Identifier
    params: list[Identifier]
    body: list[Stmt]
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class Return:
    value: Expr | None = None
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class ClassDecl:
    ident: Identifier
    superclass: Identifier | None
    methods: list[FunctionDecl]
    span: Span = field(default_factory=_dummy_span)


Stmt = Union[
    ExpressionStmt,
    PrintStmt,
    VarDecl,
    Block,
    IfElse,
    While,
    For,
    FunctionDecl,
    Return,
    ClassDecl,
]


@dataclass(frozen=True)
class Tree:
    """A whole parsed program."""

    statements: list[Stmt]


def _format_number(n: float) -> str:
    if math.isnan(n):
        return "NaN"
    if math.isinf(n):
        return "inf" if n > 0 else "-inf"
    if n == 0:
        return "-0" if math.copysign(1.0, n) < 0 else "0"
    if n.is_integer():
        return str(int(n))
    return format(Decimal(repr(n)), "f")


def _format_literal(value: float | bool | str | None) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{value}"'
    return _format_number(value)


def lispy_string(expr: Expr) -> str:
    """Render an expression in a parenthesised, prefix form."""
    match expr:
        case Literal(value=value):
            return _format_literal(value)
        case BinOp(op=op, lhs=lhs, rhs=rhs) | Logical(op=op, lhs=lhs, rhs=rhs):
            return f"({op.symbol} {lispy_string(lhs)} {lispy_string(rhs)})"
        case UnaryOp(op=op, operand=operand):
            return f"({op.symbol} {lispy_string(operand)})"
        case Variable(ident=ident):
            return ident.name
        case Assignment(ident=ident, value=value):
            return f"(set {ident.name} {lispy_string(value)})"
        case Call(callee=callee, args=args):
            rendered = " ".join(lispy_string(arg) for arg in args)
            return f"(call {lispy_string(callee)} {rendered})"
        case Get(obj=obj, prop=prop):
            return f"(get {lispy_string(obj)} {prop.name})"
        case Set(obj=obj, prop=prop, value=value):
            return f"(set {lispy_string(obj)} {prop.name} {lispy_string(value)})"
        case This():
            return "this"
        case Super(method=method):
            return f"(super {method.name})"
    raise TypeError(f"not an expression: {expr!r}")