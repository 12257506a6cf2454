"""Syntax tree after name resolution, as run by the tree-walking interpreter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from loxwalk.ast import BinaryOperator, Literal, LogicalOperator, UnaryOperator
from loxwalk.span import Span

INIT_STR = "init"
THIS_STR = "this"
SUPER_STR = "super"

__all__ = [
    "INIT_STR",
    "THIS_STR",
    "SUPER_STR",
    "Literal",
    "UnaryOperator",
    "BinaryOperator",
    "LogicalOperator",
    "VariableRef",
    "BinOp",
    "UnaryOp",
    "Logical",
    "Variable",
    "Assignment",
    "Call",
    "Get",
    "Set",
    "This",
    "Super",
    "ExpressionStmt",
    "PrintStmt",
    "VarDecl",
    "Block",
    "IfElse",
    "While",
    "FunctionDecl",
    "Return",
    "ClassDecl",
    "Tree",
    "Expr",
    "Stmt",
]


def _dummy_span() -> Span:
    return Span.dummy()


@dataclass(frozen=True)
class VariableRef:
    """A use of a name, with how many scopes out it was found.

    ``hops`` is 0 for the innermost scope, 1 for its parent and so on,
    or None when the name was not found locally and is looked up globally.
    """

    name: str
    hops: int | None = None

    def is_global(self) -> bool:
        return self.hops is None


# ---- expressions ----


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
    ref: VariableRef
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class Assignment:
    ref: VariableRef
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
    name: str
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class Set:
    obj: Expr
    name: str
    value: Expr
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class This:
    ref: VariableRef
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class Super:
    ref: VariableRef
    method: str
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
    name: str
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
class FunctionDecl:
    name: str
    params: list[str]
    body: list[Stmt]
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class Return:
    """A return; an empty return has already been given its implicit value."""

    value: Expr
    span: Span = field(default_factory=_dummy_span)


@dataclass(frozen=True)
class ClassDecl:
    name: str
    superclass: VariableRef | None
    methods: list[FunctionDecl]
    span: Span = field(default_factory=_dummy_span)


Stmt = Union[
    ExpressionStmt,
    PrintStmt,
    VarDecl,
    Block,
    IfElse,
    While,
    FunctionDecl,
    Return,
    ClassDecl,
]


@dataclass(frozen=True)
class Tree:
    """A whole resolved program."""

    statements: list[Stmt]