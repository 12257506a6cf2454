"""Static pass that resolves variable uses to scope distances."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Iterator

from loxwalk import ast as syntax
from loxwalk.span import Span
from loxwalk.treewalk import nodes
from loxwalk.treewalk.nodes import INIT_STR, SUPER_STR, THIS_STR


class ResolveErrorKind(Enum):
    USED_IN_OWN_INITIALIZER = auto()
    REDEFINE_LOCAL_VAR = auto()
    RETURN_AT_TOP_LEVEL = auto()
    THIS_OUTSIDE_CLASS = auto()
    RETURN_IN_INITIALIZER = auto()
    INHERIT_FROM_SELF = auto()
    SUPER_OUTSIDE_SUBCLASS = auto()


@dataclass
class ResolveError(Exception):
    """A program that parses but breaks a scoping rule.

    ``name`` is the variable concerned, for the kinds that have one.
    """

    kind: ResolveErrorKind
    name: str | None = None

    def __post_init__(self) -> None:
        super().__init__(self.kind, self.name)

    def __str__(self) -> str:
        if self.name is None:
            return self.kind.name
        return f"{self.kind.name}({self.name})"


class _FunctionContext(Enum):
    GLOBAL = auto()
    FUNCTION = auto()
    METHOD = auto()
    INITIALIZER = auto()


class _ClassContext(Enum):
    GLOBAL = auto()
    CLASS = auto()
    SUBCLASS = auto()


def _desugar_for(stmt: syntax.For) -> syntax.Stmt:
    """Rewrite a for loop as ``{ init; while (cond) { { body } incr; } }``."""
    body = stmt.body
    rearranged: syntax.Stmt = syntax.Block([body], body.span)

    if stmt.increment is not None:
        incr = syntax.ExpressionStmt(stmt.increment, stmt.increment.span)
        rearranged = syntax.Block([rearranged, incr], rearranged.span.to(incr.span))

    if stmt.condition is not None:
        condition = stmt.condition
        total_span = condition.span.to(rearranged.span)
    else:
        condition = syntax.Literal(True, Span.dummy())
        total_span = rearranged.span
    rearranged = syntax.While(condition, rearranged, total_span)

    if stmt.initializer is not None:
        init = stmt.initializer
        rearranged = syntax.Block([init, rearranged], init.span.to(rearranged.span))

    return rearranged


class Resolver:
    """Works out, for every variable use, which enclosing scope defines it."""

    def __init__(self) -> None:
        self._reset()

    def _reset(self) -> None:
        # Each scope maps a name to whether its initializer has finished.
        self._scopes: list[dict[str, bool]] = []
        self._function_ctx = _FunctionContext.GLOBAL
        self._class_ctx = _ClassContext.GLOBAL

    def resolve(self, tree: syntax.Tree) -> nodes.Tree:
        """Resolve a parsed program, raising ResolveError on the first problem."""
        self._reset()
        return nodes.Tree([self._statement(stmt) for stmt in tree.statements])

    # ---- statements ----

    def _statement(self, stmt: syntax.Stmt) -> nodes.Stmt:
        match stmt:
            case syntax.ExpressionStmt(expr=expr, span=span):
                return nodes.ExpressionStmt(self._expression(expr), span)
            case syntax.PrintStmt(expr=expr, span=span):
                return nodes.PrintStmt(self._expression(expr), span)
            case syntax.VarDecl(ident=ident, initializer=initializer, span=span):
                name = ident.name
                if self._is_already_defined(name):
                    raise ResolveError(ResolveErrorKind.REDEFINE_LOCAL_VAR, name)
                self._set_state(name, initialized=False)
                value = self._expression(initializer)
                self._set_state(name, initialized=True)
                return nodes.VarDecl(name, value, span)
            case syntax.Block(statements=statements, span=span):
                with self._scope():
                    resolved = [self._statement(s) for s in statements]
                return nodes.Block(resolved, span)
            case syntax.IfElse(
                condition=condition, body=body, else_body=else_body, span=span
            ):
                cond = self._expression(condition)
                then = self._statement(body)
                otherwise = None if else_body is None else self._statement(else_body)
                return nodes.IfElse(cond, then, otherwise, span)
            case syntax.While(condition=condition, body=body, span=span):
                cond = self._expression(condition)
                return nodes.While(cond, self._statement(body), span)
            case syntax.For(span=span):
                return replace(self._statement(_desugar_for(stmt)), span=span)
            case syntax.FunctionDecl():
                return self._function(stmt, _FunctionContext.FUNCTION)
            case syntax.Return(value=value, span=span):
                return nodes.Return(self._return_value(value), span)
            case syntax.ClassDecl():
                return self._class(stmt)
        raise TypeError(f"not a statement: {stmt!r}")

    def _return_value(self, value: syntax.Expr | None) -> nodes.Expr:
        if self._function_ctx is _FunctionContext.GLOBAL:
            raise ResolveError(ResolveErrorKind.RETURN_AT_TOP_LEVEL)
        if self._function_ctx is _FunctionContext.INITIALIZER:
            # Initializers may only return empty, and then they return `this`.
            if value is not None:
                raise ResolveError(ResolveErrorKind.RETURN_IN_INITIALIZER)
            return nodes.This(self._variable_ref(THIS_STR), Span.dummy())
        if value is None:
            return syntax.Literal(None, Span.dummy())
        return self._expression(value)

    def _class(self, stmt: syntax.ClassDecl) -> nodes.ClassDecl:
        name = stmt.ident.name
        self._define(name)

        superclass = None
        if stmt.superclass is not None:
            if stmt.superclass.name == name:
                raise ResolveError(ResolveErrorKind.INHERIT_FROM_SELF, name)
            superclass = self._variable_ref(stmt.superclass.name)

        if superclass is not None:
            with self._scope(SUPER_STR):
                methods = self._class_body(stmt.methods, _ClassContext.SUBCLASS)
        else:
            methods = self._class_body(stmt.methods, _ClassContext.CLASS)

        return nodes.ClassDecl(name, superclass, methods, stmt.span)

    def _class_body(
        self, methods: list[syntax.FunctionDecl], ctx: _ClassContext
    ) -> list[nodes.FunctionDecl]:
        with self._scope(THIS_STR), self._class_context(ctx):
            return [
                self._function(
                    method,
                    _FunctionContext.INITIALIZER
                    if method.ident.name == INIT_STR
                    else _FunctionContext.METHOD,
                )
                for method in methods
            ]

    def _function(
        self, decl: syntax.FunctionDecl, ctx: _FunctionContext
    ) -> nodes.FunctionDecl:
        name = decl.ident.name
        # Defined eagerly so the function can refer to itself.
        self._define(name)
        params = [param.name for param in decl.params]
        with self._scope(*params), self._function_context(ctx):
            body = [self._statement(s) for s in decl.body]
        return nodes.FunctionDecl(name, params, body, decl.span)

    # ---- expressions ----

    def _expression(self, expr: syntax.Expr) -> nodes.Expr:
        match expr:
            case syntax.Literal():
                return expr
            case syntax.BinOp(op=op, lhs=lhs, rhs=rhs, span=span):
                return nodes.BinOp(op, self._expression(lhs), self._expression(rhs), span)
            case syntax.UnaryOp(op=op, operand=operand, span=span):
                return nodes.UnaryOp(op, self._expression(operand), span)
            case syntax.Logical(op=op, lhs=lhs, rhs=rhs, span=span):
                return nodes.Logical(
                    op, self._expression(lhs), self._expression(rhs), span
                )
            case syntax.Variable(ident=ident, span=span):
                if self._is_during_initializer(ident.name):
                    raise ResolveError(
                        ResolveErrorKind.USED_IN_OWN_INITIALIZER, ident.name
                    )
                return nodes.Variable(self._variable_ref(ident.name), span)
            case syntax.Assignment(ident=ident, value=value, span=span):
                ref = self._variable_ref(ident.name)
                return nodes.Assignment(ref, self._expression(value), span)
            case syntax.Call(callee=callee, args=args, span=span):
                resolved_callee = self._expression(callee)
                return nodes.Call(
                    resolved_callee, [self._expression(a) for a in args], span
                )
            case syntax.Get(obj=obj, prop=prop, span=span):
                return nodes.Get(self._expression(obj), prop.name, span)
            case syntax.Set(obj=obj, prop=prop, value=value, span=span):
                target = self._expression(obj)
                return nodes.Set(target, prop.name, self._expression(value), span)
            case syntax.This(span=span):
                if self._class_ctx is _ClassContext.GLOBAL:
                    raise ResolveError(ResolveErrorKind.THIS_OUTSIDE_CLASS)
                return nodes.This(self._variable_ref(THIS_STR), span)
            case syntax.Super(method=method, span=span):
                if self._class_ctx is not _ClassContext.SUBCLASS:
                    raise ResolveError(ResolveErrorKind.SUPER_OUTSIDE_SUBCLASS)
                return nodes.Super(self._variable_ref(SUPER_STR), method.name, span)
        raise TypeError(f"not an expression: {expr!r}")

    # ---- scopes ----

    @contextmanager
    def _scope(self, *names: str) -> Iterator[None]:
        self._scopes.append(dict.fromkeys(names, True))
        try:
            yield
        finally:
            self._scopes.pop()

    @contextmanager
    def _function_context(self, ctx: _FunctionContext) -> Iterator[None]:
        previous, self._function_ctx = self._function_ctx, ctx
        try:
            yield
        finally:
            self._function_ctx = previous

    @contextmanager
    def _class_context(self, ctx: _ClassContext) -> Iterator[None]:
        previous, self._class_ctx = self._class_ctx, ctx
        try:
            yield
        finally:
            self._class_ctx = previous

    def _variable_ref(self, name: str) -> nodes.VariableRef:
        return nodes.VariableRef(name, self._lookup(name))

    def _lookup(self, name: str) -> int | None:
        for hops, scope in enumerate(reversed(self._scopes)):
            if name in scope:
                return hops
        return None

    def _is_during_initializer(self, name: str) -> bool:
        return bool(self._scopes) and self._scopes[-1].get(name) is False

    def _is_already_defined(self, name: str) -> bool:
        return bool(self._scopes) and name in self._scopes[-1]

    def _define(self, name: str) -> None:
        self._set_state(name, initialized=True)

    def _set_state(self, name: str, *, initialized: bool) -> None:
        if self._scopes:
            self._scopes[-1][name] = initialized


def resolve(tree: syntax.Tree) -> nodes.Tree:
    """Resolve a parsed program with a fresh resolver."""
    return Resolver().resolve(tree)