"""Evaluates a resolved syntax tree statement by statement."""

from __future__ import annotations

import math
import sys
from typing import Sequence, TextIO

from loxwalk.ast import Literal, LogicalOperator
from loxwalk.treewalk import nodes
from loxwalk.treewalk.nodes import INIT_STR, SUPER_STR, THIS_STR
from loxwalk.treewalk.runtime import (
    Environment,
    LoxClass,
    LoxFunction,
    LoxInstance,
    NoSuchProperty,
    NotAClass,
    NotAnInstance,
    ReturnSignal,
    Value,
    apply_infix_op,
    apply_prefix_op,
    call_value,
    format_value,
    get_builtins,
    is_truthy,
)

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


def _to_number(n: float | int) -> int:
    """Convert a numeric literal to a runtime number, saturating at the i64 range."""
    if isinstance(n, float):
        if math.isnan(n):
            return 0
        if math.isinf(n):
            return _I64_MAX if n > 0 else _I64_MIN
        n = int(n)
    return max(_I64_MIN, min(_I64_MAX, n))


def _literal_value(value: float | bool | str | None) -> Value:
    if value is None or isinstance(value, (bool, str)):
        return value
    return _to_number(value)


class Interpreter:
    """Runs resolved programs, writing printed values to ``output``.

    State persists between calls, so successive programs share globals.
    """

    def __init__(self, output: TextIO | None = None) -> None:
        self.output = output if output is not None else sys.stdout
        self.globals = Environment()
        for builtin in get_builtins():
            self.globals.define(builtin.name, builtin)
        self.env = self.globals

    def swap_environment(self, env: Environment) -> Environment:
        """Make ``env`` current and return the environment it replaced."""
        previous, self.env = self.env, env
        return previous

    # ---- statements ----

    def eval_statements(self, stmts: Sequence[nodes.Stmt]) -> None:
        for stmt in stmts:
            self.eval_statement(stmt)

    def eval_statement(self, stmt: nodes.Stmt) -> None:
        match stmt:
            case nodes.ExpressionStmt(expr=expr):
                self.eval_expression(expr)
            case nodes.PrintStmt(expr=expr):
                value = self.eval_expression(expr)
                self.output.write(format_value(value) + "\n")
            case nodes.IfElse(condition=condition, body=body, else_body=else_body):
                if is_truthy(self.eval_expression(condition)):
                    self.eval_statement(body)
                elif else_body is not None:
                    self.eval_statement(else_body)
            case nodes.While(condition=condition, body=body):
                while is_truthy(self.eval_expression(condition)):
                    self.eval_statement(body)
            case nodes.VarDecl(name=name, initializer=initializer):
                self.env.define(name, self.eval_expression(initializer))
            case nodes.Block(statements=statements):
                self._eval_block(statements)
            case nodes.FunctionDecl(name=name):
                self.env.define(name, self._make_function(stmt, is_method=False))
            case nodes.Return(value=value):
                raise ReturnSignal(self.eval_expression(value))
            case nodes.ClassDecl():
                self._eval_class(stmt)
            case _:
                raise TypeError(f"not a statement: {stmt!r}")

    def _eval_block(self, stmts: Sequence[nodes.Stmt]) -> None:
        previous = self.swap_environment(Environment(self.env))
        try:
            self.eval_statements(stmts)
        finally:
            self.env = previous

    def _eval_class(self, stmt: nodes.ClassDecl) -> None:
        superclass = None
        if stmt.superclass is not None:
            candidate = self._lookup(stmt.superclass)
            if not isinstance(candidate, LoxClass):
                raise NotAClass(candidate)
            superclass = candidate

        original = self.env
        if superclass is not None:
            self.env = Environment(self.env)
            self.env.define(SUPER_STR, superclass)
        try:
            methods = {
                method.name: self._make_function(method, is_method=True)
                for method in stmt.methods
            }
        finally:
            self.env = original

        self.env.define(stmt.name, LoxClass(stmt.name, superclass, methods))

    # ---- expressions ----

    def eval_expression(self, expr: nodes.Expr) -> Value:
        match expr:
            case Literal(value=value):
                return _literal_value(value)
            case nodes.BinOp(op=op, lhs=lhs, rhs=rhs):
                left = self.eval_expression(lhs)
                right = self.eval_expression(rhs)
                return apply_infix_op(op, left, right)
            case nodes.UnaryOp(op=op, operand=operand):
                return apply_prefix_op(op, self.eval_expression(operand))
            case nodes.Logical(op=op, lhs=lhs, rhs=rhs):
                left = self.eval_expression(lhs)
                if op is LogicalOperator.AND and not is_truthy(left):
                    return left
                if op is LogicalOperator.OR and is_truthy(left):
                    return left
                return self.eval_expression(rhs)
            case nodes.Variable(ref=ref) | nodes.This(ref=ref):
                return self._lookup(ref)
            case nodes.Assignment(ref=ref, value=value_expr):
                value = self.eval_expression(value_expr)
                if ref.is_global():
                    self.globals.set(ref.name, value)
                else:
                    self.env.set_at(ref.hops, ref.name, value)
                return value
            case nodes.Call(callee=callee_expr, args=arg_exprs):
                callee = self.eval_expression(callee_expr)
                args = [self.eval_expression(arg) for arg in arg_exprs]
                return call_value(callee, args, self)
            case nodes.Get(obj=obj_expr, name=name):
                obj = self.eval_expression(obj_expr)
                if not isinstance(obj, LoxInstance):
                    raise NotAnInstance(obj)
                return obj.get(name)
            case nodes.Set(obj=obj_expr, name=name, value=value_expr):
                obj = self.eval_expression(obj_expr)
                if not isinstance(obj, LoxInstance):
                    raise NotAnInstance(obj)
                value = self.eval_expression(value_expr)
                obj.set(name, value)
                return value
            case nodes.Super(ref=ref, method=method_name):
                return self._eval_super(ref, method_name)
        raise TypeError(f"not an expression: {expr!r}")

    def _eval_super(self, ref: nodes.VariableRef, method_name: str) -> Value:
        superclass = self._lookup(ref)
        if not isinstance(superclass, LoxClass):
            raise RuntimeError("super is not a class")
        if ref.is_global():
            raise RuntimeError("relationship between super and this broken")
        # `this` lives in the scope just inside the one holding `super`.
        this = self.env.get_at(ref.hops - 1, THIS_STR)
        method = superclass.find_method(method_name)
        if method is None:
            raise NoSuchProperty(this, method_name)
        return method.bind(this)

    # ---- helpers ----

    def _make_function(self, decl: nodes.FunctionDecl, *, is_method: bool) -> LoxFunction:
        is_initializer = is_method and decl.name == INIT_STR
        return LoxFunction(decl, is_initializer, self.env)

    def _lookup(self, ref: nodes.VariableRef) -> Value:
        if ref.is_global():
            return self.globals.get(ref.name)
        return self.env.get_at(ref.hops, ref.name)