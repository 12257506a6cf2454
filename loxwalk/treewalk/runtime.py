"""Runtime values, environments and errors of the tree-walking interpreter.

Lox values are represented by Python objects: numbers are ``int`` (kept
within the signed 64-bit range), booleans are ``bool``, strings are
``str`` and nil is ``None``. Functions, classes and instances have their
own classes below.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Protocol, Sequence

from loxwalk.ast import BinaryOperator, UnaryOperator
from loxwalk.treewalk import nodes
from loxwalk.treewalk.nodes import INIT_STR, THIS_STR

if TYPE_CHECKING:
    from typing import Union

    Value = Union[int, bool, str, None, "BuiltinFunction", "LoxFunction", "LoxClass", "LoxInstance"]
else:
    Value = Any


class _Interpreter(Protocol):
    def swap_environment(self, env: Environment) -> Environment: ...

    def eval_statements(self, stmts: Sequence[nodes.Stmt]) -> None: ...


_I64_MIN = -(2**63)
_I64_SPAN = 2**64


def _wrap(n: int) -> int:
    """Wrap an integer into the signed 64-bit range."""
    return (n - _I64_MIN) % _I64_SPAN + _I64_MIN


def _is_number(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _op_name(op: BinaryOperator | UnaryOperator) -> str:
    return op.name.title().replace("_", "")


# ---- errors ----


class LoxRuntimeError(Exception):
    """Base class of errors raised while running a program."""


class ReturnSignal(Exception):
    """Carries a returned value up to the function call that catches it."""

    def __init__(self, value: Value) -> None:
        super().__init__(value)
        self.value = value

    def __str__(self) -> str:
        return f"Return({format_value(self.value)})"


class IllegalBinaryOperation(LoxRuntimeError):
    def __init__(self, op: BinaryOperator, lhs: Value, rhs: Value) -> None:
        super().__init__(op, lhs, rhs)
        self.op, self.lhs, self.rhs = op, lhs, rhs

    def __str__(self) -> str:
        return (
            f"IllegalBinOperation({_op_name(self.op)}, "
            f"{format_value(self.lhs)}, {format_value(self.rhs)})"
        )


class IllegalUnaryOperation(LoxRuntimeError):
    def __init__(self, op: UnaryOperator, value: Value) -> None:
        super().__init__(op, value)
        self.op, self.value = op, value

    def __str__(self) -> str:
        return f"IllegalUnaryOperation({_op_name(self.op)}, {format_value(self.value)})"


class UndefinedVariable(LoxRuntimeError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"UndefinedVariable({_debug_str(self.name)})"


class DivideByZero(LoxRuntimeError):
    def __init__(self) -> None:
        super().__init__()

    def __str__(self) -> str:
        return "DivideByZero"


class WrongArity(LoxRuntimeError):
    def __init__(self, expected: int, got: int) -> None:
        super().__init__(expected, got)
        self.expected, self.got = expected, got

    def __str__(self) -> str:
        return f"WrongArity({self.expected}, {self.got})"


class NotCallable(LoxRuntimeError):
    def __init__(self, value: Value) -> None:
        super().__init__(value)
        self.value = value

    def __str__(self) -> str:
        return f"NotACallable({format_value(self.value)})"


class NotAnInstance(LoxRuntimeError):
    def __init__(self, value: Value) -> None:
        super().__init__(value)
        self.value = value

    def __str__(self) -> str:
        return f"NotAnInstance({format_value(self.value)})"


class NotAClass(LoxRuntimeError):
    def __init__(self, value: Value) -> None:
        super().__init__(value)
        self.value = value

    def __str__(self) -> str:
        return f"NotAClass({format_value(self.value)})"


class NoSuchProperty(LoxRuntimeError):
    def __init__(self, value: Value, name: str) -> None:
        super().__init__(value, name)
        self.value, self.name = value, name

    def __str__(self) -> str:
        return f"NoSuchProperty({format_value(self.value)}, {_debug_str(self.name)})"


# ---- environments ----


class Environment:
    """A scope of variables, optionally nested inside another one."""

    def __init__(self, enclosing: Environment | None = None) -> None:
        self._values: dict[str, Value] = {}
        self.enclosing = enclosing

    def define(self, name: str, value: Value) -> None:
        """Define, or redefine, a variable in this scope."""
        self._values[name] = value

    def set(self, name: str, value: Value) -> None:
        """Assign to a variable already defined in this scope."""
        if name not in self._values:
            raise UndefinedVariable(name)
        self._values[name] = value

    def get(self, name: str) -> Value:
        try:
            return self._values[name]
        except KeyError:
            raise UndefinedVariable(name) from None

    def _ancestor(self, hops: int) -> Environment:
        env = self
        for _ in range(hops):
            if env.enclosing is None:
                raise LookupError("Resolver error: hopped beyond global")
            env = env.enclosing
        return env

    def set_at(self, hops: int, name: str, value: Value) -> None:
        self._ancestor(hops).set(name, value)

    def get_at(self, hops: int, name: str) -> Value:
        return self._ancestor(hops).get(name)


# ---- callables ----


@dataclass(frozen=True, eq=False)
class BuiltinFunction:
    """A function provided by the interpreter itself."""

    name: str
    func: Callable[[list[Value]], Value]
    arity: int

    def call(self, args: list[Value], interpreter: _Interpreter) -> Value:
        if len(args) != self.arity:
            raise WrongArity(self.arity, len(args))
        return self.func(args)

    def __repr__(self) -> str:
        return f"<built-in {self.name}>"


@dataclass(frozen=True, eq=False)
class LoxFunction:
    """A user-defined function or method together with its closure."""

    declaration: nodes.FunctionDecl
    is_initializer: bool
    closure: Environment

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, args: list[Value], interpreter: _Interpreter) -> Value:
        if len(args) != self.arity():
            raise WrongArity(self.arity(), len(args))

        env = Environment(self.closure)
        for param, arg in zip(self.declaration.params, args):
            env.define(param, arg)

        previous = interpreter.swap_environment(env)
        try:
            interpreter.eval_statements(self.declaration.body)
        except ReturnSignal as signal:
            return signal.value
        finally:
            interpreter.swap_environment(previous)
        return None

    def bind(self, instance: LoxInstance) -> LoxFunction:
        """Return a copy of this function with ``this`` bound to ``instance``."""
        env = Environment(self.closure)
        env.define(THIS_STR, instance)
        return LoxFunction(self.declaration, self.is_initializer, env)

    def __repr__(self) -> str:
        return f"<function {self.declaration.name}>"


@dataclass(frozen=True, eq=False)
class LoxClass:
    """A user-defined class."""

    name: str
    superclass: LoxClass | None
    methods: dict[str, LoxFunction] = field(default_factory=dict)

    def arity(self) -> int:
        init = self.methods.get(INIT_STR)
        return init.arity() if init is not None else 0

    def call(self, args: list[Value], interpreter: _Interpreter) -> LoxInstance:
        """Create an instance, running the initializer if there is one."""
        if len(args) != self.arity():
            raise WrongArity(self.arity(), len(args))
        instance = LoxInstance(self)
        init = instance._find_bound_method(INIT_STR)
        if init is not None:
            init.call(args, interpreter)
        return instance

    def find_method(self, name: str) -> LoxFunction | None:
        """Look a method up here, then along the superclass chain."""
        method = self.methods.get(name)
        if method is None and self.superclass is not None:
            return self.superclass.find_method(name)
        return method

    def __repr__(self) -> str:
        return f"<class {self.name}>"


@dataclass(eq=False)
class LoxInstance:
    """An instance of a user-defined class."""

    klass: LoxClass
    props: dict[str, Value] = field(default_factory=dict)

    def get(self, name: str) -> Value:
        """Return a property, or failing that a method bound to this instance."""
        if name in self.props:
            return self.props[name]
        method = self._find_bound_method(name)
        if method is not None:
            return method
        raise NoSuchProperty(self, name)

    def set(self, name: str, value: Value) -> None:
        self.props[name] = value

    def _find_bound_method(self, name: str) -> LoxFunction | None:
        method = self.klass.find_method(name)
        return method.bind(self) if method is not None else None

    def __repr__(self) -> str:
        return f"<instance of {self.klass.name}>"


# ---- operations on values ----


def is_truthy(value: Value) -> bool:
    """Only nil and false are falsey."""
    return not (value is None or value is False)


def values_equal(lhs: Value, rhs: Value) -> bool:
    """Lox equality: plain values by value, objects by identity."""
    if type(lhs) is not type(rhs):
        return False
    if lhs is None or isinstance(lhs, (int, bool, str)):
        return lhs == rhs
    return lhs is rhs


def _debug_str(text: str) -> str:
    escapes = {'"': '\\"', "\\": "\\\\", "\n": "\\n", "\t": "\\t", "\r": "\\r", "\0": "\\0"}
    parts = []
    for ch in text:
        if ch in escapes:
            parts.append(escapes[ch])
        elif not ch.isprintable():
            parts.append(f"\\u{{{ord(ch):x}}}")
        else:
            parts.append(ch)
    return '"' + "".join(parts) + '"'


def format_value(value: Value) -> str:
    """The form in which ``print`` writes a value."""
    if value is None:
        return "Nil"
    if isinstance(value, bool):
        return f"Boolean({'true' if value else 'false'})"
    if isinstance(value, int):
        return f"Number({value})"
    if isinstance(value, str):
        return f"String({_debug_str(value)})"
    if isinstance(value, BuiltinFunction):
        return f"BuiltInFunction({value!r})"
    if isinstance(value, LoxFunction):
        return f"LoxFunction({value!r})"
    if isinstance(value, LoxClass):
        return f"LoxClass({value!r})"
    if isinstance(value, LoxInstance):
        return f"LoxInstance({value!r})"
    raise TypeError(f"not a Lox value: {value!r}")


def _truncating_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return -quotient if (a < 0) != (b < 0) else quotient


_NUMERIC: dict[BinaryOperator, Callable[[int, int], Value]] = {
    BinaryOperator.SUBTRACT: lambda a, b: _wrap(a - b),
    BinaryOperator.MULTIPLY: lambda a, b: _wrap(a * b),
    BinaryOperator.GREATER_THAN: lambda a, b: a > b,
    BinaryOperator.GREATER_EQ: lambda a, b: a >= b,
    BinaryOperator.LESS_THAN: lambda a, b: a < b,
    BinaryOperator.LESS_EQ: lambda a, b: a <= b,
}


def apply_infix_op(op: BinaryOperator, lhs: Value, rhs: Value) -> Value:
    """Apply a binary operator to two evaluated operands."""
    if op is BinaryOperator.EQUAL_TO:
        return values_equal(lhs, rhs)
    if op is BinaryOperator.NOT_EQUAL_TO:
        return not values_equal(lhs, rhs)
    if op is BinaryOperator.ADD:
        if _is_number(lhs) and _is_number(rhs):
            return _wrap(lhs + rhs)
        if isinstance(lhs, str) and isinstance(rhs, str):
            return lhs + rhs
        raise IllegalBinaryOperation(op, lhs, rhs)
    if not (_is_number(lhs) and _is_number(rhs)):
        raise IllegalBinaryOperation(op, lhs, rhs)
    if op is BinaryOperator.DIVIDE:
        if rhs == 0:
            raise DivideByZero()
        return _wrap(_truncating_div(lhs, rhs))
    return _NUMERIC[op](lhs, rhs)


def apply_prefix_op(op: UnaryOperator, value: Value) -> Value:
    """Apply a prefix operator to an evaluated operand."""
    if op is UnaryOperator.NEGATE:
        if _is_number(value):
            return _wrap(-value)
        raise IllegalUnaryOperation(op, value)
    return not is_truthy(value)


def call_value(callee: Value, args: list[Value], interpreter: _Interpreter) -> Value:
    """Call ``callee`` with ``args``, raising NotCallable if it cannot be called."""
    if isinstance(callee, (BuiltinFunction, LoxFunction, LoxClass)):
        return callee.call(args, interpreter)
    raise NotCallable(callee)


# ---- built-in functions ----


def _clock(args: list[Value]) -> int:
    return int(time.time())


def get_builtins() -> list[BuiltinFunction]:
    """Fresh instances of every built-in function."""
    return [BuiltinFunction("clock", _clock, 0)]