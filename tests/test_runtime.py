import time

import pytest

from loxwalk.ast import BinaryOperator, UnaryOperator
from loxwalk.treewalk import nodes
from loxwalk.treewalk.runtime import (
    BuiltinFunction,
    DivideByZero,
    Environment,
    IllegalBinaryOperation,
    IllegalUnaryOperation,
    LoxClass,
    LoxFunction,
    LoxInstance,
    NoSuchProperty,
    NotCallable,
    ReturnSignal,
    UndefinedVariable,
    WrongArity,
    apply_infix_op,
    apply_prefix_op,
    call_value,
    format_value,
    get_builtins,
    is_truthy,
    values_equal,
)


class FakeInterpreter:
    """Records the environments it runs bodies in and handles simple returns."""

    def __init__(self):
        self.env = Environment()
        self.seen = []

    def swap_environment(self, env):
        old, self.env = self.env, env
        return old

    def eval_statements(self, stmts):
        self.seen.append(self.env)
        for stmt in stmts:
            if isinstance(stmt, nodes.Return) and isinstance(stmt.value, nodes.Variable):
                ref = stmt.value.ref
                raise ReturnSignal(self.env.get_at(ref.hops, ref.name))


def returning(name, params):
    body = [nodes.Return(nodes.Variable(nodes.VariableRef(params[0], 0)))] if params else []
    return nodes.FunctionDecl(name, list(params), body)


# ---- environment ----


def test_define_and_get():
    env = Environment()
    env.define("a", 1)
    assert env.get("a") == 1
    env.define("a", "again")
    assert env.get("a") == "again"


def test_get_undefined_raises():
    with pytest.raises(UndefinedVariable) as info:
        Environment().get("missing")
    assert info.value.name == "missing"


def test_set_requires_existing_variable():
    env = Environment()
    with pytest.raises(UndefinedVariable):
        env.set("x", 1)
    env.define("x", 1)
    env.set("x", 2)
    assert env.get("x") == 2


def test_set_does_not_reach_enclosing():
    outer = Environment()
    outer.define("x", 1)
    inner = Environment(outer)
    with pytest.raises(UndefinedVariable):
        inner.set("x", 5)
    assert outer.get("x") == 1


def test_get_at_and_set_at_hop_outwards():
    outer = Environment()
    outer.define("x", 1)
    middle = Environment(outer)
    inner = Environment(middle)
    assert inner.get_at(2, "x") == 1
    inner.set_at(2, "x", 7)
    assert outer.get("x") == 7
    with pytest.raises(UndefinedVariable):
        inner.get_at(1, "x")


def test_hopping_beyond_global_raises():
    with pytest.raises(LookupError):
        Environment().get_at(1, "x")


# ---- values ----


@pytest.mark.parametrize("value", [None, False])
def test_falsey_values(value):
    assert is_truthy(value) is False


@pytest.mark.parametrize("value", [True, 0, "", 5, "text"])
def test_truthy_values(value):
    assert is_truthy(value) is True


def test_values_equal_distinguishes_types():
    assert values_equal(1, 1)
    assert not values_equal(1, True)
    assert not values_equal(0, False)
    assert values_equal("a", "a")
    assert values_equal(None, None)
    assert not values_equal(None, False)


def test_values_equal_uses_identity_for_objects():
    klass = LoxClass("A", None, {})
    a, b = LoxInstance(klass), LoxInstance(klass)
    assert values_equal(a, a)
    assert not values_equal(a, b)


def test_format_value_of_plain_values():
    assert format_value(None) == "Nil"
    assert format_value(3) == "Number(3)"
    assert format_value(True) == "Boolean(true)"


def test_format_value_of_objects_uses_source_forms():
    klass = LoxClass("Point", None, {})
    assert format_value(klass).endswith("(<class Point>)")
    assert format_value(LoxInstance(klass)).endswith("(<instance of Point>)")


# ---- operators ----


def test_add_numbers_and_strings():
    assert apply_infix_op(BinaryOperator.ADD, 2, 3) == 5
    assert apply_infix_op(BinaryOperator.ADD, "ab", "cd") == "abcd"


def test_add_mixed_raises():
    with pytest.raises(IllegalBinaryOperation) as info:
        apply_infix_op(BinaryOperator.ADD, 1, "a")
    assert info.value.op is BinaryOperator.ADD
    assert (info.value.lhs, info.value.rhs) == (1, "a")


def test_arithmetic_and_comparison():
    assert apply_infix_op(BinaryOperator.SUBTRACT, 5, 7) == -2
    assert apply_infix_op(BinaryOperator.MULTIPLY, 6, 7) == 42
    assert apply_infix_op(BinaryOperator.DIVIDE, 9, 3) == 3
    assert apply_infix_op(BinaryOperator.LESS_THAN, 1, 2) is True
    assert apply_infix_op(BinaryOperator.GREATER_EQ, 2, 2) is True
    assert apply_infix_op(BinaryOperator.LESS_EQ, 3, 2) is False


def test_division_truncates_toward_zero():
    assert apply_infix_op(BinaryOperator.DIVIDE, -7, 2) == -3


def test_divide_by_zero():
    with pytest.raises(DivideByZero):
        apply_infix_op(BinaryOperator.DIVIDE, 1, 0)


def test_comparison_on_strings_raises():
    with pytest.raises(IllegalBinaryOperation):
        apply_infix_op(BinaryOperator.GREATER_THAN, "a", "b")


def test_equality_operators():
    assert apply_infix_op(BinaryOperator.EQUAL_TO, "x", "x") is True
    assert apply_infix_op(BinaryOperator.EQUAL_TO, 1, "1") is False
    assert apply_infix_op(BinaryOperator.NOT_EQUAL_TO, None, False) is True


def test_numbers_wrap_at_64_bits():
    largest = 2**63 - 1
    assert apply_infix_op(BinaryOperator.ADD, largest, 1) == -(2**63)


def test_prefix_operators():
    assert apply_prefix_op(UnaryOperator.NEGATE, 4) == -4
    assert apply_prefix_op(UnaryOperator.LOGICAL_NOT, None) is True
    assert apply_prefix_op(UnaryOperator.LOGICAL_NOT, 0) is False
    with pytest.raises(IllegalUnaryOperation) as info:
        apply_prefix_op(UnaryOperator.NEGATE, "s")
    assert info.value.value == "s"


# ---- builtins ----


def test_clock_builtin():
    (clock,) = get_builtins()
    assert clock.name == "clock"
    assert clock.arity == 0
    before = int(time.time())
    now = clock.call([], FakeInterpreter())
    assert before <= now <= int(time.time())
    assert repr(clock) == "<built-in clock>"


def test_builtin_wrong_arity():
    (clock,) = get_builtins()
    with pytest.raises(WrongArity) as info:
        clock.call([1], FakeInterpreter())
    assert (info.value.expected, info.value.got) == (0, 1)


def test_builtins_are_compared_by_identity():
    first, second = get_builtins()[0], get_builtins()[0]
    assert values_equal(first, first)
    assert not values_equal(first, second)


# ---- functions ----


def test_function_returns_argument_and_restores_environment():
    interp = FakeInterpreter()
    original = interp.env
    func = LoxFunction(returning("id", ["a"]), False, Environment())
    assert func.arity() == 1
    assert func.call(["hello"], interp) == "hello"
    assert interp.env is original


def test_function_without_return_gives_nil():
    func = LoxFunction(returning("f", []), False, Environment())
    assert func.call([], FakeInterpreter()) is None


def test_function_body_runs_in_closure_child():
    closure = Environment()
    interp = FakeInterpreter()
    LoxFunction(returning("f", []), False, closure).call([], interp)
    assert interp.seen[0].enclosing is closure


def test_function_wrong_arity():
    func = LoxFunction(returning("f", ["a", "b"]), False, Environment())
    with pytest.raises(WrongArity) as info:
        func.call([1], FakeInterpreter())
    assert (info.value.expected, info.value.got) == (2, 1)


def test_bind_defines_this():
    klass = LoxClass("A", None, {})
    instance = LoxInstance(klass)
    func = LoxFunction(returning("m", []), False, Environment())
    bound = func.bind(instance)
    assert bound.closure.get("this") is instance
    assert bound.closure.enclosing is func.closure
    assert repr(bound) == "<function m>"


def test_call_value_rejects_non_callables():
    with pytest.raises(NotCallable) as info:
        call_value(3, [], FakeInterpreter())
    assert info.value.value == 3


# ---- classes ----


def test_class_without_init_has_no_arity():
    klass = LoxClass("A", None, {})
    instance = call_value(klass, [], FakeInterpreter())
    assert klass.arity() == 0
    assert instance.klass is klass
    with pytest.raises(WrongArity):
        klass.call([1], FakeInterpreter())


def test_class_runs_initializer_bound_to_instance():
    init = LoxFunction(returning("init", ["value"]), True, Environment())
    klass = LoxClass("A", None, {"init": init})
    interp = FakeInterpreter()
    instance = klass.call([10], interp)
    assert klass.arity() == 1
    body_env = interp.seen[0]
    assert body_env.get("value") == 10
    assert body_env.enclosing.get("this") is instance


def test_find_method_follows_superclass():
    method = LoxFunction(returning("greet", []), False, Environment())
    base = LoxClass("Base", None, {"greet": method})
    derived = LoxClass("Derived", base, {})
    assert derived.find_method("greet") is method
    assert derived.find_method("missing") is None


def test_instance_properties_and_methods():
    method = LoxFunction(returning("m", []), False, Environment())
    instance = LoxInstance(LoxClass("A", None, {"m": method}))
    instance.set("x", 5)
    assert instance.get("x") == 5
    bound = instance.get("m")
    assert bound.declaration is method.declaration
    assert bound.closure.get("this") is instance


def test_property_shadows_method():
    method = LoxFunction(returning("m", []), False, Environment())
    instance = LoxInstance(LoxClass("A", None, {"m": method}))
    instance.set("m", "field")
    assert instance.get("m") == "field"


def test_missing_property_raises():
    instance = LoxInstance(LoxClass("A", None, {}))
    with pytest.raises(NoSuchProperty) as info:
        instance.get("nope")
    assert info.value.value is instance
    assert info.value.name == "nope"