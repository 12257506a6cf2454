import pytest

from loxwalk.ast import (
    Assignment,
    BinaryOperator,
    BinOp,
    Block,
    Call,
    ExpressionStmt,
    Get,
    Identifier,
    Literal,
    Logical,
    LogicalOperator,
    Set,
    Super,
    This,
    Tree,
    UnaryOp,
    UnaryOperator,
    Variable,
    lispy_string,
)
from loxwalk.span import CodePosition, Span


def _var(name):
    return Variable(Identifier(name))


@pytest.mark.parametrize(
    "value, expected",
    [(None, "nil"), (True, "true"), (False, "false"), (3.0, "3"), (104.1, "104.1")],
)
def test_literal_rendering(value, expected):
    assert lispy_string(Literal(value)) == expected


def test_string_literal_is_quoted():
    rendered = lispy_string(Literal("word"))
    assert rendered == '"word"'


def test_binop_rendering():
    expr = BinOp(BinaryOperator.ADD, Literal(1.0), Literal(2.0))
    assert lispy_string(expr) == "(+ 1 2)"


def test_assignment_of_negation():
    expr = Assignment(Identifier("x"), UnaryOp(UnaryOperator.NEGATE, Literal(5.0)))
    assert lispy_string(expr) == "(set x (- 5))"


def test_call_rendering():
    expr = Call(_var("f"), [_var("a"), _var("b")])
    assert lispy_string(expr) == "(call f a b)"


def test_logical_uses_keyword_symbol():
    expr = Logical(LogicalOperator.OR, _var("a"), _var("b"))
    assert lispy_string(expr).startswith("(or ")
    assert lispy_string(expr).endswith(" a b)")


def test_get_set_this_super():
    get = Get(This(), Identifier("field"))
    assert lispy_string(get).startswith("(get this ")
    setter = Set(_var("obj"), Identifier("field"), Literal(None))
    assert lispy_string(setter).split() == ["(set", "obj", "field", "nil)"]
    assert lispy_string(Super(Identifier("method"))).startswith("(super ")
    assert "method" in lispy_string(Super(Identifier("method")))


def test_operator_symbols():
    assert lispy_string(BinOp(BinaryOperator.LESS_EQ, _var("a"), _var("b"))) == "(<= a b)"
    assert lispy_string(UnaryOp(UnaryOperator.LOGICAL_NOT, _var("x"))) == "(! x)"
    assert lispy_string(Logical(LogicalOperator.AND, _var("a"), _var("b"))) == "(and a b)"


def test_literal_equality_distinguishes_types():
    assert Literal(1.0) != Literal(True)
    assert Literal(1.0) == Literal(1.0)
    assert hash(Literal("a")) == hash(Literal("a"))


def test_default_span_is_dummy():
    assert Identifier("x").span == Span.dummy()


def test_nodes_compare_structurally():
    pos = CodePosition(0, 1, 1)
    span = Span(pos, pos)
    a = ExpressionStmt(_var("x"), span)
    b = ExpressionStmt(_var("x"), span)
    assert a == b
    tree = Tree([Block([a])])
    assert tree.statements[0].statements == [b]


def test_non_expression_rejected():
    with pytest.raises(TypeError):
        lispy_string(ExpressionStmt(_var("x")))