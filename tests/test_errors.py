import pytest

from loxwalk.errors import MAX_NUMBER_ARGS, ErrorKind, Item, ParseError
from loxwalk.span import CodePosition, Span
from loxwalk.tokens import Token, TokenKind


def _span(source, lo, hi):
    return Span(
        CodePosition.from_byte_pos(source, lo),
        CodePosition.from_byte_pos(source, hi),
    )


def test_expected_identifier_at_token():
    source = "var 1;"
    err = ParseError(_span(source, 4, 5), ErrorKind.EXPECTED_IDENTIFIER)
    assert err.render(source) == "Error at '1': Expect variable name."


def test_error_at_end():
    source = "print 1"
    err = ParseError(
        _span(source, 7, 7), ErrorKind.EXPECT_AFTER, expected=";", item=Item.PRINT_VALUE
    )
    assert err.render(source) == "Error at end: Expect ';' after value."


def test_expect_before():
    source = "fun f() print 1;"
    err = ParseError(
        _span(source, 8, 13),
        ErrorKind.EXPECT_BEFORE,
        expected="{",
        item=Item.FUNCTION_BODY,
    )
    assert err.render(source) == "Error at 'print': Expect '{' before function body."


def test_invalid_token_ignores_position():
    source = "@"
    err = ParseError(
        _span(source, 0, 1), ErrorKind.INVALID_TOKEN, message="Unexpected character '@'"
    )
    rendered = err.render(source)
    assert rendered.startswith("Error: ")
    assert "Unexpected character '@'" in rendered
    assert rendered.endswith(".")


def test_expected_expression_carries_token():
    source = "1 + ;"
    token = Token(TokenKind.SEMICOLON)
    err = ParseError(_span(source, 4, 5), ErrorKind.EXPECTED_EXPR_AT, token=token)
    assert err.token == token
    assert err.render(source).endswith("Expect expression.")
    assert err.render(source).startswith("Error at ';'")


@pytest.mark.parametrize(
    "kind, tail",
    [
        (ErrorKind.INVALID_ASSIGNMENT, "Invalid assignment target."),
        (ErrorKind.EXPECT_SUPER_DOT, "Expect '.' after 'super'."),
        (ErrorKind.EXPECT_SUPER_METHOD, "Expect superclass method name."),
        (ErrorKind.EXPECT_SUPERCLASS_NAME, "Expect superclass name."),
        (ErrorKind.EXPECT_PROPERTY_NAME, "Expect property name after '.'."),
        (ErrorKind.EXPECT_COMMA_BETWEEN, "Expect ',' between elements."),
        (ErrorKind.UNCLOSED_BRACE, "Expected }"),
    ],
)
def test_fixed_messages(kind, tail):
    source = "abc"
    rendered = ParseError(_span(source, 3, 3), kind).render(source)
    assert rendered.startswith("Error at end")
    assert rendered.endswith(tail)


def test_argument_limits_mention_maximum():
    source = "f(x)"
    span = _span(source, 2, 3)
    args = ParseError(span, ErrorKind.TOO_MANY_ARGS).render(source)
    params = ParseError(span, ErrorKind.TOO_MANY_PARAMS).render(source)
    assert str(MAX_NUMBER_ARGS) in args and args.endswith("arguments.")
    assert str(MAX_NUMBER_ARGS) in params and params.endswith("parameters.")
    assert MAX_NUMBER_ARGS == 255


def test_item_strings():
    assert Item.FOR_CLAUSE.as_str() == "for clauses"
    assert Item.IF.as_str() == "'if'"


def test_parse_error_keeps_span_and_kind():
    source = "x"
    span = _span(source, 0, 1)
    err = ParseError(span, ErrorKind.INVALID_ASSIGNMENT)
    assert err.kind is ErrorKind.INVALID_ASSIGNMENT
    assert err.span == span
    assert err.render(source) == "Error at 'x': Invalid assignment target."


def test_missing_payload_rejected():
    span = Span.dummy()
    with pytest.raises(ValueError):
        ParseError(span, ErrorKind.INVALID_TOKEN)
    with pytest.raises(ValueError):
        ParseError(span, ErrorKind.EXPECT_AFTER, expected=";")