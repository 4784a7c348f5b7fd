import logging

import pytest

from intcalc.config import CalculatorConfig
from intcalc.parser import Assign, Number, ParserError, Product, Sum, Unary, Variable, parse
from intcalc.tokenizer import Operator, Token, TokenType, tokenize


def parse_code(code: str, config: CalculatorConfig | None = None):
    return parse(tokenize(code), config)


@pytest.mark.parametrize(
    "code, expected_ast",
    [
        pytest.param("42", Number(42)),
        pytest.param("x", Variable("x")),
        pytest.param("1 + 2", Sum(Operator.ADD, Number(1), Number(2))),
        pytest.param("1 * 2", Product(Operator.MUL, Number(1), Number(2))),
        pytest.param(
            "1 - 3 * 2",
            Sum(Operator.SUB, Number(1), Product(Operator.MUL, Number(3), Number(2))),
        ),
        pytest.param(
            "3 - 1 / 2",
            Sum(Operator.SUB, Number(3), Product(Operator.DIV, Number(1), Number(2))),
        ),
        pytest.param(
            "3 * (1 + 2)",
            Product(Operator.MUL, Number(3), Sum(Operator.ADD, Number(1), Number(2))),
        ),
        pytest.param(
            "1 - 2 - 3",
            Sum(Operator.SUB, Number(1), Sum(Operator.SUB, Number(2), Number(3))),
        ),
        pytest.param("-1", Unary(Operator.SUB, Number(1))),
        pytest.param("- + 1", Unary(Operator.SUB, Unary(Operator.ADD, Number(1)))),
        pytest.param(
            "-1 + 1",
            Sum(Operator.ADD, Unary(Operator.SUB, Number(1)), Number(1)),
        ),
        pytest.param("x = 1", Assign("x", Number(1))),
        pytest.param("x = y = 1", Assign("x", Assign("y", Number(1)))),
        pytest.param(
            "x = 1 + 2",
            Assign("x", Sum(Operator.ADD, Number(1), Number(2))),
        ),
        pytest.param(
            "x + y = 3",
            Sum(Operator.ADD, Variable("x"), Assign("y", Number(3))),
        ),
    ],
)
def test_parse(code: str, expected_ast) -> None:
    assert parse_code(code) == expected_ast


@pytest.mark.parametrize(
    "code, errmsg",
    [
        pytest.param("3 = x", "only variables can be assigned to"),
        pytest.param("(1 + 2) = 3", "only variables can be assigned to"),
        pytest.param("-x = 3", "only variables can be assigned to"),
        pytest.param("* 3", "invalid unary operator"),
        pytest.param("1 + / 2", "invalid unary operator"),
        pytest.param("(1 + 2", "missing right parenthesis"),
        pytest.param("((1)", "missing right parenthesis"),
        pytest.param("", "unexpected end of input"),
        pytest.param("1 +", "unexpected end of input"),
        pytest.param("3 *", "unexpected end of input"),
        pytest.param("x =", "unexpected end of input"),
        pytest.param("-", "unexpected end of input"),
        pytest.param("()", "unexpected token ')'"),
        pytest.param("= 1", "unexpected token '='"),
        pytest.param("1abc", "malformed token: '1a'"),
        pytest.param("1 + 2abc", "malformed token: '2a'"),
        pytest.param("2 $", "unexpected character: '$'"),
        pytest.param("(1 $", "unexpected character: '$'"),
        pytest.param("3 * 4 $", "unexpected character: '$'"),
        pytest.param("x = 2147483648", "integer literal out of range: '2147483648'"),
        # lexer errors among trailing tokens are not dropped
        pytest.param("1 2 $", "unexpected character: '$'"),
        pytest.param("1(ab$", "malformed token: 'ab$'"),
        pytest.param("(1) (2abc", "malformed token: '2a'"),
    ],
)
def test_parse_errors(code: str, errmsg: str) -> None:
    with pytest.raises(ParserError) as e:
        parse_code(code)
    assert e.value.errmsg == errmsg


def test_number_then_paren_is_not_a_lex_error() -> None:
    # "1(abc" lexes cleanly; the parser then stops after the complete expression "1"
    assert parse_code("1(abc") == Number(1)


@pytest.mark.parametrize("code", ["1 2", "1 )", "x = 1 y", "(1) (2)"])
def test_trailing_tokens_are_dropped_with_warning(code: str, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="intcalc.parser"):
        parse_code(code)
    assert "Ignoring trailing tokens" in caplog.text


def test_trailing_tokens_keep_the_leading_expression() -> None:
    assert parse_code("1 2") == Number(1)
    assert parse_code("x = 1 y") == Assign("x", Number(1))


@pytest.mark.parametrize("code, leftover", [("1 2", "2"), ("1 )", ")"), ("(1) (2)", "(")])
def test_strict_mode_rejects_trailing_tokens(code: str, leftover: str) -> None:
    with pytest.raises(ParserError) as e:
        parse_code(code, CalculatorConfig(strict=True))
    assert e.value.errmsg == f"unexpected token {leftover!r} after end of expression"


def test_strict_mode_reports_trailing_lex_error() -> None:
    with pytest.raises(ParserError) as e:
        parse_code("1 2 $", CalculatorConfig(strict=True))
    assert e.value.errmsg == "unexpected character: '$'"


def test_trailing_lex_error_is_not_logged_as_dropped(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="intcalc.parser"):
        with pytest.raises(ParserError):
            parse_code("1 2 $")
    assert "Ignoring trailing tokens" not in caplog.text


def test_complete_expression_passes_strict_mode() -> None:
    assert parse_code("1 + 2", CalculatorConfig(strict=True)) == Sum(Operator.ADD, Number(1), Number(2))


def test_depth_limit() -> None:
    config = CalculatorConfig(max_depth=5)
    assert parse_code("(1)", config) == Number(1)
    with pytest.raises(ParserError) as e:
        parse_code("((1))", config)
    assert e.value.errmsg == "expression nested too deeply"


def test_deeply_nested_input_fails_cleanly() -> None:
    code = "(" * 2000 + "1" + ")" * 2000
    with pytest.raises(ParserError) as e:
        parse_code(code)
    assert e.value.errmsg == "expression nested too deeply"


def test_long_flat_chain_within_default_limit() -> None:
    ast = parse_code(" + ".join(["1"] * 200))
    assert isinstance(ast, Sum)


def test_empty_token_list_is_an_internal_error() -> None:
    with pytest.raises(RuntimeError):
        parse([])


def test_token_list_without_end_marker() -> None:
    tokens = [
        Token(type=TokenType.NUMBER, lexeme="3", value=3),
        Token(type=TokenType.OPERATOR, lexeme="+", value=Operator.ADD),
    ]
    with pytest.raises(ParserError) as e:
        parse(tokens)
    assert e.value.errmsg == "unexpected end of input"


def test_error_display_points_at_token() -> None:
    with pytest.raises(ParserError) as e:
        parse_code("1 + * 2")
    assert str(e.value).splitlines() == [
        "Parser error: invalid unary operator",
        "1 + * 2",
        "    ^",
    ]


def test_error_display_at_end_of_input() -> None:
    with pytest.raises(ParserError) as e:
        parse_code("1 +")
    assert str(e.value).splitlines() == [
        "Parser error: unexpected end of input",
        "1 +",
        "    ^",
    ]
