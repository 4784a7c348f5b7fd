import logging
from dataclasses import dataclass

from intcalc.config import DEFAULT_CONFIG, CalculatorConfig
from intcalc.tokenizer import Operator, Token, TokenType, untokenize

logger = logging.getLogger(__name__)


@dataclass
class ParserError(Exception):
    errmsg: str
    tokens: list[Token]
    error_token_idx: int

    def __str__(self) -> str:
        prefix = untokenize(self.tokens[: self.error_token_idx + 1])
        if self.error_token_idx < len(self.tokens) and self.tokens[self.error_token_idx].lexeme:
            caret_idx = len(prefix) - len(self.tokens[self.error_token_idx].lexeme)
        else:
            caret_idx = len(prefix) + (1 if prefix else 0)
        return "\n".join([f"Parser error: {self.errmsg}", untokenize(self.tokens), " " * caret_idx + "^"])


@dataclass(frozen=True)
class Number:
    value: int


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class Sum:
    op: Operator  # ADD or SUB
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True)
class Product:
    op: Operator  # MUL or DIV
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True)
class Unary:
    op: Operator  # ADD or SUB
    operand: "Expression"


@dataclass(frozen=True)
class Assign:
    name: str
    value: "Expression"


Expression = Number | Variable | Sum | Product | Unary | Assign

SUM_OPERATORS = (Operator.ADD, Operator.SUB)
PRODUCT_OPERATORS = (Operator.MUL, Operator.DIV)


def parse(tokens: list[Token], config: CalculatorConfig | None = None) -> Expression:
    """Parses one expression out of ``tokens``.

    Grammar, lowest precedence first; both binary tiers chain to the right:

        expression := term (('+' | '-') expression)?
                    | identifier '=' expression
        term       := factor (('*' | '/') term)?
        factor     := number | identifier | ('+' | '-') factor | '(' expression ')'

    Tokens left over after a complete expression are dropped with a warning, or
    rejected when ``config.strict`` is set. A lexer error among them is always raised.
    """
    if not tokens:
        raise RuntimeError("Internal error, parser received an empty token sequence")
    config = config or DEFAULT_CONFIG
    expr, i = _consume_expression(tokens, 0, depth=0, max_depth=config.max_depth)
    if i < len(tokens) and tokens[i].type is not TokenType.END_OF_INPUT:
        # an error token is always the last one the lexer emits
        if tokens[-1].type is TokenType.ERROR:
            raise _lex_error(tokens, len(tokens) - 1)
        if config.strict:
            raise ParserError(f"unexpected token {tokens[i].lexeme!r} after end of expression", tokens, i)
        logger.warning("Ignoring trailing tokens after complete expression: %r", untokenize(tokens[i:]))
    return expr


def _peek(tokens: list[Token], i: int) -> Token:
    # a token list cut short by the caller reads as end of input
    if i >= len(tokens):
        return Token(type=TokenType.END_OF_INPUT, lexeme="", position=-1)
    return tokens[i]


def _lex_error(tokens: list[Token], i: int) -> ParserError:
    token = tokens[i]
    return ParserError(f"{token.value}: {token.lexeme!r}", tokens=tokens, error_token_idx=i)


def _check_depth(tokens: list[Token], i: int, depth: int, max_depth: int) -> None:
    if depth > max_depth:
        raise ParserError("expression nested too deeply", tokens=tokens, error_token_idx=i)


def _consume_expression(tokens: list[Token], i: int, depth: int, max_depth: int) -> tuple[Expression, int]:
    _check_depth(tokens, i, depth, max_depth)
    left, i = _consume_term(tokens, i, depth + 1, max_depth)
    token = _peek(tokens, i)
    if token.type is TokenType.OPERATOR and token.value in SUM_OPERATORS:
        right, i = _consume_expression(tokens, i + 1, depth + 1, max_depth)
        return Sum(op=token.value, left=left, right=right), i
    elif token.type is TokenType.ASSIGN:
        if not isinstance(left, Variable):
            raise ParserError("only variables can be assigned to", tokens=tokens, error_token_idx=i)
        value, i = _consume_expression(tokens, i + 1, depth + 1, max_depth)
        return Assign(name=left.name, value=value), i
    elif token.type is TokenType.ERROR:
        raise _lex_error(tokens, i)
    return left, i


def _consume_term(tokens: list[Token], i: int, depth: int, max_depth: int) -> tuple[Expression, int]:
    _check_depth(tokens, i, depth, max_depth)
    left, i = _consume_factor(tokens, i, depth + 1, max_depth)
    token = _peek(tokens, i)
    if token.type is TokenType.OPERATOR and token.value in PRODUCT_OPERATORS:
        right, i = _consume_term(tokens, i + 1, depth + 1, max_depth)
        return Product(op=token.value, left=left, right=right), i
    elif token.type is TokenType.ERROR:
        raise _lex_error(tokens, i)
    return left, i


def _consume_factor(tokens: list[Token], i: int, depth: int, max_depth: int) -> tuple[Expression, int]:
    _check_depth(tokens, i, depth, max_depth)
    token = _peek(tokens, i)
    if token.type is TokenType.NUMBER:
        return Number(token.value), i + 1
    elif token.type is TokenType.IDENTIFIER:
        return Variable(token.lexeme), i + 1
    elif token.type is TokenType.OPERATOR:
        if token.value not in SUM_OPERATORS:
            raise ParserError("invalid unary operator", tokens=tokens, error_token_idx=i)
        operand, i = _consume_factor(tokens, i + 1, depth + 1, max_depth)
        return Unary(op=token.value, operand=operand), i
    elif token.type is TokenType.LEFT_PAREN:
        inner, i = _consume_expression(tokens, i + 1, depth + 1, max_depth)
        if _peek(tokens, i).type is not TokenType.RIGHT_PAREN:
            raise ParserError("missing right parenthesis", tokens=tokens, error_token_idx=i)
        return inner, i + 1
    elif token.type is TokenType.ERROR:
        raise _lex_error(tokens, i)
    elif token.type is TokenType.END_OF_INPUT:
        raise ParserError("unexpected end of input", tokens=tokens, error_token_idx=i)
    else:
        raise ParserError(f"unexpected token {token.lexeme!r}", tokens=tokens, error_token_idx=i)
