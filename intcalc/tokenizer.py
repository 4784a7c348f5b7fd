import enum
import logging
import string
from dataclasses import dataclass
from typing import Callable

from intcalc.utils import I32_MAX, PrintableEnum, fits_i32

logger = logging.getLogger(__name__)


class TokenType(PrintableEnum):
    LEFT_PAREN = enum.auto()
    RIGHT_PAREN = enum.auto()
    ASSIGN = enum.auto()
    OPERATOR = enum.auto()
    IDENTIFIER = enum.auto()
    NUMBER = enum.auto()
    ERROR = enum.auto()
    END_OF_INPUT = enum.auto()


class Operator(PrintableEnum):
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()


MALFORMED_TOKEN = "malformed token"
UNEXPECTED_CHARACTER = "unexpected character"
NUMBER_OUT_OF_RANGE = "integer literal out of range"

MAX_I32_DIGITS = len(str(I32_MAX))


@dataclass(frozen=True)
class Token:
    """One lexical unit.

    ``value`` depends on ``type``: the ``Operator`` for OPERATOR, the parsed int for
    NUMBER, the error reason for ERROR, and None otherwise. ``lexeme`` is the source
    text the token was read from (the offending text for ERROR).
    """

    type: TokenType
    lexeme: str
    value: Operator | int | str | None = None
    position: int = 0

    def __str__(self) -> str:
        return f"<{self.type}>{self.lexeme}"


OPERATORS = {
    "+": Operator.ADD,
    "-": Operator.SUB,
    "*": Operator.MUL,
    "/": Operator.DIV,
}

SINGLE_CHAR_TOKENS = {
    "=": TokenType.ASSIGN,
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
}


def _is_valid_in_number(s: str) -> bool:
    # str.isdigit() also accepts superscripts and other non-ASCII digits
    return s in string.digits


def _is_valid_in_identifier(s: str) -> bool:
    return s.isalpha()


def _ends_run(s: str) -> bool:
    """Characters allowed right after a number or identifier."""
    return s.isspace() or s in OPERATORS or s in SINGLE_CHAR_TOKENS


def _consume_run(code: str, i: int, is_valid: Callable[[str], bool]) -> tuple[int, str | None]:
    """Returns the end index of the run starting at ``i`` and the offending character, if any"""
    end_idx = i + 1
    while end_idx < len(code) and is_valid(code[end_idx]):
        end_idx += 1
    if end_idx < len(code) and not _ends_run(code[end_idx]):
        return end_idx, code[end_idx]
    return end_idx, None


def tokenize(code: str) -> list[Token]:
    i = 0
    tokens: list[Token] = []
    while i < len(code):
        char = code[i]
        if char in OPERATORS:
            tokens.append(Token(type=TokenType.OPERATOR, lexeme=char, value=OPERATORS[char], position=i))
        elif char in SINGLE_CHAR_TOKENS:
            tokens.append(Token(type=SINGLE_CHAR_TOKENS[char], lexeme=char, position=i))
        elif _is_valid_in_number(char):
            number_end_idx, bad_char = _consume_run(code, i, _is_valid_in_number)
            if bad_char is not None:
                return _terminate(tokens, code[i : number_end_idx + 1], MALFORMED_TOKEN, i)
            digits = code[i:number_end_idx]
            # long runs can't fit and would trip int()'s string conversion limit
            if len(digits.lstrip("0")) > MAX_I32_DIGITS or not fits_i32(int(digits)):
                return _terminate(tokens, digits, NUMBER_OUT_OF_RANGE, i)
            tokens.append(Token(type=TokenType.NUMBER, lexeme=digits, value=int(digits), position=i))
            i = number_end_idx - 1  # to account for += 1 later
        elif _is_valid_in_identifier(char):
            ident_end_idx, bad_char = _consume_run(code, i, _is_valid_in_identifier)
            if bad_char is not None:
                return _terminate(tokens, code[i : ident_end_idx + 1], MALFORMED_TOKEN, i)
            tokens.append(Token(type=TokenType.IDENTIFIER, lexeme=code[i:ident_end_idx], position=i))
            i = ident_end_idx - 1  # to account for += 1 later
        elif char.isspace():
            pass
        else:
            return _terminate(tokens, char, UNEXPECTED_CHARACTER, i)
        i += 1

    tokens.append(Token(type=TokenType.END_OF_INPUT, lexeme="", position=len(code)))
    return tokens


def _terminate(tokens: list[Token], offending: str, reason: str, position: int) -> list[Token]:
    logger.debug("Lexing stopped at offset %d: %s %r", position, reason, offending)
    tokens.append(Token(type=TokenType.ERROR, lexeme=offending, value=reason, position=position))
    return tokens


def untokenize(tokens: list[Token]) -> str:
    result = ""
    for token in tokens:
        if not token.lexeme:
            continue
        # ( 1 + 2 ) => (1 + 2)
        if result and not result.endswith("(") and token.type is not TokenType.RIGHT_PAREN:
            result += " "
        result += token.lexeme
    return result
