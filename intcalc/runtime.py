import logging
from dataclasses import dataclass
from typing import Callable, Mapping, NamedTuple

from intcalc.parser import Assign, Expression, Number, Product, Sum, Unary, Variable
from intcalc.tokenizer import Operator
from intcalc.utils import fits_i32

logger = logging.getLogger(__name__)


@dataclass
class CalcRuntimeError(Exception):
    errmsg: str

    def __str__(self) -> str:
        return f"Runtime error: {self.errmsg}"


class Evaluation(NamedTuple):
    result: int | CalcRuntimeError
    variables: dict[str, int]

    @property
    def ok(self) -> bool:
        return not isinstance(self.result, CalcRuntimeError)


def evaluate(expression: Expression, variables: Mapping[str, int]) -> Evaluation:
    """Evaluates ``expression`` against a copy of ``variables``.

    The caller's mapping is never touched. On failure the returned variables hold
    every assignment completed before the failing subexpression and nothing after.
    """
    scope = dict(variables)
    try:
        return Evaluation(evaluate_expression(expression, scope), scope)
    except CalcRuntimeError as e:
        return Evaluation(e, scope)


def evaluate_expression(expression: Expression, variables: dict[str, int]) -> int:
    """Post-order walk, operands left to right; assignments update ``variables`` in place"""
    if isinstance(expression, Number):
        return expression.value
    elif isinstance(expression, Variable):
        if expression.name not in variables:
            raise CalcRuntimeError(f"undefined variable {expression.name!r}")
        return variables[expression.name]
    elif isinstance(expression, (Sum, Product)):
        left_res = evaluate_expression(expression.left, variables)
        right_res = evaluate_expression(expression.right, variables)
        return _checked(binary_impls[expression.op](left_res, right_res))
    elif isinstance(expression, Unary):
        operand = evaluate_expression(expression.operand, variables)
        return _checked(unary_impls[expression.op](operand))
    elif isinstance(expression, Assign):
        value = evaluate_expression(expression.value, variables)
        variables[expression.name] = value
        logger.debug("Assigned %s = %d", expression.name, value)
        return value
    else:
        raise RuntimeError(f"Unexpected expression type: {expression}")


def _checked(value: int) -> int:
    if not fits_i32(value):
        raise CalcRuntimeError("integer overflow")
    return value


def _divide(a: int, b: int) -> int:
    if b == 0:
        raise CalcRuntimeError("division by zero")
    # truncate toward zero; Python's // floors
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


binary_impls: dict[Operator, Callable[[int, int], int]] = {
    Operator.ADD: lambda a, b: a + b,
    Operator.SUB: lambda a, b: a - b,
    Operator.MUL: lambda a, b: a * b,
    Operator.DIV: _divide,
}

unary_impls: dict[Operator, Callable[[int], int]] = {
    Operator.ADD: lambda a: a,
    Operator.SUB: lambda a: -a,
}
