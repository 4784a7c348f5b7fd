import logging
from typing import Mapping, NamedTuple

from intcalc.config import DEFAULT_CONFIG, CalculatorConfig
from intcalc.parser import ParserError, parse
from intcalc.runtime import evaluate
from intcalc.tokenizer import tokenize

logger = logging.getLogger(__name__)


class LineResult(NamedTuple):
    result: int | str
    variables: dict[str, int]

    @property
    def ok(self) -> bool:
        return isinstance(self.result, int)


def run_line(code: str, variables: Mapping[str, int], config: CalculatorConfig | None = None) -> LineResult:
    """Lexes, parses and evaluates one line.

    Errors come back as message strings. The returned variables are what the next
    line should run against: unchanged after a lex or parse error, and as of the
    failure point after a runtime error.
    """
    config = config or DEFAULT_CONFIG

    tokens = tokenize(code)
    logger.debug("tokens: %s", " ".join(str(t) for t in tokens))

    try:
        expression = parse(tokens, config)
    except ParserError as e:
        logger.debug("Parse failed: %s", e.errmsg)
        return LineResult(str(e), dict(variables))
    logger.debug("ast: %s", expression)

    result, new_variables = evaluate(expression, variables)
    if isinstance(result, int):
        return LineResult(result, new_variables)
    return LineResult(str(result), new_variables)
