"""To be run from project root"""
import logging

from intcalc.config import CalculatorConfig
from intcalc.session import run_line

QUIT_COMMANDS = ("quit", "exit")


if __name__ == "__main__":
    config = CalculatorConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    variables: dict[str, int] = dict()

    while True:
        try:
            code = input("> ")
        except EOFError:
            print()
            break

        if not code.strip():
            continue
        if code.strip().lower() in QUIT_COMMANDS:
            break

        result, variables = run_line(code, variables, config)
        print(result)
