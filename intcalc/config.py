import os
from dataclasses import dataclass


@dataclass(frozen=True)
class CalculatorConfig:
    """Tunables shared by the parser and the session driver."""

    # counts every expression/term/factor frame, so a long flat chain uses three per operand
    max_depth: int = 500
    # reject tokens left over after a complete expression instead of dropping them
    strict: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "CalculatorConfig":
        """Load configuration from environment variables."""
        return cls(
            max_depth=int(os.environ.get("INTCALC_MAX_DEPTH", str(cls.max_depth))),
            strict=os.environ.get("INTCALC_STRICT", "0") == "1",
            log_level=os.environ.get("INTCALC_LOG_LEVEL", cls.log_level).upper(),
        )


DEFAULT_CONFIG = CalculatorConfig()
