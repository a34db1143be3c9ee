import re
from typing import Dict, Optional, Protocol


class Calculator(Protocol):
    """Evaluates command arguments. Errors raised here reach the caller unchanged."""

    def evaluate(self, expr: str) -> float:
        ...

    def get_variable(self, name: str) -> float:
        ...


_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class LiteralCalculator:
    """Calculator that only understands a signed number or a signed variable name.

    Good enough for the command line tool and for tests; anything with operators
    needs a real expression evaluator.
    """

    def __init__(self, variables: Optional[Dict[str, float]] = None) -> None:
        self.variables: Dict[str, float] = dict(variables or {})

    def set_variable(self, name: str, value: float) -> None:
        self.variables[name] = float(value)

    def get_variable(self, name: str) -> float:
        if name not in self.variables:
            raise KeyError(f"undefined variable: {name}")
        return self.variables[name]

    def evaluate(self, expr: str) -> float:
        s = expr.strip()
        sign = 1.0
        while s[:1] in ("+", "-"):
            if s[0] == "-":
                sign = -sign
            s = s[1:].lstrip()

        if _NAME_RE.match(s) and s.lower() not in ("inf", "infinity", "nan"):
            return sign * self.get_variable(s)

        try:
            value = float(s)
        except ValueError:
            raise ValueError(f"cannot evaluate expression: {expr!r}") from None
        return sign * value
