import math
import sys
from dataclasses import dataclass

from transform.matrix_constants import FORMAT_SIGNIFICANT_DIGITS


@dataclass(frozen=True)
class MatrixUtil:
    EPSILON = sys.float_info.epsilon

    @staticmethod
    def deg_to_rad(deg: float) -> float:
        """Convert degrees to radians."""
        return math.pi * deg / 180.0

    @staticmethod
    def round_half_up(x: float, n: int) -> float:
        """Round x to n decimal places, ties rounded up (towards +inf), not to even."""
        pow10 = 10.0 ** n
        scaled = x * pow10 + 0.5
        if not math.isfinite(scaled):
            # Too large to have decimals worth rounding
            return x
        return math.floor(scaled) / pow10

    @staticmethod
    def format_number(x: float, digits: int = FORMAT_SIGNIFICANT_DIGITS) -> str:
        """Format like a default C++ ostream: shortest of fixed/exponent with `digits` significant digits."""
        return f"{x:.{digits}g}"

    @staticmethod
    def is_skew_angle_valid(deg: float) -> bool:
        """A skew angle is usable unless its tangent is undefined (cos ~ 0)."""
        return abs(math.cos(MatrixUtil.deg_to_rad(deg))) > MatrixUtil.EPSILON
