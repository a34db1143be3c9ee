from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Dict, List, Optional, Sequence, Tuple

from transform.AffineMatrix import AffineMatrix
from transform.Calculator import LiteralCalculator
from transform.ParseError import ParseError
from transform.matrix_constants import CENTER_VARIABLES, SVG_PRECISION

logger = logging.getLogger(__name__)


def parse_variable(text: str) -> Tuple[str, float]:
    """'name=value' -> (name, value)"""
    name, sep, value = text.partition("=")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    try:
        return name.strip(), float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number for {name.strip()!r}: {value!r}") from None


def parse_point(text: str) -> Tuple[float, float]:
    """'x,y' -> (x, y)"""
    parts = text.split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected X,Y, got {text!r}")
    try:
        return float(parts[0]), float(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid point: {text!r}") from None


def build_calculator(variables: Sequence[Tuple[str, float]]) -> LiteralCalculator:
    """Calculator with the rotation center variables preset to 0."""
    values: Dict[str, float] = {name: 0.0 for name in CENTER_VARIABLES}
    for name, value in variables:
        values[name] = value
    return LiteralCalculator(values)


# -----------------------------
# Export
# -----------------------------


def export_json(matrix: AffineMatrix, points: List[Tuple[float, float]], path: str, precision: int) -> None:
    """Export as JSON: { "matrix": [[...], [...], [...]], "svg": str, "points": [[x,y], ...] }"""
    obj = {
        "matrix": matrix.m.tolist(),
        "svg": matrix.to_svg(precision),
        "points": [list(matrix.apply(p)) for p in points],
    }
    data = json.dumps(obj, ensure_ascii=False, separators=(",", ":"))
    if path == "-" or path == "stdout":
        print(data)
    else:
        with open(path, "w", encoding="utf-8") as f:
            f.write(data)


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        description="Transformation commands (T, S, R, FH, FV, KX, KY, M) -> affine matrix")
    ap.add_argument("commands", help="Command string, e.g. 'T10,5 R45 S2'")
    ap.add_argument("--var", dest="variables", metavar="NAME=VALUE", type=parse_variable, action="append",
                    default=[], help="Set a calculator variable (ux, uy, w, h default to 0)")
    ap.add_argument("--apply", dest="points", metavar="X,Y", type=parse_point, action="append",
                    default=[], help="Transform a point; may be repeated")
    ap.add_argument("--precision", type=int, default=SVG_PRECISION,
                    help=f"Decimal places of the SVG output (default: {SVG_PRECISION})")
    ap.add_argument("--raw", action="store_true", help="Print all matrix components instead of the SVG form")
    ap.add_argument("--json", metavar="PATH", help="Write matrix and points as JSON (use '-' for stdout)")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log each parsed command")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    calc = build_calculator(args.variables)
    logger.debug("calculator variables: %s", calc.variables)
    try:
        matrix = AffineMatrix.from_commands(args.commands, calc)
    except ParseError as e:
        print(f"Syntax error at position {e.position}: {e}", file=sys.stderr)
        return 2
    except (ValueError, KeyError) as e:
        print(f"Evaluation error: {e}", file=sys.stderr)
        return 1

    print(matrix.write() if args.raw else matrix.to_svg(args.precision))
    for p in args.points:
        x, y = matrix.apply(p)
        print(f"({p[0]:g},{p[1]:g}) -> ({x:.6g},{y:.6g})")

    if args.json:
        export_json(matrix, args.points, args.json, args.precision)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
