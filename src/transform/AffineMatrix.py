import math
import re
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

import numpy as np

from transform.MatrixUtil import MatrixUtil
from transform.ParseError import ParseError
from transform.matrix_constants import SVG_PRECISION

if TYPE_CHECKING:
    from transform.Calculator import Calculator


# One item of an SVG transform attribute, e.g. "rotate(30, 10, 10)"
_SVG_ITEM_RE = re.compile(r"\s*,?\s*([A-Za-z]+)\s*\(([^)]*)\)")
_SVG_ARG_SPLIT_RE = re.compile(r"[\s,]+")


class AffineMatrix:
    """2D affine transform: 3x3 homogeneous matrix.

    Stored as numpy array with shape (3,3). Points are column vectors [x,y,1]^T, so
    ((a,b,c),(d,e,f),(0,0,1)) maps (x,y) to (a*x + b*y + c, d*x + e*y + f).

    The mutating operations (translate, scale, rotate, ...) append the new transform
    after the ones already collected and return self so calls can be chained:
    AffineMatrix().translate(5, 0).scale(2) first moves a point, then scales it.
    """

    # Mutable, so not hashable
    __hash__ = None

    def __init__(self, m: Optional[np.ndarray] = None):
        if m is None:
            self.m = np.eye(3, dtype=float)
        else:
            self.m = np.array(m, dtype=float).reshape(3, 3)

    # -----------------------------
    # Construction
    # -----------------------------

    @staticmethod
    def identity() -> "AffineMatrix":
        return AffineMatrix()

    @staticmethod
    def diagonal(d: float) -> "AffineMatrix":
        """Creates the matrix ((d,0,0),(0,d,0),(0,0,d))."""
        return AffineMatrix(np.eye(3, dtype=float) * d)

    @staticmethod
    def from_values(values: Sequence[float], count: Optional[int] = None) -> "AffineMatrix":
        """Creates the matrix ((v0,v1,v2),(v3,v4,v5),(v6,v7,v8)).

        Only the first `count` values are used (all of them if count is None, never more
        than 9). The remaining components are taken from the identity matrix, so
        [sx, 0, 0, 0, sy] is a scaling and [1, 0, tx, 0, 1, ty] a translation.
        """
        return AffineMatrix().set_values(values, count)

    @staticmethod
    def translation(tx: float, ty: float) -> "AffineMatrix":
        return AffineMatrix.from_values([1, 0, tx, 0, 1, ty])

    @staticmethod
    def scaling(sx: float, sy: Optional[float] = None) -> "AffineMatrix":
        if sy is None:
            sy = sx
        return AffineMatrix.from_values([sx, 0, 0, 0, sy])

    @staticmethod
    def rotation(deg: float) -> "AffineMatrix":
        """Anti-clockwise rotation by deg degrees: ((cos,-sin,0),(sin,cos,0),(0,0,1))."""
        rad = MatrixUtil.deg_to_rad(deg)
        c, s = math.cos(rad), math.sin(rad)
        return AffineMatrix.from_values([c, -s, 0, s, c])

    @staticmethod
    def from_commands(cmds: str, calc: "Calculator") -> "AffineMatrix":
        """Build a matrix from a transformation command string, see TransformParser."""
        return AffineMatrix().parse(cmds, calc)

    @staticmethod
    def from_svg_transform(transform_str: str) -> "AffineMatrix":
        """Parse an SVG transform attribute, e.g. "translate(10 5) rotate(30)".

        Supports matrix, translate, scale, rotate, skewX and skewY. As in SVG, the
        rightmost item is the first one applied to a point.
        """
        transform = AffineMatrix.identity()
        if not transform_str or not transform_str.strip():
            return transform

        text = transform_str.rstrip()
        pos = 0
        while pos < len(text):
            match = _SVG_ITEM_RE.match(text, pos)
            if match is None:
                raise ParseError("SVG transform expected", text, pos)
            name, args = match.group(1), match.group(2)
            try:
                parts = [float(p) for p in _SVG_ARG_SPLIT_RE.split(args.strip()) if p]
            except ValueError:
                raise ParseError(f"invalid number in '{name}({args})'", text, match.start(2)) from None
            transform.left_compose(AffineMatrix._svg_item(name, parts, text, match.start(1)))
            pos = match.end()
        return transform

    @staticmethod
    def _svg_item(name: str, parts: List[float], text: str, pos: int) -> "AffineMatrix":
        n = len(parts)
        if name == "matrix" and n == 6:
            # SVG's (a b c d e f) is ((a,c,e),(b,d,f),(0,0,1))
            a, b, c, d, e, f = parts
            return AffineMatrix.from_values([a, c, e, b, d, f])
        if name == "translate" and n in (1, 2):
            return AffineMatrix.translation(parts[0], parts[1] if n == 2 else 0.0)
        if name == "scale" and n in (1, 2):
            return AffineMatrix.scaling(parts[0], parts[1] if n == 2 else None)
        if name == "rotate" and n in (1, 3):
            if n == 1:
                return AffineMatrix.rotation(parts[0])
            cx, cy = parts[1], parts[2]
            return AffineMatrix().translate(-cx, -cy).rotate(parts[0]).translate(cx, cy)
        if name == "skewX" and n == 1:
            return AffineMatrix().xskew(parts[0])
        if name == "skewY" and n == 1:
            return AffineMatrix().yskew(parts[0])
        raise ParseError(f"unsupported SVG transform '{name}' with {n} argument(s)", text, pos)

    def set_values(self, values: Sequence[float], count: Optional[int] = None) -> "AffineMatrix":
        size = len(values) if count is None else min(count, len(values))
        size = min(size, 9)
        flat = np.empty(9, dtype=float)
        for i in range(9):
            if i < size:
                flat[i] = values[i]
            else:
                # identity pattern: 1 on indices 0, 4, 8
                flat[i] = 0.0 if i % 4 else 1.0
        self.m = flat.reshape(3, 3)
        return self

    def parse(self, cmds: str, calc: "Calculator") -> "AffineMatrix":
        """Replace this matrix by the one described by the command string.

        On a ParseError (or a calculator error) the matrix is left untouched.
        """
        from transform.TransformParser import TransformParser

        self.m = TransformParser(calc).parse(cmds).m
        return self

    def copy(self) -> "AffineMatrix":
        return AffineMatrix(self.m)

    # -----------------------------
    # Composition
    # -----------------------------

    def translate(self, tx: float, ty: float) -> "AffineMatrix":
        if tx != 0 or ty != 0:
            self.right_compose(AffineMatrix.translation(tx, ty))
        return self

    def scale(self, sx: float, sy: Optional[float] = None) -> "AffineMatrix":
        if sy is None:
            sy = sx
        if sx != 1 or sy != 1:
            self.right_compose(AffineMatrix.scaling(sx, sy))
        return self

    def rotate(self, deg: float) -> "AffineMatrix":
        """Append an anti-clockwise rotation by deg degrees about the origin."""
        return self.right_compose(AffineMatrix.rotation(deg))

    def xskew(self, deg: float) -> "AffineMatrix":
        t = math.tan(MatrixUtil.deg_to_rad(deg))
        if t != 0:
            self.right_compose(AffineMatrix.from_values([1, t], 2))
        return self

    def yskew(self, deg: float) -> "AffineMatrix":
        t = math.tan(MatrixUtil.deg_to_rad(deg))
        if t != 0:
            self.right_compose(AffineMatrix.from_values([1, 0, 0, t], 4))
        return self

    def flip(self, haxis: bool, a: float) -> "AffineMatrix":
        """Mirror at the horizontal line y=a (haxis) or at the vertical line x=a."""
        s = -1.0 if haxis else 1.0
        self.right_compose(AffineMatrix.from_values([
            -s, 0, 0 if haxis else 2 * a,
            0, s, 2 * a if haxis else 0,
            0, 0, 1]))
        return self

    def right_compose(self, tm: "AffineMatrix") -> "AffineMatrix":
        """M := tm @ M, i.e. tm is applied after the transform M already describes."""
        self.m = tm.m @ self.m
        return self

    def left_compose(self, tm: "AffineMatrix") -> "AffineMatrix":
        """M := M @ tm, i.e. tm is applied before the transform M already describes."""
        self.m = self.m @ tm.m
        return self

    def transpose(self) -> "AffineMatrix":
        """Swap rows and columns."""
        self.m = self.m.T.copy()
        return self

    def __matmul__(self, other: "AffineMatrix") -> "AffineMatrix":
        return AffineMatrix(self.m @ other.m)

    # -----------------------------
    # Queries
    # -----------------------------

    def apply(self, point: Sequence[float]) -> Tuple[float, float]:
        x, y = point
        res = self.m[:2] @ np.array([x, y, 1.0], dtype=float)
        return (float(res[0]), float(res[1]))

    def __mul__(self, point: Sequence[float]) -> Tuple[float, float]:
        return self.apply(point)

    def is_identity(self) -> bool:
        # The third row is (0,0,1) for everything built through this class
        return bool(np.array_equal(self.m[:2], np.eye(3)[:2]))

    def is_pure_translation(self) -> Tuple[bool, float, float]:
        """Checks whether this matrix describes a plain translation.

        Returns (is_translation, tx, ty). tx and ty are always taken from the last
        column, also when the first element is False.
        """
        tx = float(self.m[0, 2])
        ty = float(self.m[1, 2])
        ok = np.array_equal(self.m[:, :2], np.eye(3)[:, :2]) and self.m[2, 2] == 1
        return bool(ok), tx, ty

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AffineMatrix):
            return NotImplemented
        # Only the two active rows take part; the third is (0,0,1) by convention.
        return bool(np.array_equal(self.m[:2], other.m[:2]))

    # -----------------------------
    # Formatting
    # -----------------------------

    def to_svg(self, precision: int = SVG_PRECISION) -> str:
        """SVG matrix expression that can be used in transform attributes.

        ((a,b,c),(d,e,f),(0,0,1)) => matrix(a d b e c f)
        """
        parts = []
        for col in range(3):
            for row in range(2):
                value = MatrixUtil.round_half_up(self.m[row, col], precision)
                parts.append(MatrixUtil.format_number(value))
        return "matrix(" + " ".join(parts) + ")"

    def write(self) -> str:
        rows = (",".join(MatrixUtil.format_number(v) for v in row) for row in self.m)
        return "(" + ",".join(f"({r})" for r in rows) + ")"

    def __str__(self) -> str:
        return self.write()

    def __repr__(self) -> str:
        return f"AffineMatrix({self.write()})"
