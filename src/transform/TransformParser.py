import logging
from typing import TYPE_CHECKING, Optional

from transform.AffineMatrix import AffineMatrix
from transform.MatrixUtil import MatrixUtil
from transform.ParseError import ParseError
from transform.matrix_constants import VAR_HEIGHT, VAR_UX, VAR_UY, VAR_WIDTH

if TYPE_CHECKING:
    from transform.Calculator import Calculator

logger = logging.getLogger(__name__)

# Command letters and separators are ASCII only
_ASCII_SPACE = " \t\n\v\f\r"


def _is_upper(c: str) -> bool:
    return "A" <= c <= "Z"


def _is_space(c: str) -> bool:
    return c != "" and c in _ASCII_SPACE


class TransformParser:
    """Builds an AffineMatrix from a transformation command string.

    Commands (arguments in brackets are optional):
        T tx[,ty]           translate, ty defaults to 0
        S sx[,sy]           scale, sy defaults to sx
        R a[,cx[,cy]]       rotate anti-clockwise by a degrees about (cx,cy),
                            default center is (ux+w/2, uy+h/2)
        FH a, FV a          mirror at the horizontal line y=a / vertical line x=a
        KX a, KY a          skew along the x / y axis by a degrees
        M v1[,v2,...,v6]    explicit matrix ((v1,v2,v3),(v4,v5,v6),(0,0,1))

    Arguments run up to the next comma or uppercase letter and are evaluated by the
    calculator, so they may be expressions. Commands are applied in the order given:
    "T5 S2" moves (0,0) to (5,0) and then scales it to (10,0).
    """

    def __init__(self, calc: "Calculator") -> None:
        self.calc = calc
        self.text = ""
        self.pos = 0
        self.matrix = AffineMatrix.identity()

    def parse(self, cmds: str) -> AffineMatrix:
        self.text = cmds
        self.pos = 0
        self.matrix = AffineMatrix.identity()
        while True:
            self._skip_space()
            if self._at_end():
                break
            self._parse_command()
        logger.debug("parsed %r -> %s", cmds, self.matrix)
        return self.matrix

    def _parse_command(self) -> None:
        start = self.pos
        cmd = self._get()

        if cmd == "T":
            tx = self.read_argument(0, False, False)
            ty = self.read_argument(0, True, True)
            logger.debug("T: translate(%s, %s)", tx, ty)
            self.matrix.translate(tx, ty)

        elif cmd == "S":
            sx = self.read_argument(1, False, False)
            sy = self.read_argument(sx, True, True)
            logger.debug("S: scale(%s, %s)", sx, sy)
            self.matrix.scale(sx, sy)

        elif cmd == "R":
            a = self.read_argument(0, False, False)
            cx = self.read_argument(
                self.calc.get_variable(VAR_UX) + self.calc.get_variable(VAR_WIDTH) / 2, True, True)
            cy = self.read_argument(
                self.calc.get_variable(VAR_UY) + self.calc.get_variable(VAR_HEIGHT) / 2, True, True)
            logger.debug("R: rotate(%s) about (%s, %s)", a, cx, cy)
            self.matrix.translate(-cx, -cy)
            self.matrix.rotate(a)
            self.matrix.translate(cx, cy)

        elif cmd == "F":
            axis = self._get()
            if axis not in ("H", "V"):
                raise self._error("'H' or 'V' expected", start)
            a = self.read_argument(0, False, False)
            logger.debug("F%s: flip at %s", axis, a)
            self.matrix.flip(axis == "H", a)

        elif cmd == "K":
            axis = self._get()
            if axis not in ("X", "Y"):
                raise self._error("transformation command 'K' must be followed by 'X' or 'Y'", start)
            a = self.read_argument(0, False, False)
            if not MatrixUtil.is_skew_angle_valid(a):
                raise self._error(f"illegal skewing angle: {MatrixUtil.format_number(a)} degrees", start)
            logger.debug("K%s: skew by %s", axis, a)
            if axis == "X":
                self.matrix.xskew(a)
            else:
                self.matrix.yskew(a)

        elif cmd == "M":
            # Only the first value is mandatory, the others default to the identity pattern
            v = [self.read_argument(0.0 if i % 4 else 1.0, i != 0, i != 0) for i in range(6)]
            logger.debug("M: matrix %s", v)
            self.matrix.right_compose(AffineMatrix.from_values(v, 6))

        else:
            raise self._error(f"transformation command expected (found '{cmd}' instead)", start)

    def read_argument(self, default: float, optional: bool, leading_comma: bool) -> float:
        """Read and evaluate the next command argument.

        default         value returned if the argument is optional and missing
        optional        True if the argument may be omitted
        leading_comma   True if a required argument must be introduced by a comma
        """
        self._skip_space()
        if not optional and leading_comma and self._peek() != ",":
            raise self._error("',' expected")
        if self._peek() == ",":
            self.pos += 1
            # A comma announces an argument
            optional = False

        start = self.pos
        while not self._at_end() and not _is_upper(self._peek()) and self._peek() != ",":
            self.pos += 1
        expr = self.text[start:self.pos]

        if not expr.strip(_ASCII_SPACE):
            if optional:
                return default
            raise self._error("parameter expected", start)
        return float(self.calc.evaluate(expr))

    def _error(self, message: str, position: Optional[int] = None) -> ParseError:
        pos = self.pos if position is None else position
        logger.debug("parse error at %d in %r: %s", pos, self.text, message)
        return ParseError(message, self.text, pos)

    def _at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _peek(self) -> str:
        return "" if self._at_end() else self.text[self.pos]

    def _get(self) -> str:
        c = self._peek()
        self.pos += 1
        return c

    def _skip_space(self) -> None:
        while not self._at_end() and _is_space(self.text[self.pos]):
            self.pos += 1
