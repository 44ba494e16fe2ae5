"""Gadgets for arithmetic on an elliptic curve E(F_q) whose base field F_q is foreign to the circuit."""

from zkforeign.circuit.circuit import Circuit
from zkforeign.elliptic_curves.curve_parameters import CurveParameters
from zkforeign.fields.foreign_field import Field3, ForeignField, Sum, assert_rank1, multi_range_check, weak_bound
from zkforeign.fields.native import Bool
from zkforeign.types.provable_types import Point
from zkforeign.util.utility_functions import check_positive_integer


def _witness_slope_and_result(circuit: Circuit, m: int, x3: int, y3: int) -> tuple[Field3, Field3, Field3]:
    """Witness and range-check the slope and the coordinates of the result of an addition or doubling."""
    m, x3, y3 = (Field3.witness(circuit, value) for value in (m, x3, y3))
    multi_range_check(m)
    multi_range_check(x3)
    multi_range_check(y3)
    return m, x3, y3


class EllipticCurveForeign:
    """Construct constraints that perform arithmetic operations over the elliptic curve E(F_q).

    Arithmetic is performed in affine coordinates, with `a = 0`. The addition formulas are incomplete: the
    variable case of `add` must not be used on points with equal x coordinates, and `double` must not be used on
    points with `y = 0`. In those cases the witnessed slope is `0` and the constraints are only satisfiable if
    `add` is applied to two equal points.

    Attributes:
        curve (CurveParameters): The curve.
        modulus (int): The characteristic of the field F_q.
    """

    def __init__(self, curve: CurveParameters):
        """Initialise the elliptic curve group E(F_q).

        Args:
            curve (CurveParameters): The curve.
        """
        self.curve = curve
        self.modulus = curve.modulus

    def add(self, P: Point, Q: Point) -> Point:  # noqa: N803
        """Compute `P + Q`.

        In the variable case, the slope `m` and the result `(x3, y3)` are witnessed, range-checked and their top
        limbs weakly bounded, and the following relations are constrained modulo q:
            - (x1 - x2) * m = y1 - y2
            - m^2 = x1 + x2 + x3
            - (x1 - x3) * m = y1 + y3

        Args:
            P (Point): The first point.
            Q (Point): The second point.

        Returns:
            The point `P + Q`.
        """
        f = self.modulus
        if P.is_constant() and Q.is_constant():
            return Point.from_bigint(self.curve.add(P.to_bigint(), Q.to_bigint()))

        (x1, y1), (x2, y2) = P.to_bigint(), Q.to_bigint()
        if (x1 - x2) % f == 0:
            m = 0
        else:
            m = (y1 - y2) * pow(x1 - x2, -1, f) % f
        x3 = (m * m - x1 - x2) % f
        y3 = (m * (x1 - x3) - y1) % f

        m, x3, y3 = _witness_slope_and_result(Circuit.of(P.fields() + Q.fields()), m, x3, y3)
        multi_range_check([weak_bound(m[2], f), weak_bound(x3[2], f), weak_bound(y3[2], f)])

        assert_rank1(Sum(P.x).sub(Q.x), m, Sum(P.y).sub(Q.y), f)
        assert_rank1(m, m, Sum(P.x).add(Q.x).add(x3), f)
        assert_rank1(Sum(P.x).sub(x3), m, Sum(P.y).add(y3), f)

        return Point(x3, y3)

    def double(self, P: Point) -> Point:  # noqa: N803
        """Compute `2P`.

        In the variable case, the slope `m` and the result `(x3, y3)` are witnessed, range-checked and their top
        limbs weakly bounded, `x1^2` is computed with a foreign multiplication, and the following relations are
        constrained modulo q:
            - 2 * y1 * m = 3 * x1^2
            - m^2 = 2 * x1 + x3
            - (x1 - x3) * m = y1 + y3

        Args:
            P (Point): The point to double.

        Returns:
            The point `2P`.
        """
        f = self.modulus
        if P.is_constant():
            return Point.from_bigint(self.curve.double(P.to_bigint()))

        x1, y1 = P.to_bigint()
        if (2 * y1) % f == 0:
            m = 0
        else:
            m = 3 * x1 * x1 * pow(2 * y1, -1, f) % f
        x3 = (m * m - 2 * x1) % f
        y3 = (m * (x1 - x3) - y1) % f

        m, x3, y3 = _witness_slope_and_result(P.circuit, m, x3, y3)
        bounds = [weak_bound(m[2], f), weak_bound(x3[2], f), weak_bound(y3[2], f)]

        x1x1 = ForeignField.mul(P.x, P.x, f)
        assert_rank1(Sum(P.y).add(P.y), m, Sum(x1x1).add(x1x1).add(x1x1), f)
        assert_rank1(m, m, Sum(P.x).add(P.x).add(x3), f)
        assert_rank1(Sum(P.x).sub(x3), m, Sum(P.y).add(y3), f)

        multi_range_check(bounds)
        return Point(x3, y3)

    def negate(self, P: Point) -> Point:  # noqa: N803
        """Compute `-P = (x, -y)`."""
        return Point(P.x, ForeignField.negate(P.y, self.modulus))

    def negate_if(self, condition: Bool, P: Point) -> Point:  # noqa: N803
        """Return `-P` if `condition` is `1` and `P` otherwise."""
        return Point(P.x, Field3.if_(condition, ForeignField.negate(P.y, self.modulus), P.y))

    def endomorphism(self, P: Point) -> Point:  # noqa: N803
        """Compute `phi(P) = (base * x, y)`, which equals `scalar * P`.

        The top limb of the new x coordinate is not bounded here.

        Raises:
            ValueError: If the curve has no endomorphism.
        """
        if self.curve.endomorphism is None:
            msg = f"The curve {self.curve.name} has no endomorphism"
            raise ValueError(msg)
        return Point(ForeignField.mul(P.x, self.curve.endomorphism.base, self.modulus), P.y)

    def get_point_table(self, P: Point, window_size: int, table: list[Point] | None = None) -> list[Point]:  # noqa: N803
        """Compute the table of multiples `[0, P, 2P, ..., (2^window_size - 1)P]`.

        The entry at index `0` is the placeholder `(0, 0)`. It is selected only for zero chunks, whose addition is
        then discarded.

        Args:
            P (Point): The point.
            window_size (int): The base-2 logarithm of the size of the table.
            table (list[Point] | None): A precomputed table, returned as is after checking its length. Defaults to
                `None`.

        Returns:
            The table of multiples of `P`.

        Raises:
            ValueError: If `window_size` is not a positive integer, or `table` does not have `2^window_size`
                entries.
        """
        check_positive_integer(window_size, "window_size")
        n = 1 << window_size
        if table is not None:
            if len(table) != n:
                msg = f"Table of size {len(table)} does not match the window size {window_size}, expected {n} entries"
                raise ValueError(msg)
            return table

        table = [Point.from_bigint(None), P]
        if n == 2:
            return table
        multiple = self.double(P)
        table.append(multiple)
        for _ in range(3, n):
            multiple = self.add(multiple, P)
            table.append(multiple)
        return table
