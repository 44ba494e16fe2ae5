"""Gadgets for multi-scalar multiplication over an elliptic curve E(F_q) with a foreign base field F_q."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from zkforeign.circuit.circuit import Circuit
from zkforeign.elliptic_curves.curve_parameters import CurveParameters, initial_aggregator
from zkforeign.elliptic_curves.ec_operations_foreign import EllipticCurveForeign
from zkforeign.elliptic_curves.util import array_get_generic, slice_scalar
from zkforeign.fields.foreign_field import Field3, RangeCheckQueue, Sum, assert_rank1, split, weak_bound
from zkforeign.fields.native import Bool, exists
from zkforeign.types.provable_types import Point, TableConfig
from zkforeign.util.utility_functions import check_positive_integer

logger = logging.getLogger(__name__)


@dataclass
class DecomposedScalar:
    """Half of the GLV decomposition of a scalar.

    Attributes:
        is_negative (Bool): Whether the half is negative.
        abs (Field3): The absolute value of the half. It is not range-checked.
    """

    is_negative: Bool
    abs: Field3


class EllipticCurveForeignMsm:
    """Construct constraints that compute `s_1 * P_1 + ... + s_n * P_n` over the elliptic curve E(F_q).

    The scalars are processed from the most significant bit with a double-and-add ladder shared by all the pairs.
    The accumulator starts at the initial aggregator `IA`, a point with unknown discrete logarithm, so that the
    incomplete addition formulas never meet the point at infinity. At the end, the accumulator equals
    `2^(b-1) * IA + sum`: it is asserted to differ from `2^(b-1) * IA` and the latter is subtracted. The result can
    therefore never be the point at infinity.

    Attributes:
        curve (CurveParameters): The curve.
        ec_over_foreign (EllipticCurveForeign): The gadgets for point arithmetic.
        initial_aggregator (tuple[int, int]): The starting point of the ladder.
    """

    def __init__(
        self,
        curve: CurveParameters,
        ec_over_foreign: EllipticCurveForeign | None = None,
        ia: tuple[int, int] | None = None,
    ):
        """Initialise the multi-scalar multiplication gadgets.

        Args:
            curve (CurveParameters): The curve.
            ec_over_foreign (EllipticCurveForeign | None): The gadgets for point arithmetic. Defaults to `None`, in
                which case they are built from `curve`.
            ia (tuple[int, int] | None): The initial aggregator. Defaults to `None`, in which case it is derived
                from the curve parameters.
        """
        self.curve = curve
        self.ec_over_foreign = ec_over_foreign if ec_over_foreign is not None else EllipticCurveForeign(curve)
        self.initial_aggregator = ia if ia is not None else initial_aggregator(curve)

    @staticmethod
    def _check_inputs(scalars: Sequence[Field3], points: Sequence[Point]) -> None:
        if len(scalars) != len(points):
            msg = f"Points and scalars lengths must match, got {len(points)} points and {len(scalars)} scalars"
            raise ValueError(msg)
        if len(points) < 1:
            msg = "Expected at least 1 point and scalar"
            raise ValueError(msg)

    @staticmethod
    def _table_configs(table_configs: Sequence[TableConfig | None] | None, n: int) -> list[TableConfig]:
        table_configs = list(table_configs) if table_configs is not None else []
        if len(table_configs) > n:
            msg = f"Got {len(table_configs)} table configurations for {n} points"
            raise ValueError(msg)
        table_configs += [None] * (n - len(table_configs))
        return [config if config is not None else TableConfig() for config in table_configs]

    def multi_scalar_mul(
        self,
        scalars: Sequence[Field3],
        points: Sequence[Point],
        table_configs: Sequence[TableConfig | None] | None = None,
    ) -> Point:
        """Compute `scalars[0] * points[0] + ... + scalars[n-1] * points[n-1]`.

        The scalars are sliced into chunks of `window_size` bits over the full bit length of the group order. For
        each chunk, the matching multiple of the point is looked up in its table and added to the accumulator,
        unless the chunk is zero.

        Args:
            scalars (Sequence[Field3]): The scalars, smaller than `2^b` where `b` is the bit length of the order.
            points (Sequence[Point]): The points.
            table_configs (Sequence[TableConfig | None] | None): Per-point window size and precomputed multiples.
                Defaults to `None`, which means window size `1` for every point.

        Returns:
            The point `sum(scalars[i] * points[i])`.

        Raises:
            ValueError: If the inputs have different lengths, are empty, or a table configuration is invalid.
            ConstraintUnsatisfiedError: If the constraints are not satisfied, in particular if the result is the
                point at infinity.

        Example:
            >>> from zkforeign.elliptic_curves.instantiations import secp256k1
            >>> msm = EllipticCurveForeignMsm(secp256k1)
            >>> G = Point.from_bigint(secp256k1.generator)
            >>> msm.multi_scalar_mul([Field3.from_int(2)], [G]).to_bigint() == secp256k1.double(secp256k1.generator)
            True
        """
        self._check_inputs(scalars, points)
        if all(s.is_constant() for s in scalars) and all(P.is_constant() for P in points):
            total = None
            for s, P in zip(scalars, points, strict=True):  # noqa: N806
                total = self.curve.add(total, self.curve.scale(P.to_bigint(), s.to_int()))
            return Point.from_bigint(total)

        configs = self._table_configs(table_configs, len(points))
        window_sizes = [config.window_size for config in configs]
        tables = [
            self.ec_over_foreign.get_point_table(P, config.window_size, config.multiples)
            for P, config in zip(points, configs, strict=True)
        ]

        max_bits = self.curve.order.bit_length()
        chunks = [slice_scalar(s, max_bits, w) for s, w in zip(scalars, window_sizes, strict=True)]
        return self._ladder(chunks, list(points), tables, window_sizes, max_bits)

    def multi_scalar_mul_glv(
        self,
        scalars: Sequence[Field3],
        points: Sequence[Point],
        table_configs: Sequence[TableConfig | None] | None = None,
    ) -> Point:
        """Compute `scalars[0] * points[0] + ... + scalars[n-1] * points[n-1]` using the GLV endomorphism.

        Each scalar `s` is decomposed as `s0 + s1 * lambda` with `|s0|, |s1| < 2^decompose_max_bits`, and each
        pair `(s, P)` is replaced by the two pairs `(|s0|, ±P)` and `(|s1|, ±phi(P))`. The table of `phi(P)` is
        obtained by applying the endomorphism to the table of `P`, and the signs are applied to both tables. The
        ladder then runs over `decompose_max_bits` bits only, roughly halving the number of doublings.

        Args:
            scalars (Sequence[Field3]): The scalars, smaller than the order.
            points (Sequence[Point]): The points.
            table_configs (Sequence[TableConfig | None] | None): Per-point window size and precomputed multiples.
                Defaults to `None`, which means window size `1` for every point.

        Returns:
            The point `sum(scalars[i] * points[i])`.

        Raises:
            ValueError: If the curve has no endomorphism, the inputs have different lengths, are empty, or a table
                configuration is invalid.
            ConstraintUnsatisfiedError: If the constraints are not satisfied, in particular if the result is the
                point at infinity.
        """
        if not self.curve.has_endomorphism:
            msg = f"The curve {self.curve.name} has no endomorphism"
            raise ValueError(msg)
        self._check_inputs(scalars, points)
        if all(s.is_constant() for s in scalars) and all(P.is_constant() for P in points):
            total = None
            for s, P in zip(scalars, points, strict=True):  # noqa: N806
                total = self.curve.add(total, self.curve.endo_scale(P.to_bigint(), s.to_int()))
            return Point.from_bigint(total)

        configs = self._table_configs(table_configs, len(points))
        ec = self.ec_over_foreign
        queue = RangeCheckQueue()

        scalars_glv, points_glv, tables_glv, window_sizes_glv = [], [], [], []
        for s, P, config in zip(scalars, points, configs, strict=True):  # noqa: N806
            table = ec.get_point_table(P, config.window_size, config.multiples)
            s0, s1 = self.decompose_no_range_check(s)

            endo_table = [table[0]]
            for multiple in table[1:]:
                phi = ec.endomorphism(multiple)
                queue.push(weak_bound(phi.x[2], self.curve.modulus))
                endo_table.append(phi)

            for half, half_table in ((s0, table), (s1, endo_table)):
                signed_table = [ec.negate_if(half.is_negative, multiple) for multiple in half_table]
                scalars_glv.append(half.abs)
                tables_glv.append(signed_table)
                points_glv.append(signed_table[1])
                window_sizes_glv.append(config.window_size)
        queue.flush()

        max_bits = self.curve.endomorphism.decompose_max_bits
        chunks = [slice_scalar(s, max_bits, w) for s, w in zip(scalars_glv, window_sizes_glv, strict=True)]
        return self._ladder(chunks, points_glv, tables_glv, window_sizes_glv, max_bits)

    def decompose_no_range_check(self, s: Field3) -> tuple[DecomposedScalar, DecomposedScalar]:
        """Decompose `s` as `s0 + s1 * lambda` modulo the order, with witnessed signs and absolute values.

        The signs are constrained to be booleans and the relation `|s1| * (±lambda) = s -/+ |s0|` is asserted with
        a single foreign multiplication. The absolute values are not range-checked: slicing them into chunks does
        it.

        Args:
            s (Field3): The scalar.

        Returns:
            The two halves of the decomposition.
        """
        endomorphism = self.curve.endomorphism
        order = self.curve.order
        s0, s1 = endomorphism.decompose(s.to_int())
        if s.is_constant():
            return (
                DecomposedScalar(Bool(s0.is_negative), Field3.from_int(s0.abs)),
                DecomposedScalar(Bool(s1.is_negative), Field3.from_int(s1.abs)),
            )

        witnesses = exists(
            s.circuit,
            lambda: [int(s0.is_negative), *split(s0.abs), int(s1.is_negative), *split(s1.abs)],
        )
        s0_negative, s1_negative = Bool.unsafe_of_field(witnesses[0]), Bool.unsafe_of_field(witnesses[4])
        s0_abs, s1_abs = Field3(witnesses[1:4]), Field3(witnesses[5:8])
        s0_negative.assert_boolean()
        s1_negative.assert_boolean()

        scalar = Field3.if_(
            s1_negative,
            Field3.from_int(-endomorphism.scalar % order),
            Field3.from_int(endomorphism.scalar),
        )
        rhs = Field3.if_(
            s0_negative,
            Sum(s).add(s0_abs).finish(order),
            Sum(s).sub(s0_abs).finish(order),
        )
        assert_rank1(s1_abs, scalar, rhs, order)

        return DecomposedScalar(s0_negative, s0_abs), DecomposedScalar(s1_negative, s1_abs)

    def _ladder(
        self,
        chunks: list[list],
        points: list[Point],
        tables: list[list[Point]],
        window_sizes: list[int],
        max_bits: int,
    ) -> Point:
        """Run the shared double-and-add ladder from bit `max_bits - 1` down to bit `0`."""
        for w in window_sizes:
            check_positive_integer(w, "window_size")
        logger.debug("Ladder over %d pairs and %d bits, window sizes %s", len(points), max_bits, window_sizes)
        ec = self.ec_over_foreign

        acc = Point.from_bigint(self.initial_aggregator)
        for i in range(max_bits - 1, -1, -1):
            for scalar_chunks, P, table, w in zip(chunks, points, tables, window_sizes, strict=True):  # noqa: N806
                if i % w != 0:
                    continue
                chunk = scalar_chunks[i // w]
                multiple = P if w == 1 else array_get_generic(table, chunk)
                added = ec.add(acc, multiple)
                # a zero chunk selects the (0, 0) placeholder, so the addition is discarded
                acc = Point.if_(chunk.equals(0), acc, added)
            if i == 0:
                break
            acc = ec.double(acc)

        ia_final = self.curve.scale(self.curve.from_nonzero(self.initial_aggregator), 1 << (max_bits - 1))
        acc.equals(Point.from_bigint(ia_final)).assert_false()
        out = ec.add(acc, Point.from_bigint(self.curve.negate(ia_final)))

        circuit = Circuit.of(out.fields())
        if circuit is not None:
            logger.debug("Circuit has %d constraints after the ladder", len(circuit))
        return out
