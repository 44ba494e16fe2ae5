"""Parameters of short Weierstrass curves `y^2 = x^3 + b` and reference arithmetic on their points.

Points are plain integer pairs `(x, y)` and the point at infinity is `None`. The arithmetic delegates to the
generic affine formulas of `py_ecc`, which hold for every curve with `a = 0`.
"""

import hashlib
from dataclasses import dataclass
from functools import cache
from math import isqrt
from typing import NamedTuple

from py_ecc.bn128 import bn128_curve as short_weierstrass
from py_ecc.fields.field_elements import FQ

from zkforeign.util.utility_functions import (
    bigint_to_bytes,
    bytes_to_bigint,
    cube_roots_of_unity,
    divide_and_round,
    sqrt_mod,
)

AffinePoint = tuple[int, int] | None


@cache
def prime_field(modulus: int) -> type[FQ]:
    """Return the `py_ecc` field class of integers modulo `modulus`."""
    return type(f"FQ{modulus.bit_length()}", (FQ,), {"field_modulus": modulus})


class SignedScalar(NamedTuple):
    """A small scalar returned by the GLV decomposition, with its sign and absolute value."""

    value: int
    is_negative: bool
    abs: int


def _signed(value: int) -> SignedScalar:
    return SignedScalar(value, value < 0, -value if value < 0 else value)


@dataclass(init=False)
class Endomorphism:
    """Efficiently computable endomorphism `phi(x, y) = (base * x, y)` acting as `scalar` on the group.

    Attributes:
        base (int): A non-trivial cube root of unity modulo the curve modulus.
        scalar (int): The matching cube root of unity modulo the group order.
        basis (tuple[tuple[int, int], tuple[int, int]]): Short basis of the lattice of pairs `(a, b)` with
            `a + b * scalar = 0 mod order`.
        decompose_max_bits (int): Upper bound on the bit length of the absolute values returned by `decompose`.
    """

    base: int
    scalar: int
    basis: tuple[tuple[int, int], tuple[int, int]]
    decompose_max_bits: int

    def __init__(self, base: int, scalar: int, order: int):
        """Initialise the endomorphism and compute the GLV lattice basis.

        The basis is found by running the extended Euclidean algorithm on `(order, scalar)` and stopping at the
        first remainder smaller than `sqrt(order)`.

        Args:
            base (int): A non-trivial cube root of unity modulo the curve modulus.
            scalar (int): The matching cube root of unity modulo the group order.
            order (int): The order of the group.
        """
        self.base = base
        self.scalar = scalar

        threshold = isqrt(order)
        r_prev, r_curr = order, scalar
        t_prev, t_curr = 0, 1
        while r_curr >= threshold:
            quotient = r_prev // r_curr
            r_prev, r_curr = r_curr, r_prev - quotient * r_curr
            t_prev, t_curr = t_curr, t_prev - quotient * t_curr
        # each (r, -t) satisfies r - t * scalar = 0 mod order
        self.basis = ((r_prev, -t_prev), (r_curr, -t_curr))

        (v00, v01), (v10, v11) = self.basis
        self.decompose_max_bits = max(
            ((abs(v00) + abs(v10)) // 2).bit_length(),
            ((abs(v01) + abs(v11)) // 2).bit_length(),
        )

    def decompose(self, s: int) -> tuple[SignedScalar, SignedScalar]:
        """Decompose `s` as `s0 + s1 * scalar mod order` with `|s0|, |s1| < 2^decompose_max_bits`.

        Args:
            s (int): The scalar to decompose.

        Returns:
            The pair `(s0, s1)`.
        """
        (v00, v01), (v10, v11) = self.basis
        det = v00 * v11 - v10 * v01
        b0 = divide_and_round(v11 * s, det)
        b1 = divide_and_round(-v01 * s, det)
        s0 = s - (b0 * v00 + b1 * v10)
        s1 = -(b0 * v01 + b1 * v11)
        return _signed(s0), _signed(s1)


@dataclass(init=False)
class CurveParameters:
    """Parameters of an elliptic curve `y^2 = x^3 + a * x + b` over F_modulus, with `a = 0`.

    Attributes:
        name (str): The name of the curve.
        modulus (int): The characteristic of the field the curve is defined over.
        order (int): The order of the subgroup generated by `generator`.
        a (int): The `a` coefficient of the curve equation, always `0`.
        b (int): The `b` coefficient of the curve equation.
        generator (tuple[int, int]): The generator of the subgroup.
        cofactor (int): The cofactor of the subgroup.
        endomorphism (Endomorphism | None): The GLV endomorphism, if the curve has one.
    """

    name: str
    modulus: int
    order: int
    a: int
    b: int
    generator: tuple[int, int]
    cofactor: int
    endomorphism: Endomorphism | None

    def __init__(
        self,
        name: str,
        modulus: int,
        order: int,
        b: int,
        generator: tuple[int, int],
        a: int = 0,
        cofactor: int = 1,
        endomorphism: Endomorphism | None = None,
    ):
        """Initialise the curve parameters.

        Args:
            name (str): The name of the curve.
            modulus (int): The characteristic of the field the curve is defined over.
            order (int): The order of the subgroup generated by `generator`.
            b (int): The `b` coefficient of the curve equation.
            generator (tuple[int, int]): The generator of the subgroup.
            a (int): The `a` coefficient of the curve equation. Defaults to `0`, the only supported value.
            cofactor (int): The cofactor of the subgroup. Defaults to `1`.
            endomorphism (Endomorphism | None): The GLV endomorphism. Defaults to `None`.

        Raises:
            ValueError: If `a` is not zero or `generator` is not on the curve.
        """
        if a != 0:
            msg = f"Only curves with a = 0 are supported, got a = {a}"
            raise ValueError(msg)
        self.name = name
        self.modulus = modulus
        self.order = order
        self.a = a
        self.b = b
        self.generator = generator
        self.cofactor = cofactor
        self.endomorphism = endomorphism
        if not self.is_on_curve(generator):
            msg = f"The generator {generator} is not on the curve {name}"
            raise ValueError(msg)

    @property
    def has_endomorphism(self) -> bool:
        return self.endomorphism is not None

    @property
    def has_cofactor(self) -> bool:
        return self.cofactor != 1

    def _to_fq(self, P: AffinePoint):  # noqa: N803
        if P is None:
            return None
        field = prime_field(self.modulus)
        return field(P[0]), field(P[1])

    @staticmethod
    def _from_fq(P) -> AffinePoint:  # noqa: N803
        if P is None:
            return None
        return int(P[0]), int(P[1])

    def is_on_curve(self, P: AffinePoint) -> bool:  # noqa: N803
        """Check that `P` is the point at infinity or a point of the curve with reduced coordinates."""
        if P is None:
            return True
        if not all(0 <= coordinate < self.modulus for coordinate in P):
            return False
        return short_weierstrass.is_on_curve(self._to_fq(P), prime_field(self.modulus)(self.b))

    def is_in_subgroup(self, P: AffinePoint) -> bool:  # noqa: N803
        return self.scale(P, self.order) is None

    def from_nonzero(self, P: AffinePoint) -> tuple[int, int]:  # noqa: N803
        """Return `P`, checking that it is not the point at infinity."""
        if P is None:
            msg = "Expected a point different from the point at infinity"
            raise ValueError(msg)
        return P

    def equal(self, P: AffinePoint, Q: AffinePoint) -> bool:  # noqa: N803
        return P == Q

    def negate(self, P: AffinePoint) -> AffinePoint:  # noqa: N803
        return self._from_fq(short_weierstrass.neg(self._to_fq(P)))

    def add(self, P: AffinePoint, Q: AffinePoint) -> AffinePoint:  # noqa: N803
        return self._from_fq(short_weierstrass.add(self._to_fq(P), self._to_fq(Q)))

    def double(self, P: AffinePoint) -> AffinePoint:  # noqa: N803
        return self._from_fq(short_weierstrass.double(self._to_fq(P)))

    def scale(self, P: AffinePoint, s: int) -> AffinePoint:  # noqa: N803
        """Compute `s * P`. Negative scalars multiply `-P`."""
        if s < 0:
            return self.scale(self.negate(P), -s)
        return self._from_fq(short_weierstrass.multiply(self._to_fq(P), s))

    def endomorphism_map(self, P: AffinePoint) -> AffinePoint:  # noqa: N803
        """Compute `phi(P) = (base * x, y)`."""
        if self.endomorphism is None:
            msg = f"The curve {self.name} has no endomorphism"
            raise ValueError(msg)
        if P is None:
            return None
        return self.endomorphism.base * P[0] % self.modulus, P[1]

    def endo_scale(self, P: AffinePoint, s: int) -> AffinePoint:  # noqa: N803
        """Compute `s * P` through the GLV decomposition `s = s0 + s1 * scalar`."""
        if self.endomorphism is None:
            msg = f"The curve {self.name} has no endomorphism"
            raise ValueError(msg)
        s0, s1 = self.endomorphism.decompose(s % self.order)
        return self.add(self.scale(P, s0.value), self.scale(self.endomorphism_map(P), s1.value))


def find_endomorphism(curve: CurveParameters) -> Endomorphism | None:
    """Find the GLV endomorphism of `curve`.

    Candidate bases and scalars are the non-trivial cube roots of unity modulo the field modulus and the group
    order respectively. A pair is accepted if the endomorphism maps the generator to `scalar * generator`.

    Returns:
        The endomorphism, or `None` if the curve has a cofactor or no pair of cube roots matches.
    """
    if curve.has_cofactor or curve.modulus % 3 != 1 or curve.order % 3 != 1:
        return None
    x, y = curve.generator
    for scalar in cube_roots_of_unity(curve.order):
        target = curve.scale(curve.generator, scalar)
        for base in cube_roots_of_unity(curve.modulus):
            if target == (base * x % curve.modulus, y):
                return Endomorphism(base, scalar, curve.order)
    return None


def create_curve(
    name: str,
    modulus: int,
    order: int,
    b: int,
    generator: tuple[int, int],
    a: int = 0,
    cofactor: int = 1,
    endomorphism: tuple[int, int] | None = None,
) -> CurveParameters:
    """Create curve parameters, deriving the GLV endomorphism when the curve admits one.

    Args:
        name (str): The name of the curve.
        modulus (int): The characteristic of the field the curve is defined over.
        order (int): The order of the subgroup generated by `generator`.
        b (int): The `b` coefficient of the curve equation.
        generator (tuple[int, int]): The generator of the subgroup.
        a (int): The `a` coefficient of the curve equation. Defaults to `0`.
        cofactor (int): The cofactor of the subgroup. Defaults to `1`.
        endomorphism (tuple[int, int] | None): The pair `(base, scalar)` of the endomorphism, if already known.
            Defaults to `None`, in which case the endomorphism is searched for.

    Returns:
        The curve parameters.
    """
    curve = CurveParameters(name, modulus, order, b, generator, a=a, cofactor=cofactor)
    if endomorphism is not None:
        base, scalar = endomorphism
        curve.endomorphism = Endomorphism(base, scalar, order)
        if curve.scale(generator, scalar) != curve.endomorphism_map(generator):
            msg = f"The endomorphism {endomorphism} does not act as a scalar on the generator of {name}"
            raise ValueError(msg)
    else:
        curve.endomorphism = find_endomorphism(curve)
    return curve


def initial_aggregator(curve: CurveParameters) -> tuple[int, int]:
    """Derive a point of `curve` with unknown discrete logarithm.

    The x coordinate starts at the SHA-256 digest of `b"ecdsa"` followed by the minimal little-endian encodings of
    the modulus, the order, `a` and `b`, read as a little-endian integer modulo the modulus. It is then incremented
    until `x^3 + a * x + b` is a square.

    Args:
        curve (CurveParameters): The curve.

    Returns:
        The point `(x, y)`.
    """
    h = hashlib.sha256(b"ecdsa")
    for value in (curve.modulus, curve.order, curve.a, curve.b):
        h.update(bigint_to_bytes(value))
    x = bytes_to_bigint(h.digest()) % curve.modulus

    y = None
    while y is None:
        x = (x + 1) % curve.modulus
        y = sqrt_mod(x**3 + curve.a * x + curve.b, curve.modulus)
    return x, y
