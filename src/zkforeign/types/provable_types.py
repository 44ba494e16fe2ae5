"""Composite values that gadgets take as inputs: points, signatures and table configurations."""

import string
from dataclasses import dataclass
from typing import Self

from zkforeign.circuit.circuit import Circuit
from zkforeign.elliptic_curves.curve_parameters import AffinePoint
from zkforeign.fields.foreign_field import Field3, multi_range_check
from zkforeign.fields.native import Bool, Field

SIGNATURE_HEX_LENGTH = 128


@dataclass(init=False, eq=False)
class Point:
    """Affine point of a curve over a foreign field.

    The point at infinity has no affine representation. It is encoded as `(0, 0)`, which is only used as the
    placeholder at index `0` of a point table.

    Attributes:
        x (Field3): The x coordinate.
        y (Field3): The y coordinate.
    """

    x: Field3
    y: Field3

    def __init__(self, x: Field3, y: Field3):
        """Initialise a point from its coordinates.

        Args:
            x (Field3): The x coordinate.
            y (Field3): The y coordinate.
        """
        self.x = x
        self.y = y

    def __repr__(self) -> str:
        return f"Point({self.x!r}, {self.y!r})"

    @classmethod
    def from_bigint(cls, P: AffinePoint) -> Self:  # noqa: N803
        """Return the constant point `P`, mapping the point at infinity to `(0, 0)`."""
        if P is None:
            return cls(Field3.from_int(0), Field3.from_int(0))
        return cls(Field3.from_int(P[0]), Field3.from_int(P[1]))

    @classmethod
    def witness(cls, circuit: Circuit, P: tuple[int, int], range_check: bool = True) -> Self:  # noqa: N803
        """Witness the coordinates of `P` as variables of `circuit`.

        Args:
            circuit (Circuit): The circuit.
            P (tuple[int, int]): The point.
            range_check (bool): If `True`, the limbs of both coordinates are multi-range-checked. Defaults to `True`.
        """
        out = cls(Field3.witness(circuit, P[0]), Field3.witness(circuit, P[1]))
        if range_check:
            multi_range_check(out.x)
            multi_range_check(out.y)
        return out

    def to_bigint(self) -> tuple[int, int]:
        return self.x.to_int(), self.y.to_int()

    def fields(self) -> list[Field]:
        return [*self.x, *self.y]

    @property
    def circuit(self) -> Circuit | None:
        return Circuit.of(self.fields())

    def is_constant(self) -> bool:
        return self.x.is_constant() and self.y.is_constant()

    @staticmethod
    def if_(condition: Bool, then: "Point", otherwise: "Point") -> "Point":
        return Point(Field3.if_(condition, then.x, otherwise.x), Field3.if_(condition, then.y, otherwise.y))

    def equals(self, other: "Point") -> Bool:
        return self.x.equals(other.x).and_(self.y.equals(other.y))


@dataclass(init=False, eq=False)
class EcdsaSignature:
    """ECDSA signature `(r, s)`, with both components in the scalar field of the curve.

    Attributes:
        r (Field3): The `r` component.
        s (Field3): The `s` component.
    """

    r: Field3
    s: Field3

    def __init__(self, r: Field3, s: Field3):
        """Initialise a signature from its components.

        Args:
            r (Field3): The `r` component.
            s (Field3): The `s` component.
        """
        self.r = r
        self.s = s

    @classmethod
    def from_bigint(cls, signature: tuple[int, int]) -> Self:
        r, s = signature
        return cls(Field3.from_int(r), Field3.from_int(s))

    @classmethod
    def from_hex(cls, raw: str) -> Self:
        """Decode a signature from its hexadecimal encoding.

        The encoding is `0x`, followed by 64 hexadecimal characters for `r` and 64 for `s` (big-endian). Any
        characters beyond the first 128 after the prefix, such as a recovery byte, are ignored.

        Args:
            raw (str): The encoded signature.

        Returns:
            The constant signature.

        Raises:
            ValueError: If the prefix is missing, the encoding is too short, or it is not hexadecimal.

        Example:
            >>> signature = EcdsaSignature.from_hex("0x" + "00" * 31 + "01" + "00" * 31 + "02")
            >>> signature.to_bigint()
            (1, 2)
        """
        prefix, signature = raw[:2], raw[2 : 2 + SIGNATURE_HEX_LENGTH]
        if prefix != "0x" or len(signature) < SIGNATURE_HEX_LENGTH:
            msg = f"Invalid signature, expected a hex string prefixed by 0x and {SIGNATURE_HEX_LENGTH} characters long"
            raise ValueError(msg)
        if not all(c in string.hexdigits for c in signature):
            msg = f"Invalid signature, {signature!r} contains non-hexadecimal characters"
            raise ValueError(msg)
        half = SIGNATURE_HEX_LENGTH // 2
        return cls.from_bigint((int(signature[:half], 16), int(signature[half:], 16)))

    @classmethod
    def witness(cls, circuit: Circuit, signature: tuple[int, int], range_check: bool = True) -> Self:
        """Witness the components of `signature` as variables of `circuit`.

        Args:
            circuit (Circuit): The circuit.
            signature (tuple[int, int]): The pair `(r, s)`.
            range_check (bool): If `True`, the limbs of both components are multi-range-checked. Defaults to `True`.
        """
        r, s = signature
        out = cls(Field3.witness(circuit, r), Field3.witness(circuit, s))
        if range_check:
            multi_range_check(out.r)
            multi_range_check(out.s)
        return out

    def to_bigint(self) -> tuple[int, int]:
        return self.r.to_int(), self.s.to_int()

    def is_constant(self) -> bool:
        return self.r.is_constant() and self.s.is_constant()


@dataclass(init=False)
class TableConfig:
    """Configuration of the table of multiples of a point in a multi-scalar multiplication.

    Attributes:
        window_size (int): The number of scalar bits consumed per table lookup.
        multiples (list[Point] | None): Precomputed multiples `[0, P, 2P, ..., (2^window_size - 1)P]`, or `None`
            to compute them in the circuit.
    """

    window_size: int
    multiples: list[Point] | None

    def __init__(self, window_size: int = 1, multiples: list[Point] | None = None):
        """Initialise the table configuration.

        Args:
            window_size (int): The number of scalar bits consumed per table lookup. Defaults to `1`.
            multiples (list[Point] | None): Precomputed multiples of the point. Defaults to `None`.
        """
        self.window_size = window_size
        self.multiples = multiples
