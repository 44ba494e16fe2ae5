"""Arithmetic over a foreign prime field, emulated with three 88-bit native limbs.

An element `x` of the foreign field F_f is represented as `x = x0 + x1 * 2^88 + x2 * 2^176`, where the limbs
`x0, x1, x2` are native field values. Limbs are only guaranteed to be smaller than `2^88` once they have been
multi-range-checked, and the element is only guaranteed to be (weakly) smaller than `f` once its top limb has
been bounded with `weak_bound`.
"""

from collections.abc import Iterator, Sequence
from typing import Self

from zkforeign.circuit.circuit import Circuit, ConstraintUnsatisfiedError
from zkforeign.fields.native import PALLAS_BASE_MODULUS, Bool, Field, exists, if_

LIMB_BITS = 88
LIMB_MASK = (1 << LIMB_BITS) - 1
MAX_BITS = 3 * LIMB_BITS


def split(x: int) -> tuple[int, int, int]:
    """Split the non-negative integer `x` into three limbs of `LIMB_BITS` bits.

    The top limb holds every bit above `2 * LIMB_BITS`, so it exceeds `LIMB_BITS` bits if `x >= 2^MAX_BITS`.
    """
    return x & LIMB_MASK, (x >> LIMB_BITS) & LIMB_MASK, x >> (2 * LIMB_BITS)


def collapse(limbs: Sequence[int]) -> int:
    """Inverse of `split`."""
    return limbs[0] + (limbs[1] << LIMB_BITS) + (limbs[2] << (2 * LIMB_BITS))


def _to_signed(x: Field) -> int:
    value = x.to_int()
    return value - PALLAS_BASE_MODULUS if value > PALLAS_BASE_MODULUS // 2 else value


class Field3:
    """Element of a foreign field as three native limbs, least significant first.

    Attributes:
        limbs (tuple[Field, Field, Field]): The limbs.
    """

    __slots__ = ("limbs",)

    def __init__(self, limbs: Sequence[Field]):
        """Initialise a foreign field element from its limbs.

        Args:
            limbs (Sequence[Field]): The three limbs, least significant first.
        """
        if len(limbs) != 3:
            msg = f"A foreign field element has 3 limbs, got {len(limbs)}"
            raise ValueError(msg)
        self.limbs = tuple(limbs)

    def __iter__(self) -> Iterator[Field]:
        return iter(self.limbs)

    def __getitem__(self, i: int) -> Field:
        return self.limbs[i]

    def __repr__(self) -> str:
        kind = "constant" if self.is_constant() else "variable"
        return f"Field3({kind}, {hex(self.to_int())})"

    @classmethod
    def from_int(cls, x: int) -> Self:
        """Return the constant element with value `x`."""
        if x < 0:
            msg = f"Foreign field elements must be non-negative, got {x}"
            raise ValueError(msg)
        return cls([Field(limb) for limb in split(x)])

    @classmethod
    def from_value(cls, x: "Field3 | int") -> Self:
        return x if isinstance(x, Field3) else cls.from_int(x)

    @classmethod
    def witness(cls, circuit: Circuit, x: int) -> Self:
        """Witness `x` as three new variables of `circuit`, without range-checking them."""
        return cls(exists(circuit, lambda: split(x)))

    @property
    def circuit(self) -> Circuit | None:
        return Circuit.of(self.limbs)

    def to_int(self) -> int:
        return collapse([limb.to_int() for limb in self.limbs])

    def is_constant(self) -> bool:
        return all(limb.is_constant() for limb in self.limbs)

    @staticmethod
    def if_(condition: Bool, then: "Field3", otherwise: "Field3") -> "Field3":
        """Limb-wise conditional selection."""
        return Field3([if_(condition, a, b) for a, b in zip(then, otherwise, strict=True)])

    def equals(self, other: "Field3 | int") -> Bool:
        """Return the boolean `self == other`, comparing limbs."""
        other = Field3.from_value(other)
        out = Bool(True)
        for a, b in zip(self, other, strict=True):
            out = out.and_(a.equals(b))
        return out

    def assert_equal(self, other: "Field3 | int") -> None:
        """Assert limb-wise equality of `self` and `other`."""
        other = Field3.from_value(other)
        for a, b in zip(self, other, strict=True):
            a.assert_equals(b)


def multi_range_check(limbs: Field3 | Sequence[Field]) -> None:
    """Assert that each of three native values is smaller than `2^LIMB_BITS`.

    Args:
        limbs (Field3 | Sequence[Field]): The three values to check.

    Raises:
        ConstraintUnsatisfiedError: If a value is too large.
    """
    limbs = list(limbs)
    if len(limbs) != 3:
        msg = f"A multi-range-check covers 3 values, got {len(limbs)}"
        raise ValueError(msg)
    holds = all(limb.to_int() <= LIMB_MASK for limb in limbs)
    circuit = Circuit.of(limbs)
    if circuit is None:
        if not holds:
            msg = f"Constant limbs {[limb.to_int() for limb in limbs]} exceed {LIMB_BITS} bits"
            raise ConstraintUnsatisfiedError(msg)
        return
    circuit.add_constraint("multi_range_check", [limb.index for limb in limbs if not limb.is_constant()], holds)


def weak_bound(x2: Field, f: int) -> Field:
    """Return `x2 + 2^LIMB_BITS - 1 - (f >> 2 * LIMB_BITS)`.

    Range-checking the result to `LIMB_BITS` bits proves that the top limb `x2` is at most the top limb of `f`.
    """
    return x2.add(LIMB_MASK - (f >> (2 * LIMB_BITS)))


class RangeCheckQueue:
    """Native values waiting to be range-checked, flushed in multi-range-checks of three."""

    def __init__(self):
        self._pending = []

    def __len__(self) -> int:
        return len(self._pending)

    def push(self, x: Field) -> None:
        self._pending.append(x)

    def flush(self) -> None:
        """Range-check all pending values in batches of three, padding the last batch with zeros."""
        while self._pending:
            batch, self._pending = self._pending[:3], self._pending[3:]
            multi_range_check([*batch, *[Field(0)] * (3 - len(batch))])


def _single_add(x: Field3, y: Field3, sign: int, f: int) -> Field3:
    """Witness `r = x + sign * y mod f` and add the constraint `x + sign * y = r + overflow * f`."""
    circuit = Circuit.of([*x, *y])
    r = x.to_int() + sign * y.to_int()
    overflow = 0
    if sign == 1 and r >= f:
        overflow = 1
    elif sign == -1 and r < 0:
        overflow = -1
    r -= overflow * f

    result = Field3.witness(circuit, r)
    (overflow_var,) = exists(circuit, lambda: [overflow])
    lhs = x.to_int() + sign * y.to_int()
    rhs = result.to_int() + _to_signed(overflow_var) * f
    circuit.add_constraint(
        "foreign_field_add",
        [limb.index for limb in (*x, *y, *result, overflow_var) if not limb.is_constant()],
        holds=lhs == rhs and _to_signed(overflow_var) in (-1, 0, 1),
    )
    return result


def _multiply_constraint(a: Field3, b: Field3, q: Field3, r: Field3, f: int) -> None:
    """Add the constraint `a * b = q * f + r`."""
    circuit = Circuit.of([*a, *b, *q, *r])
    circuit.add_constraint(
        "foreign_field_mul",
        [limb.index for limb in (*a, *b, *q, *r) if not limb.is_constant()],
        holds=a.to_int() * b.to_int() == q.to_int() * f + r.to_int(),
    )


class ForeignField:
    """Gadgets for arithmetic modulo a foreign prime `f`.

    Every method takes the modulus explicitly. When all inputs are constants the result is computed directly and
    no constraints are added.
    """

    @staticmethod
    def sum(xs: Sequence[Field3 | int], signs: Sequence[int], f: int) -> Field3:
        """Compute `xs[0] + signs[0] * xs[1] + ... mod f`.

        The variable case is a chain of foreign field additions followed by a multi-range-check of the result.

        Args:
            xs (Sequence[Field3 | int]): The summands.
            signs (Sequence[int]): The signs (`1` or `-1`) of `xs[1:]`.
            f (int): The modulus.

        Returns:
            The sum, as a foreign field element.
        """
        if len(xs) != len(signs) + 1:
            msg = f"Expected {len(xs) - 1} signs for {len(xs)} summands, got {len(signs)}"
            raise ValueError(msg)
        if any(sign not in (1, -1) for sign in signs):
            msg = f"Signs must be 1 or -1, got {list(signs)}"
            raise ValueError(msg)
        xs = [Field3.from_value(x) for x in xs]
        if all(x.is_constant() for x in xs):
            total = xs[0].to_int() + sum(sign * x.to_int() for x, sign in zip(xs[1:], signs, strict=True))
            return Field3.from_int(total % f)

        result = xs[0]
        for x, sign in zip(xs[1:], signs, strict=True):
            result = _single_add(result, x, sign, f)
        multi_range_check(result)
        return result

    @staticmethod
    def add(x: Field3 | int, y: Field3 | int, f: int) -> Field3:
        return ForeignField.sum([x, y], [1], f)

    @staticmethod
    def sub(x: Field3 | int, y: Field3 | int, f: int) -> Field3:
        return ForeignField.sum([x, y], [-1], f)

    @staticmethod
    def negate(x: Field3 | int, f: int) -> Field3:
        return ForeignField.sum([0, x], [-1], f)

    @staticmethod
    def mul(a: Field3 | int, b: Field3 | int, f: int) -> Field3:
        """Compute `a * b mod f`.

        In the variable case, the quotient `q` and remainder `r` of `a * b` by `f` are witnessed and range-checked,
        and the constraint `a * b = q * f + r` is added. The top limb of `r` is not bounded here: callers that need
        `r` to be weakly reduced apply `weak_bound` to it.

        Args:
            a (Field3 | int): The first factor.
            b (Field3 | int): The second factor.
            f (int): The modulus.

        Returns:
            The remainder `r`.
        """
        a, b = Field3.from_value(a), Field3.from_value(b)
        if a.is_constant() and b.is_constant():
            return Field3.from_int(a.to_int() * b.to_int() % f)

        circuit = Circuit.of([*a, *b])
        quotient, remainder = divmod(a.to_int() * b.to_int(), f)
        q = Field3.witness(circuit, quotient)
        r = Field3.witness(circuit, remainder)
        _multiply_constraint(a, b, q, r, f)
        multi_range_check(q)
        multi_range_check(r)
        return r

    @staticmethod
    def inv(x: Field3 | int, f: int) -> Field3:
        """Compute the inverse of `x` modulo `f`.

        Raises:
            ConstraintUnsatisfiedError: If `x` is not invertible.
        """
        x = Field3.from_value(x)
        if x.is_constant():
            try:
                return Field3.from_int(pow(x.to_int(), -1, f))
            except ValueError as e:
                msg = f"{x.to_int()} is not invertible modulo {f}"
                raise ConstraintUnsatisfiedError(msg) from e

        try:
            inverse = pow(x.to_int(), -1, f)
        except ValueError:
            inverse = 0
        x_inv = Field3.witness(x.circuit, inverse)
        multi_range_check(x_inv)
        multi_range_check([weak_bound(x_inv[2], f), Field(0), Field(0)])
        assert_rank1(x, x_inv, 1, f)
        return x_inv


class Sum:
    """Deferred sum of foreign field elements.

    Summands are collected with their signs and constant summands are folded into a single offset. Nothing is
    added to a circuit until `finish` is called.
    """

    def __init__(self, x: Field3 | int):
        """Start a sum.

        Args:
            x (Field3 | int): The first summand.
        """
        self._summands = []
        self._signs = []
        self._offset = 0
        self.add(x)

    def add(self, y: Field3 | int) -> Self:
        self._push(y, 1)
        return self

    def sub(self, y: Field3 | int) -> Self:
        self._push(y, -1)
        return self

    def _push(self, y: Field3 | int, sign: int) -> None:
        y = Field3.from_value(y)
        if y.is_constant():
            self._offset += sign * y.to_int()
        else:
            self._summands.append(y)
            self._signs.append(sign)

    def finish(self, f: int) -> Field3:
        """Reduce the sum modulo `f` to a single foreign field element.

        A sum made of a single positive variable summand is returned as is, without constraints.
        """
        offset = self._offset % f
        if not self._summands:
            return Field3.from_int(offset)
        if offset == 0 and self._signs[0] == 1:
            xs, signs = self._summands, self._signs[1:]
        else:
            xs, signs = [Field3.from_int(offset), *self._summands], self._signs
        if len(xs) == 1:
            return xs[0]
        return ForeignField.sum(xs, signs, f)


def _finish(x: "Field3 | Sum | int", f: int) -> Field3:
    return x.finish(f) if isinstance(x, Sum) else Field3.from_value(x)


def assert_rank1(x: Field3 | Sum | int, y: Field3 | Sum | int, xy: Field3 | Sum | int, f: int) -> None:
    """Assert that `x * y = xy mod f` with a single foreign field multiplication constraint.

    `Sum` arguments are finished first. In the variable case the quotient `q = (x * y - xy) / f` is witnessed and
    range-checked, and the constraint `x * y = q * f + xy` is added.

    Args:
        x (Field3 | Sum | int): The first factor.
        y (Field3 | Sum | int): The second factor.
        xy (Field3 | Sum | int): The claimed product.
        f (int): The modulus.

    Raises:
        ConstraintUnsatisfiedError: If the product is incorrect.
    """
    x, y, xy = _finish(x, f), _finish(y, f), _finish(xy, f)
    difference = x.to_int() * y.to_int() - xy.to_int()
    circuit = Circuit.of([*x, *y, *xy])
    if circuit is None:
        if difference % f != 0:
            msg = "Incorrect multiplication result"
            raise ConstraintUnsatisfiedError(msg)
        return

    quotient = min(max(difference // f, 0), (1 << MAX_BITS) - 1)
    q = Field3.witness(circuit, quotient)
    _multiply_constraint(x, y, q, xy, f)
    multi_range_check(q)
