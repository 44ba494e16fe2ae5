"""Elements of the native field, either constants or circuit variables."""

from collections.abc import Callable, Sequence
from typing import Self

from py_ecc.fields.field_elements import FQ

from zkforeign.circuit.circuit import Circuit, ConstraintUnsatisfiedError

PALLAS_BASE_MODULUS = 0x40000000000000000000000000000000224698FC094CF91B992D30ED00000001


class NativeField(FQ):
    """Element of the native field, the base field of the Pallas curve."""

    field_modulus = PALLAS_BASE_MODULUS


class Field:
    """A native field value that is either a constant or a variable of a circuit.

    Operations between constants are folded without touching any circuit. As soon as one operand is a variable,
    the result is a new variable of the same circuit and a constraint relating it to the operands is added.

    Attributes:
        value (NativeField): The value (for variables, the witness value).
        circuit (Circuit | None): The circuit the variable belongs to, `None` for constants.
        index (int | None): The index of the variable in `circuit`, `None` for constants.
    """

    __slots__ = ("circuit", "index", "value")

    def __init__(self, value: int | NativeField, circuit: Circuit | None = None, index: int | None = None):
        """Initialise a native field value.

        Args:
            value (int | NativeField): The value, reduced modulo the native modulus.
            circuit (Circuit | None): The circuit the variable belongs to. Defaults to `None` (a constant).
            index (int | None): The index of the variable in `circuit`. Defaults to `None`.
        """
        self.value = value if isinstance(value, NativeField) else NativeField(int(value))
        self.circuit = circuit
        self.index = index

    def __repr__(self) -> str:
        if self.is_constant():
            return f"Field({self.to_int()})"
        return f"Field(var={self.index}, value={self.to_int()})"

    @classmethod
    def from_value(cls, x: "Field | int") -> "Field":
        """Return `x` if it is already a `Field`, otherwise the constant with value `x`."""
        return x if isinstance(x, Field) else cls(x)

    @classmethod
    def witness(cls, circuit: Circuit, value: int | NativeField) -> Self:
        """Create a new variable of `circuit` with witness `value`."""
        value = value if isinstance(value, NativeField) else NativeField(int(value))
        return cls(value, circuit, circuit.new_variable(value))

    def is_constant(self) -> bool:
        return self.circuit is None

    def to_int(self) -> int:
        return int(self.value)

    def _derive(self, value: NativeField, *operands: "Field") -> "Field":
        circuit = Circuit.of(operands)
        if circuit is None:
            return Field(value)
        out = Field.witness(circuit, value)
        circuit.add_constraint("generic", _indices([*operands, out]), holds=True)
        return out

    def add(self, other: "Field | int") -> "Field":
        other = Field.from_value(other)
        return self._derive(self.value + other.value, self, other)

    def sub(self, other: "Field | int") -> "Field":
        other = Field.from_value(other)
        return self._derive(self.value - other.value, self, other)

    def mul(self, other: "Field | int") -> "Field":
        other = Field.from_value(other)
        return self._derive(self.value * other.value, self, other)

    def neg(self) -> "Field":
        return self._derive(-self.value, self)

    def equals(self, other: "Field | int") -> "Bool":
        """Return a boolean that is `1` if and only if `self == other`.

        In the variable case, the boolean `b` and an auxiliary value `inv` are witnessed, and the constraints
        `(self - other) * inv = 1 - b` and `(self - other) * b = 0` are added.

        Args:
            other (Field | int): The value to compare with.

        Returns:
            The boolean `self == other`.
        """
        other = Field.from_value(other)
        if self.is_constant() and other.is_constant():
            return Bool(self.value == other.value)

        diff = self.sub(other)
        circuit = diff.circuit
        is_zero = diff.value == 0
        b, inverse = exists(circuit, lambda: [int(is_zero), 0 if is_zero else int(NativeField(1) / diff.value)])
        circuit.add_constraint(
            "generic", _indices([diff, inverse, b]), holds=diff.value * inverse.value == NativeField(1) - b.value
        )
        circuit.add_constraint("generic", _indices([diff, b]), holds=diff.value * b.value == 0)
        return Bool.unsafe_of_field(b)

    def assert_equals(self, other: "Field | int") -> None:
        """Assert that `self == other`.

        Raises:
            ConstraintUnsatisfiedError: If the values differ.
        """
        other = Field.from_value(other)
        if self.is_constant() and other.is_constant():
            if self.value != other.value:
                msg = f"Constants {self.to_int()} and {other.to_int()} are not equal"
                raise ConstraintUnsatisfiedError(msg)
            return
        circuit = Circuit.of((self, other))
        circuit.add_constraint("equal", _indices([self, other]), holds=self.value == other.value)

    def assert_boolean(self) -> None:
        """Assert that `self` is either `0` or `1`.

        Raises:
            ConstraintUnsatisfiedError: If the value is not a bit.
        """
        if self.is_constant():
            if self.to_int() not in (0, 1):
                msg = f"Constant {self.to_int()} is not a boolean"
                raise ConstraintUnsatisfiedError(msg)
            return
        self.circuit.add_constraint("boolean", [self.index], holds=self.value * self.value == self.value)


class Bool(Field):
    """A native field value known to be `0` or `1`."""

    __slots__ = ()

    def __init__(self, value: bool | int | NativeField, circuit: Circuit | None = None, index: int | None = None):
        """Initialise a boolean.

        Args:
            value (bool | int | NativeField): The value, `0` or `1`.
            circuit (Circuit | None): The circuit the variable belongs to. Defaults to `None` (a constant).
            index (int | None): The index of the variable in `circuit`. Defaults to `None`.
        """
        super().__init__(value if isinstance(value, NativeField) else int(value), circuit, index)

    @classmethod
    def unsafe_of_field(cls, x: Field) -> Self:
        """Reinterpret `x` as a boolean without constraining it."""
        return cls(x.value, x.circuit, x.index)

    @classmethod
    def witness(cls, circuit: Circuit, value: bool | int) -> Self:
        """Create a new boolean variable of `circuit`, constrained to be `0` or `1`."""
        out = super().witness(circuit, int(value))
        out.assert_boolean()
        return out

    def to_bool(self) -> bool:
        return self.value == 1

    def and_(self, other: "Bool") -> "Bool":
        return Bool.unsafe_of_field(self.mul(other))

    def not_(self) -> "Bool":
        return Bool.unsafe_of_field(Field(1).sub(self))

    def assert_true(self) -> None:
        self.assert_equals(1)

    def assert_false(self) -> None:
        self.assert_equals(0)


def _indices(fields: Sequence[Field]) -> list[int]:
    return [x.index for x in fields if not x.is_constant()]


def exists(circuit: Circuit, compute: Callable[[], Sequence[int]]) -> list[Field]:
    """Witness new variables of `circuit`.

    Args:
        circuit (Circuit): The circuit to add the variables to.
        compute (Callable[[], Sequence[int]]): Function computing the witness values from the values already known.

    Returns:
        The new variables, one per value returned by `compute`.
    """
    return [Field.witness(circuit, value) for value in compute()]


def if_(condition: Bool, then: Field | int, otherwise: Field | int) -> Field:
    """Select `then` if `condition` is `1` and `otherwise` if it is `0`.

    For a variable condition, the result is constrained as `condition * (then - otherwise) + otherwise`.
    """
    then, otherwise = Field.from_value(then), Field.from_value(otherwise)
    if condition.is_constant():
        return then if condition.to_bool() else otherwise
    value = condition.value * (then.value - otherwise.value) + otherwise.value
    return condition._derive(value, condition, then, otherwise)


def equality_selectors(index: Field, length: int) -> list[Bool]:
    """Return the booleans `index == i` for `i` in `range(length)`."""
    return [index.equals(i) for i in range(length)]


def select(selectors: Sequence[Bool], values: Sequence[Field | int]) -> Field:
    """Compute `sum(selectors[i] * values[i])`.

    If exactly one selector is `1` the result is the corresponding value, if none is the result is `0`.
    """
    if len(selectors) != len(values):
        msg = f"The number of selectors ({len(selectors)}) differs from the number of values ({len(values)})"
        raise ValueError(msg)
    out = Field(0)
    for selector, value in zip(selectors, values, strict=True):
        out = out.add(selector.mul(value))
    return out


def array_get(values: Sequence[Field | int], index: Field) -> Field:
    """Return `values[index]` for a possibly variable `index`.

    A constant index reads the entry directly. A variable index is resolved by a linear scan: the result is the sum
    of the entries weighted by the equality selectors `index == i`.
    """
    if index.is_constant():
        return Field.from_value(values[index.to_int()])
    return select(equality_selectors(index, len(values)), values)
