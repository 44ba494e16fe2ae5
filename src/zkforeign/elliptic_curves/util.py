"""Utility gadgets for scalar multiplication: bit slicing of scalars and table lookups."""

from dataclasses import dataclass

from zkforeign.fields.foreign_field import LIMB_BITS, MAX_BITS, Field3
from zkforeign.fields.native import Field, equality_selectors, exists, select
from zkforeign.types.provable_types import Point
from zkforeign.util.utility_functions import bigint_to_bits, check_positive_integer


@dataclass
class SlicedField:
    """Chunks of a sliced native value.

    Attributes:
        chunks (list[Field]): The chunks, least significant first.
        leftover_size (int): The number of bits missing from the last chunk, to be taken from the next limb.
    """

    chunks: list[Field]
    leftover_size: int


def slice_field(x: Field, max_bits: int, chunk_size: int, leftover: SlicedField | None = None) -> SlicedField:
    """Slice the native value `x` into chunks of `chunk_size` bits, proving that `x < 2^max_bits`.

    The `max_bits` low bits of `x` are witnessed and constrained to be booleans, the chunks are recombined from
    them, and the sum of the chunks is asserted to equal `x`. If `leftover` is given, the first bits of `x`
    complete the last chunk of the previous limb and the remaining chunks are aligned on it.

    Args:
        x (Field): The value to slice.
        max_bits (int): The number of bits of `x`.
        chunk_size (int): The number of bits per chunk.
        leftover (SlicedField | None): The result of slicing the previous limb. Its last chunk is updated in
            place. Defaults to `None`.

    Returns:
        The chunks of `x` and the number of bits missing from the last one.

    Raises:
        ConstraintUnsatisfiedError: If `x >= 2^max_bits`.
    """
    values = bigint_to_bits(x.to_int(), max_bits)
    bits = [Field(bit) for bit in values] if x.is_constant() else exists(x.circuit, lambda: values)
    for bit in bits:
        bit.assert_boolean()

    chunks = []
    total = Field(0)
    i = 0 if leftover is None else leftover.leftover_size
    if i > 0:
        remaining = Field(0)
        for j in range(min(i, max_bits)):
            remaining = remaining.add(bits[j].mul(1 << j))
        total = remaining
        leftover.chunks[-1] = leftover.chunks[-1].add(remaining.mul(1 << (chunk_size - i)))

    while i < max_bits:
        size = min(max_bits - i, chunk_size)
        chunk = Field(0)
        for j in range(size):
            chunk = chunk.add(bits[i + j].mul(1 << j))
        total = total.add(chunk.mul(1 << i))
        chunks.append(chunk)
        i += chunk_size
    total.assert_equals(x)

    return SlicedField(chunks, i - max_bits)


def slice_scalar(x: Field3, max_bits: int, chunk_size: int) -> list[Field]:
    """Slice the foreign field element `x` into chunks of `chunk_size` bits, proving that `x < 2^max_bits`.

    Chunks straddling two limbs are completed with the low bits of the next limb. Limbs lying entirely above
    `max_bits` are asserted to be zero.

    Args:
        x (Field3): The value to slice.
        max_bits (int): The number of bits of `x`, at most `3 * LIMB_BITS`.
        chunk_size (int): The number of bits per chunk.

    Returns:
        The `ceil(max_bits / chunk_size)` chunks of `x`, least significant first.

    Raises:
        ValueError: If `max_bits` exceeds `3 * LIMB_BITS` or `chunk_size` is not a positive integer.
    """
    if max_bits > MAX_BITS:
        msg = f"Expected max bits <= {MAX_BITS}, got {max_bits}"
        raise ValueError(msg)
    check_positive_integer(chunk_size, "chunk_size")

    chunks = []
    result = None
    limbs = list(x)
    while limbs:
        result = slice_field(limbs.pop(0), min(LIMB_BITS, max_bits), chunk_size, result)
        chunks.append(result.chunks)
        if max_bits <= LIMB_BITS:
            break
        max_bits -= LIMB_BITS
    for limb in limbs:
        limb.assert_equals(0)
    # the last chunk of each limb may have been completed by the next one
    return [chunk for limb_chunks in chunks for chunk in limb_chunks]


def array_get_generic(array: list[Point], index: Field) -> Point:
    """Return `array[index]` for a possibly variable `index`, in a number of constraints linear in `len(array)`.

    The result is witnessed, and each of its native fields is constrained to equal the corresponding field of the
    entries selected by `index == i`. If `index` is out of range the result is the all-zero point.

    Args:
        array (list[Point]): The points to choose from.
        index (Field): The index of the point to return.

    Returns:
        The selected point.
    """
    if index.is_constant():
        return array[index.to_int()]

    i = index.to_int()
    entry = array[i] if i < len(array) else Point.from_bigint(None)
    out = Point.witness(index.circuit, entry.to_bigint(), range_check=False)

    selectors = equality_selectors(index, len(array))
    columns = list(zip(*(point.fields() for point in array), strict=True))
    for column, field in zip(columns, out.fields(), strict=True):
        select(selectors, column).assert_equals(field)
    return out
