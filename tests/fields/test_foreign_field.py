from dataclasses import dataclass

import pytest

from zkforeign.circuit.circuit import Circuit, ConstraintUnsatisfiedError
from zkforeign.fields.foreign_field import (
    LIMB_BITS,
    LIMB_MASK,
    MAX_BITS,
    Field3,
    ForeignField,
    RangeCheckQueue,
    Sum,
    assert_rank1,
    collapse,
    multi_range_check,
    split,
    weak_bound,
)
from zkforeign.fields.native import Bool, Field


@dataclass
class Secp256k1Modulus:
    f = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
    test_data = {
        "test_binary_operations": [
            {"x": 5, "y": 7},
            {"x": f - 1, "y": f - 2},
            {"x": 0, "y": f - 1},
            {"x": 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798, "y": 2**200 + 3},
        ],
        "test_inverse": [
            {"x": 1},
            {"x": f - 1},
            {"x": 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8},
        ],
    }


@dataclass
class Secp256k1Order:
    f = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
    test_data = {
        "test_binary_operations": [
            {"x": 2**255, "y": 2**255 + 1},
            {"x": f - 1, "y": 1},
        ],
        "test_inverse": [
            {"x": 2},
            {"x": 2**128 + 1},
        ],
    }


@dataclass
class SmallModulus:
    f = 2**61 - 1
    test_data = {
        "test_binary_operations": [
            {"x": 2**60, "y": 2**60 + 5},
            {"x": 17, "y": 2**61 - 2},
        ],
        "test_inverse": [
            {"x": 3},
        ],
    }


def generate_test_cases(test_name):
    # Parse and return config and the test_data for each config
    configurations = [Secp256k1Modulus, Secp256k1Order, SmallModulus]

    test_cases = []
    for config in configurations:
        if test_name in config.test_data:
            for test_data in config.test_data[test_name]:
                test_cases.append((config, *test_data.values()))

    return test_cases


def test_split():
    x = 0x0123456789ABCDEF0123456789ABCDEF0123456789ABCDEF0123456789ABCDEF
    x0, x1, x2 = split(x)
    assert max(x0, x1, x2) <= LIMB_MASK
    assert x0 + (x1 << LIMB_BITS) + (x2 << (2 * LIMB_BITS)) == x
    assert collapse(split(x)) == x


def test_field3_from_int():
    assert Field3.from_int(2**88 + 1).to_int() == 2**88 + 1
    assert [limb.to_int() for limb in Field3.from_int(2**88 + 1)] == [1, 1, 0]
    assert Field3.from_int(7).is_constant()
    with pytest.raises(ValueError, match="non-negative"):
        Field3.from_int(-1)
    with pytest.raises(ValueError, match="3 limbs"):
        Field3([Field(1), Field(2)])


@pytest.mark.parametrize(("config", "x", "y"), generate_test_cases("test_binary_operations"))
@pytest.mark.parametrize("is_variable", [True, False])
def test_binary_operations(config, x, y, is_variable, save_summary):
    f = config.f
    circuit = Circuit()
    x_ = Field3.witness(circuit, x) if is_variable else Field3.from_int(x)

    add = ForeignField.add(x_, y, f)
    sub = ForeignField.sub(x_, y, f)
    mul = ForeignField.mul(x_, y, f)
    negate = ForeignField.negate(x_, f)

    assert add.to_int() == (x + y) % f
    assert sub.to_int() == (x - y) % f
    assert mul.to_int() == (x * y) % f
    assert negate.to_int() == (-x) % f
    assert all(out.is_constant() is not is_variable for out in (add, sub, mul, negate))

    summary = circuit.summary()
    if is_variable:
        assert summary["foreign_field_add"] == 3
        assert summary["foreign_field_mul"] == 1
    else:
        assert summary["total"] == 0
    save_summary(circuit, "fields", "foreign_field", f"test_binary_operations_{config.__name__}_{x}_{y}")


def test_multiplication_leaves_the_weak_bound_to_the_caller():
    f = Secp256k1Modulus.f
    circuit = Circuit()
    r = ForeignField.mul(Field3.witness(circuit, 12345), 7, f)
    assert r.to_int() == 12345 * 7
    # quotient and remainder only
    assert circuit.summary()["multi_range_check"] == 2

    multi_range_check([weak_bound(r[2], f), Field(0), Field(0)])
    assert circuit.summary()["multi_range_check"] == 3


def test_sum_of_several_terms():
    f = Secp256k1Modulus.f
    circuit = Circuit()
    xs = [Field3.witness(circuit, x) for x in (f - 1, f - 2, 5, 2**255)]
    out = ForeignField.sum(xs, [1, -1, 1], f)
    assert out.to_int() == (f - 1 + f - 2 - 5 + 2**255) % f
    assert circuit.summary()["foreign_field_add"] == 3
    assert circuit.summary()["multi_range_check"] == 1


def test_sum_argument_errors():
    with pytest.raises(ValueError, match="signs"):
        ForeignField.sum([1, 2, 3], [1], 7)
    with pytest.raises(ValueError, match="Signs must be"):
        ForeignField.sum([1, 2], [2], 7)


@pytest.mark.parametrize(("config", "x"), generate_test_cases("test_inverse"))
@pytest.mark.parametrize("is_variable", [True, False])
def test_inverse(config, x, is_variable):
    f = config.f
    circuit = Circuit()
    x_ = Field3.witness(circuit, x) if is_variable else Field3.from_int(x)
    assert ForeignField.inv(x_, f).to_int() == pow(x, -1, f)


@pytest.mark.parametrize("is_variable", [True, False])
def test_inverse_of_zero(is_variable):
    f = Secp256k1Modulus.f
    circuit = Circuit()
    x = Field3.witness(circuit, 0) if is_variable else Field3.from_int(0)
    with pytest.raises(ConstraintUnsatisfiedError):
        ForeignField.inv(x, f)


def test_sum_finish():
    f = SmallModulus.f
    circuit = Circuit()
    x = Field3.witness(circuit, 10)
    y = Field3.witness(circuit, 2**60)

    assert Sum(x).finish(f) is x
    assert Sum(3).add(4).sub(10).finish(f).to_int() == f - 3
    assert Sum(3).add(4).finish(f).is_constant()
    assert len(circuit) == 0

    out = Sum(x).sub(y).add(5).add(y).add(y).finish(f)
    assert out.to_int() == (10 + 5 + 2**60) % f
    assert not out.is_constant()

    out = Sum(x).sub(y).finish(f)
    assert out.to_int() == (10 - 2**60) % f


@pytest.mark.parametrize("is_variable", [True, False])
def test_assert_rank1(is_variable):
    f = Secp256k1Modulus.f
    circuit = Circuit()
    x = Field3.witness(circuit, 2**200 + 7) if is_variable else Field3.from_int(2**200 + 7)
    y = Field3.from_int(f - 3)
    xy = (2**200 + 7) * (f - 3) % f

    assert_rank1(x, y, xy, f)
    assert_rank1(Sum(x).add(x), y, Sum(xy).add(xy), f)
    if is_variable:
        assert circuit.summary()["foreign_field_mul"] == 2
    with pytest.raises(ConstraintUnsatisfiedError):
        assert_rank1(x, y, xy + 1, f)


@pytest.mark.parametrize(("value", "holds"), [(0, True), (LIMB_MASK, True), (LIMB_MASK + 1, False)])
@pytest.mark.parametrize("is_variable", [True, False])
def test_multi_range_check(value, holds, is_variable):
    circuit = Circuit()
    limbs = [Field.witness(circuit, value) if is_variable else Field(value), Field(1), Field(2)]
    if holds:
        multi_range_check(limbs)
    else:
        with pytest.raises(ConstraintUnsatisfiedError):
            multi_range_check(limbs)


def test_multi_range_check_of_unreduced_element():
    circuit = Circuit()
    x = Field3.witness(circuit, 2**MAX_BITS)
    with pytest.raises(ConstraintUnsatisfiedError):
        multi_range_check(x)


def test_multi_range_check_arity():
    with pytest.raises(ValueError, match="covers 3 values"):
        multi_range_check([Field(0), Field(0)])


@pytest.mark.parametrize(("offset", "holds"), [(0, True), (-1, True), (1, False)])
def test_weak_bound(offset, holds):
    f = Secp256k1Modulus.f
    circuit = Circuit()
    x2 = Field.witness(circuit, (f >> (2 * LIMB_BITS)) + offset)
    bound = weak_bound(x2, f)
    if holds:
        multi_range_check([bound, Field(0), Field(0)])
    else:
        with pytest.raises(ConstraintUnsatisfiedError):
            multi_range_check([bound, Field(0), Field(0)])


@pytest.mark.parametrize(("n_values", "expected_checks"), [(0, 0), (1, 1), (3, 1), (4, 2), (7, 3)])
def test_range_check_queue(n_values, expected_checks):
    circuit = Circuit()
    queue = RangeCheckQueue()
    for i in range(n_values):
        queue.push(Field.witness(circuit, i))
    assert len(queue) == n_values
    queue.flush()
    assert len(queue) == 0
    assert circuit.summary()["multi_range_check"] == expected_checks


def test_range_check_queue_failure():
    circuit = Circuit()
    queue = RangeCheckQueue()
    queue.push(Field.witness(circuit, 1))
    queue.push(Field.witness(circuit, 2**LIMB_BITS))
    with pytest.raises(ConstraintUnsatisfiedError):
        queue.flush()


@pytest.mark.parametrize("condition", [True, False])
def test_field3_if_and_equals(condition):
    circuit = Circuit()
    x = Field3.witness(circuit, 2**100 + 1)
    y = Field3.from_int(2**200 + 2)
    b = Bool.witness(circuit, condition)
    out = Field3.if_(b, x, y)
    assert out.to_int() == (2**100 + 1 if condition else 2**200 + 2)
    assert out.equals(x).to_bool() is condition
    assert out.equals(y).to_bool() is not condition
    out.assert_equal(x if condition else y)
    with pytest.raises(ConstraintUnsatisfiedError):
        out.assert_equal(y if condition else x)
