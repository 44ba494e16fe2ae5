import pytest

from zkforeign.util.utility_functions import (
    bigint_to_bits,
    bigint_to_bytes,
    bytes_to_bigint,
    check_positive_integer,
    cube_roots_of_unity,
    divide_and_round,
    sqrt_mod,
)

SECP256K1_MODULUS = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
PALLAS_MODULUS = 0x40000000000000000000000000000000224698FC094CF91B992D30ED00000001


@pytest.mark.parametrize(
    ("function", "inputs", "expected"),
    [
        (bigint_to_bytes, {"n": 0}, b""),
        (bigint_to_bytes, {"n": 0x0102}, b"\x02\x01"),
        (bigint_to_bytes, {"n": 255}, b"\xff"),
        (bytes_to_bigint, {"data": b"\x02\x01"}, 0x0102),
        (bytes_to_bigint, {"data": b""}, 0),
        (bigint_to_bits, {"n": 5, "length": 4}, [1, 0, 1, 0]),
        (bigint_to_bits, {"n": 0xFF, "length": 3}, [1, 1, 1]),
        (divide_and_round, {"numerator": 7, "denominator": 2}, 4),
        (divide_and_round, {"numerator": -7, "denominator": 2}, -3),
        (divide_and_round, {"numerator": 5, "denominator": -3}, -2),
        (divide_and_round, {"numerator": 10, "denominator": 5}, 2),
        (divide_and_round, {"numerator": 0, "denominator": 7}, 0),
    ],
)
def test_conversions(function, inputs, expected):
    assert function(**inputs) == expected


def test_divide_by_zero():
    with pytest.raises(ZeroDivisionError):
        divide_and_round(1, 0)


@pytest.mark.parametrize("n", [1, 7, 2**100])
def test_check_positive_integer(n):
    check_positive_integer(n, "n")


@pytest.mark.parametrize("n", [0, -3, 1.0, "1", True, None])
def test_check_positive_integer_errors(n):
    with pytest.raises(ValueError, match=r"window_size must be a positive integer, got .*"):
        check_positive_integer(n, "window_size")


@pytest.mark.parametrize("p", [SECP256K1_MODULUS, PALLAS_MODULUS, 13, 17])
@pytest.mark.parametrize("x", [1, 2, 3, 12345, 2**127 + 1])
def test_sqrt_mod(p, x):
    square = x * x % p
    root = sqrt_mod(square, p)
    assert root * root % p == square


@pytest.mark.parametrize("p", [SECP256K1_MODULUS, PALLAS_MODULUS, 13])
def test_sqrt_mod_non_residue(p):
    n = next(n for n in range(2, 100) if pow(n, (p - 1) // 2, p) == p - 1)
    assert sqrt_mod(n, p) is None
    assert sqrt_mod(0, p) == 0
    assert sqrt_mod(p, p) == 0


@pytest.mark.parametrize("p", [SECP256K1_MODULUS, PALLAS_MODULUS, 7, 13])
def test_cube_roots_of_unity(p):
    root, root_squared = cube_roots_of_unity(p)
    assert root != 1
    assert pow(root, 3, p) == 1
    assert root_squared == root * root % p
    assert (1 + root + root_squared) % p == 0


def test_cube_roots_of_unity_do_not_exist():
    with pytest.raises(ValueError, match="no non-trivial cube roots"):
        cube_roots_of_unity(11)
