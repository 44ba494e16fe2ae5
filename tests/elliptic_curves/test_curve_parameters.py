import hashlib

import pytest

from zkforeign.elliptic_curves.curve_parameters import CurveParameters, Endomorphism, create_curve, initial_aggregator
from zkforeign.elliptic_curves.instantiations import secp256k1, vesta

scalars = [
    0,
    1,
    2,
    0x5363AD4CC05C30E0A5261C028812645A122E22EA20816678DF02967C1B23BD72,
    0xE9A1F32B0C4F4C7B2D8C3E6F1A5B9D0C7E3F2A1B4C6D8E0F1A2B3C4D5E6F7081,
    2**128 - 1,
    2**200 + 12345,
]


@pytest.mark.parametrize("curve", [secp256k1, vesta])
def test_generator(curve):
    assert curve.is_on_curve(curve.generator)
    assert curve.is_in_subgroup(curve.generator)
    assert curve.scale(curve.generator, curve.order) is None
    assert curve.scale(curve.generator, curve.order + 1) == curve.generator
    assert not curve.has_cofactor


@pytest.mark.parametrize("curve", [secp256k1, vesta])
def test_reference_arithmetic(curve):
    G = curve.generator  # noqa: N806
    assert curve.add(G, G) == curve.double(G) == curve.scale(G, 2)
    assert curve.add(curve.double(G), G) == curve.scale(G, 3)
    assert curve.add(G, curve.negate(G)) is None
    assert curve.add(None, G) == G
    assert curve.scale(G, -5) == curve.negate(curve.scale(G, 5))
    assert curve.equal(curve.scale(G, 0), None)
    assert not curve.is_on_curve((G[0], G[1] + 1))
    assert not curve.is_on_curve((G[0] + curve.modulus, G[1]))
    assert curve.is_on_curve(None)


def test_from_nonzero():
    assert secp256k1.from_nonzero(secp256k1.generator) == secp256k1.generator
    with pytest.raises(ValueError, match="point at infinity"):
        secp256k1.from_nonzero(None)


@pytest.mark.parametrize("curve", [secp256k1, vesta])
def test_endomorphism_acts_as_scalar(curve):
    assert curve.has_endomorphism
    endomorphism = curve.endomorphism
    assert pow(endomorphism.base, 3, curve.modulus) == 1
    assert pow(endomorphism.scalar, 3, curve.order) == 1
    G = curve.generator  # noqa: N806
    P = curve.scale(G, 0xDEADBEEF)  # noqa: N806
    assert curve.endomorphism_map(G) == curve.scale(G, endomorphism.scalar)
    assert curve.endomorphism_map(P) == curve.scale(P, endomorphism.scalar)


def test_derived_secp256k1_endomorphism():
    curve = create_curve("secp256k1", secp256k1.modulus, secp256k1.order, secp256k1.b, secp256k1.generator)
    assert curve.has_endomorphism
    G = curve.generator  # noqa: N806
    assert curve.endomorphism_map(G) == curve.scale(G, curve.endomorphism.scalar)
    assert curve.endomorphism.scalar in (secp256k1.endomorphism.scalar, secp256k1.endomorphism.scalar**2 % curve.order)


@pytest.mark.parametrize("curve", [secp256k1, vesta])
def test_glv_basis(curve):
    endomorphism = curve.endomorphism
    for a, b in endomorphism.basis:
        assert (a + b * endomorphism.scalar) % curve.order == 0
    (v00, v01), (v10, v11) = endomorphism.basis
    assert abs(v00 * v11 - v10 * v01) == curve.order
    assert endomorphism.decompose_max_bits <= curve.order.bit_length() // 2 + 4


@pytest.mark.parametrize("s", [*scalars, secp256k1.order - 1])
@pytest.mark.parametrize("curve", [secp256k1, vesta])
def test_decompose(curve, s):
    s %= curve.order
    endomorphism = curve.endomorphism
    s0, s1 = endomorphism.decompose(s)
    assert (s0.value + s1.value * endomorphism.scalar - s) % curve.order == 0
    for half in (s0, s1):
        assert half.abs < 2**endomorphism.decompose_max_bits
        assert half.is_negative is (half.value < 0)
        assert half.abs == abs(half.value)


@pytest.mark.parametrize("s", scalars)
@pytest.mark.parametrize("curve", [secp256k1, vesta])
def test_endo_scale(curve, s):
    G = curve.generator  # noqa: N806
    assert curve.endo_scale(G, s) == curve.scale(G, s % curve.order)


@pytest.mark.parametrize("curve", [secp256k1, vesta])
def test_initial_aggregator(curve):
    ia = initial_aggregator(curve)
    assert ia == initial_aggregator(curve)
    assert curve.is_on_curve(ia)

    h = hashlib.sha256(b"ecdsa")
    for value in (curve.modulus, curve.order, curve.a, curve.b):
        h.update(value.to_bytes((value.bit_length() + 7) // 8, "little"))
    start = int.from_bytes(h.digest(), "little") % curve.modulus
    assert 1 <= (ia[0] - start) % curve.modulus < 128


def test_initial_aggregator_depends_on_curve():
    assert initial_aggregator(secp256k1) != initial_aggregator(vesta)


def test_curve_validation():
    with pytest.raises(ValueError, match="a = 0"):
        CurveParameters("bad", secp256k1.modulus, secp256k1.order, 7, secp256k1.generator, a=1)
    with pytest.raises(ValueError, match="not on the curve"):
        CurveParameters("bad", secp256k1.modulus, secp256k1.order, 5, secp256k1.generator)
    with pytest.raises(ValueError, match="does not act as a scalar"):
        create_curve(
            "bad",
            secp256k1.modulus,
            secp256k1.order,
            7,
            secp256k1.generator,
            endomorphism=(secp256k1.endomorphism.base, secp256k1.endomorphism.scalar**2 % secp256k1.order),
        )


def test_curve_without_endomorphism():
    curve = CurveParameters("secp256k1", secp256k1.modulus, secp256k1.order, secp256k1.b, secp256k1.generator)
    assert not curve.has_endomorphism
    with pytest.raises(ValueError, match="no endomorphism"):
        curve.endomorphism_map(curve.generator)
    with pytest.raises(ValueError, match="no endomorphism"):
        curve.endo_scale(curve.generator, 5)


def test_endomorphism_basis_is_computed_from_scalar():
    endomorphism = Endomorphism(secp256k1.endomorphism.base, secp256k1.endomorphism.scalar, secp256k1.order)
    assert endomorphism.basis == secp256k1.endomorphism.basis
    assert endomorphism.decompose_max_bits == secp256k1.endomorphism.decompose_max_bits
