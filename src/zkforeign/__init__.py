"""zkforeign: A Python package for building circuits that verify ECDSA signatures over foreign curves.

The `zkforeign` package provides gadgets that add constraints over a fixed native prime field (the base field of
the Pallas curve) to a circuit. Elements of other prime fields are emulated with three 88-bit limbs, which makes it
possible to do arithmetic on elliptic curves such as secp256k1 whose fields are unrelated to the native one. On top
of point addition and doubling, the package provides windowed multi-scalar multiplication, its GLV-accelerated
variant, and ECDSA signature verification.

Every gadget works on constants as well as on circuit variables: when all inputs are constants the result is
computed directly and no constraints are added.

Usage example:
    Build the circuit verifying an ECDSA signature over secp256k1:

    >>> from zkforeign.circuit.circuit import Circuit
    >>> from zkforeign.ecdsa.ecdsa import Ecdsa
    >>> from zkforeign.elliptic_curves.instantiations import secp256k1
    >>> from zkforeign.fields.foreign_field import Field3
    >>> from zkforeign.types.provable_types import EcdsaSignature, Point
    >>>
    >>> ecdsa = Ecdsa(secp256k1)
    >>> private_key, msg_hash = 0x1234, 0xABCD
    >>> signature = ecdsa.sign(msg_hash, private_key)
    >>>
    >>> circuit = Circuit()
    >>> ecdsa.verify(
    ...     EcdsaSignature.witness(circuit, signature),
    ...     Field3.witness(circuit, msg_hash),
    ...     Point.witness(circuit, ecdsa.public_key(private_key)),
    ... )
    >>> circuit.summary()["foreign_field_mul"] > 0
    True
"""
