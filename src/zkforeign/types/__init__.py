"""types package.

This package provides custom types.

Modules:
    - provable_types: Points and ECDSA signatures with foreign field coordinates, and the configuration of tables
    of multiples used in multi-scalar multiplication.

Usage example:
    >>> from zkforeign.types.provable_types import EcdsaSignature
    >>>
    >>> EcdsaSignature.from_hex("0x" + "00" * 31 + "01" + "00" * 31 + "02").to_bigint()
    (1, 2)
"""
