"""fields package.

This package provides the field elements gadgets operate on.

Modules:
    - native: Contains the Field and Bool classes for elements of the native field, either constants or circuit
    variables, together with the witnessing and selection helpers.
    - foreign_field: Contains the Field3 class for elements of a foreign field as three 88-bit limbs, the
    ForeignField gadgets, the deferred Sum, assert_rank1 and the range-check helpers.

Usage example:
    >>> from zkforeign.fields.foreign_field import Field3, ForeignField
    >>>
    >>> secp256k1_MODULUS = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
    >>> ForeignField.mul(Field3.from_int(2), Field3.from_int(secp256k1_MODULUS - 1), secp256k1_MODULUS).to_int()
    115792089237316195423570985008687907853269984665640564039457584007908834671661
"""
