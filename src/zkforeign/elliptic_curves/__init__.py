"""elliptic_curves package.

This package provides modules for constructing constraints that perform elliptic curve operations over a foreign
base field.

Modules:
    - curve_parameters: Contains the CurveParameters and Endomorphism classes, reference arithmetic on points and
    the derivation of the initial aggregator.
    - instantiations: Contains the parameters of secp256k1 and Vesta.
    - ec_operations_foreign: Contains the EllipticCurveForeign class for point addition, doubling, negation, the
    endomorphism and tables of multiples.
    - ec_operations_foreign_msm: Contains the EllipticCurveForeignMsm class for plain and GLV multi-scalar
    multiplication.
    - util: Contains bit slicing of scalars and table lookups.

Usage example:
    >>> from zkforeign.elliptic_curves.ec_operations_foreign import EllipticCurveForeign
    >>> from zkforeign.elliptic_curves.instantiations import secp256k1
    >>> from zkforeign.types.provable_types import Point
    >>>
    >>> ec = EllipticCurveForeign(secp256k1)
    >>> G = Point.from_bigint(secp256k1.generator)
    >>> ec.double(G).to_bigint() == secp256k1.double(secp256k1.generator)
    True
"""
