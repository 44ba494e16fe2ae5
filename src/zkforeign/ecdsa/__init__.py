"""ecdsa package.

This package provides ECDSA signing and verification, with verification available as constraints.

Modules:
    - ecdsa: Contains the Ecdsa class.
"""
