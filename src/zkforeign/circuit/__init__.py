"""circuit package.

This package provides the constraint-system builder the gadgets of `zkforeign` emit constraints into.

Modules:
    - circuit: Contains the Circuit class, the Constraint record and ConstraintUnsatisfiedError.

Usage example:
    >>> from zkforeign.circuit.circuit import Circuit
    >>> from zkforeign.fields.native import Field
    >>>
    >>> circuit = Circuit()
    >>> x = Field.witness(circuit, 3)
    >>> y = x.mul(x).add(1)
    >>> circuit.summary()["generic"]
    2
"""
