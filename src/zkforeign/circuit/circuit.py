"""Constraint-system builder with eager witness generation."""

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

CONSTRAINT_KINDS = (
    "generic",
    "boolean",
    "equal",
    "foreign_field_add",
    "foreign_field_mul",
    "multi_range_check",
)


class ConstraintUnsatisfiedError(Exception):
    """Raised when the witness does not satisfy a constraint being added to a circuit."""


@dataclass(init=False, frozen=True)
class Constraint:
    """A constraint recorded in a circuit.

    Attributes:
        kind (str): The kind of constraint, one of `CONSTRAINT_KINDS`.
        variables (tuple[int, ...]): The indices of the witness variables the constraint touches.
    """

    kind: str
    variables: tuple[int, ...]

    def __init__(self, kind: str, variables: tuple[int, ...]):
        """Initialise a constraint.

        Args:
            kind (str): The kind of constraint, one of `CONSTRAINT_KINDS`.
            variables (tuple[int, ...]): The indices of the witness variables the constraint touches.
        """
        if kind not in CONSTRAINT_KINDS:
            msg = f"Unknown constraint kind: {kind}"
            raise ValueError(msg)
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "variables", variables)


class Circuit:
    """Builder of a constraint system over the native field.

    The circuit is built in a single pass: every variable is created together with its witness value and every
    constraint is checked against the witness when it is added. A constraint that does not hold raises
    `ConstraintUnsatisfiedError`, which is the analogue of a failed proof.

    Attributes:
        witness (list): The witness values, indexed by variable.
        constraints (list[Constraint]): The constraints added so far, in order.
    """

    def __init__(self):
        """Initialise an empty circuit."""
        self.witness = []
        self.constraints = []

    def __len__(self) -> int:
        return len(self.constraints)

    def new_variable(self, value) -> int:
        """Allocate a new witness variable.

        Args:
            value: The witness value of the variable (an element of the native field).

        Returns:
            The index of the new variable.
        """
        self.witness.append(value)
        return len(self.witness) - 1

    def add_constraint(self, kind: str, variables: Iterable[int], holds: bool) -> Constraint:
        """Add a constraint to the circuit.

        Args:
            kind (str): The kind of constraint.
            variables (Iterable[int]): The indices of the variables the constraint touches.
            holds (bool): Whether the constraint is satisfied by the current witness.

        Returns:
            The constraint that was added.

        Raises:
            ConstraintUnsatisfiedError: If `holds` is `False`.
        """
        constraint = Constraint(kind, tuple(variables))
        if not holds:
            msg = f"Constraint {len(self.constraints)} of kind {kind} is not satisfied"
            raise ConstraintUnsatisfiedError(msg)
        self.constraints.append(constraint)
        return constraint

    def summary(self) -> dict[str, int]:
        """Count the constraints of the circuit by kind.

        Returns:
            A dictionary mapping every kind in `CONSTRAINT_KINDS` to the number of constraints of that kind, plus
            the key `total`.
        """
        counts = Counter(constraint.kind for constraint in self.constraints)
        out = {kind: counts[kind] for kind in CONSTRAINT_KINDS}
        out["total"] = len(self.constraints)
        logger.debug("Circuit summary: %s", out)
        return out

    @staticmethod
    def of(values: Iterable) -> "Circuit | None":
        """Return the circuit the variables in `values` belong to.

        Args:
            values (Iterable): Objects exposing a `circuit` attribute, which is `None` for constants.

        Returns:
            The unique circuit among the values, or `None` if all the values are constants.

        Raises:
            ValueError: If the values belong to different circuits.
        """
        circuit = None
        for value in values:
            if value.circuit is None:
                continue
            if circuit is None:
                circuit = value.circuit
            elif value.circuit is not circuit:
                msg = "Variables from different circuits cannot be combined"
                raise ValueError(msg)
        return circuit
