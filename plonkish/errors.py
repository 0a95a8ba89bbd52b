"""Exceptions and violation records.

Two families live here. Exceptions signal a broken circuit description and
abort synthesis immediately. Violations describe a witness that does not
satisfy the circuit; the checker accumulates them and returns them as data.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from plonkish.constraints.columns import Cell


# --- Exceptions ---


class PlonkishError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(PlonkishError, ValueError):
    """The circuit shape is invalid: undeclared column, double table load, ..."""


class AssignmentError(PlonkishError, ValueError):
    """A cell was addressed out of bounds or assigned inconsistently."""


class UnassignedCellError(AssignmentError):
    """An enabled constraint queried an advice cell that was never assigned."""

    def __init__(self, cell: "Cell", context: str):
        self.cell = cell
        self.context = context
        super().__init__(f"{context}: queried cell {cell} was never assigned")


class VerifyFailure(PlonkishError, AssertionError):
    """Raised by ``MockProver.assert_satisfied`` when violations exist."""

    def __init__(self, violations: list["Violation"]):
        self.violations = list(violations)
        lines = [f"{len(self.violations)} constraint violation(s):"]
        lines.extend(f"  - {v}" for v in self.violations)
        super().__init__("\n".join(lines))


# --- Violations ---


@dataclass(frozen=True)
class Violation:
    """Base record for an unsatisfied constraint."""


@dataclass(frozen=True)
class ConstraintViolation(Violation):
    """A gate constraint did not vanish at a row where its selector is on.

    Attributes:
        gate: Gate name
        constraint_index: Position of the constraint inside the gate
        constraint: Constraint name
        row: Absolute row
        selector: Selector index gating the gate
        region: Name of the region that enabled the selector, if known
        cell_values: (cell, value) pairs for every cell the constraint queries
    """
    gate: str
    constraint_index: int
    constraint: str
    row: int
    selector: int
    region: Optional[str] = None
    cell_values: tuple = field(default_factory=tuple)

    def __str__(self) -> str:
        where = f" in region '{self.region}'" if self.region else ""
        cells = ", ".join(f"{cell}={value}" for cell, value in self.cell_values)
        return (
            f"gate '{self.gate}' constraint {self.constraint_index} "
            f"('{self.constraint}') is not satisfied at row {self.row}{where}"
            + (f" [{cells}]" if cells else "")
        )


@dataclass(frozen=True)
class LookupViolation(Violation):
    """A lookup input is absent from its table at an enabled row."""
    lookup: str
    input_index: int
    row: int
    value: int
    table: str
    region: Optional[str] = None

    def __str__(self) -> str:
        where = f" in region '{self.region}'" if self.region else ""
        return (
            f"lookup '{self.lookup}' input {self.input_index} value {self.value} "
            f"not found in table {self.table} at row {self.row}{where}"
        )


@dataclass(frozen=True)
class CopyConstraintViolation(Violation):
    """Two cells of the same equality class hold different values."""
    left: "Cell"
    right: "Cell"
    left_value: int
    right_value: int

    def __str__(self) -> str:
        return (
            f"copy constraint between {self.left} (={self.left_value}) and "
            f"{self.right} (={self.right_value}) is not satisfied"
        )
