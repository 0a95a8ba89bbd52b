"""Evaluation contexts for expressions.

EvaluationContext gives expressions a uniform way to read cells. The same
expression tree works row by row (scalars) and over whole columns (arrays)
thanks to galois broadcasting.

Example:
    expr = s * (a + b - c)

    # One row, scalar result; raises on unassigned advice cells
    value = expr.evaluate(RowContext(assignment, row=3))

    # Every row at once, array result of length 2^k
    values = expr.evaluate(ColumnContext(assignment))
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import galois
import numpy as np

from plonkish.errors import UnassignedCellError
from plonkish.primitives.field import to_field
from .columns import Cell, Column, ColumnKind, Selector

if TYPE_CHECKING:
    from plonkish.witness.assignment import Assignment


class EvaluationContext(ABC):
    """Uniform interface for concrete expression evaluation."""

    @abstractmethod
    def constant(self, value) -> galois.FieldArray:
        """Field element for a constant node."""

    @abstractmethod
    def query(self, column: Column, rotation: int) -> galois.FieldArray:
        """Value(s) of ``column`` at the current row(s) shifted by ``rotation``.

        Rotations wrap around the grid.
        """

    @abstractmethod
    def selector(self, selector: Selector) -> galois.FieldArray:
        """Selector flag(s) as 0/1 field elements."""


class RowContext(EvaluationContext):
    """Scalar evaluation at a single row."""

    def __init__(self, assignment: "Assignment", row: int, owner: str = "evaluation"):
        self._assignment = assignment
        self._row = row
        self._owner = owner

    def constant(self, value) -> galois.FieldArray:
        return to_field(self._assignment.field, value)

    def query(self, column: Column, rotation: int) -> galois.FieldArray:
        cell = Cell(column, (self._row + rotation) % self._assignment.n)
        value = self._assignment.value(cell)
        if value is None:
            raise UnassignedCellError(cell, f"{self._owner} at row {self._row}")
        return value

    def selector(self, selector: Selector) -> galois.FieldArray:
        flag = self._assignment.selectors[selector.index, self._row]
        return self._assignment.field(int(flag))


class ColumnContext(EvaluationContext):
    """Vectorized evaluation over all rows.

    Unassigned advice cells read as zero here; callers that need the
    "never assigned" check use ``unassigned_rows`` first.
    """

    def __init__(self, assignment: "Assignment"):
        self._assignment = assignment

    def constant(self, value) -> galois.FieldArray:
        return to_field(self._assignment.field, value)

    def query(self, column: Column, rotation: int) -> galois.FieldArray:
        # Row i reads row i + rotation
        return np.roll(self._assignment.column_values(column), -rotation)

    def selector(self, selector: Selector) -> galois.FieldArray:
        return self._assignment.selector_values(selector)

    def unassigned_rows(self, column: Column, rotation: int) -> np.ndarray:
        """Boolean mask of rows whose rotated query hits an unassigned advice cell."""
        if column.kind is not ColumnKind.ADVICE:
            return np.zeros(self._assignment.n, dtype=bool)
        assigned = self._assignment.advice_assigned[column.index]
        return ~np.roll(assigned, -rotation)
