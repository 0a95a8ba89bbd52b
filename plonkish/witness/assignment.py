"""The witness matrix: concrete values for every column at every row.

Assignment holds one galois array per column kind, shaped
``(num_columns, 2^k)``, plus boolean masks recording which advice and fixed
cells were written. Selectors are plain boolean arrays. Instance columns are
filled from the public inputs and zero-padded.

Writes may come from several region workers, so they take a lock.
"""

import logging
import threading
from typing import Optional, Sequence

import galois
import numpy as np

from plonkish.constraints.columns import Cell, Column, ColumnKind, Selector, TableColumn
from plonkish.constraints.system import ConstraintSystem
from plonkish.errors import AssignmentError
from plonkish.primitives.field import FieldLike, to_field
from .permutation import CopyConstraints

logger = logging.getLogger(__name__)


class Assignment:
    """Grid of cell values for one proving instance.

    Attributes:
        cs: The (frozen) constraint system the grid belongs to
        k: log2 of the row count
        n: Row count, 2^k
        advice: Advice values, shape (num_advice, n)
        fixed: Fixed values, shape (num_fixed, n)
        instance: Public inputs, shape (num_instance, n)
        selectors: Selector flags, shape (num_selectors, n)
        copies: Copy-constraint tracker
        regions: Region name for each (selector index, row) enabled inside a region
        annotations: Region path and annotation of every written cell
        loaded_tables: Lookup tables that have been loaded
    """

    def __init__(
        self,
        cs: ConstraintSystem,
        k: int,
        instances: Optional[Sequence[Sequence[FieldLike]]] = None,
    ):
        if k < 0:
            raise AssignmentError(f"k must be non-negative, got {k}")
        self.cs = cs
        self.k = k
        self.n = 1 << k
        field = cs.field
        self.advice = field.Zeros((cs.num_advice, self.n))
        self.advice_assigned = np.zeros((cs.num_advice, self.n), dtype=bool)
        self.fixed = field.Zeros((cs.num_fixed, self.n))
        self.fixed_assigned = np.zeros((cs.num_fixed, self.n), dtype=bool)
        self.instance = field.Zeros((cs.num_instance, self.n))
        self.selectors = np.zeros((cs.num_selectors, self.n), dtype=bool)
        self.copies = CopyConstraints(cs, self.n)
        self.regions: dict[tuple[int, int], str] = {}
        self.annotations: dict[Cell, str] = {}
        self.loaded_tables: set[TableColumn] = set()
        self._lock = threading.Lock()
        self.set_instances(instances or [])

    @property
    def field(self) -> type[galois.FieldArray]:
        return self.cs.field

    def set_instances(self, instances: Sequence[Sequence[FieldLike]]) -> None:
        """Load public inputs, one sequence per instance column."""
        if len(instances) > self.cs.num_instance:
            raise AssignmentError(
                f"Got {len(instances)} instance vectors for {self.cs.num_instance} instance column(s)"
            )
        self.instance = self.field.Zeros((self.cs.num_instance, self.n))
        for index, values in enumerate(instances):
            if len(values) > self.n:
                raise AssignmentError(
                    f"Instance column {index} has {len(values)} values but only {self.n} rows"
                )
            for row, value in enumerate(values):
                self.instance[index, row] = to_field(self.field, value)
        logger.debug("Loaded public inputs for %d instance column(s)", len(instances))

    # --- Writes ---

    def assign(self, cell: Cell, value: FieldLike, context: str = "") -> None:
        """Write an advice or fixed cell.

        Re-writing the same value is allowed; a different value is not.
        """
        self._check_row(cell, context)
        column = cell.column
        element = to_field(self.field, value)
        if column.kind is ColumnKind.ADVICE:
            values, mask = self.advice, self.advice_assigned
        elif column.kind is ColumnKind.FIXED:
            values, mask = self.fixed, self.fixed_assigned
        else:
            raise AssignmentError(f"{context}: cannot assign instance cell {cell}")
        with self._lock:
            if mask[column.index, cell.row] and values[column.index, cell.row] != element:
                raise AssignmentError(
                    f"{context}: cell {cell} already holds {int(values[column.index, cell.row])}, "
                    f"cannot assign {int(element)}"
                )
            values[column.index, cell.row] = element
            mask[column.index, cell.row] = True
            if context:
                self.annotations[cell] = context

    def enable_selector(self, selector: Selector, row: int, region: str = "") -> None:
        self.cs.check_selector(selector)
        if not 0 <= row < self.n:
            raise AssignmentError(f"{region}: {selector} row {row} is outside rows [0, {self.n})")
        with self._lock:
            self.selectors[selector.index, row] = True
            if region:
                self.regions[(selector.index, row)] = region

    def copy(self, left: Cell, right: Cell) -> None:
        self.copies.record_copy(left, right)

    # --- Reads ---

    def is_assigned(self, cell: Cell) -> bool:
        """Instance cells and fixed cells default to zero and count as assigned."""
        if cell.column.kind is ColumnKind.ADVICE:
            return bool(self.advice_assigned[cell.column.index, cell.row])
        return True

    def value(self, cell: Cell) -> Optional[galois.FieldArray]:
        """Value of ``cell``, or None for an unassigned advice cell."""
        self._check_row(cell, "read")
        if not self.is_assigned(cell):
            return None
        return self.column_values(cell.column)[cell.row]

    def column_values(self, column: Column) -> galois.FieldArray:
        """All n values of ``column`` as a galois array."""
        if column.kind is ColumnKind.ADVICE:
            return self.advice[column.index]
        if column.kind is ColumnKind.FIXED:
            return self.fixed[column.index]
        return self.instance[column.index]

    def selector_values(self, selector: Selector) -> galois.FieldArray:
        """Selector flags as 0/1 field elements."""
        return self.field(self.selectors[selector.index].astype(np.int64))

    def _check_row(self, cell: Cell, context: str) -> None:
        self.cs.check_column(cell.column)
        if not 0 <= cell.row < self.n:
            raise AssignmentError(f"{context}: cell {cell} is outside rows [0, {self.n})")
