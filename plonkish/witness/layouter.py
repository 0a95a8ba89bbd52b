"""Region layouter: places regions on the grid and assigns their cells.

Layouter follows a simple greedy floor plan. ``assign_region`` runs the
region's assignment function twice:

1. Against a RegionShape, which only records the columns and selectors the
   region touches and how many rows it spans.
2. Against a Region starting at the first row that is free in every touched
   column.

Region assignment functions must therefore be repeatable: same calls, same
columns, same offsets on both passes.

Example:
    def first_row(region):
        region.enable_selector("add", config.selector, 0)
        a = region.assign_advice_from_instance("f(0)", config.instance, 0, config.col_a, 0)
        ...
        return a, b, c

    a, b, c = layouter.assign_region("first row", first_row)
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, TypeVar, Union

from plonkish.constraints.columns import Cell, Column, ColumnKind, Selector, TableColumn
from plonkish.errors import AssignmentError, ConfigurationError
from plonkish.primitives.field import to_field
from .assignment import Assignment
from .value import Value

logger = logging.getLogger(__name__)

T = TypeVar("T")

RegionColumn = Union[Column, Selector]


@dataclass(frozen=True)
class AssignedCell:
    """A cell handle returned by assignment, carrying the value written."""
    cell: Cell
    value: Value

    def copy_advice(self, annotation: str, region: "Region", column: Column, offset: int) -> "AssignedCell":
        """Copy this cell's value into ``column`` at ``offset`` of ``region``."""
        return region.copy_advice(annotation, self, column, offset)


def _cell_of(target: Union[AssignedCell, Cell]) -> Cell:
    return target.cell if isinstance(target, AssignedCell) else target


class _RegionBase:
    """Operations shared by the measuring and the assigning pass."""

    def __init__(self, name: str, assignment: Assignment):
        self.name = name
        self._assignment = assignment

    def _as_value(self, value) -> Value:
        if callable(value) and not isinstance(value, Value):
            value = value()
        if value is None:
            return Value.unknown()
        if not isinstance(value, Value):
            value = Value.known(value)
        field = self._assignment.field
        return value.map(lambda v: to_field(field, v))

    def _instance_value(self, instance: Column, row: int) -> Value:
        if instance.kind is not ColumnKind.INSTANCE:
            raise AssignmentError(f"{self.name}: {instance} is not an instance column")
        return Value.known(self._assignment.value(Cell(instance, row)))

    def _require_kind(self, column: Column, kind: ColumnKind) -> None:
        if column.kind is not kind:
            raise AssignmentError(f"{self.name}: expected {kind.value} column, got {column}")

    def _require_not_table(self, column: Column) -> None:
        # Table columns are written only through Layouter.assign_table
        if self._assignment.cs.is_table(column):
            raise ConfigurationError(f"{self.name}: {column} is a lookup table column")


class RegionShape(_RegionBase):
    """First pass: measures a region without writing anything."""

    def __init__(self, name: str, assignment: Assignment):
        super().__init__(name, assignment)
        self.columns: set[RegionColumn] = set()
        self.row_count = 0

    def _touch(self, column: RegionColumn, offset: int) -> None:
        if offset < 0:
            raise AssignmentError(f"{self.name}: negative offset {offset}")
        self.columns.add(column)
        self.row_count = max(self.row_count, offset + 1)

    def _shape_cell(self, column: Column, offset: int) -> Cell:
        self._touch(column, offset)
        return Cell(column, offset)

    def enable_selector(self, annotation: str, selector: Selector, offset: int) -> None:
        self._touch(selector, offset)

    def assign_advice(self, annotation: str, column: Column, offset: int, value) -> AssignedCell:
        self._require_kind(column, ColumnKind.ADVICE)
        return AssignedCell(self._shape_cell(column, offset), self._as_value(value))

    def assign_advice_from_instance(
        self, annotation: str, instance: Column, row: int, column: Column, offset: int
    ) -> AssignedCell:
        self._require_kind(column, ColumnKind.ADVICE)
        return AssignedCell(self._shape_cell(column, offset), self._instance_value(instance, row))

    def assign_advice_from_constant(self, annotation: str, column: Column, offset: int, constant) -> AssignedCell:
        self._require_kind(column, ColumnKind.ADVICE)
        return AssignedCell(self._shape_cell(column, offset), self._as_value(constant))

    def assign_fixed(self, annotation: str, column: Column, offset: int, value) -> AssignedCell:
        self._require_kind(column, ColumnKind.FIXED)
        self._require_not_table(column)
        return AssignedCell(self._shape_cell(column, offset), self._as_value(value))

    def copy_advice(self, annotation: str, source: AssignedCell, column: Column, offset: int) -> AssignedCell:
        return self.assign_advice(annotation, column, offset, source.value)

    def constrain_equal(self, left, right) -> None:
        pass

    def constrain_constant(self, target, constant) -> None:
        pass


class Region(_RegionBase):
    """Second pass: writes cells at ``start + offset``.

    Offsets are relative to the region and must stay below the row count
    measured in the first pass.
    """

    def __init__(self, name: str, assignment: Assignment, plan: "_FloorPlan", start: int, row_count: int):
        super().__init__(name, assignment)
        self.start = start
        self.row_count = row_count
        self._plan = plan

    def _cell(self, column: Column, offset: int, annotation: str) -> Cell:
        if not 0 <= offset < self.row_count:
            raise AssignmentError(
                f"{self.name}/{annotation}: offset {offset} is outside the region's "
                f"{self.row_count} row(s)"
            )
        return Cell(column, self.start + offset)

    def _write(self, annotation: str, cell: Cell, value: Value) -> AssignedCell:
        if value.is_known():
            self._assignment.assign(cell, value.inner, context=f"{self.name}/{annotation}")
        return AssignedCell(cell, value)

    def enable_selector(self, annotation: str, selector: Selector, offset: int) -> None:
        if not 0 <= offset < self.row_count:
            raise AssignmentError(f"{self.name}/{annotation}: selector offset {offset} outside region")
        for lookup in self._assignment.cs.lookups:
            if lookup.selector != selector:
                continue
            for _, table in lookup.inputs:
                if table not in self._assignment.loaded_tables:
                    raise ConfigurationError(
                        f"{self.name}/{annotation}: lookup '{lookup.name}' needs {table}, "
                        f"which has not been loaded yet"
                    )
        self._assignment.enable_selector(selector, self.start + offset, region=self.name)

    def assign_advice(self, annotation: str, column: Column, offset: int, value) -> AssignedCell:
        self._require_kind(column, ColumnKind.ADVICE)
        return self._write(annotation, self._cell(column, offset, annotation), self._as_value(value))

    def assign_advice_from_instance(
        self, annotation: str, instance: Column, row: int, column: Column, offset: int
    ) -> AssignedCell:
        """Assign the public input at (instance, row) and copy-constrain the two cells."""
        self._require_kind(column, ColumnKind.ADVICE)
        value = self._instance_value(instance, row)
        assigned = self._write(annotation, self._cell(column, offset, annotation), value)
        self._assignment.copy(Cell(instance, row), assigned.cell)
        return assigned

    def assign_advice_from_constant(self, annotation: str, column: Column, offset: int, constant) -> AssignedCell:
        """Assign ``constant`` and copy-constrain it to a cell of the constants column."""
        self._require_kind(column, ColumnKind.ADVICE)
        value = self._as_value(constant)
        assigned = self._write(annotation, self._cell(column, offset, annotation), value)
        self.constrain_constant(assigned, value)
        return assigned

    def assign_fixed(self, annotation: str, column: Column, offset: int, value) -> AssignedCell:
        self._require_kind(column, ColumnKind.FIXED)
        self._require_not_table(column)
        return self._write(annotation, self._cell(column, offset, annotation), self._as_value(value))

    def copy_advice(self, annotation: str, source: AssignedCell, column: Column, offset: int) -> AssignedCell:
        """Assign ``source``'s value into a new cell and copy-constrain the two."""
        assigned = self.assign_advice(annotation, column, offset, source.value)
        self._assignment.copy(source.cell, assigned.cell)
        return assigned

    def constrain_equal(self, left: Union[AssignedCell, Cell], right: Union[AssignedCell, Cell]) -> None:
        self._assignment.copy(_cell_of(left), _cell_of(right))

    def constrain_constant(self, target: Union[AssignedCell, Cell], constant) -> None:
        value = self._as_value(constant)
        if not value.is_known():
            raise AssignmentError(f"{self.name}: constants must be known")
        fixed_cell = self._plan.allocate_constant(value.inner)
        self._assignment.copy(fixed_cell, _cell_of(target))


class Table:
    """Handle passed to a table-loading function."""

    def __init__(self, name: str, assignment: Assignment, plan: "_FloorPlan"):
        self.name = name
        self._assignment = assignment
        self._plan = plan
        self.columns: set[TableColumn] = set()

    def assign_cell(self, annotation: str, table: TableColumn, offset: int, value) -> None:
        if table not in self._assignment.cs.tables:
            raise ConfigurationError(f"{self.name}: {table} is not a declared lookup table")
        if self._plan.is_loaded(table):
            raise ConfigurationError(f"{self.name}: {table} has already been loaded")
        field = self._assignment.field
        self._assignment.assign(
            Cell(table.inner, offset), to_field(field, value), context=f"{self.name}/{annotation}"
        )
        self.columns.add(table)


class _FloorPlan:
    """State shared by a layouter and all of its namespaces."""

    def __init__(self, assignment: Assignment):
        self.assignment = assignment
        self.next_free: dict[RegionColumn, int] = {}
        self.region_count = 0
        self._lock = threading.Lock()

    def allocate(self, shape: RegionShape) -> int:
        """Reserve rows for ``shape``; returns the region's first row."""
        with self._lock:
            start = max((self.next_free.get(column, 0) for column in shape.columns), default=0)
            end = start + shape.row_count
            if end > self.assignment.n:
                raise AssignmentError(
                    f"Region '{shape.name}' needs rows [{start}, {end}) but the grid has "
                    f"{self.assignment.n} rows"
                )
            for column in shape.columns:
                self.next_free[column] = end
            self.region_count += 1
        return start

    def allocate_constant(self, constant) -> Cell:
        """Place ``constant`` in the next free row of the constants column."""
        constants = self.assignment.cs.constants
        if not constants:
            raise ConfigurationError("No constants column; call enable_constant() during configure")
        column = constants[0]
        with self._lock:
            row = self.next_free.get(column, 0)
            if row >= self.assignment.n:
                raise AssignmentError(f"Constants column {column} is full")
            self.next_free[column] = row + 1
        cell = Cell(column, row)
        self.assignment.assign(cell, constant, context="constant")
        return cell

    def is_loaded(self, table: TableColumn) -> bool:
        with self._lock:
            return table in self.assignment.loaded_tables

    def mark_loaded(self, tables: set[TableColumn]) -> None:
        with self._lock:
            self.assignment.loaded_tables.update(tables)


class Layouter:
    """Assigns regions and tables onto an Assignment.

    ``namespace`` returns a child layouter that shares all state and only
    prefixes region names, so diagnostics show where a region came from.
    """

    def __init__(self, assignment: Assignment, _plan: Optional[_FloorPlan] = None, _path: tuple[str, ...] = ()):
        self.assignment = assignment
        self._plan = _plan or _FloorPlan(assignment)
        self._path = _path

    def namespace(self, name: str) -> "Layouter":
        return Layouter(self.assignment, self._plan, self._path + (name,))

    def _qualify(self, name: str) -> str:
        return "/".join(self._path + (name,))

    def _measure(self, name: str, assignment_fn: Callable[..., T]) -> tuple[str, RegionShape, int]:
        qualified = self._qualify(name)
        shape = RegionShape(qualified, self.assignment)
        assignment_fn(shape)
        start = self._plan.allocate(shape)
        logger.debug("Region '%s' placed at rows [%d, %d) over %d column(s)",
                     qualified, start, start + shape.row_count, len(shape.columns))
        return qualified, shape, start

    def assign_region(self, name: str, assignment_fn: Callable[..., T]) -> T:
        """Measure, place and fill one region; returns what ``assignment_fn`` returns."""
        qualified, shape, start = self._measure(name, assignment_fn)
        region = Region(qualified, self.assignment, self._plan, start, shape.row_count)
        return assignment_fn(region)

    def assign_regions(
        self,
        jobs: Sequence[tuple[str, Callable[..., T]]],
        max_workers: Optional[int] = None,
    ) -> list[T]:
        """Place several independent regions, then fill them in parallel.

        Row allocation happens serially, in job order, before any region is
        written. The jobs must not depend on each other's results.
        """
        placed = [self._measure(name, fn) for name, fn in jobs]
        regions = [
            Region(qualified, self.assignment, self._plan, start, shape.row_count)
            for qualified, shape, start in placed
        ]
        if max_workers == 1 or len(jobs) <= 1:
            return [fn(region) for (_, fn), region in zip(jobs, regions)]
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(fn, region) for (_, fn), region in zip(jobs, regions)]
            return [future.result() for future in futures]

    def assign_table(self, name: str, assignment_fn: Callable[[Table], None]) -> None:
        """Load one or more lookup tables. Each table may be loaded only once."""
        qualified = self._qualify(name)
        table = Table(qualified, self.assignment, self._plan)
        assignment_fn(table)
        self._plan.mark_loaded(table.columns)
        logger.debug("Loaded table(s) %s in '%s'", sorted(str(t) for t in table.columns), qualified)

    def constrain_instance(self, cell: Union[AssignedCell, Cell], instance: Column, row: int) -> None:
        """Bind ``cell`` to the public input at (instance, row)."""
        if instance.kind is not ColumnKind.INSTANCE:
            raise AssignmentError(f"{instance} is not an instance column")
        self.assignment.copy(_cell_of(cell), Cell(instance, row))

    @property
    def loaded_tables(self) -> set[TableColumn]:
        return set(self.assignment.loaded_tables)
