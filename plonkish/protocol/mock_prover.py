"""Concrete-witness checker.

The mock prover does what a real prover's constraint check does, without
any cryptography: every gate must vanish where its selector is on, every
lookup input must appear in its table where its selector is on, and every
copy-constraint class must hold a single value.

Gates are evaluated over all rows at once through a ColumnContext, the same
vectorized pattern a prover uses for the quotient polynomial. Violations are
collected rather than raised so a failing witness reports everything that is
wrong in one pass.

Example:
    prover = MockProver.run(4, FibonacciCircuit(), [[1, 1, 55]])
    assert prover.verify() == []
    prover.assert_satisfied()
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

import numpy as np

from plonkish.config import CheckerConfig, get_default_config
from plonkish.constraints.columns import Cell, TableColumn
from plonkish.constraints.context import ColumnContext
from plonkish.constraints.expressions import Expression, Query
from plonkish.constraints.system import ConstraintSystem, Gate, Lookup
from plonkish.errors import (
    ConfigurationError,
    ConstraintViolation,
    CopyConstraintViolation,
    LookupViolation,
    UnassignedCellError,
    VerifyFailure,
    Violation,
)
from plonkish.primitives.field import nonzero_mask
from plonkish.witness.assignment import Assignment
from .data import CircuitData, Instances, synthesize

logger = logging.getLogger(__name__)


def _distinct_queries(expr: Expression) -> list[Query]:
    seen: dict[tuple, Query] = {}
    for q in expr.queries():
        seen.setdefault((q.column, q.rotation), q)
    return list(seen.values())


def _row_values(values, n: int) -> np.ndarray:
    """Broadcast an evaluation result to one plain entry per row."""
    return np.broadcast_to(np.asarray(values.view(np.ndarray)), (n,))


class _Checker:
    """One checking pass over a synthesized grid."""

    def __init__(self, cs: ConstraintSystem, assignment: Assignment):
        self.cs = cs
        self.assignment = assignment
        self.n = assignment.n
        self.ctx = ColumnContext(assignment)
        self._tables: dict[TableColumn, frozenset[int]] = {}
        self.copy_class_count = 0

    # --- Shared helpers ---

    def _require_assigned(self, expr: Expression, enabled: np.ndarray, owner: str) -> None:
        """Raise if ``expr`` reads an unassigned advice cell at an enabled row."""
        for q in _distinct_queries(expr):
            missing = enabled & self.ctx.unassigned_rows(q.column, q.rotation)
            if missing.any():
                row = int(np.flatnonzero(missing)[0])
                cell = Cell(q.column, (row + q.rotation) % self.n)
                raise UnassignedCellError(cell, f"{owner} at row {row}")

    def _cell_values(self, expr: Expression, row: int) -> tuple:
        pairs = []
        for q in _distinct_queries(expr):
            cell = Cell(q.column, (row + q.rotation) % self.n)
            pairs.append((cell, int(self.assignment.column_values(q.column)[cell.row])))
        return tuple(pairs)

    def _region(self, selector_index: int, row: int) -> Optional[str]:
        return self.assignment.regions.get((selector_index, row))

    # --- Gates ---

    def check_gate(self, gate: Gate) -> list[Violation]:
        enabled = self.assignment.selectors[gate.selector.index]
        if not enabled.any():
            return []
        violations: list[Violation] = []
        for index, (name, expr) in enumerate(gate.constraints):
            self._require_assigned(expr, enabled, f"gate '{gate.name}' constraint {index}")
            failing = enabled & nonzero_mask(expr.evaluate(self.ctx))
            for row in np.flatnonzero(failing):
                row = int(row)
                violations.append(ConstraintViolation(
                    gate=gate.name,
                    constraint_index=index,
                    constraint=name,
                    row=row,
                    selector=gate.selector.index,
                    region=self._region(gate.selector.index, row),
                    cell_values=self._cell_values(expr, row),
                ))
        logger.debug("Gate '%s': %d enabled row(s), %d violation(s)",
                     gate.name, int(enabled.sum()), len(violations))
        return violations

    # --- Lookups ---

    def table_index(self, table: TableColumn) -> frozenset[int]:
        """Set of values loaded into ``table``, built once per check."""
        if table not in self._tables:
            if table not in self.assignment.loaded_tables:
                raise ConfigurationError(f"Lookup table {table} was never loaded")
            column = table.inner
            loaded = self.assignment.fixed_assigned[column.index]
            values = self.assignment.column_values(column).view(np.ndarray)[loaded]
            self._tables[table] = frozenset(int(v) for v in values)
        return self._tables[table]

    def check_lookup(self, lookup: Lookup) -> list[Violation]:
        enabled = self.assignment.selectors[lookup.selector.index]
        if not enabled.any():
            return []
        rows = np.flatnonzero(enabled)
        violations: list[Violation] = []
        for index, (expr, table) in enumerate(lookup.inputs):
            present = self.table_index(table)
            self._require_assigned(expr, enabled, f"lookup '{lookup.name}' input {index}")
            values = _row_values(expr.evaluate(self.ctx), self.n)
            for row in rows:
                value = int(values[row])
                if value not in present:
                    violations.append(LookupViolation(
                        lookup=lookup.name,
                        input_index=index,
                        row=int(row),
                        value=value,
                        table=str(table),
                        region=self._region(lookup.selector.index, int(row)),
                    ))
        logger.debug("Lookup '%s': %d enabled row(s), %d violation(s)",
                     lookup.name, len(rows), len(violations))
        return violations

    # --- Copy constraints ---

    def check_copies(self) -> list[Violation]:
        """Compare every concrete member of a class against its first concrete member.

        Unassigned advice cells are skipped; instance and fixed cells always
        hold a value.
        """
        violations: list[Violation] = []
        classes = self.assignment.copies.classes()
        self.copy_class_count = len(classes)
        for members in classes:
            concrete = [cell for cell in members if self.assignment.is_assigned(cell)]
            if len(concrete) < 2:
                continue
            reference = concrete[0]
            expected = int(self.assignment.value(reference))
            for cell in concrete[1:]:
                actual = int(self.assignment.value(cell))
                if actual != expected:
                    violations.append(CopyConstraintViolation(reference, cell, expected, actual))
        return violations


def check(
    cs: ConstraintSystem,
    assignment: Assignment,
    instances: Optional[Instances] = None,
    max_workers: Optional[int] = 1,
) -> list[Violation]:
    """Check a synthesized grid and return every violation found.

    Args:
        cs: The circuit's constraint system
        assignment: The witness matrix to check
        instances: Public inputs; replaces the grid's instance columns if given
        max_workers: Thread-pool size for gates and lookups; 1 checks serially

    Returns:
        Gate violations (in gate order), then lookup violations, then copy
        violations. Empty when the witness satisfies the circuit.

    Raises:
        UnassignedCellError: An enabled gate or lookup reads an advice cell
            that was never assigned
        ConfigurationError: A lookup's table was never loaded
    """
    if instances is not None:
        assignment.set_instances(instances)
    checker = _Checker(cs, assignment)

    # Tables are indexed up front so worker threads only read the cache
    for lookup in cs.lookups:
        for _, table in lookup.inputs:
            checker.table_index(table)

    jobs: list[Callable[[], list[Violation]]] = [
        *(lambda gate=gate: checker.check_gate(gate) for gate in cs.gates),
        *(lambda lookup=lookup: checker.check_lookup(lookup) for lookup in cs.lookups),
    ]
    if max_workers == 1 or len(jobs) <= 1:
        results = [job() for job in jobs]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(job) for job in jobs]
            results = [future.result() for future in futures]

    violations: list[Violation] = [v for result in results for v in result]
    violations.extend(checker.check_copies())
    logger.info(
        "Checked %d gate(s), %d lookup(s), %d copy class(es) over %d rows: %d violation(s)",
        len(cs.gates), len(cs.lookups), checker.copy_class_count, assignment.n,
        len(violations),
    )
    return violations


class MockProver:
    """Synthesizes a circuit and checks the resulting witness.

    Attributes:
        data: The synthesized circuit
        config: Settings the prover was created with
    """

    def __init__(self, data: CircuitData, config: Optional[CheckerConfig] = None):
        self.data = data
        self.config = config or get_default_config()
        self._violations: Optional[list[Violation]] = None

    @classmethod
    def run(
        cls,
        k: int,
        circuit,
        instances: Optional[Instances] = None,
        config: Optional[CheckerConfig] = None,
    ) -> "MockProver":
        """Configure and synthesize ``circuit`` over 2^k rows."""
        config = config or get_default_config()
        return cls(synthesize(k, circuit, instances, config), config)

    @property
    def cs(self) -> ConstraintSystem:
        return self.data.cs

    @property
    def assignment(self) -> Assignment:
        return self.data.assignment

    def verify(self) -> list[Violation]:
        """All violations of the synthesized witness; empty if satisfied."""
        if self._violations is None:
            self._violations = check(self.cs, self.assignment, max_workers=self.config.max_workers)
        return list(self._violations)

    def assert_satisfied(self) -> None:
        """Raise VerifyFailure listing every violation, if there are any."""
        violations = self.verify()
        if violations:
            raise VerifyFailure(violations)
