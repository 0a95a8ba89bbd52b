"""Constraint registry: columns, selectors, gates, lookups, equality.

A ConstraintSystem is populated once per circuit shape by
``Circuit.configure`` and frozen afterwards. It is the witness-independent
half of what a proving backend consumes.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence, Union

from plonkish.errors import ConfigurationError
from plonkish.primitives.field import FF, FieldType
from .columns import Column, ColumnKind, Selector, TableColumn
from .expressions import Expression, normalize_constraints

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Gate:
    """Named polynomial identities that must vanish where ``selector`` is on.

    The constraints are expected to carry the selector as a factor already;
    the registry never multiplies by it.
    """
    name: str
    selector: Selector
    constraints: tuple[tuple[str, Expression], ...]

    def degree(self) -> int:
        return max((expr.degree() for _, expr in self.constraints), default=0)


@dataclass(frozen=True)
class Lookup:
    """Table-membership argument checked where ``selector`` is on.

    Each input expression must evaluate to some value present in its table
    column (any row, not the same row).
    """
    name: str
    selector: Selector
    inputs: tuple[tuple[Expression, TableColumn], ...]

    def degree(self) -> int:
        return max((expr.degree() for expr, _ in self.inputs), default=0)


class ConstraintSystem:
    """Accumulates the shape of a circuit over a fixed field.

    Attributes:
        field: galois field class all values live in
        num_advice / num_fixed / num_instance / num_selectors: column counts
        gates: Registered gates, in registration order
        lookups: Registered lookup arguments
        equality: Columns that may take part in copy constraints
        constants: Fixed columns that hold constants for assign_advice_from_constant
        tables: Fixed columns declared as lookup tables
    """

    def __init__(self, field: FieldType = FF):
        self.field = field
        self.num_advice = 0
        self.num_fixed = 0
        self.num_instance = 0
        self.selectors: list[Selector] = []
        self.gates: list[Gate] = []
        self.lookups: list[Lookup] = []
        self.equality: set[Column] = set()
        self.constants: list[Column] = []
        self.tables: list[TableColumn] = []
        self._frozen = False

    # --- Columns ---

    def advice_column(self) -> Column:
        self._check_mutable()
        column = Column(ColumnKind.ADVICE, self.num_advice)
        self.num_advice += 1
        return column

    def fixed_column(self) -> Column:
        self._check_mutable()
        column = Column(ColumnKind.FIXED, self.num_fixed)
        self.num_fixed += 1
        return column

    def instance_column(self) -> Column:
        self._check_mutable()
        column = Column(ColumnKind.INSTANCE, self.num_instance)
        self.num_instance += 1
        return column

    def lookup_table_column(self) -> TableColumn:
        table = TableColumn(self.fixed_column())
        self.tables.append(table)
        return table

    def selector(self) -> Selector:
        """Allocate a simple selector (usable in gates only)."""
        return self._new_selector(simple=True)

    def complex_selector(self) -> Selector:
        """Allocate a selector that may also gate lookups."""
        return self._new_selector(simple=False)

    def _new_selector(self, simple: bool) -> Selector:
        self._check_mutable()
        selector = Selector(len(self.selectors), simple)
        self.selectors.append(selector)
        return selector

    @property
    def num_selectors(self) -> int:
        return len(self.selectors)

    # --- Equality ---

    def enable_equality(self, column: Column) -> None:
        """Allow ``column`` to take part in copy constraints."""
        self._check_mutable()
        self.check_column(column)
        self.equality.add(column)

    def enable_constant(self, column: Column) -> None:
        """Use fixed ``column`` to hold constants copied into advice cells."""
        self._check_mutable()
        self.check_column(column)
        if column.kind is not ColumnKind.FIXED:
            raise ConfigurationError(f"Constants column must be fixed, got {column}")
        if column not in self.constants:
            self.constants.append(column)
        self.equality.add(column)

    # --- Gates and lookups ---

    def create_gate(
        self,
        name: str,
        selector: Selector,
        constraints: Iterable[Union[Expression, tuple[str, Expression]]],
    ) -> Gate:
        """Register a gate.

        Args:
            name: Gate name used in diagnostics
            selector: Selector whose enabled rows the gate is checked at
            constraints: Expressions or (name, expression) pairs. Each must
                already be multiplied by the selector query.

        Returns:
            The registered Gate

        Raises:
            ConfigurationError: Empty gate, or an undeclared column/selector
        """
        self._check_mutable()
        self.check_selector(selector)
        named = normalize_constraints(constraints)
        if not named:
            raise ConfigurationError(f"Gate '{name}' has no constraints")
        for _, expr in named:
            self._check_expression(expr, f"gate '{name}'")
        gate = Gate(name, selector, tuple(named))
        self.gates.append(gate)
        logger.debug("Registered gate '%s' (%d constraints, degree %d)",
                     name, len(named), gate.degree())
        return gate

    register_gate = create_gate

    def lookup(
        self,
        name: str,
        selector: Selector,
        inputs: Sequence[tuple[Expression, TableColumn]],
    ) -> Lookup:
        """Register a lookup argument gated by a complex selector."""
        self._check_mutable()
        self.check_selector(selector)
        if selector.simple:
            raise ConfigurationError(
                f"Lookup '{name}' needs a complex selector, {selector} is simple"
            )
        if not inputs:
            raise ConfigurationError(f"Lookup '{name}' has no inputs")
        for expr, table in inputs:
            if table not in self.tables:
                raise ConfigurationError(f"Lookup '{name}' references undeclared {table}")
            self._check_expression(expr, f"lookup '{name}'")
            for used in expr.selectors():
                if used.simple:
                    raise ConfigurationError(
                        f"Lookup '{name}' input queries simple {used}"
                    )
        lookup = Lookup(name, selector, tuple(inputs))
        self.lookups.append(lookup)
        logger.debug("Registered lookup '%s' over %d input(s)", name, len(inputs))
        return lookup

    def degree(self) -> int:
        """Maximum degree over all gate constraints and lookup inputs."""
        degrees = [gate.degree() for gate in self.gates]
        degrees.extend(lookup.degree() for lookup in self.lookups)
        return max(degrees, default=0)

    def freeze(self) -> None:
        """Forbid further configuration."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # --- Validation ---

    def check_column(self, column: Column) -> None:
        counts = {
            ColumnKind.ADVICE: self.num_advice,
            ColumnKind.FIXED: self.num_fixed,
            ColumnKind.INSTANCE: self.num_instance,
        }
        if not 0 <= column.index < counts[column.kind]:
            raise ConfigurationError(f"Column {column} was not declared")

    def check_selector(self, selector: Selector) -> None:
        if not 0 <= selector.index < len(self.selectors) or self.selectors[selector.index] != selector:
            raise ConfigurationError(f"{selector} was not declared")

    def check_equality(self, column: Column) -> None:
        if column not in self.equality:
            raise ConfigurationError(f"Equality is not enabled on column {column}")

    def is_table(self, column: Column) -> bool:
        return TableColumn(column) in self.tables

    def _check_expression(self, expr: Expression, owner: str) -> None:
        for q in expr.queries():
            try:
                self.check_column(q.column)
            except ConfigurationError as exc:
                raise ConfigurationError(f"{owner}: {exc}") from exc
        for selector in expr.selectors():
            try:
                self.check_selector(selector)
            except ConfigurationError as exc:
                raise ConfigurationError(f"{owner}: {exc}") from exc

    def _check_mutable(self) -> None:
        if self._frozen:
            raise ConfigurationError("Constraint system is frozen after configuration")
