"""Range checks: value ∈ [0, RANGE).

Two ways to do it:

- Direct: the gate ``s * value * (1 - value) * ... * (RANGE - 1 - value)``
  vanishes exactly on 0..RANGE-1. Its degree grows with RANGE, so it only
  suits small ranges.
- Lookup: ``q_lookup * value`` must appear in a table loaded with
  0..LOOKUP_RANGE-1. Degree stays constant; the table costs LOOKUP_RANGE rows.

LookupRangeCheckConfig carries both over the same value column, each with its
own selector, so one circuit can check small values directly and large ones
by lookup.
"""

from dataclasses import dataclass
from typing import Sequence

from plonkish.constraints.columns import Column, Selector
from plonkish.constraints.expressions import Expression, product, query, query_selector, with_selector
from plonkish.constraints.system import ConstraintSystem
from plonkish.errors import ConfigurationError
from plonkish.witness.layouter import AssignedCell, Layouter, Region
from .base import Circuit
from .table import RangeTableConfig


def range_check_expr(value: Expression, range_: int) -> Expression:
    """value * (1 - value) * ... * (range_ - 1 - value)"""
    return product([value] + [i - value for i in range(1, range_)])


def _assign_value(layouter: Layouter, name: str, selector: Selector, column: Column, value) -> AssignedCell:
    def assign(region: Region) -> AssignedCell:
        region.enable_selector(name, selector, 0)
        return region.assign_advice("value", column, 0, value)

    return layouter.assign_region(name, assign)


@dataclass(frozen=True)
class RangeCheckConfig:
    value: Column
    q_range_check: Selector
    range_: int

    @classmethod
    def configure(cls, cs: ConstraintSystem, value: Column, range_: int) -> "RangeCheckConfig":
        if range_ < 1:
            raise ConfigurationError(f"Range must be positive, got {range_}")
        q_range_check = cs.selector()
        constraints = with_selector(
            query_selector(q_range_check),
            [("range check", range_check_expr(query(value), range_))],
        )
        cs.create_gate("range check", q_range_check, constraints)
        return cls(value, q_range_check, range_)

    def assign(self, layouter: Layouter, value) -> AssignedCell:
        return _assign_value(layouter, "range check", self.q_range_check, self.value, value)


@dataclass(frozen=True)
class LookupRangeCheckConfig:
    value: Column
    q_range_check: Selector
    q_lookup: Selector
    table: RangeTableConfig
    range_: int

    @classmethod
    def configure(
        cls, cs: ConstraintSystem, value: Column, range_: int, lookup_range: int
    ) -> "LookupRangeCheckConfig":
        direct = RangeCheckConfig.configure(cs, value, range_)
        q_lookup = cs.complex_selector()
        table = RangeTableConfig.configure(cs, lookup_range)
        cs.lookup("range check lookup", q_lookup, [(query_selector(q_lookup) * query(value), table.value)])
        return cls(value, direct.q_range_check, q_lookup, table, range_)

    @property
    def lookup_range(self) -> int:
        return self.table.range_

    def assign_simple(self, layouter: Layouter, value) -> AssignedCell:
        return _assign_value(layouter, "assign for simple", self.q_range_check, self.value, value)

    def assign_lookup(self, layouter: Layouter, value) -> AssignedCell:
        return _assign_value(layouter, "assign for lookup", self.q_lookup, self.value, value)


class RangeCheckCircuit(Circuit):
    """Direct range check on each of ``values``."""

    RANGE = 8

    def __init__(self, values: Sequence = ()):
        self.values = list(values)

    @classmethod
    def configure(cls, cs: ConstraintSystem) -> RangeCheckConfig:
        return RangeCheckConfig.configure(cs, cs.advice_column(), cls.RANGE)

    def synthesize(self, config: RangeCheckConfig, layouter: Layouter) -> None:
        for i, value in enumerate(self.values):
            config.assign(layouter.namespace(f"value {i}"), value)

    def without_witnesses(self) -> "RangeCheckCircuit":
        return type(self)([None] * len(self.values))


class LookupRangeCheckCircuit(Circuit):
    """Direct checks on ``values`` and lookup checks on ``lookup_values``.

    Needs ``LOOKUP_RANGE`` rows for the table, so k >= 8 with the defaults.
    """

    RANGE = 8
    LOOKUP_RANGE = 256

    def __init__(self, values: Sequence = (), lookup_values: Sequence = ()):
        self.values = list(values)
        self.lookup_values = list(lookup_values)

    @classmethod
    def configure(cls, cs: ConstraintSystem) -> LookupRangeCheckConfig:
        return LookupRangeCheckConfig.configure(cs, cs.advice_column(), cls.RANGE, cls.LOOKUP_RANGE)

    def synthesize(self, config: LookupRangeCheckConfig, layouter: Layouter) -> None:
        config.table.load(layouter)
        for i, value in enumerate(self.values):
            config.assign_simple(layouter.namespace(f"simple {i}"), value)
        for i, value in enumerate(self.lookup_values):
            config.assign_lookup(layouter.namespace(f"lookup {i}"), value)

    def without_witnesses(self) -> "LookupRangeCheckCircuit":
        return type(self)([None] * len(self.values), [None] * len(self.lookup_values))
