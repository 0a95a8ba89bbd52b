"""Fibonacci recurrence f(i + 2) = f(i) + f(i + 1).

Three advice columns a, b, c and one gate ``s * (a + b - c)``. Each row holds
one step; consecutive rows are linked by copy constraints (b -> a, c -> b).
The seeds come from public inputs 0 and 1 and the last value is exposed at
public input 2.
"""

from dataclasses import dataclass

from plonkish.constraints.columns import Column, Selector
from plonkish.constraints.expressions import query, query_selector
from plonkish.constraints.system import ConstraintSystem
from plonkish.witness.layouter import AssignedCell, Layouter, Region
from .base import Chip, Circuit


def fibonacci(a: int, b: int, steps: int) -> int:
    """f(steps + 2) for f(0) = a, f(1) = b, over the integers."""
    for _ in range(steps + 1):
        a, b = b, a + b
    return b


@dataclass(frozen=True)
class FibonacciConfig:
    col_a: Column
    col_b: Column
    col_c: Column
    instance: Column
    selector: Selector


class FibonacciChip(Chip):

    @staticmethod
    def configure(cs: ConstraintSystem) -> FibonacciConfig:
        col_a = cs.advice_column()
        col_b = cs.advice_column()
        col_c = cs.advice_column()
        instance = cs.instance_column()
        selector = cs.selector()

        for column in (col_a, col_b, col_c, instance):
            cs.enable_equality(column)

        s = query_selector(selector)
        a, b, c = query(col_a), query(col_b), query(col_c)
        cs.create_gate("add", selector, [("a + b - c", s * (a + b - c))])

        return FibonacciConfig(col_a, col_b, col_c, instance, selector)

    def assign_first_row(self, layouter: Layouter) -> tuple[AssignedCell, AssignedCell, AssignedCell]:
        config: FibonacciConfig = self.config

        def first_row(region: Region):
            region.enable_selector("add", config.selector, 0)
            a = region.assign_advice_from_instance("f(0)", config.instance, 0, config.col_a, 0)
            b = region.assign_advice_from_instance("f(1)", config.instance, 1, config.col_b, 0)
            c = region.assign_advice("f(0) + f(1)", config.col_c, 0, a.value + b.value)
            return a, b, c

        return layouter.assign_region("first row", first_row)

    def assign_row(self, layouter: Layouter, prev_b: AssignedCell, prev_c: AssignedCell) -> AssignedCell:
        config: FibonacciConfig = self.config

        def next_row(region: Region):
            region.enable_selector("add", config.selector, 0)
            prev_b.copy_advice("a", region, config.col_a, 0)
            prev_c.copy_advice("b", region, config.col_b, 0)
            return region.assign_advice("c", config.col_c, 0, prev_b.value + prev_c.value)

        return layouter.assign_region("next row", next_row)

    def expose_public(self, layouter: Layouter, cell: AssignedCell, row: int) -> None:
        layouter.constrain_instance(cell, self.config.instance, row)


class FibonacciCircuit(Circuit):
    """Proves knowledge of f(steps + 2) given public seeds.

    Public inputs: ``[f(0), f(1), f(steps + 2)]`` in instance column 0.
    The grid needs ``steps + 1`` rows.
    """

    def __init__(self, steps: int = 7):
        if steps < 0:
            raise ValueError(f"steps must be non-negative, got {steps}")
        self.steps = steps

    @classmethod
    def configure(cls, cs: ConstraintSystem) -> FibonacciConfig:
        return FibonacciChip.configure(cs)

    def synthesize(self, config: FibonacciConfig, layouter: Layouter) -> None:
        chip = FibonacciChip(config)
        _, prev_b, prev_c = chip.assign_first_row(layouter.namespace("first row"))
        for _ in range(self.steps):
            c = chip.assign_row(layouter.namespace("next row"), prev_b, prev_c)
            prev_b, prev_c = prev_c, c
        chip.expose_public(layouter.namespace("out"), prev_c, 2)

    def without_witnesses(self) -> "FibonacciCircuit":
        return FibonacciCircuit(self.steps)
