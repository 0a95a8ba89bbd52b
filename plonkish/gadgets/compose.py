"""f(a, b, c) = a == b ? c : a - b, built from the zero-test gadget on a - b."""

from dataclasses import dataclass

from plonkish.constraints.columns import Column, Selector
from plonkish.constraints.expressions import query, query_selector
from plonkish.constraints.system import ConstraintSystem
from plonkish.primitives.field import FieldLike
from plonkish.witness.layouter import AssignedCell, Layouter, Region
from .base import Chip, Circuit
from .is_zero import IsZeroChip, IsZeroConfig


@dataclass(frozen=True)
class ComposeConfig:
    a: Column
    b: Column
    c: Column
    output: Column
    selector: Selector
    a_equals_b: IsZeroConfig


class ComposeChip(Chip):

    @staticmethod
    def configure(cs: ConstraintSystem, strict: bool = False) -> ComposeConfig:
        selector = cs.selector()
        a = cs.advice_column()
        b = cs.advice_column()
        c = cs.advice_column()
        output = cs.advice_column()
        value_inv = cs.advice_column()

        qa, qb, qc, qout = query(a), query(b), query(c), query(output)
        a_equals_b = IsZeroChip.configure(cs, selector, qa - qb, value_inv, strict=strict)

        s = query_selector(selector)
        iz = a_equals_b.expr()
        cs.create_gate("f(a, b, c) = a == b ? c : a - b", selector, [
            ("a == b => output = c", s * iz * (qout - qc)),
            ("a != b => output = a - b", s * (1 - iz) * (qout - (qa - qb))),
        ])
        return ComposeConfig(a, b, c, output, selector, a_equals_b)

    def assign(self, layouter: Layouter, a, b, c) -> AssignedCell:
        """Assign one evaluation of f; returns the output cell."""
        config: ComposeConfig = self.config
        is_zero = IsZeroChip(config.a_equals_b)

        def evaluate(region: Region) -> AssignedCell:
            region.enable_selector("f", config.selector, 0)
            a_cell = region.assign_advice("a", config.a, 0, a)
            b_cell = region.assign_advice("b", config.b, 0, b)
            c_cell = region.assign_advice("c", config.c, 0, c)
            diff = a_cell.value - b_cell.value
            is_zero.assign(region, 0, diff)
            output = diff.zip_with(c_cell.value, lambda d, cv: cv if int(d) == 0 else d)
            return region.assign_advice("output", config.output, 0, output)

        return layouter.assign_region("f(a, b, c) = a == b ? c : a - b", evaluate)


class ComposeCircuit(Circuit):
    """One evaluation of f(a, b, c); no public inputs."""

    strict = False

    def __init__(self, a: FieldLike = None, b: FieldLike = None, c: FieldLike = None):
        self.a = a
        self.b = b
        self.c = c

    @classmethod
    def configure(cls, cs: ConstraintSystem) -> ComposeConfig:
        return ComposeChip.configure(cs, strict=cls.strict)

    def synthesize(self, config: ComposeConfig, layouter: Layouter) -> None:
        ComposeChip(config).assign(layouter, self.a, self.b, self.c)


class StrictComposeCircuit(ComposeCircuit):
    """ComposeCircuit with the stricter zero-test gate."""

    strict = True
