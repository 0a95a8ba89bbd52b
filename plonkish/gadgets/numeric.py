"""Field multiplication chip behind an abstract instruction set.

``NumericInstructions`` is the interface a circuit programs against;
``FieldChip`` implements it with two advice columns and a single gate

    s * (lhs * rhs - out)

where lhs and rhs sit on the selector's row and out on the row below it.
Constants enter through a fixed column enabled for constants, so their values
are part of the circuit rather than the witness.
"""

from abc import abstractmethod
from dataclasses import dataclass

from plonkish.constraints.columns import NEXT, Column, Selector
from plonkish.constraints.expressions import query, query_selector
from plonkish.constraints.system import ConstraintSystem
from plonkish.primitives.field import FieldLike
from plonkish.witness.layouter import AssignedCell, Layouter, Region
from plonkish.witness.value import Value
from .base import Chip, Circuit


@dataclass(frozen=True)
class Number:
    """A field element held in an advice cell."""
    cell: AssignedCell

    @property
    def value(self) -> Value:
        return self.cell.value


class NumericInstructions(Chip):
    """Arithmetic a circuit may ask of a numeric chip."""

    @abstractmethod
    def load_private(self, layouter: Layouter, value) -> Number:
        """Load a private input into the circuit."""

    @abstractmethod
    def load_constant(self, layouter: Layouter, constant: FieldLike) -> Number:
        """Load a constant fixed by the circuit."""

    @abstractmethod
    def mul(self, layouter: Layouter, a: Number, b: Number) -> Number:
        """Return a * b."""

    @abstractmethod
    def expose_public(self, layouter: Layouter, num: Number, row: int) -> None:
        """Bind ``num`` to the public input at ``row``."""


@dataclass(frozen=True)
class FieldConfig:
    advice: tuple[Column, Column]
    instance: Column
    selector: Selector


class FieldChip(NumericInstructions):

    @staticmethod
    def configure(
        cs: ConstraintSystem,
        advice: tuple[Column, Column],
        instance: Column,
        constant: Column,
    ) -> FieldConfig:
        cs.enable_equality(instance)
        cs.enable_constant(constant)
        for column in advice:
            cs.enable_equality(column)
        selector = cs.selector()

        lhs = query(advice[0])
        rhs = query(advice[1])
        out = query(advice[0], NEXT)
        s = query_selector(selector)
        cs.create_gate("mul", selector, [("lhs * rhs - out", s * (lhs * rhs - out))])

        return FieldConfig(tuple(advice), instance, selector)

    def load_private(self, layouter: Layouter, value) -> Number:
        config: FieldConfig = self.config
        return layouter.assign_region(
            "load private",
            lambda region: Number(region.assign_advice("private input", config.advice[0], 0, value)),
        )

    def load_constant(self, layouter: Layouter, constant: FieldLike) -> Number:
        config: FieldConfig = self.config
        return layouter.assign_region(
            "load constant",
            lambda region: Number(
                region.assign_advice_from_constant("constant value", config.advice[0], 0, constant)
            ),
        )

    def mul(self, layouter: Layouter, a: Number, b: Number) -> Number:
        config: FieldConfig = self.config

        def multiply(region: Region) -> Number:
            region.enable_selector("mul", config.selector, 0)
            a.cell.copy_advice("lhs", region, config.advice[0], 0)
            b.cell.copy_advice("rhs", region, config.advice[1], 0)
            value = a.value * b.value
            return Number(region.assign_advice("lhs * rhs", config.advice[0], 1, value))

        return layouter.assign_region("mul", multiply)

    def expose_public(self, layouter: Layouter, num: Number, row: int) -> None:
        layouter.constrain_instance(num.cell, self.config.instance, row)


class NumericCircuit(Circuit):
    """Exposes ``constant * a^2 * b^2`` at public input 0."""

    def __init__(self, constant: FieldLike = 0, a: FieldLike = None, b: FieldLike = None):
        self.constant = constant
        self.a = a
        self.b = b

    @classmethod
    def configure(cls, cs: ConstraintSystem) -> FieldConfig:
        advice = (cs.advice_column(), cs.advice_column())
        instance = cs.instance_column()
        constant = cs.fixed_column()
        return FieldChip.configure(cs, advice, instance, constant)

    def synthesize(self, config: FieldConfig, layouter: Layouter) -> None:
        chip = FieldChip(config)
        a = chip.load_private(layouter.namespace("load a"), self.a)
        b = chip.load_private(layouter.namespace("load b"), self.b)
        constant = chip.load_constant(layouter.namespace("load constant"), self.constant)

        ab = chip.mul(layouter.namespace("a * b"), a, b)
        ab_sq = chip.mul(layouter.namespace("ab * ab"), ab, ab)
        c = chip.mul(layouter.namespace("constant * ab_sq"), constant, ab_sq)
        chip.expose_public(layouter.namespace("expose c"), c, 0)

    def without_witnesses(self) -> "NumericCircuit":
        return NumericCircuit(self.constant)
