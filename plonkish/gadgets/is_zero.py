"""Zero-test gadget.

Given an expression ``value`` and an advice column ``value_inv``, the gadget
exposes ``is_zero_expr = 1 - value * value_inv``, which is 1 when value is
zero and 0 otherwise, provided the witness sets ``value_inv`` to the inverse
of value (or to 0 when value is 0).

The gate only enforces ``value * is_zero_expr = 0``. At value = 0 it holds
for any ``value_inv``, so the inverse witness is not unique there (the
output is still 1). ``strict=True`` adds ``value_inv * is_zero_expr = 0``,
which forces ``value_inv = 0`` whenever value is 0.
"""

from dataclasses import dataclass

from plonkish.constraints.columns import Column, Selector
from plonkish.constraints.expressions import Expression, query, query_selector
from plonkish.constraints.system import ConstraintSystem
from plonkish.primitives.field import invert_or_zero
from plonkish.witness.layouter import AssignedCell, Region
from plonkish.witness.value import Value
from .base import Chip


@dataclass(frozen=True)
class IsZeroConfig:
    value_inv: Column
    is_zero_expr: Expression

    def expr(self) -> Expression:
        return self.is_zero_expr


class IsZeroChip(Chip):
    """Assigns the inverse witness for an IsZeroConfig."""

    @staticmethod
    def configure(
        cs: ConstraintSystem,
        selector: Selector,
        value: Expression,
        value_inv: Column,
        strict: bool = False,
    ) -> IsZeroConfig:
        """Register the "is zero" gate.

        Args:
            cs: Constraint system under configuration
            selector: Selector gating the gate
            value: Expression tested for zero, at the current row
            value_inv: Advice column holding the inverse witness
            strict: Also pin ``value_inv`` to 0 when value is 0

        Returns:
            Config whose ``expr()`` is 1 where value is zero, else 0
        """
        q = query_selector(selector)
        inv = query(value_inv)
        is_zero_expr = 1 - value * inv

        constraints = [("value * (1 - value * inv)", q * value * is_zero_expr)]
        if strict:
            constraints.append(("inv * (1 - value * inv)", q * inv * is_zero_expr))
        cs.create_gate("is zero", selector, constraints)
        return IsZeroConfig(value_inv, is_zero_expr)

    def assign(self, region: Region, offset: int, value: Value) -> AssignedCell:
        """Write ``value``'s inverse, or 0 if value is zero."""
        value_inv = value.map(invert_or_zero)
        return region.assign_advice("value inv", self.config.value_inv, offset, value_inv)
