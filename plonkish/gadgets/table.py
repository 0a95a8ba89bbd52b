"""Lookup table holding the integers 0..range - 1."""

from dataclasses import dataclass

from plonkish.constraints.columns import TableColumn
from plonkish.constraints.system import ConstraintSystem
from plonkish.errors import ConfigurationError
from plonkish.witness.layouter import Layouter, Table


@dataclass(frozen=True)
class RangeTableConfig:
    value: TableColumn
    range_: int

    @classmethod
    def configure(cls, cs: ConstraintSystem, range_: int) -> "RangeTableConfig":
        if range_ < 1:
            raise ConfigurationError(f"Table range must be positive, got {range_}")
        return cls(cs.lookup_table_column(), range_)

    def load(self, layouter: Layouter) -> None:
        """Fill the table; may be called once per synthesis."""

        def fill(table: Table) -> None:
            for offset in range(self.range_):
                table.assign_cell("value", self.value, offset, offset)

        layouter.assign_table("load range-check table", fill)
