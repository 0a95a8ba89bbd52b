"""Column, cell and selector handles."""

from dataclasses import dataclass
from enum import Enum


class ColumnKind(Enum):
    """Column kinds. Fixed at configuration time, never reinterpreted."""
    ADVICE = "advice"
    FIXED = "fixed"
    INSTANCE = "instance"


# Row rotations relative to the current row
CUR = 0
NEXT = 1
PREV = -1


@dataclass(frozen=True)
class Column:
    """Typed column handle: (kind, index within that kind)."""
    kind: ColumnKind
    index: int

    def __str__(self) -> str:
        return f"{self.kind.value}[{self.index}]"


@dataclass(frozen=True)
class Selector:
    """Boolean per-row flag that activates a gate or lookup.

    Simple selectors may only appear in gates. Complex selectors may also
    gate lookup arguments.
    """
    index: int
    simple: bool = True

    def __str__(self) -> str:
        return f"selector[{self.index}]"


@dataclass(frozen=True)
class TableColumn:
    """A fixed column reserved for a lookup table."""
    inner: Column

    def __str__(self) -> str:
        return f"table({self.inner})"


@dataclass(frozen=True)
class Cell:
    """Absolute cell address."""
    column: Column
    row: int

    def __str__(self) -> str:
        return f"{self.column}@{self.row}"
