"""Witness generation: values, the witness matrix, copy constraints, layout.

A circuit's ``synthesize`` receives a Layouter and fills cells region by
region. The result is an Assignment, the witness matrix the checker (or a
proving backend) consumes.
"""

from .assignment import Assignment
from .layouter import AssignedCell, Layouter, Region, RegionShape, Table
from .permutation import CopyConstraints
from .value import Value

__all__ = [
    "Assignment",
    "AssignedCell",
    "CopyConstraints",
    "Layouter",
    "Region",
    "RegionShape",
    "Table",
    "Value",
]
