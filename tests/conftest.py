"""
Pytest configuration and shared fixtures.

Most unit tests run over GF(17) so every field element can be enumerated;
the example circuits run over the default Goldilocks field.
"""

import galois
import pytest

from plonkish.config import CheckerConfig
from plonkish.constraints.system import ConstraintSystem
from plonkish.witness.assignment import Assignment
from plonkish.witness.layouter import Layouter

GF17 = galois.GF(17)


@pytest.fixture
def small_field():
    return GF17


@pytest.fixture
def small_config() -> CheckerConfig:
    return CheckerConfig(field=GF17)


@pytest.fixture
def cs() -> ConstraintSystem:
    """Empty constraint system over GF(17)."""
    return ConstraintSystem(GF17)


def make_grid(cs: ConstraintSystem, k: int = 3, instances=None) -> tuple[Assignment, Layouter]:
    """Freeze ``cs`` and return a fresh grid plus its layouter."""
    cs.freeze()
    assignment = Assignment(cs, k, instances)
    return assignment, Layouter(assignment)
