"""plonkish: PLONK-style arithmetization and a mock prover.

Circuits are described as gates, lookups and copy constraints over a grid of
advice, fixed and instance columns (``plonkish.constraints``), filled with a
witness through a region layouter (``plonkish.witness``), and checked
against a concrete witness by the mock prover (``plonkish.protocol``).
"""

from .config import CheckerConfig, get_default_config, set_default_config
from .errors import (
    AssignmentError,
    ConfigurationError,
    ConstraintViolation,
    CopyConstraintViolation,
    LookupViolation,
    PlonkishError,
    UnassignedCellError,
    VerifyFailure,
    Violation,
)
from .protocol import CircuitData, MockProver, check, keygen, synthesize

__all__ = [
    "CheckerConfig",
    "get_default_config",
    "set_default_config",
    "AssignmentError",
    "ConfigurationError",
    "ConstraintViolation",
    "CopyConstraintViolation",
    "LookupViolation",
    "PlonkishError",
    "UnassignedCellError",
    "VerifyFailure",
    "Violation",
    "CircuitData",
    "MockProver",
    "check",
    "keygen",
    "synthesize",
]
