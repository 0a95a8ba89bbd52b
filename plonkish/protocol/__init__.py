"""Synthesis driver and witness checker."""

from .data import CircuitData, keygen, synthesize
from .mock_prover import MockProver, check

__all__ = [
    "CircuitData",
    "MockProver",
    "check",
    "keygen",
    "synthesize",
]
