"""Example circuits and the chips they are built from.

Each circuit subclasses Circuit: ``configure`` declares its shape on a
ConstraintSystem and ``synthesize`` fills the grid for one set of inputs.
CIRCUIT_REGISTRY maps a short name to each circuit class so tests and
tooling can look them up by name.
"""

from .base import Chip, Circuit
from .compose import ComposeChip, ComposeCircuit, ComposeConfig, StrictComposeCircuit
from .fibonacci import FibonacciChip, FibonacciCircuit, FibonacciConfig, fibonacci
from .is_zero import IsZeroChip, IsZeroConfig
from .numeric import FieldChip, FieldConfig, Number, NumericCircuit, NumericInstructions
from .range_check import (
    LookupRangeCheckCircuit,
    LookupRangeCheckConfig,
    RangeCheckCircuit,
    RangeCheckConfig,
    range_check_expr,
)
from .table import RangeTableConfig

# Registry mapping circuit names to circuit classes
CIRCUIT_REGISTRY: dict[str, type[Circuit]] = {
    "fibonacci": FibonacciCircuit,
    "compose": ComposeCircuit,
    "compose_strict": StrictComposeCircuit,
    "numeric": NumericCircuit,
    "range_check": RangeCheckCircuit,
    "lookup_range_check": LookupRangeCheckCircuit,
}


def get_circuit(name: str) -> type[Circuit]:
    """Look up a circuit class by name.

    Args:
        name: Registry key (e.g. 'fibonacci', 'numeric')

    Returns:
        The Circuit subclass

    Raises:
        KeyError: If no circuit is registered under ``name``
    """
    if name in CIRCUIT_REGISTRY:
        return CIRCUIT_REGISTRY[name]
    raise KeyError(
        f"No circuit named '{name}'. "
        f"Available: {list(CIRCUIT_REGISTRY.keys())}"
    )


__all__ = [
    "Chip",
    "Circuit",
    "ComposeChip",
    "ComposeCircuit",
    "ComposeConfig",
    "StrictComposeCircuit",
    "FibonacciChip",
    "FibonacciCircuit",
    "FibonacciConfig",
    "fibonacci",
    "IsZeroChip",
    "IsZeroConfig",
    "FieldChip",
    "FieldConfig",
    "Number",
    "NumericCircuit",
    "NumericInstructions",
    "LookupRangeCheckCircuit",
    "LookupRangeCheckConfig",
    "RangeCheckCircuit",
    "RangeCheckConfig",
    "range_check_expr",
    "RangeTableConfig",
    "CIRCUIT_REGISTRY",
    "get_circuit",
]
