"""Synthesis driver and the artifacts handed to a proving backend.

CircuitData bundles the frozen ConstraintSystem with the filled Assignment.
A backend reads the column layout, gates, lookups and equality set from the
former and the advice, fixed, selector and instance matrices from the latter.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence, TYPE_CHECKING

from plonkish.config import CheckerConfig, get_default_config
from plonkish.constraints.system import ConstraintSystem
from plonkish.primitives.field import FieldLike
from plonkish.witness.assignment import Assignment
from plonkish.witness.layouter import Layouter

if TYPE_CHECKING:
    from plonkish.gadgets.base import Circuit

logger = logging.getLogger(__name__)

Instances = Sequence[Sequence[FieldLike]]


@dataclass
class CircuitData:
    """A configured and synthesized circuit.

    Attributes:
        k: log2 of the row count
        cs: Frozen constraint system
        assignment: Witness matrix and copy constraints
        config: Whatever ``Circuit.configure`` returned
    """
    k: int
    cs: ConstraintSystem
    assignment: Assignment
    config: Any = None

    @property
    def n(self) -> int:
        return 1 << self.k


def synthesize(
    k: int,
    circuit: "Circuit",
    instances: Optional[Instances] = None,
    config: Optional[CheckerConfig] = None,
) -> CircuitData:
    """Configure ``circuit`` and run its synthesis over a 2^k-row grid.

    Args:
        k: log2 of the row count
        circuit: Circuit instance to synthesize
        instances: Public inputs, one sequence per instance column
        config: Field and worker settings; defaults to ``get_default_config()``

    Returns:
        CircuitData with a frozen constraint system and the filled grid

    Raises:
        ConfigurationError: The circuit's shape is invalid
        AssignmentError: A region wrote out of bounds or inconsistently
    """
    config = config or get_default_config()
    cs = ConstraintSystem(config.field)
    circuit_config = type(circuit).configure(cs)
    cs.freeze()

    assignment = Assignment(cs, k, instances)
    circuit.synthesize(circuit_config, Layouter(assignment))
    logger.debug(
        "Synthesized %s: k=%d, %d advice, %d fixed, %d instance, %d selector column(s), "
        "%d gate(s), %d lookup(s), %d copy constraint(s)",
        type(circuit).__name__, k, cs.num_advice, cs.num_fixed, cs.num_instance,
        cs.num_selectors, len(cs.gates), len(cs.lookups), len(assignment.copies.copies),
    )
    return CircuitData(k, cs, assignment, circuit_config)


def keygen(k: int, circuit: "Circuit", config: Optional[CheckerConfig] = None) -> CircuitData:
    """Synthesize the witness-independent part of ``circuit``.

    Fixed columns, selectors, tables and copy constraints are filled. Advice
    cells computed from private inputs stay unassigned because those inputs
    are unknown. No public inputs are given either, so advice cells copied
    from instance columns hold zero, as do cells computed only from them.
    """
    return synthesize(k, circuit.without_witnesses(), None, config)
