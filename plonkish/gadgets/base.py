"""Base classes for circuits and chips."""

from abc import ABC, abstractmethod
from typing import Any

from plonkish.constraints.system import ConstraintSystem
from plonkish.witness.layouter import Layouter


class Circuit(ABC):
    """A circuit shape plus the private inputs for one instance.

    ``configure`` runs once per shape and must not look at instance data.
    ``synthesize`` runs per instance and fills the grid through the layouter.
    """

    @classmethod
    @abstractmethod
    def configure(cls, cs: ConstraintSystem) -> Any:
        """Declare columns, gates and lookups; return the circuit's config."""

    @abstractmethod
    def synthesize(self, config: Any, layouter: Layouter) -> None:
        """Assign every region for this instance."""

    def without_witnesses(self) -> "Circuit":
        """Same shape with every private input unknown.

        The default rebuilds the circuit with no arguments, so subclasses
        whose constructor parameters change the shape must override it.
        """
        return type(self)()


class Chip(ABC):
    """A reusable group of columns and gates with its own assignment logic."""

    def __init__(self, config: Any):
        self._config = config

    @property
    def config(self) -> Any:
        return self._config
