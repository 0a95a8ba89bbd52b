"""Tests for the circuit registry, key generation and configuration."""

import numpy as np
import pytest

from plonkish.config import CheckerConfig, get_default_config, set_default_config
from plonkish.gadgets import CIRCUIT_REGISTRY, get_circuit
from plonkish.gadgets.base import Circuit
from plonkish.gadgets.fibonacci import FibonacciCircuit
from plonkish.gadgets.numeric import NumericCircuit
from plonkish.primitives.field import FF
from plonkish.protocol.data import keygen, synthesize
from tests.conftest import GF17


def test_registry_contents() -> None:
    assert set(CIRCUIT_REGISTRY) == {
        "fibonacci",
        "compose",
        "compose_strict",
        "numeric",
        "range_check",
        "lookup_range_check",
    }
    assert all(issubclass(cls, Circuit) for cls in CIRCUIT_REGISTRY.values())


def test_get_circuit() -> None:
    assert get_circuit("fibonacci") is FibonacciCircuit


def test_get_circuit_unknown_lists_available() -> None:
    with pytest.raises(KeyError, match="Available"):
        get_circuit("sha256")


class TestKeygen:
    """Witness-free synthesis."""

    def test_fixed_part_matches_full_synthesis(self) -> None:
        """Selectors, fixed cells and copies do not depend on the witness."""
        full = synthesize(4, NumericCircuit(7, 2, 3), [[252]])
        key = keygen(4, NumericCircuit(7, 2, 3))
        assert (key.assignment.selectors == full.assignment.selectors).all()
        assert (key.assignment.fixed_assigned == full.assignment.fixed_assigned).all()
        assert key.assignment.copies.copies == full.assignment.copies.copies
        assert key.cs.degree() == full.cs.degree()

    def test_no_private_witness(self) -> None:
        """Only the circuit constant and its copy are known without a witness."""
        key = keygen(4, NumericCircuit(7, 2, 3))
        rows = [int(r) for r in key.assignment.advice_assigned[0].nonzero()[0]]
        assert rows == [2, 7]
        assert not key.assignment.advice_assigned[1].any()

    def test_instance_copies_hold_zero(self) -> None:
        """Without public inputs, cells read from the instance column are zero."""
        key = keygen(4, FibonacciCircuit(7))
        assert not key.assignment.instance.view(np.ndarray).any()
        seeds = key.assignment.advice_assigned[:2, 0]
        assert seeds.all()
        assert int(key.assignment.advice[0, 0]) == 0
        assert int(key.assignment.advice[1, 0]) == 0
        # Every sum is computed from the zero seeds
        assert key.assignment.advice_assigned[:, :8].all()
        assert not key.assignment.advice.view(np.ndarray).any()

    def test_every_registered_circuit_has_a_key(self) -> None:
        for name, cls in CIRCUIT_REGISTRY.items():
            k = 9 if name == "lookup_range_check" else 4
            data = keygen(k, cls())
            assert data.cs.frozen, name


class TestConfig:
    """Default configuration handling."""

    def test_defaults(self) -> None:
        config = get_default_config()
        assert config.field is FF
        assert config.max_workers == 1

    def test_get_returns_copy(self) -> None:
        config = get_default_config()
        config.max_workers = 8
        assert get_default_config().max_workers == 1

    def test_set_default(self) -> None:
        original = get_default_config()
        try:
            set_default_config(CheckerConfig(field=GF17, max_workers=2))
            data = synthesize(4, FibonacciCircuit(), [[1, 1, 55]])
            assert data.cs.field is GF17
            assert get_default_config().max_workers == 2
        finally:
            set_default_config(original)
        assert get_default_config().field is FF
