"""Tests for the zero-test gadget and the compose circuit built on it."""

import pytest

from plonkish.constraints.columns import Cell
from plonkish.errors import ConstraintViolation
from plonkish.gadgets.compose import ComposeCircuit, StrictComposeCircuit
from plonkish.protocol.mock_prover import MockProver


def _expected(a: int, b: int, c: int) -> int:
    return c if a == b else (a - b) % 17


class TestCompose:
    """f(a, b, c) = a == b ? c : a - b"""

    def test_example(self) -> None:
        """f(3, 2, 3) = 1."""
        prover = MockProver.run(4, ComposeCircuit(3, 2, 3), [])
        prover.assert_satisfied()
        output = prover.data.config.output
        assert prover.assignment.value(Cell(output, 0)) == 1

    def test_equal_inputs_select_c(self) -> None:
        prover = MockProver.run(4, ComposeCircuit(5, 5, 9), [])
        prover.assert_satisfied()
        assert prover.assignment.value(Cell(prover.data.config.output, 0)) == 9

    def test_totality_over_small_field(self, small_config) -> None:
        """Honest witnesses verify for every (a, b) in GF(17)."""
        for a in range(17):
            for b in range(17):
                prover = MockProver.run(2, ComposeCircuit(a, b, 7), [], small_config)
                assert prover.verify() == []
                output = prover.assignment.value(Cell(prover.data.config.output, 0))
                assert output == _expected(a, b, 7)

    def test_wrong_output_fails(self) -> None:
        """Tampering with the output after synthesis breaks the gate."""
        prover = MockProver.run(4, ComposeCircuit(3, 2, 3), [])
        output = prover.data.config.output
        prover.assignment.advice[output.index, 0] = prover.cs.field(2)
        violations = prover.verify()
        assert [v.constraint for v in violations] == ["a != b => output = a - b"]
        assert all(isinstance(v, ConstraintViolation) for v in violations)


class TestIsZeroSoundness:
    """The plain gate leaves value_inv free at value = 0; strict mode pins it."""

    def _with_inverse_five(self, circuit_cls, small_config):
        prover = MockProver.run(2, circuit_cls(4, 4, 9), [], small_config)
        config = prover.data.config
        # a - b = 0, so any inverse witness satisfies the plain gate
        prover.assignment.advice[config.a_equals_b.value_inv.index, 0] = small_config.field(5)
        return prover.verify()

    def test_plain_gate_accepts_with_inverse_five(self, small_config) -> None:
        assert self._with_inverse_five(ComposeCircuit, small_config) == []

    def test_strict_gate_rejects_with_inverse_five(self, small_config) -> None:
        violations = self._with_inverse_five(StrictComposeCircuit, small_config)
        assert [(v.gate, v.constraint) for v in violations] == [("is zero", "inv * (1 - value * inv)")]

    @pytest.mark.parametrize("a,b", [(0, 0), (3, 3), (3, 2), (0, 16)])
    def test_strict_accepts_honest(self, a, b, small_config) -> None:
        prover = MockProver.run(2, StrictComposeCircuit(a, b, 1), [], small_config)
        assert prover.verify() == []
