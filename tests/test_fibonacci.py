"""Tests for the Fibonacci circuit."""

import pytest

from plonkish.constraints.columns import ColumnKind
from plonkish.errors import AssignmentError, CopyConstraintViolation, VerifyFailure
from plonkish.gadgets.fibonacci import FibonacciCircuit, fibonacci
from plonkish.protocol.mock_prover import MockProver


def test_fibonacci_helper() -> None:
    assert fibonacci(1, 1, 7) == 55
    assert fibonacci(0, 1, 0) == 1
    assert fibonacci(2, 3, 1) == 8


def test_fibonacci_55() -> None:
    """f(9) = 55 for seeds (1, 1) fits in 16 rows and verifies."""
    prover = MockProver.run(4, FibonacciCircuit(), [[1, 1, 55]])
    prover.assert_satisfied()


def test_wrong_output_fails_copy_constraint() -> None:
    """Tampering with the public output breaks exactly one copy constraint."""
    prover = MockProver.run(4, FibonacciCircuit(), [[1, 1, 56]])
    violations = prover.verify()
    assert len(violations) == 1
    violation = violations[0]
    assert isinstance(violation, CopyConstraintViolation)
    assert violation.right.column.kind is ColumnKind.INSTANCE
    assert (violation.left_value, violation.right_value) == (55, 56)
    with pytest.raises(VerifyFailure):
        prover.assert_satisfied()


def test_wrong_seed_fails() -> None:
    prover = MockProver.run(4, FibonacciCircuit(), [[1, 2, 55]])
    assert prover.verify()


@pytest.mark.parametrize("steps", [0, 3, 12])
def test_other_lengths(steps: int) -> None:
    out = fibonacci(2, 5, steps)
    MockProver.run(4, FibonacciCircuit(steps), [[2, 5, out]]).assert_satisfied()


def test_layout() -> None:
    """One row per step, with the selector on every used row."""
    prover = MockProver.run(4, FibonacciCircuit(), [[1, 1, 55]])
    selectors = prover.assignment.selectors[0]
    assert selectors.tolist() == [True] * 8 + [False] * 8
    c = prover.assignment.column_values(prover.data.config.col_c)
    assert [int(v) for v in c[:8]] == [2, 3, 5, 8, 13, 21, 34, 55]


def test_too_many_steps_for_grid() -> None:
    with pytest.raises(AssignmentError):
        MockProver.run(3, FibonacciCircuit(8), [[1, 1, fibonacci(1, 1, 8)]])
