"""Tests for the witness checker on small hand-built circuits."""

import logging

import pytest

from plonkish.config import CheckerConfig
from plonkish.constraints.columns import NEXT, Cell
from plonkish.constraints.expressions import query, query_selector
from plonkish.errors import (
    ConfigurationError,
    ConstraintViolation,
    CopyConstraintViolation,
    LookupViolation,
    UnassignedCellError,
    VerifyFailure,
)
from plonkish.gadgets.base import Circuit
from plonkish.protocol.data import synthesize
from plonkish.protocol.mock_prover import MockProver, check
from tests.conftest import GF17, make_grid


def _square_gate(cs):
    """b = a * a on the selector's row."""
    a, b = cs.advice_column(), cs.advice_column()
    s = cs.selector()
    cs.create_gate("square", s, [("a * a - b", query_selector(s) * (query(a) * query(a) - query(b)))])
    return a, b, s


def _square_row(layouter, a, b, s, x, y, name="square"):
    def fill(region):
        region.enable_selector("s", s, 0)
        region.assign_advice("a", a, 0, x)
        region.assign_advice("b", b, 0, y)

    layouter.assign_region(name, fill)


class TestGates:
    """Gate evaluation."""

    def test_satisfied(self, cs) -> None:
        a, b, s = _square_gate(cs)
        assignment, layouter = make_grid(cs)
        for x in range(4):
            _square_row(layouter, a, b, s, x, x * x)
        assert check(cs, assignment) == []

    def test_violation_details(self, cs) -> None:
        """A failing row reports gate, constraint, row, region and cells."""
        a, b, s = _square_gate(cs)
        assignment, layouter = make_grid(cs)
        _square_row(layouter, a, b, s, 2, 4, "good")
        _square_row(layouter, a, b, s, 3, 10, "bad")

        violations = check(cs, assignment)
        assert violations == [ConstraintViolation(
            gate="square",
            constraint_index=0,
            constraint="a * a - b",
            row=1,
            selector=s.index,
            region="bad",
            cell_values=((Cell(a, 1), 3), (Cell(b, 1), 10)),
        )]
        assert "row 1" in str(violations[0])

    def test_disabled_rows_are_ignored(self, cs) -> None:
        """Garbage outside enabled rows never triggers the gate."""
        a, b, s = _square_gate(cs)
        assignment, layouter = make_grid(cs)
        _square_row(layouter, a, b, s, 2, 4)
        assignment.assign(Cell(a, 5), 3)
        assignment.assign(Cell(b, 5), 1)
        assert check(cs, assignment) == []

    def test_every_failure_is_reported(self, cs) -> None:
        a, b, s = _square_gate(cs)
        assignment, layouter = make_grid(cs)
        for x in range(5):
            _square_row(layouter, a, b, s, x, x * x + 1)
        rows = [v.row for v in check(cs, assignment)]
        assert rows == [0, 1, 2, 3, 4]

    def test_unassigned_cell_is_fatal(self, cs) -> None:
        """An enabled gate reading an unassigned advice cell raises."""
        a = cs.advice_column()
        s = cs.selector()
        cs.create_gate("next", s, [query_selector(s) * (query(a) - query(a, NEXT))])
        assignment, layouter = make_grid(cs)

        def fill(region):
            region.enable_selector("s", s, 0)
            region.assign_advice("a", a, 0, 1)

        layouter.assign_region("r", fill)
        with pytest.raises(UnassignedCellError) as exc_info:
            check(cs, assignment)
        assert exc_info.value.cell == Cell(a, 1)


class TestLookups:
    """Lookup checks against a small table."""

    def _configure(self, cs):
        a = cs.advice_column()
        table = cs.lookup_table_column()
        q = cs.complex_selector()
        cs.lookup("in table", q, [(query_selector(q) * query(a), table)])
        return a, table, q

    def _load(self, layouter, table, values):
        def fill(t):
            for i, v in enumerate(values):
                t.assign_cell("v", table, i, v)

        layouter.assign_table("table", fill)

    def _row(self, layouter, a, q, value):
        def fill(region):
            region.enable_selector("q", q, 0)
            region.assign_advice("a", a, 0, value)

        layouter.assign_region("lookup row", fill)

    def test_present_and_absent(self, cs) -> None:
        a, table, q = self._configure(cs)
        assignment, layouter = make_grid(cs)
        self._load(layouter, table, [1, 2, 3])
        for value in (3, 1, 5):
            self._row(layouter, a, q, value)

        violations = check(cs, assignment)
        assert len(violations) == 1
        violation = violations[0]
        assert isinstance(violation, LookupViolation)
        assert (violation.lookup, violation.row, violation.value) == ("in table", 2, 5)
        assert violation.region == "lookup row"

    def test_unloaded_table(self, cs) -> None:
        """Rows enabled directly on the grid still need a loaded table."""
        a, _, q = self._configure(cs)
        assignment, _ = make_grid(cs)
        assignment.assign(Cell(a, 0), 1)
        assignment.enable_selector(q, 0)
        with pytest.raises(ConfigurationError, match="never loaded"):
            check(cs, assignment)

    def test_lookup_row_before_table_load(self, cs) -> None:
        """A region cannot enable a lookup before its table is loaded."""
        a, table, q = self._configure(cs)
        assignment, layouter = make_grid(cs)
        with pytest.raises(ConfigurationError, match="has not been loaded"):
            self._row(layouter, a, q, 2)
        assert not assignment.selectors[q.index].any()

        self._load(layouter, table, [1, 2, 3])
        self._row(layouter, a, q, 2)
        assert check(cs, assignment) == []

    def test_unassigned_table_rows_are_not_members(self, cs) -> None:
        """Zero is only in the table if it was loaded."""
        a, table, q = self._configure(cs)
        assignment, layouter = make_grid(cs)
        self._load(layouter, table, [1, 2])
        self._row(layouter, a, q, 0)
        assert [v.value for v in check(cs, assignment)] == [0]


class TestCopies:
    """Copy-constraint soundness: one violation per disagreeing member."""

    @pytest.fixture
    def columns(self, cs):
        a, b = cs.advice_column(), cs.advice_column()
        fixed = cs.fixed_column()
        inst = cs.instance_column()
        for column in (a, b, inst):
            cs.enable_equality(column)
        cs.enable_constant(fixed)
        return cs, a, b, fixed, inst

    def test_instance_class(self, columns) -> None:
        cs, a, _, _, inst = columns
        assignment, layouter = make_grid(cs, instances=[[6]])
        cell = layouter.assign_region("r", lambda r: r.assign_advice("x", a, 0, 5))
        layouter.constrain_instance(cell, inst, 0)

        violations = check(cs, assignment)
        assert violations == [CopyConstraintViolation(Cell(a, 0), Cell(inst, 0), 5, 6)]

    def test_summary_counts_classes(self, columns, caplog) -> None:
        cs, a, b, _, inst = columns
        assignment, layouter = make_grid(cs, instances=[[5]])
        left = layouter.assign_region("left", lambda r: r.assign_advice("x", a, 0, 5))
        layouter.constrain_instance(left, inst, 0)
        right = layouter.assign_region("right", lambda r: r.assign_advice("y", b, 0, 7))
        assignment.copy(right.cell, Cell(a, 2))

        with caplog.at_level(logging.INFO, logger="plonkish.protocol.mock_prover"):
            assert check(cs, assignment) == []
        assert "2 copy class(es)" in caplog.text

    def test_constant_class(self, columns) -> None:
        cs, a, _, fixed, _ = columns
        assignment, layouter = make_grid(cs)

        def fill(region):
            cell = region.assign_advice("x", a, 0, 3)
            region.constrain_constant(cell, 4)

        layouter.assign_region("r", fill)
        violations = check(cs, assignment)
        assert violations == [CopyConstraintViolation(Cell(fixed, 0), Cell(a, 0), 4, 3)]

    def test_inter_region_class(self, columns) -> None:
        cs, a, b, _, _ = columns
        assignment, layouter = make_grid(cs)
        left = layouter.assign_region("left", lambda r: r.assign_advice("x", a, 0, 1))

        def fill(region):
            right = region.assign_advice("y", b, 0, 2)
            region.constrain_equal(left, right)

        layouter.assign_region("right", fill)
        violations = check(cs, assignment)
        assert violations == [CopyConstraintViolation(Cell(a, 0), Cell(b, 0), 1, 2)]

    def test_matching_class(self, columns) -> None:
        cs, a, b, _, inst = columns
        assignment, layouter = make_grid(cs, instances=[[7]])
        left = layouter.assign_region("left", lambda r: r.assign_advice("x", a, 0, 7))
        layouter.assign_region("right", lambda r: left.copy_advice("y", r, b, 0))
        layouter.constrain_instance(left, inst, 0)
        assert check(cs, assignment) == []

    def test_unassigned_members_are_skipped(self, columns) -> None:
        cs, a, b, _, _ = columns
        assignment, layouter = make_grid(cs)
        left = layouter.assign_region("left", lambda r: r.assign_advice("x", a, 0, None))
        layouter.assign_region("right", lambda r: left.copy_advice("y", r, b, 0))
        assert check(cs, assignment) == []

    def test_instances_argument_replaces_public_inputs(self, columns) -> None:
        cs, a, _, _, inst = columns
        assignment, layouter = make_grid(cs, instances=[[5]])
        cell = layouter.assign_region("r", lambda r: r.assign_advice("x", a, 0, 5))
        layouter.constrain_instance(cell, inst, 0)
        assert check(cs, assignment) == []
        assert len(check(cs, assignment, instances=[[4]])) == 1


class _BrokenSquares(Circuit):
    """Square rows with one wrong output, for MockProver tests."""

    @classmethod
    def configure(cls, cs):
        return _square_gate(cs)

    def synthesize(self, config, layouter):
        a, b, s = config
        for x in range(6):
            _square_row(layouter.namespace(f"row {x}"), a, b, s, x, x * x + (x == 3))


class TestMockProver:
    """MockProver wiring."""

    def test_verify_and_assert(self, small_config) -> None:
        prover = MockProver.run(3, _BrokenSquares(), config=small_config)
        violations = prover.verify()
        assert [v.row for v in violations] == [3]
        assert violations[0].region == "row 3/square"
        with pytest.raises(VerifyFailure) as exc_info:
            prover.assert_satisfied()
        assert exc_info.value.violations == violations
        assert "1 constraint violation(s)" in str(exc_info.value)

    def test_parallel_check_matches_serial(self) -> None:
        serial = MockProver.run(3, _BrokenSquares(), config=CheckerConfig(field=GF17, max_workers=1))
        parallel = MockProver.run(3, _BrokenSquares(), config=CheckerConfig(field=GF17, max_workers=4))
        assert serial.verify() == parallel.verify()

    def test_synthesize_freezes_system(self, small_config) -> None:
        data = synthesize(3, _BrokenSquares(), config=small_config)
        assert data.cs.frozen
        assert data.n == 8
        assert data.cs.field is GF17
