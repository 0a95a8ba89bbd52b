"""Copy-constraint tracking.

Every copy constraint merges the equality classes of two cells. The classes
are kept in a union-find; the raw pairs are kept in an append-only log so a
backend can rebuild its own permutation from them.

Recording may happen from several region workers at once, so all mutation is
guarded by a lock.
"""

import threading
from typing import Optional

from plonkish.constraints.columns import Cell
from plonkish.constraints.system import ConstraintSystem
from plonkish.errors import AssignmentError


class CopyConstraints:
    """Union-find over equality-enabled cells."""

    def __init__(self, cs: ConstraintSystem, n: int):
        self._cs = cs
        self._n = n
        self._parent: dict[Cell, Cell] = {}
        self._size: dict[Cell, int] = {}
        self._order: dict[Cell, int] = {}
        self._log: list[tuple[Cell, Cell]] = []
        self._lock = threading.Lock()

    def record_copy(self, left: Cell, right: Cell) -> None:
        """Assert ``left`` and ``right`` hold equal values.

        Raises:
            ConfigurationError: A column is not equality-enabled
            AssignmentError: A row is outside the grid
        """
        for cell in (left, right):
            self._cs.check_equality(cell.column)
            if not 0 <= cell.row < self._n:
                raise AssignmentError(f"Copy constraint cell {cell} is outside rows [0, {self._n})")
        with self._lock:
            self._log.append((left, right))
            self._union(left, right)

    @property
    def copies(self) -> list[tuple[Cell, Cell]]:
        with self._lock:
            return list(self._log)

    def find(self, cell: Cell) -> Cell:
        """Representative of the class containing ``cell``."""
        with self._lock:
            return self._find(cell)

    def same_class(self, left: Cell, right: Cell) -> bool:
        with self._lock:
            return self._find(left) == self._find(right)

    def classes(self) -> list[list[Cell]]:
        """Equality classes with at least two cells, in first-seen order."""
        with self._lock:
            groups: dict[Cell, list[Cell]] = {}
            for cell in sorted(self._parent, key=self._order.__getitem__):
                groups.setdefault(self._find(cell), []).append(cell)
        return [members for members in groups.values() if len(members) > 1]

    # --- union-find internals, caller holds the lock ---

    def _add(self, cell: Cell) -> None:
        if cell not in self._parent:
            self._parent[cell] = cell
            self._size[cell] = 1
            self._order[cell] = len(self._order)

    def _find(self, cell: Cell) -> Cell:
        parent: Optional[Cell] = self._parent.get(cell)
        if parent is None:
            return cell
        root = cell
        while self._parent[root] != root:
            root = self._parent[root]
        # path compression
        while self._parent[cell] != root:
            self._parent[cell], cell = root, self._parent[cell]
        return root

    def _union(self, left: Cell, right: Cell) -> None:
        self._add(left)
        self._add(right)
        a, b = self._find(left), self._find(right)
        if a == b:
            return
        if self._size[a] < self._size[b]:
            a, b = b, a
        self._parent[b] = a
        self._size[a] += self._size[b]
