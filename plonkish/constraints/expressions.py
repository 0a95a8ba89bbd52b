"""Symbolic polynomial expressions over cell queries and selectors.

Expressions are immutable trees. Building one has no side effects, so a gate
is built once at configuration time and evaluated at every row through
rotation-relative queries.

Example:
    a = query(col_a)
    b = query(col_b)
    c = query(col_c)
    s = query_selector(q_add)
    add_constraint = s * (a + b - c)

Evaluation is delegated to an EvaluationContext: the same tree yields a
scalar under a RowContext and a whole column under a ColumnContext.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator, Sequence, Union

from .columns import CUR, Column, Selector

if TYPE_CHECKING:
    from .context import EvaluationContext


ExpressionLike = Union["Expression", int]


class Expression(ABC):
    """Base class for expression nodes."""

    # Make numpy and galois scalars defer to our reflected operators
    __array_ufunc__ = None

    @abstractmethod
    def evaluate(self, ctx: "EvaluationContext"):
        """Fold the tree using the values supplied by ``ctx``."""

    @abstractmethod
    def degree(self) -> int:
        """Polynomial degree in the queried cells and selectors."""

    @abstractmethod
    def children(self) -> tuple["Expression", ...]:
        pass

    def queries(self) -> Iterator["Query"]:
        """Yield every column query in the tree (with repeats)."""
        for child in self.children():
            yield from child.queries()

    def selectors(self) -> Iterator[Selector]:
        for child in self.children():
            yield from child.selectors()

    def __add__(self, other: ExpressionLike) -> "Expression":
        return Sum(self, _coerce(other))

    def __radd__(self, other: ExpressionLike) -> "Expression":
        return Sum(_coerce(other), self)

    def __sub__(self, other: ExpressionLike) -> "Expression":
        return Sum(self, Negated(_coerce(other)))

    def __rsub__(self, other: ExpressionLike) -> "Expression":
        return Sum(_coerce(other), Negated(self))

    def __mul__(self, other: ExpressionLike) -> "Expression":
        return Product(self, _coerce(other))

    def __rmul__(self, other: ExpressionLike) -> "Expression":
        return Product(_coerce(other), self)

    def __neg__(self) -> "Expression":
        return Negated(self)


@dataclass(frozen=True, eq=False)
class Constant(Expression):
    value: object

    def evaluate(self, ctx: "EvaluationContext"):
        return ctx.constant(self.value)

    def degree(self) -> int:
        return 0

    def children(self) -> tuple[Expression, ...]:
        return ()

    def __repr__(self) -> str:
        return f"{int(self.value)}"


@dataclass(frozen=True, eq=False)
class Query(Expression):
    """Value of ``column`` at ``current row + rotation``."""
    column: Column
    rotation: int = CUR

    def evaluate(self, ctx: "EvaluationContext"):
        return ctx.query(self.column, self.rotation)

    def degree(self) -> int:
        return 1

    def children(self) -> tuple[Expression, ...]:
        return ()

    def queries(self) -> Iterator["Query"]:
        yield self

    def __repr__(self) -> str:
        if self.rotation == CUR:
            return f"{self.column}"
        return f"{self.column}[{self.rotation:+d}]"


@dataclass(frozen=True, eq=False)
class SelectorQuery(Expression):
    selector: Selector

    def evaluate(self, ctx: "EvaluationContext"):
        return ctx.selector(self.selector)

    def degree(self) -> int:
        return 1

    def children(self) -> tuple[Expression, ...]:
        return ()

    def selectors(self) -> Iterator[Selector]:
        yield self.selector

    def __repr__(self) -> str:
        return f"{self.selector}"


@dataclass(frozen=True, eq=False)
class Sum(Expression):
    left: Expression
    right: Expression

    def evaluate(self, ctx: "EvaluationContext"):
        return self.left.evaluate(ctx) + self.right.evaluate(ctx)

    def degree(self) -> int:
        return max(self.left.degree(), self.right.degree())

    def children(self) -> tuple[Expression, ...]:
        return (self.left, self.right)

    def __repr__(self) -> str:
        if isinstance(self.right, Negated):
            return f"({self.left!r} - {self.right.inner!r})"
        return f"({self.left!r} + {self.right!r})"


@dataclass(frozen=True, eq=False)
class Product(Expression):
    left: Expression
    right: Expression

    def evaluate(self, ctx: "EvaluationContext"):
        return self.left.evaluate(ctx) * self.right.evaluate(ctx)

    def degree(self) -> int:
        return self.left.degree() + self.right.degree()

    def children(self) -> tuple[Expression, ...]:
        return (self.left, self.right)

    def __repr__(self) -> str:
        return f"{self.left!r} * {self.right!r}"


@dataclass(frozen=True, eq=False)
class Negated(Expression):
    inner: Expression

    def evaluate(self, ctx: "EvaluationContext"):
        return -self.inner.evaluate(ctx)

    def degree(self) -> int:
        return self.inner.degree()

    def children(self) -> tuple[Expression, ...]:
        return (self.inner,)

    def __repr__(self) -> str:
        return f"-{self.inner!r}"


def _coerce(value: ExpressionLike) -> Expression:
    if isinstance(value, Expression):
        return value
    # ints, numpy integers and galois scalars
    return Constant(value)


# --- Builder API ---


def constant(value) -> Expression:
    return Constant(value)


def query(column: Column, rotation: int = CUR) -> Expression:
    return Query(column, rotation)


def query_selector(selector: Selector) -> Expression:
    return SelectorQuery(selector)


def add(left: ExpressionLike, right: ExpressionLike) -> Expression:
    return _coerce(left) + _coerce(right)


def sub(left: ExpressionLike, right: ExpressionLike) -> Expression:
    return _coerce(left) - _coerce(right)


def mul(left: ExpressionLike, right: ExpressionLike) -> Expression:
    return _coerce(left) * _coerce(right)


def neg(value: ExpressionLike) -> Expression:
    return -_coerce(value)


def with_selector(
    selector: Expression,
    constraints: Iterable[Union[Expression, tuple[str, Expression]]],
) -> list[tuple[str, Expression]]:
    """Multiply every constraint by ``selector``.

    Gates are never gated implicitly; this helper is the explicit way to do
    it for a batch of constraints.
    """
    return [(name, selector * expr) for name, expr in normalize_constraints(constraints)]


def normalize_constraints(
    constraints: Iterable[Union[Expression, tuple[str, Expression]]],
) -> list[tuple[str, Expression]]:
    """Turn bare expressions into ``(name, expr)`` pairs named by position."""
    named: list[tuple[str, Expression]] = []
    for i, item in enumerate(constraints):
        if isinstance(item, Expression):
            named.append((str(i), item))
        else:
            name, expr = item
            named.append((name, _coerce(expr)))
    return named


def product(factors: Sequence[ExpressionLike]) -> Expression:
    """Left fold of ``factors`` with multiplication."""
    if not factors:
        return Constant(1)
    acc = _coerce(factors[0])
    for factor in factors[1:]:
        acc = acc * factor
    return acc
