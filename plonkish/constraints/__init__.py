"""Circuit shape: columns, expressions, gates and lookups.

Everything in this package is witness-independent. A circuit declares its
columns and registers gates and lookups on a ConstraintSystem; expressions
are evaluated later against a witness through an EvaluationContext.
"""

from .columns import CUR, NEXT, PREV, Cell, Column, ColumnKind, Selector, TableColumn
from .context import ColumnContext, EvaluationContext, RowContext
from .expressions import (
    Constant,
    Expression,
    Negated,
    Product,
    Query,
    SelectorQuery,
    Sum,
    add,
    constant,
    mul,
    neg,
    product,
    query,
    query_selector,
    sub,
    with_selector,
)
from .system import ConstraintSystem, Gate, Lookup

__all__ = [
    "CUR",
    "NEXT",
    "PREV",
    "Cell",
    "Column",
    "ColumnKind",
    "Selector",
    "TableColumn",
    "EvaluationContext",
    "RowContext",
    "ColumnContext",
    "Expression",
    "Constant",
    "Query",
    "SelectorQuery",
    "Sum",
    "Product",
    "Negated",
    "constant",
    "query",
    "query_selector",
    "add",
    "sub",
    "mul",
    "neg",
    "product",
    "with_selector",
    "ConstraintSystem",
    "Gate",
    "Lookup",
]
