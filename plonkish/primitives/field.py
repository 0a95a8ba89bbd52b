"""Prime fields used by circuits and the mock prover.

Uses the galois library for all field arithmetic. Any ``galois.GF(p)`` class
can serve as the field of a circuit; FF (Goldilocks) is the default.

The constraint system only relies on ring operations (+, -, *, unary -), the
identities, and ``invert_or_zero``. Everything else is galois.
"""

from typing import Union

import galois
import numpy as np

# --- Field Construction ---

GOLDILOCKS_PRIME = 0xFFFFFFFF00000001

FF = galois.GF(GOLDILOCKS_PRIME)
"""Default field GF(p) - Goldilocks prime field."""

FieldType = type[galois.FieldArray]
"""A galois field class, e.g. ``FF`` or ``galois.GF(17)``."""

FieldLike = Union[int, np.integer, galois.FieldArray]


# --- Conversions ---


def to_field(field: FieldType, value: FieldLike) -> galois.FieldArray:
    """Coerce an int (possibly negative) or field element into ``field``."""
    if isinstance(value, galois.FieldArray):
        if type(value) is not field:
            raise TypeError(f"Expected element of {field.name}, got {type(value).name}")
        return value
    return field(int(value) % field.order)


def zero(field: FieldType) -> galois.FieldArray:
    return field(0)


def one(field: FieldType) -> galois.FieldArray:
    return field(1)


def is_zero(value: galois.FieldArray) -> bool:
    return int(value) == 0


def invert_or_zero(value: galois.FieldArray) -> galois.FieldArray:
    """Multiplicative inverse, or zero for the zero element.

    galois raises ZeroDivisionError on ``0 ** -1``; circuits want the
    total function instead.
    """
    if is_zero(value):
        return type(value)(0)
    return value ** -1


def nonzero_mask(values: galois.FieldArray) -> np.ndarray:
    """Boolean ndarray marking the non-zero entries of a field array."""
    return values.view(np.ndarray) != 0
