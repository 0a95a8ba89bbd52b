"""Field primitives shared by the constraint system and the witness layer."""

from .field import (
    FF,
    GOLDILOCKS_PRIME,
    FieldLike,
    FieldType,
    invert_or_zero,
    is_zero,
    nonzero_mask,
    one,
    to_field,
    zero,
)

__all__ = [
    "FF",
    "GOLDILOCKS_PRIME",
    "FieldLike",
    "FieldType",
    "invert_or_zero",
    "is_zero",
    "nonzero_mask",
    "one",
    "to_field",
    "zero",
]
