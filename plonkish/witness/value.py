"""Witness values that may be unknown.

During key generation a circuit is synthesized without witnesses: every
region still runs, but the values it would assign are unknown. Value carries
either a concrete field element or nothing, and arithmetic on an unknown
Value stays unknown.
"""

from typing import Callable, Optional


class Value:
    """A known field element or an unknown placeholder."""

    __slots__ = ("_inner",)
    __array_ufunc__ = None

    def __init__(self, inner=None):
        self._inner = inner

    @classmethod
    def known(cls, inner) -> "Value":
        if inner is None:
            raise ValueError("Value.known requires a concrete element")
        return cls(inner)

    @classmethod
    def unknown(cls) -> "Value":
        return cls(None)

    def is_known(self) -> bool:
        return self._inner is not None

    @property
    def inner(self) -> Optional[object]:
        """The concrete element, or None when unknown."""
        return self._inner

    def map(self, fn: Callable) -> "Value":
        if self._inner is None:
            return self
        return Value(fn(self._inner))

    def zip_with(self, other: "Value", fn: Callable) -> "Value":
        other = _lift(other)
        if self._inner is None or other._inner is None:
            return Value.unknown()
        return Value(fn(self._inner, other._inner))

    def __add__(self, other) -> "Value":
        return self.zip_with(other, lambda a, b: a + b)

    def __sub__(self, other) -> "Value":
        return self.zip_with(other, lambda a, b: a - b)

    def __mul__(self, other) -> "Value":
        return self.zip_with(other, lambda a, b: a * b)

    __radd__ = __add__
    __rmul__ = __mul__

    def __neg__(self) -> "Value":
        return self.map(lambda a: -a)

    def __repr__(self) -> str:
        if self._inner is None:
            return "Value(unknown)"
        return f"Value({int(self._inner)})"


def _lift(value) -> Value:
    if isinstance(value, Value):
        return value
    return Value(value)
