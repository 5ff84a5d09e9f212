"""
values.py — Typed property values.

Every parsed tag value is wrapped in a TypedValue: a closed tagged union over
the six kinds the property catalog produces. Values of the same kind order
naturally (text lexically, numbers numerically, timestamps and durations
chronologically); values of different kinds never compare.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Union

INT32_RANGE = (-(2**31), 2**31 - 1)
INT64_RANGE = (-(2**63), 2**63 - 1)


class ValueKind(Enum):
    TEXT = "text"
    INTEGER = "integer"
    LONG = "long"
    REAL = "real"
    TIMESTAMP = "timestamp"
    DURATION = "duration"


_PYTHON_TYPES = {
    ValueKind.TEXT: (str,),
    ValueKind.INTEGER: (int,),
    ValueKind.LONG: (int,),
    ValueKind.REAL: (int, float),
    ValueKind.TIMESTAMP: (datetime,),
    ValueKind.DURATION: (timedelta,),
}

Payload = Union[str, int, float, datetime, timedelta]


def _check_range(value: int, bounds: tuple[int, int], kind: ValueKind) -> int:
    lo, hi = bounds
    if not lo <= value <= hi:
        raise OverflowError(f"{value} out of range for {kind.value}")
    return value


@functools.total_ordering
@dataclass(frozen=True)
class TypedValue:
    """A parsed property value tagged with its kind."""

    kind: ValueKind
    value: Payload

    def __post_init__(self):
        expected = _PYTHON_TYPES[self.kind]
        if isinstance(self.value, bool) or not isinstance(self.value, expected):
            raise TypeError(f"{self.kind.value} value cannot hold {type(self.value).__name__}")

    # ── Constructors ──

    @classmethod
    def text(cls, value: str) -> TypedValue:
        return cls(ValueKind.TEXT, value)

    @classmethod
    def integer(cls, value: int) -> TypedValue:
        return cls(ValueKind.INTEGER, _check_range(value, INT32_RANGE, ValueKind.INTEGER))

    @classmethod
    def long(cls, value: int) -> TypedValue:
        return cls(ValueKind.LONG, _check_range(value, INT64_RANGE, ValueKind.LONG))

    @classmethod
    def real(cls, value: float) -> TypedValue:
        return cls(ValueKind.REAL, float(value))

    @classmethod
    def timestamp(cls, value: datetime) -> TypedValue:
        return cls(ValueKind.TIMESTAMP, value)

    @classmethod
    def duration(cls, value: timedelta) -> TypedValue:
        return cls(ValueKind.DURATION, value)

    # ── Ordering ──

    def comparable_with(self, other: object) -> bool:
        return isinstance(other, TypedValue) and other.kind is self.kind

    def __lt__(self, other: object) -> bool:
        if not self.comparable_with(other):
            return NotImplemented
        return self.value < other.value

    def supersedes(self, other: TypedValue) -> bool:
        """True if this value should replace ``other`` for the same property.

        The strictly greater value wins. Values that cannot be ordered against
        each other never supersede, so the first one seen is kept.
        """
        if not self.comparable_with(other):
            return False
        return other.value < self.value

    def __str__(self) -> str:
        return str(self.value)
