"""Value normalization for the built-in check families.

Field values arrive loosely typed. Each check family needs one comparable
representation (a length, a magnitude, a signed quantity, a datetime), so a
value is first classified into a closed set of ``ValueKind`` tags and then
converted by the function for that family. Any kind a family does not accept
raises ``UnsupportedValueTypeError``.
"""

from __future__ import annotations

import enum
import math
import numbers
import uuid
from collections.abc import Collection, Iterable
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from .exceptions import UnsupportedValueTypeError

# Epoch of serial day numbers: 1899-12-30 is day 0
DAY_ZERO = datetime(1899, 12, 30)
_SECONDS_PER_DAY = 86400.0


class ValueKind(enum.Enum):
    """Closed set of value shapes the dispatcher understands."""

    NUMBER = "number"
    BOOLEAN = "boolean"
    TEXT = "text"
    DATE = "date"
    DATETIME = "datetime"
    DURATION = "duration"
    SYMBOLIC = "symbolic"
    IDENTIFIER = "identifier"
    COLLECTION = "collection"
    UNSUPPORTED = "unsupported"


def classify(value: Any) -> ValueKind:
    """Classify a value into exactly one ValueKind.

    Order matters: bool is an int, IntEnum members are ints, and datetime is
    a date, so the more specific shapes are tested first.
    """
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, enum.Enum):
        return ValueKind.SYMBOLIC
    if isinstance(value, (numbers.Real, Decimal)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, datetime):
        return ValueKind.DATETIME
    if isinstance(value, date):
        return ValueKind.DATE
    if isinstance(value, timedelta):
        return ValueKind.DURATION
    if isinstance(value, uuid.UUID):
        return ValueKind.IDENTIFIER
    if isinstance(value, Collection):
        return ValueKind.COLLECTION
    return ValueKind.UNSUPPORTED


def to_length(value: Any, check: str) -> int:
    """Length of text or collections; numbers are truncated toward zero."""
    kind = classify(value)
    if kind in (ValueKind.TEXT, ValueKind.COLLECTION):
        return len(value)
    if kind == ValueKind.NUMBER:
        if not is_finite(value):
            raise UnsupportedValueTypeError(check, value)
        return math.trunc(value)
    raise UnsupportedValueTypeError(check, value)


def to_magnitude(value: Any, check: str) -> Any:
    """Numeric magnitude used by ordering checks."""
    kind = classify(value)
    if kind == ValueKind.NUMBER:
        return quiet_nan(value)
    if kind == ValueKind.DATETIME:
        return serial_day(value)
    if kind == ValueKind.DATE:
        return serial_day(datetime.combine(value, time.min))
    if kind in (ValueKind.TEXT, ValueKind.COLLECTION):
        return len(value)
    if kind == ValueKind.DURATION:
        return duration_millis(value)
    if kind == ValueKind.SYMBOLIC:
        return enum_ordinal(value)
    if kind == ValueKind.IDENTIFIER:
        return int.from_bytes(value.bytes_le[:8], "little", signed=True)
    raise UnsupportedValueTypeError(check, value)


def to_signed(value: Any, check: str) -> Any:
    """Signed quantity for sign checks: numbers and durations only."""
    kind = classify(value)
    if kind == ValueKind.NUMBER:
        return quiet_nan(value)
    if kind == ValueKind.DURATION:
        return duration_millis(value)
    raise UnsupportedValueTypeError(check, value)


def to_datetime(value: Any, check: str) -> datetime:
    """Datetime for temporal checks; dates become midnight datetimes."""
    kind = classify(value)
    if kind == ValueKind.DATETIME:
        return value
    if kind == ValueKind.DATE:
        return datetime.combine(value, time.min)
    raise UnsupportedValueTypeError(check, value)


def as_collection(value: Any, item_type: type | None = None) -> list[Any] | None:
    """Materialize an iterable for collection checks.

    Returns None (not an error) when the value is text, not iterable, or
    holds an element that is not an instance of ``item_type``.
    """
    if isinstance(value, (str, bytes, bytearray)) or not isinstance(value, Iterable):
        return None
    items = list(value)
    if item_type is not None and not all(isinstance(item, item_type) for item in items):
        return None
    return items


def serial_day(value: datetime) -> float:
    """Days since 1899-12-30, with the time of day as a fraction.

    The timezone, if any, is ignored: the wall-clock reading is used.
    """
    delta = value.replace(tzinfo=None) - DAY_ZERO
    return delta.total_seconds() / _SECONDS_PER_DAY


def is_finite(value: Any) -> bool:
    """False for NaN and infinities of float or Decimal numbers."""
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, float):
        return math.isfinite(value)
    return True


def quiet_nan(value: Any) -> Any:
    """Decimal NaN raises on ordering, so it is compared as a float NaN."""
    if isinstance(value, Decimal) and value.is_nan():
        return math.nan
    return value


def duration_millis(value: timedelta) -> float:
    return value.total_seconds() * 1000.0


def enum_ordinal(value: enum.Enum) -> Any:
    """Numeric value of an enum member, or its position when not numeric."""
    raw = value.value
    if isinstance(raw, (numbers.Real, Decimal)) and not isinstance(raw, bool):
        return raw
    return list(type(value)).index(value)


def has_unique_items(items: list[Any]) -> bool:
    """True when no two items are equal."""
    try:
        return len(set(items)) == len(items)
    except TypeError:
        # unhashable items: pairwise equality
        seen: list[Any] = []
        for item in items:
            if item in seen:
                return False
            seen.append(item)
        return True
