"""
Value helpers shared by records, collections and type descriptors.

The helpers mirror the loose value model records are fed with:
numbers arrive as ints, floats or numeric text, dates as text, epoch
milliseconds or datetimes, and "null" is None.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any, Union

from .config import get_settings
from .errors import RecordError


class _Missing:
    """Marker for an argument that was not passed."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

Number = Union[int, float]


def is_nan(value: Any) -> bool:
    return isinstance(value, float) and value != value


def is_number(value: Any) -> bool:
    """int or float, but not bool."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_plain_object(value: Any) -> bool:
    return isinstance(value, Mapping)


def number_to_str(value: Number) -> str:
    """Render a number the way JSON and JavaScript do (``1.0`` is ``1``)."""
    if isinstance(value, float):
        if value != value:
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return str(value)


def date_to_json(value: datetime) -> str:
    """ISO-8601 with milliseconds in UTC, e.g. ``2020-01-31T10:00:00.000Z``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def datetime_to_ms(value: datetime) -> Number:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    ms = value.timestamp() * 1000
    return int(ms) if float(ms).is_integer() else ms


def to_number(value: Any) -> float:
    """Loose numeric cast; returns NaN when the value is not numeric.

    Blank text is zero, datetimes are epoch milliseconds.
    """
    if isinstance(value, bool):
        return float(value)
    if is_number(value):
        return value
    if isinstance(value, datetime):
        return datetime_to_ms(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        if "_" in text:
            return math.nan
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def strict_equal(left: Any, right: Any) -> bool:
    """Equality without Python's cross-type coercions.

    ``True`` is not ``1``, NaN equals NaN, containers and objects are
    equal only when they are the same object.
    """
    if left is right:
        return True
    if isinstance(left, bool) or isinstance(right, bool):
        return False
    if is_number(left) and is_number(right):
        return left == right or (is_nan(left) and is_nan(right))
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    if isinstance(left, (datetime, date)) and isinstance(right, (datetime, date)):
        return left == right
    return False


def loose_compare(left: Any, right: Any) -> int:
    """-1, 0 or 1; values that cannot be ordered compare equal."""
    try:
        if left > right:
            return 1
        if left < right:
            return -1
    except TypeError:
        return 0
    return 0


def _json_default(value: Any) -> Any:
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (datetime, date)):
        return date_to_json(value) if isinstance(value, datetime) else value.isoformat()
    to_json = getattr(value, "to_json", None)
    if callable(to_json):
        return to_json()
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def to_json_text(value: Any) -> str:
    """Compact JSON text of a value, records and read-only maps included."""
    return json.dumps(
        value,
        default=_json_default,
        ensure_ascii=False,
        separators=(",", ":"),
    )


def _truncate(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def invalid_value_as_string(value: Any) -> str:
    """Bounded, human-readable rendering of a rejected value."""
    limit = get_settings().max_value_length

    if isinstance(value, str):
        return f'"{_truncate(value, limit)}"'

    if value is None:
        text = "null"
    elif isinstance(value, bool):
        text = "true" if value else "false"
    elif is_number(value):
        text = number_to_str(value)
    elif isinstance(value, re.Pattern):
        text = f"/{value.pattern}/"
    elif isinstance(value, type):
        text = value.__name__
    elif (
        isinstance(value, (list, tuple))
        or is_plain_object(value)
        or callable(getattr(value, "to_json", None))
    ):
        try:
            text = to_json_text(value)
        except (TypeError, ValueError, RecursionError, RecordError):
            text = str(value)
    elif isinstance(value, datetime):
        text = date_to_json(value)
    else:
        text = str(value)

    return _truncate(text, limit)
