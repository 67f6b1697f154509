"""Date fields.

Values are timezone-aware datetimes. Naive input is taken as UTC.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from ..stack import CloneStack, EqualStack, JsonStack
from ..utils import date_to_json, is_nan, is_number
from .base import Type, TypeTag


def _parse_iso(text: str) -> datetime:
    text = text.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


@dataclass(frozen=True, eq=False)
class DateType(Type):
    """Accepts ISO-8601 text, epoch milliseconds, datetimes and dates."""

    tag = TypeTag.DATE.value

    def _prepare(self, value: Any, key: Any, model: Any) -> Any:
        if value is None:
            return None

        try:
            if isinstance(value, datetime):
                result = value
            elif isinstance(value, date):
                result = datetime(value.year, value.month, value.day)
            elif isinstance(value, str):
                result = _parse_iso(value)
            elif is_number(value) and not is_nan(value):
                result = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
            else:
                raise self._invalid(value, key)
        except (ValueError, OverflowError, OSError) as err:
            raise self._invalid(value, key) from err

        if result.tzinfo is None:
            result = result.replace(tzinfo=timezone.utc)
        return result

    def _to_json(self, value: Any, stack: JsonStack) -> Any:
        return date_to_json(value)

    def _clone(self, value: Any, stack: CloneStack) -> Any:
        return value

    def _equal(self, self_value: Any, other_value: Any, stack: EqualStack) -> bool:
        if self_value is None or other_value is None:
            return self_value is other_value
        if not isinstance(other_value, datetime):
            return False
        return self_value.timestamp() == other_value.timestamp()
