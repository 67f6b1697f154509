"""Boolean fields."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..utils import is_nan, is_number, to_number
from .base import Type, TypeTag


@dataclass(frozen=True, eq=False)
class BooleanType(Type):
    """Truthiness of numbers, numeric text and dates.

    Non-numeric text, containers, regexes, NaN and infinities are rejected.
    """

    tag = TypeTag.BOOLEAN.value
    options = ("null_as_false", "false_as_null")

    null_as_false: bool = False
    false_as_null: bool = False

    def __post_init__(self) -> None:
        super().__post_init__()
        self._exclusive("null_as_false", "false_as_null")

    def _prepare(self, value: Any, key: Any, model: Any) -> Any:
        if value is None:
            return False if self.null_as_false else None

        if isinstance(value, bool):
            result = value
        elif is_number(value) and not is_nan(value) and not math.isinf(value):
            result = bool(value)
        elif isinstance(value, str) and not is_nan(to_number(value)):
            result = bool(value)
        elif isinstance(value, datetime):
            result = True
        else:
            raise self._invalid(value, key)

        if not result and self.false_as_null:
            return None
        return result
