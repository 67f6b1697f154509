"""String fields."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from ..utils import is_number, number_to_str
from .base import Type, TypeTag


@dataclass(frozen=True, eq=False)
class StringType(Type):
    """Text field. Numbers are accepted and converted to their text form.

    Normalization order: trim, then empty_as_null, then lower/upper.
    """

    tag = TypeTag.STRING.value
    options = ("null_as_empty", "empty_as_null", "trim", "lower", "upper")

    null_as_empty: bool = False
    empty_as_null: bool = False
    trim: bool = False
    lower: bool = False
    upper: bool = False

    def __post_init__(self) -> None:
        super().__post_init__()
        self._exclusive("null_as_empty", "empty_as_null")
        self._exclusive("lower", "upper")

    def _prepare(self, value: Any, key: Any, model: Any) -> Any:
        if value is None:
            return "" if self.null_as_empty else None

        if isinstance(value, str):
            text = value
        elif is_number(value) and not math.isnan(value) and not math.isinf(value):
            text = number_to_str(value)
        else:
            raise self._invalid(value, key)

        if self.trim:
            text = text.strip()

        if self.empty_as_null and text == "":
            return None

        if self.lower:
            text = text.lower()
        elif self.upper:
            text = text.upper()

        return text
