"""
Number fields.

Input is cast the loose way (numeric text, blank text as zero, datetimes
as epoch milliseconds) and optionally rounded to a decimal precision.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from ..errors import ConflictingParametersError, InvalidTypeParamsError
from ..utils import Number, invalid_value_as_string, is_nan, to_number
from .base import Type, TypeTag


def _is_finite(number: Number) -> bool:
    # ints beyond the float range cannot be represented as numbers
    try:
        return math.isfinite(number)
    except OverflowError:
        return False


def _round_half_up(value: float, digits: int) -> Number:
    """``Math.round(value * 10**digits) / 10**digits``."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def _floor(value: float, digits: int) -> Number:
    scale = 10 ** digits
    return math.floor(value * scale) / scale


def _ceil(value: float, digits: int) -> Number:
    # 1.12 * 100 is 112.00000000000001 in binary floating point,
    # so the scaling goes through the decimal text of the value
    scale = Decimal(10) ** digits
    scaled = Decimal(repr(float(value))) * scale
    return float(math.ceil(scaled) / scale)


def _normalize(value: Number) -> Number:
    if isinstance(value, float) and value.is_integer() and abs(value) < 2 ** 53:
        return int(value)
    return value


@dataclass(frozen=True, eq=False)
class NumberType(Type):
    """Numeric field with optional precision control.

    Attributes:
        null_as_zero: None becomes 0
        zero_as_null: 0 becomes None
        round: Round half up to this many decimals
        floor: Round down to this many decimals
        ceil: Round up to this many decimals
    """

    tag = TypeTag.NUMBER.value
    options = ("null_as_zero", "zero_as_null", "round", "floor", "ceil")

    null_as_zero: bool = False
    zero_as_null: bool = False
    round: Optional[int] = None
    floor: Optional[int] = None
    ceil: Optional[int] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        self._exclusive("null_as_zero", "zero_as_null")

        for name in ("ceil", "round", "floor"):
            digits = getattr(self, name)
            if digits is None:
                continue
            number = to_number(digits)
            if isinstance(digits, bool) or is_nan(number) or math.isinf(number):
                raise InvalidTypeParamsError(f"invalid {name}: {invalid_value_as_string(digits)}")
            self._set(name, int(number))

        if self.round is not None and self.ceil is not None:
            raise ConflictingParametersError("round", "ceil")
        if self.floor is not None and self.ceil is not None:
            raise ConflictingParametersError("floor", "ceil")
        if self.floor is not None and self.round is not None:
            raise ConflictingParametersError("floor", "round")

    def _prepare(self, value: Any, key: Any, model: Any) -> Any:
        if value is None:
            return 0 if self.null_as_zero else None

        number = to_number(value)
        if (
            isinstance(value, bool)
            or isinstance(value, (list, tuple, Mapping, re.Pattern))
            or is_nan(number)
            or not _is_finite(number)
        ):
            raise self._invalid(value, key)

        # beyond 2**53 there are no fractional digits and scaling may overflow
        if abs(number) < 2 ** 53:
            number = self._apply_precision(number)

        number = _normalize(number)

        if number == 0 and self.zero_as_null:
            return None
        return number

    def _apply_precision(self, number: Number) -> Number:
        if self.round is not None:
            return _round_half_up(number, self.round)
        if self.floor is not None:
            return _floor(number, self.floor)
        if self.ceil is not None:
            return _ceil(number, self.ceil)
        return number
