"""Opaque custom class fields."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..errors import (
    InvalidTypeParamsError,
    NoCloneMethodError,
    NoEqualMethodError,
    NoToJSONMethodError,
)
from ..stack import CloneStack, EqualStack, JsonStack
from ..utils import invalid_value_as_string
from .base import Type, TypeTag


@dataclass(frozen=True, eq=False)
class CustomClassType(Type):
    """Instance of an arbitrary class, checked with isinstance only.

    recordkit knows nothing about such values: projecting, cloning or
    comparing them raises unless ``to_json``, ``clone`` or ``equal`` hooks
    are declared on the field.
    """

    tag = TypeTag.CUSTOM.value
    options = ("instance_of",)

    instance_of: Optional[type] = None

    @classmethod
    def prepare_description(cls, description: Dict[str, Any], key: str, registry: Any) -> None:
        raw = description["type"]
        if isinstance(raw, type):
            description["type"] = cls.tag
            description["instance_of"] = raw

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.instance_of, type):
            raise InvalidTypeParamsError(
                f"expected class, got: {invalid_value_as_string(self.instance_of)}"
            )

    def type_as_string(self) -> str:
        return self.instance_of.__name__

    def _prepare(self, value: Any, key: Any, model: Any) -> Any:
        if value is None:
            return None
        if not isinstance(value, self.instance_of):
            raise self._invalid(value, key)
        return value

    def _to_json(self, value: Any, stack: JsonStack) -> Any:
        raise NoToJSONMethodError(type(value).__name__)

    def _clone(self, value: Any, stack: CloneStack) -> Any:
        raise NoCloneMethodError(type(value).__name__)

    def _equal(self, self_value: Any, other_value: Any, stack: EqualStack) -> bool:
        if self_value is None or other_value is None:
            return self_value is other_value
        raise NoEqualMethodError(type(self_value).__name__)

    def same(self, old_value: Any, new_value: Any) -> bool:
        return old_value is new_value
