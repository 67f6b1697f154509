"""Union fields: the first member type that accepts the value wins."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from ..errors import InvalidTypeParamsError, InvalidValueError, RecordError
from ..stack import CloneStack, EqualStack, JsonStack
from ..utils import invalid_value_as_string
from .any import clone_value, equal_values, same_values, value_to_json
from .base import Type, TypeTag


@dataclass(frozen=True, eq=False)
class OrType(Type):
    """``{"type": "or", "or": ["number", "string"]}``"""

    tag = TypeTag.OR.value
    options = ("or_",)

    or_: Tuple[Type, ...] = ()

    @classmethod
    def prepare_description(cls, description: Dict[str, Any], key: str, registry: Any) -> None:
        if description["type"] != cls.tag:
            return

        members = description.pop("or", None)
        if not isinstance(members, (list, tuple)):
            raise InvalidTypeParamsError(
                f"{key}: expected 'or' array of type descriptions, got: "
                f"{invalid_value_as_string(members)}"
            )
        if not members:
            raise InvalidTypeParamsError(f"{key}: empty 'or' array of type descriptions")

        description["or_"] = tuple(registry.create(member, key) for member in members)

    def type_as_string(self) -> str:
        return " or ".join(member.type for member in self.or_)

    def _prepare(self, value: Any, key: Any, model: Any) -> Any:
        if value is None:
            return None

        for member in self.or_:
            try:
                return member.prepare(value, key, model)
            except RecordError:
                continue

        raise InvalidValueError(key, invalid_value_as_string(value), self.type_as_string())

    def _to_json(self, value: Any, stack: JsonStack) -> Any:
        return value_to_json(value, stack)

    def _clone(self, value: Any, stack: CloneStack) -> Any:
        return clone_value(value, stack)

    def _equal(self, self_value: Any, other_value: Any, stack: EqualStack) -> bool:
        return equal_values(self_value, other_value, stack)

    def same(self, old_value: Any, new_value: Any) -> bool:
        return same_values(old_value, new_value)
