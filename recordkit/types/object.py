"""Object (string-keyed map) fields."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Optional

from ..errors import InvalidObjectElementError, RecordError
from ..stack import CloneStack, EqualStack, JsonStack
from ..utils import invalid_value_as_string
from .base import Type, TypeTag


@dataclass(frozen=True, eq=False)
class ObjectType(Type):
    """Map of arbitrary keys to values of one element type.

    Stored as a read-only mapping.
    """

    tag = TypeTag.OBJECT.value
    options = ("element", "empty_as_null", "null_as_empty")

    element: Optional[Type] = None
    empty_as_null: bool = False
    null_as_empty: bool = False

    @classmethod
    def prepare_description(cls, description: Dict[str, Any], key: str, registry: Any) -> None:
        # {"prop": {}} or {"prop": {"element": "number"}}
        if isinstance(description["type"], Mapping):
            inline = description["type"]
            description["type"] = cls.tag
            if "element" in inline:
                description.setdefault("element", inline["element"])

        if description["type"] == cls.tag:
            description["element"] = registry.create(description.get("element", "any"), key)

    def __post_init__(self) -> None:
        super().__post_init__()
        self._exclusive("null_as_empty", "empty_as_null")

    def _prepare(self, value: Any, key: Any, model: Any) -> Any:
        if value is None:
            return MappingProxyType({}) if self.null_as_empty else None

        if not isinstance(value, Mapping):
            raise self._invalid(value, key)

        result = {}
        for item_key, item in value.items():
            try:
                result[item_key] = self.element.prepare(item, item_key, model)
            except RecordError as err:
                raise InvalidObjectElementError(
                    key,
                    invalid_value_as_string(value),
                    f"object[{self.element.type_as_string()}]",
                    child=err,
                ) from err

        if self.empty_as_null and not result:
            return None

        return MappingProxyType(result)

    def _to_json(self, value: Any, stack: JsonStack) -> Any:
        return {key: self.element.to_json(item, stack) for key, item in value.items()}

    def _clone(self, value: Any, stack: CloneStack) -> Any:
        return MappingProxyType(
            {key: self.element.clone(item, stack) for key, item in value.items()}
        )

    def _equal(self, self_value: Any, other_value: Any, stack: EqualStack) -> bool:
        if self_value is None or other_value is None:
            return self_value is other_value
        if not isinstance(other_value, Mapping):
            return False
        if set(self_value) != set(other_value):
            return False
        return all(
            self.element.equal(item, other_value[key], stack)
            for key, item in self_value.items()
        )

    def same(self, old_value: Any, new_value: Any) -> bool:
        if old_value is None or new_value is None:
            return old_value is new_value
        if set(old_value) != set(new_value):
            return False
        return all(
            self.element.same(item, new_value[key])
            for key, item in old_value.items()
        )
