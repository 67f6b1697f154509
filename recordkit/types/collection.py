"""Nested collection fields."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..errors import InvalidTypeParamsError
from ..stack import CloneStack, EqualStack, JsonStack
from ..tree import link_parent
from ..utils import invalid_value_as_string
from .base import Type, TypeTag


def _collection_class() -> type:
    from ..collection import Collection

    return Collection


@dataclass(frozen=True, eq=False)
class CollectionType(Type):
    """Reference to a Collection subclass.

    Lists and tuples of rows are turned into the collection.
    """

    tag = TypeTag.COLLECTION.value
    options = ("collection", "null_as_empty")

    collection: Optional[type] = None
    null_as_empty: bool = False

    @classmethod
    def prepare_description(cls, description: Dict[str, Any], key: str, registry: Any) -> None:
        raw = description["type"]
        if isinstance(raw, type) and issubclass(raw, _collection_class()):
            description["type"] = cls.tag
            description["collection"] = raw

    def __post_init__(self) -> None:
        super().__post_init__()
        if not (isinstance(self.collection, type) and issubclass(self.collection, _collection_class())):
            raise InvalidTypeParamsError(
                f"expected Collection subclass, got: {invalid_value_as_string(self.collection)}"
            )

    def type_as_string(self) -> str:
        return f"collection {self.collection.__name__}"

    def _prepare(self, value: Any, key: Any, model: Any) -> Any:
        if value is None:
            if not self.null_as_empty:
                return None
            value = []

        if isinstance(value, self.collection):
            result = value
        elif isinstance(value, (list, tuple)):
            result = self.collection(value)
        else:
            raise self._invalid(value, key)

        if model is not None:
            link_parent(result, model)
        return result

    def _to_json(self, value: Any, stack: JsonStack) -> Any:
        return value.to_json(stack)

    def _clone(self, value: Any, stack: CloneStack) -> Any:
        return value.clone(stack)

    def _equal(self, self_value: Any, other_value: Any, stack: EqualStack) -> bool:
        if self_value is None or other_value is None:
            return self_value is other_value
        return self_value.equal(other_value, stack)

    def same(self, old_value: Any, new_value: Any) -> bool:
        return old_value is new_value
