"""
Array fields.

Arrays are normalized element by element through one element descriptor
and stored as tuples, so a committed array cannot be mutated in place.

Invariants:
    - ``get(key)`` returns a tuple: compare with ``equal()`` or against a
      tuple, ``(1, 2) == [1, 2]`` is False in Python
    - ``to_json()`` projects arrays to lists
    - ``sort=True`` orders with loose comparison; values that cannot be
      ordered compare equal and None always sorts last
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Callable, Dict, Optional, Union

from ..errors import InvalidArrayElementError, NotUniqueError, RecordError
from ..stack import CloneStack, EqualStack, JsonStack
from ..utils import invalid_value_as_string, loose_compare, strict_equal
from .base import Type, TypeTag


@dataclass(frozen=True, eq=False)
class ArrayType(Type):
    """Sequence of values of one element type.

    Attributes:
        element: Descriptor applied to every element
        sort: True for natural order or a ``cmp(a, b)`` comparator
        unique: Reject duplicates (None is never a duplicate)
        empty_as_null: An empty array becomes None
        null_as_empty: None becomes an empty array
    """

    tag = TypeTag.ARRAY.value
    options = ("element", "sort", "unique", "empty_as_null", "null_as_empty")

    element: Optional[Type] = None
    sort: Union[bool, Callable[[Any, Any], int]] = False
    unique: bool = False
    empty_as_null: bool = False
    null_as_empty: bool = False

    @classmethod
    def prepare_description(cls, description: Dict[str, Any], key: str, registry: Any) -> None:
        # ["number"] is an array of numbers, [] an array of anything
        if isinstance(description["type"], list):
            items = description["type"]
            description["type"] = cls.tag
            description.setdefault("element", items[0] if items else "any")

        if description["type"] == cls.tag:
            description["element"] = registry.create(description.get("element", "any"), key)

    def __post_init__(self) -> None:
        super().__post_init__()
        self._exclusive("null_as_empty", "empty_as_null")

    def type_as_string(self) -> str:
        return f"array[{self.element.type_as_string()}]"

    def _prepare(self, value: Any, key: Any, model: Any) -> Any:
        if value is None:
            return () if self.null_as_empty else None

        if not isinstance(value, (list, tuple)):
            raise self._invalid(value, key)

        items = []
        for index, item in enumerate(value):
            try:
                items.append(self.element.prepare(item, index, model))
            except RecordError as err:
                raise InvalidArrayElementError(
                    key,
                    invalid_value_as_string(value),
                    self.type_as_string(),
                    child=err,
                ) from err

        if self.empty_as_null and not items:
            return None

        if self.sort is True:
            items = self._sorted(items, loose_compare)
        elif callable(self.sort):
            items = self._sorted(items, self.sort)

        return tuple(items)

    @staticmethod
    def _sorted(items: list, compare: Callable[[Any, Any], int]) -> list:
        # None never reaches the comparator and always sorts last
        present = [item for item in items if item is not None]
        present.sort(key=cmp_to_key(compare))
        return present + [None] * (len(items) - len(present))

    def validate(self, value: Any, key: Any) -> bool:
        if not super().validate(value, key):
            return False

        if value and self.unique:
            for index, item in enumerate(value):
                if item is None:
                    continue
                if any(strict_equal(other, item) for other in value[:index]):
                    raise NotUniqueError(key, invalid_value_as_string(value))

        return True

    def _to_json(self, value: Any, stack: JsonStack) -> Any:
        return [self.element.to_json(item, stack) for item in value]

    def _clone(self, value: Any, stack: CloneStack) -> Any:
        return tuple(self.element.clone(item, stack) for item in value)

    def _equal(self, self_value: Any, other_value: Any, stack: EqualStack) -> bool:
        if self_value is None or other_value is None:
            return self_value is other_value
        if not isinstance(other_value, (list, tuple)):
            return False
        if len(self_value) != len(other_value):
            return False

        if stack.has(self_value):
            return stack.get(self_value) is other_value
        stack.add(self_value, other_value)

        return all(
            self.element.equal(self_item, other_item, stack)
            for self_item, other_item in zip(self_value, other_value)
        )

    def same(self, old_value: Any, new_value: Any) -> bool:
        if old_value is None or new_value is None:
            return old_value is new_value
        if len(old_value) != len(new_value):
            return False
        return all(
            self.element.same(old_item, new_item)
            for old_item, new_item in zip(old_value, new_value)
        )
