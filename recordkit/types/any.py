"""
Untyped fields and the generic value helpers.

``value_to_json``, ``clone_value`` and ``equal_values`` handle any mix of
scalars, dates, sequences, mappings, records and collections. They back
the "any" type and union fields, whose values have no single descriptor.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Dict

from ..stack import CloneStack, EqualStack, JsonStack
from ..utils import date_to_json, is_nan, strict_equal
from .base import Type, TypeTag


def _graph_classes() -> tuple:
    from ..collection import Collection
    from ..model import Model

    return Model, Collection


def value_to_json(value: Any, stack: JsonStack) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, datetime):
        return date_to_json(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, _graph_classes()):
        return value.to_json(stack)
    if callable(getattr(value, "to_json", None)):
        return value.to_json()
    if isinstance(value, (list, tuple)):
        return [value_to_json(item, stack) for item in value]
    if isinstance(value, Mapping):
        return {key: value_to_json(item, stack) for key, item in value.items()}
    return value


def clone_value(value: Any, stack: CloneStack) -> Any:
    if isinstance(value, _graph_classes()):
        return value.clone(stack)

    if isinstance(value, (list, tuple)):
        if stack.has(value):
            return stack.get(value)
        if isinstance(value, tuple):
            return tuple(clone_value(item, stack) for item in value)
        items: list = []
        stack.add(value, items)
        items.extend(clone_value(item, stack) for item in value)
        return items

    if isinstance(value, Mapping):
        if stack.has(value):
            return stack.get(value)
        copy: Dict[Any, Any] = {}
        result = MappingProxyType(copy) if isinstance(value, MappingProxyType) else copy
        stack.add(value, result)
        for key, item in value.items():
            copy[key] = clone_value(item, stack)
        return result

    return value


def equal_values(self_value: Any, other_value: Any, stack: EqualStack) -> bool:
    """Structural equality of two untyped values.

    Sequences and mappings already under comparison short-circuit through
    the stack, so cyclic values terminate.
    """
    if isinstance(self_value, datetime) and isinstance(other_value, datetime):
        return self_value.timestamp() == other_value.timestamp()

    if isinstance(self_value, re.Pattern) and isinstance(other_value, re.Pattern):
        return (
            self_value.pattern == other_value.pattern
            and self_value.flags == other_value.flags
        )

    if isinstance(self_value, (list, tuple)) and isinstance(other_value, (list, tuple)):
        if len(self_value) != len(other_value):
            return False
        if stack.has(self_value):
            return stack.get(self_value) is other_value
        stack.add(self_value, other_value)
        return all(
            equal_values(self_item, other_item, stack)
            for self_item, other_item in zip(self_value, other_value)
        )

    if isinstance(self_value, Mapping) and isinstance(other_value, Mapping):
        if stack.has(self_value):
            return True
        stack.add(self_value, other_value)
        if set(self_value) != set(other_value):
            return False
        return all(
            equal_values(item, other_value[key], stack)
            for key, item in self_value.items()
        )

    model_cls, collection_cls = _graph_classes()
    if isinstance(self_value, model_cls) and isinstance(other_value, model_cls):
        if stack.has(self_value):
            return True
        stack.add(self_value, other_value)
        return self_value.equal(other_value, stack)

    if isinstance(self_value, collection_cls) and isinstance(other_value, collection_cls):
        return self_value.equal(other_value, stack)

    if is_nan(self_value) and is_nan(other_value):
        return True

    return strict_equal(self_value, other_value)


def same_values(old_value: Any, new_value: Any) -> bool:
    """Records and collections are the same only when identical."""
    if old_value is new_value:
        return True
    graph = _graph_classes()
    if isinstance(old_value, graph) or isinstance(new_value, graph):
        return False
    return equal_values(old_value, new_value, EqualStack())


@dataclass(frozen=True, eq=False)
class AnyType(Type):
    """Field that accepts any value as is."""

    tag = TypeTag.ANY.value

    @classmethod
    def prepare_description(cls, description: Dict[str, Any], key: str, registry: Any) -> None:
        if description["type"] == "*":
            description["type"] = cls.tag

    def _to_json(self, value: Any, stack: JsonStack) -> Any:
        return value_to_json(value, stack)

    def _clone(self, value: Any, stack: CloneStack) -> Any:
        return clone_value(value, stack)

    def _equal(self, self_value: Any, other_value: Any, stack: EqualStack) -> bool:
        return equal_values(self_value, other_value, stack)

    def same(self, old_value: Any, new_value: Any) -> bool:
        return same_values(old_value, new_value)
