"""
Nested record fields.

A record field holds an instance of a Model subclass. Plain mappings are
turned into that class (or, for a union declared with ``Model.or_``, into
the class chosen by ``pick``). The owning record becomes the nested
record's parent.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from ..errors import InvalidNestedModelError, InvalidTypeParamsError, RecordError
from ..stack import CloneStack, EqualStack, JsonStack
from ..tree import link_parent
from ..utils import invalid_value_as_string
from .base import Type, TypeTag


def _model_class() -> type:
    from ..model import Model

    return Model


@dataclass(frozen=True)
class ModelUnion:
    """Polymorphic record reference, see ``Model.or_``.

    Attributes:
        base: Common base class, any instance of it is accepted
        models: Classes plain data can be turned into
        pick: ``pick(data)`` chooses the class for plain data
    """

    base: type
    models: Tuple[type, ...]
    pick: Optional[Callable[[Mapping], type]] = None


@dataclass(frozen=True, eq=False)
class ModelType(Type):
    """Reference to a nested record.

    Attributes:
        model: Accepted record class (instances of subclasses pass too)
        models: Classes used to build records from plain data
        pick: Chooses one of ``models`` for given plain data
    """

    tag = TypeTag.MODEL.value
    options = ("model", "models", "pick")

    model: Optional[type] = None
    models: Tuple[type, ...] = ()
    pick: Optional[Callable[[Mapping], type]] = None

    @classmethod
    def prepare_description(cls, description: Dict[str, Any], key: str, registry: Any) -> None:
        raw = description["type"]
        model_cls = _model_class()

        if isinstance(raw, ModelUnion):
            description["type"] = cls.tag
            description["model"] = raw.base
            description["models"] = raw.models
            if raw.pick is not None:
                description["pick"] = raw.pick
        elif isinstance(raw, type) and issubclass(raw, model_cls):
            description["type"] = cls.tag
            description["model"] = raw

    def __post_init__(self) -> None:
        super().__post_init__()
        model_cls = _model_class()

        models = tuple(self.models) or ((self.model,) if self.model is not None else ())
        if not models:
            raise InvalidTypeParamsError("model field needs a Model subclass")
        for candidate in models:
            if not (isinstance(candidate, type) and issubclass(candidate, model_cls)):
                raise InvalidTypeParamsError(
                    f"expected Model subclass, got: {invalid_value_as_string(candidate)}"
                )

        self._set("models", models)
        if self.model is None:
            self._set("model", models[0])
        if self.pick is not None and not callable(self.pick):
            raise InvalidTypeParamsError(f"pick should be function: {invalid_value_as_string(self.pick)}")

    def type_as_string(self) -> str:
        return self.model.__name__

    def _prepare(self, value: Any, key: Any, model: Any) -> Any:
        if value is None:
            return None

        if isinstance(value, (self.model,) + self.models):
            if model is not None:
                link_parent(value, model)
            return value

        if not isinstance(value, Mapping):
            raise self._invalid(value, key)

        record_cls = self.pick(value) if self.pick is not None else None
        if record_cls is None:
            record_cls = self.models[0]

        try:
            record = record_cls(value)
        except RecordError as err:
            raise InvalidNestedModelError(
                key,
                invalid_value_as_string(value),
                self.type_as_string(),
                child=err,
            ) from err

        if model is not None:
            link_parent(record, model)
        return record

    def _to_json(self, value: Any, stack: JsonStack) -> Any:
        return value.to_json(stack)

    def _clone(self, value: Any, stack: CloneStack) -> Any:
        return value.clone(stack)

    def _equal(self, self_value: Any, other_value: Any, stack: EqualStack) -> bool:
        if self_value is None or other_value is None:
            return self_value is other_value
        if not isinstance(other_value, (_model_class(), Mapping)):
            return False

        if stack.has(self_value):
            return stack.get(self_value) is other_value
        stack.add(self_value, other_value)

        return self_value.equal(other_value, stack)

    def same(self, old_value: Any, new_value: Any) -> bool:
        return old_value is new_value
