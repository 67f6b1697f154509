"""
Records: validated, immutable data snapshots with change events.

A record class declares its fields in ``structure()``. Every instance
owns one read-only snapshot (``data``); each ``set()`` builds a new
snapshot, diffs it against the current one and commits it atomically.

Processing of one ``set()``:
    1. Resolve the descriptor of every input key (declared or wildcard)
    2. Normalize with the descriptor, enforce required, validate, enforce const
    3. Run the ``prepare(draft)`` hook, re-normalize keys it touched
    4. Diff against the current snapshot, stop if nothing changed
    5. Freeze the draft and run the ``validate(snapshot)`` hook
    6. Commit, then emit "change:<key>" per changed key and "change"

Invariants:
    - ``data`` is replaced wholesale, never mutated
    - Any error before the commit leaves the record unchanged
    - A set() that changes nothing emits nothing
    - Nested records and collections get the owning record as parent
      when the change that stores them commits

How to change safely:
    - Keep hooks free of side effects on other records, they may run
      for an is_valid() check that never commits
    - New record attributes become reserved primary key names
"""

from __future__ import annotations

import logging
import reprlib
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Optional, Type as TypingType

from .errors import (
    ConstValueError,
    DataShouldBeObjectError,
    InvalidKeyError,
    InvalidTypeParamsError,
    InvalidValueError,
    RequiredError,
    SchemaNotDeclaredError,
    UnknownPropertyError,
)
from .events import ChangeEvent, EventEmitter
from .schema import Schema, resolve_schema
from .stack import CloneStack, EqualStack, JsonStack
from .tree import Walker, deferred_links, get_parent, set_parent
from .types import Type, get_type_registry
from .types.model import ModelUnion
from .utils import MISSING, invalid_value_as_string

logger = logging.getLogger(__name__)

Visitor = Callable[["Model", Walker], Any]
Predicate = Callable[["Model"], Any]


class Model(EventEmitter):
    """Base class of all records.

    Example:
        >>> class User(Model):
        ...     @classmethod
        ...     def structure(cls):
        ...         return {
        ...             "id": {"type": "number", "primary": True},
        ...             "email": {"type": "string", "required": True, "lower": True},
        ...         }
        >>> user = User({"id": 1, "email": "Bob@Example.com"})
        >>> user.get("email")
        'bob@example.com'
    """

    @classmethod
    def structure(cls) -> Mapping[str, Any]:
        """Field descriptions of this record class. Override in subclasses."""
        raise SchemaNotDeclaredError(cls.__name__)

    @classmethod
    def schema(cls) -> Schema:
        return resolve_schema(cls)

    @classmethod
    def register_type(cls, tag: str, type_cls: TypingType[Type], replace: bool = False) -> None:
        """Make ``tag`` usable in field descriptions of every record class."""
        get_type_registry().register(tag, type_cls, replace=replace)

    @classmethod
    def or_(
        cls,
        *models: type,
        pick: Optional[Callable[[Mapping], type]] = None,
    ) -> ModelUnion:
        """Field type accepting any record of this class or its subclasses.

        Plain data is turned into ``pick(data)`` when given, else into the
        first of ``models``.

        Example:
            >>> {"pet": Animal.or_(Cat, Dog, pick=lambda row: Cat if "meow" in row else Dog)}
        """
        for model in models:
            if not (isinstance(model, type) and issubclass(model, cls)):
                raise InvalidTypeParamsError(
                    f"{invalid_value_as_string(model)} is not a subclass of {cls.__name__}"
                )
        return ModelUnion(base=cls, models=tuple(models) or (cls,), pick=pick)

    def __init__(self, data: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__()
        schema = self.schema()

        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise DataShouldBeObjectError(invalid_value_as_string(data))

        self._data: Mapping[str, Any] = MappingProxyType({})
        self._primary_value: Any = None

        defaults = {}
        for key, description in schema.fields.items():
            defaults[key] = description.prepare(description.get_default(), key, self)
        self._data = MappingProxyType(defaults)

        row = dict(data)
        for key, description in schema.fields.items():
            if description.required and key not in row and defaults[key] is None:
                row[key] = None

        self._apply(row, initializing=True)

    # Snapshot access

    @property
    def data(self) -> Mapping[str, Any]:
        """Current read-only snapshot."""
        return self._data

    @property
    def primary_key(self) -> Optional[str]:
        return self.schema().primary_key

    @property
    def primary_value(self) -> Any:
        return self._primary_value

    @property
    def parent(self) -> Optional[Any]:
        return get_parent(self)

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def has_property(self, key: str) -> bool:
        return key in self._data

    def has_value(self, key: str) -> bool:
        return self._data.get(key) is not None

    # Hooks

    def prepare(self, data: Dict[str, Any]) -> None:
        """Adjust the draft snapshot in place before it is diffed."""

    def validate(self, data: Mapping[str, Any]) -> None:
        """Check the frozen draft; raise to reject the whole set()."""

    # Mutation

    def set(
        self,
        key_or_data: Any,
        value: Any = MISSING,
        *,
        only_validate: bool = False,
    ) -> None:
        """Set one field (``set(key, value)``) or several (``set(mapping)``).

        Raises:
            UnknownPropertyError: If a key is not declared
            InvalidValueError: If a value cannot be normalized or is invalid
            RequiredError: If a required field resolves to None
            ConstValueError: If a const field would change
        """
        if isinstance(key_or_data, str):
            data = {key_or_data: None if value is MISSING else value}
        else:
            data = key_or_data

        if not isinstance(data, Mapping):
            raise DataShouldBeObjectError(invalid_value_as_string(data))

        self._apply(data, only_validate=only_validate)

    def is_valid(self, data: Mapping[str, Any]) -> bool:
        """Whether ``set(data)`` would succeed. Never commits."""
        if not isinstance(data, Mapping):
            raise DataShouldBeObjectError(invalid_value_as_string(data))

        try:
            self._apply(data, only_validate=True)
        except Exception as err:
            logger.debug(f"{type(self).__name__}.is_valid rejected data: {err}")
            return False
        return True

    def _describe(self, key: str, schema: Schema) -> Type:
        description = schema.fields.get(key)
        if description is not None:
            return description

        if schema.wildcard is None:
            raise UnknownPropertyError(key)
        if not schema.wildcard.validate_key(key):
            raise InvalidKeyError(key)
        return schema.wildcard

    def _prepare_value(self, description: Type, key: str, value: Any, initializing: bool) -> Any:
        value = description.prepare(value, key, self)

        if value is None and description.required:
            raise RequiredError(key)

        if not description.validate(value, key):
            raise InvalidValueError(key, invalid_value_as_string(value))

        if description.const and not initializing:
            if not description.same(self._data.get(key), value):
                raise ConstValueError(key)

        return value

    def _has_prepare_hook(self) -> bool:
        return type(self).prepare is not Model.prepare

    def _apply(
        self,
        data: Mapping[str, Any],
        only_validate: bool = False,
        initializing: bool = False,
    ) -> None:
        schema = self.schema()
        old_data = self._data
        draft = dict(old_data)

        with deferred_links(self) as children:
            for key, value in data.items():
                description = self._describe(key, schema)
                draft[key] = self._prepare_value(description, key, value, initializing)

            if self._has_prepare_hook():
                before = dict(draft)
                self.prepare(draft)
                for key, value in draft.items():
                    if key in before and before[key] is value:
                        continue
                    description = self._describe(key, schema)
                    draft[key] = self._prepare_value(description, key, value, initializing)

            changes = {}
            for key, value in draft.items():
                if key not in old_data or not schema.describe(key).same(old_data[key], value):
                    changes[key] = value

            if not changes and not initializing:
                return

            snapshot = MappingProxyType(draft)
            self.validate(snapshot)

        if only_validate:
            return

        self._data = snapshot
        for child in children:
            set_parent(child, self)
        if schema.primary_key is not None:
            self._primary_value = snapshot.get(schema.primary_key)

        if initializing or not changes:
            return

        logger.debug(f"{type(self).__name__} changed: {list(changes)}")

        event = ChangeEvent.create(self, old_data, changes)
        for key in changes:
            self.emit(f"change:{key}", event)
        self.emit("change", event)

    # Traversal

    def walk(self, visitor: Visitor) -> None:
        """Visit nested records depth-first.

        ``visitor(model, walker)`` is called for every record found in
        fields, collections, arrays and maps. Each record is descended
        into at most once, so cyclic graphs terminate.
        """
        self._walk(visitor, {id(self): self})

    def _walk(self, visitor: Visitor, walked: Dict[int, "Model"]) -> bool:
        for value in self._data.values():
            for child in _child_models(value):
                walker = Walker()
                visitor(child, walker)

                if walker.exited:
                    return True
                if walker.skipped or id(child) in walked:
                    continue

                walked[id(child)] = child
                if child._walk(visitor, walked):
                    return True
        return False

    def find_child(self, predicate: Predicate) -> Optional[Model]:
        found: List[Model] = []

        def visit(model: Model, walker: Walker) -> None:
            if predicate(model):
                found.append(model)
                walker.exit()

        self.walk(visit)
        return found[0] if found else None

    def filter_children(self, predicate: Predicate) -> List[Model]:
        children: List[Model] = []

        def visit(model: Model, walker: Walker) -> None:
            if predicate(model):
                children.append(model)

        self.walk(visit)
        return children

    def _parents(self) -> Iterable[Any]:
        seen = set()
        parent = self.parent
        while parent is not None and id(parent) not in seen:
            seen.add(id(parent))
            yield parent
            parent = get_parent(parent)

    def find_parent(self, predicate: Predicate) -> Optional[Any]:
        for parent in self._parents():
            if predicate(parent):
                return parent
        return None

    def filter_parents(self, predicate: Predicate) -> List[Any]:
        return [parent for parent in self._parents() if predicate(parent)]

    def find_parent_instance(self, model_cls: type) -> Optional[Any]:
        return self.find_parent(lambda parent: isinstance(parent, model_cls))

    # Projection, cloning, equality

    def to_json(self, stack: Optional[JsonStack] = None) -> Dict[str, Any]:
        """Plain JSON-compatible dict of the snapshot.

        Raises:
            CircularStructureToJSONError: If the record graph has a cycle
        """
        if stack is None:
            stack = JsonStack()

        schema = self.schema()
        with stack.visit(self):
            return {
                key: schema.describe(key).to_json(value, stack)
                for key, value in self._data.items()
            }

    def clone(self, stack: Optional[CloneStack] = None) -> Model:
        """Deep copy, keeping the runtime class of every nested record."""
        if stack is None:
            stack = CloneStack()
        if stack.has(self):
            return stack.get(self)

        model_cls = type(self)
        clone = model_cls.__new__(model_cls)
        stack.add(self, clone)

        schema = self.schema()
        data = {
            key: schema.describe(key).clone(value, stack)
            for key, value in self._data.items()
        }
        clone.__init__(data)
        return clone

    def equal(self, other: Any, stack: Optional[EqualStack] = None) -> bool:
        """Field-by-field equality with another record or a plain mapping."""
        if stack is None:
            stack = EqualStack()

        if isinstance(other, Model):
            other_data = other.data
        elif isinstance(other, Mapping):
            other_data = other
        else:
            return False

        schema = self.schema()
        for key, value in self._data.items():
            if not schema.describe(key).equal(value, other_data.get(key), stack):
                return False

        return all(key in self._data for key in other_data)

    @reprlib.recursive_repr()
    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self._data)!r})"


def _child_models(value: Any) -> List[Model]:
    from .collection import Collection

    if isinstance(value, Model):
        return [value]
    if isinstance(value, Collection):
        return list(value.models)
    if isinstance(value, (list, tuple)):
        return [item for item in value if isinstance(item, Model)]
    if isinstance(value, Mapping):
        return [item for item in value.values() if isinstance(item, Model)]
    return []
