"""
Collections: ordered, mutable sequences of records of one class.

The element record class comes from the ``model`` class attribute or,
when absent, from a ``structure()`` classmethod (a record class is then
generated on first use).

Invariants:
    - Every element is an instance of the element record class
    - ``length`` equals ``len(models)`` whenever an event is emitted
    - Rows are converted before the sequence is touched, so a bad row
      leaves the collection unchanged
    - One "add"/"remove" event per affected element, removals first
"""

from __future__ import annotations

import logging
import reprlib
import threading
from collections.abc import Mapping
from functools import cmp_to_key
from typing import Any, Callable, Iterable, Iterator, List, Optional, Type as TypingType, Union

from .errors import CollectionModelNotDeclaredError, InvalidModelError, InvalidSortParamsError
from .events import CollectionEvent, EventEmitter
from .model import Model
from .stack import CloneStack, EqualStack, JsonStack
from .tree import get_parent
from .utils import MISSING, invalid_value_as_string, loose_compare, strict_equal

logger = logging.getLogger(__name__)

Row = Union[Model, Mapping[str, Any]]
Comparator = Callable[[Model, Model], int]
Predicate = Callable[[Model], Any]

_model_lock = threading.Lock()


class Collection(EventEmitter):
    """Base class of all collections.

    Example:
        >>> class Users(Collection):
        ...     model = User
        >>> users = Users([{"id": 1, "email": "a@x.com"}])
        >>> users.on("add", lambda event: print(event.model.get("id")))
        >>> users.push({"id": 2, "email": "b@x.com"})
        2
    """

    model: Optional[TypingType[Model]] = None

    @classmethod
    def structure(cls) -> Any:
        """Element schema (or element record class). Override in subclasses."""
        raise CollectionModelNotDeclaredError(cls.__name__)

    @classmethod
    def element_model(cls) -> TypingType[Model]:
        """Record class of the elements."""
        if cls.model is not None:
            return cls.model

        generated = cls.__dict__.get("_element_model")
        if generated is not None:
            return generated

        with _model_lock:
            generated = cls.__dict__.get("_element_model")
            if generated is None:
                generated = cls._generate_model()
                cls._element_model = generated
                logger.debug(f"Generated element model {generated.__name__} for {cls.__name__}")
        return generated

    @classmethod
    def _generate_model(cls) -> TypingType[Model]:
        result = cls.structure()
        if isinstance(result, type) and issubclass(result, Model):
            return result

        def structure(model_cls: type) -> Any:
            return result

        return type(f"{cls.__name__}Model", (Model,), {"structure": classmethod(structure)})

    def __init__(self, rows: Optional[Iterable[Row]] = None) -> None:
        super().__init__()
        self.models: List[Model] = []
        if rows is not None:
            self.models = [self.prepare_row(row) for row in rows]
        self.length = len(self.models)

    @property
    def parent(self) -> Optional[Any]:
        return get_parent(self)

    def prepare_row(self, row: Row) -> Model:
        """Turn a row into an element record.

        Raises:
            InvalidModelError: If row is neither a record nor a mapping
        """
        model_cls = self.element_model()
        if isinstance(row, model_cls):
            return row
        if isinstance(row, Model):
            row = row.data
        if isinstance(row, Mapping):
            return model_cls(row)
        raise InvalidModelError(invalid_value_as_string(row), model_cls.__name__)

    # Events

    def _sync(self, removed: Iterable[Model] = (), added: Iterable[Model] = ()) -> None:
        self.length = len(self.models)
        for model in removed:
            self.emit("remove", CollectionEvent(type="remove", model=model, collection=self))
        for model in added:
            self.emit("add", CollectionEvent(type="add", model=model, collection=self))

    # Sequence protocol

    def __len__(self) -> int:
        return len(self.models)

    def __iter__(self) -> Iterator[Model]:
        return iter(list(self.models))

    def __getitem__(self, index: Union[int, slice]) -> Any:
        return self.models[index]

    def __contains__(self, model: object) -> bool:
        return self.includes(model)

    @reprlib.recursive_repr()
    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.models!r})"

    # Mutation

    def at(self, index: int, row: Any = MISSING) -> Optional[Model]:
        """Element at ``index``; with ``row``, replace the element there.

        Replacing at ``len(collection)`` appends. Any other index outside
        the collection raises IndexError before the row is converted.
        """
        if row is MISSING:
            try:
                return self.models[index]
            except IndexError:
                return None

        if not -len(self.models) <= index <= len(self.models):
            raise IndexError(f"{type(self).__name__} index out of range: {index}")

        model = self.prepare_row(row)
        if index == len(self.models):
            self.models.append(model)
            self._sync(added=[model])
            return model

        removed = self.models[index]
        self.models[index] = model
        self._sync(removed=[removed], added=[model])
        return model

    def push(self, *rows: Row) -> int:
        """Append rows. Returns the new length."""
        models = [self.prepare_row(row) for row in rows]
        self.models.extend(models)
        self._sync(added=models)
        return self.length

    def add(self, *rows: Union[Row, Iterable[Row]]) -> int:
        """Like push(), but lists of rows are flattened."""
        flat: List[Row] = []
        for row in rows:
            if isinstance(row, (list, tuple)):
                flat.extend(row)
            else:
                flat.append(row)
        return self.push(*flat)

    def create(self, row: Row) -> Model:
        """Append one row and return its record."""
        model = self.prepare_row(row)
        self.models.append(model)
        self._sync(added=[model])
        return model

    def unshift(self, *rows: Row) -> int:
        """Prepend rows. Returns the new length."""
        models = [self.prepare_row(row) for row in rows]
        self.models[0:0] = models
        self._sync(added=models)
        return self.length

    def pop(self) -> Optional[Model]:
        if not self.models:
            return None
        model = self.models.pop()
        self._sync(removed=[model])
        return model

    def shift(self) -> Optional[Model]:
        if not self.models:
            return None
        model = self.models.pop(0)
        self._sync(removed=[model])
        return model

    def splice(self, start: int, delete_count: Optional[int] = None, *rows: Row) -> List[Model]:
        """Remove ``delete_count`` elements at ``start`` and insert rows there.

        Returns:
            The removed records
        """
        models = [self.prepare_row(row) for row in rows]

        begin, end, _ = slice(start, None).indices(len(self.models))
        if delete_count is not None:
            end = begin + max(delete_count, 0)

        removed = self.models[begin:end]
        self.models[begin:end] = models
        self._sync(removed=removed, added=models)
        return removed

    def fill(self, row: Row, start: int = 0, end: Optional[int] = None) -> Collection:
        """Replace elements in ``[start, end)`` with records built from ``row``."""
        begin, stop, _ = slice(start, end).indices(len(self.models))

        added = [self.prepare_row(row) for _ in range(begin, stop)]
        removed = self.models[begin:stop]
        self.models[begin:stop] = added
        self._sync(removed=removed, added=added)
        return self

    def reset(self) -> None:
        """Remove every element."""
        removed = self.models
        self.models = []
        self._sync(removed=removed)

    def remove(self, id_or_model: Any) -> Optional[Model]:
        """Remove a record, given itself or its primary key value."""
        if isinstance(id_or_model, Model):
            index = self.index_of(id_or_model)
        else:
            index = self.find_index(lambda model: _is_primary(model, id_or_model))

        if index == -1:
            return None

        model = self.models.pop(index)
        self._sync(removed=[model])
        return model

    def sort(self, key_or_comparator: Union[str, Comparator], *keys: str) -> Collection:
        """Sort in place by field names (ascending) or a ``cmp(a, b)``.

        Raises:
            InvalidSortParamsError: If neither a key nor a comparator is given
        """
        if isinstance(key_or_comparator, str):
            names = (key_or_comparator,) + keys

            def compare(left: Model, right: Model) -> int:
                for name in names:
                    result = loose_compare(left.get(name), right.get(name))
                    if result:
                        return result
                return 0

            self.models.sort(key=cmp_to_key(compare))
        elif callable(key_or_comparator):
            self.models.sort(key=cmp_to_key(key_or_comparator))
        else:
            raise InvalidSortParamsError(invalid_value_as_string(key_or_comparator))
        return self

    def reverse(self) -> Collection:
        self.models.reverse()
        return self

    # Lookup

    def get(self, id_value: Any) -> Optional[Model]:
        """Record whose primary key value is ``id_value``."""
        return self.find(lambda model: _is_primary(model, id_value))

    def first(self) -> Optional[Model]:
        return self.models[0] if self.models else None

    def last(self) -> Optional[Model]:
        return self.models[-1] if self.models else None

    def find(self, predicate: Predicate) -> Optional[Model]:
        for model in list(self.models):
            if predicate(model):
                return model
        return None

    def find_index(self, predicate: Predicate) -> int:
        for index, model in enumerate(list(self.models)):
            if predicate(model):
                return index
        return -1

    def index_of(self, model: Any, start: int = 0) -> int:
        for index in range(*slice(start, None).indices(len(self.models))):
            if self.models[index] is model:
                return index
        return -1

    def last_index_of(self, model: Any) -> int:
        for index in range(len(self.models) - 1, -1, -1):
            if self.models[index] is model:
                return index
        return -1

    def includes(self, model: Any) -> bool:
        return self.index_of(model) != -1

    # Iteration helpers

    def each(self, callback: Predicate) -> None:
        for model in list(self.models):
            callback(model)

    for_each = each

    def map(self, callback: Predicate) -> List[Any]:
        return [callback(model) for model in list(self.models)]

    def flat_map(self, callback: Predicate) -> List[Any]:
        result: List[Any] = []
        for item in self.map(callback):
            if isinstance(item, (list, tuple)):
                result.extend(item)
            else:
                result.append(item)
        return result

    def filter(self, predicate: Predicate) -> List[Model]:
        return [model for model in list(self.models) if predicate(model)]

    def every(self, predicate: Predicate) -> bool:
        return all(predicate(model) for model in list(self.models))

    def some(self, predicate: Predicate) -> bool:
        return any(predicate(model) for model in list(self.models))

    def reduce(self, callback: Callable[[Any, Model], Any], initial: Any = MISSING) -> Any:
        """Fold left with ``callback(total, model)``.

        Raises:
            TypeError: If the collection is empty and no initial value is given
        """
        return _reduce(callback, list(self.models), initial)

    def reduce_right(self, callback: Callable[[Any, Model], Any], initial: Any = MISSING) -> Any:
        return _reduce(callback, list(reversed(self.models)), initial)

    def slice(self, start: Optional[int] = None, end: Optional[int] = None) -> List[Model]:
        return self.models[start:end]

    def flat(self) -> List[Model]:
        return list(self.models)

    def join(self, separator: str = ",") -> str:
        return separator.join(str(model) for model in self.models)

    def concat(self, *values: Union[Collection, Iterable[Row]]) -> Collection:
        """New collection of the same class with values appended."""
        models = list(self.models)
        for value in values:
            if isinstance(value, Collection):
                models.extend(value.models)
            else:
                models.extend(self.prepare_row(row) for row in value)
        return type(self)(models)

    # Projection, cloning, equality

    def to_json(self, stack: Optional[JsonStack] = None) -> List[Any]:
        if stack is None:
            stack = JsonStack()
        with stack.visit(self):
            return [model.to_json(stack) for model in self.models]

    def clone(self, stack: Optional[CloneStack] = None) -> Collection:
        if stack is None:
            stack = CloneStack()
        if stack.has(self):
            return stack.get(self)

        collection_cls = type(self)
        clone = collection_cls.__new__(collection_cls)
        stack.add(self, clone)
        clone.__init__([model.clone(stack) for model in self.models])
        return clone

    def equal(self, other: Any, stack: Optional[EqualStack] = None) -> bool:
        """Pairwise equality with another collection or a list of rows."""
        if isinstance(other, Collection):
            other_models = other.models
        elif isinstance(other, (list, tuple)):
            other_models = other
        else:
            return False

        if len(self.models) != len(other_models):
            return False

        if stack is None:
            stack = EqualStack()
        if stack.has(self):
            return stack.get(self) is other
        stack.add(self, other)

        return all(
            model.equal(other_model, stack)
            for model, other_model in zip(self.models, other_models)
        )


def _is_primary(model: Model, id_value: Any) -> bool:
    return model.primary_key is not None and strict_equal(model.primary_value, id_value)


def _reduce(callback: Callable[[Any, Model], Any], models: List[Model], initial: Any) -> Any:
    items = iter(models)
    if initial is MISSING:
        try:
            total = next(items)
        except StopIteration:
            raise TypeError("reduce of empty collection with no initial value") from None
    else:
        total = initial
    for model in items:
        total = callback(total, model)
    return total
