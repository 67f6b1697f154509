"""
Type registry for recordkit.

The TypeRegistry maps type tags ("number", "model", ...) to descriptor
classes and turns raw field descriptions into descriptor instances.

Resolution of one raw description:
    1. Wrap non-mapping shorthand as ``{"type": raw}``
    2. Let every registered class canonicalize the description, in
       registration order (class shorthand, list literals, "*" alias...)
    3. Look up the class registered for the resulting tag
    4. Reject primary keys that collide with the record surface
    5. Instantiate; construction errors get the field name prefixed

Invariants:
    - A tag maps to exactly one descriptor class
    - Registration order is resolution order
    - The caller's description mapping is never mutated

How to change safely:
    - Register extension types through Model.register_type
    - Pass replace=True to swap a built-in implementation on purpose
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Type as TypingType

from ..errors import (
    DuplicateTypeError,
    RecordError,
    ReservedPrimaryKeyError,
    UnknownTypeError,
)
from .base import Type

logger = logging.getLogger(__name__)

# Global registry instance
_global_registry: Optional[TypeRegistry] = None
_registry_lock = threading.Lock()

# Names a primary key may not use besides the Model attributes
RESERVED_PRIMARY_KEYS = ("data", "row", "primary_key", "primary_value", "parent")


class TypeRegistry:
    """Registry of descriptor classes by tag.

    Thread-safety:
        - Registration is thread-safe (uses internal lock)
        - Resolution reads a snapshot of the registration order

    Example:
        >>> registry = get_type_registry()
        >>> registry.create({"type": "number", "round": 2}, "price")
        NumberType(type='number', ...)
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._types: Dict[str, TypingType[Type]] = {}
        self._order: List[TypingType[Type]] = []
        self._lock = threading.Lock()

    def register(self, tag: str, type_cls: TypingType[Type], replace: bool = False) -> None:
        """Register a descriptor class under ``tag``.

        Args:
            tag: Type tag used in field descriptions
            type_cls: Type subclass implementing the tag
            replace: Allow replacing an existing registration

        Raises:
            DuplicateTypeError: If tag is taken by another class
        """
        with self._lock:
            existing = self._types.get(tag)
            if existing is type_cls:
                return
            if existing is not None and not replace:
                raise DuplicateTypeError(tag, existing.__name__)

            if existing is not None:
                self._order.remove(existing)
            self._types[tag] = type_cls
            if type_cls not in self._order:
                self._order.append(type_cls)

        logger.debug(f"Registered type {tag} -> {type_cls.__name__}")

    def get(self, tag: str) -> Optional[TypingType[Type]]:
        return self._types.get(tag)

    def has(self, tag: str) -> bool:
        return tag in self._types

    def tags(self) -> List[str]:
        return list(self._types)

    def prepare_description(self, raw: Any, key: str) -> Dict[str, Any]:
        """Canonical description dict for a raw field description."""
        if isinstance(raw, Mapping) and "type" in raw:
            description = dict(raw)
        else:
            description = {"type": raw}

        for type_cls in list(self._order):
            type_cls.prepare_description(description, key, self)

        return description

    def create(self, raw: Any, key: str) -> Type:
        """Resolve a raw field description into a descriptor.

        Args:
            raw: Tag string, class, list literal, mapping or descriptor
            key: Field name, used in error messages

        Raises:
            UnknownTypeError: If no class is registered for the tag
            ReservedPrimaryKeyError: If a primary key uses a reserved name
            RecordError: If the descriptor rejects its parameters
        """
        if isinstance(raw, Type):
            return raw

        description = self.prepare_description(raw, key)

        tag = description["type"]
        type_cls = self._types.get(tag) if isinstance(tag, str) else None
        if type_cls is None:
            raise UnknownTypeError(key, tag)

        if description.get("primary") and is_reserved_primary_key(key):
            raise ReservedPrimaryKeyError(key)

        try:
            return type_cls.from_description(description)
        except RecordError as err:
            err.add_key_prefix(key)
            raise


def is_reserved_primary_key(key: str) -> bool:
    from ..model import Model

    return key in RESERVED_PRIMARY_KEYS or hasattr(Model, key)


def get_type_registry() -> TypeRegistry:
    """Get the global type registry, built-in types included.

    Returns:
        Global TypeRegistry instance
    """
    global _global_registry
    if _global_registry is None:
        with _registry_lock:
            if _global_registry is None:
                registry = TypeRegistry()
                register_builtin_types(registry)
                _global_registry = registry
    return _global_registry


def reset_type_registry() -> None:
    """Reset the global registry (for testing only)."""
    global _global_registry
    with _registry_lock:
        _global_registry = None


def register_builtin_types(registry: TypeRegistry) -> None:
    """Register the built-in descriptor classes.

    Order matters: class shorthand resolves to a record reference first,
    then a collection reference, then an opaque custom class.
    """
    from .any import AnyType
    from .array import ArrayType
    from .boolean import BooleanType
    from .collection import CollectionType
    from .custom import CustomClassType
    from .date import DateType
    from .model import ModelType
    from .number import NumberType
    from .object import ObjectType
    from .string import StringType
    from .union import OrType

    for type_cls in (
        AnyType,
        BooleanType,
        NumberType,
        StringType,
        DateType,
        ArrayType,
        ObjectType,
        ModelType,
        CollectionType,
        CustomClassType,
        OrType,
    ):
        registry.register(type_cls.tag, type_cls)
