"""
Record schemas.

A Schema is the resolved form of a record class's ``structure()``: field
name -> type descriptor, plus the optional wildcard ("*") descriptor that
covers undeclared keys and the name of the primary key field.

Schemas are resolved once per record class, on first use, and cached on
the class itself.

Invariants:
    - Field order follows the order of structure()
    - At most one field is primary, and it is never the wildcard
    - A cached schema belongs to exactly one class (subclasses resolve
      their own, even when they inherit structure())

How to change safely:
    - structure() is called once per class; make it side-effect free
    - Schemas are immutable, build a new class to change fields
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterator, Optional

from .errors import InvalidSchemaError
from .types import Type, get_type_registry
from .utils import invalid_value_as_string

logger = logging.getLogger(__name__)

WILDCARD = "*"

_schema_lock = threading.RLock()


@dataclass(frozen=True)
class Schema:
    """Resolved field descriptors of one record class.

    Attributes:
        fields: Declared field name -> descriptor
        wildcard: Descriptor for undeclared keys, or None
        primary_key: Name of the primary field, or None
    """

    fields: Mapping[str, Type]
    wildcard: Optional[Type] = None
    primary_key: Optional[str] = None

    @classmethod
    def from_description(cls, description: Any, owner_name: str) -> Schema:
        """Resolve every field of a structure() mapping.

        Raises:
            InvalidSchemaError: If description is not a mapping or declares
                more than one primary key
            RecordError: If a field description cannot be resolved
        """
        if not isinstance(description, Mapping):
            raise InvalidSchemaError(
                owner_name,
                f"structure() must return a mapping, got: {invalid_value_as_string(description)}",
            )

        registry = get_type_registry()
        fields = {}
        wildcard = None
        primary_key = None

        for key, raw in description.items():
            descriptor = registry.create(raw, key)

            if key == WILDCARD:
                if descriptor.primary:
                    raise InvalidSchemaError(owner_name, "wildcard field cannot be primary key")
                wildcard = descriptor
                continue

            if descriptor.primary:
                if primary_key is not None:
                    raise InvalidSchemaError(
                        owner_name,
                        f"primary key is already declared: {primary_key}, cannot declare {key}",
                    )
                primary_key = key

            fields[key] = descriptor

        return cls(
            fields=MappingProxyType(fields),
            wildcard=wildcard,
            primary_key=primary_key,
        )

    def describe(self, key: str) -> Optional[Type]:
        """Descriptor for ``key``: the declared one, else the wildcard."""
        descriptor = self.fields.get(key)
        if descriptor is None:
            return self.wildcard
        return descriptor

    def __contains__(self, key: object) -> bool:
        return key in self.fields

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)


def resolve_schema(owner: type) -> Schema:
    """Schema of a record class, resolved on first call.

    Args:
        owner: Model subclass

    Returns:
        The cached Schema of ``owner``
    """
    schema = owner.__dict__.get("_schema")
    if schema is not None:
        return schema

    with _schema_lock:
        schema = owner.__dict__.get("_schema")
        if schema is None:
            schema = Schema.from_description(owner.structure(), owner.__name__)
            owner._schema = schema
            logger.debug(
                f"Resolved schema for {owner.__name__}: "
                f"{len(schema.fields)} fields, primary_key={schema.primary_key}"
            )
    return schema
