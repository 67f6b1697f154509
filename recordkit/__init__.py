"""
recordkit: schema-driven records and collections.

This package provides:
- Model: validated, immutable data snapshots with change events
- Collection: ordered sequences of records with add/remove events
- Field helpers and the pluggable type descriptor system
- Error types for every rejected operation

Invariants:
    - Record data is only ever replaced wholesale, through set()
    - Errors leave records and collections unchanged
    - equal(), clone() and to_json() terminate on cyclic record graphs

How to change safely:
    - Register new field types through Model.register_type
    - Keep error message templates stable, callers match on them
"""

from .collection import Collection
from .config import Settings, get_settings, reset_settings
from .errors import (
    CircularStructureToJSONError,
    CollectionModelNotDeclaredError,
    ConflictingParametersError,
    ConstValueError,
    DataShouldBeObjectError,
    DuplicateTypeError,
    InvalidArrayElementError,
    InvalidKeyError,
    InvalidKeyValidationError,
    InvalidModelError,
    InvalidNestedModelError,
    InvalidObjectElementError,
    InvalidSchemaError,
    InvalidSortParamsError,
    InvalidTypeParamsError,
    InvalidValidationError,
    InvalidValueError,
    NoCloneMethodError,
    NoEqualMethodError,
    NoToJSONMethodError,
    NotUniqueError,
    RecordError,
    RequiredError,
    ReservedPrimaryKeyError,
    SchemaNotDeclaredError,
    UnknownPropertyError,
    UnknownTypeError,
)
from .events import ChangeEvent, CollectionEvent, EventEmitter
from .fields import array_of, collection_of, custom_of, field, mapping_of, one_of, record_of
from .messages import get_lang, set_lang
from .model import Model
from .schema import Schema
from .stack import CloneStack, EqualStack, JsonStack
from .tree import Walker
from .types import Type, TypeRegistry, TypeTag, get_type_registry

__all__ = [
    # Records
    "Model",
    "Collection",
    "Schema",
    "Walker",
    # Fields
    "field",
    "array_of",
    "mapping_of",
    "record_of",
    "collection_of",
    "custom_of",
    "one_of",
    # Types
    "Type",
    "TypeTag",
    "TypeRegistry",
    "get_type_registry",
    # Events
    "EventEmitter",
    "ChangeEvent",
    "CollectionEvent",
    # Traversal
    "EqualStack",
    "CloneStack",
    "JsonStack",
    # Config
    "Settings",
    "get_settings",
    "reset_settings",
    "set_lang",
    "get_lang",
    # Errors
    "RecordError",
    "SchemaNotDeclaredError",
    "InvalidSchemaError",
    "UnknownTypeError",
    "ReservedPrimaryKeyError",
    "InvalidTypeParamsError",
    "ConflictingParametersError",
    "InvalidValidationError",
    "InvalidKeyValidationError",
    "DuplicateTypeError",
    "UnknownPropertyError",
    "InvalidKeyError",
    "RequiredError",
    "ConstValueError",
    "DataShouldBeObjectError",
    "InvalidValueError",
    "InvalidArrayElementError",
    "InvalidObjectElementError",
    "InvalidNestedModelError",
    "NotUniqueError",
    "CircularStructureToJSONError",
    "NoToJSONMethodError",
    "NoCloneMethodError",
    "NoEqualMethodError",
    "CollectionModelNotDeclaredError",
    "InvalidModelError",
    "InvalidSortParamsError",
]
