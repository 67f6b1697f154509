"""
Field type descriptors for recordkit.

This package provides:
- Type: the base field contract and TypeTag, the built-in type tags
- One descriptor class per built-in type
- TypeRegistry: tag -> descriptor class, and raw description resolution

Invariants:
    - Descriptors are immutable and shared by all records of a class
    - Built-in types are registered in a fixed order on first registry use

How to change safely:
    - Add a new built-in type to register_builtin_types, keeping the
      record > collection > custom class order of class shorthand
"""

from .any import AnyType, clone_value, equal_values, value_to_json
from .array import ArrayType
from .base import Type, TypeTag
from .boolean import BooleanType
from .collection import CollectionType
from .custom import CustomClassType
from .date import DateType
from .model import ModelType, ModelUnion
from .number import NumberType
from .object import ObjectType
from .registry import (
    TypeRegistry,
    get_type_registry,
    register_builtin_types,
    reset_type_registry,
)
from .string import StringType
from .union import OrType

__all__ = [
    # Base
    "Type",
    "TypeTag",
    # Built-in types
    "AnyType",
    "ArrayType",
    "BooleanType",
    "CollectionType",
    "CustomClassType",
    "DateType",
    "ModelType",
    "ModelUnion",
    "NumberType",
    "ObjectType",
    "OrType",
    "StringType",
    # Generic values
    "value_to_json",
    "clone_value",
    "equal_values",
    # Registry
    "TypeRegistry",
    "get_type_registry",
    "register_builtin_types",
    "reset_type_registry",
]
