"""
Error types for recordkit.

This module defines all exception types raised by records, collections,
type descriptors and the type registry:
- RecordError: Base exception
- Schema errors: raised while a record class resolves its schema
- Value errors: raised while a record normalizes and validates input
- Collection errors: raised by collection operations

Invariants:
    - All errors inherit from RecordError
    - Every error has a stable code and a details dict
    - Message text comes from the catalog in recordkit.messages
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .messages import format_message


class RecordError(Exception):
    """Base exception for all recordkit errors.

    Attributes:
        message: Error message in the active language
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "RECORD_ERROR"
        self.details = details or {}

    def add_key_prefix(self, key: str) -> None:
        """Prefix the message with the field name that caused it."""
        self.message = f"{key}: {self.message}"
        self.args = (self.message,)

    def __str__(self) -> str:
        return self.message


# Schema errors


class SchemaNotDeclaredError(RecordError):
    """Record class has no structure() classmethod."""

    def __init__(self, class_name: str) -> None:
        details = {"class_name": class_name}
        super().__init__(
            format_message("SCHEMA_NOT_DECLARED", details),
            code="SCHEMA_NOT_DECLARED",
            details=details,
        )
        self.class_name = class_name


class InvalidSchemaError(RecordError):
    """structure() returned something that is not a schema.

    Raised when:
    - structure() does not return a mapping
    - More than one field is declared primary
    """

    def __init__(self, class_name: str, reason: str) -> None:
        details = {"class_name": class_name, "reason": reason}
        super().__init__(
            format_message("INVALID_SCHEMA", details),
            code="INVALID_SCHEMA",
            details=details,
        )


class UnknownTypeError(RecordError):
    """No descriptor class is registered for a type tag."""

    def __init__(self, key: str, type_name: Any) -> None:
        details = {"key": key, "type_name": type_name}
        super().__init__(
            format_message("UNKNOWN_TYPE", details),
            code="UNKNOWN_TYPE",
            details=details,
        )
        self.key = key
        self.type_name = type_name


class ReservedPrimaryKeyError(RecordError):
    """Primary key name collides with the record surface."""

    def __init__(self, key: str) -> None:
        details = {"key": key}
        super().__init__(
            format_message("RESERVED_PRIMARY_KEY", details),
            code="RESERVED_PRIMARY_KEY",
            details=details,
        )
        self.key = key


class InvalidTypeParamsError(RecordError):
    """Field description has an unknown or malformed parameter.

    Raised when:
    - A modifier is not supported by the field type
    - A numeric precision is not a number
    - A union has no members
    """

    def __init__(self, reason: str) -> None:
        details = {"reason": reason}
        super().__init__(
            format_message("INVALID_TYPE_PARAMS", details),
            code="INVALID_TYPE_PARAMS",
            details=details,
        )


class ConflictingParametersError(InvalidTypeParamsError):
    """Two mutually exclusive modifiers were both enabled."""

    def __init__(self, first: str, second: str) -> None:
        details = {"first": first, "second": second}
        RecordError.__init__(
            self,
            format_message("CONFLICTING_PARAMETERS", details),
            code="CONFLICTING_PARAMETERS",
            details=details,
        )


class InvalidValidationError(InvalidTypeParamsError):
    """``validate`` is neither a callable nor a compiled regex."""

    def __init__(self, value: str) -> None:
        details = {"value": value}
        RecordError.__init__(
            self,
            format_message("INVALID_VALIDATION", details),
            code="INVALID_VALIDATION",
            details=details,
        )


class InvalidKeyValidationError(InvalidTypeParamsError):
    """``key`` is neither a callable nor a compiled regex."""

    def __init__(self, value: str) -> None:
        details = {"value": value}
        RecordError.__init__(
            self,
            format_message("INVALID_KEY_VALIDATION", details),
            code="INVALID_KEY_VALIDATION",
            details=details,
        )


class DuplicateTypeError(RecordError):
    """Type tag is already registered to another descriptor class."""

    def __init__(self, type_name: str, class_name: str) -> None:
        details = {"type_name": type_name, "class_name": class_name}
        super().__init__(
            format_message("DUPLICATE_TYPE", details),
            code="DUPLICATE_TYPE",
            details=details,
        )


# Value errors


class UnknownPropertyError(RecordError):
    """Key is neither declared nor covered by a wildcard field."""

    def __init__(self, key: str) -> None:
        details = {"key": key}
        super().__init__(
            format_message("UNKNOWN_PROPERTY", details),
            code="UNKNOWN_PROPERTY",
            details=details,
        )
        self.key = key


class InvalidKeyError(RecordError):
    """Wildcard key rejected by the key validator."""

    def __init__(self, key: str) -> None:
        details = {"key": key}
        super().__init__(
            format_message("INVALID_KEY", details),
            code="INVALID_KEY",
            details=details,
        )
        self.key = key


class RequiredError(RecordError):
    """Required field resolved to None."""

    def __init__(self, key: str) -> None:
        details = {"key": key}
        super().__init__(
            format_message("REQUIRED", details),
            code="REQUIRED",
            details=details,
        )
        self.key = key


class ConstValueError(RecordError):
    """Attempt to change a const field after construction."""

    def __init__(self, key: str) -> None:
        details = {"key": key}
        super().__init__(
            format_message("CONST_VALUE", details),
            code="CONST_VALUE",
            details=details,
        )
        self.key = key


class DataShouldBeObjectError(RecordError):
    """Record input is not a mapping."""

    def __init__(self, value: str) -> None:
        details = {"value": value}
        super().__init__(
            format_message("DATA_SHOULD_BE_OBJECT", details),
            code="DATA_SHOULD_BE_OBJECT",
            details=details,
        )


class InvalidValueError(RecordError):
    """Value cannot be normalized or failed validation.

    The message names the field, the expected type (when known) and a
    bounded rendering of the value. When a nested value failed, the
    child's message is appended on a new line.

    Attributes:
        key: Field name (or element position)
        value: Rendered invalid value
        type_name: Human readable expected type
        child: Nested error, if any
    """

    code_name = "INVALID_VALUE"

    def __init__(
        self,
        key: Any,
        value: str,
        type_name: Optional[str] = None,
        child: Optional[RecordError] = None,
    ) -> None:
        details = {"key": key, "value": value, "type_name": type_name}
        template = "INVALID_TYPED_VALUE" if type_name else "INVALID_VALUE"
        message = format_message(template, details)
        if child is not None:
            message = f"{message},\n {child.message}"
            details["child"] = child.message

        super().__init__(message, code=self.code_name, details=details)
        self.key = key
        self.value = value
        self.type_name = type_name
        self.child = child


class InvalidArrayElementError(InvalidValueError):
    """An array element failed its element type."""

    code_name = "INVALID_ARRAY_ELEMENT"


class InvalidObjectElementError(InvalidValueError):
    """A map value failed its element type."""

    code_name = "INVALID_OBJECT_ELEMENT"


class InvalidNestedModelError(InvalidValueError):
    """Nested record could not be constructed from the given data."""

    code_name = "INVALID_NESTED_MODEL"


class NotUniqueError(RecordError):
    """Array declared unique contains a duplicate."""

    def __init__(self, key: str, value: str) -> None:
        details = {"key": key, "value": value}
        super().__init__(
            format_message("NOT_UNIQUE", details),
            code="NOT_UNIQUE",
            details=details,
        )
        self.key = key


class CircularStructureToJSONError(RecordError):
    """Record graph projected to JSON contains a cycle."""

    def __init__(self) -> None:
        super().__init__(
            format_message("CIRCULAR_STRUCTURE", {}),
            code="CIRCULAR_STRUCTURE",
        )


class _CustomClassError(RecordError):
    code_name = ""

    def __init__(self, class_name: str) -> None:
        details = {"class_name": class_name}
        super().__init__(
            format_message(self.code_name, details),
            code=self.code_name,
            details=details,
        )
        self.class_name = class_name


class NoToJSONMethodError(_CustomClassError):
    """Opaque custom value has no to_json hook."""

    code_name = "NO_TO_JSON_METHOD"


class NoCloneMethodError(_CustomClassError):
    """Opaque custom value has no clone hook."""

    code_name = "NO_CLONE_METHOD"


class NoEqualMethodError(_CustomClassError):
    """Opaque custom value has no equal hook."""

    code_name = "NO_EQUAL_METHOD"


# Collection errors


class CollectionModelNotDeclaredError(RecordError):
    """Collection class has neither ``model`` nor ``structure()``."""

    def __init__(self, class_name: str) -> None:
        details = {"class_name": class_name}
        super().__init__(
            format_message("COLLECTION_MODEL_NOT_DECLARED", details),
            code="COLLECTION_MODEL_NOT_DECLARED",
            details=details,
        )


class InvalidModelError(RecordError):
    """Collection row is neither a record nor a mapping."""

    def __init__(self, value: str, model: str) -> None:
        details = {"value": value, "model": model}
        super().__init__(
            format_message("INVALID_MODEL", details),
            code="INVALID_MODEL",
            details=details,
        )


class InvalidSortParamsError(RecordError):
    """sort() got neither a comparator nor field names."""

    def __init__(self, value: str) -> None:
        details = {"value": value}
        super().__init__(
            format_message("INVALID_SORT_PARAMS", details),
            code="INVALID_SORT_PARAMS",
            details=details,
        )
