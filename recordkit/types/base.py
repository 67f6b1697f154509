"""
Base type descriptor for recordkit fields.

A type descriptor is the contract of one field: how input is normalized,
how the normalized value is validated, projected to JSON, cloned and
compared, and how its type is named in error messages.

Descriptors are built once per record class by the TypeRegistry and are
shared by every instance of that class. They are frozen dataclasses and
hold no per-record state.

Invariants:
    - A primary field is always required
    - None is never validated, projected, cloned or compared by hooks
    - Custom hooks only ever see non-None values

How to change safely:
    - New descriptor parameters go into the subclass ``options`` tuple
    - Override the underscored ``_prepare``/``_to_json``/``_clone``/``_equal``
      methods, the public ones apply None handling and custom hooks
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Mapping, Optional, Tuple

from ..errors import (
    ConflictingParametersError,
    InvalidKeyValidationError,
    InvalidTypeParamsError,
    InvalidValidationError,
    InvalidValueError,
)
from ..stack import CloneStack, EqualStack, JsonStack
from ..utils import invalid_value_as_string, strict_equal


class TypeTag(Enum):
    """Built-in field types.

    Extensions registered through ``Model.register_type`` use their own
    plain string tags.
    """

    ANY = "any"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    DATE = "date"
    ARRAY = "array"
    OBJECT = "object"
    MODEL = "model"
    COLLECTION = "collection"
    CUSTOM = "custom"
    OR = "or"

    @classmethod
    def from_str(cls, value: str) -> TypeTag:
        """Convert a tag string to TypeTag.

        ``"*"`` is an alias of ``"any"``.

        Raises:
            ValueError: If value is not a built-in tag
        """
        if value == "*":
            return cls.ANY
        for tag in cls:
            if tag.value == value:
                return tag
        valid = [t.value for t in cls]
        raise ValueError(f"Invalid type tag '{value}'. Valid tags: {valid}")


# description key -> dataclass attribute
COMMON_PARAMS: Dict[str, str] = {
    "type": "type",
    "required": "required",
    "primary": "primary",
    "const": "const",
    "enum": "enum",
    "default": "default_value",
    "prepare": "prepare_hook",
    "validate": "validate_hook",
    "key": "key_hook",
    "to_json": "to_json_hook",
    "clone": "clone_hook",
    "equal": "equal_hook",
}


@dataclass(frozen=True, eq=False)
class Type:
    """Contract of one field.

    Attributes:
        type: Tag this descriptor was registered under
        required: None is rejected
        primary: Field is the record's primary key
        const: Value cannot change after construction
        enum: Allowed values
        default_value: Default value or zero-argument factory
        prepare_hook: ``prepare(value, key, model)`` applied after normalization
        validate_hook: ``validate(value)`` callable or compiled regex
        key_hook: ``key(name)`` callable or compiled regex, wildcard fields only
        to_json_hook: ``to_json(value)``
        clone_hook: ``clone(value)``
        equal_hook: ``equal(self_value, other_value)``
    """

    tag: ClassVar[str] = ""
    options: ClassVar[Tuple[str, ...]] = ()

    type: str = ""
    required: bool = False
    primary: bool = False
    const: bool = False
    enum: Optional[Tuple[Any, ...]] = None
    default_value: Any = None
    prepare_hook: Optional[Callable[..., Any]] = None
    validate_hook: Any = None
    key_hook: Any = None
    to_json_hook: Optional[Callable[[Any], Any]] = None
    clone_hook: Optional[Callable[[Any], Any]] = None
    equal_hook: Optional[Callable[[Any, Any], bool]] = None

    def __post_init__(self) -> None:
        """Validate the common parameters."""
        if not self.type:
            self._set("type", self.tag)
        if self.primary:
            self._set("required", True)

        if self.enum is not None:
            if not isinstance(self.enum, (list, tuple, set, frozenset)):
                raise InvalidTypeParamsError(
                    f"enum should be a list: {invalid_value_as_string(self.enum)}"
                )
            self._set("enum", tuple(self.enum))

        if self.validate_hook is not None and not _is_rule(self.validate_hook):
            raise InvalidValidationError(invalid_value_as_string(self.validate_hook))
        if self.key_hook is not None and not _is_rule(self.key_hook):
            raise InvalidKeyValidationError(invalid_value_as_string(self.key_hook))

        for name in ("prepare", "to_json", "clone", "equal"):
            hook = getattr(self, f"{name}_hook")
            if hook is not None and not callable(hook):
                raise InvalidTypeParamsError(
                    f"{name} should be function: {invalid_value_as_string(hook)}"
                )

    @classmethod
    def from_description(cls, description: Mapping[str, Any]) -> Type:
        """Build a descriptor from a canonical description mapping.

        Raises:
            InvalidTypeParamsError: If the description has an unknown parameter
        """
        kwargs: Dict[str, Any] = {}
        for name, value in description.items():
            if name in COMMON_PARAMS:
                kwargs[COMMON_PARAMS[name]] = value
            elif name in cls.options:
                kwargs[name] = value
            else:
                raise InvalidTypeParamsError(
                    f"unknown parameter {name} for type {description.get('type')}"
                )
        return cls(**kwargs)

    @classmethod
    def prepare_description(cls, description: Dict[str, Any], key: str, registry: Any) -> None:
        """Canonicalize a description in place before resolution.

        Every registered descriptor class sees every description, in
        registration order. The default does nothing.
        """

    def _set(self, name: str, value: Any) -> None:
        object.__setattr__(self, name, value)

    def _exclusive(self, first: str, second: str) -> None:
        if getattr(self, first) and getattr(self, second):
            raise ConflictingParametersError(first, second)

    # Field contract

    def get_default(self) -> Any:
        if callable(self.default_value):
            return self.default_value()
        return self.default_value

    def prepare(self, value: Any, key: Any, model: Any) -> Any:
        """Normalize raw input, then apply the custom prepare hook."""
        value = self._prepare(value, key, model)
        if value is not None and self.prepare_hook is not None:
            value = self.prepare_hook(value, key, model)
        return value

    def validate(self, value: Any, key: Any) -> bool:
        """Check enum and custom validator. None is always valid here."""
        if value is None:
            return True

        if self.enum is not None:
            if not any(strict_equal(value, item) for item in self.enum):
                return False

        if self.validate_hook is not None:
            return _check_rule(self.validate_hook, value)

        return True

    def validate_key(self, key: str) -> bool:
        if self.key_hook is None:
            return True
        return _check_rule(self.key_hook, key)

    def to_json(self, value: Any, stack: Optional[JsonStack] = None) -> Any:
        if value is None:
            return None
        if self.to_json_hook is not None:
            return self.to_json_hook(value)
        return self._to_json(value, stack if stack is not None else JsonStack())

    def clone(self, value: Any, stack: Optional[CloneStack] = None) -> Any:
        if value is None:
            return None
        if self.clone_hook is not None:
            return self.clone_hook(value)
        return self._clone(value, stack if stack is not None else CloneStack())

    def equal(self, self_value: Any, other_value: Any, stack: Optional[EqualStack] = None) -> bool:
        if self_value is None or other_value is None:
            return self_value is other_value
        if self.equal_hook is not None:
            return bool(self.equal_hook(self_value, other_value))
        return self._equal(self_value, other_value, stack if stack is not None else EqualStack())

    def same(self, old_value: Any, new_value: Any) -> bool:
        """Whether a set() from ``old_value`` to ``new_value`` is a no-op."""
        if old_value is None or new_value is None:
            return old_value is new_value
        return self.equal(old_value, new_value, EqualStack())

    def type_as_string(self) -> str:
        return self.type

    # Overridable behavior

    def _prepare(self, value: Any, key: Any, model: Any) -> Any:
        return value

    def _to_json(self, value: Any, stack: JsonStack) -> Any:
        return value

    def _clone(self, value: Any, stack: CloneStack) -> Any:
        return value

    def _equal(self, self_value: Any, other_value: Any, stack: EqualStack) -> bool:
        return strict_equal(self_value, other_value)

    def _invalid(self, value: Any, key: Any) -> InvalidValueError:
        return InvalidValueError(key, invalid_value_as_string(value), self.type_as_string())


def _is_rule(rule: Any) -> bool:
    return callable(rule) or isinstance(rule, re.Pattern)


def _check_rule(rule: Any, value: Any) -> bool:
    if isinstance(rule, re.Pattern):
        return rule.search(value if isinstance(value, str) else str(value)) is not None
    return bool(rule(value))
