"""
Message catalog for recordkit errors.

Every error carries a code; the catalog turns the code plus the error's
details into text in the active language.

Invariants:
    - Every code has a template in every supported language
    - Templates only reference keys present in the error's details

How to change safely:
    - Add a code to every language at once
    - Keep the English text stable, tests match on it
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .config import get_settings

logger = logging.getLogger(__name__)

SUPPORTED_LANGS = ("en", "ru")

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        # Record
        "UNKNOWN_PROPERTY": "unknown property: {key}",
        "SCHEMA_NOT_DECLARED": "static {class_name}.structure() is not declared",
        "INVALID_KEY": "invalid key: {key}",
        "INVALID_VALUE": "invalid {key}: {value}",
        "INVALID_TYPED_VALUE": "invalid {type_name} for {key}: {value}",
        "REQUIRED": "required {key}",
        "CONST_VALUE": "cannot assign to read only property: {key}",
        "DATA_SHOULD_BE_OBJECT": "data must be are object, got: {value}",
        "NOT_UNIQUE": "{key} is not unique: {value}",
        "CIRCULAR_STRUCTURE": "cannot convert circular structure to JSON",
        # Schema
        "UNKNOWN_TYPE": "{key}: unknown type: {type_name}",
        "RESERVED_PRIMARY_KEY": "field {key} cannot be primary key, because it reserved word",
        "INVALID_SCHEMA": "{class_name}: {reason}",
        "INVALID_TYPE_PARAMS": "{reason}",
        "CONFLICTING_PARAMETERS": "conflicting parameters: use only {first} or only {second}",
        "INVALID_VALIDATION": "validate should be function or RegExp: {value}",
        "INVALID_KEY_VALIDATION": "validate key should be function or RegExp: {value}",
        "DUPLICATE_TYPE": "type {type_name} is already registered by {class_name}",
        # Custom classes
        "NO_TO_JSON_METHOD": "cannot convert [object: {class_name}] to json, need toJSON method for this field",
        "NO_CLONE_METHOD": "cannot clone [object: {class_name}], need clone method for this field",
        "NO_EQUAL_METHOD": "cannot equal [object: {class_name}], need equal method for this field",
        # Collection
        "COLLECTION_MODEL_NOT_DECLARED": "{class_name}.model is not declared",
        "INVALID_MODEL": "invalid row {value} for model {model}",
        "INVALID_SORT_PARAMS": "invalid compareFunction or key: {value}",
    },
    "ru": {
        "UNKNOWN_PROPERTY": "неизвестное свойство: {key}",
        "SCHEMA_NOT_DECLARED": "не объявлен метод {class_name}.structure()",
        "INVALID_KEY": "некорректный ключ: {key}",
        "INVALID_VALUE": "некорректное значение: {key}: {value}",
        "INVALID_TYPED_VALUE": "некорректное значение {type_name} для {key}: {value}",
        "REQUIRED": "пропущено обязательное поле: {key}",
        "CONST_VALUE": "невозможно изменить поле только для чтения: {key}",
        "DATA_SHOULD_BE_OBJECT": "ожидается объект data, получено: {value}",
        "NOT_UNIQUE": "{key} содержит повторяющиеся значения: {value}",
        "CIRCULAR_STRUCTURE": "невозможно преобразовать цикличную структуру в JSON",
        "UNKNOWN_TYPE": "{key}: неизвестный тип: {type_name}",
        "RESERVED_PRIMARY_KEY": "поле {key} не может быть первичным ключом, это зарезервированное слово",
        "INVALID_SCHEMA": "{class_name}: {reason}",
        "INVALID_TYPE_PARAMS": "{reason}",
        "CONFLICTING_PARAMETERS": "конфликтующие параметры: используйте только {first} или только {second}",
        "INVALID_VALIDATION": "validate должен быть функцией или RegExp: {value}",
        "INVALID_KEY_VALIDATION": "key должен быть функцией или RegExp: {value}",
        "DUPLICATE_TYPE": "тип {type_name} уже зарегистрирован классом {class_name}",
        "NO_TO_JSON_METHOD": "невозможно преобразовать [object: {class_name}] в json, объявите метод toJSON для этого поля",
        "NO_CLONE_METHOD": "невозможно копировать [object: {class_name}], объявите метод clone для этого поля",
        "NO_EQUAL_METHOD": "невозможно сравнить [object: {class_name}], объявите метод equal для этого поля",
        "COLLECTION_MODEL_NOT_DECLARED": "необходимо объявить атрибут: {class_name}.model",
        "INVALID_MODEL": "некорректные данные {value} для моделей {model}",
        "INVALID_SORT_PARAMS": "некорректное поле или функция сравнения: {value}",
    },
}

_lang: Optional[str] = None


def set_lang(lang: str) -> None:
    """Switch the language of error messages.

    Raises:
        ValueError: If the language is not supported
    """
    global _lang
    if lang not in SUPPORTED_LANGS:
        raise ValueError(f"Unsupported language: {lang!r}, expected one of {SUPPORTED_LANGS}")
    logger.debug(f"Error message language set to {lang}")
    _lang = lang


def get_lang() -> str:
    """Active language, falls back to the configured one."""
    if _lang is not None:
        return _lang
    return get_settings().lang


def reset_lang() -> None:
    """Return to the configured language (for testing only)."""
    global _lang
    _lang = None


def format_message(code: str, details: Dict[str, Any]) -> str:
    """Render the template for ``code`` in the active language."""
    template = MESSAGES[get_lang()].get(code) or MESSAGES["en"][code]
    return template.format(**details)
