"""
Helpers for declaring fields.

Field descriptions are plain mappings, so ``structure()`` can return
them directly. These helpers spell out intent where shorthand would be
ambiguous, e.g. a class that should be treated as an opaque value rather
than a nested record.

Example:
    >>> class Order(Model):
    ...     @classmethod
    ...     def structure(cls):
    ...         return {
    ...             "id": field("number", primary=True),
    ...             "tags": array_of("string", unique=True),
    ...             "buyer": record_of(User, required=True),
    ...             "items": collection_of(OrderItems, null_as_empty=True),
    ...             "paid_with": custom_of(Decimal),
    ...             "ref": one_of("number", "string"),
    ...         }
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

from .types.base import TypeTag


def field(type: Any, **params: Any) -> Dict[str, Any]:
    """``{"type": type, **params}``"""
    return {"type": type, **params}


def array_of(element: Any = "any", **params: Any) -> Dict[str, Any]:
    return {"type": TypeTag.ARRAY.value, "element": element, **params}


def mapping_of(element: Any = "any", **params: Any) -> Dict[str, Any]:
    """Object field whose values all have the ``element`` type."""
    return {"type": TypeTag.OBJECT.value, "element": element, **params}


def record_of(
    *models: type,
    pick: Optional[Callable[[Mapping], type]] = None,
    **params: Any,
) -> Dict[str, Any]:
    """Nested record field; several classes with ``pick`` make a union."""
    description: Dict[str, Any] = {
        "type": TypeTag.MODEL.value,
        "model": models[0] if models else None,
        "models": models,
        **params,
    }
    if pick is not None:
        description["pick"] = pick
    return description


def collection_of(collection: type, **params: Any) -> Dict[str, Any]:
    return {"type": TypeTag.COLLECTION.value, "collection": collection, **params}


def custom_of(cls: type, **params: Any) -> Dict[str, Any]:
    """Opaque field holding instances of ``cls``."""
    return {"type": TypeTag.CUSTOM.value, "instance_of": cls, **params}


def one_of(*types: Any, **params: Any) -> Dict[str, Any]:
    """Union field: the first type that accepts a value wins."""
    return {"type": TypeTag.OR.value, "or": list(types), **params}
