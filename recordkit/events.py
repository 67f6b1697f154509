"""
Synchronous event emitter used by records and collections.

Listeners run in-line, in registration order, on the caller's thread.
An exception raised by a listener propagates to the code that triggered
the event.

Events:
    Record:
        "change:<key>"  one per changed field, in change order
        "change"        once per committed set()
    Collection:
        "add"           one per inserted record
        "remove"        one per removed record
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional

if TYPE_CHECKING:
    from .collection import Collection
    from .model import Model

Listener = Callable[..., Any]


@dataclass(frozen=True)
class ChangeEvent:
    """Payload of "change" and "change:<key>" events.

    Attributes:
        model: The record that changed
        prev: Snapshot before the change
        changes: Changed keys mapped to their new values
    """

    model: "Model"
    prev: Mapping[str, Any]
    changes: Mapping[str, Any]

    @classmethod
    def create(
        cls, model: "Model", prev: Mapping[str, Any], changes: Dict[str, Any]
    ) -> "ChangeEvent":
        return cls(model=model, prev=prev, changes=MappingProxyType(dict(changes)))


@dataclass(frozen=True)
class CollectionEvent:
    """Payload of collection "add" and "remove" events."""

    type: str
    model: "Model"
    collection: "Collection"


class EventEmitter:
    """Minimal on/once/off/emit event bus."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, event: str, listener: Listener) -> "EventEmitter":
        """Subscribe ``listener`` to ``event``."""
        self._listeners.setdefault(event, []).append(listener)
        return self

    def once(self, event: str, listener: Listener) -> "EventEmitter":
        """Subscribe ``listener`` for a single delivery."""

        def wrapper(*args: Any) -> Any:
            self.off(event, wrapper)
            return listener(*args)

        wrapper.listener = listener  # type: ignore[attr-defined]
        return self.on(event, wrapper)

    def off(self, event: str, listener: Optional[Listener] = None) -> "EventEmitter":
        """Unsubscribe ``listener``, or every listener of ``event``."""
        if listener is None:
            self._listeners.pop(event, None)
            return self

        listeners = self._listeners.get(event, [])
        for index, current in enumerate(listeners):
            if current == listener or getattr(current, "listener", None) == listener:
                del listeners[index]
                break
        if not listeners:
            self._listeners.pop(event, None)
        return self

    def emit(self, event: str, *args: Any) -> bool:
        """Call every listener of ``event``. Returns True if there were any."""
        listeners = list(self._listeners.get(event, ()))
        for listener in listeners:
            listener(*args)
        return bool(listeners)

    def listeners(self, event: str) -> List[Listener]:
        return list(self._listeners.get(event, ()))

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))
