"""
Unit tests for the event emitter.

Tests cover:
- on/once/off subscription
- emit delivery order and return value
- Changes to the listener list during emit
"""

from types import MappingProxyType

import pytest

from recordkit import ChangeEvent, EventEmitter


class TestEventEmitter:
    """Tests for EventEmitter."""

    def test_on_and_emit(self):
        """Listeners get the emitted arguments, in registration order."""
        emitter = EventEmitter()
        log = []
        emitter.on("ping", lambda value: log.append(("first", value)))
        emitter.on("ping", lambda value: log.append(("second", value)))

        delivered = emitter.emit("ping", 1)

        assert delivered is True
        assert log == [("first", 1), ("second", 1)]

    def test_emit_without_listeners(self):
        """emit returns False when nobody listens."""
        assert EventEmitter().emit("ping") is False

    def test_on_is_chainable(self):
        """on, once and off return the emitter."""
        emitter = EventEmitter()

        assert emitter.on("a", print) is emitter
        assert emitter.once("a", print) is emitter
        assert emitter.off("a", print) is emitter

    def test_once(self):
        """once listeners are delivered a single time."""
        emitter = EventEmitter()
        log = []
        emitter.once("ping", log.append)

        emitter.emit("ping", 1)
        emitter.emit("ping", 2)

        assert log == [1]
        assert emitter.listener_count("ping") == 0

    def test_off_once_listener(self):
        """once listeners can be removed by the original callable."""
        emitter = EventEmitter()
        log = []
        emitter.once("ping", log.append)

        emitter.off("ping", log.append)
        emitter.emit("ping", 1)

        assert log == []

    def test_off_removes_one_registration(self):
        """off removes the first matching registration only."""
        emitter = EventEmitter()
        log = []
        emitter.on("ping", log.append)
        emitter.on("ping", log.append)

        emitter.off("ping", log.append)
        emitter.emit("ping", 1)

        assert log == [1]

    def test_off_all(self):
        """off without a listener clears the event."""
        emitter = EventEmitter()
        emitter.on("ping", print)
        emitter.on("ping", repr)

        emitter.off("ping")

        assert emitter.listeners("ping") == []

    def test_unsubscribe_during_emit(self):
        """Listeners removed during emit still get the current event."""
        emitter = EventEmitter()
        log = []

        def first(value):
            log.append("first")
            emitter.off("ping", second)

        def second(value):
            log.append("second")

        emitter.on("ping", first)
        emitter.on("ping", second)

        emitter.emit("ping", 1)
        emitter.emit("ping", 2)

        assert log == ["first", "second", "first"]

    def test_listener_error_propagates(self):
        """Exceptions stop delivery and reach the emitter's caller."""
        emitter = EventEmitter()
        log = []

        def fail(value):
            raise RuntimeError("nope")

        emitter.on("ping", fail)
        emitter.on("ping", log.append)

        with pytest.raises(RuntimeError, match="nope"):
            emitter.emit("ping", 1)
        assert log == []


class TestChangeEvent:
    """Tests for ChangeEvent."""

    def test_changes_are_read_only(self):
        """create() freezes a copy of the changes."""
        changes = {"name": "Alice"}

        event = ChangeEvent.create(model=None, prev=MappingProxyType({}), changes=changes)
        changes["name"] = "Bob"

        assert isinstance(event.changes, MappingProxyType)
        assert event.changes["name"] == "Alice"
