"""
Traversal stacks for cycle-safe equality, cloning and JSON projection.

Each top-level ``equal()``, ``clone()`` or ``to_json()`` call creates one
stack and threads it through the whole traversal. Stacks are keyed by
object identity, never by ``__eq__`` or ``__hash__``, and they keep a
reference to every entry so ids stay valid for the stack's lifetime.

Invariants:
    - Stacks are never shared between top-level calls
    - EqualStack answers "was this self value already paired, and with what"
    - CloneStack maps every original compound value to exactly one clone
    - JsonStack holds only the current projection path
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Tuple

from .errors import CircularStructureToJSONError


class EqualStack:
    """Pairs of (self value, other value) already under comparison.

    Revisiting a self value paired with the same other value counts as
    equal, which terminates comparison of cyclic graphs.
    """

    def __init__(self) -> None:
        self._pairs: Dict[int, Tuple[Any, Any]] = {}

    def get(self, self_value: Any) -> Any:
        """Other value paired with ``self_value``, or None."""
        pair = self._pairs.get(id(self_value))
        if pair is None:
            return None
        return pair[1]

    def has(self, self_value: Any) -> bool:
        return id(self_value) in self._pairs

    def add(self, self_value: Any, other_value: Any) -> None:
        self._pairs[id(self_value)] = (self_value, other_value)


class CloneStack:
    """Original compound value -> its clone."""

    def __init__(self) -> None:
        self._clones: Dict[int, Tuple[Any, Any]] = {}

    def get(self, original: Any) -> Any:
        pair = self._clones.get(id(original))
        if pair is None:
            return None
        return pair[1]

    def has(self, original: Any) -> bool:
        return id(original) in self._clones

    def add(self, original: Any, clone: Any) -> None:
        self._clones[id(original)] = (original, clone)


class JsonStack:
    """Records and collections on the current projection path."""

    def __init__(self) -> None:
        self._path: List[Any] = []

    def __contains__(self, value: Any) -> bool:
        return any(item is value for item in self._path)

    @contextmanager
    def visit(self, value: Any) -> Iterator[None]:
        """Push ``value`` on the path for the duration of the block.

        Raises:
            CircularStructureToJSONError: If value is already on the path
        """
        if value in self:
            raise CircularStructureToJSONError()
        self._path.append(value)
        try:
            yield
        finally:
            self._path.pop()
