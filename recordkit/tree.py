"""
Parent links and the walker handle used by record traversal.

A record or collection that is stored in another record's field gets that
record as its parent. The link lives in a weak side-table, not on the
child: it never keeps either side alive, never shows up in ``data`` and
is ignored by equality, cloning and JSON projection.

Invariants:
    - Links made while an owner prepares a change are held back and
      applied only when that change commits
    - A failed or validation-only change leaves every parent link as it was
"""

from __future__ import annotations

import weakref
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

_parents: "weakref.WeakKeyDictionary[Any, weakref.ReferenceType[Any]]" = (
    weakref.WeakKeyDictionary()
)

# owner id -> children waiting for the owner's commit
_pending: Dict[int, List[Any]] = {}


def set_parent(child: Any, parent: Any) -> None:
    _parents[child] = weakref.ref(parent)


def link_parent(child: Any, parent: Any) -> None:
    """Make ``parent`` the parent of ``child``, deferred while it prepares a change."""
    pending = _pending.get(id(parent))
    if pending is None:
        set_parent(child, parent)
    else:
        pending.append(child)


@contextmanager
def deferred_links(owner: Any) -> Iterator[List[Any]]:
    """Collect the children linked to ``owner`` inside the block.

    The caller applies them with ``set_parent`` once its change commits.
    """
    previous = _pending.get(id(owner))
    children: List[Any] = []
    _pending[id(owner)] = children
    try:
        yield children
    finally:
        if previous is None:
            del _pending[id(owner)]
        else:
            _pending[id(owner)] = previous


def get_parent(child: Any) -> Optional[Any]:
    """Parent of ``child``, or None when unset or already collected."""
    ref = _parents.get(child)
    if ref is None:
        return None
    return ref()


class Walker:
    """Handle passed to ``walk()`` visitors.

    ``exit()`` stops the whole walk after the current visitor returns.
    ``skip()`` keeps the walk going but does not descend into the record
    that was just visited.
    """

    def __init__(self) -> None:
        self.exited = False
        self.skipped = False

    def exit(self) -> None:
        self.exited = True

    def skip(self) -> None:
        self.skipped = True
