"""Per-key dirtiness detection between two snapshots."""

from __future__ import annotations

from typing import Any

from pypersistor.filters import KeyFilter
from pypersistor.state.accessor import StateAccessor


def detect_changes(
    previous: Any,
    current: Any,
    *,
    key_filter: KeyFilter,
    accessor: StateAccessor,
    queue: list[str],
) -> list[str]:
    """Append keys whose substate changed to *queue*; return the new ones.

    Substates are compared by identity only. Mutating a substate in place
    keeps the same object, so such a change is never seen as dirty.
    A key already waiting in *queue* is not added twice.
    """
    added: list[str] = []
    for key, substate in accessor.iterate(current):
        if not key_filter.allows(key):
            continue
        if accessor.get(previous, key) is substate:
            continue
        if key in queue:
            continue
        queue.append(key)
        added.append(key)
    return added
