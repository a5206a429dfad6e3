"""In-process storage backend."""

from __future__ import annotations

import copy
from typing import Any


class MemoryStorage:
    """Dict-backed storage, mainly for tests and ephemeral sessions.

    Values are deep-copied on the way in and out, so callers cannot mutate
    stored records by accident (matters with ``serialize=False``).
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    async def get_item(self, key: str) -> Any:
        return copy.deepcopy(self._data.get(key))

    async def set_item(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    async def get_all_keys(self) -> list[str]:
        return list(self._data)

    def snapshot(self) -> dict[str, Any]:
        """Synchronous copy of everything stored."""
        return copy.deepcopy(self._data)
