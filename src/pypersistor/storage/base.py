"""Structural storage interface used by the persistor.

Having a protocol here makes it easy to pass test doubles or third-party
key-value clients while the engine stays backend-agnostic. Failures are
reported by raising from the coroutine.
"""

from __future__ import annotations

from typing import Any, Protocol

from pypersistor.exceptions import PersistConfigError


class StorageBackend(Protocol):
    async def get_item(self, key: str) -> Any:
        ...

    async def set_item(self, key: str, value: Any) -> None:
        ...

    async def remove_item(self, key: str) -> None:
        ...

    async def get_all_keys(self) -> list[str]:
        """Enumerate stored keys. Backends may name this ``keys`` instead."""
        ...


async def list_storage_keys(storage: Any) -> list[str]:
    """Enumerate *storage*, accepting either ``get_all_keys`` or ``keys``."""
    lister = getattr(storage, "get_all_keys", None) or getattr(storage, "keys", None)
    if lister is None:
        raise PersistConfigError(
            f"{type(storage).__name__} cannot enumerate keys (needs get_all_keys() or keys())"
        )
    return list(await lister())
