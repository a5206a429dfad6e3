"""Removal of persisted records."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pypersistor.storage.base import list_storage_keys

_logger = logging.getLogger(__name__)


async def purge_stored_state(storage: Any, key_prefix: str, keys: Iterable[str] | None = None) -> list[str]:
    """Remove persisted records and return the storage keys removed.

    With *keys*, only ``key_prefix + key`` for each is removed. Without,
    every enumerated storage key under *key_prefix* is removed. A failing
    removal is logged and does not stop the others.
    """
    if keys is None:
        targets = [k for k in await list_storage_keys(storage) if k.startswith(key_prefix)]
    else:
        targets = [f"{key_prefix}{key}" for key in keys]

    removed: list[str] = []
    for storage_key in targets:
        try:
            await storage.remove_item(storage_key)
        except Exception as exc:  # noqa: BLE001 - backend-specific failures
            _logger.warning("Error purging stored record %r: %s", storage_key, exc)
            continue
        removed.append(storage_key)
    _logger.debug("Purged %d stored record(s) under prefix %r", len(removed), key_prefix)
    return removed
