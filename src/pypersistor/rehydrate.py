"""Reconstruction of state from persisted records."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from pypersistor._logfmt import summarize_for_log
from pypersistor.config import PersistorConfig
from pypersistor.exceptions import RehydrateKeyError
from pypersistor.serialization import Serializer, serializer_for
from pypersistor.state.accessor import StateAccessor
from pypersistor.storage.base import list_storage_keys
from pypersistor.transforms import Transformer, apply_read_transforms

_logger = logging.getLogger(__name__)

_MISSING = object()


def _restore_key(
    record: Any,
    key: str,
    *,
    serializer: Serializer,
    transforms: Sequence[Transformer],
) -> Any:
    """Deserialize and read-transform one record; ``_MISSING`` on failure."""
    try:
        return apply_read_transforms(transforms, serializer.loads(record), key)
    except Exception as exc:  # noqa: BLE001 - corrupt records and user transforms
        error = RehydrateKeyError(f"{type(exc).__name__}: {exc}", key=key)
        _logger.warning(
            "Error rehydrating data for key %r (record %r): %s",
            key,
            summarize_for_log(record),
            error,
        )
        return _MISSING


def rehydrate_state(
    incoming: Any,
    *,
    serial: bool,
    accessor: StateAccessor,
    serializer: Serializer,
    transforms: Sequence[Transformer],
) -> Any:
    """Turn *incoming* into application state.

    ``serial=True``: *incoming* maps keys to stored records; each is decoded
    independently and a failing key is left out. Otherwise *incoming* is
    already assembled state and is returned as-is.
    """
    if not serial:
        return incoming

    state = accessor.init()
    for key, record in accessor.iterate(incoming):
        value = _restore_key(record, key, serializer=serializer, transforms=transforms)
        if value is _MISSING:
            continue
        state = accessor.set(state, key, value)
    return state


async def get_stored_state(config: PersistorConfig) -> Any:
    """Read back everything persisted under ``config.key_prefix``.

    Records whose key is rejected by the whitelist/blacklist are ignored.
    A record that cannot be read, decoded or transformed is logged and
    omitted.
    """
    storage = config.storage
    prefix = config.key_prefix
    key_filter = config.key_filter
    serializer = serializer_for(config)
    accessor = config.accessor

    state = accessor.init()
    for storage_key in await list_storage_keys(storage):
        if not storage_key.startswith(prefix):
            continue
        key = storage_key[len(prefix) :]
        if not key_filter.allows(key):
            continue
        try:
            record = await storage.get_item(storage_key)
        except Exception as exc:  # noqa: BLE001 - backend-specific failures
            _logger.warning("Error reading stored record %r: %s", storage_key, exc)
            continue
        if record is None:
            continue
        value = _restore_key(record, key, serializer=serializer, transforms=config.transforms)
        if value is _MISSING:
            continue
        state = accessor.set(state, key, value)
    return state
