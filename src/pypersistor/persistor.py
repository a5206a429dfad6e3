"""The persistor engine and the ``persist_store`` entry point."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from pypersistor.config import PersistorConfig
from pypersistor.exceptions import PersistConfigError
from pypersistor.purge import purge_stored_state
from pypersistor.rehydrate import get_stored_state, rehydrate_state
from pypersistor.scheduler import WriteScheduler
from pypersistor.serialization import serializer_for
from pypersistor.state.events import RehydrateEvent
from pypersistor.state.store import Store

_logger = logging.getLogger(__name__)


class Persistor:
    """Incrementally persists a store's state into a storage backend.

    Usage::

        persistor = Persistor(store, PersistorConfig(storage=backend, blacklist={"ui"}))
        ...
        await persistor.flush()

    The persistor subscribes to *store* on construction. Each notification
    queues the top-level keys whose substate changed (by identity) and a
    background task writes them one at a time.
    """

    def __init__(self, store: Store, config: PersistorConfig | None = None) -> None:
        self._store = store
        self._config = config or PersistorConfig()
        self._serializer = serializer_for(self._config)
        self._scheduler = WriteScheduler(store, self._config, serializer=self._serializer)
        self._unsubscribe: Callable[[], None] | None = store.subscribe(self._scheduler.notify)

    async def __aenter__(self) -> Persistor:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        try:
            await self.flush()
        finally:
            await self.close()

    @property
    def config(self) -> PersistorConfig:
        return self._config

    @property
    def paused(self) -> bool:
        return self._scheduler.state.paused

    @property
    def pending_keys(self) -> list[str]:
        """Keys queued for writing, oldest first."""
        return list(self._scheduler.state.queue)

    def pause(self) -> None:
        """Stop queueing changes. Keys already queued keep draining."""
        self._scheduler.state.paused = True

    def resume(self) -> None:
        self._scheduler.state.paused = False

    def rehydrate(self, incoming: Any, *, serial: bool = False) -> Any:
        """Rebuild state from *incoming*, dispatch it and return it.

        Parameters
        ----------
        incoming : Any
            With ``serial=True``, a mapping of key to stored record. Otherwise
            an already-assembled state object.
        serial : bool
            Decode and read-transform each record individually. Keys that
            fail are logged and left out.

        Raises
        ------
        PersistConfigError
            If ``serial`` is requested while ``async_transforms`` is enabled.
        """
        if serial and self._config.async_transforms:
            raise PersistConfigError("Async transforms are not supported with serial rehydration")

        state = rehydrate_state(
            incoming,
            serial=serial,
            accessor=self._config.accessor,
            serializer=self._serializer,
            transforms=self._config.transforms,
        )
        self._store.dispatch(RehydrateEvent(payload=state))
        return state

    async def purge(self, keys: Iterable[str] | None = None) -> list[str]:
        """Remove persisted records (all under the prefix when *keys* is None)."""
        return await purge_stored_state(self._config.storage, self._config.key_prefix, keys)

    async def flush(self) -> None:
        """Wait for every queued key to be written."""
        await self._scheduler.flush()

    async def close(self) -> None:
        """Unsubscribe from the store and stop the drain task."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        await self._scheduler.close()


async def persist_store(
    store: Store,
    config: PersistorConfig | None = None,
    *,
    on_complete: Callable[[Any], None] | None = None,
) -> Persistor:
    """Create a persistor for *store* and restore previously persisted state.

    Changes are not queued while the stored state is loaded. The restored
    state is dispatched as one rehydrate event, then *on_complete* is called
    with it.
    """
    config = config or PersistorConfig()
    persistor = Persistor(store, config)
    persistor.pause()
    try:
        restored = await get_stored_state(config)
    except PersistConfigError:
        raise
    except Exception as exc:  # noqa: BLE001 - backend-specific failures
        _logger.warning("Error restoring stored state, starting empty: %s", exc)
        restored = config.accessor.init()
    persistor.rehydrate(restored)
    persistor.resume()
    if on_complete is not None:
        on_complete(restored)
    return persistor
