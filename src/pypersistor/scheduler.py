"""Debounced, single-flight write scheduling.

Store notifications mark keys dirty; a drain task then writes them one at
a time, ``debounce`` apart, until the queue is empty. At most one
transform/serialize/store sequence runs at any moment per persistor.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from typing import Any

from pypersistor.config import PersistorConfig
from pypersistor.exceptions import StorageWriteError
from pypersistor.serialization import Serializer, serializer_for
from pypersistor.state.detector import detect_changes
from pypersistor.state.store import Store
from pypersistor.transforms import SKIP, apply_write_transforms, apply_write_transforms_async

_logger = logging.getLogger(__name__)


@dataclass
class PersistorState:
    """Mutable state owned by exactly one persistor."""

    last_state: Any
    paused: bool = False
    queue: list[str] = field(default_factory=list)
    timer: asyncio.Task[None] | None = None
    writing: bool = False
    failure: BaseException | None = None


class WriteScheduler:
    """Owns the dirty queue and the drain task for one persistor."""

    def __init__(
        self,
        store: Store,
        config: PersistorConfig,
        *,
        serializer: Serializer | None = None,
    ) -> None:
        self._store = store
        self._config = config
        self._accessor = config.accessor
        self._key_filter = config.key_filter
        self._serializer = serializer or serializer_for(config)
        self.state = PersistorState(last_state=config.accessor.init())

    @property
    def is_idle(self) -> bool:
        return self.state.timer is None

    # ------------------------------------------------------------------
    # Change detection
    # ------------------------------------------------------------------

    def notify(self) -> None:
        """Store listener: queue dirty keys and arm the drain if needed."""
        if self.state.paused:
            return

        current = self._store.get_state()
        added = detect_changes(
            self.state.last_state,
            current,
            key_filter=self._key_filter,
            accessor=self._accessor,
            queue=self.state.queue,
        )
        if added:
            _logger.debug("Queued dirty key(s) %s", added)

        if self.state.queue and self.state.timer is None:
            self._arm()

        # Always compare the next notification against this one, even
        # while a drain is still in progress.
        self.state.last_state = current

    # ------------------------------------------------------------------
    # Drain cycle
    # ------------------------------------------------------------------

    def _arm(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            _logger.debug("No running event loop; %d key(s) stay queued", len(self.state.queue))
            return
        task = loop.create_task(self._drain(), name="pypersistor-drain")
        task.add_done_callback(self._on_drain_done)
        self.state.timer = task

    def _on_drain_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.state.failure = exc
            _logger.error("Persist drain aborted with %d key(s) pending", len(self.state.queue), exc_info=exc)

    async def _drain(self) -> None:
        interval = self._config.debounce_seconds
        try:
            while True:
                await asyncio.sleep(interval)
                # Never start a second write while one is still completing.
                if self.state.writing:
                    continue
                if not self.state.queue:
                    return
                await self._write_next()
        finally:
            if self.state.timer is asyncio.current_task():
                self.state.timer = None

    async def _write_next(self) -> None:
        key = self.state.queue.pop(0)
        self.state.writing = True
        try:
            # Read at pop time: the latest value wins, intermediate ones are
            # never written separately.
            value = self._accessor.get(self._store.get_state(), key)
            if self._config.async_transforms:
                end_state = await apply_write_transforms_async(self._config.transforms, value, key)
            else:
                end_state = apply_write_transforms(self._config.transforms, value, key)
            if end_state is SKIP:
                _logger.debug("Transforms produced no value for key %r; not persisted", key)
                return

            record = self._serializer.dumps(end_state, key=key)
            if record is SKIP:
                return

            await self._set_item(key, record)
        finally:
            self.state.writing = False

    async def _set_item(self, key: str, record: Any) -> None:
        storage_key = self._config.storage_key(key)
        timeout = self._config.write_timeout
        try:
            if timeout is None:
                await self._config.storage.set_item(storage_key, record)
            else:
                await asyncio.wait_for(self._config.storage.set_item(storage_key, record), timeout)
        except TimeoutError:
            error = StorageWriteError(f"write of {storage_key!r} timed out after {timeout}s", key=key)
            _logger.warning("Error storing data for key %r: %s", key, error)
        except Exception as exc:  # noqa: BLE001 - backend-specific failures
            _logger.warning("Error storing data for key %r: %s", key, exc)
        else:
            _logger.debug("Stored %r", storage_key)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def flush(self) -> None:
        """Wait until the queue has drained.

        Arms a drain if keys are pending without one (e.g. they were queued
        outside an event loop). Re-raises an error that aborted the drain.
        """
        failure = self.state.failure
        if failure is not None:
            # Reported once; the keys still queued drain on the next flush.
            self.state.failure = None
            raise failure

        if self.state.timer is None and self.state.queue:
            self._arm()
        timer = self.state.timer
        if timer is not None:
            try:
                await asyncio.shield(timer)
            except Exception:
                self.state.failure = None
                raise

    async def close(self) -> None:
        """Cancel the drain task; queued keys are left unwritten."""
        timer = self.state.timer
        if timer is None:
            return
        timer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await timer
        self.state.timer = None
