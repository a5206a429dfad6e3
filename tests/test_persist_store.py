from __future__ import annotations

import json
from typing import Any

import pytest

from pypersistor.config import PersistorConfig
from pypersistor.persistor import persist_store
from pypersistor.state.events import RehydrateEvent
from pypersistor.state.store import ObservableStore
from pypersistor.storage.memory import MemoryStorage


def _reducer(state: dict[str, Any], event: Any) -> dict[str, Any]:
    if isinstance(event, RehydrateEvent):
        return {**state, **event.payload}
    if event["type"] == "set":
        return {**state, event["key"]: event["value"]}
    return state


@pytest.mark.asyncio
async def test_restores_then_persists_new_changes() -> None:
    storage = MemoryStorage({"p:todos": json.dumps(["saved"])})
    store = ObservableStore(_reducer, {"todos": [], "ui": {"open": False}})
    completed: list[Any] = []

    persistor = await persist_store(
        store,
        PersistorConfig(storage=storage, key_prefix="p:", blacklist={"ui"}),
        on_complete=completed.append,
    )

    assert store.get_state()["todos"] == ["saved"]
    assert completed == [{"todos": ["saved"]}]
    assert not persistor.paused
    # Restoring does not queue writes.
    assert persistor.pending_keys == []

    store.dispatch({"type": "set", "key": "todos", "value": ["saved", "new"]})
    await persistor.flush()

    assert json.loads(storage.snapshot()["p:todos"]) == ["saved", "new"]
    assert "p:ui" not in storage.snapshot()
    await persistor.close()


@pytest.mark.asyncio
async def test_restore_failure_starts_empty() -> None:
    class _Broken(MemoryStorage):
        async def get_all_keys(self) -> list[str]:
            raise OSError("unavailable")

    store = ObservableStore(_reducer, {"todos": []})

    persistor = await persist_store(store, PersistorConfig(storage=_Broken()))

    assert store.get_state() == {"todos": []}
    await persistor.close()
