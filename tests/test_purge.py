from __future__ import annotations

import logging
from typing import Any

import pytest

from pypersistor.config import PersistorConfig
from pypersistor.exceptions import PersistConfigError
from pypersistor.persistor import Persistor
from pypersistor.purge import purge_stored_state
from pypersistor.state.store import ObservableStore
from pypersistor.storage.memory import MemoryStorage


def _store() -> ObservableStore:
    return ObservableStore(lambda state, event: state, {})


@pytest.mark.asyncio
async def test_purge_named_keys_only() -> None:
    storage = MemoryStorage({"p:a": "1", "p:b": "2", "p:c": "3"})
    persistor = Persistor(_store(), PersistorConfig(storage=storage, key_prefix="p:"))

    removed = await persistor.purge(["a"])

    assert removed == ["p:a"]
    assert storage.snapshot() == {"p:b": "2", "p:c": "3"}


@pytest.mark.asyncio
async def test_purge_everything_under_prefix() -> None:
    storage = MemoryStorage({"p:a": "1", "p:b": "2", "unrelated": "x"})
    persistor = Persistor(_store(), PersistorConfig(storage=storage, key_prefix="p:"))

    await persistor.purge()

    assert storage.snapshot() == {"unrelated": "x"}


@pytest.mark.asyncio
async def test_purge_all_with_empty_prefix_clears_storage() -> None:
    storage = MemoryStorage({"a": "1", "b": "2"})

    await purge_stored_state(storage, "")

    assert storage.snapshot() == {}


@pytest.mark.asyncio
async def test_purge_uses_keys_method_when_get_all_keys_missing() -> None:
    class _KeysOnly:
        def __init__(self) -> None:
            self.data = {"p:a": "1", "p:b": "2"}

        async def keys(self) -> list[str]:
            return list(self.data)

        async def remove_item(self, key: str) -> None:
            del self.data[key]

    storage = _KeysOnly()

    await purge_stored_state(storage, "p:")

    assert storage.data == {}


@pytest.mark.asyncio
async def test_purge_without_enumeration_is_a_config_error() -> None:
    class _NoEnumeration:
        async def remove_item(self, key: str) -> None:
            pass

    with pytest.raises(PersistConfigError):
        await purge_stored_state(_NoEnumeration(), "p:")


@pytest.mark.asyncio
async def test_failed_removal_is_logged_and_others_continue(caplog: pytest.LogCaptureFixture) -> None:
    class _Sticky(MemoryStorage):
        async def remove_item(self, key: str) -> Any:
            if key == "p:a":
                raise OSError("locked")
            await super().remove_item(key)

    storage = _Sticky({"p:a": "1", "p:b": "2"})

    with caplog.at_level(logging.WARNING):
        removed = await purge_stored_state(storage, "p:")

    assert removed == ["p:b"]
    assert storage.snapshot() == {"p:a": "1"}
    assert "Error purging stored record 'p:a'" in caplog.text
