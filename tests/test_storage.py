from __future__ import annotations

import pytest

from pypersistor.storage import MemoryStorage, list_storage_keys


@pytest.mark.asyncio
async def test_memory_storage_basic_operations() -> None:
    storage = MemoryStorage()

    await storage.set_item("a", {"x": 1})
    await storage.set_item("b", "2")
    await storage.remove_item("b")
    await storage.remove_item("missing")

    assert await storage.get_item("a") == {"x": 1}
    assert await storage.get_item("b") is None
    assert await list_storage_keys(storage) == ["a"]


@pytest.mark.asyncio
async def test_memory_storage_isolates_stored_values() -> None:
    storage = MemoryStorage()
    value = {"items": [1]}

    await storage.set_item("a", value)
    value["items"].append(2)
    fetched = await storage.get_item("a")
    fetched["items"].append(3)

    assert storage.snapshot() == {"a": {"items": [1]}}
