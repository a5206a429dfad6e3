"""Storage backends."""

from pypersistor.storage.base import StorageBackend, list_storage_keys
from pypersistor.storage.memory import MemoryStorage

__all__ = ["MemoryStorage", "StorageBackend", "list_storage_keys"]
