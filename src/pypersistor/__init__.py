"""pypersistor - Incremental persistence for observable state stores."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pypersistor")
except PackageNotFoundError:
    __version__ = "0+local"
from pypersistor._constants import KEY_PREFIX, REHYDRATE
from pypersistor.config import PersistorConfig
from pypersistor.exceptions import (
    PersistConfigError,
    PersistError,
    PersistSerializationError,
    RehydrateKeyError,
    StorageWriteError,
    TransformError,
)
from pypersistor.filters import KeyFilter
from pypersistor.persistor import Persistor, persist_store
from pypersistor.purge import purge_stored_state
from pypersistor.rehydrate import get_stored_state
from pypersistor.serialization import JsonSerializer, PassthroughSerializer
from pypersistor.state.accessor import MappingStateAccessor, ModelStateAccessor, StateAccessor
from pypersistor.state.events import RehydrateEvent
from pypersistor.state.store import ObservableStore, Store
from pypersistor.storage import MemoryStorage, StorageBackend
from pypersistor.transforms import SKIP, Transformer, create_transform

__all__ = [
    "__version__",
    "KEY_PREFIX",
    "REHYDRATE",
    "SKIP",
    "JsonSerializer",
    "KeyFilter",
    "MappingStateAccessor",
    "MemoryStorage",
    "ModelStateAccessor",
    "ObservableStore",
    "PassthroughSerializer",
    "PersistConfigError",
    "PersistError",
    "PersistSerializationError",
    "Persistor",
    "PersistorConfig",
    "RehydrateEvent",
    "RehydrateKeyError",
    "StateAccessor",
    "StorageBackend",
    "StorageWriteError",
    "Store",
    "Transformer",
    "TransformError",
    "create_transform",
    "get_stored_state",
    "persist_store",
    "purge_stored_state",
]
