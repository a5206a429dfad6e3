"""Persistor configuration."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pypersistor._constants import KEY_PREFIX
from pypersistor.exceptions import PersistConfigError
from pypersistor.filters import KeyFilter, as_key_set
from pypersistor.state.accessor import MappingStateAccessor, StateAccessor
from pypersistor.storage.base import StorageBackend
from pypersistor.storage.memory import MemoryStorage
from pypersistor.transforms import Transformer


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class PersistorConfig:
    """Persistor configuration, fixed for the lifetime of a persistor.

    Parameters
    ----------
    storage : StorageBackend
        Async key-value backend. Defaults to a fresh :class:`MemoryStorage`.
    key_prefix : str
        Prepended verbatim to each substate key to form the storage key.
    whitelist : frozenset[str] or None
        When set, only these keys are persisted. ``None`` means all keys.
    blacklist : frozenset[str]
        Keys never persisted, even if whitelisted.
    transforms : tuple[Transformer, ...]
        Applied in order on write and in reverse order on read.
    debounce : float
        Milliseconds between two writes of a drain cycle. ``0`` writes as
        soon as the event loop gets to it.
    serialize : bool
        Encode records as JSON. ``False`` hands values to storage as-is.
    async_transforms : bool
        Await write transforms that return awaitables. Incompatible with
        ``rehydrate(..., serial=True)``.
    accessor : StateAccessor
        How to iterate, read and assemble the state container.
    write_timeout : float or None
        Seconds to wait for one storage write before giving up on it.
        ``None`` waits indefinitely; a backend that never answers then
        stalls the drain for this persistor.
    production : bool
        Production mode drops unserializable records instead of raising.
    """

    storage: StorageBackend = dataclasses.field(default_factory=MemoryStorage)
    key_prefix: str = KEY_PREFIX
    whitelist: frozenset[str] | None = None
    blacklist: frozenset[str] = frozenset()
    transforms: tuple[Transformer, ...] = ()
    debounce: float = 0
    serialize: bool = True
    async_transforms: bool = False
    accessor: StateAccessor = dataclasses.field(default_factory=MappingStateAccessor)
    write_timeout: float | None = None
    production: bool = False

    def __post_init__(self) -> None:
        # Accept lists/sets for convenience; store immutable copies.
        object.__setattr__(self, "whitelist", as_key_set(self.whitelist))
        object.__setattr__(self, "blacklist", as_key_set(self.blacklist) or frozenset())
        object.__setattr__(self, "transforms", tuple(self.transforms))
        if self.debounce is None:
            object.__setattr__(self, "debounce", 0)
        if self.debounce < 0:
            raise PersistConfigError(f"debounce must be >= 0 (got {self.debounce})")
        if self.write_timeout is not None and self.write_timeout <= 0:
            raise PersistConfigError(f"write_timeout must be positive (got {self.write_timeout})")

    @property
    def key_filter(self) -> KeyFilter:
        return KeyFilter(whitelist=self.whitelist, blacklist=self.blacklist)

    @property
    def debounce_seconds(self) -> float:
        return self.debounce / 1000.0

    def storage_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    @classmethod
    def from_env(cls, **overrides: Any) -> PersistorConfig:
        """Create configuration from ``PYPERSISTOR_*`` environment variables.

        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        PersistorConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        prefix_env = env.get("PYPERSISTOR_KEY_PREFIX")
        if prefix_env is not None:
            config_kwargs["key_prefix"] = prefix_env

        debounce_env = env.get("PYPERSISTOR_DEBOUNCE_MS")
        if debounce_env is not None and "debounce" not in overrides:
            try:
                config_kwargs["debounce"] = float(debounce_env)
            except ValueError as exc:
                raise PersistConfigError(f"PYPERSISTOR_DEBOUNCE_MS is not a number: {debounce_env!r}") from exc

        timeout_env = env.get("PYPERSISTOR_WRITE_TIMEOUT")
        if timeout_env is not None and "write_timeout" not in overrides:
            try:
                config_kwargs["write_timeout"] = float(timeout_env)
            except ValueError as exc:
                raise PersistConfigError(f"PYPERSISTOR_WRITE_TIMEOUT is not a number: {timeout_env!r}") from exc

        if "serialize" not in overrides:
            config_kwargs["serialize"] = _env_bool(env.get("PYPERSISTOR_SERIALIZE"), True)

        if "async_transforms" not in overrides:
            config_kwargs["async_transforms"] = _env_bool(env.get("PYPERSISTOR_ASYNC_TRANSFORMS"), False)

        if "production" not in overrides:
            config_kwargs["production"] = env.get("PYPERSISTOR_ENV", "").strip().lower() == "production"

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
