"""Pluggable access to the state container.

The persistor never touches the state tree directly. It goes through a
:class:`StateAccessor`, so plain dicts, pydantic models or any other
container with top-level keys can be persisted.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any, Generic, Protocol, TypeVar

from pydantic import BaseModel

M = TypeVar("M", bound=BaseModel)


class StateAccessor(Protocol):
    """Capability interface over a state container."""

    def init(self) -> Any:
        """Return an empty state to assemble rehydrated substates into."""
        ...

    def iterate(self, state: Any) -> Iterator[tuple[str, Any]]:
        """Yield ``(key, substate)`` pairs in a stable order."""
        ...

    def get(self, state: Any, key: str) -> Any:
        ...

    def set(self, state: Any, key: str, value: Any) -> Any:
        """Store *value* under *key* and return the resulting state."""
        ...


class MappingStateAccessor:
    """Default accessor for dict-like state (insertion order)."""

    def init(self) -> dict[str, Any]:
        return {}

    def iterate(self, state: Any) -> Iterator[tuple[str, Any]]:
        yield from list(state.items())

    def get(self, state: Any, key: str) -> Any:
        return state.get(key)

    def set(self, state: MutableMapping[str, Any], key: str, value: Any) -> MutableMapping[str, Any]:
        state[key] = value
        return state


class ModelStateAccessor(Generic[M]):
    """Accessor for state held in a pydantic model.

    Keys are the model's declared fields. ``set`` never mutates: it returns
    a copy with the field replaced, which pairs well with frozen models.
    """

    def __init__(self, model_cls: type[M]) -> None:
        self._model_cls = model_cls

    def init(self) -> M:
        # No validation: required fields stay unset until rehydrated.
        return self._model_cls.model_construct()

    def iterate(self, state: Any) -> Iterator[tuple[str, Any]]:
        if isinstance(state, Mapping):
            # Serialized blobs arrive as plain key -> record mappings.
            yield from list(state.items())
            return
        for name in type(state).model_fields:
            yield name, getattr(state, name, None)

    def get(self, state: Any, key: str) -> Any:
        return getattr(state, key, None)

    def set(self, state: Any, key: str, value: Any) -> Any:
        if key not in type(state).model_fields:
            # Unknown keys (e.g. records from an older state shape) are dropped.
            return state
        return state.model_copy(update={key: value})
