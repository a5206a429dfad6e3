"""The store contract consumed by the persistor.

The persistor only needs ``subscribe``, ``get_state`` and ``dispatch``.
:class:`ObservableStore` is a small reference implementation of that
contract; applications are free to bring their own.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

_logger = logging.getLogger(__name__)

Listener = Callable[[], None]
Reducer = Callable[[Any, Any], Any]


class Store(Protocol):
    """Structural store interface (single observable state tree)."""

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        ...

    def get_state(self) -> Any:
        ...

    def dispatch(self, event: Any) -> Any:
        ...


class ObservableStore:
    """Reducer-driven store that notifies listeners after every dispatch.

    Reducers must return a new object for any substate they change; the
    persistor detects changes by identity.
    """

    def __init__(self, reducer: Reducer, initial: Any = None) -> None:
        self._reducer = reducer
        self._state = initial if initial is not None else {}
        self._listeners: list[Listener] = []

    def get_state(self) -> Any:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, event: Any) -> Any:
        self._state = self._reducer(self._state, event)
        # Copy: listeners may unsubscribe while being notified.
        for listener in list(self._listeners):
            listener()
        return event
