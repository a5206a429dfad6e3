"""Bidirectional transform pipeline.

Transformers are applied left-to-right before a substate is written and
right-to-left after it is read back, so ``[a, b]`` stores
``b.write(a.write(value))`` and restores ``a.read(b.read(stored))``.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any, Protocol

from pypersistor._logfmt import summarize_for_log
from pypersistor.exceptions import TransformError
from pypersistor.filters import KeyFilter

_logger = logging.getLogger(__name__)


class _Skip:
    """Marker for "nothing to persist" (see :data:`SKIP`)."""

    _instance: _Skip | None = None

    def __new__(cls) -> _Skip:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SKIP"

    def __bool__(self) -> bool:
        return False


#: Returned by a write transform (or the serializer) to drop a record.
#: The key still counts as processed; storage is not called.
SKIP: Any = _Skip()


class Transformer(Protocol):
    """A bidirectional adapter applied per substate."""

    def write(self, value: Any, key: str) -> Any:
        """Inbound: state -> storage. May return an awaitable in async mode."""
        ...

    def read(self, value: Any, key: str) -> Any:
        """Outbound: storage -> state."""
        ...


def _identity(value: Any, key: str) -> Any:
    return value


class FunctionTransform:
    """Transformer built from plain callables, optionally limited to some keys."""

    def __init__(
        self,
        write: Callable[[Any, str], Any] | None = None,
        read: Callable[[Any, str], Any] | None = None,
        *,
        key_filter: KeyFilter | None = None,
    ) -> None:
        self._write = write or _identity
        self._read = read or _identity
        self._filter = key_filter or KeyFilter()

    def write(self, value: Any, key: str) -> Any:
        if not self._filter.allows(key):
            return value
        return self._write(value, key)

    def read(self, value: Any, key: str) -> Any:
        if not self._filter.allows(key):
            return value
        return self._read(value, key)


def create_transform(
    write: Callable[[Any, str], Any] | None = None,
    read: Callable[[Any, str], Any] | None = None,
    *,
    whitelist: Iterable[str] | None = None,
    blacklist: Iterable[str] = (),
) -> FunctionTransform:
    """Build a transformer from a pair of functions.

    Keys rejected by *whitelist*/*blacklist* pass through untouched in both
    directions. A missing direction is the identity.
    """
    return FunctionTransform(write, read, key_filter=KeyFilter.from_lists(whitelist, blacklist))


def _log_write_failure(transformer: Transformer, key: str, value: Any, exc: Exception) -> None:
    error = TransformError(f"{type(transformer).__name__}.write failed: {exc}", key=key, direction="write")
    _logger.warning(
        "Write transform failed for key %r, keeping previous value %r: %s",
        key,
        summarize_for_log(value),
        error,
        exc_info=exc,
    )


def apply_write_transforms(transforms: Sequence[Transformer], value: Any, key: str) -> Any:
    """Fold *transforms* left-to-right over *value*.

    A failing step is logged and skipped; the chain goes on with the last
    value that was produced successfully.
    """
    current = value
    for transformer in transforms:
        try:
            current = transformer.write(current, key)
        except Exception as exc:  # noqa: BLE001 - user transform code
            _log_write_failure(transformer, key, current, exc)
    return current


async def apply_write_transforms_async(transforms: Sequence[Transformer], value: Any, key: str) -> Any:
    """Async variant of :func:`apply_write_transforms`.

    Steps run strictly one after another; each may return a plain value or
    an awaitable.
    """
    current = value
    for transformer in transforms:
        try:
            result = transformer.write(current, key)
            if inspect.isawaitable(result):
                result = await result
            current = result
        except Exception as exc:  # noqa: BLE001 - user transform code
            _log_write_failure(transformer, key, current, exc)
    return current


def apply_read_transforms(transforms: Sequence[Transformer], value: Any, key: str) -> Any:
    """Fold *transforms* right-to-left over *value* using ``read``.

    Errors propagate; the caller decides what a failed key means.
    """
    current = value
    for transformer in reversed(transforms):
        current = transformer.read(current, key)
    return current
