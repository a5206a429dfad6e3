"""Codecs between in-memory substates and stored records."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Protocol

from pydantic_core import to_jsonable_python

from pypersistor._logfmt import summarize_for_log
from pypersistor.exceptions import PersistSerializationError
from pypersistor.transforms import SKIP

if TYPE_CHECKING:
    from pypersistor.config import PersistorConfig

_logger = logging.getLogger(__name__)


class Serializer(Protocol):
    def dumps(self, value: Any, *, key: str = "") -> Any:
        ...

    def loads(self, record: Any) -> Any:
        ...


class PassthroughSerializer:
    """Stores values as-is (``serialize=False``)."""

    def dumps(self, value: Any, *, key: str = "") -> Any:
        return value

    def loads(self, record: Any) -> Any:
        return record


def _decycle(value: Any, _ancestors: tuple[int, ...] = ()) -> Any:
    """Copy *value* replacing references back to an ancestor with ``None``."""
    if isinstance(value, (dict, list, tuple)):
        marker = id(value)
        if marker in _ancestors:
            return None
        ancestors = (*_ancestors, marker)
        if isinstance(value, dict):
            return {k: _decycle(v, ancestors) for k, v in value.items()}
        return [_decycle(v, ancestors) for v in value]
    return value


class JsonSerializer:
    """JSON text records.

    Anything the json module cannot encode natively (pydantic models,
    datetimes, enums, sets...) goes through pydantic's JSON coercion.

    Parameters
    ----------
    production : bool
        In development mode (the default) cyclic or unencodable state raises
        :class:`PersistSerializationError` so the structural bug surfaces.
        In production mode cycles are replaced by ``null`` and a value that
        still cannot be encoded is logged and dropped (``SKIP``).
    """

    def __init__(self, *, production: bool = False) -> None:
        self._production = production

    @staticmethod
    def _encode(value: Any) -> str:
        return json.dumps(value, default=to_jsonable_python, separators=(",", ":"))

    def dumps(self, value: Any, *, key: str = "") -> Any:
        try:
            return self._encode(value)
        except (TypeError, ValueError) as exc:
            if not self._production:
                raise PersistSerializationError(
                    f"Cannot serialize state for key {key!r}: {exc}. "
                    "Remove the cycle or unserializable value, or blacklist the key.",
                    key=key,
                ) from exc
            first_error = exc

        try:
            return self._encode(_decycle(value))
        except (TypeError, ValueError):
            _logger.warning(
                "Dropping unserializable state for key %r (%s): %r",
                key,
                first_error,
                summarize_for_log(value),
            )
            return SKIP

    def loads(self, record: Any) -> Any:
        return json.loads(record)


def serializer_for(config: PersistorConfig) -> Serializer:
    if not config.serialize:
        return PassthroughSerializer()
    return JsonSerializer(production=config.production)
