"""Custom exception hierarchy for pypersistor."""

from __future__ import annotations


class PersistError(Exception):
    """Base exception for all pypersistor errors."""


class PersistConfigError(PersistError):
    """Invalid or incompatible persistor configuration."""


class PersistSerializationError(PersistError):
    """A substate could not be encoded (cyclic or unserializable value).

    Only raised in development mode; production mode drops the record.
    """

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class StorageWriteError(PersistError):
    """The storage backend failed (or timed out) writing a record."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class TransformError(PersistError):
    """A transformer raised while processing a substate."""

    def __init__(self, message: str, *, key: str = "", direction: str = "") -> None:
        self.key = key
        self.direction = direction
        super().__init__(message)


class RehydrateKeyError(PersistError):
    """A single key could not be deserialized or read-transformed.

    The rehydrator logs these and omits the key; the remaining keys are
    still restored.
    """

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)
