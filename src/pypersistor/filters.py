"""Whitelist/blacklist key filtering."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


def as_key_set(value: Iterable[str] | str | None) -> frozenset[str] | None:
    """Normalize a key list; a bare string is one key, ``None``/``False`` is no list."""
    if value is None or value is False:
        return None
    if isinstance(value, str):
        return frozenset({value})
    return frozenset(value)


@dataclass(frozen=True, slots=True)
class KeyFilter:
    """Decide which top-level keys are eligible for persistence.

    ``whitelist=None`` admits every key; an empty whitelist admits none.
    The blacklist always wins, even over a whitelisted key.
    """

    whitelist: frozenset[str] | None = None
    blacklist: frozenset[str] = frozenset()

    @classmethod
    def from_lists(
        cls,
        whitelist: Iterable[str] | str | None = None,
        blacklist: Iterable[str] | str = (),
    ) -> KeyFilter:
        return cls(
            whitelist=as_key_set(whitelist),
            blacklist=as_key_set(blacklist) or frozenset(),
        )

    def allows(self, key: str) -> bool:
        if self.whitelist is not None and key not in self.whitelist:
            return False
        return key not in self.blacklist
