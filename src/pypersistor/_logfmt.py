"""Helpers for compact log output.

Substates can be arbitrarily large (whole slices of application state), so
anything interpolated into a log message goes through
:func:`summarize_for_log` first.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_MAX_ITEMS = 20


def summarize_for_log(value: Any, *, max_string: int = 256, _depth: int = 0) -> Any:
    """Return a bounded copy of *value* suitable for log messages."""
    if _depth > 4:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        summary: dict[str, Any] = {}
        for index, (k, v) in enumerate(value.items()):
            if index >= _MAX_ITEMS:
                summary["…"] = f"<{len(value) - _MAX_ITEMS} more>"
                break
            summary[str(k)] = summarize_for_log(v, max_string=max_string, _depth=_depth + 1)
        return summary

    if isinstance(value, Sequence):
        items = [summarize_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value[:_MAX_ITEMS]]
        if len(value) > _MAX_ITEMS:
            items.append(f"<{len(value) - _MAX_ITEMS} more>")
        return items

    # Unknown objects (models, custom classes): repr, bounded.
    text = repr(value)
    if len(text) > max_string:
        return f"{text[:max_string]}…<truncated>"
    return text
