from __future__ import annotations

from pypersistor._logfmt import summarize_for_log


def test_truncates_long_strings() -> None:
    summary = summarize_for_log({"value": "x" * 600}, max_string=10)

    assert summary["value"].startswith("x" * 10)
    assert "<truncated>" in summary["value"]


def test_bounds_collections_and_depth() -> None:
    summary = summarize_for_log({"items": list(range(50)), "deep": {"a": {"b": {"c": {"d": {"e": 1}}}}}})

    assert summary["items"][:3] == [0, 1, 2]
    assert summary["items"][-1] == "<30 more>"
    assert summary["deep"]["a"]["b"]["c"]["d"] == "<max-depth>"


def test_bytes_and_objects() -> None:
    assert summarize_for_log(b"abc") == "<bytes:3b>"
    assert summarize_for_log(None) is None
    assert summarize_for_log(1.5) == 1.5
