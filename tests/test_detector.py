from __future__ import annotations

from pypersistor.filters import KeyFilter
from pypersistor.state.accessor import MappingStateAccessor
from pypersistor.state.detector import detect_changes


def _detect(previous: dict, current: dict, queue: list[str], key_filter: KeyFilter | None = None) -> list[str]:
    return detect_changes(
        previous,
        current,
        key_filter=key_filter or KeyFilter(),
        accessor=MappingStateAccessor(),
        queue=queue,
    )


def test_new_and_replaced_substates_are_dirty_in_state_order() -> None:
    shared = {"x": 1}
    previous = {"a": shared, "b": {"y": 1}}
    current = {"c": [1], "a": shared, "b": {"y": 1}}
    queue: list[str] = []

    added = _detect(previous, current, queue)

    # "b" is equal but a different object; identity is what counts.
    assert added == ["c", "b"]
    assert queue == ["c", "b"]


def test_in_place_mutation_is_not_detected() -> None:
    todos = ["one"]
    previous = {"todos": todos}
    todos.append("two")
    current = {"todos": todos}

    assert _detect(previous, current, []) == []


def test_already_queued_key_is_not_added_again() -> None:
    queue = ["a"]
    added = _detect({"a": 1}, {"a": object(), "b": object()}, queue)

    assert added == ["b"]
    assert queue == ["a", "b"]


def test_queue_never_holds_duplicates_across_snapshots() -> None:
    queue: list[str] = []
    snapshots = [{"a": object(), "b": object()} for _ in range(5)]
    previous: dict = {}
    for snapshot in snapshots:
        _detect(previous, snapshot, queue)
        previous = snapshot

    assert queue == ["a", "b"]


def test_filter_is_applied() -> None:
    key_filter = KeyFilter.from_lists(whitelist=["a"], blacklist=["b"])
    queue: list[str] = []

    _detect({}, {"a": 1, "b": 2, "c": 3}, queue, key_filter)

    assert queue == ["a"]
