# Event list ordering, clamping and identity tracking across sorts.
import random

import pytest

from .events import (
    create_event, set_event_t, rename_event, delete_event, default_event_name, event_positions
)


def _is_sorted(events):
    return all(events[i]["t"] <= events[i + 1]["t"] for i in range(len(events) - 1))


def test_create_keeps_sorted_and_clamps():
    events = []
    create_event(events, 0.7, "c")
    create_event(events, 0.2, "a")
    create_event(events, 0.5, "b")
    assert [e["name"] for e in events] == ["a", "b", "c"]
    assert create_event(events, 1.5, "hi")["t"] == 1.0
    assert create_event(events, -0.3, "lo")["t"] == 0.0
    assert events[0]["name"] == "lo" and events[-1]["name"] == "hi"


def test_set_event_t_reports_new_index():
    events = []
    for t, name in ((0.2, "a"), (0.5, "b"), (0.7, "c")):
        create_event(events, t, name)
    new_index = set_event_t(events, 0, 0.9)
    assert new_index == 2
    assert events[new_index]["name"] == "a"
    assert set_event_t(events, 2, 2.0) == 2 and events[2]["t"] == 1.0


def test_random_edits_stay_sorted():
    rng = random.Random(7)
    events = []
    for _ in range(300):
        if not events or rng.random() < 0.4:
            create_event(events, rng.uniform(-0.2, 1.2))
        else:
            set_event_t(events, rng.randrange(len(events)), rng.uniform(-0.2, 1.2))
        assert _is_sorted(events)
        assert all(0.0 <= e["t"] <= 1.0 for e in events)


def test_rename_and_delete():
    events = []
    create_event(events, 0.4, "old")
    rename_event(events, 0, "new")
    assert events[0]["name"] == "new"
    assert delete_event(events, 0)["name"] == "new"
    assert events == []
    with pytest.raises(IndexError):
        rename_event(events, 0, "x")
    with pytest.raises(IndexError):
        set_event_t(events, -1, 0.5)


def test_default_names_are_unique():
    events = [{"name": "Event 2", "t": 0.1}]
    assert default_event_name(events) == "Event 3"
    assert create_event(events, 0.5)["name"] == "Event 3"


def test_positions_without_path():
    events = [{"name": "a", "t": 0.5}]
    assert event_positions(events, []) == [None]
    pos = event_positions(events, [(0.0, 0.0), (4.0, 0.0)])[0]
    assert pos == (2.0, 0.0)


def run():
    test_create_keeps_sorted_and_clamps()
    test_set_event_t_reports_new_index()
    test_random_edits_stay_sorted()
    test_rename_and_delete()
    test_default_names_are_unique()
    test_positions_without_path()


if __name__ == "__main__":
    run()
