# planner/events.py
"""
Named markers attached to a normalized arc-length position on the path.

Events are plain dicts {"name": str, "t": float}. The list is always kept
sorted ascending by t and every t is clamped to [0, 1]. Sorting may move an
event, so callers track events by identity rather than by index.
"""

from __future__ import annotations

from typing import List, Optional

from .path_utils import path_length, point_at_distance
from .util import clamp01


def _check_index(events: List[dict], index: int) -> None:
    if not 0 <= index < len(events):
        raise IndexError(f"event index {index} out of range (0..{len(events) - 1})")

def sort_events(events: List[dict]) -> None:
    """Stable in-place sort by t."""
    events.sort(key=lambda e: e["t"])

def index_of(events: List[dict], event: dict) -> int:
    for i, e in enumerate(events):
        if e is event:
            return i
    raise ValueError("event not in list")

def default_event_name(events: List[dict]) -> str:
    taken = {e["name"] for e in events}
    n = len(events) + 1
    while f"Event {n}" in taken:
        n += 1
    return f"Event {n}"

def create_event(events: List[dict], t: float, name: Optional[str] = None) -> dict:
    """Insert a new event and re-sort. Returns the new event."""
    ev = {"name": str(name) if name is not None else default_event_name(events), "t": clamp01(t)}
    events.append(ev)
    sort_events(events)
    return ev

def set_event_t(events: List[dict], index: int, t: float) -> int:
    """Move an event along the path. Returns the event's index after sorting."""
    _check_index(events, index)
    ev = events[index]
    ev["t"] = clamp01(t)
    sort_events(events)
    return index_of(events, ev)

def rename_event(events: List[dict], index: int, name: str) -> None:
    _check_index(events, index)
    events[index]["name"] = str(name)

def delete_event(events: List[dict], index: int) -> dict:
    _check_index(events, index)
    return events.pop(index)

def event_positions(events: List[dict], path_points) -> List[Optional[tuple]]:
    """Path position of each event (None for every event without a path)."""
    if not path_points or len(path_points) < 2:
        return [None for _ in events]
    total = path_length(path_points)
    return [point_at_distance(e["t"] * total, path_points) for e in events]
