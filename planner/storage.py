# planner/storage.py
from __future__ import annotations
import json, math
from numbers import Real

from .geom import image_to_field, field_to_image
from .util import clamp01

IMAGE_TYPES = [("Images", "*.png *.jpg *.jpeg *.gif *.bmp"), ("All files", "*.*")]
JSON_TYPES = [("JSON files", "*.json"), ("All files", "*.*")]


class PathFileError(ValueError):
    """Persisted path data could not be decoded."""


def _number(value, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise PathFileError(f"{what} must be a number, got {value!r}")
    v = float(value)
    if math.isnan(v) or math.isinf(v):
        raise PathFileError(f"{what} must be finite")
    return v

def encode_path(waypoints, events, crop, field) -> dict:
    """Path as the file dict: field meters and degrees."""
    points = []
    for i, wp in enumerate(waypoints):
        fx, fy = image_to_field(wp["x"], wp["y"], crop, field)
        points.append({
            "id": i + 1,
            "x": round(fx, 4),
            "y": round(fy, 4),
            "rotation": round(math.degrees(wp["rotation"]), 4),
        })
    return {
        "points": points,
        "events": [{"name": e["name"], "t": e["t"]} for e in events],
    }

def decode_path(data, crop, field):
    """
    Rebuild (waypoints, events) from file data under the given crop.

    A bare list is read as points only. Raises PathFileError without
    returning anything partial.
    """
    if isinstance(data, list):
        data = {"points": data}
    if not isinstance(data, dict):
        raise PathFileError("path file must contain a JSON object")
    raw_points = data.get("points")
    if not isinstance(raw_points, list):
        raise PathFileError("path file has no 'points' array")

    waypoints = []
    for n, p in enumerate(raw_points, start=1):
        if not isinstance(p, dict):
            raise PathFileError(f"point {n} is not an object")
        fx = _number(p.get("x"), f"point {n} x")
        fy = _number(p.get("y"), f"point {n} y")
        deg = _number(p.get("rotation", 0.0), f"point {n} rotation")
        x, y = field_to_image(fx, fy, crop, field)
        waypoints.append({"x": x, "y": y, "rotation": math.radians(deg)})

    raw_events = data.get("events", [])
    if raw_events is None:
        raw_events = []
    if not isinstance(raw_events, list):
        raise PathFileError("'events' must be an array")
    events = []
    for n, e in enumerate(raw_events, start=1):
        if not isinstance(e, dict) or "name" not in e:
            raise PathFileError(f"event {n} needs a name and t")
        events.append({"name": str(e["name"]), "t": clamp01(_number(e.get("t"), f"event {n} t"))})
    events.sort(key=lambda e: e["t"])
    return waypoints, events

def write_path_file(filename: str, data: dict) -> None:
    with open(filename, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=4)

def read_path_file(filename: str):
    with open(filename, "r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise PathFileError(f"not valid JSON: {e}") from e

def save_path(session):
    """Ask for a filename and write the session's path. Returns the filename or None."""
    from tkinter import filedialog
    filename = filedialog.asksaveasfilename(
        title="Save path",
        defaultextension=".json",
        initialfile="points.json",
        filetypes=JSON_TYPES
    )
    if not filename:
        return None
    write_path_file(filename, session.export_data())
    print(f"Saved path to: {filename}")
    return filename

def load_path(session):
    """Ask for a path file and load it into the session. Returns the filename or None."""
    from tkinter import filedialog
    filename = filedialog.askopenfilename(title="Load path", filetypes=JSON_TYPES)
    if not filename:
        return None
    if not session.load_data(read_path_file(filename)):
        print(f"Path not loaded (drag in progress): {filename}")
        return None
    print(f"Loaded path from: {filename}")
    return filename

def ask_image_file():
    from tkinter import filedialog
    filename = filedialog.askopenfilename(title="Load field image", filetypes=IMAGE_TYPES)
    return filename or None
