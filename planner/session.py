# planner/session.py
"""
PathEditorSession: the single owner of all editor state.

Holds the field image size, crop rectangle, robot geometry, waypoints,
events and the pointer interaction state machine. Waypoints are stored in
image pixels so they stay put when the crop changes; the spline is built in
field meters and cached until the waypoints or the crop change.
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

from .config import FIELD_CONSTANTS, DEFAULT_ROBOT, ROBOT_KEYS, SPLINE_SEGMENTS, crop_flat, robot_flat
from . import events as ev_ops
from .geom import (
    normalize_crop, default_crop, image_to_field, field_to_image,
    canvas_to_image, image_to_canvas, in_crop
)
from .path_utils import (
    generate_spline, calculate_path_metrics, closest_point_on_path, closest_t_in_field
)
from .picking import resolve_primary, resolve_secondary
from .sim import Playback
from .storage import encode_path, decode_path
from .util import snapshot, push_undo_prev

IDLE = "idle"
DRAGGING_WAYPOINT = "dragging_waypoint"
DRAGGING_ROTATION = "dragging_rotation"
DRAGGING_EVENT = "dragging_event"
CROPPING_DRAG = "cropping_drag"
PLAYING = "playing"

DRAG_MODES = (DRAGGING_WAYPOINT, DRAGGING_ROTATION, DRAGGING_EVENT, CROPPING_DRAG)

BUTTON_PRIMARY = 1
BUTTON_SECONDARY = 3


class PathEditorSession:

    def __init__(self, image_size=None, settings=None, field=None,
                 canvas_size=(800, 400), segments: int = SPLINE_SEGMENTS):
        self.field = dict(field or FIELD_CONSTANTS)
        self.segments = int(segments)
        self.canvas_size = (float(canvas_size[0]), float(canvas_size[1]))
        self.image_size: Optional[Tuple[float, float]] = None
        self.crop = normalize_crop(0, 1, 0, 1)
        self.robot = dict(DEFAULT_ROBOT)
        self.waypoints: List[dict] = []
        self.events: List[dict] = []

        self.mode = IDLE
        self.crop_mode = False
        self.selected = None
        self.playback = Playback()
        self.undo_stack: list = []
        self.redo_stack: list = []

        self._drag: dict = {}
        self._spline: Optional[list] = None
        if image_size is not None:
            self.set_image(image_size, settings)

    # ---------------- setup ----------------
    def set_image(self, image_size, settings=None) -> None:
        """Adopt a new field image; crop/robot come from settings when given."""
        self.image_size = (float(image_size[0]), float(image_size[1]))
        crop = crop_flat(settings)
        if crop is not None:
            self.crop = normalize_crop(crop["left"], crop["right"], crop["top"], crop["bottom"])
        else:
            self.crop = default_crop(self.image_size[0], self.image_size[1], self.field)
        if settings is not None:
            self.robot = robot_flat(settings)
        self.stop_playback()
        self.waypoints = []
        self.events = []
        self.undo_stack.clear()
        self.redo_stack.clear()
        self.selected = None
        self._invalidate()

    def set_canvas_size(self, w, h) -> None:
        self.canvas_size = (float(w), float(h))

    def set_crop(self, left, right, top, bottom) -> None:
        self.crop = normalize_crop(left, right, top, bottom)
        self._invalidate()

    def apply_crop_input(self, left, right, top, bottom) -> bool:
        """Crop from slider values, clamped to the image; refused mid-drag."""
        if self.image_size is None or self.dragging:
            return False
        l, t = self._clamp_to_image(float(left), float(top))
        r, b = self._clamp_to_image(float(right), float(bottom))
        self.set_crop(l, r, t, b)
        return True

    def set_robot_dimension(self, key: str, value) -> bool:
        """Set one robot value in meters (m/s for speed); non-positive input is ignored."""
        if key not in ROBOT_KEYS:
            raise KeyError(key)
        try:
            v = float(value)
        except (TypeError, ValueError):
            return False
        if not v > 0 or math.isinf(v):
            return False
        self.robot[key] = v
        return True

    def settings(self) -> dict:
        return {"crop": dict(self.crop), "robot": dict(self.robot)}

    @property
    def dragging(self) -> bool:
        """True between pointer_down and pointer_up of a drag."""
        return self.mode in DRAG_MODES

    # ---------------- derived geometry ----------------
    def _invalidate(self) -> None:
        self._spline = None

    def field_point(self, wp: dict):
        return image_to_field(wp["x"], wp["y"], self.crop, self.field)

    def field_points(self):
        return [self.field_point(w) for w in self.waypoints]

    @property
    def spline(self) -> list:
        """Spline samples in field meters; empty with fewer than two waypoints."""
        if self._spline is None:
            self._spline = generate_spline(self.field_points(), self.segments)
        return self._spline

    def metrics(self) -> Optional[dict]:
        return calculate_path_metrics(self.spline, len(self.waypoints), self.segments)

    def total_length(self) -> float:
        m = self.metrics()
        return m["total"] if m else 0.0

    def to_image(self, cx, cy):
        return canvas_to_image(cx, cy, self.crop, self.canvas_size, self.image_size, self.crop_mode)

    def to_canvas(self, x, y):
        return image_to_canvas(x, y, self.crop, self.canvas_size, self.image_size, self.crop_mode)

    # ---------------- undo ----------------
    def _record(self) -> None:
        if self._drag.get("before") is not None:
            return
        push_undo_prev(self.undo_stack, snapshot(self.waypoints, self.events))
        self.redo_stack.clear()

    def _restore(self, state) -> None:
        self.waypoints, self.events = snapshot(*state)
        self.selected = None
        self._invalidate()

    def undo(self) -> bool:
        if not self.undo_stack or self.mode != IDLE:
            return False
        push_undo_prev(self.redo_stack, snapshot(self.waypoints, self.events))
        self._restore(self.undo_stack.pop())
        return True

    def redo(self) -> bool:
        if not self.redo_stack or self.mode != IDLE:
            return False
        push_undo_prev(self.undo_stack, snapshot(self.waypoints, self.events))
        self._restore(self.redo_stack.pop())
        return True

    # ---------------- event re-projection ----------------
    def _event_anchors(self):
        """Field positions of the events on the current spline, if any."""
        if not self.events or len(self.waypoints) < 2:
            return None
        return ev_ops.event_positions(self.events, self.spline)

    def _reproject(self, anchors) -> None:
        """Move each event to the new spline point nearest its old position."""
        if anchors is None or len(self.waypoints) < 2:
            return
        path = self.spline
        for event, pos in zip(self.events, anchors):
            if pos is None:
                continue
            t = closest_t_in_field(pos, path)
            if t is not None:
                event["t"] = t
        ev_ops.sort_events(self.events)

    # ---------------- waypoint model ----------------
    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.waypoints):
            raise IndexError(f"waypoint index {index} out of range (0..{len(self.waypoints) - 1})")

    def add_waypoint(self, x, y) -> int:
        """Append a waypoint (image pixels) keeping events where they were."""
        self._record()
        anchors = self._event_anchors()
        self.waypoints.append({"x": float(x), "y": float(y), "rotation": 0.0})
        self._invalidate()
        self._reproject(anchors)
        return len(self.waypoints) - 1

    def move_waypoint(self, index: int, x, y) -> None:
        self._check_index(index)
        self._record()
        anchors = self._event_anchors()
        wp = self.waypoints[index]
        wp["x"], wp["y"] = float(x), float(y)
        self._invalidate()
        self._reproject(anchors)

    def set_rotation(self, index: int, radians: float) -> None:
        self._check_index(index)
        self._record()
        self.waypoints[index]["rotation"] = float(radians)

    def delete_waypoint(self, index: int) -> Optional[dict]:
        """
        Remove a waypoint; events are re-projected while a spline remains.
        Refused (None) while a drag holds a reference into the model.
        """
        if self.dragging:
            return None
        self._check_index(index)
        self._record()
        anchors = self._event_anchors()
        removed = self.waypoints.pop(index)
        self._invalidate()
        self._reproject(anchors)
        self.selected = None
        return removed

    def clear(self) -> bool:
        if self.dragging or (not self.waypoints and not self.events):
            return False
        self._record()
        self.waypoints = []
        self.events = []
        self.selected = None
        self._invalidate()
        return True

    # ---------------- event model ----------------
    def create_event(self, t: float, name: Optional[str] = None) -> dict:
        self._record()
        return ev_ops.create_event(self.events, t, name)

    def set_event_t(self, index: int, t: float) -> int:
        self._record()
        return ev_ops.set_event_t(self.events, index, t)

    def rename_event(self, index: int, name: str) -> None:
        self._record()
        ev_ops.rename_event(self.events, index, name)

    def delete_event(self, index: int) -> Optional[dict]:
        if self.dragging:
            return None
        self._record()
        removed = ev_ops.delete_event(self.events, index)
        self.selected = None
        return removed

    def delete_selected(self) -> bool:
        if self.selected is None or self.dragging:
            return False
        kind, ref = self.selected
        if kind == "waypoint" and 0 <= ref < len(self.waypoints):
            self.delete_waypoint(ref)
            return True
        if kind == "event" and any(e is ref for e in self.events):
            self.delete_event(ev_ops.index_of(self.events, ref))
            return True
        self.selected = None
        return False

    # ---------------- persistence ----------------
    def export_data(self) -> dict:
        return encode_path(self.waypoints, self.events, self.crop, self.field)

    def load_data(self, data) -> bool:
        """
        Replace the path with decoded file data. Raises PathFileError with the
        model untouched; returns False without decoding while a drag is live.
        """
        if self.dragging:
            return False
        waypoints, events = decode_path(data, self.crop, self.field)
        self.stop_playback()
        self._record()
        self.waypoints = waypoints
        self.events = events
        self.selected = None
        self._invalidate()
        return True

    def points_summary(self) -> List[str]:
        lines = []
        for i, wp in enumerate(self.waypoints):
            fx, fy = self.field_point(wp)
            hidden = "" if in_crop(wp["x"], wp["y"], self.crop) else " (Hidden)"
            deg = math.degrees(wp["rotation"])
            lines.append(f"P{i + 1}: ({fx:.3f}, {fy:.3f}) {deg:.1f} deg{hidden}")
        positions = ev_ops.event_positions(self.events, self.spline)
        for e, pos in zip(self.events, positions):
            where = "" if pos is None else f" ({pos[0]:.3f}, {pos[1]:.3f})"
            lines.append(f"{e['name']}: t={e['t']:.3f}{where}")
        return lines

    # ---------------- playback ----------------
    def start_playback(self, now: float) -> bool:
        if self.mode != IDLE:
            return False
        rotations = [w["rotation"] for w in self.waypoints]
        if self.playback.start(self.spline, rotations, self.robot["speed"], now, self.segments):
            self.mode = PLAYING
            return True
        return False

    def stop_playback(self) -> None:
        self.playback.stop()
        if self.mode == PLAYING:
            self.mode = IDLE

    def tick(self, now: float) -> Optional[dict]:
        """One animation frame; returns the pose to draw or None when not playing."""
        if self.mode != PLAYING:
            return None
        pose = self.playback.tick(now)
        if pose is None:
            self.mode = IDLE
        return pose

    # ---------------- pointer state machine ----------------
    def toggle_crop_mode(self) -> bool:
        """Switch between the cropped view and the full-image crop editor."""
        if self.mode not in (IDLE, PLAYING):
            return self.crop_mode
        self.stop_playback()
        self.crop_mode = not self.crop_mode
        return self.crop_mode

    def _clamp_to_image(self, x, y):
        w, h = self.image_size
        return max(0.0, min(w, x)), max(0.0, min(h, y))

    def pointer_down(self, cx, cy, button: int = BUTTON_PRIMARY):
        """
        Dispatch a press in canvas pixels. Returns (action, value) describing
        what happened so the shell can follow up (e.g. prompt for a name).
        """
        if self.image_size is None:
            return "none", None
        if self.mode == PLAYING:
            self.stop_playback()
        if self.mode != IDLE:
            return "none", None
        x, y = self.to_image(cx, cy)

        if self.crop_mode:
            if button != BUTTON_PRIMARY:
                return "none", None
            self._drag = {"start": self._clamp_to_image(x, y)}
            self.mode = CROPPING_DRAG
            return "crop", None

        if button == BUTTON_SECONDARY:
            kind, value = resolve_secondary(self, (x, y))
            if kind == "event":
                self.selected = ("event", self.events[value])
            elif kind == "create_event":
                ev = self.create_event(value)
                self.selected = ("event", ev)
            elif kind == "delete":
                self.delete_waypoint(value)
            return kind, value

        if button != BUTTON_PRIMARY:
            return "none", None
        kind, idx = resolve_primary(self, (x, y))
        if kind == "create":
            idx = self.add_waypoint(x, y)
            self.selected = ("waypoint", idx)
            return kind, idx

        before = snapshot(self.waypoints, self.events)
        if kind == "rotation":
            self._drag = {"index": idx, "before": before}
            self.mode = DRAGGING_ROTATION
            self.selected = ("waypoint", idx)
        elif kind == "waypoint":
            self._drag = {"index": idx, "before": before}
            self.mode = DRAGGING_WAYPOINT
            self.selected = ("waypoint", idx)
        elif kind == "event":
            ev = self.events[idx]
            self._drag = {"event": ev, "before": before}
            self.mode = DRAGGING_EVENT
            self.selected = ("event", ev)
        return kind, idx

    def pointer_move(self, cx, cy) -> bool:
        """Apply a drag step eagerly. Returns True when the model or crop changed."""
        if self.mode == IDLE or self.mode == PLAYING:
            return False
        x, y = self.to_image(cx, cy)

        if self.mode == CROPPING_DRAG:
            sx, sy = self._drag["start"]
            ex, ey = self._clamp_to_image(x, y)
            self.set_crop(min(sx, ex), max(sx, ex), min(sy, ey), max(sy, ey))
            return True

        if self.mode == DRAGGING_WAYPOINT:
            self.move_waypoint(self._drag["index"], x, y)
            return True

        if self.mode == DRAGGING_ROTATION:
            idx = self._drag["index"]
            fx, fy = self.field_point(self.waypoints[idx])
            px, py = image_to_field(x, y, self.crop, self.field)
            if px == fx and py == fy:
                return False
            self.set_rotation(idx, math.atan2(py - fy, px - fx))
            return True

        if self.mode == DRAGGING_EVENT:
            hit = closest_point_on_path((x, y), self.spline, self.crop, self.field)
            if hit is None:
                return False
            event = self._drag["event"]
            self.set_event_t(ev_ops.index_of(self.events, event), hit[0])
            return True
        return False

    def pointer_up(self) -> bool:
        """Finish a drag as one undoable transaction. Returns True if it changed anything."""
        mode, drag = self.mode, self._drag
        self._drag = {}
        if mode == PLAYING:
            return False
        self.mode = IDLE
        before = drag.get("before")
        if before is None:
            return mode == CROPPING_DRAG
        if before != (self.waypoints, self.events):
            push_undo_prev(self.undo_stack, before)
            self.redo_stack.clear()
            return True
        return False
