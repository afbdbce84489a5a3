# planner/picking.py
"""Nearest-element queries for pointer input, all in image-pixel space."""

from __future__ import annotations

import math
from typing import Optional, Tuple

from .config import (
    WAYPOINT_PICK_PX, ROTATION_PICK_PX, EVENT_PICK_PX, DELETE_PICK_PX, HANDLE_MARGIN_M
)
from .events import event_positions
from .geom import canvas_scale, field_to_image, meters_to_image_offset
from .path_utils import closest_point_on_path
from .util import heading_unit


def threshold_image(radius_px: float, crop: dict, canvas_size) -> float:
    """Convert a canvas-pixel radius to image pixels using the x scale."""
    sx, _ = canvas_scale(crop, canvas_size)
    return radius_px / sx

def nearest_index(candidates, pos, radius: float) -> Optional[int]:
    """Globally nearest candidate strictly inside radius (None entries skipped)."""
    best_i, best_d = None, float("inf")
    for i, p in enumerate(candidates):
        if p is None:
            continue
        d = math.hypot(p[0] - pos[0], p[1] - pos[1])
        if d < best_d:
            best_i, best_d = i, d
    if best_i is not None and best_d < radius:
        return best_i
    return None

def rotation_handle_pos(wp: dict, robot: dict, crop: dict, field: dict):
    """Image-pixel position of a waypoint's rotation handle."""
    reach = max(robot["width"], robot["height"]) / 2.0 + HANDLE_MARGIN_M
    ux, uy = heading_unit(wp["rotation"])
    dx, dy = meters_to_image_offset(ux * reach, uy * reach, crop, field)
    return wp["x"] + dx, wp["y"] + dy

def event_image_positions(session):
    pts = event_positions(session.events, session.spline)
    return [None if p is None else field_to_image(p[0], p[1], session.crop, session.field) for p in pts]

def pick_waypoint(session, pos, radius_px: float = WAYPOINT_PICK_PX) -> Optional[int]:
    r = threshold_image(radius_px, session.crop, session.canvas_size)
    return nearest_index([(w["x"], w["y"]) for w in session.waypoints], pos, r)

def pick_rotation_handle(session, pos) -> Optional[int]:
    r = threshold_image(ROTATION_PICK_PX, session.crop, session.canvas_size)
    handles = [rotation_handle_pos(w, session.robot, session.crop, session.field) for w in session.waypoints]
    return nearest_index(handles, pos, r)

def pick_event(session, pos) -> Optional[int]:
    r = threshold_image(EVENT_PICK_PX, session.crop, session.canvas_size)
    return nearest_index(event_image_positions(session), pos, r)

def pick_delete(session, pos) -> Optional[int]:
    return pick_waypoint(session, pos, DELETE_PICK_PX)

def resolve_primary(session, pos) -> Tuple[str, Optional[int]]:
    """Left-click target: rotation handle > waypoint > event > new waypoint."""
    idx = pick_rotation_handle(session, pos)
    if idx is not None:
        return "rotation", idx
    idx = pick_waypoint(session, pos)
    if idx is not None:
        return "waypoint", idx
    idx = pick_event(session, pos)
    if idx is not None:
        return "event", idx
    return "create", None

def resolve_secondary(session, pos) -> Tuple[str, Optional[float]]:
    """
    Right-click target: event > new event on the path > delete waypoint.

    A new event is only offered away from waypoints, so a right-click on a
    waypoint still deletes it.
    """
    idx = pick_event(session, pos)
    if idx is not None:
        return "event", idx
    near_wp = pick_delete(session, pos)
    hit = closest_point_on_path(pos, session.spline, session.crop, session.field)
    if hit is not None and near_wp is None:
        t, dist = hit
        if dist < threshold_image(EVENT_PICK_PX, session.crop, session.canvas_size):
            return "create_event", t
    if near_wp is not None:
        return "delete", near_wp
    return "none", None
