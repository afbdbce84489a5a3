# planner/util.py
from __future__ import annotations

import copy
import math

UNDO_LIMIT = 200


def angle_diff(r0: float, r1: float) -> float:
    """Shortest signed difference r1 - r0 in [-pi, pi]."""
    return (r1 - r0 + math.pi) % (2.0 * math.pi) - math.pi

def lerp_angle(r0: float, r1: float, frac: float) -> float:
    """Interpolate along the shortest arc."""
    return r0 + angle_diff(r0, r1) * frac

def clamp01(v: float) -> float:
    return max(0.0, min(1.0, float(v)))

def heading_unit(rad: float):
    """Field-space unit vector (x right, y up) for a heading."""
    return (math.cos(rad), math.sin(rad))

def oriented_rect_corners(center, heading_rad, length, width):
    """Rectangle corners rotated about center, in the same units as the inputs."""
    hl, hw = float(length) * 0.5, float(width) * 0.5
    local = [(-hl, -hw), (hl, -hw), (hl, hw), (-hl, hw)]
    s, c = math.sin(heading_rad), math.cos(heading_rad)
    return [(center[0] + lx * c - ly * s, center[1] + lx * s + ly * c) for lx, ly in local]

def snapshot(waypoints, events):
    """Create deep copy snapshot for undo."""
    return (copy.deepcopy(waypoints), copy.deepcopy(events))

def push_undo_prev(undo_stack, before_state):
    """Push state to undo stack with size limit."""
    undo_stack.append(before_state)
    if len(undo_stack) > UNDO_LIMIT:
        undo_stack.pop(0)
