# planner/sim.py
"""
Constant-speed playback of a virtual robot along the spline.

Playback only reads the path; it copies the spline and waypoint rotations
when started and never mutates the session.
"""

from __future__ import annotations

from typing import List, Optional

from .config import SPLINE_SEGMENTS
from .path_utils import locate_distance, path_length
from .util import lerp_angle

STOPPED = "stopped"
PLAYING = "playing"


def waypoint_fraction(poly_index: int, frac: float, waypoint_count: int,
                      segments: int = SPLINE_SEGMENTS):
    """
    Map a polyline position back to (waypoint segment, fraction in it).

    Samples come in strides of segments+1; the last step of a stride joins
    two copies of the same waypoint and counts as the end of the segment.
    Dividing the raw index by segments instead gains one sample per stride
    and drifts onto later waypoints, so the stride is used for both parts.
    """
    stride = segments + 1
    k = poly_index // stride
    local = poly_index % stride
    if local >= segments:
        f = 1.0
    else:
        f = (local + frac) / segments
    if k > waypoint_count - 2:
        k, f = waypoint_count - 2, 1.0
    return k, max(0.0, min(1.0, f))


def sample_pose(distance: float, path_points, rotations: List[float],
                segments: int = SPLINE_SEGMENTS) -> Optional[dict]:
    """Pose at an arc length: field position plus interpolated heading."""
    if len(rotations) < 2:
        return None
    hit = locate_distance(distance, path_points)
    if hit is None:
        return None
    (x, y), i, frac = hit
    k, f = waypoint_fraction(i, frac, len(rotations), segments)
    heading = lerp_angle(rotations[k], rotations[k + 1], f)
    return {"x": x, "y": y, "heading": heading, "segment": k, "fraction": f}


class Playback:
    """Stopped -> Playing -> Stopped; driven by tick(now) once per frame."""

    def __init__(self):
        self.state = STOPPED
        self.t0 = 0.0
        self.speed = 0.0
        self.total = 0.0
        self.frames = 0
        self._path: list = []
        self._rotations: list = []
        self._segments = SPLINE_SEGMENTS

    @property
    def playing(self) -> bool:
        return self.state == PLAYING

    def start(self, path_points, rotations, speed: float, now: float,
              segments: int = SPLINE_SEGMENTS) -> bool:
        """Begin playback; refused without a spline or with a non-positive speed."""
        if len(rotations) < 2 or not path_points or len(path_points) < 2 or speed <= 0:
            return False
        self._path = list(path_points)
        self._rotations = list(rotations)
        self._segments = segments
        self.total = path_length(self._path)
        self.speed = float(speed)
        self.t0 = float(now)
        self.frames = 0
        self.state = PLAYING
        return True

    def stop(self) -> None:
        """Cancel playback; later ticks render nothing."""
        self.state = STOPPED

    def duration(self) -> float:
        return self.total / self.speed if self.speed > 0 else 0.0

    def tick(self, now: float) -> Optional[dict]:
        """Advance to time now. Returns the pose to render, or None once stopped."""
        if self.state != PLAYING:
            return None
        elapsed = float(now) - self.t0
        distance = self.speed * max(0.0, elapsed)
        if distance >= self.total:
            self.stop()
            return None
        pose = sample_pose(distance, self._path, self._rotations, self._segments)
        if pose is None:
            self.stop()
            return None
        self.frames += 1
        return pose
