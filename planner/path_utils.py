# planner/path_utils.py
"""
Spline generation and arc-length queries for the waypoint path.
Handles Catmull-Rom sampling, per-segment length accounting, distance lookup
and nearest-point projection.
"""

from __future__ import annotations

import math
from typing import Iterator, List, Optional, Tuple

from .config import SPLINE_SEGMENTS
from .geom import field_to_image

Point = Tuple[float, float]


def iter_spline(points: List[Point], segments: int = SPLINE_SEGMENTS) -> Iterator[Point]:
    """
    Yield a Catmull-Rom curve through the control points.

    Each input segment i contributes segments+1 samples (both ends included),
    so a segment boundary appears twice. Ends are clamped by duplicating the
    first and last control points. Calling again restarts the sequence.

    Args:
        points: List of (x, y) control points
        segments: Number of subdivisions per input segment

    Yields:
        Interpolated (x, y) points in traversal order
    """
    n = len(points)
    if n < 2:
        return
    for i in range(n - 1):
        p0 = points[max(i - 1, 0)]
        p1 = points[i]
        p2 = points[i + 1]
        p3 = points[min(i + 2, n - 1)]

        cp1x = p1[0] + (p2[0] - p0[0]) / 6.0
        cp1y = p1[1] + (p2[1] - p0[1]) / 6.0
        cp2x = p2[0] - (p3[0] - p1[0]) / 6.0
        cp2y = p2[1] - (p3[1] - p1[1]) / 6.0

        cx = 3.0 * (cp1x - p1[0])
        bx = 3.0 * (cp2x - cp1x) - cx
        ax = p2[0] - p1[0] - cx - bx
        cy = 3.0 * (cp1y - p1[1])
        by = 3.0 * (cp2y - cp1y) - cy
        ay = p2[1] - p1[1] - cy - by

        for j in range(segments + 1):
            if j == segments:
                # land exactly on the waypoint
                yield (float(p2[0]), float(p2[1]))
                continue
            t = j / segments
            t2 = t * t
            t3 = t2 * t
            yield (ax * t3 + bx * t2 + cx * t + p1[0],
                   ay * t3 + by * t2 + cy * t + p1[1])


def generate_spline(points: List[Point], segments: int = SPLINE_SEGMENTS) -> List[Point]:
    """Materialized spline; empty for fewer than two control points."""
    return list(iter_spline(points, segments))


def _seg_len(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def path_length(path_points: List[Point]) -> float:
    """Total polyline length."""
    if not path_points or len(path_points) < 2:
        return 0.0
    return sum(_seg_len(path_points[i], path_points[i + 1]) for i in range(len(path_points) - 1))


def calculate_path_metrics(path_points: List[Point], waypoint_count: int,
                           segments: int = SPLINE_SEGMENTS) -> Optional[dict]:
    """
    Length of each waypoint-to-waypoint segment and of the whole path.

    Relies on the fixed stride of segments+1 samples per input segment.
    Returns None when there is no spline.
    """
    if waypoint_count < 2 or len(path_points) < 2:
        return None
    stride = segments + 1
    lengths = []
    for i in range(waypoint_count - 1):
        start = i * stride
        seg = 0.0
        for j in range(start, start + segments):
            if j + 1 >= len(path_points):
                break
            seg += _seg_len(path_points[j], path_points[j + 1])
        lengths.append(seg)
    return {"segment_lengths": lengths, "total": sum(lengths)}


def locate_distance(dist: float, path_points: List[Point]) -> Optional[Tuple[Point, int, float]]:
    """
    Find the point at a given arc length.

    Returns (point, polyline segment index, fraction within that segment),
    or None when the path has fewer than two points. Distances outside
    [0, length] land on the ends.
    """
    if not path_points or len(path_points) < 2:
        return None
    if dist <= 0.0:
        return path_points[0], 0, 0.0

    cumulative = 0.0
    for i in range(len(path_points) - 1):
        a, b = path_points[i], path_points[i + 1]
        seg = _seg_len(a, b)
        if cumulative + seg >= dist:
            frac = 0.0 if seg <= 1e-12 else (dist - cumulative) / seg
            return (a[0] + frac * (b[0] - a[0]), a[1] + frac * (b[1] - a[1])), i, frac
        cumulative += seg

    return path_points[-1], len(path_points) - 2, 1.0


def point_at_distance(dist: float, path_points: List[Point]) -> Optional[Point]:
    """Return the point at arc length dist, or None without a path."""
    hit = locate_distance(dist, path_points)
    return None if hit is None else hit[0]


def point_at_t(t: float, path_points: List[Point]) -> Optional[Point]:
    """Point at a normalized arc-length fraction."""
    if not path_points or len(path_points) < 2:
        return None
    t = max(0.0, min(1.0, float(t)))
    return point_at_distance(t * path_length(path_points), path_points)


def project_to_segment(p: Point, a: Point, b: Point) -> Tuple[float, float]:
    """Perpendicular projection of p onto segment ab: (fraction, distance)."""
    dx, dy = b[0] - a[0], b[1] - a[1]
    l2 = dx * dx + dy * dy
    if l2 <= 1e-18:
        return 0.0, math.hypot(p[0] - a[0], p[1] - a[1])
    frac = ((p[0] - a[0]) * dx + (p[1] - a[1]) * dy) / l2
    frac = max(0.0, min(1.0, frac))
    qx, qy = a[0] + frac * dx, a[1] + frac * dy
    return frac, math.hypot(p[0] - qx, p[1] - qy)


def nearest_on_polyline(p: Point, path_points: List[Point]) -> Optional[Tuple[int, float, float]]:
    """Global nearest segment: (segment index, fraction, distance)."""
    if not path_points or len(path_points) < 2:
        return None
    best = None
    for i in range(len(path_points) - 1):
        frac, d = project_to_segment(p, path_points[i], path_points[i + 1])
        if best is None or d < best[2]:
            best = (i, frac, d)
    return best


def t_for_segment(path_points: List[Point], index: int, frac: float) -> float:
    """Normalized arc length of a point given as (segment index, fraction)."""
    total = path_length(path_points)
    if total <= 1e-12:
        return 0.0
    before = sum(_seg_len(path_points[i], path_points[i + 1]) for i in range(index))
    here = _seg_len(path_points[index], path_points[index + 1]) * frac
    return max(0.0, min(1.0, (before + here) / total))


def closest_point_on_path(query_img: Point, path_points: List[Point],
                          crop: dict, field: dict) -> Optional[Tuple[float, float]]:
    """
    Nearest point on the spline to an image-pixel query.

    The spline (field meters) is walked in image-pixel space. Returns
    (t, distance in image pixels), or None without a spline. The transform
    is an axis scale, so the in-segment fraction carries over to field space
    unchanged.
    """
    if not path_points or len(path_points) < 2:
        return None
    img_pts = [field_to_image(x, y, crop, field) for (x, y) in path_points]
    index, frac, dist = nearest_on_polyline(query_img, img_pts)
    return t_for_segment(path_points, index, frac), dist


def closest_t_in_field(p: Point, path_points: List[Point]) -> Optional[float]:
    """Normalized arc length of the spline point nearest a field-space point."""
    hit = nearest_on_polyline(p, path_points)
    if hit is None:
        return None
    index, frac, _ = hit
    return t_for_segment(path_points, index, frac)
