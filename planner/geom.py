# planner/geom.py
"""
Coordinate transforms between image pixels, canvas pixels and field meters.

Every function here is a pure function of the crop rectangle, the field
constants and (for canvas space) the canvas size. Field space has its origin
at the bottom-left corner of the crop with Y pointing away from the image
row direction.
"""

from __future__ import annotations

import math
from typing import Tuple

Point = Tuple[float, float]


def normalize_crop(left, right, top, bottom) -> dict:
    """Order crop edges and widen degenerate extents by one pixel."""
    x1, x2 = float(left), float(right)
    y1, y2 = float(top), float(bottom)
    l, r = min(x1, x2), max(x1, x2)
    t, b = min(y1, y2), max(y1, y2)
    if r == l:
        r = l + 1.0
    if b == t:
        b = t + 1.0
    return {"left": l, "right": r, "top": t, "bottom": b}


def crop_size(crop: dict) -> Tuple[float, float]:
    return crop["right"] - crop["left"], crop["bottom"] - crop["top"]


def default_crop(image_w: float, image_h: float, field: dict) -> dict:
    """Full-width crop whose height matches the field aspect ratio."""
    ratio = field["width"] / field["height"]
    return normalize_crop(0.0, image_w, 0.0, image_w / ratio)


def in_crop(x: float, y: float, crop: dict) -> bool:
    return crop["left"] <= x <= crop["right"] and crop["top"] <= y <= crop["bottom"]


def image_to_field(x: float, y: float, crop: dict, field: dict) -> Point:
    """Image pixel -> field meters (Y flipped)."""
    cw, ch = crop_size(crop)
    rel_x = (x - crop["left"]) / cw
    rel_y = (crop["bottom"] - y) / ch
    return rel_x * field["width"], rel_y * field["height"]


def field_to_image(fx: float, fy: float, crop: dict, field: dict) -> Point:
    """Field meters -> image pixel; exact inverse of image_to_field."""
    cw, ch = crop_size(crop)
    rel_x = fx / field["width"]
    rel_y = fy / field["height"]
    return crop["left"] + rel_x * cw, crop["bottom"] - rel_y * ch


def meters_to_image_offset(dx_m: float, dy_m: float, crop: dict, field: dict) -> Point:
    """Convert a field-space displacement into an image-pixel displacement."""
    cw, ch = crop_size(crop)
    return dx_m * cw / field["width"], -dy_m * ch / field["height"]


def letterbox(canvas_size, image_size) -> Tuple[float, float, float]:
    """Aspect-fit scale and offset of the whole image inside the canvas."""
    cw, ch = canvas_size
    iw, ih = image_size
    scale = min(cw / iw, ch / ih)
    ox = (cw - iw * scale) / 2.0
    oy = (ch - ih * scale) / 2.0
    return scale, ox, oy


def canvas_scale(crop: dict, canvas_size) -> Tuple[float, float]:
    """Per-axis canvas pixels per image pixel in normal display mode."""
    cw, ch = crop_size(crop)
    return canvas_size[0] / cw, canvas_size[1] / ch


def image_to_canvas(x: float, y: float, crop: dict, canvas_size,
                    image_size=None, crop_mode: bool = False) -> Point:
    if crop_mode:
        scale, ox, oy = letterbox(canvas_size, image_size)
        return ox + x * scale, oy + y * scale
    sx, sy = canvas_scale(crop, canvas_size)
    return (x - crop["left"]) * sx, (y - crop["top"]) * sy


def canvas_to_image(cx: float, cy: float, crop: dict, canvas_size,
                    image_size=None, crop_mode: bool = False) -> Point:
    if crop_mode:
        scale, ox, oy = letterbox(canvas_size, image_size)
        return (cx - ox) / scale, (cy - oy) / scale
    sx, sy = canvas_scale(crop, canvas_size)
    return crop["left"] + cx / sx, crop["top"] + cy / sy


def fit_canvas_size(container_w: float, container_h: float, field: dict) -> Tuple[int, int]:
    """Largest canvas with the field's aspect ratio inside the container."""
    ratio = field["width"] / field["height"]
    w = container_w
    h = container_w / ratio
    if h > container_h:
        h = container_h
        w = container_h * ratio
    return int(math.floor(w)), int(math.floor(h))
