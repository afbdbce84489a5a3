# planner/draw.py

from __future__ import annotations

import pygame

try:
    from pygame import gfxdraw
except Exception:
    gfxdraw = None

from .config import (
    PATH_COLOR, BUMPER_COLOR, ROBOT_COLOR, MARKER_COLOR, HANDLE_COLOR,
    EVENT_COLOR, SELECTED, CROP_BORDER, PLAYBACK_COLOR, TEXT_COLOR, BG_COLOR
)
from .events import event_positions
from .geom import field_to_image, in_crop, letterbox
from .picking import rotation_handle_pos
from .util import oriented_rect_corners

BUMPER_ALPHA = 178
SHADE_ALPHA = 128


def _aa_polygon(surface, color, pts, width=0):
    """Anti-aliased polygon with fallback."""
    if gfxdraw is not None and len(color) == 3:
        try:
            gfxdraw.aapolygon(surface, pts, color)
            if width == 0:
                gfxdraw.filled_polygon(surface, pts, color)
            else:
                pygame.draw.polygon(surface, color, pts, width)
            return
        except Exception:
            pass
    pygame.draw.polygon(surface, color, pts, width)


def _field_to_canvas(session, p):
    x, y = field_to_image(p[0], p[1], session.crop, session.field)
    return session.to_canvas(x, y)


def _footprint(session, center_field, heading, grow=0.0):
    """Canvas polygon of the robot (optionally grown by the bumper) at a pose."""
    r = session.robot
    corners = oriented_rect_corners(center_field, heading,
                                    r["width"] + 2.0 * grow, r["height"] + 2.0 * grow)
    return [_field_to_canvas(session, c) for c in corners]


def draw_label(surface, anchor_xy, text, font, color=TEXT_COLOR):
    if font is None:
        return
    surface.blit(font.render(text, True, color), anchor_xy)


def draw_field(surface, image, session):
    """Cropped field image stretched over the canvas."""
    surface.fill(BG_COLOR)
    crop = session.crop
    src = pygame.Rect(int(crop["left"]), int(crop["top"]),
                      max(1, int(round(crop["right"] - crop["left"]))),
                      max(1, int(round(crop["bottom"] - crop["top"]))))
    src = src.clip(image.get_rect())
    if src.width <= 0 or src.height <= 0:
        return
    x0, y0 = session.to_canvas(src.left, src.top)
    x1, y1 = session.to_canvas(src.right, src.bottom)
    size = (max(1, int(round(x1 - x0))), max(1, int(round(y1 - y0))))
    part = pygame.transform.smoothscale(image.subsurface(src), size)
    surface.blit(part, (int(round(x0)), int(round(y0))))


def draw_crop_editor(surface, image, session):
    """Whole image letterboxed, shaded outside the crop, crop outlined."""
    surface.fill(BG_COLOR)
    scale, ox, oy = letterbox(surface.get_size(), session.image_size)
    size = (max(1, int(image.get_width() * scale)), max(1, int(image.get_height() * scale)))
    scaled = pygame.transform.smoothscale(image, size)
    surface.blit(scaled, (int(ox), int(oy)))

    shade = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
    shade.fill((0, 0, 0, SHADE_ALPHA))
    x0, y0 = session.to_canvas(session.crop["left"], session.crop["top"])
    x1, y1 = session.to_canvas(session.crop["right"], session.crop["bottom"])
    rect = pygame.Rect(int(x0), int(y0), max(1, int(x1 - x0)), max(1, int(y1 - y0)))
    shade.fill((0, 0, 0, 0), rect)
    surface.blit(shade, (0, 0))
    pygame.draw.rect(surface, CROP_BORDER, rect, 2)


def draw_path(surface, session):
    pts = [_field_to_canvas(session, p) for p in session.spline]
    if len(pts) >= 2:
        pygame.draw.lines(surface, PATH_COLOR, False, pts, 3)


def draw_waypoints(surface, session, font=None):
    """Robot footprint, crosshair, heading handle and label at every visible waypoint."""
    overlay = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
    bumper = session.robot["bumper"]
    sel = session.selected[1] if session.selected and session.selected[0] == "waypoint" else None

    for wp in session.waypoints:
        if not in_crop(wp["x"], wp["y"], session.crop):
            continue
        center = session.field_point(wp)
        pygame.draw.polygon(overlay, BUMPER_COLOR + (BUMPER_ALPHA,),
                            _footprint(session, center, wp["rotation"], bumper))
    surface.blit(overlay, (0, 0))

    for i, wp in enumerate(session.waypoints):
        if not in_crop(wp["x"], wp["y"], session.crop):
            continue
        center = session.field_point(wp)
        body = _footprint(session, center, wp["rotation"])
        _aa_polygon(surface, ROBOT_COLOR, body, 2)

        cx, cy = session.to_canvas(wp["x"], wp["y"])
        pygame.draw.line(surface, MARKER_COLOR, (cx - 5, cy), (cx + 5, cy), 2)
        pygame.draw.line(surface, MARKER_COLOR, (cx, cy - 5), (cx, cy + 5), 2)
        pygame.draw.circle(surface, SELECTED if i == sel else MARKER_COLOR, (int(cx), int(cy)), 2)

        hx, hy = session.to_canvas(*rotation_handle_pos(wp, session.robot, session.crop, session.field))
        pygame.draw.line(surface, HANDLE_COLOR, (cx, cy), (hx, hy), 1)
        pygame.draw.circle(surface, HANDLE_COLOR, (int(hx), int(hy)), 6)

        right = max(p[0] for p in body)
        top = min(p[1] for p in body)
        draw_label(surface, (right + 5, top), f"P{i + 1}", font, MARKER_COLOR)


def draw_events(surface, session, font=None):
    sel = session.selected[1] if session.selected and session.selected[0] == "event" else None
    for ev, pos in zip(session.events, event_positions(session.events, session.spline)):
        if pos is None:
            continue
        cx, cy = _field_to_canvas(session, pos)
        diamond = [(cx, cy - 7), (cx + 7, cy), (cx, cy + 7), (cx - 7, cy)]
        _aa_polygon(surface, SELECTED if ev is sel else EVENT_COLOR, diamond)
        draw_label(surface, (cx + 9, cy - 16), ev["name"], font, EVENT_COLOR)


def draw_playback(surface, session, pose):
    """Virtual robot at the current playback pose."""
    center = (pose["x"], pose["y"])
    _aa_polygon(surface, PLAYBACK_COLOR, _footprint(session, center, pose["heading"]), 3)
    nose = oriented_rect_corners(center, pose["heading"], session.robot["width"], 0.0)[1]
    a = _field_to_canvas(session, center)
    b = _field_to_canvas(session, nose)
    pygame.draw.line(surface, PLAYBACK_COLOR, a, b, 3)


def draw_session(surface, image, session, font=None, pose=None):
    """Render one frame of the editor."""
    if image is None or session.image_size is None:
        surface.fill(BG_COLOR)
        return
    if session.crop_mode:
        draw_crop_editor(surface, image, session)
        return
    draw_field(surface, image, session)
    draw_path(surface, session)
    draw_waypoints(surface, session, font)
    draw_events(surface, session, font)
    if pose is not None:
        draw_playback(surface, session, pose)
