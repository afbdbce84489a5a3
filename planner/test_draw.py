# Offscreen rendering smoke checks (no display needed).
import pygame

from .config import PATH_COLOR, BG_COLOR
from .draw import draw_session
from .session import PathEditorSession

_FIELD = {"width": 10.0, "height": 10.0}
_SETTINGS = {"crop": {"left": 0, "right": 100, "top": 0, "bottom": 100}}


def _scene():
    image = pygame.Surface((100, 100), 0, 32)
    image.fill((0, 0, 0))
    canvas = pygame.Surface((200, 200), 0, 32)
    s = PathEditorSession((100, 100), _SETTINGS, field=_FIELD, canvas_size=canvas.get_size())
    s.add_waypoint(10, 50)
    s.add_waypoint(90, 50)
    s.create_event(0.9, "score")
    return image, canvas, s


def test_path_is_drawn():
    image, canvas, s = _scene()
    draw_session(canvas, image, s, font=None, pose={"x": 5.0, "y": 5.0, "heading": 0.3})
    assert tuple(canvas.get_at((60, 100)))[:3] == PATH_COLOR


def test_crop_editor_and_empty_session():
    image, canvas, s = _scene()
    s.toggle_crop_mode()
    draw_session(canvas, image, s)
    empty = PathEditorSession()
    draw_session(canvas, None, empty)
    assert tuple(canvas.get_at((5, 5)))[:3] == BG_COLOR


def run():
    test_path_is_drawn()
    test_crop_editor_and_empty_session()


if __name__ == "__main__":
    run()
