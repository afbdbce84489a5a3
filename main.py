# main.py
import os

# Ensure SDL picks a usable video driver (helps when run from terminals that default to headless)
if os.name == "nt" and not os.environ.get("SDL_VIDEODRIVER"):
    os.environ["SDL_VIDEODRIVER"] = "windows"

import pygame
from tkinter import messagebox

from planner.config import (
    WINDOW_WIDTH, WINDOW_HEIGHT, BG_COLOR, TEXT_COLOR, load_settings, save_settings
)
from planner.draw import draw_session
from planner.events import index_of
from planner.geom import fit_canvas_size
from planner.session import PathEditorSession, IDLE, PLAYING
from planner.storage import PathFileError, save_path, load_path, ask_image_file
from planner.ui import (
    ensure_tk_root, pump_tk, output_refresh, toggle_output_window, toggle_controls_window,
    open_robot_window, open_crop_window, crop_window_refresh, ask_event_name
)

APP_TITLE = "STORMCHASER PATH PLANNER"
DEFAULT_IMAGE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "field_images", "2026.png")

CONTROLS = [
    ("LeftClick", "Drag heading handle, drag waypoint or event,\nor add a waypoint."),
    ("RightClick", "On an event: rename (empty name deletes).\nOn the path: add event.\nOn a waypoint: delete it."),
    ("I", "Load field image"),
    ("S / L", "Save / Load path"),
    ("C", "Toggle crop editor (drag to draw the crop)"),
    ("K", "Crop sliders"),
    ("R", "Robot settings"),
    ("P", "Toggle points list (with delete buttons)"),
    ("H", "Toggle this controls list"),
    ("SPACE", "Play / Stop"),
    ("Delete / Backspace", "Delete selected waypoint or event"),
    ("X", "Clear path"),
    ("CTRL+Z / CTRL+Y", "Undo / Redo"),
]

# ---------------- pygame init ----------------
pygame.init()
screen = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT))
pygame.display.set_caption(APP_TITLE)
clock = pygame.time.Clock()
font = pygame.font.SysFont("Arial", 14, bold=True)
font_small = pygame.font.SysFont(None, 18)

session = PathEditorSession()
field_image = None
status = "Ready to load image."
last_summary = None
last_crop = None


def _now():
    return pygame.time.get_ticks() / 1000.0

def canvas_rect():
    """Whole window in crop mode, otherwise the field-shaped canvas."""
    if session.crop_mode:
        return pygame.Rect(0, 0, WINDOW_WIDTH, WINDOW_HEIGHT)
    w, h = fit_canvas_size(WINDOW_WIDTH, WINDOW_HEIGHT, session.field)
    return pygame.Rect(0, 0, w, h)

def refresh():
    global last_summary, last_crop
    session.set_canvas_size(*canvas_rect().size)
    lines = session.points_summary()
    if lines != last_summary:
        last_summary = lines
        output_refresh(session, lines, refresh)
    if session.crop != last_crop:
        last_crop = dict(session.crop)
        crop_window_refresh(session.crop)

def persist_settings():
    if session.image_size is not None:
        save_settings(session.settings())

def load_image(path):
    """Load a field image; crop and robot come from saved settings when present."""
    global field_image, status
    try:
        img = pygame.image.load(path).convert()
    except (pygame.error, FileNotFoundError) as e:
        print(f"Failed to load image {path}: {e}")
        ensure_tk_root()
        messagebox.showerror("Load image", f"Could not load {path}:\n{e}")
        return
    field_image = img
    settings = load_settings()
    print(f"Loaded settings: {settings}")
    session.set_image(img.get_size(), settings)
    refresh()
    status = f"Loaded: {os.path.basename(path)}"

def _report_io(title, e):
    global status
    print(f"{title} failed: {e}")
    status = f"{title} failed"
    ensure_tk_root()
    messagebox.showerror(title, str(e))

def handle_secondary(pos):
    action, value = session.pointer_down(pos[0], pos[1], 3)
    if action != "event":
        return
    ev = session.events[value]
    name = ask_event_name(ev["name"])
    if name is None:
        return
    idx = index_of(session.events, ev)
    if name.strip():
        session.rename_event(idx, name.strip())
    else:
        session.delete_event(idx)

def handle_key(event):
    global status
    mods = pygame.key.get_mods()
    ctrl = bool(mods & pygame.KMOD_CTRL)

    if ctrl and event.key == pygame.K_z:
        session.undo()
    elif ctrl and event.key == pygame.K_y:
        session.redo()
    elif event.key == pygame.K_i:
        ensure_tk_root()
        path = ask_image_file()
        if path:
            load_image(path)
    elif event.key == pygame.K_s:
        if not session.waypoints:
            return
        ensure_tk_root()
        try:
            if save_path(session):
                status = "Points exported successfully!"
        except OSError as e:
            _report_io("Save path", e)
    elif event.key == pygame.K_l:
        if session.image_size is None:
            return
        ensure_tk_root()
        try:
            if load_path(session):
                status = "Path loaded."
        except (OSError, PathFileError) as e:
            _report_io("Load path", e)
    elif event.key == pygame.K_c and session.image_size is not None:
        was = session.crop_mode
        session.toggle_crop_mode()
        if was and not session.crop_mode:
            persist_settings()
    elif event.key == pygame.K_k and session.image_size is not None:
        open_crop_window(session, persist_settings)
    elif event.key == pygame.K_h:
        toggle_controls_window(CONTROLS)
    elif event.key == pygame.K_r:
        open_robot_window(session, lambda: (persist_settings(), refresh()))
    elif event.key == pygame.K_p:
        toggle_output_window(session, refresh)
    elif event.key == pygame.K_SPACE:
        if session.mode == PLAYING:
            session.stop_playback()
        else:
            session.start_playback(_now())
    elif event.key in (pygame.K_DELETE, pygame.K_BACKSPACE):
        session.delete_selected()
    elif event.key == pygame.K_x and session.mode == IDLE:
        session.clear()

def draw_status(surface):
    text = f"{status}  |  mode: {session.mode}  |  length: {session.total_length():.3f} m"
    surf = font_small.render(text, True, TEXT_COLOR)
    surface.blit(surf, (8, WINDOW_HEIGHT - surf.get_height() - 6))

def main():
    """Main application loop."""
    if os.path.exists(DEFAULT_IMAGE):
        load_image(DEFAULT_IMAGE)

    running = True
    while running:
        clock.tick(60)
        pump_tk()
        refresh()
        rect = canvas_rect()

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                handle_key(event)
            elif event.type == pygame.MOUSEBUTTONDOWN and rect.collidepoint(event.pos):
                if event.button == 1:
                    session.pointer_down(event.pos[0], event.pos[1], 1)
                elif event.button == 3:
                    handle_secondary(event.pos)
            elif event.type == pygame.MOUSEMOTION:
                session.pointer_move(event.pos[0], event.pos[1])
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                session.pointer_up()

        refresh()
        pose = session.tick(_now())
        screen.fill(BG_COLOR)
        draw_session(screen.subsurface(canvas_rect()), field_image, session, font, pose)
        draw_status(screen)
        pygame.display.flip()

    persist_settings()
    pygame.quit()


if __name__ == "__main__":
    main()
