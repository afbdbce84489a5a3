# planner/config.py
from __future__ import annotations
import json, os
from typing import Optional

# Window
WINDOW_WIDTH  = 1200
WINDOW_HEIGHT = 900

# Field revision (meters spanned by the crop rectangle)
FIELD_WIDTH_M  = 16.541
FIELD_HEIGHT_M = 8.067
FIELD_CONSTANTS = {"width": FIELD_WIDTH_M, "height": FIELD_HEIGHT_M}

METERS_PER_INCH = 0.0254

# Spline density (subdivisions per waypoint segment)
SPLINE_SEGMENTS = 50

# Pick radii in canvas pixels
WAYPOINT_PICK_PX = 20.0
ROTATION_PICK_PX = 20.0
EVENT_PICK_PX    = 15.0
DELETE_PICK_PX   = 10.0

# Rotation handle sits this far past the robot's half extent (meters)
HANDLE_MARGIN_M = 0.5

# Colors (RGB)
BG_COLOR      = (0, 0, 0)
PATH_COLOR    = (255, 165, 0)
BUMPER_COLOR  = (211, 47, 47)
ROBOT_COLOR   = (0, 0, 255)
MARKER_COLOR  = (255, 0, 0)
HANDLE_COLOR  = (255, 215, 0)
EVENT_COLOR   = (50, 255, 50)
SELECTED      = (255, 255, 255)
CROP_BORDER   = (255, 0, 0)
PLAYBACK_COLOR = (252, 3, 248)
TEXT_COLOR    = (255, 255, 255)

SETTINGS_FILENAME = "settings.json"

DEFAULT_ROBOT = {
    "width":  28 * METERS_PER_INCH,
    "height": 28 * METERS_PER_INCH,
    "bumper": 3 * METERS_PER_INCH,
    "speed":  2.0,
}

ROBOT_KEYS = ("width", "height", "bumper", "speed")
CROP_KEYS = ("left", "right", "top", "bottom")


def _num(x, d=0.0):
    """Extract numeric value from dict or return default."""
    if isinstance(x, dict):
        x = x.get("value", d)
    try:
        return float(x)
    except Exception:
        return d

def _load_json(path: str) -> Optional[dict]:
    """Load JSON file, return None on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except Exception:
        return None

def _save_json(path: str, data: dict) -> None:
    """Save JSON file with error handling."""
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
    except Exception:
        pass
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)

def settings_path() -> str:
    here = os.path.dirname(__file__)
    return os.path.normpath(os.path.join(here, os.pardir, SETTINGS_FILENAME))

def crop_flat(settings: Optional[dict]) -> Optional[dict]:
    """Crop section as plain floats, or None when absent/incomplete."""
    if not isinstance(settings, dict):
        return None
    raw = settings.get("crop")
    if not isinstance(raw, dict) or any(k not in raw for k in CROP_KEYS):
        return None
    return {k: _num(raw[k], 0.0) for k in CROP_KEYS}

def robot_flat(settings: Optional[dict]) -> dict:
    """Robot section as plain floats; missing or non-positive values fall back to defaults."""
    raw = settings.get("robot", {}) if isinstance(settings, dict) else {}
    if not isinstance(raw, dict):
        raw = {}
    out = {}
    for k in ROBOT_KEYS:
        v = _num(raw.get(k), 0.0)
        out[k] = v if v > 0 else DEFAULT_ROBOT[k]
    return out

def load_settings(path: Optional[str] = None) -> Optional[dict]:
    """Load the settings blob; None when missing or unreadable."""
    data = _load_json(path or settings_path())
    return data if isinstance(data, dict) else None

def save_settings(settings: dict, path: Optional[str] = None) -> bool:
    """Persist crop and robot settings."""
    target = path or settings_path()
    try:
        raw = {
            "crop": {k: float(settings["crop"][k]) for k in CROP_KEYS},
            "robot": {k: float(settings["robot"][k]) for k in ROBOT_KEYS},
        }
        _save_json(target, raw)
        print(f"Settings saved to {target}")
        return True
    except Exception as e:
        print(f"Failed to save settings: {e}")
        return False
