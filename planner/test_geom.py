# Transform checks: field/image round trips, crop normalization and canvas mapping.
import random

from .config import FIELD_CONSTANTS
from .geom import (
    normalize_crop, default_crop, image_to_field, field_to_image, image_to_canvas,
    canvas_to_image, fit_canvas_size, meters_to_image_offset, letterbox, in_crop
)

_CROP = normalize_crop(100, 900, 50, 450)


def test_field_round_trip():
    rng = random.Random(1)
    for _ in range(500):
        p = (rng.uniform(100, 900), rng.uniform(50, 450))
        fx, fy = image_to_field(p[0], p[1], _CROP, FIELD_CONSTANTS)
        q = field_to_image(fx, fy, _CROP, FIELD_CONSTANTS)
        assert abs(q[0] - p[0]) < 1e-6 and abs(q[1] - p[1]) < 1e-6


def test_field_origin_bottom_left():
    assert image_to_field(100, 450, _CROP, FIELD_CONSTANTS) == (0.0, 0.0)
    fx, fy = image_to_field(900, 50, _CROP, FIELD_CONSTANTS)
    assert abs(fx - FIELD_CONSTANTS["width"]) < 1e-9
    assert abs(fy - FIELD_CONSTANTS["height"]) < 1e-9


def test_normalize_crop_orders_and_widens():
    crop = normalize_crop(10, 10, 5, 2)
    assert crop == {"left": 10.0, "right": 11.0, "top": 2.0, "bottom": 5.0}
    assert normalize_crop(30, 5, 9, 9)["bottom"] == 10.0


def test_default_crop_matches_field_ratio():
    crop = default_crop(1000, 800, FIELD_CONSTANTS)
    assert crop["left"] == 0.0 and crop["right"] == 1000.0 and crop["top"] == 0.0
    ratio = FIELD_CONSTANTS["width"] / FIELD_CONSTANTS["height"]
    assert abs(crop["bottom"] - 1000.0 / ratio) < 1e-9


def test_canvas_mapping_normal_mode():
    canvas = (800, 400)
    assert image_to_canvas(100, 50, _CROP, canvas) == (0.0, 0.0)
    assert image_to_canvas(900, 450, _CROP, canvas) == (800.0, 400.0)
    x, y = canvas_to_image(*image_to_canvas(321.5, 123.25, _CROP, canvas), _CROP, canvas)
    assert abs(x - 321.5) < 1e-9 and abs(y - 123.25) < 1e-9


def test_canvas_mapping_crop_mode_letterbox():
    canvas, image = (1000, 500), (2000, 500)
    assert letterbox(canvas, image) == (0.5, 0.0, 125.0)
    assert image_to_canvas(0, 0, _CROP, canvas, image, crop_mode=True) == (0.0, 125.0)
    x, y = canvas_to_image(500, 250, _CROP, canvas, image, crop_mode=True)
    assert (x, y) == (1000.0, 250.0)


def test_fit_canvas_size():
    assert fit_canvas_size(1200, 900, FIELD_CONSTANTS) == (1200, 585)
    w, h = fit_canvas_size(400, 900, FIELD_CONSTANTS)
    assert w == 400 and h == 195


def test_meter_offset_flips_y():
    crop = normalize_crop(0, 100, 0, 100)
    field = {"width": 10.0, "height": 10.0}
    assert meters_to_image_offset(1.0, 2.0, crop, field) == (10.0, -20.0)
    assert in_crop(0, 100, crop) and not in_crop(101, 50, crop)


def run():
    test_field_round_trip()
    test_field_origin_bottom_left()
    test_normalize_crop_orders_and_widens()
    test_default_crop_matches_field_ratio()
    test_canvas_mapping_normal_mode()
    test_canvas_mapping_crop_mode_letterbox()
    test_fit_canvas_size()
    test_meter_offset_flips_y()


if __name__ == "__main__":
    run()
