# Waypoint model, event re-projection and the pointer state machine.
import math

import pytest

from .config import DEFAULT_ROBOT
from .events import event_positions
from .geom import field_to_image
from .picking import rotation_handle_pos
from .session import (
    PathEditorSession, IDLE, DRAGGING_WAYPOINT, DRAGGING_ROTATION, DRAGGING_EVENT,
    CROPPING_DRAG, PLAYING
)
from .storage import PathFileError

_FIELD = {"width": 10.0, "height": 10.0}
_SETTINGS = {"crop": {"left": 0, "right": 100, "top": 0, "bottom": 100}}


def _session():
    # 1 m = 10 image px = 100 canvas px
    return PathEditorSession((100, 100), _SETTINGS, field=_FIELD, canvas_size=(1000, 1000))


def _add_field(s, fx, fy):
    return s.add_waypoint(*field_to_image(fx, fy, s.crop, s.field))


def _event_field_pos(s, i=0):
    return event_positions(s.events, s.spline)[i]


def test_add_appends_in_order():
    s = _session()
    assert s.add_waypoint(30, 40) == 0
    assert s.add_waypoint(10, 20) == 1
    assert s.waypoints == [{"x": 30.0, "y": 40.0, "rotation": 0.0},
                           {"x": 10.0, "y": 20.0, "rotation": 0.0}]
    assert s.spline and s.total_length() > 0


def test_move_keeps_event_geometry():
    s = _session()
    _add_field(s, 0, 0)
    _add_field(s, 10, 0)
    s.create_event(0.5, "mid")
    s.move_waypoint(1, *field_to_image(10, 10, s.crop, s.field))
    t = s.events[0]["t"]
    assert abs(t - 0.25) < 1e-6
    x, y = _event_field_pos(s)
    literal = (10 * math.sqrt(0.5), 10 * math.sqrt(0.5))
    assert math.hypot(x - 5, y) < math.hypot(literal[0] - 5, literal[1])


def test_add_keeps_event_geometry():
    s = _session()
    _add_field(s, 0, 0)
    _add_field(s, 10, 0)
    s.create_event(0.5)
    _add_field(s, 20, 0)
    assert abs(s.events[0]["t"] - 0.25) < 1e-6
    x, y = _event_field_pos(s)
    assert abs(x - 5.0) < 1e-6 and abs(y) < 1e-9


def test_delete_reprojects_while_spline_remains():
    s = _session()
    for fx in (0, 10, 20):
        _add_field(s, fx, 0)
    s.create_event(0.75, "late")
    s.delete_waypoint(0)
    assert abs(s.events[0]["t"] - 0.5) < 1e-6
    s.delete_waypoint(0)
    assert len(s.waypoints) == 1
    assert abs(s.events[0]["t"] - 0.5) < 1e-6
    assert s.spline == [] and s.metrics() is None


def test_index_preconditions():
    s = _session()
    s.add_waypoint(1, 1)
    with pytest.raises(IndexError):
        s.move_waypoint(3, 0, 0)
    with pytest.raises(IndexError):
        s.delete_waypoint(-1)
    with pytest.raises(IndexError):
        s.set_rotation(1, 0.5)
    s.set_rotation(0, 2.5)
    assert s.waypoints[0]["rotation"] == 2.5


def test_undo_redo():
    s = _session()
    s.add_waypoint(5, 5)
    assert s.undo() and s.waypoints == []
    assert s.redo() and len(s.waypoints) == 1
    assert not s.redo()


def test_drag_is_one_transaction():
    s = _session()
    s.add_waypoint(20, 50)
    s.add_waypoint(80, 50)
    before = len(s.undo_stack)
    assert s.pointer_down(200, 500) == ("waypoint", 0)
    assert s.mode == DRAGGING_WAYPOINT
    s.pointer_move(300, 500)
    s.pointer_move(400, 450)
    assert s.pointer_up()
    assert s.mode == IDLE
    assert len(s.undo_stack) == before + 1
    assert (s.waypoints[0]["x"], s.waypoints[0]["y"]) == (40.0, 45.0)
    s.undo()
    assert (s.waypoints[0]["x"], s.waypoints[0]["y"]) == (20.0, 50.0)

    s.pointer_down(800, 500)
    assert not s.pointer_up()
    assert len(s.undo_stack) == before


def test_click_between_close_waypoints_selects():
    s = _session()
    s.add_waypoint(50.0, 50.0)
    s.add_waypoint(50.5, 50.0)
    assert s.pointer_down(501, 500) == ("waypoint", 0)
    s.pointer_up()
    assert len(s.waypoints) == 2
    assert s.pointer_down(504, 500) == ("waypoint", 1)
    s.pointer_up()


def test_click_empty_creates_waypoint():
    s = _session()
    assert s.pointer_down(250, 250) == ("create", 0)
    assert s.waypoints[0]["x"] == 25.0 and s.waypoints[0]["y"] == 25.0
    assert s.mode == IDLE and s.selected == ("waypoint", 0)


def test_rotation_drag():
    s = _session()
    s.add_waypoint(20, 50)
    hx, hy = s.to_canvas(*rotation_handle_pos(s.waypoints[0], s.robot, s.crop, s.field))
    assert s.pointer_down(hx, hy) == ("rotation", 0)
    assert s.mode == DRAGGING_ROTATION
    s.pointer_move(200, 400)
    assert abs(s.waypoints[0]["rotation"] - math.pi / 2) < 1e-9
    assert (s.waypoints[0]["x"], s.waypoints[0]["y"]) == (20.0, 50.0)
    s.pointer_up()


def test_event_drag_follows_pointer():
    s = _session()
    _add_field(s, 1, 5)
    _add_field(s, 9, 5)
    ev = s.create_event(0.5, "drag me")
    assert s.pointer_down(500, 500) == ("event", 0)
    assert s.mode == DRAGGING_EVENT
    s.pointer_move(700, 520)
    assert abs(ev["t"] - 0.75) < 1e-9
    assert s.pointer_up()
    assert s.selected == ("event", ev)


def test_secondary_click_actions():
    s = _session()
    _add_field(s, 1, 5)
    _add_field(s, 9, 5)
    kind, t = s.pointer_down(300, 505, 3)
    assert kind == "create_event" and len(s.events) == 1
    assert s.pointer_down(300, 500, 3) == ("event", 0)
    assert s.pointer_down(100, 500, 3) == ("delete", 0)
    assert len(s.waypoints) == 1
    assert s.pointer_down(500, 900, 3) == ("none", None)


def test_delete_selected():
    s = _session()
    _add_field(s, 1, 5)
    _add_field(s, 9, 5)
    ev = s.create_event(0.5)
    s.selected = ("event", ev)
    assert s.delete_selected() and s.events == []
    s.selected = ("waypoint", 1)
    assert s.delete_selected() and len(s.waypoints) == 1
    assert not s.delete_selected()


def test_edits_refused_during_waypoint_drag():
    s = _session()
    s.add_waypoint(20, 50)
    s.add_waypoint(80, 50)
    assert s.pointer_down(800, 500) == ("waypoint", 1)
    assert s.dragging
    assert not s.delete_selected()
    assert not s.load_data({"points": [{"id": 1, "x": 1, "y": 1}]})
    assert not s.clear()
    assert s.delete_waypoint(0) is None
    assert len(s.waypoints) == 2
    assert s.pointer_move(700, 500)
    assert (s.waypoints[1]["x"], s.waypoints[1]["y"]) == (70.0, 50.0)
    assert s.pointer_up() and not s.dragging
    assert s.delete_selected() and len(s.waypoints) == 1


def test_edits_refused_during_event_drag():
    s = _session()
    _add_field(s, 1, 5)
    _add_field(s, 9, 5)
    ev = s.create_event(0.5, "hold")
    assert s.pointer_down(500, 500) == ("event", 0)
    assert s.delete_event(0) is None
    assert not s.delete_selected()
    assert not s.clear()
    assert s.events == [ev]
    assert s.pointer_move(700, 520)
    assert abs(ev["t"] - 0.75) < 1e-9
    s.pointer_up()
    assert s.clear() and s.events == []


def test_crop_drag_in_crop_mode():
    s = _session()
    assert s.toggle_crop_mode()
    assert s.pointer_down(100, 200) == ("crop", None)
    assert s.mode == CROPPING_DRAG
    s.pointer_move(1500, 600)
    assert s.crop == {"left": 10.0, "right": 100.0, "top": 20.0, "bottom": 60.0}
    s.pointer_up()
    assert s.mode == IDLE
    assert not s.toggle_crop_mode()


def test_crop_slider_input():
    s = _session()
    assert s.apply_crop_input(20, 80, 10, 60)
    assert s.crop == {"left": 20.0, "right": 80.0, "top": 10.0, "bottom": 60.0}
    assert s.apply_crop_input(90, 30, -5, 250)
    assert s.crop == {"left": 30.0, "right": 90.0, "top": 0.0, "bottom": 100.0}
    s.add_waypoint(50, 50)
    assert s.pointer_down(*s.to_canvas(50, 50)) == ("waypoint", 0)
    assert s.dragging
    assert not s.apply_crop_input(0, 100, 0, 100)
    assert s.crop["left"] == 30.0
    s.pointer_up()
    assert not PathEditorSession().apply_crop_input(0, 10, 0, 10)


def test_playback_stops_on_pointer_down():
    s = _session()
    _add_field(s, 1, 5)
    _add_field(s, 9, 5)
    assert s.start_playback(0.0)
    assert s.mode == PLAYING
    pose = s.tick(0.5)
    assert pose is not None and abs(pose["x"] - 2.0) < 1e-6
    waypoints_before = [dict(w) for w in s.waypoints]
    s.pointer_down(900, 100)
    assert s.mode == IDLE and s.tick(0.6) is None
    assert s.waypoints[:2] == waypoints_before


def test_playback_needs_spline():
    s = _session()
    s.add_waypoint(10, 10)
    assert not s.start_playback(0.0)
    assert s.mode == IDLE


def test_load_data_is_all_or_nothing():
    s = _session()
    s.add_waypoint(10, 10)
    s.add_waypoint(20, 20)
    with pytest.raises(PathFileError):
        s.load_data({"events": []})
    with pytest.raises(PathFileError):
        s.load_data({"points": [{"x": 1, "y": 1}, {"x": "bad", "y": 2}]})
    assert len(s.waypoints) == 2
    s.load_data({"points": [{"id": 1, "x": 1, "y": 2, "rotation": 90}], "events": []})
    wp = s.waypoints[0]
    assert (wp["x"], wp["y"]) == (10.0, 80.0)
    assert abs(wp["rotation"] - math.pi / 2) < 1e-12


def test_points_summary():
    s = _session()
    s.add_waypoint(0, 100)
    s.add_waypoint(150, 50)
    lines = s.points_summary()
    assert lines[0] == "P1: (0.000, 0.000) 0.0 deg"
    assert lines[1].endswith("(Hidden)")
    s.create_event(0.5, "grab")
    assert s.points_summary()[2].startswith("grab: t=0.500")


def test_robot_inputs_and_image_defaults():
    s = _session()
    assert not s.set_robot_dimension("width", -1)
    assert not s.set_robot_dimension("bumper", "abc")
    assert s.robot["width"] == DEFAULT_ROBOT["width"]
    assert s.set_robot_dimension("speed", 3)
    assert s.robot["speed"] == 3.0
    with pytest.raises(KeyError):
        s.set_robot_dimension("mass", 1)

    fresh = PathEditorSession((1000, 800))
    ratio = fresh.field["width"] / fresh.field["height"]
    assert abs(fresh.crop["bottom"] - 1000 / ratio) < 1e-9
    assert PathEditorSession().pointer_down(10, 10) == ("none", None)


def run():
    test_add_appends_in_order()
    test_move_keeps_event_geometry()
    test_add_keeps_event_geometry()
    test_delete_reprojects_while_spline_remains()
    test_index_preconditions()
    test_undo_redo()
    test_drag_is_one_transaction()
    test_click_between_close_waypoints_selects()
    test_click_empty_creates_waypoint()
    test_rotation_drag()
    test_event_drag_follows_pointer()
    test_secondary_click_actions()
    test_delete_selected()
    test_edits_refused_during_waypoint_drag()
    test_edits_refused_during_event_drag()
    test_crop_drag_in_crop_mode()
    test_crop_slider_input()
    test_playback_stops_on_pointer_down()
    test_playback_needs_spline()
    test_load_data_is_all_or_nothing()
    test_points_summary()
    test_robot_inputs_and_image_defaults()


if __name__ == "__main__":
    run()
