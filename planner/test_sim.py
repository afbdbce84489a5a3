# Playback timing, cancellation and heading interpolation.
import math

from .path_utils import generate_spline
from .sim import Playback, STOPPED, PLAYING, sample_pose, waypoint_fraction

_LINE = generate_spline([(0.0, 0.0), (10.0, 0.0)], 50)


def test_playback_terminates_at_length():
    pb = Playback()
    assert pb.start(_LINE, [0.0, 0.0], speed=2.0, now=100.0)
    assert pb.state == PLAYING
    assert abs(pb.duration() - 5.0) < 1e-9
    pose = pb.tick(104.9)
    assert pose is not None and abs(pose["x"] - 9.8) < 1e-9
    assert pb.tick(105.0 + 1e-6) is None
    assert pb.state == STOPPED
    frames = pb.frames
    assert pb.tick(106.0) is None and pb.tick(104.0) is None
    assert pb.frames == frames


def test_stop_cancels_pending_frames():
    pb = Playback()
    pb.start(_LINE, [0.0, 0.0], speed=1.0, now=0.0)
    assert pb.tick(1.0) is not None
    pb.stop()
    assert pb.tick(1.1) is None
    assert not pb.playing


def test_start_refused_without_spline_or_speed():
    pb = Playback()
    assert not pb.start([], [0.0], speed=1.0, now=0.0)
    assert not pb.start(_LINE, [0.0, 0.0], speed=0.0, now=0.0)
    assert pb.state == STOPPED


def test_waypoint_fraction_uses_stride():
    assert waypoint_fraction(25, 0.0, 2, 50) == (0, 0.5)
    assert waypoint_fraction(50, 0.3, 3, 50) == (0, 1.0)
    assert waypoint_fraction(51, 0.0, 3, 50) == (1, 0.0)
    assert waypoint_fraction(200, 0.0, 3, 50) == (1, 1.0)


def test_heading_takes_shortest_arc():
    rotations = [math.radians(170.0), math.radians(-170.0)]
    pose = sample_pose(5.0, _LINE, rotations)
    assert abs(pose["heading"] - math.pi) < 1e-6
    start = sample_pose(0.0, _LINE, rotations)
    assert abs(start["heading"] - rotations[0]) < 1e-12
    assert sample_pose(1.0, _LINE, [0.0]) is None


def run():
    test_playback_terminates_at_length()
    test_stop_cancels_pending_frames()
    test_start_refused_without_spline_or_speed()
    test_waypoint_fraction_uses_stride()
    test_heading_takes_shortest_arc()


if __name__ == "__main__":
    run()
