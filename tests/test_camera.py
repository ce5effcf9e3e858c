import math

import pytest

from trisolaris.core.model import Vector2
from trisolaris.render.camera import (
    ROTATE_LEFT,
    ROTATE_RIGHT,
    TILT_DOWN,
    TILT_UP,
    Camera,
)


def test_defaults():
    camera = Camera()
    assert camera.zoom == 1.0
    assert (camera.yaw, camera.pitch) == (0.0, 0.0)
    assert camera.pan == Vector2(0.0, 0.0)
    assert not camera.dragging


def test_wheel_zoom_scales_and_clamps():
    camera = Camera()
    camera.zoom_by(-100)
    assert camera.zoom == pytest.approx(1.1)
    camera.zoom_by(100)
    assert camera.zoom == pytest.approx(0.99)

    for _ in range(200):
        camera.zoom_by(-500)
    assert camera.zoom == 50.0
    for _ in range(200):
        camera.zoom_by(500)
    assert camera.zoom == pytest.approx(0.1)


def test_huge_wheel_delta_stays_in_range():
    camera = Camera()
    camera.zoom_by(5000)
    assert camera.zoom == pytest.approx(0.1)


def test_pitch_is_clamped():
    camera = Camera()
    for _ in range(100):
        camera.rotate({TILT_UP})
    assert camera.pitch == pytest.approx(1.4)
    for _ in range(200):
        camera.rotate({TILT_DOWN})
    assert camera.pitch == pytest.approx(-1.4)


def test_yaw_is_unbounded():
    camera = Camera()
    for _ in range(300):
        camera.rotate({ROTATE_LEFT})
    assert camera.yaw == pytest.approx(9.0)
    camera.rotate({ROTATE_LEFT, ROTATE_RIGHT})
    assert camera.yaw == pytest.approx(9.0)


def test_drag_accumulates_pointer_deltas():
    camera = Camera()
    camera.begin_drag((100, 100))
    camera.drag((110, 95))
    camera.drag((130, 90))
    camera.end_drag()
    camera.drag((500, 500))
    assert camera.pan == Vector2(30.0, -10.0)
    assert not camera.dragging


def test_drag_without_begin_is_ignored():
    camera = Camera()
    camera.drag((50, 50))
    assert camera.pan == Vector2(0.0, 0.0)


def test_reset_restores_defaults():
    camera = Camera()
    camera.begin_drag((0, 0))
    camera.drag((40, 40))
    camera.zoom_by(-300)
    camera.rotate({ROTATE_LEFT, TILT_UP})
    camera.reset()
    assert camera.pan == Vector2(0.0, 0.0)
    assert camera.zoom == 1.0
    assert (camera.yaw, camera.pitch) == (0.0, 0.0)


def test_identity_projection():
    camera = Camera()
    point = camera.project(10.0, -20.0, (400.0, 300.0))
    assert (point.x, point.y, point.depth) == (410.0, 280.0, 0.0)


def test_yaw_quarter_turn_projection():
    camera = Camera()
    camera.state.yaw = math.pi / 2
    point = camera.project(10.0, 0.0, (0.0, 0.0))
    assert point.x == pytest.approx(0.0, abs=1e-9)
    assert point.y == pytest.approx(10.0)


def test_pitch_moves_depth_and_foreshortens():
    camera = Camera()
    camera.state.pitch = 1.0
    point = camera.project(0.0, 10.0, (0.0, 0.0))
    assert point.y == pytest.approx(10.0 * math.cos(1.0))
    assert point.depth == pytest.approx(10.0 * math.sin(1.0))


def test_pan_and_zoom_apply_in_screen_space():
    camera = Camera()
    camera.state.zoom = 2.0
    camera.state.pan = Vector2(5.0, -5.0)
    point = camera.project(3.0, 4.0, (100.0, 100.0))
    assert (point.x, point.y) == (111.0, 103.0)
