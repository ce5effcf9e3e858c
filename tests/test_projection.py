import math

import numpy as np
import pytest

from trisolaris.core.model import Body, Vector2
from trisolaris.render.camera import Camera
from trisolaris.render.projection import build_render_list, format_hud_lines, project_points


def make_body(id, x, y):
    return Body(
        id=id,
        position=Vector2(x, y),
        velocity=Vector2(0.0, 0.0),
        mass=1.0,
        radius=2.0,
        color="#fbbf24",
    )


def test_identity_camera_maps_world_to_screen_around_centre():
    camera = Camera()
    items = build_render_list([make_body("a", 100.0, 50.0)], camera, (800, 600))
    assert items[0].screen_pos == (500.0, 350.0)
    assert items[0].visible


def test_yaw_quarter_turn_rotates_the_plane():
    camera = Camera()
    camera.state.yaw = math.pi / 2
    items = build_render_list([make_body("a", 10.0, 0.0)], camera, (0, 0))
    assert items[0].screen_x == pytest.approx(0.0, abs=1e-9)
    assert items[0].screen_y == pytest.approx(10.0)


def test_items_are_ordered_farthest_first():
    camera = Camera()
    camera.state.pitch = 0.5
    bodies = [make_body("near", 0.0, 100.0), make_body("far", 0.0, -100.0), make_body("mid", 0.0, 0.0)]
    items = build_render_list(bodies, camera, (800, 600))
    assert [item.body.id for item in items] == ["far", "mid", "near"]
    depths = [item.depth for item in items]
    assert depths == sorted(depths)


def test_equal_depths_keep_input_order():
    camera = Camera()
    bodies = [make_body(name, float(i), 0.0) for i, name in enumerate("dcba")]
    first = build_render_list(bodies, camera, (800, 600))
    second = build_render_list(bodies, camera, (800, 600))
    assert [item.body.id for item in first] == list("dcba")
    assert [item.body.id for item in second] == list("dcba")


def test_trail_points_are_projected_with_the_body():
    camera = Camera()
    camera.state.zoom = 2.0
    body = make_body("a", 0.0, 0.0)
    body.trail.extend([Vector2(1.0, 1.0), Vector2(2.0, 3.0)])
    item = build_render_list([body], camera, (100, 100))[0]
    np.testing.assert_allclose(item.trail_points, [[52.0, 52.0], [54.0, 56.0]])


def test_empty_trail_gives_empty_array():
    item = build_render_list([make_body("a", 0.0, 0.0)], Camera(), (100, 100))[0]
    assert item.trail_points.shape == (0, 2)


def test_project_points_matches_camera_project():
    camera = Camera()
    camera.state.yaw = 0.7
    camera.state.pitch = -0.4
    camera.state.zoom = 1.7
    camera.state.pan = Vector2(12.0, -8.0)
    points = np.array([[10.0, 20.0], [-35.0, 4.0]])
    projected = project_points(points, camera.state, (400.0, 300.0))
    for row, (x, y) in zip(projected, points):
        expected = camera.project(x, y, (400.0, 300.0))
        assert row == pytest.approx([expected.x, expected.y, expected.depth])


def test_non_finite_bodies_are_not_visible():
    item = build_render_list([make_body("a", float("nan"), 0.0)], Camera(), (100, 100))[0]
    assert not item.visible


def test_hud_lines():
    camera = Camera()
    camera.state.zoom = 2.5
    camera.state.pitch = math.radians(30)
    camera.state.yaw = math.radians(-45)
    camera.state.pan = Vector2(12.4, -3.6)
    assert format_hud_lines(camera, 59.6) == (
        "Zoom: 2.50x | Pitch: 30° | Yaw: -45°",
        "Pan: 12, -4 | FPS: 60",
    )
