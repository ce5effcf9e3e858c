import random

import pytest

from trisolaris.core.driver import AnimationDriver
from trisolaris.core.model import SimulationSettings
from trisolaris.render.camera import ROTATE_LEFT


@pytest.fixture
def driver():
    return AnimationDriver(1200, 800, rng=random.Random(11))


def positions(bodies):
    return [body.position for body in bodies]


def test_construction_publishes_initial_snapshot(driver):
    snapshot = driver.snapshot()
    assert snapshot.time == 0.0
    assert [b.id for b in snapshot.bodies] == [b.id for b in driver.bodies]
    assert snapshot.planet is not None
    assert len(snapshot.suns) == 3


def test_paused_driver_does_not_step(driver):
    before = positions(driver.bodies)
    for frame in range(5):
        driver.tick(frame * 0.016)
    assert positions(driver.bodies) == before
    assert driver.sim_time == 0.0
    assert driver.frame_count == 5


def test_running_driver_steps_once_per_tick(driver):
    driver.set_running(True)
    driver.tick(0.0)
    driver.tick(0.016)
    driver.tick(0.032)
    assert driver.sim_time == pytest.approx(0.3)


def test_time_scale_changes_dt(driver):
    assert driver.set_time_scale(2.0) == 2.0
    assert driver.dt == pytest.approx(0.2)
    driver.set_running(True)
    driver.tick(0.0)
    assert driver.sim_time == pytest.approx(0.2)


def test_render_runs_every_frame_even_when_paused():
    calls = []
    driver = AnimationDriver(
        1200, 800, render=lambda bodies, camera, fps: calls.append(len(bodies)), rng=random.Random(1)
    )
    driver.tick(0.0)
    driver.tick(0.1)
    assert calls == [4, 4]


def test_snapshots_are_throttled(driver):
    published = []
    driver.publisher.subscribe(published.append)
    driver.set_running(True)
    for frame in range(48):
        driver.tick(frame / 16)
    # 3 seconds of frames at a 0.5 s interval
    assert len(published) == 6
    times = [snapshot.time for snapshot in published]
    assert times == sorted(times)


def test_snapshot_is_a_copy(driver):
    driver.set_running(True)
    driver.tick(0.0)
    snapshot = driver.snapshot()
    frozen = positions(snapshot.bodies)
    driver.tick(0.1)
    driver.tick(0.2)
    assert positions(snapshot.bodies) == frozen
    assert snapshot.bodies[0] is not driver.bodies[0]


def test_paused_driver_does_not_publish(driver):
    published = []
    driver.publisher.subscribe(published.append)
    for frame in range(30):
        driver.tick(frame * 0.1)
    assert published == []


def test_reset_stops_and_publishes_new_preset(driver):
    published = []
    driver.publisher.subscribe(published.append)
    driver.set_running(True)
    driver.tick(0.0)
    driver.tick(0.1)

    driver.reset("hierarchical")
    assert not driver.settings.is_running
    assert driver.settings.preset == "Hierarchical (Sun-Earth-Moon-like)"
    assert driver.sim_time == 0.0
    assert published[-1].time == 0.0
    assert published[-1].bodies[0].mass == 5000
    assert all(len(body.trail) == 0 for body in driver.bodies)


def test_reset_with_unknown_preset_uses_chaotic(driver):
    driver.reset("no such preset", rng=random.Random(3))
    assert driver.settings.preset == "Chaotic Random"


def test_controls_are_clamped(driver):
    assert driver.set_g_constant(10.0) == 5.0
    assert driver.set_g_constant(0.0) == 0.1
    assert driver.set_time_scale(0.01) == 0.1
    assert driver.set_time_scale(7.0) == 3.0
    assert driver.settings.g_constant == 0.1


def test_toggle_running(driver):
    assert driver.toggle_running() is True
    assert driver.toggle_running() is False


def test_held_actions_rotate_the_camera(driver):
    driver.tick(0.0, {ROTATE_LEFT})
    driver.tick(0.016, {ROTATE_LEFT})
    assert driver.camera.yaw == pytest.approx(0.06)


def test_settings_preset_chooses_initial_bodies():
    settings = SimulationSettings(preset="Collision Course")
    driver = AnimationDriver(1000, 1000, settings=settings)
    planet = next(body for body in driver.bodies if body.is_planet)
    assert (planet.position.x, planet.position.y) == (510, 510)


def test_resize_centres_the_next_reset(driver):
    driver.resize(400, 200)
    assert driver.size == (400, 200)
    driver.reset("Stable Figure-8")
    sun3 = next(body for body in driver.bodies if body.id == "sun3")
    assert (sun3.position.x, sun3.position.y) == (200, 100)


def test_unsubscribed_observer_stops_receiving(driver):
    received = []
    driver.publisher.subscribe(received.append)
    driver.reset("figure8")
    driver.publisher.unsubscribe(received.append)
    driver.reset("figure8")
    driver.publisher.unsubscribe(received.append)
    assert len(received) == 1
