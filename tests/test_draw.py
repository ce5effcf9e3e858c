import numpy as np
import pygame
import pytest

from trisolaris.core.config import RENDER_CFG
from trisolaris.core.model import Vector2
from trisolaris.render.assets import to_rgb
from trisolaris.render.camera import Camera
from trisolaris.render.draw import SAFE_COORD_LIMIT, draw_scene, generate_starfield, trail_runs, trail_width
from trisolaris.render.projection import build_render_list
from trisolaris.render.ui import Button, ButtonVisualStyle, build_text_panel, wrap_text


@pytest.fixture
def font():
    pygame.font.init()
    yield pygame.font.Font(None, 16)
    pygame.font.quit()


def test_starfield_is_deterministic():
    assert generate_starfield(80, seed=1337) == generate_starfield(80, seed=1337)
    stars = generate_starfield(80, seed=1337)
    assert all(0.0 <= star.u <= 1.0 and 0.0 <= star.v <= 1.0 for star in stars)


def test_trail_width_shrinks_with_zoom():
    assert trail_width(False, 1.0, render_cfg=RENDER_CFG) == 2
    assert trail_width(True, 1.0, render_cfg=RENDER_CFG) == 1
    assert trail_width(False, 50.0, render_cfg=RENDER_CFG) == 1


def test_to_rgb_parses_hex():
    assert to_rgb("#38bdf8") == (56, 189, 248)


def test_draw_scene_paints_bodies(figure8, font):
    surface = pygame.Surface((1200, 800))
    camera = Camera()
    # bodies sit around world (600, 400); pan them back onto the surface centre
    camera.state.pan = Vector2(-600.0, -400.0)
    for body in figure8:
        body.trail.extend([Vector2(body.position.x - 5, body.position.y), body.position])
    items = build_render_list(figure8, camera, surface.get_size())
    draw_scene(
        surface,
        items,
        camera,
        60.0,
        stars=generate_starfield(10, seed=1),
        label_font=font,
        hud_font=font,
        render_cfg=RENDER_CFG,
    )
    sun3 = items[[item.body.id for item in items].index("sun3")]
    assert sun3.screen_pos == (600.0, 400.0)
    assert surface.get_at((int(sun3.screen_x), int(sun3.screen_y)))[:3] == to_rgb(sun3.body.color)


def test_draw_scene_survives_non_finite_and_far_bodies(figure8, font):
    surface = pygame.Surface((400, 300))
    camera = Camera()
    figure8[0].position = Vector2(float("nan"), 0.0)
    figure8[1].position = Vector2(1e12, -1e12)
    figure8[1].trail.extend([Vector2(1e12, 0.0), Vector2(float("inf"), 0.0), Vector2(0.0, 0.0)])
    items = build_render_list(figure8, camera, surface.get_size())
    draw_scene(
        surface,
        items,
        camera,
        0.0,
        stars=[],
        label_font=font,
        hud_font=font,
        render_cfg=RENDER_CFG,
    )


def test_wrap_text_respects_width(font):
    text = "The magnetic interference from the suns is too strong."
    lines = wrap_text(text, font, 120)
    assert " ".join(lines) == text
    assert all(font.size(line)[0] <= 120 for line in lines if " " in line)


def test_text_panel_fits_lines(font):
    panel = build_text_panel(font, [("Stable Era", (52, 211, 153)), ("", (0, 0, 0))], background_color=(0, 0, 0, 200))
    assert panel.get_height() == font.get_linesize() * 2 + 28
    with pytest.raises(ValueError):
        build_text_panel(font, [], background_color=(0, 0, 0))


def test_button_fires_on_left_click_inside(font):
    clicks = []
    button = Button((10, 10, 100, 30), "Reset", lambda: clicks.append(1), style=ButtonVisualStyle.secondary(RENDER_CFG))
    inside = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(20, 20))
    outside = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(200, 200))
    right = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=3, pos=(20, 20))
    assert button.handle_event(inside)
    assert not button.handle_event(outside)
    assert not button.handle_event(right)
    assert clicks == [1]

    surface = pygame.Surface((200, 60), pygame.SRCALPHA)
    button.draw(surface, font, mouse_pos=(0, 0))


def test_trail_is_split_at_unusable_points():
    nan = float("nan")
    far = SAFE_COORD_LIMIT * 10
    points = np.array(
        [[0.0, 0.0], [1.0, 1.0], [nan, 2.0], [3.0, 3.0], [4.0, 4.0], [far, 5.0], [6.0, 6.0], [7.0, 7.0]]
    )
    assert trail_runs(points) == [
        [(0.0, 0.0), (1.0, 1.0)],
        [(3.0, 3.0), (4.0, 4.0)],
        [(6.0, 6.0), (7.0, 7.0)],
    ]


def test_trail_runs_drop_isolated_points():
    points = np.array([[0.0, 0.0], [float("inf"), 1.0], [2.0, 2.0]])
    assert trail_runs(points) == []
    assert trail_runs(np.empty((0, 2))) == []
