from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Iterable, Sequence, TYPE_CHECKING

import numpy as np
import pygame

from .assets import Color, get_text_surface, to_rgb
from .camera import Camera
from .projection import RenderItem, format_hud_lines

if TYPE_CHECKING:  # pragma: no cover
    from trisolaris.core.config import RenderCfg

# pygame refuses coordinates far outside the int range
SAFE_COORD_LIMIT = 30000

CONTROL_HINTS = (
    "W/S: Tilt View",
    "A/D: Rotate View",
    "Double Click: Reset",
    "Scroll: Zoom",
    "Drag: Pan",
)


@dataclass(frozen=True)
class Star:
    u: float  # fraction of the canvas width
    v: float  # fraction of the canvas height
    radius: int
    alpha: int


def generate_starfield(num_stars: int, *, seed: int) -> list[Star]:
    """Deterministic star placement; the same seed always gives the same sky."""

    rng = random.Random(seed)
    stars: list[Star] = []
    for _ in range(num_stars):
        stars.append(
            Star(
                u=rng.random(),
                v=rng.random(),
                radius=rng.choice([1, 1, 1, 2]),
                alpha=rng.randint(25, 153),
            )
        )
    return stars


def draw_starfield(
    surface: pygame.Surface,
    stars: Iterable[Star],
    yaw: float,
    *,
    render_cfg: RenderCfg,
) -> None:
    """Draw the background stars turned slightly with the camera yaw."""

    width, height = surface.get_size()
    cx, cy = width / 2, height / 2
    angle = yaw * render_cfg.star_yaw_factor
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    layer = pygame.Surface((width, height), pygame.SRCALPHA)
    for star in stars:
        x = star.u * width - cx
        y = star.v * height - cy
        sx = cx + x * cos_a - y * sin_a
        sy = cy + x * sin_a + y * cos_a
        pygame.draw.circle(layer, (255, 255, 255, star.alpha), (int(sx), int(sy)), star.radius)
    surface.blit(layer, (0, 0))


def trail_runs(points: np.ndarray) -> list[list[tuple[float, float]]]:
    """Split a projected trail into drawable polylines.

    A point that is not finite or lies beyond ``SAFE_COORD_LIMIT`` ends the
    current run; its neighbours are never joined across it.
    """

    if points.size == 0:
        return []
    usable = np.all(np.isfinite(points), axis=1)
    usable[usable] = np.all(np.abs(points[usable]) <= SAFE_COORD_LIMIT, axis=1)
    runs: list[list[tuple[float, float]]] = []
    current: list[tuple[float, float]] = []
    for (x, y), ok in zip(points, usable):
        if ok:
            current.append((float(x), float(y)))
        elif current:
            runs.append(current)
            current = []
    if current:
        runs.append(current)
    return [run for run in runs if len(run) > 1]


def trail_width(is_planet: bool, zoom: float, *, render_cfg: RenderCfg) -> int:
    base = render_cfg.planet_trail_width if is_planet else render_cfg.sun_trail_width
    return max(1, round(base / zoom**render_cfg.trail_width_exponent))


def draw_trail(
    layer: pygame.Surface,
    points: Sequence[tuple[float, float]],
    color: tuple[int, int, int],
    alpha: float,
    width: int,
) -> None:
    if len(points) < 2:
        return
    pygame.draw.lines(layer, (*color, int(255 * alpha)), False, points, width)


def draw_glow(
    surface: pygame.Surface,
    position: tuple[int, int],
    radius: int,
    blur: int,
    color: tuple[int, int, int],
    *,
    layers: int,
    peak_alpha: int,
) -> None:
    """Soft halo around a disc, faded out over ``blur`` pixels."""

    if blur <= 0 or layers <= 0:
        return
    outer = radius + blur
    glow_surface = pygame.Surface((outer * 2, outer * 2), pygame.SRCALPHA)
    for i in range(layers):
        fraction = (i + 1) / layers
        ring_radius = int(outer - blur * fraction)
        alpha = int(peak_alpha * fraction * fraction)
        pygame.draw.circle(glow_surface, (*color, alpha), (outer, outer), max(1, ring_radius))
    surface.blit(glow_surface, glow_surface.get_rect(center=position))


def draw_body(
    surface: pygame.Surface,
    position: tuple[int, int],
    radius: int,
    color: tuple[int, int, int],
) -> None:
    if radius <= 0:
        return
    pygame.draw.circle(surface, color, position, radius)


def draw_label(
    surface: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    position: tuple[int, int],
    *,
    color: Color,
) -> None:
    label = get_text_surface(font, text, color)
    rect = label.get_rect()
    rect.bottomleft = position
    surface.blit(label, rect)


def draw_hud(
    surface: pygame.Surface,
    font: pygame.font.Font,
    camera: Camera,
    fps: float,
    *,
    render_cfg: RenderCfg,
) -> None:
    height = surface.get_height()
    top_line, bottom_line = format_hud_lines(camera, fps)
    draw_label(surface, font, top_line, (10, height - 22), color=render_cfg.hud_color)
    draw_label(surface, font, bottom_line, (10, height - 8), color=render_cfg.hud_color)


def draw_control_hints(surface: pygame.Surface, font: pygame.font.Font, *, render_cfg: RenderCfg) -> None:
    line_height = font.get_linesize()
    for idx, text in enumerate(CONTROL_HINTS):
        hint = get_text_surface(font, text, render_cfg.hint_color)
        surface.blit(hint, (16, 16 + idx * line_height))


def _on_screen(pos: tuple[float, float], reach: float, size: tuple[int, int]) -> bool:
    x, y = pos
    return -reach <= x <= size[0] + reach and -reach <= y <= size[1] + reach


def draw_scene(
    surface: pygame.Surface,
    items: Sequence[RenderItem],
    camera: Camera,
    fps: float,
    *,
    stars: Sequence[Star],
    label_font: pygame.font.Font,
    hud_font: pygame.font.Font,
    render_cfg: RenderCfg,
) -> None:
    """Paint one frame of the canvas.

    ``items`` must already be depth sorted (farthest first); each body is
    painted together with its trail so nearer bodies cover farther ones.
    """

    size = surface.get_size()
    zoom = camera.zoom
    surface.fill(to_rgb(render_cfg.background_color))
    draw_starfield(surface, stars, camera.yaw, render_cfg=render_cfg)

    for item in items:
        body = item.body
        color = to_rgb(body.color)

        runs = trail_runs(item.trail_points)
        if runs:
            layer = pygame.Surface(size, pygame.SRCALPHA)
            alpha = render_cfg.planet_trail_alpha if body.is_planet else render_cfg.sun_trail_alpha
            width = trail_width(body.is_planet, zoom, render_cfg=render_cfg)
            for run in runs:
                draw_trail(layer, run, color, alpha, width)
            surface.blit(layer, (0, 0))

        if not item.visible:
            continue
        radius = max(1, int(round(body.radius * zoom)))
        blur = render_cfg.planet_glow_radius if body.is_planet else render_cfg.sun_glow_radius
        if not _on_screen(item.screen_pos, radius + blur, size):
            continue
        position = (int(item.screen_x), int(item.screen_y))
        if radius + blur <= max(size):
            draw_glow(
                surface,
                position,
                radius,
                blur,
                color,
                layers=render_cfg.glow_layers,
                peak_alpha=render_cfg.glow_peak_alpha,
            )
        draw_body(surface, position, radius, color)

        if not body.is_planet and zoom > render_cfg.label_min_zoom:
            ox, oy = render_cfg.label_offset
            draw_label(
                surface,
                label_font,
                body.id,
                (position[0] + ox, position[1] + oy),
                color=render_cfg.label_color,
            )

    draw_control_hints(surface, hud_font, render_cfg=render_cfg)
    draw_hud(surface, hud_font, camera, fps, render_cfg=render_cfg)
