"""World-to-screen projection and draw ordering."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from trisolaris.core.model import Body

from .camera import Camera, CameraState


@dataclass(frozen=True)
class RenderItem:
    body: Body
    screen_x: float
    screen_y: float
    depth: float
    trail_points: np.ndarray  # (n, 2) screen coordinates, oldest first

    @property
    def screen_pos(self) -> tuple[float, float]:
        return self.screen_x, self.screen_y

    @property
    def visible(self) -> bool:
        return math.isfinite(self.screen_x) and math.isfinite(self.screen_y)


def project_points(
    points: np.ndarray,
    state: CameraState,
    center: tuple[float, float],
) -> np.ndarray:
    """Vectorised :meth:`Camera.project` for an ``(n, 2)`` array.

    Returns an ``(n, 3)`` array of ``screen_x, screen_y, depth``.
    """

    points = np.asarray(points, dtype=float).reshape(-1, 2)
    cos_yaw, sin_yaw = math.cos(state.yaw), math.sin(state.yaw)
    x1 = points[:, 0] * cos_yaw - points[:, 1] * sin_yaw
    y1 = points[:, 0] * sin_yaw + points[:, 1] * cos_yaw
    y2 = y1 * math.cos(state.pitch)
    z2 = y1 * math.sin(state.pitch)
    screen_x = center[0] + state.pan.x + x1 * state.zoom
    screen_y = center[1] + state.pan.y + y2 * state.zoom
    return np.column_stack((screen_x, screen_y, z2))


def build_render_list(
    bodies: Sequence[Body],
    camera: Camera,
    size: tuple[int, int],
) -> list[RenderItem]:
    """Project bodies and trails, farthest first (ascending depth).

    ``sorted`` is stable, so bodies at equal depth keep their input order and
    repeated passes over the same state give the same order.
    """

    center = (size[0] / 2, size[1] / 2)
    items: list[RenderItem] = []
    for body in bodies:
        projected = camera.project(body.position.x, body.position.y, center)
        if body.trail:
            trail = np.array([(p.x, p.y) for p in body.trail], dtype=float)
            trail_points = project_points(trail, camera.state, center)[:, :2]
        else:
            trail_points = np.empty((0, 2), dtype=float)
        items.append(RenderItem(body, projected.x, projected.y, projected.depth, trail_points))
    return sorted(items, key=lambda item: item.depth)


def format_hud_lines(camera: Camera, fps: float) -> tuple[str, str]:
    pitch_deg = math.degrees(camera.pitch)
    yaw_deg = math.degrees(camera.yaw)
    pan = camera.pan
    return (
        f"Zoom: {camera.zoom:.2f}x | Pitch: {pitch_deg:.0f}° | Yaw: {yaw_deg:.0f}°",
        f"Pan: {pan.x:.0f}, {pan.y:.0f} | FPS: {round(fps)}",
    )


__all__ = ["RenderItem", "build_render_list", "format_hud_lines", "project_points"]
