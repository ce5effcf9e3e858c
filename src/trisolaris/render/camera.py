from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Collection

from trisolaris.core.config import CAMERA_CFG, CameraCfg
from trisolaris.core.model import Vector2

ROTATE_LEFT = "rotate-left"
ROTATE_RIGHT = "rotate-right"
TILT_UP = "tilt-up"
TILT_DOWN = "tilt-down"


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


@dataclass(frozen=True)
class ProjectedPoint:
    x: float
    y: float
    depth: float


@dataclass
class CameraState:
    pan: Vector2 = field(default_factory=lambda: Vector2(0.0, 0.0))
    zoom: float = 1.0
    yaw: float = 0.0
    pitch: float = 0.0
    dragging: bool = False
    last_pointer: Vector2 = field(default_factory=lambda: Vector2(0.0, 0.0))


class Camera:
    """Orthographic camera with screen-space pan, zoom, yaw and pitch."""

    def __init__(self, cfg: CameraCfg = CAMERA_CFG) -> None:
        self._cfg = cfg
        self._state = CameraState(zoom=cfg.default_zoom)

    @property
    def state(self) -> CameraState:
        return self._state

    @property
    def pan(self) -> Vector2:
        return self._state.pan

    @property
    def zoom(self) -> float:
        return self._state.zoom

    @property
    def yaw(self) -> float:
        return self._state.yaw

    @property
    def pitch(self) -> float:
        return self._state.pitch

    @property
    def dragging(self) -> bool:
        return self._state.dragging

    def begin_drag(self, pointer: tuple[float, float]) -> None:
        self._state.dragging = True
        self._state.last_pointer = Vector2(float(pointer[0]), float(pointer[1]))

    def drag(self, pointer: tuple[float, float]) -> None:
        state = self._state
        if not state.dragging:
            return
        dx = pointer[0] - state.last_pointer.x
        dy = pointer[1] - state.last_pointer.y
        state.pan = Vector2(state.pan.x + dx, state.pan.y + dy)
        state.last_pointer = Vector2(float(pointer[0]), float(pointer[1]))

    def end_drag(self) -> None:
        self._state.dragging = False

    def zoom_by(self, wheel_delta: float) -> None:
        factor = 1.0 - wheel_delta * self._cfg.zoom_sensitivity
        self._state.zoom = _clamp(self._state.zoom * factor, self._cfg.min_zoom, self._cfg.max_zoom)

    def rotate(self, held_actions: Collection[str]) -> None:
        state = self._state
        speed = self._cfg.rotate_speed
        if ROTATE_LEFT in held_actions:
            state.yaw += speed
        if ROTATE_RIGHT in held_actions:
            state.yaw -= speed
        if TILT_UP in held_actions:
            state.pitch = min(state.pitch + speed, self._cfg.max_pitch)
        if TILT_DOWN in held_actions:
            state.pitch = max(state.pitch - speed, -self._cfg.max_pitch)

    def reset(self) -> None:
        state = self._state
        state.pan = Vector2(0.0, 0.0)
        state.zoom = self._cfg.default_zoom
        state.yaw = 0.0
        state.pitch = 0.0

    def project(self, x: float, y: float, center: tuple[float, float]) -> ProjectedPoint:
        """Map a world point on the physics plane to screen space.

        Yaw turns the plane about the viewing axis, pitch tilts it away from
        the viewer. The projection is orthographic; the rotated z only serves
        as the depth key.
        """

        state = self._state
        cos_yaw = math.cos(state.yaw)
        sin_yaw = math.sin(state.yaw)
        x1 = x * cos_yaw - y * sin_yaw
        y1 = x * sin_yaw + y * cos_yaw

        y2 = y1 * math.cos(state.pitch)
        z2 = y1 * math.sin(state.pitch)

        screen_x = center[0] + state.pan.x + x1 * state.zoom
        screen_y = center[1] + state.pan.y + y2 * state.zoom
        return ProjectedPoint(screen_x, screen_y, z2)
