"""Per-frame animation loop state: input, physics, render and publication."""
from __future__ import annotations

import random
from typing import Callable, Collection, Sequence

from trisolaris.data.scenarios import SimulationPreset, generate, resolve_preset
from trisolaris.render.camera import Camera

from .config import PHYSICS_CFG, PhysicsCfg
from .model import Body, SimulationSettings, Snapshot
from .physics import clamp, step
from .snapshot import SnapshotPublisher
from .timekeeping import FrameTimer

RenderCallback = Callable[[Sequence[Body], Camera, float], None]


class AnimationDriver:
    """Owns the working body set between snapshot publications.

    Everything here runs on the pygame thread; observers only ever receive
    copies through the :class:`SnapshotPublisher`.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        settings: SimulationSettings | None = None,
        camera: Camera | None = None,
        render: RenderCallback | None = None,
        publisher: SnapshotPublisher | None = None,
        rng: random.Random | None = None,
        cfg: PhysicsCfg = PHYSICS_CFG,
    ) -> None:
        self._cfg = cfg
        self._size = (width, height)
        self.settings = settings or SimulationSettings()
        self.camera = camera or Camera()
        self.render = render
        self.publisher = publisher or SnapshotPublisher(cfg.publish_interval)
        self._rng = rng or random.Random()
        self._timer = FrameTimer()
        self._bodies: list[Body] = generate(self.settings.preset, width, height, self._rng, cfg)
        self.sim_time = 0.0
        self.frame_count = 0
        self.publisher.publish(self._bodies, self.sim_time)

    @property
    def size(self) -> tuple[int, int]:
        return self._size

    @property
    def bodies(self) -> list[Body]:
        return self._bodies

    @property
    def fps(self) -> float:
        return self._timer.fps

    @property
    def dt(self) -> float:
        return self._cfg.dt_for(self.settings.time_scale)

    def snapshot(self) -> Snapshot:
        return self.publisher.latest

    def tick(self, now: float, held_actions: Collection[str] = ()) -> None:
        self._timer.tick(now)
        self.camera.rotate(held_actions)

        if self.settings.is_running:
            dt = self.dt
            self._bodies = step(
                self._bodies,
                self.settings.g_constant,
                self.settings.softening,
                dt,
                self._rng,
                self._cfg,
            )
            self.sim_time += dt

        if self.render is not None:
            self.render(self._bodies, self.camera, self.fps)
        self.frame_count += 1

        if self.settings.is_running:
            self.publisher.maybe_publish(self._bodies, self.sim_time, now)

    def reset(self, preset: SimulationPreset | str, rng: random.Random | None = None) -> None:
        """Stop and rebuild the body set; the new set is published at once."""

        resolved = resolve_preset(preset)
        if rng is not None:
            self._rng = rng
        self.settings.is_running = False
        self.settings.preset = resolved.value
        self._bodies = generate(resolved, self._size[0], self._size[1], self._rng, self._cfg)
        self.sim_time = 0.0
        self.publisher.publish(self._bodies, self.sim_time)

    def set_running(self, running: bool) -> None:
        self.settings.is_running = bool(running)

    def toggle_running(self) -> bool:
        self.settings.is_running = not self.settings.is_running
        return self.settings.is_running

    def set_g_constant(self, value: float) -> float:
        self.settings.g_constant = clamp(value, self._cfg.min_g_constant, self._cfg.max_g_constant)
        return self.settings.g_constant

    def set_time_scale(self, value: float) -> float:
        self.settings.time_scale = clamp(value, self._cfg.min_time_scale, self._cfg.max_time_scale)
        return self.settings.time_scale

    def resize(self, width: int, height: int) -> None:
        self._size = (width, height)


__all__ = ["AnimationDriver", "RenderCallback"]
