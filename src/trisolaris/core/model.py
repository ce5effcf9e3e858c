"""Data models for the simulation state."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque

import numpy as np

from .config import PHYSICS_CFG


@dataclass(frozen=True)
class Vector2:
    """World-space coordinate or displacement."""

    x: float
    y: float

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)

    @classmethod
    def from_array(cls, values: np.ndarray) -> "Vector2":
        return cls(float(values[0]), float(values[1]))


def _new_trail() -> Deque[Vector2]:
    return deque(maxlen=PHYSICS_CFG.max_trail_length)


@dataclass
class Body:
    """A gravitating body with its rendering metadata.

    The trail holds recent positions, oldest first. Once it is full the oldest
    entry is dropped on every append.
    """

    id: str
    position: Vector2
    velocity: Vector2
    mass: float
    radius: float
    color: str
    is_planet: bool = False
    trail: Deque[Vector2] = field(default_factory=_new_trail)

    def copy(self) -> "Body":
        return Body(
            id=self.id,
            position=self.position,
            velocity=self.velocity,
            mass=self.mass,
            radius=self.radius,
            color=self.color,
            is_planet=self.is_planet,
            trail=deque(self.trail, maxlen=self.trail.maxlen),
        )


@dataclass
class SimulationSettings:
    """Values written into the core by the control panel."""

    is_running: bool = False
    g_constant: float = PHYSICS_CFG.default_g_constant
    time_scale: float = PHYSICS_CFG.default_time_scale
    softening: float = PHYSICS_CFG.softening
    preset: str = "Stable Figure-8"


@dataclass(frozen=True)
class Snapshot:
    """Read-only copy of the body set handed to observers."""

    bodies: tuple[Body, ...]
    time: float = 0.0

    @classmethod
    def capture(cls, bodies, time: float = 0.0) -> "Snapshot":
        return cls(bodies=tuple(body.copy() for body in bodies), time=time)

    @property
    def planet(self) -> Body | None:
        return next((body for body in self.bodies if body.is_planet), None)

    @property
    def suns(self) -> list[Body]:
        return [body for body in self.bodies if not body.is_planet]


__all__ = ["Body", "SimulationSettings", "Snapshot", "Vector2"]
