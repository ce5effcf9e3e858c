"""Scenario definitions for preset simulation starting conditions."""
from __future__ import annotations

import math
import random
from dataclasses import dataclass
from enum import Enum

from trisolaris.core.config import PHYSICS_CFG, PhysicsCfg
from trisolaris.core.model import Body, Vector2


class SimulationPreset(str, Enum):
    STABLE_FIGURE_8 = "Stable Figure-8"
    CHAOTIC_RANDOM = "Chaotic Random"
    HIERARCHICAL = "Hierarchical (Sun-Earth-Moon-like)"
    COLLISION_COURSE = "Collision Course"


@dataclass(frozen=True)
class Scenario:
    key: str
    preset: SimulationPreset
    description: str

    @property
    def name(self) -> str:
        return self.preset.value


SCENARIO_DEFINITIONS: tuple[Scenario, ...] = (
    Scenario(
        key="figure8",
        preset=SimulationPreset.STABLE_FIGURE_8,
        description="Three equal suns chasing each other along the classic figure-eight.",
    ),
    Scenario(
        key="chaotic",
        preset=SimulationPreset.CHAOTIC_RANDOM,
        description="Random masses, positions and velocities. Every reset is different.",
    ),
    Scenario(
        key="hierarchical",
        preset=SimulationPreset.HIERARCHICAL,
        description="A heavy sun with a smaller sun and a tiny companion in nested orbits.",
    ),
    Scenario(
        key="collision",
        preset=SimulationPreset.COLLISION_COURSE,
        description="Three heavy suns closing in from three sides on a resting planet.",
    ),
)

SCENARIOS: dict[str, Scenario] = {scenario.key: scenario for scenario in SCENARIO_DEFINITIONS}
SCENARIO_DISPLAY_ORDER: list[str] = [scenario.key for scenario in SCENARIO_DEFINITIONS]
DEFAULT_SCENARIO_KEY = SCENARIO_DISPLAY_ORDER[0]

SUN_COLORS = ("#fbbf24", "#f87171", "#a78bfa")
PLANET_COLOR = "#38bdf8"
PLANET_ID = "trisolaris"

# Chenciner–Montgomery figure-eight initial conditions
FIGURE_8_OFFSET = (97.000436, -24.308753)
FIGURE_8_VELOCITY = (0.4662036850, 0.4323657300)


def resolve_preset(preset: SimulationPreset | str) -> SimulationPreset:
    """Map an enum member, display name or short key to a preset.

    Anything unrecognised resolves to :attr:`SimulationPreset.CHAOTIC_RANDOM`.
    """

    if isinstance(preset, SimulationPreset):
        return preset
    scenario = SCENARIOS.get(str(preset).lower())
    if scenario is not None:
        return scenario.preset
    for member in SimulationPreset:
        if member.value == preset:
            return member
    return SimulationPreset.CHAOTIC_RANDOM


def scenario_for(preset: SimulationPreset | str) -> Scenario:
    resolved = resolve_preset(preset)
    return next(s for s in SCENARIO_DEFINITIONS if s.preset is resolved)


def _sun(
    id: str,
    x: float,
    y: float,
    vx: float,
    vy: float,
    mass: float,
    color: str,
    cfg: PhysicsCfg,
) -> Body:
    return Body(
        id=id,
        position=Vector2(x, y),
        velocity=Vector2(vx, vy),
        mass=mass,
        radius=math.sqrt(mass) * cfg.sun_radius_factor,
        color=color,
        is_planet=False,
    )


def _planet(x: float, y: float, vx: float, vy: float, cfg: PhysicsCfg) -> Body:
    return Body(
        id=PLANET_ID,
        position=Vector2(x, y),
        velocity=Vector2(vx, vy),
        mass=cfg.planet_mass,
        radius=cfg.planet_radius,
        color=PLANET_COLOR,
        is_planet=True,
    )


def generate(
    preset: SimulationPreset | str,
    width: float,
    height: float,
    rng: random.Random | None = None,
    cfg: PhysicsCfg = PHYSICS_CFG,
) -> list[Body]:
    """Build the three suns and the planet for *preset* around the canvas centre."""

    cx = width / 2
    cy = height / 2
    resolved = resolve_preset(preset)
    c1, c2, c3 = SUN_COLORS

    if resolved is SimulationPreset.STABLE_FIGURE_8:
        ox, oy = FIGURE_8_OFFSET
        vx, vy = FIGURE_8_VELOCITY
        return [
            _sun("sun1", cx + ox, cy + oy, vx, vy, 1000, c1, cfg),
            _sun("sun2", cx - ox, cy - oy, vx, vy, 1000, c2, cfg),
            _sun("sun3", cx, cy, -2 * vx, -2 * vy, 1000, c3, cfg),
            _planet(cx + 50, cy + 50, 0.5, 0.5, cfg),
        ]

    if resolved is SimulationPreset.HIERARCHICAL:
        return [
            _sun("sun1", cx, cy, 0, 0, 5000, c1, cfg),
            _sun("sun2", cx + 300, cy, 0, 3.5, 500, c2, cfg),
            _sun("sun3", cx + 350, cy, 0, 5.5, 50, c3, cfg),
            _planet(cx + 360, cy, 0, 6.0, cfg),
        ]

    if resolved is SimulationPreset.COLLISION_COURSE:
        return [
            _sun("sun1", cx - 200, cy, 1.5, 0, 1500, c1, cfg),
            _sun("sun2", cx + 200, cy, -1.5, 0, 1500, c2, cfg),
            _sun("sun3", cx, cy - 200, 0, 1.5, 1500, c3, cfg),
            _planet(cx + 10, cy + 10, 0, 0, cfg),
        ]

    rng = rng or random.Random()
    suns = [
        _sun(
            f"sun{index}",
            cx + rng.uniform(-150.0, 150.0),
            cy + rng.uniform(-150.0, 150.0),
            rng.uniform(-0.5, 0.5),
            rng.uniform(-0.5, 0.5),
            rng.uniform(800.0, 1200.0),
            color,
            cfg,
        )
        for index, color in enumerate(SUN_COLORS, start=1)
    ]
    planet = _planet(cx, cy, rng.uniform(-1.0, 1.0), rng.uniform(-1.0, 1.0), cfg)
    return [*suns, planet]


__all__ = [
    "DEFAULT_SCENARIO_KEY",
    "PLANET_ID",
    "SCENARIO_DEFINITIONS",
    "SCENARIO_DISPLAY_ORDER",
    "SCENARIOS",
    "Scenario",
    "SimulationPreset",
    "generate",
    "resolve_preset",
    "scenario_for",
]
