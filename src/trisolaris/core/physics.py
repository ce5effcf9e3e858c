"""Physics helpers for the three-body simulation."""
from __future__ import annotations

import math
import random
from collections import deque
from typing import Sequence

import numpy as np

from .config import PHYSICS_CFG, PhysicsCfg
from .model import Body, Vector2


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp *value* between *lo* and *hi*."""

    return max(lo, min(hi, value))


def _state_arrays(bodies: Sequence[Body]) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    positions = np.array([(b.position.x, b.position.y) for b in bodies], dtype=float).reshape(-1, 2)
    velocities = np.array([(b.velocity.x, b.velocity.y) for b in bodies], dtype=float).reshape(-1, 2)
    masses = np.array([b.mass for b in bodies], dtype=float)
    return positions, velocities, masses


def pairwise_forces(
    positions: np.ndarray,
    masses: np.ndarray,
    g_constant: float,
    softening: float,
) -> np.ndarray:
    """Net gravitational force on every body, shape ``(n, 2)``.

    The magnitude ``G * mi * mj / (r^2 + softening)`` is softened but the
    direction is the raw unit vector ``d / r``. This asymmetry looks
    unintentional; it is reproduced on purpose because the preset
    trajectories depend on it. Two bodies at exactly the same position give
    ``0 / 0`` and therefore NaN forces.
    """

    n = positions.shape[0]
    # delta[i, j] points from body i to body j
    delta = positions[np.newaxis, :, :] - positions[:, np.newaxis, :]
    dist_sq = np.einsum("ijk,ijk->ij", delta, delta)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        dist = np.sqrt(dist_sq)
        magnitude = g_constant * np.outer(masses, masses) / (dist_sq + softening)
        pair_forces = magnitude[:, :, np.newaxis] * (delta / dist[:, :, np.newaxis])
    idx = np.arange(n)
    pair_forces[idx, idx] = 0.0
    return pair_forces.sum(axis=1)


def step(
    bodies: Sequence[Body],
    g_constant: float,
    softening: float,
    dt: float,
    rng: random.Random | None = None,
    cfg: PhysicsCfg = PHYSICS_CFG,
) -> list[Body]:
    """Advance all bodies by one semi-implicit Euler step.

    Accelerations come from the pre-step positions, velocities are updated
    first and positions then move with the new velocities. The input is left
    untouched; the returned bodies own fresh trails. Each body appends its new
    position to its trail with probability ``cfg.trail_sample_probability``.
    """

    rng = rng or random.Random()
    if not bodies:
        return []

    positions, velocities, masses = _state_arrays(bodies)
    forces = pairwise_forces(positions, masses, g_constant, softening)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        accelerations = forces / masses[:, np.newaxis]
        velocities = velocities + accelerations * dt
        positions = positions + velocities * dt

    stepped: list[Body] = []
    for body, pos, vel in zip(bodies, positions, velocities):
        new_position = Vector2.from_array(pos)
        trail = deque(body.trail, maxlen=cfg.max_trail_length)
        if rng.random() < cfg.trail_sample_probability:
            trail.append(new_position)
        stepped.append(
            Body(
                id=body.id,
                position=new_position,
                velocity=Vector2.from_array(vel),
                mass=body.mass,
                radius=body.radius,
                color=body.color,
                is_planet=body.is_planet,
                trail=trail,
            )
        )
    return stepped


def total_momentum(bodies: Sequence[Body]) -> np.ndarray:
    """Sum of ``mass * velocity`` over *bodies*."""

    _, velocities, masses = _state_arrays(bodies)
    return (velocities * masses[:, np.newaxis]).sum(axis=0)


def center_of_mass(bodies: Sequence[Body]) -> Vector2:
    positions, _, masses = _state_arrays(bodies)
    total = masses.sum()
    if total <= 0.0:
        return Vector2(0.0, 0.0)
    return Vector2.from_array((positions * masses[:, np.newaxis]).sum(axis=0) / total)


def kinetic_energy(bodies: Sequence[Body]) -> float:
    _, velocities, masses = _state_arrays(bodies)
    return float(0.5 * np.sum(masses * np.einsum("ij,ij->i", velocities, velocities)))


def potential_energy(bodies: Sequence[Body], g_constant: float, softening: float) -> float:
    """Softened pair potential ``-G * mi * mj / sqrt(r^2 + softening)``."""

    positions, _, masses = _state_arrays(bodies)
    energy = 0.0
    n = len(bodies)
    for i in range(n):
        for j in range(i + 1, n):
            d = positions[j] - positions[i]
            energy -= g_constant * masses[i] * masses[j] / math.sqrt(float(d @ d) + softening)
    return energy


def total_energy(bodies: Sequence[Body], g_constant: float, softening: float) -> float:
    return kinetic_energy(bodies) + potential_energy(bodies, g_constant, softening)


def is_finite_body(body: Body) -> bool:
    """``False`` once a close encounter has pushed the body to NaN/inf."""

    return all(
        math.isfinite(value)
        for value in (body.position.x, body.position.y, body.velocity.x, body.velocity.y)
    )


__all__ = [
    "PHYSICS_CFG",
    "PhysicsCfg",
    "center_of_mass",
    "clamp",
    "is_finite_body",
    "kinetic_energy",
    "pairwise_forces",
    "potential_energy",
    "step",
    "total_energy",
    "total_momentum",
]
