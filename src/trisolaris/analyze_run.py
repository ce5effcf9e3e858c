"""Analyze a recorded simulation run and generate diagnostic figures."""
from __future__ import annotations

import argparse
import csv
import json
from pathlib import Path
from typing import Dict, List

import numpy as np

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from trisolaris.core.config import PHYSICS_CFG
from trisolaris.core.model import Body, Vector2
from trisolaris.core.physics import center_of_mass, total_energy


TIMESERIES_FILENAME = "timeseries.csv"
EVENTS_FILENAME = "events.csv"
META_FILENAME = "meta.json"
FIGS_SUBDIR = "figs"
NUMERIC_COLUMNS = ("t", "x", "y", "vx", "vy", "mass", "is_planet")


def load_timeseries(path: Path) -> Dict[str, Dict[str, np.ndarray]]:
    """Return the recorded columns grouped by body id."""

    with path.open("r", newline="") as fh:
        reader = csv.DictReader(fh)
        grouped: Dict[str, Dict[str, List[float]]] = {}
        for row in reader:
            body_id = row.get("id")
            if not body_id:
                continue
            columns = grouped.setdefault(body_id, {name: [] for name in NUMERIC_COLUMNS})
            for name in NUMERIC_COLUMNS:
                columns[name].append(float(row[name]))
    return {
        body_id: {name: np.asarray(values) for name, values in columns.items()}
        for body_id, columns in grouped.items()
    }


def load_events(path: Path) -> List[dict]:
    with path.open("r", newline="") as fh:
        reader = csv.DictReader(fh)
        events: List[dict] = []
        for row in reader:
            if not row:
                continue
            event = {"t": float(row["t"]), "type": row["type"]}
            details_raw = row.get("details", "")
            if details_raw:
                try:
                    event["details"] = json.loads(details_raw)
                except json.JSONDecodeError:
                    event["details"] = details_raw
            events.append(event)
    return events


def ensure_fig_dir(run_dir: Path) -> Path:
    fig_dir = run_dir / FIGS_SUBDIR
    fig_dir.mkdir(parents=True, exist_ok=True)
    return fig_dir


def summarize_events(events: List[dict]) -> Dict[str, int]:
    summary: Dict[str, int] = {
        "reset": 0, "run": 0, "pause": 0, "settings": 0, "oracle": 0, "invalid_body": 0
    }
    for event in events:
        if event["type"] in summary:
            summary[event["type"]] += 1
    return summary


def planet_id(ts: Dict[str, Dict[str, np.ndarray]]) -> str | None:
    for body_id, columns in ts.items():
        if columns["is_planet"].size and columns["is_planet"][0] > 0.5:
            return body_id
    return None


def common_length(ts: Dict[str, Dict[str, np.ndarray]]) -> int:
    return min((columns["t"].size for columns in ts.values()), default=0)


def total_momentum(ts: Dict[str, Dict[str, np.ndarray]]) -> np.ndarray:
    """Magnitude of the summed momentum at every recorded sample."""

    n = common_length(ts)
    px = np.zeros(n)
    py = np.zeros(n)
    for columns in ts.values():
        px += columns["mass"][:n] * columns["vx"][:n]
        py += columns["mass"][:n] * columns["vy"][:n]
    return np.hypot(px, py)


def sample_bodies(ts: Dict[str, Dict[str, np.ndarray]], index: int) -> List[Body]:
    """Rebuild the recorded body set at one sample."""

    return [
        Body(
            id=body_id,
            position=Vector2(float(columns["x"][index]), float(columns["y"][index])),
            velocity=Vector2(float(columns["vx"][index]), float(columns["vy"][index])),
            mass=float(columns["mass"][index]),
            radius=0.0,
            color="",
            is_planet=bool(columns["is_planet"][index] > 0.5),
        )
        for body_id, columns in ts.items()
    ]


def energy_series(ts: Dict[str, Dict[str, np.ndarray]], g_constant: float, softening: float) -> np.ndarray:
    """Softened total energy at every recorded sample."""

    n = common_length(ts)
    return np.array([total_energy(sample_bodies(ts, k), g_constant, softening) for k in range(n)])


def planet_distances(ts: Dict[str, Dict[str, np.ndarray]]) -> tuple[np.ndarray, np.ndarray]:
    """Distance from the planet to the suns' centre of mass, and to the nearest sun."""

    pid = planet_id(ts)
    n = common_length(ts)
    if pid is None or n == 0 or len(ts) < 2:
        return np.array([]), np.array([])
    to_com = np.empty(n)
    nearest = np.empty(n)
    for k in range(n):
        bodies = sample_bodies(ts, k)
        planet = next(body for body in bodies if body.id == pid)
        suns = [body for body in bodies if body.id != pid]
        com = center_of_mass(suns)
        to_com[k] = np.hypot(planet.position.x - com.x, planet.position.y - com.y)
        nearest[k] = np.min(
            [np.hypot(sun.position.x - planet.position.x, sun.position.y - planet.position.y) for sun in suns]
        )
    return to_com, nearest


def plot_orbits(fig_dir: Path, ts: Dict[str, Dict[str, np.ndarray]], meta: dict) -> None:
    fig, ax = plt.subplots(figsize=(6, 6))
    for body_id, columns in ts.items():
        ax.plot(columns["x"], columns["y"], lw=1.2, label=body_id)
        ax.scatter(columns["x"][:1], columns["y"][:1], s=20)
    ax.set_aspect("equal", "box")
    ax.invert_yaxis()  # screen coordinates grow downwards
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_title(f"Trajectories – {meta.get('preset', 'unknown preset')}")
    ax.legend()
    fig.tight_layout()
    fig.savefig(fig_dir / "orbits_xy.png", dpi=150)
    plt.close(fig)


def plot_momentum(fig_dir: Path, t: np.ndarray, momentum: np.ndarray) -> None:
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(t, momentum, color="#ffa94d")
    ax.set_xlabel("t")
    ax.set_ylabel("|Σ m·v|")
    ax.set_title("Total momentum")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(fig_dir / "momentum.png", dpi=150)
    plt.close(fig)


def relative_energy_drift(energy: np.ndarray) -> np.ndarray:
    """``(E - E0) / |E0|`` per sample; empty when the first energy is zero or missing."""

    if energy.size == 0 or not np.isfinite(energy[0]) or energy[0] == 0.0:
        return np.array([])
    return (energy - energy[0]) / abs(energy[0])


def plot_energy(fig_dir: Path, t: np.ndarray, drift: np.ndarray) -> None:
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(t, drift, color="#a78bfa")
    ax.axhline(0.0, color="black", lw=0.8, alpha=0.5)
    ax.set_xlabel("t")
    ax.set_ylabel("(E - E0) / |E0|")
    ax.set_title("Relative energy drift")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(fig_dir / "energy_drift.png", dpi=150)
    plt.close(fig)


def plot_planet_distance(fig_dir: Path, t: np.ndarray, to_com: np.ndarray, nearest: np.ndarray) -> None:
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(t, to_com, color="#38bdf8", label="to suns' centre of mass")
    ax.plot(t, nearest, color="#f87171", alpha=0.7, label="to nearest sun")
    ax.set_xlabel("t")
    ax.set_ylabel("distance")
    ax.set_title("Trisolaris")
    ax.grid(True, alpha=0.3)
    ax.legend()
    fig.tight_layout()
    fig.savefig(fig_dir / "planet_distance.png", dpi=150)
    plt.close(fig)


def print_summary(
    run_dir: Path,
    meta: dict,
    ts: Dict[str, Dict[str, np.ndarray]],
    momentum: np.ndarray,
    drift: np.ndarray,
    nearest: np.ndarray,
    event_summary: Dict[str, int],
) -> None:
    n = common_length(ts)
    print(f"Run: {run_dir.name}")
    print(f" Scenario: {meta.get('preset', 'unknown')}  G = {meta.get('G', float('nan'))}")
    print(f" Bodies: {', '.join(ts)}")
    print(f" Samples: {n}")
    if n:
        t = next(iter(ts.values()))["t"][:n]
        print(f" Duration: {t[-1] - t[0]:.1f}")
    if momentum.size:
        print(f" Momentum drift |p_end - p_start| = {abs(momentum[-1] - momentum[0]):.3e}")
    if drift.size and np.isfinite(drift).any():
        print(f" Max relative energy drift: {np.nanmax(np.abs(drift)):.3e}")
    if nearest.size and np.isfinite(nearest).any():
        print(f" Closest planet–sun approach: {np.nanmin(nearest):.1f}")
    else:
        print(" Closest planet–sun approach: not available")
    print(
        " Events: "
        + ", ".join(f"{name}={count}" for name, count in event_summary.items())
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Analyze a recorded run and create figures.")
    parser.add_argument("run_dir", nargs="?", help="Path to a specific run directory")
    args = parser.parse_args()

    base_runs_dir = Path("data") / "runs"
    if args.run_dir:
        run_path = Path(args.run_dir)
        if not run_path.is_dir():
            run_path = base_runs_dir / args.run_dir
    else:
        last_run_file = base_runs_dir / "last_run.txt"
        if not last_run_file.exists():
            parser.error("No run given and last_run.txt is missing.")
        run_id = last_run_file.read_text(encoding="utf-8").strip()
        run_path = base_runs_dir / run_id

    if not run_path.is_dir():
        parser.error(f"Could not find run directory: {run_path}")

    meta_path = run_path / META_FILENAME
    ts_path = run_path / TIMESERIES_FILENAME
    ev_path = run_path / EVENTS_FILENAME

    if not meta_path.exists() or not ts_path.exists() or not ev_path.exists():
        parser.error("Run directory is missing required files (meta/timeseries/events).")

    with meta_path.open("r", encoding="utf-8") as fh:
        meta = json.load(fh)

    ts = load_timeseries(ts_path)
    events = load_events(ev_path)

    if not ts:
        parser.error("timeseries.csv is empty – nothing to analyze.")

    fig_dir = ensure_fig_dir(run_path)
    n = common_length(ts)
    t = next(iter(ts.values()))["t"][:n]
    momentum = total_momentum(ts)
    to_com, nearest = planet_distances(ts)
    # energies use the starting G; later "settings" events are not replayed
    energy = energy_series(
        ts,
        float(meta.get("G", PHYSICS_CFG.default_g_constant)),
        float(meta.get("softening", PHYSICS_CFG.softening)),
    )
    drift = relative_energy_drift(energy)

    plot_orbits(fig_dir, ts, meta)
    plot_momentum(fig_dir, t, momentum)
    if drift.size:
        plot_energy(fig_dir, t, drift)
    if to_com.size:
        plot_planet_distance(fig_dir, t, to_com, nearest)

    print_summary(run_path, meta, ts, momentum, drift, nearest, summarize_events(events))


if __name__ == "__main__":
    main()
