"""Frame timing utilities."""
from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass
class FrameTimer:
    """High resolution timer based on :func:`time.perf_counter`.

    ``last_time`` starts as ``None`` so the very first tick reports no delta
    instead of the time since construction.
    """

    last_time: float | None = None
    fps: float = 0.0

    def tick(self, now: float | None = None) -> float:
        if now is None:
            now = time.perf_counter()
        if self.last_time is None:
            self.last_time = now
            return 0.0
        dt = now - self.last_time
        self.last_time = now
        if dt > 0.0:
            self.fps = 1.0 / dt
        return dt


@dataclass
class IntervalGate:
    """Opens at most once per ``interval`` seconds of wall-clock time."""

    interval: float
    last_open: float | None = field(default=None)

    def ready(self, now: float) -> bool:
        if self.last_open is None or now - self.last_open >= self.interval:
            self.last_open = now
            return True
        return False

    def mark(self, now: float) -> None:
        self.last_open = now


__all__ = ["FrameTimer", "IntervalGate"]
