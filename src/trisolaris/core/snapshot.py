"""Throttled publication of body snapshots to observers."""
from __future__ import annotations

from typing import Callable, Sequence

from .config import PHYSICS_CFG
from .model import Body, Snapshot
from .timekeeping import IntervalGate

SnapshotObserver = Callable[[Snapshot], None]


class SnapshotPublisher:
    """Keeps the latest published snapshot and forwards it to subscribers.

    The working body set changes every frame; observers only get a copy at
    most once per ``interval`` seconds.
    """

    def __init__(self, interval: float = PHYSICS_CFG.publish_interval) -> None:
        self._gate = IntervalGate(interval)
        self._observers: list[SnapshotObserver] = []
        self._latest = Snapshot(bodies=())

    @property
    def latest(self) -> Snapshot:
        return self._latest

    @property
    def interval(self) -> float:
        return self._gate.interval

    def subscribe(self, observer: SnapshotObserver) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: SnapshotObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def publish(self, bodies: Sequence[Body], time: float, now: float | None = None) -> Snapshot:
        snapshot = Snapshot.capture(bodies, time)
        self._latest = snapshot
        if now is not None:
            self._gate.mark(now)
        for observer in list(self._observers):
            observer(snapshot)
        return snapshot

    def maybe_publish(self, bodies: Sequence[Body], time: float, now: float) -> Snapshot | None:
        if not self._gate.ready(now):
            return None
        return self.publish(bodies, time)


__all__ = ["SnapshotObserver", "SnapshotPublisher"]
