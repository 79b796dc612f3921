"""Lightweight in-process metrics about the collector itself.

These are not the user's counters (those live in the stats directory); they
describe how the collection loop is doing and are mostly useful in tests and
when chasing a slow or failing disk.

Usage:
    from statdir.metrics import metrics
    metrics.inc("collector.write_failures")
    with metrics.timed("collector.write_duration"):
        ...
    metrics.count("collector.ops_applied")
"""

from __future__ import annotations

import time
from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from threading import RLock
from typing import Any


@dataclass
class _Timing:
    calls: int = 0
    total: float = 0.0
    worst: float = 0.0

    def add(self, elapsed: float) -> None:
        self.calls += 1
        self.total += elapsed
        self.worst = max(self.worst, elapsed)

    def as_dict(self) -> dict[str, float]:
        mean = self.total / self.calls if self.calls else 0.0
        return {"calls": self.calls, "total": self.total, "mean": mean, "max": self.worst}


class _Metrics:
    def __init__(self) -> None:
        self._counters: dict[str, int] = defaultdict(int)
        self._timings: dict[str, _Timing] = defaultdict(_Timing)
        self._lock = RLock()

    def inc(self, key: str, amount: int = 1) -> None:
        with self._lock:
            self._counters[key] += int(amount)

    def count(self, key: str) -> int:
        with self._lock:
            return self._counters.get(key, 0)

    @contextmanager
    def timed(self, key: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            with self._lock:
                self._timings[key].add(elapsed)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counters": dict(self._counters),
                "timings": {k: v.as_dict() for k, v in self._timings.items()},
            }

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._timings.clear()


metrics = _Metrics()
