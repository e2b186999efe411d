"""Throughput statistics sampled once per interval."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Set

from .logger import configure_logging

_LOG = configure_logging()


@dataclass(frozen=True)
class StatsSnapshot:
    """Single sampling window."""

    hashes_per_second: int
    unique_algorithms: int
    total_hashes: int
    timestamp: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hashesPerSecond": self.hashes_per_second,
            "uniqueAlgorithms": self.unique_algorithms,
            "totalHashes": self.total_hashes,
            "timestamp": self.timestamp,
        }


StatsCallback = Callable[[StatsSnapshot], None]


class HashStatistics:
    """
    Counters owned by the worker pool.

    - ``record`` adds completed hashes to the current window
    - ``sample`` closes the window, computes hashes/second and resets
    - subscribers are notified with every sample
    """

    def __init__(self, *, interval: float = 1.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.interval = interval
        self._clock = clock
        self._lock = threading.Lock()
        self._window_count = 0
        self._total = 0
        self._window_started = clock()
        self._algorithms: Set[str] = set()
        self._hashes_per_second = 0
        self._subscribers: List[StatsCallback] = []
        self.last_snapshot: Optional[StatsSnapshot] = None

    def record(self, count: int = 1) -> None:
        with self._lock:
            self._window_count += count
            self._total += count

    def note_algorithm(self, algorithm_id: str) -> None:
        with self._lock:
            self._algorithms.add(algorithm_id)

    @property
    def unique_algorithms(self) -> int:
        with self._lock:
            return len(self._algorithms)

    @property
    def hashes_per_second(self) -> int:
        with self._lock:
            return self._hashes_per_second

    def due(self) -> bool:
        return self._clock() - self._window_started >= self.interval

    def sample(self) -> StatsSnapshot:
        with self._lock:
            now = self._clock()
            elapsed = now - self._window_started
            if elapsed > 0:
                self._hashes_per_second = round(self._window_count / elapsed)
            self._window_count = 0
            self._window_started = now
            snapshot = StatsSnapshot(
                hashes_per_second=self._hashes_per_second,
                unique_algorithms=len(self._algorithms),
                total_hashes=self._total,
                timestamp=time.time(),
            )
            subscribers = list(self._subscribers)
        self.last_snapshot = snapshot
        for callback in subscribers:
            try:
                callback(snapshot)
            except Exception as e:
                _LOG.error(f"Statistics subscriber {callback!r} failed: {e}")
        return snapshot

    def sample_if_due(self) -> Optional[StatsSnapshot]:
        if not self.due():
            return None
        return self.sample()

    def subscribe(self, callback: StatsCallback) -> Callable[[], None]:
        """Register ``callback``; returns a function that unregisters it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe
