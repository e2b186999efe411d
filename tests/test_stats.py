from __future__ import annotations

import sys
from pathlib import Path
from typing import List

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from hashgen.stats import HashStatistics, StatsSnapshot


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_sample_computes_rate_and_resets_window() -> None:
    clock = FakeClock()
    stats = HashStatistics(interval=1.0, clock=clock)
    stats.record(10)
    stats.note_algorithm("md5")
    stats.note_algorithm("md5")
    stats.note_algorithm("sha1")
    assert not stats.due()

    clock.now = 2.0
    assert stats.due()
    snapshot = stats.sample_if_due()
    assert snapshot is not None
    assert snapshot.hashes_per_second == 5
    assert snapshot.unique_algorithms == 2
    assert snapshot.total_hashes == 10

    clock.now = 3.0
    second = stats.sample()
    assert second.hashes_per_second == 0
    assert second.total_hashes == 10
    assert stats.last_snapshot == second


def test_sample_if_due_waits_for_interval() -> None:
    clock = FakeClock()
    stats = HashStatistics(interval=1.0, clock=clock)
    clock.now = 0.5
    assert stats.sample_if_due() is None


def test_subscribers_receive_snapshots_until_unsubscribed() -> None:
    clock = FakeClock()
    stats = HashStatistics(interval=1.0, clock=clock)
    received: List[StatsSnapshot] = []
    unsubscribe = stats.subscribe(received.append)

    stats.record(3)
    clock.now = 1.0
    stats.sample()
    unsubscribe()
    clock.now = 2.0
    stats.sample()

    assert len(received) == 1
    assert received[0].to_dict()["hashesPerSecond"] == 3


def test_failing_subscriber_does_not_break_sampling() -> None:
    clock = FakeClock()
    stats = HashStatistics(interval=1.0, clock=clock)
    received: List[StatsSnapshot] = []

    def broken(snapshot: StatsSnapshot) -> None:
        raise RuntimeError("display went away")

    stats.subscribe(broken)
    stats.subscribe(received.append)
    clock.now = 1.0
    stats.sample()
    assert len(received) == 1
