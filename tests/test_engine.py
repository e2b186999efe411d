from __future__ import annotations

import hashlib
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Tuple

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from hashgen import HashEngine
from hashgen import engine as engine_module
from hashgen.algorithms import default_registry
from hashgen.db import SqliteStore
from hashgen.errors import EmptyInput, InvalidOptions, UnsupportedAlgorithm, WorkerFailure
from hashgen.models import AlgorithmDescriptor, HashOptions
from hashgen.stats import StatsSnapshot

TIMEOUT = 60


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: List[Tuple[str, str]] = []

    def notify(self, message: str, level: str = "info") -> None:
        self.messages.append((message, level))


def _explode(text: str, options: HashOptions) -> str:
    raise RuntimeError(f"cannot hash {text}")


@pytest.fixture(scope="module")
def engine():
    hash_engine = HashEngine(workers=2, batch_size=4)
    yield hash_engine
    hash_engine.close()


@pytest.mark.parametrize(
    "text, algorithm_id, error",
    [
        ("", "md5", EmptyInput),
        (None, "md5", EmptyInput),
        ("text", "", EmptyInput),
        ("text", None, EmptyInput),
        ("text", "whirlpool", UnsupportedAlgorithm),
    ],
)
def test_generate_hash_validates_before_dispatch(text, algorithm_id, error) -> None:
    fresh = HashEngine(workers=1)
    with pytest.raises(error):
        fresh.generate_hash(text, algorithm_id)
    assert fresh.get_metrics()["total_workers"] == 0


def test_invalid_options_raise_synchronously(engine: HashEngine) -> None:
    with pytest.raises(InvalidOptions):
        engine.generate_hash("text", "bcrypt", {"costFactor": 40})
    with pytest.raises(InvalidOptions):
        engine.generate_hash("text", "bcrypt", {"salt": "abcdefghijklmnopqrstuz", "costFactor": 4})
    with pytest.raises(InvalidOptions):
        engine.generate_bulk_hashes(["a"], "scrypt", {"cost_factor": 0})


def test_bulk_requires_items_and_algorithm(engine: HashEngine) -> None:
    with pytest.raises(EmptyInput):
        engine.generate_bulk_hashes(None, "md5")
    with pytest.raises(EmptyInput):
        engine.generate_bulk_hashes(["a"], "")


def test_generate_hash_resolves(engine: HashEngine) -> None:
    future = engine.generate_hash("password", "md5")
    assert future.result(timeout=TIMEOUT) == "5f4dcc3b5aa765d61d8327deb882cf99"


def test_generate_hash_accepts_option_mappings(engine: HashEngine) -> None:
    future = engine.generate_hash("password", "sha1", {"outputFormat": "hex", "uppercase": True})
    assert future.result(timeout=TIMEOUT) == "5BAA61E4C9B93F3F0682250B6CF8331B7EE68FD8"


def test_explicit_salt_is_deterministic(engine: HashEngine) -> None:
    options = HashOptions(salt="fixedsalt1234567")
    first = engine.generate_hash("secret", "sha512-crypt", options).result(timeout=TIMEOUT)
    second = engine.generate_hash("secret", "sha512-crypt", options).result(timeout=TIMEOUT)
    assert first == second


def test_missing_salt_changes_output(engine: HashEngine) -> None:
    first = engine.generate_hash("secret", "md5-crypt").result(timeout=TIMEOUT)
    second = engine.generate_hash("secret", "md5-crypt").result(timeout=TIMEOUT)
    assert first != second
    assert first.split("$")[2] != second.split("$")[2]


def test_every_algorithm_produces_its_canonical_shape(engine: HashEngine) -> None:
    options = {
        "bcrypt": HashOptions(cost_factor=4),
        "pbkdf2": HashOptions(salt="NaCl", iterations=1000, output_format="standard"),
        "scrypt": HashOptions(cost_factor=4),
        "argon2": HashOptions(iterations=1),
        "yescrypt": HashOptions(iterations=1),
    }
    futures = {
        descriptor.id: engine.generate_hash("shape check", descriptor.id, options.get(descriptor.id))
        for descriptor in engine.algorithms()
    }
    for algorithm_id, future in futures.items():
        digest = future.result(timeout=TIMEOUT)
        assert digest
        detected = engine.detect_hash_type(digest, hint=algorithm_id)
        assert detected.algorithm_id == algorithm_id


def test_hundred_concurrent_requests_do_not_bleed(engine: HashEngine) -> None:
    texts = [f"concurrent-{index}" for index in range(100)]
    with ThreadPoolExecutor(max_workers=10) as executor:
        futures = list(executor.map(lambda text: engine.generate_hash(text, "sha256"), texts))
    results = [future.result(timeout=TIMEOUT) for future in futures]
    assert results == [hashlib.sha256(text.encode()).hexdigest() for text in texts]


def test_bulk_matches_single_results(engine: HashEngine) -> None:
    items = ["a", "b", "c"]
    bulk = engine.generate_bulk_hashes(items, "sha256").result(timeout=TIMEOUT)
    singles = [engine.generate_hash(item, "sha256").result(timeout=TIMEOUT) for item in items]
    assert bulk == singles


def test_bulk_spanning_several_batches(engine: HashEngine) -> None:
    items = [f"word{index}" for index in range(11)] + [""]
    digests = engine.generate_bulk_hashes(items, "md5").result(timeout=TIMEOUT)
    assert len(digests) == len(items)
    assert digests[:-1] == [hashlib.md5(item.encode()).hexdigest() for item in items[:-1]]
    assert digests[-1] == ""


def test_empty_bulk_resolves_to_empty_list(engine: HashEngine) -> None:
    assert engine.generate_bulk_hashes([], "sha256").result(timeout=TIMEOUT) == []


def test_sync_hash_matches_async(engine: HashEngine) -> None:
    options = HashOptions(salt="NaCl", iterations=1000)
    assert engine.generate_hash_sync("text", "pbkdf2", options) == (
        engine.generate_hash("text", "pbkdf2", options).result(timeout=TIMEOUT)
    )
    with pytest.raises(EmptyInput):
        engine.generate_hash_sync("", "pbkdf2")


def test_detect_round_trip_via_sync_hash(engine: HashEngine) -> None:
    for algorithm_id, options in (
        ("bcrypt", HashOptions(cost_factor=4)),
        ("pbkdf2", HashOptions(salt="NaCl", output_format="standard", iterations=1000)),
        ("argon2", HashOptions(iterations=1)),
    ):
        result = engine.detect_hash_type(engine.generate_hash_sync("text", algorithm_id, options))
        assert result.algorithm_id == algorithm_id
        assert result.confidence >= 90


def test_synchronous_helpers(engine: HashEngine) -> None:
    assert len(engine.generate_salt(22)) == 22
    assert engine.evaluate_password_strength("password").score == 0
    assert engine.categories() == ["basic", "password", "modern", "special"]


def test_stats_updates_reach_subscribers(engine: HashEngine) -> None:
    seen = threading.Event()
    snapshots: List[StatsSnapshot] = []

    def collect(snapshot: StatsSnapshot) -> None:
        snapshots.append(snapshot)
        seen.set()

    unsubscribe = engine.on_stats_update(collect)
    try:
        engine.generate_hash("tick", "md5").result(timeout=TIMEOUT)
        assert seen.wait(timeout=10)
    finally:
        unsubscribe()
    assert snapshots[0].unique_algorithms >= 1
    assert engine.get_metrics()["total_workers"] == 2


def test_worker_failure_is_reported_to_notifier() -> None:
    registry = default_registry()
    registry.register(AlgorithmDescriptor(id="explode", name="Explode", category="special", compute=_explode))
    notifier = RecordingNotifier()
    with HashEngine(registry, notifier=notifier, workers=1) as failing_engine:
        future = failing_engine.generate_hash("text", "explode")
        with pytest.raises(WorkerFailure) as excinfo:
            future.result(timeout=TIMEOUT)
    assert "explode" in str(excinfo.value)
    assert "RuntimeError" in str(excinfo.value)
    assert notifier.messages[-1][1] == "error"
    assert notifier.messages[-1][0].startswith("Error generating hash")


def test_history_round_trip(tmp_path) -> None:
    store = SqliteStore(tmp_path / "store.sqlite3")
    notifier = RecordingNotifier()
    history_engine = HashEngine(store=store, notifier=notifier, history_limit=3)

    for index in range(5):
        history_engine.save_to_history(f"text{index}", "sha256", f"digest{index}", {"salt": "s"})

    items = history_engine.history()
    assert [item["text"] for item in items] == ["text4", "text3", "text2"]
    assert items[0]["algorithm"] == "SHA256"
    assert items[0]["algorithmId"] == "sha256"
    assert items[0]["options"]["salt"] == "s"
    assert isinstance(items[0]["timestamp"], int)
    assert ("Hash saved to history", "success") in notifier.messages

    removed = history_engine.remove_history_item(1)
    assert removed["text"] == "text3"
    assert [item["text"] for item in history_engine.history()] == ["text4", "text2"]

    store.close()
    reopened = HashEngine(store=SqliteStore(tmp_path / "store.sqlite3"))
    assert [item["text"] for item in reopened.history()] == ["text4", "text2"]
    reopened.clear_history()
    assert reopened.history() == []


def test_history_rejects_unknown_algorithm() -> None:
    with pytest.raises(UnsupportedAlgorithm):
        HashEngine().save_to_history("text", "whirlpool", "digest")


def test_settings_round_trip(tmp_path) -> None:
    store = SqliteStore(tmp_path / "settings.sqlite3")
    settings_engine = HashEngine(store=store)
    assert settings_engine.load_settings() == {}
    settings_engine.save_settings({"darkMode": True, "defaultAlgorithm": "sha256"})
    assert settings_engine.load_settings() == {"darkMode": True, "defaultAlgorithm": "sha256"}
    assert store.keys() == ["hashGenSettings"]


def test_get_engine_is_a_singleton(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("HASHGEN_DATA_DIR", str(tmp_path))
    monkeypatch.setattr(engine_module, "_engine_instance", None)
    first = engine_module.get_engine()
    try:
        assert first is engine_module.get_engine()
        assert isinstance(first.store, SqliteStore)
        first.save_settings({"theme": "dark"})
        assert (tmp_path / "store.sqlite3").exists()
    finally:
        first.store.close()
        first.close()


def test_sync_only_engine_emits_stats(monkeypatch) -> None:
    monkeypatch.setattr(engine_module.config, "STATS_INTERVAL", 0.0)
    sync_engine = HashEngine(workers=1)
    snapshots: List[StatsSnapshot] = []
    sync_engine.on_stats_update(snapshots.append)
    sync_engine.generate_hash_sync("text", "sha256")
    assert len(snapshots) == 1
    assert snapshots[0].total_hashes == 1
    assert snapshots[0].unique_algorithms == 1
    assert sync_engine.get_metrics()["total_workers"] == 0
