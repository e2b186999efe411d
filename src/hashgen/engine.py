"""
Hash engine facade.

Combines the algorithm registry, the worker pool, the format detector and the
strength evaluator behind one object, plus history and settings persistence
through the collaborator hooks.
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from . import config
from .algorithms import AlgorithmRegistry, compute_digest, default_registry
from .db import SqliteStore
from .detector import DetectionResult, HashFormatDetector
from .errors import EmptyInput
from .hooks import KeyValueStore, LoggingNotifier, MemoryStore, Notifier
from .logger import configure_logging
from .models import AlgorithmDescriptor, HashOptions, HashRequest
from .pool import HashWorkerPool
from .salt import generate_salt
from .stats import HashStatistics, StatsCallback
from .strength import PasswordStrengthEvaluator, StrengthReport

_LOG = configure_logging()

OptionsLike = Union[HashOptions, Mapping[str, Any], None]


def coerce_options(options: OptionsLike) -> HashOptions:
    if isinstance(options, HashOptions):
        return options
    return HashOptions.from_mapping(options)


class HashEngine:
    """Public entry point for hashing, detection and strength checks."""

    def __init__(
        self,
        registry: Optional[AlgorithmRegistry] = None,
        *,
        pool: Optional[HashWorkerPool] = None,
        store: Optional[KeyValueStore] = None,
        notifier: Optional[Notifier] = None,
        detector: Optional[HashFormatDetector] = None,
        evaluator: Optional[PasswordStrengthEvaluator] = None,
        workers: Optional[int] = None,
        batch_size: Optional[int] = None,
        start_method: Optional[str] = None,
        history_limit: Optional[int] = None,
    ) -> None:
        self.registry = registry or default_registry()
        self.detector = detector or HashFormatDetector()
        self.evaluator = evaluator or PasswordStrengthEvaluator()
        self.store: KeyValueStore = store if store is not None else MemoryStore()
        self.notifier: Notifier = notifier if notifier is not None else LoggingNotifier()
        self.history_limit = history_limit if history_limit is not None else config.HISTORY_LIMIT
        if pool is not None:
            self.stats = pool.stats
            self._pool: Optional[HashWorkerPool] = pool
        else:
            self.stats = HashStatistics(interval=config.STATS_INTERVAL)
            self._pool = None
        self._pool_args = {"size": workers, "batch_size": batch_size, "start_method": start_method}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Catalogue
    # ------------------------------------------------------------------

    def algorithms(self) -> List[AlgorithmDescriptor]:
        return self.registry.descriptors()

    def categories(self) -> List[str]:
        return self.registry.categories()

    def algorithms_by_category(self) -> Dict[str, List[AlgorithmDescriptor]]:
        return self.registry.by_category()

    # ------------------------------------------------------------------
    # Hashing
    # ------------------------------------------------------------------

    @property
    def pool(self) -> HashWorkerPool:
        """Worker pool, created on first use; its processes start on first submit."""
        with self._lock:
            if self._pool is None:
                self._pool = HashWorkerPool(stats=self.stats, **self._pool_args)
            return self._pool

    def _prepare(self, algorithm_id: Optional[str], options: OptionsLike):
        if not algorithm_id:
            raise EmptyInput("An algorithm id is required")
        hash_options = coerce_options(options)
        descriptor = self.registry.validate(algorithm_id, hash_options)
        return descriptor, hash_options

    def generate_hash(self, text: Optional[str], algorithm_id: Optional[str], options: OptionsLike = None) -> Future:
        """
        Hash ``text`` on the worker pool.

        Args:
            text: Input to hash, must be non-empty
            algorithm_id: Registered algorithm id or alias
            options: ``HashOptions`` or a mapping with camelCase/snake_case keys

        Returns:
            A Future resolving to the digest string, or failing with ``WorkerFailure``

        Raises:
            EmptyInput, UnsupportedAlgorithm, InvalidOptions before anything is dispatched
        """
        if not text:
            raise EmptyInput("Text to hash must not be empty")
        descriptor, hash_options = self._prepare(algorithm_id, options)
        request = HashRequest(text=text, algorithm_id=descriptor.id, options=hash_options)
        future = self.pool.submit_single(request, descriptor)
        future.add_done_callback(self._report_failure)
        return future

    def generate_hash_sync(self, text: Optional[str], algorithm_id: Optional[str], options: OptionsLike = None) -> str:
        """Compute a digest in the calling thread with the same validation as ``generate_hash``."""
        if not text:
            raise EmptyInput("Text to hash must not be empty")
        descriptor, hash_options = self._prepare(algorithm_id, options)
        digest = compute_digest(descriptor, text, hash_options)
        self.stats.note_algorithm(descriptor.id)
        self.stats.record(1)
        self.stats.sample_if_due()
        return digest

    def generate_bulk_hashes(
        self,
        items: Optional[Iterable[str]],
        algorithm_id: Optional[str],
        options: OptionsLike = None,
    ) -> Future:
        """Hash every item; the Future resolves to digests aligned with ``items``."""
        if items is None:
            raise EmptyInput("Bulk hashing needs a list of items")
        texts = list(items)
        descriptor, hash_options = self._prepare(algorithm_id, options)
        future = self.pool.submit_bulk(texts, descriptor, hash_options)
        future.add_done_callback(self._report_failure)
        return future

    def _report_failure(self, future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            self.notifier.notify(f"Error generating hash: {error}", "error")

    # ------------------------------------------------------------------
    # Synchronous helpers
    # ------------------------------------------------------------------

    def generate_salt(self, length: int = 16) -> str:
        return generate_salt(length)

    def detect_hash_type(self, value: Optional[str], hint: Optional[str] = None) -> DetectionResult:
        return self.detector.detect(value, hint)

    def evaluate_password_strength(self, password: Optional[str]) -> StrengthReport:
        return self.evaluator.evaluate(password)

    def on_stats_update(self, callback: StatsCallback) -> Callable[[], None]:
        """Subscribe to per-interval statistics; returns an unsubscribe function."""
        return self.stats.subscribe(callback)

    def get_metrics(self) -> Dict[str, Any]:
        if self._pool is None:
            return {"total_workers": 0, "pending_requests": 0, "workers": []}
        return self._pool.get_metrics()

    # ------------------------------------------------------------------
    # History and settings
    # ------------------------------------------------------------------

    def history(self) -> List[Dict[str, Any]]:
        return list(self.store.load(config.HISTORY_KEY, []) or [])

    def save_to_history(
        self,
        text: str,
        algorithm_id: str,
        digest: str,
        options: OptionsLike = None,
    ) -> Dict[str, Any]:
        """Prepend a history entry, keeping at most ``history_limit`` items."""
        descriptor = self.registry.get(algorithm_id)
        entry = {
            "text": text,
            "algorithm": descriptor.name,
            "algorithmId": descriptor.id,
            "hash": digest,
            "options": coerce_options(options).to_dict(),
            "timestamp": int(time.time() * 1000),
        }
        items = [entry] + self.history()
        self.store.store(config.HISTORY_KEY, items[: self.history_limit])
        self.notifier.notify("Hash saved to history", "success")
        return entry

    def remove_history_item(self, index: int) -> Dict[str, Any]:
        items = self.history()
        removed = items.pop(index)
        self.store.store(config.HISTORY_KEY, items)
        self.notifier.notify("History item removed", "success")
        return removed

    def clear_history(self) -> None:
        self.store.store(config.HISTORY_KEY, [])

    def save_settings(self, settings: Mapping[str, Any]) -> None:
        self.store.store(config.SETTINGS_KEY, dict(settings))

    def load_settings(self) -> Dict[str, Any]:
        return dict(self.store.load(config.SETTINGS_KEY, {}) or {})

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        with self._lock:
            pool = self._pool
        if pool is not None:
            pool.shutdown()
        _LOG.info("Hash engine closed")

    def __enter__(self) -> "HashEngine":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


_engine_instance: Optional[HashEngine] = None
_engine_lock = threading.Lock()


def get_engine() -> HashEngine:
    """Process-wide engine persisting history and settings in the user data directory."""
    global _engine_instance
    if _engine_instance is None:
        with _engine_lock:
            if _engine_instance is None:
                _engine_instance = HashEngine(store=SqliteStore())
    return _engine_instance
