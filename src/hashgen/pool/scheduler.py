"""
Worker pool for hash computation.

Owns a fixed set of worker processes, dispatches single and bulk requests
to them and correlates their replies back to the caller's Future.
"""

from __future__ import annotations

import itertools
import multiprocessing
import queue
import threading
from concurrent.futures import Future, InvalidStateError
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import psutil

from .. import config
from ..errors import WorkerFailure
from ..logger import configure_logging
from ..models import AlgorithmDescriptor, Batch, HashOptions, HashRequest, new_request_id
from ..stats import HashStatistics, StatsCallback
from .messages import (
    BulkGenerateMessage,
    BulkResultMessage,
    ErrorMessage,
    GenerateMessage,
    Reply,
    ResultMessage,
)
from .worker import Worker

_LOG = configure_logging()


@dataclass
class PendingRequest:
    """Correlation record for one in-flight request or bulk request."""

    key: str
    future: Future
    algorithm_id: str
    outstanding: int = 1
    bulk: bool = False
    results: List[Tuple[int, str]] = field(default_factory=list)


class HashWorkerPool:
    """
    Fixed-size pool of hash worker processes.

    Features:
    - Single requests always go to the first worker
    - Bulk requests are split into batches assigned round-robin
    - Replies are correlated by request id or batch id; unknown ids are dropped
    - Dead workers fail their in-flight requests and are respawned
    - Throughput is sampled once per statistics interval
    """

    def __init__(
        self,
        size: Optional[int] = None,
        *,
        batch_size: Optional[int] = None,
        stats: Optional[HashStatistics] = None,
        stats_interval: Optional[float] = None,
        start_method: Optional[str] = None,
        poll_interval: float = 0.05,
    ) -> None:
        self.size = size if size is not None else config.WORKER_COUNT
        if self.size < 1:
            raise ValueError("Worker pool needs at least one worker")
        self.batch_size = batch_size if batch_size is not None else config.BATCH_SIZE
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        interval = stats_interval if stats_interval is not None else config.STATS_INTERVAL
        self.stats = stats if stats is not None else HashStatistics(interval=interval)
        self._context = multiprocessing.get_context(start_method or config.START_METHOD)
        self._poll_interval = poll_interval

        self._lock = threading.RLock()
        self._pending: Dict[str, PendingRequest] = {}
        self._workers: List[Worker] = []
        self._results: Any = None
        self._round_robin = itertools.count()
        self._dispatcher: Optional[threading.Thread] = None
        self._running = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def started(self) -> bool:
        return self._running

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._results = self._context.Queue()
            self._workers = [Worker(index, self._results, self._context) for index in range(self.size)]
            for worker in self._workers:
                worker.start()
            self._running = True
            self._dispatcher = threading.Thread(
                target=self._dispatch_loop,
                daemon=True,
                name="HashWorkerPool-Dispatcher",
            )
            self._dispatcher.start()
        _LOG.info(f"Worker pool started with {self.size} worker(s), batch size {self.batch_size}")

    def shutdown(self, timeout: float = 3.0) -> None:
        """
        Stop the dispatcher and every worker.

        Args:
            timeout: Seconds each worker gets to exit before it is terminated
        """
        with self._lock:
            if not self._running:
                return
            self._running = False
        if self._dispatcher is not None:
            self._dispatcher.join(timeout=2.0)
            self._dispatcher = None

        for worker in self._workers:
            try:
                worker.stop(timeout)
            except Exception as e:
                _LOG.error(f"Error stopping worker {worker.id}: {e}")

        with self._lock:
            leftovers = list(self._pending.values())
            self._pending.clear()
        for pending in leftovers:
            self._settle(pending, error=WorkerFailure(pending.key, "worker pool shut down"))

        if self._results is not None:
            self._results.close()
            self._results.cancel_join_thread()
            self._results = None
        _LOG.info("Worker pool stopped")

    def __enter__(self) -> "HashWorkerPool":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit_single(self, request: HashRequest, descriptor: AlgorithmDescriptor) -> Future:
        """Send one request to the first worker and return its Future."""
        self.start()
        future: Future = Future()
        message = GenerateMessage(
            id=request.id,
            text=request.text,
            algorithm=descriptor,
            options=request.options,
        )
        with self._lock:
            if request.id in self._pending:
                raise ValueError(f"Request id {request.id} is already pending")
            self._pending[request.id] = PendingRequest(request.id, future, descriptor.id)
            self._workers[0].send(message, request.id)
        self.stats.note_algorithm(descriptor.id)
        future.add_done_callback(partial(self._abandon_if_cancelled, request.id))
        return future

    def submit_bulk(
        self,
        texts: Sequence[str],
        descriptor: AlgorithmDescriptor,
        options: HashOptions,
    ) -> Future:
        """
        Split ``texts`` into batches and spread them over the workers.

        Returns:
            A Future resolving to the digests in input order
        """
        self.start()
        future: Future = Future()
        self.stats.note_algorithm(descriptor.id)
        if not texts:
            future.set_result([])
            return future

        batch_id = new_request_id()
        batches = Batch.partition(batch_id, list(texts), self.batch_size)
        with self._lock:
            self._pending[batch_id] = PendingRequest(
                batch_id,
                future,
                descriptor.id,
                outstanding=len(batches),
                bulk=True,
            )
            for batch in batches:
                worker = self._workers[next(self._round_robin) % len(self._workers)]
                worker.send(
                    BulkGenerateMessage(
                        batch_id=batch_id,
                        items=batch.items,
                        algorithm=descriptor,
                        options=options,
                    ),
                    batch_id,
                )
        _LOG.debug(f"Bulk request {batch_id}: {len(texts)} item(s) in {len(batches)} batch(es)")
        future.add_done_callback(partial(self._abandon_if_cancelled, batch_id))
        return future

    def subscribe(self, callback: StatsCallback) -> Callable[[], None]:
        return self.stats.subscribe(callback)

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def get_metrics(self) -> Dict[str, Any]:
        """
        Get worker metrics for monitoring.

        Returns:
            Dictionary with per-worker and pool-wide figures
        """
        with self._lock:
            workers = list(self._workers)
            pending = len(self._pending)
        return {
            "total_workers": len(workers),
            "alive_workers": sum(1 for worker in workers if worker.is_alive),
            "pending_requests": pending,
            "batch_size": self.batch_size,
            "hashes_per_second": self.stats.hashes_per_second,
            "unique_algorithms": self.stats.unique_algorithms,
            "workers": [self._worker_metrics(worker) for worker in workers],
        }

    # ------------------------------------------------------------------
    # Dispatcher
    # ------------------------------------------------------------------

    def _dispatch_loop(self) -> None:
        """Background loop correlating replies and watching worker health."""
        while self._running:
            try:
                try:
                    message = self._results.get(timeout=self._poll_interval)
                except queue.Empty:
                    message = None
                if message is not None:
                    self._handle_message(message)
                self._check_workers()
                self.stats.sample_if_due()
            except (EOFError, OSError) as e:
                if self._running:
                    _LOG.error(f"Result queue failure: {e}")
            except Exception as e:
                _LOG.error(f"Error in dispatcher loop: {e}")

    def _handle_message(self, message: Reply) -> None:
        key = message.correlation_id
        completed = 0
        with self._lock:
            worker = self._worker_by_id(message.worker_id)
            if worker is not None and key is not None and key in worker.in_flight:
                worker.release(key)
            pending = self._pending.get(key) if key is not None else None
            if pending is None:
                _LOG.debug(f"Dropping stale reply for {key} from worker {message.worker_id}")
                return

            if isinstance(message, ErrorMessage):
                del self._pending[key]
                error: Optional[WorkerFailure] = WorkerFailure(
                    key, f"{pending.algorithm_id}: {message.error}"
                )
                value: Any = None
            elif isinstance(message, ResultMessage):
                del self._pending[key]
                error, value = None, message.digest
                completed = 1
            elif isinstance(message, BulkResultMessage):
                pending.results.extend(message.results)
                pending.outstanding -= 1
                completed = len(message.results)
                if pending.outstanding > 0:
                    self.stats.record(completed)
                    return
                del self._pending[key]
                error = None
                value = [digest for _, digest in sorted(pending.results)]
            else:
                _LOG.warning(f"Ignoring unknown reply type {type(message).__name__}")
                return

        if completed:
            self.stats.record(completed)
        if error is not None:
            _LOG.warning(str(error))
        self._settle(pending, value=value, error=error)

    def _check_workers(self) -> None:
        for worker in list(self._workers):
            if not self._running or worker.is_alive:
                continue
            # Replies the worker posted before dying are still valid.
            self._drain_results()
            exitcode, pid = worker.exitcode, worker.pid
            with self._lock:
                failed = [
                    self._pending.pop(key)
                    for key in worker.drain_in_flight()
                    if key in self._pending
                ]
                if self._running:
                    worker.restart()
            _LOG.error(
                f"Worker {worker.id} (PID {pid}) exited with code {exitcode}, "
                f"failing {len(failed)} request(s)"
            )
            for pending in failed:
                self._settle(
                    pending,
                    error=WorkerFailure(
                        pending.key,
                        f"{pending.algorithm_id}: worker {worker.id} exited unexpectedly (exit code {exitcode})",
                    ),
                )

    def _drain_results(self) -> None:
        while True:
            try:
                message = self._results.get_nowait()
            except queue.Empty:
                return
            self._handle_message(message)

    def _abandon_if_cancelled(self, key: str, future: Future) -> None:
        if not future.cancelled():
            return
        with self._lock:
            if self._pending.pop(key, None) is not None:
                _LOG.debug(f"Request {key} cancelled by caller")

    def _settle(self, pending: PendingRequest, *, value: Any = None, error: Optional[BaseException] = None) -> None:
        try:
            if error is not None:
                pending.future.set_exception(error)
            else:
                pending.future.set_result(value)
        except InvalidStateError:
            _LOG.debug(f"Future for {pending.key} already settled")

    def _worker_by_id(self, worker_id: int) -> Optional[Worker]:
        if 0 <= worker_id < len(self._workers):
            return self._workers[worker_id]
        return None

    def _worker_metrics(self, worker: Worker) -> Dict[str, Any]:
        memory_mb: Optional[float] = None
        pid = worker.pid
        if pid is not None and worker.is_alive:
            try:
                memory_mb = psutil.Process(pid).memory_info().rss / 1024 / 1024
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                memory_mb = None
        return {
            "id": worker.id,
            "pid": pid,
            "alive": worker.is_alive,
            "runtime": worker.runtime,
            "in_flight": sum(worker.in_flight.values()),
            "restarts": worker.restarts,
            "memory_mb": memory_mb,
        }
