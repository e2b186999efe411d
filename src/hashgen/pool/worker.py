"""Worker processes that execute hash requests in isolation."""

from __future__ import annotations

import time
from collections import Counter
from typing import Any, List, Optional

from ..algorithms.base import compute_digest
from ..logger import configure_logging
from .messages import (
    BulkGenerateMessage,
    BulkResultMessage,
    ErrorMessage,
    GenerateMessage,
    Reply,
    Request,
    ResultMessage,
)

_LOG = configure_logging()


def handle_message(worker_id: int, message: Request) -> Reply:
    """Compute one request; failures become an ``ErrorMessage`` with the same tag."""
    if isinstance(message, GenerateMessage):
        try:
            digest = compute_digest(message.algorithm, message.text, message.options)
        except Exception as e:
            return ErrorMessage(worker_id=worker_id, error=f"{type(e).__name__}: {e}", id=message.id)
        return ResultMessage(worker_id=worker_id, id=message.id, digest=digest)

    if isinstance(message, BulkGenerateMessage):
        try:
            results = tuple(
                (item.original_index, compute_digest(message.algorithm, item.text, message.options))
                for item in message.items
            )
        except Exception as e:
            return ErrorMessage(worker_id=worker_id, error=f"{type(e).__name__}: {e}", batch_id=message.batch_id)
        return BulkResultMessage(worker_id=worker_id, batch_id=message.batch_id, results=results)

    return ErrorMessage(worker_id=worker_id, error=f"Unknown message type: {type(message).__name__}")


def worker_main(worker_id: int, inbox: Any, outbox: Any) -> None:
    """Receive loop run inside each worker process; ``None`` stops it."""
    while True:
        message = inbox.get()
        if message is None:
            break
        outbox.put(handle_message(worker_id, message))


class Worker:
    """
    One isolated execution unit.

    The scheduler owns ``in_flight``: correlation ids sent to this worker
    whose replies have not arrived yet.
    """

    def __init__(self, worker_id: int, outbox: Any, context: Any) -> None:
        self.id = worker_id
        self._outbox = outbox
        self._context = context
        self._inbox: Any = None
        self.process: Any = None
        self.started_at: float = 0.0
        self.restarts = 0
        self.in_flight: Counter = Counter()

    def start(self) -> None:
        self._inbox = self._context.Queue()
        self.process = self._context.Process(
            target=worker_main,
            args=(self.id, self._inbox, self._outbox),
            name=f"hashgen-worker-{self.id}",
            daemon=True,
        )
        self.process.start()
        self.started_at = time.time()
        _LOG.info(f"Started worker {self.id} (PID {self.process.pid})")

    def restart(self) -> None:
        self.stop(timeout=0.5)
        self.restarts += 1
        self.start()

    @property
    def pid(self) -> Optional[int]:
        return self.process.pid if self.process is not None else None

    @property
    def is_alive(self) -> bool:
        return self.process is not None and self.process.is_alive()

    @property
    def exitcode(self) -> Optional[int]:
        return self.process.exitcode if self.process is not None else None

    @property
    def runtime(self) -> float:
        return time.time() - self.started_at if self.started_at else 0.0

    def send(self, message: Request, correlation_id: str) -> None:
        self.in_flight[correlation_id] += 1
        self._inbox.put(message)

    def release(self, correlation_id: str) -> None:
        if self.in_flight[correlation_id] <= 1:
            del self.in_flight[correlation_id]
        else:
            self.in_flight[correlation_id] -= 1

    def drain_in_flight(self) -> List[str]:
        keys = list(self.in_flight)
        self.in_flight.clear()
        return keys

    def stop(self, timeout: float = 3.0) -> None:
        """Ask the process to exit, escalating to terminate and kill."""
        process = self.process
        if process is None:
            return
        if process.is_alive():
            try:
                self._inbox.put(None)
            except (OSError, ValueError) as e:
                _LOG.warning(f"Could not signal worker {self.id}: {e}")
            process.join(timeout)
            if process.is_alive():
                _LOG.warning(f"Worker {self.id} did not stop gracefully, terminating")
                process.terminate()
                process.join(1.0)
            if process.is_alive():
                process.kill()
                process.join(1.0)
        self._close_inbox()
        self.process = None
        _LOG.info(f"Worker {self.id} stopped")

    def _close_inbox(self) -> None:
        if self._inbox is None:
            return
        self._inbox.close()
        self._inbox.cancel_join_thread()
        self._inbox = None
