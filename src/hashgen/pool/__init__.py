"""Process-based worker pool for hash computation."""

from .messages import (
    BulkGenerateMessage,
    BulkResultMessage,
    ErrorMessage,
    GenerateMessage,
    ResultMessage,
)
from .scheduler import HashWorkerPool, PendingRequest
from .worker import Worker, handle_message, worker_main

__all__ = [
    "BulkGenerateMessage",
    "BulkResultMessage",
    "ErrorMessage",
    "GenerateMessage",
    "HashWorkerPool",
    "PendingRequest",
    "ResultMessage",
    "Worker",
    "handle_message",
    "worker_main",
]
