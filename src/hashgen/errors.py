"""Exception hierarchy raised by the hash engine."""

from __future__ import annotations

from typing import Optional


class HashEngineError(Exception):
    """Base class for every failure reported by the engine."""


class EmptyInput(HashEngineError, ValueError):
    """Raised when a request is missing its text or algorithm."""


class UnsupportedAlgorithm(HashEngineError, ValueError):
    """Raised when an algorithm id does not resolve to a registered descriptor."""

    def __init__(self, algorithm_id: str) -> None:
        self.algorithm_id = algorithm_id
        super().__init__(f"Unsupported algorithm: {algorithm_id!r}")


class InvalidOptions(HashEngineError, ValueError):
    """Raised when an option is malformed for the chosen algorithm."""

    def __init__(self, algorithm_id: str, option: str, reason: str) -> None:
        self.algorithm_id = algorithm_id
        self.option = option
        super().__init__(f"Invalid option {option!r} for {algorithm_id}: {reason}")


class WorkerFailure(HashEngineError, RuntimeError):
    """Raised on a Future whose worker failed while computing it."""

    def __init__(self, correlation_id: Optional[str], detail: str) -> None:
        self.correlation_id = correlation_id
        self.detail = detail
        super().__init__(f"Worker failure for request {correlation_id}: {detail}")


__all__ = [
    "EmptyInput",
    "HashEngineError",
    "InvalidOptions",
    "UnsupportedAlgorithm",
    "WorkerFailure",
]
