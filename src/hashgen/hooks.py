"""Interfaces the engine uses to reach its storage and notification collaborators."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from .logger import configure_logging

_LOG = configure_logging()

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@runtime_checkable
class KeyValueStore(Protocol):
    def store(self, key: str, value: Any) -> None: ...

    def load(self, key: str, default: Any = None) -> Any: ...


@runtime_checkable
class Notifier(Protocol):
    def notify(self, message: str, level: str = "info") -> None: ...


class MemoryStore:
    """Dictionary-backed store for callers that do not persist anything."""

    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}

    def store(self, key: str, value: Any) -> None:
        self._data[key] = value

    def load(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)


class LoggingNotifier:
    """Send notifications to the application log."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or _LOG

    def notify(self, message: str, level: str = "info") -> None:
        self._logger.log(_LEVELS.get(level, logging.INFO), message)
