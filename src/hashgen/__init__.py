"""HashGenerator core package."""

from __future__ import annotations

from .config import APP_NAME, APP_VERSION
from .engine import HashEngine, get_engine
from .errors import EmptyInput, HashEngineError, InvalidOptions, UnsupportedAlgorithm, WorkerFailure
from .models import AlgorithmDescriptor, HashOptions

__version__ = APP_VERSION

__all__ = [
    "APP_NAME",
    "AlgorithmDescriptor",
    "EmptyInput",
    "HashEngine",
    "HashEngineError",
    "HashOptions",
    "InvalidOptions",
    "UnsupportedAlgorithm",
    "WorkerFailure",
    "get_engine",
]
