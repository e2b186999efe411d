"""Runtime configuration for the hash engine.

Every value can be overridden through a ``HASHGEN_*`` environment variable.
"""

from __future__ import annotations

import os
from typing import Optional

import psutil  # type: ignore[import]


def _truthy_env(name: str, default: str = "0") -> bool:
    value = os.getenv(name, default)
    return value not in {"0", "false", "False"}


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        msg = f"{name} must be an integer, got {value!r}"
        raise ValueError(msg) from None


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        msg = f"{name} must be a number, got {value!r}"
        raise ValueError(msg) from None


def hardware_concurrency(fallback: int = 4) -> int:
    """Number of logical CPUs, or ``fallback`` when it cannot be determined."""
    count = psutil.cpu_count(logical=True)
    return count if count else fallback


APP_NAME = "HashGenerator"
APP_VERSION = "1.0.0"

WORKER_COUNT: int = _int_env("HASHGEN_WORKERS", hardware_concurrency())
BATCH_SIZE: int = _int_env("HASHGEN_BATCH_SIZE", 1000)
STATS_INTERVAL: float = _float_env("HASHGEN_STATS_INTERVAL", 1.0)
HISTORY_LIMIT: int = _int_env("HASHGEN_HISTORY_LIMIT", 50)
START_METHOD: Optional[str] = os.getenv("HASHGEN_START_METHOD") or None
LOG_TO_FILE: bool = _truthy_env("HASHGEN_LOG_TO_FILE", "1")

HISTORY_KEY = "hashGenHistory"
SETTINGS_KEY = "hashGenSettings"
