"""Filesystem locations for the history database and log files."""

from __future__ import annotations

import importlib
import os
from pathlib import Path

GLib = None
try:  # pragma: no cover - GLib is only present with PyGObject installed
    GLib = getattr(importlib.import_module("gi.repository"), "GLib")
except (ImportError, AttributeError, ValueError):  # pragma: no cover - headless installs
    GLib = None

APP_NAMESPACE = "hashgen"
DATA_DIR_ENV = "HASHGEN_DATA_DIR"


def user_data_dir() -> Path:
    """Directory holding the database and logs.

    ``HASHGEN_DATA_DIR`` wins; otherwise GLib's user data directory, then
    ``$XDG_DATA_HOME`` or ``~/.local/share``, each with a ``hashgen`` suffix.
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        base = Path(override)
    elif GLib is not None:
        base = Path(GLib.get_user_data_dir()) / APP_NAMESPACE
    else:
        xdg_data = os.environ.get("XDG_DATA_HOME") or os.path.join(Path.home(), ".local", "share")
        base = Path(xdg_data) / APP_NAMESPACE
    base.mkdir(parents=True, exist_ok=True)
    return base


def log_dir() -> Path:
    path = user_data_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def db_path() -> Path:
    return user_data_dir() / "store.sqlite3"
