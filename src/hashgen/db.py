"""SQLite-backed key-value store for history and settings."""

from __future__ import annotations

import json
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional

from .data_paths import db_path
from .logger import configure_logging

_LOG = configure_logging()

SCHEMA_VERSION = 1

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS meta (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""


class SqliteStore:
    """Persist JSON values by key in a small SQLite database."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path or db_path()
        self._connection: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    def connect(self) -> sqlite3.Connection:
        with self._lock:
            if self._connection is None:
                _LOG.info("Opening database at %s", self.path)
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._connection = sqlite3.connect(self.path, check_same_thread=False)
                self._connection.row_factory = sqlite3.Row
                self._initialise(self._connection)
            return self._connection

    @contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        with self._lock:
            conn = self.connect()
            cur = conn.cursor()
            try:
                yield cur
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                cur.close()

    def _initialise(self, conn: sqlite3.Connection) -> None:
        conn.executescript(SCHEMA_SQL)
        conn.execute(
            "INSERT OR REPLACE INTO meta (key, value) VALUES (?, ?)",
            ("schema_version", str(SCHEMA_VERSION)),
        )
        conn.commit()

    def store(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        with self.cursor() as cur:
            cur.execute(
                "INSERT OR REPLACE INTO kv (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)",
                (key, payload),
            )

    def load(self, key: str, default: Any = None) -> Any:
        with self.cursor() as cur:
            cur.execute("SELECT value FROM kv WHERE key = ?", (key,))
            row = cur.fetchone()
        if row is None:
            return default
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as e:
            _LOG.warning("Discarding unreadable value for %s: %s", key, e)
            return default

    def delete(self, key: str) -> None:
        with self.cursor() as cur:
            cur.execute("DELETE FROM kv WHERE key = ?", (key,))

    def keys(self) -> List[str]:
        with self.cursor() as cur:
            cur.execute("SELECT key FROM kv ORDER BY key")
            return [row["key"] for row in cur.fetchall()]

    def close(self) -> None:
        with self._lock:
            if self._connection is not None:
                _LOG.info("Closing database")
                self._connection.close()
                self._connection = None
