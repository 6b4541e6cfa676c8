# src/dice_todo/storage/backends.py

"""
Key-value persistence backends.

Every backend stores opaque string values under string keys:
- MemoryBackend: process-local dict (tests, throwaway sessions)
- JsonFileBackend: one JSON object file, replaced atomically on write
- SqliteBackend: a single kv table, one short-lived connection per call

Backends raise PersistenceReadError / PersistenceWriteError; they never swallow errors.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import sqlite3
import threading
import time
from pathlib import Path

from ..core.ports import KeyValueBackend

logger = logging.getLogger(__name__)


class PersistenceError(RuntimeError):
    """Base class for storage failures."""


class PersistenceReadError(PersistenceError):
    pass


class PersistenceWriteError(PersistenceError):
    pass


class MemoryBackend:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value


class JsonFileBackend:
    """
    JSON file holding {key: value}.

    Writes go to a sibling .tmp file and are moved into place with os.replace,
    so a crash mid-write never leaves a truncated file behind.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError) as e:
            raise PersistenceReadError(f"Cannot read {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceReadError(f"Unexpected top-level JSON in {self._path}")
        return data

    def get(self, key: str) -> str | None:
        with self._lock:
            val = self._read_all().get(key)
        if val is None:
            return None
        return val if isinstance(val, str) else json.dumps(val, ensure_ascii=False)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            try:
                data = self._read_all()
            except PersistenceReadError:
                logger.warning("Storage file %s is unreadable; rewriting it.", self._path)
                data = {}
            data[key] = value

            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                tmp = self._path.with_suffix(self._path.suffix + ".tmp")
                tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), "utf-8")
                os.replace(tmp, self._path)
            except OSError as e:
                raise PersistenceWriteError(f"Cannot write {self._path}: {e}") from e

            with contextlib.suppress(OSError):
                # Best-effort: keep the file private on disk.
                os.chmod(self._path, 0o600)


class SqliteBackend:
    """
    SQLite kv store.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._ensure_schema()
        except (OSError, sqlite3.Error) as e:
            # Stay constructible; every later call reports the failure on its own.
            logger.warning("SqliteBackend init failed db=%s: %r", self._db_path, e)

    @property
    def path(self) -> Path:
        return self._db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def get(self, key: str) -> str | None:
        try:
            conn = self._get_conn()
            try:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceReadError(f"SQLite read failed db={self._db_path}: {e}") from e
        return None if row is None else str(row[0])

    def set(self, key: str, value: str) -> None:
        try:
            conn = self._get_conn()
            try:
                conn.execute(
                    """
                    INSERT INTO kv(key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, time.time()),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceWriteError(f"SQLite write failed db={self._db_path}: {e}") from e


def create_backend(kind: str, path: str | Path | None = None) -> KeyValueBackend:
    kind = (kind or "").strip().lower()
    if kind == "memory":
        return MemoryBackend()
    if path is None:
        raise ValueError(f"storage path is required for backend {kind!r}")
    if kind == "sqlite":
        return SqliteBackend(path)
    return JsonFileBackend(path)
