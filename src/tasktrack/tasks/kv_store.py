# src/tasktrack/tasks/kv_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import sqlite3
from pathlib import Path

from .errors import PersistenceError, QuotaExceededError

logger = logging.getLogger(__name__)


def _check_quota(key: str, value: str, quota_bytes: int | None) -> None:
    if not quota_bytes:
        return
    size = len(value.encode("utf-8"))
    if size > quota_bytes:
        raise QuotaExceededError(key, size, quota_bytes)


class MemoryKeyValueStore:
    """Dict-backed store. Not durable; used for tests and the 'memory' backend."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._data: dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        _check_quota(key, value, self._quota_bytes)
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SqliteKeyValueStore:
    """
    SQLite key-value store.

    One table `kv(key TEXT PRIMARY KEY, value TEXT)`.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3", *, quota_bytes: int | None = None) -> None:
        self._db_path = Path(db_path)
        self._quota_bytes = quota_bytes
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._ensure_schema()
        except (OSError, sqlite3.Error) as e:
            raise PersistenceError(f"cannot open sqlite store at {self._db_path}: {e}") from e
        logger.info("SqliteKeyValueStore ready db=%s", self._db_path)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def get(self, key: str) -> str | None:
        try:
            conn = self._get_conn()
            try:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"sqlite read failed key={key!r}: {e}") from e
        return None if row is None else str(row[0])

    def set(self, key: str, value: str) -> None:
        _check_quota(key, value, self._quota_bytes)
        try:
            conn = self._get_conn()
            try:
                conn.execute(
                    """
                    INSERT INTO kv(key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """,
                    (key, value),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"sqlite write failed key={key!r}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            conn = self._get_conn()
            try:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"sqlite delete failed key={key!r}: {e}") from e


class JsonFileKeyValueStore:
    """
    Key-value store kept as a single JSON object file.

    Writes go to a temp file first and are moved into place with os.replace.
    """

    def __init__(self, path: str | Path, *, quota_bytes: int | None = None) -> None:
        self._path = Path(path)
        self._quota_bytes = quota_bytes

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except OSError as e:
            raise PersistenceError(f"cannot read {self._path}: {e}") from e
        except ValueError as e:
            raise PersistenceError(f"corrupt key-value file {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError(f"corrupt key-value file {self._path}: top level is not an object")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(".tmp")
            tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            raise PersistenceError(f"cannot write {self._path}: {e}") from e
        with contextlib.suppress(OSError):
            # Task text is personal; keep the file private on disk.
            os.chmod(self._path, 0o600)

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        _check_quota(key, value, self._quota_bytes)
        try:
            data = self._read_all()
        except PersistenceError:
            # An unreadable file must not block writes of a fresh collection.
            logger.warning("Overwriting unreadable key-value file %s", self._path)
            data = {}
        data[key] = value
        self._write_all(data)

    def delete(self, key: str) -> None:
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)
