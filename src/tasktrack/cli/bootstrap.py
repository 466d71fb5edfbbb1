# src/tasktrack/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- picks the key-value backend and wires persistence -> store -> AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import KeyValueStore
from ..core.state import AppState
from ..tasks.errors import PersistenceError
from ..tasks.kv_store import JsonFileKeyValueStore, MemoryKeyValueStore, SqliteKeyValueStore
from ..tasks.task_api import DEFAULT_CONFIRM_TTL_SECONDS, PendingActions
from ..tasks.task_persistence import TaskPersistence
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    try:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        settings.storage_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PersistenceError(f"cannot create data directory for {settings.storage_path}: {e}") from e


def build_kv_store(settings) -> KeyValueStore:
    backend = getattr(settings, "storage_backend", "sqlite")
    quota = int(getattr(settings, "storage_quota_bytes", 0) or 0) or None

    if backend == "memory":
        return MemoryKeyValueStore(quota_bytes=quota)
    if backend == "json":
        return JsonFileKeyValueStore(settings.storage_path, quota_bytes=quota)
    if backend == "sqlite":
        return SqliteKeyValueStore(settings.storage_path, quota_bytes=quota)
    raise ValueError(f"unknown storage backend: {backend!r}")


def create_initial_state(*, settings=None, kv: KeyValueStore | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the key-value backend) injectable makes the app easier
    to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if kv is None:
        if getattr(settings, "storage_backend", "sqlite") != "memory":
            _ensure_local_dirs(settings)
        kv = build_kv_store(settings)

    persistence = TaskPersistence(kv, key=getattr(settings, "storage_key", "todoTasks"))
    task_store = TaskStore(
        persistence,
        rollback_on_save_error=bool(getattr(settings, "rollback_on_save_error", True)),
    )

    if task_store.last_load_error is not None:
        logger.warning("Started with an empty task list: %s", task_store.last_load_error)

    return AppState(
        settings=settings,
        task_store=task_store,
        pending=PendingActions(
            task_store,
            ttl_seconds=float(getattr(settings, "confirm_ttl_seconds", DEFAULT_CONFIRM_TTL_SECONDS)),
        ),
        locale=str(getattr(settings, "locale", "en") or "en"),
    )
