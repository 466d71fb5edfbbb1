# tests/conftest.py

from __future__ import annotations

import logging
from pathlib import Path
from types import SimpleNamespace

import pytest

from tasktrack.cli.bootstrap import create_initial_state
from tasktrack.core.state import AppState
from tasktrack.tasks.kv_store import MemoryKeyValueStore
from tasktrack.tasks.task_persistence import TaskPersistence
from tasktrack.tasks.task_store import TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="tasktrack-test",
        log_level="DEBUG",
        locale="en",
        console_enabled=True,
        confirm_ttl_seconds=600,
        # Paths (tmp per test run)
        data_dir=tmp_path,
        storage_backend="sqlite",
        storage_path=tmp_path / "tasks.sqlite3",
        storage_key="todoTasks",
        storage_quota_bytes=0,
        rollback_on_save_error=True,
    )


@pytest.fixture()
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def persistence(kv: MemoryKeyValueStore) -> TaskPersistence:
    return TaskPersistence(kv)


@pytest.fixture()
def store(persistence: TaskPersistence) -> TaskStore:
    return TaskStore(persistence)


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """
    AppState wired through the real composition root.

    NOTE: We keep the real SQLite backend here because the
    persistence contract is part of what we want to test.
    """
    return create_initial_state(settings=settings)


@pytest.fixture()
def restore_root_logging():
    """Undo handlers and level changes made by setup_logging()."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
    logging.captureWarnings(False)
