# src/tasktrack/tasks/task_persistence.py

from __future__ import annotations

import json
import logging
from collections.abc import Sequence

from ..core.ports import KeyValueStore
from .errors import PersistenceError
from .task_models import Task

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "todoTasks"


class TaskPersistence:
    """
    Persistence adapter: the whole collection as one JSON array under one key.

    - save() raises PersistenceError on any backend failure.
    - load() never raises: missing data -> [], corrupt data -> [] plus a
      WARNING and `last_load_error`, so callers can tell the user.
    """

    def __init__(self, kv: KeyValueStore, key: str = DEFAULT_STORAGE_KEY) -> None:
        self._kv = kv
        self._key = key
        self.last_load_error: PersistenceError | None = None

    @property
    def key(self) -> str:
        return self._key

    def save(self, tasks: Sequence[Task]) -> None:
        payload = json.dumps([t.to_dict() for t in tasks], ensure_ascii=False)
        try:
            self._kv.set(self._key, payload)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"failed to save tasks under key={self._key!r}: {e}") from e
        logger.debug("Saved %d tasks key=%s bytes=%d", len(tasks), self._key, len(payload))

    def load(self) -> list[Task]:
        self.last_load_error = None

        try:
            raw = self._kv.get(self._key)
        except Exception as e:
            return self._data_loss(f"failed to read stored tasks: {e}", e)

        if raw is None or raw == "":
            return []

        try:
            data = json.loads(raw)
        except ValueError as e:
            return self._data_loss(f"stored tasks are not valid JSON: {e}", e)

        if not isinstance(data, list):
            return self._data_loss(
                f"stored tasks are not a JSON array (got {type(data).__name__})", None
            )

        tasks: list[Task] = []
        seen: set[str] = set()
        for i, item in enumerate(data):
            if not isinstance(item, dict):
                logger.warning("Skipping stored task #%d: not an object", i)
                continue
            try:
                task = Task.from_dict(item)
            except ValueError as e:
                logger.warning("Skipping stored task #%d: %s", i, e)
                continue
            if task.id in seen:
                logger.warning("Skipping stored task #%d: duplicate id %s", i, task.id)
                continue
            seen.add(task.id)
            tasks.append(task)

        logger.debug("Loaded %d tasks key=%s", len(tasks), self._key)
        return tasks

    def _data_loss(self, message: str, cause: BaseException | None) -> list[Task]:
        err = PersistenceError(message)
        err.__cause__ = cause
        self.last_load_error = err
        logger.warning("Task data lost on load (starting empty): %s", message)
        return []
