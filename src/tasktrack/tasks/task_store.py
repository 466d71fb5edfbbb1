# src/tasktrack/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import replace
from typing import Any

from ..core.ports import TaskPersistencePort
from .errors import NotFoundError, PersistenceError, ValidationError
from .task_models import Category, Priority, Task, new_task_id
from .task_query import TaskQuery, query_tasks

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"title", "description"})
CREATE_FIELDS = frozenset({"title", "description", "category", "priority", "deadline"})


class TaskStore:
    """
    In-memory task collection with write-through persistence.

    The collection is loaded once at construction and saved in full after
    every mutation. A failed save raises PersistenceError from the mutating
    call; with rollback_on_save_error the in-memory change is reverted first.

    Not-found policy:
    - delete() returns False
    - toggle_completed() and update() raise NotFoundError
    """

    def __init__(
        self,
        persistence: TaskPersistencePort,
        *,
        rollback_on_save_error: bool = True,
        id_factory: Callable[[], str] = new_task_id,
    ) -> None:
        self._persistence = persistence
        self._rollback = rollback_on_save_error
        self._new_id = id_factory
        self._tasks: list[Task] = list(persistence.load())
        logger.info("TaskStore ready total=%s rollback=%s", len(self._tasks), self._rollback)

    # ---- low-level helpers ----

    def _index_of(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def _require_index(self, task_id: str) -> int:
        idx = self._index_of(task_id)
        if idx is None:
            raise NotFoundError(task_id)
        return idx

    def _unique_id(self) -> str:
        existing = {t.id for t in self._tasks}
        for _ in range(8):
            candidate = self._new_id()
            if candidate not in existing:
                return candidate
        raise RuntimeError("id factory keeps returning ids that are already in use")

    def _commit(self, previous: list[Task]) -> None:
        """Persist the current collection; on failure optionally restore `previous`."""
        try:
            self._persistence.save(self._tasks)
        except PersistenceError:
            if self._rollback:
                self._tasks = previous
                logger.warning("Save failed; in-memory change rolled back.")
            else:
                logger.warning("Save failed; in-memory change kept (may not survive a restart).")
            raise

    # ---- public API ----

    @property
    def last_load_error(self) -> PersistenceError | None:
        return getattr(self._persistence, "last_load_error", None)

    def count(self) -> int:
        return len(self._tasks)

    def get(self, task_id: str) -> Task | None:
        idx = self._index_of(task_id)
        return None if idx is None else self._tasks[idx]

    def get_all(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def query(self, options: TaskQuery | None = None) -> list[Task]:
        return query_tasks(self.get_all(), options)

    def create(
        self,
        title: str,
        *,
        description: str | None = "",
        category: str = Category.LIFE.value,
        priority: str = Priority.MEDIUM.value,
        deadline: str | None = None,
    ) -> Task:
        task = Task.new(
            title,
            description=description,
            category=category,
            priority=priority,
            deadline=deadline,
            task_id=self._unique_id(),
        )

        previous = list(self._tasks)
        self._tasks.append(task)
        self._commit(previous)

        logger.debug(
            "Task created id=%s category=%s priority=%s deadline=%s",
            task.id,
            task.category,
            task.priority,
            task.deadline,
        )
        return task

    def create_from_fields(self, fields: Mapping[str, Any]) -> Task:
        unknown = set(fields) - CREATE_FIELDS
        if unknown:
            raise ValidationError(f"unknown task fields: {', '.join(sorted(unknown))}")

        kwargs: dict[str, Any] = {
            k: fields[k] for k in ("description", "category", "priority", "deadline") if k in fields
        }
        return self.create(str(fields.get("title") or ""), **kwargs)

    def delete(self, task_id: str) -> bool:
        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("Delete ignored, unknown id=%s", task_id)
            return False

        previous = list(self._tasks)
        del self._tasks[idx]
        self._commit(previous)

        logger.debug("Task deleted id=%s", task_id)
        return True

    def toggle_completed(self, task_id: str) -> Task:
        idx = self._require_index(task_id)
        current = self._tasks[idx]
        updated = replace(current, completed=not current.completed)

        previous = list(self._tasks)
        self._tasks[idx] = updated
        self._commit(previous)

        logger.debug("Task toggled id=%s completed=%s", task_id, updated.completed)
        return updated

    def update(self, task_id: str, fields: Mapping[str, Any]) -> Task:
        """
        Edit title and/or description.

        A blank title is rejected (ValidationError) and the old title kept.
        A description of None (or missing) means "leave unchanged".
        """
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"only title and description can be edited (got: {', '.join(sorted(unknown))})"
            )

        idx = self._require_index(task_id)
        current = self._tasks[idx]
        changes: dict[str, str] = {}

        if "title" in fields:
            title = str(fields["title"] or "").strip()
            if not title:
                raise ValidationError("title must not be empty")
            changes["title"] = title

        if fields.get("description") is not None:
            changes["description"] = str(fields["description"]).strip()

        if not changes:
            return current

        updated = replace(current, **changes)
        previous = list(self._tasks)
        self._tasks[idx] = updated
        self._commit(previous)

        logger.debug("Task updated id=%s fields=%s", task_id, sorted(changes))
        return updated
