# src/tasktrack/tasks/errors.py

from __future__ import annotations

"""
Error taxonomy for the task core.

Presentation code catches TaskError and shows str(exc) to the user;
anything else is an internal error.
"""


class TaskError(Exception):
    """Base class for expected task-core failures."""


class ValidationError(TaskError, ValueError):
    """Input failed a field contract (e.g. blank title). State is unchanged."""


class NotFoundError(TaskError, KeyError):
    """An operation referenced an id that is not in the collection."""

    def __init__(self, task_id: str, what: str = "task") -> None:
        super().__init__(task_id)
        self.task_id = task_id
        self.what = what

    def __str__(self) -> str:
        return f"{self.what} not found: {self.task_id}"


class PersistenceError(TaskError):
    """The save/load boundary failed (unavailable store, quota, corrupt data)."""


class QuotaExceededError(PersistenceError):
    """A write would exceed the configured storage quota."""

    def __init__(self, key: str, size: int, quota: int) -> None:
        super().__init__(f"storage quota exceeded for key={key!r}: {size} bytes > {quota} bytes")
        self.key = key
        self.size = size
        self.quota = quota
