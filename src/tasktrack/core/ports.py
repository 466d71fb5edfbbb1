# src/tasktrack/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage backends swappable and makes testing easier.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol


class KeyValueStore(Protocol):
    """
    Durable local key-value slot storage (localStorage-like).

    Implementations raise PersistenceError (or QuotaExceededError) on write
    failures instead of ignoring them.
    """

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...


class TaskPersistencePort(Protocol):
    """Load/save the full task collection. save() failures must propagate."""

    def load(self) -> list[Any]: ...
    def save(self, tasks: Sequence[Any]) -> None: ...


class TaskRepo(Protocol):
    # Mutations
    def create(
            self,
            title: str,
            *,
            description: str | None = "",
            category: str = "life",
            priority: str = "medium",
            deadline: str | None = None,
    ) -> Any: ...
    def delete(self, task_id: str) -> bool: ...
    def toggle_completed(self, task_id: str) -> Any: ...
    def update(self, task_id: str, fields: Mapping[str, Any]) -> Any: ...

    # Reads
    def get(self, task_id: str) -> Any | None: ...
    def get_all(self) -> tuple[Any, ...]: ...
    def query(self, options: Any) -> list[Any]: ...
