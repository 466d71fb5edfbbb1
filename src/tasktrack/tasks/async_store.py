# src/tasktrack/tasks/async_store.py

from __future__ import annotations

"""
asyncio facade over TaskStore.

For presentation layers that run concurrent event handlers:
- one mutation in flight at a time (asyncio.Lock)
- the blocking store call (including the save) runs in a worker thread
- the caller's await returns only after the write finished, or raises
"""

import asyncio
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from .task_models import Task
from .task_query import TaskQuery
from .task_store import TaskStore

T = TypeVar("T")


class AsyncTaskStore:
    def __init__(self, store: TaskStore) -> None:
        self._store = store
        self._lock = asyncio.Lock()

    @property
    def store(self) -> TaskStore:
        return self._store

    async def _mutate(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        async with self._lock:
            return await asyncio.to_thread(fn, *args, **kwargs)

    async def create(self, title: str, **fields: Any) -> Task:
        return await self._mutate(self._store.create, title, **fields)

    async def delete(self, task_id: str) -> bool:
        return await self._mutate(self._store.delete, task_id)

    async def toggle_completed(self, task_id: str) -> Task:
        return await self._mutate(self._store.toggle_completed, task_id)

    async def update(self, task_id: str, fields: Mapping[str, Any]) -> Task:
        return await self._mutate(self._store.update, task_id, fields)

    # Reads return the current in-memory snapshot without waiting for the lock.

    def get_all(self) -> tuple[Task, ...]:
        return self._store.get_all()

    def query(self, options: TaskQuery | None = None) -> list[Task]:
        return self._store.query(options)
