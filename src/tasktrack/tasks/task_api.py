# src/tasktrack/tasks/task_api.py

from __future__ import annotations

"""
High-level helpers used by presentation layers.

Presentation code talks to the core only through these functions and the
view-models they return. Deletes and edits can go through PendingActions,
a request -> confirm/cancel protocol, so the core never relies on a
blocking dialog.
"""

import logging
import secrets
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from ..core.ports import TaskRepo
from ..core.state import AppState
from .errors import NotFoundError, ValidationError
from .task_models import Task
from .task_query import TaskQuery
from .task_store import EDITABLE_FIELDS
from .task_view import TaskView, build_task_views

logger = logging.getLogger(__name__)

DEFAULT_CONFIRM_TTL_SECONDS = 600.0


class ActionKind(StrEnum):
    DELETE = "delete"
    EDIT = "edit"


@dataclass(frozen=True, slots=True)
class PendingAction:
    token: str
    kind: ActionKind
    task_id: str
    # PendingActions clock reading (monotonic by default).
    requested_at: float
    fields: Mapping[str, Any] = field(default_factory=dict)


class PendingActions:
    """
    Two-step delete/edit.

    request_*() checks the task exists and returns a single-use token;
    confirm(token) applies the action through the store, cancel(token)
    drops it. Unknown, used or expired tokens raise NotFoundError.

    Actions expire ttl_seconds after the request. Expired actions and
    actions for tasks that no longer exist are dropped whenever a new
    action is requested or the pending list is read, and confirming a
    delete drops every other action for that task.
    """

    def __init__(
        self,
        store: TaskRepo,
        *,
        ttl_seconds: float = DEFAULT_CONFIRM_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._ttl = ttl_seconds
        self._clock = clock
        self._pending: dict[str, PendingAction] = {}

    def _new_token(self) -> str:
        while True:
            token = secrets.token_hex(4)
            if token not in self._pending:
                return token

    def _require_task(self, task_id: str) -> Task:
        task = self._store.get(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task

    def _expired(self, action: PendingAction) -> bool:
        return self._clock() - action.requested_at > self._ttl

    def _prune(self) -> None:
        stale = [
            token
            for token, action in self._pending.items()
            if self._expired(action) or self._store.get(action.task_id) is None
        ]
        for token in stale:
            del self._pending[token]
        if stale:
            logger.debug("Dropped %d stale pending actions", len(stale))

    def _take(self, token: str) -> PendingAction:
        action = self._pending.pop(token, None)
        if action is None or self._expired(action):
            raise NotFoundError(token, what="pending action")
        return action

    def _add(self, kind: ActionKind, task_id: str, fields: Mapping[str, Any] | None = None) -> PendingAction:
        self._prune()
        action = PendingAction(
            token=self._new_token(),
            kind=kind,
            task_id=task_id,
            requested_at=self._clock(),
            fields=dict(fields or {}),
        )
        self._pending[action.token] = action
        logger.debug("%s requested id=%s token=%s", kind.value.capitalize(), task_id, action.token)
        return action

    def list_pending(self) -> list[PendingAction]:
        self._prune()
        return list(self._pending.values())

    def request_delete(self, task_id: str) -> PendingAction:
        self._require_task(task_id)
        return self._add(ActionKind.DELETE, task_id)

    def request_edit(self, task_id: str, fields: Mapping[str, Any]) -> PendingAction:
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"only title and description can be edited (got: {', '.join(sorted(unknown))})"
            )
        if "title" in fields and not str(fields["title"] or "").strip():
            raise ValidationError("title must not be empty")

        self._require_task(task_id)
        return self._add(ActionKind.EDIT, task_id, fields)

    def confirm(self, token: str) -> bool | Task:
        """Apply a pending action: delete -> bool, edit -> updated Task."""
        action = self._take(token)

        if action.kind == ActionKind.DELETE:
            deleted = self._store.delete(action.task_id)
            for other in [t for t, a in self._pending.items() if a.task_id == action.task_id]:
                del self._pending[other]
            return deleted
        return self._store.update(action.task_id, action.fields)

    def cancel(self, token: str) -> bool:
        action = self._take(token)
        logger.debug("Pending %s cancelled token=%s", action.kind.value, token)
        return True


def add_task(state: AppState, fields: Mapping[str, Any]) -> Task:
    return state.task_store.create_from_fields(fields)


def delete_task(state: AppState, task_id: str) -> bool:
    return state.task_store.delete(task_id)


def toggle_task(state: AppState, task_id: str) -> Task:
    return state.task_store.toggle_completed(task_id)


def edit_task(state: AppState, task_id: str, fields: Mapping[str, Any]) -> Task:
    return state.task_store.update(task_id, fields)


def list_task_views(
    state: AppState,
    query: TaskQuery | None = None,
    *,
    now: datetime | None = None,
    escape: bool = False,
) -> list[TaskView]:
    """Ordered view-models for the given query (defaults to state.view)."""
    tasks = state.task_store.query(query if query is not None else state.view)
    return build_task_views(tasks, now=now, locale=state.locale, escape=escape)
