# tests/test_task_api.py

from __future__ import annotations

from dataclasses import replace

import pytest

from tasktrack.core.state import AppState
from tasktrack.tasks.errors import NotFoundError, ValidationError
from tasktrack.tasks.task_api import (
    ActionKind,
    PendingActions,
    add_task,
    delete_task,
    edit_task,
    list_task_views,
    toggle_task,
)
from tasktrack.tasks.task_query import SortKey, StatusFilter, TaskQuery


def test_add_toggle_edit_delete_through_api(state: AppState) -> None:
    task = add_task(state, {"title": "Buy milk", "category": "life", "priority": "low"})
    assert toggle_task(state, task.id).completed is True
    assert edit_task(state, task.id, {"title": "Buy oat milk"}).title == "Buy oat milk"
    assert delete_task(state, task.id) is True
    assert delete_task(state, task.id) is False


def test_list_task_views_uses_state_view(state: AppState) -> None:
    a = add_task(state, {"title": "Ship", "priority": "high"})
    b = add_task(state, {"title": "Tidy", "priority": "low"})
    toggle_task(state, b.id)

    state.view = replace(state.view, status=StatusFilter.PENDING)
    assert [v.id for v in list_task_views(state)] == [a.id]

    views = list_task_views(state, TaskQuery(sort=SortKey.PRIORITY))
    assert [v.id for v in views] == [a.id, b.id]
    assert views[0].priority_label == "High"


def test_list_task_views_respects_locale(state: AppState) -> None:
    add_task(state, {"title": "Report", "category": "work", "priority": "high"})
    state.locale = "zh"
    view = list_task_views(state)[0]
    assert (view.category_label, view.priority_label) == ("工作", "高")


def test_delete_requires_confirmation(state: AppState) -> None:
    task = add_task(state, {"title": "Old note"})

    action = state.pending.request_delete(task.id)
    assert action.kind == ActionKind.DELETE
    assert state.task_store.get(task.id) is not None

    assert state.pending.confirm(action.token) is True
    assert state.task_store.get(task.id) is None


def test_cancelled_delete_leaves_task(state: AppState) -> None:
    task = add_task(state, {"title": "Keep me"})
    action = state.pending.request_delete(task.id)

    assert state.pending.cancel(action.token) is True
    assert state.task_store.get(task.id) == task
    assert state.pending.list_pending() == []


def test_tokens_are_single_use(state: AppState) -> None:
    task = add_task(state, {"title": "Once"})
    action = state.pending.request_delete(task.id)
    state.pending.confirm(action.token)

    with pytest.raises(NotFoundError):
        state.pending.confirm(action.token)
    with pytest.raises(NotFoundError):
        state.pending.cancel(action.token)


def test_edit_request_is_validated_up_front(state: AppState) -> None:
    task = add_task(state, {"title": "Report"})

    with pytest.raises(ValidationError):
        state.pending.request_edit(task.id, {"title": "   "})
    with pytest.raises(ValidationError):
        state.pending.request_edit(task.id, {"category": "work"})
    with pytest.raises(NotFoundError):
        state.pending.request_edit("missing", {"title": "x"})
    with pytest.raises(NotFoundError):
        state.pending.request_delete("missing")

    action = state.pending.request_edit(task.id, {"title": "Final report", "description": "v2"})
    updated = state.pending.confirm(action.token)

    assert updated.title == "Final report"
    assert updated.description == "v2"
    assert state.task_store.get(task.id).title == "Final report"


def test_confirm_delete_of_already_removed_task_reports_false(state: AppState) -> None:
    task = add_task(state, {"title": "Racy"})
    action = state.pending.request_delete(task.id)
    delete_task(state, task.id)

    assert state.pending.confirm(action.token) is False


def test_confirmed_delete_drops_other_actions_for_that_task(state: AppState) -> None:
    task = add_task(state, {"title": "Spam target"})
    other = add_task(state, {"title": "Unrelated"})
    tokens = [state.pending.request_delete(task.id).token for _ in range(50)]
    edit = state.pending.request_edit(task.id, {"title": "Renamed"})
    keep = state.pending.request_delete(other.id)

    assert state.pending.confirm(tokens[0]) is True

    assert [a.token for a in state.pending.list_pending()] == [keep.token]
    with pytest.raises(NotFoundError):
        state.pending.confirm(edit.token)


def test_actions_for_tasks_deleted_elsewhere_are_dropped(state: AppState) -> None:
    task = add_task(state, {"title": "Racy"})
    state.pending.request_delete(task.id)
    state.pending.request_edit(task.id, {"description": "later"})

    delete_task(state, task.id)

    assert state.pending.list_pending() == []


def test_actions_expire_after_ttl(state: AppState) -> None:
    now = [1000.0]
    pending = PendingActions(state.task_store, ttl_seconds=60, clock=lambda: now[0])
    task = add_task(state, {"title": "Slow decision"})

    fresh = pending.request_delete(task.id)
    stale = pending.request_delete(task.id)
    assert stale.requested_at == 1000.0

    now[0] += 61
    with pytest.raises(NotFoundError):
        pending.confirm(stale.token)
    assert pending.list_pending() == []
    with pytest.raises(NotFoundError):
        pending.cancel(fresh.token)

    again = pending.request_delete(task.id)
    now[0] += 59
    assert pending.confirm(again.token) is True
