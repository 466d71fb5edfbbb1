# tests/test_task_query.py

from __future__ import annotations

from dataclasses import replace

import pytest

from tasktrack.tasks.errors import ValidationError
from tasktrack.tasks.task_models import Task
from tasktrack.tasks.task_query import SortKey, StatusFilter, TaskQuery, query_tasks


def _task(
    task_id: str,
    *,
    title: str = "",
    description: str = "",
    category: str = "life",
    priority: str = "medium",
    deadline: str | None = None,
    completed: bool = False,
    created_at: str = "2026-10-01T00:00:00.000Z",
) -> Task:
    t = Task.new(
        title or f"task {task_id}",
        description=description,
        category=category,
        priority=priority,
        deadline=deadline,
        task_id=task_id,
        created_at=created_at,
    )
    return replace(t, completed=completed)


@pytest.fixture()
def tasks() -> list[Task]:
    return [
        _task("a", title="Write report", category="work", priority="high", deadline="2026-10-25",
              created_at="2026-10-01T09:00:00.000Z"),
        _task("b", title="Buy milk", category="life", priority="low", completed=True,
              created_at="2026-10-03T09:00:00.000Z"),
        _task("c", title="Read paper", description="About REPORTING bias", category="study",
              priority="medium", deadline="2026-10-20T18:00", created_at="2026-10-02T09:00:00.000Z"),
        _task("d", title="Gym", category="life", priority="high", completed=True,
              created_at="2026-10-04T09:00:00.000Z"),
        _task("e", title="Call plumber", category="Life", priority="low", deadline="2026-10-22",
              created_at="2026-10-05T09:00:00.000Z"),
    ]


def _ids(result: list[Task]) -> list[str]:
    return [t.id for t in result]


def test_default_query_is_newest_first(tasks: list[Task]) -> None:
    assert _ids(query_tasks(tasks)) == ["e", "d", "b", "c", "a"]


def test_status_filters(tasks: list[Task]) -> None:
    pending = query_tasks(tasks, TaskQuery(status=StatusFilter.PENDING))
    completed = query_tasks(tasks, TaskQuery(status=StatusFilter.COMPLETED))

    assert pending and all(not t.completed for t in pending)
    assert completed and all(t.completed for t in completed)
    assert sorted(_ids(pending) + _ids(completed)) == sorted(_ids(tasks))


def test_category_filter_is_exact_and_case_sensitive(tasks: list[Task]) -> None:
    result = query_tasks(tasks, TaskQuery(category="life"))
    assert sorted(_ids(result)) == ["b", "d"]

    assert _ids(query_tasks(tasks, TaskQuery(category="Life"))) == ["e"]
    assert query_tasks(tasks, TaskQuery(category="nope")) == []


def test_search_matches_title_or_description_case_insensitively(tasks: list[Task]) -> None:
    result = query_tasks(tasks, TaskQuery(search="report"))
    assert sorted(_ids(result)) == ["a", "c"]

    assert _ids(query_tasks(tasks, TaskQuery(search="MILK"))) == ["b"]
    assert query_tasks(tasks, TaskQuery(search="zzz")) == []


def test_filters_combine(tasks: list[Task]) -> None:
    result = query_tasks(
        tasks,
        TaskQuery(status=StatusFilter.PENDING, category="study", search="paper"),
    )
    assert _ids(result) == ["c"]


def test_deadline_sort_puts_no_deadline_last(tasks: list[Task]) -> None:
    result = query_tasks(tasks, TaskQuery(sort=SortKey.DEADLINE))

    assert _ids(result) == ["c", "e", "a", "b", "d"]
    seen_undated = False
    for t in result:
        if t.deadline is None:
            seen_undated = True
        else:
            assert not seen_undated


def test_unparseable_deadline_sorts_with_undated(tasks: list[Task]) -> None:
    # Legacy stored data can hold free text; new tasks reject it.
    odd = replace(_task("z"), deadline="someday")
    result = query_tasks([odd, *tasks], TaskQuery(sort=SortKey.DEADLINE))
    assert _ids(result)[-3:] == ["z", "b", "d"]


def test_priority_sort_is_stable(tasks: list[Task]) -> None:
    result = query_tasks(tasks, TaskQuery(sort=SortKey.PRIORITY))
    # high: a, d   medium: c   low: b, e  (input order kept within each weight)
    assert _ids(result) == ["a", "d", "c", "b", "e"]


def test_unknown_priority_sorts_last() -> None:
    items = [_task("x", priority="urgent"), _task("y", priority="low")]
    assert _ids(query_tasks(items, TaskQuery(sort=SortKey.PRIORITY))) == ["y", "x"]


def test_query_never_reorders_input(tasks: list[Task]) -> None:
    before = list(tasks)
    result = query_tasks(tasks, TaskQuery(sort=SortKey.PRIORITY))

    assert result is not tasks
    assert tasks == before


def test_from_values_parses_user_strings() -> None:
    q = TaskQuery.from_values("Pending", "work", "milk", "createdAt")
    assert q == TaskQuery(status=StatusFilter.PENDING, category="work", search="milk", sort=SortKey.CREATED)

    assert TaskQuery.from_values() == TaskQuery()
    assert TaskQuery.from_values(sort="created_at").sort == SortKey.CREATED

    with pytest.raises(ValidationError):
        TaskQuery.from_values(status="later")
    with pytest.raises(ValidationError):
        TaskQuery.from_values(sort="title")
