# src/tasktrack/tasks/task_query.py

from __future__ import annotations

"""
Query pipeline: status filter -> category filter -> search -> stable sort.

Pure: never mutates its input and always returns a new list.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from .errors import ValidationError
from .task_models import Task, priority_weight

ALL = "all"


class StatusFilter(StrEnum):
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"


class SortKey(StrEnum):
    CREATED = "created"
    DEADLINE = "deadline"
    PRIORITY = "priority"


_SORT_ALIASES = {
    "created": SortKey.CREATED,
    "createdat": SortKey.CREATED,
    "created_at": SortKey.CREATED,
    "deadline": SortKey.DEADLINE,
    "priority": SortKey.PRIORITY,
}


def parse_status(raw: str | None) -> StatusFilter:
    value = (raw or ALL).strip().lower()
    try:
        return StatusFilter(value)
    except ValueError:
        raise ValidationError(f"unknown status filter: {raw!r}") from None


def parse_sort(raw: str | None) -> SortKey:
    value = (raw or SortKey.CREATED.value).strip().lower()
    key = _SORT_ALIASES.get(value)
    if key is None:
        raise ValidationError(f"unknown sort key: {raw!r}")
    return key


@dataclass(frozen=True, slots=True)
class TaskQuery:
    status: StatusFilter = StatusFilter.ALL
    # "all" or a category code (exact, case-sensitive)
    category: str = ALL
    search: str = ""
    sort: SortKey = SortKey.CREATED

    @classmethod
    def from_values(
        cls,
        status: str | None = None,
        category: str | None = None,
        search: str | None = None,
        sort: str | None = None,
    ) -> TaskQuery:
        return cls(
            status=parse_status(status),
            category=(category or ALL).strip() or ALL,
            search=search or "",
            sort=parse_sort(sort),
        )


def _matches_search(task: Task, needle: str) -> bool:
    return needle in task.title.casefold() or needle in (task.description or "").casefold()


def _by_created_desc(tasks: list[Task]) -> list[Task]:
    # Two passes keep the sort stable while sending unparseable timestamps last.
    dated = [(t, t.created_at_dt) for t in tasks]
    with_ts = [(t, dt) for t, dt in dated if dt is not None]
    without_ts = [t for t, dt in dated if dt is None]
    with_ts.sort(key=lambda pair: pair[1], reverse=True)
    return [t for t, _ in with_ts] + without_ts


def _by_deadline(tasks: list[Task]) -> list[Task]:
    dated: list[tuple[Task, datetime]] = []
    undated: list[Task] = []
    for t in tasks:
        dt = t.deadline_at
        if dt is None:
            undated.append(t)
        else:
            dated.append((t, dt))
    dated.sort(key=lambda pair: pair[1])
    return [t for t, _ in dated] + undated


def query_tasks(tasks: Iterable[Task], options: TaskQuery | None = None) -> list[Task]:
    """
    Produce the display order for `tasks`.

    - status: pending keeps not-completed, completed keeps completed
    - category: exact code match unless "all"
    - search: case-insensitive substring of title or description
    - sort: created (newest first), deadline (ascending, no-deadline last),
      priority (high > medium > low, ties keep input order)
    """
    opts = options or TaskQuery()
    out = list(tasks)

    if opts.status == StatusFilter.PENDING:
        out = [t for t in out if not t.completed]
    elif opts.status == StatusFilter.COMPLETED:
        out = [t for t in out if t.completed]

    if opts.category != ALL:
        out = [t for t in out if t.category == opts.category]

    needle = opts.search.casefold()
    if needle:
        out = [t for t in out if _matches_search(t, needle)]

    if opts.sort == SortKey.DEADLINE:
        return _by_deadline(out)
    if opts.sort == SortKey.PRIORITY:
        # sorted() is stable, so equal weights keep input order.
        return sorted(out, key=lambda t: priority_weight(t.priority), reverse=True)
    return _by_created_desc(out)
