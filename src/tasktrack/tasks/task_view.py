# src/tasktrack/tasks/task_view.py

from __future__ import annotations

"""
Display view-models for tasks.

Turns stored Task records into plain data a renderer can print:
display labels, a relative deadline label and a local created-at string.
"""

import html
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from .task_models import Task, parse_datetime

DEFAULT_LOCALE = "en"

CATEGORY_LABELS: dict[str, dict[str, str]] = {
    "en": {"work": "Work", "study": "Study", "life": "Life"},
    "zh": {"work": "工作", "study": "学习", "life": "生活"},
}

PRIORITY_LABELS: dict[str, dict[str, str]] = {
    "en": {"low": "Low", "medium": "Medium", "high": "High"},
    "zh": {"low": "低", "medium": "中", "high": "高"},
}


def _labels(table: dict[str, dict[str, str]], locale: str) -> dict[str, str]:
    return table.get(locale) or table[DEFAULT_LOCALE]


def category_label(code: str, locale: str = DEFAULT_LOCALE) -> str:
    # Unknown codes are shown as-is.
    return _labels(CATEGORY_LABELS, locale).get(code, code)


def priority_label(code: str, locale: str = DEFAULT_LOCALE) -> str:
    return _labels(PRIORITY_LABELS, locale).get(code, code)


def days_until(deadline: datetime, now: datetime) -> int:
    """Calendar days (local time) from today to the deadline's day; negative when overdue."""
    return (deadline.astimezone().date() - now.astimezone().date()).days


def _relative_label_en(days: int) -> str:
    if days < 0:
        n = abs(days)
        return f"overdue by {n} day" if n == 1 else f"overdue by {n} days"
    if days == 0:
        return "due today"
    if days == 1:
        return "due tomorrow"
    return f"due in {days} days"


def _relative_label_zh(days: int) -> str:
    if days < 0:
        return f"已过期 {abs(days)} 天"
    if days == 0:
        return "今天到期"
    if days == 1:
        return "明天到期"
    return f"{days} 天后到期"


def relative_deadline_label(
    deadline: str | None,
    *,
    now: datetime | None = None,
    locale: str = DEFAULT_LOCALE,
) -> str | None:
    """Human label for a raw deadline, or None when there is no usable deadline."""
    due = parse_datetime(deadline)
    if due is None:
        return None
    if now is None:
        now = datetime.now().astimezone()
    elif now.tzinfo is None:
        now = now.astimezone()

    days = days_until(due, now)
    if locale == "zh":
        return _relative_label_zh(days)
    return _relative_label_en(days)


def format_created_at(created_at: str) -> str:
    dt = parse_datetime(created_at)
    if dt is None:
        return created_at
    return dt.astimezone().strftime("%Y-%m-%d %H:%M:%S")


@dataclass(frozen=True, slots=True)
class TaskView:
    id: str
    title: str
    description: str
    category: str
    category_label: str
    priority: str
    priority_label: str
    deadline: str | None
    deadline_label: str | None
    completed: bool
    created_at: str
    created_at_display: str


def build_task_view(
    task: Task,
    *,
    now: datetime | None = None,
    locale: str = DEFAULT_LOCALE,
    escape: bool = False,
) -> TaskView:
    """
    Build the view-model for one task.

    escape=True HTML-escapes title and description; use it whenever the
    output ends up in markup.
    """
    title = html.escape(task.title) if escape else task.title
    description = html.escape(task.description) if escape else task.description

    return TaskView(
        id=task.id,
        title=title,
        description=description,
        category=task.category,
        category_label=category_label(task.category, locale),
        priority=task.priority,
        priority_label=priority_label(task.priority, locale),
        deadline=task.deadline,
        deadline_label=relative_deadline_label(task.deadline, now=now, locale=locale),
        completed=task.completed,
        created_at=task.created_at,
        created_at_display=format_created_at(task.created_at),
    )


def build_task_views(
    tasks: Iterable[Task],
    *,
    now: datetime | None = None,
    locale: str = DEFAULT_LOCALE,
    escape: bool = False,
) -> list[TaskView]:
    if now is None:
        now = datetime.now().astimezone()
    return [build_task_view(t, now=now, locale=locale, escape=escape) for t in tasks]
