# src/tasktrack/tasks/task_models.py

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from .errors import ValidationError


class Category(StrEnum):
    """
    Known category codes.

    Task.category is a plain str: codes outside this set are kept verbatim
    and displayed as-is.
    """

    WORK = "work"
    STUDY = "study"
    LIFE = "life"


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


PRIORITY_WEIGHTS: dict[str, int] = {
    Priority.HIGH.value: 3,
    Priority.MEDIUM.value: 2,
    Priority.LOW.value: 1,
}


def priority_weight(priority: str) -> int:
    # Unknown priorities rank below "low".
    return PRIORITY_WEIGHTS.get(priority, 0)


def new_task_id() -> str:
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    """Current time as ISO-8601 UTC with milliseconds, e.g. 2026-10-19T08:30:00.123Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_datetime(raw: str | None) -> datetime | None:
    """
    Parse an ISO date or date-time into an aware datetime.

    Naive values are interpreted as local time; a bare date means local
    midnight of that day. Returns None for empty or unparseable input.
    """
    if not raw or not isinstance(raw, str):
        return None
    try:
        dt = datetime.fromisoformat(raw.strip())
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


def _clean_deadline(deadline: str | None) -> str | None:
    if deadline is None:
        return None
    deadline = str(deadline).strip()
    return deadline or None


@dataclass(frozen=True, slots=True)
class Task:
    """
    One to-do item.

    Only the store changes tasks after creation, and it does so by replacing
    the record (dataclasses.replace), so handed-out snapshots never change.
    """

    id: str
    title: str
    description: str
    category: str
    priority: str
    deadline: str | None
    completed: bool
    created_at: str

    @classmethod
    def new(
        cls,
        title: str,
        *,
        description: str | None = "",
        category: str = Category.LIFE.value,
        priority: str = Priority.MEDIUM.value,
        deadline: str | None = None,
        task_id: str | None = None,
        created_at: str | None = None,
    ) -> Task:
        clean_title = (title or "").strip()
        if not clean_title:
            raise ValidationError("title is required")

        # Stored records may carry legacy free text (see from_dict); new ones may not.
        clean_deadline = _clean_deadline(deadline)
        if clean_deadline is not None and parse_datetime(clean_deadline) is None:
            raise ValidationError(f"invalid deadline: {clean_deadline!r} (use YYYY-MM-DD or an ISO date-time)")

        return cls(
            id=task_id or new_task_id(),
            title=clean_title,
            description=(description or "").strip(),
            category=str(category),
            priority=str(priority),
            deadline=clean_deadline,
            completed=False,
            created_at=created_at or utc_now_iso(),
        )

    @property
    def deadline_at(self) -> datetime | None:
        return parse_datetime(self.deadline)

    @property
    def created_at_dt(self) -> datetime | None:
        return parse_datetime(self.created_at)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["createdAt"] = data.pop("created_at")
        return data

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Task:
        """
        Build a Task from its stored (camelCase) mapping.

        Raises ValueError for records without a string id or a usable title.
        """
        task_id = raw.get("id")
        if not isinstance(task_id, str) or not task_id:
            raise ValueError(f"invalid task id: {task_id!r}")

        title = raw.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ValueError(f"task {task_id}: missing title")

        created_at = raw.get("createdAt", raw.get("created_at"))

        return cls(
            id=task_id,
            title=title,
            description=str(raw.get("description") or ""),
            category=str(raw.get("category") or ""),
            priority=str(raw.get("priority") or ""),
            deadline=_clean_deadline(raw.get("deadline")),
            # JSON true only; strings such as "false" read as pending.
            completed=raw.get("completed") is True,
            created_at=str(created_at or ""),
        )
