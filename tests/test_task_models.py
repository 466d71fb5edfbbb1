# tests/test_task_models.py

from __future__ import annotations

import pytest

from tasktrack.tasks.errors import ValidationError
from tasktrack.tasks.task_models import Task, parse_datetime, priority_weight, utc_now_iso


def test_new_task_trims_and_fills_defaults() -> None:
    task = Task.new("  Buy milk  ", description="  2 litres ", category="life", priority="low")

    assert task.title == "Buy milk"
    assert task.description == "2 litres"
    assert task.completed is False
    assert task.deadline is None
    assert task.id
    assert parse_datetime(task.created_at) is not None
    assert task.created_at.endswith("Z")


@pytest.mark.parametrize("title", ["", "   ", "\t\n"])
def test_new_task_rejects_blank_title(title: str) -> None:
    with pytest.raises(ValidationError):
        Task.new(title)


def test_unknown_category_and_priority_are_kept_verbatim() -> None:
    task = Task.new("Fix bike", category="hobby", priority="urgent")
    assert task.category == "hobby"
    assert task.priority == "urgent"
    assert priority_weight("urgent") == 0
    assert priority_weight("high") > priority_weight("medium") > priority_weight("low")


def test_empty_deadline_means_no_deadline() -> None:
    assert Task.new("x", deadline="").deadline is None
    assert Task.new("x", deadline="  ").deadline is None
    assert Task.new("x", deadline="2026-10-20").deadline == "2026-10-20"


def test_to_dict_uses_stored_layout() -> None:
    task = Task.new("Report", category="work", priority="high", task_id="t1", created_at="2026-10-19T08:00:00.000Z")
    assert task.to_dict() == {
        "id": "t1",
        "title": "Report",
        "description": "",
        "category": "work",
        "priority": "high",
        "deadline": None,
        "completed": False,
        "createdAt": "2026-10-19T08:00:00.000Z",
    }


def test_from_dict_accepts_legacy_record_without_description() -> None:
    raw = {
        "id": "1729325400000",
        "title": "Old task",
        "category": "study",
        "priority": "medium",
        "deadline": None,
        "completed": True,
        "createdAt": "2024-10-19T08:10:00.000Z",
    }
    task = Task.from_dict(raw)
    assert task.id == "1729325400000"
    assert task.description == ""
    assert task.completed is True


@pytest.mark.parametrize(
    "raw",
    [
        {"title": "no id"},
        {"id": 5, "title": "numeric id"},
        {"id": "t1", "title": "  "},
        {"id": "t1"},
    ],
)
def test_from_dict_rejects_unusable_records(raw: dict) -> None:
    with pytest.raises(ValueError):
        Task.from_dict(raw)


def test_parse_datetime_handles_dates_datetimes_and_garbage() -> None:
    d = parse_datetime("2026-10-20")
    assert d is not None and d.tzinfo is not None
    assert (d.hour, d.minute) == (0, 0)

    dt = parse_datetime("2026-10-20T14:30")
    assert dt is not None and dt.hour == 14

    assert parse_datetime(utc_now_iso()) is not None
    assert parse_datetime("not a date") is None
    assert parse_datetime(None) is None
    assert parse_datetime("") is None


@pytest.mark.parametrize(
    ("stored", "expected"),
    [(True, True), (False, False), ("false", False), ("true", False), (1, False), (None, False)],
)
def test_from_dict_reads_completed_only_from_booleans(stored: object, expected: bool) -> None:
    task = Task.from_dict({"id": "t1", "title": "x", "completed": stored, "createdAt": ""})
    assert task.completed is expected


def test_from_dict_keeps_unparseable_deadline() -> None:
    task = Task.from_dict({"id": "t1", "title": "x", "deadline": "next week"})
    assert task.deadline == "next week"
    assert task.deadline_at is None
