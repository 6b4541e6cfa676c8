# tests/test_task_models.py

from __future__ import annotations

import pytest

from dice_todo.tasks.task_models import Priority, Task, ValidationError


def test_priority_weights() -> None:
    assert Priority.HIGH.weight == 3
    assert Priority.MEDIUM.weight == 2
    assert Priority.LOW.weight == 1


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("High", Priority.HIGH),
        ("high", Priority.HIGH),
        (" MEDIUM ", Priority.MEDIUM),
        ("l", Priority.LOW),
        (Priority.LOW, Priority.LOW),
    ],
)
def test_priority_parse_accepts_user_spellings(raw, expected) -> None:
    assert Priority.parse(raw) is expected


def test_priority_parse_rejects_unknown() -> None:
    with pytest.raises(ValidationError):
        Priority.parse("urgent")


def test_priority_from_db_coerces_unknown_to_medium() -> None:
    assert Priority.from_db("Low") is Priority.LOW
    assert Priority.from_db("Critical") is Priority.MEDIUM
    assert Priority.from_db(None) is Priority.MEDIUM


def test_record_uses_stored_field_names() -> None:
    task = Task(id="a1", name="Write report", priority=Priority.HIGH, done=False, created_at=1.5)
    assert task.to_record() == {
        "id": "a1",
        "name": "Write report",
        "priority": "High",
        "done": False,
        "createdAt": 1500,
    }


def test_from_record_reads_legacy_timestamp_ids() -> None:
    task = Task.from_record(
        {"id": 1699999999999, "name": " Pay rent ", "priority": "Low", "done": True, "createdAt": 1699999999999}
    )
    assert task is not None
    assert task.id == "1699999999999"
    assert task.name == "Pay rent"
    assert task.priority is Priority.LOW
    assert task.done is True
    assert task.created_at == pytest.approx(1699999999.999)


@pytest.mark.parametrize(
    "rec",
    [
        "not a dict",
        {"name": "no id"},
        {"id": "x", "name": "   "},
        {"id": "", "name": "blank id"},
        {"id": True, "name": "bool id"},
    ],
)
def test_from_record_rejects_invalid(rec) -> None:
    assert Task.from_record(rec) is None


def test_from_record_defaults() -> None:
    task = Task.from_record({"id": "x", "name": "n", "done": "yes"})
    assert task is not None
    assert task.done is False
    assert task.priority is Priority.MEDIUM
    assert task.created_at == 0.0


@pytest.mark.parametrize("raw", ["NaN", "Infinity", "-Infinity", 1e20, -5, 10**400, True])
def test_from_record_unusable_created_at_falls_back_to_zero(raw) -> None:
    task = Task.from_record({"id": "x", "name": "n", "createdAt": raw})
    assert task is not None
    assert task.created_at == 0.0
    assert task.to_record()["createdAt"] == 0
