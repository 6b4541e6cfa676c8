# src/dice_todo/tasks/task_models.py

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ValidationError(ValueError):
    """Raised when a task cannot be created from the given input."""


class Priority(StrEnum):
    """
    Task priority.

    Values are stored verbatim ("High", "Medium", "Low"), so they must never change.
    """

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def weight(self) -> int:
        return _WEIGHTS[self]

    @classmethod
    def parse(cls, raw: str | Priority) -> Priority:
        """Strict, case-insensitive parse for user input (accepts h/m/l)."""
        if isinstance(raw, Priority):
            return raw
        key = str(raw or "").strip().lower()
        for p in cls:
            if key in (p.value.lower(), p.value[0].lower()):
                return p
        raise ValidationError(f"Unknown priority: {raw!r} (expected High, Medium or Low)")

    @classmethod
    def from_db(cls, raw: Any) -> Priority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls.parse(str(raw))
        except ValidationError:
            return cls.MEDIUM


# 9999-01-01 UTC; leaves room for any local UTC offset when formatting.
_MAX_CREATED_AT = 253_370_764_800.0


_WEIGHTS = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


@dataclass(slots=True, frozen=True)
class Task:
    id: str
    name: str
    priority: Priority
    done: bool
    created_at: float  # epoch seconds, display only

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "priority": self.priority.value,
            "done": self.done,
            "createdAt": int(round(self.created_at * 1000)),
        }

    @classmethod
    def from_record(cls, rec: Any) -> Task | None:
        """
        Build a Task from a stored JSON record.

        Returns None for records that cannot satisfy the Task invariants
        (not an object, no id, empty name).
        """
        if not isinstance(rec, dict):
            return None

        raw_id = rec.get("id")
        if raw_id is None or isinstance(raw_id, bool):
            return None
        task_id = str(raw_id).strip()
        if not task_id:
            return None

        name = str(rec.get("name") or "").strip()
        if not name:
            return None

        return cls(
            id=task_id,
            name=name,
            priority=Priority.from_db(rec.get("priority")),
            done=rec.get("done") is True,
            created_at=_created_at_from_ms(rec.get("createdAt")),
        )


def _created_at_from_ms(raw: Any) -> float:
    """
    Stored createdAt (epoch ms) -> epoch seconds.

    NaN, infinities and out-of-range values become 0.0; they would break both
    re-serialization and date formatting.
    """
    if raw is None or isinstance(raw, bool):
        return 0.0
    try:
        seconds = float(raw) / 1000.0
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(seconds) or not 0.0 <= seconds <= _MAX_CREATED_AT:
        return 0.0
    return seconds
