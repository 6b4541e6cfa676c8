# src/dice_todo/core/state.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from ..tasks.task_roller import TaskRoller
from ..tasks.task_store import TaskStore


def _always_yes(_prompt: str) -> bool:
    return True


@dataclass
class AppState:
    # Settings on the state for easy access in other modules.
    settings: object

    task_store: TaskStore
    roller: TaskRoller

    # Presentation-provided yes/no prompt (used for delete confirmation).
    confirm: Callable[[str], bool] = field(default=_always_yes)
