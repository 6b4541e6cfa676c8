# src/dice_todo/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage backends and the presentation layer swappable and makes testing easier.
"""

from typing import Any, Callable, Protocol, Sequence

from ..tasks.task_models import Task

TaskListListener = Callable[[tuple[Task, ...]], None]
# Called with the new full snapshot after every change of the task list.


class KeyValueBackend(Protocol):
    """
    String-keyed, string-valued persistence backend.

    get() returns None for an absent key. Both calls raise PersistenceError
    subclasses on failure; callers decide whether to absorb them.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class RandomSource(Protocol):
    """Anything with the random.Random draw API we need (the random module qualifies)."""

    def randrange(self, stop: int) -> int: ...

    def choice(self, seq: Sequence[Any]) -> Any: ...


class RollListener(Protocol):
    """
    Presentation-side port: receives roll events.

    on_preview() fires repeatedly while a roll is previewing (visual feedback only).
    on_settled() fires exactly once per roll that is not superseded.
    """

    def on_preview(self, task: Task) -> None: ...

    def on_settled(self, task: Task | None) -> None: ...
