# src/dice_todo/tasks/task_selector.py

from __future__ import annotations

"""
Priority-weighted task selection.

Pure functions over a task snapshot:
- only incomplete tasks are eligible,
- weights come from Priority.weight (High=3, Medium=2, Low=1),
- P(task) = weight / sum(weights of the incomplete pool).

The random source is always injectable; pass random.Random(seed) for reproducible draws.
"""

import random
from collections.abc import Iterable

from ..core.ports import RandomSource
from .task_models import Task


def incomplete_pool(tasks: Iterable[Task]) -> list[Task]:
    return [t for t in tasks if not t.done]


def weight_of(task: Task) -> int:
    return task.priority.weight


def pick_weighted(tasks: Iterable[Task], rng: RandomSource | None = None) -> Task | None:
    """
    Draw one incomplete task, biased by priority.

    Equivalent to expanding every task id `weight` times and picking one entry
    uniformly, without materializing the expanded list.

    Returns None when there is nothing left to pick ("no selection").
    """
    pool = incomplete_pool(tasks)
    if not pool:
        return None

    total = sum(weight_of(t) for t in pool)
    r = (rng or random).randrange(total)

    for task in pool:
        r -= weight_of(task)
        if r < 0:
            return task

    # Unreachable while randrange honours its contract.
    return pool[-1]


def pick_preview(tasks: Iterable[Task], rng: RandomSource | None = None) -> Task | None:
    """Uniform pick used for the preview ticks of a roll (not priority-weighted)."""
    pool = incomplete_pool(tasks)
    if not pool:
        return None
    return (rng or random).choice(pool)


def selection_odds(tasks: Iterable[Task]) -> list[tuple[Task, float]]:
    pool = incomplete_pool(tasks)
    total = sum(weight_of(t) for t in pool)
    if total <= 0:
        return []
    return [(t, weight_of(t) / total) for t in pool]
