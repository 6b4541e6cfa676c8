# src/dice_todo/tasks/task_roller.py

from __future__ import annotations

"""
Dice roll sequencing.

A roll is a two-phase timed sequence on the running event loop:
- preview: every tick_seconds a uniformly sampled incomplete task is shown (feedback only)
- settle: after settle_seconds the preview stops and the priority-weighted pick becomes the result

Phases: IDLE -> PREVIEWING -> SETTLED. Starting a new roll tears down the previous
roll's timers first, so only the latest roll can ever publish a result.
"""

import asyncio
import logging
from collections.abc import Iterable
from enum import StrEnum

from ..core.ports import RandomSource, RollListener
from .task_models import Task
from .task_selector import incomplete_pool, pick_preview, pick_weighted

logger = logging.getLogger(__name__)


class RollPhase(StrEnum):
    IDLE = "idle"
    PREVIEWING = "previewing"
    SETTLED = "settled"


class TaskRoller:
    def __init__(
        self,
        *,
        listener: RollListener | None = None,
        rng: RandomSource | None = None,
        tick_seconds: float = 0.08,
        settle_seconds: float = 1.2,
    ) -> None:
        self.listener = listener
        self._rng = rng
        self._tick_s = max(0.001, float(tick_seconds))
        self._settle_s = max(0.0, float(settle_seconds))

        self._phase = RollPhase.IDLE
        self._result: Task | None = None
        self._preview: Task | None = None

        self._preview_timer: asyncio.Task[None] | None = None
        self._settle_timer: asyncio.Task[Task | None] | None = None
        self._current: asyncio.Future[Task | None] | None = None

        self._roll_no = 0
        self._closed = False

    @property
    def phase(self) -> RollPhase:
        return self._phase

    @property
    def rolling(self) -> bool:
        return self._phase == RollPhase.PREVIEWING

    @property
    def result(self) -> Task | None:
        """The settled pick, or None (nothing rolled yet, empty pool, or forgotten)."""
        return self._result

    @property
    def preview(self) -> Task | None:
        return self._preview

    def roll(self, snapshot: Iterable[Task]) -> asyncio.Future[Task | None]:
        """
        Start a roll over `snapshot` and return an awaitable for its result.

        Must be called from inside a running event loop. The pool is captured now;
        later changes to the task list do not affect this roll. An empty pool settles
        immediately with None.
        """
        if self._closed:
            raise RuntimeError("TaskRoller is shut down")

        loop = asyncio.get_running_loop()
        self._cancel_timers()

        self._roll_no += 1
        roll_no = self._roll_no
        self._result = None
        self._preview = None

        pool = incomplete_pool(snapshot)
        if not pool:
            logger.info("Roll #%s: no incomplete tasks", roll_no)
            self._phase = RollPhase.SETTLED
            fut: asyncio.Future[Task | None] = loop.create_future()
            fut.set_result(None)
            self._current = fut
            self._emit_settled(None)
            return fut

        logger.debug("Roll #%s started (pool=%s)", roll_no, len(pool))
        self._phase = RollPhase.PREVIEWING
        self._preview_timer = asyncio.create_task(
            self._preview_loop(pool), name=f"dice-roll-{roll_no}-preview"
        )
        self._settle_timer = asyncio.create_task(
            self._settle_after(pool, roll_no), name=f"dice-roll-{roll_no}-settle"
        )
        self._current = self._settle_timer
        return self._settle_timer

    async def wait(self) -> Task | None:
        """
        Wait for the current roll to settle.

        Follows re-rolls: if the awaited roll is superseded, waits for the newer one.
        Returns None when the roll was cancelled or the pool was empty.
        """
        while True:
            current = self._current
            if current is None:
                return self._result
            await asyncio.wait({current})
            if current is not self._current:
                continue
            if current.cancelled():
                return None
            return current.result()

    def cancel(self) -> None:
        self._cancel_timers()
        if self._phase == RollPhase.PREVIEWING:
            self._phase = RollPhase.IDLE
            self._preview = None

    def shutdown(self) -> None:
        """Cancel every pending timer; no events are delivered afterwards."""
        self.cancel()
        self._closed = True
        self.listener = None
        logger.debug("TaskRoller shut down after %s rolls", self._roll_no)

    def forget(self, task_id: str) -> None:
        """Drop the settled pick if it refers to `task_id` (task completed or deleted)."""
        if self._result is not None and self._result.id == task_id:
            self._result = None
            if self._phase == RollPhase.SETTLED:
                self._phase = RollPhase.IDLE

    # ---- timers ----

    def _cancel_timers(self) -> None:
        for timer in (self._preview_timer, self._settle_timer):
            if timer is not None and not timer.done():
                timer.cancel()
        self._preview_timer = None
        self._settle_timer = None

    async def _preview_loop(self, pool: list[Task]) -> None:
        while True:
            await asyncio.sleep(self._tick_s)
            task = pick_preview(pool, self._rng)
            if task is None:
                return
            self._preview = task
            self._emit_preview(task)

    async def _settle_after(self, pool: list[Task], roll_no: int) -> Task | None:
        await asyncio.sleep(self._settle_s)

        if self._preview_timer is not None:
            self._preview_timer.cancel()
            self._preview_timer = None
        self._settle_timer = None

        final = pick_weighted(pool, self._rng)
        self._result = final
        self._preview = None
        self._phase = RollPhase.SETTLED
        logger.info("Roll #%s settled on %s", roll_no, final.id if final else None)

        self._emit_settled(final)
        return final

    # ---- listener ----

    def _emit_preview(self, task: Task) -> None:
        if self.listener is None:
            return
        try:
            self.listener.on_preview(task)
        except Exception:
            logger.exception("Roll listener on_preview failed")

    def _emit_settled(self, task: Task | None) -> None:
        if self.listener is None:
            return
        try:
            self.listener.on_settled(task)
        except Exception:
            logger.exception("Roll listener on_settled failed")
