# tests/test_task_roller.py

from __future__ import annotations

import asyncio
import random

import pytest

from dice_todo.tasks.task_models import Priority
from dice_todo.tasks.task_roller import RollPhase, TaskRoller

from .fakes import RecordingRollListener, make_task


def _roller(listener: RecordingRollListener, *, settle: float = 0.04) -> TaskRoller:
    return TaskRoller(
        listener=listener,
        rng=random.Random(3),
        tick_seconds=0.005,
        settle_seconds=settle,
    )


@pytest.mark.asyncio
async def test_roll_previews_then_settles_once() -> None:
    listener = RecordingRollListener()
    roller = _roller(listener)
    pool = [make_task("a", Priority.HIGH), make_task("b", Priority.LOW), make_task("c", done=True)]

    outcome = roller.roll(pool)
    assert roller.phase is RollPhase.PREVIEWING
    assert roller.rolling

    result = await outcome

    assert result is not None and result.id in {"a", "b"}
    assert roller.phase is RollPhase.SETTLED
    assert roller.result == result
    assert roller.preview is None
    assert listener.previews, "preview ticks should fire before the roll settles"
    assert all(t.id in {"a", "b"} for t in listener.previews)
    assert listener.settled == [result]

    # Preview timer is gone: no more ticks after settling.
    ticks = len(listener.previews)
    await asyncio.sleep(0.03)
    assert len(listener.previews) == ticks


@pytest.mark.asyncio
async def test_empty_pool_settles_immediately_with_no_selection() -> None:
    listener = RecordingRollListener()
    roller = _roller(listener)

    outcome = roller.roll([make_task("a", done=True)])

    assert outcome.done()
    assert await outcome is None
    assert roller.phase is RollPhase.SETTLED
    assert roller.result is None
    assert listener.settled == [None]
    assert listener.previews == []


@pytest.mark.asyncio
async def test_new_roll_cancels_the_one_in_flight() -> None:
    listener = RecordingRollListener()
    roller = _roller(listener)

    first = roller.roll([make_task("a")])
    await asyncio.sleep(0.01)
    second = roller.roll([make_task("b")])

    result = await second
    await asyncio.sleep(0.06)

    assert result.id == "b"
    assert first.cancelled()
    assert listener.settled == [result]
    assert roller.result.id == "b"


@pytest.mark.asyncio
async def test_wait_follows_a_reroll() -> None:
    listener = RecordingRollListener()
    roller = _roller(listener)

    roller.roll([make_task("a")])
    asyncio.get_running_loop().call_later(0.01, roller.roll, [make_task("b")])

    result = await roller.wait()

    assert result is not None and result.id == "b"
    assert [t.id for t in listener.settled] == ["b"]


@pytest.mark.asyncio
async def test_cancel_returns_to_idle_without_result() -> None:
    listener = RecordingRollListener()
    roller = _roller(listener)

    roller.roll([make_task("a")])
    await asyncio.sleep(0.01)
    roller.cancel()

    assert roller.phase is RollPhase.IDLE
    assert await roller.wait() is None
    await asyncio.sleep(0.06)
    assert listener.settled == []


@pytest.mark.asyncio
async def test_shutdown_stops_all_timers() -> None:
    listener = RecordingRollListener()
    roller = _roller(listener)

    roller.roll([make_task("a")])
    await asyncio.sleep(0.01)
    roller.shutdown()
    ticks = len(listener.previews)

    await asyncio.sleep(0.06)

    assert len(listener.previews) == ticks
    assert listener.settled == []
    with pytest.raises(RuntimeError):
        roller.roll([make_task("a")])


@pytest.mark.asyncio
async def test_listener_errors_do_not_break_the_roll() -> None:
    class Broken:
        def on_preview(self, task) -> None:
            raise RuntimeError("render failed")

        def on_settled(self, task) -> None:
            raise RuntimeError("render failed")

    roller = TaskRoller(listener=Broken(), rng=random.Random(1), tick_seconds=0.005, settle_seconds=0.02)

    result = await roller.roll([make_task("only")])

    assert result.id == "only"
    assert roller.phase is RollPhase.SETTLED


@pytest.mark.asyncio
async def test_forget_clears_a_completed_pick() -> None:
    roller = _roller(RecordingRollListener(), settle=0.0)

    picked = await roller.roll([make_task("a")])
    roller.forget("other")
    assert roller.result == picked

    roller.forget("a")
    assert roller.result is None
    assert roller.phase is RollPhase.IDLE


def test_roll_requires_running_loop() -> None:
    roller = TaskRoller()
    with pytest.raises(RuntimeError):
        roller.roll([make_task("a")])


def test_roll_phase_renders_as_its_value() -> None:
    assert f"{RollPhase.SETTLED}" == "settled"
    assert str(RollPhase.PREVIEWING) == "previewing"
