# tests/conftest.py

from __future__ import annotations

import random
from pathlib import Path
from types import SimpleNamespace

import pytest

from dice_todo.core.state import AppState
from dice_todo.storage.writer import PersistenceWriter
from dice_todo.tasks.task_roller import TaskRoller
from dice_todo.tasks.task_store import STORAGE_KEY, TaskStore

from .fakes import RecordingBackend


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="dice-todo-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        storage_backend="memory",
        storage_path=tmp_path / "tasks.json",
        storage_key=STORAGE_KEY,
        write_queue_size=16,
        write_retries=0,
        write_retry_delay_seconds=0.0,
        # Fast rolls: a handful of preview ticks, then settle.
        roll_tick_seconds=0.005,
        roll_settle_seconds=0.04,
        random_seed=7,
        confirm_delete=True,
    )


@pytest.fixture()
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture()
def store(backend: RecordingBackend):
    s = TaskStore(backend, writer=PersistenceWriter(backend, retries=0))
    yield s
    s.close()


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore) -> AppState:
    """AppState wired with an in-memory backend and a seeded, fast roller."""
    return AppState(
        settings=settings,
        task_store=store,
        roller=TaskRoller(
            rng=random.Random(settings.random_seed),
            tick_seconds=settings.roll_tick_seconds,
            settle_seconds=settings.roll_settle_seconds,
        ),
    )
