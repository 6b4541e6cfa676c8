# src/dice_todo/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the storage backend, writer, task store and roller into AppState,
- tears everything down in a best-effort way.
"""

from __future__ import annotations

import logging
import random

from ..config import get_settings
from ..core.state import AppState
from ..storage.backends import create_backend
from ..storage.writer import PersistenceWriter
from ..tasks.task_roller import TaskRoller
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    if settings.storage_backend != "memory":
        settings.storage_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings and load the persisted task list.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    backend = create_backend(settings.storage_backend, settings.storage_path)
    writer = PersistenceWriter(
        backend,
        maxsize=settings.write_queue_size,
        retries=settings.write_retries,
        retry_delay_seconds=settings.write_retry_delay_seconds,
    )
    store = TaskStore(backend, storage_key=settings.storage_key, writer=writer)
    store.load()

    rng = random.Random(settings.random_seed)
    roller = TaskRoller(
        rng=rng,
        tick_seconds=settings.roll_tick_seconds,
        settle_seconds=settings.roll_settle_seconds,
    )

    logger.info(
        "State ready backend=%s path=%s tasks=%s",
        settings.storage_backend,
        settings.storage_path,
        len(store),
    )
    return AppState(settings=settings, task_store=store, roller=roller)


def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.roller.shutdown()
    except Exception:
        logger.exception("Failed to stop the roller.")

    try:
        state.task_store.close()
    except Exception:
        logger.exception("Failed to flush the task store.")
