# src/dice_todo/tasks/task_store.py

from __future__ import annotations

import json
import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import replace

from ..core.ports import KeyValueBackend, TaskListListener
from ..storage.writer import PersistenceWriter
from .task_models import Priority, Task, ValidationError

logger = logging.getLogger(__name__)

STORAGE_KEY = "@dice_todo_tasks_v1"


def _new_id() -> str:
    return uuid.uuid4().hex


class TaskStore:
    """
    In-memory task list mirrored to a key-value backend.

    The in-memory list is authoritative:
    - mutations apply synchronously and are visible to the next read
    - every effective mutation queues a full-list snapshot on the writer
    - storage failures are logged and absorbed, never raised to the caller

    Ordering is newest-first; delete removes by id without reordering the rest.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        *,
        storage_key: str = STORAGE_KEY,
        writer: PersistenceWriter | None = None,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._backend = backend
        self._key = storage_key
        self._writer = writer if writer is not None else PersistenceWriter(backend)
        self._clock = clock
        self._id_factory = id_factory

        self._tasks: list[Task] = []
        self._listeners: list[TaskListListener] = []

    def close(self) -> None:
        """Flush pending writes and stop the writer."""
        self._writer.close()
        logger.info("TaskStore closed (tasks=%s)", len(self._tasks))

    def flush(self) -> None:
        self._writer.flush()

    # ---- low-level helpers ----

    def _read_payload(self) -> list[Task]:
        try:
            raw = self._backend.get(self._key)
        except Exception:
            logger.warning("Task storage unavailable; starting with an empty list.", exc_info=True)
            return []

        if raw is None:
            return []

        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Stored task list is not valid JSON; discarding it.")
            return []

        if not isinstance(data, list):
            logger.warning("Stored task list is %s, not a list; discarding it.", type(data).__name__)
            return []

        out: list[Task] = []
        seen: set[str] = set()
        for rec in data:
            task = Task.from_record(rec)
            if task is None:
                logger.debug("Skipping malformed task record: %r", rec)
                continue
            if task.id in seen:
                logger.debug("Skipping duplicate task id=%s", task.id)
                continue
            seen.add(task.id)
            out.append(task)
        return out

    def _index_of(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def _fresh_id(self) -> str:
        existing = {t.id for t in self._tasks}
        while True:
            task_id = self._id_factory()
            if task_id not in existing:
                return task_id
            logger.debug("id_factory returned a used id=%s; drawing again", task_id)

    def _changed(self) -> None:
        self.persist()
        self._notify()

    def _notify(self) -> None:
        snapshot = self.tasks
        for cb in list(self._listeners):
            try:
                cb(snapshot)
            except Exception:
                logger.exception("Task list listener failed: %r", cb)

    # ---- public API ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: str) -> Task | None:
        i = self._index_of(task_id)
        return None if i is None else self._tasks[i]

    def incomplete(self) -> list[Task]:
        return [t for t in self._tasks if not t.done]

    def subscribe(self, callback: TaskListListener) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unsubscribe(self, callback: TaskListListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def load(self) -> list[Task]:
        """
        Replace the in-memory list with the persisted one.

        Never raises: an absent, unreadable or malformed payload yields [].
        """
        self._tasks = self._read_payload()
        logger.info("TaskStore loaded key=%s total=%s", self._key, len(self._tasks))
        self._notify()
        return list(self._tasks)

    def add(self, name: str, priority: Priority | str = Priority.MEDIUM) -> Task:
        clean = (name or "").strip()
        if not clean:
            raise ValidationError("Please enter a task name")
        prio = Priority.parse(priority)

        task = Task(
            id=self._fresh_id(),
            name=clean,
            priority=prio,
            done=False,
            created_at=self._clock(),
        )
        self._tasks.insert(0, task)
        logger.debug("Task added id=%s priority=%s", task.id, prio.value)
        self._changed()
        return task

    def toggle_done(self, task_id: str) -> None:
        i = self._index_of(task_id)
        if i is None:
            logger.debug("toggle_done: unknown task id=%s", task_id)
            return
        old = self._tasks[i]
        self._tasks[i] = replace(old, done=not old.done)
        logger.debug("Task %s -> done=%s", task_id, not old.done)
        self._changed()

    def delete(self, task_id: str) -> None:
        i = self._index_of(task_id)
        if i is None:
            logger.debug("delete: unknown task id=%s", task_id)
            return
        del self._tasks[i]
        logger.debug("Task deleted id=%s", task_id)
        self._changed()

    def persist(self) -> None:
        """Queue a write of the full current list. Failures are logged, never raised."""
        try:
            payload = json.dumps([t.to_record() for t in self._tasks], ensure_ascii=False)
            self._writer.submit(self._key, payload)
        except Exception:
            logger.exception("Failed to queue task list write (tasks=%s)", len(self._tasks))
