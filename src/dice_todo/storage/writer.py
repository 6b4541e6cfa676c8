# src/dice_todo/storage/writer.py

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass

from ..core.ports import KeyValueBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WriteJob:
    key: str
    value: str
    seq: int


class PersistenceWriter:
    """
    Single-writer queue in front of a KeyValueBackend.

    Design goals:
    - Does not block the caller: writes happen in one worker thread.
    - Strict ordering: jobs are applied in submission order, so an older snapshot
      can never overwrite a newer one.
    - Bounded: when the queue is full the oldest pending job is discarded. Jobs are
      full snapshots, so with one key per writer a newer job always supersedes it.
    - Failures are retried with exponential backoff, then logged and dropped.

    After close(), submit() writes inline in the caller's thread.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        *,
        maxsize: int = 64,
        retries: int = 2,
        retry_delay_seconds: float = 0.1,
    ) -> None:
        self._backend = backend
        self._retries = max(0, int(retries))
        self._retry_delay = max(0.0, float(retry_delay_seconds))

        self._queue: queue.Queue[WriteJob | None] = queue.Queue(maxsize=max(1, int(maxsize)))
        self._lock = threading.Lock()
        self._closed = False
        self._seq = 0

        self.writes = 0
        self.failures = 0
        self.dropped = 0

        self._worker = threading.Thread(
            target=self._run, name="dice-todo-writer", daemon=True
        )
        self._worker.start()
        logger.debug("PersistenceWriter started (maxsize=%s retries=%s)", maxsize, self._retries)

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, key: str, value: str) -> None:
        """Queue a write of `value` under `key`; returns immediately."""
        with self._lock:
            self._seq += 1
            job = WriteJob(key=key, value=value, seq=self._seq)

            if self._closed:
                logger.debug("Writer closed; writing seq=%s inline.", job.seq)
                self._apply(job)
                return

            while True:
                try:
                    self._queue.put_nowait(job)
                    return
                except queue.Full:
                    pass
                try:
                    stale = self._queue.get_nowait()
                except queue.Empty:
                    continue
                self._queue.task_done()
                if stale is not None:
                    self.dropped += 1
                    logger.debug("Write queue full; superseded seq=%s by seq=%s", stale.seq, job.seq)

    def flush(self) -> None:
        """Block until every queued job has been applied (or given up on)."""
        if self._closed:
            return
        self._queue.join()

    def close(self) -> None:
        """
        Apply pending jobs, then stop the worker. Safe to call twice.

        The submit lock is held until the worker is gone, so a concurrent
        submit() waits and then writes inline after everything queued before it.
        """
        with self._lock:
            if self._closed:
                return
            self._queue.put(None)
            self._queue.join()
            self._worker.join(timeout=2.0)
            self._closed = True

        logger.debug(
            "PersistenceWriter stopped (writes=%s failures=%s dropped=%s)",
            self.writes,
            self.failures,
            self.dropped,
        )

    # ---- worker ----

    def _run(self) -> None:
        while True:
            job = self._queue.get()
            try:
                if job is None:
                    return
                self._apply(job)
            finally:
                self._queue.task_done()

    def _apply(self, job: WriteJob) -> None:
        for attempt in range(1, self._retries + 2):
            try:
                self._backend.set(job.key, job.value)
            except Exception:
                if attempt <= self._retries:
                    delay = self._retry_delay * (2 ** (attempt - 1))
                    logger.warning(
                        "Write seq=%s failed (attempt %s/%s); retrying in %.2fs",
                        job.seq,
                        attempt,
                        self._retries + 1,
                        delay,
                    )
                    time.sleep(delay)
                    continue
                self.failures += 1
                logger.exception("Failed to persist key=%s seq=%s; keeping in-memory state.", job.key, job.seq)
                return
            self.writes += 1
            logger.debug("Persisted key=%s seq=%s (%d bytes)", job.key, job.seq, len(job.value))
            return
