"""Dispatch pool: bounded concurrent execution of hide actions."""

from __future__ import annotations

import logging
import os
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable

from autohide.entry import Entry
from autohide.hide import HideOutcome, HideStrategy, OutcomeKind, hide, select_strategy

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[Entry, HideOutcome], None]


class Summary:
    """Thread-safe count of outcomes by kind."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: Counter[OutcomeKind] = Counter()

    def add(self, outcome: HideOutcome) -> None:
        with self._lock:
            self._counts[outcome.kind] += 1

    def count(self, kind: OutcomeKind) -> int:
        with self._lock:
            return self._counts[kind]

    def as_dict(self) -> dict[OutcomeKind, int]:
        """Return counts for every kind, including zeros."""
        with self._lock:
            return {kind: self._counts[kind] for kind in OutcomeKind}

    @property
    def total(self) -> int:
        with self._lock:
            return sum(self._counts.values())


def default_workers() -> int:
    """Return the default worker count (logical cores)."""
    return os.cpu_count() or 1


class DispatchPool:
    """Worker pool running :func:`autohide.hide.hide` for submitted entries.

    ``submit`` blocks once ``max_pending`` entries are queued or running,
    and drops an entry whose path is already queued or running.
    """

    def __init__(
        self,
        workers: int | None = None,
        *,
        test_mode: bool = False,
        strategy: HideStrategy | None = None,
        on_outcome: OutcomeCallback | None = None,
        max_pending: int | None = None,
    ) -> None:
        """Initialize the pool.

        Args:
            workers: Worker thread count. Defaults to the logical core count.
            test_mode: Report outcomes without touching the filesystem.
            strategy: Hide strategy. Defaults to the platform strategy.
            on_outcome: Called from worker threads with every
                ``(entry, outcome)`` pair as it completes.
            max_pending: Queue bound. Defaults to ``4 * workers``.
        """
        self.workers = workers or default_workers()
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        self.test_mode = test_mode
        self.strategy = strategy or select_strategy()
        self.summary = Summary()
        self._on_outcome = on_outcome
        self._slots = threading.BoundedSemaphore(max_pending or 4 * self.workers)
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._inflight: set[Path] = set()
        self._closed = False
        self._executor = ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="HideWorker"
        )

    def __enter__(self) -> DispatchPool:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def submit(self, entry: Entry) -> bool:
        """Queue an entry for hiding.

        Args:
            entry: Entry accepted by the filter.

        Returns:
            bool: ``False`` when the entry's path is already queued or
            running, ``True`` otherwise.

        Raises:
            RuntimeError: If the pool has been shut down.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("cannot submit to a shut down pool")
            if entry.path in self._inflight:
                logger.debug("Already dispatched: %s", entry.path)
                return False
            self._inflight.add(entry.path)

        self._slots.acquire()
        try:
            self._executor.submit(self._run, entry)
        except RuntimeError:
            self._release(entry)
            raise
        return True

    def record(self, entry: Entry, outcome: HideOutcome) -> None:
        """Report an outcome that did not go through a worker."""
        self.summary.add(outcome)
        if self._on_outcome is not None:
            self._on_outcome(entry, outcome)

    def join(self) -> None:
        """Block until no submitted entry is queued or running."""
        with self._idle:
            while self._inflight:
                self._idle.wait()

    def shutdown(self) -> None:
        """Stop accepting entries, drain in-flight work and stop workers."""
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=True)

    def _run(self, entry: Entry) -> None:
        try:
            outcome = hide(entry, self.test_mode, self.strategy)
            try:
                self.record(entry, outcome)
            except Exception:
                logger.exception("Outcome callback failed for %s", entry.path)
        finally:
            self._release(entry)

    def _release(self, entry: Entry) -> None:
        self._slots.release()
        with self._idle:
            self._inflight.discard(entry.path)
            if not self._inflight:
                self._idle.notify_all()
