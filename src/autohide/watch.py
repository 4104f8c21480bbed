"""Watch monitor: hide entries as filesystem notifications report them.

Hiding by rename produces a notification of its own for the new,
dot-prefixed path. :class:`WatchState` remembers those paths for a
short window so the monitor drops the echo instead of re-filtering it.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Iterable
from itertools import chain
from pathlib import Path
from typing import Callable

from watchdog.events import (
    FileSystemEvent,
    FileSystemEventHandler,
    FileSystemMovedEvent,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from autohide import WatchError
from autohide.batch import contains_walked_entries, hide_entries
from autohide.entry import Entry
from autohide.filter import FilterConfig, decide
from autohide.hide import HideOutcome
from autohide.pool import DispatchPool
from autohide.scanner import (
    ScanOptions,
    enumerate_folder,
    make_entry,
    normalize_root,
    owning_root,
)

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = 2.0


class WatchState:
    """Paths this process has just renamed, per root.

    Entries leave the state when their notification is consumed or
    when ``window`` seconds have passed, whichever comes first.
    """

    def __init__(
        self,
        window: float = DEFAULT_WINDOW,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window = window
        self._clock = clock
        self._lock = threading.Lock()
        self._expected: dict[Path, dict[Path, float]] = {}

    def expect(self, root: Path, path: Path) -> None:
        """Record that ``path`` is about to appear because of our own hide."""
        with self._lock:
            now = self._clock()
            self._prune(now)
            self._expected.setdefault(root, {})[path] = now + self.window

    def consume(self, root: Path, path: Path) -> bool:
        """Return whether ``path`` was expected, forgetting it if so."""
        with self._lock:
            self._prune(self._clock())
            paths = self._expected.get(root)
            if not paths:
                return False
            return paths.pop(path, None) is not None

    def __len__(self) -> int:
        with self._lock:
            self._prune(self._clock())
            return sum(len(paths) for paths in self._expected.values())

    def _prune(self, now: float) -> None:
        for root in list(self._expected):
            paths = self._expected[root]
            for path in [p for p, deadline in paths.items() if deadline <= now]:
                del paths[path]
            if not paths:
                del self._expected[root]


class _EventHandler(FileSystemEventHandler):
    def __init__(self, monitor: WatchMonitor) -> None:
        super().__init__()
        self._monitor = monitor

    def on_created(self, event: FileSystemEvent) -> None:
        self._monitor.handle_path(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        # Synthetic moves describe the contents of a moved folder.
        if event.is_synthetic or not isinstance(event, FileSystemMovedEvent):
            return
        self._monitor.handle_path(event.dest_path)


class WatchMonitor:
    """Feed created and renamed entries through the filter into a pool."""

    def __init__(
        self,
        roots: Iterable[str | os.PathLike[str]],
        config: FilterConfig,
        pool: DispatchPool,
        options: ScanOptions | None = None,
        state: WatchState | None = None,
    ) -> None:
        """Initialize the monitor.

        Args:
            roots: Directories to watch.
            config: Selection rules.
            pool: Pool that performs the hides.
            options: ``recursive`` selects recursive subscriptions.
            state: Self-trigger suppression state.
        """
        self.roots = [normalize_root(root) for root in roots]
        self.config = config
        self.pool = pool
        self.options = options or ScanOptions()
        self.state = state or WatchState()
        self._handler = _EventHandler(self)
        self._observer: BaseObserver | None = None

    def start(self) -> None:
        """Subscribe to notifications on every root.

        Raises:
            WatchError: If the OS refuses a subscription.
        """
        observer = Observer()
        try:
            for root in self.roots:
                observer.schedule(self._handler, str(root), recursive=self.options.recursive)
            observer.start()
        except OSError as exc:
            observer.unschedule_all()
            raise WatchError(
                f"cannot watch {exc.filename or 'path'}: {exc.strerror or exc}"
            ) from exc
        self._observer = observer
        logger.debug("Watching %s", ", ".join(str(root) for root in self.roots))

    def stop(self) -> None:
        """Stop accepting notifications. Already dispatched work is untouched."""
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join()
        self._observer = None

    def handle_path(self, raw_path: str | bytes) -> bool:
        """Handle one created or renamed path.

        In recursive mode a folder that arrives with contents is handled
        as a batch: its contents are hidden first and the folder last, so
        renaming the folder cannot strand work queued below it.

        Args:
            raw_path: Path reported by the notification.

        Returns:
            bool: ``True`` when the entry was submitted for hiding.
        """
        path = Path(os.fsdecode(raw_path))
        root = owning_root(path, self.roots)
        if root is None:
            return False

        if self.state.consume(root, path):
            logger.debug("Ignoring our own rename: %s", path)
            return False

        entry = make_entry(path, root, self.pool.strategy)
        if entry is None:
            logger.debug("Gone before it could be handled: %s", path)
            return False
        if not self.options.recursive and entry.depth > 0:
            return False

        decision = decide(entry, self.config)
        if not decision.accepted:
            self.pool.record(entry, HideOutcome.filtered(decision.value))
            return False

        if self._is_batch(entry):
            logger.debug("Hiding contents of %s before the folder itself", path)
            contents = enumerate_folder(
                path,
                root,
                self.options,
                self.pool.strategy,
                [other for other in self.roots if other != root],
            )
            hide_entries(
                chain(contents, [entry]),
                self.config,
                self.pool,
                self.options.follow_symlinks,
                submit=self.dispatch,
            )
            return True
        return self.dispatch(entry)

    def dispatch(self, entry: Entry) -> bool:
        """Submit an accepted entry, first noting the rename it will cause."""
        strategy = self.pool.strategy
        if strategy.renames and not self.pool.test_mode and not entry.hidden:
            root = owning_root(entry.path, self.roots) or entry.root
            self.state.expect(root, strategy.target_for(entry.path))
        return self.pool.submit(entry)

    def _is_batch(self, entry: Entry) -> bool:
        return (
            self.options.recursive
            and self.pool.strategy.renames
            and not self.pool.test_mode
            and not entry.hidden
            and contains_walked_entries(entry, self.options.follow_symlinks)
        )


def watch(
    roots: Iterable[str | os.PathLike[str]],
    config: FilterConfig,
    pool: DispatchPool,
    stop: threading.Event,
    options: ScanOptions | None = None,
    state: WatchState | None = None,
    on_ready: Callable[[WatchMonitor], None] | None = None,
) -> None:
    """Watch roots until ``stop`` is set, then drain the pool.

    Args:
        roots: Directories to watch.
        config: Selection rules.
        pool: Pool that performs the hides.
        stop: Cooperative shutdown signal.
        options: Scanner options; ``recursive`` applies to subscriptions.
        state: Self-trigger suppression state.
        on_ready: Called with the monitor once notifications are flowing.

    Raises:
        WatchError: If subscribing to notifications fails.
    """
    monitor = WatchMonitor(roots, config, pool, options, state)
    monitor.start()
    try:
        if on_ready is not None:
            on_ready(monitor)
        # Short waits keep the main thread responsive to signals.
        while not stop.wait(0.5):
            pass
    finally:
        monitor.stop()
        pool.join()
