"""Engine: wire enumeration or watching to the filter and dispatch pool."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from autohide import RootAccessError
from autohide.batch import hide_entries
from autohide.entry import Entry
from autohide.filter import FilterConfig
from autohide.pool import DispatchPool, OutcomeCallback, Summary
from autohide.scanner import ScanOptions, enumerate_entries, normalize_root
from autohide.watch import DEFAULT_WINDOW, WatchMonitor, WatchState, watch

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EngineOptions:
    """Run-level options resolved by the CLI.

    Attributes:
        recursive: Descend below direct children of each root.
        follow_symlinks: Descend into symlinked directories.
        test_mode: Report outcomes without touching the filesystem.
        threads: Worker count. ``None`` means logical core count.
        watch: Keep watching for new entries after the first pass.
        debounce: Seconds a self-caused rename notification is expected.
    """

    recursive: bool = False
    follow_symlinks: bool = False
    test_mode: bool = False
    threads: int | None = None
    watch: bool = False
    debounce: float = DEFAULT_WINDOW

    @property
    def scan_options(self) -> ScanOptions:
        return ScanOptions(recursive=self.recursive, follow_symlinks=self.follow_symlinks)


def check_roots(roots: Iterable[str | os.PathLike[str]]) -> list[Path]:
    """Normalize roots and verify each one can be listed.

    Duplicate roots are dropped, keeping first occurrence order. A root
    nested inside another is kept; enumeration and watching treat it as
    the owner of everything below it, and it is never hidden itself.

    Args:
        roots: Root paths as given by the user.

    Returns:
        list[Path]: Absolute root paths.

    Raises:
        RootAccessError: If a root is missing, not a directory, or unreadable.
    """
    result: list[Path] = []
    for raw in roots:
        root = normalize_root(raw)
        if not root.exists():
            raise RootAccessError(f"'{raw}' does not exist")
        if not root.is_dir():
            raise RootAccessError(f"'{raw}' is not a directory")
        try:
            with os.scandir(root):
                pass
        except OSError as exc:
            raise RootAccessError(f"cannot read '{raw}': {exc.strerror or exc}") from exc
        if root in result:
            continue
        for other in result:
            if root.is_relative_to(other) or other.is_relative_to(root):
                logger.debug("Nested roots %s and %s are walked separately", other, root)
        result.append(root)
    return result


def hide_once(
    roots: Iterable[str | os.PathLike[str]],
    config: FilterConfig,
    pool: DispatchPool,
    options: ScanOptions | None = None,
    submit: Callable[[Entry], bool] | None = None,
) -> None:
    """Enumerate roots once and hide every accepted entry.

    Args:
        roots: Root directories, already checked.
        config: Selection rules.
        pool: Pool that performs the hides.
        options: Scanner options.
        submit: Submission hook. Defaults to ``pool.submit``.
    """
    scan_options = options or ScanOptions()
    hide_entries(
        enumerate_entries(roots, scan_options, pool.strategy),
        config,
        pool,
        scan_options.follow_symlinks,
        submit,
    )


def run(
    roots: Iterable[str | os.PathLike[str]],
    config: FilterConfig,
    options: EngineOptions | None = None,
    on_outcome: OutcomeCallback | None = None,
    stop: threading.Event | None = None,
) -> Summary:
    """Run one pass, or one pass followed by watching.

    Args:
        roots: Root directories.
        config: Selection rules.
        options: Run-level options.
        on_outcome: Receives every ``(entry, outcome)`` pair.
        stop: Shutdown signal for watch mode.

    Returns:
        Summary: Outcome counts by kind.

    Raises:
        RootAccessError: If a root cannot be used; raised before any work.
        WatchError: If watch mode cannot subscribe to notifications.
    """
    run_options = options or EngineOptions()
    checked = check_roots(roots)
    scan_options = run_options.scan_options

    with DispatchPool(
        run_options.threads,
        test_mode=run_options.test_mode,
        on_outcome=on_outcome,
    ) as pool:
        if not run_options.watch:
            hide_once(checked, config, pool, scan_options)
            return pool.summary

        def initial_pass(monitor: WatchMonitor) -> None:
            hide_once(checked, config, pool, scan_options, submit=monitor.dispatch)

        watch(
            checked,
            config,
            pool,
            stop or threading.Event(),
            scan_options,
            WatchState(run_options.debounce),
            on_ready=initial_pass,
        )
    return pool.summary
