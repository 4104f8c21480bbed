"""Batch dispatch: filter a sequence of entries and hide the accepted ones."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from typing import Callable

from autohide.entry import Entry, EntryKind
from autohide.filter import FilterConfig, decide
from autohide.hide import HideOutcome
from autohide.pool import DispatchPool

logger = logging.getLogger(__name__)


def contains_walked_entries(entry: Entry, follow_symlinks: bool = False) -> bool:
    """Return whether enumeration descends below ``entry``."""
    if entry.kind is EntryKind.FOLDER:
        return True
    return entry.kind is EntryKind.SYMLINK and follow_symlinks


def hide_entries(
    entries: Iterable[Entry],
    config: FilterConfig,
    pool: DispatchPool,
    follow_symlinks: bool = False,
    submit: Callable[[Entry], bool] | None = None,
) -> None:
    """Filter entries and hide every accepted one, folders last.

    With a renaming strategy, a folder cannot be renamed while work
    under it is still queued, so accepted folders are held back until
    everything else has drained and are then hidden deepest first.
    Returns once the pool is idle.

    Args:
        entries: Entries in enumeration order.
        config: Selection rules.
        pool: Pool that performs the hides.
        follow_symlinks: Whether symlinked directories were walked.
        submit: Submission hook. Defaults to ``pool.submit``.
    """
    submit = submit or pool.submit
    renames = pool.strategy.renames
    deferred: dict[int, list[Entry]] = defaultdict(list)

    for entry in entries:
        decision = decide(entry, config)
        if not decision.accepted:
            pool.record(entry, HideOutcome.filtered(decision.value))
            continue
        if renames and not entry.hidden and contains_walked_entries(entry, follow_symlinks):
            deferred[entry.depth].append(entry)
            continue
        submit(entry)

    pool.join()
    for depth in sorted(deferred, reverse=True):
        logger.debug("Hiding %d deferred entries at depth %d", len(deferred[depth]), depth)
        for entry in deferred[depth]:
            submit(entry)
        pool.join()
