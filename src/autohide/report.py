"""Outcome line and summary rendering."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TextIO

from autohide.entry import Entry
from autohide.hide import HideOutcome, OutcomeKind
from autohide.pool import Summary

# Kinds printed without --verbose
_ALWAYS_SHOWN = frozenset({OutcomeKind.HIDDEN, OutcomeKind.FAILED})


@dataclass(frozen=True, slots=True)
class ReportOptions:
    """Options for outcome reporting.

    Attributes:
        verbose: Print every outcome, not only hides and failures.
        test_mode: Word hides as ``Would hide``.
    """

    verbose: bool = False
    test_mode: bool = False


def format_outcome(entry: Entry, outcome: HideOutcome, test_mode: bool = False) -> str:
    """Render one ``(entry, outcome)`` pair as a single line.

    Args:
        entry: Entry the outcome belongs to.
        outcome: Result of the hide attempt.
        test_mode: Whether the run performed no mutation.

    Returns:
        str: Line without trailing newline.
    """
    path = entry.path
    if outcome.kind is OutcomeKind.HIDDEN:
        verb = "Would hide" if test_mode else "Hid"
        if outcome.target is not None and outcome.target != path:
            return f"{verb} {path} -> {outcome.target.name}"
        return f"{verb} {path}"
    if outcome.kind is OutcomeKind.SKIPPED_ALREADY_HIDDEN:
        return f"Skipping {path}: already hidden"
    if outcome.kind is OutcomeKind.SKIPPED_FILTERED:
        return f"Skipping {path}: rejected by {outcome.reason} filter"
    return f"Failed to hide {path}: {outcome.reason}"


def format_summary(summary: Summary, test_mode: bool = False) -> str:
    """Render the end-of-run count line.

    Example::

        3 hidden, 1 already hidden, 4 filtered, 0 failed
    """
    counts = summary.as_dict()
    hidden_label = "would be hidden" if test_mode else "hidden"
    return (
        f"{counts[OutcomeKind.HIDDEN]} {hidden_label}, "
        f"{counts[OutcomeKind.SKIPPED_ALREADY_HIDDEN]} already hidden, "
        f"{counts[OutcomeKind.SKIPPED_FILTERED]} filtered, "
        f"{counts[OutcomeKind.FAILED]} failed"
    )


class Reporter:
    """Outcome callback writing lines to a stream from any thread."""

    def __init__(self, stream: TextIO, options: ReportOptions | None = None) -> None:
        self._stream = stream
        self._options = options or ReportOptions()
        self._lock = threading.Lock()

    def __call__(self, entry: Entry, outcome: HideOutcome) -> None:
        if not self._options.verbose and outcome.kind not in _ALWAYS_SHOWN:
            return
        line = format_outcome(entry, outcome, self._options.test_mode)
        with self._lock:
            self._stream.write(line + "\n")
            self._stream.flush()

    def summary(self, summary: Summary) -> None:
        with self._lock:
            self._stream.write(format_summary(summary, self._options.test_mode) + "\n")
            self._stream.flush()
