"""Hide action: the platform-native way of marking one entry hidden.

Windows marks entries with the ``FILE_ATTRIBUTE_HIDDEN`` bit. Every
other platform follows the dot-file convention and renames the entry
to a ``.``-prefixed sibling. The strategy is chosen once per process
by :func:`select_strategy`; :func:`hide` is written against the
strategy value only.
"""

from __future__ import annotations

import errno
import logging
import os
import stat
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from autohide.entry import Entry

logger = logging.getLogger(__name__)

REASON_NOT_FOUND = "not-found"
REASON_PERMISSION = "permission-denied"
REASON_NAME_CONFLICT = "name-conflict"


class OutcomeKind(str, Enum):
    """Kinds of :class:`HideOutcome`."""

    HIDDEN = "hidden"
    SKIPPED_ALREADY_HIDDEN = "skipped-already-hidden"
    SKIPPED_FILTERED = "skipped-filtered"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class HideOutcome:
    """Result of attempting to hide one entry.

    Attributes:
        kind: Outcome kind.
        reason: Failure reason, or the rejecting filter stage for
            ``skipped-filtered``.
        target: Path the entry has (or would have) once hidden.
    """

    kind: OutcomeKind
    reason: str | None = None
    target: Path | None = None

    @classmethod
    def hidden(cls, target: Path) -> HideOutcome:
        return cls(OutcomeKind.HIDDEN, target=target)

    @classmethod
    def already_hidden(cls, target: Path | None = None) -> HideOutcome:
        return cls(OutcomeKind.SKIPPED_ALREADY_HIDDEN, target=target)

    @classmethod
    def filtered(cls, stage: str) -> HideOutcome:
        return cls(OutcomeKind.SKIPPED_FILTERED, reason=stage)

    @classmethod
    def failed(cls, reason: str, target: Path | None = None) -> HideOutcome:
        return cls(OutcomeKind.FAILED, reason=reason, target=target)

    @property
    def label(self) -> str:
        """Short form such as ``hidden`` or ``failed(name-conflict)``."""
        if self.kind is OutcomeKind.FAILED:
            return f"failed({self.reason})"
        return self.kind.value


@dataclass(frozen=True, slots=True)
class HideStrategy:
    """One platform's hide capability.

    Attributes:
        name: Strategy identifier.
        renames: Whether hiding moves the entry to a new path.
        is_hidden: ``(path, lstat_result | None) -> bool``.
        target_for: Path an entry ends up at once hidden.
        apply: Performs the hide; raises ``OSError`` on failure.
    """

    name: str
    renames: bool
    is_hidden: Callable[[Path, os.stat_result | None], bool]
    target_for: Callable[[Path], Path]
    apply: Callable[[Path], None]


# --- dot-prefix rename (Unix-like) --- #


def _dot_is_hidden(path: Path, st: os.stat_result | None = None) -> bool:
    return path.name.startswith(".")


def _dot_target(path: Path) -> Path:
    if path.name.startswith("."):
        return path
    return path.with_name("." + path.name)


def _dot_apply(path: Path) -> None:
    os.rename(path, _dot_target(path))


# --- hidden attribute bit (Windows) --- #


def _attr_is_hidden(path: Path, st: os.stat_result | None = None) -> bool:
    if st is None:
        st = os.lstat(path)
    return bool(getattr(st, "st_file_attributes", 0) & stat.FILE_ATTRIBUTE_HIDDEN)


def _attr_target(path: Path) -> Path:
    return path


def _attr_apply(path: Path) -> None:
    import ctypes
    from ctypes import wintypes

    kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)
    set_attributes = kernel32.SetFileAttributesW
    set_attributes.argtypes = [wintypes.LPCWSTR, wintypes.DWORD]
    set_attributes.restype = wintypes.BOOL

    attributes = os.lstat(path).st_file_attributes
    if attributes & stat.FILE_ATTRIBUTE_HIDDEN:
        return
    if not set_attributes(str(path), attributes | stat.FILE_ATTRIBUTE_HIDDEN):
        raise ctypes.WinError(ctypes.get_last_error())


DOT_RENAME = HideStrategy(
    name="dot-rename",
    renames=True,
    is_hidden=_dot_is_hidden,
    target_for=_dot_target,
    apply=_dot_apply,
)

HIDDEN_ATTRIBUTE = HideStrategy(
    name="hidden-attribute",
    renames=False,
    is_hidden=_attr_is_hidden,
    target_for=_attr_target,
    apply=_attr_apply,
)


def select_strategy(platform: str | None = None) -> HideStrategy:
    """Return the hide strategy for a platform.

    Args:
        platform: ``sys.platform`` style identifier. Defaults to the
            running platform.

    Returns:
        HideStrategy: ``HIDDEN_ATTRIBUTE`` on Windows, ``DOT_RENAME``
        everywhere else.
    """
    if (platform or sys.platform) == "win32":
        return HIDDEN_ATTRIBUTE
    return DOT_RENAME


def _reason(exc: OSError) -> str:
    if isinstance(exc, FileNotFoundError):
        return REASON_NOT_FOUND
    if isinstance(exc, PermissionError):
        return REASON_PERMISSION
    if isinstance(exc, FileExistsError) or exc.errno in (errno.ENOTEMPTY, errno.EISDIR):
        return REASON_NAME_CONFLICT
    return exc.strerror or str(exc)


def hide(
    entry: Entry,
    test_mode: bool = False,
    strategy: HideStrategy | None = None,
) -> HideOutcome:
    """Hide one entry, idempotently.

    Per-entry problems never raise; they come back as ``failed``
    outcomes so that one entry cannot abort a run.

    Args:
        entry: Entry to hide.
        test_mode: Report the outcome without touching the filesystem.
        strategy: Hide strategy. Defaults to :func:`select_strategy`.

    Returns:
        HideOutcome: ``hidden``, ``skipped-already-hidden`` or
        ``failed(reason)``.
    """
    strategy = strategy or select_strategy()
    path = entry.path
    target = strategy.target_for(path)

    try:
        st = os.lstat(path)
    except FileNotFoundError:
        # A second call on an entry this strategy already renamed.
        if strategy.renames and target != path and os.path.lexists(target):
            return HideOutcome.already_hidden(target)
        return HideOutcome.failed(REASON_NOT_FOUND)
    except OSError as exc:
        return HideOutcome.failed(_reason(exc))

    try:
        if strategy.is_hidden(path, st):
            return HideOutcome.already_hidden(path)
    except OSError as exc:
        return HideOutcome.failed(_reason(exc))

    if strategy.renames and os.path.lexists(target):
        return HideOutcome.failed(REASON_NAME_CONFLICT, target)

    if test_mode:
        return HideOutcome.hidden(target)

    try:
        strategy.apply(path)
    except OSError as exc:
        logger.debug("Failed to hide %s: %s", path, exc)
        return HideOutcome.failed(_reason(exc), target)

    logger.debug("Hid %s -> %s", path, target)
    return HideOutcome.hidden(target)
