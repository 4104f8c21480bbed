"""Entry model: one filesystem object under consideration."""

from __future__ import annotations

import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class EntryKind(str, Enum):
    """Type tag of a filesystem entry."""

    FILE = "file"
    FOLDER = "folder"
    SYMLINK = "symlink"
    OTHER = "other"  # sockets, FIFOs, devices

    @classmethod
    def from_mode(cls, mode: int) -> EntryKind:
        """Classify an ``lstat`` mode without following symlinks."""
        if stat.S_ISLNK(mode):
            return cls.SYMLINK
        if stat.S_ISDIR(mode):
            return cls.FOLDER
        if stat.S_ISREG(mode):
            return cls.FILE
        return cls.OTHER


SELECTABLE_KINDS: frozenset[EntryKind] = frozenset(
    {EntryKind.FILE, EntryKind.FOLDER, EntryKind.SYMLINK}
)


@dataclass(frozen=True, slots=True)
class Entry:
    """A snapshot of a filesystem entry.

    Entries are re-derived on every enumeration or notification; they
    are never updated in place.

    Attributes:
        path: Absolute path of the entry.
        name: Basename of the entry.
        kind: Type tag taken from ``lstat``.
        root: Root path the entry was found under.
        depth: Parent directory depth from the root (direct children are 0).
        hidden: Whether the entry was hidden when it was observed.
    """

    path: Path
    name: str
    kind: EntryKind
    root: Path
    depth: int = 0
    hidden: bool = False

    @property
    def relative_path(self) -> str:
        """Path relative to ``root`` with forward slashes."""
        try:
            rel = self.path.relative_to(self.root)
        except ValueError:
            return self.path.as_posix().lstrip("/")
        return rel.as_posix()
