"""Lazy directory enumeration using os.scandir with an explicit DFS stack."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from autohide.entry import Entry, EntryKind
from autohide.hide import HideStrategy, select_strategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScanOptions:
    """Options controlling enumeration.

    Attributes:
        recursive: Whether to descend below the direct children of a root.
        follow_symlinks: Whether to descend into symlinked directories.
            Symlinks are always yielded as ``symlink`` entries.
    """

    recursive: bool = False
    follow_symlinks: bool = False


def normalize_root(root: str | os.PathLike[str]) -> Path:
    """Return an absolute root path without resolving symlinks."""
    return Path(os.path.abspath(root))


def make_entry(
    path: str | os.PathLike[str],
    root: Path,
    strategy: HideStrategy | None = None,
    st: os.stat_result | None = None,
) -> Entry | None:
    """Build an entry snapshot for ``path``.

    Args:
        path: Absolute path of the entry.
        root: Root the entry belongs to.
        strategy: Strategy used to read the hidden state.
        st: ``lstat`` result, when the caller already has one.

    Returns:
        Entry | None: The snapshot, or ``None`` when the path no longer
        exists or cannot be stat'ed.
    """
    entry_path = Path(path)
    strategy = strategy or select_strategy()
    try:
        if st is None:
            st = os.lstat(entry_path)
        hidden = strategy.is_hidden(entry_path, st)
    except OSError:
        logger.debug("Cannot stat: %s", entry_path)
        return None

    try:
        depth = len(entry_path.relative_to(root).parts) - 1
    except ValueError:
        depth = 0

    return Entry(
        path=entry_path,
        name=entry_path.name,
        kind=EntryKind.from_mode(st.st_mode),
        root=root,
        depth=max(depth, 0),
        hidden=hidden,
    )


def _identity(path: Path) -> tuple[int, int] | None:
    try:
        st = os.stat(path)
    except OSError:
        return None
    return (st.st_dev, st.st_ino)


def _list_dir(directory: Path) -> list[os.DirEntry[str]]:
    try:
        with os.scandir(directory) as it:
            children = list(it)
    except OSError:
        logger.debug("Cannot read directory: %s", directory)
        return []
    children.sort(key=lambda e: e.name)
    return children


def owning_root(path: Path, roots: Iterable[Path]) -> Path | None:
    """Return the innermost root containing ``path``.

    Args:
        path: Absolute path.
        roots: Normalized root paths.

    Returns:
        Path | None: The owning root, or ``None`` when ``path`` is itself
        a root or lies outside every root.
    """
    best: Path | None = None
    for root in roots:
        if path == root:
            return None
        if path.is_relative_to(root) and (best is None or len(root.parts) > len(best.parts)):
            best = root
    return best


def _walk(
    start: Path,
    root: Path,
    options: ScanOptions,
    strategy: HideStrategy,
    other_roots: frozenset[Path] = frozenset(),
) -> Iterator[Entry]:
    visited: set[tuple[int, int]] = set()
    start_id = _identity(start)
    if start_id is not None:
        visited.add(start_id)

    # Stack items: (iterator over sorted children, depth)
    stack: list[tuple[Iterator[os.DirEntry[str]], int]] = [
        (iter(_list_dir(start)), 0)
    ]

    while stack:
        children, depth = stack[-1]
        dir_entry = next(children, None)
        if dir_entry is None:
            stack.pop()
            continue

        child_path = Path(dir_entry.path)
        if child_path in other_roots:
            logger.debug("Leaving nested root to its own walk: %s", child_path)
            continue

        try:
            st = dir_entry.stat(follow_symlinks=False)
        except OSError:
            logger.debug("Cannot stat: %s", dir_entry.path)
            continue

        entry = make_entry(child_path, root, strategy, st)
        if entry is None:
            continue
        yield entry

        if not options.recursive:
            continue

        if entry.kind is EntryKind.FOLDER:
            descend = True
        elif entry.kind is EntryKind.SYMLINK and options.follow_symlinks:
            descend = child_path.is_dir()
        else:
            descend = False
        if not descend:
            continue

        identity = _identity(child_path)
        if identity is not None:
            if identity in visited:
                logger.debug("Skipping already visited directory: %s", child_path)
                continue
            visited.add(identity)
        stack.append((iter(_list_dir(child_path)), depth + 1))


def enumerate_entries(
    roots: Iterable[str | os.PathLike[str]],
    options: ScanOptions | None = None,
    strategy: HideStrategy | None = None,
) -> Iterator[Entry]:
    """Yield entries under each root in depth-first directory order.

    The roots themselves are not yielded. A root nested inside another
    root is skipped by the outer walk and walked on its own, so every
    entry carries its innermost root. Calling this again starts a fresh
    enumeration.

    Args:
        roots: Root directories.
        options: Scanner options. Defaults to ``ScanOptions()``.
        strategy: Strategy used to read hidden state.

    Yields:
        Entry: One snapshot per discovered entry.
    """
    scan_options = options or ScanOptions()
    strategy = strategy or select_strategy()
    normalized: list[Path] = []
    for root in roots:
        path = normalize_root(root)
        if path not in normalized:
            normalized.append(path)
    all_roots = frozenset(normalized)
    for root in normalized:
        yield from _walk(root, root, scan_options, strategy, all_roots - {root})


def enumerate_folder(
    folder: str | os.PathLike[str],
    root: Path,
    options: ScanOptions | None = None,
    strategy: HideStrategy | None = None,
    other_roots: Iterable[Path] = (),
) -> Iterator[Entry]:
    """Yield the entries below ``folder`` as seen from ``root``.

    Used when a folder appears with contents after the initial pass.
    ``folder`` itself is not yielded.

    Args:
        folder: Directory under ``root``.
        root: Root the yielded entries belong to.
        options: Scanner options. Defaults to ``ScanOptions()``.
        strategy: Strategy used to read hidden state.
        other_roots: Roots whose subtrees are left out.

    Yields:
        Entry: One snapshot per discovered entry.
    """
    yield from _walk(
        Path(folder),
        root,
        options or ScanOptions(),
        strategy or select_strategy(),
        frozenset(other_roots),
    )
