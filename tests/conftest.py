"""Shared fixtures for autohide tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from autohide.entry import Entry, EntryKind

unix_only = pytest.mark.skipif(os.name == "nt", reason="dot-rename hiding is Unix-only")


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Create the standard test directory tree.

    Structure::

        root/
        ├── a.txt
        ├── b.log
        └── sub/
            └── c.txt
    """
    root = tmp_path / "root"
    root.mkdir()
    (root / "a.txt").write_text("a")
    (root / "b.log").write_text("b")
    (root / "sub").mkdir()
    (root / "sub" / "c.txt").write_text("c")
    return root


@pytest.fixture
def nested_tree(tmp_path: Path) -> Path:
    """Tree with nested folders for ordering and deferral tests.

    Structure::

        root/
        ├── docs/
        │   ├── guide.md
        │   └── img/
        │       └── logo.png
        ├── src/
        │   └── app.py
        └── README.md
    """
    root = tmp_path / "root"
    (root / "docs" / "img").mkdir(parents=True)
    (root / "docs" / "guide.md").write_text("guide")
    (root / "docs" / "img" / "logo.png").write_bytes(b"\x89PNG")
    (root / "src").mkdir()
    (root / "src" / "app.py").write_text("app")
    (root / "README.md").write_text("readme")
    return root


def make_test_entry(
    rel: str,
    kind: EntryKind = EntryKind.FILE,
    root: Path = Path("/data/root"),
    hidden: bool = False,
) -> Entry:
    """Build an entry snapshot without touching the filesystem.

    Args:
        rel: Forward-slash path relative to ``root``.
        kind: Entry type tag.
        root: Root the entry belongs to.
        hidden: Hidden state to record.

    Returns:
        Entry: The snapshot.
    """
    path = root.joinpath(*rel.split("/"))
    return Entry(
        path=path,
        name=path.name,
        kind=kind,
        root=root,
        depth=rel.count("/"),
        hidden=hidden,
    )
