"""Tests for autohide.engine: end-to-end selection and hiding."""

from __future__ import annotations

import os
import stat
import sys
import threading
import time
from pathlib import Path

import pytest

from autohide import RootAccessError
from autohide.engine import EngineOptions, check_roots, hide_once, run
from autohide.entry import Entry, EntryKind
from autohide.filter import FilterConfig
from autohide.hide import DOT_RENAME, HideOutcome, OutcomeKind
from autohide.pool import DispatchPool, Summary
from autohide.scanner import ScanOptions
from tests.conftest import unix_only


def _listing(root: Path) -> list[str]:
    """Return every path under root, relative and sorted."""
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*"))


@unix_only
class TestScenarios:
    def test_glob_include_non_recursive(self, sample_tree: Path) -> None:
        config = FilterConfig.from_patterns(globs=["*.txt"])
        run([sample_tree], config, EngineOptions(recursive=False))
        assert _listing(sample_tree) == [".a.txt", "b.log", "sub", "sub/c.txt"]

    def test_glob_include_recursive(self, sample_tree: Path) -> None:
        config = FilterConfig.from_patterns(globs=["*.txt"])
        run([sample_tree], config, EngineOptions(recursive=True))
        assert _listing(sample_tree) == [".a.txt", "b.log", "sub", "sub/.c.txt"]

    def test_glob_exclude_with_default_include(self, sample_tree: Path) -> None:
        config = FilterConfig.from_patterns(excludes=["b.*"], types=[EntryKind.FILE])
        summary = run([sample_tree], config, EngineOptions(recursive=True))
        assert _listing(sample_tree) == [".a.txt", "b.log", "sub", "sub/.c.txt"]
        assert summary.count(OutcomeKind.HIDDEN) == 2

    def test_folder_type_only(self, sample_tree: Path) -> None:
        config = FilterConfig.from_patterns(types=[EntryKind.FOLDER])
        run([sample_tree], config, EngineOptions(recursive=True))
        assert _listing(sample_tree) == [".sub", ".sub/c.txt", "a.txt", "b.log"]

    def test_default_config_hides_everything_recursively(self, nested_tree: Path) -> None:
        summary = run([nested_tree], FilterConfig(), EngineOptions(recursive=True))
        assert _listing(nested_tree) == [
            ".README.md",
            ".docs",
            ".docs/.guide.md",
            ".docs/.img",
            ".docs/.img/.logo.png",
            ".src",
            ".src/.app.py",
        ]
        assert summary.count(OutcomeKind.HIDDEN) == 7
        assert summary.count(OutcomeKind.FAILED) == 0

    def test_already_hidden_entries_skipped(self, sample_tree: Path) -> None:
        (sample_tree / ".keep").write_text("k")
        summary = run([sample_tree], FilterConfig(), EngineOptions())
        assert summary.count(OutcomeKind.SKIPPED_ALREADY_HIDDEN) == 1
        assert (sample_tree / ".keep").read_text() == "k"

    def test_test_mode_leaves_tree_untouched(self, sample_tree: Path) -> None:
        before = _listing(sample_tree)
        summary = run([sample_tree], FilterConfig(), EngineOptions(recursive=True, test_mode=True))
        assert _listing(sample_tree) == before
        assert summary.count(OutcomeKind.HIDDEN) == 4

    def test_conflict_reported_and_others_proceed(self, sample_tree: Path) -> None:
        (sample_tree / ".a.txt").write_text("existing")
        seen: dict[str, HideOutcome] = {}
        lock = threading.Lock()

        def on_outcome(entry: Entry, outcome: HideOutcome) -> None:
            with lock:
                seen[entry.name] = outcome

        summary = run([sample_tree], FilterConfig(), EngineOptions(), on_outcome=on_outcome)
        assert seen["a.txt"].label == "failed(name-conflict)"
        assert seen["b.log"].kind is OutcomeKind.HIDDEN
        assert summary.count(OutcomeKind.FAILED) == 1

    def test_filtered_entries_reported(self, sample_tree: Path) -> None:
        seen: list[HideOutcome] = []
        lock = threading.Lock()

        def on_outcome(entry: Entry, outcome: HideOutcome) -> None:
            with lock:
                seen.append(outcome)

        config = FilterConfig.from_patterns(globs=["*.txt"])
        run([sample_tree], config, EngineOptions(), on_outcome=on_outcome)
        filtered = [o for o in seen if o.kind is OutcomeKind.SKIPPED_FILTERED]
        assert sorted(o.reason for o in filtered) == ["glob-include", "glob-include"]


@unix_only
class TestFolderDeferral:
    def test_folders_hidden_after_their_contents(self, nested_tree: Path) -> None:
        order: list[str] = []
        lock = threading.Lock()

        def on_outcome(entry: Entry, outcome: HideOutcome) -> None:
            with lock:
                order.append(entry.relative_path)

        with DispatchPool(4, strategy=DOT_RENAME, on_outcome=on_outcome) as pool:
            hide_once([nested_tree], FilterConfig(), pool, ScanOptions(recursive=True))

        assert order.index("docs/img/logo.png") < order.index("docs/img")
        assert order.index("docs/img") < order.index("docs")
        assert order.index("src/app.py") < order.index("src")
        assert set(order[-2:]) == {"docs", "src"}


class TestCheckRoots:
    def test_missing_root(self, tmp_path: Path) -> None:
        with pytest.raises(RootAccessError, match="does not exist"):
            check_roots([tmp_path / "missing"])

    def test_file_root(self, tmp_path: Path) -> None:
        (tmp_path / "f").write_text("f")
        with pytest.raises(RootAccessError, match="not a directory"):
            check_roots([tmp_path / "f"])

    @unix_only
    @pytest.mark.skipif(
        hasattr(os, "geteuid") and os.geteuid() == 0, reason="root ignores permissions"
    )
    def test_unreadable_root(self, tmp_path: Path) -> None:
        locked = tmp_path / "locked"
        locked.mkdir()
        locked.chmod(0)
        try:
            with pytest.raises(RootAccessError, match="cannot read"):
                check_roots([locked])
        finally:
            locked.chmod(stat.S_IRWXU)

    def test_duplicates_dropped(self, sample_tree: Path) -> None:
        assert check_roots([sample_tree, str(sample_tree), sample_tree / "sub"]) == [
            sample_tree,
            sample_tree / "sub",
        ]

    def test_failure_before_any_work(self, sample_tree: Path, tmp_path: Path) -> None:
        with pytest.raises(RootAccessError):
            run([sample_tree, tmp_path / "missing"], FilterConfig(), EngineOptions())
        assert (sample_tree / "a.txt").exists()


@pytest.mark.skipif(sys.platform != "linux", reason="relies on inotify delivery")
class TestWatchMode:
    def test_initial_pass_then_watch(self, sample_tree: Path) -> None:
        stop = threading.Event()
        result: dict[str, Summary] = {}

        def target() -> None:
            result["summary"] = run(
                [sample_tree],
                FilterConfig.from_patterns(globs=["*.txt"]),
                EngineOptions(watch=True),
                stop=stop,
            )

        thread = threading.Thread(target=target)
        thread.start()

        deadline = time.monotonic() + 5
        while not (sample_tree / ".a.txt").exists() and time.monotonic() < deadline:
            time.sleep(0.05)
        assert (sample_tree / ".a.txt").exists()

        (sample_tree / "late.txt").write_text("l")
        deadline = time.monotonic() + 5
        while not (sample_tree / ".late.txt").exists() and time.monotonic() < deadline:
            time.sleep(0.05)

        stop.set()
        thread.join(timeout=10)
        assert not thread.is_alive()
        assert (sample_tree / ".late.txt").exists()
        assert (sample_tree / "b.log").exists()
        assert result["summary"].count(OutcomeKind.SKIPPED_ALREADY_HIDDEN) == 0


@unix_only
class TestNestedRoots:
    def test_inner_root_is_never_hidden(self, sample_tree: Path) -> None:
        summary = run(
            [sample_tree, sample_tree / "sub"],
            FilterConfig(),
            EngineOptions(recursive=True),
        )
        assert _listing(sample_tree) == [".a.txt", ".b.log", "sub", "sub/.c.txt"]
        assert summary.count(OutcomeKind.HIDDEN) == 3
        assert summary.count(OutcomeKind.FAILED) == 0

    def test_inner_root_given_first(self, sample_tree: Path) -> None:
        run([sample_tree / "sub", sample_tree], FilterConfig(), EngineOptions(recursive=True))
        assert _listing(sample_tree) == [".a.txt", ".b.log", "sub", "sub/.c.txt"]
