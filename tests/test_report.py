"""Tests for autohide.report."""

import io
import threading
from pathlib import Path

import pytest

from autohide.hide import HideOutcome
from autohide.pool import Summary
from autohide.report import Reporter, ReportOptions, format_outcome, format_summary
from tests.conftest import make_test_entry

ROOT = Path("/data/root")


class TestFormatOutcome:
    @pytest.mark.parametrize(
        ("outcome", "test_mode", "expected"),
        [
            (HideOutcome.hidden(ROOT / ".a.txt"), False, f"Hid {ROOT / 'a.txt'} -> .a.txt"),
            (HideOutcome.hidden(ROOT / ".a.txt"), True, f"Would hide {ROOT / 'a.txt'} -> .a.txt"),
            (HideOutcome.hidden(ROOT / "a.txt"), False, f"Hid {ROOT / 'a.txt'}"),
            (HideOutcome.already_hidden(), False, f"Skipping {ROOT / 'a.txt'}: already hidden"),
            (
                HideOutcome.filtered("regex-exclude"),
                False,
                f"Skipping {ROOT / 'a.txt'}: rejected by regex-exclude filter",
            ),
            (
                HideOutcome.failed("name-conflict"),
                False,
                f"Failed to hide {ROOT / 'a.txt'}: name-conflict",
            ),
        ],
    )
    def test_lines(self, outcome: HideOutcome, test_mode: bool, expected: str) -> None:
        assert format_outcome(make_test_entry("a.txt", root=ROOT), outcome, test_mode) == expected


class TestFormatSummary:
    def test_counts(self) -> None:
        summary = Summary()
        summary.add(HideOutcome.hidden(ROOT / ".a"))
        summary.add(HideOutcome.filtered("type"))
        summary.add(HideOutcome.filtered("type"))
        assert format_summary(summary) == "1 hidden, 0 already hidden, 2 filtered, 0 failed"

    def test_test_mode_wording(self) -> None:
        assert format_summary(Summary(), test_mode=True).startswith("0 would be hidden")


class TestReporter:
    def test_quiet_shows_hides_and_failures_only(self) -> None:
        stream = io.StringIO()
        reporter = Reporter(stream)
        entry = make_test_entry("a.txt", root=ROOT)
        reporter(entry, HideOutcome.hidden(ROOT / ".a.txt"))
        reporter(entry, HideOutcome.already_hidden())
        reporter(entry, HideOutcome.filtered("type"))
        reporter(entry, HideOutcome.failed("permission-denied"))
        lines = stream.getvalue().splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("Hid ")
        assert lines[1].startswith("Failed ")

    def test_verbose_shows_everything(self) -> None:
        stream = io.StringIO()
        reporter = Reporter(stream, ReportOptions(verbose=True))
        entry = make_test_entry("a.txt", root=ROOT)
        reporter(entry, HideOutcome.already_hidden())
        reporter(entry, HideOutcome.filtered("type"))
        assert len(stream.getvalue().splitlines()) == 2

    def test_lines_are_not_interleaved(self) -> None:
        stream = io.StringIO()
        reporter = Reporter(stream)
        entry = make_test_entry("a.txt", root=ROOT)

        def emit() -> None:
            for _ in range(50):
                reporter(entry, HideOutcome.hidden(ROOT / ".a.txt"))

        threads = [threading.Thread(target=emit) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        lines = stream.getvalue().splitlines()
        assert len(lines) == 200
        assert set(lines) == {f"Hid {ROOT / 'a.txt'} -> .a.txt"}
