"""CLI entry point for autohide: the I/O boundary."""

from __future__ import annotations

import argparse
import logging
import re
import signal
import sys
import threading
from typing import TextIO

from autohide import AutohideError, __version__
from autohide.engine import EngineOptions, run
from autohide.entry import EntryKind
from autohide.filter import FilterConfig
from autohide.pool import Summary
from autohide.report import Reporter, ReportOptions
from autohide.watch import DEFAULT_WINDOW

_TYPE_CHOICES = [EntryKind.FILE.value, EntryKind.FOLDER.value, EntryKind.SYMLINK.value]


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser.

    Returns:
        argparse.ArgumentParser: Configured parser for the ``autohide`` command.
    """
    parser = argparse.ArgumentParser(
        prog="autohide",
        description="Hide files and folders matching patterns, once or as they appear",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        default=["."],
        metavar="path",
        help="Directories to hide entries in (default: current directory)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # traversal and mode
    parser.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        help="Search and watch subdirectories too",
    )
    parser.add_argument(
        "-w",
        "--watch",
        action="store_true",
        help="Keep watching for new entries after the first pass",
    )
    parser.add_argument(
        "-m",
        "--test",
        action="store_true",
        dest="test_mode",
        help="Report what would be hidden without hiding anything",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Report every decision, not only hides and failures",
    )
    parser.add_argument(
        "-L",
        "--follow-links",
        action="store_true",
        dest="follow_symlinks",
        help="Descend into symlinked directories when recursive",
    )

    # selection
    parser.add_argument(
        "-p",
        "--pattern",
        action="append",
        default=[],
        dest="globs",
        help="Glob of entries to hide (repeatable, default: all)",
    )
    parser.add_argument(
        "-x",
        "--exclude",
        action="append",
        default=[],
        dest="excludes",
        help="Glob of entries never to hide; checked first (repeatable)",
    )
    parser.add_argument(
        "-g",
        "--regex",
        action="append",
        default=[],
        dest="regexes",
        help="Regex searched in the full path of entries to hide (repeatable, default: all)",
    )
    parser.add_argument(
        "-e",
        "--regex-exclude",
        action="append",
        default=[],
        dest="regex_excludes",
        help="Regex searched in the full path of entries never to hide (repeatable)",
    )
    parser.add_argument(
        "-t",
        "--types",
        action="append",
        choices=_TYPE_CHOICES,
        default=None,
        help="Entry types to hide (repeatable, default: file, folder and symlink)",
    )
    parser.add_argument(
        "--preset",
        action="append",
        default=[],
        dest="presets",
        help="Add a named set of globs to hide (python, node, build, editor)",
    )
    case = parser.add_mutually_exclusive_group()
    case.add_argument(
        "--ignore-case",
        action="store_false",
        dest="case_sensitive",
        default=None,
        help="Match patterns case-insensitively (default on Windows)",
    )
    case.add_argument(
        "--case-sensitive",
        action="store_true",
        dest="case_sensitive",
        default=None,
        help="Match patterns case-sensitively (default elsewhere)",
    )

    # execution
    parser.add_argument(
        "-j",
        "--threads",
        type=int,
        default=None,
        help="Worker threads for hiding (default: number of logical cores)",
    )
    parser.add_argument(
        "--debounce",
        type=float,
        default=DEFAULT_WINDOW,
        help="Seconds to ignore notifications caused by our own renames "
        f"(default: {DEFAULT_WINDOW})",
    )
    return parser


def _build_globs(args: argparse.Namespace) -> list[str]:
    """Combine ``-p`` globs with preset globs.

    Args:
        args: Parsed CLI namespace.

    Returns:
        list[str]: Include glob list.

    Raises:
        AutohideError: If a ``--preset`` value is unknown.
    """
    globs: list[str] = list(args.globs)
    if not args.presets:
        return globs

    from autohide.preset import get_preset_patterns

    for name in args.presets:
        try:
            globs.extend(get_preset_patterns(name))
        except ValueError as exc:
            raise AutohideError(str(exc)) from exc
    return globs


def _validate_args(args: argparse.Namespace) -> None:
    """Validate option values the core relies on.

    Args:
        args: Parsed CLI namespace.

    Raises:
        AutohideError: On empty patterns, malformed regexes, or bad numbers.
    """
    for option, patterns in (
        ("--pattern", args.globs),
        ("--exclude", args.excludes),
        ("--regex", args.regexes),
        ("--regex-exclude", args.regex_excludes),
    ):
        for pattern in patterns:
            if not pattern:
                raise AutohideError(f"{option} pattern must not be empty")
    for pattern in [*args.regexes, *args.regex_excludes]:
        try:
            re.compile(pattern)
        except re.error as exc:
            raise AutohideError(f"invalid regex '{pattern}': {exc}") from exc
    if args.threads is not None and args.threads < 1:
        raise AutohideError("--threads must be a positive integer")
    if args.debounce <= 0:
        raise AutohideError("--debounce must be greater than 0")


def _build_filter_config(args: argparse.Namespace) -> FilterConfig:
    """Resolve parsed options into a :class:`FilterConfig`."""
    return FilterConfig.from_patterns(
        globs=_build_globs(args),
        excludes=args.excludes,
        regexes=args.regexes,
        regex_excludes=args.regex_excludes,
        types=[EntryKind(t) for t in args.types] if args.types else None,
        case_sensitive=args.case_sensitive,
    )


def _run_with_args(
    args: argparse.Namespace,
    stream: TextIO,
    stop: threading.Event | None = None,
) -> Summary:
    """Run the engine for parsed arguments and write the report.

    Args:
        args: Parsed CLI namespace.
        stream: Destination for outcome lines and the summary.
        stop: Shutdown signal for watch mode.

    Returns:
        Summary: Outcome counts.

    Raises:
        AutohideError: On any user-facing validation or I/O error.
    """
    _validate_args(args)
    config = _build_filter_config(args)
    options = EngineOptions(
        recursive=args.recursive,
        follow_symlinks=args.follow_symlinks,
        test_mode=args.test_mode,
        threads=args.threads,
        watch=args.watch,
        debounce=args.debounce,
    )
    reporter = Reporter(stream, ReportOptions(verbose=args.verbose, test_mode=args.test_mode))

    summary = run(args.paths, config, options, on_outcome=reporter, stop=stop)
    reporter.summary(summary)
    return summary


def run_autohide(
    argv: list[str] | None = None,
    stream: TextIO | None = None,
    stop: threading.Event | None = None,
) -> Summary:
    """Run autohide with provided CLI args.

    This is the primary test target for CLI behavior.

    Args:
        argv: Command-line argument list without program name. If ``None``,
            uses process arguments via ``argparse`` defaults.
        stream: Report destination. Defaults to stdout.
        stop: Shutdown signal for watch mode.

    Returns:
        Summary: Outcome counts.

    Raises:
        AutohideError: On any user-facing validation or I/O error.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    return _run_with_args(args, stream or sys.stdout, stop)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="autohide: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main() -> None:
    """Run the CLI entry point with process arguments.

    Exits with code 1 on user-facing errors and 130 when a one-shot run
    is interrupted. In watch mode, SIGINT and SIGTERM stop watching and
    the run finishes normally.
    """
    parser = build_parser()
    args = parser.parse_args()  # single parse
    _configure_logging(args.verbose)

    stop = threading.Event()
    if args.watch:
        signal.signal(signal.SIGINT, lambda signum, frame: stop.set())
        signal.signal(signal.SIGTERM, lambda signum, frame: stop.set())

    try:
        _run_with_args(args, sys.stdout, stop)
    except AutohideError as exc:
        sys.stderr.write(f"autohide: {exc}\n")
        sys.exit(1)
    except KeyboardInterrupt:
        sys.stderr.write("autohide: interrupted\n")
        sys.exit(130)
