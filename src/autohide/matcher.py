"""Pattern matching: glob and regex predicates over entry paths."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from enum import Enum
from fnmatch import fnmatchcase
from functools import lru_cache

from pathspec import GitIgnoreSpec

from autohide.entry import Entry, EntryKind


class PatternSyntax(str, Enum):
    """Pattern language of a :class:`PatternSet`."""

    GLOB = "glob"
    REGEX = "regex"


def default_case_sensitive(platform: str | None = None) -> bool:
    """Return the platform's default case sensitivity for matching.

    Args:
        platform: ``sys.platform`` style identifier. Defaults to the
            running platform.

    Returns:
        bool: ``False`` on Windows, ``True`` everywhere else.
    """
    return (platform or sys.platform) != "win32"


@lru_cache(maxsize=256)
def _compile_glob(pattern: str) -> GitIgnoreSpec:
    # A leading "!" or "#" is literal here, not a gitignore negation or comment.
    if pattern.startswith(("!", "#")):
        pattern = "\\" + pattern
    return GitIgnoreSpec.from_lines([pattern])


@lru_cache(maxsize=256)
def _compile_regex(pattern: str, case_sensitive: bool) -> re.Pattern[str]:
    return re.compile(pattern, 0 if case_sensitive else re.IGNORECASE)


def matches_glob(path: str, pattern: str, case_sensitive: bool = True) -> bool:
    """Return whether a root-relative path matches a glob pattern.

    A pattern without ``/`` is matched against the base name only, with
    shell wildcard rules. A pattern containing ``/`` is matched against
    the whole relative path with gitignore wildmatch rules, so ``**``
    spans directories, a leading ``/`` anchors at the root and a
    trailing ``/`` only matches folders.

    Args:
        path: Forward-slash path relative to the scanned root. Folders
            carry a trailing ``/``.
        pattern: Glob pattern.
        case_sensitive: Whether letter case must match.

    Returns:
        bool: ``True`` when the pattern matches.
    """
    if not case_sensitive:
        path = path.lower()
        pattern = pattern.lower()

    if "/" in pattern:
        return _compile_glob(pattern).match_file(path)

    name = path.rstrip("/").rsplit("/", 1)[-1]
    return fnmatchcase(name, pattern)


def matches_regex(path: str, pattern: str, case_sensitive: bool = True) -> bool:
    """Return whether a regex pattern is found anywhere in an absolute path.

    Args:
        path: Absolute path of the entry.
        pattern: Regular expression, assumed valid.
        case_sensitive: Whether letter case must match.

    Returns:
        bool: ``True`` when ``re.search`` finds a match.
    """
    return _compile_regex(pattern, case_sensitive).search(path) is not None


@dataclass(frozen=True, slots=True)
class PatternSet:
    """Ordered patterns forming one include or exclude axis.

    An include set without patterns is the default set and matches
    everything (``*`` / ``.*``); an exclude set without patterns
    matches nothing.

    Attributes:
        syntax: Whether ``patterns`` are globs or regexes.
        include: Whether this is an include axis.
        patterns: Patterns in the order they were given.
    """

    syntax: PatternSyntax
    include: bool
    patterns: tuple[str, ...] = ()

    @property
    def is_default(self) -> bool:
        """Whether this is an include set left at match-all."""
        return self.include and not self.patterns

    def first_match(self, entry: Entry, case_sensitive: bool = True) -> str | None:
        """Return the first pattern matching ``entry``, if any.

        Globs see the root-relative path, regexes the absolute path.
        """
        if self.syntax is PatternSyntax.GLOB:
            target = entry.relative_path
            if entry.kind is EntryKind.FOLDER:
                target += "/"
            for pattern in self.patterns:
                if matches_glob(target, pattern, case_sensitive):
                    return pattern
            return None

        target = str(entry.path)
        for pattern in self.patterns:
            if matches_regex(target, pattern, case_sensitive):
                return pattern
        return None

    def matches(self, entry: Entry, case_sensitive: bool = True) -> bool:
        """Return whether any pattern matches; default sets match everything."""
        if self.is_default:
            return True
        return self.first_match(entry, case_sensitive) is not None
