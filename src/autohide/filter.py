"""Entry filtering: type check, then exclude and include pattern axes."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from autohide.entry import SELECTABLE_KINDS, Entry, EntryKind
from autohide.matcher import PatternSet, PatternSyntax, default_case_sensitive

logger = logging.getLogger(__name__)


class Decision(str, Enum):
    """Outcome of :func:`decide`, naming the stage that rejected an entry."""

    ACCEPT = "accept"
    REJECT_TYPE = "type"
    REJECT_GLOB_EXCLUDE = "glob-exclude"
    REJECT_REGEX_EXCLUDE = "regex-exclude"
    REJECT_GLOB_INCLUDE = "glob-include"
    REJECT_REGEX_INCLUDE = "regex-include"

    @property
    def accepted(self) -> bool:
        return self is Decision.ACCEPT


@dataclass(frozen=True, slots=True)
class FilterConfig:
    """Resolved selection rules, immutable for the duration of a run.

    Attributes:
        glob_exclude: Globs rejecting an entry on first match.
        regex_exclude: Regexes rejecting an entry on first match.
        glob_include: Globs an entry must match unless left at default.
        regex_include: Regexes an entry must match unless left at default.
        types: Entry kinds eligible for hiding.
        case_sensitive: Whether patterns are matched case-sensitively.
    """

    glob_exclude: PatternSet = field(
        default_factory=lambda: PatternSet(PatternSyntax.GLOB, include=False)
    )
    regex_exclude: PatternSet = field(
        default_factory=lambda: PatternSet(PatternSyntax.REGEX, include=False)
    )
    glob_include: PatternSet = field(
        default_factory=lambda: PatternSet(PatternSyntax.GLOB, include=True)
    )
    regex_include: PatternSet = field(
        default_factory=lambda: PatternSet(PatternSyntax.REGEX, include=True)
    )
    types: frozenset[EntryKind] = SELECTABLE_KINDS
    case_sensitive: bool = field(default_factory=default_case_sensitive)

    @classmethod
    def from_patterns(
        cls,
        *,
        globs: Iterable[str] = (),
        excludes: Iterable[str] = (),
        regexes: Iterable[str] = (),
        regex_excludes: Iterable[str] = (),
        types: Iterable[EntryKind] | None = None,
        case_sensitive: bool | None = None,
    ) -> FilterConfig:
        """Build a config from raw option lists.

        Args:
            globs: Glob include patterns. Empty means match-all.
            excludes: Glob exclude patterns.
            regexes: Regex include patterns. Empty means match-all.
            regex_excludes: Regex exclude patterns.
            types: Accepted entry kinds. ``None`` accepts every
                selectable kind.
            case_sensitive: Override for the platform default.

        Returns:
            FilterConfig: Immutable configuration.
        """
        return cls(
            glob_exclude=PatternSet(PatternSyntax.GLOB, False, tuple(excludes)),
            regex_exclude=PatternSet(PatternSyntax.REGEX, False, tuple(regex_excludes)),
            glob_include=PatternSet(PatternSyntax.GLOB, True, tuple(globs)),
            regex_include=PatternSet(PatternSyntax.REGEX, True, tuple(regexes)),
            types=frozenset(types) if types is not None else SELECTABLE_KINDS,
            case_sensitive=(
                default_case_sensitive() if case_sensitive is None else case_sensitive
            ),
        )


def decide(entry: Entry, config: FilterConfig) -> Decision:
    """Decide whether an entry is selected for hiding.

    Stages run in fixed order and stop at the first rejection: type,
    glob exclude, regex exclude, glob include, regex include. Both
    include axes must accept independently.

    Args:
        entry: Candidate entry.
        config: Selection rules.

    Returns:
        Decision: ``Decision.ACCEPT`` or the rejecting stage.
    """
    if entry.kind not in config.types:
        logger.debug("Skipping %s: %s is not a selected type", entry.path, entry.kind.value)
        return Decision.REJECT_TYPE

    cs = config.case_sensitive

    matched = config.glob_exclude.first_match(entry, cs)
    if matched is not None:
        logger.debug("Skipping %s: excluded by glob pattern %r", entry.path, matched)
        return Decision.REJECT_GLOB_EXCLUDE

    matched = config.regex_exclude.first_match(entry, cs)
    if matched is not None:
        logger.debug("Skipping %s: excluded by regex pattern %r", entry.path, matched)
        return Decision.REJECT_REGEX_EXCLUDE

    if not config.glob_include.matches(entry, cs):
        logger.debug("Skipping %s: no glob pattern matched", entry.path)
        return Decision.REJECT_GLOB_INCLUDE

    if not config.regex_include.matches(entry, cs):
        logger.debug("Skipping %s: no regex pattern matched", entry.path)
        return Decision.REJECT_REGEX_INCLUDE

    return Decision.ACCEPT
