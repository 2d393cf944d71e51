"""Semantic version parsing and the local version-bump heuristic."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from forgewright.core.model import Commit, VersionBump, WorkUnit, bump_rank

__all__ = [
    "SemVer",
    "bump_version",
    "has_breaking_change",
    "parse_version",
    "resolve_bump",
    "suggest_version_bump",
]

_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)")
_CONVENTIONAL_RE = re.compile(r"^(?P<type>\w+)(?:\([^)]*\))?(?P<bang>!)?:")
_BREAKING_FOOTER_RE = re.compile(r"^BREAKING[ -]CHANGE\b", re.MULTILINE)
_FEATURE_TYPES = frozenset({"feat", "feature"})


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, kind: VersionBump) -> SemVer:
        match kind:
            case "major":
                return SemVer(self.major + 1, 0, 0)
            case "minor":
                return SemVer(self.major, self.minor + 1, 0)
            case "patch":
                return SemVer(self.major, self.minor, self.patch + 1)


def parse_version(version: str) -> SemVer:
    """Parse ``[v]X.Y.Z[-label][+build]``; anything else is 0.0.0."""
    text = version.strip()
    if text[:1] in ("v", "V"):
        text = text[1:]
    m = _VERSION_RE.match(text)
    if m is None:
        return SemVer(0, 0, 0)
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def bump_version(version: str, kind: VersionBump) -> str:
    """Bump ``version``; a leading "v" or "V" is kept as written, never added."""
    head = version.strip()[:1]
    prefix = head if head in ("v", "V") else ""
    return f"{prefix}{parse_version(version).bump(kind)}"


def _is_breaking(commit: Commit) -> bool:
    if "BREAKING" in commit.subject:
        return True
    subject = commit.subject.strip()
    if subject.startswith("!"):
        return True
    m = _CONVENTIONAL_RE.match(subject)
    if m is not None and m.group("bang"):
        return True
    return _BREAKING_FOOTER_RE.search(commit.body) is not None


def _is_feature(commit: Commit) -> bool:
    m = _CONVENTIONAL_RE.match(commit.subject.strip())
    return m is not None and m.group("type").lower() in _FEATURE_TYPES


def has_breaking_change(commits: Sequence[Commit]) -> bool:
    return any(_is_breaking(c) for c in commits)


def suggest_version_bump(commits: Sequence[Commit], work_units: Sequence[WorkUnit]) -> VersionBump:
    """Deterministic bump: breaking => major, feature or high value => minor, else patch."""
    if has_breaking_change(commits):
        return "major"
    if any(u.value == "high" for u in work_units) or any(_is_feature(c) for c in commits):
        return "minor"
    return "patch"


def resolve_bump(
    suggested: VersionBump | None,
    commits: Sequence[Commit],
    work_units: Sequence[WorkUnit],
) -> VersionBump:
    """Pick the bump for a release.

    The scorer's suggestion is used when present, except that a breaking
    change in the commits always yields major. Without a suggestion the
    heuristic decides.
    """
    if suggested is None:
        return suggest_version_bump(commits, work_units)
    if has_breaking_change(commits) and bump_rank("major") > bump_rank(suggested):
        return "major"
    return suggested
