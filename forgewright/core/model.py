"""Domain records shared by the analysis and release stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

__all__ = [
    "VERSION_BUMPS",
    "WORK_UNIT_STATUSES",
    "WORK_UNIT_VALUES",
    "AnalysisResult",
    "Author",
    "Commit",
    "ReadinessScore",
    "ReleaseResult",
    "Tag",
    "VersionBump",
    "WorkUnit",
    "WorkUnitStatus",
    "WorkUnitValue",
    "bump_rank",
]

VersionBump = Literal["major", "minor", "patch"]
WorkUnitStatus = Literal["in_progress", "complete", "abandoned"]
WorkUnitValue = Literal["low", "medium", "high"]

VERSION_BUMPS: tuple[VersionBump, ...] = ("major", "minor", "patch")
WORK_UNIT_STATUSES: tuple[WorkUnitStatus, ...] = ("in_progress", "complete", "abandoned")
WORK_UNIT_VALUES: tuple[WorkUnitValue, ...] = ("low", "medium", "high")

_BUMP_RANK: dict[VersionBump, int] = {"major": 3, "minor": 2, "patch": 1}


def bump_rank(bump: VersionBump) -> int:
    """Order bumps for tie-breaking: major > minor > patch."""
    return _BUMP_RANK[bump]


@dataclass(frozen=True, slots=True)
class Author:
    name: str
    email: str


@dataclass(frozen=True, slots=True)
class Commit:
    """A parsed commit. Only the commit log reader creates these."""

    hash: str
    short_hash: str
    subject: str
    body: str
    author: Author
    date: datetime
    files: tuple[str, ...] = ()

    @property
    def message(self) -> str:
        """Subject and body as a single text (used for marker detection)."""
        if self.body:
            return f"{self.subject}\n\n{self.body}"
        return self.subject


@dataclass(frozen=True, slots=True)
class Tag:
    name: str
    hash: str
    date: datetime


@dataclass(frozen=True, slots=True)
class WorkUnit:
    """A named, valued grouping of commits.

    Attributes:
        id: Local sequential identifier ("wu-1", "wu-2", ...)
        commits: Member commit hashes, in the order the model listed them
        completed_at: None when the unit is not complete or the date was unusable
    """

    id: str
    name: str
    description: str
    status: WorkUnitStatus
    value: WorkUnitValue
    commits: tuple[str, ...]
    created_at: datetime
    completed_at: datetime | None = None

    @property
    def is_complete(self) -> bool:
        return self.status == "complete"


@dataclass(frozen=True, slots=True)
class ReadinessScore:
    """Composite release readiness.

    The component bounds are completeness 0-40, value 0-30, coherence 0-20
    and stability 0-10; ``total`` is their sum.
    """

    total: float
    completeness: float
    value: float
    coherence: float
    stability: float
    ready: bool
    reasoning: str
    suggested_bump: VersionBump | None = None
    suggested_version: str | None = None

    @classmethod
    def empty(cls, *, stability: float, reasoning: str) -> ReadinessScore:
        return cls(
            total=stability,
            completeness=0,
            value=0,
            coherence=0,
            stability=stability,
            ready=False,
            reasoning=reasoning,
        )


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    work_units: tuple[WorkUnit, ...]
    readiness: ReadinessScore
    current_version: str
    suggested_version: str | None
    commits: tuple[Commit, ...] = field(default_factory=tuple)
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def complete_units(self) -> tuple[WorkUnit, ...]:
        return tuple(u for u in self.work_units if u.is_complete)


@dataclass(frozen=True, slots=True)
class ReleaseResult:
    version: str
    changelog: str
    tag_created: bool
    release_url: str | None = None
