"""Changelog synthesis and CHANGELOG.md merging.

A narrative entry is requested from the model only when at least one work
unit is complete; otherwise the entry is rendered locally from commit
subjects grouped by conventional-commit type.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from pathlib import Path

from forgewright.ai.errors import AIError
from forgewright.ai.prompts import SYSTEM_PROMPT, build_changelog_prompt
from forgewright.ai.provider import ChatModel
from forgewright.core.model import Commit, WorkUnit
from forgewright.core.result import Err, Ok, Result
from forgewright.core.retry import RetryOptions, with_retry
from forgewright.output.console import ConsoleProtocol, Style

__all__ = [
    "CHANGELOG_FILENAME",
    "ChangelogSynthesizer",
    "commit_type",
    "merge_changelog",
    "render_fallback_changelog",
    "write_changelog_file",
]

CHANGELOG_FILENAME = "CHANGELOG.md"
CHANGELOG_HEADER = "# Changelog"
NO_CHANGES_LINE = "No significant changes."

_TYPE_RE = re.compile(r"^(?P<type>[A-Za-z]+)(?:\([^)]*\))?!?:")
_HEADER_RE = re.compile(r"^#[ \t]+changelog[ \t]*(?:\r?\n|$)", re.IGNORECASE)
_FEATURE_TYPES = frozenset({"feat", "feature"})
_FIX_TYPES = frozenset({"fix"})


def commit_type(subject: str) -> str | None:
    """Conventional-commit type of a subject line, lower-cased."""
    m = _TYPE_RE.match(subject.strip())
    if m is None:
        return None
    return m.group("type").lower()


def _today() -> date:
    return datetime.now(UTC).date()


def render_fallback_changelog(
    commits: Sequence[Commit],
    version: str,
    *,
    today: date | None = None,
) -> str:
    """Deterministic entry used when no work unit is complete."""
    day = (today or _today()).isoformat()
    lines = [f"## {version} - {day}", ""]

    if not commits:
        lines.append(NO_CHANGES_LINE)
        return "\n".join(lines) + "\n"

    features = [c for c in commits if commit_type(c.subject) in _FEATURE_TYPES]
    fixes = [c for c in commits if commit_type(c.subject) in _FIX_TYPES]

    sections: list[tuple[str, list[Commit]]] = []
    if features:
        sections.append(("New Features", features))
    if fixes:
        sections.append(("Bug Fixes", fixes))
    if not sections:
        sections.append(("Changes", list(commits)))

    for title, members in sections:
        lines.append(f"### {title}")
        lines.append("")
        lines.extend(f"- {c.subject} ({c.short_hash})" for c in members)
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def merge_changelog(existing: str, entry: str) -> str:
    """Insert ``entry`` into existing changelog text.

    The entry goes right after a leading "# Changelog" header. Without one,
    a fresh header and the entry are placed before the existing text. The
    existing content itself is never altered.
    """
    entry = entry.strip("\n")
    if not existing.strip():
        return f"{CHANGELOG_HEADER}\n\n{entry}\n"

    m = _HEADER_RE.match(existing)
    if m is None:
        return f"{CHANGELOG_HEADER}\n\n{entry}\n\n{existing}"

    head = existing[: m.end()]
    if not head.endswith("\n"):
        head += "\n"
    rest = existing[m.end() :]
    return f"{head}\n{entry}\n{rest}"


def write_changelog_file(path: Path, entry: str) -> Result[Path, OSError]:
    """Merge ``entry`` into the changelog at ``path``, creating it if needed."""
    try:
        existing = path.read_text(encoding="utf-8") if path.exists() else ""
        path.write_text(merge_changelog(existing, entry), encoding="utf-8")
    except OSError as e:
        return Err(e)
    return Ok(path)


@dataclass
class ChangelogSynthesizer:
    """Produce the release notes entry for one version."""

    model: ChatModel
    console: ConsoleProtocol | None = None
    retry: RetryOptions = field(default_factory=RetryOptions)
    today: Callable[[], date] = _today

    def generate(
        self,
        work_units: Sequence[WorkUnit],
        commits: Sequence[Commit],
        version: str,
    ) -> Result[str, AIError]:
        if not any(u.is_complete for u in work_units):
            return Ok(render_fallback_changelog(commits, version, today=self.today()))

        prompt = build_changelog_prompt(work_units, commits, version)
        options = replace(self.retry, on_retry=self._report_retry)
        result = with_retry(lambda: self.model.generate(SYSTEM_PROMPT, prompt), options)
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip() + "\n")

    def _report_retry(self, attempt: int, error: object, delay: float) -> None:
        if self.console is not None:
            self.console.print(
                f"changelog: {error} - retrying in {delay:.1f}s "
                f"(attempt {attempt + 1}/{self.retry.max_attempts})",
                Style.DIM,
            )
