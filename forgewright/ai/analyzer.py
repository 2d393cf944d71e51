"""Work-unit classification and release readiness scoring.

Both steps issue exactly one model request (retried on transient failures)
and validate the reply against its schema. Neither runs when there is
nothing to analyze.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from forgewright.ai.errors import AIError
from forgewright.ai.prompts import (
    SYSTEM_PROMPT,
    ReadinessCriteria,
    build_readiness_prompt,
    build_work_unit_prompt,
)
from forgewright.ai.provider import ChatModel
from forgewright.ai.schema import parse_json_reply, validate_readiness, validate_work_units
from forgewright.core.model import Commit, ReadinessScore, WorkUnit
from forgewright.core.result import Err, Ok, Result
from forgewright.core.retry import RetryOptions, with_retry
from forgewright.output.console import ConsoleProtocol, Style

__all__ = [
    "NO_CHANGES_REASONING",
    "Analyzer",
    "find_orphan_references",
    "resolve_commit_refs",
]

NO_CHANGES_REASONING = "No changes since last release"
_MIN_PREFIX = 4


def _utcnow() -> datetime:
    return datetime.now(UTC)


def resolve_commit_refs(refs: Sequence[str], commits: Sequence[Commit]) -> tuple[str, ...]:
    """Map short or full hashes onto full hashes of analyzed commits.

    A reference that matches no commit, or is an ambiguous prefix, is kept
    verbatim so it can be reported as an orphan.
    """
    resolved: list[str] = []
    for ref in refs:
        ref_lower = ref.lower()
        matches = [
            c.hash
            for c in commits
            if c.hash.lower() == ref_lower
            or (len(ref_lower) >= _MIN_PREFIX and c.hash.lower().startswith(ref_lower))
        ]
        resolved.append(matches[0] if len(matches) == 1 else ref)
    return tuple(resolved)


def find_orphan_references(
    work_units: Sequence[WorkUnit],
    commits: Sequence[Commit],
) -> list[str]:
    """Warnings for work-unit members that are not in the analyzed range."""
    known = {c.hash for c in commits}
    warnings: list[str] = []
    for unit in work_units:
        orphans = [h for h in unit.commits if h not in known]
        if not orphans:
            continue
        if len(orphans) == len(unit.commits):
            prefix = f"work unit '{unit.name}' ({unit.id}) references no analyzed commit"
        else:
            prefix = f"work unit '{unit.name}' ({unit.id}) references unknown commits"
        warnings.append(f"{prefix}: {', '.join(orphans)}")
    return warnings


@dataclass
class Analyzer:
    """Model-backed WorkUnitClassifier and ReadinessScorer.

    Attributes:
        model: Reasoning backend
        criteria: Threshold and completeness expectations passed to the scorer
        console: Receives retry notices (optional)
        retry: Retry budget for each request
        clock: Source of "now" for unusable creation dates
    """

    model: ChatModel
    criteria: ReadinessCriteria = field(default_factory=ReadinessCriteria)
    console: ConsoleProtocol | None = None
    retry: RetryOptions = field(default_factory=RetryOptions)
    clock: Callable[[], datetime] = _utcnow

    def detect_work_units(self, commits: Sequence[Commit]) -> Result[list[WorkUnit], AIError]:
        """Group commits into work units with local identifiers wu-1, wu-2, ..."""
        if not commits:
            return Ok([])

        reply = self._ask(build_work_unit_prompt(commits))
        if isinstance(reply, Err):
            return reply

        drafts = validate_work_units(reply.value, now=self.clock())
        if isinstance(drafts, Err):
            return drafts

        return Ok(
            [
                WorkUnit(
                    id=f"wu-{index}",
                    name=draft.name,
                    description=draft.description,
                    status=draft.status,
                    value=draft.value,
                    commits=resolve_commit_refs(draft.commits, commits),
                    created_at=draft.created_at,
                    completed_at=draft.completed_at,
                )
                for index, draft in enumerate(drafts, start=1)
            ]
        )

    def evaluate_readiness(
        self,
        commits: Sequence[Commit],
        work_units: Sequence[WorkUnit],
        current_version: str,
        ci_passing: bool = True,
    ) -> Result[ReadinessScore, AIError]:
        """Score release readiness.

        With neither commits nor work units no request is made: the score is
        zero apart from stability (10 when CI passes).
        """
        if not commits and not work_units:
            return Ok(
                ReadinessScore.empty(
                    stability=10 if ci_passing else 0,
                    reasoning=NO_CHANGES_REASONING,
                )
            )

        prompt = build_readiness_prompt(
            commits, work_units, current_version, ci_passing, self.criteria
        )
        reply = self._ask(prompt)
        if isinstance(reply, Err):
            return reply
        return validate_readiness(reply.value)

    def _ask(self, prompt: str) -> Result[object, AIError]:
        options = replace(self.retry, on_retry=self._report_retry)
        text = with_retry(
            lambda: self.model.generate(SYSTEM_PROMPT, prompt, json_output=True),
            options,
        )
        if isinstance(text, Err):
            return text
        return parse_json_reply(text.value)

    def _report_retry(self, attempt: int, error: object, delay: float) -> None:
        if self.console is None:
            return
        self.console.print(
            f"{self.model.name}: {error} - retrying in {delay:.1f}s "
            f"(attempt {attempt + 1}/{self.retry.max_attempts})",
            Style.DIM,
        )
