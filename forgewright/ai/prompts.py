"""Prompt text for the three model requests."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from forgewright.core.model import Commit, WorkUnit

SYSTEM_PROMPT = """You are Forgewright, an AI release analyst for software projects.
Your job is to analyze git commits and determine:
1. How to group commits into coherent "Work Units" (features, bug fixes, refactors)
2. When a release is ready based on value delivered
3. What version bump is appropriate (major/minor/patch)
4. Generate narrative changelogs that explain what changed and why it matters

You prioritize semantic understanding over commit counting.
You think in terms of user value, not developer activity."""


@dataclass(frozen=True, slots=True)
class ReadinessCriteria:
    """Configured expectations the scorer is asked to apply."""

    threshold: int = 70
    min_work_units: int = 1
    require_tests: bool = True
    require_review: bool = True


def _commit_line(commit: Commit) -> str:
    line = f"- {commit.short_hash} ({commit.date.date().isoformat()}): {commit.subject}"
    if commit.body:
        body = "\n".join(f"  {ln}" for ln in commit.body.splitlines() if ln.strip())
        line += f"\n{body}"
    return line


def build_work_unit_prompt(commits: Sequence[Commit]) -> str:
    commit_list = "\n".join(_commit_line(c) for c in commits)
    return f"""Analyze these commits and group them into Work Units.

COMMITS:
{commit_list}

For each Work Unit, determine:
- name: a clear name (e.g., "User Authentication", "Performance Improvements")
- description: a brief description of what it accomplishes
- status: "complete" if the work seems finished, "in_progress" if it appears ongoing,
  "abandoned" if it was started and then reverted or dropped
- value: "high" for new features, "medium" for improvements, "low" for minor fixes
- commits: the commit hashes that belong to it, exactly as listed above
- created_at: ISO-8601 date of its first commit
- completed_at: ISO-8601 date of its last commit when complete, otherwise null

Return a JSON object of the form {{"workUnits": [...]}}."""


def _unit_summary(unit: WorkUnit) -> str:
    return f"- {unit.name} ({unit.status}, {unit.value} value, {len(unit.commits)} commits)"


def build_readiness_prompt(
    commits: Sequence[Commit],
    work_units: Sequence[WorkUnit],
    current_version: str,
    ci_passing: bool,
    criteria: ReadinessCriteria,
) -> str:
    units = "\n".join(_unit_summary(u) for u in work_units) or "(none detected)"
    requirements: list[str] = []
    if criteria.require_tests:
        requirements.append("changes are covered by tests")
    if criteria.require_review:
        requirements.append("changes look reviewed (no WIP/fixup commits)")
    completeness = "; ".join(requirements) or "no extra requirements"

    return f"""Evaluate release readiness for this project.

CURRENT VERSION: {current_version}
CI STATUS: {"PASSING" if ci_passing else "FAILING"}
COMMITS SINCE LAST RELEASE: {len(commits)}
MINIMUM COMPLETE WORK UNITS: {criteria.min_work_units}
COMPLETENESS REQUIREMENTS: {completeness}

WORK UNITS:
{units}

Score these dimensions (total must equal the sum of the components):
- completeness (0-40): Are work units finished? Tests passing? No WIP?
- value (0-30): User-facing impact? Features vs fixes?
- coherence (0-20): Do changes make sense together? Clear theme?
- stability (0-10): CI green? No regressions?

Determine:
- total (0-100)
- ready: true only if total >= {criteria.threshold}
- suggested_bump: "major", "minor" or "patch" based on the changes
- reasoning: brief reasoning for your assessment

Return a JSON object with the keys total, completeness, value, coherence,
stability, ready, suggested_bump and reasoning."""


def build_changelog_prompt(
    work_units: Sequence[WorkUnit],
    commits: Sequence[Commit],
    version: str,
) -> str:
    """Narrative prompt. Only complete units are described."""
    by_hash = {c.hash: c for c in commits}
    details: list[str] = []
    for unit in work_units:
        if not unit.is_complete:
            continue
        subjects = [f"  - {by_hash[h].subject}" for h in unit.commits if h in by_hash]
        block = f"{unit.name} ({unit.value} value):\n{unit.description}"
        if subjects:
            block += "\n" + "\n".join(subjects)
        details.append(block)

    unit_details = "\n\n".join(details)
    return f"""Generate a narrative changelog for version {version}.

COMPLETED WORK UNITS:
{unit_details}

Guidelines:
- Write for humans, not machines
- Focus on what changed and why it matters
- Group related changes under clear headings
- No commit lists - synthesize into prose
- Include technical notes only when relevant
- Use markdown formatting

Format:
## {version} - [Short descriptive title]

### What's New
[Narrative description of new features]

### Improvements
[Narrative description of improvements]

### Bug Fixes
[Narrative description of fixes, if any]

### Technical Notes
[Any relevant technical details]"""
