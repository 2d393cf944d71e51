"""Release readiness pipeline.

extract commits -> classify work units -> score -> pick bump -> changelog
-> execute. Each stage runs after the previous one finished; no two model
requests are in flight at once.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from forgewright.ai.analyzer import Analyzer, find_orphan_references
from forgewright.ai.changelog import (
    CHANGELOG_FILENAME,
    ChangelogSynthesizer,
    write_changelog_file,
)
from forgewright.ai.errors import AIError
from forgewright.core.config import Config
from forgewright.core.model import AnalysisResult, ReadinessScore, ReleaseResult
from forgewright.core.result import Err, Ok, Result
from forgewright.git.repository import GitError, Repository
from forgewright.output.console import ConsoleProtocol
from forgewright.services.bump import bump_version, resolve_bump
from forgewright.services.github import GitHub, repo_from_remote
from forgewright.services.release import ReleaseError, ReleaseExecutor, ReleaseOptions

__all__ = [
    "DEFAULT_VERSION",
    "EngineContext",
    "analyze",
    "ci_passing",
    "execute_release",
    "generate_changelog",
    "next_version",
    "update_changelog",
]

DEFAULT_VERSION = "0.0.0"
NO_COMMITS_REASONING = "No commits since last release"


@dataclass
class EngineContext:
    """Collaborators for one pipeline run."""

    config: Config
    repo: Repository
    analyzer: Analyzer
    changelog: ChangelogSynthesizer
    github: GitHub | None = None
    console: ConsoleProtocol | None = None


def ci_passing(ctx: EngineContext) -> bool:
    """CI signal for the scorer; only a failing or running workflow counts against."""
    if ctx.github is None:
        return True
    repo = repo_from_remote(ctx.repo)
    branch = ctx.repo.current_branch()
    if repo is None or branch is None:
        return True
    return ctx.github.workflow_status(repo, branch) in ("success", "unknown")


def analyze(ctx: EngineContext) -> Result[AnalysisResult, GitError | AIError]:
    """Analyze everything since the latest tag."""
    tag = ctx.repo.latest_tag()
    if isinstance(tag, Err):
        return tag
    current_version = tag.value.name if tag.value is not None else DEFAULT_VERSION

    commits = ctx.repo.commits(since=tag.value.hash if tag.value is not None else None)
    if isinstance(commits, Err):
        return commits

    if not commits.value:
        return Ok(
            AnalysisResult(
                work_units=(),
                readiness=ReadinessScore.empty(stability=0, reasoning=NO_COMMITS_REASONING),
                current_version=current_version,
                suggested_version=None,
            )
        )

    units = ctx.analyzer.detect_work_units(commits.value)
    if isinstance(units, Err):
        return units

    warnings = find_orphan_references(units.value, commits.value)
    if ctx.console is not None:
        for warning in warnings:
            ctx.console.warning(warning)

    score = ctx.analyzer.evaluate_readiness(
        commits.value, units.value, current_version, ci_passing(ctx)
    )
    if isinstance(score, Err):
        return score

    bump = resolve_bump(score.value.suggested_bump, commits.value, units.value)
    suggested = bump_version(current_version, bump) if score.value.ready else None

    return Ok(
        AnalysisResult(
            work_units=tuple(units.value),
            readiness=replace(score.value, suggested_bump=bump, suggested_version=suggested),
            current_version=current_version,
            suggested_version=suggested,
            commits=tuple(commits.value),
            warnings=tuple(warnings),
        )
    )


def next_version(analysis: AnalysisResult) -> str:
    """Version to release: the suggestion, or the bumped current version when forced."""
    if analysis.suggested_version is not None:
        return analysis.suggested_version
    return bump_version(analysis.current_version, analysis.readiness.suggested_bump or "patch")


def generate_changelog(
    ctx: EngineContext,
    analysis: AnalysisResult,
    version: str,
) -> Result[str, AIError]:
    return ctx.changelog.generate(analysis.work_units, analysis.commits, version)


def execute_release(
    ctx: EngineContext,
    version: str,
    changelog: str,
    options: ReleaseOptions | None = None,
) -> Result[ReleaseResult, ReleaseError]:
    executor = ReleaseExecutor(
        repo=ctx.repo,
        github=ctx.github,
        settings=ctx.config.github,
        console=ctx.console,
    )
    return executor.execute(version, changelog, options)


def update_changelog(ctx: EngineContext, entry: str) -> Result[Path, OSError]:
    """Merge ``entry`` into CHANGELOG.md at the repository root."""
    return write_changelog_file(ctx.repo.path / CHANGELOG_FILENAME, entry)
