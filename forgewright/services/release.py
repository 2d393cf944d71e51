"""Release execution: validate, tag, push, publish.

States::

    IDLE -> VALIDATED -> TAGGED -> PUSHED -> PUBLISHED | SKIPPED -> DONE
    IDLE -> DRY_RUN_REPORTED

Each step either advances the executor to the next state or returns a
``ReleaseError``; nothing after a failed step runs. Re-running for a version
whose tag already exists fails at the tagging step.

There is no lock between the clean-tree check and tag creation, so a commit
made concurrently by another process is not detected.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Literal

from forgewright.core.config import GitHubConfig
from forgewright.core.model import ReleaseResult
from forgewright.core.result import Err, Ok, Result
from forgewright.core.retry import RetryOptions, with_retry
from forgewright.git.repository import Repository
from forgewright.output.console import ConsoleProtocol, Style
from forgewright.services.github import GitHub, ReleaseRequest, RepoRef, repo_from_remote

__all__ = [
    "ReleaseError",
    "ReleaseExecutor",
    "ReleaseOptions",
    "ReleaseState",
    "tag_name_for",
]

ReleaseErrorKind = Literal[
    "dirty_worktree",
    "git_failed",
    "tag_failed",
    "push_failed",
    "missing_credential",
    "publish_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None


class ReleaseState(StrEnum):
    IDLE = "idle"
    VALIDATED = "validated"
    TAGGED = "tagged"
    PUSHED = "pushed"
    PUBLISHED = "published"
    SKIPPED = "skipped"
    DONE = "done"
    DRY_RUN_REPORTED = "dry_run_reported"


@dataclass(frozen=True, slots=True)
class ReleaseOptions:
    dry_run: bool = False
    skip_github: bool = False
    draft: bool = False
    prerelease: bool = False


def tag_name_for(version: str) -> str:
    return version if version.startswith("v") else f"v{version}"


def _no_states() -> list[ReleaseState]:
    return [ReleaseState.IDLE]


@dataclass
class ReleaseExecutor:
    """Run one release against a repository.

    Attributes:
        repo: Local repository to tag and push
        github: Host gateway; None disables publication entirely
        settings: ``[github]`` configuration (create_release, release_notes)
        console: Receives one line per state transition (optional)
        retry: Retry budget for each publication call
        resolve_repo: Maps the local repository to its GitHub owner/name
    """

    repo: Repository
    github: GitHub | None
    settings: GitHubConfig = field(default_factory=GitHubConfig)
    console: ConsoleProtocol | None = None
    retry: RetryOptions = field(default_factory=RetryOptions)
    resolve_repo: Callable[[Repository], RepoRef | None] = repo_from_remote
    history: list[ReleaseState] = field(default_factory=_no_states)

    @property
    def state(self) -> ReleaseState:
        return self.history[-1]

    def _enter(self, state: ReleaseState, detail: str = "") -> None:
        previous = self.state
        self.history.append(state)
        if self.console is not None:
            suffix = f" ({detail})" if detail else ""
            self.console.print(f"release: {previous} -> {state}{suffix}", Style.DIM)

    def execute(
        self,
        version: str,
        changelog: str,
        options: ReleaseOptions | None = None,
    ) -> Result[ReleaseResult, ReleaseError]:
        opts = options or ReleaseOptions()
        self.history = _no_states()

        if opts.dry_run:
            self._enter(ReleaseState.DRY_RUN_REPORTED)
            return Ok(ReleaseResult(version=version, changelog=changelog, tag_created=False))

        validated = self._validate()
        if isinstance(validated, Err):
            return validated
        self._enter(ReleaseState.VALIDATED)

        tag = tag_name_for(version)
        created = self.repo.create_tag(tag, f"Release {version}")
        if isinstance(created, Err):
            return Err(
                ReleaseError(
                    kind="tag_failed",
                    message=f"failed to create tag {tag}",
                    hint=created.error.message,
                )
            )
        self._enter(ReleaseState.TAGGED, tag)

        pushed = self.repo.push_tag(tag)
        if isinstance(pushed, Err):
            return Err(
                ReleaseError(
                    kind="push_failed",
                    message=f"failed to push tag {tag}",
                    hint=pushed.error.message,
                )
            )
        self._enter(ReleaseState.PUSHED, tag)

        url: str | None = None
        target = self._publish_target(opts)
        if target is None:
            self._enter(ReleaseState.SKIPPED)
        else:
            body = changelog if self.settings.release_notes else ""
            request = ReleaseRequest(
                tag=tag,
                title=version,
                body=body,
                draft=opts.draft,
                prerelease=opts.prerelease,
            )
            published = self._publish(target, request)
            if isinstance(published, Err):
                return published
            url = published.value
            self._enter(ReleaseState.PUBLISHED, url or target.slug)

        self._enter(ReleaseState.DONE)
        return Ok(
            ReleaseResult(version=version, changelog=changelog, tag_created=True, release_url=url)
        )

    def _validate(self) -> Result[None, ReleaseError]:
        status = self.repo.status()
        if isinstance(status, Err):
            return Err(
                ReleaseError(
                    kind="git_failed",
                    message="cannot read working tree status",
                    hint=status.error.message,
                )
            )
        if not status.value.is_clean:
            dirty = status.value.dirty_paths
            shown = ", ".join(dirty[:5]) + (" ..." if len(dirty) > 5 else "")
            return Err(
                ReleaseError(
                    kind="dirty_worktree",
                    message="working directory is not clean",
                    hint=f"Commit or stash changes first: {shown}",
                )
            )
        return Ok(None)

    def _publish_target(self, opts: ReleaseOptions) -> RepoRef | None:
        if opts.skip_github or not self.settings.create_release or self.github is None:
            return None
        return self.resolve_repo(self.repo)

    def _publish(
        self,
        target: RepoRef,
        request: ReleaseRequest,
    ) -> Result[str | None, ReleaseError]:
        github = self.github
        assert github is not None
        options = replace(self.retry, on_retry=self._report_retry)

        if github.cli_available():
            via_cli = with_retry(lambda: github.create_release_with_cli(target, request), options)
            if isinstance(via_cli, Err):
                return Err(
                    ReleaseError(
                        kind="publish_failed",
                        message=f"gh release create failed for {target.slug}",
                        hint=via_cli.error.stderr.strip() or None,
                    )
                )
            return Ok(via_cli.value)

        if not github.has_token:
            return Err(
                ReleaseError(
                    kind="missing_credential",
                    message="cannot publish release: gh is not installed and no token is set",
                    hint="Set GITHUB_TOKEN (or GH_TOKEN), or install the GitHub CLI.",
                )
            )

        via_api = with_retry(lambda: github.create_release(target, request), options)
        if isinstance(via_api, Err):
            return Err(
                ReleaseError(
                    kind="publish_failed",
                    message=f"GitHub release creation failed for {target.slug}",
                    hint=str(via_api.error),
                )
            )
        return Ok(via_api.value)

    def _report_retry(self, attempt: int, error: object, delay: float) -> None:
        if self.console is not None:
            self.console.print(
                f"publish: {error} - retrying in {delay:.1f}s "
                f"(attempt {attempt + 1}/{self.retry.max_attempts})",
                Style.DIM,
            )
