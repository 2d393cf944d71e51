"""Tests for services/release.py."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from forgewright.core import retry as retry_mod
from forgewright.core.config import GitHubConfig
from forgewright.core.result import Err, Ok, Result
from forgewright.git.repository import GitError, GitStatus, StatusEntry
from forgewright.net.http import HttpError, MockHttpClient
from forgewright.output.console import MockConsole
from forgewright.platform.process import ProcessError
from forgewright.services import github as github_mod
from forgewright.services.github import GitHub
from forgewright.services.release import (
    ReleaseExecutor,
    ReleaseOptions,
    ReleaseState,
    tag_name_for,
)

RELEASES_URL = "https://api.github.com/repos/acme/widget/releases"


@dataclass
class FakeRepo:
    """Stands in for Repository; records every mutating call."""

    path: Path = Path("/repo")
    entries: tuple[StatusEntry, ...] = ()
    remote: str | None = "git@github.com:acme/widget.git"
    tag_error: GitError | None = None
    push_error: GitError | None = None
    calls: list[tuple[str, ...]] = field(default_factory=list)

    def status(self) -> Result[GitStatus, GitError]:
        return Ok(GitStatus(branch="main", entries=self.entries))

    def create_tag(self, name: str, message: str) -> Result[None, GitError]:
        self.calls.append(("tag", name, message))
        return Err(self.tag_error) if self.tag_error else Ok(None)

    def push_tag(self, name: str, remote: str = "origin") -> Result[None, GitError]:
        self.calls.append(("push", name))
        return Err(self.push_error) if self.push_error else Ok(None)

    def remote_url(self, remote: str = "origin") -> str | None:
        return self.remote


@pytest.fixture(autouse=True)
def no_cli(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(github_mod, "is_available", lambda cmd, cwd: False)
    monkeypatch.setattr(retry_mod, "sleep", lambda _delay: None)


def make_executor(
    repo: FakeRepo,
    http: MockHttpClient | None = None,
    token: str | None = "tok",
    settings: GitHubConfig | None = None,
    console: MockConsole | None = None,
) -> ReleaseExecutor:
    github = GitHub(http=http or MockHttpClient(), token=token, cwd=repo.path)
    return ReleaseExecutor(
        repo=repo,  # type: ignore[arg-type]
        github=github,
        settings=settings or GitHubConfig(),
        console=console,
    )


def test_tag_name_for() -> None:
    assert tag_name_for("1.2.0") == "v1.2.0"
    assert tag_name_for("v1.2.0") == "v1.2.0"


class TestExecute:
    def test_dirty_tree_creates_no_tag(self) -> None:
        repo = FakeRepo(entries=(StatusEntry(xy=" M", path="src/app.py"),))

        result = make_executor(repo).execute("1.1.0", "notes")

        assert isinstance(result, Err)
        assert result.error.kind == "dirty_worktree"
        assert result.error.hint is not None
        assert "src/app.py" in result.error.hint
        assert repo.calls == []

    def test_dry_run_touches_nothing(self) -> None:
        repo = FakeRepo()
        executor = make_executor(repo)

        result = executor.execute("1.1.0", "notes", ReleaseOptions(dry_run=True))

        assert isinstance(result, Ok)
        assert result.value.tag_created is False
        assert repo.calls == []
        assert executor.state == ReleaseState.DRY_RUN_REPORTED

    def test_publishes_through_rest(self) -> None:
        repo = FakeRepo()
        http = MockHttpClient()
        http.set_json("POST", RELEASES_URL, {"html_url": "https://github.com/acme/widget/r/1"})
        console = MockConsole()
        executor = make_executor(repo, http, console=console)

        result = executor.execute("1.1.0", "## 1.1.0\n")

        assert isinstance(result, Ok)
        assert result.value.tag_created is True
        assert result.value.release_url == "https://github.com/acme/widget/r/1"
        assert repo.calls == [("tag", "v1.1.0", "Release 1.1.0"), ("push", "v1.1.0")]
        assert http.requests[0].payload is not None
        assert http.requests[0].payload["name"] == "1.1.0"
        assert http.requests[0].payload["body"] == "## 1.1.0\n"
        assert executor.history == [
            ReleaseState.IDLE,
            ReleaseState.VALIDATED,
            ReleaseState.TAGGED,
            ReleaseState.PUSHED,
            ReleaseState.PUBLISHED,
            ReleaseState.DONE,
        ]
        assert console.find("release: pushed -> published")

    def test_skip_github(self) -> None:
        repo = FakeRepo()
        http = MockHttpClient()
        executor = make_executor(repo, http)

        result = executor.execute("1.1.0", "notes", ReleaseOptions(skip_github=True))

        assert isinstance(result, Ok)
        assert result.value.release_url is None
        assert http.requests == []
        assert executor.history[-2:] == [ReleaseState.SKIPPED, ReleaseState.DONE]

    def test_non_github_remote_is_skipped(self) -> None:
        repo = FakeRepo(remote="https://gitlab.com/acme/widget.git")
        executor = make_executor(repo)

        result = executor.execute("1.1.0", "notes")

        assert isinstance(result, Ok)
        assert ReleaseState.SKIPPED in executor.history

    def test_release_notes_disabled(self) -> None:
        http = MockHttpClient()
        http.set_json("POST", RELEASES_URL, {"html_url": "u"})
        executor = make_executor(FakeRepo(), http, settings=GitHubConfig(release_notes=False))

        executor.execute("1.1.0", "## 1.1.0\n")

        assert http.requests[0].payload is not None
        assert http.requests[0].payload["body"] == ""

    def test_missing_token_after_push(self) -> None:
        repo = FakeRepo()

        result = make_executor(repo, token=None).execute("1.1.0", "notes")

        assert isinstance(result, Err)
        assert result.error.kind == "missing_credential"
        assert ("push", "v1.1.0") in repo.calls

    def test_existing_tag(self) -> None:
        repo = FakeRepo(tag_error=GitError(command="tag", message="tag 'v1.1.0' already exists"))
        executor = make_executor(repo)

        result = executor.execute("1.1.0", "notes")

        assert isinstance(result, Err)
        assert result.error.kind == "tag_failed"
        assert ("push", "v1.1.0") not in repo.calls
        assert executor.state == ReleaseState.VALIDATED

    def test_push_failure(self) -> None:
        repo = FakeRepo(push_error=GitError(command="push", message="rejected"))

        result = make_executor(repo).execute("1.1.0", "notes")

        assert isinstance(result, Err)
        assert result.error.kind == "push_failed"

    def test_rest_failure_is_retried(self) -> None:
        http = MockHttpClient()
        http.set_json(
            "POST",
            RELEASES_URL,
            HttpError(url=RELEASES_URL, status=502, message="Bad Gateway"),
            {"html_url": "u"},
        )
        console = MockConsole()

        result = make_executor(FakeRepo(), http, console=console).execute("1.1.0", "notes")

        assert isinstance(result, Ok)
        assert len(http.requests) == 2
        assert console.find("publish:")

    def test_prefers_cli(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(github_mod, "is_available", lambda cmd, cwd: True)

        def fake_run(
            cmd: list[str], cwd: Path, env: object = None, *, timeout: float | None = None
        ) -> Result[str, ProcessError]:
            return Ok("https://github.com/acme/widget/releases/tag/v1.1.0\n")

        monkeypatch.setattr(github_mod, "run_process", fake_run)
        http = MockHttpClient()

        result = make_executor(FakeRepo(), http, token=None).execute("1.1.0", "notes")

        assert isinstance(result, Ok)
        assert result.value.release_url == "https://github.com/acme/widget/releases/tag/v1.1.0"
        assert http.requests == []

    def test_cli_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(github_mod, "is_available", lambda cmd, cwd: True)

        def fake_run(
            cmd: list[str], cwd: Path, env: object = None, *, timeout: float | None = None
        ) -> Result[str, ProcessError]:
            return Err(ProcessError(tuple(cmd), 1, "", "HTTP 422: release already exists"))

        monkeypatch.setattr(github_mod, "run_process", fake_run)

        result = make_executor(FakeRepo()).execute("1.1.0", "notes")

        assert isinstance(result, Err)
        assert result.error.kind == "publish_failed"
        assert result.error.hint == "HTTP 422: release already exists"
