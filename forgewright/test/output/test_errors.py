"""Tests for output/errors.py."""

from __future__ import annotations

from pathlib import Path

import pytest

from forgewright.ai.errors import AIError
from forgewright.core.config import ConfigError
from forgewright.core.errors import ErrorCode
from forgewright.git.repository import GitError
from forgewright.output.console import MockConsole, Style
from forgewright.output.errors import PipelineError, error_exit_code, print_error
from forgewright.services.release import ReleaseError


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (ConfigError("bad toml"), ErrorCode.ENV_ERROR),
        (GitError(command="log", message="not a git repository"), ErrorCode.ENV_ERROR),
        (AIError(kind="missing_credential", message="no key"), ErrorCode.ENV_ERROR),
        (AIError(kind="request_failed", message="HTTP 500"), ErrorCode.NETWORK_ERROR),
        (AIError(kind="invalid_response", message="not JSON"), ErrorCode.NETWORK_ERROR),
        (ReleaseError(kind="dirty_worktree", message="dirty"), ErrorCode.RELEASE_ERROR),
        (ReleaseError(kind="missing_credential", message="no token"), ErrorCode.ENV_ERROR),
        (PermissionError("CHANGELOG.md"), ErrorCode.IO_ERROR),
    ],
)
def test_exit_codes(error: PipelineError, code: ErrorCode) -> None:
    assert error_exit_code(error) == int(code)


def test_config_error_shows_path() -> None:
    console = MockConsole()
    print_error(ConfigError("mode must be 'auto' or 'confirm'", Path("forgewright.toml")), console)

    assert console.messages == [
        "error: mode must be 'auto' or 'confirm'",
        "config: forgewright.toml",
    ]


def test_hint_is_dimmed() -> None:
    console = MockConsole()
    error = ReleaseError(
        kind="dirty_worktree",
        message="working directory is not clean",
        hint="Commit or stash changes first: a.py",
    )

    print_error(error, console)

    assert console.messages[0] == "error: working directory is not clean"
    assert console.with_style(Style.DIM) == ["hint: Commit or stash changes first: a.py"]


def test_git_error_names_command() -> None:
    console = MockConsole()
    print_error(GitError(command="push", message="rejected"), console)
    assert console.messages == ["error: git push: rejected"]
