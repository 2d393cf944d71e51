"""Git repository abstraction.

The Repository class answers every question the release pipeline asks of
version control (commits since the last release, latest tag, branch,
cleanliness, remote URL) and performs the two mutations (annotated tag,
tag push). All operations return Result types.

Usage:
    repo = Repository(Path("."))

    match repo.latest_tag():
        case Ok(tag):
            since = tag.hash if tag else None
        case Err(e):
            print(f"Error: {e.message}")

    commits = repo.commits(since)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from forgewright.core.model import Commit, Tag
from forgewright.core.result import Err, Ok, Result
from forgewright.git.log import LOG_FORMAT, LogParseError, log_range, parse_log
from forgewright.platform.process import ProcessError
from forgewright.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_DEFAULT_REMOTE = "origin"

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry in git status.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Working tree state.

    Attributes:
        branch: Current branch name ("" when unknown)
        entries: Staged, unstaged and untracked entries
    """

    branch: str
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        """True if working tree has no changes."""
        return len(self.entries) == 0

    @property
    def dirty_paths(self) -> list[str]:
        return [e.path for e in self.entries]


class Repository:
    """Git repository abstraction.

    Attributes:
        path: Path to the repository (any directory inside the work tree)
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def commits(self, since: str | None = None) -> Result[list[Commit], GitError]:
        """Commits reachable from HEAD but not from ``since`` (newest first).

        Args:
            since: Commit hash or tag name; None for the whole history

        Returns:
            Ok(commits), possibly empty, or Err(GitError) when git fails
            (not a repository, unknown revision, corrupted history).
        """
        revisions = log_range(since)
        result = self._run(["log", revisions, f"--format={LOG_FORMAT}", "--name-only"])
        if isinstance(result, Err):
            return Err(self._error("log", result.error, "git log failed"))

        try:
            return Ok(parse_log(result.value))
        except LogParseError as e:
            return Err(GitError(command="log", message=f"unexpected git log output: {e}"))

    def latest_tag(self) -> Result[Tag | None, GitError]:
        """Most recent tag reachable from HEAD.

        Returns:
            Ok(None) when the history has no tag (or no commit yet),
            Ok(Tag) otherwise, Err(GitError) if the tag cannot be resolved.
        """
        described = self._run(["describe", "--tags", "--abbrev=0"])
        if isinstance(described, Err):
            return Ok(None)

        name = described.value.strip()
        if not name:
            return Ok(None)

        rev = self._run(["rev-list", "-n", "1", name])
        if isinstance(rev, Err):
            return Err(self._error("rev-list", rev.error, f"cannot resolve tag {name}"))

        date = self._run(["log", "-1", "--format=%aI", name])
        if isinstance(date, Err):
            return Err(self._error("log", date.error, f"cannot read date of tag {name}"))

        try:
            when = datetime.fromisoformat(date.value.strip())
        except ValueError:
            return Err(GitError(command="log", message=f"invalid date for tag {name}"))

        return Ok(Tag(name=name, hash=rev.value.strip(), date=when))

    def status(self) -> Result[GitStatus, GitError]:
        """Runs ``git status --porcelain=v1 -b`` and parses the output."""
        result = self._run(["status", "--porcelain=v1", "-b"])
        match result:
            case Err(e):
                return Err(self._error("status", e, "git status failed"))
            case Ok(stdout):
                return Ok(self._parse_status(stdout))

    def current_branch(self) -> str | None:
        """Current branch name, None if detached HEAD or error."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def remote_url(self, remote: str = _DEFAULT_REMOTE) -> str | None:
        """URL of ``remote``, None when it is not configured."""
        result = self._run(["remote", "get-url", remote])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def create_tag(self, name: str, message: str) -> Result[None, GitError]:
        """Create an annotated tag at HEAD. Fails if the tag already exists."""
        result = self._run(["tag", "-a", name, "-m", message])
        if isinstance(result, Err):
            return Err(self._error("tag", result.error, f"failed to create tag {name}"))
        return Ok(None)

    def push_tag(self, name: str, remote: str = _DEFAULT_REMOTE) -> Result[None, GitError]:
        """Push exactly one tag to ``remote``."""
        result = self._run(["push", remote, f"refs/tags/{name}"])
        if isinstance(result, Err):
            return Err(self._error("push", result.error, f"failed to push tag {name}"))
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)

    @staticmethod
    def _error(command: str, error: ProcessError, fallback: str) -> GitError:
        return GitError(
            command=command,
            message=error.stderr.strip() or error.stdout.strip() or fallback,
            returncode=error.returncode,
        )

    def _parse_status(self, output: str) -> GitStatus:
        """Parse git status --porcelain=v1 -b output."""
        lines = [ln for ln in output.splitlines() if ln.strip()]
        if not lines:
            return GitStatus(branch="")

        branch = ""
        body = lines
        if lines[0].startswith("##"):
            # ## branch...upstream [ahead N]
            branch = lines[0][2:].strip().split(" [", 1)[0].split("...", 1)[0].strip()
            body = lines[1:]

        entries = tuple(
            StatusEntry(xy=line[:2], path=line[3:]) for line in body if len(line) >= 4
        )
        return GitStatus(branch=branch, entries=entries)
