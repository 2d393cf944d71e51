"""GitHub gateway: repository resolution, releases and CI status.

Release creation prefers the ``gh`` CLI when it is installed and falls back
to the REST API, which needs a token. Read calls (latest release, workflow
runs) always use REST; absent data is reported as None/"unknown", never as
an error the pipeline must handle.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Literal
from urllib.parse import quote

from forgewright.core.result import Err, Ok, Result
from forgewright.core.structured import as_obj_list, as_str_dict, get_list, get_str
from forgewright.git.repository import Repository
from forgewright.net.http import HttpClient, HttpError
from forgewright.platform.process import ProcessError, is_available
from forgewright.platform.process import run as run_process

__all__ = [
    "GITHUB_API_URL",
    "GITHUB_TOKEN_ENV_VARS",
    "GitHub",
    "LatestRelease",
    "ReleaseRequest",
    "RepoRef",
    "WorkflowStatus",
    "is_ci",
    "parse_repo",
    "repo_from_remote",
    "resolve_token",
]

GITHUB_API_URL = "https://api.github.com"
GITHUB_HOST = "github.com"
GITHUB_TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")
_GH_TIMEOUT_SECONDS = 60.0

WorkflowStatus = Literal["success", "failure", "pending", "unknown"]

# git@github.com:owner/repo.git, ssh://git@github.com/owner/repo, https://github.com/owner/repo
_SCP_RE = re.compile(r"^[\w.-]+@(?P<host>[^:/]+):(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$")
_URL_RE = re.compile(
    r"^(?:https?|ssh|git)://(?:[^@/]+@)?(?P<host>[^:/]+)(?::\d+)?/"
    r"(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$"
)


@dataclass(frozen=True, slots=True)
class RepoRef:
    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    tag: str
    title: str
    body: str
    draft: bool = False
    prerelease: bool = False


@dataclass(frozen=True, slots=True)
class LatestRelease:
    tag: str
    url: str | None


def parse_repo(url: str, host: str = GITHUB_HOST) -> RepoRef | None:
    """Owner/name from an SSH or HTTPS remote URL on ``host``.

    Returns None for other hosts or unrecognised URL shapes.
    """
    text = url.strip()
    m = _SCP_RE.match(text) or _URL_RE.match(text)
    if m is None or m.group("host").lower() != host.lower():
        return None
    return RepoRef(owner=m.group("owner"), name=m.group("name"))


def repo_from_remote(repo: Repository, remote: str = "origin") -> RepoRef | None:
    url = repo.remote_url(remote)
    if url is None:
        return None
    return parse_repo(url)


def resolve_token(environ: Mapping[str, str]) -> str | None:
    for var in GITHUB_TOKEN_ENV_VARS:
        token = environ.get(var, "").strip()
        if token:
            return token
    return None


def is_ci(environ: Mapping[str, str]) -> bool:
    """True when running under a CI service."""
    for var in ("CI", "GITHUB_ACTIONS"):
        if environ.get(var, "").strip().lower() in ("1", "true", "yes"):
            return True
    return False


class GitHub:
    """Gateway to one GitHub account context.

    Attributes:
        http: JSON client for the REST API
        token: Bearer token, required only for REST release creation
        cwd: Working directory for ``gh`` invocations
    """

    def __init__(
        self,
        http: HttpClient,
        token: str | None,
        cwd: Path,
        api_url: str = GITHUB_API_URL,
    ) -> None:
        self.http = http
        self.token = token
        self.cwd = cwd
        self.api_url = api_url.rstrip("/")

    @property
    def has_token(self) -> bool:
        return bool(self.token)

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def cli_available(self) -> bool:
        return is_available(["gh", "--version"], cwd=self.cwd)

    def create_release_with_cli(
        self,
        repo: RepoRef,
        request: ReleaseRequest,
    ) -> Result[str | None, ProcessError]:
        """Create a release with ``gh``; returns the release URL it prints."""
        cmd = [
            "gh",
            "release",
            "create",
            request.tag,
            "--repo",
            repo.slug,
            "--title",
            request.title,
            "--notes",
            request.body,
        ]
        if request.draft:
            cmd.append("--draft")
        if request.prerelease:
            cmd.append("--prerelease")

        result = run_process(cmd, cwd=self.cwd, timeout=_GH_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return result
        lines = [ln.strip() for ln in result.value.splitlines() if ln.strip()]
        return Ok(lines[-1] if lines else None)

    def create_release(
        self,
        repo: RepoRef,
        request: ReleaseRequest,
    ) -> Result[str | None, HttpError]:
        """Create a release through the REST API; returns its html_url."""
        url = f"{self.api_url}/repos/{repo.slug}/releases"
        payload: dict[str, object] = {
            "tag_name": request.tag,
            "name": request.title,
            "body": request.body,
            "draft": request.draft,
            "prerelease": request.prerelease,
        }
        result = self.http.post_json(url, payload, headers=self._headers())
        if isinstance(result, Err):
            return result
        return Ok(get_str(result.value, "html_url"))

    def latest_release(self, repo: RepoRef) -> Result[LatestRelease | None, HttpError]:
        """Latest published release; Ok(None) when the repository has none."""
        url = f"{self.api_url}/repos/{repo.slug}/releases/latest"
        result = self.http.get_json(url, headers=self._headers())
        if isinstance(result, Err):
            if result.error.status == 404:
                return Ok(None)
            return result

        tag = get_str(result.value, "tag_name")
        if tag is None:
            return Ok(None)
        return Ok(LatestRelease(tag=tag, url=get_str(result.value, "html_url")))

    def workflow_status(self, repo: RepoRef, branch: str) -> WorkflowStatus:
        """Status of the most recent workflow run on ``branch``."""
        query = f"branch={quote(branch, safe='')}&per_page=1"
        url = f"{self.api_url}/repos/{repo.slug}/actions/runs?{query}"
        result = self.http.get_json(url, headers=self._headers())
        if isinstance(result, Err):
            return "unknown"

        runs = as_obj_list(get_list(result.value, "workflow_runs"))
        if not runs:
            return "unknown"
        run = as_str_dict(runs[0])
        if run is None:
            return "unknown"

        if get_str(run, "status") != "completed":
            return "pending"
        if get_str(run, "conclusion") == "success":
            return "success"
        return "failure"
