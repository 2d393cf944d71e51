"""Release pipeline services."""

from .bump import bump_version, parse_version, suggest_version_bump
from .engine import EngineContext, analyze, execute_release, generate_changelog
from .github import GitHub, RepoRef, parse_repo
from .release import ReleaseError, ReleaseExecutor, ReleaseOptions, ReleaseState

__all__ = [
    "EngineContext",
    "GitHub",
    "ReleaseError",
    "ReleaseExecutor",
    "ReleaseOptions",
    "ReleaseState",
    "RepoRef",
    "analyze",
    "bump_version",
    "execute_release",
    "generate_changelog",
    "parse_repo",
    "parse_version",
    "suggest_version_bump",
]
