"""Git operations module.

Usage:
    from forgewright.git import Repository

    repo = Repository(Path("."))
    commits = repo.commits(since="v1.2.0")
    if commits.is_ok():
        for commit in commits.unwrap():
            print(commit.short_hash, commit.subject)
"""

from forgewright.git.log import LOG_FORMAT, parse_log
from forgewright.git.repository import (
    GitError,
    GitStatus,
    Repository,
    StatusEntry,
)

__all__ = [
    "LOG_FORMAT",
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
    "parse_log",
]
