"""Exit codes for CLI commands.

The numeric values are the process exit status and must remain stable:
- 0: Success
- 1: User error (bad flags, not ready without --force, cancelled)
- 2: Environment error (missing config, missing credential, not a repository)
- 3: Release error (dirty tree, tag/push/publish failed)
- 4: Network error (AI provider or host API unreachable)
- 5: I/O error (config or changelog file unreadable/unwritable)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    RELEASE_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
