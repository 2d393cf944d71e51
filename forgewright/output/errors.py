"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from forgewright.ai.errors import AIError
from forgewright.core.config import ConfigError
from forgewright.core.errors import ErrorCode
from forgewright.git.repository import GitError
from forgewright.output.console import Style
from forgewright.services.release import ReleaseError

if TYPE_CHECKING:
    from forgewright.output.console import ConsoleProtocol

__all__ = ["PipelineError", "error_exit_code", "print_error"]

PipelineError = ConfigError | GitError | AIError | ReleaseError | OSError


def print_error(error: PipelineError, console: ConsoleProtocol) -> None:
    """Print a pipeline error with its hint, if any."""
    match error:
        case ConfigError(message=message, path=path):
            console.error(message)
            if path is not None:
                console.print(f"config: {path}", Style.DIM)
        case GitError(command=command, message=message):
            console.error(f"git {command}: {message}")
        case AIError(message=message, hint=hint) | ReleaseError(message=message, hint=hint):
            console.error(message)
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case OSError():
            console.error(str(error))


def error_exit_code(error: PipelineError) -> int:
    """Process exit status for an error."""
    match error:
        case ConfigError():
            return int(ErrorCode.ENV_ERROR)
        case GitError():
            return int(ErrorCode.ENV_ERROR)
        case AIError(kind="missing_credential"):
            return int(ErrorCode.ENV_ERROR)
        case AIError():
            return int(ErrorCode.NETWORK_ERROR)
        case ReleaseError(kind="missing_credential"):
            return int(ErrorCode.ENV_ERROR)
        case ReleaseError():
            return int(ErrorCode.RELEASE_ERROR)
        case OSError():
            return int(ErrorCode.IO_ERROR)
