"""Subprocess execution with Result-based error handling.

This is the only module allowed to call ``subprocess`` directly; git and the
host CLI go through ``run``.

Usage:
    match run(["git", "describe", "--tags", "--abbrev=0"], cwd=repo_root):
        case Ok(stdout):
            tag = stdout.strip()
        case Err(error):
            print(error.stderr)
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from forgewright.core.result import Err, Ok, Result

__all__ = ["ProcessError", "is_available", "run"]

_AVAILABILITY_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code (-1 when the process could not start or timed out).
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return its stdout.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on exit 0, Err(ProcessError) otherwise.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=str(e),
            )
        )

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


def is_available(cmd: list[str], cwd: Path) -> bool:
    """Run an optional availability check (e.g. ``gh --version``).

    Any failure, including a missing executable, means "unavailable".
    """
    return isinstance(run(cmd, cwd=cwd, timeout=_AVAILABILITY_TIMEOUT_SECONDS), Ok)
