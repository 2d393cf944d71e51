"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer

from forgewright.core.result import Err, Ok, Result
from forgewright.output.console import ConsoleProtocol
from forgewright.output.errors import PipelineError, error_exit_code, print_error


def unwrap_or_exit[T](result: Result[T, PipelineError], console: ConsoleProtocol) -> T:
    """Return the Ok value, or print the error and exit with its code.

    Replaces the common pattern:
        match result:
            case Err(e):
                print_error(e, console)
                raise typer.Exit(code=error_exit_code(e))
            case Ok(value):
                ...
    """
    match result:
        case Ok(value):
            return value
        case Err(error):
            print_error(error, console)
            exit_with_code(error_exit_code(error))


def exit_with_code(code: int) -> NoReturn:
    """Exit with given code. Explicit helper for clarity."""
    raise typer.Exit(code=code)
