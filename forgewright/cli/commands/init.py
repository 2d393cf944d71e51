"""Init command - write a default forgewright.toml."""

from __future__ import annotations

import os
from pathlib import Path

import typer

from forgewright.ai.provider import api_key_env_var, resolve_api_key
from forgewright.cli.commands._helpers import exit_with_code
from forgewright.core.config import (
    CONFIG_FILENAME,
    AIProvider,
    parse_provider,
    render_default_config,
)
from forgewright.core.errors import ErrorCode
from forgewright.output.console import RichConsole, Style

_PROVIDER_NAMES = ", ".join(p.value for p in AIProvider)


def init(
    provider: str | None = typer.Option(
        None,
        "--provider",
        "-p",
        help=f"AI provider ({_PROVIDER_NAMES})",
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config"),
) -> None:
    """Create forgewright.toml in the current directory."""
    console = RichConsole()
    path = Path.cwd() / CONFIG_FILENAME

    if path.exists() and not force:
        console.error(f"{CONFIG_FILENAME} already exists. Use --force to overwrite.")
        exit_with_code(int(ErrorCode.USER_ERROR))

    name = provider
    if name is None:
        name = typer.prompt(
            f"AI provider ({_PROVIDER_NAMES})",
            default=AIProvider.ANTHROPIC.value,
        )
    selected = parse_provider(name)
    if selected is None:
        console.error(f"Invalid provider: {name}. Use one of: {_PROVIDER_NAMES}")
        exit_with_code(int(ErrorCode.USER_ERROR))

    try:
        path.write_text(render_default_config(selected), encoding="utf-8")
    except OSError as e:
        console.error(f"failed to write {path}: {e}")
        exit_with_code(int(ErrorCode.IO_ERROR))

    console.success(f"Created {CONFIG_FILENAME}")
    console.info(f"Provider: {selected.value}")

    env_var = api_key_env_var(selected)
    if env_var is not None and resolve_api_key(selected, os.environ) is None:
        console.warning(f"{env_var} not set. You'll need to set it before running forgewright.")

    console.newline()
    console.print("Next steps:", Style.BOLD)
    step = 1
    if env_var is not None:
        console.print(f"  {step}. Set the {env_var} environment variable")
        step += 1
    console.print(f"  {step}. Run 'forgewright status' to check release readiness")
