"""Release command - tag, push and publish the next version."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.rule import Rule

from forgewright.cli.commands._helpers import exit_with_code, unwrap_or_exit
from forgewright.cli.context import build_context
from forgewright.core.errors import ErrorCode
from forgewright.core.model import AnalysisResult
from forgewright.output.console import Style
from forgewright.services.engine import (
    analyze,
    execute_release,
    generate_changelog,
    next_version,
    update_changelog,
)
from forgewright.services.github import is_ci
from forgewright.services.release import ReleaseOptions

_console = Console(highlight=False)
_PREVIEW_LINES = 10


def _print_summary(analysis: AnalysisResult, version: str, changelog: str) -> None:
    lines = changelog.splitlines()
    _console.print()
    _console.print(Rule("[bold]Release Summary[/bold]", align="left"))
    _console.print(f"Version:    [green]{version}[/green]")
    _console.print(f"Work units: {len(analysis.complete_units)} complete")
    _console.print()
    _console.print(Rule("[bold]Changelog Preview[/bold]", align="left"))
    _console.print(Markdown("\n".join(lines[:_PREVIEW_LINES])))
    if len(lines) > _PREVIEW_LINES:
        _console.print("[dim]...[/dim]")
    _console.print()


def release(
    force: bool = typer.Option(False, "--force", "-f", help="Release even when not ready"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report what would happen"),
    ci: bool = typer.Option(
        False, "--ci", help="Never prompt for confirmation (implied when CI is set)"
    ),
    skip_github: bool = typer.Option(False, "--skip-github", help="Do not publish a release"),
) -> None:
    """Create the next release when the repository is ready."""
    ctx = build_context()
    console = ctx.console
    analysis = unwrap_or_exit(analyze(ctx.engine), console)
    score = analysis.readiness

    if not score.ready and not force:
        console.warning("Not ready for release.")
        console.print(
            f"Readiness: {score.total:g}/100 (need {ctx.config.thresholds.release}+)", Style.DIM
        )
        console.print(f"Reason: {score.reasoning}", Style.DIM)
        console.info("Use --force to release anyway.")
        exit_with_code(int(ErrorCode.USER_ERROR))

    version = next_version(analysis)
    changelog = unwrap_or_exit(generate_changelog(ctx.engine, analysis, version), console)

    if ctx.config.mode == "confirm" and not (ci or is_ci(ctx.environ)):
        _print_summary(analysis, version, changelog)
        if not typer.confirm(f"Create release {version}?", default=False):
            console.print("Release cancelled.")
            return

    options = ReleaseOptions(dry_run=dry_run, skip_github=skip_github)
    result = unwrap_or_exit(execute_release(ctx.engine, version, changelog, options), console)

    if dry_run:
        console.success(f"Dry run complete. Would release {version}")
        _console.print()
        _console.print(Markdown(changelog))
        return

    console.success(f"Released {version}")
    if result.release_url:
        console.print(f"GitHub release: {result.release_url}")

    path = unwrap_or_exit(update_changelog(ctx.engine, changelog), console)
    console.print(f"Updated {path.name}", Style.DIM)
