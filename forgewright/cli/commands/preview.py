"""Preview command - show the next release without creating it."""

from __future__ import annotations

from rich.console import Console
from rich.markdown import Markdown
from rich.rule import Rule

from forgewright.cli.commands._helpers import unwrap_or_exit
from forgewright.cli.context import build_context
from forgewright.services.engine import analyze, generate_changelog

_console = Console(highlight=False)


def preview() -> None:
    """Show the suggested version and the changelog it would ship with."""
    ctx = build_context()
    analysis = unwrap_or_exit(analyze(ctx.engine), ctx.console)

    version = analysis.suggested_version
    if version is None:
        ctx.console.warning("Not ready for release. Run 'forgewright status' for details.")
        return

    changelog = unwrap_or_exit(generate_changelog(ctx.engine, analysis, version), ctx.console)

    _console.print()
    _console.print(Rule("[bold]RELEASE PREVIEW[/bold]", align="left"))
    _console.print(f"Version: [green]{version}[/green]")
    _console.print(f"From:    [cyan]{analysis.current_version}[/cyan]")
    _console.print()
    _console.print(Rule("[bold]CHANGELOG[/bold]", align="left"))
    _console.print(Markdown(changelog))
    _console.print(Rule(style="dim"))
    _console.print("Run [cyan]forgewright release[/cyan] to create this release.")
