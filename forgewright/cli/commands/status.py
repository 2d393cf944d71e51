"""Status command - release readiness of the current repository."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from forgewright.cli.commands._helpers import unwrap_or_exit
from forgewright.cli.context import build_context
from forgewright.core.model import AnalysisResult, ReadinessScore, WorkUnit
from forgewright.services.engine import analyze

_console = Console(highlight=False)

_STATUS_ICONS = {"complete": "✓", "in_progress": "◐", "abandoned": "✗"}
_VALUE_STYLES = {"high": "green", "medium": "yellow", "low": "dim"}


def _json_default(obj: object) -> str:
    if isinstance(obj, datetime):
        return obj.isoformat()
    raise TypeError(f"not JSON serializable: {type(obj).__name__}")


def analysis_to_json(result: AnalysisResult) -> str:
    data = asdict(result)
    # Commits are an input, not part of the report.
    data.pop("commits", None)
    return json.dumps(data, indent=2, default=_json_default)


def _bar(value: float, maximum: float, width: int = 10) -> Text:
    filled = round(width * value / maximum) if maximum else 0
    filled = max(0, min(width, filled))
    text = Text("█" * filled, style="green")
    text.append("░" * (width - filled), style="dim")
    return text


def render_readiness(result: AnalysisResult) -> Panel:
    score: ReadinessScore = result.readiness
    table = Table.grid(padding=(0, 2))
    table.add_column()
    table.add_column(justify="right")
    table.add_column()

    for label, value, maximum in (
        ("Completeness", score.completeness, 40),
        ("Value", score.value, 30),
        ("Coherence", score.coherence, 20),
        ("Stability", score.stability, 10),
    ):
        table.add_row(label, f"{value:g}/{maximum}", _bar(value, maximum))

    table.add_row("", "", "")
    table.add_row("Current version", Text(result.current_version, style="cyan"), "")
    if result.suggested_version:
        table.add_row("Suggested version", Text(result.suggested_version, style="green"), "")
    else:
        table.add_row(Text("No release suggested", style="dim"), "", "")

    verdict = "[green]READY[/green]" if score.ready else "[yellow]NOT READY[/yellow]"
    return Panel(
        table,
        title=f"[bold]Release Readiness: {score.total:g}/100[/bold]  {verdict}",
        title_align="left",
        border_style="green" if score.ready else "yellow",
        padding=(0, 1),
    )


def render_work_unit(unit: WorkUnit) -> Text:
    text = Text("  ")
    text.append(_STATUS_ICONS.get(unit.status, "?"))
    text.append(" ")
    text.append(unit.name, style="bold")
    text.append(f" ({unit.status})", style="dim")
    text.append(" - ")
    text.append(unit.value, style=_VALUE_STYLES.get(unit.value, ""))
    text.append(f" value, {len(unit.commits)} commits")
    if unit.description:
        text.append(f"\n    {unit.description}", style="dim")
    return text


def status(
    as_json: bool = typer.Option(False, "--json", help="Print the analysis as JSON"),
) -> None:
    """Analyze commits since the last release and report readiness."""
    ctx = build_context()
    result = unwrap_or_exit(analyze(ctx.engine), ctx.console)

    if as_json:
        typer.echo(analysis_to_json(result))
        return

    _console.print()
    _console.print(render_readiness(result))
    _console.print()

    if result.work_units:
        _console.print("[bold]Work Units:[/bold]")
        for unit in result.work_units:
            _console.print(render_work_unit(unit))
    else:
        _console.print("[dim]No work units detected[/dim]")

    _console.print()
    if result.readiness.reasoning:
        _console.print(Text(f"Analysis: {result.readiness.reasoning}", style="dim"))
