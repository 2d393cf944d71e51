from __future__ import annotations

import typer

from forgewright import __version__
from forgewright.cli.commands.init import init
from forgewright.cli.commands.preview import preview
from forgewright.cli.commands.release import release
from forgewright.cli.commands.rules import rules
from forgewright.cli.commands.status import status

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="AI-assisted release readiness, versioning and changelogs.",
)

app.command()(status)
app.command()(preview)
app.command()(release)
app.command()(init)
app.command()(rules)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_print_version,
        is_eager=True,
    ),
) -> None:
    del version


def main() -> None:
    app()
