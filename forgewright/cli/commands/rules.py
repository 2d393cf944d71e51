"""Rules command - write AI editor instruction files for the release workflow."""

from __future__ import annotations

from pathlib import Path

import typer

from forgewright.cli.commands._helpers import exit_with_code
from forgewright.core.errors import ErrorCode
from forgewright.output.console import RichConsole, Style

CURSORRULES = """\
# Forgewright Release Workflow

You are working in a project that uses Forgewright for AI-first release management.

## Release Philosophy
- Releases happen when there's meaningful VALUE to ship, not on a calendar
- Commits are grouped into "Work Units": coherent bundles that deliver value
- Readiness is scored on completeness (40), value (30), coherence (20) and stability (10)

## Commands
- `forgewright status` - Check release readiness (0-100 score)
- `forgewright preview` - Preview the changelog before releasing
- `forgewright release` - Create a release when ready (default threshold: 70)

## Commit Conventions
Use conventional commits for best results:
- `feat:` New features
- `fix:` Bug fixes
- `docs:` Documentation
- `refactor:` Code changes without feature changes
- `test:` Adding tests
- `chore:` Maintenance tasks

## When to Release
Don't ask about releasing after every change. Let Forgewright decide when enough VALUE
has accumulated. Run `forgewright status` periodically to check readiness.
"""

CLAUDE_MD = """\
# Forgewright Project

This project uses **Forgewright** for release management.

## What is Forgewright?
A release tool built for AI-assisted development, where dozens of commits a day are
normal and per-commit release tooling stops being useful.

## Key Concepts
- **Work Units**: Coherent bundles of commits that deliver value (not individual commits)
- **Readiness Score**: 0-100, scored on completeness, value, coherence and stability
- **Release Threshold**: 70/100 by default

## Available Commands
```bash
forgewright status           # Check if ready to release
forgewright preview          # Preview changelog
forgewright release          # Create release
forgewright release --force  # Release even if not ready
```

## Release Workflow
1. Make changes and commit with conventional commits (feat:, fix:, etc.)
2. Periodically run `forgewright status` to check readiness
3. When the score reaches the threshold, run `forgewright release`
4. Forgewright writes a narrative changelog and creates the GitHub release

## Configuration
See `forgewright.toml` for configuration options (`forgewright init` creates it).
"""

COPILOT_INSTRUCTIONS = """\
# Forgewright Release Guidelines

This repository uses Forgewright for release management.

## Commit Message Format
Always use conventional commits:
- feat: A new feature
- fix: A bug fix
- docs: Documentation only
- refactor: Code change that neither fixes a bug nor adds a feature
- test: Adding missing tests
- chore: Changes to build process or auxiliary tools

## Release Process
- Do NOT manually create releases or tags
- Use `forgewright release` to create releases
- Check `forgewright status` before releasing

## Work Units
Forgewright groups commits into Work Units. A good Work Unit:
- Delivers complete, coherent value
- Has tests if adding features
- Is documented if user-facing
"""

# target -> (relative path, content)
RULE_FILES: dict[str, tuple[str, str]] = {
    "cursor": (".cursorrules", CURSORRULES),
    "claude": ("CLAUDE.md", CLAUDE_MD),
    "copilot": (".github/copilot-instructions.md", COPILOT_INSTRUCTIONS),
}
ALL_TARGETS = "all"
VALID_TARGETS = (*RULE_FILES, ALL_TARGETS)


def rules(
    target: str = typer.Argument(
        ALL_TARGETS,
        help=f"Editor to generate rules for ({', '.join(VALID_TARGETS)})",
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite existing files"),
) -> None:
    """Write AI editor rule files describing the release workflow."""
    console = RichConsole()

    console.newline()
    console.print("Forgewright Rules Generator", Style.BOLD)
    console.print("Generate AI editor configuration files", Style.DIM)
    console.newline()

    if target not in VALID_TARGETS:
        console.error(f"Unknown target: {target}")
        console.info(f"Valid targets: {', '.join(VALID_TARGETS)}")
        exit_with_code(int(ErrorCode.USER_ERROR))

    selected = list(RULE_FILES) if target == ALL_TARGETS else [target]
    root = Path.cwd()

    existing = [RULE_FILES[name][0] for name in selected if (root / RULE_FILES[name][0]).exists()]
    if existing and not force:
        console.error(f"{', '.join(existing)} already exists. Use --force to overwrite.")
        exit_with_code(int(ErrorCode.USER_ERROR))

    for name in selected:
        relative, content = RULE_FILES[name]
        path = root / relative
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            console.error(f"failed to write {path}: {e}")
            exit_with_code(int(ErrorCode.IO_ERROR))
        console.success(f"Created {relative}")

    console.newline()
    console.success("Rules generated successfully!")
    console.print("These files help AI assistants understand your release workflow.", Style.DIM)
