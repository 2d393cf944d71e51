from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import typer

from forgewright.ai.analyzer import Analyzer
from forgewright.ai.changelog import ChangelogSynthesizer
from forgewright.ai.prompts import ReadinessCriteria
from forgewright.ai.provider import (
    OLLAMA_BASE_URL_ENV_VAR,
    ProviderSettings,
    create_model,
    resolve_api_key,
)
from forgewright.core.config import CONFIG_FILENAME, AIProvider, Config, load_config
from forgewright.core.errors import ErrorCode
from forgewright.core.result import Err
from forgewright.git.repository import Repository
from forgewright.net.http import RealHttpClient
from forgewright.output.console import ConsoleProtocol, RichConsole
from forgewright.services.engine import EngineContext
from forgewright.services.github import GitHub, resolve_token

# Model replies can take a while; host API calls should not.
_AI_TIMEOUT_SECONDS = 120.0
_GITHUB_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    engine: EngineContext
    console: ConsoleProtocol
    environ: Mapping[str, str]

    @property
    def config(self) -> Config:
        return self.engine.config


def _provider_settings(config: Config, environ: Mapping[str, str]) -> ProviderSettings:
    base_url = config.ai.base_url
    if base_url is None and config.ai.provider is AIProvider.OLLAMA:
        base_url = environ.get(OLLAMA_BASE_URL_ENV_VAR) or None
    return ProviderSettings(
        provider=config.ai.provider,
        model=config.ai.model,
        api_key=resolve_api_key(config.ai.provider, environ),
        base_url=base_url,
    )


def create_engine(
    root: Path,
    config: Config,
    environ: Mapping[str, str],
    console: ConsoleProtocol,
) -> EngineContext:
    """Wire the pipeline collaborators from configuration and credentials."""
    model = create_model(
        _provider_settings(config, environ),
        RealHttpClient(timeout=_AI_TIMEOUT_SECONDS),
    )
    criteria = ReadinessCriteria(
        threshold=config.thresholds.release,
        min_work_units=config.thresholds.min_work_units,
        require_tests=config.completeness.require_tests,
        require_review=config.completeness.require_review,
    )
    github = GitHub(
        http=RealHttpClient(timeout=_GITHUB_TIMEOUT_SECONDS),
        token=resolve_token(environ),
        cwd=root,
    )
    return EngineContext(
        config=config,
        repo=Repository(root),
        analyzer=Analyzer(model=model, criteria=criteria, console=console),
        changelog=ChangelogSynthesizer(model=model, console=console),
        github=github,
        console=console,
    )


def build_context(root: Path | None = None) -> CLIContext:
    """Load forgewright.toml from ``root`` (default: cwd) and build the engine."""
    root = (root or Path.cwd()).resolve()
    console = RichConsole()
    config_path = root / CONFIG_FILENAME

    if not config_path.exists():
        console.error(f"No {CONFIG_FILENAME} found in {root}")
        console.info("Run 'forgewright init' first.")
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config = load_config(config_path)
    if isinstance(config, Err):
        console.error(config.error.message)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    environ = dict(os.environ)
    return CLIContext(
        root=root,
        engine=create_engine(root, config.value, environ, console),
        console=console,
        environ=environ,
    )
