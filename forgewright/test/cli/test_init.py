"""Tests for the init command and top-level options."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from forgewright import __version__
from forgewright.cli.app import app
from forgewright.core.config import AIProvider, load_config
from forgewright.core.result import Ok

runner = CliRunner()


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    for var in ("ANTHROPIC_API_KEY", "OPENAI_API_KEY", "GOOGLE_API_KEY"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_writes_loadable_config(workdir: Path) -> None:
    result = runner.invoke(app, ["init", "--provider", "openai"])

    assert result.exit_code == 0, result.output
    assert "Created forgewright.toml" in result.output
    assert "OPENAI_API_KEY not set" in result.output

    config = load_config(workdir / "forgewright.toml")
    assert isinstance(config, Ok)
    assert config.value.ai.provider is AIProvider.OPENAI


def test_init_prompts_for_provider(workdir: Path) -> None:
    result = runner.invoke(app, ["init"], input="ollama\n")

    assert result.exit_code == 0, result.output
    assert "Provider: ollama" in result.output
    assert "not set" not in result.output


def test_init_refuses_to_overwrite(workdir: Path) -> None:
    (workdir / "forgewright.toml").write_text("mode = 'auto'\n", encoding="utf-8")

    result = runner.invoke(app, ["init", "-p", "google"])

    assert result.exit_code == 1
    assert (workdir / "forgewright.toml").read_text(encoding="utf-8") == "mode = 'auto'\n"


def test_init_force_overwrites(workdir: Path) -> None:
    (workdir / "forgewright.toml").write_text("mode = 'auto'\n", encoding="utf-8")

    result = runner.invoke(app, ["init", "-p", "google", "--force"])

    assert result.exit_code == 0, result.output
    assert "[ai]" in (workdir / "forgewright.toml").read_text(encoding="utf-8")


def test_init_invalid_provider(workdir: Path) -> None:
    result = runner.invoke(app, ["init", "-p", "mistral"])

    assert result.exit_code == 1
    assert "Invalid provider: mistral" in result.output
    assert not (workdir / "forgewright.toml").exists()


def test_status_without_config(workdir: Path) -> None:
    result = runner.invoke(app, ["status"])

    assert result.exit_code == 2
    assert "forgewright init" in result.output
