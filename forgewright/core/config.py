"""Typed configuration loading and access.

The release pipeline consumes a frozen ``Config``; this module is the only
place that reads ``forgewright.toml``. Example::

    mode = "confirm"

    [ai]
    provider = "anthropic"
    # model = "claude-sonnet-4-20250514"

    [thresholds]
    release = 70
    min_work_units = 1

    [completeness]
    require_tests = true
    require_review = true

    [versioning]
    strategy = "semver"

    [github]
    create_release = true
    release_notes = true
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Literal

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_int, get_str, get_table, has_key

__all__ = [
    "CONFIG_FILENAME",
    "AIConfig",
    "AIProvider",
    "CompletenessConfig",
    "Config",
    "ConfigError",
    "GitHubConfig",
    "ThresholdsConfig",
    "VersioningConfig",
    "load_config",
    "parse_provider",
    "render_default_config",
]

CONFIG_FILENAME = "forgewright.toml"

ReleaseMode = Literal["auto", "confirm"]

DEFAULT_RELEASE_THRESHOLD = 70
DEFAULT_MIN_WORK_UNITS = 1


class AIProvider(StrEnum):
    """Supported reasoning providers (closed set)."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GOOGLE = "google"
    OLLAMA = "ollama"


def parse_provider(name: str) -> AIProvider | None:
    try:
        return AIProvider(name.strip().lower())
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class AIConfig:
    provider: AIProvider
    model: str | None = None
    base_url: str | None = None


@dataclass(frozen=True, slots=True)
class ThresholdsConfig:
    release: int = DEFAULT_RELEASE_THRESHOLD
    min_work_units: int = DEFAULT_MIN_WORK_UNITS


@dataclass(frozen=True, slots=True)
class CompletenessConfig:
    require_tests: bool = True
    require_review: bool = True


@dataclass(frozen=True, slots=True)
class VersioningConfig:
    strategy: Literal["semver"] = "semver"


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    create_release: bool = True
    release_notes: bool = True


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    ai: AIConfig
    mode: ReleaseMode = "confirm"
    thresholds: ThresholdsConfig = field(default_factory=ThresholdsConfig)
    completeness: CompletenessConfig = field(default_factory=CompletenessConfig)
    versioning: VersioningConfig = field(default_factory=VersioningConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)

    @classmethod
    def default(cls, provider: AIProvider) -> Config:
        return cls(ai=AIConfig(provider=provider))

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Result[Config, str]:
        """Create Config from parsed TOML, validating every field."""
        ai: StrDict = get_table(data, "ai") or {}
        thresholds: StrDict = get_table(data, "thresholds") or {}
        completeness: StrDict = get_table(data, "completeness") or {}
        versioning: StrDict = get_table(data, "versioning") or {}
        github: StrDict = get_table(data, "github") or {}

        provider_name = get_str(ai, "provider")
        if provider_name is None:
            return Err("[ai] provider is required")
        provider = parse_provider(provider_name)
        if provider is None:
            return Err(f"[ai] provider: unsupported provider '{provider_name}'")

        mode = get_str(data, "mode") or "confirm"
        if mode not in ("auto", "confirm"):
            return Err(f"mode must be 'auto' or 'confirm', got '{mode}'")

        release = _int_field(thresholds, "release", DEFAULT_RELEASE_THRESHOLD)
        if release is None or not 0 <= release <= 100:
            return Err("[thresholds] release must be an integer between 0 and 100")

        min_units = _int_field(thresholds, "min_work_units", DEFAULT_MIN_WORK_UNITS)
        if min_units is None or min_units < 0:
            return Err("[thresholds] min_work_units must be a non-negative integer")

        strategy = get_str(versioning, "strategy") or "semver"
        if strategy != "semver":
            return Err(f"[versioning] strategy: only 'semver' is supported, got '{strategy}'")

        flags: dict[str, bool] = {}
        for table_name, table, key in (
            ("completeness", completeness, "require_tests"),
            ("completeness", completeness, "require_review"),
            ("github", github, "create_release"),
            ("github", github, "release_notes"),
        ):
            value = _bool_field(table, key, True)
            if value is None:
                return Err(f"[{table_name}] {key} must be true or false")
            flags[key] = value

        return Ok(
            cls(
                ai=AIConfig(
                    provider=provider,
                    model=get_str(ai, "model"),
                    base_url=get_str(ai, "base_url"),
                ),
                mode="auto" if mode == "auto" else "confirm",
                thresholds=ThresholdsConfig(release=release, min_work_units=min_units),
                completeness=CompletenessConfig(
                    require_tests=flags["require_tests"],
                    require_review=flags["require_review"],
                ),
                versioning=VersioningConfig(),
                github=GitHubConfig(
                    create_release=flags["create_release"],
                    release_notes=flags["release_notes"],
                ),
            )
        )


def _int_field(table: StrDict, key: str, default: int) -> int | None:
    if not has_key(table, key):
        return default
    return get_int(table, key)


def _bool_field(table: StrDict, key: str, default: bool) -> bool | None:
    if not has_key(table, key):
        return default
    return get_bool(table, key)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and validate configuration from a TOML file."""
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    config = Config.from_dict(result.value)
    if isinstance(config, Err):
        return Err(ConfigError(f"Invalid configuration: {config.error}", path=path))
    return Ok(config.value)


def render_default_config(provider: AIProvider) -> str:
    """Render the template written by ``forgewright init``."""
    config = Config.default(provider)
    return f"""# Forgewright release configuration
mode = "{config.mode}"  # "auto" | "confirm"

[ai]
provider = "{config.ai.provider.value}"
# model = "..."  # optional: override the provider default model

[thresholds]
release = {config.thresholds.release}
min_work_units = {config.thresholds.min_work_units}

[completeness]
require_tests = {str(config.completeness.require_tests).lower()}
require_review = {str(config.completeness.require_review).lower()}

[versioning]
strategy = "{config.versioning.strategy}"

[github]
create_release = {str(config.github.create_release).lower()}
release_notes = {str(config.github.release_notes).lower()}
"""
