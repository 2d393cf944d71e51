"""Core domain types and logic."""

from .config import AIProvider, Config, ConfigError, load_config
from .errors import ErrorCode
from .model import (
    AnalysisResult,
    Commit,
    ReadinessScore,
    ReleaseResult,
    Tag,
    VersionBump,
    WorkUnit,
)
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "AIProvider",
    "Config",
    "ConfigError",
    "load_config",
    # errors
    "ErrorCode",
    # model
    "AnalysisResult",
    "Commit",
    "ReadinessScore",
    "ReleaseResult",
    "Tag",
    "VersionBump",
    "WorkUnit",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
