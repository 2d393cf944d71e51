"""Reasoning-provider backed analysis: work units, readiness, changelog."""

from .analyzer import Analyzer, find_orphan_references
from .changelog import ChangelogSynthesizer, merge_changelog, write_changelog_file
from .errors import AIError
from .prompts import ReadinessCriteria
from .provider import ChatModel, ProviderSettings, create_model

__all__ = [
    "AIError",
    "Analyzer",
    "ChangelogSynthesizer",
    "ChatModel",
    "ProviderSettings",
    "ReadinessCriteria",
    "create_model",
    "find_orphan_references",
    "merge_changelog",
    "write_changelog_file",
]
