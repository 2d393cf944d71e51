"""Tests for services/bump.py."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from forgewright.core.model import Author, Commit, VersionBump, WorkUnit
from forgewright.services.bump import (
    SemVer,
    bump_version,
    has_breaking_change,
    parse_version,
    resolve_bump,
    suggest_version_bump,
)

WHEN = datetime(2026, 1, 1, tzinfo=UTC)


def make_commit(subject: str, body: str = "") -> Commit:
    return Commit(
        hash="f" * 40,
        short_hash="f" * 7,
        subject=subject,
        body=body,
        author=Author(name="Dev", email="dev@example.com"),
        date=WHEN,
    )


def make_unit(value: str) -> WorkUnit:
    return WorkUnit(
        id="wu-1",
        name="Unit",
        description="",
        status="complete",
        value=value,  # type: ignore[arg-type]
        commits=(),
        created_at=WHEN,
    )


class TestParseVersion:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("1.2.3", SemVer(1, 2, 3)),
            ("v10.0.7", SemVer(10, 0, 7)),
            ("2.0.0-rc.1+build5", SemVer(2, 0, 0)),
            ("not-a-version", SemVer(0, 0, 0)),
            ("", SemVer(0, 0, 0)),
        ],
    )
    def test_parse(self, text: str, expected: SemVer) -> None:
        assert parse_version(text) == expected

    def test_ordering(self) -> None:
        assert SemVer(1, 10, 0) > SemVer(1, 9, 9)


class TestBumpVersion:
    @pytest.mark.parametrize(
        ("version", "kind", "expected"),
        [
            ("1.2.3", "major", "2.0.0"),
            ("1.2.3", "minor", "1.3.0"),
            ("1.2.3", "patch", "1.2.4"),
            ("v1.2.3", "minor", "v1.3.0"),
            ("V1.2.3", "patch", "V1.2.4"),
            ("0.0.0", "patch", "0.0.1"),
        ],
    )
    def test_bump(self, version: str, kind: str, expected: str) -> None:
        assert bump_version(version, kind) == expected  # type: ignore[arg-type]

    @pytest.mark.parametrize("kind", ["major", "minor", "patch"])
    def test_bump_is_strictly_greater(self, kind: VersionBump) -> None:
        assert parse_version(bump_version("3.4.5", kind)) > SemVer(3, 4, 5)


class TestBreakingChange:
    @pytest.mark.parametrize(
        ("subject", "body"),
        [
            ("feat!: drop python 3.11", ""),
            ("refactor(api)!: rename endpoints", ""),
            ("BREAKING: new config format", ""),
            ("feat: new config", "Details.\n\nBREAKING CHANGE: old keys removed"),
            ("feat: new config", "BREAKING-CHANGE: old keys removed"),
        ],
    )
    def test_detected(self, subject: str, body: str) -> None:
        assert has_breaking_change([make_commit(subject, body)]) is True

    def test_not_breaking(self) -> None:
        assert has_breaking_change([make_commit("fix: handle breaking news feed")]) is False


class TestSuggestVersionBump:
    def test_breaking_wins(self) -> None:
        commits = [make_commit("feat: a"), make_commit("fix!: b")]
        assert suggest_version_bump(commits, [make_unit("high")]) == "major"

    def test_feature_commit(self) -> None:
        assert suggest_version_bump([make_commit("feat(ui): theme")], []) == "minor"

    def test_high_value_unit(self) -> None:
        assert suggest_version_bump([make_commit("chore: x")], [make_unit("high")]) == "minor"

    def test_patch(self) -> None:
        assert suggest_version_bump([make_commit("fix: typo")], [make_unit("low")]) == "patch"


class TestResolveBump:
    def test_suggestion_kept(self) -> None:
        assert resolve_bump("minor", [make_commit("fix: typo")], []) == "minor"

    def test_breaking_overrides_suggestion(self) -> None:
        assert resolve_bump("patch", [make_commit("feat!: new api")], []) == "major"

    def test_heuristic_without_suggestion(self) -> None:
        assert resolve_bump(None, [make_commit("feat: x")], []) == "minor"
