"""Tests for ai/analyzer.py."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from forgewright.ai.analyzer import (
    NO_CHANGES_REASONING,
    Analyzer,
    find_orphan_references,
    resolve_commit_refs,
)
from forgewright.ai.errors import AIError
from forgewright.core import retry as retry_mod
from forgewright.core.model import Author, Commit, WorkUnit
from forgewright.core.result import Err, Ok, Result
from forgewright.output.console import MockConsole

NOW = datetime(2026, 3, 1, tzinfo=UTC)


def make_commit(hash_: str, subject: str = "feat: something") -> Commit:
    return Commit(
        hash=hash_,
        short_hash=hash_[:7],
        subject=subject,
        body="",
        author=Author(name="Dev", email="dev@example.com"),
        date=datetime(2026, 2, 1, tzinfo=UTC),
    )


def make_unit(unit_id: str, commits: tuple[str, ...], name: str = "Login") -> WorkUnit:
    return WorkUnit(
        id=unit_id,
        name=name,
        description="",
        status="complete",
        value="high",
        commits=commits,
        created_at=NOW,
    )


@dataclass
class ScriptedModel:
    """ChatModel replaying canned replies in order."""

    replies: list[Result[str, AIError]]
    prompts: list[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return "mock/scripted"

    def generate(
        self,
        system: str,
        prompt: str,
        *,
        json_output: bool = False,
    ) -> Result[str, AIError]:
        self.prompts.append(prompt)
        return self.replies.pop(0)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(retry_mod, "sleep", lambda _delay: None)


A = "a" * 40
B = "b" * 40


class TestResolveCommitRefs:
    def test_short_and_full(self) -> None:
        commits = [make_commit(A), make_commit(B)]
        assert resolve_commit_refs(["aaaaaaa", B.upper()], commits) == (A, B)

    def test_unknown_and_too_short_kept(self) -> None:
        commits = [make_commit(A)]
        assert resolve_commit_refs(["aaa", "deadbeef"], commits) == ("aaa", "deadbeef")

    def test_ambiguous_prefix_kept(self) -> None:
        commits = [make_commit("abcd" + "1" * 36), make_commit("abcd" + "2" * 36)]
        assert resolve_commit_refs(["abcd"], commits) == ("abcd",)


class TestFindOrphanReferences:
    def test_no_orphans(self) -> None:
        assert find_orphan_references([make_unit("wu-1", (A,))], [make_commit(A)]) == []

    def test_partial_and_total(self) -> None:
        units = [make_unit("wu-1", (A, "cafe1234")), make_unit("wu-2", ("f00d",), name="Ghost")]
        warnings = find_orphan_references(units, [make_commit(A)])

        assert warnings == [
            "work unit 'Login' (wu-1) references unknown commits: cafe1234",
            "work unit 'Ghost' (wu-2) references no analyzed commit: f00d",
        ]


class TestDetectWorkUnits:
    def test_no_commits_no_request(self) -> None:
        model = ScriptedModel(replies=[])
        assert Analyzer(model).detect_work_units([]) == Ok([])
        assert model.prompts == []

    def test_assigns_local_ids_and_full_hashes(self) -> None:
        reply = {
            "workUnits": [
                {
                    "id": "model-chosen",
                    "name": "Login",
                    "description": "Password login",
                    "status": "complete",
                    "value": "high",
                    "commits": ["aaaaaaa"],
                },
                {
                    "name": "Docs",
                    "description": "README",
                    "status": "in_progress",
                    "value": "low",
                    "commits": ["bbbbbbb"],
                },
            ]
        }
        model = ScriptedModel(replies=[Ok(json.dumps(reply))])
        analyzer = Analyzer(model, clock=lambda: NOW)

        result = analyzer.detect_work_units([make_commit(A), make_commit(B, "docs: readme")])

        assert isinstance(result, Ok)
        assert [u.id for u in result.value] == ["wu-1", "wu-2"]
        assert result.value[0].commits == (A,)
        assert result.value[1].created_at == NOW
        assert "aaaaaaa" in model.prompts[0]

    def test_invalid_reply_is_not_retried(self) -> None:
        model = ScriptedModel(replies=[Ok('{"workUnits": "nope"}'), Ok('{"workUnits": []}')])

        result = Analyzer(model).detect_work_units([make_commit(A)])

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_response"
        assert len(model.prompts) == 1

    def test_transient_failure_is_retried(self) -> None:
        model = ScriptedModel(
            replies=[
                Err(AIError(kind="request_failed", message="anthropic: HTTP 429 rate limit")),
                Ok('{"workUnits": []}'),
            ]
        )
        console = MockConsole()

        result = Analyzer(model, console=console).detect_work_units([make_commit(A)])

        assert result == Ok([])
        assert len(model.prompts) == 2
        assert console.find("retrying in")


class TestEvaluateReadiness:
    @pytest.mark.parametrize(("ci_passing", "stability"), [(True, 10), (False, 0)])
    def test_nothing_to_score(self, ci_passing: bool, stability: float) -> None:
        model = ScriptedModel(replies=[])

        result = Analyzer(model).evaluate_readiness([], [], "1.0.0", ci_passing)

        assert isinstance(result, Ok)
        score = result.value
        assert (score.total, score.completeness, score.value, score.coherence) == (
            stability,
            0,
            0,
            0,
        )
        assert score.stability == stability
        assert score.ready is False
        assert score.reasoning == NO_CHANGES_REASONING
        assert model.prompts == []

    def test_scored_by_model(self) -> None:
        reply = {
            "total": 75,
            "completeness": 30,
            "value": 25,
            "coherence": 12,
            "stability": 8,
            "ready": True,
            "reasoning": "Good to go",
            "suggested_bump": "minor",
        }
        model = ScriptedModel(replies=[Ok(json.dumps(reply))])

        result = Analyzer(model).evaluate_readiness(
            [make_commit(A)], [make_unit("wu-1", (A,))], "1.2.0", ci_passing=False
        )

        assert isinstance(result, Ok)
        assert result.value.total == 75
        assert "1.2.0" in model.prompts[0]
