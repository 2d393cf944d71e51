"""Validation of structured model replies.

Two contracts exist: the work-unit reply and the readiness reply. Both are
JSON objects; anything that does not conform is rejected with an
``invalid_response`` AIError rather than coerced. The only lenient fields are
dates: an unusable ``created_at`` becomes "now" and an unusable
``completed_at`` becomes None.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import UTC, datetime

from forgewright.ai.errors import AIError
from forgewright.core.model import (
    VERSION_BUMPS,
    WORK_UNIT_STATUSES,
    WORK_UNIT_VALUES,
    ReadinessScore,
    VersionBump,
    WorkUnitStatus,
    WorkUnitValue,
)
from forgewright.core.result import Err, Ok, Result
from forgewright.core.structured import StrDict, as_obj_list, as_str_dict, get_number

__all__ = [
    "SCORE_BOUNDS",
    "WorkUnitDraft",
    "coerce_date",
    "parse_json_reply",
    "validate_readiness",
    "validate_work_units",
]

SCORE_BOUNDS: dict[str, tuple[float, float]] = {
    "total": (0, 100),
    "completeness": (0, 40),
    "value": (0, 30),
    "coherence": (0, 20),
    "stability": (0, 10),
}

_FENCE_RE = re.compile(r"^```(?:json)?\s*\n(.*?)\n?```\s*$", re.DOTALL | re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class WorkUnitDraft:
    """A validated work unit before local identifiers are assigned."""

    name: str
    description: str
    status: WorkUnitStatus
    value: WorkUnitValue
    commits: tuple[str, ...]
    created_at: datetime
    completed_at: datetime | None


def _invalid(message: str) -> Err[AIError]:
    return Err(AIError(kind="invalid_response", message=f"invalid model response: {message}"))


def parse_json_reply(text: str) -> Result[object, AIError]:
    """Decode a JSON reply, tolerating a surrounding markdown code fence."""
    body = text.strip()
    fenced = _FENCE_RE.match(body)
    if fenced is not None:
        body = fenced.group(1).strip()
    try:
        return Ok(json.loads(body))
    except json.JSONDecodeError as e:
        return _invalid(f"not JSON ({e.msg} at line {e.lineno})")


def coerce_date(value: str | None) -> datetime | None:
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC."""
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _optional_str(item: StrDict, key: str) -> tuple[bool, str | None]:
    """(ok, value) for a key that may be absent, null or a string."""
    value = item.get(key)
    if value is None:
        return True, None
    if isinstance(value, str):
        return True, value
    return False, None


def _validate_unit(index: int, obj: object, now: datetime) -> Result[WorkUnitDraft, AIError]:
    where = f"workUnits[{index}]"
    item = as_str_dict(obj)
    if item is None:
        return _invalid(f"{where} is not an object")

    name = item.get("name")
    description = item.get("description")
    if not isinstance(name, str) or not name.strip():
        return _invalid(f"{where}.name must be a non-empty string")
    if not isinstance(description, str):
        return _invalid(f"{where}.description must be a string")

    status = item.get("status")
    if status not in WORK_UNIT_STATUSES:
        return _invalid(f"{where}.status must be one of {', '.join(WORK_UNIT_STATUSES)}")

    value = item.get("value")
    if value not in WORK_UNIT_VALUES:
        return _invalid(f"{where}.value must be one of {', '.join(WORK_UNIT_VALUES)}")

    raw_commits = as_obj_list(item.get("commits"))
    if raw_commits is None or not all(isinstance(c, str) for c in raw_commits):
        return _invalid(f"{where}.commits must be an array of strings")

    created_ok, created = _optional_str(item, "created_at")
    completed_ok, completed = _optional_str(item, "completed_at")
    if not created_ok or not completed_ok:
        return _invalid(f"{where} dates must be strings")

    return Ok(
        WorkUnitDraft(
            name=name.strip(),
            description=description.strip(),
            status=status,
            value=value,
            commits=tuple(str(c).strip() for c in raw_commits),
            created_at=coerce_date(created) or now,
            completed_at=coerce_date(completed),
        )
    )


def validate_work_units(obj: object, *, now: datetime) -> Result[list[WorkUnitDraft], AIError]:
    """Validate ``{"workUnits": [...]}``. Any ``id`` the model supplies is ignored."""
    root = as_str_dict(obj)
    if root is None:
        return _invalid("expected a JSON object")

    units = as_obj_list(root.get("workUnits"))
    if units is None:
        return _invalid("workUnits must be an array")

    drafts: list[WorkUnitDraft] = []
    for index, unit in enumerate(units):
        draft = _validate_unit(index, unit, now)
        if isinstance(draft, Err):
            return draft
        drafts.append(draft.value)
    return Ok(drafts)


def validate_readiness(obj: object) -> Result[ReadinessScore, AIError]:
    """Validate a readiness reply against the bounded score schema.

    The component sum is not recomputed; ``total`` is taken as given.
    """
    root = as_str_dict(obj)
    if root is None:
        return _invalid("expected a JSON object")

    scores: dict[str, float] = {}
    for key, (low, high) in SCORE_BOUNDS.items():
        number = get_number(root, key)
        if number is None:
            return _invalid(f"{key} must be a number")
        if not low <= number <= high:
            return _invalid(f"{key} must be between {low:g} and {high:g}, got {number:g}")
        scores[key] = number

    ready = root.get("ready")
    if not isinstance(ready, bool):
        return _invalid("ready must be a boolean")

    reasoning = root.get("reasoning")
    if not isinstance(reasoning, str):
        return _invalid("reasoning must be a string")

    bump_obj = root.get("suggested_bump")
    if bump_obj is not None and bump_obj not in VERSION_BUMPS:
        return _invalid(f"suggested_bump must be one of {', '.join(VERSION_BUMPS)}")
    bump: VersionBump | None = bump_obj

    version_ok, version = _optional_str(root, "suggested_version")
    if not version_ok:
        return _invalid("suggested_version must be a string")

    return Ok(
        ReadinessScore(
            total=scores["total"],
            completeness=scores["completeness"],
            value=scores["value"],
            coherence=scores["coherence"],
            stability=scores["stability"],
            ready=ready,
            reasoning=reasoning.strip(),
            suggested_bump=bump,
            suggested_version=version,
        )
    )
