"""Error type for reasoning-provider calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

AIErrorKind = Literal[
    "missing_credential",
    "request_failed",
    "invalid_response",
]


@dataclass(frozen=True, slots=True)
class AIError:
    """Failure of a reasoning-provider call.

    ``invalid_response`` marks a reply that does not conform to the expected
    schema; it is never retried. ``request_failed`` wraps transport and HTTP
    failures; ``status`` is the HTTP status for those (0 when the request
    never got a response) and None otherwise.
    """

    kind: AIErrorKind
    message: str
    hint: str | None = None
    status: int | None = None

    def __str__(self) -> str:
        return self.message
