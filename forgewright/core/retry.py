"""Retry with exponential backoff for unreliable remote calls.

``with_retry`` wraps a zero-argument operation returning a Result. When the
operation returns ``Err`` and the options' predicate classifies the error as
transient, the call is repeated after a jittered exponential delay. Every
invocation has its own attempt counter; options are immutable and built per
call site.

Usage:
    result = with_retry(
        lambda: model.generate(system, prompt, json_output=True),
        RetryOptions(max_attempts=3, on_retry=report),
    )
"""

from __future__ import annotations

import random
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from time import sleep

from .result import Err, Result

__all__ = [
    "RetryOptions",
    "backoff_delay",
    "error_text",
    "is_retryable_error",
    "with_retry",
]

JITTER_RATIO = 0.3

_RETRYABLE_MARKERS = (
    # rate limiting
    "rate limit",
    "too many requests",
    "http 429",
    # timeouts and connection failures
    "timeout",
    "timed out",
    "network error",
    "network is unreachable",
    "network unreachable",
    "connection reset",
    "connection refused",
    "econnreset",
    "econnrefused",
    "remote end hung up unexpectedly",
    # overload and gateway failures
    "overloaded",
    "at capacity",
    "temporarily unavailable",
    "service unavailable",
    "bad gateway",
    "gateway timeout",
)
_SERVER_ERROR_RE = re.compile(r"\bhttp 5\d\d\b")

RetryPredicate = Callable[[object], bool]
RetryListener = Callable[[int, object, float], None]


def error_text(error: object) -> str:
    """Collect the human-readable text of an error value.

    Error dataclasses carry their details in different fields (``message``,
    ``stderr``, ``hint``); all of them are searched. URLs and other context
    fields are left out, ``str(error)`` is only used when none of them exist.
    """
    if isinstance(error, str):
        return error
    parts: list[str] = []
    for attr in ("message", "stderr", "stdout", "hint"):
        value = getattr(error, attr, None)
        if isinstance(value, str) and value:
            parts.append(value)
    return "\n".join(parts) if parts else str(error)


def _status_of(error: object) -> int | None:
    status = getattr(error, "status", None)
    if isinstance(status, bool) or not isinstance(status, int):
        return None
    return status


def is_retryable_error(error: object) -> bool:
    """Default predicate: rate limiting, timeouts, resets, 5xx and overload.

    An HTTP status decides on its own: 429 and 5xx retry, any other
    response does not. Status 0 (no response) falls through to the text.
    """
    status = _status_of(error)
    if status:
        return status == 429 or status >= 500
    text = error_text(error).lower()
    if any(marker in text for marker in _RETRYABLE_MARKERS):
        return True
    return _SERVER_ERROR_RE.search(text) is not None


def _never_notify(attempt: int, error: object, delay: float) -> None:
    del attempt, error, delay


@dataclass(frozen=True, slots=True)
class RetryOptions:
    """Retry budget for one call site.

    Attributes:
        max_attempts: Total attempts including the first one
        initial_delay: Delay in seconds before the second attempt
        max_delay: Upper bound for any single delay
        should_retry: Classifies an error value as transient
        on_retry: Called with (failed attempt, error, delay) before sleeping
    """

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    should_retry: RetryPredicate = field(default=is_retryable_error)
    on_retry: RetryListener = field(default=_never_notify)


def backoff_delay(
    attempt: int,
    initial_delay: float,
    max_delay: float,
    *,
    jitter: float | None = None,
) -> float:
    """Delay after failed attempt ``attempt`` (1-based).

    ``min(initial * 2^(attempt-1) * (1 + jitter), max)`` with jitter drawn
    uniformly from [0, 0.3) unless given.
    """
    if jitter is None:
        jitter = random.random() * JITTER_RATIO
    base = initial_delay * 2 ** (attempt - 1)
    return min(base * (1 + jitter), max_delay)


def with_retry[T, E](
    operation: Callable[[], Result[T, E]],
    options: RetryOptions | None = None,
) -> Result[T, E]:
    """Run ``operation`` until it succeeds, fails permanently or the budget runs out.

    Returns:
        The first Ok, the first non-retryable Err, or the last Err once
        ``max_attempts`` attempts have failed.
    """
    opts = options or RetryOptions()
    attempts = max(1, opts.max_attempts)

    attempt = 1
    while True:
        result = operation()
        if not isinstance(result, Err):
            return result

        if attempt >= attempts or not opts.should_retry(result.error):
            return result

        delay = backoff_delay(attempt, opts.initial_delay, opts.max_delay)
        opts.on_retry(attempt, result.error, delay)
        sleep(delay)
        attempt += 1
