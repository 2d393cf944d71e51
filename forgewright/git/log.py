"""Commit log extraction.

``git log`` is asked for one record per commit framed by ASCII control
characters, which do not occur in commit text:

    RS hash US short US author US email US date US subject US body GS
    <blank line>
    path/one
    path/two

RS (0x1e) opens a commit, US (0x1f) separates fields and GS (0x1d) closes
the header; the ``--name-only`` file list trails each record. Splitting on
RS first means bodies with embedded newlines or subjects containing any
printable separator are never mis-tokenized.
"""

from __future__ import annotations

from datetime import UTC, datetime

from forgewright.core.model import Author, Commit

__all__ = [
    "COMMIT_START",
    "FIELD_SEP",
    "HEADER_END",
    "LOG_FORMAT",
    "LogParseError",
    "log_range",
    "parse_log",
]

COMMIT_START = "\x1e"
FIELD_SEP = "\x1f"
HEADER_END = "\x1d"

_FIELDS = ("%H", "%h", "%an", "%ae", "%aI", "%s", "%b")
LOG_FORMAT = "%x1e" + "%x1f".join(_FIELDS) + "%x1d"


class LogParseError(ValueError):
    """Raised when a record does not carry the expected number of fields."""


def log_range(since: str | None) -> str:
    """Revision range for everything reachable from HEAD but not from ``since``."""
    if since:
        return f"{since}..HEAD"
    return "HEAD"


def _parse_date(text: str) -> datetime:
    try:
        return datetime.fromisoformat(text.strip())
    except ValueError:
        return datetime.fromtimestamp(0, tz=UTC)


def _parse_record(record: str) -> Commit:
    header, sep, trailer = record.partition(HEADER_END)
    if not sep:
        raise LogParseError(f"unterminated commit header: {record[:60]!r}")

    fields = header.split(FIELD_SEP)
    if len(fields) != len(_FIELDS):
        raise LogParseError(f"expected {len(_FIELDS)} fields, got {len(fields)}")

    full, short, name, email, date, subject, body = fields
    files = tuple(line.strip() for line in trailer.splitlines() if line.strip())

    return Commit(
        hash=full.strip(),
        short_hash=short.strip(),
        subject=subject.strip(),
        body=body.strip(),
        author=Author(name=name, email=email),
        date=_parse_date(date),
        files=files,
    )


def parse_log(output: str) -> list[Commit]:
    """Parse ``git log --format=LOG_FORMAT --name-only`` output.

    Empty output yields an empty list. Records keep git's order (newest first).
    """
    if not output.strip():
        return []

    commits: list[Commit] = []
    for record in output.split(COMMIT_START):
        if not record.strip():
            continue
        commits.append(_parse_record(record))
    return commits
