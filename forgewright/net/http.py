"""HTTP client abstraction for JSON APIs.

This module provides:
- HttpClient: Protocol for JSON requests (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing

Both the host REST API and the AI provider endpoints go through it.
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Protocol, cast, runtime_checkable

from forgewright import __version__
from forgewright.core.result import Err, Ok, Result
from forgewright.core.structured import as_str_dict

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]

Headers = dict[str, str]
JsonObject = dict[str, Any]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message (includes the response body when present)
    """

    url: str
    status: int
    message: str

    @property
    def detail(self) -> str:
        """Status and message without the URL."""
        if self.status:
            return f"HTTP {self.status}: {self.message}"
        return self.message

    def __str__(self) -> str:
        return f"{self.detail} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for JSON-over-HTTP operations."""

    def get_json(
        self,
        url: str,
        *,
        headers: Headers | None = None,
    ) -> Result[JsonObject, HttpError]:
        """GET url and parse the response body as a JSON object."""
        ...

    def post_json(
        self,
        url: str,
        payload: JsonObject,
        *,
        headers: Headers | None = None,
    ) -> Result[JsonObject, HttpError]:
        """POST payload as JSON and parse the response body as a JSON object."""
        ...


class RealHttpClient:
    """Real HTTP client using urllib.

    Handles HTTPS with system certificates, JSON encoding/decoding and
    timeouts. Network failures map to status 0.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = f"forgewright/{__version__}",
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _request(
        self,
        url: str,
        *,
        method: str,
        headers: Headers | None,
        body: bytes | None = None,
    ) -> Result[JsonObject, HttpError]:
        all_headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        if body is not None:
            all_headers["Content-Type"] = "application/json"
        all_headers.update(headers or {})

        try:
            req = urllib.request.Request(url, data=body, headers=all_headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                raw: bytes = response.read()
        except urllib.error.HTTPError as e:
            detail = _read_error_body(e)
            message = f"{e.reason}: {detail}" if detail else str(e.reason)
            return Err(HttpError(url=url, status=e.code, message=message))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

        try:
            data_obj: object = json.loads(raw.decode("utf-8")) if raw.strip() else {}
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))

        data = as_str_dict(data_obj)
        if data is None:
            return Err(HttpError(url=url, status=0, message="Expected JSON object"))
        return Ok(cast(JsonObject, data))

    def get_json(
        self,
        url: str,
        *,
        headers: Headers | None = None,
    ) -> Result[JsonObject, HttpError]:
        return self._request(url, method="GET", headers=headers)

    def post_json(
        self,
        url: str,
        payload: JsonObject,
        *,
        headers: Headers | None = None,
    ) -> Result[JsonObject, HttpError]:
        body = json.dumps(payload).encode("utf-8")
        return self._request(url, method="POST", headers=headers, body=body)


def _read_error_body(error: urllib.error.HTTPError) -> str:
    try:
        text = error.read().decode("utf-8", errors="replace").strip()
    except OSError:
        return ""
    return text[:500]


@dataclass(frozen=True, slots=True)
class RecordedRequest:
    method: str
    url: str
    payload: JsonObject | None
    headers: Headers


class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are queued per (method, url); a queue with several entries is
    consumed in order and its last entry repeats. Unknown URLs answer 404.

    Usage:
        client = MockHttpClient()
        client.set_json("POST", "https://api.example.com/v1", {"ok": True})
        assert client.post_json("https://api.example.com/v1", {}) == Ok({"ok": True})
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], list[JsonObject | HttpError]] = {}
        self.requests: list[RecordedRequest] = []

    def set_json(self, method: str, url: str, *responses: JsonObject | HttpError) -> None:
        self._responses[(method.upper(), url)] = list(responses)

    def _respond(
        self,
        method: str,
        url: str,
        payload: JsonObject | None,
        headers: Headers | None,
    ) -> Result[JsonObject, HttpError]:
        self.requests.append(RecordedRequest(method, url, payload, dict(headers or {})))

        queue = self._responses.get((method, url))
        if not queue:
            return Err(HttpError(url=url, status=404, message="Not Found (mock)"))

        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def get_json(
        self,
        url: str,
        *,
        headers: Headers | None = None,
    ) -> Result[JsonObject, HttpError]:
        return self._respond("GET", url, None, headers)

    def post_json(
        self,
        url: str,
        payload: JsonObject,
        *,
        headers: Headers | None = None,
    ) -> Result[JsonObject, HttpError]:
        return self._respond("POST", url, payload, headers)

    @property
    def urls(self) -> list[str]:
        return [r.url for r in self.requests]
