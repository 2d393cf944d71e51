"""Network boundary: JSON over HTTP."""

from forgewright.net.http import HttpClient, HttpError, MockHttpClient, RealHttpClient

__all__ = ["HttpClient", "HttpError", "MockHttpClient", "RealHttpClient"]
