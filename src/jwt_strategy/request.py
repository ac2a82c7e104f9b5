"""Plain request model the extractors and strategy operate on."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class AuthRequest:
    """Transport-neutral view of an incoming request.

    Attributes:
        headers: Lowercase header names mapped to their values.
        body: Already-parsed body fields, or ``None`` when there is no body.
        url: Request target, path plus optional query string.
    """

    headers: Mapping[str, str] = field(default_factory=dict)
    body: Mapping[str, Any] | None = None
    url: str = "/"

    @classmethod
    def from_scope(cls, scope: dict[str, Any], body: Mapping[str, Any] | None = None) -> AuthRequest:
        """Build a request from an ASGI HTTP scope."""
        url = scope.get("path", "") or "/"
        query_string = scope.get("query_string", b"")
        if query_string:
            url = f"{url}?{query_string.decode('latin-1')}"
        return cls(headers=extract_headers(scope), body=body, url=url)


def extract_headers(scope: dict[str, Any]) -> dict[str, str]:
    """Extract headers from ASGI scope as a lowercase-key dict."""
    result: dict[str, str] = {}
    for key_bytes, value_bytes in scope.get("headers", []):
        result[key_bytes.decode("latin-1").lower()] = value_bytes.decode("latin-1")
    return result
