"""Token extractors: pure functions that locate a token within a request.

Every factory returns a ``TokenExtractor`` that yields the token string or
``None``. Extractors never raise for a missing token, and any extractor can
be composed with ``from_extractors``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qs, urlsplit

from jwt_strategy.auth_header import parse
from jwt_strategy.protocol import TokenExtractor

# Hosts are expected to lower-case header names.
AUTH_HEADER = "authorization"
BEARER_AUTH_SCHEME = "bearer"


def _headers(request: Any) -> Mapping[str, Any] | None:
    headers = getattr(request, "headers", None)
    return headers if isinstance(headers, Mapping) else None


def from_header(header_name: str) -> TokenExtractor:
    """Extract the token from the header called *header_name*.

    The name is used as given; match the host's header casing.
    """

    def extract(request: Any) -> str | None:
        headers = _headers(request)
        if headers is None:
            return None
        value = headers.get(header_name)
        if isinstance(value, str) and value:
            return value
        return None

    return extract


def from_body_field(field_name: str) -> TokenExtractor:
    """Extract the token from a field the parsed request body directly holds."""

    def extract(request: Any) -> str | None:
        body = getattr(request, "body", None)
        # Membership first: mappings with defaults must not synthesize a value.
        if isinstance(body, Mapping) and field_name in body:
            return body[field_name]
        return None

    return extract


def from_url_query_parameter(param_name: str) -> TokenExtractor:
    """Extract the token from a query parameter that occurs exactly once."""

    def extract(request: Any) -> str | None:
        url = getattr(request, "url", None)
        if url is None:
            return None
        query = urlsplit(str(url)).query
        if not query:
            return None
        values = parse_qs(query, keep_blank_values=True).get(param_name)
        if values is None or len(values) != 1:
            return None
        return values[0]

    return extract


def from_auth_header_with_scheme(auth_scheme: str) -> TokenExtractor:
    """Extract the credential of an ``Authorization: <auth_scheme> <token>`` header.

    The scheme comparison is case-insensitive.
    """
    auth_scheme_lower = auth_scheme.lower()

    def extract(request: Any) -> str | None:
        headers = _headers(request)
        if headers is None:
            return None
        auth_params = parse(headers.get(AUTH_HEADER))
        if auth_params is not None and auth_params.scheme.lower() == auth_scheme_lower:
            return auth_params.value
        return None

    return extract


def from_auth_header_as_bearer_token() -> TokenExtractor:
    """Extract the credential of an ``Authorization: Bearer <token>`` header."""
    return from_auth_header_with_scheme(BEARER_AUTH_SCHEME)


def from_extractors(extractors: list[TokenExtractor] | tuple[TokenExtractor, ...]) -> TokenExtractor:
    """Combine *extractors* into one that returns the first token found.

    Extractors run in order and evaluation stops at the first one that
    yields a token. Raises ``TypeError`` straight away unless given a list or
    tuple.
    """
    if not isinstance(extractors, (list, tuple)):
        raise TypeError("from_extractors expects a list or tuple of extractors")
    chain = tuple(extractors)

    def extract(request: Any) -> str | None:
        for extractor in chain:
            token = extractor(request)
            if token:
                return token
        return None

    return extract
