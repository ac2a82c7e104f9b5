"""Parser for ``Authorization`` header values."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

_HEADER_SCHEME = re.compile(r"(\S+)\s+(\S+)")


@dataclass(frozen=True)
class AuthHeader:
    """An ``Authorization`` header split into scheme and credential."""

    scheme: str
    value: str


def parse(header: Any) -> AuthHeader | None:
    """Split *header* into its scheme and credential value.

    The first two whitespace-separated runs are returned verbatim; anything
    after the second run is ignored. Returns ``None`` for non-string input
    or when fewer than two runs are present.
    """
    if not isinstance(header, str):
        return None

    match = _HEADER_SCHEME.search(header)
    if match is None:
        return None
    return AuthHeader(scheme=match.group(1), value=match.group(2))
