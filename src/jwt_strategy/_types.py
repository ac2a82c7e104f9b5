"""Internal type aliases for jwt-strategy."""

from __future__ import annotations

from typing import Any

# str/bytes secrets or PEM keys; PyJWT also accepts key objects
KeyMaterial = Any

# Whatever the verifier returns; a claims dict for the PyJWT verifier
DecodedPayload = Any
