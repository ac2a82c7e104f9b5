"""PyJWT-backed token verifier and its options."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import jwt as pyjwt

from jwt_strategy._types import KeyMaterial

logger = logging.getLogger(__name__)


def _seconds(value: float | timedelta) -> float:
    return value.total_seconds() if isinstance(value, timedelta) else float(value)


@dataclass(frozen=True)
class VerifyOptions:
    """Claim checks applied when verifying a token.

    Attributes:
        algorithms: Allowed signing algorithms.
        audience: Expected ``aud`` claim. When unset, ``aud`` is not checked.
        issuer: Expected ``iss`` claim.
        subject: Expected ``sub`` claim.
        ignore_expiration: Skip the ``exp`` check.
        clock_tolerance: Leeway in seconds for time-based claims.
        max_age: Maximum allowed token age, measured from ``iat``.
        require_claims: Claims that must be present in the token.
    """

    algorithms: Sequence[str] = ("HS256",)
    audience: str | Sequence[str] | None = None
    issuer: str | None = None
    subject: str | None = None
    ignore_expiration: bool = False
    clock_tolerance: float | timedelta = 0
    max_age: float | timedelta | None = None
    require_claims: Sequence[str] = ()

    def __post_init__(self) -> None:
        if isinstance(self.algorithms, str) or not self.algorithms:
            raise ValueError("algorithms must be a non-empty sequence of algorithm names")
        if _seconds(self.clock_tolerance) < 0:
            raise ValueError("clock_tolerance must not be negative")
        if self.max_age is not None and _seconds(self.max_age) < 0:
            raise ValueError("max_age must not be negative")


async def pyjwt_verifier(token: str, key: KeyMaterial, options: VerifyOptions | None = None) -> dict[str, Any]:
    """Verify *token* with PyJWT and return its claims.

    HMAC (``HS*``) tokens are decoded inline. Any other allowed algorithm
    means public-key signature checks, which run in a worker thread via
    ``asyncio.to_thread`` so they do not block the event loop.

    Raises:
        jwt.InvalidTokenError: (or a subclass) on a bad signature, expired
            token, claim mismatch or malformed token.
    """
    opts = options if options is not None else VerifyOptions()

    decode_options: dict[str, Any] = {
        "verify_exp": not opts.ignore_expiration,
        "verify_aud": opts.audience is not None,
    }
    if opts.require_claims:
        decode_options["require"] = list(opts.require_claims)

    kwargs: dict[str, Any] = {
        "jwt": token,
        "key": key,
        "algorithms": list(opts.algorithms),
        "options": decode_options,
        "leeway": opts.clock_tolerance,
    }
    if opts.audience is not None:
        kwargs["audience"] = opts.audience
    if opts.issuer is not None:
        kwargs["issuer"] = opts.issuer
    if opts.subject is not None:
        kwargs["subject"] = opts.subject

    if all(alg.upper().startswith("HS") for alg in opts.algorithms):
        payload: dict[str, Any] = pyjwt.decode(**kwargs)
    else:
        payload = await asyncio.to_thread(pyjwt.decode, **kwargs)

    if opts.max_age is not None:
        _check_max_age(payload, _seconds(opts.max_age), _seconds(opts.clock_tolerance))

    return payload


def _check_max_age(payload: dict[str, Any], max_age: float, leeway: float) -> None:
    """Reject tokens issued more than *max_age* seconds ago."""
    issued_at = payload.get("iat")
    if issued_at is None:
        raise pyjwt.MissingRequiredClaimError("iat")
    try:
        issued_at = float(issued_at)
    except (TypeError, ValueError):
        raise pyjwt.InvalidIssuedAtError("Issued At claim (iat) must be a number") from None
    if time.time() - issued_at > max_age + leeway:
        logger.debug("Token exceeds max_age of %ss", max_age)
        raise pyjwt.ExpiredSignatureError("maxAge exceeded")
