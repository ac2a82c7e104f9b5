"""ASGI middleware that runs a ``JWTStrategy`` and exposes the identity via ContextVar."""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any

from starlette.responses import JSONResponse

from jwt_strategy.errors import NoAuthTokenError
from jwt_strategy.outcome import Errored, Failure, FailureReason, Success
from jwt_strategy.request import AuthRequest
from jwt_strategy.strategy import UNAUTHORIZED, JWTStrategy

logger = logging.getLogger(__name__)

GENERIC_DETAIL = "Missing or invalid Bearer token"

# Stages whose challenge text is safe to show the client
_CLIENT_FACING_REASONS = {FailureReason.NO_TOKEN, FailureReason.REJECTED}

# Bridge between the middleware and downstream handlers
auth_identity_var: ContextVar[Any] = ContextVar("auth_identity", default=None)
auth_info_var: ContextVar[Any] = ContextVar("auth_info", default=None)


class AuthMiddleware:
    """ASGI middleware that authenticates requests with a ``JWTStrategy``.

    A successful outcome sets ``auth_identity_var`` and ``auth_info_var`` for
    the duration of the downstream call. A failed outcome is answered with
    401 (or the failure's status hint); an errored outcome with 500.

    Args:
        app: The ASGI application to wrap.
        strategy: The strategy used to authenticate each request.
        exempt_paths: Exact paths that bypass authentication.
        exempt_prefixes: Path prefixes that bypass authentication.
            Any request whose path starts with one of these prefixes is exempt.
        require_auth: If True, rejected requests receive 401.
            If False, requests proceed without identity (permissive mode).
    """

    def __init__(
        self,
        app: Any,
        strategy: JWTStrategy,
        *,
        exempt_paths: set[str] | None = None,
        exempt_prefixes: set[str] | None = None,
        require_auth: bool = True,
    ) -> None:
        self._app = app
        self._strategy = strategy
        self._exempt_paths = exempt_paths if exempt_paths is not None else {"/health", "/metrics"}
        self._exempt_prefixes = exempt_prefixes or set()
        self._require_auth = require_auth

    def _is_exempt(self, path: str) -> bool:
        """Check if a path is exempt from authentication."""
        if path in self._exempt_paths:
            return True
        return any(path.startswith(prefix) for prefix in self._exempt_prefixes)

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        if scope["type"] != "http":
            await self._app(scope, receive, send)
            return

        path = scope.get("path", "")
        if self._is_exempt(path):
            await self._app(scope, receive, send)
            return

        outcome = await self._strategy.evaluate(AuthRequest.from_scope(scope))

        if isinstance(outcome, Errored):
            logger.error("Authentication errored for %s", path, exc_info=_exc_info(outcome.cause))
            response = JSONResponse({"error": "Internal Server Error"}, status_code=500)
            await response(scope, receive, send)
            return

        if isinstance(outcome, Failure):
            if self._require_auth:
                await _unauthorized(outcome)(scope, receive, send)
                return
            identity, info = None, None
        elif isinstance(outcome, Success):
            identity, info = outcome.identity, outcome.info
        else:
            raise TypeError(f"Unexpected authentication outcome: {outcome!r}")

        identity_token = auth_identity_var.set(identity)
        info_token = auth_info_var.set(info)
        try:
            await self._app(scope, receive, send)
        finally:
            auth_info_var.reset(info_token)
            auth_identity_var.reset(identity_token)


def _unauthorized(failure: Failure) -> JSONResponse:
    """Build the 401 Unauthorized JSON response for *failure*."""
    return JSONResponse(
        {"error": "Unauthorized", "detail": _describe(failure)},
        status_code=failure.status or UNAUTHORIZED,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _describe(failure: Failure) -> str:
    """Client-facing detail for *failure*.

    Key resolution and verification errors may carry internal details, so
    only a generic message is sent for them.
    """
    challenge = failure.challenge
    if failure.reason not in _CLIENT_FACING_REASONS:
        logger.debug("Authentication failed (%s): %r", failure.reason.value, challenge)
        return GENERIC_DETAIL
    if isinstance(challenge, NoAuthTokenError):
        return challenge.message
    if isinstance(challenge, dict) and isinstance(challenge.get("message"), str):
        return challenge["message"]
    if isinstance(challenge, str) and challenge:
        return challenge
    return GENERIC_DETAIL


def _exc_info(cause: Any) -> Any:
    return cause if isinstance(cause, BaseException) else False
