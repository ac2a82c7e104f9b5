"""JWTStrategy: extract → resolve key → verify → application decision."""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any

from jwt_strategy._types import DecodedPayload, KeyMaterial
from jwt_strategy._utils import maybe_await
from jwt_strategy.errors import ConfigurationError, NoAuthTokenError
from jwt_strategy.keys import KeyResolver
from jwt_strategy.outcome import Errored, Failure, FailureReason, Outcome, Success
from jwt_strategy.protocol import (
    JwtVerifier,
    OutcomeSink,
    SecretOrKeyProvider,
    TokenExtractor,
    VerifyCallback,
)
from jwt_strategy.verifier import VerifyOptions, pyjwt_verifier

logger = logging.getLogger(__name__)

UNAUTHORIZED = 401


@dataclass(frozen=True)
class VerifyResult:
    """What the verify callback receives.

    Attributes:
        payload: The decoded token payload.
        request: The original request, only when the strategy was built with
            ``pass_request_to_callback=True``; ``None`` otherwise.
    """

    payload: DecodedPayload
    request: Any = None


class JWTStrategy:
    """Authenticates requests carrying a JSON Web Token.

    Each ``authenticate`` call runs one linear pipeline: the token is pulled
    from the request by *extract_token*, a key is resolved for it, the token
    is verified by *verify_jwt*, and the decoded payload is handed to the
    application's *verify* callback. Exactly one outcome is reported:

    * ``success(identity, info)`` when the callback supplies an identity;
    * ``fail(challenge, status)`` when no token is found, no key can be
      resolved, verification fails, or the callback supplies no identity;
    * ``error(cause)`` when the callback raises or passes an error to ``done``.

    The instance holds no per-request state and can be shared across
    concurrent requests.

    Args:
        verify: Decision callback ``verify(result, done)``; ``done`` takes
            ``(err, identity, info)``. May be a coroutine function.
        extract_token: Extractor returning the raw token or ``None``. There is
            no default; use ``from_auth_header_as_bearer_token()`` for the
            usual ``Authorization: Bearer`` header.
        secret_or_key: Fixed secret or PEM-encoded public key.
        secret_or_key_provider: ``provider(request, raw_token)`` returning the
            key (or an awaitable of it). Mutually exclusive with
            *secret_or_key*.
        verify_jwt: Async verifier ``(token, key, options) -> payload``.
        verify_jwt_options: Passed to *verify_jwt* unmodified.
        pass_request_to_callback: Include the request in the ``VerifyResult``.

    Raises:
        ConfigurationError: If the configuration is incomplete or ambiguous.
    """

    name = "jwt"

    def __init__(
        self,
        verify: VerifyCallback,
        *,
        extract_token: TokenExtractor | None = None,
        secret_or_key: KeyMaterial | None = None,
        secret_or_key_provider: SecretOrKeyProvider | None = None,
        verify_jwt: JwtVerifier | None = pyjwt_verifier,
        verify_jwt_options: Any = None,
        pass_request_to_callback: bool = False,
    ) -> None:
        if not callable(verify):
            raise ConfigurationError("JWTStrategy requires a verify callback")
        self._verify = verify

        if secret_or_key:
            if secret_or_key_provider is not None:
                raise ConfigurationError(
                    "JWTStrategy has been given both a secret_or_key and a secret_or_key_provider"
                )
            self._key_resolver = KeyResolver.fixed(secret_or_key)
        elif secret_or_key_provider is not None:
            self._key_resolver = KeyResolver.from_provider(secret_or_key_provider)
        else:
            raise ConfigurationError("JWTStrategy requires a secret or key")

        if extract_token is None:
            raise ConfigurationError(
                "JWTStrategy requires a function to retrieve jwt from requests (see option extract_token)"
            )
        self._extract_token = extract_token

        if verify_jwt is None:
            raise ConfigurationError("JWTStrategy requires a jwt verifier")
        self._verify_jwt = verify_jwt

        self._verify_jwt_options = verify_jwt_options if verify_jwt_options is not None else VerifyOptions()
        self._pass_request_to_callback = pass_request_to_callback

    async def authenticate(self, request: Any, sink: OutcomeSink) -> None:
        """Authenticate *request* and report the outcome to *sink* exactly once."""
        outcome = await self.evaluate(request)
        outcome.report(sink)

    async def evaluate(self, request: Any) -> Outcome:
        """Run the authentication pipeline for *request* and return its outcome."""
        try:
            token = self._extract_token(request)
        except Exception as exc:
            logger.debug("Token extractor raised", exc_info=True)
            return Errored(exc)

        if not token:
            logger.debug("No auth token found in request")
            return Failure(NoAuthTokenError(), UNAUTHORIZED, FailureReason.NO_TOKEN)

        try:
            key = await self._key_resolver.resolve(request, token)
        except Exception as exc:
            logger.debug("Secret or key resolution failed", exc_info=True)
            return Failure(exc, UNAUTHORIZED, FailureReason.KEY_RESOLUTION)

        try:
            payload = await maybe_await(self._verify_jwt(token, key, self._verify_jwt_options))
        except Exception as exc:
            logger.debug("JWT verification failed", exc_info=True)
            return Failure(exc, UNAUTHORIZED, FailureReason.VERIFICATION)

        result = VerifyResult(
            payload=payload,
            request=request if self._pass_request_to_callback else None,
        )
        return await self._decide(result)

    async def _decide(self, result: VerifyResult) -> Outcome:
        """Invoke the verify callback and wait for its first completion.

        ``done`` may be called from any thread; the first call wins.
        """
        loop = asyncio.get_running_loop()
        decision: asyncio.Future[Outcome] = loop.create_future()
        lock = threading.Lock()
        completed = False

        def settle(outcome: Outcome) -> None:
            if not decision.done():
                decision.set_result(outcome)

        def complete(outcome: Outcome) -> bool:
            nonlocal completed
            with lock:
                if completed:
                    return False
                completed = True
            try:
                running = asyncio.get_running_loop()
            except RuntimeError:
                running = None
            if running is loop:
                settle(outcome)
            else:
                loop.call_soon_threadsafe(settle, outcome)
            return True

        def done(err: Any = None, identity: Any = None, info: Any = None) -> None:
            if err is not None:
                outcome: Outcome = Errored(err)
            elif not identity:
                outcome = Failure(info, None, FailureReason.REJECTED)
            else:
                outcome = Success(identity, info)
            if not complete(outcome):
                logger.debug("Ignoring repeated verify callback completion")
            elif isinstance(outcome, Failure):
                logger.debug("Verify callback rejected the token payload")

        try:
            await maybe_await(self._verify(result, done))
        except Exception as exc:
            if complete(Errored(exc)):
                logger.debug("Verify callback raised", exc_info=True)
            else:
                logger.debug("Verify callback raised after completing", exc_info=True)

        return await decision
