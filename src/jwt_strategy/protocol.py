"""Protocols for the collaborators a ``JWTStrategy`` is assembled from."""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from jwt_strategy._types import DecodedPayload, KeyMaterial

if TYPE_CHECKING:
    from jwt_strategy.strategy import VerifyResult


@runtime_checkable
class TokenExtractor(Protocol):
    """Locates a candidate token in a request, or returns ``None``."""

    def __call__(self, request: Any) -> str | None: ...


@runtime_checkable
class SecretOrKeyProvider(Protocol):
    """Produces key material for a request and its raw, undecoded token.

    May return the key directly or an awaitable resolving to it. Raising
    signals that no key could be found.
    """

    def __call__(self, request: Any, raw_token: str) -> KeyMaterial | Awaitable[KeyMaterial]: ...


@runtime_checkable
class JwtVerifier(Protocol):
    """Checks a token's signature and claims, returning the decoded payload.

    Raises on any verification failure.
    """

    def __call__(self, token: str, key: KeyMaterial, options: Any) -> Awaitable[DecodedPayload]: ...


@runtime_checkable
class DoneCallback(Protocol):
    """Completion channel handed to a verify callback."""

    def __call__(self, err: Any, identity: Any = None, info: Any = None) -> None: ...


@runtime_checkable
class VerifyCallback(Protocol):
    """Application decision function.

    Receives the ``VerifyResult`` and a ``done(err, identity, info)``
    callback. May be a plain function or a coroutine function.
    """

    def __call__(self, result: VerifyResult, done: DoneCallback) -> Awaitable[None] | None: ...


@runtime_checkable
class OutcomeSink(Protocol):
    """Host-side receiver of authentication outcomes.

    Exactly one of the three methods is called per ``authenticate`` call.
    """

    def success(self, identity: Any, info: Any = None) -> None: ...

    def fail(self, challenge: Any = None, status: int | None = None) -> None: ...

    def error(self, cause: Any) -> None: ...
