"""Secret/key resolution for token verification."""

from __future__ import annotations

from typing import Any

from jwt_strategy._types import KeyMaterial
from jwt_strategy._utils import maybe_await
from jwt_strategy.protocol import SecretOrKeyProvider


class KeyResolver:
    """Resolves the key material used to verify a request's token.

    Build one with ``KeyResolver.fixed()`` for a static secret or public key,
    or ``KeyResolver.from_provider()`` to look the key up per request (for
    example by the token's ``kid`` header).
    """

    def __init__(self, provider: SecretOrKeyProvider) -> None:
        self._provider = provider

    @classmethod
    def fixed(cls, key: KeyMaterial) -> KeyResolver:
        """Resolver that always yields *key*."""

        def provide(request: Any, raw_token: str) -> KeyMaterial:
            return key

        return cls(provide)

    @classmethod
    def from_provider(cls, provider: SecretOrKeyProvider) -> KeyResolver:
        """Resolver backed by a sync or async ``provider(request, raw_token)``."""
        return cls(provider)

    async def resolve(self, request: Any, raw_token: str) -> KeyMaterial:
        """Return the key for *raw_token*.

        Exceptions raised by the provider propagate unchanged.
        """
        return await maybe_await(self._provider(request, raw_token))
