"""Exception types raised or reported by jwt-strategy."""

from __future__ import annotations

NO_AUTH_TOKEN_MESSAGE = "No auth token"


class ConfigurationError(TypeError):
    """Raised at construction time when a strategy is misconfigured."""


class NoAuthTokenError(Exception):
    """Challenge reported when no token could be extracted from a request."""

    def __init__(self, message: str = NO_AUTH_TOKEN_MESSAGE) -> None:
        super().__init__(message)
        self.message = message
