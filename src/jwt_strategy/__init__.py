"""jwt-strategy: pluggable JSON Web Token request authentication."""

from __future__ import annotations

from jwt_strategy.auth_header import AuthHeader, parse
from jwt_strategy.errors import ConfigurationError, NoAuthTokenError
from jwt_strategy.extractors import (
    from_auth_header_as_bearer_token,
    from_auth_header_with_scheme,
    from_body_field,
    from_extractors,
    from_header,
    from_url_query_parameter,
)
from jwt_strategy.keys import KeyResolver
from jwt_strategy.middleware import AuthMiddleware, auth_identity_var, auth_info_var
from jwt_strategy.outcome import Errored, Failure, FailureReason, Outcome, OutcomeRecorder, Success
from jwt_strategy.protocol import (
    DoneCallback,
    JwtVerifier,
    OutcomeSink,
    SecretOrKeyProvider,
    TokenExtractor,
    VerifyCallback,
)
from jwt_strategy.request import AuthRequest, extract_headers
from jwt_strategy.strategy import JWTStrategy, VerifyResult
from jwt_strategy.verifier import VerifyOptions, pyjwt_verifier

__all__ = [
    # Strategy
    "JWTStrategy",
    "VerifyResult",
    # Extractors
    "from_header",
    "from_body_field",
    "from_url_query_parameter",
    "from_auth_header_with_scheme",
    "from_auth_header_as_bearer_token",
    "from_extractors",
    # Auth header parsing
    "AuthHeader",
    "parse",
    # Keys and verification
    "KeyResolver",
    "VerifyOptions",
    "pyjwt_verifier",
    # Outcomes
    "Success",
    "Failure",
    "Errored",
    "Outcome",
    "FailureReason",
    "OutcomeRecorder",
    # Requests and ASGI
    "AuthRequest",
    "extract_headers",
    "AuthMiddleware",
    "auth_identity_var",
    "auth_info_var",
    # Protocols
    "TokenExtractor",
    "SecretOrKeyProvider",
    "JwtVerifier",
    "VerifyCallback",
    "DoneCallback",
    "OutcomeSink",
    # Errors
    "ConfigurationError",
    "NoAuthTokenError",
]

__version__ = "0.1.0"
