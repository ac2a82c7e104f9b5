"""Shared test fixtures for jwt-strategy tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import jwt as pyjwt
import pytest

from jwt_strategy import AuthRequest, OutcomeRecorder

SECRET = "test-secret-key"


def make_token(payload: dict[str, Any], key: str = SECRET, algorithm: str = "HS256") -> str:
    return pyjwt.encode(payload, key, algorithm=algorithm)


@pytest.fixture
def secret() -> str:
    return SECRET


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def payload() -> dict[str, Any]:
    return {"sub": "1234567890", "name": "John Doe", "iat": 1516239022}


@pytest.fixture
def auth_request() -> AuthRequest:
    return AuthRequest(headers={}, body={}, url="/")


@pytest.fixture
def recorder() -> OutcomeRecorder:
    return OutcomeRecorder()


@pytest.fixture
def verifier_mock(payload: dict[str, Any]) -> AsyncMock:
    """Stand-in for the token verifier that always accepts."""
    return AsyncMock(return_value=payload)
