"""Tests for JWTStrategy token extraction, key resolution and verification stages."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock

import jwt as pyjwt
import pytest

from jwt_strategy import (
    AuthRequest,
    Errored,
    Failure,
    FailureReason,
    JWTStrategy,
    NoAuthTokenError,
    OutcomeRecorder,
    Success,
    VerifyOptions,
    from_auth_header_as_bearer_token,
)

TOKEN = "header.payload.signature"


def _accept(result, done):
    done(None, {"id": 1}, {})


class TestNoToken:
    @pytest.mark.asyncio
    async def test_fails_without_resolving_or_verifying(self, auth_request, recorder):
        provider = AsyncMock(return_value="secret")
        verifier = AsyncMock()
        strategy = JWTStrategy(
            _accept,
            extract_token=lambda _: None,
            secret_or_key_provider=provider,
            verify_jwt=verifier,
        )

        await strategy.authenticate(auth_request, recorder)

        assert isinstance(recorder.outcome, Failure)
        assert isinstance(recorder.outcome.challenge, NoAuthTokenError)
        assert str(recorder.outcome.challenge) == "No auth token"
        assert recorder.outcome.status == 401
        provider.assert_not_called()
        verifier.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_token_counts_as_missing(self, auth_request, verifier_mock):
        strategy = JWTStrategy(_accept, extract_token=lambda _: "", secret_or_key="secret", verify_jwt=verifier_mock)
        outcome = await strategy.evaluate(auth_request)
        assert isinstance(outcome, Failure)
        assert outcome.reason is FailureReason.NO_TOKEN
        verifier_mock.assert_not_called()

    @pytest.mark.asyncio
    async def test_url_object_without_token(self, verifier_mock):
        request = MagicMock(headers={}, body={}, url=object())
        strategy = JWTStrategy(
            _accept,
            extract_token=from_auth_header_as_bearer_token(),
            secret_or_key="secret",
            verify_jwt=verifier_mock,
        )
        outcome = await strategy.evaluate(request)
        assert isinstance(outcome, Failure)
        assert outcome.challenge.message == "No auth token"

    @pytest.mark.asyncio
    async def test_logs_missing_token(self, auth_request, caplog):
        strategy = JWTStrategy(_accept, extract_token=lambda _: None, secret_or_key="secret")
        with caplog.at_level(logging.DEBUG, logger="jwt_strategy"):
            await strategy.evaluate(auth_request)
        assert "No auth token found in request" in caplog.text


class TestExtractorFault:
    @pytest.mark.asyncio
    async def test_raising_extractor_is_an_error(self, auth_request, verifier_mock):
        boom = RuntimeError("extractor bug")
        strategy = JWTStrategy(
            _accept,
            extract_token=MagicMock(side_effect=boom),
            secret_or_key="secret",
            verify_jwt=verifier_mock,
        )
        outcome = await strategy.evaluate(auth_request)
        assert outcome == Errored(boom)
        verifier_mock.assert_not_called()


class TestKeyResolution:
    @pytest.mark.asyncio
    async def test_provider_receives_request_and_raw_token(self, auth_request, verifier_mock):
        provider = AsyncMock(return_value="dynamic-secret")
        strategy = JWTStrategy(
            _accept,
            extract_token=lambda _: TOKEN,
            secret_or_key_provider=provider,
            verify_jwt=verifier_mock,
        )

        await strategy.evaluate(auth_request)

        provider.assert_awaited_once_with(auth_request, TOKEN)
        verifier_mock.assert_awaited_once()
        assert verifier_mock.await_args.args[1] == "dynamic-secret"

    @pytest.mark.asyncio
    async def test_provider_error_is_a_failure(self, auth_request, recorder, verifier_mock):
        error = LookupError("no key for kid")
        strategy = JWTStrategy(
            _accept,
            extract_token=lambda _: TOKEN,
            secret_or_key_provider=AsyncMock(side_effect=error),
            verify_jwt=verifier_mock,
        )

        await strategy.authenticate(auth_request, recorder)

        assert isinstance(recorder.outcome, Failure)
        assert recorder.outcome.challenge is error
        assert recorder.outcome.status == 401
        verifier_mock.assert_not_called()

    @pytest.mark.asyncio
    async def test_provider_error_reason(self, auth_request, verifier_mock):
        strategy = JWTStrategy(
            _accept,
            extract_token=lambda _: TOKEN,
            secret_or_key_provider=MagicMock(side_effect=ValueError("bad")),
            verify_jwt=verifier_mock,
        )
        outcome = await strategy.evaluate(auth_request)
        assert outcome.reason is FailureReason.KEY_RESOLUTION


class TestVerification:
    @pytest.mark.asyncio
    async def test_verifier_receives_token_key_and_options(self, auth_request, verifier_mock):
        options = VerifyOptions(issuer="auth-server", audience="my-app")
        strategy = JWTStrategy(
            _accept,
            extract_token=lambda _: TOKEN,
            secret_or_key="secret",
            verify_jwt=verifier_mock,
            verify_jwt_options=options,
        )

        await strategy.evaluate(auth_request)

        verifier_mock.assert_awaited_once_with(TOKEN, "secret", options)
        assert verifier_mock.await_args.args[2] is options

    @pytest.mark.asyncio
    async def test_verifier_error_is_a_failure(self, auth_request, recorder):
        error = pyjwt.InvalidSignatureError("Signature verification failed")
        callback = MagicMock()
        strategy = JWTStrategy(
            callback,
            extract_token=lambda _: TOKEN,
            secret_or_key="secret",
            verify_jwt=AsyncMock(side_effect=error),
        )

        await strategy.authenticate(auth_request, recorder)

        assert recorder.outcome == Failure(error, 401)
        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_verifier_error_reason(self, auth_request):
        strategy = JWTStrategy(
            _accept,
            extract_token=lambda _: TOKEN,
            secret_or_key="secret",
            verify_jwt=AsyncMock(side_effect=pyjwt.ExpiredSignatureError("Signature has expired")),
        )
        outcome = await strategy.evaluate(auth_request)
        assert outcome.reason is FailureReason.VERIFICATION


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_real_token_with_default_verifier(self, secret, token_factory):
        token = token_factory({"sub": "user-1", "iss": "auth-server"})
        request = AuthRequest(headers={"authorization": f"Bearer {token}"})

        def verify(result, done):
            done(None, {"id": result.payload["sub"]}, {"scope": "read"})

        strategy = JWTStrategy(
            verify,
            extract_token=from_auth_header_as_bearer_token(),
            secret_or_key=secret,
            verify_jwt_options=VerifyOptions(issuer="auth-server"),
        )

        assert await strategy.evaluate(request) == Success({"id": "user-1"}, {"scope": "read"})

    @pytest.mark.asyncio
    async def test_real_token_signed_with_other_key(self, secret, token_factory):
        token = token_factory({"sub": "user-1"}, key="other-secret")
        request = AuthRequest(headers={"authorization": f"Bearer {token}"})
        strategy = JWTStrategy(_accept, extract_token=from_auth_header_as_bearer_token(), secret_or_key=secret)

        outcome = await strategy.evaluate(request)

        assert isinstance(outcome, Failure)
        assert isinstance(outcome.challenge, pyjwt.InvalidSignatureError)

    @pytest.mark.asyncio
    async def test_strategy_is_reusable(self, secret, token_factory):
        strategy = JWTStrategy(_accept, extract_token=from_auth_header_as_bearer_token(), secret_or_key=secret)
        good = AuthRequest(headers={"authorization": f"Bearer {token_factory({'sub': 'u'})}"})
        missing = AuthRequest()

        first, second, third = OutcomeRecorder(), OutcomeRecorder(), OutcomeRecorder()
        await strategy.authenticate(good, first)
        await strategy.authenticate(missing, second)
        await strategy.authenticate(good, third)

        assert isinstance(first.outcome, Success)
        assert isinstance(second.outcome, Failure)
        assert isinstance(third.outcome, Success)
