"""Outcomes of an authentication attempt and a recording sink."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Union

from jwt_strategy.protocol import OutcomeSink


class FailureReason(str, enum.Enum):
    """Which stage rejected the request."""

    NO_TOKEN = "no_token"
    KEY_RESOLUTION = "key_resolution"
    VERIFICATION = "verification"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Success:
    """The request was accepted; *identity* is what the verify callback supplied."""

    identity: Any
    info: Any = None

    def report(self, sink: OutcomeSink) -> None:
        sink.success(self.identity, self.info)


@dataclass(frozen=True)
class Failure:
    """The request was rejected for a normal reason (bad or missing credentials).

    Attributes:
        challenge: The error or info explaining the rejection.
        status: Optional HTTP status hint for the host.
        reason: The stage that rejected the request.
    """

    challenge: Any
    status: int | None = None
    reason: FailureReason = FailureReason.REJECTED

    def report(self, sink: OutcomeSink) -> None:
        sink.fail(self.challenge, self.status)


@dataclass(frozen=True)
class Errored:
    """Authentication broke down unexpectedly (bug or I/O fault in the callback)."""

    cause: Any

    def report(self, sink: OutcomeSink) -> None:
        sink.error(self.cause)


Outcome = Union[Success, Failure, Errored]


class OutcomeRecorder:
    """``OutcomeSink`` that keeps the single outcome reported to it.

    A second report raises ``RuntimeError``.
    """

    def __init__(self) -> None:
        self.outcome: Outcome | None = None

    def _record(self, outcome: Outcome) -> None:
        if self.outcome is not None:
            raise RuntimeError(f"Outcome already reported: {self.outcome!r}")
        self.outcome = outcome

    def success(self, identity: Any, info: Any = None) -> None:
        self._record(Success(identity, info))

    def fail(self, challenge: Any = None, status: int | None = None) -> None:
        self._record(Failure(challenge, status))

    def error(self, cause: Any) -> None:
        self._record(Errored(cause))
