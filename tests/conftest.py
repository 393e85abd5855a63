"""Pytest configuration and fixtures.

Provides recording doubles for the logger, reporter and normalizer, plus a
zero-delay retry policy so retry tests never sleep.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any

import pytest

from attempt import Attempt, RetryPolicy, create_attempt, default_normalizer
from attempt.normalize import NormalizeContext, SimpleError

# =============================================================================
# Test Doubles
# =============================================================================


@dataclass
class CallLog:
    """Shared, ordered record of side-effect calls."""

    calls: list[tuple[str, Any]] = field(default_factory=list)

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]


@dataclass
class RecordingLogger:
    """Object-style logger double exposing ``error()``."""

    log: CallLog

    def error(self, caught: object) -> None:
        self.log.calls.append(("logger", caught))


@dataclass
class RecordingReporter:
    """Plain-callable reporter double."""

    log: CallLog

    def __call__(self, caught: object) -> None:
        self.log.calls.append(("reporter", caught))


@dataclass
class RecordingNormalizer:
    """Normalizer double that records what it was handed."""

    log: CallLog
    contexts: list[NormalizeContext | None] = field(default_factory=list)

    def __call__(
        self, caught: object, context: NormalizeContext | None = None
    ) -> SimpleError:
        self.log.calls.append(("normalizer", caught))
        self.contexts.append(context)
        return default_normalizer(caught, context)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def call_log() -> CallLog:
    return CallLog()


@pytest.fixture
def normalizer(call_log: CallLog) -> RecordingNormalizer:
    return RecordingNormalizer(call_log)


@pytest.fixture
def recording_attempt(call_log: CallLog, normalizer: RecordingNormalizer) -> Attempt:
    """Attempt wired to recording normalizer, logger and reporter."""
    return create_attempt(
        normalizer,
        logger=RecordingLogger(call_log),
        reporter=RecordingReporter(call_log),
    )


@pytest.fixture
def no_delay() -> RetryPolicy:
    """Retry policy without backoff sleeps."""
    return RetryPolicy(initial_delay_s=0.0, jitter=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_attempt_logger():
    """Keep the default instance's failure logs out of test output."""
    logging.getLogger("attempt").setLevel(logging.CRITICAL)
