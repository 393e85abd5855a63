"""Minimal async retry with bounded attempts and exponential backoff.

Design goals:
- Small API surface: one policy object, one entry point
- Sequential attempts only; each attempt settles before the next begins
- Prompt cancellation through an ``asyncio.Event`` signal
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import inspect
import logging
import random
import time
from typing import TYPE_CHECKING, Any, TypeVar

from attempt.errors import AbortRetry, ConfigurationError, RetryAbortedError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryContext:
    """State handed to retry callbacks after a failed attempt."""

    error: Exception
    attempt_number: int  # 1-based
    retries_left: int


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry policy with exponential backoff and optional jitter.

    Callbacks may be plain functions or coroutine functions. ``should_retry``
    returning false stops retrying and surfaces the current failure. Setting
    ``signal`` stops further attempts and raises ``RetryAbortedError``.
    """

    max_attempts: int = 4
    initial_delay_s: float = 0.5
    backoff_multiplier: float = 2.0
    max_delay_s: float = 5.0
    jitter: bool = True  # "full jitter" when enabled
    max_elapsed_s: float | None = None
    on_failed_attempt: Callable[[RetryContext], Any] | None = None
    should_retry: Callable[[RetryContext], Any] | None = None
    signal: asyncio.Event | None = None

    def __post_init__(self) -> None:
        """Validate invariants to keep retry behavior predictable."""
        if self.max_attempts < 1:
            raise ConfigurationError(
                f"max_attempts must be >= 1, got {self.max_attempts}",
                hint="Use tries=0 for a single attempt without retries.",
            )
        if self.initial_delay_s < 0:
            raise ConfigurationError("initial_delay_s must be >= 0")
        if self.backoff_multiplier <= 0:
            raise ConfigurationError("backoff_multiplier must be > 0")
        if self.max_delay_s < 0:
            raise ConfigurationError("max_delay_s must be >= 0")
        if self.max_elapsed_s is not None and self.max_elapsed_s < 0:
            raise ConfigurationError("max_elapsed_s must be >= 0 or None")
        if not isinstance(self.jitter, bool):
            raise ConfigurationError(f"jitter must be a bool, got {self.jitter!r}")
        if self.signal is not None and not isinstance(self.signal, asyncio.Event):
            raise ConfigurationError(
                f"signal must be an asyncio.Event, got {type(self.signal).__name__}",
                hint="Create the signal with asyncio.Event() and call set() to abort.",
            )


def compute_backoff_delay(policy: RetryPolicy, *, retry_index: int) -> float:
    """Return the sleep before retry number *retry_index* (1-based)."""
    base = policy.initial_delay_s * (
        policy.backoff_multiplier ** max(0, retry_index - 1)
    )
    base = min(policy.max_delay_s, base)
    if base <= 0:
        return 0.0
    if not policy.jitter:
        return base
    # Full jitter: uniform in [0, base].
    return random.random() * base  # noqa: S311


async def _settle(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def _wait_for_signal(signal: asyncio.Event | None, delay: float) -> bool:
    """Sleep up to *delay* seconds; return True if *signal* fired."""
    if signal is None:
        if delay > 0:
            await asyncio.sleep(delay)
        return False
    if signal.is_set():
        return True
    if delay <= 0:
        return False
    try:
        await asyncio.wait_for(signal.wait(), timeout=delay)
    except TimeoutError:
        return False
    return True


async def retry_async(
    operation: Callable[[], Awaitable[T] | T],
    *,
    policy: RetryPolicy,
) -> T:
    """Run *operation* until it succeeds or the policy gives up.

    The final failure is re-raised unchanged. An ``AbortRetry`` raised by the
    operation ends retrying at once and surfaces its ``cause`` if it has one.
    """
    start = time.monotonic()
    signal = policy.signal
    last_exc: Exception | None = None

    for attempt in range(1, policy.max_attempts + 1):
        if signal is not None and signal.is_set():
            raise RetryAbortedError(
                attempt_number=attempt - 1, last_error=last_exc
            ) from last_exc

        try:
            return await _settle(operation())
        except AbortRetry as exc:
            if exc.cause is not None:
                raise exc.cause from None
            raise
        except Exception as exc:
            last_exc = exc
            retries_left = policy.max_attempts - attempt
            context = RetryContext(
                error=exc, attempt_number=attempt, retries_left=retries_left
            )
            if policy.on_failed_attempt is not None:
                await _settle(policy.on_failed_attempt(context))
            if retries_left <= 0:
                raise
            if policy.should_retry is not None and not await _settle(
                policy.should_retry(context)
            ):
                raise

            delay = compute_backoff_delay(policy, retry_index=attempt)
            if policy.max_elapsed_s is not None:
                remaining = policy.max_elapsed_s - (time.monotonic() - start)
                if remaining <= 0:
                    raise
                delay = min(delay, remaining)

            log.debug(
                "Attempt %d failed (%s); retrying in %.3fs (%d left)",
                attempt,
                exc,
                delay,
                retries_left,
            )
            if await _wait_for_signal(signal, delay):
                raise RetryAbortedError(
                    attempt_number=attempt, last_error=exc
                ) from exc

    if last_exc is None:  # pragma: no cover
        raise RuntimeError("retry_async exhausted without an exception")
    raise last_exc
