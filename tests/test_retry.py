"""Retry policy behavior: attempt counts, callbacks, aborts and backoff."""

from __future__ import annotations

import asyncio
from dataclasses import replace
import threading

import pytest

from attempt.errors import AbortRetry, ConfigurationError, RetryAbortedError
from attempt.retry import (
    RetryContext,
    RetryPolicy,
    compute_backoff_delay,
    retry_async,
)

pytestmark = pytest.mark.unit


class Flaky:
    """Operation failing a fixed number of times before succeeding."""

    def __init__(self, failures: int, result: object = "success") -> None:
        self.failures = failures
        self.result = result
        self.calls = 0

    def __call__(self) -> object:
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError(f"failure {self.calls}")
        return self.result


@pytest.mark.asyncio
async def test_succeeds_after_transient_failures(no_delay: RetryPolicy) -> None:
    op = Flaky(failures=2)

    assert await retry_async(op, policy=replace(no_delay, max_attempts=4)) == "success"
    assert op.calls == 3


@pytest.mark.asyncio
async def test_exhaustion_reraises_last_failure(no_delay: RetryPolicy) -> None:
    op = Flaky(failures=10)

    with pytest.raises(RuntimeError, match="failure 3"):
        await retry_async(op, policy=replace(no_delay, max_attempts=3))
    assert op.calls == 3


@pytest.mark.asyncio
async def test_single_attempt_policy_never_retries(no_delay: RetryPolicy) -> None:
    op = Flaky(failures=1)

    with pytest.raises(RuntimeError):
        await retry_async(op, policy=replace(no_delay, max_attempts=1))
    assert op.calls == 1


@pytest.mark.asyncio
async def test_async_operations_are_awaited(no_delay: RetryPolicy) -> None:
    calls = 0

    async def op() -> str:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0)
        if calls == 1:
            raise ConnectionError("reset")
        return "async success"

    assert await retry_async(op, policy=no_delay) == "async success"
    assert calls == 2


@pytest.mark.asyncio
async def test_on_failed_attempt_sees_each_failure(no_delay: RetryPolicy) -> None:
    seen: list[RetryContext] = []
    op = Flaky(failures=2)

    await retry_async(
        op, policy=replace(no_delay, max_attempts=4, on_failed_attempt=seen.append)
    )

    assert [c.attempt_number for c in seen] == [1, 2]
    assert [c.retries_left for c in seen] == [3, 2]
    assert [str(c.error) for c in seen] == ["failure 1", "failure 2"]


@pytest.mark.asyncio
async def test_async_callbacks_are_awaited(no_delay: RetryPolicy) -> None:
    seen: list[int] = []

    async def on_failed(context: RetryContext) -> None:
        seen.append(context.attempt_number)

    async def should_retry(context: RetryContext) -> bool:
        return context.attempt_number < 2

    op = Flaky(failures=10)
    policy = replace(
        no_delay, max_attempts=5, on_failed_attempt=on_failed, should_retry=should_retry
    )

    with pytest.raises(RuntimeError, match="failure 2"):
        await retry_async(op, policy=policy)
    assert op.calls == 2
    assert seen == [1, 2]


@pytest.mark.asyncio
async def test_should_retry_false_stops_immediately(no_delay: RetryPolicy) -> None:
    op = Flaky(failures=10)

    with pytest.raises(RuntimeError, match="failure 1"):
        await retry_async(op, policy=replace(no_delay, should_retry=lambda _: False))
    assert op.calls == 1


@pytest.mark.asyncio
async def test_abort_retry_surfaces_cause(no_delay: RetryPolicy) -> None:
    calls = 0

    def op() -> None:
        nonlocal calls
        calls += 1
        raise AbortRetry("permanent", cause=PermissionError("denied"))

    with pytest.raises(PermissionError, match="denied"):
        await retry_async(op, policy=no_delay)
    assert calls == 1


@pytest.mark.asyncio
async def test_abort_retry_without_cause_is_raised(no_delay: RetryPolicy) -> None:
    def op() -> None:
        raise AbortRetry("stop")

    with pytest.raises(AbortRetry, match="stop"):
        await retry_async(op, policy=no_delay)


@pytest.mark.asyncio
async def test_signal_set_before_start_prevents_any_attempt(
    no_delay: RetryPolicy,
) -> None:
    signal = asyncio.Event()
    signal.set()
    op = Flaky(failures=0)

    with pytest.raises(RetryAbortedError) as exc:
        await retry_async(op, policy=replace(no_delay, signal=signal))
    assert op.calls == 0
    assert exc.value.attempt_number == 0


@pytest.mark.asyncio
async def test_signal_interrupts_backoff_sleep() -> None:
    signal = asyncio.Event()
    op = Flaky(failures=10)
    policy = RetryPolicy(
        max_attempts=5,
        initial_delay_s=30.0,
        max_delay_s=30.0,
        jitter=False,
        signal=signal,
    )
    asyncio.get_running_loop().call_later(0.05, signal.set)

    with pytest.raises(RetryAbortedError) as exc:
        await asyncio.wait_for(retry_async(op, policy=policy), timeout=5)
    assert op.calls == 1
    assert exc.value.attempt_number == 1
    assert isinstance(exc.value.last_error, RuntimeError)
    assert exc.value.__cause__ is exc.value.last_error


@pytest.mark.asyncio
async def test_cancelled_error_is_not_retried(no_delay: RetryPolicy) -> None:
    calls = 0

    async def op() -> None:
        nonlocal calls
        calls += 1
        raise asyncio.CancelledError

    with pytest.raises(asyncio.CancelledError):
        await retry_async(op, policy=no_delay)
    assert calls == 1


@pytest.mark.asyncio
async def test_max_elapsed_budget_stops_retrying() -> None:
    op = Flaky(failures=10)
    policy = RetryPolicy(max_attempts=10, initial_delay_s=0.0, max_elapsed_s=0.0)

    with pytest.raises(RuntimeError):
        await retry_async(op, policy=policy)
    assert op.calls == 1


def test_backoff_grows_exponentially_and_caps() -> None:
    policy = RetryPolicy(
        initial_delay_s=1.0, backoff_multiplier=2.0, max_delay_s=5.0, jitter=False
    )

    delays = [compute_backoff_delay(policy, retry_index=i) for i in range(1, 6)]

    assert delays == [1.0, 2.0, 4.0, 5.0, 5.0]


def test_jittered_backoff_stays_within_bounds() -> None:
    policy = RetryPolicy(initial_delay_s=1.0, jitter=True)

    for _ in range(50):
        assert 0.0 <= compute_backoff_delay(policy, retry_index=1) <= 1.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_attempts": 0},
        {"initial_delay_s": -1.0},
        {"backoff_multiplier": 0.0},
        {"max_delay_s": -0.5},
        {"max_elapsed_s": -1.0},
        {"jitter": "no"},
        {"signal": threading.Event()},
    ],
)
def test_policy_rejects_invalid_values(kwargs: dict[str, object]) -> None:
    with pytest.raises(ConfigurationError):
        RetryPolicy(**kwargs)
