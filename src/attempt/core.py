"""Attempt execution: run a fallible operation, get an outcome back.

``Attempt.try_`` runs an operation once. Its return shape follows the
operation's: a plain value yields an outcome directly, an awaitable yields a
coroutine resolving to an outcome. ``Attempt.retry`` always returns a
coroutine. Both route failures through ``Attempt.fail``:

    normalize -> report (logger, then reporter) -> internal or client outcome
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
import inspect
from typing import TYPE_CHECKING, Any, Literal, TypeVar, overload

from attempt import outcome
from attempt.config import AttemptDependencies
from attempt.errors import ConfigurationError
from attempt.normalize import NormalizeContext
from attempt.outcome import (
    ClientErrorData,
    ClientFailure,
    ErrorData,
    InternalFailure,
    as_exception,
)
from attempt.reporting import report_failure
from attempt.retry import RetryPolicy, retry_async

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Coroutine

    from attempt.normalize import ErrorClassifier, ErrorNormalizer
    from attempt.outcome import ClientResult, Result
    from attempt.reporting import LoggerLike, Reporter

T = TypeVar("T")

DEFAULT_TRIES = 3


def resolve_policy(
    tries: int, retry: RetryPolicy | Mapping[str, Any] | None
) -> RetryPolicy:
    """Build the retry policy for ``tries`` retries after the first attempt."""
    if tries < 0:
        raise ConfigurationError(
            f"tries must be >= 0, got {tries}",
            hint="tries counts retries after the first attempt; 0 means one attempt.",
        )
    max_attempts = tries + 1
    if retry is None:
        return RetryPolicy(max_attempts=max_attempts)
    if isinstance(retry, RetryPolicy):
        return replace(retry, max_attempts=max_attempts)
    try:
        return RetryPolicy(**{**retry, "max_attempts": max_attempts})
    except TypeError as exc:
        raise ConfigurationError(
            f"Invalid retry options: {exc}",
            hint="Use RetryPolicy field names, e.g. {'initial_delay_s': 0.1}.",
        ) from exc


class Attempt:
    """Outcome-returning wrappers bound to one set of dependencies.

    Dependencies are fixed at construction and never mutated, so one
    instance can serve any number of independent calls.
    """

    __slots__ = ("_deps",)

    #: Outcome constructors, exposed for adapters and tests.
    ok = staticmethod(outcome.ok)
    error = staticmethod(outcome.error)

    def __init__(self, deps: AttemptDependencies) -> None:
        self._deps = deps

    @property
    def dependencies(self) -> AttemptDependencies:
        return self._deps

    def __repr__(self) -> str:
        return f"Attempt(normalize_error={self._deps.normalize_error!r})"

    # --- Failure handling ---

    @overload
    def fail(
        self,
        caught: object,
        *,
        report: bool = ...,
        client: Literal[True],
        errors: ErrorClassifier | None = ...,
    ) -> ClientFailure: ...
    @overload
    def fail(
        self,
        caught: object,
        *,
        report: bool = ...,
        client: Literal[False] = ...,
        errors: ErrorClassifier | None = ...,
    ) -> InternalFailure: ...
    def fail(
        self,
        caught: object,
        *,
        report: bool = True,
        client: bool = False,
        errors: ErrorClassifier | None = None,
    ) -> InternalFailure | ClientFailure:
        """Turn a caught value into a failure outcome.

        The normalizer always sees the raw value. When *report* is set the
        logger and then the reporter receive it. In client mode only the
        normalized error's ``to_client()`` projection is kept; otherwise the
        outcome carries the raw value (coerced to an exception) and the
        normalized error.
        """
        deps = self._deps
        if errors is None:
            normalized = deps.normalize_error(caught)
        else:
            normalized = deps.normalize_error(caught, NormalizeContext(when=errors))

        if report:
            report_failure(caught, log_error=deps.log_error, reporter=deps.reporter)

        if client:
            return ClientFailure(error=ClientErrorData(client=normalized.to_client()))
        return InternalFailure(
            error=ErrorData(error=as_exception(caught), normalized=normalized)
        )

    # --- Single attempt ---

    @overload
    def try_(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        report: bool = ...,
        client: Literal[True],
        errors: ErrorClassifier | None = ...,
    ) -> Coroutine[Any, Any, ClientResult[T]]: ...
    @overload
    def try_(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        report: bool = ...,
        client: Literal[False] = ...,
        errors: ErrorClassifier | None = ...,
    ) -> Coroutine[Any, Any, Result[T]]: ...
    @overload
    def try_(
        self,
        operation: Callable[[], T],
        *,
        report: bool = ...,
        client: Literal[True],
        errors: ErrorClassifier | None = ...,
    ) -> ClientResult[T]: ...
    @overload
    def try_(
        self,
        operation: Callable[[], T],
        *,
        report: bool = ...,
        client: Literal[False] = ...,
        errors: ErrorClassifier | None = ...,
    ) -> Result[T]: ...
    def try_(
        self,
        operation: Callable[[], Any],
        *,
        report: bool = True,
        client: bool = False,
        errors: ErrorClassifier | None = None,
    ) -> Any:
        """Run *operation* once and return its outcome.

        Args:
            operation: Zero-argument callable, sync or returning an awaitable.
            report: Send failures to the logger and reporter.
            client: Return only the client-safe projection on failure.
            errors: Classifier forwarded to the normalizer as ``when``.

        Returns:
            An outcome, or a coroutine resolving to one when *operation*
            returned an awaitable.

        Example:
            result = attempt.try_(lambda: int("42"))
            pending = attempt.try_(fetch_user)  # async def fetch_user()
            result = await pending
        """
        try:
            value = operation()
        except Exception as exc:
            return self.fail(exc, report=report, client=client, errors=errors)

        if inspect.isawaitable(value):
            return self._settle(value, report=report, client=client, errors=errors)
        return outcome.ok(value)

    async def _settle(
        self,
        pending: Awaitable[Any],
        *,
        report: bool,
        client: bool,
        errors: ErrorClassifier | None,
    ) -> Any:
        try:
            value = await pending
        except Exception as exc:
            return self.fail(exc, report=report, client=client, errors=errors)
        return outcome.ok(value)

    # --- Retried attempts ---

    @overload
    async def retry(
        self,
        operation: Callable[[], Awaitable[T] | T],
        *,
        tries: int = ...,
        retry: RetryPolicy | Mapping[str, Any] | None = ...,
        report: bool = ...,
        client: Literal[True],
        errors: ErrorClassifier | None = ...,
    ) -> ClientResult[T]: ...
    @overload
    async def retry(
        self,
        operation: Callable[[], Awaitable[T] | T],
        *,
        tries: int = ...,
        retry: RetryPolicy | Mapping[str, Any] | None = ...,
        report: bool = ...,
        client: Literal[False] = ...,
        errors: ErrorClassifier | None = ...,
    ) -> Result[T]: ...
    async def retry(
        self,
        operation: Callable[[], Any],
        *,
        tries: int = DEFAULT_TRIES,
        retry: RetryPolicy | Mapping[str, Any] | None = None,
        report: bool = True,
        client: bool = False,
        errors: ErrorClassifier | None = None,
    ) -> Any:
        """Run *operation* with up to *tries* retries and return the outcome.

        Individual failures are left to the retry policy; only the final
        failure (exhaustion, a declined retry, or an abort signal) goes
        through :meth:`fail`, so failure payloads match :meth:`try_`.

        Args:
            operation: Zero-argument callable, sync or returning an awaitable.
            tries: Retries after the first attempt; total attempts = tries + 1.
            retry: ``RetryPolicy`` or mapping of its fields (delays, jitter,
                ``on_failed_attempt``, ``should_retry``, ``signal``).
            report: Send the final failure to the logger and reporter.
            client: Return only the client-safe projection on failure.
            errors: Classifier forwarded to the normalizer as ``when``.

        Invalid ``tries`` or ``retry`` options come back as a failure
        outcome carrying a ``ConfigurationError``.
        """
        try:
            policy = resolve_policy(tries, retry)
            value = await retry_async(operation, policy=policy)
        except Exception as exc:
            return self.fail(exc, report=report, client=client, errors=errors)
        return outcome.ok(value)


def create_attempt(
    normalize_error: ErrorNormalizer,
    *,
    logger: LoggerLike | None = None,
    reporter: Reporter | None = None,
) -> Attempt:
    """Build an :class:`Attempt` from its dependencies.

    Example:
        attempt = create_attempt(
            my_normalizer,
            logger=logging.getLogger("myapp"),
            reporter=sentry_sdk.capture_exception,
        )
    """
    return Attempt(
        AttemptDependencies(
            normalize_error=normalize_error, logger=logger, reporter=reporter
        )
    )
