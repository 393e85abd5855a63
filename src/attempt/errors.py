"""Exception hierarchy for attempt."""

from __future__ import annotations


class AttemptError(Exception):
    """Base exception for all attempt errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(AttemptError):
    """Construction or retry configuration is invalid."""


class CapturedError(AttemptError):
    """Error-like wrapper for a failure value that was not an exception.

    Also used when a serialized raw error is rebuilt: ``type_name`` keeps the
    class name of the error that was originally captured.
    """

    def __init__(self, message: str, *, type_name: str | None = None) -> None:
        super().__init__(message)
        self.type_name = type_name or type(self).__name__


class RetryAbortedError(AttemptError):
    """Retrying stopped because the cancellation signal was set."""

    def __init__(
        self,
        message: str = "Retry aborted",
        *,
        attempt_number: int = 0,
        last_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.attempt_number = attempt_number
        self.last_error = last_error


class AbortRetry(AttemptError):  # noqa: N818
    """Raised by an operation to stop retrying immediately.

    When ``cause`` is given it is surfaced as the final failure instead of
    the ``AbortRetry`` itself.
    """

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause
