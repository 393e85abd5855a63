"""attempt: run fallible operations and get outcome values instead of exceptions.

Public API:
    - attempt: Default instance (default normalizer, ``attempt`` logger)
    - create_attempt(): Build an instance with your own dependencies
    - Attempt.try_(), Attempt.retry(): Run an operation once / with retries
    - ok(), error(): Outcome constructors
    - RetryPolicy: Backoff, callbacks and cancellation for retry()
"""

from __future__ import annotations

import logging

from attempt.config import AttemptDependencies
from attempt.core import Attempt, create_attempt
from attempt.errors import (
    AbortRetry,
    AttemptError,
    CapturedError,
    ConfigurationError,
    RetryAbortedError,
)
from attempt.normalize import (
    ClientError,
    ErrorNormalizer,
    NormalizeContext,
    NormalizedError,
    SimpleError,
    default_normalizer,
)
from attempt.outcome import (
    ClientErrorData,
    ClientFailure,
    ClientResult,
    ErrorData,
    InternalFailure,
    Outcome,
    Result,
    Success,
    error,
    from_json,
    is_client_failure,
    ok,
    parse_outcome,
    to_json,
)
from attempt.retry import RetryContext, RetryPolicy

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("attempt-result")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("attempt").addHandler(logging.NullHandler())

#: Default instance: failures are logged to the ``attempt`` logger.
attempt = create_attempt(default_normalizer, logger=logging.getLogger("attempt"))

__all__ = [
    "AbortRetry",
    "Attempt",
    "AttemptDependencies",
    "AttemptError",
    "CapturedError",
    "ClientError",
    "ClientErrorData",
    "ClientFailure",
    "ClientResult",
    "ConfigurationError",
    "ErrorData",
    "ErrorNormalizer",
    "InternalFailure",
    "NormalizeContext",
    "NormalizedError",
    "Outcome",
    "Result",
    "RetryAbortedError",
    "RetryContext",
    "RetryPolicy",
    "SimpleError",
    "Success",
    "attempt",
    "create_attempt",
    "default_normalizer",
    "error",
    "from_json",
    "is_client_failure",
    "ok",
    "parse_outcome",
    "to_json",
]
