"""Error normalization contracts and the default normalizer.

A normalizer turns any caught value into a domain error that can project
itself to a client-safe subset via ``to_client()``. Normalizers must not
raise; anything they raise escapes ``try_``/``retry`` unchanged.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any, Protocol, TypedDict, runtime_checkable

from pydantic import BaseModel, ConfigDict

from attempt.outcome import as_exception

log = logging.getLogger(__name__)

UNKNOWN_ERROR = "UNKNOWN_ERROR"
DEFAULT_USER_MESSAGE = "An error occurred"

#: Caller-supplied classifier mapping a failure to a domain code.
ErrorClassifier = Callable[[Exception], Any]


class NormalizeContext(TypedDict):
    """Auxiliary context handed to a normalizer alongside the caught value."""

    when: ErrorClassifier


@runtime_checkable
class NormalizedError(Protocol):
    """Domain error shape; ``to_client()`` is the only client-safe view."""

    def to_client(self) -> Any: ...  # noqa: D102


class ErrorNormalizer(Protocol):
    """Callable turning a caught value into a :class:`NormalizedError`."""

    def __call__(  # noqa: D102
        self, caught: object, context: NormalizeContext | None = None, /
    ) -> NormalizedError: ...


class ClientError(BaseModel):
    """Fields of a :class:`SimpleError` that are safe to expose."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    message: str
    code: str
    user_message: str


class SimpleError(BaseModel):
    """Default normalized error."""

    model_config = ConfigDict(frozen=True)

    message: str
    code: str = UNKNOWN_ERROR
    user_message: str = DEFAULT_USER_MESSAGE

    def to_client(self) -> ClientError:
        return ClientError(
            message=self.message, code=self.code, user_message=self.user_message
        )


def _classify(when: ErrorClassifier, error: Exception) -> str | None:
    try:
        code = when(error)
    except Exception as exc:
        # Keep the never-raise contract: a broken classifier falls back.
        log.debug("Error classifier failed for %r: %s", error, exc)
        return None
    if isinstance(code, str) and code:
        return code
    return None


def default_normalizer(
    caught: object, context: NormalizeContext | None = None
) -> SimpleError:
    """Normalize any caught value into a :class:`SimpleError`.

    The message is the exception message, or the string form of a
    non-exception value. When *context* carries a ``when`` classifier that
    returns a non-empty string, that string becomes the error code.
    """
    message = str(caught)
    code = UNKNOWN_ERROR
    if context is not None and "when" in context:
        code = _classify(context["when"], as_exception(caught)) or UNKNOWN_ERROR
    return SimpleError(message=message, code=code)
