"""Failure reporting side effects: logger first, then reporter."""

from __future__ import annotations

from collections.abc import Callable
import inspect
import logging
from typing import Protocol, runtime_checkable

from attempt.errors import ConfigurationError

log = logging.getLogger(__name__)

#: Plain-function sink receiving the raw caught value.
Reporter = Callable[[object], object]


@runtime_checkable
class Logger(Protocol):
    """Object-style logger; ``logging.Logger`` satisfies it."""

    def error(self, msg: object, /) -> object: ...  # noqa: D102


LoggerLike = Logger | Callable[[object], object]


def _discard(_: object) -> None:
    return None


def adapt_logger(logger: LoggerLike | None) -> Callable[[object], object]:
    """Return a single call signature for either logger shape.

    Plain functions are used as-is; objects contribute their bound ``error``.
    """
    if logger is None:
        return _discard
    if inspect.isroutine(logger):
        return logger
    error = getattr(logger, "error", None)
    if callable(error):
        return error
    if callable(logger):
        return logger
    raise ConfigurationError(
        f"Unsupported logger: {logger!r}",
        hint="Pass an object with an error() method or a function taking the error.",
    )


def _invoke(sink: Callable[[object], object], caught: object, name: str) -> None:
    try:
        sink(caught)
    except Exception as exc:
        # A failing sink should never mask the failure being reported.
        log.warning("Failure %s raised while reporting %r: %s", name, caught, exc)


def report_failure(
    caught: object,
    *,
    log_error: Callable[[object], object],
    reporter: Reporter | None = None,
) -> None:
    """Hand *caught* to the logger and then to the reporter.

    Return values are ignored. Exceptions raised by either sink are logged
    and do not stop the other sink from running.
    """
    _invoke(log_error, caught, "logger")
    if reporter is not None:
        _invoke(reporter, caught, "reporter")
