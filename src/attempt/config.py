"""Configuration: frozen dependency bundle injected once per Attempt."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from attempt.errors import ConfigurationError
from attempt.reporting import adapt_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from attempt.normalize import ErrorNormalizer
    from attempt.reporting import LoggerLike, Reporter


@dataclass(frozen=True)
class AttemptDependencies:
    """Immutable dependencies shared by every call on an Attempt.

    The logger may be an object with an ``error()`` method (for example a
    ``logging.Logger``) or a plain function; it is adapted once here.

    Example:
        deps = AttemptDependencies(
            normalize_error=default_normalizer,
            logger=logging.getLogger("myapp"),
        )
    """

    normalize_error: ErrorNormalizer
    logger: LoggerLike | None = None
    reporter: Reporter | None = None
    log_error: Callable[[object], object] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate dependency shapes and adapt the logger."""
        if not callable(self.normalize_error):
            raise ConfigurationError(
                "normalize_error must be callable",
                hint="Pass a function (caught, context=None) -> normalized error.",
            )
        if self.reporter is not None and not callable(self.reporter):
            raise ConfigurationError(
                "reporter must be callable",
                hint="Pass a function taking the caught error, or None.",
            )
        object.__setattr__(self, "log_error", adapt_logger(self.logger))
