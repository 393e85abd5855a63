"""Outcome values: success or failure, returned instead of raising.

Every outcome carries an ``ok`` boolean. Failures additionally carry a payload
whose key-set tells the two failure kinds apart:

- ``{"error", "normalized"}`` for internal failures (raw cause + domain error)
- ``{"client"}`` for client failures (the sanitized projection only)

Payload models forbid extra keys, so the distinction survives a round trip
through JSON.
"""

from __future__ import annotations

from collections.abc import Mapping
import json
from typing import Any, Generic, Literal, TypeVar, overload

from pydantic import (
    BaseModel,
    ConfigDict,
    TypeAdapter,
    field_serializer,
    field_validator,
)

from attempt.errors import CapturedError

T = TypeVar("T")


def as_exception(value: object) -> Exception:
    """Return *value* if it is an ``Exception``, else wrap its string form."""
    if isinstance(value, Exception):
        return value
    if isinstance(value, BaseException):
        return CapturedError(str(value), type_name=type(value).__name__)
    return CapturedError(str(value))


def error_type_name(error: BaseException) -> str:
    """Return the class name recorded for *error*."""
    if isinstance(error, CapturedError):
        return error.type_name
    return type(error).__name__


class ErrorData(BaseModel):
    """Internal failure payload: the raw cause and its normalized form."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    error: Exception
    normalized: Any

    @field_validator("error", mode="before")
    @classmethod
    def _coerce_error(cls, value: Any) -> Exception:
        # Serialized errors come back as {"type": ..., "message": ...}.
        if isinstance(value, Mapping):
            return CapturedError(
                str(value.get("message", "")), type_name=value.get("type")
            )
        return as_exception(value)

    @field_serializer("error", when_used="json")
    def _serialize_error(self, error: Exception) -> dict[str, str]:
        return {"type": error_type_name(error), "message": str(error)}


class ClientErrorData(BaseModel):
    """Client failure payload: nothing but the client-safe projection."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    client: Any


class Success(BaseModel, Generic[T]):
    """A successful outcome. ``data`` is stored unchanged, ``None`` included."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ok: Literal[True] = True
    error: None = None
    data: T


class InternalFailure(BaseModel):
    """A failure carrying full diagnostic detail for privileged contexts."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ok: Literal[False] = False
    error: ErrorData
    data: None = None


class ClientFailure(BaseModel):
    """A failure carrying only the client-safe projection."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ok: Literal[False] = False
    error: ClientErrorData
    data: None = None


type Result[T] = Success[T] | InternalFailure
type ClientResult[T] = Success[T] | ClientFailure
type Outcome[T] = Success[T] | InternalFailure | ClientFailure

_OUTCOME_ADAPTER: TypeAdapter[Success[Any] | InternalFailure | ClientFailure] = (
    TypeAdapter(Success | InternalFailure | ClientFailure)
)


def ok(data: T) -> Success[T]:
    """Build a success outcome wrapping *data*."""
    return Success(data=data)


@overload
def error(payload: ClientErrorData) -> ClientFailure: ...
@overload
def error(payload: ErrorData) -> InternalFailure: ...
@overload
def error(payload: Mapping[str, Any]) -> InternalFailure | ClientFailure: ...
def error(
    payload: ErrorData | ClientErrorData | Mapping[str, Any],
) -> InternalFailure | ClientFailure:
    """Build a failure outcome from a payload.

    Mappings are accepted when their keys are exactly those of one payload
    kind; ``{"client": ...}`` builds a client failure, anything else is
    validated as an internal payload.
    """
    if isinstance(payload, ClientErrorData):
        return ClientFailure(error=payload)
    if isinstance(payload, ErrorData):
        return InternalFailure(error=payload)
    if set(payload) == {"client"}:
        return ClientFailure(error=ClientErrorData(client=payload["client"]))
    return InternalFailure(error=ErrorData.model_validate(dict(payload)))


def is_client_failure(outcome: Outcome[Any]) -> bool:
    """Return True for a failure carrying only the client projection."""
    return not outcome.ok and isinstance(outcome.error, ClientErrorData)


def to_json(outcome: Outcome[Any]) -> str:
    """Serialize an outcome to JSON text."""
    return outcome.model_dump_json()


def parse_outcome(obj: Mapping[str, Any]) -> Outcome[Any]:
    """Rebuild an outcome from its plain structured form."""
    return _OUTCOME_ADAPTER.validate_python(obj)


def from_json(text: str | bytes) -> Outcome[Any]:
    """Rebuild an outcome from JSON text produced by :func:`to_json`."""
    return parse_outcome(json.loads(text))
