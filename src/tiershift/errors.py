"""Backend failure ADT - the stable categories every backend maps its errors into.

The console core never inspects SDK exceptions. Each backend implementation
classifies its own failures into one of the variants below, and the core only
pattern-matches on them to produce status lines. Classification annotates;
it never retries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


# Codes with a friendlier explanation than the raw service message.
NO_SUCH_KEY = "NoSuchKey"
INVALID_OBJECT_STATE = "InvalidObjectState"


@dataclass(frozen=True)
class ValidationFailed:
    """A local precondition was not met; nothing was sent to the backend.

    Attributes:
        message: What the operator needs to do first.
    """

    message: str
    kind: Literal["ValidationFailed"] = "ValidationFailed"


@dataclass(frozen=True)
class ServiceRejected:
    """The backend understood the request but refused it.

    Corresponds to botocore ``ClientError``.

    Attributes:
        code: Service error code (e.g. "NoSuchKey", "InvalidObjectState").
        message: Service error message.
    """

    code: str
    message: str
    kind: Literal["ServiceRejected"] = "ServiceRejected"


@dataclass(frozen=True)
class DispatchFailure:
    """The request never reached the backend (DNS, connection, credentials).

    Attributes:
        message: Underlying transport error text.
    """

    message: str
    kind: Literal["DispatchFailure"] = "DispatchFailure"


@dataclass(frozen=True)
class TimedOut:
    """No response arrived in time. Retrying is up to the operator.

    Attributes:
        message: Underlying timeout error text.
    """

    message: str
    kind: Literal["TimedOut"] = "TimedOut"


@dataclass(frozen=True)
class ResponseMalformed:
    """The backend replied but the reply could not be parsed.

    Attributes:
        message: Parser error text.
    """

    message: str
    kind: Literal["ResponseMalformed"] = "ResponseMalformed"


@dataclass(frozen=True)
class UnknownFailure:
    """Catch-all for failures that match no other category.

    Attributes:
        raw: Text of the original error.
    """

    raw: str
    kind: Literal["UnknownFailure"] = "UnknownFailure"


BackendError = (
    ValidationFailed
    | ServiceRejected
    | DispatchFailure
    | TimedOut
    | ResponseMalformed
    | UnknownFailure
)


def describe_error(error: BackendError) -> str:
    """Human-readable detail for a status line."""
    match error:
        case ValidationFailed(message=message):
            return message
        case ServiceRejected(code=code) if code == NO_SUCH_KEY:
            return (
                f"{code}: object was not found "
                "(mask may target stale keys or bucket differs)"
            )
        case ServiceRejected(code=code) if code == INVALID_OBJECT_STATE:
            return (
                f"{code}: object is already being restored "
                "or not eligible for this operation"
            )
        case ServiceRejected(code=code, message=message):
            return f"{code}: {message or 'no message provided'}"
        case DispatchFailure(message=message):
            return f"network/dispatch failure: {message}"
        case TimedOut():
            return "request timed out; please retry"
        case ResponseMalformed(message=message):
            return f"response error: {message}"
        case UnknownFailure(raw=raw):
            return raw
    raise AssertionError(f"Unhandled backend error: {error!r}")
