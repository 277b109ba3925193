"""Result-based Pydantic construction for masks, policies and settings."""

from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel, ValidationError

from tiershift.result import Failure, Result, Success


TModel = TypeVar("TModel", bound=BaseModel)

__all__: list[str] = ["validate_model", "validation_message"]


def validate_model(model_cls: type[TModel], **data: object) -> Result[TModel, ValidationError]:
    """
    Construct a Pydantic model and return validation problems as a Failure.

    Pydantic raises on invalid input; the exception is caught here, at the
    boundary, so callers stay in Result-land.
    """
    try:
        return Success(model_cls(**data))
    except ValidationError as exc:
        return Failure(exc)


def validation_message(exc: ValidationError) -> str:
    """Return the first validation error as a single status-line message.

    Pydantic prefixes messages raised from validators with ``"Value error, "``;
    that prefix is noise in a status bar and is stripped.
    """
    errors = exc.errors()
    if not errors:
        return str(exc)
    message = str(errors[0]["msg"])
    return message.removeprefix("Value error, ")
