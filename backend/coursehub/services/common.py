"""Helpers shared by the services."""

from typing import Any, Mapping, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from coursehub.core.errors import ValidationFailedError


M = TypeVar("M", bound=BaseModel)


def parse_input(schema: Type[M], payload: Union[M, Mapping[str, Any]]) -> M:
    """
    Validate a service payload against its schema.

    Accepts an already validated model or a plain mapping; schema errors are
    raised as ValidationFailedError.
    """
    if isinstance(payload, schema):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        messages = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()))
            message = error.get("msg", "invalid value")
            messages.append(f"{location}: {message}" if location else message)
        raise ValidationFailedError(f"Validation Error: {', '.join(messages)}") from exc
