"""Pydantic-based validation helpers for inbound documents."""

from __future__ import annotations

from typing import TypeVar

from pydantic import TypeAdapter, ValidationError

SchemaT = TypeVar("SchemaT")


class IncomingDataError(ValueError):
    """Raised when inbound data fails validation."""


def validate_as(schema: type[SchemaT], payload: object) -> SchemaT:
    try:
        return TypeAdapter(schema).validate_python(payload)
    except ValidationError as exc:
        message = f"Invalid payload for {schema}."
        raise IncomingDataError(message) from exc


def format_validation_error(exc: ValidationError) -> str:
    """Render the first pydantic error as ``<location>: <message>``."""
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ("<root>",))) or "<root>"
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}"
