"""Harness input schema validation. Pure; no coercion beyond JSON's own types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError
from pydantic.types import JsonValue

from blesstest.kernel.canonical import JSONReadOnly, canonical_json_bytes

ROOT_PATH = "<root>"


class FieldError(BaseModel):
    """One schema violation at a dotted field path."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str
    message: str
    type: str


class SchemaValidationError(ValueError):
    """Raised when a payload does not conform to a harness input schema."""

    def __init__(self, errors: tuple[FieldError, ...]) -> None:
        """Store field errors and build a one-line summary message.

        Args:
            errors: Violations in the order the validator reported them.
        """
        summary = "; ".join(f"{e.path}: {e.message}" for e in errors)
        super().__init__(f"Input does not match schema: {summary}")
        self.errors = errors


@dataclass(frozen=True)
class ValidatedInput:
    """Payload that passed validation. raw is the untouched input."""

    raw: JSONReadOnly
    value: Any


def build_adapter(schema: Any) -> TypeAdapter[Any]:
    """Build a reusable validator for a schema description.

    Args:
        schema: Any type Pydantic can validate (BaseModel subclass, TypedDict,
            builtin generic such as dict[str, int], JsonValue, ...).

    Returns:
        TypeAdapter bound to the schema.
    """
    if isinstance(schema, TypeAdapter):
        return schema
    return TypeAdapter(schema)


def _format_loc(loc: tuple[int | str, ...]) -> str:
    if not loc:
        return ROOT_PATH
    return ".".join(str(part) for part in loc)


def field_errors_from(exc: ValidationError) -> tuple[FieldError, ...]:
    """Convert a Pydantic ValidationError into stable field errors.

    Args:
        exc: Validation error raised by Pydantic.

    Returns:
        One FieldError per reported problem.
    """
    return tuple(
        FieldError(
            path=_format_loc(tuple(err["loc"])),
            message=err["msg"],
            type=err["type"],
        )
        for err in exc.errors(include_url=False)
    )


def validate(adapter: TypeAdapter[Any], payload: JSONReadOnly) -> ValidatedInput:
    """Validate a JSON payload against a schema in strict JSON mode.

    Strict JSON mode rejects "1" for an int and 1.5 for an int, but accepts a
    JSON integer where a float is declared. Defaults are filled only where the
    schema declares them.

    Args:
        adapter: Schema validator from build_adapter().
        payload: JSON payload from the manifest.

    Returns:
        ValidatedInput holding the raw payload and the typed value.

    Raises:
        SchemaValidationError: If the payload does not conform.
    """
    try:
        encoded = canonical_json_bytes(payload)
    except (TypeError, ValueError) as exc:
        raise SchemaValidationError(
            (FieldError(path=ROOT_PATH, message=str(exc), type="json_invalid"),)
        ) from exc
    try:
        value = adapter.validate_json(encoded, strict=True)
    except ValidationError as exc:
        raise SchemaValidationError(field_errors_from(exc)) from exc
    return ValidatedInput(raw=payload, value=value)


def json_schema(adapter: TypeAdapter[Any]) -> dict[str, JsonValue]:
    """Return the JSON Schema document describing accepted input.

    Args:
        adapter: Schema validator from build_adapter().

    Returns:
        JSON Schema mapping.
    """
    return adapter.json_schema()
