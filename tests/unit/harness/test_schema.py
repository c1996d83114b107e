"""Harness input schema validation."""

import pytest
from pydantic import BaseModel, Field
from pydantic.types import JsonValue
from typing_extensions import TypedDict

from blesstest.harness.schema import (
    SchemaValidationError,
    build_adapter,
    json_schema,
    validate,
)


class Item(BaseModel):
    name: str
    qty: int = 1


class Order(BaseModel):
    items: list[Item]
    ratio: float
    tags: list[str] = Field(default_factory=list)


class Point(TypedDict):
    x: int
    y: int


@pytest.mark.unit
def test_validate_returns_raw_unchanged_and_typed_value():
    """Raw payload is kept as-is next to the typed value."""
    payload = {"items": [{"name": "a"}], "ratio": 2}
    validated = validate(build_adapter(Order), payload)
    assert validated.raw is payload
    assert isinstance(validated.value, Order)
    assert validated.value.items[0].qty == 1  # declared default
    assert validated.value.ratio == 2.0  # JSON int accepted for float


@pytest.mark.unit
@pytest.mark.parametrize(
    ("payload", "path"),
    [
        ({"items": [{"name": "a", "qty": "2"}], "ratio": 1.0}, "items.0.qty"),
        ({"items": [{"name": "a", "qty": 1.5}], "ratio": 1.0}, "items.0.qty"),
        ({"items": [{"name": "a", "qty": True}], "ratio": 1.0}, "items.0.qty"),
        ({"items": [{}], "ratio": 1.0}, "items.0.name"),
        ({"items": [], "ratio": "1.0"}, "ratio"),
        ([], "<root>"),
    ],
    ids=["str_for_int", "float_for_int", "bool_for_int", "missing", "str_float", "root"],
)
def test_validate_rejects_without_coercion(payload, path):
    """No implicit coercion; offending field path is reported."""
    with pytest.raises(SchemaValidationError) as info:
        validate(build_adapter(Order), payload)
    assert path in [e.path for e in info.value.errors]
    assert path in str(info.value)


@pytest.mark.unit
def test_validate_typed_dict_and_builtin_generics():
    """Non-model schemas work the same way."""
    assert validate(build_adapter(Point), {"x": 1, "y": 2}).value == {"x": 1, "y": 2}
    with pytest.raises(SchemaValidationError):
        validate(build_adapter(Point), {"x": 1})
    assert validate(build_adapter(dict[str, int]), {"k": 3}).value == {"k": 3}


@pytest.mark.unit
def test_any_json_schema_accepts_everything_json():
    """JsonValue schema accepts any JSON value."""
    payload = {"a": [1, "two", None, {"b": False}]}
    assert validate(build_adapter(JsonValue), payload).value == payload


@pytest.mark.unit
def test_non_json_payload_is_a_root_violation():
    """Payload that cannot be JSON (NaN) is rejected at the root."""
    with pytest.raises(SchemaValidationError) as info:
        validate(build_adapter(JsonValue), {"x": float("nan")})
    assert info.value.errors[0].path == "<root>"


@pytest.mark.unit
def test_json_schema_describes_input():
    """JSON Schema export lists required fields."""
    schema = json_schema(build_adapter(Item))
    assert schema["required"] == ["name"]
    assert set(schema["properties"]) == {"name", "qty"}
