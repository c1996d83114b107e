"""Canonical JSON serialization for snapshot files (deterministic)."""

from __future__ import annotations

import json
import math
from collections.abc import Mapping, Sequence

from pydantic import BaseModel
from pydantic.types import JsonValue
from typing_extensions import TypeAliasType

# Read-only JSON type: covariant Mapping/Sequence so list[str], dict[str,str]
# etc. work without cast. Use for params and returns when data is only read.
JSONReadOnly = TypeAliasType(
    "JSONReadOnly",
    Mapping[str, "JSONReadOnly"]
    | Sequence["JSONReadOnly"]
    | str
    | int
    | float
    | bool
    | None,
)

CanonicalJSONInput = BaseModel | JSONReadOnly

MAX_INDENT = 8


def to_json_value(obj: CanonicalJSONInput, *, path: str = "<root>") -> JsonValue:
    """Normalize a value into a plain JSON tree, rejecting anything ambiguous.

    Supported types: BaseModel (via model_dump(mode='json')), dict with str
    keys, list, tuple, str, int, float, bool, None.

    Args:
        obj: Model or JSON-like structure to normalize.
        path: Location of obj inside the enclosing value (for diagnostics).

    Returns:
        Plain JSON value built from dict/list/str/int/float/bool/None only.

    Raises:
        TypeError: On unsupported type or non-string object key.
        ValueError: On NaN or Infinity.
    """
    if isinstance(obj, BaseModel):
        return to_json_value(obj.model_dump(mode="json"), path=path)
    if obj is None or isinstance(obj, (bool, int, str)):
        return obj
    if isinstance(obj, float):
        if not math.isfinite(obj):
            raise ValueError(f"Out of range float value at {path}: {obj!r}")
        return obj
    if isinstance(obj, dict):
        out: dict[str, JsonValue] = {}
        for key, value in obj.items():
            if not isinstance(key, str):
                raise TypeError(
                    f"Object key at {path} must be str, got {type(key).__name__}"
                )
            out[key] = to_json_value(value, path=f"{path}.{key}")
        return out
    if isinstance(obj, (list, tuple)):
        return [to_json_value(item, path=f"{path}.{i}") for i, item in enumerate(obj)]
    raise TypeError(
        f"Unsupported type for canonical JSON at {path}: {type(obj).__name__}"
    )


def canonical_json_bytes(obj: CanonicalJSONInput) -> bytes:
    """Serialize to compact canonical JSON bytes (no trailing newline).

    Args:
        obj: Model or JSON-like structure to serialize.

    Returns:
        UTF-8 encoded canonical JSON bytes.
    """
    raw = json.dumps(
        to_json_value(obj),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return raw.encode("utf-8")


def serialize_snapshot(obj: CanonicalJSONInput, *, indent: int | None = None) -> bytes:
    """Serialize a harness output into snapshot file bytes.

    Same logical value always yields byte-identical text: keys sorted, fixed
    separators, exactly one trailing newline. indent=None is the compact
    single-line layout; an int gives a line-per-member layout.

    Args:
        obj: Harness output (model or JSON-like structure).
        indent: Optional indentation width (0..MAX_INDENT).

    Returns:
        UTF-8 snapshot bytes ending in a single newline.

    Raises:
        ValueError: If indent is out of range.
    """
    if indent is None:
        return canonical_json_bytes(obj) + b"\n"
    if not 0 <= indent <= MAX_INDENT:
        raise ValueError(f"indent must be between 0 and {MAX_INDENT}, got {indent}")
    raw = json.dumps(
        to_json_value(obj),
        sort_keys=True,
        indent=indent,
        separators=(",", ": "),
        ensure_ascii=False,
        allow_nan=False,
    )
    return raw.encode("utf-8") + b"\n"


def parse_canonical(data: bytes) -> JsonValue:
    """Parse snapshot bytes back into a JSON value.

    Args:
        data: Snapshot file content.

    Returns:
        Parsed JSON value.
    """
    return json.loads(data.decode("utf-8"))
