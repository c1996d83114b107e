"""Canonical snapshot serialization."""

import pytest
from pydantic import BaseModel

from blesstest.kernel.canonical import (
    canonical_json_bytes,
    parse_canonical,
    serialize_snapshot,
    to_json_value,
)


@pytest.mark.unit
def test_serialize_snapshot_compact_with_single_trailing_newline():
    """Compact layout ends with exactly one newline."""
    assert serialize_snapshot({"result": 3}) == b'{"result":3}\n'
    assert serialize_snapshot(None) == b"null\n"
    assert serialize_snapshot([]) == b"[]\n"
    assert serialize_snapshot("") == b'""\n'


@pytest.mark.unit
def test_serialize_snapshot_stable_regardless_of_key_order():
    """Insertion order of keys, nested too, does not change the bytes."""
    a = serialize_snapshot({"b": {"y": 1, "x": 2}, "a": [{"d": 1, "c": 2}]})
    b = serialize_snapshot({"a": [{"c": 2, "d": 1}], "b": {"x": 2, "y": 1}})
    assert a == b
    assert a == b'{"a":[{"c":2,"d":1}],"b":{"x":2,"y":1}}\n'


@pytest.mark.unit
@pytest.mark.parametrize(
    "value",
    [
        {"z": [1, 2.5, -0.0, 1e300], "a": {"nested": [True, False, None]}},
        "ünïcödé   \"quoted\"",
        [[], {}, [{}]],
        12345678901234567890,
    ],
    ids=["mixed", "unicode", "empty_containers", "bigint"],
)
def test_serialize_snapshot_idempotent(value):
    """serialize(parse(serialize(v))) == serialize(v), in both layouts."""
    once = serialize_snapshot(value)
    assert serialize_snapshot(parse_canonical(once)) == once
    pretty = serialize_snapshot(value, indent=2)
    assert serialize_snapshot(parse_canonical(pretty), indent=2) == pretty


@pytest.mark.unit
def test_int_and_float_stay_distinct():
    """1 and 1.0 keep their own textual forms."""
    assert serialize_snapshot({"i": 1, "f": 1.0}) == b'{"f":1.0,"i":1}\n'


@pytest.mark.unit
def test_indent_layout_is_line_oriented():
    """indent=2 puts one member per line and sorts keys."""
    out = serialize_snapshot({"b": 1, "a": [1]}, indent=2)
    assert out == b'{\n  "a": [\n    1\n  ],\n  "b": 1\n}\n'


@pytest.mark.unit
def test_indent_out_of_range_rejected():
    """Indent outside 0..8 raises ValueError."""
    with pytest.raises(ValueError, match="indent"):
        serialize_snapshot({}, indent=9)


@pytest.mark.unit
def test_non_ascii_emitted_as_utf8():
    """ensure_ascii=False keeps text readable in diffs."""
    assert serialize_snapshot("é") == '"é"\n'.encode()


@pytest.mark.unit
def test_base_model_dumped_in_json_mode():
    """BaseModel outputs are dumped via model_dump(mode='json')."""

    class M(BaseModel):
        y: int
        x: str

    assert canonical_json_bytes(M(y=1, x="a")) == b'{"x":"a","y":1}'


@pytest.mark.unit
def test_tuples_serialize_as_arrays():
    """Tuples are JSON arrays."""
    assert canonical_json_bytes({"t": (1, 2)}) == b'{"t":[1,2]}'


@pytest.mark.unit
@pytest.mark.parametrize(
    ("value", "exc", "match"),
    [
        (float("nan"), ValueError, "Out of range"),
        ({"x": [float("inf")]}, ValueError, r"<root>\.x\.0"),
        ({1: "a"}, TypeError, "must be str"),
        ({1, 2}, TypeError, "Unsupported type"),
        ({"b": b"raw"}, TypeError, "Unsupported type"),
        (object(), TypeError, "Unsupported type"),
    ],
    ids=["nan", "nested_inf", "int_key", "set", "bytes", "object"],
)
def test_to_json_value_rejects_ambiguous_values(value, exc, match):
    """Values without a single canonical JSON form fail hard."""
    with pytest.raises(exc, match=match):
        to_json_value(value)
