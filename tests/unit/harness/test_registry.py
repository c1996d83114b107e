"""Harness registry."""

import pytest
from pydantic.types import JsonValue

from blesstest.harness.registry import HarnessRegistry
from tests.unit.helpers import AddInput, add


def _echo(payload):
    return payload


def _two_args(a: int, b: int) -> int:
    return a + b


@pytest.mark.unit
def test_register_and_get():
    """register stores a descriptor retrievable by name."""
    reg = HarnessRegistry()
    descriptor = reg.register("echo", _echo)
    assert reg.get("echo") is descriptor
    assert descriptor.input_schema is JsonValue
    assert "echo" in reg
    assert len(reg) == 1


@pytest.mark.unit
def test_get_unknown_returns_none():
    """Unknown names resolve to None."""
    assert HarnessRegistry().get("nope") is None


@pytest.mark.unit
def test_duplicate_registration_raises_unless_override():
    """Duplicate name raises; override=True replaces."""
    reg = HarnessRegistry()
    reg.register("echo", _echo)
    with pytest.raises(ValueError, match="already registered"):
        reg.register("echo", add)
    reg.register("echo", add, input_schema=AddInput, override=True)
    assert reg.get("echo").invoke is add


@pytest.mark.unit
def test_decorator_derives_schema_from_annotation():
    """Bare decorator uses the function name and first-parameter annotation."""
    reg = HarnessRegistry()
    returned = reg.harness(add)
    assert returned is add
    assert reg.get("add").input_schema is AddInput


@pytest.mark.unit
def test_named_decorator_and_unannotated_param():
    """Named decorator registers under the given name; no annotation -> JsonValue."""
    reg = HarnessRegistry()

    @reg.harness("echo_any")
    def echo(payload):
        return payload

    assert reg.names() == ("echo_any",)
    assert reg.get("echo_any").input_schema is JsonValue
    assert echo({"a": 1}) == {"a": 1}


@pytest.mark.unit
def test_decorator_requires_single_argument():
    """Harness functions must take exactly one argument."""
    with pytest.raises(TypeError, match="exactly one argument"):
        HarnessRegistry().harness(_two_args)


@pytest.mark.unit
def test_frozen_registry_rejects_registration():
    """freeze() closes the registry."""
    reg = HarnessRegistry()
    reg.register("echo", _echo)
    reg.freeze()
    assert reg.frozen
    with pytest.raises(RuntimeError, match="frozen"):
        reg.register("other", _echo)


@pytest.mark.unit
def test_names_sorted_and_empty_name_rejected():
    """names() is sorted; blank names are invalid."""
    reg = HarnessRegistry()
    reg.register("zeta", _echo)
    reg.register("alpha", _echo)
    assert reg.names() == ("alpha", "zeta")
    with pytest.raises(ValueError, match="non-empty"):
        reg.register("  ", _echo)
