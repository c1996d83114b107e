"""Harness invocation: resolve, validate input, execute, capture failures."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import StrEnum

from pydantic import BaseModel, ConfigDict
from pydantic.types import JsonValue
from typing_extensions import TypeAliasType

from blesstest.harness.registry import HarnessDescriptor, HarnessRegistry
from blesstest.harness.schema import (
    FieldError,
    SchemaValidationError,
    ValidatedInput,
    validate,
)
from blesstest.kernel.canonical import JSONReadOnly, to_json_value

_LOGGER = logging.getLogger(__name__)


class HarnessErrorKind(StrEnum):
    """Why a harness did not produce a usable output."""

    UNKNOWN_HARNESS = "unknown_harness"
    PANIC = "panic"
    TIMEOUT = "timeout"
    OUTPUT_NOT_SERIALIZABLE = "output_not_serializable"


class HarnessError(BaseModel):
    """Diagnostic for a failed invocation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: HarnessErrorKind
    message: str


@dataclass(frozen=True)
class InvocationOk:
    """Harness ran and returned a JSON-compatible output."""

    output: JsonValue
    validated: ValidatedInput


@dataclass(frozen=True)
class InputRejected:
    """Params failed schema validation; harness was not called."""

    errors: tuple[FieldError, ...]


@dataclass(frozen=True)
class InvocationFailed:
    """Harness could not be resolved, raised, timed out, or returned junk."""

    error: HarnessError


InvocationOutcome = TypeAliasType(
    "InvocationOutcome", InvocationOk | InputRejected | InvocationFailed
)


class _HarnessTimeoutError(RuntimeError):
    """Raised when one harness call exceeds the configured timeout."""


@dataclass
class _CallResult:
    """Return value or exception carried back from the harness thread."""

    value: object = None
    error: BaseException | None = None
    done: threading.Event = field(default_factory=threading.Event)


def _call_with_timeout(
    descriptor: HarnessDescriptor, value: object, timeout_s: float
) -> object:
    """Call the harness on a daemon thread bounded by timeout_s.

    The thread is not preemptible: on timeout it is abandoned. It is a daemon
    so a stuck harness never keeps the interpreter alive at exit.

    Args:
        descriptor: Harness to call.
        value: Validated input value.
        timeout_s: Wall-clock budget in seconds.

    Returns:
        Raw harness return value.

    Raises:
        _HarnessTimeoutError: If the budget is exceeded.
        BaseException: Whatever the harness raised, re-raised on this thread.
    """
    result = _CallResult()

    def _target() -> None:
        try:
            result.value = descriptor.invoke(value)
        except BaseException as exc:  # noqa: BLE001 - re-raised on the caller
            result.error = exc
        finally:
            result.done.set()

    worker = threading.Thread(
        target=_target, name=f"blesstest-{descriptor.name}", daemon=True
    )
    worker.start()
    if not result.done.wait(timeout_s):
        raise _HarnessTimeoutError(
            f"Harness '{descriptor.name}' timed out after {timeout_s}s."
        )
    if result.error is not None:
        raise result.error
    return result.value


def invoke(
    registry: HarnessRegistry,
    name: str,
    params: JSONReadOnly,
    *,
    timeout_s: float | None = None,
) -> InvocationOutcome:
    """Run one harness against params. Never raises for harness problems.

    SystemExit from a harness is a per-case failure like any exception.
    KeyboardInterrupt and GeneratorExit propagate.

    Args:
        registry: Harness registry to resolve name against.
        name: Harness name from the test case.
        params: Raw JSON params from the test case.
        timeout_s: Optional wall-clock budget for the harness call.

    Returns:
        InvocationOk, InputRejected, or InvocationFailed.
    """
    descriptor = registry.get(name)
    if descriptor is None:
        available = ", ".join(registry.names()) or "<none>"
        return InvocationFailed(
            HarnessError(
                kind=HarnessErrorKind.UNKNOWN_HARNESS,
                message=f"Harness '{name}' not found. Available: {available}",
            )
        )

    try:
        validated = validate(descriptor.adapter, params)
    except SchemaValidationError as exc:
        _LOGGER.debug("Harness %s rejected params: %s", name, exc)
        return InputRejected(errors=exc.errors)

    try:
        if timeout_s is None:
            raw_output = descriptor.invoke(validated.value)
        else:
            raw_output = _call_with_timeout(descriptor, validated.value, timeout_s)
    except _HarnessTimeoutError as exc:
        _LOGGER.warning("%s", exc)
        return InvocationFailed(
            HarnessError(kind=HarnessErrorKind.TIMEOUT, message=str(exc))
        )
    except (Exception, SystemExit) as exc:  # noqa: BLE001 - per-case results
        _LOGGER.debug("Harness %s raised", name, exc_info=True)
        return InvocationFailed(
            HarnessError(
                kind=HarnessErrorKind.PANIC,
                message=f"{type(exc).__name__}: {exc}",
            )
        )

    try:
        output = to_json_value(raw_output)
    except (TypeError, ValueError, RecursionError) as exc:
        return InvocationFailed(
            HarnessError(
                kind=HarnessErrorKind.OUTPUT_NOT_SERIALIZABLE,
                message=f"Failed to serialize output: {exc}",
            )
        )
    return InvocationOk(output=output, validated=validated)
