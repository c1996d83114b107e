"""Harness registry, input validation, and invocation."""

from blesstest.harness.invoker import (
    HarnessError,
    HarnessErrorKind,
    InputRejected,
    InvocationFailed,
    InvocationOk,
    InvocationOutcome,
    invoke,
)
from blesstest.harness.registry import HarnessDescriptor, HarnessFn, HarnessRegistry
from blesstest.harness.schema import (
    FieldError,
    SchemaValidationError,
    ValidatedInput,
    build_adapter,
    json_schema,
    validate,
)

__all__ = [
    "FieldError",
    "HarnessDescriptor",
    "HarnessError",
    "HarnessErrorKind",
    "HarnessFn",
    "HarnessRegistry",
    "InputRejected",
    "InvocationFailed",
    "InvocationOk",
    "InvocationOutcome",
    "SchemaValidationError",
    "ValidatedInput",
    "build_adapter",
    "invoke",
    "json_schema",
    "validate",
]
