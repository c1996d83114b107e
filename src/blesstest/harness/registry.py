"""Harness registry: harness name -> input schema + callable."""

from __future__ import annotations

import inspect
import typing
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, overload

from pydantic import TypeAdapter
from pydantic.types import JsonValue
from typing_extensions import TypeAliasType

from blesstest.harness.schema import build_adapter

HarnessFn = TypeAliasType("HarnessFn", Callable[[Any], Any])


@dataclass(frozen=True)
class HarnessDescriptor:
    """Registered harness. Read-only once the registry is built."""

    name: str
    invoke: HarnessFn
    input_schema: Any = JsonValue
    adapter: TypeAdapter[Any] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "adapter", build_adapter(self.input_schema))


def _schema_from_signature(fn: HarnessFn) -> Any:
    """Derive the input schema from the single parameter's annotation.

    Args:
        fn: Harness function.

    Returns:
        Annotated parameter type, or JsonValue when unannotated.

    Raises:
        TypeError: If fn does not take exactly one positional parameter.
    """
    params = [
        p
        for p in inspect.signature(fn).parameters.values()
        if p.kind
        in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    if len(params) != 1:
        raise TypeError(
            f"Harness {fn.__name__!r} must take exactly one argument, "
            f"got {len(params)}"
        )
    hints = typing.get_type_hints(fn)
    return hints.get(params[0].name, JsonValue)


class HarnessRegistry:
    """In-process registry populated at startup and frozen before a run."""

    def __init__(self) -> None:
        """Initialize empty, mutable registry."""
        self._harnesses: dict[str, HarnessDescriptor] = {}
        self._frozen = False

    def register(
        self,
        name: str,
        invoke: HarnessFn,
        *,
        input_schema: Any = JsonValue,
        override: bool = False,
    ) -> HarnessDescriptor:
        """Register a harness under name.

        Args:
            name: Harness name referenced by manifest cases.
            invoke: Callable taking the validated input value.
            input_schema: Schema description accepted by Pydantic.
            override: If True, replace an existing registration.

        Returns:
            The stored descriptor.

        Raises:
            RuntimeError: If the registry is frozen.
            ValueError: If name is empty or already registered without override.
        """
        if self._frozen:
            raise RuntimeError(f"Harness registry is frozen; cannot register {name!r}")
        name = name.strip()
        if not name:
            raise ValueError("Harness name must be non-empty")
        if name in self._harnesses and not override:
            raise ValueError(f"Harness already registered: {name!r}")
        descriptor = HarnessDescriptor(
            name=name, invoke=invoke, input_schema=input_schema
        )
        self._harnesses[name] = descriptor
        return descriptor

    @overload
    def harness(self, fn: HarnessFn, /) -> HarnessFn: ...

    @overload
    def harness(
        self, name: str | None = None, *, override: bool = False
    ) -> Callable[[HarnessFn], HarnessFn]: ...

    def harness(
        self,
        name: HarnessFn | str | None = None,
        *,
        override: bool = False,
    ) -> HarnessFn | Callable[[HarnessFn], HarnessFn]:
        """Decorator registering a function; schema comes from its annotation.

        Usable bare (@registry.harness) or with a name
        (@registry.harness("parse_compile_match")). The function is returned
        unchanged.
        """
        if callable(name):
            fn = name
            self.register(
                fn.__name__, fn, input_schema=_schema_from_signature(fn)
            )
            return fn

        def _decorate(fn: HarnessFn) -> HarnessFn:
            self.register(
                name or fn.__name__,
                fn,
                input_schema=_schema_from_signature(fn),
                override=override,
            )
            return fn

        return _decorate

    def freeze(self) -> None:
        """Make the registry immutable for the rest of its life."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        """Whether registration is closed."""
        return self._frozen

    def get(self, name: str) -> HarnessDescriptor | None:
        """Return descriptor for name, or None if not registered."""
        return self._harnesses.get(name)

    def names(self) -> tuple[str, ...]:
        """Return registered harness names in sorted order."""
        return tuple(sorted(self._harnesses))

    def __contains__(self, name: object) -> bool:
        return name in self._harnesses

    def __len__(self) -> int:
        return len(self._harnesses)
