"""Test-only helpers: harness fixtures and an in-memory staged index."""

from __future__ import annotations

import threading
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from blesstest.harness.registry import HarnessRegistry
from blesstest.kernel.errors import VcsError


class AddInput(BaseModel):
    """Integer operands for the add harness."""

    model_config = ConfigDict(extra="forbid")

    a: int
    b: int


class AddOutput(BaseModel):
    """Sum produced by the add harness."""

    result: int


def add(case: AddInput) -> AddOutput:
    """Add harness used across engine tests."""
    return AddOutput(result=case.a + case.b)


def explode(case: dict[str, int]) -> dict[str, int]:
    """Harness that always raises."""
    del case
    raise RuntimeError("boom")


def build_registry() -> HarnessRegistry:
    """Registry with add (schema-checked) and explode harnesses."""
    registry = HarnessRegistry()
    registry.harness(add)
    registry.harness(explode)
    return registry


class FakeIndex:
    """In-memory BaselineIndex keyed by resolved path; records queries."""

    def __init__(self, staged: dict[Path, bytes] | None = None) -> None:
        self._staged = {p.resolve(): v for p, v in (staged or {}).items()}
        self.queries: list[Path] = []
        self._lock = threading.Lock()

    def stage(self, path: Path, content: bytes) -> None:
        """Simulate `git add` of content at path."""
        self._staged[path.resolve()] = content

    def get_staged_content(self, path: Path) -> bytes | None:
        with self._lock:
            self.queries.append(path)
        return self._staged.get(path.resolve())


class FailingIndex:
    """BaselineIndex whose every query fails like a broken git."""

    def get_staged_content(self, path: Path) -> bytes | None:
        raise VcsError(f"`git ls-files` failed (exit code: 128): {path}")
