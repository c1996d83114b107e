"""Manifest data model: test case name -> harness + params."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field
from pydantic.types import JsonValue

from blesstest.kernel.errors import DuplicateCaseError


class CaseDefinition(BaseModel):
    """One manifest entry as written in a manifest file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    harness: str = Field(min_length=1)
    params: JsonValue


class TestCase(BaseModel):
    """Named case resolved from a manifest. Read-only for the whole run."""

    __test__ = False  # not a pytest test class

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    harness: str
    params: JsonValue
    source: str | None = None


class Manifest(BaseModel):
    """Ordered, name-unique set of test cases."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    cases: tuple[TestCase, ...] = ()

    @classmethod
    def from_cases(cls, cases: Iterable[TestCase]) -> Manifest:
        """Build manifest, rejecting duplicate case names.

        Args:
            cases: Cases in desired report order.

        Returns:
            Manifest preserving input order.

        Raises:
            DuplicateCaseError: If any name appears twice.
        """
        collected = tuple(cases)
        validate_cases_unique(collected)
        return cls(cases=collected)

    def names(self) -> tuple[str, ...]:
        """Case names in manifest order."""
        return tuple(case.name for case in self.cases)


def validate_cases_unique(cases: Iterable[TestCase]) -> None:
    """Raise DuplicateCaseError if a case name is used more than once."""
    seen: dict[str, TestCase] = {}
    for case in cases:
        first = seen.get(case.name)
        if first is not None:
            raise DuplicateCaseError(
                f"Duplicate test case name {case.name!r} "
                f"(defined in {first.source or '<inline>'} "
                f"and {case.source or '<inline>'})",
                data={
                    "name": case.name,
                    "sources": [first.source, case.source],
                },
            )
        seen[case.name] = case
