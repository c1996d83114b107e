"""Per-case comparison results and the aggregated run report."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from blesstest.harness.invoker import HarnessError
from blesstest.harness.schema import FieldError


class ResultKind(StrEnum):
    """Discriminator for ComparisonResult variants."""

    PASS = "pass"
    CONTENT_MISMATCH = "content_mismatch"
    MISSING_BASELINE = "missing_baseline"
    HARNESS_FAILURE = "harness_failure"
    SCHEMA_VIOLATION = "schema_violation"
    INFRASTRUCTURE_ERROR = "infrastructure_error"


class MissingBaselinePolicy(StrEnum):
    """How an unstaged snapshot affects the exit status."""

    FAIL = "fail"
    PENDING = "pending"


class _Result(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class Pass(_Result):
    """Output equals the staged baseline byte for byte."""

    kind: Literal[ResultKind.PASS] = ResultKind.PASS


class ContentMismatch(_Result):
    """Output differs from the staged baseline."""

    kind: Literal[ResultKind.CONTENT_MISMATCH] = ResultKind.CONTENT_MISMATCH
    expected: str
    actual: str


class MissingBaseline(_Result):
    """Snapshot path was never staged; output awaits approval."""

    kind: Literal[ResultKind.MISSING_BASELINE] = ResultKind.MISSING_BASELINE
    actual: str


class HarnessFailure(_Result):
    """Harness unresolved, raised, timed out, or returned unserializable output."""

    kind: Literal[ResultKind.HARNESS_FAILURE] = ResultKind.HARNESS_FAILURE
    error: HarnessError


class SchemaViolation(_Result):
    """Params rejected by the harness input schema."""

    kind: Literal[ResultKind.SCHEMA_VIOLATION] = ResultKind.SCHEMA_VIOLATION
    errors: tuple[FieldError, ...]


class InfrastructureFailure(_Result):
    """Snapshot file or version-control access failed for this case."""

    kind: Literal[ResultKind.INFRASTRUCTURE_ERROR] = ResultKind.INFRASTRUCTURE_ERROR
    message: str


ComparisonResult = Annotated[
    Pass
    | ContentMismatch
    | MissingBaseline
    | HarnessFailure
    | SchemaViolation
    | InfrastructureFailure,
    Field(discriminator="kind"),
]


class CaseResult(BaseModel):
    """Outcome of one test case with enough context to act on it."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    harness: str
    snapshot_path: str | None = None
    outcome: ComparisonResult

    @property
    def passed(self) -> bool:
        """Whether the case classified as Pass."""
        return self.outcome.kind == ResultKind.PASS


class RunCounts(BaseModel):
    """Aggregated classification counts."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    passed: int = 0
    mismatched: int = 0
    missing: int = 0
    errored: int = 0
    cancelled: int = 0


_ERROR_KINDS = frozenset(
    {
        ResultKind.HARNESS_FAILURE,
        ResultKind.SCHEMA_VIOLATION,
        ResultKind.INFRASTRUCTURE_ERROR,
    }
)


class RunReport(BaseModel):
    """Full run outcome in stable (manifest) order."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    results: tuple[CaseResult, ...] = ()
    cancelled: tuple[str, ...] = ()
    missing_baseline_policy: MissingBaselinePolicy = MissingBaselinePolicy.FAIL

    @computed_field  # type: ignore[prop-decorator]
    @property
    def counts(self) -> RunCounts:
        """Counts per classification."""
        kinds = [r.outcome.kind for r in self.results]
        return RunCounts(
            passed=kinds.count(ResultKind.PASS),
            mismatched=kinds.count(ResultKind.CONTENT_MISMATCH),
            missing=kinds.count(ResultKind.MISSING_BASELINE),
            errored=sum(1 for k in kinds if k in _ERROR_KINDS),
            cancelled=len(self.cancelled),
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def ok(self) -> bool:
        """True when nothing should fail the process."""
        counts = self.counts
        if counts.mismatched or counts.errored or counts.cancelled:
            return False
        if counts.missing and self.missing_baseline_policy == MissingBaselinePolicy.FAIL:
            return False
        return True

    @property
    def exit_code(self) -> int:
        """Process exit status: 0 when ok, 1 otherwise."""
        return 0 if self.ok else 1

    def failures(self) -> tuple[CaseResult, ...]:
        """Cases that did not pass, in report order."""
        return tuple(r for r in self.results if not r.passed)
