"""Run one test case end to end and classify the outcome."""

from __future__ import annotations

import logging
from pathlib import Path

from blesstest.engine.results import (
    CaseResult,
    ComparisonResult,
    ContentMismatch,
    HarnessFailure,
    InfrastructureFailure,
    MissingBaseline,
    Pass,
    SchemaViolation,
)
from blesstest.harness.invoker import (
    HarnessError,
    HarnessErrorKind,
    InputRejected,
    InvocationFailed,
    invoke,
)
from blesstest.harness.registry import HarnessRegistry
from blesstest.kernel.canonical import serialize_snapshot
from blesstest.kernel.errors import InfrastructureError, ManifestError
from blesstest.manifest.models import TestCase
from blesstest.snapshots.store import SnapshotStore

_LOGGER = logging.getLogger(__name__)


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


class CaseRunner:
    """Invoke -> serialize -> write working snapshot -> compare with baseline."""

    def __init__(
        self,
        registry: HarnessRegistry,
        store: SnapshotStore,
        *,
        indent: int | None = None,
        timeout_s: float | None = None,
    ) -> None:
        """Create runner.

        Args:
            registry: Harness registry (read-only during the run).
            store: Snapshot store for working files and staged baselines.
            indent: Snapshot layout; None for compact.
            timeout_s: Optional per-harness wall-clock budget.
        """
        self._registry = registry
        self._store = store
        self._indent = indent
        self._timeout_s = timeout_s

    def run_case(self, case: TestCase) -> CaseResult:
        """Run one case and classify it.

        The working snapshot is written exactly once whenever the harness
        produced output, whatever the comparison outcome. Nothing is written
        when the harness fails or its params are rejected.

        Args:
            case: Test case to run.

        Returns:
            CaseResult carrying the ComparisonResult.

        Raises:
            ManifestError: If the case name cannot map to a snapshot file.
        """
        try:
            path = self._store.path_for(case.name)
        except ValueError as exc:
            raise ManifestError(str(exc), data={"name": case.name}) from exc

        _LOGGER.debug("Running case %s with harness %s", case.name, case.harness)
        outcome = self._classify(case, path)
        _LOGGER.info("%s: %s", case.name, outcome.kind.value)
        return CaseResult(
            name=case.name,
            harness=case.harness,
            snapshot_path=str(path),
            outcome=outcome,
        )

    def _classify(self, case: TestCase, path: Path) -> ComparisonResult:
        invocation = invoke(
            self._registry, case.harness, case.params, timeout_s=self._timeout_s
        )
        if isinstance(invocation, InputRejected):
            return SchemaViolation(errors=invocation.errors)
        if isinstance(invocation, InvocationFailed):
            return HarnessFailure(error=invocation.error)

        try:
            actual = serialize_snapshot(invocation.output, indent=self._indent)
        except (TypeError, ValueError, RecursionError) as exc:
            return HarnessFailure(
                error=HarnessError(
                    kind=HarnessErrorKind.OUTPUT_NOT_SERIALIZABLE,
                    message=f"Failed to serialize output: {exc}",
                )
            )
        try:
            self._store.write_working(path, actual)
            baseline = self._store.read_baseline(path)
        except InfrastructureError as exc:
            _LOGGER.warning("Case %s: %s", case.name, exc)
            return InfrastructureFailure(message=str(exc))

        if baseline is None:
            return MissingBaseline(actual=_decode(actual))
        if baseline == actual:
            return Pass()
        return ContentMismatch(expected=_decode(baseline), actual=_decode(actual))
