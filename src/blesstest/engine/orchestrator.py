"""Run every case in a manifest and aggregate a report."""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from fnmatch import fnmatchcase

from blesstest.engine.compare import CaseRunner
from blesstest.engine.results import CaseResult, MissingBaselinePolicy, RunReport
from blesstest.harness.registry import HarnessRegistry
from blesstest.kernel.errors import ManifestError, UnknownHarnessError
from blesstest.manifest.models import Manifest, TestCase, validate_cases_unique
from blesstest.snapshots.store import SnapshotStore, is_valid_case_name

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunOptions:
    """Knobs for one run."""

    workers: int = 1
    timeout_s: float | None = None
    indent: int | None = None
    missing_baseline: MissingBaselinePolicy = MissingBaselinePolicy.FAIL
    select: tuple[str, ...] = ()


def select_cases(cases: Sequence[TestCase], patterns: Sequence[str]) -> list[TestCase]:
    """Keep cases whose name matches any fnmatch pattern; all when no patterns."""
    if not patterns:
        return list(cases)
    return [c for c in cases if any(fnmatchcase(c.name, p) for p in patterns)]


def preflight(cases: Sequence[TestCase], registry: HarnessRegistry) -> None:
    """Structural checks that must pass before any harness runs.

    Args:
        cases: Cases about to run.
        registry: Harness registry.

    Raises:
        DuplicateCaseError: If a case name repeats.
        ManifestError: If a case name cannot be a snapshot file stem.
        UnknownHarnessError: If a case names an unregistered harness.
    """
    validate_cases_unique(cases)
    bad_names = [c.name for c in cases if not is_valid_case_name(c.name)]
    if bad_names:
        raise ManifestError(
            f"Invalid test case name(s): {', '.join(repr(n) for n in bad_names)}. "
            "Names must match [A-Za-z0-9][A-Za-z0-9_.-]*",
            data={"names": bad_names},
        )
    unknown = sorted({c.harness for c in cases if c.harness not in registry})
    if unknown:
        available = list(registry.names())
        raise UnknownHarnessError(
            f"Harness function(s) not found: {', '.join(unknown)}. "
            f"Available: {', '.join(available) or '<none>'}",
            data={
                "unknown": unknown,
                "available": available,
                "cases": [c.name for c in cases if c.harness in unknown],
            },
        )


class RunOrchestrator:
    """Drives the CaseRunner over a manifest; never stops on a failing case."""

    def __init__(
        self,
        registry: HarnessRegistry,
        store: SnapshotStore,
        options: RunOptions | None = None,
    ) -> None:
        """Create orchestrator.

        Args:
            registry: Harness registry; frozen when a run starts.
            store: Snapshot store.
            options: Run options; defaults when None.
        """
        self._registry = registry
        self._store = store
        self._options = options or RunOptions()
        if self._options.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self._options.workers}")
        self._runner = CaseRunner(
            registry,
            store,
            indent=self._options.indent,
            timeout_s=self._options.timeout_s,
        )

    def run(
        self,
        manifest: Manifest,
        *,
        cancel_event: threading.Event | None = None,
    ) -> RunReport:
        """Run all selected cases and report them in manifest order.

        Args:
            manifest: Cases to run.
            cancel_event: When set, cases not yet started are skipped and
                listed as cancelled. Cases already running finish.

        Returns:
            Aggregated RunReport.

        Raises:
            StructuralError: On duplicate names, bad names, unknown
                harnesses, or select patterns matching no case; raised before
                any case executes.
        """
        cases = select_cases(manifest.cases, self._options.select)
        if self._options.select and not cases:
            raise ManifestError(
                "No test cases match selection "
                f"{', '.join(repr(p) for p in self._options.select)}",
                data={"select": list(self._options.select)},
            )
        preflight(cases, self._registry)
        self._registry.freeze()
        cancel = cancel_event or threading.Event()

        _LOGGER.info(
            "Running %d case(s) with %d worker(s)", len(cases), self._options.workers
        )
        if self._options.workers == 1:
            outcomes = [self._run_one(case, cancel) for case in cases]
        else:
            with ThreadPoolExecutor(
                max_workers=self._options.workers, thread_name_prefix="blesstest-case"
            ) as pool:
                outcomes = list(pool.map(lambda c: self._run_one(c, cancel), cases))

        results: list[CaseResult] = []
        cancelled: list[str] = []
        for case, outcome in zip(cases, outcomes, strict=True):
            if outcome is None:
                cancelled.append(case.name)
            else:
                results.append(outcome)
        if cancelled:
            _LOGGER.warning("Run cancelled; %d case(s) not started", len(cancelled))
        return RunReport(
            results=tuple(results),
            cancelled=tuple(cancelled),
            missing_baseline_policy=self._options.missing_baseline,
        )

    def _run_one(self, case: TestCase, cancel: threading.Event) -> CaseResult | None:
        if cancel.is_set():
            return None
        return self._runner.run_case(case)
