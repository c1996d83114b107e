"""Comparison engine and run orchestration."""

from blesstest.engine.compare import CaseRunner
from blesstest.engine.diffing import diff_for, unified_snapshot_diff
from blesstest.engine.orchestrator import (
    RunOptions,
    RunOrchestrator,
    preflight,
    select_cases,
)
from blesstest.engine.results import (
    CaseResult,
    ComparisonResult,
    ContentMismatch,
    HarnessFailure,
    InfrastructureFailure,
    MissingBaseline,
    MissingBaselinePolicy,
    Pass,
    ResultKind,
    RunCounts,
    RunReport,
    SchemaViolation,
)

__all__ = [
    "CaseResult",
    "CaseRunner",
    "ComparisonResult",
    "ContentMismatch",
    "HarnessFailure",
    "InfrastructureFailure",
    "MissingBaseline",
    "MissingBaselinePolicy",
    "Pass",
    "ResultKind",
    "RunCounts",
    "RunOptions",
    "RunOrchestrator",
    "RunReport",
    "SchemaViolation",
    "diff_for",
    "preflight",
    "select_cases",
    "unified_snapshot_diff",
]
