"""Human-readable diffs between staged baseline and fresh output."""

from __future__ import annotations

import difflib

from blesstest.engine.results import CaseResult, ContentMismatch, MissingBaseline


def unified_snapshot_diff(expected: str, actual: str, *, path: str) -> str:
    """Unified diff of two snapshot texts.

    Compact snapshots are a single line, so the diff degrades to a one-line
    replace. Missing final newlines are marked the way `git diff` does.

    Args:
        expected: Staged baseline text ("" when absent).
        actual: Freshly serialized output.
        path: Snapshot path used in the diff headers.

    Returns:
        Diff text; empty when both sides are equal.
    """
    lines = difflib.unified_diff(
        _split(expected),
        _split(actual),
        fromfile=f"a/{path} (staged)",
        tofile=f"b/{path} (working)",
    )
    return "".join(lines)


def _split(text: str) -> list[str]:
    lines = text.splitlines(keepends=True)
    if lines and not lines[-1].endswith("\n"):
        lines[-1] += "\n\\ No newline at end of file\n"
    return lines


def diff_for(result: CaseResult) -> str | None:
    """Diff for a mismatching or missing-baseline case, else None."""
    path = result.snapshot_path or f"{result.name}.json"
    outcome = result.outcome
    if isinstance(outcome, ContentMismatch):
        return unified_snapshot_diff(outcome.expected, outcome.actual, path=path)
    if isinstance(outcome, MissingBaseline):
        return unified_snapshot_diff("", outcome.actual, path=path)
    return None
