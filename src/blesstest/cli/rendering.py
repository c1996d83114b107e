"""Rich views for run reports."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from blesstest.engine.diffing import diff_for
from blesstest.engine.results import (
    CaseResult,
    HarnessFailure,
    InfrastructureFailure,
    MissingBaselinePolicy,
    ResultKind,
    RunReport,
    SchemaViolation,
)

_STATUS_STYLES = {
    ResultKind.PASS: ("PASS", "green"),
    ResultKind.CONTENT_MISMATCH: ("MISMATCH", "bold red"),
    ResultKind.MISSING_BASELINE: ("UNSTAGED", "yellow"),
    ResultKind.HARNESS_FAILURE: ("HARNESS ERROR", "bold magenta"),
    ResultKind.SCHEMA_VIOLATION: ("SCHEMA ERROR", "bold magenta"),
    ResultKind.INFRASTRUCTURE_ERROR: ("IO ERROR", "bold bright_red"),
}


def _detail(result: CaseResult) -> str:
    """One-line diagnostic for the table."""
    outcome = result.outcome
    if isinstance(outcome, HarnessFailure):
        return f"{outcome.error.kind.value}: {outcome.error.message}"
    if isinstance(outcome, SchemaViolation):
        return "; ".join(f"{e.path}: {e.message}" for e in outcome.errors)
    if isinstance(outcome, InfrastructureFailure):
        return outcome.message
    if outcome.kind == ResultKind.CONTENT_MISMATCH:
        return "differs from staged snapshot; review and `git add` or fix"
    if outcome.kind == ResultKind.MISSING_BASELINE:
        return "snapshot never staged; review and `git add` it"
    return ""


class ReportRenderer:
    """Render a RunReport as a table, per-case diffs, and a summary."""

    def __init__(self, *, console: Console) -> None:
        """Store console used for rendering.

        Args:
            console: Rich console used for output rendering.
        """
        self._console = console

    def render(self, report: RunReport) -> None:
        """Render the whole report.

        Args:
            report: Run report in manifest order.
        """
        table = Table(header_style="bold")
        table.add_column("Case", style="cyan")
        table.add_column("Harness")
        table.add_column("Status")
        table.add_column("Detail", overflow="fold")
        for result in report.results:
            label, style = _STATUS_STYLES[result.outcome.kind]
            table.add_row(
                Text(result.name),
                Text(result.harness),
                Text(label, style=style),
                Text(_detail(result)),
            )
        for name in report.cancelled:
            table.add_row(Text(name), "", Text("CANCELLED", style="dim"), "not started")
        self._console.print(table)

        for result in report.failures():
            diff = diff_for(result)
            if not diff:
                continue
            self._console.print(
                Panel(
                    Syntax(diff, "diff", word_wrap=True),
                    title=escape(f"{result.name} [{result.outcome.kind.value}]"),
                    border_style="red"
                    if result.outcome.kind == ResultKind.CONTENT_MISMATCH
                    else "yellow",
                    expand=True,
                )
            )
        self._render_summary(report)

    def _render_summary(self, report: RunReport) -> None:
        counts = report.counts
        parts = [
            f"[green]{counts.passed} passed[/]",
            f"[red]{counts.mismatched} mismatched[/]",
            f"[yellow]{counts.missing} unstaged[/]",
            f"[magenta]{counts.errored} errored[/]",
        ]
        if counts.cancelled:
            parts.append(f"[dim]{counts.cancelled} cancelled[/]")
        self._console.print(", ".join(parts))
        if (
            counts.missing
            and report.missing_baseline_policy == MissingBaselinePolicy.PENDING
        ):
            self._console.print(
                "[yellow]Unstaged snapshots are pending approval "
                "(missing_baseline=pending); they do not fail this run.[/]"
            )
