"""Typer CLI entrypoint for blesstest."""

from __future__ import annotations

import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.json import JSON
from rich.table import Table
from rich.text import Text

from blesstest.cli.bootstrap import (
    ResolvedSettings,
    configure_logging,
    load_registry,
    resolve_settings,
)
from blesstest.cli.rendering import ReportRenderer
from blesstest.config import ConfigError
from blesstest.engine import MissingBaselinePolicy, RunOptions, RunOrchestrator, RunReport
from blesstest.harness.registry import HarnessRegistry
from blesstest.harness.schema import json_schema
from blesstest.kernel.errors import BlesstestError
from blesstest.manifest import Manifest, discover_manifest_files, load_manifest
from blesstest.snapshots import GitIndex, SnapshotStore

app = typer.Typer(help="Golden snapshot tests blessed through the git index.")
_CONSOLE = Console()
_ERR_CONSOLE = Console(stderr=True)
_LOGGER = logging.getLogger(__name__)

EXIT_STRUCTURAL = 2

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        dir_okay=False,
        resolve_path=True,
        help="Config file (default: ./blesstest.yaml).",
    ),
]
RegistryOption = Annotated[
    str | None,
    typer.Option(
        "--registry",
        help="Harness registry import path, e.g. myproject.harnesses:REGISTRY.",
    ),
]
ManifestArgument = Annotated[
    list[Path] | None,
    typer.Argument(
        exists=True,
        dir_okay=False,
        resolve_path=True,
        help="Manifest files. Default: discover via manifest_globs.",
    ),
]


def _fail(message: str) -> typer.Exit:
    """Print a structural/config error and build the exit to raise."""
    _ERR_CONSOLE.print(Text(f"Error: {message}", style="bold red"))
    return typer.Exit(code=EXIT_STRUCTURAL)


def _load_inputs(
    settings: ResolvedSettings, manifests: list[Path] | None
) -> tuple[HarnessRegistry, Manifest]:
    """Import the registry and load the manifest for a command.

    Args:
        settings: Resolved settings.
        manifests: Explicit manifest files, or None to discover.

    Returns:
        Registry and pooled manifest.

    Raises:
        ConfigError: If no registry is configured or it fails to import.
        StructuralError: If manifests are missing or malformed.
    """
    target = settings.config.registry
    if target is None:
        raise ConfigError(
            "No harness registry configured; pass --registry or set `registry`"
        )
    registry = load_registry(target, search_dir=settings.base_dir)
    paths = manifests or discover_manifest_files(
        settings.base_dir, settings.config.manifest_globs
    )
    return registry, load_manifest(paths)


def _run_cancellable(orchestrator: RunOrchestrator, manifest: Manifest) -> RunReport:
    """Run on a worker thread so Ctrl-C stops scheduling new cases.

    Args:
        orchestrator: Configured orchestrator.
        manifest: Cases to run.

    Returns:
        Report; interrupted runs list unstarted cases as cancelled.
    """
    cancel = threading.Event()
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="blesstest-run") as pool:
        future = pool.submit(orchestrator.run, manifest, cancel_event=cancel)
        while True:
            try:
                return future.result(timeout=0.2)
            except FutureTimeoutError:
                continue
            except KeyboardInterrupt:
                cancel.set()
                _ERR_CONSOLE.print(
                    "Interrupted; waiting for running cases to finish...",
                    style="yellow",
                )


@app.command("run")
def run_cmd(
    manifests: ManifestArgument = None,
    config_file: ConfigOption = None,
    registry: RegistryOption = None,
    snapshot_dir: Annotated[
        str | None,
        typer.Option("--snapshot-dir", help="Directory holding snapshot files."),
    ] = None,
    workers: Annotated[
        int | None, typer.Option("--workers", min=1, help="Parallel cases.")
    ] = None,
    timeout_s: Annotated[
        float | None,
        typer.Option("--timeout", help="Per-harness timeout in seconds."),
    ] = None,
    indent: Annotated[
        int | None,
        typer.Option("--indent", help="Pretty-print snapshots with this indent."),
    ] = None,
    missing_baseline: Annotated[
        MissingBaselinePolicy | None,
        typer.Option(
            "--missing-baseline",
            help="fail: unstaged snapshots fail the run; pending: report only.",
        ),
    ] = None,
    select: Annotated[
        list[str] | None,
        typer.Option("--select", "-k", help="Only run cases matching this glob."),
    ] = None,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the report as JSON.")
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Run snapshot cases and compare them with the staged snapshots."""
    configure_logging(verbose=verbose)
    try:
        settings = resolve_settings(
            config_file,
            {
                "registry": registry,
                "snapshot_dir": snapshot_dir,
                "workers": workers,
                "timeout_s": timeout_s,
                "indent": indent,
                "missing_baseline": missing_baseline,
            },
        )
        harnesses, manifest = _load_inputs(settings, manifests)
        config = settings.config
        orchestrator = RunOrchestrator(
            harnesses,
            SnapshotStore(settings.snapshot_dir, GitIndex()),
            RunOptions(
                workers=config.workers,
                timeout_s=config.timeout_s,
                indent=config.indent,
                missing_baseline=config.missing_baseline,
                select=tuple(select or ()),
            ),
        )
        report = _run_cancellable(orchestrator, manifest)
    except BlesstestError as exc:
        _LOGGER.debug("Run aborted", exc_info=True)
        raise _fail(str(exc)) from exc

    if as_json:
        payload = report.model_dump(mode="json")
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
    else:
        ReportRenderer(console=_CONSOLE).render(report)
    raise typer.Exit(code=report.exit_code)


@app.command("list")
def list_cmd(
    manifests: ManifestArgument = None,
    config_file: ConfigOption = None,
    registry: RegistryOption = None,
) -> None:
    """List manifest cases and the harness each one uses."""
    configure_logging()
    try:
        settings = resolve_settings(config_file, {"registry": registry})
        harnesses, manifest = _load_inputs(settings, manifests)
    except BlesstestError as exc:
        raise _fail(str(exc)) from exc

    table = Table(header_style="bold")
    table.add_column("Case", style="cyan")
    table.add_column("Harness")
    table.add_column("Source")
    for case in manifest.cases:
        harness = Text(case.harness)
        if case.harness not in harnesses:
            harness.append(" (unknown)", style="bold red")
        table.add_row(Text(case.name), harness, Text(case.source or ""))
    _CONSOLE.print(table)


@app.command("schema")
def schema_cmd(
    harness: Annotated[str, typer.Argument(help="Harness name.")],
    config_file: ConfigOption = None,
    registry: RegistryOption = None,
) -> None:
    """Print the JSON Schema a harness validates its params against."""
    configure_logging()
    try:
        settings = resolve_settings(config_file, {"registry": registry})
        if settings.config.registry is None:
            raise ConfigError(
                "No harness registry configured; pass --registry or set `registry`"
            )
        harnesses = load_registry(settings.config.registry, search_dir=settings.base_dir)
    except BlesstestError as exc:
        raise _fail(str(exc)) from exc
    descriptor = harnesses.get(harness)
    if descriptor is None:
        available = ", ".join(harnesses.names()) or "<none>"
        raise _fail(f"Harness '{harness}' not found. Available: {available}")
    _CONSOLE.print(JSON.from_data(json_schema(descriptor.adapter)))


if __name__ == "__main__":
    app()
