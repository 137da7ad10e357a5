"""haudit audit - Snapshot the cluster and report drift against the last snapshot."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from helm_audit.cli import runtime
from helm_audit.cli.options import (
    ContextOption,
    FailOnDriftOption,
    NamespaceOption,
    OutputOption,
    ShowUnchangedOption,
    StoreOption,
    TimeoutOption,
)
from helm_audit.config.settings import settings
from helm_audit.core.audit import run_audit
from helm_audit.core.baseline import load_baseline
from helm_audit.output.formatters import output_report

app = typer.Typer()
console = Console()


@app.callback(invoke_without_command=True)
def audit(
    output: str = OutputOption,
    namespace: Optional[List[str]] = NamespaceOption,
    context: Optional[str] = ContextOption,
    store_dir: Optional[Path] = StoreOption,
    timeout: Optional[float] = TimeoutOption,
    baseline_file: Optional[Path] = typer.Option(
        None, "--baseline-file", "-b", help="Compare against a declared YAML baseline instead of the last snapshot",
        exists=True, dir_okay=False,
    ),
    distinguish_values: bool = typer.Option(
        settings.distinguish_values,
        "--values-kind/--no-values-kind",
        help="Report same-revision values changes as values-changed (otherwise chart-changed)",
    ),
    show_unchanged: bool = ShowUnchangedOption,
    fail_on_drift: bool = FailOnDriftOption,
) -> None:
    """Capture a snapshot, store it, and report drift against the baseline."""
    runtime.check_output(output)
    store = runtime.open_store(store_dir)
    with runtime.exit_on_error():
        baseline = load_baseline(baseline_file) if baseline_file is not None else None
        inventory = runtime.build_inventory(context, namespace)
        with console.status("[bold cyan]Auditing Helm releases…"):
            result = run_audit(
                inventory,
                store,
                timeout if timeout is not None else settings.fetch_timeout,
                baseline=baseline,
                distinguish_values=distinguish_values,
                context=inventory.context,
            )

    if baseline_file is not None:
        baseline_label: str | int | None = str(baseline_file)
    else:
        baseline_label = result.baseline_ref.id if result.baseline_ref else None
    output_report(
        result.report,
        output,
        title=f"Drift Report: {baseline_label if baseline_label is not None else 'empty'} -> {result.snapshot_ref.id}",
        show_unchanged=show_unchanged,
        extra={"baseline": baseline_label, "current": result.snapshot_ref.id},
    )
    if fail_on_drift and result.report.has_drift:
        raise typer.Exit(code=runtime.EXIT_DRIFT)
