"""haudit diff [baseline] [current] - Compare two snapshots."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from helm_audit.cli import runtime
from helm_audit.cli.options import FailOnDriftOption, OutputOption, ShowUnchangedOption, StoreOption
from helm_audit.config.settings import settings
from helm_audit.core.baseline import load_baseline
from helm_audit.core.drift_engine import detect_drift
from helm_audit.core.report_generator import generate
from helm_audit.output.formatters import output_report

app = typer.Typer()


@app.callback(invoke_without_command=True)
def diff(
    baseline: str = typer.Argument("previous", help="Baseline snapshot id, 'latest' or 'previous'"),
    current: str = typer.Argument("latest", help="Current snapshot id, 'latest' or 'previous'"),
    output: str = OutputOption,
    store_dir: Optional[Path] = StoreOption,
    baseline_file: Optional[Path] = typer.Option(
        None, "--baseline-file", "-b", help="Compare against a declared YAML baseline instead of a snapshot",
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
    """Classify drift between a baseline and a current snapshot."""
    runtime.check_output(output)
    store = runtime.open_store(store_dir)
    with runtime.exit_on_error():
        current_id = store.resolve(current)
        current_snap = store.load(current_id)
        if baseline_file is not None:
            baseline_snap = load_baseline(baseline_file)
            baseline_label: str | int = str(baseline_file)
        else:
            baseline_label = store.resolve(baseline)
            baseline_snap = store.load(baseline_label)
        entries = detect_drift(baseline_snap, current_snap, distinguish_values=distinguish_values)
        report = generate(entries)

    output_report(
        report,
        output,
        title=f"Drift Report: {baseline_label} -> {current_id}",
        show_unchanged=show_unchanged,
        extra={"baseline": baseline_label, "current": current_id},
    )
    if fail_on_drift and report.has_drift:
        raise typer.Exit(code=runtime.EXIT_DRIFT)
