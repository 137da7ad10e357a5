"""Table / JSON / YAML / text output dispatch."""

from __future__ import annotations

import json
from typing import Any

import typer
import yaml
from rich.console import Console

from helm_audit.core.report_generator import render_text
from helm_audit.models.report import Report
from helm_audit.models.snapshot import Snapshot, SnapshotRef
from helm_audit.output.themes import styled_kind

console = Console()

OUTPUT_FORMATS = ("table", "json", "yaml", "text")


def _ref_to_dict(ref: SnapshotRef) -> dict[str, Any]:
    return {
        "id": ref.id,
        "taken_at": ref.taken_at.isoformat(),
        "context": ref.context,
        "releases": ref.release_count,
    }


def output_snapshots(refs: list[SnapshotRef], fmt: str) -> None:
    if fmt == "json":
        data = [_ref_to_dict(r) for r in refs]
        console.print_json(json.dumps(data, indent=2))
    elif fmt == "yaml":
        data = [_ref_to_dict(r) for r in refs]
        console.print(yaml.dump(data, default_flow_style=False), end="")
    elif fmt == "text":
        for r in refs:
            typer.echo(f"{r.id}\t{r.taken_at.isoformat()}\t{r.context or '-'}\t{r.release_count}")
    else:
        from helm_audit.output.tables import snapshot_list_table
        console.print(snapshot_list_table(refs))


def output_snapshot(snapshot: Snapshot, fmt: str, title: str = "Snapshot") -> None:
    if fmt == "json":
        console.print_json(json.dumps(snapshot.to_dict(), indent=2))
    elif fmt == "yaml":
        console.print(yaml.dump(snapshot.to_dict(), default_flow_style=False), end="")
    elif fmt == "text":
        for r in snapshot.records:
            typer.echo(f"{r.namespace}/{r.name}\trev {r.revision}\t{r.chart}\t{r.status.value}")
    else:
        from helm_audit.output.tables import snapshot_records_table
        console.print(snapshot_records_table(snapshot, title=title))


def output_report(
    report: Report,
    fmt: str,
    title: str = "Drift Report",
    show_unchanged: bool = False,
    extra: dict[str, Any] | None = None,
) -> None:
    """Render a drift report; ``extra`` adds top-level fields to structured output."""
    if fmt == "json":
        data = {**(extra or {}), **report.to_dict()}
        console.print_json(json.dumps(data, indent=2, sort_keys=True))
    elif fmt == "yaml":
        data = {**(extra or {}), **report.to_dict()}
        console.print(yaml.dump(data, default_flow_style=False, sort_keys=True), end="")
    elif fmt == "text":
        typer.echo(render_text(report, show_unchanged=show_unchanged), nl=False)
    else:
        from helm_audit.output.tables import drift_report_table
        console.print(drift_report_table(report, title=title, show_unchanged=show_unchanged))
        summary = ", ".join(
            f"{styled_kind(kind)}: {len(entries)}"
            for kind, entries in report.groups
            if entries
        )
        if report.has_drift:
            console.print(f"\n[yellow]Drift detected:[/yellow] {summary}")
        else:
            console.print("\n[green]No drift detected. Releases match the baseline.[/green]")
