"""Rich table builders for each command."""

from __future__ import annotations

from rich.table import Table

from helm_audit.models.report import Report
from helm_audit.models.snapshot import Snapshot, SnapshotRef
from helm_audit.output.themes import styled_kind, styled_status


def snapshot_list_table(refs: list[SnapshotRef]) -> Table:
    table = Table(title="Stored Snapshots", expand=True)
    table.add_column("ID", justify="right", style="bold")
    table.add_column("Taken At", style="dim", no_wrap=True)
    table.add_column("Context", style="cyan", no_wrap=True, max_width=30)
    table.add_column("Releases", justify="right")

    for ref in refs:
        table.add_row(
            str(ref.id),
            ref.taken_at.strftime("%Y-%m-%d %H:%M:%S %Z"),
            ref.context or "-",
            str(ref.release_count),
        )
    return table


def snapshot_records_table(snapshot: Snapshot, title: str = "Snapshot") -> Table:
    table = Table(title=title, expand=True, show_lines=False)
    table.add_column("Namespace", style="blue", no_wrap=True)
    table.add_column("Release", style="bold white", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Rev", justify="right", style="dim")
    table.add_column("Chart", style="magenta", no_wrap=True)
    table.add_column("Chart Ver", style="magenta")
    table.add_column("Values", style="dim", no_wrap=True)

    for r in snapshot.records:
        table.add_row(
            r.namespace,
            r.name,
            styled_status(r.status),
            str(r.revision),
            r.chart_name,
            r.chart_version,
            r.values_digest[:12] or "-",
        )
    return table


def drift_report_table(report: Report, title: str = "Drift Report", show_unchanged: bool = False) -> Table:
    table = Table(title=title, expand=True)
    table.add_column("Namespace", style="blue", no_wrap=True)
    table.add_column("Release", style="bold")
    table.add_column("Drift", no_wrap=True)
    table.add_column("Baseline", style="dim", no_wrap=True)
    table.add_column("Current", no_wrap=True)
    table.add_column("Details", max_width=60)

    for entry in report.entries:
        if not entry.has_drift and not show_unchanged:
            continue
        base = entry.baseline
        cur = entry.current
        changes = list(report.changes.get(entry.key, ()))
        detail = "\n".join(changes[:3])
        if len(changes) > 3:
            detail += f"\n... +{len(changes) - 3} more"
        table.add_row(
            entry.namespace,
            entry.name,
            styled_kind(entry.kind),
            f"r{base.revision} {base.chart}" if base else "-",
            f"r{cur.revision} {cur.chart}" if cur else "-",
            detail,
        )
    return table
