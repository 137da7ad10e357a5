"""Turn drift entries into a grouped report and its plain-text rendering."""

from __future__ import annotations

from typing import Sequence

from helm_audit.core.drift_engine import describe_changes
from helm_audit.core.errors import MalformedSnapshotError, format_key
from helm_audit.models.diff import KIND_ORDER, DriftEntry, DriftKind
from helm_audit.models.report import Report


def generate(entries: Sequence[DriftEntry]) -> Report:
    """Group entries by kind, keeping the input order inside each group.

    Pure: the same entries always give an equal Report.
    """
    seen: set[tuple[str, str]] = set()
    for entry in entries:
        if entry.key in seen:
            raise MalformedSnapshotError("duplicate drift entry", key=entry.key)
        seen.add(entry.key)

    groups = tuple(
        (kind, tuple(e for e in entries if e.kind == kind))
        for kind in KIND_ORDER
    )
    changes = {
        e.key: tuple(describe_changes(e))
        for e in entries
        if e.has_drift
    }
    return Report(groups=groups, changes=changes)


def render_text(report: Report, show_unchanged: bool = False) -> str:
    """Deterministic plain-text rendering for terminals and logs."""
    lines: list[str] = []
    summary = ", ".join(
        f"{kind}={count}" for kind, count in report.counts.items() if count
    )
    lines.append(f"Helm drift report: {report.total} release(s) compared")
    lines.append(f"Summary: {summary or 'no releases'}")

    for kind, entries in report.groups:
        if not entries:
            continue
        if kind == DriftKind.UNCHANGED and not show_unchanged:
            continue
        lines.append("")
        lines.append(f"[{kind.value}] ({len(entries)})")
        for entry in entries:
            lines.append(f"  {format_key(entry.key)}  {_revision_span(entry)}")
            for change in report.changes.get(entry.key, ()):
                lines.append(f"    - {change}")

    if not report.has_drift:
        lines.append("")
        lines.append("No drift detected.")
    return "\n".join(lines) + "\n"


def _revision_span(entry: DriftEntry) -> str:
    before = f"rev {entry.baseline.revision}" if entry.baseline else "-"
    after = f"rev {entry.current.revision}" if entry.current else "-"
    return f"{before} -> {after}"
