"""The audit pipeline: capture, persist, compare, report."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from helm_audit.core.drift_engine import detect_drift
from helm_audit.core.inventory import ReleaseInventory
from helm_audit.core.report_generator import generate
from helm_audit.core.snapshot_store import FileSnapshotStore
from helm_audit.models.report import Report
from helm_audit.models.snapshot import Snapshot, SnapshotBuilder, SnapshotRef

logger = logging.getLogger(__name__)


@dataclass
class AuditResult:
    snapshot_ref: SnapshotRef
    baseline_ref: SnapshotRef | None
    report: Report


def capture_snapshot(
    inventory: ReleaseInventory,
    timeout: float | None,
    context: str = "",
) -> Snapshot:
    """Run one inventory pass and freeze it into a Snapshot.

    Nothing is returned unless the whole pass succeeded.
    """
    records = inventory.fetch_all(timeout)
    builder = SnapshotBuilder(context=context)
    for record in sorted(records, key=lambda r: r.key):
        builder.add(record)
    return builder.build()


def run_audit(
    inventory: ReleaseInventory,
    store: FileSnapshotStore,
    timeout: float | None,
    baseline: Snapshot | None = None,
    distinguish_values: bool = True,
    context: str = "",
) -> AuditResult:
    """Snapshot the cluster, store it, and diff it against a baseline.

    Without an explicit baseline the newest stored snapshot is used; an
    empty store compares against an empty snapshot, so every release
    shows up as appeared.
    """
    snapshot = capture_snapshot(inventory, timeout, context=context)

    baseline_ref = None
    if baseline is None:
        baseline_ref = store.latest()
        if baseline_ref is not None:
            baseline = store.load(baseline_ref.id)
        else:
            logger.info("No stored snapshot to compare against; using an empty baseline")
            baseline = Snapshot.empty()

    snapshot_ref = store.save(snapshot)
    entries = detect_drift(baseline, snapshot, distinguish_values=distinguish_values)
    return AuditResult(
        snapshot_ref=snapshot_ref,
        baseline_ref=baseline_ref,
        report=generate(entries),
    )
