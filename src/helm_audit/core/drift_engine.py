"""Compare two release snapshots and classify every release's drift."""

from __future__ import annotations

import logging

from deepdiff import DeepDiff

from helm_audit.models.diff import DriftEntry, DriftKind
from helm_audit.models.release import ReleaseRecord, ReleaseStatus
from helm_audit.models.snapshot import Snapshot, index_records
from helm_audit.utils.version_compare import classify_change

logger = logging.getLogger(__name__)

# Record fields that identify a release rather than describe its state
IDENTITY_FIELDS = {"name", "namespace"}


def detect_drift(
    baseline: Snapshot,
    current: Snapshot,
    distinguish_values: bool = True,
) -> list[DriftEntry]:
    """Classify every release present in either snapshot.

    Returns one entry per (namespace, name), ordered by that key. Raises
    MalformedSnapshotError if either snapshot holds a duplicate key.
    """
    base_index = index_records(baseline.records)
    cur_index = index_records(current.records)

    entries: list[DriftEntry] = []
    for key in sorted(base_index.keys() | cur_index.keys()):
        before = base_index.get(key)
        after = cur_index.get(key)
        kind = classify(before, after, distinguish_values=distinguish_values)
        entries.append(DriftEntry(kind=kind, baseline=before, current=after))

    logger.debug(
        "Compared %d baseline and %d current releases: %d entries",
        len(base_index), len(cur_index), len(entries),
    )
    return entries


def classify(
    baseline: ReleaseRecord | None,
    current: ReleaseRecord | None,
    distinguish_values: bool = True,
) -> DriftKind:
    """Pick the single drift kind for one release; the first matching rule wins."""
    if baseline is None and current is None:
        raise ValueError("classify() needs at least one record")
    if baseline is None:
        return DriftKind.APPEARED
    if current is None:
        return DriftKind.DISAPPEARED

    # Out-of-band rollback or tampering, regardless of any other change
    if current.revision < baseline.revision:
        return DriftKind.REVISION_REGRESSED

    if baseline.status == ReleaseStatus.DEPLOYED and current.status.is_degraded:
        return DriftKind.STATUS_DEGRADED

    if current.chart_name != baseline.chart_name or current.chart_version != baseline.chart_version:
        return DriftKind.CHART_CHANGED

    # Values changed without a revision bump; empty digests come from declared baselines
    if (
        current.revision == baseline.revision
        and baseline.values_digest
        and current.values_digest != baseline.values_digest
    ):
        return DriftKind.VALUES_CHANGED if distinguish_values else DriftKind.CHART_CHANGED

    if current.revision > baseline.revision:
        return DriftKind.REVISION_ADVANCED

    return DriftKind.UNCHANGED


def describe_changes(entry: DriftEntry) -> list[str]:
    """Human-readable field-level differences for one drift entry."""
    if entry.baseline is None:
        return [f"New release at revision {entry.current.revision} ({entry.current.chart})"]
    if entry.current is None:
        return [f"Release gone; last seen at revision {entry.baseline.revision} ({entry.baseline.chart})"]
    if entry.kind == DriftKind.UNCHANGED:
        return []

    before = {k: v for k, v in entry.baseline.to_dict().items() if k not in IDENTITY_FIELDS}
    after = {k: v for k, v in entry.current.to_dict().items() if k not in IDENTITY_FIELDS}
    if not entry.baseline.values_digest:
        after.pop("values_digest", None)
        before.pop("values_digest", None)

    details = _format_diff(DeepDiff(before, after, verbose_level=2))

    if entry.baseline.chart_version != entry.current.chart_version:
        change = classify_change(entry.baseline.chart_version, entry.current.chart_version)
        details.append(f"Chart version change: {change}")
    return details


def _format_diff(diff: DeepDiff) -> list[str]:
    """Format DeepDiff output into human-readable strings."""
    details: list[str] = []

    if "values_changed" in diff:
        for path, change in sorted(diff["values_changed"].items()):
            old = change.get("old_value", "?")
            new = change.get("new_value", "?")
            details.append(f"Changed {_field(path)}: {old!r} -> {new!r}")

    if "type_changes" in diff:
        for path, change in sorted(diff["type_changes"].items()):
            old = change.get("old_value", "?")
            new = change.get("new_value", "?")
            details.append(f"Type changed {_field(path)}: {old!r} -> {new!r}")

    if "dictionary_item_added" in diff:
        for path in sorted(diff["dictionary_item_added"]):
            details.append(f"Added: {_field(path)}")

    if "dictionary_item_removed" in diff:
        for path in sorted(diff["dictionary_item_removed"]):
            details.append(f"Removed: {_field(path)}")

    return details


def _field(path: str) -> str:
    """Turn a DeepDiff path like root['revision'] into revision."""
    if path.startswith("root[") and path.endswith("]"):
        return path[5:-1].strip("'\"")
    return path
