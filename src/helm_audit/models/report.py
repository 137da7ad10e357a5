"""Drift report model."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from helm_audit.models.diff import KIND_ORDER, DriftEntry, DriftKind


@dataclass(frozen=True)
class Report:
    """Drift entries grouped by kind, with per-kind counts.

    ``groups`` follows KIND_ORDER and keeps the detector's ordering inside
    each group. ``changes`` holds the field-level change descriptions of each
    drifted release, keyed by (namespace, name).
    """

    groups: tuple[tuple[DriftKind, tuple[DriftEntry, ...]], ...]
    changes: dict[tuple[str, str], tuple[str, ...]] = field(default_factory=dict)

    @property
    def counts(self) -> dict[str, int]:
        return {kind.value: len(entries) for kind, entries in self.groups}

    @property
    def entries(self) -> list[DriftEntry]:
        return [e for _, entries in self.groups for e in entries]

    @property
    def drifted(self) -> list[DriftEntry]:
        return [e for e in self.entries if e.has_drift]

    @property
    def has_drift(self) -> bool:
        return any(kind != DriftKind.UNCHANGED and entries for kind, entries in self.groups)

    @property
    def total(self) -> int:
        return sum(len(entries) for _, entries in self.groups)

    def group(self, kind: DriftKind) -> tuple[DriftEntry, ...]:
        for k, entries in self.groups:
            if k == kind:
                return entries
        return ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "counts": {kind.value: self.counts[kind.value] for kind in KIND_ORDER},
            "has_drift": self.has_drift,
            "total": self.total,
            "entries": [self._entry_to_dict(e) for e in self.entries],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)

    def _entry_to_dict(self, entry: DriftEntry) -> dict[str, Any]:
        return {
            "kind": entry.kind.value,
            "namespace": entry.namespace,
            "name": entry.name,
            "baseline": entry.baseline.to_dict() if entry.baseline else None,
            "current": entry.current.to_dict() if entry.current else None,
            "changes": list(self.changes.get(entry.key, ())),
        }
