"""Drift detection models."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from helm_audit.models.release import ReleaseRecord


class DriftKind(enum.Enum):
    UNCHANGED = "unchanged"
    REVISION_ADVANCED = "revision-advanced"
    REVISION_REGRESSED = "revision-regressed"
    CHART_CHANGED = "chart-changed"
    VALUES_CHANGED = "values-changed"
    STATUS_DEGRADED = "status-degraded"
    APPEARED = "appeared"
    DISAPPEARED = "disappeared"

    @classmethod
    def from_str(cls, s: str) -> DriftKind:
        for member in cls:
            if member.value == s:
                return member
        raise ValueError(f"Unknown drift kind: {s!r}")


# Report grouping order, most alarming first
KIND_ORDER: tuple[DriftKind, ...] = (
    DriftKind.REVISION_REGRESSED,
    DriftKind.STATUS_DEGRADED,
    DriftKind.DISAPPEARED,
    DriftKind.CHART_CHANGED,
    DriftKind.VALUES_CHANGED,
    DriftKind.APPEARED,
    DriftKind.REVISION_ADVANCED,
    DriftKind.UNCHANGED,
)


@dataclass(frozen=True)
class DriftEntry:
    kind: DriftKind
    baseline: ReleaseRecord | None = None
    current: ReleaseRecord | None = None

    def __post_init__(self) -> None:
        if self.baseline is None and self.current is None:
            raise ValueError("DriftEntry needs a baseline or a current record")
        if self.baseline is not None and self.current is not None and self.baseline.key != self.current.key:
            raise ValueError(
                f"DriftEntry records disagree on key: {self.baseline.key} != {self.current.key}"
            )

    @property
    def key(self) -> tuple[str, str]:
        record = self.current if self.current is not None else self.baseline
        return record.key

    @property
    def namespace(self) -> str:
        return self.key[0]

    @property
    def name(self) -> str:
        return self.key[1]

    @property
    def has_drift(self) -> bool:
        return self.kind != DriftKind.UNCHANGED
