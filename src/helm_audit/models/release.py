"""Helm release models."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from helm_audit.core.errors import MalformedSnapshotError


class ReleaseStatus(enum.Enum):
    DEPLOYED = "deployed"
    FAILED = "failed"
    SUPERSEDED = "superseded"
    PENDING_INSTALL = "pending-install"
    PENDING_UPGRADE = "pending-upgrade"
    PENDING_ROLLBACK = "pending-rollback"
    UNINSTALLING = "uninstalling"
    UNINSTALLED = "uninstalled"
    UNKNOWN = "unknown"

    @classmethod
    def from_str(cls, s: str) -> ReleaseStatus:
        for member in cls:
            if member.value == s:
                return member
        return cls.UNKNOWN

    @property
    def is_degraded(self) -> bool:
        """True for statuses that signal a failed or stuck operation."""
        return self in DEGRADED_STATUSES


DEGRADED_STATUSES: frozenset[ReleaseStatus] = frozenset({
    ReleaseStatus.FAILED,
    ReleaseStatus.PENDING_INSTALL,
    ReleaseStatus.PENDING_UPGRADE,
    ReleaseStatus.PENDING_ROLLBACK,
})


@dataclass(frozen=True)
class ReleaseRecord:
    """One Helm release as observed at one point in time."""

    name: str
    namespace: str
    revision: int
    chart_name: str
    chart_version: str
    values_digest: str
    status: ReleaseStatus

    def __post_init__(self) -> None:
        if not self.name:
            raise MalformedSnapshotError("release name is empty", key=self.key)
        if isinstance(self.revision, bool) or not isinstance(self.revision, int) or self.revision < 1:
            raise MalformedSnapshotError(
                f"revision must be a positive integer, got {self.revision!r}", key=self.key,
            )

    @property
    def key(self) -> tuple[str, str]:
        return (self.namespace, self.name)

    @property
    def chart(self) -> str:
        return f"{self.chart_name}-{self.chart_version}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "namespace": self.namespace,
            "revision": self.revision,
            "chart": self.chart_name,
            "chart_version": self.chart_version,
            "values_digest": self.values_digest,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, d: dict) -> ReleaseRecord:
        if not isinstance(d, dict):
            raise MalformedSnapshotError(f"release record must be a mapping, got {type(d).__name__}")
        key = (str(d.get("namespace") or ""), str(d.get("name") or ""))
        try:
            revision = int(d["revision"])
        except KeyError:
            raise MalformedSnapshotError("missing revision", key=key) from None
        except (TypeError, ValueError):
            raise MalformedSnapshotError(f"invalid revision {d['revision']!r}", key=key) from None
        return cls(
            name=key[1],
            namespace=key[0],
            revision=revision,
            chart_name=str(d.get("chart") or ""),
            chart_version=str(d.get("chart_version") or ""),
            values_digest=str(d.get("values_digest", "") or ""),
            status=ReleaseStatus.from_str(str(d.get("status") or "unknown")),
        )

    @classmethod
    def from_helm_payload(cls, d: dict, values_digest: str, namespace: str = "") -> ReleaseRecord:
        """Build a record from a decoded Helm v3 release document."""
        chart_meta = (d.get("chart") or {}).get("metadata") or {}
        info = d.get("info") or {}
        return cls(
            name=d.get("name", ""),
            namespace=d.get("namespace", "") or namespace,
            revision=d.get("version", 0),
            chart_name=chart_meta.get("name", ""),
            chart_version=chart_meta.get("version", ""),
            values_digest=values_digest,
            status=ReleaseStatus.from_str(info.get("status", "unknown")),
        )
