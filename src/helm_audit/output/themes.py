"""Status and drift-kind color maps."""

from helm_audit.models.diff import DriftKind
from helm_audit.models.release import ReleaseStatus

STATUS_COLORS: dict[ReleaseStatus, str] = {
    ReleaseStatus.DEPLOYED: "green",
    ReleaseStatus.FAILED: "red bold",
    ReleaseStatus.SUPERSEDED: "dim",
    ReleaseStatus.PENDING_INSTALL: "yellow",
    ReleaseStatus.PENDING_UPGRADE: "yellow",
    ReleaseStatus.PENDING_ROLLBACK: "yellow",
    ReleaseStatus.UNINSTALLING: "magenta",
    ReleaseStatus.UNINSTALLED: "dim",
    ReleaseStatus.UNKNOWN: "red",
}

DRIFT_COLORS: dict[DriftKind, str] = {
    DriftKind.UNCHANGED: "green",
    DriftKind.REVISION_ADVANCED: "cyan",
    DriftKind.REVISION_REGRESSED: "red bold",
    DriftKind.CHART_CHANGED: "yellow",
    DriftKind.VALUES_CHANGED: "yellow",
    DriftKind.STATUS_DEGRADED: "red",
    DriftKind.APPEARED: "blue",
    DriftKind.DISAPPEARED: "magenta",
}


def styled_status(status: ReleaseStatus) -> str:
    color = STATUS_COLORS.get(status, "white")
    return f"[{color}]{status.value}[/{color}]"


def styled_kind(kind: DriftKind) -> str:
    color = DRIFT_COLORS.get(kind, "white")
    return f"[{color}]{kind.value}[/{color}]"
