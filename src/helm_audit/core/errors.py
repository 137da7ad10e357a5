"""Exception hierarchy for inventory, storage and drift operations."""

from __future__ import annotations


def format_key(key: tuple[str, str] | None) -> str:
    """Render a (namespace, name) key as namespace/name."""
    if key is None:
        return "<unknown>"
    namespace, name = key
    return f"{namespace or '<cluster>'}/{name}"


class AuditError(Exception):
    """Base class for all helm-audit failures."""


class InventoryError(AuditError):
    """One or more release inventory queries failed.

    ``failures`` maps each failing scope (a namespace, or ``*`` for an
    all-namespaces query) to the exception it raised.
    """

    def __init__(self, message: str, failures: dict[str, BaseException] | None = None):
        self.failures = dict(failures or {})
        if self.failures:
            detail = "; ".join(f"{scope}: {exc}" for scope, exc in sorted(self.failures.items()))
            message = f"{message} ({detail})"
        super().__init__(message)


class InventoryTimeoutError(InventoryError, TimeoutError):
    """The inventory pass exceeded its deadline."""

    def __init__(self, timeout: float, pending: list[str] | None = None):
        self.timeout = timeout
        self.pending = sorted(pending or [])
        message = f"Release inventory did not complete within {timeout:g}s"
        if self.pending:
            message += f" (still waiting on: {', '.join(self.pending)})"
        super().__init__(message)


class StorageError(AuditError):
    """The snapshot medium could not be written or read."""

    def __init__(self, message: str, snapshot_id: int | None = None):
        self.snapshot_id = snapshot_id
        if snapshot_id is not None:
            message = f"snapshot {snapshot_id}: {message}"
        super().__init__(message)


class NotFoundError(AuditError):
    """A referenced snapshot does not exist."""

    def __init__(self, snapshot_id: int | str):
        self.snapshot_id = snapshot_id
        super().__init__(f"Snapshot '{snapshot_id}' not found")


class MalformedSnapshotError(AuditError):
    """Snapshot data violates an invariant."""

    def __init__(
        self,
        message: str,
        key: tuple[str, str] | None = None,
        snapshot_id: int | None = None,
    ):
        self.key = key
        self.snapshot_id = snapshot_id
        self.detail = message
        prefix = []
        if snapshot_id is not None:
            prefix.append(f"snapshot {snapshot_id}")
        if key is not None:
            prefix.append(f"release {format_key(key)}")
        if prefix:
            message = f"{', '.join(prefix)}: {message}"
        super().__init__(message)
