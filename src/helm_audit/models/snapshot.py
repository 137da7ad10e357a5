"""Snapshot models: immutable point-in-time release inventories."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

from helm_audit.core.errors import MalformedSnapshotError
from helm_audit.models.release import ReleaseRecord


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _normalize_timestamp(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def index_records(records: Iterable[ReleaseRecord]) -> dict[tuple[str, str], ReleaseRecord]:
    """Map records by (namespace, name), failing on the first duplicate key."""
    indexed: dict[tuple[str, str], ReleaseRecord] = {}
    for record in records:
        if record.key in indexed:
            raise MalformedSnapshotError("duplicate release in snapshot", key=record.key)
        indexed[record.key] = record
    return indexed


@dataclass(frozen=True)
class Snapshot:
    taken_at: datetime
    records: tuple[ReleaseRecord, ...] = ()
    context: str = ""

    def __post_init__(self) -> None:
        indexed = index_records(self.records)
        ordered = tuple(indexed[k] for k in sorted(indexed))
        object.__setattr__(self, "records", ordered)
        object.__setattr__(self, "taken_at", _normalize_timestamp(self.taken_at))

    @classmethod
    def empty(cls, taken_at: datetime | None = None) -> Snapshot:
        return cls(taken_at=taken_at or datetime.fromtimestamp(0, timezone.utc))

    def __len__(self) -> int:
        return len(self.records)

    def get(self, namespace: str, name: str) -> ReleaseRecord | None:
        for record in self.records:
            if record.key == (namespace, name):
                return record
        return None

    @property
    def namespaces(self) -> list[str]:
        return sorted({r.namespace for r in self.records})

    def to_dict(self) -> dict[str, Any]:
        return {
            "taken_at": self.taken_at.isoformat(),
            "context": self.context,
            "records": [r.to_dict() for r in self.records],
        }

    @classmethod
    def from_dict(cls, d: dict) -> Snapshot:
        if not isinstance(d, dict):
            raise MalformedSnapshotError(f"snapshot must be a mapping, got {type(d).__name__}")
        raw_ts = d.get("taken_at")
        try:
            taken_at = datetime.fromisoformat(str(raw_ts).replace("Z", "+00:00"))
        except ValueError:
            raise MalformedSnapshotError(f"invalid taken_at timestamp {raw_ts!r}") from None
        records = d.get("records") or []
        if not isinstance(records, list):
            raise MalformedSnapshotError("records must be a list")
        builder = SnapshotBuilder(taken_at=taken_at, context=str(d.get("context", "") or ""))
        for raw in records:
            builder.add(ReleaseRecord.from_dict(raw))
        return builder.build()


class SnapshotBuilder:
    """Collects records for one inventory pass, rejecting duplicate keys."""

    def __init__(self, taken_at: datetime | None = None, context: str = ""):
        self.taken_at = taken_at or utcnow()
        self.context = context
        self._records: dict[tuple[str, str], ReleaseRecord] = {}

    def add(self, record: ReleaseRecord) -> SnapshotBuilder:
        if record.key in self._records:
            raise MalformedSnapshotError("duplicate release in inventory", key=record.key)
        self._records[record.key] = record
        return self

    def extend(self, records: Iterable[ReleaseRecord]) -> SnapshotBuilder:
        for record in records:
            self.add(record)
        return self

    def __len__(self) -> int:
        return len(self._records)

    def build(self) -> Snapshot:
        return Snapshot(
            taken_at=self.taken_at,
            records=tuple(self._records.values()),
            context=self.context,
        )


@dataclass(frozen=True)
class SnapshotRef:
    id: int
    # None only for a pruned file whose header could not be read
    taken_at: datetime | None
    context: str = ""
    release_count: int = 0


@dataclass(frozen=True)
class RetentionPolicy:
    """Which stored snapshots survive a prune.

    A snapshot is removed when it violates any supplied rule: it is not one of
    the newest ``keep_last`` snapshots, or it was taken before ``now - max_age``.
    """

    keep_last: int | None = None
    max_age: timedelta | None = None

    def __post_init__(self) -> None:
        if self.keep_last is not None and self.keep_last < 0:
            raise ValueError("keep_last must be >= 0")
        if self.max_age is not None and self.max_age < timedelta(0):
            raise ValueError("max_age must not be negative")

    def expired_by_count(self, ids: list[int]) -> list[int]:
        """Ids outside the newest ``keep_last``, given ids in ascending order."""
        if self.keep_last is None:
            return []
        return ids[:max(len(ids) - self.keep_last, 0)]

    def is_too_old(self, taken_at: datetime, now: datetime | None = None) -> bool:
        if self.max_age is None:
            return False
        return _normalize_timestamp(taken_at) < _normalize_timestamp(now or utcnow()) - self.max_age

    def select_expired(self, refs: list[SnapshotRef], now: datetime | None = None) -> list[SnapshotRef]:
        """Return the refs to prune, given refs ordered oldest first."""
        expired = set(self.expired_by_count([ref.id for ref in refs]))
        expired.update(ref.id for ref in refs if self.is_too_old(ref.taken_at, now))
        return [ref for ref in sorted(refs, key=lambda r: r.id) if ref.id in expired]
