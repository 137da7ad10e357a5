"""Append-only persistence of release snapshots."""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from datetime import datetime
from pathlib import Path

from helm_audit.core.errors import AuditError, MalformedSnapshotError, NotFoundError, StorageError
from helm_audit.models.snapshot import RetentionPolicy, Snapshot, SnapshotRef

logger = logging.getLogger(__name__)

_SNAPSHOT_RE = re.compile(r"^snapshot-(\d{8,})\.json$")
_HIGHWATER_RE = re.compile(r"^highwater-(\d{8,})$")
_FORMAT_VERSION = 1


def _snapshot_filename(snapshot_id: int) -> str:
    return f"snapshot-{snapshot_id:08d}.json"


def _highwater_filename(snapshot_id: int) -> str:
    return f"highwater-{snapshot_id:08d}"


class FileSnapshotStore:
    """Stores one JSON document per snapshot in a directory.

    Ids are allocated by exclusive creation of the target file, so concurrent
    writers never share an id. Pruning leaves a ``highwater-N`` marker file and
    the next id is always above the largest marker, so a pruned id is never
    handed out again. A snapshot file is written completely before it becomes
    visible under its final name.

    Only the documents an operation needs are opened: ``latest``, ``resolve``
    and count-based pruning work from the file names alone.
    """

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    # -- write path -------------------------------------------------------

    def save(self, snapshot: Snapshot) -> SnapshotRef:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"cannot create snapshot directory {self.directory}: {exc}") from exc

        tmp_path = self._write_temp(snapshot)
        try:
            while True:
                snapshot_id = self._next_id()
                target = self.directory / _snapshot_filename(snapshot_id)
                try:
                    os.link(tmp_path, target)
                except FileExistsError:
                    logger.debug("Snapshot id %d taken by a concurrent writer, retrying", snapshot_id)
                    continue
                except OSError as exc:
                    raise StorageError(f"cannot persist snapshot: {exc}", snapshot_id) from exc
                break
        finally:
            tmp_path.unlink(missing_ok=True)

        logger.info("Saved snapshot %d with %d releases", snapshot_id, len(snapshot))
        return SnapshotRef(
            id=snapshot_id,
            taken_at=snapshot.taken_at,
            context=snapshot.context,
            release_count=len(snapshot),
        )

    def _write_temp(self, snapshot: Snapshot) -> Path:
        document = {"format": _FORMAT_VERSION, **snapshot.to_dict()}
        try:
            fd, name = tempfile.mkstemp(prefix=".snapshot-", suffix=".tmp", dir=self.directory)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, indent=2, sort_keys=True)
                fh.flush()
                os.fsync(fh.fileno())
        except OSError as exc:
            raise StorageError(f"cannot write snapshot to {self.directory}: {exc}") from exc
        return Path(name)

    def _next_id(self) -> int:
        names = self._names()
        ids = _matching_ids(names, _SNAPSHOT_RE)
        marks = _matching_ids(names, _HIGHWATER_RE)
        return max(ids[-1] if ids else 0, marks[-1] if marks else 0) + 1

    def _raise_highwater(self, snapshot_id: int) -> None:
        """Record that ids up to ``snapshot_id`` are used.

        Markers only ever get added before lower ones are removed, so the
        largest marker never decreases, even with concurrent prunes.
        """
        marker = self.directory / _highwater_filename(snapshot_id)
        try:
            marker.touch(exist_ok=True)
        except OSError as exc:
            raise StorageError(f"cannot update high-water mark {marker}: {exc}") from exc
        for older in _matching_ids(self._names(), _HIGHWATER_RE):
            if older < snapshot_id:
                (self.directory / _highwater_filename(older)).unlink(missing_ok=True)

    # -- read path --------------------------------------------------------

    def _names(self) -> list[str]:
        if not self.directory.exists():
            return []
        try:
            return os.listdir(self.directory)
        except OSError as exc:
            raise StorageError(f"cannot list {self.directory}: {exc}") from exc

    def _stored_ids(self) -> list[int]:
        return _matching_ids(self._names(), _SNAPSHOT_RE)

    def _read_document(self, snapshot_id: int) -> dict:
        path = self.directory / _snapshot_filename(snapshot_id)
        try:
            with path.open(encoding="utf-8") as fh:
                document = json.load(fh)
        except FileNotFoundError:
            raise NotFoundError(snapshot_id) from None
        except json.JSONDecodeError as exc:
            raise StorageError(f"corrupt snapshot file {path}: {exc}", snapshot_id) from exc
        except OSError as exc:
            raise StorageError(f"cannot read {path}: {exc}", snapshot_id) from exc
        if not isinstance(document, dict):
            raise MalformedSnapshotError("snapshot document is not a mapping", snapshot_id=snapshot_id)
        return document

    def _read_ref(self, snapshot_id: int) -> SnapshotRef:
        document = self._read_document(snapshot_id)
        raw_ts = document.get("taken_at")
        try:
            taken_at = datetime.fromisoformat(str(raw_ts).replace("Z", "+00:00"))
        except ValueError:
            raise MalformedSnapshotError(
                f"invalid taken_at timestamp {raw_ts!r}", snapshot_id=snapshot_id,
            ) from None
        records = document.get("records") or []
        return SnapshotRef(
            id=snapshot_id,
            taken_at=taken_at,
            context=str(document.get("context", "") or ""),
            release_count=len(records) if isinstance(records, list) else 0,
        )

    def load(self, snapshot_id: int) -> Snapshot:
        document = self._read_document(snapshot_id)
        try:
            return Snapshot.from_dict(document)
        except MalformedSnapshotError as exc:
            raise MalformedSnapshotError(exc.detail, key=exc.key, snapshot_id=snapshot_id) from exc

    def list(self) -> list[SnapshotRef]:
        """All stored snapshots, oldest first."""
        return [self._read_ref(snapshot_id) for snapshot_id in self._stored_ids()]

    def latest(self) -> SnapshotRef | None:
        ids = self._stored_ids()
        return self._read_ref(ids[-1]) if ids else None

    def resolve(self, ref: str | int) -> int:
        """Turn an id, 'latest' or 'previous' into a stored snapshot id."""
        if isinstance(ref, int):
            return ref
        text = str(ref).strip().lower()
        if text in ("latest", "previous"):
            ids = self._stored_ids()
            offset = 1 if text == "latest" else 2
            if len(ids) < offset:
                raise NotFoundError(text)
            return ids[-offset]
        try:
            return int(text)
        except ValueError:
            raise NotFoundError(ref) from None

    # -- retention --------------------------------------------------------

    def prune(self, policy: RetentionPolicy, now: datetime | None = None) -> list[SnapshotRef]:
        """Delete the snapshots the policy rejects; return what was removed.

        ``keep_last`` is applied to ids, so unreadable files still fall out of
        the window. A file whose timestamp cannot be read is kept by the age
        rule and logged by id.
        """
        ids = self._stored_ids()
        expired = set(policy.expired_by_count(ids))
        removed: list[SnapshotRef] = []
        for snapshot_id in ids:
            if snapshot_id not in expired and policy.max_age is None:
                continue
            try:
                ref = self._read_ref(snapshot_id)
            except NotFoundError:
                continue
            except AuditError as exc:
                if snapshot_id in expired:
                    removed.append(SnapshotRef(id=snapshot_id, taken_at=None))
                else:
                    logger.warning("Keeping snapshot %d, its age cannot be read: %s", snapshot_id, exc)
                continue
            if snapshot_id in expired or policy.is_too_old(ref.taken_at, now):
                removed.append(ref)
        if not removed:
            return []

        self._raise_highwater(max(ref.id for ref in removed))
        for ref in removed:
            path = self.directory / _snapshot_filename(ref.id)
            try:
                path.unlink()
            except FileNotFoundError:
                logger.debug("Snapshot %d already removed", ref.id)
            except OSError as exc:
                raise StorageError(f"cannot delete {path}: {exc}", ref.id) from exc
        logger.info("Pruned %d snapshot(s)", len(removed))
        return removed


def _matching_ids(names: list[str], pattern: re.Pattern) -> list[int]:
    ids = []
    for name in names:
        m = pattern.match(name)
        if m:
            ids.append(int(m.group(1)))
    return sorted(ids)
