"""Load a declared (hand-written) release baseline from YAML.

Example document::

    context: prod-cluster
    releases:
      - name: web
        namespace: prod
        revision: 2
        chart: app
        version: 1.0.0
      - name: cache
        namespace: prod
        revision: 1
        chart: redis
        version: 2.0.0
        status: deployed
        values_digest: 3f1c...

``status`` defaults to deployed. Without a ``values_digest`` the
values of that release are not compared. Quote two-part versions
("1.10"), YAML would otherwise read them as floats.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import yaml

from helm_audit.core.errors import MalformedSnapshotError, StorageError
from helm_audit.models.release import ReleaseRecord, ReleaseStatus
from helm_audit.models.snapshot import Snapshot, SnapshotBuilder

logger = logging.getLogger(__name__)

# Prefer the C-accelerated YAML loader when available.
_YamlLoader = getattr(yaml, "CSafeLoader", yaml.SafeLoader)

_REQUIRED = ("name", "namespace", "revision", "chart", "version")


def load_baseline(path: Path | str) -> Snapshot:
    """Read a declared baseline file into a Snapshot."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StorageError(f"cannot read baseline {path}: {exc}") from exc
    try:
        doc = yaml.load(text, Loader=_YamlLoader)
    except yaml.YAMLError as exc:
        raise MalformedSnapshotError(f"baseline {path} is not valid YAML: {exc}") from exc

    taken_at = datetime.fromtimestamp(path.stat().st_mtime).astimezone()
    return parse_baseline(doc, taken_at=taken_at, source=str(path))


def parse_baseline(doc: object, taken_at: datetime | None = None, source: str = "<baseline>") -> Snapshot:
    if isinstance(doc, list):
        doc = {"releases": doc}
    if not isinstance(doc, dict) or not isinstance(doc.get("releases", []), list):
        raise MalformedSnapshotError(f"{source}: expected a 'releases' list")

    builder = SnapshotBuilder(taken_at=taken_at, context=str(doc.get("context", "") or ""))
    for item in doc.get("releases") or []:
        builder.add(_parse_release(item, source))
    logger.debug("Loaded %d declared releases from %s", len(builder), source)
    return builder.build()


def _parse_release(item: object, source: str) -> ReleaseRecord:
    if not isinstance(item, dict):
        raise MalformedSnapshotError(f"{source}: release entry must be a mapping, got {item!r}")
    key = (str(item.get("namespace", "")), str(item.get("name", "")))
    missing = [f for f in _REQUIRED if item.get(f) in (None, "")]
    if missing:
        raise MalformedSnapshotError(f"{source}: missing field(s) {', '.join(missing)}", key=key)

    status = ReleaseStatus.from_str(str(item.get("status", "deployed")))
    if status == ReleaseStatus.UNKNOWN:
        raise MalformedSnapshotError(f"{source}: unknown status {item.get('status')!r}", key=key)
    try:
        revision = int(item["revision"])
    except (TypeError, ValueError):
        raise MalformedSnapshotError(f"{source}: invalid revision {item['revision']!r}", key=key) from None

    return ReleaseRecord(
        name=key[1],
        namespace=key[0],
        revision=revision,
        chart_name=str(item["chart"]),
        chart_version=str(item["version"]),
        values_digest=str(item.get("values_digest", "") or ""),
        status=status,
    )
