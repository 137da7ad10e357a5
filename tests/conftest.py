from __future__ import annotations

import base64
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from helm_audit.models.release import ReleaseRecord, ReleaseStatus
from helm_audit.models.snapshot import Snapshot
from helm_audit.utils.encoding import encode_release


def make_record(
    name: str = "web",
    namespace: str = "prod",
    revision: int = 1,
    chart: str = "app",
    version: str = "1.0",
    status: ReleaseStatus | str = ReleaseStatus.DEPLOYED,
    digest: str = "d0",
) -> ReleaseRecord:
    if isinstance(status, str):
        status = ReleaseStatus.from_str(status)
    return ReleaseRecord(
        name=name,
        namespace=namespace,
        revision=revision,
        chart_name=chart,
        chart_version=version,
        values_digest=digest,
        status=status,
    )


def make_snapshot(*records: ReleaseRecord, taken_at: datetime | None = None, context: str = "") -> Snapshot:
    return Snapshot(
        taken_at=taken_at or datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc),
        records=tuple(records),
        context=context,
    )


def helm_payload(
    name: str,
    namespace: str,
    version: int,
    chart: str = "app",
    chart_version: str = "1.0.0",
    status: str = "deployed",
    defaults: dict | None = None,
    config: dict | None = None,
) -> dict:
    return {
        "name": name,
        "namespace": namespace,
        "version": version,
        "info": {"status": status, "last_deployed": "2026-10-01T12:00:00Z"},
        "chart": {
            "metadata": {"name": chart, "version": chart_version},
            "values": defaults or {},
        },
        "config": config or {},
        "manifest": "",
    }


def fake_secret(payload: dict, labels: dict | None = None) -> SimpleNamespace:
    """A Secret as the kubernetes client returns it: base64 data over Helm's own encoding."""
    release_labels = {
        "owner": "helm",
        "name": payload["name"],
        "version": str(payload["version"]),
        "status": payload["info"]["status"],
    }
    release_labels.update(labels or {})
    return SimpleNamespace(
        metadata=SimpleNamespace(
            name=f"sh.helm.release.v1.{payload['name']}.v{payload['version']}",
            namespace=payload["namespace"],
            labels=release_labels,
        ),
        data={"release": base64.b64encode(encode_release(payload).encode("ascii")).decode("ascii")},
    )


def fake_configmap(payload: dict) -> SimpleNamespace:
    secret = fake_secret(payload)
    return SimpleNamespace(metadata=secret.metadata, data={"release": secret.data["release"]})


class FakeK8s:
    """Stands in for K8sClient, serving release objects per namespace."""

    def __init__(self, objects: list, context: str = "test-cluster", failing: dict | None = None, hooks=None):
        self.objects = objects
        self.active_context_name = context
        self.failing = failing or {}
        self.hooks = hooks or {}
        self.calls: list[tuple[str, str | None]] = []

    def _list(self, kind: str, namespace: str | None) -> list:
        self.calls.append((kind, namespace))
        if namespace in self.hooks:
            self.hooks[namespace]()
        if namespace in self.failing:
            raise self.failing[namespace]
        return [o for o in self.objects if namespace is None or o.metadata.namespace == namespace]

    def list_helm_secrets(self, namespace=None, release_name=None, timeout=None):
        return self._list("secrets", namespace)

    def list_helm_configmaps(self, namespace=None, release_name=None, timeout=None):
        return self._list("configmaps", namespace)


@pytest.fixture
def store(tmp_path):
    from helm_audit.core.snapshot_store import FileSnapshotStore
    return FileSnapshotStore(tmp_path / "snapshots")
