from __future__ import annotations

import pytest

from conftest import make_record, make_snapshot
from helm_audit.core.baseline import load_baseline, parse_baseline
from helm_audit.core.drift_engine import detect_drift
from helm_audit.core.errors import MalformedSnapshotError, StorageError
from helm_audit.models.diff import DriftKind
from helm_audit.models.release import ReleaseStatus

BASELINE_YAML = """\
context: prod-cluster
releases:
  - name: web
    namespace: prod
    revision: 2
    chart: app
    version: "1.0"
  - name: cache
    namespace: prod
    revision: 1
    chart: redis
    version: 2.0.0
    status: deployed
    values_digest: d0
"""


def test_load_baseline(tmp_path):
    path = tmp_path / "baseline.yaml"
    path.write_text(BASELINE_YAML)
    snap = load_baseline(path)
    assert snap.context == "prod-cluster"
    assert [r.key for r in snap.records] == [("prod", "cache"), ("prod", "web")]
    web = snap.get("prod", "web")
    assert web.status == ReleaseStatus.DEPLOYED
    assert web.chart_version == "1.0"
    assert web.values_digest == ""


def test_declared_baseline_drives_detection(tmp_path):
    path = tmp_path / "baseline.yaml"
    path.write_text(BASELINE_YAML)
    current = make_snapshot(
        make_record("web", "prod", revision=2, version="1.0", digest="whatever"),
        make_record("cache", "prod", revision=1, chart="redis", version="2.0.0", digest="changed"),
    )
    kinds = {e.name: e.kind for e in detect_drift(load_baseline(path), current)}
    assert kinds == {"web": DriftKind.UNCHANGED, "cache": DriftKind.VALUES_CHANGED}


def test_plain_list_document():
    snap = parse_baseline([{"name": "a", "namespace": "ns", "revision": 1, "chart": "c", "version": "1"}])
    assert len(snap) == 1


def test_duplicate_declared_release():
    item = {"name": "a", "namespace": "ns", "revision": 1, "chart": "c", "version": "1"}
    with pytest.raises(MalformedSnapshotError) as excinfo:
        parse_baseline({"releases": [item, dict(item)]})
    assert excinfo.value.key == ("ns", "a")


@pytest.mark.parametrize("doc, message", [
    ({"releases": "nope"}, "releases"),
    ({"releases": [{"name": "a", "namespace": "ns"}]}, "missing field"),
    ({"releases": [{"name": "a", "namespace": "ns", "revision": "x", "chart": "c", "version": "1"}]}, "invalid revision"),
    ({"releases": [{"name": "a", "namespace": "ns", "revision": 1, "chart": "c", "version": "1", "status": "odd"}]}, "unknown status"),
])
def test_invalid_documents(doc, message):
    with pytest.raises(MalformedSnapshotError, match=message):
        parse_baseline(doc)


def test_missing_file(tmp_path):
    with pytest.raises(StorageError):
        load_baseline(tmp_path / "absent.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("releases: [unclosed")
    with pytest.raises(MalformedSnapshotError, match="not valid YAML"):
        load_baseline(path)
