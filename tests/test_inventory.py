from __future__ import annotations

import threading
from types import SimpleNamespace

import pytest

from conftest import FakeK8s, fake_configmap, fake_secret, helm_payload
from helm_audit.core.errors import InventoryError, InventoryTimeoutError
from helm_audit.core.helm_decoder import decode_secret
from helm_audit.core.inventory import ClusterInventory, StaticInventory, latest_revisions
from helm_audit.models.release import ReleaseStatus
from helm_audit.utils.encoding import merge_values, release_values_digest, values_digest


def _objects():
    return [
        fake_secret(helm_payload("web", "prod", 1, chart_version="1.0.0", status="superseded")),
        fake_secret(helm_payload("web", "prod", 2, chart_version="1.1.0")),
        fake_secret(helm_payload("api", "stage", 4, chart="api", status="failed")),
    ]


def test_fetch_all_keeps_latest_revision_per_release():
    inventory = ClusterInventory(FakeK8s(_objects()))
    records = inventory.fetch_all(timeout=5)
    by_key = {r.key: r for r in records}
    assert set(by_key) == {("prod", "web"), ("stage", "api")}
    assert by_key[("prod", "web")].revision == 2
    assert by_key[("prod", "web")].chart_version == "1.1.0"
    assert by_key[("stage", "api")].status == ReleaseStatus.FAILED


def test_fetch_all_per_namespace_queries():
    k8s = FakeK8s(_objects())
    inventory = ClusterInventory(k8s, namespaces=["stage", "prod", "prod"])
    records = inventory.fetch_all(timeout=5)
    assert {r.key for r in records} == {("prod", "web"), ("stage", "api")}
    assert sorted(ns for _, ns in k8s.calls) == ["prod", "stage"]


def test_configmap_storage_driver():
    k8s = FakeK8s([fake_configmap(helm_payload("web", "prod", 3))])
    records = ClusterInventory(k8s, storage_driver="configmaps").fetch_all(timeout=5)
    assert [r.revision for r in records] == [3]
    assert k8s.calls == [("configmaps", None)]


def test_one_failing_namespace_fails_the_whole_pass():
    k8s = FakeK8s(_objects(), failing={"stage": RuntimeError("forbidden")})
    inventory = ClusterInventory(k8s, namespaces=["prod", "stage"])
    with pytest.raises(InventoryError) as excinfo:
        inventory.fetch_all(timeout=5)
    assert set(excinfo.value.failures) == {"stage"}
    assert "stage: forbidden" in str(excinfo.value)


def test_timeout_aborts_the_pass():
    release = threading.Event()
    k8s = FakeK8s(_objects(), hooks={"stage": lambda: release.wait(5)})
    inventory = ClusterInventory(k8s, namespaces=["prod", "stage"])
    try:
        with pytest.raises(InventoryTimeoutError) as excinfo:
            inventory.fetch_all(timeout=0.1)
    finally:
        release.set()
    assert isinstance(excinfo.value, TimeoutError)
    assert excinfo.value.pending == ["stage"]


def test_undecodable_release_is_an_error_not_a_gap():
    broken = fake_secret(helm_payload("web", "prod", 1))
    broken.data = {"release": "bm90IGd6aXA="}
    with pytest.raises(InventoryError, match="prod/sh.helm.release.v1.web.v1"):
        ClusterInventory(FakeK8s([broken])).fetch_all(timeout=5)


def test_secret_without_payload():
    empty = SimpleNamespace(
        metadata=SimpleNamespace(name="x", namespace="prod", labels={"name": "x", "version": "1"}),
        data={},
    )
    with pytest.raises(InventoryError, match="no release payload"):
        decode_secret(empty)


def test_latest_revisions_compares_numerically():
    objs = [fake_secret(helm_payload("web", "prod", v)) for v in (9, 10, 2)]
    assert latest_revisions(objs)[0].metadata.labels["version"] == "10"


def test_values_digest_uses_resolved_values():
    payload = helm_payload(
        "web", "prod", 1,
        defaults={"replicas": 1, "image": {"tag": "1.0", "pull": "Always"}, "debug": True},
        config={"image": {"tag": "1.1"}, "debug": None},
    )
    expected = values_digest({"replicas": 1, "image": {"tag": "1.1", "pull": "Always"}})
    assert release_values_digest(payload) == expected
    record = decode_secret(fake_secret(payload))
    assert record.values_digest == expected


def test_values_digest_ignores_key_order():
    assert values_digest({"a": 1, "b": {"c": 2, "d": 3}}) == values_digest({"b": {"d": 3, "c": 2}, "a": 1})
    assert values_digest({"a": 1}) != values_digest({"a": 2})


def test_merge_values_does_not_mutate_inputs():
    defaults = {"image": {"tag": "1.0"}}
    merge_values(defaults, {"image": {"tag": "2.0"}})
    assert defaults == {"image": {"tag": "1.0"}}


def test_static_inventory():
    from conftest import make_record
    records = [make_record("a"), make_record("b")]
    assert StaticInventory(records).fetch_all(timeout=1) == set(records)
