from __future__ import annotations

import pytest

from conftest import make_record, make_snapshot
from helm_audit.core.audit import capture_snapshot, run_audit
from helm_audit.core.errors import InventoryTimeoutError
from helm_audit.core.inventory import StaticInventory
from helm_audit.models.diff import DriftKind


class TimingOutInventory:
    def fetch_all(self, timeout):
        raise InventoryTimeoutError(timeout, ["prod"])


def test_capture_snapshot_orders_records():
    inventory = StaticInventory([make_record("z", "b"), make_record("a", "b"), make_record("q", "a")])
    snap = capture_snapshot(inventory, timeout=1, context="ctx")
    assert [r.key for r in snap.records] == [("a", "q"), ("b", "a"), ("b", "z")]
    assert snap.context == "ctx"
    assert snap.taken_at.tzinfo is not None


def test_first_audit_compares_against_empty_store(store):
    inventory = StaticInventory([make_record("web", "prod"), make_record("cache", "prod")])
    result = run_audit(inventory, store, timeout=1)
    assert result.baseline_ref is None
    assert result.snapshot_ref.id == 1
    assert result.report.counts["appeared"] == 2


def test_second_audit_uses_latest_snapshot(store):
    run_audit(StaticInventory([make_record("web", "prod", revision=2)]), store, timeout=1)
    result = run_audit(StaticInventory([make_record("web", "prod", revision=3)]), store, timeout=1)
    assert result.baseline_ref.id == 1
    assert result.snapshot_ref.id == 2
    assert [e.kind for e in result.report.entries] == [DriftKind.REVISION_ADVANCED]


def test_explicit_baseline(store):
    baseline = make_snapshot(make_record("web", "prod", revision=5))
    result = run_audit(StaticInventory([make_record("web", "prod", revision=3)]), store, timeout=1, baseline=baseline)
    assert result.baseline_ref is None
    assert result.report.group(DriftKind.REVISION_REGRESSED)[0].name == "web"


def test_values_kind_switch(store):
    run_audit(StaticInventory([make_record(revision=2, digest="a")]), store, timeout=1)
    result = run_audit(
        StaticInventory([make_record(revision=2, digest="b")]), store, timeout=1, distinguish_values=False,
    )
    assert result.report.counts["chart-changed"] == 1
    assert result.report.counts["values-changed"] == 0


def test_failed_inventory_persists_nothing(store):
    with pytest.raises(InventoryTimeoutError):
        run_audit(TimingOutInventory(), store, timeout=0.5)
    assert store.list() == []


def test_corrupt_old_snapshot_does_not_block_audit(store):
    run_audit(StaticInventory([make_record("web", "prod", revision=1)]), store, timeout=1)
    run_audit(StaticInventory([make_record("web", "prod", revision=2)]), store, timeout=1)
    (store.directory / "snapshot-00000001.json").write_text("{not json")
    result = run_audit(StaticInventory([make_record("web", "prod", revision=3)]), store, timeout=1)
    assert result.baseline_ref.id == 2
    assert [e.kind for e in result.report.entries] == [DriftKind.REVISION_ADVANCED]
