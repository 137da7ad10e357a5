from __future__ import annotations

import json

import pytest

from conftest import make_record, make_snapshot
from helm_audit.core.drift_engine import detect_drift
from helm_audit.core.errors import MalformedSnapshotError
from helm_audit.core.report_generator import generate, render_text
from helm_audit.models.diff import KIND_ORDER, DriftEntry, DriftKind


@pytest.fixture
def entries():
    baseline = make_snapshot(
        make_record("web", "prod", revision=2, version="1.0"),
        make_record("api", "stage", revision=4),
        make_record("worker", "prod", revision=5),
        make_record("db", "prod", revision=1, chart="postgres", version="12.0"),
    )
    current = make_snapshot(
        make_record("web", "prod", revision=3, version="1.1"),
        make_record("cache", "prod", revision=1, chart="redis", version="2.0"),
        make_record("worker", "prod", revision=3),
        make_record("db", "prod", revision=1, chart="postgres", version="12.0"),
    )
    return detect_drift(baseline, current)


def test_counts_cover_every_kind(entries):
    report = generate(entries)
    assert set(report.counts) == {k.value for k in DriftKind}
    assert report.counts["chart-changed"] == 1
    assert report.counts["appeared"] == 1
    assert report.counts["disappeared"] == 1
    assert report.counts["revision-regressed"] == 1
    assert report.counts["unchanged"] == 1
    assert report.counts["values-changed"] == 0
    assert report.total == 5
    assert report.has_drift


def test_groups_follow_kind_order_and_keep_detector_order():
    baseline = make_snapshot(make_record("b", "ns"), make_record("a", "ns"), make_record("c", "other"))
    report = generate(detect_drift(baseline, make_snapshot()))
    assert [k for k, _ in report.groups] == list(KIND_ORDER)
    gone = report.group(DriftKind.DISAPPEARED)
    assert [(e.namespace, e.name) for e in gone] == [("ns", "a"), ("ns", "b"), ("other", "c")]


def test_structured_output_is_deterministic(entries):
    first = generate(entries)
    second = generate(list(entries))
    assert first == second
    assert first.to_json() == second.to_json()
    data = json.loads(first.to_json())
    assert sorted(data) == ["counts", "entries", "has_drift", "total"]
    assert all("kind" in e for e in data["entries"])


def test_structured_entries_carry_both_sides(entries):
    data = generate(entries).to_dict()
    by_name = {e["name"]: e for e in data["entries"]}
    assert by_name["cache"]["baseline"] is None
    assert by_name["cache"]["current"]["chart"] == "redis"
    assert by_name["api"]["current"] is None
    assert by_name["worker"]["kind"] == "revision-regressed"
    assert by_name["db"]["changes"] == []


def test_render_text_is_stable_and_skips_unchanged(entries):
    report = generate(entries)
    text = render_text(report)
    assert text == render_text(generate(entries))
    assert text.startswith("Helm drift report: 5 release(s) compared\n")
    assert "[revision-regressed] (1)" in text
    assert "  prod/worker  rev 5 -> rev 3" in text
    assert "  stage/api  rev 4 -> -" in text
    assert "[unchanged]" not in text
    assert "[unchanged] (1)" in render_text(report, show_unchanged=True)


def test_render_text_without_drift():
    snap = make_snapshot(make_record())
    text = render_text(generate(detect_drift(snap, snap)))
    assert "Summary: unchanged=1" in text
    assert text.endswith("No drift detected.\n")


def test_empty_input():
    report = generate([])
    assert report.total == 0
    assert not report.has_drift
    assert "Summary: no releases" in render_text(report)


def test_duplicate_entries_are_rejected():
    entry = DriftEntry(kind=DriftKind.APPEARED, current=make_record())
    with pytest.raises(MalformedSnapshotError, match="prod/web") as excinfo:
        generate([entry, entry])
    assert excinfo.value.key == ("prod", "web")
