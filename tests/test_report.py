"""Severity buckets, run counters and the JSON shape handed to delivery."""

import pytest

from apwatch.detectors.rogue_ap import classify
from apwatch.models import AccessPointObservation, Severity
from apwatch.report import MODE_NORMAL, MODE_STRICT, Report


@pytest.fixture
def report(make_registry) -> Report:
    reg = make_registry("[authorized]\naa:01=CorpNet\n[known]\nbb:01=Guest\n")
    rep = Report()
    for bssid, ssid in [
        ("aa:01", "CorpNet"),    # info, authorized
        ("cc:01", "CorpNet"),    # high, new
        ("bb:01", "Guest"),      # info, known
        ("cc:02", "Cafe"),       # medium, new
        ("cc:03", "CorpNet"),    # high, new
    ]:
        rep.add(classify(AccessPointObservation(bssid=bssid, ssid=ssid), reg))
    return rep


def test_buckets_keep_insertion_order(report) -> None:
    assert [o.observation.bssid for o in report.high] == ["cc:01", "cc:03"]
    assert [o.observation.bssid for o in report.info] == ["aa:01", "bb:01"]
    assert [o.observation.bssid for o in report.medium] == ["cc:02"]
    assert report.low == []


def test_counters(report) -> None:
    assert (report.authorized, report.known, report.new) == (1, 1, 3)
    assert report.total == 5


def test_no_deduplication(make_registry) -> None:
    reg = make_registry("")
    rep = Report()
    obs = AccessPointObservation(bssid="cc:01", ssid="Cafe")
    rep.add(classify(obs, reg))
    rep.add(classify(obs, reg))

    assert len(rep.medium) == 2
    assert rep.new == 2


def test_bucket_lookup(report) -> None:
    assert report.bucket(Severity.HIGH) is report.high


def test_normal_mode_reports_high_only(report) -> None:
    data = report.to_dict(MODE_NORMAL)

    assert list(data["findings"]) == ["high"]
    assert [f["bssid"] for f in data["findings"]["high"]] == ["cc:01", "cc:03"]
    assert data["counts"]["total"] == 5


def test_strict_mode_reports_all_buckets(report) -> None:
    data = report.to_dict(MODE_STRICT)

    assert list(data["findings"]) == ["high", "medium", "low", "info"]
    item = data["findings"]["medium"][0]
    assert item == {
        "bssid": "cc:02",
        "ssid": "Cafe",
        "last_seen": None,
        "freq": None,
        "title": "Unauthorized AP (cc:02) broadcasts unknown SSID (Cafe)",
        "rule": 8,
        "category": "unauthorized_unknown_ssid",
        "severity": "medium",
    }


def test_unknown_mode_is_rejected(report) -> None:
    with pytest.raises(ValueError):
        report.findings("paranoid")
