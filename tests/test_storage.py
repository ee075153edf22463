import pytest

from vulnviz.core import storage
from vulnviz.core.models import BuildSnapshot, Finding, SeverityCounts


def _store(number, **counts):
    storage.store_build(BuildSnapshot(build_number=number, counts=SeverityCounts(**counts)))


def test_runs_dir_from_env(runs_dir):
    assert storage.get_runs_dir() == runs_dir


def test_runs_dir_default(monkeypatch):
    monkeypatch.delenv("VULNVIZ_RUNS_DIR", raising=False)
    assert storage.get_runs_dir() == storage.RUNS_DIR


def test_store_and_load(runs_dir):
    _store(4, high=2)
    data = storage.load_build(4)
    assert data["buildNumber"] == 4
    assert data["high"] == 2
    assert "recordedAt" in data
    assert (runs_dir / "build-4" / "snapshot.json").exists()


def test_missing_build(runs_dir):
    assert storage.load_build(99) is None
    assert storage.load_findings(99) is None
    assert storage.latest_build_number() is None
    assert storage.list_builds() == []


def test_builds_listed_newest_first(runs_dir):
    for n in (2, 10, 1):
        _store(n, low=n)
    (runs_dir / "build-notanumber").mkdir()
    (runs_dir / "other").mkdir()
    assert [b["buildNumber"] for b in storage.list_builds()] == [10, 2, 1]
    assert storage.latest_build_number() == 10


def test_trend_window(runs_dir):
    for n in range(1, 13):
        _store(n, critical=n)
    trend = storage.load_trend()
    assert len(trend) == storage.MAX_TREND_BUILDS
    assert trend[0]["buildNumber"] == 12
    assert trend[-1]["buildNumber"] == 3
    assert "recordedAt" not in trend[0]
    assert len(storage.load_trend(limit=3)) == 3


def test_store_findings(runs_dir):
    findings = [Finding(package="guava", name="CVE-2023-2976", severity="MEDIUM")]
    storage.store_build(BuildSnapshot(build_number=1, counts=SeverityCounts(medium=1)), findings)
    assert storage.load_findings(1) == [
        {"package": "guava", "name": "CVE-2023-2976", "severity": "MEDIUM", "description": None}
    ]


def test_trend_limit_must_be_positive(runs_dir):
    for n in (1, 2, 3):
        _store(n, low=n)
    for limit in (0, -1):
        with pytest.raises(ValueError):
            storage.load_trend(limit=limit)
