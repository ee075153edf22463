import pytest
from fastapi.testclient import TestClient

from backend.main import app
from vulnviz.core import storage
from vulnviz.core.models import BuildSnapshot, SeverityCounts


@pytest.fixture
def client(runs_dir):
    return TestClient(app)


def _store(number, **counts):
    storage.store_build(BuildSnapshot(build_number=number, counts=SeverityCounts(**counts)))


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_unknown_build_is_404(client):
    assert client.get("/api/builds/latest/severity-distribution").status_code == 404
    assert client.get("/api/builds/3/distribution").status_code == 404


def test_invalid_build_number_is_400(client):
    assert client.get("/api/builds/abc/distribution").status_code == 400


def test_raw_counts(client):
    _store(1, critical=2, low=1)
    resp = client.get("/api/builds/1/severity-distribution")
    assert resp.status_code == 200
    assert resp.json() == {"critical": 2, "high": 0, "medium": 0, "low": 1, "info": 0, "unassigned": 0}


def test_distribution_segments_for_latest(client):
    _store(1, high=1)
    _store(2, critical=1, high=2)
    segments = client.get("/api/builds/latest/distribution").json()
    assert len(segments) == 6
    assert segments[0]["tooltip"] == "Critical: 1 (33.3%)"
    assert segments[1]["display_percent"] == 66.7
    assert segments[0]["css_class"] == "severity-critical-bg"


def test_distribution_html(client):
    _store(1)
    resp = client.get("/api/builds/1/distribution.html")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert "No Vulnerabilities Found" in resp.text


def test_record_counts(client):
    resp = client.post("/api/builds", json={"build_number": 4, "counts": {"medium": 3}})
    assert resp.status_code == 201
    assert resp.json()["medium"] == 3
    assert [b["buildNumber"] for b in client.get("/api/builds").json()] == [4]


def test_record_findings(client):
    resp = client.post(
        "/api/builds",
        json={
            "build_number": 9,
            "findings": [
                {"package": "guava", "name": "CVE-2023-2976", "severity": "MODERATE"},
                {"package": "commons-io", "name": "CVE-2021-29425"},
            ],
        },
    )
    assert resp.status_code == 201
    assert resp.json()["medium"] == 1
    assert resp.json()["unassigned"] == 1
    assert len(client.get("/api/builds/9/findings").json()) == 2


def test_record_rejects_negative_counts(client):
    resp = client.post("/api/builds", json={"build_number": 1, "counts": {"high": -1}})
    assert resp.status_code == 422


def test_record_requires_one_source(client):
    assert client.post("/api/builds", json={"build_number": 1}).status_code == 400


def test_findings_missing(client):
    _store(1, low=1)
    assert client.get("/api/builds/1/findings").status_code == 404


def test_trend_feed_and_chart(client):
    for n in range(1, 13):
        _store(n, critical=n)
    feed = client.get("/api/trend").json()
    assert len(feed) == 10
    assert feed[0]["buildNumber"] == 12

    options = client.get("/api/trend/chart", params={"limit": 3}).json()
    assert options["xAxis"][0]["data"] == ["#10", "#11", "#12"]
    assert options["series"][0]["data"] == [10, 11, 12]
    assert "Info" not in options["legend"]["data"]

    options = client.get("/api/trend/chart", params={"include_info": "true"}).json()
    assert "Info" in options["legend"]["data"]


def test_empty_trend_chart(client):
    options = client.get("/api/trend/chart").json()
    assert options["xAxis"][0]["data"] == []
    assert all(s["data"] == [] for s in options["series"])


def test_report_page(client):
    _store(1, high=2)
    _store(2, high=1)
    resp = client.get("/api/report")
    assert resp.status_code == 200
    assert 'title="High: 1 (100%)"' in resp.text
    assert "echarts.init" in resp.text


def test_record_rejects_negative_build_number(client):
    resp = client.post("/api/builds", json={"build_number": -3, "counts": {"high": 1}})
    assert resp.status_code == 422
    assert client.get("/api/builds").json() == []


def test_record_rejects_non_integer_counts(client):
    for value in (True, "2", 3.5):
        resp = client.post("/api/builds", json={"build_number": 1, "counts": {"high": value}})
        assert resp.status_code == 422


def test_trend_chart_rejects_non_positive_limit(client):
    assert client.get("/api/trend/chart", params={"limit": 0}).status_code == 422
    assert client.get("/api/trend", params={"limit": -1}).status_code == 422
