from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from vulnviz.core import payload as payload_mod
from vulnviz.core import storage
from vulnviz.core.aggregator import FindingsAggregator
from vulnviz.core.distribution import aggregate_distribution
from vulnviz.core.models import BuildSnapshot, Finding, SeverityCounts
from vulnviz.core.trend import ALL_SEVERITIES, TREND_SEVERITIES, build_trend_series
from vulnviz.core.utils import PayloadError
from vulnviz.reporting.echarts import build_trend_chart_options
from vulnviz.reporting.html import render_distribution_bar, render_report_page

logger = logging.getLogger(__name__)

app = FastAPI(title="vulnviz API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)


class BuildRequest(BaseModel):
    build_number: int = Field(ge=0)
    counts: SeverityCounts | None = None
    findings: list[Finding] | None = None


def _resolve_build(build: str) -> dict:
    if build == "latest":
        number = storage.latest_build_number()
    else:
        try:
            number = int(build)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Invalid build number: {build}")
    data = storage.load_build(number) if number is not None else None
    if not data:
        raise HTTPException(status_code=404, detail="Build not found")
    return data


def _counts_for(build: str) -> SeverityCounts:
    data = _resolve_build(build)
    try:
        return payload_mod.parse_severity_counts(data)
    except PayloadError as exc:
        logger.error("Stored build %s is invalid: %s", build, exc)
        raise HTTPException(status_code=422, detail=str(exc))


def _trend_series(limit: int, include_info: bool):
    try:
        snapshots = payload_mod.parse_build_snapshots(storage.load_trend(limit=limit))
    except PayloadError as exc:
        logger.error("Stored trend is invalid: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))
    return build_trend_series(snapshots, ALL_SEVERITIES if include_info else TREND_SEVERITIES)


@app.get("/api/health")
def health():
    return {"status": "ok"}


@app.get("/api/builds")
def list_builds():
    return storage.list_builds()


@app.post("/api/builds", status_code=201)
def record_build(req: BuildRequest):
    if (req.counts is None) == (req.findings is None):
        raise HTTPException(status_code=400, detail="Provide exactly one of counts or findings")
    if req.findings is not None:
        aggregator = FindingsAggregator(req.build_number)
        aggregator.add_findings(req.findings)
        snapshot = aggregator.snapshot
        storage.store_build(snapshot, aggregator.findings)
    else:
        snapshot = BuildSnapshot(build_number=req.build_number, counts=req.counts)
        storage.store_build(snapshot)
    return snapshot.flat()


@app.get("/api/builds/{build}/severity-distribution")
def get_severity_distribution(build: str):
    return _counts_for(build).model_dump()


@app.get("/api/builds/{build}/distribution")
def get_distribution(build: str):
    return [s.model_dump(mode="json") for s in aggregate_distribution(_counts_for(build))]


@app.get("/api/builds/{build}/distribution.html", response_class=HTMLResponse)
def get_distribution_html(build: str, label: str = "Severity Distribution"):
    return render_distribution_bar(aggregate_distribution(_counts_for(build)), label=label)


@app.get("/api/builds/{build}/findings")
def get_findings(build: str):
    data = _resolve_build(build)
    findings = storage.load_findings(data["buildNumber"])
    if findings is None:
        raise HTTPException(status_code=404, detail="No findings recorded for this build")
    return findings


@app.get("/api/trend")
def get_trend(limit: int = Query(storage.MAX_TREND_BUILDS, ge=1)):
    return storage.load_trend(limit=limit)


@app.get("/api/trend/chart")
def get_trend_chart(
    limit: int = Query(storage.MAX_TREND_BUILDS, ge=1),
    include_info: bool = False,
):
    return build_trend_chart_options(_trend_series(limit, include_info))


@app.get("/api/report", response_class=HTMLResponse)
def get_report(
    limit: int = Query(storage.MAX_TREND_BUILDS, ge=1),
    include_info: bool = False,
):
    bar = render_distribution_bar(aggregate_distribution(_counts_for("latest")))
    options = build_trend_chart_options(_trend_series(limit, include_info))
    return render_report_page("Dependency Severity Report", bar, options)
