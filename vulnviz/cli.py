from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from vulnviz.core import fetch as fetch_mod
from vulnviz.core import payload as payload_mod
from vulnviz.core import storage
from vulnviz.core.aggregator import FindingsAggregator
from vulnviz.core.distribution import aggregate_distribution
from vulnviz.core.models import BuildSnapshot, DistributionSegment, Finding, SeverityCounts, TrendSeries
from vulnviz.core.trend import ALL_SEVERITIES, TREND_SEVERITIES, build_trend_series
from vulnviz.core.utils import FetchError, PayloadError, configure_logging, format_number, format_table
from vulnviz.reporting.echarts import build_trend_chart_options
from vulnviz.reporting.html import DEFAULT_LABEL, render_distribution_bar, render_report_page

app = typer.Typer(help="vulnviz CLI: severity distribution and trend charts")

logger = logging.getLogger(__name__)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (default: $VULNVIZ_LOG_LEVEL or WARNING)"),
):
    configure_logging(log_level)


def _fail(message: str) -> None:
    typer.echo(message, err=True)
    raise typer.Exit(code=1)


def _emit(text: str, output: Optional[str]) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
        typer.echo(f"Saved to: {output}")
    else:
        typer.echo(text)


def _segments_table(segments: List[DistributionSegment]) -> str:
    rows = [
        [s.label, s.count, f"{format_number(s.display_percent)}%", s.css_class]
        for s in segments
    ]
    return format_table(["Severity", "Count", "Percent", "Class"], rows)


def _trend_table(trend: TrendSeries) -> str:
    headers = ["Build"] + [sev.label for sev in trend.series]
    rows = []
    for j, category in enumerate(trend.categories):
        rows.append([category] + [values[j] for values in trend.series.values()])
    return format_table(headers, rows)


def _load_counts(input: Optional[str], url: Optional[str], build: Optional[int]) -> SeverityCounts:
    if input:
        return payload_mod.parse_severity_counts(payload_mod.load_json(Path(input)))
    if url:
        return fetch_mod.fetch_severity_distribution(url, build_number=build)

    number = build if build is not None else storage.latest_build_number()
    data = storage.load_build(number) if number is not None else None
    if not data:
        raise PayloadError("No build found. Pass --input or --url, or record a build first.")
    logger.info("Using stored build #%d", number)
    return payload_mod.parse_severity_counts(data)


def _load_snapshots(input: Optional[str], url: Optional[str], limit: int) -> List[BuildSnapshot]:
    if input:
        return payload_mod.parse_build_snapshots(payload_mod.load_json(Path(input)), limit=limit)
    if url:
        return fetch_mod.fetch_trend(url, limit=limit)
    return payload_mod.parse_build_snapshots(storage.load_trend(limit=limit))


@app.command()
def distribution(
    input: Optional[str] = typer.Option(None, "--input", help="JSON file with the six severity counts"),
    url: Optional[str] = typer.Option(None, "--url", help="Base URL of a vulnviz API to fetch from"),
    build: Optional[int] = typer.Option(None, "--build", help="Build number (default: latest)"),
    format: str = typer.Option("table", "--format", help="Output format: table, json, or html"),
    label: str = typer.Option(DEFAULT_LABEL, "--label", help="Label above the bar (html format)"),
    output: Optional[str] = typer.Option(None, "--output", help="Output file path"),
):
    """Show the severity distribution of one build."""
    try:
        counts = _load_counts(input, url, build)
    except (PayloadError, FetchError) as exc:
        _fail(str(exc))

    segments = aggregate_distribution(counts)
    if format == "json":
        _emit(json.dumps([s.model_dump(mode="json") for s in segments], indent=2), output)
    elif format == "html":
        _emit(render_distribution_bar(segments, label=label), output)
    else:
        if format != "table":
            typer.echo(f"Warning: Unknown format '{format}', using table format", err=True)
        _emit(_segments_table(segments), output)


@app.command()
def trend(
    input: Optional[str] = typer.Option(None, "--input", help="JSON file with builds, newest first"),
    url: Optional[str] = typer.Option(None, "--url", help="Base URL of a vulnviz API to fetch from"),
    limit: int = typer.Option(storage.MAX_TREND_BUILDS, "--limit", min=1, help="Number of most recent builds to chart"),
    include_info: bool = typer.Option(False, "--include-info", help="Chart info findings as well"),
    format: str = typer.Option("table", "--format", help="Output format: table, json, or options"),
    output: Optional[str] = typer.Option(None, "--output", help="Output file path"),
):
    """Show the per-build severity trend, oldest build first."""
    try:
        snapshots = _load_snapshots(input, url, limit)
    except (PayloadError, FetchError) as exc:
        _fail(str(exc))

    series = build_trend_series(snapshots, ALL_SEVERITIES if include_info else TREND_SEVERITIES)
    if format == "json":
        _emit(json.dumps(series.model_dump(mode="json"), indent=2), output)
    elif format == "options":
        _emit(json.dumps(build_trend_chart_options(series), indent=2), output)
    else:
        if format != "table":
            typer.echo(f"Warning: Unknown format '{format}', using table format", err=True)
        _emit(_trend_table(series), output)


@app.command()
def record(
    build: int = typer.Option(..., "--build", min=0, help="Build number"),
    findings: Optional[str] = typer.Option(None, "--findings", help="JSON findings report to tally"),
    counts: Optional[str] = typer.Option(None, "--counts", help="JSON file with the six severity counts"),
):
    """Store the severity counts of a build."""
    if bool(findings) == bool(counts):
        _fail("Pass exactly one of --findings or --counts")

    try:
        if findings:
            aggregator = FindingsAggregator(build)
            aggregator.add_findings(payload_mod.parse_findings(payload_mod.load_json(Path(findings))))
            storage.store_build(aggregator.snapshot, aggregator.findings)
            snapshot = aggregator.snapshot
        else:
            parsed = payload_mod.parse_severity_counts(payload_mod.load_json(Path(counts)))
            snapshot = BuildSnapshot(build_number=build, counts=parsed)
            storage.store_build(snapshot)
    except PayloadError as exc:
        _fail(str(exc))

    typer.echo(f"Recorded build #{build}: {snapshot.counts.total} findings")


@app.command()
def report(
    output: str = typer.Option("severity-report.html", "--output", help="HTML file to write"),
    title: str = typer.Option("Dependency Severity Report", "--title", help="Page title"),
    limit: int = typer.Option(storage.MAX_TREND_BUILDS, "--limit", min=1, help="Number of most recent builds to chart"),
    include_info: bool = typer.Option(False, "--include-info", help="Chart info findings as well"),
):
    """Write an HTML page with the latest distribution and the trend chart."""
    try:
        counts = _load_counts(None, None, None)
        snapshots = _load_snapshots(None, None, limit)
    except PayloadError as exc:
        _fail(str(exc))

    bar = render_distribution_bar(aggregate_distribution(counts))
    series = build_trend_series(snapshots, ALL_SEVERITIES if include_info else TREND_SEVERITIES)
    page = render_report_page(title, bar, build_trend_chart_options(series))
    Path(output).write_text(page, encoding="utf-8")
    typer.echo(f"Report saved to: {output}")


DEMO_BUILDS = [
    (1, SeverityCounts(critical=2, high=5, medium=9, low=4, info=1, unassigned=3)),
    (2, SeverityCounts(critical=1, high=4, medium=8, low=4, info=1, unassigned=2)),
    (3, SeverityCounts(critical=1, high=2, medium=6, low=3, info=2, unassigned=2)),
    (4, SeverityCounts(critical=0, high=2, medium=3, low=3, info=2, unassigned=1)),
    (5, SeverityCounts()),
]

DEMO_FINDINGS = [
    Finding(package="commons-text", name="CVE-2022-42889", severity="CRITICAL"),
    Finding(package="jackson-databind", name="CVE-2020-36518", severity="HIGH"),
    Finding(package="snakeyaml", name="CVE-2022-1471", severity="HIGH"),
    Finding(package="guava", name="CVE-2023-2976", severity="MODERATE"),
    Finding(package="log4j-api", name="CVE-2021-44832", severity="MEDIUM"),
    Finding(package="httpclient", name="CVE-2020-13956", severity="LOW"),
    Finding(package="commons-io", name="CVE-2021-29425", severity=None),
]


@app.command("seed-demo")
def seed_demo(
    include_findings: bool = typer.Option(True, "--include-findings/--no-findings", help="Also record a build from demo findings"),
):
    """Seed demo builds under runs/ so the charts have something to show."""
    created = []
    for number, counts in DEMO_BUILDS:
        storage.store_build(BuildSnapshot(build_number=number, counts=counts))
        created.append(number)

    if include_findings:
        number = DEMO_BUILDS[-1][0] + 1
        aggregator = FindingsAggregator(number)
        aggregator.add_findings(DEMO_FINDINGS)
        storage.store_build(aggregator.snapshot, aggregator.findings)
        created.append(number)

    typer.echo("Seeded demo builds:")
    for number in created:
        typer.echo(f"- #{number}")


if __name__ == "__main__":
    app()
