from __future__ import annotations

from typing import Iterable, List, Sequence

from vulnviz.core.models import BuildSnapshot, Severity, TrendSeries

# Info is accepted in snapshots but left off the trend chart.
TREND_SEVERITIES = (
    Severity.CRITICAL,
    Severity.HIGH,
    Severity.MEDIUM,
    Severity.LOW,
    Severity.UNASSIGNED,
)
ALL_SEVERITIES = tuple(Severity)


def build_label(build_number: int) -> str:
    return f"#{build_number}"


def build_trend_series(
    snapshots: Iterable[BuildSnapshot],
    severities: Sequence[Severity] = TREND_SEVERITIES,
) -> TrendSeries:
    """Lay out newest-first snapshots as oldest-first chart series."""
    ordered: List[BuildSnapshot] = list(snapshots)[::-1]
    return TrendSeries(
        categories=[build_label(s.build_number) for s in ordered],
        series={sev: [s.counts.get(sev) for s in ordered] for sev in severities},
    )
