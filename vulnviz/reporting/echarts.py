"""ECharts options for the severity trend chart.

Builds the declarative options object handed to the charting backend;
nothing here draws.
"""

from __future__ import annotations

from typing import Any, Dict, List

from vulnviz.core.models import Severity, TrendSeries

SEVERITY_COLORS = {
    Severity.CRITICAL: "#dc0000",
    Severity.HIGH: "#fd8c00",
    Severity.MEDIUM: "#fdc500",
    Severity.LOW: "#4cae4c",
    Severity.INFO: "#6c757d",
    Severity.UNASSIGNED: "#c0c0c0",
}


def _line_series(severity: Severity, values: List[int]) -> Dict[str, Any]:
    return {
        "name": severity.label,
        "type": "line",
        "symbol": "circle",
        "data": list(values),
        "itemStyle": {"color": SEVERITY_COLORS[severity]},
        "lineStyle": {"color": SEVERITY_COLORS[severity]},
    }


def build_trend_chart_options(trend: TrendSeries) -> Dict[str, Any]:
    """Create the line chart options for a trend series.

    One line per charted severity with a colour fixed to the severity, a
    horizontal legend centred under the plot, and a grid that keeps the axis
    labels inside the container.
    """
    series = [_line_series(sev, values) for sev, values in trend.series.items()]
    return {
        "tooltip": {"trigger": "axis"},
        "legend": {
            "orient": "horizontal",
            "x": "center",
            "y": "bottom",
            "data": [s["name"] for s in series],
        },
        "grid": {
            "left": "20",
            "right": "10",
            "bottom": "30",
            "top": "10",
            "containLabel": True,
        },
        "xAxis": [
            {
                "type": "category",
                "boundaryGap": False,
                "data": list(trend.categories),
            }
        ],
        "yAxis": [{"type": "value", "minInterval": 1}],
        "series": series,
    }
