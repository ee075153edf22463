"""HTML rendering for the severity distribution bar and the report page."""

from __future__ import annotations

import json
from html import escape
from typing import Any, Dict, Iterable

from vulnviz.core.models import DistributionSegment
from vulnviz.core.utils import format_number

DEFAULT_LABEL = "Severity Distribution"
ECHARTS_CDN = "https://cdn.jsdelivr.net/npm/echarts@5/dist/echarts.min.js"


def _segment_block(segment: DistributionSegment) -> str:
    text = segment.label if segment.is_empty_state else str(segment.count)
    return (
        f'<div class="severity-distribution-bar {segment.css_class} odc-tooltip" '
        f'title="{escape(segment.tooltip)}" '
        f'style="width:{format_number(segment.percent)}%">{escape(text)}</div>'
    )


def render_distribution_bar(segments: Iterable[DistributionSegment], label: str = DEFAULT_LABEL) -> str:
    """Render segments as a labelled proportional bar fragment."""
    blocks = "".join(_segment_block(s) for s in segments)
    return (
        f'<span class="odc-section-label">{escape(label)}</span>'
        f'<div class="severity-distribution">{blocks}</div>'
    )


PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
.severity-distribution {{ display: flex; width: 100%; margin-bottom: 1.5em; }}
.severity-distribution-bar {{ color: #fff; text-align: center; overflow: hidden; white-space: nowrap; }}
.severity-critical-bg {{ background-color: #dc0000; }}
.severity-high-bg {{ background-color: #fd8c00; }}
.severity-medium-bg {{ background-color: #fdc500; }}
.severity-low-bg {{ background-color: #4cae4c; }}
.severity-info-bg {{ background-color: #6c757d; }}
.severity-unassigned-bg {{ background-color: #c0c0c0; }}
.odc-section-label {{ display: block; font-weight: bold; margin-bottom: 0.5em; }}
.odc-trend-chart {{ width: 100%; height: 320px; }}
</style>
<script src="{echarts_src}"></script>
</head>
<body>
<h1>{title}</h1>
<div id="severity-distribution">{distribution}</div>
<span class="odc-section-label">Severity Trend</span>
<div id="severity-trend" class="odc-trend-chart"></div>
<script>
(function () {{
    var el = document.getElementById("severity-trend");
    var chart = echarts.init(el);
    chart.setOption({options});
    window.addEventListener("resize", function () {{ chart.resize(); }});
}})();
</script>
</body>
</html>
"""


def _script_json(data: Dict[str, Any]) -> str:
    # "</" inside a label must not close the inline script.
    return json.dumps(data).replace("</", "<\\/")


def render_report_page(
    title: str,
    distribution_html: str,
    trend_options: Dict[str, Any],
    echarts_src: str = ECHARTS_CDN,
) -> str:
    """Standalone page mounting the distribution bar and the trend chart.

    The chart subscribes its own resize listener instead of assigning
    `window.onresize`, so charts on the same page never replace each other's
    handler. Resizing only re-lays-out the options already computed.
    """
    return PAGE_TEMPLATE.format(
        title=escape(title),
        echarts_src=escape(echarts_src),
        distribution=distribution_html,
        options=_script_json(trend_options),
    )
