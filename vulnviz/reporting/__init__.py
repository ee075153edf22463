"""vulnviz reporting modules."""

from .echarts import SEVERITY_COLORS, build_trend_chart_options
from .html import render_distribution_bar, render_report_page

__all__ = [
    "SEVERITY_COLORS",
    "build_trend_chart_options",
    "render_distribution_bar",
    "render_report_page",
]
