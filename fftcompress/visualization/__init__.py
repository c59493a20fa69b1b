"""Visualization module for analysis charts."""

from fftcompress.visualization.charts import (
    ChartStyle,
    ChartRenderer,
    MatplotlibChartRenderer,
    create_chart_renderer,
)

__all__ = [
    "ChartStyle",
    "ChartRenderer",
    "MatplotlibChartRenderer",
    "create_chart_renderer",
]
