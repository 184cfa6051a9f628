"""
Chart module for chart-matcher.

Provides the ChartEntry model and the sources that supply ranked charts.
"""

from chart_matcher.chart.models import ChartEntry
from chart_matcher.chart.source import (
    ChartSource,
    FileChartSource,
    StaticChartSource,
    available_years,
    find_missing_ranks,
    is_valid_year,
    validate_chart,
)

__all__ = [
    "ChartEntry",
    "ChartSource",
    "FileChartSource",
    "StaticChartSource",
    "validate_chart",
    "find_missing_ranks",
    "available_years",
    "is_valid_year",
]
