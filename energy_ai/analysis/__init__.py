"""
Consumption pattern aggregation and dataset statistics.
"""

from energy_ai.analysis.patterns import (
    PatternAnalyzer,
    PatternSummary,
    HourlyPattern,
    DailyPattern,
    SeasonalPattern,
    DatasetStats,
    dataset_stats,
)

__all__ = [
    "PatternAnalyzer",
    "PatternSummary",
    "HourlyPattern",
    "DailyPattern",
    "SeasonalPattern",
    "DatasetStats",
    "dataset_stats",
]
