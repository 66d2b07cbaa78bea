"""
Consumption Pattern Analysis

Aggregates a corpus into hourly, daily and seasonal consumption buckets
and computes summary statistics. All functions are pure: analyzing the
same corpus twice yields identical output.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional
import logging

import pandas as pd

from energy_ai.data.frames import CorpusLike, as_frame
from energy_ai.models.observation import Season, is_peak_hour

logger = logging.getLogger(__name__)

TARGET_COLUMN = "energy_consumption_kwh"
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
SEASON_ORDER = [s.value for s in Season]


@dataclass
class HourlyPattern:
    hour: int
    average_usage: float
    is_peak: bool
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DailyPattern:
    day: int
    name: str
    average_usage: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SeasonalPattern:
    season: str
    average_usage: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PatternSummary:
    """Hourly (24), daily (7) and seasonal (4) consumption buckets."""
    hourly: List[HourlyPattern] = field(default_factory=list)
    daily: List[DailyPattern] = field(default_factory=list)
    seasonal: List[SeasonalPattern] = field(default_factory=list)

    @property
    def peak_hour(self) -> Optional[int]:
        """Hour with the highest average usage among non-empty buckets."""
        populated = [h for h in self.hourly if h.count > 0]
        if not populated:
            return None
        return max(populated, key=lambda h: h.average_usage).hour

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hourly": [h.to_dict() for h in self.hourly],
            "daily": [d.to_dict() for d in self.daily],
            "seasonal": [s.to_dict() for s in self.seasonal],
        }


@dataclass
class DatasetStats:
    """Aggregate statistics over a corpus."""
    total_records: int
    avg_consumption: float
    avg_cost: float
    min_consumption: float
    max_consumption: float
    unique_customers: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _bucket_means(df: pd.DataFrame, column: str) -> tuple:
    if df.empty or column not in df.columns:
        return {}, {}
    grouped = df.groupby(column)[TARGET_COLUMN]
    return grouped.mean().to_dict(), grouped.size().to_dict()


class PatternAnalyzer:
    """
    Groups consumption by hour of day, weekday and season.

    Example:
        summary = PatternAnalyzer().analyze(corpus)
        print(summary.peak_hour)
    """

    def __init__(self, precision: int = 2):
        self.precision = precision

    def analyze(self, corpus: CorpusLike) -> PatternSummary:
        """
        Build a PatternSummary.

        Empty buckets report an average of 0.0 and a count of 0.
        """
        df = as_frame(corpus)

        hour_means, hour_counts = _bucket_means(df, "hour_of_day")
        day_means, day_counts = _bucket_means(df, "day_of_week")
        season_means, season_counts = _bucket_means(df, "season")

        hourly = [
            HourlyPattern(
                hour=hour,
                average_usage=round(float(hour_means.get(hour, 0.0)), self.precision),
                is_peak=is_peak_hour(hour),
                count=int(hour_counts.get(hour, 0)),
            )
            for hour in range(24)
        ]
        daily = [
            DailyPattern(
                day=day,
                name=DAY_NAMES[day],
                average_usage=round(float(day_means.get(day, 0.0)), self.precision),
                count=int(day_counts.get(day, 0)),
            )
            for day in range(7)
        ]
        seasonal = [
            SeasonalPattern(
                season=season,
                average_usage=round(float(season_means.get(season, 0.0)), self.precision),
                count=int(season_counts.get(season, 0)),
            )
            for season in SEASON_ORDER
        ]

        logger.debug("Analyzed patterns over %d records", len(df))
        return PatternSummary(hourly=hourly, daily=daily, seasonal=seasonal)


def dataset_stats(corpus: CorpusLike) -> DatasetStats:
    """
    Summary statistics over a corpus.

    Cost falls back to consumption × plan_cost when the corpus carries no
    cost column. An empty corpus yields all-zero statistics.
    """
    df = as_frame(corpus)
    if df.empty:
        return DatasetStats(0, 0.0, 0.0, 0.0, 0.0, 0)

    kwh = df[TARGET_COLUMN].astype(float)
    if "cost" in df.columns:
        cost = df["cost"].astype(float)
    elif "plan_cost" in df.columns:
        cost = kwh * df["plan_cost"].astype(float)
    else:
        cost = pd.Series(0.0, index=df.index)

    unique_customers = int(df["customer_id"].nunique()) if "customer_id" in df.columns else 0

    return DatasetStats(
        total_records=int(len(df)),
        avg_consumption=round(float(kwh.mean()), 2),
        avg_cost=round(float(cost.mean()), 2),
        min_consumption=round(float(kwh.min()), 2),
        max_consumption=round(float(kwh.max()), 2),
        unique_customers=unique_customers,
    )
