"""Metric dataclasses for analysis results."""

from glooko_analytics.metrics.glucose_metrics import GlucoseReading, GlucoseMetrics
from glooko_analytics.metrics.insulin_metrics import (
    InsulinReading,
    HourlyIOBData,
    HourlyInsulinTimeline,
    DailyInsulinSummary,
    IOBDataPoint,
)
from glooko_analytics.metrics.roc_metrics import RoCDataPoint, RoCStats
from glooko_analytics.metrics.agp_metrics import TimeSlotStats
from glooko_analytics.metrics.range_metrics import (
    GlucoseRangeStats,
    DayOfWeekReport,
    DailyReport,
    WeeklyReport,
    HourlyTIRStats,
    TimePeriodTIRStats,
)

__all__ = [
    "GlucoseReading",
    "GlucoseMetrics",
    "InsulinReading",
    "HourlyIOBData",
    "HourlyInsulinTimeline",
    "DailyInsulinSummary",
    "IOBDataPoint",
    "RoCDataPoint",
    "RoCStats",
    "TimeSlotStats",
    "GlucoseRangeStats",
    "DayOfWeekReport",
    "DailyReport",
    "WeeklyReport",
    "HourlyTIRStats",
    "TimePeriodTIRStats",
]
