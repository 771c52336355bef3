"""Glucose and insulin analyzers."""

from glooko_analytics.analyzers.glucose import GlucoseAnalyzer
from glooko_analytics.analyzers.roc import (
    RoCAnalyzer,
    calculate_roc,
    calculate_roc_stats,
    calculate_roc_with_interval,
    categorize_roc,
    get_longest_category_period,
    smooth_roc_data,
)
from glooko_analytics.analyzers.agp import calculate_agp_stats
from glooko_analytics.analyzers.time_in_range import (
    calculate_glucose_range_stats,
    calculate_hourly_tir,
    calculate_hourly_tir_grouped,
    calculate_tir_by_time_periods,
    categorize_glucose,
    group_by_date,
    group_by_day_of_week,
    group_by_week,
)
from glooko_analytics.analyzers.iob import (
    IOBAnalyzer,
    aggregate_insulin_by_date,
    calculate_daily_iob,
    calculate_iob,
    prepare_hourly_iob,
    prepare_insulin_timeline,
)

__all__ = [
    "GlucoseAnalyzer",
    "RoCAnalyzer",
    "IOBAnalyzer",
    "calculate_roc",
    "calculate_roc_stats",
    "calculate_roc_with_interval",
    "categorize_roc",
    "get_longest_category_period",
    "smooth_roc_data",
    "calculate_agp_stats",
    "calculate_glucose_range_stats",
    "calculate_hourly_tir",
    "calculate_hourly_tir_grouped",
    "calculate_tir_by_time_periods",
    "categorize_glucose",
    "group_by_date",
    "group_by_day_of_week",
    "group_by_week",
    "aggregate_insulin_by_date",
    "calculate_daily_iob",
    "calculate_iob",
    "prepare_hourly_iob",
    "prepare_insulin_timeline",
]
