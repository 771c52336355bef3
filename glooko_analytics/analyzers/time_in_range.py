"""
Time in Range (TIR) analysis.

Readings are counted per glucose range category (3 or 5 categories) and
broken down by weekday, date, week, hour of day and look-back period.
All thresholds are in mmol/L.
"""

import math
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence

from glooko_analytics.config import GlucoseThresholds
from glooko_analytics.metrics.glucose_metrics import GlucoseReading
from glooko_analytics.metrics.range_metrics import (
    DailyReport,
    DayOfWeekReport,
    GlucoseRangeStats,
    HourlyTIRStats,
    TimePeriodTIRStats,
    WeeklyReport,
)
from glooko_analytics.utils.formatting import format_date, format_time_label

DAYS_OF_WEEK = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')
WORKDAYS = DAYS_OF_WEEK[:5]

MONTH_ABBREVIATIONS = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')

# Look-back periods offered for TIR comparison, longest first
TIME_PERIODS_DAYS = (90, 28, 14, 7, 3)

HOUR_GROUP_SIZES = (1, 2, 3, 4, 6)

MINUTES_PER_DAY = 24 * 60


def _check_mode(mode: int) -> None:
    if mode not in (3, 5):
        raise ValueError(f"Range category mode must be 3 or 5, got {mode}")


def categorize_glucose(
    value: float,
    thresholds: Optional[GlucoseThresholds] = None,
    mode: int = 3
) -> str:
    """Categorize a glucose value.

    5-category mode:
        < very_low -> very_low, < low -> low, <= high -> in_range,
        <= very_high -> high, else very_high
    3-category mode:
        < low -> low, <= high -> in_range, else high

    Raises:
        ValueError: If mode is not 3 or 5.
    """
    _check_mode(mode)
    t = thresholds or GlucoseThresholds()

    if mode == 5:
        if value < t.very_low:
            return 'very_low'
        if value < t.low:
            return 'low'
        if value <= t.high:
            return 'in_range'
        if value <= t.very_high:
            return 'high'
        return 'very_high'

    if value < t.low:
        return 'low'
    if value <= t.high:
        return 'in_range'
    return 'high'


def calculate_glucose_range_stats(
    readings: Sequence[GlucoseReading],
    thresholds: Optional[GlucoseThresholds] = None,
    mode: int = 3
) -> GlucoseRangeStats:
    """Count readings per range category."""
    _check_mode(mode)
    counts: Dict[str, int] = defaultdict(int)
    for reading in readings:
        counts[categorize_glucose(reading.value, thresholds, mode)] += 1

    return GlucoseRangeStats(
        mode=mode,
        very_low=counts['very_low'],
        low=counts['low'],
        in_range=counts['in_range'],
        high=counts['high'],
        very_high=counts['very_high'],
        total=len(readings),
    )


def convert_percentage_to_time(total_readings: int, actual_readings: int) -> str:
    """Express a share of readings as time per day, rounded to 5 minutes.

    E.g. 72 of 288 readings -> '6h'. Returns '0m' when total_readings is 0.
    """
    if total_readings == 0:
        return '0m'
    minutes_per_reading = MINUTES_PER_DAY / total_readings
    total_minutes = int(round(actual_readings * minutes_per_reading / 5)) * 5

    hours, minutes = divmod(total_minutes, 60)
    if hours == 0:
        return f"{minutes}m"
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h {minutes}m"


# =============================================================================
# GROUPING
# =============================================================================

def get_day_of_week(timestamp: datetime) -> str:
    return DAYS_OF_WEEK[timestamp.weekday()]


def is_workday(day: str) -> bool:
    return day in WORKDAYS


def group_by_day_of_week(
    readings: Sequence[GlucoseReading],
    thresholds: Optional[GlucoseThresholds] = None,
    mode: int = 3
) -> List[DayOfWeekReport]:
    """Range stats for Monday..Sunday, followed by Workday and Weekend totals."""
    groups: Dict[str, List[GlucoseReading]] = {day: [] for day in DAYS_OF_WEEK}
    for reading in readings:
        groups[get_day_of_week(reading.timestamp)].append(reading)

    reports = [
        DayOfWeekReport(day=day, stats=calculate_glucose_range_stats(groups[day], thresholds, mode))
        for day in DAYS_OF_WEEK
    ]

    workday = [r for day in WORKDAYS for r in groups[day]]
    weekend = [r for day in DAYS_OF_WEEK if not is_workday(day) for r in groups[day]]
    reports.append(DayOfWeekReport(day='Workday', stats=calculate_glucose_range_stats(workday, thresholds, mode)))
    reports.append(DayOfWeekReport(day='Weekend', stats=calculate_glucose_range_stats(weekend, thresholds, mode)))
    return reports


def group_by_date(
    readings: Sequence[GlucoseReading],
    thresholds: Optional[GlucoseThresholds] = None,
    mode: int = 3
) -> List[DailyReport]:
    """Range stats per calendar date, sorted chronologically."""
    groups: Dict[str, List[GlucoseReading]] = defaultdict(list)
    for reading in readings:
        groups[format_date(reading.timestamp)].append(reading)

    return [
        DailyReport(date=day, stats=calculate_glucose_range_stats(groups[day], thresholds, mode))
        for day in sorted(groups)
    ]


def get_week_start(day: date) -> date:
    """Monday of the week containing `day`."""
    if isinstance(day, datetime):
        day = day.date()
    return day - timedelta(days=day.weekday())


def format_week_range(start: date, end: date) -> str:
    """'Oct 6-12' within one month, 'Oct 27-Nov 2' across months."""
    start_month = MONTH_ABBREVIATIONS[start.month - 1]
    if start.month == end.month:
        return f"{start_month} {start.day}-{end.day}"
    return f"{start_month} {start.day}-{MONTH_ABBREVIATIONS[end.month - 1]} {end.day}"


def group_by_week(
    readings: Sequence[GlucoseReading],
    thresholds: Optional[GlucoseThresholds] = None,
    mode: int = 3
) -> List[WeeklyReport]:
    """Range stats per Monday-to-Sunday week, sorted chronologically."""
    groups: Dict[date, List[GlucoseReading]] = defaultdict(list)
    for reading in readings:
        groups[get_week_start(reading.timestamp)].append(reading)

    reports = []
    for week_start in sorted(groups):
        week_end = week_start + timedelta(days=6)
        reports.append(
            WeeklyReport(
                week_label=format_week_range(week_start, week_end),
                week_start=format_date(week_start),
                week_end=format_date(week_end),
                stats=calculate_glucose_range_stats(groups[week_start], thresholds, mode),
            )
        )
    return reports


def calculate_hourly_tir(
    readings: Sequence[GlucoseReading],
    thresholds: Optional[GlucoseThresholds] = None,
    mode: int = 3
) -> List[HourlyTIRStats]:
    """Range stats for each hour of the day (24 entries, 'HH:00' labels)."""
    buckets: List[List[GlucoseReading]] = [[] for _ in range(24)]
    for reading in readings:
        buckets[reading.timestamp.hour].append(reading)

    return [
        HourlyTIRStats(
            hour=hour,
            hour_label=format_time_label(hour),
            stats=calculate_glucose_range_stats(bucket, thresholds, mode),
        )
        for hour, bucket in enumerate(buckets)
    ]


def calculate_hourly_tir_grouped(
    readings: Sequence[GlucoseReading],
    thresholds: Optional[GlucoseThresholds] = None,
    mode: int = 3,
    group_size: int = 1
) -> List[HourlyTIRStats]:
    """Range stats for blocks of `group_size` hours.

    Labels read 'HH:00-HH:59' (e.g. '06:00-08:59' for 3-hour blocks);
    a group size of 1 is the same as calculate_hourly_tir.

    Raises:
        ValueError: If group_size is not one of 1, 2, 3, 4, 6.
    """
    if group_size not in HOUR_GROUP_SIZES:
        raise ValueError(f"group_size must be one of {HOUR_GROUP_SIZES}, got {group_size}")
    if group_size == 1:
        return calculate_hourly_tir(readings, thresholds, mode)

    buckets: List[List[GlucoseReading]] = [[] for _ in range(24 // group_size)]
    for reading in readings:
        buckets[reading.timestamp.hour // group_size].append(reading)

    stats = []
    for index, bucket in enumerate(buckets):
        start_hour = index * group_size
        end_hour = start_hour + group_size - 1
        stats.append(
            HourlyTIRStats(
                hour=start_hour,
                hour_label=f"{format_time_label(start_hour)}-{format_time_label(end_hour, 59)}",
                stats=calculate_glucose_range_stats(bucket, thresholds, mode),
            )
        )
    return stats


# =============================================================================
# DATE FILTERS
# =============================================================================

def get_unique_dates(readings: Sequence[GlucoseReading]) -> List[str]:
    """Sorted YYYY-MM-DD dates present in the readings."""
    return sorted({format_date(r.timestamp) for r in readings})


def filter_readings_by_date(readings: Sequence[GlucoseReading], day: str) -> List[GlucoseReading]:
    """Readings whose local calendar date is `day` (YYYY-MM-DD)."""
    return [r for r in readings if format_date(r.timestamp) == day]


def format_date_display(day: str) -> str:
    """'2025-10-13' -> 'Monday, 13-10-2025'."""
    parsed = datetime.strptime(day, '%Y-%m-%d')
    return f"{get_day_of_week(parsed)}, {parsed.strftime('%d-%m-%Y')}"


def filter_readings_to_last_n_days(
    readings: Sequence[GlucoseReading],
    days: int,
    reference_date: Optional[datetime] = None
) -> List[GlucoseReading]:
    """Readings from midnight `days` days before the reference date up to its end.

    The reference date defaults to the latest reading. Both ends are inclusive;
    the window ends at 23:59:59.999 of the reference date.
    """
    if not readings:
        return []

    max_date = reference_date or max(r.timestamp for r in readings)
    start = (max_date - timedelta(days=days)).replace(hour=0, minute=0, second=0, microsecond=0)
    end = max_date.replace(hour=23, minute=59, second=59, microsecond=999000)
    return [r for r in readings if start <= r.timestamp <= end]


def calculate_tir_by_time_periods(
    readings: Sequence[GlucoseReading],
    thresholds: Optional[GlucoseThresholds] = None,
    mode: int = 3,
    reference_date: Optional[datetime] = None
) -> List[TimePeriodTIRStats]:
    """Range stats for the standard look-back periods (90, 28, 14, 7, 3 days).

    Only periods no longer than the data span are included, where the span
    is the number of days from the first reading to the reference date,
    rounded up.
    """
    if not readings:
        return []

    min_date = min(r.timestamp for r in readings)
    max_date = reference_date or max(r.timestamp for r in readings)
    total_days = math.ceil((max_date - min_date).total_seconds() / 86400)

    return [
        TimePeriodTIRStats(
            period=f"{days} days",
            days=days,
            stats=calculate_glucose_range_stats(
                filter_readings_to_last_n_days(readings, days, max_date), thresholds, mode
            ),
        )
        for days in TIME_PERIODS_DAYS
        if days <= total_days
    ]
