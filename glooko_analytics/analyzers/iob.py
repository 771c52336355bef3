"""
Insulin on Board (IOB) estimation.

Each dose decays over the insulin action duration. Two decay curves are
available:
- linear: remaining = 1 - t / duration
- exponential: half-life of duration / 2, cut off at duration

Hourly IOB is evaluated at the top of each hour against every known dose,
so doses from the previous day still count while they are active.
"""

import math
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Sequence, Union

import pandas as pd

from glooko_analytics.config import (
    AnalysisConfig,
    DECAY_CURVES,
    MAX_ACTION_DURATION_HOURS,
    MIN_ACTION_DURATION_HOURS,
)
from glooko_analytics.metrics.insulin_metrics import (
    DailyInsulinSummary,
    HourlyInsulinTimeline,
    HourlyIOBData,
    INSULIN_TYPES,
    InsulinReading,
    IOBDataPoint,
)
from glooko_analytics.utils.formatting import format_date, format_time_label

DayLike = Union[str, date]


def _validate(duration_hours: float, curve: str) -> None:
    if curve not in DECAY_CURVES:
        raise ValueError(f"Unknown decay curve '{curve}', expected one of {DECAY_CURVES}")
    if not (MIN_ACTION_DURATION_HOURS <= duration_hours <= MAX_ACTION_DURATION_HOURS):
        raise ValueError(
            f"Insulin action duration must be between {MIN_ACTION_DURATION_HOURS} "
            f"and {MAX_ACTION_DURATION_HOURS} hours, got {duration_hours}"
        )


def _to_date(day: DayLike) -> date:
    if isinstance(day, datetime):
        return day.date()
    if isinstance(day, date):
        return day
    return datetime.strptime(day, '%Y-%m-%d').date()


def _check_timezones(events: Sequence[InsulinReading], at: Optional[datetime] = None) -> None:
    stamps = [e.timestamp for e in events]
    if at is not None:
        stamps.append(at)
    if len({ts.tzinfo is not None for ts in stamps}) > 1:
        raise ValueError("Insulin timestamps mix timezone-aware and naive datetimes")


def _hour_start(day: date, hour: int, events: Sequence[InsulinReading]) -> datetime:
    # Events share one tz-awareness, see _check_timezones
    tzinfo = events[0].timestamp.tzinfo if events else None
    return datetime.combine(day, time(hour), tzinfo=tzinfo)


def remaining_fraction(
    elapsed_hours: float,
    duration_hours: float,
    curve: str = 'linear'
) -> float:
    """Fraction of a dose still active after `elapsed_hours`.

    Returns 0 before delivery (negative elapsed time) and once the
    action duration has passed.

    Raises:
        ValueError: If the curve is unknown.
    """
    if curve not in DECAY_CURVES:
        raise ValueError(f"Unknown decay curve '{curve}', expected one of {DECAY_CURVES}")
    if elapsed_hours < 0 or elapsed_hours >= duration_hours:
        return 0.0
    if curve == 'linear':
        return 1.0 - elapsed_hours / duration_hours
    half_life = duration_hours / 2
    return math.exp(-math.log(2) * elapsed_hours / half_life)


def _active_units(
    events: Sequence[InsulinReading],
    at: datetime,
    duration_hours: float,
    curve: str
) -> float:
    total = 0.0
    for event in events:
        if event.timestamp > at:
            continue
        elapsed = (at - event.timestamp).total_seconds() / 3600
        total += event.units * remaining_fraction(elapsed, duration_hours, curve)
    return total


def calculate_iob(
    events: Sequence[InsulinReading],
    at: datetime,
    duration_hours: float = 5,
    curve: str = 'linear'
) -> float:
    """Total insulin on board at `at`, rounded to 2 decimals.

    Only doses delivered at or before `at` contribute.

    Raises:
        ValueError: If the duration is outside 1-10 hours or the curve is unknown,
            or if `at` and the dose timestamps mix naive and aware datetimes.
    """
    _validate(duration_hours, curve)
    _check_timezones(events, at)
    return round(_active_units(events, at, duration_hours, curve), 2)


def prepare_hourly_iob(
    events: Sequence[InsulinReading],
    day: DayLike,
    action_duration_hours: float = 5,
    curve: str = 'linear'
) -> List[HourlyIOBData]:
    """Hourly insulin picture for one day.

    For each hour HH (0-23):
    - active_iob: IOB at HH:00 from all doses, including earlier days
    - basal/bolus_in_previous_hour: units delivered in [HH:00, HH+1:00),
      summed without decay and rounded to 1 decimal

    Args:
        events: Insulin deliveries in any order.
        day: Date as YYYY-MM-DD or a date.
        action_duration_hours: Insulin action duration, 1-10 hours.
        curve: 'linear' or 'exponential'.

    Returns:
        24 HourlyIOBData records.

    Raises:
        ValueError: If the duration is outside 1-10 hours,
            or if the dose timestamps mix naive and aware datetimes.
    """
    _validate(action_duration_hours, curve)
    _check_timezones(events)
    day = _to_date(day)

    hourly = []
    for hour in range(24):
        start = _hour_start(day, hour, events)
        end = start + timedelta(hours=1)
        in_hour = [e for e in events if start <= e.timestamp < end]

        basal = sum(e.units for e in in_hour if e.insulin_type == 'basal')
        bolus = sum(e.units for e in in_hour if e.insulin_type == 'bolus')

        hourly.append(
            HourlyIOBData(
                hour=hour,
                time_label=format_time_label(hour),
                active_iob=round(_active_units(events, start, action_duration_hours, curve), 2),
                basal_in_previous_hour=round(basal, 1),
                bolus_in_previous_hour=round(bolus, 1),
            )
        )
    return hourly


def calculate_daily_iob(
    events: Sequence[InsulinReading],
    day: DayLike,
    action_duration_hours: float = 5,
    interval_minutes: int = 15,
    curve: str = 'linear'
) -> List[IOBDataPoint]:
    """IOB split into basal and bolus every `interval_minutes` across one day.

    The series starts at 00:00 and ends at the last interval before the
    next midnight, so the default 15 minutes gives 96 points (00:00-23:45).

    Raises:
        ValueError: If a parameter is out of range or the dose timestamps
            mix naive and aware datetimes.
    """
    _validate(action_duration_hours, curve)
    _check_timezones(events)
    if interval_minutes <= 0:
        raise ValueError(f"interval_minutes must be positive, got {interval_minutes}")
    day = _to_date(day)

    basal_events = [e for e in events if e.insulin_type == 'basal']
    bolus_events = [e for e in events if e.insulin_type == 'bolus']
    start_of_day = _hour_start(day, 0, events)

    points = []
    for offset in range(0, 24 * 60, interval_minutes):
        at = start_of_day + timedelta(minutes=offset)
        basal = _active_units(basal_events, at, action_duration_hours, curve)
        bolus = _active_units(bolus_events, at, action_duration_hours, curve)
        points.append(
            IOBDataPoint(
                time=at,
                time_label=format_time_label(at.hour, at.minute),
                basal_iob=round(basal, 2),
                bolus_iob=round(bolus, 2),
                total_iob=round(basal + bolus, 2),
            )
        )
    return points


def _insulin_frame(events: Sequence[InsulinReading]) -> pd.DataFrame:
    return pd.DataFrame({
        'timestamp': [e.timestamp for e in events],
        'insulin_type': [e.insulin_type for e in events],
        'units': [e.units for e in events],
    })


def aggregate_insulin_by_date(events: Sequence[InsulinReading]) -> List[DailyInsulinSummary]:
    """Daily basal and bolus totals, sorted by date, rounded to 1 decimal."""
    if not events:
        return []

    df = _insulin_frame(events)
    df['date'] = [format_date(ts) for ts in df['timestamp']]
    totals = (
        df.pivot_table(index='date', columns='insulin_type', values='units', aggfunc='sum', fill_value=0.0)
        .reindex(columns=list(INSULIN_TYPES), fill_value=0.0)
        .sort_index()
    )

    return [
        DailyInsulinSummary(
            date=day,
            basal_total=round(float(row['basal']), 1),
            bolus_total=round(float(row['bolus']), 1),
            total_insulin=round(float(row['basal'] + row['bolus']), 1),
        )
        for day, row in totals.iterrows()
    ]


def prepare_insulin_timeline(events: Sequence[InsulinReading], day: DayLike) -> List[HourlyInsulinTimeline]:
    """Per-hour basal rate (mean of basal entries) and bolus total for one day."""
    day_key = format_date(_to_date(day))
    day_events = [e for e in events if format_date(e.timestamp) == day_key]

    timeline = []
    for hour in range(24):
        in_hour = [e for e in day_events if e.timestamp.hour == hour]
        basal = [e.units for e in in_hour if e.insulin_type == 'basal']
        bolus = [e.units for e in in_hour if e.insulin_type == 'bolus']
        timeline.append(
            HourlyInsulinTimeline(
                hour=hour,
                time_label=format_time_label(hour),
                basal_rate=round(sum(basal) / len(basal), 2) if basal else 0.0,
                bolus_total=round(sum(bolus), 1),
            )
        )
    return timeline


class IOBAnalyzer:
    """Insulin analysis for one set of deliveries, configured by AnalysisConfig."""

    def __init__(
        self,
        events: Sequence[InsulinReading],
        config: Optional[AnalysisConfig] = None
    ):
        self.events = sorted(events, key=lambda e: e.timestamp)
        self.config = config or AnalysisConfig()

    @property
    def duration_hours(self) -> float:
        return self.config.insulin.action_duration_hours

    @property
    def curve(self) -> str:
        return self.config.insulin.decay_curve

    def iob_at(self, at: datetime) -> float:
        return calculate_iob(self.events, at, self.duration_hours, self.curve)

    def hourly(self, day: DayLike) -> List[HourlyIOBData]:
        return prepare_hourly_iob(self.events, day, self.duration_hours, self.curve)

    def daily_curve(self, day: DayLike, interval_minutes: int = 15) -> List[IOBDataPoint]:
        return calculate_daily_iob(self.events, day, self.duration_hours, interval_minutes, self.curve)

    def daily_totals(self) -> List[DailyInsulinSummary]:
        return aggregate_insulin_by_date(self.events)

    def timeline(self, day: DayLike) -> List[HourlyInsulinTimeline]:
        return prepare_insulin_timeline(self.events, day)

    def dates(self) -> List[str]:
        """Sorted dates with at least one delivery."""
        return sorted({format_date(e.timestamp) for e in self.events})
