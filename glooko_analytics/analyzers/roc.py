"""
Rate of Change Analyzer - glucose velocity between consecutive readings.

RoC is expressed in mmol/L per 5 minutes (the CGM sampling cadence).

Medical standards for glucose rate of change:
- Good (stable): <= 0.3 mmol/L/5min (~1 mg/dL/min)
- Medium (moderate): 0.3-0.55 mmol/L/5min (~1-2 mg/dL/min)
- Bad (rapid): > 0.55 mmol/L/5min

References:
- International consensus on use of CGM (Danne et al., 2017)
- CGM trend arrows use similar thresholds
"""

import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence, Union

import numpy as np

from glooko_analytics.config import AnalysisConfig, RoCSettings
from glooko_analytics.metrics.glucose_metrics import GlucoseReading
from glooko_analytics.metrics.roc_metrics import RoCCategory, RoCDataPoint, RoCStats
from glooko_analytics.utils.colors import get_roc_color
from glooko_analytics.utils.formatting import format_date, format_time_label
from glooko_analytics.utils.smoothing import time_window_mean
from glooko_analytics.utils.statistics import calculate_percentage, population_std

logger = logging.getLogger(__name__)

# Normalisation unit for all RoC values
ROC_TIME_SPAN_MINUTES = 5


def categorize_roc(abs_roc: float, settings: Optional[RoCSettings] = None) -> RoCCategory:
    """Categorize an absolute RoC (mmol/L/5min) as good, medium or bad."""
    settings = settings or RoCSettings()
    if abs_roc <= settings.good_threshold:
        return 'good'
    elif abs_roc <= settings.medium_threshold:
        return 'medium'
    return 'bad'


def _sorted_readings(readings: Sequence[GlucoseReading]) -> List[GlucoseReading]:
    return sorted(readings, key=lambda r: r.timestamp)


def _minutes(timestamps: Sequence[datetime]) -> np.ndarray:
    if not timestamps:
        return np.array([], dtype=float)
    origin = timestamps[0]
    return np.array([(t - origin).total_seconds() / 60.0 for t in timestamps])


def _make_point(reading: GlucoseReading, roc_raw: float, settings: RoCSettings) -> RoCDataPoint:
    ts = reading.timestamp
    abs_roc = abs(roc_raw)
    return RoCDataPoint(
        timestamp=ts,
        time_decimal=ts.hour + ts.minute / 60,
        time_label=format_time_label(ts.hour, ts.minute),
        roc=abs_roc,
        roc_raw=roc_raw,
        glucose_value=reading.value,
        color=get_roc_color(abs_roc, settings.color_cap),
        category=categorize_roc(abs_roc, settings),
    )


def calculate_roc(
    readings: Sequence[GlucoseReading],
    settings: Optional[RoCSettings] = None
) -> List[RoCDataPoint]:
    """Calculate RoC between each pair of consecutive readings.

    Readings are sorted by timestamp first (stable, so equal timestamps keep
    input order). A pair produces a point only when the gap is between
    min_gap_minutes and max_gap_minutes inclusive (1-30 by default).
    The point is stamped at the later reading.

    Args:
        readings: Glucose readings in any order.
        settings: RoC settings. Uses defaults if None.

    Returns:
        List of RoC data points in time order; [] for fewer than two readings.
    """
    settings = settings or RoCSettings()
    ordered = _sorted_readings(readings)
    if len(ordered) < 2:
        return []

    points = []
    gaps_skipped = 0
    for previous, current in zip(ordered, ordered[1:]):
        delta = (current.timestamp - previous.timestamp).total_seconds() / 60.0
        if delta < settings.min_gap_minutes or delta > settings.max_gap_minutes:
            gaps_skipped += 1
            continue
        roc_raw = (current.value - previous.value) / delta * ROC_TIME_SPAN_MINUTES
        points.append(_make_point(current, roc_raw, settings))

    if gaps_skipped:
        logger.debug("Skipped %d reading pairs outside the gap window", gaps_skipped)
    return points


def calculate_roc_with_interval(
    readings: Sequence[GlucoseReading],
    interval_minutes: float,
    settings: Optional[RoCSettings] = None
) -> List[RoCDataPoint]:
    """Calculate RoC over a wider look-back interval (e.g. 30, 60, 120 minutes).

    For each reading, the most recent earlier reading whose distance lies
    within interval +/- tolerance (20% by default) is used as the reference.
    Readings without such a reference produce no point. Values are still
    normalised to mmol/L per 5 minutes.
    """
    settings = settings or RoCSettings()
    if interval_minutes <= 0:
        raise ValueError(f"interval_minutes must be positive, got {interval_minutes}")

    ordered = _sorted_readings(readings)
    if len(ordered) < 2:
        return []

    minutes = _minutes([r.timestamp for r in ordered])
    shortest = interval_minutes * (1 - settings.interval_tolerance)
    longest = interval_minutes * (1 + settings.interval_tolerance)

    # Latest reading at least `shortest` minutes before each reading
    candidates = np.searchsorted(minutes, minutes - shortest, side='right') - 1

    points = []
    for i, j in enumerate(candidates):
        if j < 0:
            continue
        delta = minutes[i] - minutes[j]
        if delta <= 0 or delta > longest:
            continue
        roc_raw = (ordered[i].value - ordered[j].value) / delta * ROC_TIME_SPAN_MINUTES
        points.append(_make_point(ordered[i], float(roc_raw), settings))
    return points


def calculate_roc_stats(points: Sequence[RoCDataPoint]) -> RoCStats:
    """Summarise RoC points: range, population SD and category shares.

    Empty input yields all-zero stats.
    """
    if not points:
        return RoCStats()

    roc_values = np.array([p.roc for p in points])
    total = len(points)
    counts = {category: sum(1 for p in points if p.category == category) for category in ('good', 'medium', 'bad')}

    return RoCStats(
        min_roc=float(roc_values.min()),
        max_roc=float(roc_values.max()),
        sd_roc=population_std(roc_values),
        good_count=counts['good'],
        medium_count=counts['medium'],
        bad_count=counts['bad'],
        good_percentage=calculate_percentage(counts['good'], total),
        medium_percentage=calculate_percentage(counts['medium'], total),
        bad_percentage=calculate_percentage(counts['bad'], total),
        total_count=total,
    )


def smooth_roc_data(
    points: Sequence[RoCDataPoint],
    window_minutes: Optional[float] = None,
    settings: Optional[RoCSettings] = None
) -> List[RoCDataPoint]:
    """Centered moving average over a time window (15 minutes by default).

    Each point becomes the mean of all points within +/- window/2 of its
    timestamp. Smoothed RoC is clamped to >= 0 and color and category are
    re-derived from it.
    """
    settings = settings or RoCSettings()
    if window_minutes is None:
        window_minutes = settings.smoothing_window_minutes
    if not points:
        return []

    ordered = sorted(points, key=lambda p: p.timestamp)
    minutes = _minutes([p.timestamp for p in ordered])
    half = window_minutes / 2
    mean_roc = time_window_mean(minutes, np.array([p.roc for p in ordered]), half)
    mean_raw = time_window_mean(minutes, np.array([p.roc_raw for p in ordered]), half)

    smoothed = []
    for point, roc, roc_raw in zip(ordered, mean_roc, mean_raw):
        roc = max(0.0, float(roc))
        smoothed.append(
            RoCDataPoint(
                timestamp=point.timestamp,
                time_decimal=point.time_decimal,
                time_label=point.time_label,
                roc=roc,
                roc_raw=float(roc_raw),
                glucose_value=point.glucose_value,
                color=get_roc_color(roc, settings.color_cap),
                category=categorize_roc(roc, settings),
            )
        )
    return smoothed


def get_longest_category_period(points: Sequence[RoCDataPoint], category: RoCCategory) -> float:
    """Longest contiguous run of `category` points, in minutes.

    Points are taken in time order. A run lasts from its first to its last
    timestamp, so a single point contributes 0. Returns 0 when no point has the category.
    """
    longest = 0.0
    run_start: Optional[datetime] = None
    run_end: Optional[datetime] = None

    for point in sorted(points, key=lambda p: p.timestamp):
        if point.category == category:
            if run_start is None:
                run_start = point.timestamp
            run_end = point.timestamp
            longest = max(longest, (run_end - run_start).total_seconds() / 60.0)
        else:
            run_start = None
    return longest


def filter_roc_by_date(points: Sequence[RoCDataPoint], day: Union[str, date]) -> List[RoCDataPoint]:
    """Points whose local calendar date is `day` (YYYY-MM-DD or a date)."""
    if isinstance(day, date):
        day = format_date(day)
    return [p for p in points if format_date(p.timestamp) == day]


def get_unique_dates_from_roc(points: Sequence[RoCDataPoint]) -> List[str]:
    """Sorted YYYY-MM-DD dates present in the points."""
    return sorted({format_date(p.timestamp) for p in points})


def get_roc_medical_standards(settings: Optional[RoCSettings] = None) -> Dict[str, Dict[str, str]]:
    """Human-readable thresholds and descriptions for each RoC category."""
    settings = settings or RoCSettings()
    good, medium = settings.good_threshold, settings.medium_threshold
    return {
        'good': {
            'threshold': f"≤{good} mmol/L/5min",
            'description': 'Stable - glucose changing slowly',
        },
        'medium': {
            'threshold': f"{good}-{medium} mmol/L/5min",
            'description': 'Moderate - glucose changing at moderate pace',
        },
        'bad': {
            'threshold': f">{medium} mmol/L/5min",
            'description': 'Rapid - glucose changing quickly',
        },
    }


class RoCAnalyzer:
    """Rate-of-change analysis for one set of glucose readings.

    Wraps the module functions with settings taken from an AnalysisConfig
    and caches the raw point list.
    """

    def __init__(
        self,
        readings: Sequence[GlucoseReading],
        config: Optional[AnalysisConfig] = None
    ):
        """Initialize RoC analyzer.

        Args:
            readings: Glucose readings in mmol/L.
            config: Optional configuration. Uses defaults if None.
        """
        self.readings = _sorted_readings(readings)
        self.config = config or AnalysisConfig()
        self._points: Optional[List[RoCDataPoint]] = None

    @property
    def settings(self) -> RoCSettings:
        return self.config.roc

    @property
    def points(self) -> List[RoCDataPoint]:
        """Consecutive-pair RoC points (calculated on first access)."""
        if self._points is None:
            self._points = calculate_roc(self.readings, self.settings)
        return self._points

    def with_interval(self, interval_minutes: float) -> List[RoCDataPoint]:
        return calculate_roc_with_interval(self.readings, interval_minutes, self.settings)

    def smoothed(self, day: Optional[Union[str, date]] = None) -> List[RoCDataPoint]:
        """Smoothed points, optionally restricted to one day."""
        points = self.points if day is None else filter_roc_by_date(self.points, day)
        return smooth_roc_data(points, settings=self.settings)

    def stats(self, day: Optional[Union[str, date]] = None, smooth: bool = False) -> RoCStats:
        points = self.points if day is None else filter_roc_by_date(self.points, day)
        if smooth:
            points = smooth_roc_data(points, settings=self.settings)
        return calculate_roc_stats(points)

    def longest_stable_period(self, day: Optional[Union[str, date]] = None) -> float:
        """Longest run of 'good' points in the smoothed series, in minutes."""
        return get_longest_category_period(self.smoothed(day), 'good')

    def dates(self) -> List[str]:
        return get_unique_dates_from_roc(self.points)
