"""
Smoothing utilities for glucose time series.

Provides count-based rolling averages and time-window means for
irregularly spaced readings.
"""

from typing import List

import numpy as np
import pandas as pd

from glooko_analytics.metrics.glucose_metrics import GlucoseReading


def rolling_smooth(
    series: pd.Series,
    window: int = 5,
    min_periods: int = 1,
    center: bool = True
) -> pd.Series:
    """Apply rolling average smoothing to a time series.

    Args:
        series: Input time series data.
        window: Window size for rolling average.
        min_periods: Minimum observations required in window.
        center: If True, center the window on each point.

    Returns:
        Smoothed series with same index.
    """
    return series.rolling(window=window, min_periods=min_periods, center=center).mean()


def time_window_mean(
    minutes: np.ndarray,
    values: np.ndarray,
    half_window: float
) -> np.ndarray:
    """Mean of all values whose time lies within +/- half_window of each point.

    Window edges are inclusive. Points need not be evenly spaced.

    Args:
        minutes: Sorted sample times in minutes (any origin).
        values: Values aligned with `minutes`.
        half_window: Half-width of the window in minutes.

    Returns:
        Array of window means, same length as the input.
    """
    minutes = np.asarray(minutes, dtype=float)
    values = np.asarray(values, dtype=float)
    if len(values) == 0:
        return values

    lo = np.searchsorted(minutes, minutes - half_window, side='left')
    hi = np.searchsorted(minutes, minutes + half_window, side='right')
    cumsum = np.concatenate(([0.0], np.cumsum(values)))
    return (cumsum[hi] - cumsum[lo]) / (hi - lo)


def smooth_glucose_values(readings: List[GlucoseReading]) -> List[GlucoseReading]:
    """3-point centered moving average of glucose values.

    End points average with their single neighbour. Fewer than three
    readings are returned unchanged. Readings should be sorted by time.
    """
    if len(readings) < 3:
        return list(readings)

    smoothed = rolling_smooth(pd.Series([r.value for r in readings]), window=3)
    return [
        GlucoseReading(timestamp=r.timestamp, value=float(v))
        for r, v in zip(readings, smoothed)
    ]
