from __future__ import annotations

from datetime import date, datetime

import numpy as np
import pandas as pd
import pytest

from glooko_analytics.config import GlucoseThresholds
from glooko_analytics.metrics.glucose_metrics import GlucoseReading
from glooko_analytics.utils.colors import (
    GLUCOSE_RANGE_COLORS,
    get_glucose_color,
    get_roc_background_color,
    get_roc_color,
    hsv_to_rgb_string,
    interpolate_hue_color,
)
from glooko_analytics.utils.formatting import (
    format_date,
    format_duration,
    format_roc_value,
    format_time_label,
)
from glooko_analytics.utils.smoothing import rolling_smooth, smooth_glucose_values, time_window_mean
from glooko_analytics.utils.statistics import (
    calculate_cv,
    calculate_percentage,
    calculate_quantiles,
    calculate_time_in_range,
    population_std,
)
from glooko_analytics.utils.units import (
    convert_glucose_value,
    detect_glucose_unit,
    display_glucose_value,
    format_glucose_value,
    mgdl_to_mmol,
    mmol_to_mgdl,
)

GREEN = "rgb(46, 230, 46)"
RED = "rgb(230, 46, 46)"


# =============================================================================
# UNITS
# =============================================================================

def test_unit_conversion() -> None:
    assert mmol_to_mgdl(5.5) == 99
    assert mmol_to_mgdl(10.0) == 180
    assert mgdl_to_mmol(180) == 10.0
    assert mgdl_to_mmol(70) == 3.9


def test_unit_round_trip_within_tolerance() -> None:
    for x in np.arange(3.0, 20.01, 0.37):
        assert abs(mgdl_to_mmol(mmol_to_mgdl(x)) - x) <= 0.1


def test_display_helpers() -> None:
    assert convert_glucose_value(5.5, "mmol/L") == 5.5
    assert convert_glucose_value(5.5, "mg/dL") == 99
    assert format_glucose_value(99.4, "mg/dL") == "99"
    assert format_glucose_value(5.46, "mmol/L") == "5.5"
    assert display_glucose_value(7.0, "mg/dL") == "126"


@pytest.mark.parametrize(
    "headers, expected",
    [
        (["Timestamp", "Glucose Value (mg/dL)"], "mg/dL"),
        (["Timestamp", "Glucose Value (mg/dl)"], "mg/dL"),
        (["Zeitstempel", "CGM-Glukosewert (mmol/l)"], "mmol/L"),
        (["Timestamp", "Glucose Value"], None),
        (["Timestamp", "Serial Number"], None),
    ],
)
def test_detect_glucose_unit(headers, expected) -> None:
    assert detect_glucose_unit(headers) == expected


# =============================================================================
# COLORS
# =============================================================================

def test_hue_colormap_endpoints() -> None:
    assert hsv_to_rgb_string(120, 0.8, 0.9) == GREEN
    assert interpolate_hue_color(0.0) == GREEN
    assert interpolate_hue_color(1.0) == RED
    assert interpolate_hue_color(5.0) == RED
    assert interpolate_hue_color(-1.0) == GREEN


def test_roc_color_saturates_at_cap() -> None:
    assert get_roc_color(0.0) == GREEN
    assert get_roc_color(0.15) == RED
    assert get_roc_color(0.5) == RED
    assert get_roc_color(-0.5) == RED
    assert get_roc_color(0.15, cap=0.3) != RED


def test_roc_background_color_is_darker() -> None:
    assert get_roc_background_color(0.0) == "rgb(61, 153, 61)"


def test_glucose_color() -> None:
    assert get_glucose_color(2.5) == GLUCOSE_RANGE_COLORS["very_low"]
    assert get_glucose_color(6.0) == GLUCOSE_RANGE_COLORS["in_range"]
    assert get_glucose_color(20.0) == GLUCOSE_RANGE_COLORS["very_high"]
    thresholds = GlucoseThresholds(very_low=3.0, low=3.9, high=7.8, very_high=13.9)
    assert get_glucose_color(9.0, thresholds) == GLUCOSE_RANGE_COLORS["high"]


# =============================================================================
# FORMATTING
# =============================================================================

def test_formatting() -> None:
    assert format_time_label(7) == "07:00"
    assert format_time_label(7, 5) == "07:05"
    assert format_date(datetime(2025, 3, 4, 23, 59)) == "2025-03-04"
    assert format_date(date(2025, 3, 4)) == "2025-03-04"
    assert format_duration(45) == "45m"
    assert format_duration(120) == "2h"
    assert format_duration(90) == "1h 30m"
    assert format_roc_value(0.46) == "0.46"
    assert format_roc_value(0.55) == "0.55"
    assert format_roc_value(-0.2) == "-0.20"
    assert format_roc_value(0.5, "mg/dL") == "9"


# =============================================================================
# STATISTICS
# =============================================================================

def test_statistics() -> None:
    assert calculate_cv([5.0]) is None
    assert calculate_cv([0.0, 0.0]) is None
    assert calculate_cv([5.0, 5.0]) == 0.0
    assert calculate_cv([4.0, 6.0, np.nan]) == pytest.approx(np.std([4.0, 6.0], ddof=1) / 5.0 * 100)
    assert population_std([]) == 0.0
    assert population_std([1.0, 3.0]) == pytest.approx(1.0)
    assert calculate_percentage(1, 3) == 33.3
    assert calculate_percentage(5, 0) == 0.0
    assert calculate_time_in_range([3.0, 5.0, 10.0, 12.0], 3.9, 10.0) == pytest.approx(50.0)
    assert calculate_time_in_range([], 3.9, 10.0) == 0.0


def test_calculate_quantiles() -> None:
    assert calculate_quantiles([]) == {"p10": None, "p25": None, "p50": None, "p75": None, "p90": None}
    result = calculate_quantiles([1.0, 2.0, 3.0, 4.0], percentiles=(25, 75))
    assert result == {"p25": pytest.approx(1.75), "p75": pytest.approx(3.25)}


# =============================================================================
# SMOOTHING
# =============================================================================

def test_rolling_smooth_centered() -> None:
    smoothed = rolling_smooth(pd.Series([1.0, 2.0, 3.0, 10.0]), window=3)
    assert list(smoothed) == pytest.approx([1.5, 2.0, 5.0, 6.5])


def test_time_window_mean_handles_irregular_spacing() -> None:
    minutes = np.array([0.0, 5.0, 6.0, 30.0])
    values = np.array([1.0, 2.0, 3.0, 4.0])
    means = time_window_mean(minutes, values, 5.0)

    assert list(means) == pytest.approx([1.5, 2.0, 2.5, 4.0])
    assert len(time_window_mean(np.array([]), np.array([]), 5.0)) == 0


def test_smooth_glucose_values(make_readings) -> None:
    smoothed = smooth_glucose_values(make_readings([5.0, 6.0, 10.0]))
    assert [r.value for r in smoothed] == pytest.approx([5.5, 7.0, 8.0])

    short = [GlucoseReading(datetime(2025, 10, 13), 5.0)]
    assert smooth_glucose_values(short) == short
