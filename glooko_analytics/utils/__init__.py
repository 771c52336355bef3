"""Utility functions for glucose analysis."""

from glooko_analytics.utils.statistics import (
    calculate_cv,
    calculate_percentage,
    calculate_quantiles,
    population_std,
)
from glooko_analytics.utils.smoothing import rolling_smooth, smooth_glucose_values, time_window_mean
from glooko_analytics.utils.colors import (
    get_glucose_color,
    get_roc_color,
    get_roc_background_color,
    ROC_COLORS,
    GLUCOSE_RANGE_COLORS,
)
from glooko_analytics.utils.units import (
    MMOL_TO_MGDL,
    mmol_to_mgdl,
    mgdl_to_mmol,
    display_glucose_value,
)

__all__ = [
    "calculate_cv",
    "calculate_percentage",
    "calculate_quantiles",
    "population_std",
    "rolling_smooth",
    "smooth_glucose_values",
    "time_window_mean",
    "get_glucose_color",
    "get_roc_color",
    "get_roc_background_color",
    "ROC_COLORS",
    "GLUCOSE_RANGE_COLORS",
    "MMOL_TO_MGDL",
    "mmol_to_mgdl",
    "mgdl_to_mmol",
    "display_glucose_value",
]
