"""
Color utilities for glucose data visualization.

Provides the hue colormap used for rate-of-change points and the fixed
palettes for RoC and glucose range categories.
"""

import colorsys
from typing import Optional

import numpy as np

from glooko_analytics.config import GlucoseThresholds


# =============================================================================
# CATEGORY PALETTES
# =============================================================================

ROC_COLORS = {
    'good': '#4CAF50',    # Green - stable
    'medium': '#FFB300',  # Amber - moderate change
    'bad': '#D32F2F',     # Red - rapid change
}

GLUCOSE_RANGE_COLORS = {
    'very_low': '#8B0000',   # Dark red
    'low': '#D32F2F',        # Red
    'in_range': '#4CAF50',   # Green
    'high': '#FFB300',       # Amber
    'very_high': '#FF6F00',  # Dark orange
}

# AGP percentile band fills (outer 10-90, inner 25-75) and median line
AGP_BAND_COLORS = {
    'outer': 'rgba(76, 175, 80, 0.15)',
    'inner': 'rgba(76, 175, 80, 0.35)',
    'median': '#2E7D32',
}


# =============================================================================
# HUE COLORMAP
# =============================================================================

HUE_SLOW = 120.0  # green
HUE_FAST = 0.0    # red


def hsv_to_rgb_string(hue: float, saturation: float, value: float) -> str:
    """Convert HSV to a CSS rgb() string.

    Args:
        hue: Hue in degrees (0-360).
        saturation: Saturation (0-1).
        value: Value/brightness (0-1).

    Returns:
        String like 'rgb(46, 230, 46)'.
    """
    r, g, b = colorsys.hsv_to_rgb((hue % 360) / 360.0, saturation, value)
    return f"rgb({int(round(r * 255))}, {int(round(g * 255))}, {int(round(b * 255))})"


def interpolate_hue_color(
    intensity: float,
    saturation: float = 0.8,
    value: float = 0.9
) -> str:
    """Map a normalized intensity to a green-to-red color.

    Args:
        intensity: 0 (green) to 1 (red). Values outside are clamped.
        saturation: HSV saturation.
        value: HSV value.

    Returns:
        CSS rgb() string.
    """
    intensity = float(np.clip(intensity, 0.0, 1.0))
    hue = HUE_SLOW + (HUE_FAST - HUE_SLOW) * intensity
    return hsv_to_rgb_string(hue, saturation, value)


def get_roc_color(abs_roc: float, cap: float = 0.15) -> str:
    """Color for a rate of change; saturates to red at `cap` mmol/L/5min."""
    return interpolate_hue_color(abs(abs_roc) / cap)


def get_roc_background_color(abs_roc: float, cap: float = 0.15) -> str:
    """Darker, less saturated variant of get_roc_color for chart backgrounds."""
    return interpolate_hue_color(abs(abs_roc) / cap, saturation=0.6, value=0.6)


def get_glucose_color(
    value: float,
    thresholds: Optional[GlucoseThresholds] = None
) -> str:
    """Get color for a glucose value based on thresholds.

    Args:
        value: Glucose value in mmol/L.
        thresholds: Optional custom thresholds. Uses defaults if None.

    Returns:
        Hex color string.
    """
    if thresholds is None:
        thresholds = GlucoseThresholds()

    if value < thresholds.very_low:
        return GLUCOSE_RANGE_COLORS['very_low']
    elif value < thresholds.low:
        return GLUCOSE_RANGE_COLORS['low']
    elif value <= thresholds.high:
        return GLUCOSE_RANGE_COLORS['in_range']
    elif value <= thresholds.very_high:
        return GLUCOSE_RANGE_COLORS['high']
    else:
        return GLUCOSE_RANGE_COLORS['very_high']
