"""
Display formatting helpers shared by analyzers and reports.
"""

from datetime import date, datetime
from typing import Union

from glooko_analytics.utils.units import MMOL_TO_MGDL


def format_time_label(hour: int, minute: int = 0) -> str:
    """Format as zero-padded HH:MM."""
    return f"{hour:02d}:{minute:02d}"


def format_date(value: Union[date, datetime]) -> str:
    """Format as YYYY-MM-DD (local calendar date of the timestamp)."""
    return value.strftime('%Y-%m-%d')


def format_duration(minutes: float) -> str:
    """Format a duration as '45m', '2h' or '1h 30m'."""
    total = int(round(minutes))
    hours, mins = divmod(total, 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def format_roc_value(roc: float, unit: str = 'mmol/L') -> str:
    """Format a rate of change (mmol/L/5min) for display.

    mg/dL values are shown as integers, mmol/L with two decimals.
    """
    if unit == 'mg/dL':
        return str(int(round(roc * MMOL_TO_MGDL)))
    return f"{roc:.2f}"
