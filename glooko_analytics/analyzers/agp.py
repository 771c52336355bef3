"""
Ambulatory Glucose Profile (AGP) aggregation.

Readings from all days are folded onto one 24-hour day and grouped into
5-minute time-of-day slots. Each slot reports the lowest and highest value
and the 10th/25th/50th/75th/90th percentiles.
"""

from datetime import datetime
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from glooko_analytics.config import AGPSettings
from glooko_analytics.metrics.agp_metrics import TimeSlotStats
from glooko_analytics.metrics.glucose_metrics import GlucoseReading
from glooko_analytics.utils.formatting import format_time_label

MINUTES_PER_DAY = 24 * 60


def calculate_percentile(sorted_values: Sequence[float], percentile: float) -> float:
    """Percentile by linear interpolation between closest ranks.

    Args:
        sorted_values: Values in ascending order.
        percentile: Percentile to calculate (0-100).

    Returns:
        Percentile value; 0 for empty input.
    """
    if len(sorted_values) == 0:
        return 0.0
    return float(np.percentile(sorted_values, percentile, method='linear'))


def get_time_slot_key(timestamp: datetime, slot_minutes: int = 5) -> str:
    """HH:MM label of the slot containing the timestamp (minutes floored)."""
    minute = (timestamp.minute // slot_minutes) * slot_minutes
    return format_time_label(timestamp.hour, minute)


def _slot_labels(slot_minutes: int) -> List[str]:
    return [
        format_time_label(start // 60, start % 60)
        for start in range(0, MINUTES_PER_DAY, slot_minutes)
    ]


def calculate_agp_stats(
    readings: Sequence[GlucoseReading],
    settings: Optional[AGPSettings] = None
) -> List[TimeSlotStats]:
    """Calculate AGP statistics for every time slot of the day.

    Args:
        readings: Glucose readings from any number of days.
        settings: AGP settings. Uses defaults (5-minute slots) if None.

    Returns:
        One TimeSlotStats per slot (288 for 5-minute slots), starting at 00:00.
        Slots without readings have count 0 and all values 0.
    """
    settings = settings or AGPSettings()
    slot_minutes = settings.slot_minutes
    labels = _slot_labels(slot_minutes)

    if not readings:
        return [TimeSlotStats(time_slot=label) for label in labels]

    df = pd.DataFrame({
        'slot': [(r.timestamp.hour * 60 + r.timestamp.minute) // slot_minutes for r in readings],
        'value': [r.value for r in readings],
    })
    grouped = df.groupby('slot')['value']
    summary = pd.DataFrame({
        'lowest': grouped.min(),
        'p10': grouped.quantile(0.10),
        'p25': grouped.quantile(0.25),
        'p50': grouped.quantile(0.50),
        'p75': grouped.quantile(0.75),
        'p90': grouped.quantile(0.90),
        'highest': grouped.max(),
        'count': grouped.size(),
    })

    stats = []
    for slot, label in enumerate(labels):
        if slot not in summary.index:
            stats.append(TimeSlotStats(time_slot=label))
            continue
        row = summary.loc[slot]
        stats.append(
            TimeSlotStats(
                time_slot=label,
                lowest=float(row['lowest']),
                p10=float(row['p10']),
                p25=float(row['p25']),
                p50=float(row['p50']),
                p75=float(row['p75']),
                p90=float(row['p90']),
                highest=float(row['highest']),
                count=int(row['count']),
            )
        )
    return stats
