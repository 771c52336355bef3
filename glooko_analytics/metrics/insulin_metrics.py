"""
Insulin dosing and insulin-on-board dataclasses.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Any, Literal

InsulinType = Literal['basal', 'bolus']

INSULIN_TYPES = ('basal', 'bolus')


@dataclass(frozen=True)
class InsulinReading:
    """One insulin delivery event."""
    timestamp: datetime
    insulin_type: InsulinType
    units: float


@dataclass(frozen=True)
class HourlyIOBData:
    """Active insulin at the top of an hour, plus the units delivered in that hour."""
    hour: int
    time_label: str
    active_iob: float
    basal_in_previous_hour: float
    bolus_in_previous_hour: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'hour': self.hour,
            'time_label': self.time_label,
            'active_iob': self.active_iob,
            'basal_in_previous_hour': self.basal_in_previous_hour,
            'bolus_in_previous_hour': self.bolus_in_previous_hour,
        }


@dataclass(frozen=True)
class HourlyInsulinTimeline:
    """Per-hour insulin delivery for timeline charts."""
    hour: int
    time_label: str
    basal_rate: float   # mean of basal entries in the hour
    bolus_total: float


@dataclass(frozen=True)
class DailyInsulinSummary:
    """Total basal and bolus insulin for one calendar day."""
    date: str  # YYYY-MM-DD
    basal_total: float
    bolus_total: float
    total_insulin: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date,
            'basal_total': self.basal_total,
            'bolus_total': self.bolus_total,
            'total_insulin': self.total_insulin,
        }


@dataclass(frozen=True)
class IOBDataPoint:
    """Insulin on board at one instant, split by insulin type."""
    time: datetime
    time_label: str
    basal_iob: float
    bolus_iob: float
    total_iob: float
