"""
Rate-of-change result dataclasses.

RoC values are in mmol/L per 5 minutes, the canonical CGM cadence.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Any, Literal

RoCCategory = Literal['good', 'medium', 'bad']

ROC_CATEGORIES = ('good', 'medium', 'bad')


@dataclass(frozen=True)
class RoCDataPoint:
    """Glucose velocity between a reading and its predecessor.

    The point is stamped at the later of the two readings.
    """
    timestamp: datetime
    time_decimal: float  # hour + minute / 60
    time_label: str      # HH:MM
    roc: float           # absolute magnitude
    roc_raw: float       # signed, positive when rising
    glucose_value: float
    color: str
    category: RoCCategory


@dataclass(frozen=True)
class RoCStats:
    """Roll-up of a set of RoC data points."""
    min_roc: float = 0.0
    max_roc: float = 0.0
    sd_roc: float = 0.0  # population standard deviation
    good_count: int = 0
    medium_count: int = 0
    bad_count: int = 0
    good_percentage: float = 0.0
    medium_percentage: float = 0.0
    bad_percentage: float = 0.0
    total_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'min_roc': round(self.min_roc, 3),
            'max_roc': round(self.max_roc, 3),
            'sd_roc': round(self.sd_roc, 3),
            'good_count': self.good_count,
            'medium_count': self.medium_count,
            'bad_count': self.bad_count,
            'good_pct': self.good_percentage,
            'medium_pct': self.medium_percentage,
            'bad_pct': self.bad_percentage,
            'total_count': self.total_count,
        }
