"""
Ambulatory Glucose Profile dataclass.
"""

from dataclasses import dataclass
from typing import Dict, Any


@dataclass(frozen=True)
class TimeSlotStats:
    """Glucose distribution for one time-of-day slot across all days.

    All numeric fields are 0 when count == 0.
    """
    time_slot: str  # HH:MM, start of the slot
    lowest: float = 0.0
    p10: float = 0.0
    p25: float = 0.0
    p50: float = 0.0
    p75: float = 0.0
    p90: float = 0.0
    highest: float = 0.0
    count: int = 0

    @property
    def has_data(self) -> bool:
        return self.count > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'time_slot': self.time_slot,
            'lowest': round(self.lowest, 1),
            'p10': round(self.p10, 1),
            'p25': round(self.p25, 1),
            'p50': round(self.p50, 1),
            'p75': round(self.p75, 1),
            'p90': round(self.p90, 1),
            'highest': round(self.highest, 1),
            'count': self.count,
        }
