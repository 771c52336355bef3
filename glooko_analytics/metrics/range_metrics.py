"""
Time-in-range result dataclasses.

Used for per-period, per-weekday, per-date and per-hour breakdowns.
"""

from dataclasses import dataclass
from typing import Dict, Any, Literal

from glooko_analytics.utils.statistics import calculate_percentage

RangeCategoryMode = Literal[3, 5]

RANGE_CATEGORIES_3 = ('low', 'in_range', 'high')
RANGE_CATEGORIES_5 = ('very_low', 'low', 'in_range', 'high', 'very_high')


@dataclass(frozen=True)
class GlucoseRangeStats:
    """Reading counts per glucose range category.

    In 3-category mode very_low and very_high are always 0.
    """
    mode: int = 3
    very_low: int = 0
    low: int = 0
    in_range: int = 0
    high: int = 0
    very_high: int = 0
    total: int = 0

    @property
    def categories(self) -> tuple:
        return RANGE_CATEGORIES_5 if self.mode == 5 else RANGE_CATEGORIES_3

    def count(self, category: str) -> int:
        if category not in RANGE_CATEGORIES_5:
            raise KeyError(category)
        return getattr(self, category)

    def percentage(self, category: str) -> float:
        """Share of readings in a category, rounded to 1 decimal."""
        return calculate_percentage(self.count(category), self.total)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {c: self.count(c) for c in self.categories}
        data['total'] = self.total
        for c in self.categories:
            data[f'{c}_pct'] = self.percentage(c)
        return data


@dataclass(frozen=True)
class DayOfWeekReport:
    day: str  # Monday..Sunday, Workday, Weekend
    stats: GlucoseRangeStats


@dataclass(frozen=True)
class DailyReport:
    date: str  # YYYY-MM-DD
    stats: GlucoseRangeStats


@dataclass(frozen=True)
class WeeklyReport:
    week_label: str  # e.g. "Oct 6-12"
    week_start: str
    week_end: str
    stats: GlucoseRangeStats


@dataclass(frozen=True)
class HourlyTIRStats:
    hour: int
    hour_label: str
    stats: GlucoseRangeStats


@dataclass(frozen=True)
class TimePeriodTIRStats:
    period: str  # e.g. "14 days"
    days: int
    stats: GlucoseRangeStats
