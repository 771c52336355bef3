"""
Glucose reading and summary metric dataclasses.

All glucose values are stored in mmol/L. mg/dL is a display-only conversion.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple, Dict, Any


@dataclass(frozen=True)
class GlucoseReading:
    """One glucose measurement (CGM or fingerstick) in mmol/L."""
    timestamp: datetime
    value: float


@dataclass(frozen=True)
class GlucoseMetrics:
    """Summary statistics over a set of glucose readings.

    Dispersion metrics are None when fewer than two readings are available.
    """

    # Basic statistics
    mean: float
    median: float
    std: Optional[float]
    cv: Optional[float]  # Coefficient of variation (%), target <= 36

    # HbA1c estimates
    estimated_hba1c: float          # % (NGSP), ADA eAG formula
    estimated_hba1c_mmol_mol: float  # IFCC
    gmi: float                      # Glucose Management Indicator (%)

    # Blood Glucose Risk Index (Kovatchev)
    lbgi: float
    hbgi: float

    # Time in range percentages (5-category)
    time_very_low: float
    time_low: float
    time_in_range: float
    time_high: float
    time_very_high: float

    # Data quality
    readings_count: int
    days_with_data: int
    date_range: Tuple[datetime, datetime]

    @property
    def bgri(self) -> float:
        """Combined Blood Glucose Risk Index (LBGI + HBGI)."""
        return self.lbgi + self.hbgi

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'mean_mmol_l': round(self.mean, 1),
            'median_mmol_l': round(self.median, 1),
            'std_mmol_l': round(self.std, 2) if self.std is not None else None,
            'cv_percent': round(self.cv, 1) if self.cv is not None else None,
            'estimated_hba1c_percent': round(self.estimated_hba1c, 1),
            'estimated_hba1c_mmol_mol': round(self.estimated_hba1c_mmol_mol),
            'gmi_percent': round(self.gmi, 2),
            'lbgi': round(self.lbgi, 2),
            'hbgi': round(self.hbgi, 2),
            'time_very_low_pct': round(self.time_very_low, 1),
            'time_low_pct': round(self.time_low, 1),
            'time_in_range_pct': round(self.time_in_range, 1),
            'time_high_pct': round(self.time_high, 1),
            'time_very_high_pct': round(self.time_very_high, 1),
            'readings_count': self.readings_count,
            'days_with_data': self.days_with_data,
            'start_date': self.date_range[0].isoformat(),
            'end_date': self.date_range[1].isoformat(),
        }
