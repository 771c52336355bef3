"""
Glucose Analyzer - summary glucose metrics.

All calculations follow international consensus guidelines where applicable.
Values are handled in mmol/L; formulas defined on mg/dL convert first.
"""

import numpy as np
import pandas as pd
from typing import Optional, Dict, Any, Sequence, Tuple

from glooko_analytics.config import AnalysisConfig
from glooko_analytics.metrics.glucose_metrics import GlucoseMetrics, GlucoseReading
from glooko_analytics.utils.statistics import calculate_cv, calculate_quantiles
from glooko_analytics.utils.units import MMOL_TO_MGDL


class GlucoseAnalyzer:
    """Analyzer for CGM or fingerstick glucose readings.

    Computes standard glucose metrics following international consensus
    guidelines (Battelino 2019, Bergenstal 2018, Kovatchev, Nathan 2008).
    """

    def __init__(
        self,
        readings: Sequence[GlucoseReading],
        config: Optional[AnalysisConfig] = None
    ):
        """Initialize glucose analyzer.

        Args:
            readings: Glucose readings in mmol/L.
            config: Optional configuration. Uses defaults if None.
        """
        self.config = config or AnalysisConfig()
        self.df = pd.DataFrame({
            'timestamp': pd.to_datetime([r.timestamp for r in readings]),
            'glucose_mmol_l': [r.value for r in readings],
        })
        self._metrics: Optional[GlucoseMetrics] = None

        # Ensure sorted by timestamp
        self.df = self.df.sort_values('timestamp', kind='stable').reset_index(drop=True)

    @classmethod
    def from_frame(cls, df: pd.DataFrame, config: Optional[AnalysisConfig] = None) -> 'GlucoseAnalyzer':
        """Build from a DataFrame with 'timestamp' and 'glucose_mmol_l' columns."""
        readings = [
            GlucoseReading(timestamp=ts.to_pydatetime(), value=float(v))
            for ts, v in zip(pd.to_datetime(df['timestamp']), df['glucose_mmol_l'])
        ]
        return cls(readings, config)

    @property
    def values(self) -> np.ndarray:
        """Get glucose values as numpy array."""
        return self.df['glucose_mmol_l'].to_numpy(dtype=float)

    @property
    def metrics(self) -> Optional[GlucoseMetrics]:
        """Get computed metrics (calculates on first access)."""
        if self._metrics is None:
            self._metrics = self.analyze()
        return self._metrics

    # =========================================================================
    # CONSENSUS METRICS (International Guidelines)
    # =========================================================================

    def calculate_gmi(self, mean_glucose: Optional[float] = None) -> float:
        """Calculate Glucose Management Indicator (GMI).

        Bergenstal et al., 2018, Diabetes Care:
        GMI (%) = 3.31 + 0.02392 × mean glucose (mg/dL)

        Args:
            mean_glucose: Mean glucose in mmol/L. Uses data mean if None.

        Returns:
            GMI percentage.
        """
        if mean_glucose is None:
            mean_glucose = float(np.mean(self.values))
        return 3.31 + (0.02392 * mean_glucose * MMOL_TO_MGDL)

    def calculate_estimated_hba1c(self, mean_glucose: Optional[float] = None) -> Tuple[float, float]:
        """Estimate HbA1c from mean glucose (ADAG study, Nathan 2008).

        eA1c (%) = (mean mmol/L + 2.59) / 1.59

        Returns:
            Tuple of (NGSP %, IFCC mmol/mol).
        """
        if mean_glucose is None:
            mean_glucose = float(np.mean(self.values))
        ngsp = (mean_glucose + 2.59) / 1.59
        ifcc = (ngsp - 2.15) * 10.929
        return ngsp, ifcc

    def calculate_bgri(self) -> Tuple[float, float]:
        """Calculate Blood Glucose Risk Index (LBGI and HBGI).

        Kovatchev et al. The risk transform is defined on mg/dL.

        Returns:
            Tuple of (LBGI, HBGI).
        """
        # Clip to reasonable bounds
        values = np.clip(self.values * MMOL_TO_MGDL, 20, 600)

        # f(BG) = 1.509 * [(ln(BG))^1.084 - 5.381]
        f_bg = 1.509 * (np.power(np.log(values), 1.084) - 5.381)

        # r(BG) = 10 * f(BG)^2
        r_bg = 10 * np.power(f_bg, 2)

        rl_bg = np.where(f_bg < 0, r_bg, 0)
        rh_bg = np.where(f_bg > 0, r_bg, 0)

        return float(np.mean(rl_bg)), float(np.mean(rh_bg))

    def calculate_time_in_ranges(self) -> Dict[str, float]:
        """Calculate time in standard glucose ranges.

        Standard ranges (Battelino 2019):
        - Very Low: <3.0 mmol/L (Level 2 hypoglycemia)
        - Low: 3.0-3.8 mmol/L (Level 1 hypoglycemia)
        - In Range: 3.9-10.0 mmol/L (target >70%)
        - High: 10.1-13.9 mmol/L
        - Very High: >13.9 mmol/L

        Returns:
            Dictionary with percentage in each range.
        """
        t = self.config.glucose
        values = self.values
        n = len(values)

        return {
            'very_low': (np.sum(values < t.very_low) / n) * 100,
            'low': (np.sum((values >= t.very_low) & (values < t.low)) / n) * 100,
            'in_range': (np.sum((values >= t.low) & (values <= t.high)) / n) * 100,
            'high': (np.sum((values > t.high) & (values <= t.very_high)) / n) * 100,
            'very_high': (np.sum(values > t.very_high) / n) * 100,
        }

    def calculate_quantiles(self) -> Dict[str, Optional[float]]:
        """Glucose percentiles at the configured AGP percentiles."""
        return calculate_quantiles(self.values, self.config.agp.percentiles)

    # =========================================================================
    # PATTERN ANALYSIS
    # =========================================================================

    def analyze_hourly_patterns(self) -> Dict[str, Any]:
        """Analyze hour-of-day glucose patterns.

        Returns:
            Dictionary with hourly statistics and peak/nadir hours.
        """
        df = self.df.copy()
        df['hour'] = df['timestamp'].dt.hour

        hourly = df.groupby('hour')['glucose_mmol_l'].agg(['mean', 'std', 'count'])

        peak_hour = int(hourly['mean'].idxmax())
        nadir_hour = int(hourly['mean'].idxmin())

        return {
            'hourly_mean': hourly['mean'].to_dict(),
            'hourly_std': hourly['std'].to_dict(),
            'hourly_count': hourly['count'].to_dict(),
            'peak_hour': peak_hour,
            'peak_glucose': float(hourly.loc[peak_hour, 'mean']),
            'nadir_hour': nadir_hour,
            'nadir_glucose': float(hourly.loc[nadir_hour, 'mean']),
        }

    # =========================================================================
    # MAIN ANALYSIS
    # =========================================================================

    def analyze(self) -> Optional[GlucoseMetrics]:
        """Perform comprehensive glucose analysis.

        Returns:
            GlucoseMetrics with all computed metrics, or None without readings.
        """
        values = self.values
        if len(values) == 0:
            return None

        mean = float(np.mean(values))
        median = float(np.median(values))
        std = float(np.std(values, ddof=1)) if len(values) > 1 else None
        cv = calculate_cv(values)

        tir = self.calculate_time_in_ranges()
        ngsp, ifcc = self.calculate_estimated_hba1c(mean)
        lbgi, hbgi = self.calculate_bgri()

        # Data quality
        date_range = (
            self.df['timestamp'].min().to_pydatetime(),
            self.df['timestamp'].max().to_pydatetime()
        )
        days_with_data = int(self.df['timestamp'].dt.normalize().nunique())

        return GlucoseMetrics(
            mean=mean,
            median=median,
            std=std,
            cv=cv,
            estimated_hba1c=ngsp,
            estimated_hba1c_mmol_mol=ifcc,
            gmi=self.calculate_gmi(mean),
            lbgi=lbgi,
            hbgi=hbgi,
            time_very_low=tir['very_low'],
            time_low=tir['low'],
            time_in_range=tir['in_range'],
            time_high=tir['high'],
            time_very_high=tir['very_high'],
            readings_count=len(values),
            days_with_data=days_with_data,
            date_range=date_range,
        )
