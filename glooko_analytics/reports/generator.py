"""
Report Generator - Text and structured report generation.

Assembles glucose, rate-of-change, AGP and insulin results into one report.
"""

from typing import Optional, Dict, Any, List, Sequence
from datetime import datetime

from glooko_analytics.config import AnalysisConfig
from glooko_analytics.metrics.agp_metrics import TimeSlotStats
from glooko_analytics.metrics.glucose_metrics import GlucoseMetrics
from glooko_analytics.metrics.insulin_metrics import HourlyIOBData
from glooko_analytics.metrics.roc_metrics import RoCStats
from glooko_analytics.utils.units import GlucoseUnit, display_glucose_value


class ReportGenerator:
    """Generate analysis reports.

    Reports are organized into sections:
    - Glucose summary (consensus metrics)
    - Rate of change
    - Ambulatory Glucose Profile
    - Insulin on board
    """

    def __init__(self, config: Optional[AnalysisConfig] = None, unit: GlucoseUnit = 'mmol/L'):
        """Initialize report generator.

        Args:
            config: Optional configuration.
            unit: Display unit for glucose values.
        """
        self.config = config or AnalysisConfig()
        self.unit = unit

    def _glucose(self, mmol_value: float) -> str:
        return f"{display_glucose_value(mmol_value, self.unit)} {self.unit}"

    def generate_text_report(
        self,
        glucose_metrics: Optional[GlucoseMetrics] = None,
        roc_stats: Optional[RoCStats] = None,
        agp_stats: Optional[Sequence[TimeSlotStats]] = None,
        hourly_iob: Optional[Sequence[HourlyIOBData]] = None,
    ) -> str:
        """Generate full text report.

        Args:
            glucose_metrics: Glucose analysis results.
            roc_stats: Rate-of-change statistics.
            agp_stats: AGP time slot statistics.
            hourly_iob: Hourly insulin-on-board data for one day.

        Returns:
            Formatted text report.
        """
        t = self.config.glucose
        lines = []
        lines.append("=" * 60)
        lines.append("GLUCOSE ANALYSIS REPORT")
        lines.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}")
        lines.append("=" * 60)
        lines.append("")

        if glucose_metrics:
            lines.append("-" * 60)
            lines.append("GLUCOSE SUMMARY")
            lines.append("-" * 60)
            lines.append(f"  Date Range: {glucose_metrics.date_range[0].strftime('%Y-%m-%d')} to {glucose_metrics.date_range[1].strftime('%Y-%m-%d')}")
            lines.append(f"  Readings: {glucose_metrics.readings_count:,} over {glucose_metrics.days_with_data} days")
            lines.append("")
            lines.append("  Statistics:")
            lines.append(f"    Mean: {self._glucose(glucose_metrics.mean)}")
            lines.append(f"    Median: {self._glucose(glucose_metrics.median)}")
            if glucose_metrics.std is not None:
                lines.append(f"    SD: {self._glucose(glucose_metrics.std)}")
            if glucose_metrics.cv is not None:
                lines.append(f"    CV: {glucose_metrics.cv:.1f}% (target <=36%)")
            lines.append("")
            lines.append("  Time in Range:")
            lines.append(f"    Very Low (<{t.very_low}): {glucose_metrics.time_very_low:.1f}%")
            lines.append(f"    Low ({t.very_low}-{t.low}): {glucose_metrics.time_low:.1f}%")
            lines.append(f"    In Range ({t.low}-{t.high}): {glucose_metrics.time_in_range:.1f}% (target >70%)")
            lines.append(f"    High ({t.high}-{t.very_high}): {glucose_metrics.time_high:.1f}%")
            lines.append(f"    Very High (>{t.very_high}): {glucose_metrics.time_very_high:.1f}%")
            lines.append("")
            lines.append("  Key Indicators:")
            lines.append(f"    Estimated HbA1c: {glucose_metrics.estimated_hba1c:.1f}% ({glucose_metrics.estimated_hba1c_mmol_mol:.0f} mmol/mol)")
            lines.append(f"    GMI: {glucose_metrics.gmi:.1f}%")
            lines.append(f"    LBGI (hypo risk): {glucose_metrics.lbgi:.2f}")
            lines.append(f"    HBGI (hyper risk): {glucose_metrics.hbgi:.2f}")
            lines.append("")

        if roc_stats and roc_stats.total_count > 0:
            lines.append("-" * 60)
            lines.append("RATE OF CHANGE (mmol/L per 5 min)")
            lines.append("-" * 60)
            lines.append(f"  Points: {roc_stats.total_count:,}")
            lines.append(f"  Range: {roc_stats.min_roc:.2f} - {roc_stats.max_roc:.2f} (SD {roc_stats.sd_roc:.2f})")
            lines.append(f"  Stable: {roc_stats.good_percentage:.1f}% ({roc_stats.good_count})")
            lines.append(f"  Moderate: {roc_stats.medium_percentage:.1f}% ({roc_stats.medium_count})")
            lines.append(f"  Rapid: {roc_stats.bad_percentage:.1f}% ({roc_stats.bad_count})")
            lines.append("")

        if agp_stats:
            populated = [s for s in agp_stats if s.has_data]
            lines.append("-" * 60)
            lines.append("AMBULATORY GLUCOSE PROFILE")
            lines.append("-" * 60)
            lines.append(f"  Time slots with data: {len(populated)} of {len(agp_stats)}")
            if populated:
                peak = max(populated, key=lambda s: s.p50)
                nadir = min(populated, key=lambda s: s.p50)
                lines.append(f"  Highest median: {self._glucose(peak.p50)} at {peak.time_slot}")
                lines.append(f"  Lowest median: {self._glucose(nadir.p50)} at {nadir.time_slot}")
            lines.append("")

        if hourly_iob:
            peak_iob = max(hourly_iob, key=lambda h: h.active_iob)
            lines.append("-" * 60)
            lines.append("INSULIN ON BOARD")
            lines.append("-" * 60)
            lines.append(f"  Basal delivered: {sum(h.basal_in_previous_hour for h in hourly_iob):.1f} U")
            lines.append(f"  Bolus delivered: {sum(h.bolus_in_previous_hour for h in hourly_iob):.1f} U")
            lines.append(f"  Peak IOB: {peak_iob.active_iob:.2f} U at {peak_iob.time_label}")
            lines.append("")

        lines.append("=" * 60)
        lines.append("END OF REPORT")
        lines.append("=" * 60)

        return "\n".join(lines)

    def generate_summary_dict(
        self,
        glucose_metrics: Optional[GlucoseMetrics] = None,
        roc_stats: Optional[RoCStats] = None,
        hourly_iob: Optional[Sequence[HourlyIOBData]] = None,
    ) -> Dict[str, Any]:
        """Generate structured summary dictionary."""
        hourly: Optional[List[Dict[str, Any]]] = None
        if hourly_iob is not None:
            hourly = [h.to_dict() for h in hourly_iob]
        return {
            'generated_at': datetime.now().isoformat(),
            'glucose': glucose_metrics.to_dict() if glucose_metrics else None,
            'rate_of_change': roc_stats.to_dict() if roc_stats else None,
            'hourly_iob': hourly,
        }

    def get_interpretation(
        self,
        glucose_metrics: Optional[GlucoseMetrics] = None,
        roc_stats: Optional[RoCStats] = None,
    ) -> Dict[str, str]:
        """Generate interpretive text for key metrics."""
        interpretations = {}

        if glucose_metrics:
            # CV interpretation
            if glucose_metrics.cv is None:
                interpretations['cv'] = 'Not enough readings'
            elif glucose_metrics.cv < 33:
                interpretations['cv'] = 'Excellent glycemic stability'
            elif glucose_metrics.cv <= 36:
                interpretations['cv'] = 'Good glycemic stability (at target)'
            elif glucose_metrics.cv < 40:
                interpretations['cv'] = 'Moderate variability, room for improvement'
            else:
                interpretations['cv'] = 'High variability'

            # TIR interpretation
            if glucose_metrics.time_in_range >= 70:
                interpretations['tir'] = 'Meeting consensus target (>70%)'
            elif glucose_metrics.time_in_range >= 50:
                interpretations['tir'] = 'Below target, focus on reducing highs/lows'
            else:
                interpretations['tir'] = 'Significantly below target'

            # Hypoglycemia (consensus: <4% below 3.9, <1% below 3.0)
            below = glucose_metrics.time_low + glucose_metrics.time_very_low
            if glucose_metrics.time_very_low >= 1 or below >= 4:
                interpretations['hypo'] = 'Time below range above target'
            else:
                interpretations['hypo'] = 'Time below range within target'

        if roc_stats and roc_stats.total_count > 0:
            if roc_stats.good_percentage >= 80:
                interpretations['roc'] = 'Mostly stable glucose'
            elif roc_stats.bad_percentage >= 10:
                interpretations['roc'] = 'Frequent rapid glucose changes'
            else:
                interpretations['roc'] = 'Moderate glucose swings'

        return interpretations
