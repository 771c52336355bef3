"""
Plotly Visualizer - Interactive charts for analysis results.

Every chart takes analyzer output (lists of result dataclasses) and
returns a plotly Figure.
"""

import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots
from typing import Optional, List, Sequence

from glooko_analytics.config import AnalysisConfig
from glooko_analytics.metrics.agp_metrics import TimeSlotStats
from glooko_analytics.metrics.glucose_metrics import GlucoseMetrics
from glooko_analytics.metrics.insulin_metrics import HourlyIOBData
from glooko_analytics.metrics.range_metrics import GlucoseRangeStats
from glooko_analytics.metrics.roc_metrics import RoCDataPoint
from glooko_analytics.utils.colors import AGP_BAND_COLORS, GLUCOSE_RANGE_COLORS, ROC_COLORS
from glooko_analytics.utils.units import GlucoseUnit, convert_glucose_value

RANGE_LABELS = {
    'very_low': 'Very Low',
    'low': 'Low',
    'in_range': 'In Range',
    'high': 'High',
    'very_high': 'Very High',
}


class PlotlyVisualizer:
    """Interactive Plotly visualizations.

    Provides interactive charts with consistent styling.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None, unit: GlucoseUnit = 'mmol/L'):
        """Initialize visualizer.

        Args:
            config: Optional configuration.
            unit: Display unit for glucose axes.
        """
        self.config = config or AnalysisConfig()
        self.unit = unit
        self.font_family = "Inter, sans-serif"

    def _get_base_layout(self, height: int = 400, **kwargs) -> dict:
        """Get base layout for consistent styling."""
        return {
            'height': height,
            'margin': dict(l=50, r=30, t=50, b=30),
            'paper_bgcolor': 'rgba(0,0,0,0)',
            'plot_bgcolor': 'rgba(0,0,0,0)',
            'font': dict(family=self.font_family, size=12),
            'hoverlabel': dict(font_size=12, bordercolor='rgba(128,128,128,0.3)'),
            **kwargs
        }

    def _convert(self, values: Sequence[float]) -> List[float]:
        return [convert_glucose_value(v, self.unit) for v in values]

    def _add_glucose_zones(self, fig: go.Figure, **kwargs):
        """Add target range band and threshold lines to a figure."""
        t = self.config.glucose
        low, high = self._convert([t.low, t.high])

        fig.add_hrect(y0=low, y1=high, fillcolor=GLUCOSE_RANGE_COLORS['in_range'], opacity=0.08, line_width=0, **kwargs)
        fig.add_hline(y=low, line_dash='dash', line_color=GLUCOSE_RANGE_COLORS['low'], opacity=0.5, **kwargs)
        fig.add_hline(y=high, line_dash='dash', line_color=GLUCOSE_RANGE_COLORS['high'], opacity=0.5, **kwargs)

    # =========================================================================
    # AGP
    # =========================================================================

    def create_agp_chart(
        self,
        agp_stats: Sequence[TimeSlotStats],
        height: int = 450,
    ) -> go.Figure:
        """Create Ambulatory Glucose Profile chart.

        Draws the 10-90 and 25-75 percentile bands and the median line.
        Slots without readings are left as gaps.

        Args:
            agp_stats: AGP time slot statistics.
            height: Chart height.

        Returns:
            Plotly Figure.
        """
        df = pd.DataFrame([s.to_dict() for s in agp_stats])
        fig = go.Figure()

        if not df.empty:
            value_columns = ['lowest', 'p10', 'p25', 'p50', 'p75', 'p90', 'highest']
            # Empty slots are zero-filled; hide them instead of drawing dips
            df.loc[df['count'] == 0, value_columns] = None
            for column in value_columns:
                df[column] = df[column].map(lambda v: convert_glucose_value(v, self.unit) if pd.notna(v) else None)

            bands = [('p90', 'p10', 'outer', '10-90%'), ('p75', 'p25', 'inner', '25-75%')]
            for upper, lower, band, name in bands:
                fig.add_trace(go.Scatter(
                    x=df['time_slot'], y=df[upper],
                    mode='lines', line=dict(width=0), showlegend=False, hoverinfo='skip',
                ))
                fig.add_trace(go.Scatter(
                    x=df['time_slot'], y=df[lower],
                    mode='lines', line=dict(width=0),
                    fill='tonexty', fillcolor=AGP_BAND_COLORS[band],
                    name=name,
                ))

            fig.add_trace(go.Scatter(
                x=df['time_slot'], y=df['p50'],
                mode='lines', name='Median',
                line=dict(color=AGP_BAND_COLORS['median'], width=2),
                hovertemplate='%{x}<br><b>%{y}</b> ' + self.unit + '<extra></extra>',
            ))

        self._add_glucose_zones(fig)
        fig.update_layout(
            **self._get_base_layout(height=height),
            legend=dict(orientation='h', yanchor='bottom', y=1.02, xanchor='right', x=1),
        )
        fig.update_xaxes(title_text='Time of Day', nticks=13, showgrid=True, gridcolor='rgba(128,128,128,0.15)')
        fig.update_yaxes(title_text=f'Glucose ({self.unit})', showgrid=True, gridcolor='rgba(128,128,128,0.15)')

        return fig

    # =========================================================================
    # RATE OF CHANGE
    # =========================================================================

    def create_roc_chart(
        self,
        points: Sequence[RoCDataPoint],
        height: int = 450,
    ) -> go.Figure:
        """Create rate of change visualization.

        Top panel shows glucose colored by RoC; bottom panel shows the
        signed RoC with the category thresholds.

        Args:
            points: RoC data points, typically one smoothed day.
            height: Chart height.

        Returns:
            Plotly Figure.
        """
        settings = self.config.roc
        fig = make_subplots(
            rows=2, cols=1,
            shared_xaxes=True,
            vertical_spacing=0.08,
            row_heights=[0.6, 0.4],
            subplot_titles=(f'Glucose ({self.unit})', 'Rate of Change (mmol/L per 5 min)')
        )

        if points:
            times = [p.time_decimal for p in points]
            fig.add_trace(
                go.Scatter(
                    x=times,
                    y=self._convert([p.glucose_value for p in points]),
                    mode='markers',
                    name='Glucose',
                    marker=dict(color=[p.color for p in points], size=6),
                    text=[p.time_label for p in points],
                    hovertemplate='%{text}<br><b>%{y}</b><extra></extra>',
                ),
                row=1, col=1
            )
            fig.add_trace(
                go.Scatter(
                    x=times,
                    y=[p.roc_raw for p in points],
                    mode='lines',
                    name='Rate of Change',
                    line=dict(color='#8b5cf6', width=1.5),
                    fill='tozeroy',
                    fillcolor='rgba(139, 92, 246, 0.1)',
                ),
                row=2, col=1
            )

        # Reference lines
        fig.add_hline(y=0, line_dash='solid', line_color='#d1d5db', row=2, col=1)
        for threshold, category in ((settings.good_threshold, 'good'), (settings.medium_threshold, 'medium')):
            for sign in (1, -1):
                fig.add_hline(
                    y=sign * threshold, line_dash='dot', line_color=ROC_COLORS[category],
                    opacity=0.6, row=2, col=1,
                )

        fig.update_layout(**self._get_base_layout(height=height), showlegend=False)
        fig.update_xaxes(range=[0, 24], dtick=3, showgrid=True, gridcolor='rgba(128,128,128,0.15)')
        fig.update_yaxes(showgrid=True, gridcolor='rgba(128,128,128,0.15)')

        return fig

    # =========================================================================
    # INSULIN
    # =========================================================================

    def create_iob_chart(
        self,
        hourly_iob: Sequence[HourlyIOBData],
        height: int = 400,
    ) -> go.Figure:
        """Create hourly insulin chart: stacked basal/bolus bars plus IOB line.

        Args:
            hourly_iob: 24 hourly IOB records.
            height: Chart height.

        Returns:
            Plotly Figure.
        """
        labels = [h.time_label for h in hourly_iob]
        fig = make_subplots(specs=[[{"secondary_y": True}]])

        fig.add_trace(
            go.Bar(x=labels, y=[h.basal_in_previous_hour for h in hourly_iob], name='Basal', marker_color='#6366f1'),
            secondary_y=False,
        )
        fig.add_trace(
            go.Bar(x=labels, y=[h.bolus_in_previous_hour for h in hourly_iob], name='Bolus', marker_color='#f97316'),
            secondary_y=False,
        )
        fig.add_trace(
            go.Scatter(
                x=labels,
                y=[h.active_iob for h in hourly_iob],
                mode='lines+markers',
                name='Active IOB',
                line=dict(color='#10b981', width=2),
                hovertemplate='%{x}<br><b>%{y:.2f}</b> U<extra></extra>',
            ),
            secondary_y=True,
        )

        fig.update_layout(
            **self._get_base_layout(height=height),
            barmode='stack',
            legend=dict(orientation='h', yanchor='bottom', y=1.02, xanchor='right', x=1),
        )
        fig.update_yaxes(title_text="Delivered (U)", secondary_y=False)
        fig.update_yaxes(title_text="Insulin on Board (U)", secondary_y=True)

        return fig

    # =========================================================================
    # TIME IN RANGE
    # =========================================================================

    def create_tir_bar(
        self,
        stats: Sequence[GlucoseRangeStats],
        labels: Sequence[str],
        height: int = 400,
    ) -> go.Figure:
        """Create 100% stacked bar chart of range percentages.

        Args:
            stats: One GlucoseRangeStats per bar (e.g. per weekday or hour).
            labels: Bar labels, same length as stats.
            height: Chart height.

        Returns:
            Plotly Figure.
        """
        fig = go.Figure()
        categories = stats[0].categories if stats else ()

        for category in categories:
            fig.add_trace(go.Bar(
                x=list(labels),
                y=[s.percentage(category) for s in stats],
                name=RANGE_LABELS[category],
                marker_color=GLUCOSE_RANGE_COLORS[category],
                hovertemplate='%{x}<br>' + RANGE_LABELS[category] + ': <b>%{y:.1f}%</b><extra></extra>',
            ))

        fig.update_layout(
            **self._get_base_layout(height=height),
            barmode='stack',
            legend=dict(orientation='h', yanchor='bottom', y=1.02, xanchor='right', x=1),
        )
        fig.update_yaxes(title_text='% of readings', range=[0, 100])

        return fig

    def create_glucose_tir_donut(self, metrics: GlucoseMetrics, height: int = 300) -> go.Figure:
        """Create glucose Time in Range donut chart."""
        values = [
            metrics.time_very_low,
            metrics.time_low,
            metrics.time_in_range,
            metrics.time_high,
            metrics.time_very_high,
        ]
        fig = go.Figure(data=[go.Pie(
            labels=list(RANGE_LABELS.values()),
            values=values,
            hole=0.55,
            marker_colors=[GLUCOSE_RANGE_COLORS[c] for c in RANGE_LABELS],
            textinfo='percent',
            textposition='inside',
            hovertemplate='%{label}<br><b>%{value:.1f}%</b><extra></extra>'
        )])

        fig.update_layout(
            **self._get_base_layout(height=height),
            title=dict(text='Time in Range', font=dict(size=14)),
            showlegend=True,
            legend=dict(orientation='h', y=-0.1),
        )

        return fig
