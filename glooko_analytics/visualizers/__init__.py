"""Visualization modules for glucose and insulin data."""

from glooko_analytics.visualizers.plotly_viz import PlotlyVisualizer

__all__ = ["PlotlyVisualizer"]
