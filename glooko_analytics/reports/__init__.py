"""Report generation."""

from glooko_analytics.reports.generator import ReportGenerator

__all__ = ["ReportGenerator"]
