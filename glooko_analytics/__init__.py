"""
Glooko Analytics - glucose and insulin analysis for Glooko data exports.

This package provides modular components for:
- Parsing Glooko CSV exports (tab or comma separated, English or German headers)
- Rate-of-change analysis of CGM glucose
- Ambulatory Glucose Profile and time-in-range aggregation
- Insulin-on-board estimation from basal and bolus deliveries
"""

from glooko_analytics.config import AnalysisConfig, ConfigError, load_config

__version__ = "1.0.0"
__all__ = ["AnalysisConfig", "ConfigError", "load_config"]
