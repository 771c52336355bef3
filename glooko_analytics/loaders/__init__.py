"""Data loaders for Glooko exports."""

from glooko_analytics.loaders.columns import (
    COLUMN_VARIANTS,
    detect_language,
    find_column,
    find_column_index,
    get_column_variants,
)
from glooko_analytics.loaders.glooko import (
    GlookoExportLoader,
    detect_delimiter,
    merge_insulin_readings,
    merge_readings,
    parse_daily_insulin_totals,
    parse_glucose_readings,
    parse_insulin_readings,
)

__all__ = [
    "COLUMN_VARIANTS",
    "GlookoExportLoader",
    "detect_delimiter",
    "detect_language",
    "find_column",
    "find_column_index",
    "get_column_variants",
    "merge_insulin_readings",
    "merge_readings",
    "parse_daily_insulin_totals",
    "parse_glucose_readings",
    "parse_insulin_readings",
]
