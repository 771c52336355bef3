"""
Glucose unit conversion between mmol/L and mg/dL.

mmol/L is the storage unit everywhere in the package; mg/dL is for display.
"""

import re
from typing import List, Optional, Literal

from glooko_analytics.loaders.columns import find_column_index, get_column_variants

GlucoseUnit = Literal['mmol/L', 'mg/dL']

# 1 mmol/L = 18.018 mg/dL (commonly rounded to 18)
MMOL_TO_MGDL = 18.018

_UNIT_IN_PARENS = re.compile(r'\(([^)]+)\)')


def mmol_to_mgdl(mmol_value: float) -> int:
    """Convert mmol/L to mg/dL, rounded to the nearest integer."""
    return int(round(mmol_value * MMOL_TO_MGDL))


def mgdl_to_mmol(mgdl_value: float) -> float:
    """Convert mg/dL to mmol/L, rounded to 1 decimal place."""
    return round(mgdl_value / MMOL_TO_MGDL, 1)


def convert_glucose_value(value: float, target_unit: GlucoseUnit) -> float:
    """Convert a stored mmol/L value to the requested display unit."""
    if target_unit == 'mg/dL':
        return mmol_to_mgdl(value)
    return value


def format_glucose_value(value: float, unit: GlucoseUnit) -> str:
    """Format a value already in `unit`: integer for mg/dL, 1 decimal for mmol/L."""
    if unit == 'mg/dL':
        return str(int(round(value)))
    return f"{value:.1f}"


def display_glucose_value(mmol_value: float, target_unit: GlucoseUnit) -> str:
    """Convert and format in one step."""
    return format_glucose_value(convert_glucose_value(mmol_value, target_unit), target_unit)


def detect_glucose_unit(column_headers: List[str]) -> Optional[GlucoseUnit]:
    """Detect the glucose unit from the parenthesised suffix of the glucose column.

    Args:
        column_headers: Header names from the CSV.

    Returns:
        'mmol/L', 'mg/dL', or None if the column or unit is not found.
    """
    index = find_column_index(column_headers, get_column_variants('glucose_value'))
    if index == -1:
        return None

    match = _UNIT_IN_PARENS.search(column_headers[index])
    if not match:
        return None

    unit_text = match.group(1).lower().strip()
    if 'mg' in unit_text and 'dl' in unit_text:
        return 'mg/dL'
    if 'mmol' in unit_text:
        return 'mmol/L'
    return None
