from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, List, Sequence

import pytest

from glooko_analytics.metrics.glucose_metrics import GlucoseReading
from glooko_analytics.metrics.insulin_metrics import InsulinReading

CGM_CSV = (
    "Name:Jane Doe\tDate Range:2025-10-13 - 2025-10-13\n"
    "Timestamp\tGlucose Value (mmol/L)\tSerial Number\n"
    "2025-10-13 10:00\t5.0\tSN1\n"
    "2025-10-13 10:05\t5.5\tSN1\n"
    "not a date\t5.7\tSN1\n"
    "2025-10-13 10:15\tLOW\tSN1\n"
    "\n"
    "2025-10-13 10:20\t0\tSN1\n"
    "2025-10-13 10:25\t6.1\tSN1\n"
)

BASAL_CSV = (
    "Name:Jane Doe\tDate Range:2025-10-13 - 2025-10-13\n"
    "Timestamp\tInsulin Type\tDuration (minutes)\tPercentage (%)\tRate\tInsulin Delivered (U)\tSerial Number\n"
    "2025-10-13 00:00\tScheduled\t60\t\t0.8\t0.8\tSN1\n"
    "2025-10-13 01:00\tScheduled\t60\t\t0.9\t0.9\tSN1\n"
)

BOLUS_CSV = (
    "Name:Jane Doe\tDate Range:2025-10-13 - 2025-10-13\n"
    "Timestamp\tInsulin Type\tBlood Glucose Input (mmol/l)\tCarbs Input (g)\tCarbs Ratio\t"
    "Insulin Delivered (U)\tInitial Delivery (U)\tExtended Delivery (U)\tSerial Number\n"
    "2025-10-13 00:30\tNormal\t7.2\t40\t10\t4.0\t4.0\t0\tSN1\n"
    "2025-10-13 12:10\tNormal\t6.1\t60\t10\t6.0\t6.0\t0\tSN1\n"
    "2025-10-13 13:00\tNormal\t6.1\t0\t10\t-1\t0\t0\tSN1\n"
)

INSULIN_TOTALS_CSV = (
    "Name:Jane Doe\tDate Range:2025-10-13 - 2025-10-14\n"
    "Timestamp\tTotal Bolus (U)\tTotal Insulin (U)\tTotal Basal (U)\tSerial Number\n"
    "2025-10-13 00:00\t10.0\t30.5\t20.5\tSN1\n"
    "2025-10-14 00:00\t12.0\t31.0\t19.0\tSN1\n"
)


@pytest.fixture
def cgm_csv() -> str:
    return CGM_CSV


@pytest.fixture
def basal_csv() -> str:
    return BASAL_CSV


@pytest.fixture
def bolus_csv() -> str:
    return BOLUS_CSV


@pytest.fixture
def insulin_totals_csv() -> str:
    return INSULIN_TOTALS_CSV


@pytest.fixture
def make_readings() -> Callable[..., List[GlucoseReading]]:
    """Build readings from values spaced `step_minutes` apart, starting at `start`."""

    def _make(
        values: Sequence[float],
        start: datetime = datetime(2025, 10, 13, 10, 0),
        step_minutes: float = 5,
    ) -> List[GlucoseReading]:
        return [
            GlucoseReading(timestamp=start + timedelta(minutes=step_minutes * i), value=v)
            for i, v in enumerate(values)
        ]

    return _make


@pytest.fixture
def make_dose() -> Callable[..., InsulinReading]:
    def _make(timestamp: datetime, units: float, insulin_type: str = "bolus") -> InsulinReading:
        return InsulinReading(timestamp=timestamp, insulin_type=insulin_type, units=units)

    return _make
