from __future__ import annotations

from datetime import datetime

import pytest

from glooko_analytics.analyzers.agp import (
    calculate_agp_stats,
    calculate_percentile,
    get_time_slot_key,
)
from glooko_analytics.config import AGPSettings
from glooko_analytics.metrics.glucose_metrics import GlucoseReading


def test_empty_readings_give_288_zero_slots() -> None:
    stats = calculate_agp_stats([])

    assert len(stats) == 288
    assert stats[0].time_slot == "00:00"
    assert stats[-1].time_slot == "23:55"
    assert all(s.count == 0 and s.p50 == 0 and s.highest == 0 for s in stats)


def test_slot_aggregates_across_days() -> None:
    readings = [
        GlucoseReading(datetime(2025, 10, 13, 8, 2), 5.0),
        GlucoseReading(datetime(2025, 10, 14, 8, 4), 7.0),
    ]
    stats = calculate_agp_stats(readings)
    slot = stats[8 * 12]

    assert slot.time_slot == "08:00"
    assert slot.count == 2
    assert slot.p50 == pytest.approx(6.0)
    assert slot.p10 == pytest.approx(5.2)
    assert slot.p90 == pytest.approx(6.8)
    assert (slot.lowest, slot.highest) == (5.0, 7.0)
    assert not stats[8 * 12 + 1].has_data


def test_custom_slot_width() -> None:
    stats = calculate_agp_stats([GlucoseReading(datetime(2025, 10, 13, 0, 20), 5.5)], AGPSettings(slot_minutes=15))
    assert len(stats) == 96
    assert stats[1].time_slot == "00:15"
    assert stats[1].count == 1


def test_calculate_percentile() -> None:
    assert calculate_percentile([], 50) == 0.0
    assert calculate_percentile([1.0, 2.0, 3.0, 4.0], 25) == pytest.approx(1.75)
    assert calculate_percentile([4.2], 90) == pytest.approx(4.2)


def test_get_time_slot_key_floors_minutes() -> None:
    assert get_time_slot_key(datetime(2025, 10, 13, 8, 7)) == "08:05"
    assert get_time_slot_key(datetime(2025, 10, 13, 23, 59)) == "23:55"
    assert get_time_slot_key(datetime(2025, 10, 13, 8, 7), slot_minutes=15) == "08:00"


def test_to_dict_rounds_values() -> None:
    stats = calculate_agp_stats([GlucoseReading(datetime(2025, 10, 13, 0, 0), 5.04)])
    assert stats[0].to_dict()["p50"] == 5.0
