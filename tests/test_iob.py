from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from glooko_analytics.analyzers.iob import (
    IOBAnalyzer,
    aggregate_insulin_by_date,
    calculate_daily_iob,
    calculate_iob,
    prepare_hourly_iob,
    prepare_insulin_timeline,
    remaining_fraction,
)
from glooko_analytics.config import AnalysisConfig, InsulinSettings

MIDNIGHT = datetime(2025, 10, 13, 0, 0)


def test_single_bolus_decays_to_zero(make_dose) -> None:
    hourly = prepare_hourly_iob([make_dose(MIDNIGHT, 4.0)], "2025-10-13", action_duration_hours=4)

    assert len(hourly) == 24
    assert [h.active_iob for h in hourly[:6]] == [4.0, 3.0, 2.0, 1.0, 0.0, 0.0]
    assert hourly[0].bolus_in_previous_hour == 4.0
    assert hourly[1].bolus_in_previous_hour == 0.0
    assert hourly[0].time_label == "00:00"


def test_prior_day_doses_count(make_dose) -> None:
    events = [make_dose(MIDNIGHT - timedelta(hours=1), 2.0)]
    hourly = prepare_hourly_iob(events, date(2025, 10, 13), action_duration_hours=5)

    assert hourly[0].active_iob == pytest.approx(1.6)
    assert hourly[4].active_iob == 0.0
    assert hourly[0].bolus_in_previous_hour == 0.0


def test_hourly_delivery_sums_without_decay(make_dose) -> None:
    events = [
        make_dose(MIDNIGHT.replace(hour=6), 0.4, "basal"),
        make_dose(MIDNIGHT.replace(hour=6, minute=30), 0.5, "basal"),
        make_dose(MIDNIGHT.replace(hour=6, minute=59), 3.0),
        make_dose(MIDNIGHT.replace(hour=7), 1.0),
    ]
    hour = prepare_hourly_iob(events, "2025-10-13")[6]

    assert hour.basal_in_previous_hour == pytest.approx(0.9)
    assert hour.bolus_in_previous_hour == 3.0


@pytest.mark.parametrize("duration", [0.5, 11])
def test_invalid_duration_raises(make_dose, duration: float) -> None:
    with pytest.raises(ValueError):
        prepare_hourly_iob([make_dose(MIDNIGHT, 1.0)], "2025-10-13", action_duration_hours=duration)


def test_remaining_fraction_curves() -> None:
    assert remaining_fraction(1, 4) == pytest.approx(0.75)
    assert remaining_fraction(-0.5, 4) == 0.0
    assert remaining_fraction(4, 4) == 0.0
    assert remaining_fraction(2.5, 5, "exponential") == pytest.approx(0.5)
    with pytest.raises(ValueError):
        remaining_fraction(1, 4, "bilinear")


def test_calculate_iob_ignores_future_doses(make_dose) -> None:
    events = [make_dose(MIDNIGHT, 5.0), make_dose(MIDNIGHT + timedelta(hours=2), 3.0)]
    assert calculate_iob(events, MIDNIGHT + timedelta(hours=1), duration_hours=5) == 4.0
    assert calculate_iob([], MIDNIGHT) == 0.0


def test_calculate_daily_iob_splits_types(make_dose) -> None:
    events = [make_dose(MIDNIGHT, 1.0, "basal"), make_dose(MIDNIGHT, 2.0)]
    points = calculate_daily_iob(events, "2025-10-13", action_duration_hours=2, interval_minutes=30)

    assert len(points) == 48
    assert points[0].time_label == "00:00"
    assert (points[0].basal_iob, points[0].bolus_iob, points[0].total_iob) == (1.0, 2.0, 3.0)
    assert points[2].total_iob == pytest.approx(1.5)
    assert points[4].total_iob == 0.0


def test_calculate_daily_iob_rejects_bad_interval(make_dose) -> None:
    with pytest.raises(ValueError):
        calculate_daily_iob([make_dose(MIDNIGHT, 1.0)], "2025-10-13", interval_minutes=0)


def test_calculate_daily_iob_stops_before_next_midnight(make_dose) -> None:
    points = calculate_daily_iob([make_dose(MIDNIGHT, 1.0)], "2025-10-13")

    assert len(points) == 96
    assert points[-1].time_label == "23:45"
    assert points[-1].time.date() == date(2025, 10, 13)


def test_aware_doses_are_supported(make_dose) -> None:
    start = MIDNIGHT.replace(tzinfo=timezone.utc)
    events = [make_dose(start, 2.0), make_dose(start + timedelta(hours=1), 1.0, "basal")]

    hourly = prepare_hourly_iob(events, "2025-10-13", action_duration_hours=2)
    assert hourly[0].bolus_in_previous_hour == 2.0
    assert hourly[1].active_iob == pytest.approx(2.0)
    assert calculate_iob(events, start + timedelta(hours=1), duration_hours=2) == pytest.approx(2.0)


def test_mixed_naive_and_aware_doses_rejected(make_dose) -> None:
    events = [make_dose(MIDNIGHT, 2.0), make_dose(MIDNIGHT.replace(hour=6, tzinfo=timezone.utc), 1.0)]

    with pytest.raises(ValueError, match="naive"):
        prepare_hourly_iob(events, "2025-10-13")
    with pytest.raises(ValueError, match="naive"):
        calculate_daily_iob(events, "2025-10-13")
    with pytest.raises(ValueError, match="naive"):
        calculate_iob(events[:1], MIDNIGHT.replace(tzinfo=timezone.utc))


def test_aggregate_insulin_by_date(make_dose) -> None:
    events = [
        make_dose(MIDNIGHT + timedelta(days=1), 2.0),
        make_dose(MIDNIGHT, 0.8, "basal"),
        make_dose(MIDNIGHT + timedelta(hours=1), 0.7, "basal"),
        make_dose(MIDNIGHT + timedelta(hours=8), 5.0),
    ]
    totals = aggregate_insulin_by_date(events)

    assert [t.date for t in totals] == ["2025-10-13", "2025-10-14"]
    assert (totals[0].basal_total, totals[0].bolus_total, totals[0].total_insulin) == (1.5, 5.0, 6.5)
    assert (totals[1].basal_total, totals[1].bolus_total) == (0.0, 2.0)
    assert aggregate_insulin_by_date([]) == []


def test_prepare_insulin_timeline(make_dose) -> None:
    events = [
        make_dose(MIDNIGHT.replace(hour=2), 0.6, "basal"),
        make_dose(MIDNIGHT.replace(hour=2, minute=30), 0.8, "basal"),
        make_dose(MIDNIGHT.replace(hour=2, minute=45), 4.0),
        make_dose(MIDNIGHT + timedelta(days=1, hours=2), 9.0),
    ]
    timeline = prepare_insulin_timeline(events, "2025-10-13")

    assert len(timeline) == 24
    assert timeline[2].basal_rate == pytest.approx(0.7)
    assert timeline[2].bolus_total == 4.0
    assert timeline[3].basal_rate == 0.0


def test_iob_analyzer_uses_config(make_dose) -> None:
    config = AnalysisConfig(insulin=InsulinSettings(action_duration_hours=2, decay_curve="linear"))
    analyzer = IOBAnalyzer([make_dose(MIDNIGHT + timedelta(hours=1), 2.0), make_dose(MIDNIGHT, 2.0)], config)

    assert analyzer.events[0].timestamp == MIDNIGHT
    assert analyzer.iob_at(MIDNIGHT + timedelta(hours=1)) == 3.0
    assert analyzer.hourly("2025-10-13")[2].active_iob == 1.0
    assert analyzer.dates() == ["2025-10-13"]
    assert len(analyzer.daily_curve("2025-10-13")) == 96
    assert analyzer.daily_totals()[0].bolus_total == 4.0
    assert analyzer.timeline("2025-10-13")[0].bolus_total == 2.0
