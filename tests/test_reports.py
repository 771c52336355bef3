from __future__ import annotations

from datetime import datetime

import plotly.graph_objects as go

from glooko_analytics.analyzers.agp import calculate_agp_stats
from glooko_analytics.analyzers.glucose import GlucoseAnalyzer
from glooko_analytics.analyzers.iob import prepare_hourly_iob
from glooko_analytics.analyzers.roc import calculate_roc, calculate_roc_stats, smooth_roc_data
from glooko_analytics.analyzers.time_in_range import group_by_day_of_week
from glooko_analytics.reports.generator import ReportGenerator
from glooko_analytics.visualizers.plotly_viz import PlotlyVisualizer

VALUES = [5.0, 5.4, 6.2, 7.5, 8.1, 7.9, 6.8, 6.0, 5.6, 5.5]


def _results(make_readings, make_dose):
    readings = make_readings(VALUES)
    points = calculate_roc(readings)
    hourly = prepare_hourly_iob([make_dose(datetime(2025, 10, 13, 8, 0), 4.0)], "2025-10-13")
    return {
        "glucose_metrics": GlucoseAnalyzer(readings).analyze(),
        "roc_stats": calculate_roc_stats(points),
        "agp_stats": calculate_agp_stats(readings),
        "hourly_iob": hourly,
        "points": points,
        "readings": readings,
    }


def test_text_report_contains_all_sections(make_readings, make_dose) -> None:
    r = _results(make_readings, make_dose)
    report = ReportGenerator().generate_text_report(
        r["glucose_metrics"], r["roc_stats"], r["agp_stats"], r["hourly_iob"]
    )

    assert "GLUCOSE SUMMARY" in report
    assert "RATE OF CHANGE" in report
    assert "Time slots with data: 10 of 288" in report
    assert "Peak IOB: 4.00 U at 08:00" in report
    assert report.endswith("=" * 60)


def test_text_report_in_mgdl(make_readings, make_dose) -> None:
    r = _results(make_readings, make_dose)
    report = ReportGenerator(unit="mg/dL").generate_text_report(glucose_metrics=r["glucose_metrics"])
    assert "mg/dL" in report
    assert "INSULIN ON BOARD" not in report


def test_empty_report_has_only_frame() -> None:
    report = ReportGenerator().generate_text_report()
    assert "GLUCOSE ANALYSIS REPORT" in report
    assert "GLUCOSE SUMMARY" not in report


def test_summary_dict(make_readings, make_dose) -> None:
    r = _results(make_readings, make_dose)
    summary = ReportGenerator().generate_summary_dict(r["glucose_metrics"], r["roc_stats"], r["hourly_iob"])

    assert summary["glucose"]["readings_count"] == len(VALUES)
    assert summary["rate_of_change"]["total_count"] == len(VALUES) - 1
    assert len(summary["hourly_iob"]) == 24
    assert ReportGenerator().generate_summary_dict()["glucose"] is None


def test_interpretation(make_readings, make_dose) -> None:
    r = _results(make_readings, make_dose)
    notes = ReportGenerator().get_interpretation(r["glucose_metrics"], r["roc_stats"])

    assert notes["tir"] == "Meeting consensus target (>70%)"
    assert notes["hypo"] == "Time below range within target"
    assert set(notes) == {"cv", "tir", "hypo", "roc"}


def test_charts_build_figures(make_readings, make_dose) -> None:
    r = _results(make_readings, make_dose)
    viz = PlotlyVisualizer()

    agp = viz.create_agp_chart(r["agp_stats"])
    assert isinstance(agp, go.Figure)
    assert [t.name for t in agp.data if t.showlegend is not False] == ["10-90%", "25-75%", "Median"]

    roc = viz.create_roc_chart(smooth_roc_data(r["points"]))
    assert len(roc.data) == 2
    assert list(roc.data[0].marker.color) == [p.color for p in smooth_roc_data(r["points"])]

    iob = viz.create_iob_chart(r["hourly_iob"])
    assert [t.name for t in iob.data] == ["Basal", "Bolus", "Active IOB"]

    weekdays = group_by_day_of_week(r["readings"], mode=5)
    tir = viz.create_tir_bar([w.stats for w in weekdays], [w.day for w in weekdays])
    assert len(tir.data) == 5

    donut = viz.create_glucose_tir_donut(r["glucose_metrics"])
    assert donut.data[0].hole == 0.55


def test_charts_accept_empty_input() -> None:
    viz = PlotlyVisualizer(unit="mg/dL")
    assert len(viz.create_roc_chart([]).data) == 0
    assert len(viz.create_tir_bar([], []).data) == 0
    assert len(viz.create_agp_chart(calculate_agp_stats([])).data) == 5
