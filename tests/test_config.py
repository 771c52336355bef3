from __future__ import annotations

from pathlib import Path

import pytest

from glooko_analytics import AnalysisConfig, ConfigError, load_config
from glooko_analytics.config import (
    AGPSettings,
    GlucoseThresholds,
    InsulinSettings,
    RoCSettings,
    save_config,
)


def test_bundled_config_matches_defaults() -> None:
    assert load_config() == AnalysisConfig()


def test_missing_config_file_falls_back_to_defaults(tmp_path: Path) -> None:
    assert load_config(tmp_path / "absent.yaml") == AnalysisConfig()


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    config = AnalysisConfig(
        glucose=GlucoseThresholds(very_low=3.5, low=4.0, high=9.0, very_high=12.0),
        insulin=InsulinSettings(action_duration_hours=4, decay_curve="exponential"),
    )
    path = tmp_path / "config.yaml"
    save_config(config, path)

    assert load_config(path) == config


def test_partial_yaml_merges_with_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("roc:\n  color_cap: 0.2\nunknown_section:\n  x: 1\n", encoding="utf-8")
    config = load_config(path)

    assert config.roc.color_cap == 0.2
    assert config.roc.good_threshold == 0.3
    assert config.glucose == GlucoseThresholds()


def test_from_dict_ignores_unknown_keys() -> None:
    config = AnalysisConfig.from_dict({"agp": {"percentiles": [5, 50, 95], "colour": "red"}})
    assert config.agp == AGPSettings(percentiles=(5, 50, 95))


@pytest.mark.parametrize(
    "data",
    [
        {"glucose": {"very_low": 4.0, "low": 3.9}},
        {"glucose": {"very_low": 0}},
        {"roc": {"good_threshold": 0.6}},
        {"roc": {"max_gap_minutes": 0.5}},
        {"agp": {"slot_minutes": 7}},
        {"insulin": {"action_duration_hours": 11}},
        {"insulin": {"decay_curve": "bilinear"}},
    ],
)
def test_invalid_config_raises(data: dict) -> None:
    with pytest.raises(ConfigError):
        AnalysisConfig.from_dict(data)


def test_config_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        RoCSettings(color_cap=0).validate()


def test_to_dict_is_plain_data() -> None:
    data = AnalysisConfig().to_dict()
    assert data["agp"]["percentiles"] == [10, 25, 50, 75, 90]
    assert data["insulin"]["action_duration_hours"] == 5.0
