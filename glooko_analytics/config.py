"""
Configuration management for Glooko Analytics.

This module provides dataclasses for all configurable thresholds and settings,
with support for loading from YAML files and runtime modification.
All glucose values are in mmol/L.
"""

from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Optional, Dict, Any, Tuple
import yaml


class ConfigError(ValueError):
    """Raised when a configuration value is out of its allowed range."""


DECAY_CURVES = ('linear', 'exponential')

MIN_ACTION_DURATION_HOURS = 1
MAX_ACTION_DURATION_HOURS = 10


@dataclass
class GlucoseThresholds:
    """Glucose range thresholds in mmol/L.

    Defaults follow the international consensus ranges
    (54 / 70 / 180 / 250 mg/dL).
    """
    very_low: float = 3.0    # Level 2 hypoglycemia
    low: float = 3.9         # Level 1 hypoglycemia, TIR lower bound
    high: float = 10.0       # TIR upper bound
    very_high: float = 13.9  # Clinically significant hyperglycemia

    def validate(self) -> None:
        """Check that 0 < very_low < low < high < very_high.

        Raises:
            ConfigError: If the ordering does not hold.
        """
        if not (0 < self.very_low < self.low < self.high < self.very_high):
            raise ConfigError(
                f"Glucose thresholds must satisfy 0 < very_low < low < high < very_high, "
                f"got {self.very_low}, {self.low}, {self.high}, {self.very_high}"
            )


@dataclass
class RoCSettings:
    """Rate-of-change settings (mmol/L per 5 minutes)."""
    # Pairs outside [min_gap, max_gap] minutes produce no data point
    min_gap_minutes: float = 1.0
    max_gap_minutes: float = 30.0

    # Category thresholds (~1 and ~2 mg/dL/min)
    good_threshold: float = 0.3
    medium_threshold: float = 0.55

    # |RoC| at which the colormap saturates to red
    color_cap: float = 0.15

    smoothing_window_minutes: float = 15.0

    # Look-back tolerance for interval-based RoC (fraction of the interval)
    interval_tolerance: float = 0.2

    def validate(self) -> None:
        if not (0 <= self.min_gap_minutes < self.max_gap_minutes):
            raise ConfigError("RoC gap window must satisfy 0 <= min_gap_minutes < max_gap_minutes")
        if not (0 < self.good_threshold < self.medium_threshold):
            raise ConfigError("RoC thresholds must satisfy 0 < good_threshold < medium_threshold")
        if self.color_cap <= 0:
            raise ConfigError("RoC color_cap must be positive")
        if self.smoothing_window_minutes <= 0:
            raise ConfigError("RoC smoothing_window_minutes must be positive")
        if not (0 <= self.interval_tolerance < 1):
            raise ConfigError("RoC interval_tolerance must be in [0, 1)")


@dataclass
class AGPSettings:
    """Ambulatory Glucose Profile settings."""
    slot_minutes: int = 5  # 288 slots per day
    percentiles: Tuple[int, ...] = (10, 25, 50, 75, 90)

    def validate(self) -> None:
        if self.slot_minutes <= 0 or (24 * 60) % self.slot_minutes != 0:
            raise ConfigError("AGP slot_minutes must evenly divide a day")
        if any(p < 0 or p > 100 for p in self.percentiles):
            raise ConfigError("AGP percentiles must be within 0-100")


@dataclass
class InsulinSettings:
    """Insulin-on-board settings."""
    action_duration_hours: float = 5.0
    decay_curve: str = 'linear'

    def validate(self) -> None:
        if not (MIN_ACTION_DURATION_HOURS <= self.action_duration_hours <= MAX_ACTION_DURATION_HOURS):
            raise ConfigError(
                f"Insulin action duration must be between {MIN_ACTION_DURATION_HOURS} "
                f"and {MAX_ACTION_DURATION_HOURS} hours, got {self.action_duration_hours}"
            )
        if self.decay_curve not in DECAY_CURVES:
            raise ConfigError(f"Unknown decay curve '{self.decay_curve}', expected one of {DECAY_CURVES}")


@dataclass
class AnalysisConfig:
    """Master configuration container."""
    glucose: GlucoseThresholds = field(default_factory=GlucoseThresholds)
    roc: RoCSettings = field(default_factory=RoCSettings)
    agp: AGPSettings = field(default_factory=AGPSettings)
    insulin: InsulinSettings = field(default_factory=InsulinSettings)

    def validate(self) -> 'AnalysisConfig':
        """Validate every section and return self."""
        self.glucose.validate()
        self.roc.validate()
        self.agp.validate()
        self.insulin.validate()
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        data = asdict(self)
        data['agp']['percentiles'] = list(self.agp.percentiles)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisConfig':
        """Create config from dictionary, ignoring unknown keys."""
        agp = _known_keys(AGPSettings, data.get('agp', {}))
        if 'percentiles' in agp:
            agp['percentiles'] = tuple(agp['percentiles'])
        return cls(
            glucose=GlucoseThresholds(**_known_keys(GlucoseThresholds, data.get('glucose', {}))),
            roc=RoCSettings(**_known_keys(RoCSettings, data.get('roc', {}))),
            agp=AGPSettings(**agp),
            insulin=InsulinSettings(**_known_keys(InsulinSettings, data.get('insulin', {}))),
        ).validate()


def _known_keys(section_cls, values: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    names = {f.name for f in fields(section_cls)}
    return {k: v for k, v in (values or {}).items() if k in names}


def load_config(config_path: Optional[Path] = None) -> AnalysisConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config.yaml. If None, uses the config.yaml
                    bundled with the glooko_analytics package.

    Returns:
        AnalysisConfig with values from file merged with defaults.

    Raises:
        ConfigError: If the merged configuration is invalid.
    """
    if config_path is None:
        config_path = Path(__file__).parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        return AnalysisConfig()

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    return AnalysisConfig.from_dict(data)


def save_config(config: AnalysisConfig, config_path: Path) -> None:
    """Save configuration to YAML file."""
    with open(config_path, 'w') as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
