"""
Statistical utilities for glucose data analysis.

Provides common statistical calculations used across analyzers.
"""

import numpy as np
import pandas as pd
from typing import Dict, Iterable, Optional, Sequence, Union

ArrayLike = Union[np.ndarray, pd.Series, Sequence[float]]


def _clean(values: ArrayLike) -> np.ndarray:
    values = np.asarray(values, dtype=float)
    return values[~np.isnan(values)]


def calculate_cv(values: ArrayLike) -> Optional[float]:
    """Calculate coefficient of variation (CV).

    CV = (sample standard deviation / mean) × 100

    Target: <=36% per International Consensus (Battelino 2019).

    Args:
        values: Array of values.

    Returns:
        CV as a percentage, or None with fewer than two values or a zero mean.
    """
    values = _clean(values)

    if len(values) < 2 or np.mean(values) == 0:
        return None

    return float((np.std(values, ddof=1) / np.mean(values)) * 100)


def population_std(values: ArrayLike) -> float:
    """Population standard deviation (ddof=0); 0.0 for empty input."""
    values = _clean(values)
    if len(values) == 0:
        return 0.0
    return float(np.std(values, ddof=0))


def calculate_quantiles(
    values: ArrayLike,
    percentiles: Iterable[float] = (10, 25, 50, 75, 90)
) -> Dict[str, Optional[float]]:
    """Calculate multiple percentiles for a dataset.

    Uses linear interpolation between order statistics
    (Hyndman-Fan type 7, the numpy and Excel PERCENTILE.INC default).

    Args:
        values: Array of values.
        percentiles: Percentiles to calculate (0-100).

    Returns:
        Dictionary mapping names (e.g., 'p10', 'p50') to values,
        None for every key when there are no values.
    """
    values = _clean(values)
    percentiles = list(percentiles)

    if len(values) == 0:
        return {f"p{int(p)}": None for p in percentiles}

    results = np.percentile(values, percentiles, method='linear')
    return {f"p{int(p)}": float(v) for p, v in zip(percentiles, results)}


def calculate_percentage(count: int, total: int) -> float:
    """Percentage of count in total, rounded to 1 decimal; 0.0 when total is 0."""
    if total == 0:
        return 0.0
    return round((count / total) * 100, 1)


def calculate_time_in_range(
    values: ArrayLike,
    lower: float,
    upper: float
) -> float:
    """Calculate percentage of values within a range.

    Args:
        values: Array of values.
        lower: Lower bound (inclusive).
        upper: Upper bound (inclusive).

    Returns:
        Percentage (0-100) of values within range.
    """
    values = _clean(values)

    if len(values) == 0:
        return 0.0

    in_range = np.sum((values >= lower) & (values <= upper))
    return float((in_range / len(values)) * 100)
