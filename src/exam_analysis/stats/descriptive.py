"""
Descriptive statistics over one-dimensional samples.

All moments use population formulas unless stated otherwise. Statistics
that need more data points than available return None, and samples whose
spread is only rounding noise yield 0.0 instead of NaN.
"""

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sps

Values = Sequence[float] | NDArray[np.floating]

# Minimum sample sizes for the higher moments
MIN_SKEWNESS_SAMPLES = 3
MIN_KURTOSIS_SAMPLES = 4


def _as_array(values: Values) -> NDArray[np.float64]:
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"values must be 1D, got shape {arr.shape}")
    if arr.size == 0:
        raise ValueError("values must be non-empty")
    return arr


def mean(values: Values) -> float:
    return float(np.mean(_as_array(values)))


def median(values: Values) -> float:
    return float(np.median(_as_array(values)))


def variance(values: Values) -> float:
    """Population variance."""
    return float(np.var(_as_array(values)))


def standard_deviation(values: Values) -> float:
    """Population standard deviation."""
    return float(np.std(_as_array(values)))


def _is_degenerate(arr: NDArray[np.float64]) -> bool:
    # Spread at the level of floating point noise around the mean
    noise = np.finfo(np.float64).resolution * abs(float(np.mean(arr)))
    return bool(np.var(arr) <= noise**2)


def _finite_or_zero(value: float) -> float:
    return value if np.isfinite(value) else 0.0


def skewness(values: Values) -> float | None:
    """
    Sample skewness (adjusted Fisher-Pearson coefficient).

    Returns:
        None with fewer than 3 values, 0.0 when the values are equal up to
        floating point noise.

    Raises:
        ValueError: If values is empty or not one-dimensional.
    """
    arr = _as_array(values)
    if arr.size < MIN_SKEWNESS_SAMPLES:
        return None
    if _is_degenerate(arr):
        return 0.0
    return _finite_or_zero(float(sps.skew(arr, bias=False)))


def kurtosis(values: Values) -> float | None:
    """
    Sample excess kurtosis (bias corrected, normal distribution = 0).

    Returns:
        None with fewer than 4 values, 0.0 when the values are equal up to
        floating point noise.

    Raises:
        ValueError: If values is empty or not one-dimensional.
    """
    arr = _as_array(values)
    if arr.size < MIN_KURTOSIS_SAMPLES:
        return None
    if _is_degenerate(arr):
        return 0.0
    return _finite_or_zero(
        float(sps.kurtosis(arr, fisher=True, bias=False))
    )


def quartiles(values: Values) -> tuple[float, float, float]:
    """
    First, second and third quartiles.

    Uses the inverted empirical CDF, averaging at discontinuities, so each
    quartile is an observed value or the midpoint of two observed values.
    """
    q1, q2, q3 = np.quantile(
        _as_array(values), [0.25, 0.5, 0.75], method="averaged_inverted_cdf"
    )
    return float(q1), float(q2), float(q3)
