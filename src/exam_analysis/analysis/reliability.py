"""
Exam reliability: Cronbach's alpha with its standard error of measurement
and Feldt confidence interval.
"""

import logging

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sps

from exam_analysis.analysis.data_models import (
    ConfidenceInterval,
    ReliabilityMetrics,
)

logger = logging.getLogger(__name__)

MIN_RESPONDENTS = 3
MIN_ITEMS = 2


def cronbachs_alpha(item_scores: NDArray[np.float64]) -> float:
    """
    Cronbach's alpha over an item score matrix.

    alpha = k / (k - 1) * (1 - sum(var_i) / var_total)

    with population variances and var_total the variance of row sums.

    Args:
        item_scores: Points per respondent and item, shape
            (n_respondents, n_items) with n_items >= 2.

    Returns:
        Alpha, or 0.0 when total scores have zero variance.
    """
    if item_scores.ndim != 2:
        raise ValueError(
            f"item_scores must be 2D, got shape {item_scores.shape}"
        )
    k = item_scores.shape[1]
    if k < MIN_ITEMS:
        raise ValueError(f"need at least {MIN_ITEMS} items, got {k}")

    total_variance = float(np.var(item_scores.sum(axis=1)))
    if total_variance == 0:
        return 0.0

    item_variance = float(np.var(item_scores, axis=0).sum())
    return (k / (k - 1)) * (1 - item_variance / total_variance)


def feldt_interval(
    alpha: float, n_respondents: int, n_items: int, confidence_level: float
) -> ConfidenceInterval:
    """
    Feldt (1965) confidence interval for Cronbach's alpha.

    (1 - alpha) / (1 - alpha_pop) follows an F distribution with
    (n - 1, (n - 1)(k - 1)) degrees of freedom.
    """
    df1 = n_respondents - 1
    df2 = (n_respondents - 1) * (n_items - 1)
    tail = (1 - confidence_level) / 2
    lower = 1 - (1 - alpha) * sps.f.ppf(1 - tail, df1, df2)
    upper = 1 - (1 - alpha) * sps.f.ppf(tail, df1, df2)
    return ConfidenceInterval(lower=float(lower), upper=float(upper))


def calculate_reliability(
    item_scores: NDArray[np.float64], confidence_level: float = 0.95
) -> ReliabilityMetrics | None:
    """
    Reliability metrics for an item score matrix.

    Returns:
        None with fewer than 3 respondents or fewer than 2 items.
    """
    n_respondents, n_items = item_scores.shape
    if n_respondents < MIN_RESPONDENTS or n_items < MIN_ITEMS:
        logger.debug(
            f"Skipping reliability: {n_respondents} respondents, "
            f"{n_items} items"
        )
        return None

    alpha = cronbachs_alpha(item_scores)
    total_variance = float(np.var(item_scores.sum(axis=1)))
    standard_error = float(np.sqrt(total_variance * max(0.0, 1 - alpha)))

    return ReliabilityMetrics(
        cronbachs_alpha=alpha,
        standard_error=standard_error,
        confidence_interval=feldt_interval(
            alpha, n_respondents, n_items, confidence_level
        ),
        n_items=n_items,
        n_respondents=n_respondents,
    )
