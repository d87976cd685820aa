"""
Correlation measures used by item analysis and reliability.
"""

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from exam_analysis.stats.descriptive import Values


def correlation(x: Values, y: Values) -> float:
    """
    Pearson correlation between two equal-length samples.

    Returns 0.0 when fewer than two pairs are given or either sample has
    zero variance.
    """
    x_arr = np.asarray(x, dtype=np.float64)
    y_arr = np.asarray(y, dtype=np.float64)
    if x_arr.shape != y_arr.shape:
        raise ValueError(
            f"x and y must have the same shape, got {x_arr.shape} "
            f"and {y_arr.shape}"
        )
    if x_arr.size < 2:
        return 0.0

    x_dev = x_arr - x_arr.mean()
    y_dev = y_arr - y_arr.mean()
    denom = np.sqrt(np.sum(x_dev**2) * np.sum(y_dev**2))
    if denom == 0:
        return 0.0
    r = float(np.sum(x_dev * y_dev) / denom)
    return max(-1.0, min(1.0, r))


def point_biserial_correlation(
    item_scores: Sequence[bool] | NDArray[np.bool_],
    total_scores: Values,
) -> float:
    """
    Point-biserial correlation between a dichotomous item and total scores.

    r_pb = (M1 - M0) / s * sqrt(n1 * n0 / n^2)

    where M1, M0 are the mean totals of the two groups, s the population
    standard deviation of all totals and n1, n0 the group sizes.

    Returns 0.0 when either group is empty, fewer than two respondents are
    given or the totals have no variance. The result is clamped to [-1, 1].
    """
    item = np.asarray(item_scores).astype(bool)
    totals = np.asarray(total_scores, dtype=np.float64)
    if item.shape != totals.shape:
        raise ValueError(
            f"item_scores and total_scores must have the same shape, got "
            f"{item.shape} and {totals.shape}"
        )

    n = totals.size
    n1 = int(np.count_nonzero(item))
    n0 = n - n1
    if n < 2 or n1 == 0 or n0 == 0:
        return 0.0

    sd = float(np.std(totals))
    if sd == 0:
        return 0.0

    r = (
        (totals[item].mean() - totals[~item].mean())
        / sd
        * np.sqrt(n1 * n0 / n**2)
    )
    return max(-1.0, min(1.0, float(r)))
