"""
Numeric primitives with no exam-domain knowledge.
"""

from exam_analysis.stats.correlation import (
    correlation,
    point_biserial_correlation,
)
from exam_analysis.stats.descriptive import (
    kurtosis,
    mean,
    median,
    quartiles,
    skewness,
    standard_deviation,
    variance,
)

__all__ = [
    "correlation",
    "kurtosis",
    "mean",
    "median",
    "point_biserial_correlation",
    "quartiles",
    "skewness",
    "standard_deviation",
    "variance",
]
