"""
Significance of item performance against chance-level guessing.

For a question with k options a guessing student is correct with
probability 1/k. Observed correct/incorrect counts are compared against
that rate with a chi-square goodness-of-fit test (1 degree of freedom).
When an expected count falls below 5 the chi-square approximation is poor,
and the normal approximation of the binomial test is used instead; its
squared z statistic is compared against the same critical value.
"""

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sps

from exam_analysis.analysis.data_models import (
    ConfidenceInterval,
    SignificanceTest,
    StatisticalSignificance,
)

# Below this many respondents the results come with a warning
MIN_RELIABLE_SAMPLE = 30

# Below this expected count the chi-square test is replaced by a z test
MIN_EXPECTED_COUNT = 5.0

DEGREES_OF_FREEDOM = 1


def _wald_interval(
    proportion: float, n: int, confidence_level: float
) -> ConfidenceInterval:
    z = sps.norm.ppf(1 - (1 - confidence_level) / 2)
    margin = z * np.sqrt(proportion * (1 - proportion) / n)
    return ConfidenceInterval(
        lower=max(0.0, proportion - margin),
        upper=min(1.0, proportion + margin),
    )


def chance_significance(
    is_correct: NDArray[np.bool_],
    n_options: int,
    confidence_level: float = 0.95,
) -> StatisticalSignificance:
    """
    Test whether a question was answered correctly more or less often than
    guessing would produce.

    Args:
        is_correct: Correctness of each attempt, shape (n,).
        n_options: Number of answer options (at least 2).
        confidence_level: Confidence level for the critical value and the
            interval of the proportion correct.

    Returns:
        StatisticalSignificance with test statistic, p-value and warnings.

    Raises:
        ValueError: If there are no attempts or fewer than 2 options.
    """
    n = is_correct.shape[0]
    if n == 0:
        raise ValueError("is_correct must be non-empty")
    if n_options < 2:
        raise ValueError(f"n_options must be >= 2, got {n_options}")

    n_correct = int(np.count_nonzero(is_correct))
    n_incorrect = n - n_correct
    chance_rate = 1.0 / n_options
    expected_correct = n * chance_rate
    expected_incorrect = n * (1 - chance_rate)

    warnings: list[str] = []
    if n < MIN_RELIABLE_SAMPLE:
        warnings.append(
            f"Sample size ({n}) < {MIN_RELIABLE_SAMPLE}: "
            "test results are approximate"
        )
    if expected_correct < MIN_EXPECTED_COUNT:
        warnings.append(
            f"Expected correct responses ({expected_correct:.1f}) < 5: "
            "using binomial z test"
        )
    if expected_incorrect < MIN_EXPECTED_COUNT:
        warnings.append(
            f"Expected incorrect responses ({expected_incorrect:.1f}) < 5: "
            "using binomial z test"
        )

    proportion = n_correct / n
    critical_value = float(
        sps.chi2.ppf(confidence_level, DEGREES_OF_FREEDOM)
    )

    if (
        expected_correct < MIN_EXPECTED_COUNT
        or expected_incorrect < MIN_EXPECTED_COUNT
    ):
        standard_error = np.sqrt(chance_rate * (1 - chance_rate) / n)
        z = (proportion - chance_rate) / standard_error
        test = SignificanceTest.BINOMIAL_Z
        test_statistic = float(z**2)
        p_value = float(2 * sps.norm.sf(abs(z)))
    else:
        test = SignificanceTest.CHI_SQUARE
        test_statistic = float(
            (n_correct - expected_correct) ** 2 / expected_correct
            + (n_incorrect - expected_incorrect) ** 2 / expected_incorrect
        )
        p_value = float(sps.chi2.sf(test_statistic, DEGREES_OF_FREEDOM))

    return StatisticalSignificance(
        test=test,
        is_significant=test_statistic > critical_value,
        p_value=p_value,
        critical_value=critical_value,
        degrees_of_freedom=DEGREES_OF_FREEDOM,
        test_statistic=test_statistic,
        chance_rate=chance_rate,
        confidence_interval=_wald_interval(proportion, n, confidence_level),
        warnings=tuple(warnings),
    )
