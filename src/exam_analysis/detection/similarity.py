import logging
from collections.abc import Sequence

import numpy as np
from numba import njit  # type: ignore
from numpy.typing import NDArray

from exam_analysis.core.constants import MISSING_VALUE
from exam_analysis.core.data_models import AnswerMatrix, StudentResponse

logger = logging.getLogger(__name__)


@njit  # type: ignore
def count_matching_responses(
    a: NDArray[np.int32], b: NDArray[np.int32]
) -> np.uint32:
    """
    Count matching responses while ignoring positions where either student has missing values.

    We only count positions where both students have non-missing responses
    (both != `MISSING_VALUE`) and those responses are identical.
    """
    valid_mask = (a != MISSING_VALUE) & (b != MISSING_VALUE)
    matches = (a == b) & valid_mask
    return np.uint32(np.count_nonzero(matches))


@njit  # type: ignore
def count_common_responses(
    a: NDArray[np.int32], b: NDArray[np.int32]
) -> np.uint32:
    """Count positions where both students have non-missing responses."""
    valid_mask = (a != MISSING_VALUE) & (b != MISSING_VALUE)
    return np.uint32(np.count_nonzero(valid_mask))


@njit  # type: ignore
def measure_pairwise_similarity(
    codes: NDArray[np.int32],
) -> NDArray[np.float64]:
    """
    Compute the share of matching answers over commonly attempted questions for every pair.

    Pairs without a common question score 0. The diagonal is 1.

    Note: This allocates an O(N²) matrix.
    """
    n = codes.shape[0]
    similarity = np.eye(n, dtype=np.float64)

    for i in range(n):
        for j in range(i):
            common = count_common_responses(codes[i, :], codes[j, :])
            if common > 0:
                matches = count_matching_responses(codes[i, :], codes[j, :])
                similarity[i, j] = matches / common
                similarity[j, i] = similarity[i, j]

    return similarity


def calculate_student_similarity_matrix(
    responses: Sequence[StudentResponse],
) -> dict[str, dict[str, float]]:
    """
    Pairwise answer similarity between students.

    sim(a, b) is the fraction of questions attempted by both a and b on
    which their answers are textually identical. Questions are matched by
    id, so students on different variants compare on the same questions.

    Returns:
        Nested mapping student_id -> student_id -> similarity in [0, 1].
        Empty when there are no responses.
    """
    if not responses:
        return {}

    answers = AnswerMatrix.from_responses(responses)
    logger.info(
        f"Computing similarity for {answers.n_students} students over "
        f"{answers.n_questions} questions"
    )
    similarity = measure_pairwise_similarity(answers.codes)

    return {
        student: {
            other: float(similarity[i, j])
            for j, other in enumerate(answers.student_ids)
        }
        for i, student in enumerate(answers.student_ids)
    }
