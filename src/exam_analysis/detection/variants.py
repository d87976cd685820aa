"""
Variant-construction similarity.

Checks that randomization produced distinct variants. For a pair of
variants over q questions two boolean vectors of length q are built:

- order: the question at presentation position i is the same in both
- options: the option permutation of question i is identical in both

and the similarity is (sum(order) + sum(options)) / (2 q). Identical
variants score 1.0, variants differing in every position and every
shuffle score 0.0, and a partially randomized generator scores in
proportion.
"""

import logging
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from exam_analysis.core.data_models import ExamVariant

logger = logging.getLogger(__name__)


def count_variant_questions(a: ExamVariant, b: ExamVariant) -> int:
    """Number of questions a comparison of two variants spans."""
    question_ids = {q.id for q in a.questions} | {q.id for q in b.questions}
    for variant in (a, b):
        if variant.metadata.option_permutations:
            question_ids |= set(variant.metadata.option_permutations)
    return max(
        len(question_ids),
        len(a.metadata.question_order or ()),
        len(b.metadata.question_order or ()),
    )


def question_order_matches(
    a: ExamVariant, b: ExamVariant, n_questions: int
) -> NDArray[np.bool_]:
    """
    Per presentation position, whether both variants show the same question.

    Orders of different lengths, or a missing order, never match.
    """
    matches = np.zeros(n_questions, dtype=bool)
    order_a = a.metadata.question_order
    order_b = b.metadata.question_order
    if order_a is None or order_b is None or len(order_a) != len(order_b):
        return matches

    same = np.asarray(order_a) == np.asarray(order_b)
    matches[: len(same)] = same
    return matches


def option_permutation_matches(
    a: ExamVariant, b: ExamVariant, n_questions: int
) -> NDArray[np.bool_]:
    """
    Per question, whether both variants shuffle its options identically.

    A question that only one variant (or neither) has a permutation for
    does not match.
    """
    matches = np.zeros(n_questions, dtype=bool)
    perms_a = a.metadata.option_permutations or {}
    perms_b = b.metadata.option_permutations or {}
    question_ids = sorted(set(perms_a) & set(perms_b))
    same = [perms_a[qid] == perms_b[qid] for qid in question_ids]
    matches[: len(same)] = same
    return matches


def variant_similarity(a: ExamVariant, b: ExamVariant) -> float:
    """Similarity of two variants' construction, in [0, 1]."""
    n_questions = count_variant_questions(a, b)
    if n_questions == 0:
        return 0.0

    order = question_order_matches(a, b, n_questions)
    options = option_permutation_matches(a, b, n_questions)
    return float(
        (np.count_nonzero(order) + np.count_nonzero(options))
        / (2 * n_questions)
    )


def calculate_variant_similarity_matrix(
    variants: Sequence[ExamVariant],
) -> dict[str, dict[str, float]]:
    """
    Pairwise construction similarity between variants.

    Variants without a variant code are skipped.

    Returns:
        Nested mapping variant_code -> variant_code -> similarity in
        [0, 1], with 1 on the diagonal.
    """
    coded: dict[str, ExamVariant] = {}
    for variant in variants:
        if not variant.variant_code:
            logger.warning(f"Skipping variant {variant.id}: no variant code")
            continue
        coded.setdefault(variant.variant_code, variant)

    codes = list(coded)
    matrix = {code: {other: 0.0 for other in codes} for code in codes}
    for i, code in enumerate(codes):
        matrix[code][code] = 1.0
        for other in codes[:i]:
            similarity = variant_similarity(coded[code], coded[other])
            logger.debug(
                f"Variant similarity {code}-{other}: {similarity:.3f}"
            )
            matrix[code][other] = similarity
            matrix[other][code] = similarity
    return matrix
