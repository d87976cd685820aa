"""
Item analysis: per-question difficulty, discrimination, point-biserial
correlation and distractor behavior.

Questions are matched across variants by their stable id, never by
position. Every statistic of a question is computed over the respondents
who attempted it.
"""

import logging
from collections import Counter
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from exam_analysis.analysis.answers import (
    build_question_index,
    build_variant_index,
    normalize_answer,
)
from exam_analysis.analysis.config import AnalysisConfig
from exam_analysis.analysis.data_models import (
    DistractorAnalysis,
    ItemResponses,
    OptionAnalysis,
    QuestionAnalysisResult,
)
from exam_analysis.analysis.significance import chance_significance
from exam_analysis.core.constants import OMITTED_ANSWER
from exam_analysis.core.data_models import (
    ExamVariant,
    QuestionDefinition,
    QuestionType,
    StudentResponse,
)
from exam_analysis.stats import point_biserial_correlation

logger = logging.getLogger(__name__)

# Fraction of respondents in each of the high and low scoring groups
DEFAULT_GROUP_FRACTION = 0.27

# Groups never shrink below max(MIN_GROUP_SIZE, MIN_GROUP_FRACTION * n)
MIN_GROUP_SIZE = 2
MIN_GROUP_FRACTION = 0.1


def difficulty_index(is_correct: NDArray[np.bool_]) -> float:
    """Proportion of respondents answering correctly (higher = easier)."""
    if is_correct.shape[0] == 0:
        raise ValueError("is_correct must be non-empty")
    return float(np.mean(is_correct))


def discrimination_index(
    indicator: NDArray[np.bool_],
    total_scores: NDArray[np.float64],
    group_fraction: float = DEFAULT_GROUP_FRACTION,
) -> float:
    """
    High-low group discrimination index.

    Respondents are ranked by total score. The index is the proportion of
    the top group with the indicator set minus the proportion of the
    bottom group with it set. With the correctness of an item as indicator
    this is the classic upper-lower discrimination; with "chose option X"
    it measures how an option splits strong and weak students.

    Args:
        indicator: Per-respondent flag, shape (n,).
        total_scores: Per-respondent total score, shape (n,).
        group_fraction: Size of each group as a fraction of n.

    Returns:
        Index in [-1, 1]. 0.0 when all total scores are identical or there
        are no respondents.
    """
    n = total_scores.shape[0]
    if indicator.shape != (n,):
        raise ValueError(
            f"indicator shape {indicator.shape} inconsistent with "
            f"{n} total scores"
        )
    if n == 0 or np.ptp(total_scores) == 0:
        return 0.0

    min_group = min(n, max(MIN_GROUP_SIZE, int(MIN_GROUP_FRACTION * n)))
    group_size = min(n, max(min_group, int(group_fraction * n)))

    # Stable sort keeps input order among tied scores
    order = np.argsort(-total_scores, kind="stable")
    high = indicator[order[:group_size]]
    low = indicator[order[n - group_size :]]
    return float(np.mean(high) - np.mean(low))


def count_options(
    question: QuestionDefinition | None, answers: Sequence[str]
) -> int:
    """Number of answer options a guessing student chooses between."""
    if question is not None:
        if question.question_type == QuestionType.TRUE_FALSE:
            return 2
        if question.options:
            return max(2, len(question.options))
    observed = {a for a in answers if a != OMITTED_ANSWER}
    return max(2, len(observed))


def _analyze_option(
    option: str,
    answers: Sequence[str],
    total_scores: NDArray[np.float64],
) -> OptionAnalysis:
    chose = np.array([a == option for a in answers], dtype=bool)
    frequency = int(np.count_nonzero(chose))
    n = len(answers)
    return OptionAnalysis(
        option=option,
        frequency=frequency,
        percentage=100.0 * frequency / n if n else 0.0,
        discrimination_index=discrimination_index(chose, total_scores),
        point_biserial_correlation=point_biserial_correlation(
            chose, total_scores
        ),
    )


def analyze_distractors(
    item: ItemResponses, question: QuestionDefinition | None
) -> DistractorAnalysis:
    """
    Option-level breakdown of a multiple-choice question.

    Every option of the definition is reported, including options nobody
    chose. Without a known definition (or options) the observed answers
    stand in for the options.
    """
    answers = item.answers
    n = item.n_responses
    omitted = sum(1 for a in answers if a == OMITTED_ANSWER)

    if question is not None and question.options:
        options: Sequence[str] = question.options
    else:
        options = [
            option
            for option in Counter(answers)
            if option != OMITTED_ANSWER
        ]

    key = question.correct_answer if question is not None else None
    analyzed = [_analyze_option(o, answers, item.total_scores) for o in options]

    correct_option = next((o for o in analyzed if o.option == key), None)
    distractors = tuple(o for o in analyzed if o.option != key)

    possible_miskey = correct_option is not None and any(
        d.frequency > correct_option.frequency for d in distractors
    )
    if possible_miskey:
        logger.warning(
            f"Question {item.question_id}: a distractor was chosen more "
            f"often than the key '{key}'"
        )

    return DistractorAnalysis(
        distractors=distractors,
        correct_option=correct_option,
        omitted_responses=omitted,
        omitted_percentage=100.0 * omitted / n if n else 0.0,
        ineffective_distractors=tuple(
            d.option for d in distractors if d.frequency == 0
        ),
        possible_miskey=possible_miskey,
    )


def analyze_question(
    item: ItemResponses,
    question: QuestionDefinition | None,
    config: AnalysisConfig,
) -> QuestionAnalysisResult:
    """Compute the enabled statistics for one question."""
    question_type = (
        question.question_type
        if question is not None
        else QuestionType.MULTIPLE_CHOICE
    )
    question_text = (
        question.text
        if question is not None and question.text
        else f"Question {item.question_id}"
    )

    difficulty = (
        difficulty_index(item.is_correct)
        if config.include_difficulty_index
        else None
    )
    discrimination = (
        discrimination_index(item.is_correct, item.total_scores)
        if config.include_discrimination_index
        else None
    )
    point_biserial = (
        point_biserial_correlation(item.is_correct, item.total_scores)
        if config.include_point_biserial
        else None
    )
    distractors = (
        analyze_distractors(item, question)
        if config.include_distractor_analysis
        and question_type == QuestionType.MULTIPLE_CHOICE
        else None
    )

    return QuestionAnalysisResult(
        question_id=item.question_id,
        question_text=question_text,
        question_type=question_type,
        total_responses=item.n_responses,
        correct_responses=item.n_correct,
        difficulty_index=difficulty,
        discrimination_index=discrimination,
        point_biserial_correlation=point_biserial,
        distractor_analysis=distractors,
        statistical_significance=chance_significance(
            item.is_correct,
            count_options(question, item.answers),
            config.confidence_level,
        ),
    )


def collect_item_responses(
    responses: Sequence[StudentResponse],
    variants: Sequence[ExamVariant],
) -> list[ItemResponses]:
    """
    Group question responses by question id.

    Answers are normalized to option text through each respondent's
    variant. Questions appear in variant definition order, followed by
    questions no variant defines in order of first appearance.
    """
    question_index = build_question_index(variants)
    variant_index = build_variant_index(variants)

    grouped: dict[str, list[tuple[bool, float, float, str]]] = {}
    for response in responses:
        variant = variant_index.get(response.variant_code)
        for question_response in response.question_responses:
            question_id = question_response.question_id
            question = question_index.get(question_id)
            answer = normalize_answer(
                question_response.student_answer,
                question.options if question is not None else (),
                (
                    variant.option_permutation(question_id)
                    if variant is not None
                    else None
                ),
            )
            grouped.setdefault(question_id, []).append(
                (
                    question_response.is_correct,
                    question_response.points,
                    response.total_score,
                    answer,
                )
            )

    defined = [qid for qid in question_index if qid in grouped]
    undefined = [qid for qid in grouped if qid not in question_index]
    if undefined:
        logger.warning(
            f"{len(undefined)} answered questions have no definition in "
            f"the supplied variants: {undefined}"
        )

    items = []
    for question_id in defined + undefined:
        rows = grouped[question_id]
        items.append(
            ItemResponses(
                question_id=question_id,
                is_correct=np.array([r[0] for r in rows], dtype=bool),
                points=np.array([r[1] for r in rows], dtype=np.float64),
                total_scores=np.array([r[2] for r in rows], dtype=np.float64),
                answers=tuple(r[3] for r in rows),
            )
        )
    return items


def analyze_questions(
    responses: Sequence[StudentResponse],
    variants: Sequence[ExamVariant],
    config: AnalysisConfig,
) -> list[QuestionAnalysisResult]:
    """Analyze every question that appears in the responses."""
    question_index = build_question_index(variants)
    return [
        analyze_question(item, question_index.get(item.question_id), config)
        for item in collect_item_responses(responses, variants)
    ]
