"""
Exam-level analysis: item statistics across variants aggregated into a
summary with score distribution and reliability.
"""

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

import numpy as np
from numpy.typing import NDArray

from exam_analysis import stats
from exam_analysis.analysis.config import AnalysisConfig
from exam_analysis.analysis.data_models import (
    AnalysisMetadata,
    AnalysisResult,
    AnalysisSummary,
    QuestionAnalysisResult,
    QuestionTypeSummary,
    ScoreDistribution,
)
from exam_analysis.analysis.exceptions import NoResponsesError
from exam_analysis.analysis.items import analyze_questions
from exam_analysis.analysis.reliability import calculate_reliability
from exam_analysis.core.constants import UNKNOWN_EXAM_ID, UNKNOWN_EXAM_TITLE
from exam_analysis.core.data_models import (
    ExamVariant,
    QuestionType,
    StudentResponse,
)
from exam_analysis.core.utils import score_ratio

logger = logging.getLogger(__name__)


def _average(values: Sequence[float | None]) -> float | None:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return stats.mean(present)


def filter_responses(
    responses: Sequence[StudentResponse], config: AnalysisConfig
) -> list[StudentResponse]:
    """Responses that enter the analysis under the given configuration."""
    if config.exclude_incomplete_data:
        return [r for r in responses if r.is_complete]
    return list(responses)


def score_distribution(
    responses: Sequence[StudentResponse],
) -> ScoreDistribution:
    """Distribution of total / max-possible score ratios."""
    ratios = np.array([score_ratio(r) for r in responses], dtype=np.float64)
    return ScoreDistribution(
        mean=stats.mean(ratios),
        median=stats.median(ratios),
        standard_deviation=stats.standard_deviation(ratios),
        skewness=stats.skewness(ratios),
        kurtosis=stats.kurtosis(ratios),
        min=float(ratios.min()),
        max=float(ratios.max()),
        quartiles=stats.quartiles(ratios),
    )


def item_score_matrix(
    responses: Sequence[StudentResponse], question_ids: Sequence[str]
) -> NDArray[np.float64]:
    """Points awarded per response and question, 0 where not attempted."""
    column = {qid: j for j, qid in enumerate(question_ids)}
    matrix = np.zeros((len(responses), len(question_ids)), dtype=np.float64)
    for i, response in enumerate(responses):
        for question_response in response.question_responses:
            j = column.get(question_response.question_id)
            if j is not None:
                matrix[i, j] = question_response.points
    return matrix


def summarize_by_question_type(
    question_results: Sequence[QuestionAnalysisResult],
) -> tuple[QuestionTypeSummary, ...]:
    summaries = []
    for question_type in QuestionType:
        group = [
            r for r in question_results if r.question_type == question_type
        ]
        if not group:
            continue
        summaries.append(
            QuestionTypeSummary(
                question_type=question_type,
                question_count=len(group),
                average_difficulty=_average(
                    [r.difficulty_index for r in group]
                ),
                average_discrimination=_average(
                    [r.discrimination_index for r in group]
                ),
                average_point_biserial=_average(
                    [r.point_biserial_correlation for r in group]
                ),
            )
        )
    return tuple(summaries)


def summarize(
    question_results: Sequence[QuestionAnalysisResult],
    responses: Sequence[StudentResponse],
    config: AnalysisConfig,
) -> AnalysisSummary:
    item_scores = item_score_matrix(
        responses, [r.question_id for r in question_results]
    )
    return AnalysisSummary(
        average_difficulty=_average(
            [r.difficulty_index for r in question_results]
        ),
        average_discrimination=_average(
            [r.discrimination_index for r in question_results]
        ),
        average_point_biserial=_average(
            [r.point_biserial_correlation for r in question_results]
        ),
        reliability_metrics=calculate_reliability(
            item_scores, config.confidence_level
        ),
        score_distribution=score_distribution(responses),
        by_question_type=(
            summarize_by_question_type(question_results)
            if config.group_by_question_type
            else None
        ),
    )


def analyze_exam(
    variants: Sequence[ExamVariant],
    responses: Sequence[StudentResponse],
    config: AnalysisConfig | None = None,
) -> AnalysisResult:
    """
    Analyze the responses to one exam, across all of its variants.

    Args:
        variants: Variant definitions sharing one exam. May be empty, in
            which case questions are analyzed without definitions.
        responses: Every graded response to analyze.
        config: Analysis options. Defaults to AnalysisConfig().

    Returns:
        AnalysisResult whose metadata.student_responses are exactly the
        responses analyzed.

    Raises:
        NoResponsesError: If there are no responses, or none survive
            filtering.
    """
    config = config if config is not None else AnalysisConfig()

    if not responses:
        raise NoResponsesError()

    filtered = filter_responses(responses, config)
    if not filtered:
        raise NoResponsesError()

    excluded = len(responses) - len(filtered)
    if excluded:
        logger.warning(f"Excluded {excluded} incomplete responses")

    meets_min_sample_size = len(filtered) >= config.min_sample_size
    if not meets_min_sample_size:
        logger.warning(
            f"Sample size {len(filtered)} is below the minimum of "
            f"{config.min_sample_size}; item statistics are unreliable"
        )

    logger.info(
        f"Analyzing {len(filtered)} responses across "
        f"{len(variants)} variant definitions"
    )

    question_results = analyze_questions(filtered, variants, config)
    logger.info(f"Analyzed {len(question_results)} questions")

    summary = summarize(question_results, filtered, config)

    first = variants[0] if variants else None
    exam_title = (
        config.exam_title
        or (first.exam_title if first is not None else None)
        or UNKNOWN_EXAM_TITLE
    )

    return AnalysisResult(
        exam_id=(first.exam_id if first is not None else None)
        or UNKNOWN_EXAM_ID,
        exam_title=exam_title,
        analysis_config=config,
        question_results=tuple(question_results),
        summary=summary,
        metadata=AnalysisMetadata(
            total_students=len({r.student_id for r in responses}),
            total_variants=len({r.variant_code for r in responses}),
            analysis_date=datetime.now(UTC),
            sample_size=len(filtered),
            excluded_students=excluded,
            meets_min_sample_size=meets_min_sample_size,
            student_responses=tuple(filtered),
        ),
    )
