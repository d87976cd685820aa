"""
Collusion flagging for pairs of students.

Each pair gets a probability-like score combining five signals:

    p = sqrt(Sv * Ss / (Sv + Ss) * ((s1 + s2) + max(c1, c2)) / s_avg * |Q1 * Q2|)

    Sv      similarity of the two students' variants (optionally inverted)
    Ss      similarity of their answers
    s1, s2  their percentage scores
    c1, c2  their cross grades: the percentage each would get when graded
            on the other's variant key (0 on a shared variant)
    s_avg   class average percentage
    Q1, Q2  average point-biserial correlation of each student's variant

The score is clipped to [0, 0.999]. It stays small unless several signals
are strong at once, so pairs above ~0.7 deserve a closer look.
"""

import logging
from collections.abc import Sequence

import numpy as np

from exam_analysis.analysis.answers import (
    build_variant_index,
    presented_letter,
)
from exam_analysis.analysis.data_models import AnalysisResult
from exam_analysis.core.data_models import ExamVariant, StudentResponse
from exam_analysis.core.utils import letter_to_index, score_ratio
from exam_analysis.detection.data_models import (
    FlaggedPair,
    FlaggingConfig,
    FlaggingSummary,
    IntegrityReport,
    RiskLevel,
)

logger = logging.getLogger(__name__)

MAX_PROBABILITY = 0.999
MIN_CLASS_AVERAGE = 0.1


def flagging_probability(
    variant_similarity: float,
    response_similarity: float,
    student1_score: float,
    student2_score: float,
    student1_cross_grade: float,
    student2_cross_grade: float,
    class_average_score: float,
    student1_biserial: float,
    student2_biserial: float,
) -> float:
    """
    Combine pair signals into a score in [0, 0.999].

    Similarities are clipped to [0, 1], scores and cross grades to
    [0, 100], biserial averages to >= 0 and the class average to >= 0.1.
    """
    sv = float(np.clip(variant_similarity, 0, 1))
    ss = float(np.clip(response_similarity, 0, 1))
    if sv + ss == 0:
        return 0.0

    s1 = float(np.clip(student1_score, 0, 100))
    s2 = float(np.clip(student2_score, 0, 100))
    c1 = float(np.clip(student1_cross_grade, 0, 100))
    c2 = float(np.clip(student2_cross_grade, 0, 100))
    s_avg = max(MIN_CLASS_AVERAGE, class_average_score)
    q1 = max(0.0, student1_biserial)
    q2 = max(0.0, student2_biserial)

    similarity_component = sv * ss / (sv + ss)
    score_component = ((s1 + s2) + max(c1, c2)) / s_avg
    biserial_component = abs(q1 * q2)

    probability = np.sqrt(
        similarity_component * score_component * biserial_component
    )
    return float(np.clip(probability, 0, MAX_PROBABILITY))


def cross_variant_grade(
    response: StudentResponse, target: ExamVariant
) -> float:
    """
    Percentage a student would score when graded on another variant's key.

    Letter answers are compared with the letter under which the key
    appears on the target variant; text answers with the key text.
    Questions the target variant does not define count as incorrect.
    """
    total = len(response.question_responses)
    if total == 0:
        return 0.0

    correct = 0
    for question_response in response.question_responses:
        question = target.question_by_id(question_response.question_id)
        if question is None:
            continue
        answer = question_response.student_answer
        if letter_to_index(answer) is not None and question.options:
            key = presented_letter(
                question.options,
                target.option_permutation(question.id),
                question.correct_answer,
            )
        else:
            key = question.correct_answer
        if answer == key:
            correct += 1

    return 100.0 * correct / total


def _variant_biserials(
    variant_results: Sequence[AnalysisResult],
) -> dict[str, float]:
    biserials: dict[str, float] = {}
    for result in variant_results:
        average = result.summary.average_point_biserial
        for response in result.metadata.student_responses:
            biserials.setdefault(
                response.variant_code,
                average if average is not None else 0.0,
            )
    return biserials


def flag_submission_pairs(
    analysis: AnalysisResult,
    variant_results: Sequence[AnalysisResult],
    variants: Sequence[ExamVariant],
    report: IntegrityReport,
    config: FlaggingConfig | None = None,
) -> list[FlaggedPair]:
    """
    Score every unordered pair of students for possible collusion.

    Args:
        analysis: Whole-exam analysis; supplies each student's score and
            the class average.
        variant_results: Per-variant analyses; supply the average
            point-biserial of each variant.
        variants: Variant definitions, for cross grading.
        report: Student and variant similarity matrices.
        config: Thresholds and options. Defaults to FlaggingConfig().

    Returns:
        All pairs, highest probability first. A missing variant similarity
        or variant analysis contributes 0.
    """
    config = config if config is not None else FlaggingConfig()

    # Later records of the same student win, as in the similarity matrix
    records: dict[str, StudentResponse] = {
        r.student_id: r for r in analysis.metadata.student_responses
    }
    percentages = [
        100.0 * score_ratio(r) for r in analysis.metadata.student_responses
    ]
    class_average = float(np.mean(percentages)) if percentages else 0.0
    biserials = _variant_biserials(variant_results)
    variant_index = build_variant_index(variants)

    students = list(report.student_similarity)
    pairs: list[FlaggedPair] = []
    for i, student1 in enumerate(students):
        for student2 in students[i + 1 :]:
            record1 = records.get(student1)
            record2 = records.get(student2)
            if record1 is None or record2 is None:
                logger.warning(
                    f"Missing student data for pair: {student1} vs {student2}"
                )
                continue

            code1 = record1.variant_code
            code2 = record2.variant_code
            variant_similarity = report.variant_similarity.get(
                code1, {}
            ).get(code2, 0.0)
            if config.invert_variant_similarity:
                variant_similarity = 1.0 - variant_similarity

            cross_grade1 = cross_grade2 = 0.0
            if code1 != code2:
                target2 = variant_index.get(code2)
                target1 = variant_index.get(code1)
                if target2 is not None:
                    cross_grade1 = cross_variant_grade(record1, target2)
                if target1 is not None:
                    cross_grade2 = cross_variant_grade(record2, target1)

            score1 = 100.0 * score_ratio(record1)
            score2 = 100.0 * score_ratio(record2)
            response_similarity = report.student_similarity[student1][
                student2
            ]
            biserial1 = biserials.get(code1, 0.0)
            biserial2 = biserials.get(code2, 0.0)

            probability = flagging_probability(
                variant_similarity,
                response_similarity,
                score1,
                score2,
                cross_grade1,
                cross_grade2,
                class_average,
                biserial1,
                biserial2,
            )
            pairs.append(
                FlaggedPair(
                    student1=student1,
                    student2=student2,
                    probability=probability,
                    risk_level=config.risk_level(probability),
                    student1_variant=code1,
                    student2_variant=code2,
                    student1_score=score1,
                    student2_score=score2,
                    variant_similarity=variant_similarity,
                    response_similarity=response_similarity,
                    class_average_score=class_average,
                    student1_biserial=biserial1,
                    student2_biserial=biserial2,
                    student1_cross_grade=cross_grade1,
                    student2_cross_grade=cross_grade2,
                )
            )

    pairs.sort(key=lambda p: p.probability, reverse=True)
    n_flagged = sum(1 for p in pairs if p.risk_level != RiskLevel.NONE)
    logger.info(f"Scored {len(pairs)} pairs, {n_flagged} flagged")
    return pairs


def flagging_summary(
    pairs: Sequence[FlaggedPair], config: FlaggingConfig | None = None
) -> FlaggingSummary:
    """Summarize the pairs at or above the low-risk threshold."""
    config = config if config is not None else FlaggingConfig()
    flagged = [p for p in pairs if p.probability >= config.low_risk_threshold]
    n = len(flagged)
    students = {p.student1 for p in flagged} | {p.student2 for p in flagged}
    return FlaggingSummary(
        total_flagged=n,
        high_risk=sum(1 for p in flagged if p.risk_level == RiskLevel.HIGH),
        medium_risk=sum(
            1 for p in flagged if p.risk_level == RiskLevel.MEDIUM
        ),
        low_risk=sum(1 for p in flagged if p.risk_level == RiskLevel.LOW),
        unique_students_involved=len(students),
        average_probability=(
            sum(p.probability for p in flagged) / n if n else 0.0
        ),
        average_similarity=(
            sum(p.response_similarity for p in flagged) / n if n else 0.0
        ),
    )
