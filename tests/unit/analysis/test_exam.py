"""Tests for exam-level analysis."""

from datetime import UTC, datetime

import numpy as np
import pytest

from exam_analysis.analysis import (
    AnalysisConfig,
    NoResponsesError,
    analyze_exam,
)
from exam_analysis.analysis.exam import (
    filter_responses,
    item_score_matrix,
    score_distribution,
)
from exam_analysis.core.data_models import (
    ExamVariant,
    QuestionDefinition,
    QuestionResponse,
    QuestionType,
    StudentResponse,
)

SUBMITTED = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)

QUESTIONS = (
    QuestionDefinition(
        id="q1", options=("a", "b", "c", "d"), correct_answer="a"
    ),
    QuestionDefinition(
        id="q2", options=("a", "b", "c", "d"), correct_answer="b"
    ),
    QuestionDefinition(
        id="q3",
        question_type=QuestionType.TRUE_FALSE,
        options=("True", "False"),
        correct_answer="True",
    ),
)

VARIANT = ExamVariant(
    id="v1",
    exam_id="exam-1",
    variant_code="A",
    exam_title="Midterm",
    questions=QUESTIONS,
)


def _student(
    student_id: str,
    correct: list[bool],
    variant_code: str = "A",
    completed: bool = True,
) -> StudentResponse:
    keys = ["A", "B", "True"]
    wrong = ["C", "D", "False"]
    question_responses = tuple(
        QuestionResponse(
            question_id=question.id,
            student_answer=keys[i] if ok else wrong[i],
            is_correct=ok,
            points=float(ok),
            max_points=1,
        )
        for i, (question, ok) in enumerate(
            zip(QUESTIONS, correct, strict=False)
        )
    )
    return StudentResponse(
        student_id=student_id,
        variant_code=variant_code,
        question_responses=question_responses,
        total_score=float(sum(correct)),
        max_possible_score=float(len(correct)),
        completed_at=SUBMITTED if completed else None,
    )


def _class(n: int) -> list[StudentResponse]:
    """n students; stronger students answer more questions correctly."""
    return [
        _student(f"s{i}", [i % 4 > 0, i % 4 > 1, i % 4 > 2]) for i in range(n)
    ]


class TestAnalyzeExam:
    def test_result(self) -> None:
        responses = _class(12)
        result = analyze_exam([VARIANT], responses)

        assert result.exam_id == "exam-1"
        assert result.exam_title == "Midterm"
        assert [q.question_id for q in result.question_results] == [
            "q1",
            "q2",
            "q3",
        ]
        assert result.metadata.total_students == 12
        assert result.metadata.total_variants == 1
        assert result.metadata.sample_size == 12
        assert result.metadata.excluded_students == 0
        assert result.metadata.meets_min_sample_size
        assert result.metadata.student_responses == tuple(responses)

        q1 = result.question_result("q1")
        assert q1 is not None
        assert q1.difficulty_index == pytest.approx(0.75)
        assert q1.discrimination_index is not None
        assert q1.discrimination_index > 0
        assert result.question_result("q3") is not None
        assert result.question_result("missing") is None

    def test_summary(self) -> None:
        result = analyze_exam([VARIANT], _class(12))
        summary = result.summary

        assert summary.average_difficulty == pytest.approx(
            (0.75 + 0.5 + 0.25) / 3
        )
        assert summary.average_discrimination is not None
        assert summary.reliability_metrics is not None
        assert summary.reliability_metrics.n_items == 3
        assert summary.reliability_metrics.cronbachs_alpha > 0
        assert summary.score_distribution.mean == pytest.approx(0.5)
        assert summary.score_distribution.min == 0.0
        assert summary.score_distribution.max == 1.0
        assert summary.by_question_type is None

    def test_config_title_overrides(self) -> None:
        config = AnalysisConfig(exam_title="Final")
        assert analyze_exam([VARIANT], _class(4), config).exam_title == "Final"

    def test_without_variants(self) -> None:
        result = analyze_exam([], _class(4))
        assert result.exam_id == "unknown"
        assert result.exam_title == "Unknown Exam"
        assert result.question_result("q1") is not None

    def test_no_responses(self) -> None:
        with pytest.raises(NoResponsesError, match="No student responses"):
            analyze_exam([VARIANT], [])

    def test_no_variants_and_no_responses(self) -> None:
        with pytest.raises(
            NoResponsesError,
            match="No student responses found for analysis.",
        ):
            analyze_exam([], [])

    def test_two_respondents(self) -> None:
        responses = [
            _student("s1", [True, False, True]),
            _student("s2", [False, True, True]),
        ]
        result = analyze_exam([VARIANT], responses)
        distribution = result.summary.score_distribution

        assert distribution.skewness is None
        assert distribution.kurtosis is None
        assert result.summary.reliability_metrics is None

    def test_single_question_has_no_reliability(self) -> None:
        responses = [_student(f"s{i}", [i % 2 == 0]) for i in range(6)]
        result = analyze_exam([], responses)

        assert [q.question_id for q in result.question_results] == ["q1"]
        assert result.summary.reliability_metrics is None

    def test_identical_totals_do_not_discriminate(self) -> None:
        patterns = [
            [True, False, False],
            [False, True, False],
            [False, False, True],
            [True, False, False],
            [False, True, False],
            [False, False, True],
        ]
        responses = [
            _student(f"s{i}", pattern) for i, pattern in enumerate(patterns)
        ]
        result = analyze_exam([VARIANT], responses)

        assert len(result.question_results) == 3
        for question in result.question_results:
            assert question.discrimination_index == 0.0

    def test_question_everyone_answered_correctly(self) -> None:
        responses = [
            _student(f"s{i}", [True, i % 3 > 0, i % 3 > 1]) for i in range(9)
        ]
        q1 = analyze_exam([VARIANT], responses).question_result("q1")

        assert q1 is not None
        assert q1.difficulty_index == 1.0
        assert q1.point_biserial_correlation == 0.0

    def test_ratios_equal_up_to_rounding(self) -> None:
        # 0.1 + 0.2 != 0.3 in floating point
        totals = [0.1 + 0.2, 0.3, 0.3, 0.3]
        responses = [
            _student(f"s{i}", [True]).model_copy(
                update={"total_score": total}
            )
            for i, total in enumerate(totals)
        ]
        distribution = analyze_exam(
            [VARIANT], responses
        ).summary.score_distribution

        assert distribution.skewness == 0.0
        assert distribution.kurtosis == 0.0
        assert np.isfinite(distribution.standard_deviation)

    def test_exclude_incomplete(self) -> None:
        responses = _class(6) + [_student("late", [True] * 3, completed=False)]
        config = AnalysisConfig(exclude_incomplete_data=True)
        result = analyze_exam([VARIANT], responses, config)

        assert result.metadata.total_students == 7
        assert result.metadata.sample_size == 6
        assert result.metadata.excluded_students == 1
        assert all(
            r.student_id != "late" for r in result.metadata.student_responses
        )

    def test_everything_excluded(self) -> None:
        responses = [_student("s1", [True] * 3, completed=False)]
        config = AnalysisConfig(exclude_incomplete_data=True)
        with pytest.raises(NoResponsesError):
            analyze_exam([VARIANT], responses, config)

    def test_small_sample(self) -> None:
        # Score ratios 0.5, 1.0, 0.0
        two_questions = [
            _student("s1", [True, False]),
            _student("s2", [True, True]),
            _student("s3", [False, False]),
        ]
        result = analyze_exam([VARIANT], two_questions)
        distribution = result.summary.score_distribution

        assert not result.metadata.meets_min_sample_size
        assert distribution.skewness == pytest.approx(0.0)
        assert distribution.kurtosis is None
        assert distribution.mean == pytest.approx(0.5)
        assert result.summary.reliability_metrics is not None

    def test_disabled_metrics(self) -> None:
        config = AnalysisConfig(
            include_difficulty_index=False, include_point_biserial=False
        )
        result = analyze_exam([VARIANT], _class(8), config)
        assert result.summary.average_difficulty is None
        assert result.summary.average_point_biserial is None
        assert result.summary.average_discrimination is not None

    def test_by_question_type(self) -> None:
        config = AnalysisConfig(group_by_question_type=True)
        result = analyze_exam([VARIANT], _class(8), config)
        groups = result.summary.by_question_type
        assert groups is not None
        counts = {g.question_type: g.question_count for g in groups}
        assert counts == {
            QuestionType.MULTIPLE_CHOICE: 2,
            QuestionType.TRUE_FALSE: 1,
        }


class TestHelpers:
    def test_filter_responses(self) -> None:
        responses = [
            _student("s1", [True]),
            _student("s2", [True], completed=False),
        ]
        assert len(filter_responses(responses, AnalysisConfig())) == 2
        kept = filter_responses(
            responses, AnalysisConfig(exclude_incomplete_data=True)
        )
        assert [r.student_id for r in kept] == ["s1"]

    def test_item_score_matrix(self) -> None:
        responses = [_student("s1", [True, False]), _student("s2", [True])]
        matrix = item_score_matrix(responses, ["q1", "q2", "q3"])
        np.testing.assert_array_equal(
            matrix, [[1.0, 0.0, 0.0], [1.0, 0.0, 0.0]]
        )

    def test_score_distribution(self) -> None:
        responses = [
            _student("s1", [True, True, True]),
            _student("s2", [True, False, False]),
            _student("s3", [False, False, False]),
            _student("s4", [True, True, False]),
        ]
        distribution = score_distribution(responses)
        assert distribution.mean == pytest.approx(0.5)
        assert distribution.median == pytest.approx(0.5)
        assert distribution.quartiles == pytest.approx((1 / 6, 0.5, 5 / 6))
        assert distribution.kurtosis is not None
