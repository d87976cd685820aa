"""Tests for student score rows and percentile filtering."""

import pytest
from pydantic import ValidationError

from exam_analysis.analysis.scores import (
    PercentileRange,
    StudentScore,
    apply_percentile_filter,
    build_student_scores,
    calculate_percentile,
    filter_students_by_percentile,
)
from exam_analysis.core.data_models import QuestionResponse, StudentResponse


def _score(student_id: str, percentage: float) -> StudentScore:
    return StudentScore(
        student_id=student_id,
        variant_code="A",
        total_score=percentage / 10,
        max_possible_score=10,
        percentage=percentage,
        questions_correct=0,
        total_questions=10,
    )


STUDENTS = [
    _score("s70", 70),
    _score("s90", 90),
    _score("s60", 60),
    _score("s80", 80),
]


class TestBuildStudentScores:
    def test_rows(self) -> None:
        response = StudentResponse(
            student_id="s1",
            variant_code="B",
            question_responses=(
                QuestionResponse(
                    question_id="q1",
                    student_answer="A",
                    is_correct=True,
                    points=2,
                    max_points=2,
                ),
                QuestionResponse(
                    question_id="q2",
                    student_answer="C",
                    is_correct=False,
                    points=0,
                    max_points=2,
                ),
            ),
            total_score=2,
            max_possible_score=4,
        )
        (row,) = build_student_scores([response])
        assert row.percentage == pytest.approx(50.0)
        assert row.questions_correct == 1
        assert row.total_questions == 2
        assert row.rank is None


class TestPercentileRange:
    def test_label(self) -> None:
        assert PercentileRange(lower=75, upper=100).display_label == (
            "75% - 100%"
        )
        assert (
            PercentileRange(lower=0, upper=25, label="Bottom").display_label
            == "Bottom"
        )

    def test_order(self) -> None:
        with pytest.raises(ValidationError, match="must be <= upper"):
            PercentileRange(lower=60, upper=40)

    def test_bounds(self) -> None:
        with pytest.raises(ValidationError):
            PercentileRange(lower=-5, upper=40)


class TestFilterStudentsByPercentile:
    def test_top_quarter(self) -> None:
        band = PercentileRange(lower=75, upper=100)
        selected = filter_students_by_percentile(STUDENTS, band)
        assert [s.student_id for s in selected] == ["s90"]

    def test_bottom_quarter(self) -> None:
        band = PercentileRange(lower=0, upper=25)
        selected = filter_students_by_percentile(STUDENTS, band)
        assert [s.student_id for s in selected] == ["s60"]

    def test_top_half(self) -> None:
        band = PercentileRange(lower=50, upper=100)
        selected = filter_students_by_percentile(STUDENTS, band)
        assert [s.student_id for s in selected] == ["s90", "s80"]

    def test_whole_class(self) -> None:
        band = PercentileRange(lower=0, upper=100)
        assert len(filter_students_by_percentile(STUDENTS, band)) == 4

    def test_narrow_band_keeps_one(self) -> None:
        band = PercentileRange(lower=99, upper=100)
        assert len(filter_students_by_percentile(STUDENTS, band)) == 1

    def test_empty(self) -> None:
        band = PercentileRange(lower=0, upper=100)
        assert filter_students_by_percentile([], band) == []


class TestCalculatePercentile:
    def test_position(self) -> None:
        ascending = sorted(STUDENTS, key=lambda s: s.percentage)
        assert calculate_percentile(ascending, 0) == 60
        assert calculate_percentile(ascending, 50) == 70
        assert calculate_percentile(ascending, 100) == 90

    def test_empty(self) -> None:
        assert calculate_percentile([], 50) == 0.0


class TestApplyPercentileFilter:
    def test_no_band(self) -> None:
        data = apply_percentile_filter(STUDENTS, None)
        assert [s.rank for s in data.students] == [1, 2, 3, 4]
        assert data.students[0].student_id == "s90"
        assert data.total_students == 4
        assert data.average_score == pytest.approx(75.0)
        assert data.highest_score == 90
        assert data.lowest_score == 60

    def test_band(self) -> None:
        data = apply_percentile_filter(
            STUDENTS, PercentileRange(lower=0, upper=50)
        )
        assert [s.student_id for s in data.students] == ["s70", "s60"]
        assert [s.rank for s in data.students] == [1, 2]
        assert data.average_score == pytest.approx(65.0)

    def test_empty(self) -> None:
        data = apply_percentile_filter([], None)
        assert data.total_students == 0
        assert data.average_score == 0.0
        assert data.highest_score == 0.0
