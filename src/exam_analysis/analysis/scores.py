"""
Per-student score rows and percentile-band filtering for reports.
"""

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict, Field, model_validator

from exam_analysis.core.data_models import StudentResponse
from exam_analysis.core.utils import score_ratio


class StudentScore(BaseModel):
    """
    One student's result as shown in score reports.

    Attributes:
        percentage: Total score as a percentage of the maximum possible.
        questions_correct: Question responses graded correct.
        total_questions: Question responses recorded.
        rank: 1-based position after sorting by percentage, highest first.
            None until ranked.
    """

    model_config = ConfigDict(frozen=True)

    student_id: str
    variant_code: str
    total_score: float
    max_possible_score: float
    percentage: float
    questions_correct: int
    total_questions: int
    rank: int | None = None


class PercentileRange(BaseModel):
    """
    A band of the class ranked by percentage.

    `lower=75, upper=100` selects the top quarter, `lower=0, upper=25` the
    bottom quarter.
    """

    model_config = ConfigDict(frozen=True)

    lower: float = Field(ge=0, le=100)
    upper: float = Field(ge=0, le=100)
    label: str | None = None

    @model_validator(mode="after")
    def _check_order(self) -> "PercentileRange":
        if self.lower > self.upper:
            raise ValueError(
                f"lower ({self.lower}) must be <= upper ({self.upper})"
            )
        return self

    @property
    def display_label(self) -> str:
        if self.label:
            return self.label
        return f"{self.lower:g}% - {self.upper:g}%"


class FilteredStudentData(BaseModel):
    model_config = ConfigDict(frozen=True)

    students: tuple[StudentScore, ...]
    total_students: int
    average_score: float
    highest_score: float
    lowest_score: float


def build_student_scores(
    responses: Sequence[StudentResponse],
) -> list[StudentScore]:
    """One StudentScore per response, in input order."""
    return [
        StudentScore(
            student_id=response.student_id,
            variant_code=response.variant_code,
            total_score=response.total_score,
            max_possible_score=response.max_possible_score,
            percentage=100.0 * score_ratio(response),
            questions_correct=sum(
                1 for q in response.question_responses if q.is_correct
            ),
            total_questions=len(response.question_responses),
        )
        for response in responses
    ]


def _rank_order(students: Sequence[StudentScore]) -> list[StudentScore]:
    return sorted(students, key=lambda s: s.percentage, reverse=True)


def calculate_percentile(
    sorted_students: Sequence[StudentScore], percentile: float
) -> float:
    """
    Percentage found at a percentile position of an already sorted list.

    Returns 0.0 for an empty list.
    """
    if not sorted_students:
        return 0.0
    n = len(sorted_students)
    index = int((percentile / 100) * (n - 1))
    index = max(0, min(index, n - 1))
    return sorted_students[index].percentage


def filter_students_by_percentile(
    students: Sequence[StudentScore], percentile_range: PercentileRange
) -> list[StudentScore]:
    """
    Students whose rank falls inside a percentile band.

    Students are ranked highest percentage first, so the band
    [upper, lower] counts down from the top of the class.
    """
    if not students:
        return []

    ranked = _rank_order(students)
    n = len(ranked)
    start = int(((100 - percentile_range.upper) / 100) * n)
    end = int(((100 - percentile_range.lower) / 100) * n)
    start = min(start, n - 1)
    # A non-empty band always keeps at least one student
    end = max(end, start + 1)
    return ranked[start:end]


def apply_percentile_filter(
    students: Sequence[StudentScore],
    percentile_range: PercentileRange | None,
) -> FilteredStudentData:
    """
    Rank students, optionally keep a percentile band, and summarize.

    Ranks are assigned within the returned rows.
    """
    if percentile_range is None:
        selected = _rank_order(students)
    else:
        selected = filter_students_by_percentile(students, percentile_range)

    ranked = tuple(
        student.model_copy(update={"rank": i + 1})
        for i, student in enumerate(selected)
    )
    n = len(ranked)
    return FilteredStudentData(
        students=ranked,
        total_students=n,
        average_score=sum(s.percentage for s in ranked) / n if n else 0.0,
        highest_score=ranked[0].percentage if n else 0.0,
        lowest_score=ranked[-1].percentage if n else 0.0,
    )
