"""
Data models for the engine's input records.

This module defines the data structures for:
- ExamVariant / QuestionDefinition: how an exam was presented
- StudentResponse / QuestionResponse: graded student attempts
- AnswerMatrix: encoded answers used by the similarity kernels
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field, field_validator

from exam_analysis.core.constants import MISSING_VALUE


class QuestionType(StrEnum):
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    TRUE_FALSE = "TRUE_FALSE"


def _validate_permutation(values: Sequence[int], name: str) -> None:
    if sorted(values) != list(range(len(values))):
        raise ValueError(
            f"{name} must be a permutation of 0..{len(values) - 1}, "
            f"got {list(values)}"
        )


def _validate_distinct_indices(values: Sequence[int], name: str) -> None:
    if any(v < 0 for v in values) or len(set(values)) != len(values):
        raise ValueError(
            f"{name} must hold distinct non-negative indices, "
            f"got {list(values)}"
        )


class QuestionDefinition(BaseModel):
    """
    A question as defined in one exam variant.

    Attributes:
        id: Stable question identity shared by every variant of the exam.
        text: Question stem.
        question_type: Multiple-choice or true/false.
        options: Ordered answer options in their original order. Empty for
            non multiple-choice questions.
        correct_answer: Text of the keyed answer.
        points: Points available for the question.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    text: str = ""
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    options: tuple[str, ...] = ()
    correct_answer: str
    points: float = Field(default=1.0, gt=0)


class VariantMetadata(BaseModel):
    """
    How a variant was randomized.

    Attributes:
        question_order: Original question indices in the order presented.
            A variant drawn from a larger bank may skip indices.
        option_permutations: Per question id, the original option position
            of each presented option position.
    """

    model_config = ConfigDict(frozen=True)

    question_order: tuple[int, ...] | None = None
    option_permutations: dict[str, tuple[int, ...]] | None = None

    @field_validator("question_order")
    @classmethod
    def _validate_question_order(
        cls, value: tuple[int, ...] | None
    ) -> tuple[int, ...] | None:
        if value is not None:
            _validate_distinct_indices(value, "question_order")
        return value

    @field_validator("option_permutations")
    @classmethod
    def _validate_option_permutations(
        cls, value: dict[str, tuple[int, ...]] | None
    ) -> dict[str, tuple[int, ...]] | None:
        if value is not None:
            for question_id, permutation in value.items():
                _validate_permutation(
                    permutation, f"option permutation for {question_id}"
                )
        return value


class ExamVariant(BaseModel):
    """One randomized presentation of an exam."""

    model_config = ConfigDict(frozen=True)

    id: str
    exam_id: str | None = None
    variant_code: str = ""
    exam_title: str | None = None
    questions: tuple[QuestionDefinition, ...] = ()
    metadata: VariantMetadata = VariantMetadata()

    def question_by_id(self, question_id: str) -> QuestionDefinition | None:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def option_permutation(self, question_id: str) -> tuple[int, ...] | None:
        permutations = self.metadata.option_permutations
        if permutations is None:
            return None
        return permutations.get(question_id)


class QuestionResponse(BaseModel):
    """
    One student's graded answer to one question.

    `is_correct` is decided at grading time and trusted as is.
    """

    model_config = ConfigDict(frozen=True)

    question_id: str
    student_answer: str
    is_correct: bool
    points: float = Field(ge=0)
    max_points: float = Field(ge=0)
    response_time: float | None = None


class StudentResponse(BaseModel):
    """One student's full attempt at one variant."""

    model_config = ConfigDict(frozen=True)

    student_id: str
    variant_code: str
    question_responses: tuple[QuestionResponse, ...] = ()
    total_score: float
    max_possible_score: float = Field(ge=0)
    completion_time: float | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_complete(self) -> bool:
        """Submitted and answered at least one question."""
        return (
            self.completed_at is not None and len(self.question_responses) > 0
        )

    def response_for(self, question_id: str) -> QuestionResponse | None:
        for question_response in self.question_responses:
            if question_response.question_id == question_id:
                return question_response
        return None


@dataclass(frozen=True)
class AnswerMatrix:
    """
    Student answers encoded for pairwise comparison.

    Attributes:
        student_ids: Row labels, one per distinct student.
        question_ids: Column labels, one per distinct question id (sorted).
        codes: Array of shape (n_students, n_questions). Equal codes within a
            column mean textually identical answers. Questions a student did
            not attempt hold MISSING_VALUE.
    """

    student_ids: tuple[str, ...]
    question_ids: tuple[str, ...]
    codes: NDArray[np.int32]

    def __post_init__(self) -> None:
        """Validate answer matrix."""
        if self.codes.ndim != 2:
            raise ValueError(f"codes must be 2D, got shape {self.codes.shape}")
        if self.codes.shape != (len(self.student_ids), len(self.question_ids)):
            raise ValueError(
                f"codes shape {self.codes.shape} inconsistent with "
                f"{len(self.student_ids)} students and "
                f"{len(self.question_ids)} questions"
            )
        if self.codes.size > 0 and self.codes.min() < MISSING_VALUE:
            raise ValueError(
                f"Answer codes must be >= {MISSING_VALUE}, "
                f"got min {self.codes.min()}"
            )

    @classmethod
    def from_responses(
        cls, responses: Sequence[StudentResponse]
    ) -> "AnswerMatrix":
        """
        Encode answers by question id, independent of presentation order.

        Repeated records for the same student merge into one row; a later
        answer to the same question overwrites an earlier one.
        """
        answers_by_student: dict[str, dict[str, str]] = {}
        for response in responses:
            answers = answers_by_student.setdefault(response.student_id, {})
            for question_response in response.question_responses:
                answers[question_response.question_id] = (
                    question_response.student_answer
                )

        student_ids = tuple(answers_by_student)
        question_ids = tuple(
            sorted(
                {
                    question_id
                    for answers in answers_by_student.values()
                    for question_id in answers
                }
            )
        )
        column = {question_id: j for j, question_id in enumerate(question_ids)}

        answer_codes: dict[str, int] = {}
        codes = np.full(
            (len(student_ids), len(question_ids)),
            MISSING_VALUE,
            dtype=np.int32,
        )
        for i, student_id in enumerate(student_ids):
            for question_id, answer in answers_by_student[student_id].items():
                code = answer_codes.setdefault(answer, len(answer_codes))
                codes[i, column[question_id]] = code

        return cls(
            student_ids=student_ids, question_ids=question_ids, codes=codes
        )

    @property
    def n_students(self) -> int:
        """Number of students (rows)."""
        return self.codes.shape[0]

    @property
    def n_questions(self) -> int:
        """Number of questions (columns)."""
        return self.codes.shape[1]

    @property
    def missing_mask(self) -> NDArray[np.bool_]:
        """Boolean mask where True indicates an unattempted question."""
        result: NDArray[np.bool_] = self.codes == MISSING_VALUE
        return result
