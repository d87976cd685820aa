"""
Core shared types and utilities for the exam analysis engine.

This module provides the input records (exam variants and graded student
responses) consumed by both the psychometric analysis and the integrity
detection subpackages, plus the encoded answer matrix used by the
similarity kernels.
"""

from exam_analysis.core.data_models import (
    AnswerMatrix,
    ExamVariant,
    QuestionDefinition,
    QuestionResponse,
    QuestionType,
    StudentResponse,
    VariantMetadata,
)
from exam_analysis.core.utils import (
    index_to_letter,
    letter_to_index,
    score_ratio,
)

__all__ = [
    "AnswerMatrix",
    "ExamVariant",
    "QuestionDefinition",
    "QuestionResponse",
    "QuestionType",
    "StudentResponse",
    "VariantMetadata",
    "index_to_letter",
    "letter_to_index",
    "score_ratio",
]
