"""
Loading utilities for exam variant definitions and graded responses.
"""

import json
from pathlib import Path

import pandas as pd
from pydantic import TypeAdapter

from exam_analysis.core.data_models import (
    ExamVariant,
    QuestionResponse,
    StudentResponse,
)

REQUIRED_RESPONSE_COLUMNS = (
    "student_id",
    "variant_code",
    "question_id",
    "student_answer",
    "is_correct",
    "points",
    "max_points",
)

_TRUE_STRINGS = {"true", "1", "yes", "y", "t"}
_FALSE_STRINGS = {"false", "0", "no", "n", "f"}


def _parse_bool(value: object) -> bool:
    """Parse a CSV truth value."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ValueError(f"Invalid boolean value in is_correct: '{value}'")


def _first_present(group: pd.DataFrame, column: str) -> object | None:
    if column not in group.columns:
        return None
    values = group[column].dropna()
    if values.empty:
        return None
    return values.iloc[0]


def load_responses_csv(path: Path) -> list[StudentResponse]:
    """Load graded responses from a long-format CSV file.

    One row per (student, question). Required columns:
        - student_id, variant_code, question_id, student_answer
        - is_correct: true/false (also 1/0, yes/no)
        - points, max_points: awarded and available points

    Optional columns, read from the first non-empty row of each student:
        - total_score, max_possible_score: default to the sums of
          points and max_points
        - completed_at: ISO timestamp of submission

    Rows for the same student and variant become one StudentResponse, in
    order of first appearance.

    Raises:
        ValueError: If required columns are missing or values are invalid.
    """
    df = pd.read_csv(
        path,
        dtype={
            "student_id": str,
            "variant_code": str,
            "question_id": str,
            "student_answer": str,
        },
        keep_default_na=False,
        na_values={
            "total_score": [""],
            "max_possible_score": [""],
            "completed_at": [""],
        },
    )

    missing = [c for c in REQUIRED_RESPONSE_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"CSV is missing required columns: {missing}")

    responses: list[StudentResponse] = []
    grouped = df.groupby(["student_id", "variant_code"], sort=False)
    for (student_id, variant_code), group in grouped:
        question_responses = tuple(
            QuestionResponse(
                question_id=row.question_id,
                student_answer=row.student_answer,
                is_correct=_parse_bool(row.is_correct),
                points=float(row.points),
                max_points=float(row.max_points),
            )
            for row in group.itertuples(index=False)
        )

        total_score = _first_present(group, "total_score")
        max_possible_score = _first_present(group, "max_possible_score")
        completed_at = _first_present(group, "completed_at")

        responses.append(
            StudentResponse(
                student_id=str(student_id),
                variant_code=str(variant_code),
                question_responses=question_responses,
                total_score=(
                    float(total_score)
                    if total_score is not None
                    else sum(q.points for q in question_responses)
                ),
                max_possible_score=(
                    float(max_possible_score)
                    if max_possible_score is not None
                    else sum(q.max_points for q in question_responses)
                ),
                completed_at=(
                    pd.Timestamp(completed_at).to_pydatetime()
                    if completed_at is not None
                    else None
                ),
            )
        )

    return responses


_VARIANT_LIST = TypeAdapter(list[ExamVariant])


def load_variants_json(path: Path) -> list[ExamVariant]:
    """Load exam variant definitions from a JSON list.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If a record does not match ExamVariant.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Variants file not found: {path}")
    with path.open() as f:
        raw = json.load(f)
    return _VARIANT_LIST.validate_python(raw)
