"""Tests for CSV response and JSON variant loading."""

import json
from datetime import datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

from exam_analysis.core.data import load_responses_csv, load_variants_json
from exam_analysis.core.data_models import QuestionType

HEADER = (
    "student_id,variant_code,question_id,student_answer,is_correct,"
    "points,max_points"
)


def _write(path: Path, text: str) -> Path:
    path.write_text(text)
    return path


class TestLoadResponsesCsv:
    def test_groups_rows_by_student(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "responses.csv",
            f"{HEADER}\n"
            "s1,A,q1,B,true,1,1\n"
            "s1,A,q2,C,false,0,1\n"
            "s2,B,q1,D,1,1,1\n",
        )
        responses = load_responses_csv(path)

        assert [r.student_id for r in responses] == ["s1", "s2"]
        s1 = responses[0]
        assert s1.variant_code == "A"
        assert len(s1.question_responses) == 2
        assert s1.question_responses[0].is_correct
        assert not s1.question_responses[1].is_correct
        # Totals default to sums of points
        assert s1.total_score == 1.0
        assert s1.max_possible_score == 2.0
        assert s1.completed_at is None

    def test_optional_columns(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "responses.csv",
            f"{HEADER},total_score,max_possible_score,completed_at\n"
            "s1,A,q1,B,true,1,1,7,10,2024-03-01T10:00:00\n"
            "s1,A,q2,,false,0,1,,,\n",
        )
        (response,) = load_responses_csv(path)

        assert response.total_score == 7.0
        assert response.max_possible_score == 10.0
        assert response.completed_at == datetime(2024, 3, 1, 10, 0, 0)
        # Empty answers are kept as omitted, not NaN
        assert response.question_responses[1].student_answer == ""
        assert response.is_complete

    def test_ids_stay_strings(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "responses.csv",
            f"{HEADER}\n007,1,10,A,true,1,1\n",
        )
        (response,) = load_responses_csv(path)
        assert response.student_id == "007"
        assert response.variant_code == "1"
        assert response.question_responses[0].question_id == "10"

    def test_missing_columns(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "responses.csv",
            "student_id,variant_code\ns1,A\n",
        )
        with pytest.raises(ValueError, match="missing required columns"):
            load_responses_csv(path)

    def test_invalid_boolean(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "responses.csv",
            f"{HEADER}\ns1,A,q1,B,maybe,1,1\n",
        )
        with pytest.raises(ValueError, match="Invalid boolean"):
            load_responses_csv(path)


class TestLoadVariantsJson:
    def test_load(self, tmp_path: Path) -> None:
        data = [
            {
                "id": "v1",
                "exam_id": "e1",
                "variant_code": "A",
                "exam_title": "Midterm",
                "questions": [
                    {
                        "id": "q1",
                        "text": "Capital of France?",
                        "options": ["Paris", "Rome", "Oslo"],
                        "correct_answer": "Paris",
                    },
                    {
                        "id": "q2",
                        "question_type": "TRUE_FALSE",
                        "options": ["True", "False"],
                        "correct_answer": "True",
                        "points": 2,
                    },
                ],
                "metadata": {
                    "question_order": [1, 0],
                    "option_permutations": {"q1": [2, 0, 1]},
                },
            }
        ]
        path = tmp_path / "variants.json"
        path.write_text(json.dumps(data))

        (variant,) = load_variants_json(path)
        assert variant.variant_code == "A"
        assert variant.questions[0].options == ("Paris", "Rome", "Oslo")
        assert variant.questions[1].question_type == QuestionType.TRUE_FALSE
        assert variant.questions[1].points == 2.0
        assert variant.metadata.question_order == (1, 0)
        assert variant.option_permutation("q1") == (2, 0, 1)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Variants file not found"):
            load_variants_json(tmp_path / "nope.json")

    def test_invalid_record(self, tmp_path: Path) -> None:
        path = tmp_path / "variants.json"
        path.write_text(json.dumps([{"variant_code": "A"}]))
        with pytest.raises(ValidationError):
            load_variants_json(path)
