"""
Core utility functions shared across analysis and detection modules.
"""

from exam_analysis.core.data_models import StudentResponse


def letter_to_index(answer: str) -> int | None:
    """
    Map a single capital option letter to its zero-based position.

    "A" maps to 0, "B" to 1 and so on.

    Args:
        answer: Student answer as recorded.

    Returns:
        The option position, or None if the answer is not a single
        capital letter.
    """
    if len(answer) != 1 or not "A" <= answer <= "Z":
        return None
    return ord(answer) - ord("A")


def index_to_letter(index: int) -> str:
    """Inverse of letter_to_index for positions 0-25."""
    if not 0 <= index < 26:
        raise ValueError(f"index must be in [0, 25], got {index}")
    return chr(ord("A") + index)


def score_ratio(response: StudentResponse) -> float:
    """Fraction of the maximum possible score, 0.0 when nothing was on offer."""
    if response.max_possible_score <= 0:
        return 0.0
    return response.total_score / response.max_possible_score
