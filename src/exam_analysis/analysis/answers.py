"""
Translation between presented option letters and original option text.

Variants shuffle the options of a question. A student who answers "B" on
one variant may have chosen the same option as a student answering "D" on
another, so answers are mapped back to option text before options are
counted. Grading is never redone here.
"""

from collections.abc import Sequence

from exam_analysis.core.data_models import ExamVariant, QuestionDefinition
from exam_analysis.core.utils import index_to_letter, letter_to_index


def normalize_answer(
    answer: str,
    options: Sequence[str],
    permutation: Sequence[int] | None = None,
) -> str:
    """
    Map a presented option letter to the original option text.

    Args:
        answer: Student answer as recorded.
        options: Question options in their original order.
        permutation: Original option position of each presented position.
            None means the options were presented unshuffled.

    Returns:
        The option text, or the answer unchanged when it is not a single
        capital letter or the letter is out of range.
    """
    presented = letter_to_index(answer)
    if presented is None or not options:
        return answer

    if permutation is not None:
        if presented >= len(permutation):
            return answer
        original = permutation[presented]
    else:
        original = presented

    if original >= len(options):
        return answer
    return options[original]


def presented_letter(
    options: Sequence[str],
    permutation: Sequence[int] | None,
    option_text: str,
) -> str | None:
    """
    Letter under which an option was shown on a variant.

    Returns:
        The presented letter, or None if option_text is not an option or
        the permutation does not place it.
    """
    if option_text not in options:
        return None
    original = list(options).index(option_text)

    if permutation is None:
        presented = original
    elif original in permutation:
        presented = list(permutation).index(original)
    else:
        return None

    if presented >= 26:
        return None
    return index_to_letter(presented)


def build_question_index(
    variants: Sequence[ExamVariant],
) -> dict[str, QuestionDefinition]:
    """Question definitions by id, in variant order. First definition wins."""
    index: dict[str, QuestionDefinition] = {}
    for variant in variants:
        for question in variant.questions:
            index.setdefault(question.id, question)
    return index


def build_variant_index(
    variants: Sequence[ExamVariant],
) -> dict[str, ExamVariant]:
    """Variants by code, skipping variants without one."""
    index: dict[str, ExamVariant] = {}
    for variant in variants:
        if variant.variant_code:
            index.setdefault(variant.variant_code, variant)
    return index
