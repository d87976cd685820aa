from collections.abc import Sequence

from exam_analysis.core.data_models import ExamVariant, StudentResponse
from exam_analysis.detection.data_models import IntegrityReport
from exam_analysis.detection.similarity import (
    calculate_student_similarity_matrix,
)
from exam_analysis.detection.variants import (
    calculate_variant_similarity_matrix,
)


def analyze_integrity(
    variants: Sequence[ExamVariant], responses: Sequence[StudentResponse]
) -> IntegrityReport:
    """Compute both similarity matrices of an exam."""
    return IntegrityReport(
        student_similarity=calculate_student_similarity_matrix(responses),
        variant_similarity=calculate_variant_similarity_matrix(variants),
    )
