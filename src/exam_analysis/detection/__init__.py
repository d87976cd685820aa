from exam_analysis.detection.data_models import (
    FlaggedPair,
    FlaggingConfig,
    FlaggingSummary,
    IntegrityReport,
    RiskLevel,
)
from exam_analysis.detection.flagging import (
    cross_variant_grade,
    flag_submission_pairs,
    flagging_probability,
    flagging_summary,
)
from exam_analysis.detection.integrity import analyze_integrity
from exam_analysis.detection.similarity import (
    calculate_student_similarity_matrix,
    count_common_responses,
    count_matching_responses,
    measure_pairwise_similarity,
)
from exam_analysis.detection.variants import (
    calculate_variant_similarity_matrix,
    variant_similarity,
)

__all__ = [
    "analyze_integrity",
    "calculate_student_similarity_matrix",
    "calculate_variant_similarity_matrix",
    "count_common_responses",
    "count_matching_responses",
    "cross_variant_grade",
    "flag_submission_pairs",
    "FlaggedPair",
    "flagging_probability",
    "flagging_summary",
    "FlaggingConfig",
    "FlaggingSummary",
    "IntegrityReport",
    "measure_pairwise_similarity",
    "RiskLevel",
    "variant_similarity",
]
