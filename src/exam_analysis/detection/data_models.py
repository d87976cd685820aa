from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

# Default probability thresholds for risk levels
DEFAULT_HIGH_RISK_THRESHOLD = 0.8
DEFAULT_MEDIUM_RISK_THRESHOLD = 0.7
DEFAULT_LOW_RISK_THRESHOLD = 0.5


class RiskLevel(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


@dataclass(frozen=True)
class FlaggingConfig:
    """
    Configuration for collusion flagging.

    Attributes:
        high_risk_threshold: Probability at or above which a pair is high
            risk.
        medium_risk_threshold: Probability at or above which a pair is
            medium risk.
        low_risk_threshold: Probability at or above which a pair is low
            risk and counted as flagged.
        invert_variant_similarity: Use 1 - variant similarity, so that
            agreement between students on dissimilar variants weighs more.
    """

    high_risk_threshold: float = DEFAULT_HIGH_RISK_THRESHOLD
    medium_risk_threshold: float = DEFAULT_MEDIUM_RISK_THRESHOLD
    low_risk_threshold: float = DEFAULT_LOW_RISK_THRESHOLD
    invert_variant_similarity: bool = False

    def __post_init__(self) -> None:
        if not (
            0
            <= self.low_risk_threshold
            <= self.medium_risk_threshold
            <= self.high_risk_threshold
            <= 1
        ):
            raise ValueError(
                "thresholds must satisfy 0 <= low <= medium <= high <= 1, "
                f"got low={self.low_risk_threshold}, "
                f"medium={self.medium_risk_threshold}, "
                f"high={self.high_risk_threshold}"
            )

    def risk_level(self, probability: float) -> RiskLevel:
        if probability >= self.high_risk_threshold:
            return RiskLevel.HIGH
        if probability >= self.medium_risk_threshold:
            return RiskLevel.MEDIUM
        if probability >= self.low_risk_threshold:
            return RiskLevel.LOW
        return RiskLevel.NONE


class IntegrityReport(BaseModel):
    """
    Both similarity matrices of an exam.

    Attributes:
        student_similarity: student_id -> student_id -> share of identical
            answers over commonly attempted questions.
        variant_similarity: variant_code -> variant_code -> construction
            similarity.
    """

    model_config = ConfigDict(frozen=True)

    student_similarity: dict[str, dict[str, float]]
    variant_similarity: dict[str, dict[str, float]]


class FlaggedPair(BaseModel):
    """
    Collusion assessment of one pair of students.

    Scores and cross grades are percentages. A cross grade is the grade a
    student would get when graded on the other student's variant key; it
    is 0 when both students sat the same variant.
    """

    model_config = ConfigDict(frozen=True)

    student1: str
    student2: str
    probability: float
    risk_level: RiskLevel
    student1_variant: str
    student2_variant: str
    student1_score: float
    student2_score: float
    variant_similarity: float
    response_similarity: float
    class_average_score: float
    student1_biserial: float
    student2_biserial: float
    student1_cross_grade: float
    student2_cross_grade: float

    @property
    def shares_variant(self) -> bool:
        return self.student1_variant == self.student2_variant

    @property
    def student1_grade_change(self) -> float:
        if self.shares_variant:
            return 0.0
        return self.student1_cross_grade - self.student1_score

    @property
    def student2_grade_change(self) -> float:
        if self.shares_variant:
            return 0.0
        return self.student2_cross_grade - self.student2_score


class FlaggingSummary(BaseModel):
    """Counts and averages over pairs at or above the low-risk threshold."""

    model_config = ConfigDict(frozen=True)

    total_flagged: int
    high_risk: int
    medium_risk: int
    low_risk: int
    unique_students_involved: int
    average_probability: float
    average_similarity: float
