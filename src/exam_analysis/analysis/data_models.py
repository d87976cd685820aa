"""
Data models for exam analysis results.

This module defines the data structures for:
- ItemResponses: aligned per-question inputs to the item statistics
- QuestionAnalysisResult: per-question statistics
- AnalysisSummary / AnalysisMetadata / AnalysisResult: exam-level output

Fields that were not computed are None, never a placeholder zero.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict

from exam_analysis.analysis.config import AnalysisConfig
from exam_analysis.core.data_models import QuestionType, StudentResponse


@dataclass(frozen=True)
class ItemResponses:
    """
    Responses to one question, aligned across the respondents who
    attempted it.

    Attributes:
        question_id: The question these responses belong to.
        is_correct: Correctness as graded, shape (n,).
        points: Points awarded, shape (n,).
        total_scores: Each respondent's total exam score, shape (n,).
        answers: Answers normalized to option text where possible.
    """

    question_id: str
    is_correct: NDArray[np.bool_]
    points: NDArray[np.float64]
    total_scores: NDArray[np.float64]
    answers: tuple[str, ...]

    def __post_init__(self) -> None:
        n = self.is_correct.shape[0]
        if self.is_correct.ndim != 1:
            raise ValueError(
                f"is_correct must be 1D, got shape {self.is_correct.shape}"
            )
        if self.points.shape != (n,) or self.total_scores.shape != (n,):
            raise ValueError(
                f"points {self.points.shape} and total_scores "
                f"{self.total_scores.shape} inconsistent with {n} responses"
            )
        if len(self.answers) != n:
            raise ValueError(
                f"# answers ({len(self.answers)}) != # responses ({n})"
            )

    @property
    def n_responses(self) -> int:
        return self.is_correct.shape[0]

    @property
    def n_correct(self) -> int:
        return int(np.count_nonzero(self.is_correct))


class ConfidenceInterval(BaseModel):
    model_config = ConfigDict(frozen=True)

    lower: float
    upper: float


class OptionAnalysis(BaseModel):
    """
    How often one answer option was chosen and by whom.

    Attributes:
        option: Option text (or the raw answer when the question has no
            known options).
        frequency: Number of respondents choosing the option.
        percentage: Frequency as a percentage of all respondents.
        discrimination_index: Proportion of the high-scoring group choosing
            the option minus that of the low-scoring group. Negative values
            are expected for working distractors.
        point_biserial_correlation: Correlation between choosing the option
            and total score.
    """

    model_config = ConfigDict(frozen=True)

    option: str
    frequency: int
    percentage: float
    discrimination_index: float
    point_biserial_correlation: float


class DistractorAnalysis(BaseModel):
    """
    Option-level breakdown of a multiple-choice question.

    Attributes:
        distractors: Every option other than the key.
        correct_option: The keyed option, None when the key is not among
            the options.
        omitted_responses: Attempts left blank.
        omitted_percentage: Blank attempts as a percentage of all attempts.
        ineffective_distractors: Distractors nobody chose.
        possible_miskey: True when some distractor was chosen more often
            than the key.
    """

    model_config = ConfigDict(frozen=True)

    distractors: tuple[OptionAnalysis, ...]
    correct_option: OptionAnalysis | None
    omitted_responses: int
    omitted_percentage: float
    ineffective_distractors: tuple[str, ...]
    possible_miskey: bool


class SignificanceTest(StrEnum):
    CHI_SQUARE = "chi_square"
    BINOMIAL_Z = "binomial_z"


class StatisticalSignificance(BaseModel):
    """
    Test of observed correctness against chance-level guessing.

    Attributes:
        test: Chi-square goodness of fit, or the normal approximation of
            the binomial test when expected counts are small.
        is_significant: Whether the test statistic exceeds the critical
            value at the configured confidence level.
        p_value: Two-sided p-value.
        critical_value: Chi-square critical value with 1 degree of freedom.
        degrees_of_freedom: Always 1 (correct vs incorrect).
        test_statistic: Chi-square statistic, or z squared.
        chance_rate: Probability of a correct guess, 1 / n_options.
        confidence_interval: Wald interval for the proportion correct.
        warnings: Sample-size caveats.
    """

    model_config = ConfigDict(frozen=True)

    test: SignificanceTest
    is_significant: bool
    p_value: float
    critical_value: float
    degrees_of_freedom: int
    test_statistic: float
    chance_rate: float
    confidence_interval: ConfidenceInterval
    warnings: tuple[str, ...] = ()


class QuestionAnalysisResult(BaseModel):
    """
    Statistics for one question.

    Metrics disabled in the AnalysisConfig are None, as is the distractor
    analysis of true/false questions.
    """

    model_config = ConfigDict(frozen=True)

    question_id: str
    question_text: str
    question_type: QuestionType
    total_responses: int
    correct_responses: int
    difficulty_index: float | None
    discrimination_index: float | None
    point_biserial_correlation: float | None
    distractor_analysis: DistractorAnalysis | None
    statistical_significance: StatisticalSignificance


class ReliabilityMetrics(BaseModel):
    """
    Internal consistency of the exam.

    Attributes:
        cronbachs_alpha: Cronbach's alpha over item points.
        standard_error: Standard error of measurement in score units.
        confidence_interval: Feldt interval for alpha.
        n_items: Questions entering the computation.
        n_respondents: Respondents entering the computation.
    """

    model_config = ConfigDict(frozen=True)

    cronbachs_alpha: float
    standard_error: float
    confidence_interval: ConfidenceInterval
    n_items: int
    n_respondents: int


class ScoreDistribution(BaseModel):
    """Moments of score ratios (total / max possible) across respondents."""

    model_config = ConfigDict(frozen=True)

    mean: float
    median: float
    standard_deviation: float
    skewness: float | None
    kurtosis: float | None
    min: float
    max: float
    quartiles: tuple[float, float, float]


class QuestionTypeSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_type: QuestionType
    question_count: int
    average_difficulty: float | None
    average_discrimination: float | None
    average_point_biserial: float | None


class AnalysisSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    average_difficulty: float | None
    average_discrimination: float | None
    average_point_biserial: float | None
    reliability_metrics: ReliabilityMetrics | None
    score_distribution: ScoreDistribution
    by_question_type: tuple[QuestionTypeSummary, ...] | None = None


class AnalysisMetadata(BaseModel):
    """
    Provenance of an analysis.

    Attributes:
        total_students: Distinct student ids in the input.
        total_variants: Distinct variant codes in the input.
        analysis_date: When the analysis ran (UTC).
        sample_size: Responses analyzed after filtering.
        excluded_students: Responses removed by filtering.
        meets_min_sample_size: Whether sample_size reached the configured
            minimum. Item statistics below it are unreliable.
        student_responses: Exactly the responses analyzed.
    """

    model_config = ConfigDict(frozen=True)

    total_students: int
    total_variants: int
    analysis_date: datetime
    sample_size: int
    excluded_students: int
    meets_min_sample_size: bool
    student_responses: tuple[StudentResponse, ...]


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    exam_id: str
    exam_title: str
    analysis_config: AnalysisConfig
    question_results: tuple[QuestionAnalysisResult, ...]
    summary: AnalysisSummary
    metadata: AnalysisMetadata

    def question_result(
        self, question_id: str
    ) -> QuestionAnalysisResult | None:
        for result in self.question_results:
            if result.question_id == question_id:
                return result
        return None
