"""
Psychometric analysis of graded exam responses.

This module provides item statistics (difficulty, discrimination,
point-biserial correlation, distractors, significance against guessing),
exam-level summaries with score distribution and reliability, and the
per-variant split used to compare variants of one exam.
"""

from exam_analysis.analysis.config import AnalysisConfig, load_analysis_config
from exam_analysis.analysis.data_models import (
    AnalysisMetadata,
    AnalysisResult,
    AnalysisSummary,
    ConfidenceInterval,
    DistractorAnalysis,
    OptionAnalysis,
    QuestionAnalysisResult,
    QuestionTypeSummary,
    ReliabilityMetrics,
    ScoreDistribution,
    StatisticalSignificance,
)
from exam_analysis.analysis.exam import analyze_exam
from exam_analysis.analysis.exceptions import NoResponsesError
from exam_analysis.analysis.variants import analyze_by_variant

__all__ = [
    "AnalysisConfig",
    "AnalysisMetadata",
    "AnalysisResult",
    "AnalysisSummary",
    "analyze_by_variant",
    "analyze_exam",
    "ConfidenceInterval",
    "DistractorAnalysis",
    "load_analysis_config",
    "NoResponsesError",
    "OptionAnalysis",
    "QuestionAnalysisResult",
    "QuestionTypeSummary",
    "ReliabilityMetrics",
    "ScoreDistribution",
    "StatisticalSignificance",
]
