"""
Configuration for exam analysis.

Every option has a documented default; a partial configuration is
expressed by passing only the keywords to override, or by loading a YAML
file that names only those keys.
"""

from dataclasses import dataclass
from pathlib import Path

from omegaconf import OmegaConf

# Default sample-size and confidence settings
DEFAULT_MIN_SAMPLE_SIZE = 10
DEFAULT_CONFIDENCE_LEVEL = 0.95


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Configuration for analyze_exam and analyze_by_variant.

    Attributes:
        min_sample_size: Respondents needed before item statistics are
            considered reliable. Smaller samples are still analyzed and
            flagged in the result metadata.
        include_discrimination_index: Compute the high-low group
            discrimination index per question.
        include_difficulty_index: Compute the proportion correct per
            question.
        include_point_biserial: Compute the item-total point-biserial
            correlation per question.
        include_distractor_analysis: Compute option frequencies for
            multiple-choice questions.
        confidence_level: Confidence level for significance tests and
            confidence intervals, in (0, 1).
        exclude_incomplete_data: Drop responses that were never submitted
            or contain no answers.
        group_by_question_type: Add per-question-type averages to the
            summary.
        exam_title: Overrides the title taken from the variants.
    """

    min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE
    include_discrimination_index: bool = True
    include_difficulty_index: bool = True
    include_point_biserial: bool = True
    include_distractor_analysis: bool = True
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL
    exclude_incomplete_data: bool = False
    group_by_question_type: bool = False
    exam_title: str | None = None

    def __post_init__(self) -> None:
        if self.min_sample_size < 0:
            raise ValueError(
                f"min_sample_size must be >= 0, got {self.min_sample_size}"
            )
        if not 0 < self.confidence_level < 1:
            raise ValueError(
                f"confidence_level must be in (0, 1), "
                f"got {self.confidence_level}"
            )
        if self.exam_title is not None and not self.exam_title.strip():
            raise ValueError("exam_title must be non-empty when given")


def load_analysis_config(yaml_path: Path | None = None) -> AnalysisConfig:
    """Load and validate analysis options from YAML.

    Keys absent from the file keep their defaults.

    Args:
        yaml_path: Path to YAML config file. None returns the defaults.

    Returns:
        Validated AnalysisConfig

    Raises:
        FileNotFoundError: If yaml_path doesn't exist
        ValueError: If an option is out of range
    """
    schema = OmegaConf.structured(AnalysisConfig)

    if yaml_path is not None:
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        user_config = OmegaConf.load(yaml_path)
        config = OmegaConf.merge(schema, user_config)
    else:
        config = schema

    result = OmegaConf.to_object(config)
    assert isinstance(result, AnalysisConfig)

    return result
