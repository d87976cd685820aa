from pathlib import Path

import pytest

from exam_analysis.analysis import AnalysisConfig, load_analysis_config


class TestAnalysisConfig:
    def test_defaults(self) -> None:
        config = AnalysisConfig()
        assert config.min_sample_size == 10
        assert config.confidence_level == 0.95
        assert config.include_discrimination_index
        assert config.include_distractor_analysis
        assert not config.exclude_incomplete_data
        assert config.exam_title is None

    def test_negative_min_sample_size(self) -> None:
        with pytest.raises(ValueError, match="min_sample_size"):
            AnalysisConfig(min_sample_size=-1)

    @pytest.mark.parametrize("level", [0.0, 1.0, 1.5])
    def test_confidence_level_out_of_range(self, level: float) -> None:
        with pytest.raises(ValueError, match="confidence_level"):
            AnalysisConfig(confidence_level=level)

    def test_blank_title(self) -> None:
        with pytest.raises(ValueError, match="exam_title"):
            AnalysisConfig(exam_title="  ")


class TestLoadAnalysisConfig:
    def test_no_path_gives_defaults(self) -> None:
        assert load_analysis_config() == AnalysisConfig()

    def test_partial_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "analysis.yaml"
        path.write_text(
            "min_sample_size: 25\n"
            "include_distractor_analysis: false\n"
            "exam_title: Final\n"
        )
        config = load_analysis_config(path)
        assert config.min_sample_size == 25
        assert not config.include_distractor_analysis
        assert config.exam_title == "Final"
        assert config.confidence_level == 0.95

    def test_invalid_value(self, tmp_path: Path) -> None:
        path = tmp_path / "analysis.yaml"
        path.write_text("confidence_level: 2.0\n")
        with pytest.raises(ValueError, match="confidence_level"):
            load_analysis_config(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_analysis_config(tmp_path / "missing.yaml")
