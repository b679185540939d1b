"""Unit tests for settings loading and validation."""

import pytest
from pydantic import ValidationError

from job_quality.core.config import (
    DuplicateConfig,
    ProcessingConfig,
    QualitySettings,
    ThresholdConfig,
)
from job_quality.core.exceptions import ConfigurationError, JobQualityError


class TestQualitySettings:
    """Test cases for QualitySettings."""

    def test_defaults(self):
        settings = QualitySettings()

        assert settings.thresholds.short_description_length == 100
        assert settings.thresholds.duplicate_window_days == 30
        assert settings.limits.max_duplicate_groups == 50
        assert settings.processing.max_workers == 1
        assert settings.duplicates.enable_similarity_matching is False

    def test_shipped_file_matches_defaults(self, test_config):
        assert test_config == QualitySettings()

    def test_partial_file_keeps_defaults(self, tmp_path):
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("thresholds:\n  duplicate_window_days: 14\n")

        settings = QualitySettings.load_from_file(str(config_file))

        assert settings.thresholds.duplicate_window_days == 14
        assert settings.thresholds.short_description_length == 100
        assert settings.limits.max_date_anomalies == 100

    def test_empty_file_gives_defaults(self, tmp_path):
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("")

        assert QualitySettings.load_from_file(str(config_file)) == QualitySettings()

    def test_missing_file(self, tmp_path):
        missing = tmp_path / "nope.yaml"

        with pytest.raises(ConfigurationError) as exc_info:
            QualitySettings.load_from_file(str(missing))

        assert exc_info.value.config_path == str(missing)
        assert isinstance(exc_info.value, JobQualityError)

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("thresholds: [unclosed\n")

        with pytest.raises(ConfigurationError):
            QualitySettings.load_from_file(str(config_file))

    def test_non_mapping_root(self, tmp_path):
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("- one\n- two\n")

        with pytest.raises(ConfigurationError):
            QualitySettings.load_from_file(str(config_file))

    def test_out_of_range_value(self, tmp_path):
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("processing:\n  max_workers: 0\n")

        with pytest.raises(ConfigurationError) as exc_info:
            QualitySettings.load_from_file(str(config_file))

        assert "max_workers" in str(exc_info.value)


class TestSectionValidators:
    """Test cases for per-section validation."""

    @pytest.mark.parametrize("kwargs", [
        {'language_confidence_floor': 1.5},
        {'language_fallback_confidence': -0.1},
        {'low_confidence_threshold': 120},
        {'duplicate_window_days': 0},
    ])
    def test_threshold_rejects(self, kwargs):
        with pytest.raises(ValidationError):
            ThresholdConfig(**kwargs)

    def test_processing_rejects(self):
        with pytest.raises(ValidationError):
            ProcessingConfig(max_workers=17)
        with pytest.raises(ValidationError):
            ProcessingConfig(chunk_size=0)

    def test_similarity_threshold_range(self):
        assert DuplicateConfig(similarity_threshold=85).similarity_threshold == 85
        with pytest.raises(ValidationError):
            DuplicateConfig(similarity_threshold=101)
