"""Configuration management for the job data quality engine."""

import yaml
from pathlib import Path
from pydantic import BaseModel, Field, ValidationError, field_validator

from . import constants
from .exceptions import ConfigurationError


class ThresholdConfig(BaseModel):
    """Detector and scoring thresholds."""
    short_description_length: int = constants.SHORT_DESCRIPTION_LENGTH
    boilerplate_max_length: int = constants.BOILERPLATE_MAX_LENGTH
    truncation_min_length: int = constants.TRUNCATION_MIN_LENGTH
    low_confidence_threshold: float = constants.LOW_CONFIDENCE_THRESHOLD
    default_classification_confidence: float = constants.DEFAULT_CLASSIFICATION_CONFIDENCE
    language_confidence_floor: float = constants.LANGUAGE_CONFIDENCE_FLOOR
    language_fallback_confidence: float = constants.LANGUAGE_FALLBACK_CONFIDENCE
    duplicate_window_days: int = constants.DUPLICATE_WINDOW_DAYS
    rate_limit_min_failures: int = constants.RATE_LIMIT_MIN_FAILURES
    missing_requirements_length: int = constants.MISSING_REQUIREMENTS_LENGTH

    @field_validator('language_confidence_floor', 'language_fallback_confidence')
    @classmethod
    def validate_probability(cls, v):
        if v < 0.0 or v > 1.0:
            raise ValueError('language confidence values must be between 0.0 and 1.0')
        return v

    @field_validator('low_confidence_threshold', 'default_classification_confidence')
    @classmethod
    def validate_percentage(cls, v):
        if v < 0.0 or v > 100.0:
            raise ValueError('classification confidence values must be between 0 and 100')
        return v

    @field_validator('duplicate_window_days')
    @classmethod
    def validate_window(cls, v):
        if v <= 0:
            raise ValueError('duplicate_window_days must be positive')
        return v


class LimitConfig(BaseModel):
    """Caps applied to the emitted report lists."""
    max_duplicate_groups: int = Field(default=constants.MAX_DUPLICATE_GROUPS, ge=0)
    max_unmapped_locations: int = Field(default=constants.MAX_UNMAPPED_LOCATIONS, ge=0)
    max_unrecognized_grades: int = Field(default=constants.MAX_UNRECOGNIZED_GRADES, ge=0)
    max_date_anomalies: int = Field(default=constants.MAX_DATE_ANOMALIES, ge=0)
    max_content_samples: int = Field(default=constants.MAX_CONTENT_SAMPLES, ge=0)
    max_scraper_samples: int = Field(default=constants.MAX_SCRAPER_SAMPLES, ge=0)


class ProcessingConfig(BaseModel):
    """Processing configuration settings."""
    max_workers: int = 1
    chunk_size: int = 500

    @field_validator('max_workers')
    @classmethod
    def validate_max_workers(cls, v):
        if v < 1 or v > 16:
            raise ValueError('max_workers must be between 1 and 16')
        return v

    @field_validator('chunk_size')
    @classmethod
    def validate_chunk_size(cls, v):
        if v < 1:
            raise ValueError('chunk_size must be positive')
        return v


class DuplicateConfig(BaseModel):
    """Duplicate detection settings."""
    enable_similarity_matching: bool = False
    similarity_threshold: int = Field(default=constants.SIMILARITY_THRESHOLD, ge=0, le=100)


class QualitySettings(BaseModel):
    """Main engine settings."""
    thresholds: ThresholdConfig = Field(default_factory=ThresholdConfig)
    limits: LimitConfig = Field(default_factory=LimitConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    duplicates: DuplicateConfig = Field(default_factory=DuplicateConfig)

    @classmethod
    def load_from_file(cls, config_path: str = "config/settings.yaml") -> "QualitySettings":
        """Load settings from YAML file."""
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}", config_path)

        with open(config_file, 'r') as f:
            try:
                config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {config_path}: {e}", config_path) from e

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Settings root must be a mapping: {config_path}", config_path)

        try:
            return cls(**config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid settings in {config_path}: {e}", config_path) from e
