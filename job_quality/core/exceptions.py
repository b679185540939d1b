"""Custom exceptions for the job data quality engine."""


class JobQualityError(Exception):
    """Base exception for the job data quality engine."""
    pass


class ConfigurationError(JobQualityError):
    """Configuration-related errors."""

    def __init__(self, message: str, config_path: str = None):
        super().__init__(message)
        self.config_path = config_path


class DataValidationError(JobQualityError):
    """Raised when an input record cannot be coerced into a JobRecord."""

    def __init__(self, message: str, field_name: str = None, field_value = None):
        super().__init__(message)
        self.field_name = field_name
        self.field_value = field_value
