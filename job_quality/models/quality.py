"""Result data models for the job data quality engine."""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from ..utils.time_utils import format_iso8601_utc


class PipelineStep(str, Enum):
    """Upstream ingestion stages an issue can be attributed to."""
    SCRAPER = "scraper"            # HTML collection
    EXTRACTOR = "extractor"        # Field extraction from HTML
    GEO = "geo"                    # Geographic mapping
    JOBEXP = "jobexp"              # Experience inference
    LANG = "lang"                  # Language tagging
    CLEAN = "clean"                # Data cleaning
    LABELOR = "labelor"            # Label generation
    BERTIZER = "bertizer"          # Vectorization
    CATEGORIZER = "categorizer"    # Category classification
    IMPORT = "import"              # Persistence


class IssueSeverity(str, Enum):
    """Issue severity levels."""
    CRITICAL = "critical"          # Blocks usefulness
    WARNING = "warning"            # Degrades usefulness
    INFO = "info"                  # Cosmetic or minor


class IssueType(str, Enum):
    """Categories of data quality issues."""
    NON_ENGLISH_CONTENT = "non_english_content"
    SHORT_DESCRIPTION = "short_description"
    EMPTY_DESCRIPTION = "empty_description"
    BOILERPLATE_CONTENT = "boilerplate_content"
    TRUNCATED_CONTENT = "truncated_content"
    EMPTY_LABELS = "empty_labels"
    EMPTY_VECTORIZED = "empty_vectorized"
    UNMATCHED_DUTY_STATION = "unmatched_duty_station"
    MISSING_COUNTRY = "missing_country"
    MISSING_CONTINENT = "missing_continent"
    INVALID_GRADE = "invalid_grade"
    MISSING_GRADE = "missing_grade"
    MISSING_TITLE = "missing_title"
    MISSING_DUTY_STATION = "missing_duty_station"
    DATE_PARSE_ERROR = "date_parse_error"
    DATE_ANOMALY = "date_anomaly"
    FUTURE_POSTING_DATE = "future_posting_date"
    DEADLINE_BEFORE_POSTED = "deadline_before_posted"
    POTENTIAL_DUPLICATE = "potential_duplicate"
    SAME_UNIQUECODE = "same_uniquecode"
    LOW_CLASSIFICATION_CONFIDENCE = "low_classification_confidence"
    NULL_SECTORAL_CATEGORY = "null_sectoral_category"
    NULL_EXPERIENCE_FIELDS = "null_experience_fields"
    EMPTY_LANGUAGES = "empty_languages"
    UNKNOWN_AGENCY = "unknown_agency"


class DetectedLanguage(str, Enum):
    """Languages the detector can report."""
    EN = "en"
    FR = "fr"
    ES = "es"
    AR = "ar"
    PT = "pt"
    ZH = "zh"
    RU = "ru"
    OTHER = "other"
    UNKNOWN = "unknown"


class DuplicateType(str, Enum):
    """Duplicate clustering strategies."""
    SAME_UNIQUECODE = "same_uniquecode"
    SAME_TITLE_AGENCY_LOCATION = "same_title_agency_location"
    HIGH_SIMILARITY = "high_similarity"


class DateAnomalyType(str, Enum):
    """Date anomaly categories."""
    MISSING_POSTING = "missing_posting"
    MISSING_DEADLINE = "missing_deadline"
    DEADLINE_BEFORE_POSTED = "deadline_before_posted"
    FUTURE_POSTING = "future_posting"
    INVALID_FORMAT = "invalid_format"


class FailurePatternType(str, Enum):
    """Systemic root causes behind enrichment stage failures."""
    NON_ENGLISH = "non_english"
    RATE_LIMIT = "rate_limit"
    SHORT_INPUT = "short_input"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class QualityTrend(str, Enum):
    """Direction of the overall score over time."""
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


@dataclass(frozen=True)
class DataQualityIssue:
    """Individual issue found on one job record"""
    id: str
    job_id: str
    issue_type: IssueType
    severity: IssueSeverity
    field: str
    current_value: Union[str, float, None]
    message: str
    likely_step: PipelineStep
    recommendation: str
    detected_at: datetime
    suggested_value: Union[str, float, None] = None


@dataclass(frozen=True)
class DataQualityScore:
    """Four-dimension quality score, each component in [0, 100]"""
    overall: float
    completeness: float
    accuracy: float
    consistency: float
    classification: float


@dataclass(frozen=True)
class JobQualityAssessment:
    """Issues and scores computed for one job record"""
    job_id: str
    agency: str
    title: str
    issues: Tuple[DataQualityIssue, ...]
    quality_score: DataQualityScore
    detected_language: DetectedLanguage
    language_confidence: float

    @property
    def has_issues(self) -> bool:
        return len(self.issues) > 0

    def issue_types(self) -> Tuple[str, ...]:
        return tuple(issue.issue_type.value for issue in self.issues)

    def has_any_issue(self, issue_types) -> bool:
        """Check whether any issue matches one of the given type values."""
        return any(issue.issue_type.value in issue_types for issue in self.issues)

    def count_issues(self, issue_types) -> int:
        return sum(1 for issue in self.issues if issue.issue_type.value in issue_types)


@dataclass(frozen=True)
class DuplicateJob:
    """Job summary carried inside a duplicate group"""
    id: str
    title: str
    agency: str
    duty_station: str
    posting_date: str
    apply_until: str
    status: str
    uniquecode: Optional[str] = None


@dataclass(frozen=True)
class DuplicateGroup:
    """Cluster of two or more records judged to be the same posting"""
    type: DuplicateType
    jobs: Tuple[DuplicateJob, ...]
    recommendation: str


@dataclass(frozen=True)
class LocationSuggestion:
    city: str
    country: str
    continent: Optional[str] = None


@dataclass(frozen=True)
class UnmappedLocation:
    duty_station: str
    count: int
    suggested_mapping: Optional[LocationSuggestion] = None


@dataclass(frozen=True)
class UnrecognizedGrade:
    grade_value: str
    count: int
    suggested_interpretation: Optional[str] = None


@dataclass(frozen=True)
class DateAnomaly:
    job_id: str
    agency: str
    posting_date: Optional[str]
    apply_until: Optional[str]
    issue_type: DateAnomalyType


@dataclass(frozen=True)
class AgencyCount:
    agency: str
    count: int


@dataclass(frozen=True)
class FailurePattern:
    """Cross-record explanation for a cluster of enrichment failures"""
    pattern: FailurePatternType
    count: int
    percentage: int
    affected_agencies: Tuple[AgencyCount, ...]
    description: str
    solution: str


@dataclass(frozen=True)
class AgencyQualityStats:
    agency: str
    total_jobs: int
    quality_score: float
    issues_by_type: Dict[str, int]
    issues_by_step: Dict[str, int]
    language_breakdown: Dict[str, int]


@dataclass(frozen=True)
class AgencyPipelineHealth:
    agency: str
    last_run: str
    jobs_processed: int
    health_score: int
    step_issues: Dict[str, int]


@dataclass(frozen=True)
class AgencyLanguageBreakdown:
    agency: str
    count: int
    breakdown: Dict[str, int]


@dataclass(frozen=True)
class LanguageImpact:
    """Failure counts per major language"""
    french: int = 0
    spanish: int = 0
    arabic: int = 0
    english: int = 0


@dataclass(frozen=True)
class ImpactCorrelation:
    empty_labels: LanguageImpact = field(default_factory=LanguageImpact)
    null_category: LanguageImpact = field(default_factory=LanguageImpact)


@dataclass(frozen=True)
class LanguageIssueSummary:
    total_non_english: int
    by_language: Dict[str, int]
    by_agency: Tuple[AgencyLanguageBreakdown, ...]
    impact_correlation: ImpactCorrelation


@dataclass(frozen=True)
class ShortDescriptionSample:
    id: str
    title: str
    length: int
    preview: str


@dataclass(frozen=True)
class EmptyDescriptionSample:
    id: str
    title: str


@dataclass(frozen=True)
class PhraseCount:
    phrase: str
    occurrences: int


@dataclass(frozen=True)
class ContentIssueSummary:
    short_description_count: int
    short_description_samples: Tuple[ShortDescriptionSample, ...]
    empty_description_count: int
    empty_description_samples: Tuple[EmptyDescriptionSample, ...]
    boilerplate_count: int
    boilerplate_phrases: Tuple[PhraseCount, ...]
    empty_labels_count: int
    missing_requirements_count: int


@dataclass(frozen=True)
class ScraperIssueBreakdown:
    short_description: int = 0
    boilerplate_only: int = 0
    missing_critical_fields: int = 0
    truncated_content: int = 0


@dataclass(frozen=True)
class AgencyShare:
    agency: str
    count: int
    percentage: int


@dataclass(frozen=True)
class ScraperSample:
    id: str
    agency: str
    title: Optional[str]
    desc_length: int
    issue: str


@dataclass(frozen=True)
class ScraperExtractorSummary:
    total_issues: int
    by_issue_type: ScraperIssueBreakdown
    by_agency: Tuple[AgencyShare, ...]
    samples: Tuple[ScraperSample, ...]


def _to_plain(value: Any) -> Any:
    """Convert enums and datetimes to JSON-safe values, recursively."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return format_iso8601_utc(value)
    if isinstance(value, dict):
        return {(_to_plain(k)): _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    return value


@dataclass(frozen=True)
class DataQualitySummary:
    """
    Terminal report produced by one engine run.

    Dashboards read it as a payload; nothing in the engine keeps a
    reference to it after it is returned.
    """
    total_jobs: int
    clean_jobs: int
    jobs_with_issues: int
    critical_issues: int
    warning_issues: int
    info_issues: int

    overall_score: float
    trend: QualityTrend

    by_issue_type: Dict[str, int]
    by_severity: Dict[str, int]
    by_pipeline_step: Dict[str, int]
    by_agency: Tuple[AgencyQualityStats, ...]
    agency_pipeline_health: Tuple[AgencyPipelineHealth, ...]

    language_issues: LanguageIssueSummary
    content_issues: ContentIssueSummary
    scraper_extractor_issues: ScraperExtractorSummary
    duplicate_groups: Tuple[DuplicateGroup, ...]
    unmapped_locations: Tuple[UnmappedLocation, ...]
    unrecognized_grades: Tuple[UnrecognizedGrade, ...]
    date_anomalies: Tuple[DateAnomaly, ...]
    failure_patterns: Tuple[FailurePattern, ...]

    last_refreshed: datetime

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe representation for dashboard payloads."""
        return _to_plain(asdict(self))
