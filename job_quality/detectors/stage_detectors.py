"""
Per-stage issue detectors for job records.

Each detector inspects one record and returns the issues whose most likely
cause is a single upstream pipeline stage. Detectors are pure functions of
``(record, context)``; none of them reads another detector's output, so any
subset can be run without changing what the others report.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Sequence, Tuple

from ..core.config import ThresholdConfig
from ..core.constants import (
    BOILERPLATE_PHRASES,
    DANGLING_ENDING,
    EXPERIENCE_FIELDS,
    TRUNCATION_SUFFIXES,
)
from ..models.job import JobRecord
from ..models.quality import (
    DataQualityIssue,
    DetectedLanguage,
    IssueSeverity,
    IssueType,
    PipelineStep,
)
from ..utils.text_utils import clean_text, find_phrase, is_blank
from ..utils.time_utils import parse_job_date, utc_now


@dataclass(frozen=True)
class DetectionContext:
    """Values derived once per record and shared by all detectors."""
    language: DetectedLanguage = DetectedLanguage.EN
    now: datetime = field(default_factory=utc_now)
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)


Detector = Callable[[JobRecord, DetectionContext], List[DataQualityIssue]]


def _issue(record: JobRecord, context: DetectionContext, suffix: str,
           issue_type: IssueType, severity: IssueSeverity, field_name: str,
           current_value, message: str, step: PipelineStep,
           recommendation: str) -> DataQualityIssue:
    return DataQualityIssue(
        id=f"{record.id}-{suffix}",
        job_id=record.id,
        issue_type=issue_type,
        severity=severity,
        field=field_name,
        current_value=current_value,
        message=message,
        likely_step=step,
        recommendation=recommendation,
        detected_at=context.now
    )


def check_scraper_issues(record: JobRecord, context: DetectionContext) -> List[DataQualityIssue]:
    """Empty, short, boilerplate-only and truncated descriptions."""
    issues = []
    thresholds = context.thresholds
    desc = clean_text(record.description)
    desc_length = len(desc)

    if desc_length == 0:
        issues.append(_issue(
            record, context, 'empty-desc', IssueType.EMPTY_DESCRIPTION, IssueSeverity.CRITICAL,
            'description', None,
            'Description is empty - scraper may have failed to load page',
            PipelineStep.SCRAPER,
            'Re-run scraper for this agency. Check browser driver logs.'
        ))
        return issues

    if desc_length < thresholds.short_description_length:
        issues.append(_issue(
            record, context, 'short-desc', IssueType.SHORT_DESCRIPTION, IssueSeverity.WARNING,
            'description', desc_length,
            f'Description only {desc_length} chars - page may not have loaded fully',
            PipelineStep.SCRAPER,
            'Check scraper timeout settings and page load wait times.'
        ))

    phrase = find_phrase(desc.lower(), BOILERPLATE_PHRASES)
    if phrase and desc_length < thresholds.boilerplate_max_length:
        issues.append(_issue(
            record, context, 'boilerplate', IssueType.BOILERPLATE_CONTENT, IssueSeverity.WARNING,
            'description', phrase,
            f'Description contains boilerplate: "{phrase}" - real content may be in attachment',
            PipelineStep.SCRAPER,
            'Content may be in PDF/attachment not captured by scraper.'
        ))

    if is_truncated(desc, thresholds.truncation_min_length):
        issues.append(_issue(
            record, context, 'truncated', IssueType.TRUNCATED_CONTENT, IssueSeverity.WARNING,
            'description', desc[-50:],
            'Description appears truncated - page may have cut off',
            PipelineStep.SCRAPER,
            'Check scraper for content length limits or early termination.'
        ))

    return issues


def is_truncated(desc: str, min_length: int) -> bool:
    """Ellipsis ending, or a long text ending mid-sentence."""
    if desc.endswith(TRUNCATION_SUFFIXES):
        return True
    return len(desc) > min_length and DANGLING_ENDING.search(desc) is not None


def check_extractor_issues(record: JobRecord, context: DetectionContext) -> List[DataQualityIssue]:
    """Missing title and duty station."""
    issues = []

    if is_blank(record.title):
        issues.append(_issue(
            record, context, 'missing-title', IssueType.MISSING_TITLE, IssueSeverity.CRITICAL,
            'title', None,
            'Title is missing - extractor selectors may be wrong',
            PipelineStep.EXTRACTOR,
            'Check the agency extractor for title extraction selectors.'
        ))

    if is_blank(record.duty_station):
        issues.append(_issue(
            record, context, 'missing-station', IssueType.MISSING_DUTY_STATION, IssueSeverity.CRITICAL,
            'duty_station', None,
            'Duty station missing - check extractor field mapping',
            PipelineStep.EXTRACTOR,
            'Review the agency extractor for duty station selectors.'
        ))

    return issues


def check_geo_issues(record: JobRecord, context: DetectionContext) -> List[DataQualityIssue]:
    """Stations without a country and countries without a continent."""
    issues = []

    if not is_blank(record.duty_station) and is_blank(record.duty_country):
        issues.append(_issue(
            record, context, 'missing-country', IssueType.MISSING_COUNTRY, IssueSeverity.WARNING,
            'duty_country', record.duty_station,
            f'Duty station "{record.duty_station}" not mapped to country',
            PipelineStep.GEO,
            'Add city/country mapping to the geo lookup tables.'
        ))

    if not is_blank(record.duty_country) and is_blank(record.duty_continent):
        issues.append(_issue(
            record, context, 'missing-continent', IssueType.MISSING_CONTINENT, IssueSeverity.INFO,
            'duty_continent', record.duty_country,
            f'Country "{record.duty_country}" not mapped to continent',
            PipelineStep.GEO,
            'Add country/continent mapping to the geo lookup tables.'
        ))

    return issues


def check_enrichment_issues(record: JobRecord, context: DetectionContext) -> List[DataQualityIssue]:
    """Outputs of the model-backed stages: jobexp, lang, labelor and categorizer."""
    issues = []

    if all(getattr(record, name) is None for name in EXPERIENCE_FIELDS):
        issues.append(_issue(
            record, context, 'null-exp', IssueType.NULL_EXPERIENCE_FIELDS, IssueSeverity.WARNING,
            'experience', None,
            'All experience fields are null - experience inference (jobexp) may have failed',
            PipelineStep.JOBEXP,
            'Check enrichment model API logs and rate limits.'
        ))

    if is_blank(record.languages):
        issues.append(_issue(
            record, context, 'empty-lang', IssueType.EMPTY_LANGUAGES, IssueSeverity.INFO,
            'languages', None,
            'Languages field is empty - language tagging (lang) may have failed',
            PipelineStep.LANG,
            "Not critical - many jobs don't specify languages."
        ))

    if is_blank(record.job_labels):
        non_english = context.language != DetectedLanguage.EN
        detected_note = f' (detected {context.language.value} content)' if non_english else ''
        issues.append(_issue(
            record, context, 'empty-labels', IssueType.EMPTY_LABELS, IssueSeverity.WARNING,
            'job_labels', None,
            f'Job labels empty{detected_note} - label generation (labelor) may have failed',
            PipelineStep.LABELOR,
            'Non-English content may cause labelor to fail. Consider pre-translation.'
            if non_english else 'Check enrichment model API timeout or rate limit.'
        ))

    if is_blank(record.sectoral_category):
        issues.append(_issue(
            record, context, 'null-category', IssueType.NULL_SECTORAL_CATEGORY, IssueSeverity.WARNING,
            'sectoral_category', None,
            'Sectoral category is null - categorizer may have failed',
            PipelineStep.CATEGORIZER,
            'Job will use frontend ML classification as fallback.'
        ))

    return issues


def check_clean_issues(record: JobRecord, context: DetectionContext) -> List[DataQualityIssue]:
    """Missing, unparsable, future and inverted dates."""
    issues = []

    if is_blank(record.posting_date):
        issues.append(_issue(
            record, context, 'no-posting-date', IssueType.DATE_PARSE_ERROR, IssueSeverity.WARNING,
            'posting_date', None,
            'Posting date is missing',
            PipelineStep.CLEAN,
            'Check date extraction and parsing in the clean step.'
        ))
        return issues

    posted = parse_job_date(record.posting_date)
    if posted is None:
        issues.append(_issue(
            record, context, 'bad-posting-date', IssueType.DATE_PARSE_ERROR, IssueSeverity.WARNING,
            'posting_date', record.posting_date,
            f'Posting date "{record.posting_date}" could not be parsed',
            PipelineStep.CLEAN,
            'Check date extraction and parsing in the clean step.'
        ))
        return issues

    if posted > context.now:
        issues.append(_issue(
            record, context, 'future-posting', IssueType.FUTURE_POSTING_DATE, IssueSeverity.WARNING,
            'posting_date', record.posting_date,
            'Posting date is in the future',
            PipelineStep.CLEAN,
            'Check date format (DD/MM vs MM/DD) in the clean step.'
        ))

    if not is_blank(record.apply_until):
        deadline = parse_job_date(record.apply_until)
        if deadline is None:
            issues.append(_issue(
                record, context, 'bad-deadline', IssueType.DATE_PARSE_ERROR, IssueSeverity.WARNING,
                'apply_until', record.apply_until,
                f'Apply deadline "{record.apply_until}" could not be parsed',
                PipelineStep.CLEAN,
                'Check date extraction and parsing in the clean step.'
            ))
        elif deadline < posted:
            issues.append(_issue(
                record, context, 'deadline-before', IssueType.DEADLINE_BEFORE_POSTED, IssueSeverity.WARNING,
                'apply_until', f'Posted: {record.posting_date}, Deadline: {record.apply_until}',
                'Apply deadline is before posting date',
                PipelineStep.CLEAN,
                'Dates may be swapped or in wrong format.'
            ))

    return issues


def check_bertizer_issues(record: JobRecord, context: DetectionContext) -> List[DataQualityIssue]:
    """Labels present but never vectorized."""
    if is_blank(record.job_labels) or not is_blank(record.job_labels_vectorized):
        return []

    return [_issue(
        record, context, 'empty-vector', IssueType.EMPTY_VECTORIZED, IssueSeverity.INFO,
        'job_labels_vectorized', None,
        'Job has labels but no vectorized representation',
        PipelineStep.BERTIZER,
        'Vectorization may have failed due to memory or encoding issues.'
    )]


def check_classification_quality(record: JobRecord, context: DetectionContext) -> List[DataQualityIssue]:
    """Low classifier confidence."""
    thresholds = context.thresholds
    confidence = record.classification_confidence
    if confidence is None:
        confidence = thresholds.default_classification_confidence

    if confidence >= thresholds.low_confidence_threshold:
        return []

    return [_issue(
        record, context, 'low-confidence', IssueType.LOW_CLASSIFICATION_CONFIDENCE, IssueSeverity.INFO,
        'classification_confidence', confidence,
        f'Low classification confidence ({confidence:g}%) - may need manual review',
        PipelineStep.CATEGORIZER,
        'Consider manual review for ambiguous job classifications.'
    )]


# Registration order defines the order of issues inside an assessment.
STAGE_DETECTORS: Tuple[Detector, ...] = (
    check_scraper_issues,
    check_extractor_issues,
    check_geo_issues,
    check_enrichment_issues,
    check_clean_issues,
    check_bertizer_issues,
    check_classification_quality,
)


def run_detectors(record: JobRecord, context: DetectionContext,
                  detectors: Sequence[Detector] = STAGE_DETECTORS) -> Tuple[DataQualityIssue, ...]:
    """Concatenate the output of every detector in registration order."""
    issues: List[DataQualityIssue] = []
    for detector in detectors:
        issues.extend(detector(record, context))
    return tuple(issues)
