#!/usr/bin/env python3
"""
Job Data Quality Summary Builder

Composes language detection, stage detectors, scoring, duplicate and
anomaly detection and failure pattern analysis into one immutable
DataQualitySummary.

Key Features:
- Per-record assessment attributing each issue to a pipeline stage
- Four-dimension quality scoring
- Duplicate clustering and date/location/grade anomaly reports
- Cross-record root-cause (failure pattern) analysis
- Optional thread-pool fan-out for the per-record pass with ordered results
"""

import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence

from ..core.config import QualitySettings
from ..core.exceptions import DataValidationError
from ..core.logging import get_logger, log_processing_progress
from ..detectors.language_detector import LanguageDetector
from ..detectors.stage_detectors import DetectionContext, run_detectors
from ..models.job import JobRecord, placeholder_id
from ..models.quality import (
    DataQualitySummary,
    IssueSeverity,
    JobQualityAssessment,
    QualityTrend,
)
from ..utils.time_utils import ensure_utc, utc_now
from .aggregators import QualityAggregator
from .anomaly_detectors import AnomalyDetector
from .duplicate_detector import DuplicateDetector
from .failure_pattern_analyzer import FailurePatternAnalyzer
from .quality_scorer import QualityScorer

logger = get_logger(__name__)


class QualitySummaryBuilder:
    """
    Stateless quality engine service.

    Construct one with the settings you want and call build(); the service
    keeps no state between calls, so it can be shared freely. For a fixed
    ``now`` the output is fully deterministic.
    """

    def __init__(self, settings: Optional[QualitySettings] = None):
        self.settings = settings or QualitySettings()
        thresholds = self.settings.thresholds
        limits = self.settings.limits

        self.language_detector = LanguageDetector(
            confidence_floor=thresholds.language_confidence_floor,
            fallback_confidence=thresholds.language_fallback_confidence
        )
        self.scorer = QualityScorer(thresholds)
        self.aggregator = QualityAggregator(thresholds, limits)
        self.duplicate_detector = DuplicateDetector(thresholds, limits, self.settings.duplicates)
        self.anomaly_detector = AnomalyDetector(limits)
        self.pattern_analyzer = FailurePatternAnalyzer(thresholds)

    def assess_job(self, record: JobRecord, now: Optional[datetime] = None) -> JobQualityAssessment:
        """
        Assess a single job record.

        Args:
            record: Coerced job record
            now: Reference time for future-date checks

        Returns:
            Assessment with issues in detector registration order
        """
        detection = self.language_detector.detect(record.title, record.description)
        context = DetectionContext(
            language=detection.language,
            now=ensure_utc(now) if now else utc_now(),
            thresholds=self.settings.thresholds
        )

        issues = run_detectors(record, context)

        return JobQualityAssessment(
            job_id=record.id,
            agency=record.agency,
            title=record.title or '[No Title]',
            issues=issues,
            quality_score=self.scorer.score(record, issues),
            detected_language=detection.language,
            language_confidence=detection.confidence
        )

    def assess_all(self, records: Sequence[JobRecord], now: datetime) -> List[JobQualityAssessment]:
        """Per-record pass; results keep input order regardless of worker count."""
        processing = self.settings.processing

        if processing.max_workers > 1 and len(records) > processing.chunk_size:
            logger.debug("Assessing jobs in parallel",
                        workers=processing.max_workers,
                        jobs=len(records))
            with ThreadPoolExecutor(max_workers=processing.max_workers,
                                    thread_name_prefix="quality") as executor:
                return list(executor.map(lambda r: self.assess_job(r, now), records))

        return [self.assess_job(record, now) for record in records]

    def build(self, raw_records: Iterable[Any], now: Optional[datetime] = None) -> DataQualitySummary:
        """
        Analyze all jobs and generate the quality summary.

        Args:
            raw_records: Job records as mappings, objects or JobRecord instances
            now: Reference time; defaults to the current UTC time

        Returns:
            Immutable DataQualitySummary
        """
        start_time = time.time()
        now = ensure_utc(now) if now else utc_now()
        records = coerce_records(raw_records)

        logger.info("Starting data quality analysis", total_jobs=len(records))

        assessments = self.assess_all(records, now)
        logger.debug("Per-job assessment complete",
                    **log_processing_progress("assessment", len(assessments), len(records)))

        aggregator = self.aggregator
        by_severity = aggregator.count_by_severity(assessments)
        jobs_with_issues = sum(1 for a in assessments if a.has_issues)

        summary = DataQualitySummary(
            total_jobs=len(records),
            clean_jobs=len(records) - jobs_with_issues,
            jobs_with_issues=jobs_with_issues,
            critical_issues=by_severity[IssueSeverity.CRITICAL.value],
            warning_issues=by_severity[IssueSeverity.WARNING.value],
            info_issues=by_severity[IssueSeverity.INFO.value],
            overall_score=aggregator.overall_score(assessments),
            # No historical summaries are available here
            trend=QualityTrend.STABLE,
            by_issue_type=aggregator.aggregate_by_issue_type(assessments),
            by_severity=by_severity,
            by_pipeline_step=aggregator.aggregate_by_pipeline_step(assessments),
            by_agency=aggregator.calculate_agency_stats(assessments),
            agency_pipeline_health=aggregator.calculate_agency_pipeline_health(assessments, now),
            language_issues=aggregator.analyze_language_issues(assessments),
            content_issues=aggregator.analyze_content_issues(records),
            scraper_extractor_issues=aggregator.analyze_scraper_extractor_issues(records),
            duplicate_groups=self.duplicate_detector.detect(records),
            unmapped_locations=self.anomaly_detector.find_unmapped_locations(records),
            unrecognized_grades=self.anomaly_detector.find_unrecognized_grades(records),
            date_anomalies=self.anomaly_detector.find_date_anomalies(records, now),
            failure_patterns=self.pattern_analyzer.analyze(assessments, records),
            last_refreshed=now
        )

        logger.info("Data quality analysis completed",
                   total_jobs=summary.total_jobs,
                   clean_jobs=summary.clean_jobs,
                   overall_score=summary.overall_score,
                   duplicate_groups=len(summary.duplicate_groups),
                   duration_ms=round((time.time() - start_time) * 1000, 1))

        return summary


def coerce_records(raw_records: Iterable[Any]) -> List[JobRecord]:
    """
    Convert raw input into JobRecords.

    A record that cannot be coerced is replaced by an empty placeholder so
    the rest of the batch is still analyzed.
    """
    if raw_records is None:
        return []

    records = []
    for index, raw in enumerate(raw_records):
        try:
            records.append(JobRecord.from_raw(raw, index))
        except DataValidationError as e:
            logger.warning("Record could not be coerced, using placeholder",
                          index=index,
                          field_name=e.field_name,
                          error=str(e))
            records.append(JobRecord(id=placeholder_id(index)))
    return records


def assess_job(raw_record: Any, settings: Optional[QualitySettings] = None,
               now: Optional[datetime] = None) -> JobQualityAssessment:
    """Assess one raw record with a throwaway builder."""
    return QualitySummaryBuilder(settings).assess_job(coerce_records([raw_record])[0], now)


def build_quality_summary(raw_records: Iterable[Any], settings: Optional[QualitySettings] = None,
                          now: Optional[datetime] = None) -> DataQualitySummary:
    """Convenience wrapper around QualitySummaryBuilder.build."""
    return QualitySummaryBuilder(settings).build(raw_records, now)
