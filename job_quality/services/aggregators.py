"""Roll-ups of per-record assessments into report statistics."""

from collections import Counter
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.config import LimitConfig, ThresholdConfig
from ..core.constants import BOILERPLATE_PHRASES, LANGUAGE_ORDER, PIPELINE_STEPS, TRUNCATION_SUFFIXES
from ..models.job import JobRecord
from ..models.quality import (
    AgencyLanguageBreakdown,
    AgencyPipelineHealth,
    AgencyQualityStats,
    AgencyShare,
    ContentIssueSummary,
    DetectedLanguage,
    EmptyDescriptionSample,
    ImpactCorrelation,
    IssueSeverity,
    IssueType,
    JobQualityAssessment,
    LanguageImpact,
    LanguageIssueSummary,
    PhraseCount,
    ScraperExtractorSummary,
    ScraperIssueBreakdown,
    ScraperSample,
    ShortDescriptionSample,
)
from ..utils.number_utils import percent, round_half_up
from ..utils.text_utils import clean_text, find_phrase, is_blank, make_preview


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _group_by_agency(assessments: Sequence[JobQualityAssessment]) -> Dict[str, List[JobQualityAssessment]]:
    groups: Dict[str, List[JobQualityAssessment]] = {}
    for assessment in assessments:
        groups.setdefault(assessment.agency, []).append(assessment)
    return groups


def _zero_language_counts() -> Dict[str, int]:
    return {lang: 0 for lang in LANGUAGE_ORDER}


class QualityAggregator:
    """Builds the statistical sections of the quality summary."""

    def __init__(self,
                 thresholds: Optional[ThresholdConfig] = None,
                 limits: Optional[LimitConfig] = None):
        self.thresholds = thresholds or ThresholdConfig()
        self.limits = limits or LimitConfig()

    # Issue counts

    def count_by_severity(self, assessments: Sequence[JobQualityAssessment]) -> Dict[str, int]:
        counts = {severity.value: 0 for severity in IssueSeverity}
        for assessment in assessments:
            for issue in assessment.issues:
                counts[issue.severity.value] += 1
        return counts

    def aggregate_by_issue_type(self, assessments: Sequence[JobQualityAssessment]) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for assessment in assessments:
            for issue in assessment.issues:
                counts[issue.issue_type.value] = counts.get(issue.issue_type.value, 0) + 1
        return counts

    def aggregate_by_pipeline_step(self, assessments: Sequence[JobQualityAssessment]) -> Dict[str, int]:
        counts = {step: 0 for step in PIPELINE_STEPS}
        for assessment in assessments:
            for issue in assessment.issues:
                counts[issue.likely_step.value] += 1
        return counts

    def overall_score(self, assessments: Sequence[JobQualityAssessment]) -> float:
        """Mean overall score, 0.0 for an empty batch."""
        return round_half_up(_mean([a.quality_score.overall for a in assessments]))

    # Agency tables

    def calculate_agency_stats(self, assessments: Sequence[JobQualityAssessment]) -> Tuple[AgencyQualityStats, ...]:
        stats = []
        for agency, group in _group_by_agency(assessments).items():
            issues_by_type: Dict[str, int] = {}
            issues_by_step: Dict[str, int] = {}
            language_breakdown: Dict[str, int] = {}

            for assessment in group:
                lang = assessment.detected_language.value
                language_breakdown[lang] = language_breakdown.get(lang, 0) + 1
                for issue in assessment.issues:
                    issues_by_type[issue.issue_type.value] = issues_by_type.get(issue.issue_type.value, 0) + 1
                    issues_by_step[issue.likely_step.value] = issues_by_step.get(issue.likely_step.value, 0) + 1

            stats.append(AgencyQualityStats(
                agency=agency,
                total_jobs=len(group),
                quality_score=round_half_up(_mean([a.quality_score.overall for a in group])),
                issues_by_type=issues_by_type,
                issues_by_step=issues_by_step,
                language_breakdown=language_breakdown
            ))

        return tuple(sorted(stats, key=lambda s: s.total_jobs, reverse=True))

    def calculate_agency_pipeline_health(self, assessments: Sequence[JobQualityAssessment],
                                         now: datetime) -> Tuple[AgencyPipelineHealth, ...]:
        """Per-agency stage issue counts, worst health score first."""
        last_run = now.strftime('%H:%M')
        health = []
        for agency, group in _group_by_agency(assessments).items():
            step_issues = {step: 0 for step in PIPELINE_STEPS}
            for assessment in group:
                for issue in assessment.issues:
                    step_issues[issue.likely_step.value] += 1

            health.append(AgencyPipelineHealth(
                agency=agency,
                last_run=last_run,
                jobs_processed=len(group),
                health_score=int(round_half_up(_mean([a.quality_score.overall for a in group]), 0)),
                step_issues=step_issues
            ))

        return tuple(sorted(health, key=lambda h: h.health_score))

    # Language

    def analyze_language_issues(self, assessments: Sequence[JobQualityAssessment]) -> LanguageIssueSummary:
        english_like = (DetectedLanguage.EN, DetectedLanguage.UNKNOWN)
        non_english = [a for a in assessments if a.detected_language not in english_like]

        by_language = _zero_language_counts()
        for assessment in assessments:
            by_language[assessment.detected_language.value] += 1

        agency_breakdowns: Dict[str, Dict[str, int]] = {}
        for assessment in non_english:
            breakdown = agency_breakdowns.setdefault(assessment.agency, _zero_language_counts())
            breakdown[assessment.detected_language.value] += 1

        by_agency = sorted(
            (AgencyLanguageBreakdown(agency=agency, count=sum(breakdown.values()), breakdown=breakdown)
             for agency, breakdown in agency_breakdowns.items()),
            key=lambda entry: entry.count,
            reverse=True
        )

        return LanguageIssueSummary(
            total_non_english=len(non_english),
            by_language=by_language,
            by_agency=tuple(by_agency),
            impact_correlation=ImpactCorrelation(
                empty_labels=self._language_impact(assessments, IssueType.EMPTY_LABELS),
                null_category=self._language_impact(assessments, IssueType.NULL_SECTORAL_CATEGORY)
            )
        )

    @staticmethod
    def _language_impact(assessments: Sequence[JobQualityAssessment], issue_type: IssueType) -> LanguageImpact:
        counts = Counter(
            a.detected_language for a in assessments
            if a.has_any_issue((issue_type.value,))
        )
        return LanguageImpact(
            french=counts[DetectedLanguage.FR],
            spanish=counts[DetectedLanguage.ES],
            arabic=counts[DetectedLanguage.AR],
            english=counts[DetectedLanguage.EN]
        )

    # Content and scraper/extractor

    def analyze_content_issues(self, records: Sequence[JobRecord]) -> ContentIssueSummary:
        thresholds = self.thresholds
        sample_cap = self.limits.max_content_samples

        short_desc = []
        empty_desc = []
        boilerplate_jobs = 0
        phrase_counts: Dict[str, int] = {}
        empty_labels = 0
        missing_requirements = 0

        for record in records:
            desc = clean_text(record.description)
            desc_lower = desc.lower()

            if not desc:
                empty_desc.append(record)
            elif len(desc) < thresholds.short_description_length:
                short_desc.append(record)

            for phrase in BOILERPLATE_PHRASES:
                if phrase in desc_lower:
                    phrase_counts[phrase] = phrase_counts.get(phrase, 0) + 1
            if find_phrase(desc_lower, BOILERPLATE_PHRASES) and len(desc) < thresholds.boilerplate_max_length:
                boilerplate_jobs += 1

            if is_blank(record.job_labels):
                empty_labels += 1

            if len(clean_text(record.ideal_candidate)) < thresholds.missing_requirements_length:
                missing_requirements += 1

        phrases = sorted(
            (PhraseCount(phrase=phrase, occurrences=count) for phrase, count in phrase_counts.items()),
            key=lambda p: p.occurrences,
            reverse=True
        )

        return ContentIssueSummary(
            short_description_count=len(short_desc),
            short_description_samples=tuple(
                ShortDescriptionSample(
                    id=r.id,
                    title=r.title or '[No Title]',
                    length=len(clean_text(r.description)),
                    preview=make_preview(clean_text(r.description))
                )
                for r in short_desc[:sample_cap]
            ),
            empty_description_count=len(empty_desc),
            empty_description_samples=tuple(
                EmptyDescriptionSample(id=r.id, title=r.title or '[No Title]')
                for r in empty_desc[:sample_cap]
            ),
            boilerplate_count=boilerplate_jobs,
            boilerplate_phrases=tuple(phrases),
            empty_labels_count=empty_labels,
            missing_requirements_count=missing_requirements
        )

    def analyze_scraper_extractor_issues(self, records: Sequence[JobRecord]) -> ScraperExtractorSummary:
        thresholds = self.thresholds
        found: List[Tuple[JobRecord, str]] = []

        for record in records:
            desc = clean_text(record.description)
            desc_length = len(desc)

            if desc_length == 0:
                found.append((record, 'empty_description'))
            elif desc_length < thresholds.short_description_length:
                found.append((record, 'short_description'))

            if find_phrase(desc.lower(), BOILERPLATE_PHRASES) and desc_length < thresholds.boilerplate_max_length:
                found.append((record, 'boilerplate_only'))

            if is_blank(record.title) or is_blank(record.duty_station):
                found.append((record, 'missing_critical_fields'))

            if desc.endswith(TRUNCATION_SUFFIXES):
                found.append((record, 'truncated_content'))

        issue_counts = Counter(kind for _, kind in found)
        agency_counts = Counter(record.agency for record, _ in found)
        total_jobs = len(records)

        by_agency = sorted(
            (AgencyShare(agency=agency, count=count, percentage=percent(count, total_jobs))
             for agency, count in agency_counts.items()),
            key=lambda share: share.count,
            reverse=True
        )

        return ScraperExtractorSummary(
            total_issues=len(found),
            by_issue_type=ScraperIssueBreakdown(
                short_description=issue_counts['short_description'],
                boilerplate_only=issue_counts['boilerplate_only'],
                missing_critical_fields=issue_counts['missing_critical_fields'],
                truncated_content=issue_counts['truncated_content']
            ),
            by_agency=tuple(by_agency),
            samples=tuple(
                ScraperSample(
                    id=record.id,
                    agency=record.agency,
                    title=record.title,
                    desc_length=len(clean_text(record.description)),
                    issue=kind
                )
                for record, kind in found[:self.limits.max_scraper_samples]
            )
        )
