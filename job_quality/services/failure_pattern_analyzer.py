"""Root-cause analysis across per-record assessments."""

from collections import Counter
from typing import Callable, List, Optional, Sequence, Tuple

from ..core.config import ThresholdConfig
from ..core.constants import ENRICHMENT_FAILURE_TYPES, LABEL_FAILURE_TYPES
from ..models.job import JobRecord
from ..models.quality import (
    AgencyCount,
    DetectedLanguage,
    FailurePattern,
    FailurePatternType,
    JobQualityAssessment,
)
from ..utils.number_utils import percent
from ..utils.text_utils import text_length

Assessed = Tuple[JobQualityAssessment, JobRecord]


PATTERN_TEXT = {
    FailurePatternType.NON_ENGLISH: (
        'Jobs in French/Spanish/Arabic where the enrichment model returned poor output',
        'Pre-translate or use multilingual model'
    ),
    FailurePatternType.RATE_LIMIT: (
        'Multiple enrichment stages failed on the same job (same agency, same run)',
        'Add retry logic, increase API quota'
    ),
    FailurePatternType.SHORT_INPUT: (
        'Description too short for meaningful model analysis',
        'Root cause: Scraper issue (cascading failure)'
    ),
}


def rank_agencies(assessments: Sequence[JobQualityAssessment]) -> Tuple[AgencyCount, ...]:
    """Agencies ordered by how many of the assessments they own."""
    counts = Counter(a.agency for a in assessments)
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return tuple(AgencyCount(agency=agency, count=count) for agency, count in ranked)


class FailurePatternAnalyzer:
    """
    Infers systemic causes behind labelling and categorisation failures.

    The failure population is every assessment with an empty_labels or
    null_sectoral_category issue. Patterns overlap freely: one record can
    count toward several of them.
    """

    def __init__(self, thresholds: Optional[ThresholdConfig] = None):
        self.thresholds = thresholds or ThresholdConfig()

    def analyze(self, assessments: Sequence[JobQualityAssessment],
                records: Sequence[JobRecord]) -> Tuple[FailurePattern, ...]:
        """
        Args:
            assessments: Per-record assessments
            records: Source records, aligned with assessments by position

        Returns:
            Non-empty patterns, largest first
        """
        pairs: List[Assessed] = list(zip(assessments, records))
        total_failures = sum(1 for a, _ in pairs if a.has_any_issue(LABEL_FAILURE_TYPES))

        matchers: List[Tuple[FailurePatternType, Callable[[Assessed], bool]]] = [
            (FailurePatternType.NON_ENGLISH, self._is_non_english_failure),
            (FailurePatternType.RATE_LIMIT, self._is_burst_failure),
            (FailurePatternType.SHORT_INPUT, self._is_short_input_failure),
        ]

        patterns = []
        for pattern_type, matches in matchers:
            matched = [a for a, r in pairs if matches((a, r))]
            if not matched:
                continue
            description, solution = PATTERN_TEXT[pattern_type]
            patterns.append(FailurePattern(
                pattern=pattern_type,
                count=len(matched),
                percentage=percent(len(matched), total_failures),
                affected_agencies=rank_agencies(matched),
                description=description,
                solution=solution
            ))

        return tuple(sorted(patterns, key=lambda p: p.count, reverse=True))

    def _is_non_english_failure(self, pair: Assessed) -> bool:
        assessment, _ = pair
        return (assessment.detected_language != DetectedLanguage.EN
                and assessment.has_any_issue(LABEL_FAILURE_TYPES))

    def _is_burst_failure(self, pair: Assessed) -> bool:
        assessment, _ = pair
        return assessment.count_issues(ENRICHMENT_FAILURE_TYPES) >= self.thresholds.rate_limit_min_failures

    def _is_short_input_failure(self, pair: Assessed) -> bool:
        assessment, record = pair
        return (text_length(record.description) < self.thresholds.short_description_length
                and assessment.has_any_issue(LABEL_FAILURE_TYPES))
