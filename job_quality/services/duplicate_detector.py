"""Duplicate and near-duplicate job detection."""

from datetime import timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from fuzzywuzzy import fuzz

from ..core.config import DuplicateConfig, LimitConfig, ThresholdConfig
from ..core.logging import get_logger
from ..models.job import JobRecord
from ..models.quality import DuplicateGroup, DuplicateJob, DuplicateType
from ..utils.text_utils import clean_text, is_blank
from ..utils.time_utils import date_span, parse_job_date

logger = get_logger(__name__)


RECOMMENDATIONS = {
    DuplicateType.SAME_UNIQUECODE: 'Same uniquecode - keep the most recent record.',
    DuplicateType.SAME_TITLE_AGENCY_LOCATION: (
        'Same title, agency, and location within {days} days - may be re-posted position.'
    ),
    DuplicateType.HIGH_SIMILARITY: (
        'Near-identical titles at the same agency and location - check for variant postings.'
    ),
}


def to_duplicate_job(record: JobRecord, include_uniquecode: bool = False) -> DuplicateJob:
    return DuplicateJob(
        id=record.id,
        title=record.title or '[No Title]',
        agency=record.agency,
        duty_station=record.duty_station or '',
        posting_date=record.posting_date or '',
        apply_until=record.apply_until or '',
        status=record.status or 'unknown',
        uniquecode=record.uniquecode if include_uniquecode else None
    )


class DuplicateDetector:
    """
    Clusters records that look like the same posting.

    Strategies run independently and their groups are concatenated in
    discovery order:

    1. same_uniquecode - records sharing a non-empty uniquecode.
    2. same_title_agency_location - same case-insensitive title, agency and
       duty station, with posting dates spanning less than the window.
       Groups with fewer than two parsable dates cannot be verified and are
       skipped.
    3. high_similarity (opt-in) - fuzzy title matches within one agency and
       duty station.
    """

    def __init__(self,
                 thresholds: Optional[ThresholdConfig] = None,
                 limits: Optional[LimitConfig] = None,
                 config: Optional[DuplicateConfig] = None):
        self.thresholds = thresholds or ThresholdConfig()
        self.limits = limits or LimitConfig()
        self.config = config or DuplicateConfig()

    def detect(self, records: Sequence[JobRecord]) -> Tuple[DuplicateGroup, ...]:
        groups: List[DuplicateGroup] = []
        groups.extend(self.find_same_uniquecode(records))
        groups.extend(self.find_same_title_agency_location(records))

        if self.config.enable_similarity_matching:
            groups.extend(self.find_high_similarity(records))

        if len(groups) > self.limits.max_duplicate_groups:
            logger.info("Duplicate groups capped",
                       found=len(groups),
                       cap=self.limits.max_duplicate_groups)

        return tuple(groups[:self.limits.max_duplicate_groups])

    def find_same_uniquecode(self, records: Sequence[JobRecord]) -> List[DuplicateGroup]:
        buckets: Dict[str, List[JobRecord]] = {}
        for record in records:
            if is_blank(record.uniquecode):
                continue
            buckets.setdefault(record.uniquecode, []).append(record)

        return [
            DuplicateGroup(
                type=DuplicateType.SAME_UNIQUECODE,
                jobs=tuple(to_duplicate_job(r, include_uniquecode=True) for r in members),
                recommendation=RECOMMENDATIONS[DuplicateType.SAME_UNIQUECODE]
            )
            for members in buckets.values()
            if len(members) > 1
        ]

    def find_same_title_agency_location(self, records: Sequence[JobRecord]) -> List[DuplicateGroup]:
        window = timedelta(days=self.thresholds.duplicate_window_days)
        buckets: Dict[Tuple[str, str, str], List[JobRecord]] = {}
        for record in records:
            buckets.setdefault(self._title_key(record), []).append(record)

        groups = []
        for members in buckets.values():
            if len(members) < 2:
                continue

            dates = [d for d in (parse_job_date(r.posting_date) for r in members) if d is not None]
            span = date_span(dates)
            if span is None or span >= window:
                continue

            groups.append(DuplicateGroup(
                type=DuplicateType.SAME_TITLE_AGENCY_LOCATION,
                jobs=tuple(to_duplicate_job(r) for r in members),
                recommendation=RECOMMENDATIONS[DuplicateType.SAME_TITLE_AGENCY_LOCATION].format(
                    days=self.thresholds.duplicate_window_days
                )
            ))

        return groups

    def find_high_similarity(self, records: Sequence[JobRecord]) -> List[DuplicateGroup]:
        """Greedy clustering of fuzzy title matches per agency and station."""
        threshold = self.config.similarity_threshold
        buckets: Dict[Tuple[str, str], List[JobRecord]] = {}
        for record in records:
            if is_blank(record.title):
                continue
            key = ((record.short_agency or '').lower(), (record.duty_station or '').lower())
            buckets.setdefault(key, []).append(record)

        groups = []
        for members in buckets.values():
            clustered = set()
            for i, anchor in enumerate(members):
                if i in clustered:
                    continue
                anchor_title = clean_text(anchor.title).lower()
                cluster = [anchor]
                for j in range(i + 1, len(members)):
                    if j in clustered:
                        continue
                    title = clean_text(members[j].title).lower()
                    # Exact matches belong to the title/agency/location strategy
                    if title == anchor_title:
                        continue
                    if fuzz.token_sort_ratio(anchor_title, title) >= threshold:
                        cluster.append(members[j])
                        clustered.add(j)
                if len(cluster) > 1:
                    clustered.add(i)
                    groups.append(DuplicateGroup(
                        type=DuplicateType.HIGH_SIMILARITY,
                        jobs=tuple(to_duplicate_job(r) for r in cluster),
                        recommendation=RECOMMENDATIONS[DuplicateType.HIGH_SIMILARITY]
                    ))

        return groups

    @staticmethod
    def _title_key(record: JobRecord) -> Tuple[str, str, str]:
        return (
            (record.title or '').lower(),
            (record.short_agency or '').lower(),
            (record.duty_station or '').lower(),
        )
