"""Location, grade and date anomaly detection with suggested fixes."""

from collections import Counter
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from ..core.config import LimitConfig
from ..core.constants import (
    GRADE_INTERPRETATIONS,
    LOCATION_ALIASES,
    MULTIPLE_KEYWORDS,
    REMOTE_KEYWORDS,
    VALID_GRADE_PATTERNS,
)
from ..models.job import JobRecord
from ..models.quality import (
    DateAnomaly,
    DateAnomalyType,
    LocationSuggestion,
    UnmappedLocation,
    UnrecognizedGrade,
)
from ..utils.text_utils import clean_text, is_blank
from ..utils.time_utils import ensure_utc, parse_job_date, utc_now


def suggest_location_mapping(station: str) -> Optional[LocationSuggestion]:
    """
    Best-effort city/country guess for an unmapped duty station.

    Args:
        station: Raw duty station string

    Returns:
        Suggested mapping or None
    """
    station_lower = station.strip().lower()

    alias = LOCATION_ALIASES.get(station_lower)
    if alias:
        return LocationSuggestion(**alias)

    if any(keyword in station_lower for keyword in REMOTE_KEYWORDS):
        return LocationSuggestion(city='Remote', country='Global')

    if any(keyword in station_lower for keyword in MULTIPLE_KEYWORDS):
        return LocationSuggestion(city='Multiple', country='Various')

    return None


def is_valid_grade(grade: str) -> bool:
    """Check a grade against the recognized UN grade formats."""
    return any(pattern.search(grade) for pattern in VALID_GRADE_PATTERNS)


def suggest_grade_interpretation(grade: str) -> Optional[str]:
    grade_lower = grade.lower()
    for keyword, interpretation in GRADE_INTERPRETATIONS:
        if keyword in grade_lower:
            return interpretation
    return None


class AnomalyDetector:
    """Finds unmapped locations, unrecognized grades and date anomalies."""

    def __init__(self, limits: Optional[LimitConfig] = None):
        self.limits = limits or LimitConfig()

    def find_unmapped_locations(self, records: Sequence[JobRecord]) -> Tuple[UnmappedLocation, ...]:
        """Stations with no country, most frequent first."""
        counts = Counter()
        for record in records:
            if not is_blank(record.duty_station) and is_blank(record.duty_country):
                counts[clean_text(record.duty_station)] += 1

        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return tuple(
            UnmappedLocation(
                duty_station=station,
                count=count,
                suggested_mapping=suggest_location_mapping(station)
            )
            for station, count in ranked[:self.limits.max_unmapped_locations]
        )

    def find_unrecognized_grades(self, records: Sequence[JobRecord]) -> Tuple[UnrecognizedGrade, ...]:
        """Grades outside the recognized formats, most frequent first."""
        counts = Counter()
        for record in records:
            grade = clean_text(record.up_grade)
            if grade and not is_valid_grade(grade):
                counts[grade] += 1

        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return tuple(
            UnrecognizedGrade(
                grade_value=grade,
                count=count,
                suggested_interpretation=suggest_grade_interpretation(grade)
            )
            for grade, count in ranked[:self.limits.max_unrecognized_grades]
        )

    def find_date_anomalies(self, records: Sequence[JobRecord],
                            now: Optional[datetime] = None) -> Tuple[DateAnomaly, ...]:
        """
        Classify date problems per record.

        missing_posting, missing_deadline and invalid_format are exclusive
        and checked in that order. Once both dates parse, future_posting and
        deadline_before_posted are checked independently, so one record can
        produce both.
        """
        now = ensure_utc(now) if now else utc_now()
        cap = self.limits.max_date_anomalies
        anomalies: List[DateAnomaly] = []

        for record in records:
            anomalies.extend(self._classify_dates(record, now))
            if len(anomalies) >= cap:
                break

        return tuple(anomalies[:cap])

    @staticmethod
    def _classify_dates(record: JobRecord, now: datetime) -> List[DateAnomaly]:
        def anomaly(issue_type: DateAnomalyType) -> DateAnomaly:
            return DateAnomaly(
                job_id=record.id,
                agency=record.agency,
                posting_date=None if is_blank(record.posting_date) else record.posting_date,
                apply_until=None if is_blank(record.apply_until) else record.apply_until,
                issue_type=issue_type
            )

        if is_blank(record.posting_date):
            return [anomaly(DateAnomalyType.MISSING_POSTING)]

        if is_blank(record.apply_until):
            return [anomaly(DateAnomalyType.MISSING_DEADLINE)]

        posted = parse_job_date(record.posting_date)
        deadline = parse_job_date(record.apply_until)
        if posted is None or deadline is None:
            return [anomaly(DateAnomalyType.INVALID_FORMAT)]

        found = []
        if posted > now:
            found.append(anomaly(DateAnomalyType.FUTURE_POSTING))
        if deadline < posted:
            found.append(anomaly(DateAnomalyType.DEADLINE_BEFORE_POSTED))
        return found
