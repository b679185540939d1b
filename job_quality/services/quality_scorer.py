"""Four-dimension quality scoring for a job record and its issues."""

from typing import Dict, Optional, Sequence

from ..core.config import ThresholdConfig
from ..core.constants import COMPLETENESS_WEIGHTS, SCORE_CEILING, SEVERITY_PENALTIES
from ..models.job import JobRecord
from ..models.quality import DataQualityIssue, DataQualityScore
from ..utils.number_utils import round_half_up
from ..utils.text_utils import is_blank, text_length


def _clamp(value: float) -> float:
    return max(0.0, min(SCORE_CEILING, value))


class QualityScorer:
    """
    Converts a record and its issues into a DataQualityScore.

    completeness  100 minus the weight of each missing core field
    accuracy      100 minus a severity penalty per issue
    consistency   constant 100; cross-field consistency rules plug in here
    classification  the record's own classifier confidence
    """

    def __init__(self,
                 thresholds: Optional[ThresholdConfig] = None,
                 completeness_weights: Dict[str, float] = None,
                 severity_penalties: Dict[str, float] = None):
        self.thresholds = thresholds or ThresholdConfig()
        self.completeness_weights = completeness_weights or COMPLETENESS_WEIGHTS
        self.severity_penalties = severity_penalties or SEVERITY_PENALTIES

    def score(self, record: JobRecord, issues: Sequence[DataQualityIssue]) -> DataQualityScore:
        completeness = _clamp(self.completeness(record))
        accuracy = _clamp(self.accuracy(issues))
        consistency = _clamp(self.consistency(record))
        classification = _clamp(self.classification(record))

        overall = (completeness + accuracy + consistency + classification) / 4

        return DataQualityScore(
            overall=max(0.0, round_half_up(overall)),
            completeness=completeness,
            accuracy=accuracy,
            consistency=consistency,
            classification=classification
        )

    def completeness(self, record: JobRecord) -> float:
        score = SCORE_CEILING
        weights = self.completeness_weights

        for field_name in ('title', 'duty_station', 'duty_country', 'up_grade',
                           'job_labels', 'posting_date', 'apply_until'):
            if is_blank(getattr(record, field_name)):
                score -= weights[field_name]

        if text_length(record.description) < self.thresholds.short_description_length:
            score -= weights['description']

        return score

    def accuracy(self, issues: Sequence[DataQualityIssue]) -> float:
        score = SCORE_CEILING
        for issue in issues:
            score -= self.severity_penalties[issue.severity.value]
        return score

    def consistency(self, record: JobRecord) -> float:
        return SCORE_CEILING

    def classification(self, record: JobRecord) -> float:
        if record.classification_confidence is None:
            return self.thresholds.default_classification_confidence
        return record.classification_confidence
