"""
Report export helpers for quality summaries.

Converts a DataQualitySummary into JSON-safe payloads and pandas tables for
dashboards and notebooks. Nothing here touches the filesystem; callers
decide where the output goes.
"""

import json
from typing import Any, Dict

import pandas as pd

from ..core.constants import PIPELINE_STEP_LABELS, PIPELINE_STEPS
from ..models.quality import DataQualitySummary


AGENCY_COLUMNS = ['agency', 'total_jobs', 'quality_score']
ISSUE_TYPE_COLUMNS = ['issue_type', 'count']
PIPELINE_COLUMNS = ['agency', 'last_run', 'jobs_processed', 'health_score'] + list(PIPELINE_STEPS)
DUPLICATE_COLUMNS = ['group', 'type', 'id', 'title', 'agency', 'duty_station', 'posting_date']


def summary_to_dict(summary: DataQualitySummary) -> Dict[str, Any]:
    """JSON-safe dictionary form of a summary."""
    return summary.to_dict()


def summary_to_json(summary: DataQualitySummary, indent: int = 2) -> str:
    return json.dumps(summary.to_dict(), indent=indent, ensure_ascii=False)


def summary_frames(summary: DataQualitySummary) -> Dict[str, pd.DataFrame]:
    """
    Tabular views of a summary.

    Args:
        summary: Summary produced by QualitySummaryBuilder

    Returns:
        Mapping of table name to DataFrame:
        - agencies: one row per agency, report order
        - issue_types: issue counts, largest first
        - pipeline_steps: issue counts for all ten stages with display labels
        - pipeline_health: per-agency stage issue counts, worst first
        - duplicates: one row per job in each duplicate group
    """
    agencies = pd.DataFrame(
        [
            {'agency': s.agency, 'total_jobs': s.total_jobs, 'quality_score': s.quality_score}
            for s in summary.by_agency
        ],
        columns=AGENCY_COLUMNS
    )

    issue_types = pd.DataFrame(
        sorted(summary.by_issue_type.items(), key=lambda item: item[1], reverse=True),
        columns=ISSUE_TYPE_COLUMNS
    )

    pipeline_steps = pd.DataFrame(
        [
            {'step': step, 'label': PIPELINE_STEP_LABELS[step], 'issues': summary.by_pipeline_step.get(step, 0)}
            for step in PIPELINE_STEPS
        ],
        columns=['step', 'label', 'issues']
    )

    pipeline_health = pd.DataFrame(
        [
            dict(
                agency=h.agency,
                last_run=h.last_run,
                jobs_processed=h.jobs_processed,
                health_score=h.health_score,
                **h.step_issues
            )
            for h in summary.agency_pipeline_health
        ],
        columns=PIPELINE_COLUMNS
    )

    duplicates = pd.DataFrame(
        [
            {
                'group': index,
                'type': group.type.value,
                'id': job.id,
                'title': job.title,
                'agency': job.agency,
                'duty_station': job.duty_station,
                'posting_date': job.posting_date,
            }
            for index, group in enumerate(summary.duplicate_groups)
            for job in group.jobs
        ],
        columns=DUPLICATE_COLUMNS
    )

    return {
        'agencies': agencies,
        'issue_types': issue_types,
        'pipeline_steps': pipeline_steps,
        'pipeline_health': pipeline_health,
        'duplicates': duplicates,
    }
