"""End-to-end quality summary tests."""

import json
import pytest
from types import SimpleNamespace

from job_quality.core.config import ProcessingConfig, QualitySettings
from job_quality.models.quality import (
    DateAnomalyType,
    DuplicateType,
    IssueSeverity,
    IssueType,
    QualityTrend,
)
from job_quality.services.quality_summary_builder import (
    QualitySummaryBuilder,
    assess_job,
    build_quality_summary,
)
from job_quality.services.report_export import summary_frames, summary_to_dict, summary_to_json


@pytest.mark.integration
class TestQualitySummaryPipeline:
    """Full builds over realistic batches."""

    def setup_method(self):
        self.builder = QualitySummaryBuilder()

    def test_empty_input_gives_zero_filled_summary(self, fixed_now):
        summary = self.builder.build([], now=fixed_now)

        assert summary.total_jobs == 0
        assert summary.clean_jobs == 0
        assert summary.overall_score == 0.0
        assert summary.trend == QualityTrend.STABLE
        assert summary.by_severity == {'critical': 0, 'warning': 0, 'info': 0}
        assert len(summary.by_pipeline_step) == 10
        assert set(summary.by_pipeline_step.values()) == {0}
        assert summary.by_agency == ()
        assert summary.duplicate_groups == ()
        assert summary.failure_patterns == ()
        assert summary.language_issues.total_non_english == 0
        assert summary.last_refreshed == fixed_now

    def test_clean_batch(self, clean_jobs, fixed_now):
        summary = self.builder.build(clean_jobs, now=fixed_now)

        assert summary.total_jobs == 100
        assert summary.clean_jobs == 100
        assert summary.jobs_with_issues == 0
        assert summary.overall_score == pytest.approx(100.0)
        assert summary.duplicate_groups == ()
        assert summary.date_anomalies == ()
        assert summary.by_agency[0].total_jobs == 100

    def test_shared_uniquecode(self, make_job, fixed_now):
        jobs = [
            make_job("a", uniquecode="X1"),
            make_job("b", uniquecode="X1"),
            make_job("c"),
        ]
        summary = self.builder.build(jobs, now=fixed_now)

        assert len(summary.duplicate_groups) == 1
        assert summary.duplicate_groups[0].type == DuplicateType.SAME_UNIQUECODE
        assert {job.id for job in summary.duplicate_groups[0].jobs} == {"a", "b"}

    def test_reposted_job_within_window(self, make_job, fixed_now):
        jobs = [
            make_job("a", title="Driver", posting_date="2026-09-01"),
            make_job("b", title="Driver", posting_date="2026-09-15"),
            make_job("c", title="Driver", duty_station="Nairobi", posting_date="2026-09-15"),
        ]
        summary = self.builder.build(jobs, now=fixed_now)

        assert [g.type for g in summary.duplicate_groups] == [DuplicateType.SAME_TITLE_AGENCY_LOCATION]
        assert all(len(g.jobs) >= 2 for g in summary.duplicate_groups)

    def test_postings_45_days_apart(self, make_job, fixed_now):
        jobs = [
            make_job("a", title="Driver", posting_date="2026-07-01", apply_until="2026-07-30"),
            make_job("b", title="Driver", posting_date="2026-08-15", apply_until="2026-09-30"),
        ]
        summary = self.builder.build(jobs, now=fixed_now)

        assert summary.duplicate_groups == ()

    def test_deadline_before_posted(self, make_job, fixed_now):
        summary = self.builder.build(
            [make_job("a", posting_date="2025-06-01", apply_until="2025-05-01")],
            now=fixed_now
        )

        assert [a.issue_type for a in summary.date_anomalies] == [DateAnomalyType.DEADLINE_BEFORE_POSTED]
        assert summary.by_issue_type == {'deadline_before_posted': 1}
        assert summary.warning_issues == 1
        assert summary.by_pipeline_step['clean'] == 1

    def test_empty_description(self, make_job, fixed_now):
        summary = self.builder.build([make_job("a", description="")], now=fixed_now)

        assert summary.by_issue_type == {'empty_description': 1}
        assert summary.critical_issues == 1
        assert summary.content_issues.empty_description_count == 1
        assert summary.scraper_extractor_issues.total_issues == 1

    def test_dirty_batch_counts_are_consistent(self, make_job, fixed_now):
        jobs = [
            make_job("a"),
            make_job("b", description="See attached.", job_labels=None, sectoral_category=None),
            make_job("c", duty_country=None, duty_station="Genève", up_grade="Senior"),
            make_job("d", title=None, posting_date="someday", classification_confidence=12),
            {'title': 'Orphan record'},
        ]
        summary = self.builder.build(jobs, now=fixed_now)

        total_issues = summary.critical_issues + summary.warning_issues + summary.info_issues
        assert summary.total_jobs == 5
        assert summary.clean_jobs + summary.jobs_with_issues == 5
        assert sum(summary.by_issue_type.values()) == total_issues
        assert sum(summary.by_pipeline_step.values()) == total_issues
        assert sum(s.total_jobs for s in summary.by_agency) == 5
        assert 0.0 <= summary.overall_score <= 100.0
        assert summary.unmapped_locations[0].suggested_mapping.city == "Geneva"
        assert summary.unrecognized_grades[0].grade_value == "Senior"
        assert summary.failure_patterns

    def test_malformed_records_become_placeholders(self, make_job, fixed_now):
        jobs = [make_job("a"), 42, None, SimpleNamespace(id="obj", title="Driver")]
        summary = self.builder.build(jobs, now=fixed_now)

        assert summary.total_jobs == 4
        assert summary.clean_jobs == 1
        empty_ids = {s.id for s in summary.content_issues.empty_description_samples}
        assert empty_ids == {"unknown-1", "unknown-2", "obj"}

    def test_build_is_idempotent(self, make_job, fixed_now):
        jobs = [
            make_job("a", uniquecode="X1"),
            make_job("b", uniquecode="X1", description="Short."),
            make_job("c", posting_date=None),
        ]

        first = self.builder.build(jobs, now=fixed_now)
        second = self.builder.build(jobs, now=fixed_now)

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_parallel_matches_sequential(self, make_job, fixed_now):
        jobs = [
            make_job(f"job-{i}", description="Short." if i % 3 == 0 else make_job()['description'],
                     job_labels=None if i % 4 == 0 else "labels")
            for i in range(40)
        ]
        parallel = QualitySummaryBuilder(QualitySettings(
            processing=ProcessingConfig(max_workers=4, chunk_size=5)
        ))

        assert parallel.build(jobs, now=fixed_now) == self.builder.build(jobs, now=fixed_now)

    def test_assess_single_job(self, make_job, fixed_now):
        assessment = assess_job(make_job("a", description="Short."), now=fixed_now)

        assert assessment.job_id == "a"
        assert assessment.issue_types() == ('short_description',)
        assert assessment.issues[0].severity == IssueSeverity.WARNING
        assert assessment.quality_score.completeness == 80.0

    def test_convenience_wrapper(self, make_job, fixed_now):
        summary = build_quality_summary([make_job("a")], now=fixed_now)

        assert summary.clean_jobs == 1


@pytest.mark.integration
class TestReportExport:
    """Export of a built summary."""

    @pytest.fixture
    def summary(self, make_job, fixed_now):
        jobs = [
            make_job("a", uniquecode="X1", short_agency="WFP"),
            make_job("b", uniquecode="X1", short_agency="WFP", description=""),
            make_job("c", short_agency="FAO", job_labels=None),
        ]
        return QualitySummaryBuilder().build(jobs, now=fixed_now)

    def test_to_dict_is_json_safe(self, summary):
        payload = summary_to_dict(summary)

        assert payload['trend'] == 'stable'
        assert payload['last_refreshed'] == '2026-10-19T12:00:00Z'
        assert payload['duplicate_groups'][0]['type'] == 'same_uniquecode'
        assert json.loads(json.dumps(payload)) == payload

    def test_to_json(self, summary):
        payload = json.loads(summary_to_json(summary))

        assert payload['total_jobs'] == 3
        assert payload['by_severity']['critical'] == 1

    def test_frames(self, summary):
        frames = summary_frames(summary)

        assert set(frames) == {'agencies', 'issue_types', 'pipeline_steps', 'pipeline_health', 'duplicates'}
        assert list(frames['agencies']['agency']) == ['WFP', 'FAO']
        assert len(frames['pipeline_steps']) == 10
        assert frames['pipeline_steps'].set_index('step').loc['bertizer', 'label'] == 'BERT'
        assert len(frames['duplicates']) == 2
        assert frames['issue_types']['count'].sum() == sum(summary.by_issue_type.values())
        assert 'scraper' in frames['pipeline_health'].columns
