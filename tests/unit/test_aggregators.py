"""Unit tests for report aggregation."""

import pytest

from job_quality.core.config import LimitConfig
from job_quality.models.job import JobRecord
from job_quality.services.aggregators import QualityAggregator
from job_quality.services.quality_summary_builder import QualitySummaryBuilder


ARABIC_DESCRIPTION = "مسؤول برامج لإدارة المشاريع والتنسيق مع الشركاء الوطنيين في إطار البرنامج القطري للتنمية"


@pytest.fixture
def assess(fixed_now):
    builder = QualitySummaryBuilder()

    def run(raw_records):
        records = [JobRecord.from_raw(r) for r in raw_records]
        return [builder.assess_job(r, fixed_now) for r in records], records
    return run


class TestIssueCounts:
    """Test cases for severity, type and stage counts."""

    def setup_method(self):
        self.aggregator = QualityAggregator()

    def test_empty_batch_is_zero_filled(self):
        assert self.aggregator.count_by_severity([]) == {'critical': 0, 'warning': 0, 'info': 0}
        assert self.aggregator.aggregate_by_issue_type([]) == {}
        steps = self.aggregator.aggregate_by_pipeline_step([])
        assert len(steps) == 10
        assert set(steps.values()) == {0}
        assert self.aggregator.overall_score([]) == 0.0

    def test_counts(self, assess, make_job):
        assessments, _ = assess([
            make_job("a", description="", duty_continent=None),
            make_job("b", description="Tiny."),
        ])

        assert self.aggregator.count_by_severity(assessments) == {'critical': 1, 'warning': 1, 'info': 1}
        assert self.aggregator.aggregate_by_issue_type(assessments) == {
            'empty_description': 1,
            'missing_continent': 1,
            'short_description': 1,
        }
        steps = self.aggregator.aggregate_by_pipeline_step(assessments)
        assert steps['scraper'] == 2
        assert steps['geo'] == 1
        assert steps['import'] == 0

    def test_overall_score_is_rounded_mean(self, assess, make_job):
        assessments, _ = assess([
            make_job("a"),
            make_job("b", classification_confidence=62),
        ])

        assert self.aggregator.overall_score(assessments) == 95.3


class TestAgencyTables:
    """Test cases for per-agency statistics."""

    def setup_method(self):
        self.aggregator = QualityAggregator()

    def test_agency_stats_sorted_by_job_count(self, assess, make_job):
        assessments, _ = assess([
            make_job("a", short_agency="WFP"),
            make_job("b", short_agency="FAO", job_labels=None),
            make_job("c", short_agency="FAO"),
            make_job("d", short_agency=None, long_agency=None),
        ])
        stats = self.aggregator.calculate_agency_stats(assessments)

        assert [s.agency for s in stats][0] == "FAO"
        assert {s.agency for s in stats} == {"FAO", "WFP", "Unknown"}
        fao = stats[0]
        assert fao.total_jobs == 2
        assert fao.issues_by_type == {'empty_labels': 1}
        assert fao.issues_by_step == {'labelor': 1}
        assert fao.language_breakdown == {'en': 2}

    def test_pipeline_health_worst_first(self, assess, make_job, fixed_now):
        assessments, _ = assess([
            make_job("a", short_agency="WFP"),
            make_job("b", short_agency="FAO", description="", title=None),
        ])
        health = self.aggregator.calculate_agency_pipeline_health(assessments, fixed_now)

        assert [h.agency for h in health] == ["FAO", "WFP"]
        assert health[0].health_score < health[1].health_score
        assert health[1].health_score == 100
        assert health[0].last_run == "12:00"
        assert health[0].step_issues['scraper'] == 1
        assert health[0].step_issues['extractor'] == 1
        assert len(health[0].step_issues) == 10

    def test_health_score_rounds_halves_up(self, assess, make_job, fixed_now):
        assessments, _ = assess([make_job("a", classification_confidence=86)])
        health = self.aggregator.calculate_agency_pipeline_health(assessments, fixed_now)
        stats = self.aggregator.calculate_agency_stats(assessments)

        assert self.aggregator.overall_score(assessments) == 96.5
        assert stats[0].quality_score == 96.5
        assert health[0].health_score == 97


class TestLanguageSummary:
    """Test cases for language issue analysis."""

    def test_language_breakdown(self, assess, make_job):
        assessments, _ = assess([
            make_job("a"),
            make_job("b", title="", description=ARABIC_DESCRIPTION, job_labels=None, short_agency="UNHCR"),
            make_job("c", title="", description="", sectoral_category=None),
        ])
        summary = QualityAggregator().analyze_language_issues(assessments)

        assert summary.total_non_english == 1
        assert len(summary.by_language) == 9
        assert summary.by_language['en'] == 1
        assert summary.by_language['ar'] == 1
        assert summary.by_language['unknown'] == 1
        assert [(a.agency, a.count) for a in summary.by_agency] == [("UNHCR", 1)]
        assert summary.by_agency[0].breakdown['ar'] == 1
        assert summary.impact_correlation.empty_labels.arabic == 1
        assert summary.impact_correlation.null_category.english == 0


class TestContentAndScraperSummaries:
    """Test cases for content and scraper/extractor summaries."""

    def test_content_issues(self, make_job):
        records = [
            JobRecord.from_raw(make_job("a", description="  Brief.  ", ideal_candidate=None)),
            JobRecord.from_raw(make_job("b", description=None, job_labels="")),
            JobRecord.from_raw(make_job("c", description="Please see attached ToR.")),
            JobRecord.from_raw(make_job("d")),
        ]
        summary = QualityAggregator().analyze_content_issues(records)

        assert summary.short_description_count == 2
        assert summary.short_description_samples[0].length == 6
        assert summary.short_description_samples[0].preview == "Brief...."
        assert summary.empty_description_count == 1
        assert summary.empty_description_samples[0].id == "b"
        assert summary.boilerplate_count == 1
        assert [(p.phrase, p.occurrences) for p in summary.boilerplate_phrases] == [("see attached", 1)]
        assert summary.empty_labels_count == 1
        assert summary.missing_requirements_count == 1

    def test_content_samples_are_capped(self, make_job):
        records = [JobRecord.from_raw(make_job(f"j{i}", description="Short.")) for i in range(5)]
        aggregator = QualityAggregator(limits=LimitConfig(max_content_samples=2))

        summary = aggregator.analyze_content_issues(records)

        assert summary.short_description_count == 5
        assert len(summary.short_description_samples) == 2

    def test_scraper_extractor_issues(self, make_job):
        records = [
            JobRecord.from_raw(make_job("a", description="Please see attached ToR...", short_agency="WFP")),
            JobRecord.from_raw(make_job("b", duty_station=None, short_agency="FAO")),
            JobRecord.from_raw(make_job("c", description="", short_agency="FAO")),
            JobRecord.from_raw(make_job("d", short_agency="FAO")),
        ]
        summary = QualityAggregator().analyze_scraper_extractor_issues(records)

        assert summary.total_issues == 5
        breakdown = summary.by_issue_type
        assert breakdown.short_description == 1
        assert breakdown.boilerplate_only == 1
        assert breakdown.missing_critical_fields == 1
        assert breakdown.truncated_content == 1
        assert [(a.agency, a.count, a.percentage) for a in summary.by_agency] == [
            ("WFP", 3, 75),
            ("FAO", 2, 50),
        ]
        assert summary.samples[0].issue == "short_description"
        assert summary.samples[0].desc_length == 26

    def test_scraper_summary_of_empty_batch(self):
        summary = QualityAggregator().analyze_scraper_extractor_issues([])

        assert summary.total_issues == 0
        assert summary.by_agency == ()
        assert summary.samples == ()
