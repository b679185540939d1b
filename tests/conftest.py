"""Pytest configuration and shared fixtures for job data quality engine tests."""

import sys
import pytest
from datetime import datetime
from pathlib import Path
from typing import Dict, Any

import pytz

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from job_quality.core.config import QualitySettings
from job_quality.core.logging import setup_logging, get_logger


CLEAN_DESCRIPTION = (
    "The candidate will lead the programme team and is responsible for the design "
    "of monitoring frameworks. The position requires experience with data systems "
    "and strong analytical skills."
)

IDEAL_CANDIDATE = (
    "Advanced university degree in statistics or economics with five years of "
    "relevant professional experience."
)


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up test environment for all tests."""
    setup_logging()
    logger = get_logger("test_setup")
    logger.info("Test environment initialized")

    yield

    logger.info("Test environment cleanup")


@pytest.fixture
def test_config() -> QualitySettings:
    """Provide the shipped configuration."""
    config_path = project_root / "config" / "settings.yaml"
    return QualitySettings.load_from_file(str(config_path))


@pytest.fixture
def fixed_now() -> datetime:
    """Reference time shared by date-sensitive tests."""
    return datetime(2026, 10, 19, 12, 0, tzinfo=pytz.UTC)


def build_job(job_id: str = "job-1", **overrides) -> Dict[str, Any]:
    """Complete, clean job record; overrides replace individual fields."""
    record = {
        'id': job_id,
        'title': f'Programme Officer {job_id}',
        'description': CLEAN_DESCRIPTION,
        'duty_station': 'Geneva',
        'duty_country': 'Switzerland',
        'duty_continent': 'Europe',
        'up_grade': 'P-3',
        'languages': 'English, French',
        'job_labels': 'monitoring, evaluation, data analysis',
        'job_labels_vectorized': '[0.12, 0.48, 0.33]',
        'sectoral_category': 'Monitoring and Evaluation',
        'hs_min_exp': None,
        'bachelor_min_exp': 7,
        'master_min_exp': 5,
        'posting_date': '2026-09-01',
        'apply_until': '2026-10-30',
        'classification_confidence': 100,
        'short_agency': 'UNDP',
        'long_agency': 'United Nations Development Programme',
        'uniquecode': f'UC-{job_id}',
        'status': 'active',
        'ideal_candidate': IDEAL_CANDIDATE,
    }
    record.update(overrides)
    return record


@pytest.fixture
def make_job():
    """Factory for clean job records."""
    return build_job


@pytest.fixture
def clean_jobs():
    """One hundred clean records with distinct titles and codes."""
    return [build_job(f"job-{i}") for i in range(100)]


# Pytest markers for test categorization
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
