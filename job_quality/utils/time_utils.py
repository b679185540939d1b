"""Date and timestamp utilities for the job data quality engine."""

from datetime import datetime, timedelta
from typing import Iterable, Optional
import pytz

from ..core.logging import get_logger

logger = get_logger(__name__)


def ensure_utc(dt: datetime) -> datetime:
    """Localize naive datetimes to UTC and convert aware ones."""
    if dt.tzinfo is None:
        return pytz.UTC.localize(dt)
    return dt.astimezone(pytz.UTC)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(pytz.UTC)


def parse_job_date(value) -> Optional[datetime]:
    """
    Parse a posting or deadline date.

    Only ISO 8601 dates and timestamps are accepted. Any other layout, or a
    value that is not a string, yields None rather than raising.

    Args:
        value: Raw date value from a job record

    Returns:
        Aware UTC datetime or None
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None

    date_str = value.strip()
    if date_str.endswith('Z'):
        date_str = date_str[:-1] + '+00:00'

    try:
        return ensure_utc(datetime.fromisoformat(date_str))
    except ValueError:
        logger.debug("Failed to parse job date", date_str=value)
        return None


def date_span(dates: Iterable[datetime]) -> Optional[timedelta]:
    """Span between the earliest and latest date, None for fewer than two."""
    dates = list(dates)
    if len(dates) < 2:
        return None
    return max(dates) - min(dates)


def format_iso8601_utc(dt: datetime) -> str:
    """
    Format datetime as ISO 8601 UTC timestamp.

    Args:
        dt: Datetime object

    Returns:
        ISO 8601 UTC formatted string
    """
    return ensure_utc(dt).strftime('%Y-%m-%dT%H:%M:%S') + 'Z'
