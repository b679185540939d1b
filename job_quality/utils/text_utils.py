"""Text helpers shared by the detectors and aggregators."""

from typing import Any, Optional

from ..core.constants import PREVIEW_LENGTH


def is_blank(value: Any) -> bool:
    """
    Check whether a field value counts as absent.

    None, empty strings and whitespace-only strings are all absent.
    Non-string values are absent only when None.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    return False


def clean_text(value: Optional[str]) -> str:
    """Return the trimmed text, or an empty string for absent values."""
    if value is None:
        return ''
    return str(value).strip()


def text_length(value: Optional[str]) -> int:
    """Length of the trimmed text."""
    return len(clean_text(value))


def make_preview(text: Optional[str], length: int = PREVIEW_LENGTH) -> str:
    """Short preview of a description for dashboard samples."""
    return (text or '')[:length] + '...'


def find_phrase(text: str, phrases) -> Optional[str]:
    """
    Find the first phrase contained in text.

    Args:
        text: Lower-cased text to search
        phrases: Candidate phrases in priority order

    Returns:
        The first matching phrase or None
    """
    for phrase in phrases:
        if phrase in text:
            return phrase
    return None
