"""Numeric helpers for report scores and percentages."""

import math


def round_half_up(value: float, digits: int = 1) -> float:
    """
    Round with exact halves going up, so 86.25 becomes 86.3.

    Args:
        value: Number to round
        digits: Decimal places to keep

    Returns:
        Rounded value
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def percent(part: int, whole: int) -> int:
    """Whole-number percentage of part in whole, halves rounded up."""
    return int(round_half_up(part / max(whole, 1) * 100, 0))
