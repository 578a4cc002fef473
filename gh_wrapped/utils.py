"""Utility functions for GitHub Wrapped.

This module provides shared helper functions used across the package:
- year_window(): Start and end dates of the analysed period
- format_date_range(): Human-readable label for that period
- format_hour(): 12-hour clock formatting
- format_number(): Compact number formatting (1.2K, 3.4M)
- classify(): Threshold-based classification
- safe_sparkline(): Sparkline rendering with error handling
"""

from datetime import date
from typing import List, Optional, Tuple

from sparklines import sparklines

from .errors import GitHubError


def year_window(year: int, today: Optional[date] = None) -> Tuple[date, date]:
    """Get the first and last day analysed for a year.

    The window ends today while the year is still running, otherwise on
    December 31.

    Args:
        year: Calendar year
        today: Override for the current date (default: date.today())

    Returns:
        Tuple of (start, end) dates

    Raises:
        GitHubError: If the year lies in the future

    Example:
        >>> year_window(2024, today=date(2025, 6, 1))
        (datetime.date(2024, 1, 1), datetime.date(2024, 12, 31))
    """
    today = today or date.today()
    start = date(year, 1, 1)
    if start > today:
        raise GitHubError(
            f"Year {year} is in the future. Please use {today.year} or earlier."
        )
    end = today if year == today.year else date(year, 12, 31)
    return start, end


def format_date_range(start: date, end: date) -> str:
    """Format a window as "Jan 1 - Dec 31, 2025"."""
    return f"{start.strftime('%b')} {start.day} - {end.strftime('%b')} {end.day}, {end.year}"


def format_hour(hour: int) -> str:
    """Format an hour of day on a 12-hour clock.

    Example:
        >>> format_hour(0)
        '12:00 AM'
        >>> format_hour(15)
        '3:00 PM'
    """
    period = "PM" if hour >= 12 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:00 {period}"


def format_number(num: int) -> str:
    """Format large numbers for display.

    Example:
        >>> format_number(1534)
        '1.5K'
    """
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}K"
    return str(num)


def classify(value: float, thresholds: list[tuple[float, str]], default: str) -> str:
    """Classify a value into a category based on thresholds.

    Thresholds are checked in order; the first threshold reached returns
    the corresponding label.

    Args:
        value: The value to classify
        thresholds: List of (threshold, label) tuples, checked in order
        default: Label to return if no threshold is reached

    Returns:
        The label for the matching threshold, or default

    Example:
        >>> classify(3200, [(3000, "master"), (1000, "prime")], "origin")
        'master'
    """
    for threshold, label in thresholds:
        if value >= threshold:
            return label
    return default


def safe_sparkline(values: List[int]) -> Optional[str]:
    """Generate a sparkline string, returning None on failure.

    Args:
        values: List of integers to visualize

    Returns:
        Sparkline string or None if generation fails
    """
    if not values or len(values) < 2:
        return None
    try:
        result = sparklines(values)
        return result[0] if result else None
    except (ValueError, TypeError):
        return None
