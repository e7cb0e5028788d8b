"""Date utilities for accountant.

Pure functions for ledger keys and month labels.
"""

from datetime import date, datetime

from accountant.domain.models import DayKey, Month


def day_key(day: date) -> DayKey:
    """Ledger key for a calendar day (YYYY-MM-DD)."""
    return DayKey(day.strftime("%Y-%m-%d"))


def month_key(day: date) -> Month:
    """Month key (YYYY-MM) for a calendar day."""
    return Month(day.strftime("%Y-%m"))


def parse_month(value: str) -> Month:
    """Validate and normalize a month string.

    Args:
        value: Month in YYYY-MM format.

    Returns:
        Normalized Month.

    Raises:
        ValueError: If the value is not a valid month.
    """
    return Month(datetime.strptime(value, "%Y-%m").strftime("%Y-%m"))


def parse_day(value: str) -> date:
    """Parse a YYYY-MM-DD string into a date.

    Raises:
        ValueError: If the value is not a valid day.
    """
    return datetime.strptime(value, "%Y-%m-%d").date()


def month_of(key: DayKey) -> Month:
    """Month a day key belongs to."""
    return Month(key[:7])


def month_label(month: Month) -> str:
    """Human-readable month (e.g., "January 2025").

    Raises:
        ValueError: If the month is not in YYYY-MM format.
    """
    return datetime.strptime(month, "%Y-%m").strftime("%B %Y")
