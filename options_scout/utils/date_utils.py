"""Date utility functions."""

from datetime import date, timedelta
from typing import Optional, Union

FRIDAY = 4


def calculate_days_to_expiry(
    expiration_date: Union[str, date], today: Optional[date] = None
) -> int:
    """
    Calculate calendar days until expiration.

    Uses calendar days (not trading days) as this is the standard
    convention for options pricing (Black-Scholes, IV term structure).
    Weekend/holiday adjustments are NOT applied.

    Example: Jan 19 to Jan 23 = 4 calendar days

    Args:
        expiration_date: Expiration as a date or ISO string (YYYY-MM-DD)
        today: Reference date (defaults to date.today())

    Returns:
        Number of days to expiry, never negative

    Raises:
        ValueError: If the expiration string cannot be parsed
    """
    if isinstance(expiration_date, str):
        expiration_date = date.fromisoformat(expiration_date)

    today = today or date.today()
    return max(0, (expiration_date - today).days)


def next_friday(after: date) -> date:
    """
    Return the first Friday strictly after the given date.

    Args:
        after: Reference date

    Returns:
        Date of the following Friday
    """
    days_ahead = (FRIDAY - after.weekday()) % 7
    if days_ahead == 0:
        days_ahead = 7
    return after + timedelta(days=days_ahead)


def third_friday(year: int, month: int) -> date:
    """
    Return the third Friday of a month (standard monthly expiration).

    Args:
        year: Calendar year
        month: Calendar month (1-12)

    Returns:
        Date of the third Friday
    """
    first = date(year, month, 1)
    offset = (FRIDAY - first.weekday()) % 7
    return first + timedelta(days=offset + 14)


def weekly_expirations(today: date, count: int) -> list[date]:
    """
    Generate consecutive weekly Friday expirations.

    Args:
        today: Reference date
        count: Number of weekly expirations

    Returns:
        List of Friday dates, nearest first
    """
    first = next_friday(today)
    return [first + timedelta(weeks=i) for i in range(count)]


def monthly_expirations(today: date, count: int) -> list[date]:
    """
    Generate third-Friday expirations for the following calendar months.

    The current month is skipped; the ladder starts with next month.

    Args:
        today: Reference date
        count: Number of monthly expirations

    Returns:
        List of third-Friday dates, nearest first
    """
    expirations = []
    year, month = today.year, today.month
    for _ in range(count):
        month += 1
        if month > 12:
            month = 1
            year += 1
        expirations.append(third_friday(year, month))
    return expirations
