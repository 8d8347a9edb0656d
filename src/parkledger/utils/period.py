"""Accounting period utilities.

A period is a calendar month written as ``YYYY-MM``.
"""

import re
from datetime import date
from typing import Iterator

from dateutil.relativedelta import relativedelta

_PERIOD_RE = re.compile(r"^(\d{4})-(\d{2})$")


def period_of(value: date) -> str:
    """Return the period containing a date."""
    return f"{value.year:04d}-{value.month:02d}"


def parse_period(period_str: str) -> str:
    """Validate and normalize a period string.

    Args:
        period_str: Period string ("2024-03")

    Returns:
        Normalized period string

    Raises:
        ValueError: If the string is not a valid YYYY-MM period
    """
    match = _PERIOD_RE.match(period_str.strip())
    if match is None:
        raise ValueError(f"Invalid period '{period_str}': expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid period '{period_str}': month must be 01-12")
    return f"{year:04d}-{month:02d}"


def period_start(period: str) -> date:
    """Return the first day of a period."""
    normalized = parse_period(period)
    year, month = normalized.split("-")
    return date(int(year), int(month), 1)


def period_end(period: str) -> date:
    """Return the last day of a period."""
    return period_start(period) + relativedelta(months=1, days=-1)


def next_period(period: str) -> str:
    """Return the period following the given one."""
    return period_of(period_start(period) + relativedelta(months=1))


def iter_periods(start: str, end: str) -> Iterator[str]:
    """Yield every period from start to end inclusive."""
    current = parse_period(start)
    last = parse_period(end)
    while current <= last:
        yield current
        current = next_period(current)
