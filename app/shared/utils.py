"""Shared date and time helpers."""

from __future__ import annotations

from datetime import date, datetime, timezone

from dateutil.relativedelta import relativedelta


def utc_now() -> datetime:
    """Return aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Return the current calendar date in UTC."""
    return utc_now().date()


def add_months(start: date, months: int) -> date:
    """Advance a date by calendar months.

    The day of month is clamped to the last day of the target month, so
    2024-01-31 plus one month is 2024-02-29.
    """
    return start + relativedelta(months=months)
