from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_REFERENCE_TIMEZONE, WEEKDAY_NAMES


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def weekday_name(value: date) -> str:
    return WEEKDAY_NAMES[value.weekday()]


def now_local(timezone: str = DEFAULT_REFERENCE_TIMEZONE) -> datetime:
    """Wall-clock time in the institute's reference timezone, as a naive datetime.

    Note: DATETIME columns carry no offset, so timestamps and default dates
    are both taken from this clock.
    """
    return datetime.now(ZoneInfo(timezone)).replace(tzinfo=None)


def today_in(timezone: str = DEFAULT_REFERENCE_TIMEZONE) -> date:
    """Calendar date in the institute's reference timezone, not the server's."""
    return now_local(timezone).date()
