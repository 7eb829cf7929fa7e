from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def to_canonical(value: datetime, tz_name: str) -> datetime:
    """Normalize an instant to a naive datetime in the system timezone.

    Session dates and times are stored naive in one canonical timezone, so
    aware inputs are converted and stripped; naive inputs are taken as-is.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(tz_name)).replace(tzinfo=None)


def now_local(tz_name: str = "UTC") -> datetime:
    """Current time in the canonical timezone.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)
