"""Date helpers shared by the source adapters and renderers."""

from datetime import date, datetime, time, timedelta, tzinfo
from typing import List, Optional, Union

Instant = Union[datetime, date, str]


def parse_instant(value: str, tz: Optional[tzinfo] = None) -> datetime:
    """
    Parse an ISO-8601 date or datetime string.

    Args:
        value: ``YYYY-MM-DD`` or a full ISO datetime (a trailing ``Z`` is accepted)
        tz: Zone used for date-only and naive values, and converted into for aware ones

    Returns:
        A datetime, timezone-aware whenever ``tz`` is given
    """
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    if len(text) == 10:
        parsed = datetime.combine(date.fromisoformat(text), time.min)
    else:
        parsed = datetime.fromisoformat(text)

    if tz is None:
        return parsed
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=tz)
    return parsed.astimezone(tz)


def to_iso_date(instant: Instant, tz: Optional[tzinfo] = None) -> str:
    """Format an instant as a ``YYYY-MM-DD`` date key in the given zone."""
    if isinstance(instant, str):
        instant = parse_instant(instant, tz)
    elif isinstance(instant, datetime):
        if tz is not None:
            instant = instant.replace(tzinfo=tz) if instant.tzinfo is None else instant.astimezone(tz)
    elif not isinstance(instant, date):
        raise TypeError(f"Cannot convert {type(instant).__name__} to a date key")
    return instant.strftime('%Y-%m-%d')


def start_of_day(instant: datetime) -> datetime:
    """Truncate to midnight, keeping the instant's zone."""
    return instant.replace(hour=0, minute=0, second=0, microsecond=0)


def get_date_range(start: datetime, end: datetime) -> List[datetime]:
    """
    Get all day starts between start and end, inclusive.

    Returns an empty list when start falls on a later day than end.
    """
    current = start_of_day(start)
    last = start_of_day(end)
    if current.date() > last.date():
        return []

    dates = []
    while current.date() <= last.date():
        dates.append(current)
        # step on the calendar date so DST shifts never skip or repeat a day
        current = datetime.combine(current.date() + timedelta(days=1), time.min, tzinfo=current.tzinfo)
    return dates


def format_date_for_github(instant: datetime) -> str:
    """Format a date for GitHub search qualifiers (YYYY-MM-DD)."""
    return instant.strftime('%Y-%m-%d')
