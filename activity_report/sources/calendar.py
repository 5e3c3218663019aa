"""Google Calendar source: meetings per day."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote

import requests

from ..config import DEFAULT_EXCLUDED_TITLES, CalendarCredentials
from ..errors import SourceFetchError, format_error
from ..models import Period, ReportContent, ReportResult, build_contents
from ..timeutil import get_date_range, parse_instant, to_iso_date

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = 'https://oauth2.googleapis.com/token'
CALENDAR_API_URL = 'https://www.googleapis.com/calendar/v3'
CALENDAR_REPORT_TITLE = 'Calendar Weekly Activity Report'


@dataclass(frozen=True)
class EventTime:
    """Start or end of an event: a timed instant or an all-day date."""

    date_time: Optional[str] = None
    date: Optional[str] = None

    @classmethod
    def from_api(cls, data: Any) -> 'EventTime':
        if not isinstance(data, dict):
            return cls()
        return cls(date_time=data.get('dateTime') or None, date=data.get('date') or None)

    def resolve(self, tz: tzinfo) -> Optional[datetime]:
        """Prefer the timed value, fall back to the all-day date."""
        value = self.date_time or self.date
        return parse_instant(value, tz) if value else None


@dataclass(frozen=True)
class CalendarEvent:
    """Calendar event as returned by the events list endpoint."""

    summary: Optional[str] = None
    start: EventTime = field(default_factory=EventTime)
    end: EventTime = field(default_factory=EventTime)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'CalendarEvent':
        summary = data.get('summary')
        return cls(
            summary=summary if isinstance(summary, str) else None,
            start=EventTime.from_api(data.get('start')),
            end=EventTime.from_api(data.get('end')),
        )


@dataclass
class DayStatistics:
    """Meeting tallies for one day while scanning events."""

    count: int = 0
    total_minutes: int = 0
    event_summaries: List[str] = field(default_factory=list)


class GoogleCalendarClient:
    """Fetch events from the Google Calendar API using a refresh token."""

    def __init__(self, credentials: CalendarCredentials, session: Optional[requests.Session] = None,
                 timeout: int = 30):
        """
        Initialize the calendar client.

        Args:
            credentials: OAuth client and calendar identifiers
            session: Optional session, mainly for tests
            timeout: Per-request timeout in seconds
        """
        self.credentials = credentials
        self.session = session or requests.Session()
        self.timeout = timeout

    def refresh_access_token(self) -> Dict[str, Any]:
        """Exchange the refresh token for an access token."""
        response = self.session.post(
            GOOGLE_TOKEN_URL,
            data={
                'client_id': self.credentials.client_id,
                'client_secret': self.credentials.client_secret,
                'refresh_token': self.credentials.refresh_token,
                'grant_type': 'refresh_token',
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def save_refresh_token(self, refresh_token: str) -> None:
        """Persist a rotated refresh token; failures are only logged."""
        path = self.credentials.refresh_token_path
        if not path:
            return
        try:
            Path(path).write_text(refresh_token, encoding='utf-8')
        except OSError as e:
            logger.error("Failed to save refresh token: %s", format_error(e))

    def list_events(self, start: datetime, end: datetime) -> List[CalendarEvent]:
        """
        Fetch all single events between start and end.

        Returns:
            Parsed CalendarEvent records in start-time order
        """
        token_data = self.refresh_access_token()
        calendar_id = quote(self.credentials.calendar_id, safe='')
        response = self.session.get(
            f"{CALENDAR_API_URL}/calendars/{calendar_id}/events",
            headers={'Authorization': f"Bearer {token_data['access_token']}"},
            params={
                'timeMin': start.isoformat(),
                'timeMax': end.isoformat(),
                'singleEvents': 'true',
                'orderBy': 'startTime',
                'maxResults': 2500,
            },
            timeout=self.timeout,
        )
        response.raise_for_status()

        if token_data.get('refresh_token'):
            self.save_refresh_token(token_data['refresh_token'])

        items = response.json().get('items') or []
        return [CalendarEvent.from_api(item) for item in items if isinstance(item, dict)]

    def close(self) -> None:
        self.session.close()


def _is_excluded(summary: Optional[str], excluded: Iterable[str]) -> bool:
    if not summary:
        return False
    return summary.strip().lower() in excluded


def organize_events_by_date(events: Iterable[CalendarEvent], tz: tzinfo,
                            excluded_titles: Iterable[str] = DEFAULT_EXCLUDED_TITLES) -> Dict[str, DayStatistics]:
    """
    Bucket events by the date they start on.

    Events without any start are skipped. Duration is end minus start in whole
    minutes, zero when the end is missing; negative values are kept as-is.
    Excluded titles still count toward the total but are not listed.
    """
    excluded = {title.strip().lower() for title in excluded_titles}
    meetings_by_date: Dict[str, DayStatistics] = {}

    for event in events:
        started = event.start.resolve(tz)
        if started is None:
            continue
        ended = event.end.resolve(tz)
        duration_minutes = int((ended - started).total_seconds() / 60) if ended else 0

        stats = meetings_by_date.setdefault(to_iso_date(started, tz), DayStatistics())
        stats.count += 1
        stats.total_minutes += duration_minutes
        if event.summary is not None and not _is_excluded(event.summary, excluded):
            stats.event_summaries.append(event.summary)

    return meetings_by_date


def format_duration(total_minutes: int) -> str:
    """Format minutes as '1h 30m' or '45m'."""
    sign = '-' if total_minutes < 0 else ''
    hours, minutes = divmod(abs(total_minutes), 60)
    if hours > 0:
        return f"{sign}{hours}h {minutes}m"
    return f"{sign}{minutes}m"


def format_calendar_report(start: datetime, end: datetime,
                           meetings_by_date: Dict[str, DayStatistics]) -> ReportResult:
    """Turn per-day statistics into one meetings block per active day."""
    days = []
    for day in get_date_range(start, end):
        date_key = to_iso_date(day)
        stats = meetings_by_date.get(date_key)
        if stats is None or stats.count <= 0:
            continue
        days.append((date_key, [ReportContent(
            title=f"Meetings: {stats.count} ({format_duration(stats.total_minutes)})",
            items=[f"• {summary}" for summary in stats.event_summaries],
        )]))

    return ReportResult(
        title=CALENDAR_REPORT_TITLE,
        contents=build_contents(days),
        period=Period(start=start, end=end),
    )


def generate_calendar_report(client, start: datetime, end: datetime, tz: tzinfo,
                             excluded_titles: Iterable[str] = DEFAULT_EXCLUDED_TITLES) -> ReportResult:
    """
    Generate the calendar report for a period.

    Args:
        client: Anything with ``list_events(start, end)``, e.g. GoogleCalendarClient
        start: First day of the period
        end: Last day of the period
        tz: Zone used to assign events to days
        excluded_titles: Event titles (case-insensitive) that are not meetings

    Returns:
        ReportResult with one meetings block per active day

    Raises:
        SourceFetchError: if the events cannot be fetched or parsed
    """
    try:
        events = client.list_events(start, end)
        meetings_by_date = organize_events_by_date(events, tz, excluded_titles)
    except Exception as e:
        raise SourceFetchError('Calendar', e) from e

    logger.info("Calendar: %d event(s) on %d day(s)", len(events), len(meetings_by_date))
    return format_calendar_report(start, end, meetings_by_date)
