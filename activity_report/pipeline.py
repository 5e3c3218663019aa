"""Run the sources, merge their reports and hand the result to delivery."""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple

from .config import AppConfig
from .models import MergedReport, merge
from .sources.calendar import GoogleCalendarClient, generate_calendar_report
from .sources.github import GitHubClient, generate_github_report
from .timeutil import start_of_day

logger = logging.getLogger(__name__)


def report_period(now: datetime, days: int = 7) -> Tuple[datetime, datetime]:
    """Return (start, end): midnight `days` days ago through midnight today."""
    end = start_of_day(now)
    start = end - timedelta(days=days)
    return start, end


def build_weekly_report(config: AppConfig, start: datetime, end: datetime,
                        calendar_client=None,
                        github_client_factory: Optional[Callable[[str], GitHubClient]] = None) -> MergedReport:
    """
    Generate each source report and merge them, calendar first.

    Args:
        config: Application configuration
        start: First day of the period
        end: Last day of the period
        calendar_client: Client with list_events(), defaults to GoogleCalendarClient
        github_client_factory: Builds a GitHub client per token

    Returns:
        The merged report

    Raises:
        SourceFetchError: if a source fails as a whole
    """
    zone = config.zone
    owns_client = calendar_client is None
    if owns_client:
        calendar_client = GoogleCalendarClient(config.calendar.credentials)
    try:
        calendar_report = generate_calendar_report(
            calendar_client, start, end, zone, config.calendar.excluded_titles,
        )
    finally:
        if owns_client:
            calendar_client.close()

    github_report = generate_github_report(
        config.github.credentials, start, end, zone,
        client_factory=github_client_factory or GitHubClient,
    )

    merged = merge([calendar_report, github_report], title=config.email.subject)
    logger.info("Merged report covers %d day(s)", len(merged.contents))
    return merged
