"""Activity sources turned into day-keyed reports."""

from .calendar import GoogleCalendarClient, generate_calendar_report
from .github import GitHubClient, generate_github_report

__all__ = [
    "GitHubClient",
    "GoogleCalendarClient",
    "generate_calendar_report",
    "generate_github_report",
]
