"""Shared fixtures and fake source clients."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

import pytest
import requests

from activity_report.config import (
    AppConfig,
    CalendarConfig,
    CalendarCredentials,
    EmailConfig,
    GitHubConfig,
    GitHubCredentials,
)
from activity_report.sources.calendar import CalendarEvent

UTC = ZoneInfo("Etc/UTC")


class FakeCalendarClient:
    """Stands in for GoogleCalendarClient."""

    def __init__(self, events: Optional[List[Dict[str, Any]]] = None, error: Optional[Exception] = None):
        self.events = [CalendarEvent.from_api(e) for e in (events or [])]
        self.error = error
        self.calls = []

    def list_events(self, start: datetime, end: datetime) -> List[CalendarEvent]:
        self.calls.append((start, end))
        if self.error is not None:
            raise self.error
        return self.events

    def close(self) -> None:
        pass


class FakeGitHubClient:
    """Stands in for GitHubClient; answers search queries from canned data."""

    def __init__(self, opened=None, reviewed=None, commits=None, details=None, error=None, commit_error=None):
        self.opened = opened or []
        self.reviewed = reviewed or []
        self.commits = commits or []
        self.details = details or {}
        self.error = error
        self.commit_error = commit_error
        self.queries = []
        self.closed = False

    def search_issues(self, query: str) -> List[Dict[str, Any]]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        if "reviewed-by:" in query:
            return self.reviewed
        return self.opened

    def search_commits(self, query: str) -> List[Dict[str, Any]]:
        self.queries.append(query)
        if self.commit_error is not None:
            raise self.commit_error
        return self.commits

    def get_commit(self, url: str) -> Dict[str, Any]:
        detail = self.details.get(url)
        if isinstance(detail, Exception):
            raise detail
        if detail is None:
            raise requests.HTTPError(f"404 for {url}")
        return detail

    def close(self) -> None:
        self.closed = True


def pr_item(number: int, title: str, repo: str, created_at: str) -> Dict[str, Any]:
    return {
        "title": title,
        "number": number,
        "repository_url": f"https://api.github.com/repos/{repo}",
        "created_at": created_at,
    }


def commit_item(sha: str, repo: str, date: str) -> Dict[str, Any]:
    return {
        "url": f"https://api.github.com/repos/{repo}/commits/{sha}",
        "repository": {"full_name": repo},
        "commit": {"committer": {"date": date}},
    }


@pytest.fixture
def utc():
    return UTC


@pytest.fixture
def week(utc):
    """Sunday 2024-01-07 through Sunday 2024-01-14, UTC."""
    return datetime(2024, 1, 7, tzinfo=utc), datetime(2024, 1, 14, tzinfo=utc)


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        tz="Etc/UTC",
        github=GitHubConfig(credentials=GitHubCredentials(tokens=["token-a"], username="octocat")),
        calendar=CalendarConfig(
            credentials=CalendarCredentials(
                client_id="client", client_secret="secret", refresh_token="refresh",
            ),
        ),
        email=EmailConfig(
            enabled=False,
            from_address="reports@example.com",
            to=["me@example.com"],
            user="reports@example.com",
            password="app-password",
        ),
    )
