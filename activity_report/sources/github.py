"""GitHub source: pull requests and commits per day, across several tokens."""

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Callable, Dict, List, Optional

import requests

from ..config import GitHubCredentials
from ..errors import format_error
from ..models import Period, ReportContent, ReportResult, build_contents
from ..timeutil import format_date_for_github, get_date_range, parse_instant, to_iso_date

logger = logging.getLogger(__name__)

GITHUB_API_URL = 'https://api.github.com'
GITHUB_REPORT_TITLE = 'GitHub Weekly Activity Report'
SEARCH_PAGE_SIZE = 100


def repository_from_url(url: str) -> str:
    """Return 'owner/repo' from an API repository URL."""
    return '/'.join(url.rstrip('/').split('/')[-2:])


@dataclass(frozen=True)
class PullRequest:
    title: str
    number: int
    repository: str
    created_at: str

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> 'PullRequest':
        """Build from an issue search item; raises KeyError/ValueError on malformed data."""
        return cls(
            title=str(item.get('title') or ''),
            number=int(item['number']),
            repository=repository_from_url(item['repository_url']),
            created_at=parse_instant(item['created_at']).isoformat(),
        )

    def label(self) -> str:
        return f"{self.repository}#{self.number}: {self.title}"


@dataclass(frozen=True)
class Commit:
    additions: int
    deletions: int
    committed_at: str
    repository: str

    @classmethod
    def from_api(cls, item: Dict[str, Any], detail: Dict[str, Any]) -> 'Commit':
        """Build from a commit search item and its detail payload."""
        stats = detail.get('stats') or {}
        return cls(
            additions=int(stats.get('additions') or 0),
            deletions=int(stats.get('deletions') or 0),
            committed_at=parse_instant(item['commit']['committer']['date']).isoformat(),
            repository=item['repository']['full_name'],
        )


class GitHubClient:
    """Minimal GitHub REST client bound to one token."""

    def __init__(self, token: str, session: Optional[requests.Session] = None, timeout: int = 30):
        """
        Initialize the GitHub client.

        Args:
            token: GitHub personal access token
            session: Optional session, mainly for tests
            timeout: Per-request timeout in seconds
        """
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {token}',
            'Accept': 'application/vnd.github+json',
        })
        self.base_url = GITHUB_API_URL

    def _make_request(self, endpoint: str, params: Optional[Dict] = None) -> Any:
        """Make a request to the GitHub API. Errors propagate to the caller."""
        if endpoint.startswith(self.base_url):
            url = endpoint
        else:
            url = f"{self.base_url}/{endpoint.lstrip('/')}"
        response = self.session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def search_issues(self, query: str) -> List[Dict[str, Any]]:
        data = self._make_request('search/issues', {'q': query, 'per_page': SEARCH_PAGE_SIZE})
        return data.get('items') or []

    def search_commits(self, query: str) -> List[Dict[str, Any]]:
        data = self._make_request('search/commits', {'q': query, 'per_page': SEARCH_PAGE_SIZE, 'page': 1})
        return data.get('items') or []

    def get_commit(self, url: str) -> Dict[str, Any]:
        """Fetch a commit's detail (including stats) from its API URL."""
        return self._make_request(url)

    def close(self) -> None:
        self.session.close()


def _date_qualifier(start: datetime, end: datetime) -> str:
    return f"{format_date_for_github(start)}..{format_date_for_github(end)}"


def fetch_opened_prs(client: GitHubClient, username: str, start: datetime, end: datetime) -> List[PullRequest]:
    """PRs authored by the user and created within the period."""
    query = f"is:pr author:{username} created:{_date_qualifier(start, end)}"
    return [PullRequest.from_api(item) for item in client.search_issues(query)]


def fetch_reviewed_prs(client: GitHubClient, username: str, start: datetime, end: datetime) -> List[PullRequest]:
    """
    PRs reviewed by the user.

    Note: filtered by the PR's creation date, not the review date.
    """
    query = f"is:pr reviewed-by:{username} created:{_date_qualifier(start, end)}"
    return [PullRequest.from_api(item) for item in client.search_issues(query)]


def fetch_user_commits(client: GitHubClient, username: str, start: datetime, end: datetime) -> List[Commit]:
    """
    Commits authored by the user, with per-commit addition/deletion stats.

    A failed commit search yields no commits; a commit whose detail cannot
    be fetched is logged and skipped. Either way the token's PRs are kept.
    """
    query = f"author:{username} committer-date:{_date_qualifier(start, end)}"
    try:
        items = client.search_commits(query)
    except requests.RequestException as e:
        logger.warning("Failed to search commits: %s", format_error(e))
        return []

    commits = []
    for item in items:
        try:
            detail = client.get_commit(item['url'])
            commits.append(Commit.from_api(item, detail))
        except (requests.RequestException, KeyError, TypeError, ValueError) as e:
            logger.warning("Failed to fetch commit details: %s", format_error(e))
    return commits


def _items_block(title: str, labels: List[str]) -> List[ReportContent]:
    if not labels:
        return []
    return [ReportContent(title=title, items=[f"• {label}" for label in labels])]


def format_github_report(start: datetime, end: datetime, tz: tzinfo,
                         opened_prs: Dict[int, PullRequest],
                         reviewed_prs: Dict[int, PullRequest],
                         commits: List[Commit]) -> ReportResult:
    """Build up to four blocks per day: reviewed, opened, projects, code changes."""
    opened_by_day: Dict[str, List[PullRequest]] = {}
    for pr in opened_prs.values():
        opened_by_day.setdefault(to_iso_date(pr.created_at, tz), []).append(pr)
    reviewed_by_day: Dict[str, List[PullRequest]] = {}
    for pr in reviewed_prs.values():
        reviewed_by_day.setdefault(to_iso_date(pr.created_at, tz), []).append(pr)
    commits_by_day: Dict[str, List[Commit]] = {}
    for commit in commits:
        commits_by_day.setdefault(to_iso_date(commit.committed_at, tz), []).append(commit)

    days = []
    for day in get_date_range(start, end):
        date_key = to_iso_date(day)
        reviewed = reviewed_by_day.get(date_key, [])
        opened = opened_by_day.get(date_key, [])
        day_commits = commits_by_day.get(date_key, [])

        blocks = []
        blocks += _items_block('Pull Requests Reviewed:', [pr.label() for pr in reviewed])
        blocks += _items_block('Pull Requests Opened:', [pr.label() for pr in opened])

        # dict keeps first-seen order
        projects = dict.fromkeys(
            [c.repository for c in day_commits] + [pr.repository for pr in opened] + [pr.repository for pr in reviewed]
        )
        blocks += _items_block('Projects Contributed To:', list(projects))

        additions = sum(c.additions for c in day_commits)
        deletions = sum(c.deletions for c in day_commits)
        total = additions + deletions
        if total > 0:
            blocks.append(ReportContent(
                title='Total Code Changes:',
                items=[
                    f"• Additions: +{additions}",
                    f"• Deletions: -{deletions}",
                    f"• Total Changes: {total}",
                ],
            ))
        days.append((date_key, blocks))

    return ReportResult(
        title=GITHUB_REPORT_TITLE,
        contents=build_contents(days),
        period=Period(start=start, end=end),
    )


def generate_github_report(credentials: GitHubCredentials, start: datetime, end: datetime, tz: tzinfo,
                           client_factory: Callable[[str], GitHubClient] = GitHubClient) -> ReportResult:
    """
    Generate the GitHub report across every configured token.

    PRs are deduplicated by number only; when two tokens return the same
    number the later token's PR wins. A token whose queries fail is logged
    and skipped; if every token fails the report is simply empty.

    Args:
        credentials: Tokens and the username whose activity is reported
        start: First day of the period
        end: Last day of the period
        tz: Zone used to assign records to days
        client_factory: Builds a client for a token

    Returns:
        ReportResult with PR, project and code-change blocks per active day
    """
    all_opened: Dict[int, PullRequest] = {}
    all_reviewed: Dict[int, PullRequest] = {}
    all_commits: List[Commit] = []
    failures = 0

    for index, token in enumerate(credentials.tokens, start=1):
        client = client_factory(token)
        try:
            opened = fetch_opened_prs(client, credentials.username, start, end)
            reviewed = fetch_reviewed_prs(client, credentials.username, start, end)
            commits = fetch_user_commits(client, credentials.username, start, end)
        except (requests.RequestException, KeyError, TypeError, ValueError) as e:
            logger.warning("Failed to fetch data with token #%d: %s", index, format_error(e))
            failures += 1
            continue
        finally:
            client.close()

        for pr in opened:
            all_opened[pr.number] = pr
        for pr in reviewed:
            all_reviewed[pr.number] = pr
        all_commits.extend(commits)
        logger.info("GitHub token #%d: %d opened, %d reviewed, %d commit(s)",
                    index, len(opened), len(reviewed), len(commits))

    if credentials.tokens and failures == len(credentials.tokens):
        logger.error("All %d GitHub token(s) failed; GitHub section will be empty", failures)

    return format_github_report(start, end, tz, all_opened, all_reviewed, all_commits)
