"""Configuration loaded from environment variables (and an optional .env file)."""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Tuple
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_TZ = 'Etc/UTC'
DEFAULT_SUBJECT = 'Weekly Activity Report'
DEFAULT_EXCLUDED_TITLES = ('busy', 'vacation', 'out of office')


def _split(value: Optional[str]) -> List[str]:
    """Split a ';'-separated variable, dropping blanks."""
    return [part.strip() for part in (value or '').split(';') if part.strip()]


def _flag(value: Optional[str]) -> bool:
    return (value or '').strip().lower() == 'true'


@dataclass
class GitHubCredentials:
    tokens: List[str]
    username: str


@dataclass
class GitHubConfig:
    credentials: GitHubCredentials
    actions: bool = False
    repository: str = ''
    workflow: str = ''


@dataclass
class CalendarCredentials:
    """OAuth client, refresh token and the calendar to read."""

    client_id: str
    client_secret: str
    refresh_token: str
    calendar_id: str = 'primary'
    refresh_token_path: Optional[str] = None


@dataclass
class CalendarConfig:
    credentials: CalendarCredentials
    excluded_titles: Tuple[str, ...] = DEFAULT_EXCLUDED_TITLES


@dataclass
class EmailConfig:
    """SMTP delivery settings. Gmail with an App Password by default."""

    enabled: bool
    from_address: str
    to: List[str]
    subject: str = DEFAULT_SUBJECT
    user: str = ''
    password: str = ''
    smtp_host: str = 'smtp.gmail.com'
    smtp_port: Optional[int] = 587


@dataclass
class AppConfig:
    """Everything one report run needs, passed explicitly to each step."""

    tz: str
    github: GitHubConfig
    calendar: CalendarConfig
    email: EmailConfig = field(default_factory=lambda: EmailConfig(enabled=False, from_address='', to=[]))

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.tz)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 env_file: Optional[str] = None) -> 'AppConfig':
        """
        Build the configuration from environment variables.

        Args:
            environ: Variables to read; defaults to os.environ after loading .env
            env_file: Explicit .env path passed to python-dotenv

        Returns:
            AppConfig; call missing_variables() to validate it
        """
        if environ is None:
            load_dotenv(env_file)
            environ = os.environ
        env = environ

        try:
            smtp_port = int(env.get('SMTP_PORT', '587'))
        except ValueError:
            logger.warning("Ignoring invalid SMTP_PORT: %r", env.get('SMTP_PORT'))
            smtp_port = None

        excluded = _split(env.get('CALENDAR_EXCLUDED_TITLES'))

        return cls(
            tz=env.get('TZ', DEFAULT_TZ),
            github=GitHubConfig(
                credentials=GitHubCredentials(
                    tokens=_split(env.get('GITHUB_TOKENS')),
                    username=env.get('GITHUB_USERNAME', '').strip(),
                ),
                actions=_flag(env.get('GITHUB_ACTIONS')),
                repository=env.get('GITHUB_REPOSITORY', ''),
                workflow=env.get('GITHUB_WORKFLOW', ''),
            ),
            calendar=CalendarConfig(
                credentials=CalendarCredentials(
                    client_id=env.get('GOOGLE_CLIENT_ID', ''),
                    client_secret=env.get('GOOGLE_CLIENT_SECRET', ''),
                    refresh_token=env.get('GOOGLE_REFRESH_TOKEN', ''),
                    calendar_id=env.get('GOOGLE_CALENDAR_ID', 'primary'),
                    refresh_token_path=env.get('GOOGLE_REFRESH_TOKEN_PATH') or None,
                ),
                excluded_titles=tuple(excluded) if excluded else DEFAULT_EXCLUDED_TITLES,
            ),
            email=EmailConfig(
                enabled=_flag(env.get('EMAIL_ENABLED')),
                from_address=env.get('EMAIL_FROM', ''),
                to=_split(env.get('EMAIL_TO')),
                subject=env.get('EMAIL_SUBJECT') or DEFAULT_SUBJECT,
                user=env.get('GOOGLE_APP_USER', ''),
                password=env.get('GOOGLE_EMAIL_APP_PASSWORD', ''),
                smtp_host=env.get('SMTP_HOST') or 'smtp.gmail.com',
                smtp_port=smtp_port,
            ),
        )

    def missing_variables(self) -> List[str]:
        """Names of required variables that are unset or invalid. Email ones only count when enabled."""
        missing = []
        if not self.tz:
            missing.append('TZ')
        if not self.github.credentials.tokens:
            missing.append('GITHUB_TOKENS')
        if not self.github.credentials.username:
            missing.append('GITHUB_USERNAME')

        calendar = self.calendar.credentials
        if not calendar.client_id:
            missing.append('GOOGLE_CLIENT_ID')
        if not calendar.client_secret:
            missing.append('GOOGLE_CLIENT_SECRET')
        if not calendar.refresh_token:
            missing.append('GOOGLE_REFRESH_TOKEN')
        if not calendar.calendar_id:
            missing.append('GOOGLE_CALENDAR_ID')

        if self.email.enabled:
            if not self.email.from_address:
                missing.append('EMAIL_FROM')
            if not self.email.to:
                missing.append('EMAIL_TO')
            if not self.email.user:
                missing.append('GOOGLE_APP_USER')
            if not self.email.password:
                missing.append('GOOGLE_EMAIL_APP_PASSWORD')
            if self.email.smtp_port is None:
                missing.append('SMTP_PORT')
        return missing
