"""Exception types and error message formatting."""

import json
from typing import Any, Iterable

import requests


class ReportError(Exception):
    """Base class for failures that abort a report run."""


class ConfigError(ReportError):
    """Required configuration is missing."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"Missing environment variables: {', '.join(self.missing)}")


class SourceFetchError(ReportError):
    """A whole activity source could not be turned into a report."""

    def __init__(self, source: str, cause: Any):
        self.source = source
        self.cause = cause
        super().__init__(f"Failed to generate {source} report: {format_error(cause)}")


class TemplateError(ReportError):
    """The HTML template is missing or malformed."""


class DeliveryError(ReportError):
    """The email transport rejected or failed to send the report."""

    def __init__(self, cause: Any):
        self.cause = cause
        super().__init__(f"Failed to send email report: {format_error(cause)}")


def format_error(error: Any) -> str:
    """
    Build a human-readable message for an error.

    Structured API error bodies are preferred, then the exception message,
    then plain string coercion.
    """
    if isinstance(error, requests.RequestException) and error.response is not None:
        response = error.response
        try:
            return json.dumps(response.json())
        except ValueError:
            if response.text:
                return response.text
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    return str(error)
