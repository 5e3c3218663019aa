"""Weekly activity report built from Google Calendar and GitHub."""

from .models import MergedReport, Period, ReportContent, ReportResult, merge

__version__ = "0.1.0"

__all__ = [
    "MergedReport",
    "Period",
    "ReportContent",
    "ReportResult",
    "merge",
]
