"""Plain-text rendering of day-keyed reports."""

from datetime import datetime
from typing import List, Optional, Sequence

from ..models import ReportResult

RULE_WIDTH = 60


def _long_date(value: datetime) -> str:
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def format_period(report: ReportResult) -> str:
    """Format a report's period, e.g. 'Period: January 7, 2024 - January 14, 2024'."""
    return f"Period: {_long_date(report.period.start)} - {_long_date(report.period.end)}"


def format_generated(generated_at: Optional[datetime] = None) -> str:
    """Timestamp line shared by both renderers."""
    generated_at = generated_at or datetime.now().astimezone()
    return f"{generated_at.strftime('%Y-%m-%d %H:%M:%S')} {generated_at.tzname() or ''}".rstrip()


def _report_section(report: ReportResult) -> List[str]:
    lines = [
        "-" * RULE_WIDTH,
        report.title,
        format_period(report),
        "-" * RULE_WIDTH,
        "",
    ]
    for date_key, blocks in report.sorted_days():
        if not blocks:
            continue
        lines.append(date_key)
        lines.append("")
        for block in blocks:
            lines.append(block.title)
            lines.extend(block.items)
            lines.append("")
    return lines


def render_text(reports: Sequence[ReportResult], generated_at: Optional[datetime] = None) -> str:
    """
    Render reports as plain text.

    Args:
        reports: Reports to render; the first one's title heads the banner
        generated_at: Timestamp for the footer, defaults to now

    Returns:
        The text document
    """
    if not reports:
        raise ValueError("render_text() needs at least one report")

    lines = ["=" * RULE_WIDTH, reports[0].title, "=" * RULE_WIDTH, ""]
    for report in reports:
        lines.extend(_report_section(report))

    lines.append("=" * RULE_WIDTH)
    lines.append(f"Generated on {format_generated(generated_at)}")
    lines.append("=" * RULE_WIDTH)
    return '\n'.join(lines)
