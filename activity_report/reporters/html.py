"""HTML rendering of day-keyed reports into the email template."""

import re
from datetime import datetime
from html import escape
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from ..errors import TemplateError
from ..models import ReportResult
from .text import format_generated, format_period

DEFAULT_TEMPLATE = Path(__file__).resolve().parent.parent / 'templates' / 'email-template.html'
PLACEHOLDER_RE = re.compile(r'\{\{(PERIOD|REPORTS|GENERATED_DATE)\}\}')


def load_template(template_path: Union[str, Path, None] = None) -> str:
    """Read the HTML template; a missing file is fatal."""
    path = Path(template_path) if template_path else DEFAULT_TEMPLATE
    try:
        return path.read_text(encoding='utf-8')
    except OSError as e:
        raise TemplateError(f"Cannot read HTML template {path}: {e}") from e


def fill_template(template: str, values: Dict[str, str]) -> str:
    """
    Substitute each placeholder once, in a single pass.

    Inserted values are never scanned for further placeholders.
    """
    used = set()

    def substitute(match):
        name = match.group(1)
        if name in used:
            return match.group(0)
        used.add(name)
        return values[name]

    filled = PLACEHOLDER_RE.sub(substitute, template)
    missing = sorted(set(values) - used)
    if missing:
        raise TemplateError(f"HTML template is missing placeholders: {', '.join(missing)}")
    return filled


def _report_rows(report: ReportResult, with_title: bool) -> List[str]:
    rows = []
    if with_title:
        rows.append(f'<tr><td class="report-title"><h2>{escape(report.title)}</h2></td></tr>')

    for date_key, blocks in report.sorted_days():
        if not blocks:
            continue
        day_content = [f'<h3 class="day">{escape(date_key)}</h3>']
        for block in blocks:
            day_content.append(f'<h4>{escape(block.title)}</h4>')
            for item in block.items:
                day_content.append(f'<p class="day-item">{escape(item)}</p>')
        rows.append(f'<tr><td class="report-section">{"".join(day_content)}</td></tr>')
    return rows


def render_html(reports: Sequence[ReportResult], template_path: Union[str, Path, None] = None,
                generated_at: Optional[datetime] = None) -> str:
    """
    Render reports into the HTML email template.

    Each day becomes one table row. Titles and items are HTML-escaped.
    When several reports are rendered each gets a title row.

    Args:
        reports: Reports to render; the first one supplies the period
        template_path: Template file, defaults to the packaged one
        generated_at: Timestamp for the footer, defaults to now

    Returns:
        The HTML document

    Raises:
        TemplateError: if the template is missing or lacks a placeholder
    """
    if not reports:
        raise ValueError("render_html() needs at least one report")

    template = load_template(template_path)
    rows = []
    for report in reports:
        rows.extend(_report_rows(report, with_title=len(reports) > 1))

    return fill_template(template, {
        'PERIOD': escape(format_period(reports[0])),
        'REPORTS': ''.join(rows),
        'GENERATED_DATE': escape(format_generated(generated_at)),
    })
