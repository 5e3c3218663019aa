"""Unit tests for the text, HTML and console renderers."""

import io
from datetime import datetime

import pytest

from activity_report.errors import TemplateError
from activity_report.models import Period, ReportContent, ReportResult
from activity_report.reporters.console import print_report
from activity_report.reporters.html import fill_template, render_html
from activity_report.reporters.text import format_period, render_text


@pytest.fixture
def generated_at(utc) -> datetime:
    return datetime(2024, 1, 14, 18, 30, 0, tzinfo=utc)


@pytest.fixture
def report(week) -> ReportResult:
    # inserted out of order on purpose
    return ReportResult(
        title="Weekly Activity Report",
        contents={
            "2024-01-10": [ReportContent("Pull Requests Opened:", ["• octo/api#7: Add search"])],
            "2024-01-08": [
                ReportContent("Meetings: 1 (30m)", ["• Standup"]),
                ReportContent("Projects Contributed To:", ["• octo/api"]),
            ],
        },
        period=Period(*week),
    )


class TestRenderText:
    """Tests for render_text."""

    def test_layout(self, report, generated_at) -> None:
        text = render_text([report], generated_at=generated_at)
        lines = text.split("\n")

        assert lines[0] == "=" * 60
        assert lines[1] == "Weekly Activity Report"
        assert "Period: January 7, 2024 - January 14, 2024" in lines
        assert lines[-2] == "Generated on 2024-01-14 18:30:00 UTC"
        assert lines[-1] == "=" * 60

    def test_days_in_ascending_order(self, report, generated_at) -> None:
        text = render_text([report], generated_at=generated_at)

        assert text.index("2024-01-08") < text.index("2024-01-10")
        assert text.index("Meetings: 1 (30m)") < text.index("Projects Contributed To:")

    def test_each_item_appears_once(self, report, generated_at) -> None:
        text = render_text([report], generated_at=generated_at)

        for item in ("• Standup", "• octo/api#7: Add search"):
            assert text.count(item) == 1

    def test_multiple_reports_get_sections(self, report, week, generated_at) -> None:
        other = ReportResult(
            title="GitHub Weekly Activity Report",
            contents={"2024-01-09": [ReportContent("Total Code Changes:", ["• Total Changes: 3"])]},
            period=Period(*week),
        )

        text = render_text([report, other], generated_at=generated_at)

        assert text.count("-" * 60) == 4
        assert text.index("Weekly Activity Report") < text.index("GitHub Weekly Activity Report")

    def test_empty_report_still_renders_header(self, week, generated_at) -> None:
        empty = ReportResult(title="Nothing", contents={}, period=Period(*week))
        assert "Nothing" in render_text([empty], generated_at=generated_at)


class TestRenderHtml:
    """Tests for render_html."""

    def test_escapes_user_text(self, week, generated_at) -> None:
        hostile = ReportResult(
            title="Weekly",
            contents={"2024-01-08": [
                ReportContent("<script>alert(1)</script>", ["• Tom & Jerry's \"sync\""]),
            ]},
            period=Period(*week),
        )

        html = render_html([hostile], generated_at=generated_at)

        assert "<script>" not in html
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
        assert "Tom &amp; Jerry&#x27;s &quot;sync&quot;" in html

    def test_placeholders_are_filled(self, report, generated_at) -> None:
        html = render_html([report], generated_at=generated_at)

        assert "{{" not in html
        assert "Period: January 7, 2024 - January 14, 2024" in html
        assert "2024-01-14 18:30:00 UTC" in html

    def test_one_row_per_day_sorted(self, report, generated_at) -> None:
        html = render_html([report], generated_at=generated_at)

        assert html.count('class="report-section"') == 2
        assert html.index('<h3 class="day">2024-01-08</h3>') < html.index('<h3 class="day">2024-01-10</h3>')
        assert html.count("<p class=\"day-item\">• Standup</p>") == 1

    def test_custom_template(self, report, generated_at, tmp_path) -> None:
        template = tmp_path / "t.html"
        template.write_text("<p>{{PERIOD}}</p><table>{{REPORTS}}</table><i>{{GENERATED_DATE}}</i>", encoding="utf-8")

        html = render_html([report], template_path=template, generated_at=generated_at)

        assert html.startswith("<p>Period: January 7, 2024")
        assert html.endswith("<i>2024-01-14 18:30:00 UTC</i>")

    def test_missing_template_raises(self, report, tmp_path) -> None:
        with pytest.raises(TemplateError):
            render_html([report], template_path=tmp_path / "nope.html")

    def test_template_without_placeholder_raises(self, report, tmp_path) -> None:
        template = tmp_path / "t.html"
        template.write_text("<p>{{PERIOD}}</p>{{REPORTS}}", encoding="utf-8")

        with pytest.raises(TemplateError, match="GENERATED_DATE"):
            render_html([report], template_path=template)


class TestFillTemplate:

    def test_inserted_text_is_not_rescanned(self) -> None:
        filled = fill_template(
            "{{PERIOD}}|{{REPORTS}}|{{GENERATED_DATE}}",
            {"PERIOD": "p", "REPORTS": "{{GENERATED_DATE}}", "GENERATED_DATE": "g"},
        )
        assert filled == "p|{{GENERATED_DATE}}|g"

    def test_each_token_substituted_once(self) -> None:
        filled = fill_template(
            "{{PERIOD}} {{PERIOD}} {{REPORTS}} {{GENERATED_DATE}}",
            {"PERIOD": "p", "REPORTS": "r", "GENERATED_DATE": "g"},
        )
        assert filled == "p {{PERIOD}} r g"


def test_print_report_console_layout(report) -> None:
    out = io.StringIO()

    print_report(report, out)

    text = out.getvalue()
    assert text.startswith("=== Weekly Activity Report ===\nPeriod: 2024-01-07 to 2024-01-14\n")
    assert "📅 2024-01-08" in text
    assert "  • Standup" in text
    assert text.index("📅 2024-01-08") < text.index("📅 2024-01-10")


def test_print_report_defaults_to_stdout(report, capsys) -> None:
    print_report(report)

    assert "=== Weekly Activity Report ===" in capsys.readouterr().out


def test_format_period_has_no_zero_padding(report) -> None:
    assert format_period(report) == "Period: January 7, 2024 - January 14, 2024"
