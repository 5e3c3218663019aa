"""Print a report to the console when email delivery is off."""

import sys
from typing import Optional, TextIO

from ..models import ReportResult

DAY_RULE = '─' * 50


def print_report(report: ReportResult, stream: Optional[TextIO] = None) -> None:
    """Print the report day by day, oldest first."""
    out = stream or sys.stdout
    start = report.period.start.strftime('%Y-%m-%d')
    end = report.period.end.strftime('%Y-%m-%d')

    print(f"=== {report.title} ===", file=out)
    print(f"Period: {start} to {end}\n", file=out)

    for date_key, blocks in report.sorted_days():
        if not blocks:
            continue
        print(f"\n📅 {date_key}", file=out)
        print(DAY_RULE, file=out)
        for block in blocks:
            print(f"\n{block.title}", file=out)
            for item in block.items:
                print(f"  {item}", file=out)

    print('\n' + '=' * 50, file=out)
