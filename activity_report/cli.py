"""
Weekly Activity Report
Collects calendar meetings and GitHub contributions into one day-by-day report,
then emails it or prints it.
"""

import argparse
import io
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .config import AppConfig
from .errors import ConfigError, ReportError
from .models import MergedReport
from .pipeline import build_weekly_report, report_period
from .reporters import print_report, render_html, render_text, send_email_report

logger = logging.getLogger(__name__)

PERIOD_DAYS = {
    'day': 1,
    '3days': 3,
    'week': 7,
    '2weeks': 14,
    'month': 30,
}


def setup_argument_parser() -> argparse.ArgumentParser:
    """Setup and return the argument parser."""
    parser = argparse.ArgumentParser(
        description='Generate a weekly activity report from Google Calendar and GitHub.'
    )
    parser.add_argument(
        '--period',
        choices=sorted(PERIOD_DAYS),
        help='Time period preset: day(1), 3days, week(7), 2weeks(14), month(30)'
    )
    parser.add_argument(
        '--days',
        type=int,
        help='Custom number of days (overrides --period, default: 7)'
    )
    parser.add_argument(
        '--tz',
        help='Time zone for day boundaries (overrides TZ)'
    )
    parser.add_argument(
        '--env-file',
        help='Path to a .env file (default: search from the current directory)'
    )
    parser.add_argument(
        '--format',
        choices=['console', 'text', 'html'],
        default='console',
        help='Output format when not emailing (default: console)'
    )
    parser.add_argument(
        '--output',
        help='Output file path (default: print to stdout)'
    )
    parser.add_argument(
        '--no-email',
        action='store_true',
        help='Print the report even if EMAIL_ENABLED=true'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )
    return parser


def calculate_days(args) -> int:
    """Calculate number of days based on period or days argument."""
    if args.days:
        return args.days
    if args.period:
        return PERIOD_DAYS[args.period]
    return 7


def load_config(args) -> AppConfig:
    """Load and validate configuration, applying command-line overrides."""
    config = AppConfig.from_env(env_file=args.env_file)
    if args.tz:
        config.tz = args.tz
    missing = config.missing_variables()
    if missing:
        raise ConfigError(missing)
    try:
        config.zone
    except (LookupError, ValueError) as e:
        raise ReportError(f"Unknown time zone: {config.tz}") from e
    return config


def format_report(report: MergedReport, output_format: str) -> str:
    """Render the report in the requested output format."""
    if output_format == 'html':
        return render_html([report])
    if output_format == 'text':
        return render_text([report])
    buffer = io.StringIO()
    print_report(report, buffer)
    return buffer.getvalue()


def save_or_print_report(report: str, output_path: Optional[str] = None) -> None:
    """Save report to file or print to stdout."""
    if output_path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(report, encoding='utf-8')
        print(f"Report successfully generated: {output_path}")
    else:
        print(report)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the script."""
    parser = setup_argument_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        config = load_config(args)
    except ReportError as e:
        print(f"[Error] {e}", file=sys.stderr)
        return 1

    start, end = report_period(datetime.now(config.zone), calculate_days(args))

    print(f"App TZ: {config.tz}")
    print(f"Period: {start.isoformat()} - {end.isoformat()}")
    if config.github.actions:
        print(f"Running in GitHub Actions ({config.github.repository}, {config.github.workflow})")

    try:
        report = build_weekly_report(config, start, end)
        if config.email.enabled and not args.no_email:
            send_email_report(config.email, report)
        else:
            if not args.no_email:
                print('Email reporting is disabled. Printing report:\n')
            save_or_print_report(format_report(report, args.format), args.output)
    except ReportError as e:
        logger.error("%s", e)
        print(f"[Error] {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
