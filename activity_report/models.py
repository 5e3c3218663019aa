"""Day-keyed report model and the merge across sources."""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

DEFAULT_MERGED_TITLE = 'Weekly Activity Report'


@dataclass(frozen=True)
class ReportContent:
    """One titled block of bullet lines for a single day."""

    title: str
    items: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'items', tuple(self.items))


@dataclass(frozen=True)
class Period:
    """Inclusive reporting window."""

    start: datetime
    end: datetime


@dataclass(frozen=True)
class ReportResult:
    """
    One source's contribution over a period.

    ``contents`` maps ISO date keys (YYYY-MM-DD) to that day's content blocks.
    Days without activity have no key. The mapping is frozen on construction.
    """

    title: str
    contents: Mapping[str, Tuple[ReportContent, ...]]
    period: Period

    def __post_init__(self):
        frozen = {key: tuple(blocks) for key, blocks in self.contents.items()}
        object.__setattr__(self, 'contents', MappingProxyType(frozen))

    def sorted_days(self) -> List[Tuple[str, Tuple[ReportContent, ...]]]:
        """Return (date key, blocks) pairs in ascending date order."""
        return [(key, self.contents[key]) for key in sorted(self.contents)]

    @property
    def is_empty(self) -> bool:
        return not self.contents


@dataclass(frozen=True)
class MergedReport(ReportResult):
    """Union of several source reports covering the same period."""

    sources: Tuple[str, ...] = field(default=())


def merge(reports: Sequence[ReportResult], title: Optional[str] = None) -> MergedReport:
    """
    Merge source reports into one day-keyed report.

    Blocks for a shared date are concatenated in input order. The period is
    taken from the first report; callers pass reports for the same window.

    Args:
        reports: Source reports, in the order their blocks should appear
        title: Title of the merged report

    Returns:
        A new MergedReport; the inputs are left untouched
    """
    if not reports:
        raise ValueError("merge() needs at least one report")

    contents: Dict[str, List[ReportContent]] = {}
    for report in reports:
        for date_key, blocks in report.contents.items():
            contents.setdefault(date_key, []).extend(blocks)

    return MergedReport(
        title=title or DEFAULT_MERGED_TITLE,
        contents=contents,
        period=reports[0].period,
        sources=tuple(report.title for report in reports),
    )


def build_contents(days: Iterable[Tuple[str, List[ReportContent]]]) -> Dict[str, List[ReportContent]]:
    """Keep only the days that produced at least one block."""
    return {date_key: blocks for date_key, blocks in days if blocks}
