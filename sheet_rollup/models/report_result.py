from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .period_bucket import UNKNOWN_PERIOD, PeriodBucket

"""Report result model: one configured report's series and its metrics."""


@dataclass(frozen=True)
class ReportResult:
    """Aggregated series plus the counts needed for the SUMMARY line."""
    name: str
    workbook: str
    period: str
    buckets: list[PeriodBucket]
    total_records: int     # extracted rows before filtering
    filtered_records: int  # rows that passed the filters
    start_time: datetime
    end_time: datetime
    measures: tuple[str, ...] = field(default_factory=tuple)

    @property
    def elapsed_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    @property
    def unknown_entries(self) -> int:
        return sum(b.entries for b in self.buckets if b.period == UNKNOWN_PERIOD)

    def total(self, measure: str) -> float:
        return sum(b.total(measure) for b in self.buckets)
