from __future__ import annotations

from ..models.period_bucket import PeriodBucket
from ..models.report_result import ReportResult

"""Summary line and series rendering.

SUMMARY line format:
SUMMARY report={name} period={period} records={total} filtered={kept}
buckets={n} unknown={unknown} elapsed_sec={elapsed} [{measure}={total} ...]
"""


def _fmt_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if abs(value) < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.2f}".rstrip("0").rstrip(".")


def render_summary_line(result: ReportResult) -> str:
    """Render the SUMMARY line for a report result.

    Args:
        result: finished report run

    Returns:
        Single line string beginning with ``SUMMARY``; one ``measure=total``
        pair is appended per report measure

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> result = ReportResult(
        ...     name="hours", workbook="pt", period="month", buckets=[],
        ...     total_records=0, filtered_records=0, start_time=start, end_time=start,
        ... )
        >>> render_summary_line(result)
        'SUMMARY report=hours period=month records=0 filtered=0 buckets=0 unknown=0 elapsed_sec=0'
    """
    parts = [
        f"SUMMARY report={result.name}",
        f"period={result.period}",
        f"records={result.total_records}",
        f"filtered={result.filtered_records}",
        f"buckets={len(result.buckets)}",
        f"unknown={result.unknown_entries}",
        f"elapsed_sec={_fmt_number(result.elapsed_seconds)}",
    ]
    parts.extend(f"{m}={_fmt_number(result.total(m))}" for m in result.measures)
    return " ".join(parts)


def render_bucket_line(bucket: PeriodBucket) -> str:
    """Render one human readable line for a period bucket.

    Args:
        bucket: finalized period bucket

    Returns:
        Period label (padded to 10), entry count, measure sums and distinct
        counts, e.g. ``2024-01    entries=2 hours=8 projectId_count=1``
    """
    parts = [f"{bucket.period:<10}", f"entries={bucket.entries}"]
    parts.extend(f"{m}={_fmt_number(v)}" for m, v in bucket.sums.items())
    parts.extend(f"{f}_count={n}" for f, n in bucket.counts.items())
    return " ".join(parts)
