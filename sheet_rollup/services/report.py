from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from ..models.column_map import ColumnMap
from ..models.config_models import ReportConfig, RollupConfig
from ..models.filter_predicate import FilterPredicate
from ..models.period_bucket import PeriodBucket
from ..models.report_result import ReportResult
from ..models.sheet import Sheet
from .aggregator import Granularity, PeriodKeyFn, aggregate
from .cache import CacheMissError, SheetCache
from .extractor import extract_all
from .filters import apply_filters

logger = logging.getLogger(__name__)

"""Report runner.

Composes the pipeline for one configured report:

    sheet (cache) -> extract_all (layout column map) -> apply_filters -> aggregate

and wraps the resulting series into a ReportResult. Fields a report names
but the layout does not map are reported once at WARN level and contribute
nothing (absent fields sum as 0 and have no distinct values).
"""


class ReportError(Exception):
    """Raised when a report cannot run (unknown report, workbook unavailable)."""


def build_series(
    sheet: Sheet,
    column_map: ColumnMap,
    period: Granularity | str | PeriodKeyFn,
    measures: Sequence[str],
    distinct: Sequence[str] = (),
    predicates: Sequence[FilterPredicate] = (),
    date_field: str = "date",
) -> tuple[list[PeriodBucket], int, int]:
    """Run extract -> filter -> aggregate over one sheet.

    Returns:
        (buckets, total_records, filtered_records)
    """
    records = extract_all(sheet, column_map)
    kept = apply_filters(records, predicates)
    buckets = aggregate(kept, period, measures, distinct, date_field=date_field)
    return buckets, len(records), len(kept)


def run_report(
    config: RollupConfig,
    cache: SheetCache,
    name: str,
    period: str | None = None,
) -> ReportResult:
    """Run the configured report ``name``.

    Args:
        config: validated rollup configuration
        cache: sheet cache already initialised for the report's workbook
        name: report key under ``reports:``
        period: granularity override (``--period``); the report's own when None

    Returns:
        ReportResult with the period buckets and record counts

    Raises:
        ReportError: unknown report, or its workbook could not be loaded
    """
    report = config.reports.get(name)
    if report is None:
        raise ReportError(f"unknown report: {name}")
    try:
        sheet = cache.get(report.workbook)
    except CacheMissError as e:
        raise ReportError(f"report '{name}': {e}") from e

    layout = config.layout_for(report.workbook)
    _warn_unmapped(report, layout.column_map)
    granularity = Granularity.parse(period or report.period)

    start_time = datetime.now(UTC)
    buckets, total, kept = build_series(
        sheet,
        layout.column_map,
        granularity,
        report.measures,
        report.distinct,
        report.filters,
        date_field=report.date_field,
    )
    end_time = datetime.now(UTC)
    logger.debug(f"report={name} records={total} filtered={kept} buckets={len(buckets)}")
    return ReportResult(
        name=name,
        workbook=report.workbook,
        period=granularity.value,
        buckets=buckets,
        total_records=total,
        filtered_records=kept,
        start_time=start_time,
        end_time=end_time,
        measures=tuple(report.measures),
    )


def _warn_unmapped(report: ReportConfig, column_map: ColumnMap) -> None:
    named = [report.date_field, *report.measures, *report.distinct, *(p.field for p in report.filters)]
    missing = sorted({f for f in named if f not in column_map})
    if missing:
        logger.warning(f"report '{report.name}': fields not in layout '{column_map.name}': {missing}")
