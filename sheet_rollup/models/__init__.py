"""Domain models for the spreadsheet rollup tool.

Cells and sheets as read from workbooks, records after column mapping,
filter predicates, finalized period buckets and the config/load/report
result types.
"""

from .cell import Cell, CellKind, ValueKind
from .column_map import ColumnMap, ColumnMapError, ColumnSpec
from .config_models import LayoutConfig, ReportConfig, RollupConfig, WorkbookSource
from .error_record import ErrorRecord, ErrorType
from .filter_predicate import FilterPredicate, MatchKind
from .period_bucket import UNKNOWN_PERIOD, BucketAccumulator, PeriodBucket
from .record import Record
from .report_result import ReportResult
from .sheet import Sheet
from .workbook_load import LoadStatus, LoadSummary, WorkbookLoad

__all__ = [
    # Sheet contents
    "Cell",
    "CellKind",
    "Sheet",
    "ValueKind",
    # Mapping & filtering
    "ColumnMap",
    "ColumnMapError",
    "ColumnSpec",
    "FilterPredicate",
    "MatchKind",
    "Record",
    # Aggregation
    "BucketAccumulator",
    "PeriodBucket",
    "UNKNOWN_PERIOD",
    # Configuration
    "LayoutConfig",
    "ReportConfig",
    "RollupConfig",
    "WorkbookSource",
    # Results
    "LoadStatus",
    "LoadSummary",
    "ErrorRecord",
    "ErrorType",
    "ReportResult",
    "WorkbookLoad",
]
