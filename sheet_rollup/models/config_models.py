from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .column_map import ColumnMap
from .filter_predicate import FilterPredicate

"""Config dataclasses for the rollup tool.

These are the typed form of ``config/rollup.yml`` after loading and schema
validation in sheet_rollup.config.loader.
"""


@dataclass(frozen=True)
class LayoutConfig:
    """One known sheet shape: where the header sits and which column is what."""
    name: str
    column_map: ColumnMap
    header_row: int = 1  # 1-based (Pipeline シートは 11 行目)


@dataclass(frozen=True)
class WorkbookSource:
    """A workbook file and the sheet/layout to read from it.

    ``sheet`` None means the first sheet in the workbook.
    """
    name: str  # config key (e.g. "pt")
    file: str  # relative to source_directory unless absolute
    layout: str
    sheet: str | None = None


@dataclass(frozen=True)
class ReportConfig:
    name: str
    workbook: str
    period: str = "month"
    date_field: str = "date"
    measures: tuple[str, ...] = ()
    distinct: tuple[str, ...] = ()
    filters: tuple[FilterPredicate, ...] = ()


@dataclass(frozen=True)
class RollupConfig:
    """Root configuration object."""
    source_directory: str
    workbooks: dict[str, WorkbookSource]
    layouts: dict[str, LayoutConfig]
    reports: dict[str, ReportConfig] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def layout_for(self, workbook: str) -> LayoutConfig:
        return self.layouts[self.workbooks[workbook].layout]
