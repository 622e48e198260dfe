from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

"""WorkbookLoad model and LoadStatus enum.

A WorkbookLoad is the outcome of reading one configured workbook into the
sheet cache. Loads are all-or-nothing per file: a FAILED load contributes no
sheets, and ``error`` says why.
"""


class LoadStatus(Enum):
    """State transitions: pending -> (loaded | failed)."""
    PENDING = "pending"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class WorkbookLoad:
    name: str                          # config key of the workbook
    path: Path
    status: LoadStatus = LoadStatus.PENDING
    sheets: list[str] = field(default_factory=list)  # sheet names now cached
    rows: int = 0                      # data rows across cached sheets
    start_time: datetime | None = None
    end_time: datetime | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is LoadStatus.LOADED

    @property
    def elapsed_seconds(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()


@dataclass(frozen=True)
class LoadSummary:
    """Aggregate of one cache ``init`` pass."""
    loads: list[WorkbookLoad]
    elapsed_seconds: float = 0.0

    @property
    def loaded(self) -> int:
        return sum(1 for load in self.loads if load.ok)

    @property
    def failed(self) -> int:
        return sum(1 for load in self.loads if load.status is LoadStatus.FAILED)

    @property
    def total_rows(self) -> int:
        return sum(load.rows for load in self.loads if load.ok)
