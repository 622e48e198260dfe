from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from ..excel.reader import SheetHeaderError, WorkbookReadError, read_sheet
from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import ErrorRecord, ErrorType
from ..models.config_models import RollupConfig, WorkbookSource
from ..models.sheet import Sheet
from ..models.workbook_load import LoadStatus, LoadSummary, WorkbookLoad
from .progress import ProgressTracker

"""Sheet cache with an explicit lifecycle.

``init(config)`` registers the configured workbooks and loads each one,
``get(name)`` returns the cached Sheet (reloading when the file changed on
disk or after ``invalidate``), ``invalidate(name=None)`` drops one or all
entries. The cache is an ordinary object handed to whoever needs sheets;
there is no module-level instance.

Loads are all-or-nothing per workbook: a read error leaves no entry behind,
is reported as a FAILED WorkbookLoad and is appended to the error log.
"""

__all__ = [
    "CacheMissError",
    "SheetCache",
    "SheetLoader",
]

logger = logging.getLogger(__name__)

SheetLoader = Callable[[Path, "str | None", int], Sheet]


class CacheMissError(Exception):
    """Raised when a workbook is unknown to the cache or cannot be loaded."""


@dataclass(frozen=True)
class _Registration:
    source: WorkbookSource
    path: Path
    header_row: int


@dataclass(frozen=True)
class _Entry:
    sheet: Sheet
    signature: tuple[int, int] | None


def _signature(path: Path) -> tuple[int, int] | None:
    try:
        st = path.stat()
    except OSError:
        return None
    return (st.st_mtime_ns, st.st_size)


class SheetCache:
    def __init__(self, loader: SheetLoader = read_sheet, error_log: ErrorLogBuffer | None = None) -> None:
        self._loader = loader
        self._error_log = error_log if error_log is not None else ErrorLogBuffer()
        self._registrations: dict[str, _Registration] = {}
        self._entries: dict[str, _Entry] = {}
        # name -> error message of the last failed load
        self._failed: dict[str, str] = {}

    @property
    def error_log(self) -> ErrorLogBuffer:
        return self._error_log

    def init(self, config: RollupConfig, names: list[str] | None = None) -> LoadSummary:
        """Register and load the configured workbooks.

        Args:
            config: validated rollup configuration
            names: workbook keys to load; all configured workbooks when None

        Returns:
            LoadSummary with one WorkbookLoad per requested workbook
        """
        started = datetime.now(UTC)
        base = Path(config.source_directory)
        wanted = list(config.workbooks) if names is None else names
        for name in wanted:
            source = config.workbooks[name]
            path = Path(source.file)
            if not path.is_absolute():
                path = base / path
            self._registrations[name] = _Registration(
                source=source,
                path=path,
                header_row=config.layouts[source.layout].header_row,
            )

        loads: list[WorkbookLoad] = []
        with ProgressTracker(len(wanted)) as progress:
            for name in wanted:
                progress.start(self._registrations[name].path)
                load = self._load(name)
                loads.append(load)
                progress.finish(loaded=sum(1 for x in loads if x.ok), failed=sum(1 for x in loads if not x.ok))

        elapsed = (datetime.now(UTC) - started).total_seconds()
        return LoadSummary(loads=loads, elapsed_seconds=elapsed)

    def get(self, name: str) -> Sheet:
        """Return the cached sheet of workbook ``name``.

        The sheet is reloaded when the file changed on disk or after
        ``invalidate``. A workbook whose last load failed is not read again
        until it is invalidated.

        Args:
            name: workbook key from the config

        Returns:
            The loaded Sheet

        Raises:
            CacheMissError: unknown workbook, or the load failed
        """
        reg = self._registrations.get(name)
        if reg is None:
            raise CacheMissError(f"workbook '{name}' is not registered")
        if name in self._failed:
            raise CacheMissError(f"workbook '{name}' could not be loaded: {self._failed[name]}")
        entry = self._entries.get(name)
        if entry is not None:
            current = _signature(reg.path)
            # ファイル消失時はキャッシュを使い続ける
            if current is None or current == entry.signature:
                return entry.sheet
            logger.info(f"workbook changed on disk, reloading: {reg.path.name}")
            self._entries.pop(name, None)
        load = self._load(name)
        if not load.ok:
            raise CacheMissError(f"workbook '{name}' could not be loaded: {load.error}")
        return self._entries[name].sheet

    def invalidate(self, name: str | None = None) -> None:
        """Drop cached sheets and remembered failures.

        Args:
            name: workbook key to drop; every workbook when None
        """
        if name is None:
            self._entries.clear()
            self._failed.clear()
            logger.debug("cache invalidated (all workbooks)")
            return
        self._entries.pop(name, None)
        self._failed.pop(name, None)
        logger.debug(f"cache invalidated: {name}")

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def _load(self, name: str) -> WorkbookLoad:
        reg = self._registrations[name]
        start = datetime.now(UTC)
        signature = _signature(reg.path)
        try:
            sheet = self._loader(reg.path, reg.source.sheet, reg.header_row)
        except (WorkbookReadError, SheetHeaderError) as e:
            self._entries.pop(name, None)
            self._failed[name] = str(e)
            logger.warning(f"load failed: {reg.path.name}: {e}")
            self._error_log.append(ErrorRecord.create(
                file=reg.path.name,
                sheet=reg.source.sheet,
                row=-1,
                error_type=ErrorType.SHEET_HEADER_ERROR if isinstance(e, SheetHeaderError) else ErrorType.WORKBOOK_READ_ERROR,
                message=str(e),
            ))
            return WorkbookLoad(
                name=name,
                path=reg.path,
                status=LoadStatus.FAILED,
                start_time=start,
                end_time=datetime.now(UTC),
                error=str(e),
            )
        self._failed.pop(name, None)
        self._entries[name] = _Entry(sheet=sheet, signature=signature)
        logger.debug(f"loaded {reg.path.name}:{sheet.name} rows={len(sheet)}")
        return WorkbookLoad(
            name=name,
            path=reg.path,
            status=LoadStatus.LOADED,
            sheets=[sheet.name],
            rows=len(sheet),
            start_time=start,
            end_time=datetime.now(UTC),
        )
