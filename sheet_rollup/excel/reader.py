from __future__ import annotations

import zipfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.cell import Cell
from ..models.sheet import Sheet
from .normalize import normalize

"""Workbook reader.

Reads every (or selected) worksheet with pandas without header inference and
builds Sheet objects:

1. The header row is given per layout (1-based, default 1; e.g. the Program
   Management "Pipeline" sheet keeps its headers on row 11).
2. Rows below the header become data rows; rows whose cells are all empty
   are skipped.
3. Every value is classified into a Cell. Trailing empty cells are trimmed so
   short rows stay short; extraction treats missing cells as empty.
"""

__all__ = [
    "SheetHeaderError",
    "WorkbookReadError",
    "read_workbook",
    "read_excel_file",
    "read_sheet",
    "to_sheet",
]


class SheetHeaderError(Exception):
    """Raised when the configured header row does not exist in a sheet."""


class WorkbookReadError(Exception):
    """Raised when a workbook file cannot be opened or parsed."""


def read_excel_file(path: Path, target_sheets: Iterable[str] | None = None) -> dict[str, pd.DataFrame]:
    """Read an Excel file returning raw DataFrames keyed by sheet name.

    Parameters
    ----------
    path: workbook path
    target_sheets: restrict to these sheet names (None = all sheets)
    """
    wanted = None if target_sheets is None else {str(s) for s in target_sheets}
    dfs: dict[str, pd.DataFrame] = {}
    try:
        with pd.ExcelFile(path) as xls:
            for name in xls.sheet_names:
                if wanted is not None and str(name) not in wanted:
                    continue
                # ヘッダなしで生読み (ヘッダ行はレイアウト側で指定)
                # "NA" / "N/A" 等はセル文字列のまま保持する
                dfs[str(name)] = xls.parse(name, header=None, keep_default_na=False, na_values=[""])
    except FileNotFoundError as e:
        raise WorkbookReadError(f"workbook not found: {path}") from e
    except (OSError, ValueError, KeyError, zipfile.BadZipFile) as e:
        raise WorkbookReadError(f"cannot read workbook {path}: {e}") from e
    return dfs


def to_sheet(df: pd.DataFrame, sheet_name: str, header_row: int = 1) -> Sheet:
    """Convert a raw DataFrame into a Sheet using ``header_row`` (1-based)."""
    if header_row < 1 or df.shape[0] < header_row:
        raise SheetHeaderError(f"sheet '{sheet_name}' lacks header row {header_row}")
    headers = [_header_text(v) for v in df.iloc[header_row - 1].tolist()]
    # ヘッダ末尾の空列は落とす
    while headers and headers[-1] == "":
        headers.pop()

    rows: list[list[Cell]] = []
    row_numbers: list[int] = []
    for offset, raw in enumerate(df.iloc[header_row:].itertuples(index=False, name=None)):
        cells = [Cell.from_raw(v) for v in raw]
        while cells and cells[-1].is_empty:
            cells.pop()
        if not cells:
            continue
        rows.append(cells)
        row_numbers.append(header_row + 1 + offset)
    return Sheet(name=sheet_name, headers=headers, rows=rows, row_numbers=row_numbers)


def read_workbook(
    path: Path,
    target_sheets: Iterable[str] | None = None,
    header_rows: dict[str, int] | None = None,
) -> dict[str, Sheet]:
    """Read a workbook into Sheets keyed by sheet name.

    ``header_rows`` maps sheet name -> 1-based header row; sheets not listed
    use row 1.
    """
    header_rows = header_rows or {}
    raw = read_excel_file(path, target_sheets=target_sheets)
    return {
        name: to_sheet(df, name, header_row=header_rows.get(name, 1))
        for name, df in raw.items()
    }


def _header_text(value: Any) -> str:
    cell = Cell.from_raw(value)
    if cell.is_empty:
        return ""
    return str(normalize(cell))


def read_sheet(path: Path, sheet: str | None = None, header_row: int = 1) -> Sheet:
    """Read one sheet (the first one when ``sheet`` is None)."""
    if sheet is None:
        try:
            with pd.ExcelFile(path) as xls:
                names = [str(n) for n in xls.sheet_names]
        except FileNotFoundError as e:
            raise WorkbookReadError(f"workbook not found: {path}") from e
        except (OSError, ValueError, KeyError, zipfile.BadZipFile) as e:
            raise WorkbookReadError(f"cannot read workbook {path}: {e}") from e
        if not names:
            raise WorkbookReadError(f"workbook has no sheets: {path}")
        sheet = names[0]
    raw = read_excel_file(path, target_sheets=[sheet])
    if sheet not in raw:
        raise WorkbookReadError(f"sheet '{sheet}' not found in {path.name}")
    return to_sheet(raw[sheet], sheet, header_row=header_row)
