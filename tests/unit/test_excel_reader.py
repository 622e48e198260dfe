from __future__ import annotations
import pandas as pd
import pytest
from pathlib import Path

from sheet_rollup.excel.reader import (
    SheetHeaderError,
    WorkbookReadError,
    read_excel_file,
    read_sheet,
    read_workbook,
    to_sheet,
)
from sheet_rollup.models.cell import CellKind


def make_excel(p: Path, sheets: dict[str, list[list[object]]]) -> Path:
    with pd.ExcelWriter(p, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return p


def test_read_sheet_default_header(temp_workdir: Path):
    excel = make_excel(temp_workdir / "pt.xlsx", {
        "Transactions": [
            ["projectId", "date", "hours"],
            ["P100", "2024-01-05", 3],
            ["P200", 45338, 2.5],
        ]
    })
    sheet = read_sheet(excel)
    assert sheet.name == "Transactions"
    assert sheet.headers == ["projectId", "date", "hours"]
    assert len(sheet) == 2
    assert sheet.rows[0][0].kind is CellKind.TEXT
    assert sheet.rows[1][1].kind is CellKind.NUMBER
    assert sheet.rows[1][2].value == 2.5
    assert sheet.row_numbers == [2, 3]


def test_header_row_offset_and_blank_rows(temp_workdir: Path):
    excel = make_excel(temp_workdir / "pm.xlsx", {
        "Pipeline": [
            ["Program Management"],
            ["generated 2024-01-01"],
            ["id", "name", "value"],
            ["A1", "Alpha", 10],
            [None, None, None],
            ["A2", None, None],
        ]
    })
    sheet = read_sheet(excel, "Pipeline", header_row=3)
    assert sheet.headers == ["id", "name", "value"]
    assert sheet.row_numbers == [4, 6]
    # trailing empty cells are trimmed
    assert len(sheet.rows[1]) == 1
    assert sheet.cell(1, 2).is_empty


def test_na_strings_kept_as_text(temp_workdir: Path):
    excel = make_excel(temp_workdir / "na.xlsx", {
        "S": [["col_a", "col_b"], ["NA", "N/A"]],
    })
    sheet = read_sheet(excel, "S")
    assert [c.value for c in sheet.rows[0]] == ["NA", "N/A"]


def test_missing_header_row(temp_workdir: Path):
    excel = make_excel(temp_workdir / "short.xlsx", {"S": [["only"]]})
    with pytest.raises(SheetHeaderError):
        read_sheet(excel, "S", header_row=5)


def test_missing_sheet(temp_workdir: Path):
    excel = make_excel(temp_workdir / "one.xlsx", {"S": [["a"]]})
    with pytest.raises(WorkbookReadError):
        read_sheet(excel, "Other")


def test_missing_file(temp_workdir: Path):
    with pytest.raises(WorkbookReadError):
        read_excel_file(temp_workdir / "nope.xlsx")


def test_corrupt_file(temp_workdir: Path):
    bad = temp_workdir / "bad.xlsx"
    bad.write_bytes(b"not a zip")
    with pytest.raises(WorkbookReadError):
        read_sheet(bad)


def test_read_workbook_all_sheets(temp_workdir: Path):
    excel = make_excel(temp_workdir / "multi.xlsx", {
        "A": [["x"], [1]],
        "B": [["title"], ["y"], [2]],
    })
    sheets = read_workbook(excel, header_rows={"B": 2})
    assert set(sheets) == {"A", "B"}
    assert sheets["A"].headers == ["x"]
    assert sheets["B"].headers == ["y"]
    assert sheets["B"].row_numbers == [3]


def test_to_sheet_numeric_headers(temp_workdir: Path):
    df = pd.DataFrame([[2024, 1.0, None], ["a", "b", None]])
    sheet = to_sheet(df, "S")
    assert sheet.headers == ["2024", "1"]
