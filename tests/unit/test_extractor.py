from __future__ import annotations

import copy
from datetime import datetime

from sheet_rollup.models.cell import Cell
from sheet_rollup.models.column_map import ColumnMap
from sheet_rollup.models.sheet import Sheet
from sheet_rollup.services.extractor import extract, extract_all

CM = ColumnMap.from_dict("t", {
    "projectId": "A",
    "date": {"column": "B", "kind": "date"},
    "hours": {"column": "C", "kind": "number"},
    "note": {"column": "F", "kind": "text"},
})


def test_extract_normalizes_per_kind():
    row = [Cell.text(" P100 "), Cell.number(45292), Cell.text("7.5")]
    record = extract(row, CM, row_number=2)
    assert record.values == {
        "projectId": "P100",
        "date": datetime(2024, 1, 1),
        "hours": 7.5,
        "note": "",
    }
    assert record.row_number == 2


def test_short_row_reads_empty():
    record = extract([Cell.text("P1")], CM)
    assert record.get("date") is None
    assert record.get("hours") is None
    assert record.get("note") == ""


def test_unmapped_fields_absent():
    row = [Cell.text("P1"), Cell.empty(), Cell.number(1), Cell.text("x"), Cell.text("y")]
    record = extract(row, CM)
    assert set(record.values) == {"projectId", "date", "hours", "note"}
    assert "cost" not in record


def test_extract_does_not_mutate_row():
    row = [Cell.text("P1"), Cell.text("2024-01-05"), {"Number": 3}, "raw"]
    before = copy.deepcopy(row)
    extract(row, CM)
    assert row == before


def test_extract_all_numbers_sheet_rows():
    sheet = Sheet(
        name="S",
        headers=["projectId", "date", "hours"],
        rows=[[Cell.text("P1")], [Cell.text("P2")]],
        row_numbers=[2, 4],
    )
    records = extract_all(sheet, CM)
    assert [r.row_number for r in records] == [2, 4]
    assert [r.get("projectId") for r in records] == ["P1", "P2"]


def test_extract_all_plain_rows():
    records = extract_all([["P1", "2024-01-05", 2], ["P2"]], CM)
    assert records[0].get("hours") == 2.0
    assert records[0].row_number is None
    assert records[1].get("date") is None


def test_extract_twice_is_structurally_equal():
    row = [Cell.text("P1"), Cell.number(45292), Cell.text("2")]
    assert extract(row, CM, row_number=7) == extract(row, CM, row_number=7)
