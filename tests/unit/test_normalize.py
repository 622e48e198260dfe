from __future__ import annotations

from datetime import datetime

import pytest

from sheet_rollup.excel.normalize import format_number, normalize, parse_number
from sheet_rollup.models.cell import Cell, CellKind, ValueKind


def test_text_kind():
    assert normalize(Cell.text("  Acme  ")) == "Acme"
    assert normalize(Cell.number(1001.0)) == "1001"
    assert normalize(Cell.number(2.5)) == "2.5"
    assert normalize(Cell.boolean(True)) == "true"
    assert normalize(Cell.boolean(False)) == "false"
    assert normalize(Cell.datetime_text("2024-01-05T00:00:00")) == "2024-01-05T00:00:00"
    assert normalize(Cell.empty()) == ""


def test_number_kind():
    assert normalize(Cell.number(8), ValueKind.NUMBER) == 8.0
    assert normalize(Cell.text(" 1,234.5 "), ValueKind.NUMBER) == 1234.5
    assert normalize(Cell.boolean(True), ValueKind.NUMBER) == 1.0
    assert normalize(Cell.boolean(False), ValueKind.NUMBER) == 0.0
    assert normalize(Cell.text("abc"), ValueKind.NUMBER) is None
    assert normalize(Cell.datetime_text("2024-01-05"), ValueKind.NUMBER) is None
    assert normalize(Cell.empty(), ValueKind.NUMBER) is None


def test_number_kind_non_finite_is_none():
    assert normalize(Cell.number(float("inf")), ValueKind.NUMBER) is None
    assert normalize(Cell.text("inf"), ValueKind.NUMBER) is None


def test_date_kind():
    assert normalize(Cell.number(45292), ValueKind.DATE) == datetime(2024, 1, 1)
    assert normalize(Cell.text("2024-03-15"), ValueKind.DATE) == datetime(2024, 3, 15)
    assert normalize(Cell.boolean(True), ValueKind.DATE) is None
    assert normalize(Cell.empty(), ValueKind.DATE) is None


def test_raw_values_are_classified_first():
    assert normalize(1001) == "1001"
    assert normalize(None, ValueKind.NUMBER) is None
    assert normalize({"Number": 2}, ValueKind.NUMBER) == 2.0
    assert normalize({"bogus": 1}) == ""


# (cell, TEXT, NUMBER, DATE)
MALFORMED = [
    (Cell(CellKind.NUMBER, "abc"), "", None, None),
    (Cell(CellKind.NUMBER, None), "", None, None),
    (Cell(CellKind.TEXT, None), "", None, None),
    (Cell(CellKind.TEXT, 12), "", None, None),
    (Cell(CellKind.DATETIME_TEXT, None), "", None, None),
    (Cell(CellKind.DATETIME_TEXT, "not a date"), "not a date", None, None),
    (Cell(CellKind.BOOLEAN, None), "", None, None),
    (Cell(CellKind.EMPTY, "leftover"), "", None, None),
    (object(), "", None, None),
    (float("nan"), "", None, None),
    ([], "", None, None),
]


@pytest.mark.parametrize("cell,text,number,when", MALFORMED)
def test_normalize_is_total(cell, text, number, when):
    assert normalize(cell, ValueKind.TEXT) == text
    assert normalize(cell, ValueKind.NUMBER) is number
    assert normalize(cell, ValueKind.DATE) is when


def test_text_cell_without_payload_is_empty_not_none_string():
    assert normalize(Cell(CellKind.TEXT, None)) == ""
    assert normalize(Cell(CellKind.DATETIME_TEXT, None)) == ""


def test_format_and_parse_number():
    assert format_number(3.0) == "3"
    assert format_number(-0.5) == "-0.5"
    assert parse_number("") is None
    assert parse_number(" 12 ") == 12.0
    assert parse_number("nan") is None
