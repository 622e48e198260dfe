from __future__ import annotations

import json

import jsonschema
import pytest
from jsonschema.exceptions import ValidationError

from sheet_rollup.models.error_record import ErrorRecord

"""Error log line contract: one JSON object per line, fixed keys, row -1 for file-level errors."""

ERROR_LINE_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["timestamp", "file", "sheet", "row", "error_type", "message"],
    "additionalProperties": False,
    "properties": {
        "timestamp": {"type": "string", "pattern": r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$"},
        "file": {"type": "string", "minLength": 1},
        "sheet": {"type": "string"},
        "row": {"type": "integer", "minimum": -1},
        "error_type": {"type": "string", "pattern": "^[A-Z][A-Z_]*$"},
        "message": {"type": "string"},
    },
}


@pytest.mark.parametrize("row", [-1, 2, 1048576])
def test_error_record_lines_match_contract(row):
    line = ErrorRecord.create("PT.xlsx", "Transactions", row, "WORKBOOK_READ_ERROR", "boom").to_json_line()
    jsonschema.validate(json.loads(line), ERROR_LINE_SCHEMA)


def test_contract_rejects_row_below_sentinel():
    record = json.loads(ErrorRecord.create("PT.xlsx", "S", -2, "WORKBOOK_READ_ERROR", "x").to_json_line())
    with pytest.raises(ValidationError):
        jsonschema.validate(record, ERROR_LINE_SCHEMA)


def test_json_line_is_single_line():
    line = ErrorRecord.create("PT.xlsx", "S", -1, "SHEET_HEADER_ERROR", "multi\nline\nmessage").to_json_line()
    assert "\n" not in line
    assert json.loads(line)["message"] == "multi\nline\nmessage"
