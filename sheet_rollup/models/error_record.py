from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from enum import Enum

"""ErrorRecord model for the JSON Lines error log.

Row -1 marks workbook-level failures (unreadable file, missing sheet) and
report failures, where no specific row applies.
"""

__all__ = [
    "FILE_LEVEL_SHEET",
    "ErrorRecord",
    "ErrorType",
]

FILE_LEVEL_SHEET = "<FILE_LEVEL>"


class ErrorType(str, Enum):
    WORKBOOK_READ_ERROR = "WORKBOOK_READ_ERROR"
    SHEET_HEADER_ERROR = "SHEET_HEADER_ERROR"
    REPORT_ERROR = "REPORT_ERROR"


@dataclass(frozen=True)
class ErrorRecord:
    """One line of the error log.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: workbook file name
        sheet: sheet name (``<FILE_LEVEL>`` when not sheet specific)
        row: 1-based row number, -1 when unknown
        error_type: ErrorType value (UPPER_SNAKE_CASE)
        message: error description
    """
    timestamp: str
    file: str
    sheet: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(file: str, sheet: str | None, row: int, error_type: ErrorType | str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        if isinstance(error_type, ErrorType):
            error_type = error_type.value
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet or FILE_LEVEL_SHEET,
            row=row,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def for_report(report: str, file: str, sheet: str | None, message: str) -> ErrorRecord:
        """File-level record for a report that could not run."""
        return ErrorRecord.create(file, sheet, -1, ErrorType.REPORT_ERROR, f"report '{report}': {message}")

    def to_json_line(self) -> str:
        # 追加キー阻止: asdict のキーのみ出力
        return json.dumps(asdict(self), ensure_ascii=False)
