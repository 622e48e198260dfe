from __future__ import annotations

import math
import numbers
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any

import pandas as pd
from dateutil import parser as dateparser

from ..models.cell import Cell, CellKind

"""Spreadsheet date resolution.

Workbooks encode dates either as serial day counts relative to 1899-12-30
(the epoch that absorbs the 1900 leap-year bug) or as free-form text. Both
shapes resolve to a naive ``datetime`` or ``None``; nothing here raises.

Serial path:
    EPSILON < value <= MAX_SERIAL, fractional part is the time of day.
Text path:
    numeric strings in [SERIAL_TEXT_MIN, MAX_SERIAL] use the serial path,
    then ISO parsing, then a free-form dateutil parse with a fixed default
    so that partial dates ("Mar 2024") do not depend on today's date.

Every result must fall in [MIN_YEAR, MAX_YEAR]; anything else is treated as a
mis-typed number and rejected.
"""

__all__ = [
    "EXCEL_EPOCH",
    "MAX_SERIAL",
    "resolve_date",
    "from_serial",
    "to_serial",
]

EXCEL_EPOCH = datetime(1899, 12, 30)
EPSILON = 1e-9
SERIAL_TEXT_MIN = 1.0
MAX_SERIAL = 60000.0  # 2064-04-08
MIN_YEAR = 1900
MAX_YEAR = 2200

# 部分日付の補完用 (実行日に依存させない)
_PARSE_DEFAULT = datetime(1900, 1, 1)


def resolve_date(raw_value: Any) -> datetime | None:
    """Resolve a raw cell value (or Cell) to a calendar datetime.

    >>> resolve_date(45292)
    datetime.datetime(2024, 1, 1, 0, 0)
    >>> resolve_date("2024-03-15")
    datetime.datetime(2024, 3, 15, 0, 0)
    >>> resolve_date("N/A") is None
    True
    """
    if isinstance(raw_value, Cell):
        return _resolve_cell(raw_value)
    if raw_value is None or raw_value is pd.NaT or isinstance(raw_value, bool):
        return None
    if isinstance(raw_value, datetime):
        return _guard(raw_value.replace(tzinfo=None))
    if isinstance(raw_value, date):
        return _guard(datetime(raw_value.year, raw_value.month, raw_value.day))
    if isinstance(raw_value, (numbers.Real, Decimal)):
        try:
            return from_serial(float(raw_value))
        except (TypeError, ValueError, OverflowError):
            return None
    if isinstance(raw_value, str):
        return _from_text(raw_value)
    return None


def from_serial(serial: float) -> datetime | None:
    """Convert a serial day count to a datetime, or None when implausible."""
    if not math.isfinite(serial) or serial <= EPSILON or serial > MAX_SERIAL:
        return None
    return _guard(EXCEL_EPOCH + timedelta(days=serial))


def to_serial(value: datetime | date) -> float:
    """Encode a datetime (or date) back to a serial day count."""
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    return (value.replace(tzinfo=None) - EXCEL_EPOCH) / timedelta(days=1)


def _resolve_cell(cell: Cell) -> datetime | None:
    if cell.kind is CellKind.NUMBER:
        return resolve_date(cell.value)
    if cell.kind in (CellKind.TEXT, CellKind.DATETIME_TEXT):
        return _from_text(cell.value) if isinstance(cell.value, str) else None
    # BOOLEAN / EMPTY
    return None


def _from_text(text: str) -> datetime | None:
    s = text.strip()
    if not s:
        return None
    number = _as_number(s)
    if number is not None:
        if SERIAL_TEXT_MIN <= number <= MAX_SERIAL:
            resolved = from_serial(number)
            if resolved is not None:
                return resolved
        # 数値文字列はカレンダー表記として扱わない
        return None
    try:
        return _guard(datetime.fromisoformat(s).replace(tzinfo=None))
    except ValueError:
        pass
    try:
        parsed = dateparser.parse(s, default=_PARSE_DEFAULT)
    except (dateparser.ParserError, ValueError, OverflowError, TypeError):
        return None
    return _guard(parsed.replace(tzinfo=None))


def _as_number(s: str) -> float | None:
    try:
        number = float(s)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _guard(value: datetime) -> datetime | None:
    if value.year < MIN_YEAR or value.year > MAX_YEAR:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    return value
