from __future__ import annotations

import math
from typing import Any

from ..models.cell import Cell, CellKind, ValueKind
from ..models.record import CanonicalValue
from .dates import resolve_date

"""Cell normalization: Cell + expected kind -> canonical value.

Empty sentinels: ``""`` for TEXT, ``None`` for NUMBER and DATE. The
function is total over the Cell domain; raw non-Cell values are classified
with ``Cell.from_raw`` first so malformed inputs are normalized as well.
"""

__all__ = [
    "normalize",
    "format_number",
    "parse_number",
]


def normalize(cell: Any, kind: ValueKind = ValueKind.TEXT) -> CanonicalValue:
    if not isinstance(cell, Cell):
        cell = Cell.from_raw(cell)
    if kind is ValueKind.NUMBER:
        return _to_number(cell)
    if kind is ValueKind.DATE:
        return resolve_date(cell)
    return _to_text(cell)


def format_number(value: float) -> str:
    """Render a number the way a spreadsheet shows an integral value.

    >>> format_number(1001.0), format_number(2.5)
    ('1001', '2.5')
    """
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return str(value)


def parse_number(text: str) -> float | None:
    """Parse a numeric string, tolerating whitespace and thousands separators."""
    s = text.strip().replace(",", "")
    if not s:
        return None
    try:
        number = float(s)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _to_text(cell: Cell) -> str:
    if cell.kind in (CellKind.TEXT, CellKind.DATETIME_TEXT):
        # str 以外のペイロードは空扱い
        return cell.value.strip() if isinstance(cell.value, str) else ""
    if cell.kind is CellKind.NUMBER:
        number = _as_float(cell.value)
        return "" if number is None else format_number(number)
    if cell.kind is CellKind.BOOLEAN and isinstance(cell.value, bool):
        return "true" if cell.value else "false"
    return ""


def _to_number(cell: Cell) -> float | None:
    if cell.kind is CellKind.NUMBER:
        return _as_float(cell.value)
    if cell.kind is CellKind.TEXT:
        return parse_number(cell.value) if isinstance(cell.value, str) else None
    if cell.kind is CellKind.BOOLEAN and isinstance(cell.value, bool):
        return 1.0 if cell.value else 0.0
    # DATETIME_TEXT / EMPTY / malformed payloads
    return None


def _as_float(value: Any) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None
