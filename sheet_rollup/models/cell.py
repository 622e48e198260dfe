from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd

"""Cell tagged union for raw spreadsheet values.

A Cell carries exactly one populated variant. Readers and callers build cells
with ``Cell.from_raw`` which classifies any Python / pandas / numpy value, and
also the legacy dict shapes (``{"Text": ...}``, ``{"Number": ...}``,
``{"DateTime": ...}``, ``{"Bool": ...}``) emitted by older workbook bridges.
Values that cannot be classified become EMPTY.
"""

__all__ = [
    "Cell",
    "CellKind",
    "ValueKind",
]


class CellKind(Enum):
    """Populated variant of a Cell."""
    TEXT = "text"
    NUMBER = "number"
    DATETIME_TEXT = "datetime_text"
    BOOLEAN = "boolean"
    EMPTY = "empty"


class ValueKind(Enum):
    """Expected canonical kind of an extracted field."""
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"

    @classmethod
    def parse(cls, raw: str | ValueKind) -> ValueKind:
        if isinstance(raw, ValueKind):
            return raw
        return cls(str(raw).strip().lower())


# Legacy dict tags, checked in this order
_LEGACY_TAGS = (
    ("Text", CellKind.TEXT),
    ("Number", CellKind.NUMBER),
    ("DateTime", CellKind.DATETIME_TEXT),
    ("Bool", CellKind.BOOLEAN),
)


@dataclass(frozen=True)
class Cell:
    """One spreadsheet grid value.

    ``value`` is ``str`` for TEXT / DATETIME_TEXT, ``float`` for NUMBER,
    ``bool`` for BOOLEAN and ``None`` for EMPTY.
    """
    kind: CellKind
    value: str | float | bool | None = None

    @staticmethod
    def text(value: str) -> Cell:
        return Cell(CellKind.TEXT, value)

    @staticmethod
    def number(value: float) -> Cell:
        return Cell(CellKind.NUMBER, float(value))

    @staticmethod
    def datetime_text(value: str) -> Cell:
        return Cell(CellKind.DATETIME_TEXT, value)

    @staticmethod
    def boolean(value: bool) -> Cell:
        return Cell(CellKind.BOOLEAN, bool(value))

    @staticmethod
    def empty() -> Cell:
        return _EMPTY

    @property
    def is_empty(self) -> bool:
        return self.kind is CellKind.EMPTY

    @staticmethod
    def from_raw(value: Any) -> Cell:
        """Classify an arbitrary value into a Cell. Never raises."""
        if isinstance(value, Cell):
            return value
        if isinstance(value, np.datetime64):
            value = pd.Timestamp(value)
        if value is None or value is pd.NaT:
            return _EMPTY
        # bool is a subclass of int; check it first
        if isinstance(value, (bool, np.bool_)):
            return Cell.boolean(bool(value))
        if isinstance(value, (numbers.Real, Decimal)):
            try:
                number = float(value)
            except (TypeError, ValueError, OverflowError):
                return _EMPTY
            if math.isnan(number):
                return _EMPTY
            return Cell.number(number)
        if isinstance(value, (datetime, date)):
            return Cell.datetime_text(value.isoformat())
        if isinstance(value, str):
            if value.strip() == "":
                return _EMPTY
            return Cell.text(value)
        if isinstance(value, dict):
            return _from_legacy_dict(value)
        return _EMPTY


_EMPTY = Cell(CellKind.EMPTY, None)


def _from_legacy_dict(raw: dict[Any, Any]) -> Cell:
    for tag, kind in _LEGACY_TAGS:
        if tag not in raw or raw[tag] is None:
            continue
        payload = raw[tag]
        if kind is CellKind.TEXT and isinstance(payload, str):
            return Cell.from_raw(payload)
        if kind is CellKind.NUMBER and isinstance(payload, numbers.Real) and not isinstance(payload, bool):
            return Cell.from_raw(payload)
        if kind is CellKind.DATETIME_TEXT and isinstance(payload, str) and payload.strip():
            return Cell.datetime_text(payload)
        if kind is CellKind.BOOLEAN and isinstance(payload, bool):
            return Cell.boolean(payload)
    return _EMPTY
