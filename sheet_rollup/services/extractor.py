from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from ..excel.normalize import normalize
from ..models.cell import Cell
from ..models.column_map import ColumnMap
from ..models.record import Record
from ..models.sheet import Sheet

"""Row extraction: row of cells + ColumnMap -> Record.

Only the fields named in the column map are produced. An index past the end
of a short row reads as an empty cell. The input row is never modified.
"""

__all__ = [
    "extract",
    "extract_all",
]


def extract(row: Sequence[Any], column_map: ColumnMap, row_number: int | None = None) -> Record:
    values = {}
    size = len(row)
    for field_name, spec in column_map.fields.items():
        cell = row[spec.index] if spec.index < size else Cell.empty()
        values[field_name] = normalize(cell, spec.kind)
    return Record(values=values, row_number=row_number)


def extract_all(source: Sheet | Iterable[Sequence[Any]], column_map: ColumnMap) -> list[Record]:
    """Extract every row of a Sheet (numbered) or of a plain row iterable."""
    if isinstance(source, Sheet):
        return [extract(row, column_map, row_number=n) for n, row in source.numbered_rows()]
    return [extract(row, column_map) for row in source]
