from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from .cell import Cell

"""Sheet model: one worksheet after header detection.

``rows`` hold only the data rows below the header row. ``row_numbers``
carries the 1-based spreadsheet row of each data row (blank rows are dropped
by the reader, so numbering is not always contiguous). When it is not given,
rows are numbered from 2 as if the header sat on row 1.
"""

__all__ = [
    "Sheet",
]


@dataclass(frozen=True)
class Sheet:
    """Worksheet contents: name, header strings and rows of cells.

    Rows may be shorter than ``headers``; missing trailing cells read as EMPTY.
    """
    name: str
    headers: list[str]
    rows: list[list[Cell]] = field(default_factory=list)
    row_numbers: list[int] = field(default_factory=list)

    def cell(self, row_index: int, column_index: int) -> Cell:
        row = self.rows[row_index]
        if 0 <= column_index < len(row):
            return row[column_index]
        return Cell.empty()

    def numbered_rows(self) -> Iterator[tuple[int, Sequence[Cell]]]:
        if len(self.row_numbers) == len(self.rows):
            yield from zip(self.row_numbers, self.rows)
            return
        for offset, row in enumerate(self.rows):
            yield offset + 2, row

    def __len__(self) -> int:
        return len(self.rows)
