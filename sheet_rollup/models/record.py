from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Union

"""Record model: the normalized representation of one sheet row.

A Record maps logical field names to canonical values
(``str | float | datetime | None``). Fields that are not part of the column
map used for extraction are simply absent.
"""

__all__ = [
    "CanonicalValue",
    "Record",
]

CanonicalValue = Union[str, float, datetime, None]


@dataclass(frozen=True)
class Record:
    """Immutable extracted row.

    ``values`` is stored as a read-only mapping; ``row_number`` is the
    1-based spreadsheet row the record came from (None for synthetic records).
    """
    values: Mapping[str, CanonicalValue] = field(default_factory=dict)
    row_number: int | None = None

    def __post_init__(self) -> None:
        # 呼び出し元の dict を共有しない
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @staticmethod
    def of(row_number: int | None = None, **values: CanonicalValue) -> Record:
        return Record(values=values, row_number=row_number)

    def get(self, field_name: str, default: Any = None) -> Any:
        return self.values.get(field_name, default)

    def __contains__(self, field_name: object) -> bool:
        return field_name in self.values

    def with_values(self, **extra: CanonicalValue) -> Record:
        """Return a new Record with ``extra`` fields added or replaced."""
        merged = dict(self.values)
        merged.update(extra)
        return Record(values=merged, row_number=self.row_number)
