from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .cell import ValueKind

"""ColumnMap: logical field name -> column position for one sheet layout.

Column positions are zero-based. Config files may give either an integer
index or a spreadsheet column letter ("A", "S", "AH"); ``column_index``
converts letters.
"""

__all__ = [
    "ColumnMap",
    "ColumnMapError",
    "ColumnSpec",
    "column_index",
]

_LETTERS_RE = re.compile(r"^[A-Z]{1,3}$")


class ColumnMapError(Exception):
    """Raised when a column reference in a layout definition is invalid."""


def column_index(ref: int | str) -> int:
    """Convert a column reference to a zero-based index.

    >>> column_index("A"), column_index("S"), column_index("AH"), column_index(4)
    (0, 18, 33, 4)
    """
    if isinstance(ref, bool):
        raise ColumnMapError(f"invalid column reference: {ref!r}")
    if isinstance(ref, int):
        if ref < 0:
            raise ColumnMapError(f"column index must be >= 0: {ref}")
        return ref
    text = str(ref).strip().upper()
    if text.isdigit():
        return int(text)
    if not _LETTERS_RE.match(text):
        raise ColumnMapError(f"invalid column reference: {ref!r}")
    index = 0
    for ch in text:
        index = index * 26 + (ord(ch) - ord("A") + 1)
    return index - 1


@dataclass(frozen=True)
class ColumnSpec:
    index: int
    kind: ValueKind = ValueKind.TEXT


@dataclass(frozen=True)
class ColumnMap:
    """Immutable field -> ColumnSpec mapping for one sheet layout."""
    name: str
    fields: Mapping[str, ColumnSpec] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @staticmethod
    def from_dict(name: str, columns: Mapping[str, Any]) -> ColumnMap:
        """Build from config shape ``{field: {column: "C", kind: "date"}}``.

        A bare column reference (``{field: "C"}``) is read as a text field.
        """
        specs: dict[str, ColumnSpec] = {}
        for field_name, raw in columns.items():
            if isinstance(raw, Mapping):
                if "column" not in raw:
                    raise ColumnMapError(f"layout '{name}': field '{field_name}' lacks 'column'")
                ref = raw["column"]
                try:
                    kind = ValueKind.parse(raw.get("kind", "text"))
                except ValueError as e:
                    raise ColumnMapError(f"layout '{name}': field '{field_name}' has unknown kind: {e}") from e
            else:
                ref, kind = raw, ValueKind.TEXT
            specs[str(field_name)] = ColumnSpec(index=column_index(ref), kind=kind)
        return ColumnMap(name=name, fields=specs)

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, field_name: object) -> bool:
        return field_name in self.fields
