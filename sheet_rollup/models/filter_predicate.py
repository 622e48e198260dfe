from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

"""FilterPredicate model (field / comparison kind / value)."""

__all__ = [
    "FilterPredicate",
    "MatchKind",
]


class MatchKind(Enum):
    EQUALS = "equals"  # case-sensitive exact
    CONTAINS = "contains"  # case-insensitive substring


@dataclass(frozen=True)
class FilterPredicate:
    field: str
    op: MatchKind
    value: Any

    @staticmethod
    def equals(field: str, value: Any) -> FilterPredicate:
        return FilterPredicate(field, MatchKind.EQUALS, value)

    @staticmethod
    def contains(field: str, value: Any) -> FilterPredicate:
        return FilterPredicate(field, MatchKind.CONTAINS, value)

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> FilterPredicate:
        """Build from config shape ``{field: projectId, op: equals, value: P100}``."""
        op = MatchKind(str(raw.get("op", "equals")).strip().lower())
        return FilterPredicate(field=str(raw["field"]), op=op, value=raw.get("value"))
