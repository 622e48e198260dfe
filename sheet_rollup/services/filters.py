from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from typing import Any

from ..excel.normalize import format_number
from ..models.filter_predicate import FilterPredicate, MatchKind
from ..models.record import Record

"""Filter engine: conjunction of equals / contains predicates over Records."""

__all__ = [
    "apply_filters",
    "as_text",
    "build_predicates",
    "matches",
]


def as_text(value: Any) -> str:
    """String form used for comparisons.

    Absent / None -> "", integral numbers drop ".0", datetimes compare as
    ISO dates (time kept only when it is not midnight).
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, datetime):
        if value.hour == value.minute == value.second == value.microsecond == 0:
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def matches(record: Record, predicates: Sequence[FilterPredicate]) -> bool:
    for predicate in predicates:
        if not _match_one(record, predicate):
            return False
    return True


def apply_filters(records: Iterable[Record], predicates: Sequence[FilterPredicate]) -> list[Record]:
    if not predicates:
        return list(records)
    return [r for r in records if matches(r, predicates)]


def build_predicates(raw: Iterable[Mapping[str, Any]] | None) -> list[FilterPredicate]:
    return [FilterPredicate.from_dict(item) for item in (raw or [])]


def _match_one(record: Record, predicate: FilterPredicate) -> bool:
    actual = as_text(record.get(predicate.field))
    expected = as_text(predicate.value)
    if predicate.op is MatchKind.EQUALS:
        return actual == expected
    return expected.lower() in actual.lower()
