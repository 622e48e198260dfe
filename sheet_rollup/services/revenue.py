from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

from ..excel.normalize import parse_number
from ..models.filter_predicate import FilterPredicate
from ..models.period_bucket import PeriodBucket
from ..models.record import Record
from .aggregator import Granularity, PeriodKeyFn, aggregate
from .filters import apply_filters, as_text

"""Revenue type classification (T&E / Fixed / Other).

Transaction logs carry no explicit revenue type, and two heuristics exist in
the wild: activity-description keywords and activity-sequence number ranges.
They can disagree on the same row, so classification is a strategy:

- ``KeywordRevenueClassifier``: description keywords.
- ``ActivitySeqClassifier``: 100000-199999 -> T&E, 200000-299999 -> Fixed.
- ``ChainedClassifier``: first strategy that returns a type wins.

``DEFAULT_CLASSIFIER`` chains the sequence range first and keywords second,
i.e. the sequence range is authoritative whenever it applies.
"""

__all__ = [
    "ActivitySeqClassifier",
    "ChainedClassifier",
    "DEFAULT_CLASSIFIER",
    "FIXED",
    "KeywordRevenueClassifier",
    "OTHER",
    "REVENUE_TYPES",
    "RevenueClassifier",
    "TIME_AND_EXPENSE",
    "classify",
    "revenue_by_type",
    "tag_revenue_type",
]

TIME_AND_EXPENSE = "T&E"
FIXED = "Fixed"
OTHER = "Other"
REVENUE_TYPES = (TIME_AND_EXPENSE, FIXED, OTHER)
REVENUE_TYPE_FIELD = "revenueType"


class RevenueClassifier(Protocol):
    def __call__(self, record: Record) -> str | None:
        """Return a revenue type, or None when the rule does not apply."""
        ...


class KeywordRevenueClassifier:
    T_AND_E_KEYWORDS = ("t&e", "time", "expense", "hourly", "consulting")
    FIXED_KEYWORDS = ("fixed", "milestone", "deliverable", "product")

    def __init__(self, description_field: str = "activityDescription") -> None:
        self.description_field = description_field

    def __call__(self, record: Record) -> str | None:
        desc = as_text(record.get(self.description_field)).lower()
        if not desc:
            return None
        if any(k in desc for k in self.T_AND_E_KEYWORDS):
            return TIME_AND_EXPENSE
        if any(k in desc for k in self.FIXED_KEYWORDS):
            return FIXED
        return None


class ActivitySeqClassifier:
    def __init__(
        self,
        seq_field: str = "activitySeq",
        t_and_e_range: tuple[int, int] = (100000, 200000),
        fixed_range: tuple[int, int] = (200000, 300000),
    ) -> None:
        self.seq_field = seq_field
        self.t_and_e_range = t_and_e_range
        self.fixed_range = fixed_range

    def __call__(self, record: Record) -> str | None:
        seq = parse_number(as_text(record.get(self.seq_field)))
        if seq is None:
            return None
        if self.t_and_e_range[0] <= seq < self.t_and_e_range[1]:
            return TIME_AND_EXPENSE
        if self.fixed_range[0] <= seq < self.fixed_range[1]:
            return FIXED
        return None


class ChainedClassifier:
    def __init__(self, *strategies: RevenueClassifier) -> None:
        self.strategies = strategies

    def __call__(self, record: Record) -> str | None:
        for strategy in self.strategies:
            result = strategy(record)
            if result is not None:
                return result
        return None


DEFAULT_CLASSIFIER: RevenueClassifier = ChainedClassifier(ActivitySeqClassifier(), KeywordRevenueClassifier())


def classify(record: Record, classifier: RevenueClassifier = DEFAULT_CLASSIFIER) -> str:
    return classifier(record) or OTHER


def tag_revenue_type(records: Iterable[Record], classifier: RevenueClassifier = DEFAULT_CLASSIFIER) -> list[Record]:
    """Return new records carrying a ``revenueType`` field."""
    return [r.with_values(**{REVENUE_TYPE_FIELD: classify(r, classifier)}) for r in records]


def revenue_by_type(
    records: Iterable[Record],
    period: Granularity | str | PeriodKeyFn = Granularity.MONTH,
    measures: Sequence[str] = ("revenue", "cost", "hours"),
    classifier: RevenueClassifier = DEFAULT_CLASSIFIER,
    date_field: str = "date",
) -> dict[str, list[PeriodBucket]]:
    """Period series per revenue type (every type present, possibly empty)."""
    tagged = tag_revenue_type(records, classifier)
    return {
        rtype: aggregate(
            apply_filters(tagged, [FilterPredicate.equals(REVENUE_TYPE_FIELD, rtype)]),
            period,
            measures,
            date_field=date_field,
        )
        for rtype in REVENUE_TYPES
    }
