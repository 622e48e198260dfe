from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from ..excel.dates import resolve_date
from ..models.period_bucket import UNKNOWN_PERIOD, BucketAccumulator, PeriodBucket
from ..models.record import Record
from .filters import as_text

"""Period aggregation.

Folds Records into buckets keyed by a period label derived from each record's
date field, summing numeric measures and collecting distinct values, then
finalizes the buckets into a chronologically ordered list.

Every call is a pure fold: no state survives between calls. Partial results
from independent record partitions can be combined with ``merge_partials``
(sum measures, union distinct sets, keep the earliest start), which is
associative and commutative so the partition scheme never changes the output.
"""

__all__ = [
    "Granularity",
    "PeriodKeyFn",
    "aggregate",
    "aggregate_partitions",
    "fold",
    "finalize",
    "group_by",
    "merge_partials",
    "period_label",
]

PeriodKeyFn = Callable[[datetime], str]


class Granularity(Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @classmethod
    def parse(cls, raw: str | Granularity) -> Granularity:
        if isinstance(raw, Granularity):
            return raw
        return cls(str(raw).strip().lower())


def period_label(when: datetime, granularity: Granularity) -> str:
    """Label for the period containing ``when``.

    DAY -> ``YYYY-MM-DD``; WEEK -> ISO week start (Monday) ``YYYY-MM-DD``;
    MONTH -> ``YYYY-MM``.
    """
    if granularity is Granularity.DAY:
        return when.strftime("%Y-%m-%d")
    if granularity is Granularity.WEEK:
        monday = when - timedelta(days=when.weekday())
        return monday.strftime("%Y-%m-%d")
    return when.strftime("%Y-%m")


def _key_fn(period: Granularity | str | PeriodKeyFn) -> PeriodKeyFn:
    if callable(period) and not isinstance(period, Granularity):
        return period
    granularity = Granularity.parse(period)  # type: ignore[arg-type]
    return lambda when: period_label(when, granularity)


def fold(
    records: Iterable[Record],
    key: Callable[[Record], tuple[str | None, datetime | None]],
    measures: Sequence[str],
    distinct: Sequence[str] = (),
) -> dict[str, BucketAccumulator]:
    """Fold records into accumulators; ``key`` returns (label, date)."""
    measures = tuple(measures)
    distinct = tuple(distinct)
    buckets: dict[str, BucketAccumulator] = {}
    for record in records:
        label, when = key(record)
        if not label:
            label = UNKNOWN_PERIOD
        acc = buckets.get(label)
        if acc is None:
            acc = buckets[label] = BucketAccumulator(label, measures, distinct)
        acc.add(
            {m: _measure_value(record.get(m)) for m in measures},
            {f: _distinct_value(record.get(f)) for f in distinct},
            when,
        )
    return buckets


def finalize(buckets: Mapping[str, BucketAccumulator]) -> list[PeriodBucket]:
    """Finalize accumulators; chronological by earliest date, Unknown last."""
    finalized = [acc.finalize() for acc in buckets.values()]
    return sorted(finalized, key=_order_key)


def aggregate(
    records: Iterable[Record],
    period: Granularity | str | PeriodKeyFn,
    measures: Sequence[str],
    distinct: Sequence[str] = (),
    date_field: str = "date",
) -> list[PeriodBucket]:
    """Aggregate records into period buckets.

    ``period`` is a Granularity (or its name) or a callable mapping a
    datetime to a label. Records whose date field does not resolve fall into
    the ``"Unknown"`` bucket so every input record is counted exactly once.
    """
    return finalize(_fold_by_period(records, period, measures, distinct, date_field))


def aggregate_partitions(
    partitions: Iterable[Iterable[Record]],
    period: Granularity | str | PeriodKeyFn,
    measures: Sequence[str],
    distinct: Sequence[str] = (),
    date_field: str = "date",
) -> list[PeriodBucket]:
    """Aggregate each partition independently, then merge the partials."""
    partials = [_fold_by_period(p, period, measures, distinct, date_field) for p in partitions]
    return finalize(merge_partials(partials))


def merge_partials(partials: Iterable[Mapping[str, BucketAccumulator]]) -> dict[str, BucketAccumulator]:
    merged: dict[str, BucketAccumulator] = {}
    for partial in partials:
        for label, acc in partial.items():
            existing = merged.get(label)
            merged[label] = acc.merge(_empty_like(acc)) if existing is None else existing.merge(acc)
    return merged


def group_by(
    records: Iterable[Record],
    key_field: str,
    measures: Sequence[str],
    distinct: Sequence[str] = (),
) -> dict[str, PeriodBucket]:
    """Fold records by the string form of an arbitrary field.

    Keys are ordered alphabetically; records with an empty key are grouped
    under ``"Unknown"``, which always comes last.
    """
    buckets = fold(
        records,
        lambda r: (as_text(r.get(key_field)).strip() or None, None),
        measures,
        distinct,
    )
    return {label: buckets[label].finalize() for label in sorted(buckets, key=_label_order_key)}


def _fold_by_period(
    records: Iterable[Record],
    period: Granularity | str | PeriodKeyFn,
    measures: Sequence[str],
    distinct: Sequence[str],
    date_field: str,
) -> dict[str, BucketAccumulator]:
    key_fn = _key_fn(period)

    def key(record: Record) -> tuple[str | None, datetime | None]:
        when = resolve_date(record.get(date_field))
        if when is None:
            return None, None
        return key_fn(when), when

    return fold(records, key, measures, distinct)


def _empty_like(acc: BucketAccumulator) -> BucketAccumulator:
    return BucketAccumulator(acc.period, acc.measures, acc.distinct_fields)


def _measure_value(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    number = float(value)
    return number if math.isfinite(number) else 0.0


def _distinct_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value
    if isinstance(value, float):
        return as_text(value)
    return value


def _order_key(bucket: PeriodBucket) -> tuple[int, datetime, str]:
    if bucket.period == UNKNOWN_PERIOD or bucket.start is None:
        return (1, datetime.max, bucket.period)
    return (0, bucket.start, bucket.period)


def _label_order_key(label: str) -> tuple[bool, str]:
    return (label == UNKNOWN_PERIOD, label)
