from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any

"""Period bucket models for aggregation results.

``BucketAccumulator`` is the mutable running state for one period while
records are folded in. ``finalize()`` turns it into a frozen ``PeriodBucket``
(averages and distinct-value cardinalities computed once); the accumulator is
discarded afterwards.
"""

__all__ = [
    "UNKNOWN_PERIOD",
    "BucketAccumulator",
    "PeriodBucket",
]

UNKNOWN_PERIOD = "Unknown"


@dataclass(frozen=True)
class PeriodBucket:
    """Finalized aggregation result for one period label."""
    period: str
    start: datetime | None  # earliest date folded in (None for Unknown)
    entries: int
    sums: Mapping[str, float]
    averages: Mapping[str, float]  # sum / entries (0 when entries == 0)
    distinct: Mapping[str, frozenset[Any]]
    counts: Mapping[str, int]  # len(distinct[field])

    def total(self, measure: str) -> float:
        return self.sums.get(measure, 0.0)

    def count(self, field_name: str) -> int:
        return self.counts.get(field_name, 0)

    def to_dict(self) -> dict[str, Any]:
        """Plain dict for JSON output (distinct sets are reported as counts)."""
        out: dict[str, Any] = {"period": self.period, "entries": self.entries}
        out.update({k: v for k, v in self.sums.items()})
        out.update({f"avg_{k}": v for k, v in self.averages.items()})
        out.update({f"{k}_count": v for k, v in self.counts.items()})
        return out


@dataclass
class BucketAccumulator:
    period: str
    measures: tuple[str, ...]
    distinct_fields: tuple[str, ...]
    start: datetime | None = None
    entries: int = 0
    sums: dict[str, float] = field(default_factory=dict)
    distinct: dict[str, set[Any]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for m in self.measures:
            self.sums.setdefault(m, 0.0)
        for f in self.distinct_fields:
            self.distinct.setdefault(f, set())

    def add(self, values: Mapping[str, float], distinct: Mapping[str, Any], when: datetime | None) -> None:
        self.entries += 1
        for m in self.measures:
            self.sums[m] += values.get(m, 0.0)
        for f in self.distinct_fields:
            v = distinct.get(f)
            if v is None or v == "":
                continue
            self.distinct[f].add(v)
        if when is not None and (self.start is None or when < self.start):
            self.start = when

    def merge(self, other: BucketAccumulator) -> BucketAccumulator:
        """Combine two accumulators for the same period into a new one."""
        if other.period != self.period:
            raise ValueError(f"cannot merge buckets '{self.period}' and '{other.period}'")
        measures = _ordered_union(self.measures, other.measures)
        fields = _ordered_union(self.distinct_fields, other.distinct_fields)
        merged = BucketAccumulator(self.period, measures, fields)
        merged.entries = self.entries + other.entries
        for m in measures:
            merged.sums[m] = self.sums.get(m, 0.0) + other.sums.get(m, 0.0)
        for f in fields:
            merged.distinct[f] = set(self.distinct.get(f, ())) | set(other.distinct.get(f, ()))
        starts = [s for s in (self.start, other.start) if s is not None]
        merged.start = min(starts) if starts else None
        return merged

    def finalize(self) -> PeriodBucket:
        averages = {
            m: (self.sums[m] / self.entries if self.entries else 0.0)
            for m in self.measures
        }
        distinct = {f: frozenset(vals) for f, vals in self.distinct.items()}
        return PeriodBucket(
            period=self.period,
            start=self.start,
            entries=self.entries,
            sums=MappingProxyType(dict(self.sums)),
            averages=MappingProxyType(averages),
            distinct=MappingProxyType(distinct),
            counts=MappingProxyType({f: len(v) for f, v in distinct.items()}),
        )


def _ordered_union(a: Iterable[str], b: Iterable[str]) -> tuple[str, ...]:
    out = list(a)
    for item in b:
        if item not in out:
            out.append(item)
    return tuple(out)
