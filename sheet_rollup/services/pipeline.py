from __future__ import annotations

from collections.abc import Iterable

from ..excel.dates import resolve_date
from ..models.period_bucket import PeriodBucket
from ..models.record import Record
from .aggregator import Granularity, PeriodKeyFn, aggregate, group_by
from .filters import as_text

"""Sales pipeline rollup (Program Management "Pipeline" sheet).

Pipeline rows carry two estimate columns (GBP and AUD) and a weighted value.
``prepare_pipeline`` derives:

- ``estValue``: the GBP estimate, or the AUD estimate when GBP is 0 / missing
- ``probability``: ``weightedValue / estValue`` capped at 1 (0 without an estimate)

and drops rows without customer or project name, or with neither a usable
date nor a positive estimate. The prepared records then go through the
ordinary period aggregation.
"""

__all__ = [
    "PIPELINE_MEASURES",
    "pipeline_by_period",
    "pipeline_by_stage",
    "prepare_pipeline",
    "win_probability",
]

PIPELINE_MEASURES = ("estValue", "weightedValue")


def win_probability(weighted: float, estimate: float) -> float:
    """Weighted / estimate capped at 1.0; 0.0 when there is no positive estimate.

    >>> win_probability(50.0, 200.0), win_probability(300.0, 200.0), win_probability(5.0, 0.0)
    (0.25, 1.0, 0.0)
    """
    if estimate <= 0:
        return 0.0
    return min(weighted / estimate, 1.0)


def prepare_pipeline(records: Iterable[Record], date_field: str = "date") -> list[Record]:
    """Filter pipeline rows and add ``estValue`` / ``probability``.

    Args:
        records: records extracted with the ``pipeline`` layout
        date_field: field holding the expected close date

    Returns:
        New records (input records are not modified)
    """
    prepared: list[Record] = []
    for record in records:
        if not as_text(record.get("customer")) or not as_text(record.get("projectName")):
            continue
        gbp = _num(record.get("estValueGBP"))
        aud = _num(record.get("estValueAUD"))
        when = resolve_date(record.get(date_field))
        if when is None and gbp <= 0 and aud <= 0:
            continue
        estimate = gbp or aud
        weighted = _num(record.get("weightedValue"))
        prepared.append(record.with_values(
            estValue=estimate,
            weightedValue=weighted,
            probability=win_probability(weighted, estimate),
        ))
    return prepared


def pipeline_by_period(
    records: Iterable[Record],
    period: Granularity | str | PeriodKeyFn = Granularity.MONTH,
    date_field: str = "date",
) -> list[PeriodBucket]:
    """Estimated and weighted value per period; undated rows land in Unknown."""
    return aggregate(
        prepare_pipeline(records, date_field),
        period,
        PIPELINE_MEASURES,
        distinct=("customer",),
        date_field=date_field,
    )


def pipeline_by_stage(records: Iterable[Record], date_field: str = "date") -> dict[str, PeriodBucket]:
    return group_by(prepare_pipeline(records, date_field), "stage", PIPELINE_MEASURES, distinct=("customer",))


def _num(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)
