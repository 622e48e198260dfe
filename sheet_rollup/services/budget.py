from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from ..excel.normalize import format_number, parse_number
from ..models.record import Record
from .aggregator import group_by
from .filters import as_text

"""Budget rollup: estimates vs actual transactions per activity sequence.

Estimate records (one per activity) carry ``budgetHours``, ``budgetCost`` and
``budgetRevenue``; transaction records carry ``hours``, ``cost`` and
``revenue``. Both are joined on ``activitySeq``. Activity sequences that are
empty, zero or non-positive are not budget lines.
"""

__all__ = [
    "AlertSeverity",
    "BudgetLine",
    "BudgetStatus",
    "budget_alerts",
    "budget_lines",
    "usage_percent",
]

ACTUAL_MEASURES = ("hours", "cost", "revenue")
_JOIN_FIELD = "_joinKey"
WARNING_PERCENT = 80.0
OVER_BUDGET_PERCENT = 100.0


class BudgetStatus(Enum):
    ON_TRACK = "on-track"
    WARNING = "warning"
    OVER_BUDGET = "over-budget"


class AlertSeverity(Enum):
    ATTENTION = "attention"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class BudgetLine:
    activity_seq: str
    project_id: str
    project_name: str
    activity_description: str
    budget_hours: float
    budget_cost: float
    budget_revenue: float
    actual_hours: float
    actual_cost: float
    actual_revenue: float
    entries: int  # contributing transactions

    @property
    def hours_used_percent(self) -> float:
        return usage_percent(self.actual_hours, self.budget_hours)

    @property
    def cost_used_percent(self) -> float:
        return usage_percent(self.actual_cost, self.budget_cost)

    @property
    def revenue_used_percent(self) -> float:
        return usage_percent(self.actual_revenue, self.budget_revenue)

    @property
    def remaining_budget(self) -> float:
        return self.budget_revenue - self.actual_revenue

    @property
    def cost_variance(self) -> float:
        return self.actual_cost - self.budget_cost

    @property
    def status(self) -> BudgetStatus:
        if self.revenue_used_percent > OVER_BUDGET_PERCENT or self.cost_used_percent > OVER_BUDGET_PERCENT:
            return BudgetStatus.OVER_BUDGET
        if self.revenue_used_percent > WARNING_PERCENT or self.cost_used_percent > WARNING_PERCENT:
            return BudgetStatus.WARNING
        return BudgetStatus.ON_TRACK

    @property
    def severity(self) -> AlertSeverity:
        worst = max(self.cost_used_percent, self.hours_used_percent)
        if worst >= 100.0:
            return AlertSeverity.CRITICAL
        if worst >= 90.0:
            return AlertSeverity.WARNING
        return AlertSeverity.ATTENTION


def usage_percent(actual: float, budget: float) -> float:
    """actual / budget * 100, defined as 0 when the budget is not positive."""
    if budget <= 0:
        return 0.0
    return actual / budget * 100.0


def budget_lines(
    estimates: Iterable[Record],
    actuals: Iterable[Record],
    key_field: str = "activitySeq",
    include_empty: bool = False,
) -> list[BudgetLine]:
    """Join estimates with actual totals grouped by ``key_field``.

    Lines with neither budgeted nor actual revenue are dropped unless
    ``include_empty`` is set.
    """
    # 結合キーは "100200" / "100200.00" / 100200.0 を同一視する
    keyed = [r.with_values(**{_JOIN_FIELD: _activity_key(r.get(key_field))}) for r in actuals]
    totals = group_by(keyed, _JOIN_FIELD, ACTUAL_MEASURES)
    lines: list[BudgetLine] = []
    for est in estimates:
        seq = _activity_key(est.get(key_field))
        if seq is None:
            continue
        actual = totals.get(seq)
        line = BudgetLine(
            activity_seq=seq,
            project_id=as_text(est.get("projectId")),
            project_name=as_text(est.get("projectName")),
            activity_description=as_text(est.get("activityDescription")),
            budget_hours=_num(est.get("budgetHours")),
            budget_cost=_num(est.get("budgetCost")),
            budget_revenue=_num(est.get("budgetRevenue")),
            actual_hours=actual.total("hours") if actual else 0.0,
            actual_cost=actual.total("cost") if actual else 0.0,
            actual_revenue=actual.total("revenue") if actual else 0.0,
            entries=actual.entries if actual else 0,
        )
        if include_empty or line.budget_revenue > 0 or line.actual_revenue > 0:
            lines.append(line)
    return lines


def budget_alerts(lines: Iterable[BudgetLine], threshold: float = WARNING_PERCENT) -> list[BudgetLine]:
    """Lines with actuals whose cost or hours usage reaches ``threshold`` percent.

    Sorted by cost usage, highest first.
    """
    flagged = [
        line for line in lines
        if line.entries > 0
        and (line.cost_used_percent >= threshold or line.hours_used_percent >= threshold)
    ]
    return sorted(flagged, key=lambda line: line.cost_used_percent, reverse=True)


def _activity_key(value: object) -> str | None:
    text = as_text(value).strip()
    number = parse_number(text)
    if number is None or number <= 0:
        return None
    return format_number(number)


def _num(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)
