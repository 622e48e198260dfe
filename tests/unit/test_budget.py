from __future__ import annotations

import pytest

from sheet_rollup.models.record import Record
from sheet_rollup.services.budget import (
    AlertSeverity,
    BudgetStatus,
    budget_alerts,
    budget_lines,
    usage_percent,
)

ESTIMATES = [
    Record.of(activitySeq="100100", projectId="P1", projectName="Bridge", activityDescription="Support",
              budgetHours=100.0, budgetCost=1000.0, budgetRevenue=2000.0),
    Record.of(activitySeq="100200.00", projectId="P1", projectName="Bridge", activityDescription="Travel",
              budgetHours=10.0, budgetCost=100.0, budgetRevenue=200.0),
    Record.of(activitySeq="200100", projectId="P2", projectName="Tunnel", activityDescription="Delivery",
              budgetHours=0.0, budgetCost=0.0, budgetRevenue=500.0),
    Record.of(activitySeq="", projectId="P3", budgetRevenue=10.0),
    Record.of(activitySeq="0", projectId="P3", budgetRevenue=10.0),
]

ACTUALS = [
    Record.of(activitySeq="100100", hours=40.0, cost=400.0, revenue=800.0),
    Record.of(activitySeq=100100.0, hours=45.0, cost=450.0, revenue=900.0),
    Record.of(activitySeq="100200", hours=12.0, cost=120.0, revenue=150.0),
    Record.of(activitySeq="999999", hours=1.0, cost=1.0, revenue=1.0),
]


def _by_seq():
    return {line.activity_seq: line for line in budget_lines(ESTIMATES, ACTUALS)}


def test_usage_percent_zero_budget():
    assert usage_percent(50.0, 0.0) == 0.0
    assert usage_percent(50.0, -1.0) == 0.0
    assert usage_percent(50.0, 200.0) == 25.0


def test_budget_lines_join_on_normalized_sequence():
    lines = _by_seq()
    assert set(lines) == {"100100", "100200", "200100"}
    support = lines["100100"]
    assert support.actual_hours == 85.0
    assert support.actual_cost == 850.0
    assert support.actual_revenue == 1700.0
    assert support.entries == 2
    assert support.remaining_budget == 300.0
    assert support.cost_variance == -150.0
    assert lines["200100"].entries == 0


def test_status():
    lines = _by_seq()
    assert lines["100100"].status is BudgetStatus.WARNING        # 85 % cost
    assert lines["100200"].status is BudgetStatus.OVER_BUDGET    # 120 % cost
    assert lines["200100"].status is BudgetStatus.ON_TRACK


def test_alerts_sorted_by_cost_usage():
    alerts = budget_alerts(budget_lines(ESTIMATES, ACTUALS))
    assert [a.activity_seq for a in alerts] == ["100200", "100100"]
    assert alerts[0].severity is AlertSeverity.CRITICAL
    assert alerts[1].severity is AlertSeverity.ATTENTION


@pytest.mark.parametrize("cost,expected", [(850.0, AlertSeverity.ATTENTION), (950.0, AlertSeverity.WARNING), (1000.0, AlertSeverity.CRITICAL)])
def test_severity_thresholds(cost, expected):
    actual = [Record.of(activitySeq="100100", hours=1.0, cost=cost, revenue=1.0)]
    line = budget_lines(ESTIMATES[:1], actual)[0]
    assert line.severity is expected


def test_include_empty():
    estimates = [Record.of(activitySeq="300100", budgetRevenue=0.0)]
    assert budget_lines(estimates, []) == []
    assert len(budget_lines(estimates, [], include_empty=True)) == 1
