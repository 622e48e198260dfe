from __future__ import annotations

from ..models.cell import ValueKind
from ..models.column_map import ColumnMap
from ..models.config_models import LayoutConfig

"""Built-in sheet layouts for the known workbook shapes.

PT (project transactions), AE (activity estimates), P (projects) and the
Program Management pipeline sheet (headers on row 11). Column
letters follow the workbooks as exported; a layout change in one of those
files is an edit here (or an override under ``layouts:`` in the config).
"""

__all__ = [
    "BUILTIN_LAYOUTS",
    "ESTIMATES",
    "PIPELINE",
    "PROJECTS",
    "TRANSACTIONS",
]

T, N, D = ValueKind.TEXT, ValueKind.NUMBER, ValueKind.DATE

TRANSACTIONS = LayoutConfig(
    name="transactions",
    header_row=1,
    column_map=ColumnMap.from_dict("transactions", {
        "projectId": {"column": "A", "kind": T},
        "date": {"column": "C", "kind": D},
        "activitySeq": {"column": "E", "kind": T},
        "projectName": {"column": "H", "kind": T},
        "activityDescription": {"column": "L", "kind": T},
        "hours": {"column": "S", "kind": N},    # Internal Quantity
        "cost": {"column": "Y", "kind": N},     # Internal Amount
        "revenue": {"column": "AH", "kind": N},  # Sales Amount
    }),
)

ESTIMATES = LayoutConfig(
    name="estimates",
    header_row=1,
    column_map=ColumnMap.from_dict("estimates", {
        "projectId": {"column": "B", "kind": T},
        "projectName": {"column": "C", "kind": T},
        "activity": {"column": "F", "kind": T},
        "activityDescription": {"column": "G", "kind": T},
        "budgetCost": {"column": "K", "kind": N},
        "budgetRevenue": {"column": "L", "kind": N},
        "budgetHours": {"column": "M", "kind": N},
        "activitySeq": {"column": "S", "kind": T},
    }),
)

PROJECTS = LayoutConfig(
    name="projects",
    header_row=1,
    column_map=ColumnMap.from_dict("projects", {
        "projectId": {"column": "A", "kind": T},
        "projectName": {"column": "B", "kind": T},
        "status": {"column": "C", "kind": T},
        "budget": {"column": "D", "kind": N},
        "startDate": {"column": "E", "kind": D},
        "endDate": {"column": "F", "kind": D},
    }),
)

PIPELINE = LayoutConfig(
    name="pipeline",
    header_row=11,
    column_map=ColumnMap.from_dict("pipeline", {
        "customer": {"column": "A", "kind": T},
        "projectName": {"column": "B", "kind": T},
        "stage": {"column": "C", "kind": T},
        "status": {"column": "D", "kind": T},
        "date": {"column": "F", "kind": D},
        "estValueAUD": {"column": "H", "kind": N},
        "estValueGBP": {"column": "I", "kind": N},
        "weightedValue": {"column": "J", "kind": N},
    }),
)

BUILTIN_LAYOUTS: dict[str, LayoutConfig] = {
    layout.name: layout for layout in (TRANSACTIONS, ESTIMATES, PROJECTS, PIPELINE)
}
