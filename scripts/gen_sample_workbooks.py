#!/usr/bin/env python3
"""Sample workbook generation script.

Generates synthetic workbooks laid out like the built-in layouts so the CLI
can be tried end to end:

- PT.xlsx (``transactions``): one row per booking, header on row 1
- AE.xlsx (``estimates``): one row per estimated activity, header on row 1
- config/rollup.yml pointing at both (unless --no-config)

Dates are written as Excel serial numbers for a share of the rows and as
text for the rest, with a few deliberately unparsable values ("N/A") so the
Unknown bucket shows up in the reports.
"""
from __future__ import annotations

import argparse
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from sheet_rollup.config.layouts import ESTIMATES, TRANSACTIONS
from sheet_rollup.excel.dates import to_serial
from sheet_rollup.models.config_models import LayoutConfig

SAMPLE_CONFIG = """source_directory: {directory}
workbooks:
  pt: {{file: PT.xlsx, layout: transactions}}
  ae: {{file: AE.xlsx, layout: estimates}}
reports:
  monthly_hours:
    workbook: pt
    period: month
    measures: [hours, cost, revenue]
    distinct: [projectId, activitySeq]
  weekly_p100:
    workbook: pt
    period: week
    measures: [hours]
    filters:
      - {{field: projectId, op: equals, value: P100}}
"""

DESCRIPTIONS = [
    "Time & Material support",
    "Fixed price delivery",
    "T&E travel",
    "Milestone payment",
    "Internal review",
]


def _layout_rows(layout: LayoutConfig, records: list[dict[str, Any]]) -> list[list[Any]]:
    """Place field values at their layout column; header row first."""
    width = max(spec.index for spec in layout.column_map.fields.values()) + 1
    header = [""] * width
    for field_name, spec in layout.column_map.fields.items():
        header[spec.index] = field_name
    rows = [header]
    for record in records:
        row: list[Any] = [""] * width
        for field_name, value in record.items():
            row[layout.column_map.fields[field_name].index] = value
        rows.append(row)
    return rows


def generate_transactions(rows: int, projects: int, seed: int = 42) -> list[dict[str, Any]]:
    np.random.seed(seed)
    start = datetime(2024, 1, 1)
    out: list[dict[str, Any]] = []
    for i in range(rows):
        project = int(np.random.randint(0, projects))
        when = start + timedelta(days=int(np.random.randint(0, 365)))
        if i % 25 == 24:
            date_value: Any = "N/A"
        elif i % 2 == 0:
            date_value = to_serial(when)
        else:
            date_value = when.strftime("%Y-%m-%d")
        hours = float(np.random.choice([1, 2, 4, 8]))
        out.append({
            "projectId": f"P{100 + project}",
            "date": date_value,
            "activitySeq": int(np.random.choice([100100, 100200, 200100, 300100])),
            "projectName": f"Project {100 + project}",
            "activityDescription": str(np.random.choice(DESCRIPTIONS)),
            "hours": hours,
            "cost": round(hours * 85.0, 2),
            "revenue": round(hours * 120.0, 2),
        })
    return out


def generate_estimates(projects: int) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for p in range(projects):
        for seq, activity in ((100100, "Support"), (100200, "Travel"), (200100, "Delivery")):
            out.append({
                "projectId": f"P{100 + p}",
                "projectName": f"Project {100 + p}",
                "activity": activity,
                "activityDescription": activity,
                "budgetCost": 20000.0,
                "budgetRevenue": 30000.0,
                "budgetHours": 240.0,
                "activitySeq": seq,
            })
    return out


def write_workbook(path: Path, sheet_name: str, rows: list[list[Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    print(f"Created Excel file: {path} ({len(rows) - 1} data rows)")


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate sample workbooks for sheet_rollup")
    parser.add_argument("directory", type=Path, nargs="?", default=Path("data"), help="Output directory (default: data)")
    parser.add_argument("--rows", type=int, default=500, help="Transaction rows (default: 500)")
    parser.add_argument("--projects", type=int, default=5, help="Number of projects (default: 5)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--no-config", action="store_true", help="Do not write config/rollup.yml")
    args = parser.parse_args()

    if args.rows <= 0 or args.projects <= 0:
        print("Error: --rows and --projects must be positive", file=sys.stderr)
        return 1

    write_workbook(args.directory / "PT.xlsx", "Transactions",
                   _layout_rows(TRANSACTIONS, generate_transactions(args.rows, args.projects, args.seed)))
    write_workbook(args.directory / "AE.xlsx", "Estimates",
                   _layout_rows(ESTIMATES, generate_estimates(args.projects)))

    if not args.no_config:
        config_path = Path("config/rollup.yml")
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(SAMPLE_CONFIG.format(directory=args.directory.as_posix()), encoding="utf-8")
        print(f"Wrote {config_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
