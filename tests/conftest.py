# Shared pytest fixtures
from __future__ import annotations
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable

import pandas as pd
import pytest

from sheet_rollup.logging.init import LOGGER_NAME, reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_logging():
    # setup_logging はプロセス内で一度だけ構成されるため毎テストで戻す
    reset_logging()
    yield
    reset_logging()
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


ENV_KEYS = ("ROLLUP_CONFIG", "ROLLUP_SOURCE_DIR")


@pytest.fixture(autouse=True)
def _clean_env():
    # CLI の .env 読み込みは os.environ を直接書き換えるので前後で戻す
    saved = {k: os.environ.pop(k) for k in ENV_KEYS if k in os.environ}
    yield
    for k in ENV_KEYS:
        os.environ.pop(k, None)
    os.environ.update(saved)


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
workbooks:
  pt:
    file: PT.xlsx
    sheet: Transactions
    layout: simple
layouts:
  simple:
    header_row: 1
    columns:
      projectId: A
      date: {column: B, kind: date}
      hours: {column: C, kind: number}
      activitySeq: D
reports:
  monthly_hours:
    workbook: pt
    period: month
    measures: [hours]
    distinct: [projectId]
  p100_weekly:
    workbook: pt
    period: week
    measures: [hours]
    filters:
      - {field: projectId, op: equals, value: P100}
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "rollup.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def make_excel(path: Path, sheets: dict[str, list[list[Any]]]) -> Path:
    """Write a real .xlsx with one sheet per entry, rows written verbatim."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


@pytest.fixture()
def excel_builder(temp_workdir: Path) -> Callable[[str, dict[str, list[list[Any]]]], Path]:
    def _build(name: str, sheets: dict[str, list[list[Any]]]) -> Path:
        return make_excel(temp_workdir / "data" / name, sheets)
    return _build


@pytest.fixture()
def pt_rows() -> list[list[Any]]:
    """Transactions in the ``simple`` layout (projectId, date, hours, activitySeq)."""
    return [
        ["projectId", "date", "hours", "activitySeq"],
        ["P100", "2024-01-05", 3, 100100],
        ["P100", "2024-01-20", 5, 100200],
        ["P200", 45338, 2, 200100],  # serial -> 2024-02-16
        ["P100", "N/A", 1, 100100],
    ]
