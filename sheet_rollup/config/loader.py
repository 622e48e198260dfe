from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.column_map import ColumnMap, ColumnMapError
from ..models.config_models import LayoutConfig, ReportConfig, RollupConfig, WorkbookSource
from ..models.filter_predicate import FilterPredicate
from .layouts import BUILTIN_LAYOUTS

"""Config loader.

Responsibilities:
- Load YAML config (default config/rollup.yml)
- Validate against the bundled JSON schema (config_schema.json)
- Merge user layouts over the built-in layouts
- Check cross references (workbook -> layout, report -> workbook)
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/rollup.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data fails validation (missing keys, wrong types, ...).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _build_layouts(raw: dict[str, Any]) -> dict[str, LayoutConfig]:
    layouts = dict(BUILTIN_LAYOUTS)
    for name, body in raw.items():
        try:
            column_map = ColumnMap.from_dict(name, body["columns"])
        except ColumnMapError as e:
            raise ConfigError(str(e)) from e
        layouts[name] = LayoutConfig(name=name, column_map=column_map, header_row=body.get("header_row", 1))
    return layouts


def _build_reports(raw: dict[str, Any]) -> dict[str, ReportConfig]:
    reports: dict[str, ReportConfig] = {}
    for name, body in raw.items():
        reports[name] = ReportConfig(
            name=name,
            workbook=body["workbook"],
            period=body.get("period", "month"),
            date_field=body.get("date_field", "date"),
            measures=tuple(body.get("measures", [])),
            distinct=tuple(body.get("distinct", [])),
            filters=tuple(FilterPredicate.from_dict(f) for f in body.get("filters", [])),
        )
    return reports


def load_config(path: Path = DEFAULT_CONFIG_PATH, source_directory: str | None = None) -> RollupConfig:
    """Load and validate the rollup config.

    ``source_directory`` (e.g. from ROLLUP_SOURCE_DIR) overrides the file value.
    """
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)

    layouts = _build_layouts(data.get("layouts", {}))
    workbooks = {
        name: WorkbookSource(name=name, file=body["file"], layout=body["layout"], sheet=body.get("sheet"))
        for name, body in data["workbooks"].items()
    }
    for wb in workbooks.values():
        if wb.layout not in layouts:
            raise ConfigError(f"workbook '{wb.name}' refers to unknown layout '{wb.layout}'")
    reports = _build_reports(data.get("reports", {}))
    for report in reports.values():
        if report.workbook not in workbooks:
            raise ConfigError(f"report '{report.name}' refers to unknown workbook '{report.workbook}'")

    return RollupConfig(
        source_directory=source_directory or data["source_directory"],
        workbooks=workbooks,
        layouts=layouts,
        reports=reports,
        raw=data,
    )
