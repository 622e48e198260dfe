from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from sheet_rollup.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from sheet_rollup.excel.normalize import normalize
from sheet_rollup.logging.init import log_summary, set_debug, setup_logging
from sheet_rollup.models.config_models import RollupConfig
from sheet_rollup.models.error_record import ErrorRecord
from sheet_rollup.services.aggregator import Granularity
from sheet_rollup.services.cache import CacheMissError, SheetCache
from sheet_rollup.services.report import ReportError, run_report
from sheet_rollup.services.summary import render_bucket_line, render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (ROLLUP_CONFIG / ROLLUP_SOURCE_DIR)
- Load and validate the YAML config
- Load the configured workbooks into the sheet cache
- Run each report (or only --report NAME) and print its period series
- Flush the error log; exit 0 (all ok) / 1 (fatal) / 2 (partial)
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

INSPECT_SAMPLE_ROWS = 3


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv.

    Existing environment variables win unless ``override`` is set.
    """
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="sheet_rollup", description="Spreadsheet period rollup reports")
    p.add_argument("--config", type=Path, default=None, help="Config file (default: $ROLLUP_CONFIG or config/rollup.yml)")
    p.add_argument("--report", action="append", default=None, help="Run only this report (repeatable)")
    p.add_argument("--period", choices=[g.value for g in Granularity], default=None, help="Override the report period")
    p.add_argument("--json", action="store_true", help="Print the series as JSON instead of text lines")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet headers & first rows then exit")
    return p.parse_args(argv)


def _inspect_data(cfg: RollupConfig, cache: SheetCache) -> int:
    for name, source in cfg.workbooks.items():
        print(f"WORKBOOK: {name} file={source.file} layout={source.layout}")
        try:
            sheet = cache.get(name)
        except CacheMissError as e:
            print(f"  read_error: {e}")
            continue
        print(f"  SHEET: {sheet.name} rows={len(sheet)} cols={sheet.headers}")
        for row_number, row in list(sheet.numbered_rows())[:INSPECT_SAMPLE_ROWS]:
            print(f"    row {row_number}: {[normalize(c) for c in row]}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # 空リスト [] のときに sys.argv[1:] を読まないよう None のときだけ参照する
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    config_path = args.config or Path(os.getenv("ROLLUP_CONFIG") or DEFAULT_CONFIG_PATH)
    try:
        cfg = load_config(config_path, source_directory=os.getenv("ROLLUP_SOURCE_DIR"))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    directory = Path(cfg.source_directory)
    if not directory.exists():
        logger.error(f"directory not found: {directory}")
        return EXIT_FATAL

    names = args.report or list(cfg.reports)
    unknown = [n for n in names if n not in cfg.reports]
    if unknown:
        logger.error(f"unknown report(s): {', '.join(unknown)}")
        return EXIT_FATAL

    cache = SheetCache()
    logger.info(f"Loading workbooks from: {directory}")
    if args.inspect_data:
        cache.init(cfg)
        code = _inspect_data(cfg, cache)
        cache.error_log.flush()
        return code

    # 実行するレポートが参照するブックだけを読む
    wanted = list(dict.fromkeys(cfg.reports[n].workbook for n in names))
    loads = cache.init(cfg, wanted)
    logger.info(f"workbooks loaded={loads.loaded} failed={loads.failed} rows={loads.total_rows}")

    failed_reports = 0
    payload: dict[str, list[dict]] = {}
    for name in names:
        try:
            result = run_report(cfg, cache, name, period=args.period)
        except ReportError as e:
            logger.error(f"report: {e}")
            source = cfg.workbooks[cfg.reports[name].workbook]
            cache.error_log.append(ErrorRecord.for_report(name, Path(source.file).name, source.sheet, str(e)))
            failed_reports += 1
            continue
        if args.json:
            payload[name] = [b.to_dict() for b in result.buckets]
        else:
            print(f"REPORT: {name} ({result.period})")
            for bucket in result.buckets:
                print(f"  {render_bucket_line(bucket)}")
        # log_summary adds the "SUMMARY " prefix itself
        log_summary(render_summary_line(result)[len("SUMMARY "):])

    if args.json:
        print(json.dumps(payload, ensure_ascii=False, indent=2))

    counts = cache.error_log.counts()
    error_file = cache.error_log.flush()
    if error_file is not None:
        detail = " ".join(f"{k}={v}" for k, v in counts.items())
        logger.warning(f"errors written to {error_file} ({detail})")

    if failed_reports or loads.failed:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
