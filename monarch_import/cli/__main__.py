from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from monarch_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, ExportConfig, load_config
from monarch_import.logging.init import log_summary, setup_logging
from monarch_import.mapping.layouts import LAYOUTS
from monarch_import.models.processing_result import ImportResult
from monarch_import.readers.reader import InputFile, JobFiles, ReaderError
from monarch_import.services.customer_api import CustomerApiClient
from monarch_import.services.encoder import decode_line
from monarch_import.services.orchestrator import import_customer_list, import_jobs, import_wip
from monarch_import.services.resolver import CustomerResolver
from monarch_import.services.summary import render_summary_line

"""CLI entrypoint.

    python -m monarch_import.cli customers export.zip
    python -m monarch_import.cli jobs orders.zip
    python -m monarch_import.cli jobs --customer c.csv --order o.csv [--payment p.csv]
    python -m monarch_import.cli wip wip.xlsx
    python -m monarch_import.cli inspect monarch_main_jobs.txt --layout job

Generated files go to output_directory (config) or --output-dir. Rejected and
skipped records are listed in the log and in the rejection CSV; they do not
fail the run but change the exit code to 2.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env; values there win over variables already in the process."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="monarch-import", description="Monarch ERP fixed-width import file generator")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=None, help=f"YAML config (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--output-dir", type=Path, default=None, help="Override output_directory from the config")
    sub = p.add_subparsers(dest="command", required=True)

    c = sub.add_parser("customers", help="Customer list -> monarch_customer_import.txt")
    c.add_argument("source", type=Path, help="ZIP archive or customer CSV/XLSX")
    c.add_argument("--users", type=Path, default=None, help="User list CSV (userID, contactEmail)")

    j = sub.add_parser("jobs", help="Customer + order files -> main/sub job files")
    j.add_argument("archive", type=Path, nargs="?", default=None, help="ZIP with customer/order/payment files")
    j.add_argument("--customer", type=Path, default=None)
    j.add_argument("--order", type=Path, default=None)
    j.add_argument("--payment", type=Path, default=None)

    w = sub.add_parser("wip", help="WIP spreadsheet -> wip_import.txt")
    w.add_argument("source", type=Path)

    i = sub.add_parser("inspect", help="Decode a generated fixed-width file")
    i.add_argument("file", type=Path)
    i.add_argument("--layout", choices=sorted(LAYOUTS), required=True)
    i.add_argument("--limit", type=int, default=5, help="Lines to print (default 5)")
    return p.parse_args(argv)


def _load(config_path: Path | None) -> ExportConfig:
    if config_path is None and not DEFAULT_CONFIG_PATH.exists():
        return ExportConfig().with_env_overrides()
    return load_config(config_path or DEFAULT_CONFIG_PATH).with_env_overrides()


def _write_outputs(result: ImportResult, directory: Path, logger) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for name, text in result.outputs.items():
        path = directory / name
        with path.open("w", encoding="utf-8", newline="") as f:
            f.write(text)
        logger.info(f"wrote {path}")


def _exit_code(result: ImportResult) -> int:
    if not result.success:
        return EXIT_FATAL
    if result.rejected_count or result.skipped_count:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def _inspect(path: Path, layout_name: str, limit: int) -> int:
    if not path.exists():
        print(f"inspect: file not found: {path}")
        return EXIT_FATAL
    layout = LAYOUTS[layout_name]
    print(f"FILE: {path.name} layout={layout.name} line_length={layout.line_length}")
    with path.open("r", encoding="utf-8", newline="") as f:
        for n, line in enumerate(f, start=1):
            if n > limit:
                break
            body = line.rstrip("\r\n")
            fields = {k: v for k, v in decode_line(body, layout).items() if v}
            print(f"  LINE {n}: length={len(body)} fields={fields}")
    return EXIT_SUCCESS_ALL


def _run_import(args: argparse.Namespace, cfg: ExportConfig, logger) -> ImportResult | None:
    if args.command == "customers":
        return import_customer_list(args.source, args.users, cfg)

    if not cfg.api.base_url:
        logger.error("config: customer API base_url is not set (api.base_url or MONARCH_API_URL)")
        return None
    with CustomerApiClient(
        cfg.api.base_url, cfg.api.username, cfg.api.password, timeout=cfg.api.timeout_seconds
    ) as client:
        resolver = CustomerResolver(client)
        if args.command == "wip":
            return import_wip(args.source, cfg, resolver)
        if args.archive is not None:
            return import_jobs(args.archive, cfg, resolver)
        files = JobFiles(
            customer=InputFile.from_path(args.customer) if args.customer else None,
            order=InputFile.from_path(args.order) if args.order else None,
            payment=InputFile.from_path(args.payment) if args.payment else None,
        )
        return import_jobs(files, cfg, resolver)


def main(argv: list[str] | None = None) -> int:
    # None のときのみ sys.argv を読む (テストからの main([]) を誤解析しない)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    _load_env_file(Path(".env"), override=True)

    if args.command == "inspect":
        return _inspect(args.file, args.layout, args.limit)

    try:
        cfg = _load(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "jobs" and args.archive is None and (args.customer is None or args.order is None):
        logger.error("jobs: give a ZIP archive or both --customer and --order")
        return EXIT_FATAL

    try:
        result = _run_import(args, cfg, logger)
    except ReaderError as e:
        logger.error(f"input: {e}")
        return EXIT_FATAL
    if result is None:
        return EXIT_FATAL

    for skipped in result.skipped:
        logger.warning(f"skipped {skipped.describe()}")
    for rejected in result.rejected:
        logger.warning(f"rejected {rejected.record_type} {rejected.source_id}: {rejected.reason} "
                       f"(Customer: {rejected.customer_name})")

    if result.success:
        output_dir = args.output_dir or Path(cfg.output_directory)
        try:
            _write_outputs(result, output_dir, logger)
        except OSError as e:
            logger.error(f"output: {e}")
            return EXIT_FATAL
        logger.info(result.message)

    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return _exit_code(result)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
