from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from app.pipelines import (
    PipelineConfig,
    run_alignment_check,
    run_catalog_dedup,
    run_folder_dedup,
    run_update_paths,
    run_year_organize,
)
from app.workflow import RunMode, RunOutcome, RunReport
from core.errors import CuratorError
from infrastructure.logging import find_latest_log_file, init_logging
from infrastructure.settings import JsonSettings

BASE_DIR = Path(__file__).parent

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_FAILED = 2
EXIT_CANCELLED = 3

_OUTCOME_EXIT = {
    RunOutcome.COMPLETED: EXIT_OK,
    RunOutcome.PARTIAL: EXIT_OK,
    RunOutcome.FAILED: EXIT_FAILED,
    RunOutcome.CANCELLED: EXIT_CANCELLED,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="catalog-curator",
        description="Deduplicate and reorganize a software catalog and its thumbnail folders.",
    )
    parser.add_argument("--settings", type=Path, help="Path to settings.json")
    parser.add_argument("--log-dir", type=Path, help="Directory for application logs")
    parser.add_argument("--audit-dir", type=Path, help="Directory for per-run audit logs")
    parser.add_argument("--verbose", action="store_true", help="Log every entry-level detail")

    sub = parser.add_subparsers(dest="command", required=True)

    def add_catalog(p: argparse.ArgumentParser) -> None:
        p.add_argument("--catalog", type=Path, required=True, help="Input catalog JSON")

    def add_root(p: argparse.ArgumentParser) -> None:
        p.add_argument("--root", type=Path, required=True, help="Thumbnail root folder")

    def add_execute(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--execute",
            action="store_true",
            help="Apply the changes (asks for confirmation); default is a preview",
        )

    p = sub.add_parser("check-alignment", help="Compare folder and catalog dedup ratios")
    add_catalog(p)
    add_root(p)
    p.add_argument("--folder-tokens", type=int, help="Token count for folder names")
    p.add_argument("--catalog-tokens", type=int, help="Token count for catalog identifiers")

    p = sub.add_parser("dedup-catalog", help="Write a catalog without near-duplicate entries")
    add_catalog(p)
    p.add_argument("--output", type=Path, help="Output catalog JSON")
    p.add_argument("--tokens", type=int, help="Token count for catalog identifiers")
    add_execute(p)

    p = sub.add_parser("dedup-folders", help="Send near-duplicate folders to the recycle bin")
    add_root(p)
    p.add_argument("--tokens", type=int, help="Token count for folder names")
    add_execute(p)

    p = sub.add_parser("organize-years", help="Move title folders into year folders")
    add_catalog(p)
    add_root(p)
    add_execute(p)

    p = sub.add_parser("update-paths", help="Write a catalog with year-based thumbnail paths")
    add_catalog(p)
    add_root(p)
    p.add_argument("--output", type=Path, help="Output catalog JSON")
    add_execute(p)
    return parser


def _config(args: argparse.Namespace, settings: JsonSettings) -> PipelineConfig:
    config = PipelineConfig.from_settings(settings)
    if args.audit_dir is not None:
        config.audit_dir = args.audit_dir
    folder_tokens = getattr(args, "folder_tokens", None)
    catalog_tokens = getattr(args, "catalog_tokens", None)
    tokens = getattr(args, "tokens", None)
    if args.command == "dedup-folders" and tokens is not None:
        folder_tokens = tokens
    if args.command == "dedup-catalog" and tokens is not None:
        catalog_tokens = tokens
    if folder_tokens is not None:
        config.folder_token_count = folder_tokens
    if catalog_tokens is not None:
        config.catalog_token_count = catalog_tokens
    return config


def _run(args: argparse.Namespace, config: PipelineConfig) -> RunReport | None:
    mode = RunMode.EXECUTE if getattr(args, "execute", False) else RunMode.PREVIEW
    if args.command == "check-alignment":
        run_alignment_check(args.catalog, args.root, config)
        return None
    if args.command == "dedup-catalog":
        return run_catalog_dedup(args.catalog, config, mode, output_path=args.output)
    if args.command == "dedup-folders":
        return run_folder_dedup(args.root, config, mode)
    if args.command == "organize-years":
        return run_year_organize(args.catalog, args.root, config, mode)
    return run_update_paths(args.catalog, args.root, config, mode, output_path=args.output)


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        default_settings = BASE_DIR / "settings.json"
        settings_path = args.settings or (default_settings if default_settings.exists() else None)
        settings = JsonSettings(settings_path)
    except (OSError, ValueError) as ex:
        logger.error("Settings could not be loaded: {}", ex)
        return EXIT_FATAL

    log_dir = args.log_dir or Path(settings.get("logging.directory", "logs"))
    level = "DEBUG" if args.verbose else str(settings.get("logging.level", "INFO"))
    init_logging(log_dir, level=level)

    try:
        report = _run(args, _config(args, settings))
    except CuratorError as ex:
        logger.error("{}", ex)
        return EXIT_FATAL

    latest = find_latest_log_file(log_dir)
    if latest is not None:
        logger.info("Application log: {}", latest)
    if report is None:
        return EXIT_OK
    if report.mode is RunMode.PREVIEW:
        logger.info("Preview only; re-run with --execute to apply")
    return _OUTCOME_EXIT[report.outcome or report.resolve_outcome()]


if __name__ == "__main__":
    raise SystemExit(main())
