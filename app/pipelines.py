"""The catalog and folder maintenance operations.

Each operation loads its inputs (fatal errors propagate before anything is
changed), plans with the core services, asks for confirmation in execute mode,
applies the plan through a `WorkflowController` and returns its `RunReport`.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from loguru import logger

from app.workflow import RunMode, RunReport, WorkflowController
from core.models import UNKNOWN_YEAR, AnnotatedEntry, CatalogEntry, FolderRecord, PathStatus
from core.services.alignment_service import (
    DEFAULT_THRESHOLD_PERCENT,
    AlignmentReport,
    check_alignment,
)
from core.services.grouping_service import group_items
from core.services.interfaces import ConfirmationProvider
from core.services.normalizer import normalize_identifier
from core.services.path_planner import YearFolderPlanner
from core.services.resolution_service import DedupPlan, plan_deduplication
from core.services.year_classifier import build_year_index, count_year_buckets, extract_year
from infrastructure.audit_log import AuditLogWriter
from infrastructure.catalog_repository import (
    JsonCatalogRepository,
    default_output_path,
    ensure_distinct_output,
)
from infrastructure.folder_repository import FolderRepository
from infrastructure.folder_service import FolderService
from infrastructure.settings import JsonSettings

T = TypeVar("T")

TOKEN_MOVE = "MOVE"
TOKEN_SAVE = "SAVE"
TOKEN_DELETE = "DELETE"


@dataclass
class PipelineConfig:
    """Tunables shared by all operations."""

    folder_token_count: int = 4
    catalog_token_count: int = 3
    threshold_percent: float = DEFAULT_THRESHOLD_PERCENT
    sample_limit: int = 10
    catalog_indent: int = 2
    audit_dir: Path = Path("audit_logs")

    @classmethod
    def from_settings(cls, settings: JsonSettings) -> PipelineConfig:
        return cls(
            folder_token_count=settings.get_int("dedup.folder_token_count", 4),
            catalog_token_count=settings.get_int("dedup.catalog_token_count", 3),
            threshold_percent=settings.get_float(
                "alignment.threshold_percent", DEFAULT_THRESHOLD_PERCENT
            ),
            sample_limit=settings.get_int("report.sample_limit", 10),
            catalog_indent=settings.get_int("catalog.indent", 2),
            audit_dir=Path(settings.get("audit.directory", "audit_logs")),
        )


def _controller(
    operation: str,
    token: str,
    config: PipelineConfig,
    mode: RunMode,
    confirm: ConfirmationProvider | None,
    folders: FolderService | None = None,
) -> WorkflowController:
    return WorkflowController(
        operation,
        mode,
        confirm_token=token,
        confirm=confirm,
        folders=folders,
        catalog_repo=JsonCatalogRepository(indent=config.catalog_indent),
        audit_writer=AuditLogWriter(config.audit_dir),
    )


def _format_years(counts: Counter[str]) -> str:
    """Render year buckets sorted by year with "Unknown" last."""
    years = sorted(y for y in counts if y != UNKNOWN_YEAR)
    if UNKNOWN_YEAR in counts:
        years.append(UNKNOWN_YEAR)
    return ", ".join(f"{y}={counts[y]}" for y in years) or "-"


def _log_samples(plan: DedupPlan[T], name_of: Callable[[T], str], limit: int) -> None:
    for decision in plan.decisions[:limit]:
        logger.info(
            "  {}: keep {} | remove {}",
            decision.base_identifier,
            name_of(decision.keep),
            ", ".join(name_of(item) for item in decision.remove),
        )
    if len(plan.decisions) > limit:
        logger.info("  ... and {} more group(s)", len(plan.decisions) - limit)


def _catalog_key(token_count: int) -> Callable[[CatalogEntry], str]:
    return lambda entry: normalize_identifier(entry.require_identifier(), token_count)


def run_alignment_check(
    catalog_path: Path, root: Path, config: PipelineConfig
) -> AlignmentReport:
    """Compare folder and catalog reduction ratios; read-only."""
    entries = JsonCatalogRepository().load(catalog_path)
    repo = FolderRepository(root)
    repo.detect_layout()
    folder_names = [f.name for f in repo.list_all()]

    report = check_alignment(
        folder_names,
        entries,
        config.folder_token_count,
        config.catalog_token_count,
        threshold=config.threshold_percent,
        sample_limit=config.sample_limit,
    )
    for stats in (report.folders, report.catalog):
        logger.info(
            "{}: {} items, {} unique base identifiers (tokens={}), reduction {:.1f}%",
            stats.label,
            stats.total,
            stats.unique_groups,
            stats.token_count,
            stats.reduction_percent,
        )
    if report.catalog.skipped:
        logger.warning("{} catalog entries without identifier were ignored", report.catalog.skipped)
    logger.info("Base identifiers present on both sides: {}", report.shared_base_identifiers)
    for label, samples in (("folder", report.folder_samples), ("catalog", report.catalog_samples)):
        for base, members in samples:
            logger.info("  {} group {}: {}", label, base, ", ".join(members))

    if report.is_misaligned:
        logger.warning(
            "Reduction differs by {:.1f} points (threshold {:.1f}); "
            "check folder/catalog token counts before running a dedup",
            report.difference,
            report.threshold,
        )
    else:
        logger.info("Reduction difference {:.1f} points: aligned", report.difference)
    return report


def run_catalog_dedup(
    catalog_path: Path,
    config: PipelineConfig,
    mode: RunMode,
    confirm: ConfirmationProvider | None = None,
    output_path: Path | None = None,
) -> RunReport:
    """Write a copy of the catalog without near-duplicate entries."""
    output_path = output_path or default_output_path(catalog_path, "deduplicated")
    ensure_distinct_output(catalog_path, output_path)
    entries = JsonCatalogRepository().load(catalog_path)

    grouping = group_items(entries, _catalog_key(config.catalog_token_count))
    plan: DedupPlan[CatalogEntry] = plan_deduplication(grouping, lambda e: e.require_identifier())
    kept = plan.kept(entries)

    logger.info(
        "{} entries, {} base identifiers, {} duplicate group(s), {} entries to remove",
        len(entries),
        grouping.unique_count,
        len(plan.decisions),
        plan.removal_count,
    )
    _log_samples(plan, lambda e: e.require_identifier(), config.sample_limit)

    ctl = _controller("dedup-catalog", TOKEN_SAVE, config, mode, confirm)
    ctl.report.details.update(
        {
            "input": str(catalog_path),
            "output": str(output_path),
            "token_count": config.catalog_token_count,
            "entries_in": len(entries),
            "entries_out": len(kept),
            "duplicate_groups": len(plan.decisions),
            "skipped_no_identifier": len(grouping.skipped),
        }
    )
    if ctl.request_confirmation():
        ctl.apply_catalog_write(output_path, [e.to_dict() for e in kept], dedup=plan)
    return ctl.finish()


def run_folder_dedup(
    root: Path,
    config: PipelineConfig,
    mode: RunMode,
    confirm: ConfirmationProvider | None = None,
    folders: FolderService | None = None,
) -> RunReport:
    """Send near-duplicate thumbnail folders to the recycle bin."""
    repo = FolderRepository(root)
    layout = repo.detect_layout()
    records = repo.list_all()

    grouping = group_items(
        records, lambda f: normalize_identifier(f.name, config.folder_token_count)
    )
    plan: DedupPlan[FolderRecord] = plan_deduplication(grouping, lambda f: f.name)
    logger.info(
        "{} folders, {} base identifiers, {} duplicate group(s), {} folders to remove",
        len(records),
        grouping.unique_count,
        len(plan.decisions),
        plan.removal_count,
    )
    _log_samples(plan, lambda f: f.name, config.sample_limit)

    ctl = _controller("dedup-folders", TOKEN_DELETE, config, mode, confirm, folders)
    ctl.report.details.update(
        {
            "root": str(root),
            "layout": layout.value,
            "token_count": config.folder_token_count,
            "folders_found": len(records),
            "duplicate_groups": len(plan.decisions),
        }
    )
    if ctl.request_confirmation():
        ctl.apply_folder_removals(plan)
    return ctl.finish()


def run_year_organize(
    catalog_path: Path,
    root: Path,
    config: PipelineConfig,
    mode: RunMode,
    confirm: ConfirmationProvider | None = None,
    folders: FolderService | None = None,
) -> RunReport:
    """Move title folders into `<root>/<year>/` using the catalog's dates."""
    entries = JsonCatalogRepository().load(catalog_path)
    repo = FolderRepository(root)
    layout = repo.detect_layout()
    records = repo.list_all()

    year_index = build_year_index(entries)
    planner = YearFolderPlanner(repo.root)
    plan = planner.plan_moves(records, lambda f: year_index.get(f.name, UNKNOWN_YEAR))
    years = count_year_buckets(m.year for m in plan.moves)

    logger.info(
        "{} folders: {} to move, {} already placed, {} with unknown year",
        len(records),
        len(plan.moves),
        len(plan.already_placed),
        len(plan.skipped_unknown),
    )
    logger.info("Year distribution of planned moves: {}", _format_years(years))

    ctl = _controller("organize-years", TOKEN_MOVE, config, mode, confirm, folders)
    ctl.report.details.update(
        {
            "input": str(catalog_path),
            "root": str(root),
            "layout": layout.value,
            "folders_found": len(records),
            "already_placed": len(plan.already_placed),
            "destination_conflicts": len(plan.conflicts),
            "year_folders_used": len(plan.year_folders()),
            "year_distribution": _format_years(years),
        }
    )
    if ctl.request_confirmation():
        ctl.apply_move_plan(plan)
    else:
        ctl.report.skipped_unknown = len(plan.skipped_unknown)
    return ctl.finish()


def annotate_entries(
    entries: list[CatalogEntry], root: Path, years: list[str] | None = None
) -> list[AnnotatedEntry]:
    """Resolve `thumbnailPath`/`pathWarning` for every entry against the folder tree.

    `years` holds the already extracted year of each entry, in entry order.
    """
    if years is None:
        years = [extract_year(e.date) for e in entries]
    planner = YearFolderPlanner(root)
    return [AnnotatedEntry(e, planner.annotate(e, y)) for e, y in zip(entries, years)]


def run_update_paths(
    catalog_path: Path,
    root: Path,
    config: PipelineConfig,
    mode: RunMode,
    confirm: ConfirmationProvider | None = None,
    output_path: Path | None = None,
) -> RunReport:
    """Write a copy of the catalog with year-based `thumbnailPath` values."""
    output_path = output_path or default_output_path(catalog_path, "with_paths")
    ensure_distinct_output(catalog_path, output_path)
    entries = JsonCatalogRepository().load(catalog_path)
    repo = FolderRepository(root)
    layout = repo.detect_layout()

    entry_years = [extract_year(e.date) for e in entries]
    annotated = annotate_entries(entries, repo.root, entry_years)
    statuses = Counter(a.annotation.status for a in annotated)
    years = count_year_buckets(entry_years)
    for item in annotated:
        if item.annotation.path_warning:
            logger.warning(
                "{}: {}", item.entry.identifier or "<no identifier>", item.annotation.path_warning
            )

    logger.info(
        "Paths: {} updated, {} not yet moved, {} folder missing, {} unknown year, {} no identifier",
        statuses[PathStatus.UPDATED],
        statuses[PathStatus.NOT_MOVED],
        statuses[PathStatus.FOLDER_MISSING],
        statuses[PathStatus.UNKNOWN_YEAR],
        statuses[PathStatus.NO_IDENTIFIER],
    )
    logger.info("Year distribution of entries: {}", _format_years(years))

    ctl = _controller("update-paths", TOKEN_SAVE, config, mode, confirm)
    ctl.report.details.update(
        {
            "input": str(catalog_path),
            "output": str(output_path),
            "root": str(root),
            "layout": layout.value,
            "entries": len(entries),
            "paths_updated": statuses[PathStatus.UPDATED],
            "paths_not_moved": statuses[PathStatus.NOT_MOVED],
            "paths_folder_missing": statuses[PathStatus.FOLDER_MISSING],
            "paths_unknown_year": statuses[PathStatus.UNKNOWN_YEAR],
            "paths_no_identifier": statuses[PathStatus.NO_IDENTIFIER],
            "year_distribution": _format_years(years),
        }
    )
    ctl.report.skipped_unknown = statuses[PathStatus.UNKNOWN_YEAR]
    if ctl.request_confirmation():
        ctl.apply_catalog_write(output_path, [a.to_dict() for a in annotated])
    return ctl.finish()
