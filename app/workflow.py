"""Preview/execute workflow controller.

The controller turns plans into file-system and catalog mutations. The run
mode is fixed at construction: preview computes and records every action
without touching storage; execute performs them after the user typed the
operation's confirmation token. Each stage returns a `StageResult` that is
merged into the run's `RunReport`, and `finish` writes the audit log.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from loguru import logger

from core.models import (
    ActionKind,
    ActionStatus,
    AuditEntry,
    CatalogEntry,
    FolderRecord,
    MoveLogEntry,
    RemovalLogEntry,
)
from core.services.interfaces import ConfirmationProvider, StageResult
from core.services.path_planner import FolderMove, MovePlan
from core.services.resolution_service import DedupPlan
from infrastructure.audit_log import AuditLogWriter
from infrastructure.catalog_repository import JsonCatalogRepository
from infrastructure.folder_service import FolderService


class RunMode(str, Enum):
    PREVIEW = "preview"
    EXECUTE = "execute"


class RunOutcome(str, Enum):
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class RunReport:
    """Merged counts and audit records of one run."""

    operation: str
    mode: RunMode
    started_at: datetime = field(default_factory=datetime.now)
    planned: int = 0
    applied: int = 0
    errors: int = 0
    skipped: int = 0
    skipped_unknown: int = 0
    entries: list[AuditEntry] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)
    cancelled: bool = False
    outcome: RunOutcome | None = None
    summary_path: Path | None = None
    actions_path: Path | None = None

    def merge(self, stage: StageResult) -> None:
        self.entries.extend(stage.entries)
        self.planned += stage.planned
        self.applied += stage.applied
        self.errors += stage.errors
        self.skipped += stage.skipped
        self.skipped_unknown += stage.skipped_unknown

    def resolve_outcome(self) -> RunOutcome:
        if self.cancelled:
            return RunOutcome.CANCELLED
        if self.mode is RunMode.PREVIEW or not self.errors:
            return RunOutcome.COMPLETED
        if self.applied == 0:
            return RunOutcome.FAILED
        return RunOutcome.PARTIAL

    def summary(self) -> dict[str, Any]:
        """Key/value pairs for the human-readable run summary."""
        data: dict[str, Any] = {
            "operation": self.operation,
            "mode": self.mode.value,
            "outcome": (self.outcome or self.resolve_outcome()).value,
            "timestamp": self.started_at.isoformat(timespec="seconds"),
            "planned": self.planned,
            "applied": self.applied,
            "errors": self.errors,
            "skipped": self.skipped,
            "skipped_unknown_year": self.skipped_unknown,
        }
        data.update(self.details)
        return data


class WorkflowController:
    """Runs the mutating stages of one operation in preview or execute mode.

    Args:
        operation: Operation name used in logs and audit file names.
        mode: Preview or execute.
        confirm_token: Literal the user must type in execute mode; None for
            operations without mutations.
        confirm: Confirmation provider; defaults to `input`.
        folders: Folder mutation service.
        catalog_repo: Catalog writer.
        audit_writer: Audit log writer; None disables audit output.
    """

    def __init__(
        self,
        operation: str,
        mode: RunMode,
        confirm_token: str | None = None,
        confirm: ConfirmationProvider | None = None,
        folders: FolderService | None = None,
        catalog_repo: JsonCatalogRepository | None = None,
        audit_writer: AuditLogWriter | None = None,
    ) -> None:
        self.report = RunReport(operation=operation, mode=mode)
        self._token = confirm_token
        self._confirm = confirm or input
        self._folders = folders or FolderService()
        self._catalog_repo = catalog_repo or JsonCatalogRepository()
        self._audit_writer = audit_writer
        # Year folders created (or planned) during this run, and those that failed
        self._ensured_dirs: set[Path] = set()
        self._failed_dirs: set[Path] = set()

    @property
    def is_preview(self) -> bool:
        return self.report.mode is RunMode.PREVIEW

    @property
    def _kind(self) -> ActionKind:
        return ActionKind.PLANNED if self.is_preview else ActionKind.APPLIED

    def request_confirmation(self) -> bool:
        """Return True when the run may proceed.

        Preview runs never ask. Execute runs compare the typed line with the
        token exactly (case-sensitive, no trimming); any other answer, end of
        input or an interrupt cancels.
        """
        if self.is_preview or self._token is None:
            return True
        try:
            answer = self._confirm(f"Type {self._token} to apply the changes above: ")
        except (EOFError, KeyboardInterrupt):
            # Closed stdin or Ctrl+C at the prompt
            answer = None
        if answer != self._token:
            logger.warning(
                "Confirmation not given; {} cancelled, nothing changed", self.report.operation
            )
            self.report.cancelled = True
            return False
        return True

    # Folder moves
    def apply_move_plan(self, plan: MovePlan) -> StageResult:
        """Create year folders as needed and move every planned folder."""
        stage = StageResult(skipped_unknown=len(plan.skipped_unknown))
        for move in plan.moves:
            self._ensure_year_folder(move.destination_year_folder, stage)
            stage.record(self._move(move))
        for move in plan.conflicts:
            stage.record(
                MoveLogEntry(
                    self._kind,
                    "move",
                    str(move.source),
                    str(move.destination_full),
                    ActionStatus.SKIPPED,
                    "destination claimed by another folder",
                )
            )
        self.report.merge(stage)
        return stage

    def _ensure_year_folder(self, path: Path, stage: StageResult) -> None:
        if path in self._ensured_dirs or path.is_dir():
            return
        self._ensured_dirs.add(path)
        if self.is_preview:
            logger.info("[PREVIEW] Would create folder {}", path)
            stage.record(
                MoveLogEntry(ActionKind.PLANNED, "create_dir", "", str(path), ActionStatus.PLANNED)
            )
            return
        entry = self._folders.create_directory(path)
        if entry.status is ActionStatus.ERROR:
            self._failed_dirs.add(path)
        stage.record(entry)

    def _move(self, move: FolderMove) -> MoveLogEntry:
        src, dst = move.source, move.destination_full

        def entry(status: ActionStatus, detail: str = "") -> MoveLogEntry:
            return MoveLogEntry(self._kind, "move", str(src), str(dst), status, detail)

        if dst.exists():
            if not src.exists():
                return entry(ActionStatus.SKIPPED, "already moved")
            logger.warning("Not moving {}: destination already exists ({})", src, dst)
            return entry(ActionStatus.SKIPPED, "destination already exists")
        if not src.exists():
            logger.warning("Not moving {}: source folder missing", src)
            return entry(ActionStatus.SKIPPED, "source folder missing")
        if self.is_preview:
            logger.info("[PREVIEW] Would move {} -> {}", src, dst)
            return entry(ActionStatus.PLANNED)
        if move.destination_year_folder in self._failed_dirs:
            return entry(ActionStatus.ERROR, "year folder could not be created")
        return self._folders.move_folder(src, dst)

    # Duplicate folders
    def apply_folder_removals(self, plan: DedupPlan[FolderRecord]) -> StageResult:
        """Send every folder marked for removal to the recycle bin."""
        stage = StageResult()
        removals = [(d, item) for d in plan.decisions for item in d.remove]

        failures: dict[str, str] = {}
        if self.is_preview:
            for decision, item in removals:
                logger.info("[PREVIEW] Would remove {} (keeping {})", item.path, decision.keep.name)
        else:
            result = self._folders.trash_folders([str(item.path) for _, item in removals])
            failures = dict(result.failed)

        for decision, item in removals:
            reason = failures.get(str(item.path))
            if self.is_preview:
                status = ActionStatus.PLANNED
            else:
                status = ActionStatus.ERROR if reason is not None else ActionStatus.DONE
            stage.record(
                self._removal(
                    decision.base_identifier,
                    decision.keep.name,
                    item.name,
                    str(item.path),
                    status,
                    reason or "",
                )
            )
        self.report.merge(stage)
        return stage

    def _removal(
        self,
        base: str,
        kept: str,
        removed: str,
        source: str,
        status: ActionStatus,
        detail: str = "",
    ) -> RemovalLogEntry:
        return RemovalLogEntry(self._kind, base, kept, removed, source, status, detail)

    def _catalog_write_entry(self, target: str, status: ActionStatus, detail: str) -> MoveLogEntry:
        return MoveLogEntry(self._kind, "write_catalog", "", target, status, detail)

    # Catalog output
    def apply_catalog_write(
        self,
        output_path: Path,
        records: Iterable[dict[str, Any]],
        dedup: DedupPlan[CatalogEntry] | None = None,
    ) -> StageResult:
        """Write `records` to `output_path`.

        When `dedup` is given, one removal record per dropped entry is logged;
        the removals only count as applied if the write succeeded.
        """
        stage = StageResult()
        items = list(records)
        target = str(output_path)
        detail = f"{len(items)} entries"

        if self.is_preview:
            logger.info("[PREVIEW] Would write {} ({})", output_path, detail)
            stage.record(self._catalog_write_entry(target, ActionStatus.PLANNED, detail))
            removal_status = ActionStatus.PLANNED
        else:
            try:
                self._catalog_repo.save(output_path, items)
            except OSError as ex:
                logger.error("Catalog write failed for {}: {}", output_path, ex)
                stage.record(self._catalog_write_entry(target, ActionStatus.ERROR, str(ex)))
                removal_status = ActionStatus.SKIPPED
            else:
                stage.record(self._catalog_write_entry(target, ActionStatus.DONE, detail))
                removal_status = ActionStatus.DONE

        if dedup is not None:
            note = "catalog not written" if removal_status is ActionStatus.SKIPPED else ""
            for decision in dedup.decisions:
                for item in decision.remove:
                    stage.record(
                        self._removal(
                            decision.base_identifier,
                            decision.keep.identifier or "",
                            item.identifier or "",
                            target,
                            removal_status,
                            note,
                        )
                    )
        self.report.merge(stage)
        return stage

    def finish(self) -> RunReport:
        """Resolve the outcome, log the summary and write the audit log."""
        report = self.report
        report.outcome = report.resolve_outcome()
        summary = report.summary()

        logger.info("===== {} summary =====", report.operation)
        for key, value in summary.items():
            logger.info("{}: {}", key, value)

        if self._audit_writer is not None:
            try:
                report.summary_path, report.actions_path = self._audit_writer.write(
                    report.operation, summary, report.entries, report.started_at
                )
            except OSError as ex:
                logger.error("Write audit log failed: {}", ex)
        return report
