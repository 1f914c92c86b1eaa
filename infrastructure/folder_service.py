"""File-system mutations on thumbnail folders.

Every method performs exactly one kind of mutation and reports failures in its
return value instead of raising, so a batch can continue past a single
locked or unwritable folder.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
import os
from pathlib import Path
import shutil

from loguru import logger
from send2trash import send2trash

from core.models import ActionKind, ActionStatus, MoveLogEntry


@dataclass
class TrashResult:
    """Outcome of sending folders to the recycle bin.

    Attributes:
        success_paths: Folders moved to the recycle bin.
        failed: Tuples of (path, reason) for failures.
    """

    success_paths: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)


class FolderService:
    """Creates, moves and trashes folders."""

    def create_directory(self, path: Path) -> MoveLogEntry:
        """Create `path` (with parents) and report the result."""
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as ex:
            logger.error("Create folder failed for {}: {}", path, ex)
            return MoveLogEntry(
                ActionKind.APPLIED, "create_dir", "", str(path), ActionStatus.ERROR, str(ex)
            )
        logger.info("Created folder {}", path)
        return MoveLogEntry(ActionKind.APPLIED, "create_dir", "", str(path), ActionStatus.DONE)

    def move_folder(self, source: Path, destination: Path) -> MoveLogEntry:
        """Move `source` to `destination`, which must not exist yet."""
        try:
            shutil.move(str(source), str(destination))
        except OSError as ex:
            logger.error("Move failed {} -> {}: {}", source, destination, ex)
            return MoveLogEntry(
                ActionKind.APPLIED,
                "move",
                str(source),
                str(destination),
                ActionStatus.ERROR,
                str(ex),
            )
        logger.debug("Moved {} -> {}", source, destination)
        return MoveLogEntry(
            ActionKind.APPLIED, "move", str(source), str(destination), ActionStatus.DONE
        )

    def trash_folders(self, paths: Iterable[str]) -> TrashResult:
        """Send folders to the recycle bin and report per-path results."""
        result = TrashResult()
        for p in paths:
            normalized_path = os.path.normpath(p)
            if not os.path.isdir(normalized_path):
                logger.error("Folder does not exist: {}", normalized_path)
                result.failed.append((p, "Folder does not exist"))
                continue
            try:
                send2trash(normalized_path)
                result.success_paths.append(p)
            except (UnicodeEncodeError, OSError) as ex:
                logger.warning("Failed to trash with normalized path {}: {}", normalized_path, ex)
                # Retry with the absolute path; some platforms reject relative input
                try:
                    send2trash(os.path.abspath(p))
                    result.success_paths.append(p)
                except (UnicodeEncodeError, OSError) as ex2:
                    logger.error("All trash attempts failed for {}: {} / {}", p, ex, ex2)
                    result.failed.append((p, f"Trash failed: {ex}; {ex2}"))
        return result
