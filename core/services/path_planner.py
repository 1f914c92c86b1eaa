"""Planning of year-folder moves and catalog thumbnail paths.

The planner only reads the folder tree (existence checks); it never creates,
moves or deletes anything. Mutations are carried out by the workflow
controller from the returned `MovePlan`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from core.models import UNKNOWN_YEAR, CatalogEntry, FolderRecord, PathAnnotation, PathStatus

WARN_NOT_MOVED = "folder not yet moved"
WARN_FOLDER_MISSING = "thumbnail folder not found"
WARN_UNKNOWN_YEAR = "year could not be determined"
WARN_NO_IDENTIFIER = "no identifier in entry"


@dataclass(frozen=True)
class FolderMove:
    folder: FolderRecord
    year: str
    source: Path
    destination_year_folder: Path
    destination_full: Path


@dataclass
class MovePlan:
    """Moves for folders with a known year.

    Attributes:
        moves: Planned moves in folder order.
        skipped_unknown: Folders whose year is "Unknown"; they stay where they are.
        already_placed: Folders that already sit inside their year folder.
        conflicts: Moves whose destination an earlier move already claims;
            they are never attempted.
    """

    moves: list[FolderMove] = field(default_factory=list)
    skipped_unknown: list[FolderRecord] = field(default_factory=list)
    already_placed: list[FolderRecord] = field(default_factory=list)
    conflicts: list[FolderMove] = field(default_factory=list)

    def year_folders(self) -> list[Path]:
        """Distinct destination year folders in order of first use."""
        seen: dict[Path, None] = {}
        for move in self.moves:
            seen.setdefault(move.destination_year_folder, None)
        return list(seen)


class YearFolderPlanner:
    """Computes year-folder moves and thumbnail paths under `root`."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def plan_moves(
        self, folders: Iterable[FolderRecord], year_of: Callable[[FolderRecord], str]
    ) -> MovePlan:
        """Plan a move into `<root>/<year>/<name>` for every folder with a known year."""
        plan = MovePlan()
        claimed: dict[Path, FolderMove] = {}
        for folder in folders:
            year = year_of(folder)
            if year == UNKNOWN_YEAR:
                logger.warning("Skipping {}: year could not be determined", folder.name)
                plan.skipped_unknown.append(folder)
                continue
            if folder.year_folder == year:
                plan.already_placed.append(folder)
                continue
            year_dir = self.root / year
            move = FolderMove(
                folder=folder,
                year=year,
                source=folder.path,
                destination_year_folder=year_dir,
                destination_full=year_dir / folder.name,
            )
            first = claimed.get(move.destination_full)
            if first is not None:
                logger.warning(
                    "Not moving {}: {} is already the target of {}",
                    move.source,
                    move.destination_full,
                    first.source,
                )
                plan.conflicts.append(move)
                continue
            claimed[move.destination_full] = move
            plan.moves.append(move)
        return plan

    def annotate(self, entry: CatalogEntry, year: str) -> PathAnnotation:
        """Resolve the `thumbnailPath` of `entry` against the current folder tree."""
        ident = entry.identifier
        if ident is None:
            return PathAnnotation(None, WARN_NO_IDENTIFIER, PathStatus.NO_IDENTIFIER)
        if year == UNKNOWN_YEAR:
            return PathAnnotation(ident, WARN_UNKNOWN_YEAR, PathStatus.UNKNOWN_YEAR)

        year_path = f"{year}/{ident}"
        if (self.root / year / ident).is_dir():
            return PathAnnotation(year_path, None, PathStatus.UPDATED)
        if (self.root / ident).is_dir():
            return PathAnnotation(ident, WARN_NOT_MOVED, PathStatus.NOT_MOVED)
        return PathAnnotation(year_path, WARN_FOLDER_MISSING, PathStatus.FOLDER_MISSING)
