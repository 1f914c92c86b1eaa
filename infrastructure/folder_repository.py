"""Discovery of thumbnail folders under a root directory.

The root holds either flat per-title folders or year-named (``^\\d{4}$``)
folders that contain per-title folders, or a mix of both while a
reorganization is in progress.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
import re

from loguru import logger

from core.errors import RootFolderError
from core.models import FolderRecord

YEAR_FOLDER_RE = re.compile(r"^\d{4}$")


def is_year_folder_name(name: str) -> bool:
    return bool(YEAR_FOLDER_RE.match(name))


class FolderLayout(str, Enum):
    FLAT = "flat"
    YEAR_PARTITIONED = "year-partitioned"


class FolderRepository:
    """Lists title folders under `root`, ignoring hidden directories."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser()
        if not self.root.is_dir():
            raise RootFolderError(f"Root folder does not exist: {self.root}")

    def _subdirs(self, parent: Path) -> list[Path]:
        return sorted(
            (p for p in parent.iterdir() if p.is_dir() and not p.name.startswith(".")),
            key=lambda p: p.name,
        )

    def year_folders(self) -> list[Path]:
        return [p for p in self._subdirs(self.root) if is_year_folder_name(p.name)]

    def detect_layout(self) -> FolderLayout:
        """Year-partitioned as soon as one 4-digit folder exists at the root."""
        layout = FolderLayout.YEAR_PARTITIONED if self.year_folders() else FolderLayout.FLAT
        logger.info("Detected {} layout under {}", layout.value, self.root)
        return layout

    def list_flat(self) -> list[FolderRecord]:
        """Title folders directly under the root (year folders excluded)."""
        return [
            FolderRecord(name=p.name, path=p)
            for p in self._subdirs(self.root)
            if not is_year_folder_name(p.name)
        ]

    def list_all(self) -> list[FolderRecord]:
        """Flat title folders followed by the title folders inside each year folder."""
        records = self.list_flat()
        for year_dir in self.year_folders():
            records.extend(
                FolderRecord(name=p.name, path=p, year_folder=year_dir.name)
                for p in self._subdirs(year_dir)
            )
        return records
