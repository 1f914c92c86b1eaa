"""Audit log output for a single run.

Each run produces a human-readable summary and a CSV with one row per planned
or applied action. File names carry a microsecond timestamp and get a numeric
suffix if a file with the same name already exists, so earlier runs are never
overwritten.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import csv
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

from core.models import AUDIT_HEADERS, AuditEntry


def _unique_stem(directory: Path, stem: str) -> str:
    """Return `stem` or `stem_<n>` so that no summary/actions file exists yet."""

    def taken(candidate: str) -> bool:
        return (directory / f"{candidate}_summary.txt").exists() or (
            directory / f"{candidate}_actions.csv"
        ).exists()

    if not taken(stem):
        return stem
    i = 1
    while taken(f"{stem}_{i}"):
        i += 1
    return f"{stem}_{i}"


class AuditLogWriter:
    """Writes run summaries and per-action logs under `log_dir`."""

    def __init__(self, log_dir: str | Path) -> None:
        self.log_dir = Path(log_dir)

    def write(
        self,
        operation: str,
        summary: Mapping[str, Any],
        entries: Iterable[AuditEntry],
        started_at: datetime | None = None,
    ) -> tuple[Path, Path]:
        """Write `<operation>_<timestamp>_summary.txt` and `..._actions.csv`.

        Returns:
            Paths of the summary file and the actions file.

        Raises:
            OSError: If the log directory or files cannot be written.
        """
        self.log_dir.mkdir(parents=True, exist_ok=True)
        ts = (started_at or datetime.now()).strftime("%Y%m%d_%H%M%S_%f")
        stem = _unique_stem(self.log_dir, f"{operation}_{ts}")
        summary_path = self.log_dir / f"{stem}_summary.txt"
        actions_path = self.log_dir / f"{stem}_actions.csv"

        with summary_path.open("w", encoding="utf-8") as f:
            for key, value in summary.items():
                f.write(f"{key}: {value}\n")

        count = 0
        with actions_path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(AUDIT_HEADERS)
            for entry in entries:
                writer.writerow(entry.to_row())
                count += 1

        logger.info("Audit log written: {} ({} actions)", actions_path, count)
        return summary_path, actions_path
