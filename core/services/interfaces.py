"""Core service interfaces and shared data structures.

This module defines the stage result passed from each mutating stage back to
the workflow controller, and the confirmation provider protocol used to gate
execute-mode runs.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from core.models import ActionStatus, AuditEntry

ConfirmationProvider = Callable[[str], str]
"""Receives a prompt and returns the line the user typed."""


@dataclass
class StageResult:
    """Outcome of one workflow stage.

    Attributes:
        entries: Audit records in the order the actions were planned.
        planned: Actions that were planned (preview) or attempted (execute).
        applied: Actions that completed.
        errors: Actions that failed.
        skipped: Actions not attempted (already done, conflicting target).
        skipped_unknown: Items left in place because their year is unknown.
    """

    entries: list[AuditEntry] = field(default_factory=list)
    planned: int = 0
    applied: int = 0
    errors: int = 0
    skipped: int = 0
    skipped_unknown: int = 0

    def record(self, entry: AuditEntry) -> None:
        """Append `entry` and update the counters from its status."""
        self.entries.append(entry)
        if entry.status is ActionStatus.SKIPPED:
            self.skipped += 1
            return
        self.planned += 1
        if entry.status is ActionStatus.DONE:
            self.applied += 1
        elif entry.status is ActionStatus.ERROR:
            self.errors += 1
