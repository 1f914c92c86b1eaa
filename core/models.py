"""Core domain models for catalog entries, thumbnail folders and audit records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from core.errors import MissingIdentifierError

UNKNOWN_YEAR = "Unknown"

THUMBNAIL_PATH_FIELD = "thumbnailPath"
PATH_WARNING_FIELD = "pathWarning"


@dataclass(frozen=True)
class CatalogEntry:
    """A single catalog record.

    Only `identifier` and `date` are interpreted; every other field stays in
    `raw` and is written back untouched.
    """

    identifier: str | None
    date: str | None
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CatalogEntry:
        """Build an entry from a decoded JSON object."""
        ident = data.get("identifier")
        if not isinstance(ident, str) or not ident.strip():
            ident = None
        date = data.get("date")
        if date is not None and not isinstance(date, str):
            date = None if isinstance(date, (dict, list)) else str(date)
        return cls(identifier=ident, date=date, raw=dict(data))

    def require_identifier(self) -> str:
        """Return the identifier or raise `MissingIdentifierError`."""
        if self.identifier is None:
            raise MissingIdentifierError("no identifier in entry")
        return self.identifier

    def to_dict(self) -> dict[str, Any]:
        """Return a shallow copy of the source object."""
        return dict(self.raw)


class PathStatus(str, Enum):
    """Outcome of resolving a catalog entry's thumbnail path."""

    UPDATED = "Updated"
    NOT_MOVED = "NotMoved"
    FOLDER_MISSING = "FolderMissing"
    UNKNOWN_YEAR = "UnknownYear"
    NO_IDENTIFIER = "NoIdentifier"


@dataclass(frozen=True)
class PathAnnotation:
    """Derived path fields for one entry."""

    thumbnail_path: str | None
    path_warning: str | None
    status: PathStatus


@dataclass(frozen=True)
class AnnotatedEntry:
    entry: CatalogEntry
    annotation: PathAnnotation

    def to_dict(self) -> dict[str, Any]:
        """Return the source object with `thumbnailPath`/`pathWarning` applied."""
        data = self.entry.to_dict()
        # A warning carried over from an older run no longer applies
        data.pop(PATH_WARNING_FIELD, None)
        if self.annotation.thumbnail_path is not None:
            data[THUMBNAIL_PATH_FIELD] = self.annotation.thumbnail_path
        if self.annotation.path_warning is not None:
            data[PATH_WARNING_FIELD] = self.annotation.path_warning
        return data


@dataclass(frozen=True)
class FolderRecord:
    """A per-title thumbnail directory on disk.

    `year_folder` is the 4-digit parent directory name when the folder lives
    inside a year folder, otherwise None.
    """

    name: str
    path: Path
    year_folder: str | None = None


class ActionKind(str, Enum):
    PLANNED = "planned"
    APPLIED = "applied"


class ActionStatus(str, Enum):
    PLANNED = "planned"
    DONE = "done"
    SKIPPED = "skipped"
    ERROR = "error"


AUDIT_HEADERS = [
    "Kind",
    "Operation",
    "BaseIdentifier",
    "Source",
    "Target",
    "Status",
    "Detail",
    "Timestamp",
]


@dataclass(frozen=True)
class MoveLogEntry:
    """Audit record for a directory creation, folder move or catalog write.

    Attributes:
        kind: Whether the action was only planned (preview) or attempted.
        operation: One of `create_dir`, `move`, `write_catalog`.
        source: Source path, empty for directory creation.
        target: Destination path.
        status: Resulting status.
        detail: Free text such as an error message or skip reason.
    """

    kind: ActionKind
    operation: str
    source: str
    target: str
    status: ActionStatus
    detail: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def to_row(self) -> list[str]:
        return [
            self.kind.value,
            self.operation,
            "",
            self.source,
            self.target,
            self.status.value,
            self.detail,
            self.timestamp.isoformat(),
        ]


@dataclass(frozen=True)
class RemovalLogEntry:
    """Audit record for a discarded duplicate.

    Attributes:
        kind: Whether the removal was only planned (preview) or attempted.
        base_identifier: Group key shared by the kept and removed items.
        kept: Identifier of the member that survives.
        removed: Identifier of the discarded member.
        source: Location of the discarded member (folder path or catalog name).
        status: Resulting status.
        detail: Free text such as an error message.
    """

    kind: ActionKind
    base_identifier: str
    kept: str
    removed: str
    source: str
    status: ActionStatus
    detail: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def to_row(self) -> list[str]:
        detail = f"kept {self.kept}" + (f"; {self.detail}" if self.detail else "")
        return [
            self.kind.value,
            "remove",
            self.base_identifier,
            self.source,
            self.removed,
            self.status.value,
            detail,
            self.timestamp.isoformat(),
        ]


AuditEntry = MoveLogEntry | RemovalLogEntry
