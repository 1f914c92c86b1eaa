"""JSON persistence for the metadata catalog.

The catalog is a JSON array of objects. Loading validates only that shape;
fields other than `identifier` and `date` are carried through unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable
import json
from pathlib import Path
from typing import Any

from loguru import logger

from core.errors import CatalogFormatError, CatalogNotFoundError, CuratorError
from core.models import CatalogEntry


def default_output_path(catalog_path: Path, suffix: str) -> Path:
    """Return `<stem>_<suffix>.json` next to `catalog_path`."""
    return catalog_path.with_name(f"{catalog_path.stem}_{suffix}.json")


def ensure_distinct_output(catalog_path: Path, output_path: Path) -> None:
    """Refuse to write the output catalog over its own input."""
    if catalog_path.resolve() == output_path.resolve():
        raise CuratorError(f"Output catalog must differ from input: {output_path}")


class JsonCatalogRepository:
    """Load and save catalog entries in JSON format."""

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def load(self, catalog_path: str | Path) -> list[CatalogEntry]:
        """Return all entries of the catalog at `catalog_path`.

        Raises:
            CatalogNotFoundError: If the file does not exist.
            CatalogFormatError: If the file is not a JSON array of objects.
        """
        path = Path(catalog_path)
        if not path.is_file():
            raise CatalogNotFoundError(f"Catalog not found: {path}")
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as ex:
            raise CatalogFormatError(f"Catalog is not valid JSON: {path} ({ex})") from ex

        if not isinstance(data, list):
            raise CatalogFormatError(
                f"Catalog must be a JSON array, got {type(data).__name__}: {path}"
            )
        bad = [i for i, item in enumerate(data) if not isinstance(item, dict)]
        if bad:
            raise CatalogFormatError(
                f"Catalog items must be objects; {len(bad)} invalid "
                f"(first at index {bad[0]}): {path}"
            )

        entries = [CatalogEntry.from_dict(item) for item in data]
        logger.info("Loaded {} catalog entries from {}", len(entries), path)
        return entries

    def save(self, catalog_path: str | Path, records: Iterable[dict[str, Any]]) -> int:
        """Write `records` as a JSON array to `catalog_path` and return the count.

        The array is written to a hidden sibling file first and then renamed over
        `catalog_path`, so a failed write never leaves a truncated catalog.
        """
        path = Path(catalog_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        items = list(records)
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(items, f, indent=self.indent, ensure_ascii=False)
                f.write("\n")
            tmp_path.replace(path)
        except (OSError, TypeError, ValueError):
            tmp_path.unlink(missing_ok=True)
            raise
        logger.info("Catalog written: {} ({} entries)", path, len(items))
        return len(items)
