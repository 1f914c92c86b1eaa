"""Builders for catalog files and thumbnail trees used across tests."""

from __future__ import annotations

import json
from pathlib import Path


def write_catalog(path: Path, items: list) -> Path:
    path.write_text(json.dumps(items), encoding="utf-8")
    return path


def read_catalog(path: Path) -> list:
    return json.loads(path.read_text(encoding="utf-8"))


def make_folders(root: Path, *names: str) -> list[Path]:
    """Create title folders (``"1983/Foo"`` creates a folder inside a year folder)."""
    created = []
    for name in names:
        p = root / name
        p.mkdir(parents=True)
        (p / "thumb.png").write_bytes(b"png")
        created.append(p)
    return created
