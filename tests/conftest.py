"""Pytest fixtures shared by the catalog curator tests."""

from __future__ import annotations

import pytest
from loguru import logger

from app.pipelines import PipelineConfig
from tests.helpers import write_catalog


@pytest.fixture
def thumbs_root(tmp_path):
    root = tmp_path / "thumbs"
    root.mkdir()
    return root


@pytest.fixture
def config(tmp_path):
    return PipelineConfig(audit_dir=tmp_path / "audit")


@pytest.fixture
def pacman_catalog(tmp_path):
    return write_catalog(
        tmp_path / "catalog.json",
        [
            {"identifier": "msdos_PacMan_1983_A", "date": "1983-05-01", "title": "Pac-Man"},
            {"identifier": "msdos_PacMan_1983_B", "date": "1983-06-01", "title": "Pac-Man (alt)"},
        ],
    )


@pytest.fixture
def captured_warnings():
    """Messages logged at WARNING level or above while the test runs."""
    messages = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)
