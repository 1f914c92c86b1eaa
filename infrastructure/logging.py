"""Logging initialization utilities using loguru."""

from __future__ import annotations

from pathlib import Path
import sys

from loguru import logger

CONSOLE_FORMAT = "{time:HH:mm:ss} | {level: <7} | {message}"


def init_logging(log_dir: str | Path, level: str = "INFO", console: bool = True) -> None:
    """Initialize console output and rotating file logging under `log_dir`."""
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    if console:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=False)
    logger.add(
        str(log_path / "curator_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        compression="zip",
        backtrace=False,
        diagnose=False,
        level="DEBUG" if level.upper() == "DEBUG" else "INFO",
    )


def find_latest_log_file(log_dir: str | Path) -> Path | None:
    """Find the latest log file in the specified directory."""
    try:
        log_path = Path(log_dir)
        if not log_path.exists():
            return None

        log_files = list(log_path.glob("curator_*.log"))
        if not log_files:
            return None

        return max(log_files, key=lambda p: p.stat().st_mtime)
    except (OSError, ValueError):
        return None
