"""
Logging configuration for the layoffs pipeline.

Uses loguru. Messages go to stderr; a cleaning run can also be kept as a
rotating log file next to the processed exports.
"""

import os
import sys
from pathlib import Path

from loguru import logger

from layoffs.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def resolve_log_file(log_file: Path | str | None = None) -> Path | None:
    """Log file to use; relative paths land in the processed data directory."""
    log_file = log_file or settings.pipeline.log_file
    if not log_file:
        return None
    log_file = Path(log_file)
    if not log_file.is_absolute():
        log_file = settings.pipeline.data_processed_dir / log_file
    return log_file


def setup_logging(
    level: str | None = None,
    log_file: Path | str | None = None,
    rotation: str = "10 MB",
    retention: str = "1 week",
) -> Path | None:
    """
    Configure logging for the pipeline.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR); defaults to LAYOFFS_LOG_LEVEL
        log_file: Log file path; defaults to LAYOFFS_LOG_FILE
        rotation: Log rotation setting (e.g., "10 MB", "1 day")
        retention: Log retention setting (e.g., "1 week", "10 files")

    Returns:
        The log file in use, if any
    """
    level = (level or settings.pipeline.log_level).upper()
    log_file = resolve_log_file(log_file)

    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=level,
            format=FILE_FORMAT,
            rotation=rotation,
            retention=retention,
            compression="gz",
        )

    logger.debug(f"Logging configured: level={level}, file={log_file}")
    return log_file


if os.environ.get("DISABLE_LOGGING") != "1":
    setup_logging()
