"""
Logging configuration for the record deduper.

Classification decisions are logged at DEBUG, short records at WARNING and
run summaries at INFO. A run log can be kept alongside the console output.
"""

import sys
from pathlib import Path

from loguru import logger

from record_deduper.config import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)
RUN_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging(
    level: str | None = None,
    log_file: Path | None = None,
    rotation: str | None = None,
    retention: str | None = None,
) -> None:
    """
    Send deduper logs to stderr and, optionally, to a run log file.

    Args:
        level: Log level; defaults to ``DEDUPER_LOG_LEVEL``
        log_file: Run log path; defaults to ``DEDUPER_LOG_FILE``
        rotation: When the run log is rotated, e.g. "10 MB"
        retention: How many rotated run logs are kept, e.g. "1 week"
    """
    level = (level or settings.log_level).upper()
    log_file = log_file or settings.log_file

    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_file,
            level=level,
            format=RUN_LOG_FORMAT,
            rotation=rotation or settings.log_rotation,
            retention=retention or settings.log_retention,
            compression="gz",
        )

    logger.debug(f"Logging configured: level={level}, run log={log_file or 'none'}")
