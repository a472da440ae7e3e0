"""Log file setup for CLI sessions."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from collect.config.models import LoggingSettings

LOG_FILENAME = "collect.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: LoggingSettings, log_dir: Path) -> Path:
    """Attach a rotating file handler for ``collect`` loggers.

    Calling this again with the same directory reuses the existing handler.

    Args:
        settings: Level and rotation limits.
        log_dir: Directory receiving ``collect.log``.

    Returns:
        Path: Location of the log file.
    """
    log_path = log_dir / LOG_FILENAME
    logger = logging.getLogger("collect")
    level = logging.getLevelName(settings.level.upper())
    logger.setLevel(level if isinstance(level, int) else logging.WARNING)

    target = log_path.resolve()
    for existing in logger.handlers:
        if isinstance(existing, RotatingFileHandler) and Path(existing.baseFilename) == target:
            return log_path

    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_path,
        maxBytes=max(1, settings.max_size_mb) * 1024 * 1024,
        backupCount=max(0, settings.backup_count),
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return log_path


__all__ = ["LOG_FILENAME", "configure_logging"]
