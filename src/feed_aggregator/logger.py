"""
Logging configuration for the feed aggregator.

Uses loguru with a console sink and an optional rotating file sink.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger as _logger

DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)

_logger.configure(extra={"name": "feed_aggregator"})


def setup_logger(
    level: str = "INFO",
    log_file: Optional[str] = None,
    rotation: str = "10 MB",
    retention: str = "14 days",
    format: str = DEFAULT_FORMAT,
) -> None:
    """Configure the logger with console and file handlers.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, etc.)
        log_file: Path to log file, None disables file logging
        rotation: Log rotation setting (e.g., "10 MB", "1 day")
        retention: Log retention setting (e.g., "14 days")
        format: Log format string
    """
    _logger.remove()

    _logger.add(
        sys.stderr,
        format=format,
        level=level,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        _logger.add(
            log_file,
            format=format,
            level=level,
            rotation=rotation,
            retention=retention,
            encoding="utf-8",
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )


def get_logger(name: Optional[str] = None):
    """Get a logger bound to a module name.

    Args:
        name: Logger name (typically __name__ from calling module)
    """
    if name:
        return _logger.bind(name=name)
    return _logger


logger = _logger

__all__ = ["setup_logger", "get_logger", "logger"]
