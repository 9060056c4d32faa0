"""Application logging to the console and a rotating file, in Shanghai time."""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timedelta, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

from owlkit.context import get_log_id

LOGGER_NAME = "owlkit"
MAX_BYTES = 500 * 1024 * 1024
BACKUP_COUNT = 5

_SHANGHAI = timezone(timedelta(hours=8), "Asia/Shanghai")
_RESET = "\033[0m"
_COLORS = {
    logging.DEBUG: "\033[37m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}


class LogFormatter(logging.Formatter):
    """Formats records as 'time file:line [log id] [LEVEL] message'."""

    def __init__(self, enable_colors: bool = False) -> None:
        super().__init__()
        self.enable_colors = enable_colors

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, _SHANGHAI).strftime(
            "%Y-%m-%d %H:%M:%S.%f"
        )
        level = record.levelname.upper()
        if level == "WARNING":
            level = "WARN"

        log_id = getattr(record, "log_id", None) or get_log_id()
        prefix = f"{log_id} " if log_id and log_id != "unknown" else ""

        if self.enable_colors:
            color = _COLORS.get(record.levelno, _RESET)
            level_text = f"[{color}{level}{_RESET}]"
        else:
            level_text = f"[{level}]"

        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return f"{timestamp} {record.filename}:{record.lineno} {prefix}{level_text} {message}"


def _project_name() -> str:
    name = Path(sys.argv[0]).name if sys.argv and sys.argv[0] else "app"
    if os.name == "nt":
        name = name.removesuffix(".exe")
    return name or "app"


def get_logger() -> logging.Logger:
    """Return the package logger."""
    return logging.getLogger(LOGGER_NAME)


def setup(log_dir: str | os.PathLike | None = None) -> logging.Logger:
    """Send package logs to stdout in colour and to <log_dir>/app.log.

    Without log_dir, the directory is ~/logs/<program name>.
    """
    directory = Path(log_dir) if log_dir is not None else Path.home() / "logs" / _project_name()
    directory.mkdir(parents=True, exist_ok=True)

    logger = get_logger()
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(LogFormatter(enable_colors=True))
    file_handler = RotatingFileHandler(
        directory / "app.log",
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(LogFormatter(enable_colors=False))

    logger.addHandler(console)
    logger.addHandler(file_handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


def debug(msg: str, *args) -> None:
    """Log a debug message."""
    get_logger().debug(msg, *args, stacklevel=2)


def info(msg: str, *args) -> None:
    """Log an info message."""
    get_logger().info(msg, *args, stacklevel=2)


def warn(msg: str, *args) -> None:
    """Log a warning."""
    get_logger().warning(msg, *args, stacklevel=2)


def error(msg: str, *args) -> None:
    """Log an error."""
    get_logger().error(msg, *args, stacklevel=2)