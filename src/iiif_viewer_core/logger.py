"""Logging for the viewer core.

Modules ask for loggers with `get_logger(__name__)`; nothing is written
anywhere until an application entry point calls `setup_logging()`, which
reads the level and the logs directory from the current configuration.
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

LOGGER_NAMESPACE = "iiif_viewer"
LOG_FILE_NAME = "viewer.log"

CONSOLE_FORMAT = logging.Formatter("%(levelname)s | %(name)s | %(message)s")
FILE_FORMAT = logging.Formatter(
    "%(asctime)s [%(levelname)s] [%(name)s.%(funcName)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

app_logger = logging.getLogger(LOGGER_NAMESPACE)


def _attach_file_handler(logs_dir: Path, level: int) -> Path | None:
    log_file = logs_dir / LOG_FILE_NAME
    try:
        handler = TimedRotatingFileHandler(log_file, when="midnight", backupCount=30, encoding="utf-8")
    except OSError as exc:
        app_logger.warning("File logging disabled, cannot open %s: %s", log_file, exc)
        return None
    handler.setFormatter(FILE_FORMAT)
    handler.setLevel(level)
    app_logger.addHandler(handler)
    return log_file


def setup_logging() -> Path | None:
    """Attach console and daily-rotating file handlers to the 'iiif_viewer' logger.

    Calling it again only re-applies the configured level. Returns the log
    file path when file logging is active.
    """
    from .config_manager import get_config_manager

    cm = get_config_manager()
    level_name = str(cm.get_setting("logging.level", "INFO") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    app_logger.setLevel(level)

    if app_logger.handlers:
        for handler in app_logger.handlers:
            handler.setLevel(level)
        return None

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(CONSOLE_FORMAT)
    console.setLevel(level)
    app_logger.addHandler(console)

    try:
        logs_dir = cm.get_logs_dir()
    except OSError as exc:
        app_logger.warning("File logging disabled, logs directory unavailable: %s", exc)
        return None

    log_file = _attach_file_handler(logs_dir, level)
    app_logger.debug("Logging initialized (Level: %s) -> %s", level_name, log_file)
    return log_file


def summarize_for_debug(data: str, max_chars: int = 200) -> str:
    """Summarize a large string for debug logs."""
    if not data or len(data) <= max_chars:
        return data
    return f"{data[:max_chars]}... [TRUNCATED, total {len(data)} chars]"


def get_logger(name: str) -> logging.Logger:
    """Get a logger within the 'iiif_viewer' namespace."""
    if not name.startswith(LOGGER_NAMESPACE):
        name = f"{LOGGER_NAMESPACE}.{name}"
    return logging.getLogger(name)
