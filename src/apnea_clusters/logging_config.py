"""
Logging setup for applications that embed the cluster analysis.

Library modules only create ``logging.getLogger(__name__)`` loggers. Host
applications call ``setup_logging`` once to attach a stderr console handler
and, unless disabled in the [logging] config table, a rotating log file
under ``~/.apnea_clusters/logs/``.
"""

import logging
import logging.config
import os
import sys

from pathlib import Path
from typing import Any

from apnea_clusters.config import LoggingSettings, get_logging_settings
from apnea_clusters.constants import (
    DEFAULT_LOG_DIR,
    DEFAULT_LOG_FILE,
    DEFAULT_LOG_MAX_BYTES,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_logging_configured = False


def get_log_dir() -> Path:
    """Log directory, created with owner-only permissions if needed."""
    os.makedirs(DEFAULT_LOG_DIR, mode=0o700, exist_ok=True)
    return DEFAULT_LOG_DIR


def get_log_path() -> Path:
    """Path to the active log file (apnea_clusters.log)."""
    return get_log_dir() / DEFAULT_LOG_FILE


def _console_handler(verbose: bool) -> dict[str, Any]:
    return {
        "class": "logging.StreamHandler",
        "level": "DEBUG" if verbose else "INFO",
        "formatter": "console",
        "stream": "ext://sys.stderr",
    }


def _file_handler(settings: LoggingSettings) -> dict[str, Any]:
    max_bytes = (
        int(settings.max_size_mb * 1024 * 1024)
        if settings.max_size_mb
        else DEFAULT_LOG_MAX_BYTES
    )
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": settings.level.upper(),
        "formatter": "file",
        "filename": str(get_log_path()),
        "maxBytes": max_bytes,
        "backupCount": settings.backup_count,
        "encoding": "utf-8",
    }


def build_logging_config(
    *,
    verbose: bool = False,
    console_format: str | None = None,
    settings: LoggingSettings | None = None,
) -> dict[str, Any]:
    """
    Build the dictConfig configuration dictionary.

    Args:
        verbose: If True, set console to DEBUG level
        console_format: Override console format string
        settings: Log file settings (read from config when None)

    Returns:
        Dictionary suitable for logging.config.dictConfig()
    """
    settings = settings or get_logging_settings()

    handlers = {"console": _console_handler(verbose)}
    if settings.enabled:
        handlers["file"] = _file_handler(settings)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": console_format or LOG_FORMAT},
            "file": {"format": LOG_FORMAT},
        },
        "handlers": handlers,
        "root": {"level": "DEBUG", "handlers": list(handlers)},
    }


def setup_logging(
    *,
    verbose: bool = False,
    console_format: str | None = None,
    log_to_file: bool | None = None,
) -> None:
    """
    Configure logging once per process; repeat calls are no-ops.

    Args:
        verbose: If True, set console to DEBUG level
        console_format: Override console format string
        log_to_file: Force the rotating file handler on or off. None defers
            to [logging].enabled in config.
    """
    global _logging_configured

    if _logging_configured:
        return

    try:
        settings = get_logging_settings()
        if log_to_file is not None:
            settings = settings.model_copy(update={"enabled": log_to_file})
        logging.config.dictConfig(
            build_logging_config(
                verbose=verbose, console_format=console_format, settings=settings
            )
        )
    except Exception as e:
        sys.stderr.write(f"WARNING: Failed to configure logging: {e}\n")
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format=console_format or "%(levelname)s: %(message)s",
        )

    _logging_configured = True
