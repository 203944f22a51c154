"""
VOICEGIT Logging Configuration

Everything logs under the ``voicegit`` namespace:
- voicegit.<module> for the core (via get_logger)
- voicegit.services.<service> for audio, git, storage and stt

Log lines go to stderr, and optionally to a rotating file; stdout carries
only the command result so it can be piped. Each line starts with an event
code (AUDIO_COMMIT_RECORDING_STARTING, AUDIO_REVIEW_FILE_FAILED, ...)
followed by ``| Key: value`` details.

Usage:
    from voicegit.logging_config import setup_logging, get_logger

    setup_logging(log_level="INFO", service_levels={"stt": "DEBUG"})

    logger = get_logger(__name__)
    logger.info("AUDIO_COMMIT_RECORDING_STARTING: Starting audio recording")
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_LOG_FORMAT = "%(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5
DRY_RUN_PREFIX = "DRY RUN: "

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _level(name: str) -> int:
    return LOG_LEVELS.get(name.upper(), logging.INFO)


def _with_format(handler: logging.Handler, fmt: str) -> logging.Handler:
    # Loggers filter; handlers pass everything so service levels can go lower
    handler.setLevel(logging.NOTSET)
    handler.setFormatter(logging.Formatter(fmt, DEFAULT_DATE_FORMAT))
    return handler


def setup_logging(
    log_level: str = DEFAULT_LOG_LEVEL,
    log_file: Optional[str | Path] = None,
    verbose_console: bool = False,
    service_levels: Optional[Dict[str, str]] = None,
) -> None:
    """Configure the ``voicegit`` logger. Safe to call again (handlers are replaced).

    Args:
        log_level: Level name; unknown names mean INFO
        log_file: Also log to this file, rotated at 10MB with 5 backups
        verbose_console: Console lines carry timestamp, logger and level
        service_levels: Per-service overrides, e.g. {"stt": "DEBUG"}
    """
    root_logger = logging.getLogger("voicegit")
    root_logger.setLevel(_level(log_level))

    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers.clear()

    console_format = DEFAULT_LOG_FORMAT if verbose_console else CONSOLE_LOG_FORMAT
    root_logger.addHandler(_with_format(logging.StreamHandler(sys.stderr), console_format))

    if log_file:
        file_path = Path(log_file).expanduser()
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=DEFAULT_MAX_BYTES,
            backupCount=DEFAULT_BACKUP_COUNT,
        )
        root_logger.addHandler(_with_format(file_handler, DEFAULT_LOG_FORMAT))

    for service, level in (service_levels or {}).items():
        set_service_level(service, level)


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, placed under the voicegit namespace."""
    if not name.startswith("voicegit"):
        name = f"voicegit.{name}"
    return logging.getLogger(name)


def set_service_level(service_name: str, level: str) -> None:
    """Set the level of ``voicegit.services.<service_name>`` (audio, git, storage, stt)."""
    logging.getLogger(f"voicegit.services.{service_name}").setLevel(_level(level))


class DryRunLoggerAdapter(logging.LoggerAdapter):
    """Prefixes every message with the dry-run marker."""

    def process(self, msg, kwargs):
        return f"{DRY_RUN_PREFIX}{msg}", kwargs


def get_dry_run_logger(dry_run: bool, name: str = "voicegit.commands") -> logging.Logger | logging.LoggerAdapter:
    """Get the logger commands should report through.

    In dry-run mode every line is marked so the user can tell simulated
    actions from real ones.
    """
    logger = get_logger(name)
    if dry_run:
        return DryRunLoggerAdapter(logger, {})
    return logger
