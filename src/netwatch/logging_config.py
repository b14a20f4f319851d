"""
Logging configuration for the agent.

A single setup_logging function configures the root logger with:
- File output appended to the configured log file (never truncated, so
  overlapping invocations share one history)
- Console output for warnings and errors, or everything with ``verbose``
"""

import logging
import logging.handlers
import os
import sys
import threading
from pathlib import Path

# Thread-safe lock for logging configuration
_config_lock = threading.Lock()
_MODULE_LOGGER = logging.getLogger(__name__)
_LOG_FILE_MODE = 0o640
_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _close_handlers(logger: logging.Logger) -> None:
    """Close all handlers for a logger, logging any errors."""
    for handler in list(logger.handlers):
        try:
            handler.close()
        except OSError as e:  # Best-effort cleanup operation  # policy_guard: allow-silent-handler
            _MODULE_LOGGER.debug("Handler close failed for logger '%s': %s", logger.name, e)
    logger.handlers = []


def _build_console_handler(verbose: bool) -> logging.Handler:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(_FORMAT, _DATE_FORMAT))
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return console_handler


def _prepare_log_file(log_file: Path) -> None:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    if log_file.exists():
        return
    fd = os.open(log_file, os.O_CREAT | os.O_APPEND | os.O_WRONLY, _LOG_FILE_MODE)
    os.close(fd)


def _build_file_handler(log_file: Path, verbose: bool) -> logging.Handler:
    _prepare_log_file(log_file)
    file_handler = logging.handlers.WatchedFileHandler(log_file, mode="a", encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(_FORMAT, _DATE_FORMAT))
    file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    return file_handler


def _suppress_noisy_third_parties() -> None:
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def setup_logging(log_file: Path, verbose: bool = False) -> None:
    """Configure the root logger; calling it again replaces the previous handlers."""

    with _config_lock:
        root_logger = logging.getLogger()
        _close_handlers(root_logger)

        root_logger.addHandler(_build_console_handler(verbose))
        try:
            root_logger.addHandler(_build_file_handler(log_file, verbose))
        except OSError as exc:  # policy_guard: allow-silent-handler
            _MODULE_LOGGER.warning("Unable to open log file %s: %s; logging to console only", log_file, exc)

        root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
        _suppress_noisy_third_parties()
