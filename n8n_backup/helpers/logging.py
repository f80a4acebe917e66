################################################################################
# N8N-BACKUP
#
# @file:        logging.py
# @module:      n8n_backup.helpers.logging
# @description: Console and per-run file logging with a SUCCESS level.
# @author:      Markus F. (TZERO78) & KI-Assistenten
# @version:     1.0.0
#
# ------------------------------------------------------------------------------
# Copyright (c) 2025 Markus F. (TZERO78)
# MIT-Lizenz: siehe LICENSE oder https://opensource.org/licenses/MIT
# ==============================================================================
# Hinweise:
# - get_logger() returns children of the "n8n_backup" root logger
# - log_manager owns the console handler and the run log file handler
# - Run log lines look like "[2025-01-01 12:00:00] [INFO] message"
################################################################################

"""
Logging helpers for n8n-backup.

All modules log through ``get_logger(__name__)``. The process-wide
``log_manager`` configures console output once and attaches one
append-only file handler per backup run.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from .constants import (
    LOG_DATE_FORMAT,
    LOG_SEPARATOR,
    RUN_LOG_FORMAT,
    SUCCESS_LEVEL,
)

ROOT_LOGGER_NAME = "n8n_backup"

logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")


class Colors:
    """ANSI color codes for console output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"


LEVEL_COLORS = {
    "DEBUG": Colors.DIM,
    "INFO": Colors.CYAN,
    "SUCCESS": Colors.GREEN,
    "WARNING": Colors.YELLOW,
    "ERROR": Colors.RED,
    "CRITICAL": Colors.RED + Colors.BOLD,
}

# Keys from extra={...} that are rendered as context
CONTEXT_KEYS = ("container", "category", "archive")


class StructuredFormatter(logging.Formatter):
    """Human-readable console formatter with optional colors and context."""

    def __init__(self, use_color: bool = True):
        super().__init__(datefmt=LOG_DATE_FORMAT)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self.formatTime(record, self.datefmt)
        level = record.levelname
        message = record.getMessage()

        context = [
            f"{key}={getattr(record, key)}"
            for key in CONTEXT_KEYS
            if getattr(record, key, None) is not None
        ]
        if context:
            message = f"{message} ({', '.join(context)})"

        if self.use_color:
            color = LEVEL_COLORS.get(level, "")
            line = f"{Colors.DIM}{timestamp}{Colors.RESET} {color}{level:<8}{Colors.RESET} {message}"
        else:
            line = f"{timestamp} {level:<8} {message}"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class RunLogFormatter(logging.Formatter):
    """Plain formatter for the per-run log file."""

    def __init__(self):
        super().__init__(fmt=RUN_LOG_FORMAT, datefmt=LOG_DATE_FORMAT)


class LogManager:
    """
    Owns the handlers of the n8n_backup logger tree.

    The console handler is installed by configure(); the run log file
    handler is attached with start_run_log() and removed with stop_run_log().
    """

    def __init__(self):
        self._root = logging.getLogger(ROOT_LOGGER_NAME)
        self._root.setLevel(logging.DEBUG)
        self._root.propagate = False
        self._console_handler: Optional[logging.Handler] = None
        self._file_handler: Optional[logging.FileHandler] = None
        self.run_log_path: Optional[Path] = None

    def configure(self, level: str = "INFO", use_color: Optional[bool] = None) -> None:
        """Install (or replace) the console handler."""
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")

        if use_color is None:
            use_color = sys.stderr.isatty()

        if self._console_handler is not None:
            self._root.removeHandler(self._console_handler)

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(StructuredFormatter(use_color=use_color))
        handler.setLevel(numeric)
        self._root.addHandler(handler)
        self._console_handler = handler

    def start_run_log(self, path: Path, level: str = "DEBUG") -> Path:
        """Attach an append-only file handler for one backup run."""
        self.stop_run_log()
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        handler.setFormatter(RunLogFormatter())
        handler.setLevel(logging.getLevelName(level.upper()))
        self._root.addHandler(handler)

        self._file_handler = handler
        self.run_log_path = path
        return path

    def stop_run_log(self) -> None:
        """Detach and close the run log handler, if any."""
        if self._file_handler is None:
            return
        self._root.removeHandler(self._file_handler)
        self._file_handler.close()
        self._file_handler = None

    def reset(self) -> None:
        """Remove all handlers installed by this manager."""
        self.stop_run_log()
        if self._console_handler is not None:
            self._root.removeHandler(self._console_handler)
            self._console_handler = None

    def success(self, logger: logging.Logger, message: str, *args, **kwargs) -> None:
        """Log at the custom SUCCESS level."""
        logger.log(SUCCESS_LEVEL, message, *args, **kwargs)

    def separator(self, logger: logging.Logger, title: str) -> None:
        """Log a visual block separator around title."""
        for line in ("", LOG_SEPARATOR, title, LOG_SEPARATOR, ""):
            logger.info(line)


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the n8n_backup root logger."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logging(level: str = "INFO") -> LogManager:
    """Configure console logging and return the shared manager."""
    log_manager.configure(level=level)
    return log_manager


log_manager = LogManager()
