# Area: Shared
"""
ranked_turbo._shared.logging_config — Structured logging setup
==============================================================

Two outputs for the ``ranked_turbo`` logger tree: a colored console
stream for whoever runs the host, and a JSON-lines file where every
record keeps its match context (identity, slot, winning team).
Also home of the structured error logger used for settlement failures
and rejected signals.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..errors import InvalidSignalError, SettlementError

PACKAGE_LOGGER = "ranked_turbo"
CONTEXT_FIELDS = ("identity", "slot", "winning_team", "error_type")

logger = logging.getLogger(PACKAGE_LOGGER)


class TerminalFormatter(logging.Formatter):
    """
    Console formatter: colored level, component name without the
    package prefix (``store``, ``detector``, ...).
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[2m",       # Dim
        logging.INFO: "\033[32m",       # Green
        logging.WARNING: "\033[33m",    # Yellow
        logging.ERROR: "\033[31m",      # Red
        logging.CRITICAL: "\033[1;31m", # Bold red
    }
    RESET = "\033[0m"

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = "%H:%M:%S"):
        super().__init__(
            fmt=fmt or "%(asctime)s %(levelname)-8s [%(component)s] %(message)s",
            datefmt=datefmt,
        )

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy; the file handler sees the same record.
        colored = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelno, "")
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        colored.component = record.name.removeprefix(PACKAGE_LOGGER + ".") or "main"
        return super().format(colored)


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with match context fields when set."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({
            field: getattr(record, field)
            for field in CONTEXT_FIELDS
            if getattr(record, field, None) is not None
        })
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(TerminalFormatter())
    return handler


def _file_handler(path: str, level: int) -> Optional[logging.Handler]:
    try:
        log_path = Path(path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError as e:
        logger.warning(f"Could not open log file {path}: {e}")
        return None
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(
    log_file_path: Optional[str] = "ranked_turbo.log",
    level: int = logging.INFO,
) -> None:
    """
    Configure the ``ranked_turbo`` logger tree.

    Safe to call more than once; each call replaces the handlers of the
    previous one.

    Parameters
    ----------
    log_file_path : str or None
        JSON-lines log file. ``None`` or empty disables file logging.
    level : int
        Threshold for both handlers. Defaults to INFO.
    """
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    pkg_logger.handlers.clear()
    pkg_logger.setLevel(level)
    pkg_logger.propagate = False

    pkg_logger.addHandler(_console_handler(level))
    if log_file_path:
        file_handler = _file_handler(log_file_path, level)
        if file_handler is not None:
            pkg_logger.addHandler(file_handler)


def log_structured_error(error: "SettlementError | InvalidSignalError") -> None:
    """
    Report a pipeline error that the match survives.

    The formatted block goes to stderr for the operator; the log gets a
    single record tagged with the error type.
    """
    print(error.format_error_log(), file=sys.stderr)

    error_type = error.__class__.__name__
    logger.error(f"{error_type}: {error}", extra={"error_type": error_type})
