# Area: Shared
"""
rps_dapp._shared.logging_formatters — Logging formatters and filters
====================================================================

Contains formatter/filter classes and the view mode flag/functions.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

# Flag to control view-only terminal output
_view_mode_enabled = False


class ViewModeFilter(logging.Filter):
    """Filter that suppresses terminal logs below WARNING in view mode.

    In view mode the console renderer prints round tables and banners
    directly; warnings and errors still reach the terminal.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not _view_mode_enabled:
            return True
        return record.levelno >= logging.WARNING


class TerminalFormatter(logging.Formatter):
    """Colored formatter for terminal output."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        color = self.COLORS.get(levelname, self.RESET)
        record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


class JSONFormatter(logging.Formatter):
    """JSON formatter for file output."""

    # Context attached by callers via ``extra=``
    EXTRA_KEYS = ("epoch", "topic", "round_id", "block_number", "log_index", "error_type")

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in self.EXTRA_KEYS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


def enable_view_mode() -> None:
    """Enable view mode.

    In view mode:
    - INFO and DEBUG logs are suppressed from terminal
    - The console renderer owns stdout
    - File logging remains unchanged for debugging
    """
    global _view_mode_enabled
    _view_mode_enabled = True


def disable_view_mode() -> None:
    """Disable view mode (restore standard logging)."""
    global _view_mode_enabled
    _view_mode_enabled = False


def is_view_mode_enabled() -> bool:
    """Check if view mode is enabled."""
    return _view_mode_enabled
