# Area: Shared
"""
rps_dapp._shared.logging_config — Structured logging setup
==========================================================

Configures dual logging: terminal (colored) + file (JSON).
Provides the structured error logging used for rejected transactions
and dropped subscriptions.
"""

from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Union

from .logging_formatters import JSONFormatter, TerminalFormatter, ViewModeFilter

if TYPE_CHECKING:
    from ..errors import SubscriptionError, TransactionRejected

# Package logger
logger = logging.getLogger("rps_dapp")


def setup_logging(
    log_file_path: str = "rps_dapp.log",
    level: Union[int, str] = logging.INFO,
) -> None:
    """
    Configure logging for the package.

    Parameters
    ----------
    log_file_path : str
        Path to the log file. Defaults to 'rps_dapp.log' in current dir.
        An empty string disables file logging.
    level : int or str
        Logging level. Defaults to INFO.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    pkg_logger = logging.getLogger("rps_dapp")
    pkg_logger.setLevel(level)

    # Remove existing handlers
    pkg_logger.handlers.clear()

    # Terminal handler with colors
    terminal_handler = logging.StreamHandler(sys.stdout)
    terminal_handler.setLevel(level)
    terminal_handler.setFormatter(TerminalFormatter(
        fmt="%(asctime)s │ %(levelname)s │ %(name)s │ %(message)s",
        datefmt="%H:%M:%S",
    ))
    terminal_handler.addFilter(ViewModeFilter())
    pkg_logger.addHandler(terminal_handler)

    # File handler with JSON
    if log_file_path:
        try:
            log_path = Path(log_file_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(JSONFormatter())
            pkg_logger.addHandler(file_handler)
        except OSError as e:
            pkg_logger.warning(f"Could not create log file: {e}")

    # Prevent propagation to root logger
    pkg_logger.propagate = False


def log_error(error: Union["TransactionRejected", "SubscriptionError"]) -> None:
    """
    Log a ledger error in the structured format.

    Parameters
    ----------
    error : TransactionRejected or SubscriptionError
        The error to log. CommitmentMismatch is reported with its own
        error type so it is never confused with a generic rejection.
    """
    error_block = error.format_error_log()

    # Print to terminal (bypassing logger for exact formatting)
    print(error_block, file=sys.stderr)

    logger.error(
        f"Ledger error: {error.__class__.__name__}: {error}",
        extra={
            "round_id": getattr(error, "round_id", None),
            "topic": getattr(error, "topic", None),
            "error_type": error.error_type,
        },
    )
