# Area: Shared
"""
Shared utilities used by both the chain and sync layers.

This package contains:
- Logging configuration
- Logging formatters and the view mode switch
"""

from .logging_config import setup_logging, log_error
from .logging_formatters import (
    enable_view_mode,
    disable_view_mode,
    is_view_mode_enabled,
)

__all__ = [
    "setup_logging",
    "log_error",
    "enable_view_mode",
    "disable_view_mode",
    "is_view_mode_enabled",
]
