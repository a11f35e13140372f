# Area: Shared
"""
Shared utilities used by the store, match and CLI layers.

This package contains:
- Logging configuration
- Structured error logging
"""

from .logging_config import (
    setup_logging,
    log_structured_error,
    TerminalFormatter,
    JSONFormatter,
)

__all__ = [
    "setup_logging",
    "log_structured_error",
    "TerminalFormatter",
    "JSONFormatter",
]
