"""Observability module for ontogen.

Provides structured logging for generation runs.
"""

from ontogen.observability.logging import (
    close_file_logging,
    configure_logging,
    get_log_dir,
    get_logger,
)

__all__ = [
    "close_file_logging",
    "configure_logging",
    "get_log_dir",
    "get_logger",
]
