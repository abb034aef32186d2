"""Utility modules for formguard."""

from formguard.utils.logging import configure_logging, get_logger, log_error, log_warning
from formguard.utils.serialization import dumps, loads

__all__ = [
    "get_logger",
    "log_error",
    "log_warning",
    "configure_logging",
    "dumps",
    "loads",
]
